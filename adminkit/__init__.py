"""
AdminKit - backend de admin genérico sobre FastAPI + SQLAlchemy async.

Registre um Resource (entidade apoiada em tabela) uma vez e receba:
- CRUD REST completo com soft delete, lixeira e exclusão em lote
- Validação por campo e whitelists de filtro/busca/ordenação
- Autorização e hooks opcionais por resource
- Cache (memória ou Redis) com invalidação por resource
- Exportação CSV/Excel e ações customizadas
"""

from adminkit.admin import (
    Action,
    Column,
    Filter,
    Page,
    RequestContext,
    Resource,
    ResourceManager,
)
from adminkit.app import AdminApp, create_app
from adminkit.config import Settings, configure, get_settings
from adminkit.database import Database
from adminkit.exceptions import (
    ActionNotSupported,
    AdminKitError,
    PermissionDenied,
    RecordNotFoundError,
    ResourceNotFoundError,
    ValidationError,
)
from adminkit.repository import ResourceRepository, TableSchema
from adminkit.service import ResourceService

__version__ = "0.1.0"
__all__ = [
    "Action",
    "Column",
    "Filter",
    "Page",
    "RequestContext",
    "Resource",
    "ResourceManager",
    "AdminApp",
    "create_app",
    "Settings",
    "configure",
    "get_settings",
    "Database",
    "ResourceRepository",
    "TableSchema",
    "ResourceService",
    "AdminKitError",
    "ActionNotSupported",
    "PermissionDenied",
    "RecordNotFoundError",
    "ResourceNotFoundError",
    "ValidationError",
]
