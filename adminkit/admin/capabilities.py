"""
Capabilities opcionais dos resources.

Cada capability é um Protocol: um resource "implementa" a capability
simplesmente definindo os métodos. A detecção roda UMA vez, no registro
(ResourceManager.register), e fica guardada numa tabela slug -> set de
capabilities. O service consulta essa tabela em vez de inspecionar o
objeto a cada chamada.

Métodos de autorização, hooks, badge e execução de ação são async.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, runtime_checkable, TYPE_CHECKING

if TYPE_CHECKING:
    from adminkit.admin.resource import FrontendCapabilities, RequestContext


# =============================================================================
# Listagem
# =============================================================================

@runtime_checkable
class Sortable(Protocol):
    def get_sortable_fields(self) -> list[str]: ...


@runtime_checkable
class Filterable(Protocol):
    def get_filterable_fields(self) -> list[str]: ...


@runtime_checkable
class Searchable(Protocol):
    def get_searchable_fields(self) -> list[str]: ...


@runtime_checkable
class DefaultOrder(Protocol):
    def get_default_order(self) -> tuple[str, str]:
        """Retorna (campo, direção), ex: ("created_at", "DESC")."""
        ...


@runtime_checkable
class Exportable(Protocol):
    def is_exportable(self) -> bool: ...


# =============================================================================
# Autorização e hooks
# =============================================================================

@runtime_checkable
class Authorizable(Protocol):
    """
    Retornar False nega com PermissionDenied genérico; levantar uma
    exceção propaga a exceção como está.
    """

    async def can_list(self, ctx: RequestContext) -> bool: ...

    async def can_view(self, ctx: RequestContext, record_id: Any) -> bool: ...

    async def can_create(self, ctx: RequestContext, data: dict[str, Any]) -> bool: ...

    async def can_update(self, ctx: RequestContext, record_id: Any, data: dict[str, Any]) -> bool: ...

    async def can_delete(self, ctx: RequestContext, record_id: Any) -> bool: ...


@runtime_checkable
class CreateHook(Protocol):
    async def before_create(self, ctx: RequestContext, data: dict[str, Any]) -> None: ...

    async def after_create(self, ctx: RequestContext, data: dict[str, Any]) -> None: ...


@runtime_checkable
class UpdateHook(Protocol):
    async def before_update(self, ctx: RequestContext, record_id: Any, data: dict[str, Any]) -> None: ...

    async def after_update(self, ctx: RequestContext, record_id: Any, data: dict[str, Any]) -> None: ...


@runtime_checkable
class DeleteHook(Protocol):
    async def before_delete(self, ctx: RequestContext, record_id: Any) -> None: ...

    async def after_delete(self, ctx: RequestContext, record_id: Any) -> None: ...


@runtime_checkable
class ActionExecutor(Protocol):
    async def run_action(
        self,
        ctx: RequestContext,
        name: str,
        ids: list[Any],
        params: dict[str, Any],
    ) -> Any: ...


@runtime_checkable
class FieldPermissionProvider(Protocol):
    def get_readable_fields(self, ctx: RequestContext) -> list[str]: ...

    def get_writable_fields(self, ctx: RequestContext) -> list[str]: ...


# =============================================================================
# Navegação / frontend
# =============================================================================

@runtime_checkable
class NavigationIcon(Protocol):
    def get_navigation_icon(self) -> str: ...


@runtime_checkable
class NavigationGroup(Protocol):
    def get_navigation_group(self) -> str: ...


@runtime_checkable
class NavigationSort(Protocol):
    def get_navigation_sort(self) -> int: ...


@runtime_checkable
class NavigationBadge(Protocol):
    async def get_navigation_badge(self, ctx: RequestContext) -> str | int | None: ...


@runtime_checkable
class HiddenInNavigation(Protocol):
    def is_hidden_in_navigation(self) -> bool: ...


@runtime_checkable
class CapabilityProvider(Protocol):
    def get_capabilities(self) -> FrontendCapabilities: ...


# =============================================================================
# Tabela de capabilities
# =============================================================================

class Capability(str, Enum):
    SORTABLE = "sortable"
    FILTERABLE = "filterable"
    SEARCHABLE = "searchable"
    DEFAULT_ORDER = "default_order"
    EXPORTABLE = "exportable"
    AUTHORIZABLE = "authorizable"
    CREATE_HOOK = "create_hook"
    UPDATE_HOOK = "update_hook"
    DELETE_HOOK = "delete_hook"
    ACTION_EXECUTOR = "action_executor"
    FIELD_PERMISSIONS = "field_permissions"
    NAVIGATION_ICON = "navigation_icon"
    NAVIGATION_GROUP = "navigation_group"
    NAVIGATION_SORT = "navigation_sort"
    NAVIGATION_BADGE = "navigation_badge"
    HIDDEN_IN_NAVIGATION = "hidden_in_navigation"
    CAPABILITY_PROVIDER = "capability_provider"


CAPABILITY_PROTOCOLS: dict[Capability, type] = {
    Capability.SORTABLE: Sortable,
    Capability.FILTERABLE: Filterable,
    Capability.SEARCHABLE: Searchable,
    Capability.DEFAULT_ORDER: DefaultOrder,
    Capability.EXPORTABLE: Exportable,
    Capability.AUTHORIZABLE: Authorizable,
    Capability.CREATE_HOOK: CreateHook,
    Capability.UPDATE_HOOK: UpdateHook,
    Capability.DELETE_HOOK: DeleteHook,
    Capability.ACTION_EXECUTOR: ActionExecutor,
    Capability.FIELD_PERMISSIONS: FieldPermissionProvider,
    Capability.NAVIGATION_ICON: NavigationIcon,
    Capability.NAVIGATION_GROUP: NavigationGroup,
    Capability.NAVIGATION_SORT: NavigationSort,
    Capability.NAVIGATION_BADGE: NavigationBadge,
    Capability.HIDDEN_IN_NAVIGATION: HiddenInNavigation,
    Capability.CAPABILITY_PROVIDER: CapabilityProvider,
}


def detect_capabilities(resource: Any) -> frozenset[Capability]:
    """Retorna o conjunto de capabilities que o resource implementa."""
    return frozenset(
        cap for cap, protocol in CAPABILITY_PROTOCOLS.items()
        if isinstance(resource, protocol)
    )
