"""
Configurações de teste compartilhadas.

Resources de teste:
- items:        {id, name (obrigatório), value}; filtra e ordena só por name
- sorted_items: mesmos campos, ordem padrão name ASC
- categories:   {id, name}
- products:     relacionamento com categories, email, timestamps somente-leitura
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from adminkit.admin import (
    DateTimeField,
    EmailField,
    IDField,
    Page,
    RelationshipField,
    Resource,
    ResourceManager,
    TextField,
)
from adminkit.app import AdminApp
from adminkit.cache import MemoryCache
from adminkit.config import Settings
from adminkit.database import Database
from adminkit.repository import ResourceRepository
from adminkit.service import ResourceService


# =========================================================================
# Resources de teste
# =========================================================================

class ItemResource(Resource):
    title = "Items"
    slug = "items"

    def get_fields(self):
        return [
            IDField(),
            TextField("name", required=True),
            TextField("value"),
        ]

    def get_filterable_fields(self):
        return ["name"]

    def get_sortable_fields(self):
        return ["name"]


class SortedItemResource(ItemResource):
    title = "Sorted Items"
    slug = "sorted_items"

    def get_sortable_fields(self):
        return ["name", "value"]

    def get_default_order(self):
        return "name", "ASC"


class CategoryResource(Resource):
    title = "Categories"
    slug = "categories"

    def get_fields(self):
        return [IDField(), TextField("name", required=True)]


class ProductResource(Resource):
    title = "Products"
    slug = "products"

    def get_fields(self):
        return [
            IDField(),
            TextField("name", required=True),
            EmailField("email"),
            RelationshipField("category_id", related_resource="categories"),
            DateTimeField("created_at", readonly=True),
            DateTimeField("updated_at", readonly=True),
        ]

    def get_searchable_fields(self):
        return ["name"]


def build_manager(*resources: Resource) -> ResourceManager:
    manager = ResourceManager()
    for resource in resources:
        manager.register(resource)
    return manager


# =========================================================================
# Fixtures
# =========================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="testing",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        cache_backend="memory",
        log_level="WARNING",
    )


@pytest.fixture
def manager() -> ResourceManager:
    manager = build_manager(
        ItemResource(),
        SortedItemResource(),
        CategoryResource(),
        ProductResource(),
    )
    manager.register_page(Page("Dashboard", "dashboard"))
    return manager


@pytest_asyncio.fixture
async def database(settings, manager):
    """Banco SQLite em arquivo temporário com as tabelas dos resources."""
    db = Database(settings.database_url)
    await db.create_tables(manager)
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def repository(database) -> ResourceRepository:
    return ResourceRepository(database.session_factory)


@pytest.fixture
def service(manager, repository, cache, settings) -> ResourceService:
    return ResourceService(manager, repository, cache, settings=settings)


@pytest_asyncio.fixture
async def service_factory(database, settings):
    """
    Monta um service com resources extras (além dos padrões).

    Uso:
        service = await service_factory(HookedResource())
    """

    async def factory(*resources: Resource, cache=None) -> ResourceService:
        manager = build_manager(*resources)
        await database.create_tables(manager)
        return ResourceService(
            manager,
            ResourceRepository(database.session_factory),
            cache or MemoryCache(),
            settings=settings,
        )

    return factory


@pytest_asyncio.fixture
async def admin_app(manager, settings, database, cache) -> AdminApp:
    return AdminApp(manager, settings, database=database, cache=cache)


@pytest_asyncio.fixture
async def client(admin_app):
    """Fornece um cliente HTTP para testes de API."""
    transport = ASGITransport(app=admin_app.app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
