"""
Testes da superfície HTTP (CRUD genérico e introspecção).
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from adminkit.admin import Action, IDField, PermissionAuthorizable, Resource, ResourceManager, TextField
from adminkit.app import AdminApp
from adminkit.cache import MemoryCache

CRUD = "/resource-crud"
ADMIN = "/admin-api"


class GuardedResource(PermissionAuthorizable, Resource):
    title = "Guarded"
    slug = "guarded"

    def get_fields(self):
        return [IDField(), TextField("name", required=True)]


class PingResource(Resource):
    title = "Ping"
    slug = "ping"

    def get_fields(self):
        return [IDField(), TextField("name")]

    def get_actions(self):
        return [Action("ping", label="Ping")]

    async def run_action(self, ctx, action, ids, params):
        return {"pong": True, "ids": ids, "params": params}


async def create_item(client: AsyncClient, name: str = "a", value: str = "1") -> dict:
    response = await client.post(f"{CRUD}/items", json={"name": name, "value": value})
    assert response.status_code == 200
    return response.json()["data"]


# =========================================================================
# CRUD
# =========================================================================

class TestCrudEndpoints:
    """Testes das rotas /resource-crud/{slug}."""

    @pytest.mark.asyncio
    async def test_create_envelope(self, client):
        response = await client.post(f"{CRUD}/items", json={"name": "a", "value": "1"})

        assert response.status_code == 200
        body = response.json()
        assert body["code"] == 0
        assert body["message"] == "success"
        assert body["data"]["id"] == 1
        assert body["data"]["name"] == "a"

    @pytest.mark.asyncio
    async def test_list_envelope(self, client):
        await create_item(client, "a")
        await create_item(client, "b")

        response = await client.get(f"{CRUD}/items", params={"page": 1, "page_size": 1})

        data = response.json()["data"]
        assert data["total"] == 2
        assert data["page"] == 1
        assert data["page_size"] == 1
        assert [i["name"] for i in data["items"]] == ["b"]

    @pytest.mark.asyncio
    async def test_page_size_is_capped(self, client):
        response = await client.get(f"{CRUD}/items", params={"page_size": 5000})
        assert response.json()["data"]["page_size"] == 100

    @pytest.mark.asyncio
    async def test_query_filters_and_search(self, client):
        await create_item(client, "alpha", "1")
        await create_item(client, "beta", "1")

        filtered = await client.get(f"{CRUD}/items", params={"name": "alpha", "value": "2"})
        searched = await client.get(f"{CRUD}/items", params={"search_name": "et"})
        ordered = await client.get(f"{CRUD}/items", params={"order_by": "name", "order_direction": "asc"})

        assert [i["name"] for i in filtered.json()["data"]["items"]] == ["alpha"]
        assert [i["name"] for i in searched.json()["data"]["items"]] == ["beta"]
        assert [i["name"] for i in ordered.json()["data"]["items"]] == ["alpha", "beta"]

    @pytest.mark.asyncio
    async def test_detail_update_delete(self, client):
        item = await create_item(client)
        url = f"{CRUD}/items/{item['id']}"

        detail = await client.get(url)
        assert detail.json()["data"]["name"] == "a"

        updated = await client.put(url, json={"name": "z", "value": "9"})
        assert updated.json()["data"]["name"] == "z"

        deleted = await client.delete(url)
        assert deleted.json() == {"code": 0, "data": None, "message": "success"}

        listing = await client.get(f"{CRUD}/items")
        assert listing.json()["data"]["total"] == 0

    @pytest.mark.asyncio
    async def test_restore_and_force_delete(self, client):
        item = await create_item(client)
        url = f"{CRUD}/items/{item['id']}"
        await client.delete(url)

        restored = await client.post(f"{url}/restore")
        assert restored.status_code == 200
        assert (await client.get(f"{CRUD}/items")).json()["data"]["total"] == 1

        forced = await client.delete(f"{url}/force")
        assert forced.status_code == 200
        assert (await client.get(url)).status_code == 404

    @pytest.mark.asyncio
    async def test_batch_delete(self, client):
        first = await create_item(client, "a")
        second = await create_item(client, "b")

        response = await client.request(
            "DELETE", f"{CRUD}/items", json={"ids": [first["id"], second["id"]]},
        )

        assert response.json()["data"] == {"deleted": 2}

    @pytest.mark.asyncio
    async def test_batch_delete_without_ids(self, client):
        response = await client.request("DELETE", f"{CRUD}/items", json={"ids": []})

        assert response.status_code == 400
        assert "ids" in response.json()["errors"]


# =========================================================================
# Erros
# =========================================================================

class TestErrorResponses:
    """Testes do mapeamento de exceções para HTTP."""

    @pytest.mark.asyncio
    async def test_unknown_resource(self, client):
        response = await client.get(f"{CRUD}/nope")

        assert response.status_code == 404
        assert response.json()["error"] == "resource_not_found"

    @pytest.mark.asyncio
    async def test_unknown_record(self, client):
        response = await client.get(f"{CRUD}/items/999")

        assert response.status_code == 404
        assert response.json()["code"] == 404

    @pytest.mark.asyncio
    async def test_validation_error(self, client):
        response = await client.post(f"{CRUD}/items", json={"value": "1"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == 400
        assert "name" in body["errors"]

    @pytest.mark.asyncio
    async def test_action_not_supported(self, client):
        response = await client.post(f"{CRUD}/items/actions/explode", json={"ids": [1]})
        assert response.status_code == 501

    @pytest.mark.asyncio
    async def test_permission_denied(self, settings, database):
        manager = ResourceManager()
        manager.register(GuardedResource())
        await database.create_tables(manager)
        admin = AdminApp(manager, settings, database=database, cache=MemoryCache())

        transport = ASGITransport(app=admin.app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get(f"{CRUD}/guarded")

        assert response.status_code == 403
        assert response.json()["error"] == "permission_denied"


# =========================================================================
# Actions
# =========================================================================

class TestActionEndpoint:
    """Testes de execução de ações via HTTP."""

    @pytest_asyncio.fixture
    async def ping_client(self, settings, database):
        manager = ResourceManager()
        manager.register(PingResource())
        await database.create_tables(manager)
        admin = AdminApp(manager, settings, database=database, cache=MemoryCache())

        transport = ASGITransport(app=admin.app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

    @pytest.mark.asyncio
    async def test_action_without_body(self, ping_client):
        response = await ping_client.post(f"{CRUD}/ping/actions/ping")

        assert response.status_code == 200
        assert response.json()["data"] == {"pong": True, "ids": [], "params": {}}

    @pytest.mark.asyncio
    async def test_action_with_ids_and_params(self, ping_client):
        response = await ping_client.post(
            f"{CRUD}/ping/actions/ping",
            json={"ids": [1, 2], "params": {"mode": "fast"}},
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"pong": True, "ids": [1, 2], "params": {"mode": "fast"}}


# =========================================================================
# Export
# =========================================================================

class TestExportEndpoint:
    """Testes de GET /resource-crud/{slug}/export."""

    @pytest.mark.asyncio
    async def test_csv_download(self, client):
        await create_item(client, "a", "1")

        response = await client.get(f"{CRUD}/items/export", params={"format": "csv"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith("attachment;")
        assert ".csv" in disposition
        assert response.content.decode("utf-8-sig").splitlines()[0] == "ID,name,value"

    @pytest.mark.asyncio
    async def test_excel_download(self, client):
        response = await client.get(f"{CRUD}/items/export", params={"format": "excel"})

        assert response.status_code == 200
        assert ".xlsx" in response.headers["content-disposition"]

    @pytest.mark.asyncio
    async def test_unsupported_format(self, client):
        response = await client.get(f"{CRUD}/items/export", params={"format": "pdf"})
        assert response.status_code == 400


# =========================================================================
# Introspecção
# =========================================================================

class TestIntrospection:
    """Testes de /admin-api."""

    @pytest.mark.asyncio
    async def test_navigation(self, client):
        response = await client.get(f"{ADMIN}/resources")

        data = response.json()["data"]
        slugs = [r["slug"] for r in data["resources"]]
        assert set(slugs) == {"items", "sorted_items", "categories", "products"}
        assert data["pages"][0]["slug"] == "dashboard"
        assert all("actions" in r and "fields" in r for r in data["resources"])

    @pytest.mark.asyncio
    async def test_describe_resource(self, client):
        response = await client.get(f"{ADMIN}/resources/sorted_items")

        data = response.json()["data"]
        assert data["slug"] == "sorted_items"
        assert data["sortable_fields"] == ["name", "value"]
        assert data["filterable_fields"] == ["name"]
        assert data["default_order"] == {"field": "name", "direction": "ASC"}
        assert [f["name"] for f in data["form_fields"]] == ["name", "value"]

    @pytest.mark.asyncio
    async def test_describe_page(self, client):
        response = await client.get(f"{ADMIN}/resources/dashboard")
        assert response.json()["data"]["type"] == "page"

    @pytest.mark.asyncio
    async def test_describe_unknown(self, client):
        response = await client.get(f"{ADMIN}/resources/nope")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_global_search(self, client):
        await create_item(client, "apple")

        response = await client.get(f"{ADMIN}/search", params={"keyword": "app"})

        groups = response.json()["data"]
        assert [g["resource"] for g in groups] == ["items"]
        assert groups[0]["items"][0]["name"] == "apple"

    @pytest.mark.asyncio
    async def test_global_search_requires_keyword(self, client):
        response = await client.get(f"{ADMIN}/search", params={"keyword": " "})
        assert response.status_code == 400
