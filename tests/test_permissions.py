"""
Testes de permissões por resource.
"""

from __future__ import annotations

import pytest
from starlette.requests import Request

from adminkit.admin import RequestContext, check_resource_permission
from adminkit.admin.permissions import (
    build_context,
    get_request_user,
    get_user_resource_permissions,
    has_permission,
)


class CodenameUser:
    def __init__(self, *permissions):
        self.permissions = set(permissions)


class AsyncCheckUser:
    """Usuário com has_permission assíncrono."""

    async def has_permission(self, codename):
        return codename.endswith(".list")


def make_request(**scope_extra) -> Request:
    scope = {"type": "http", "method": "GET", "path": "/", "headers": [], "query_string": b""}
    scope.update(scope_extra)
    return Request(scope)


class TestHasPermission:
    """Testes de has_permission e check_resource_permission."""

    @pytest.mark.asyncio
    async def test_anonymous(self):
        assert await has_permission(None, "items.list") is False

    @pytest.mark.asyncio
    async def test_superuser(self):
        class Root:
            is_superuser = True

        assert await check_resource_permission(Root(), "items", "delete") is True

    @pytest.mark.asyncio
    async def test_codename_collection(self):
        user = CodenameUser("items.list")

        assert await check_resource_permission(user, "items", "list") is True
        assert await check_resource_permission(user, "items", "delete") is False

    @pytest.mark.asyncio
    async def test_async_has_permission(self):
        assert await has_permission(AsyncCheckUser(), "items.list") is True
        assert await has_permission(AsyncCheckUser(), "items.create") is False

    @pytest.mark.asyncio
    async def test_permission_map(self):
        perms = await get_user_resource_permissions(CodenameUser("items.list", "items.view"), "items")

        assert perms == {
            "list": True,
            "view": True,
            "create": False,
            "update": False,
            "delete": False,
        }


class TestRequestUser:
    """Testes de extração do usuário do request."""

    def test_state_user(self):
        request = make_request()
        user = CodenameUser()
        request.state.user = user

        assert get_request_user(request) is user

    def test_authenticated_scope_user(self):
        class ScopeUser:
            is_authenticated = True

        user = ScopeUser()
        assert get_request_user(make_request(user=user)) is user

    def test_unauthenticated_scope_user_ignored(self):
        class Anonymous:
            is_authenticated = False

        assert get_request_user(make_request(user=Anonymous())) is None

    def test_build_context(self):
        request = make_request()
        ctx = build_context(request)

        assert isinstance(ctx, RequestContext)
        assert ctx.user is None
        assert ctx.request is request
