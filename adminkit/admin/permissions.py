"""
Permissões por resource.

O engine nunca fala com um motor de RBAC diretamente: quem decide é o
próprio resource, via Authorizable. PermissionAuthorizable é uma
implementação pronta desse contrato baseada em codenames no usuário.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request

from adminkit.admin.resource import RequestContext

logger = logging.getLogger("adminkit.admin")

RESOURCE_ACTIONS = ("list", "view", "create", "update", "delete")


def get_request_user(request: Request) -> Any | None:
    """
    Obtém o usuário autenticado do request.

    Verifica, nesta ordem:
    1. request.state.user (middleware de autenticação da aplicação)
    2. request.user (Starlette AuthenticationMiddleware)
    """
    state = getattr(request, "state", None)
    user = getattr(state, "user", None)
    if user is not None:
        return user

    # request.user levanta AssertionError sem AuthenticationMiddleware
    if "user" in request.scope:
        user = request.scope["user"]
        if getattr(user, "is_authenticated", False):
            return user

    return None


def build_context(request: Request) -> RequestContext:
    return RequestContext(user=get_request_user(request), request=request)


async def has_permission(user: Any, codename: str) -> bool:
    """
    Verifica um codename de permissão no usuário.

    Superusers sempre têm acesso. Aceita usuários com has_permission()
    (sync ou async) ou com uma coleção `permissions` de codenames.
    """
    if user is None:
        return False

    if getattr(user, "is_superuser", False):
        return True

    if hasattr(user, "has_permission"):
        result = user.has_permission(codename)
        # Pode ser async ou sync
        if hasattr(result, "__await__"):
            return bool(await result)
        return bool(result)

    permissions = getattr(user, "permissions", None)
    if permissions is not None:
        return codename in permissions

    return False


async def check_resource_permission(user: Any, slug: str, action: str) -> bool:
    """
    Verifica se o usuário tem permissão para uma ação em um resource.

    Codename no formato "{slug}.{action}", ex: "products.update".

    Args:
        user: Usuário autenticado (ou None)
        slug: Slug do resource
        action: list, view, create, update ou delete
    """
    return await has_permission(user, f"{slug}.{action}")


async def get_user_resource_permissions(user: Any, slug: str) -> dict[str, bool]:
    """
    Retorna dict com todas as permissões do usuário para um resource.

    Returns:
        {"list": True, "view": True, "create": False, ...}
    """
    return {
        action: await check_resource_permission(user, slug, action)
        for action in RESOURCE_ACTIONS
    }


class PermissionAuthorizable:
    """
    Mixin que implementa Authorizable via check_resource_permission.

    Exemplo:
        class OrderResource(PermissionAuthorizable, Resource):
            slug = "orders"
    """

    slug: str

    async def _allowed(self, ctx: RequestContext, action: str) -> bool:
        allowed = await check_resource_permission(ctx.user, self.slug, action)
        if not allowed:
            logger.debug(
                "Permission %s.%s denied for %r", self.slug, action, ctx.user,
            )
        return allowed

    async def can_list(self, ctx: RequestContext) -> bool:
        return await self._allowed(ctx, "list")

    async def can_view(self, ctx: RequestContext, record_id: Any) -> bool:
        return await self._allowed(ctx, "view")

    async def can_create(self, ctx: RequestContext, data: dict[str, Any]) -> bool:
        return await self._allowed(ctx, "create")

    async def can_update(self, ctx: RequestContext, record_id: Any, data: dict[str, Any]) -> bool:
        return await self._allowed(ctx, "update")

    async def can_delete(self, ctx: RequestContext, record_id: Any) -> bool:
        return await self._allowed(ctx, "delete")
