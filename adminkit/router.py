"""
Endpoints REST gerados para todos os resources registrados.

CRUD genérico (prefixo settings.resource_url_prefix, ex: /resource-crud):
- GET    /{slug}                    -- Lista paginada (filtros, busca, ordenação, lixeira)
- POST   /{slug}                    -- Cria
- DELETE /{slug}                    -- Soft delete em lote, body {"ids": [...]}
- GET    /{slug}/export             -- Exporta CSV/Excel
- POST   /{slug}/actions/{action}   -- Ação customizada, body {"ids": [...], "params": {...}}
- GET    /{slug}/{id}               -- Detalhe
- PUT    /{slug}/{id}               -- Atualiza
- DELETE /{slug}/{id}               -- Soft delete
- POST   /{slug}/{id}/restore       -- Restaura da lixeira
- DELETE /{slug}/{id}/force         -- Delete físico

Introspecção (prefixo settings.admin_api_prefix):
- GET /resources                    -- Menu: resources + páginas
- GET /resources/{slug}             -- Metadados de um resource (ou página)
- GET /search?keyword=&limit=       -- Busca rápida global

Erros do adminkit são convertidos em JSON pelos handlers instalados
em adminkit.app.setup_exception_handlers().
"""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field as PydanticField

from adminkit.admin.introspection import describe_resource, list_navigation
from adminkit.admin.permissions import build_context
from adminkit.admin.resource import RequestContext
from adminkit.exceptions import ResourceNotFoundError, ValidationError

if TYPE_CHECKING:
    from adminkit.config import Settings
    from adminkit.service import ResourceService

logger = logging.getLogger("adminkit.router")

# Parâmetros de query que nunca viram filtro
LIST_CONTROL_PARAMS = frozenset({"page", "page_size", "order_by", "order_direction", "language", "format"})
SEARCH_PARAM_PREFIX = "search_"


class BatchDeleteRequest(BaseModel):
    ids: list[int | str] = PydanticField(default_factory=list)


class ActionRequest(BaseModel):
    ids: list[int | str] = PydanticField(default_factory=list)
    params: dict[str, Any] = PydanticField(default_factory=dict)


def success(data: Any = None, message: str = "success") -> dict[str, Any]:
    return {"code": 0, "data": data, "message": message}


def _cast_id(record_id: str) -> int | str:
    """Ids numéricos viram int; demais (uuid, slugs) ficam como string."""
    return int(record_id) if record_id.isdigit() else record_id


def _int_param(value: str | None, default: int) -> int:
    try:
        return int(value) if value not in (None, "") else default
    except ValueError:
        return default


def parse_query_maps(request: Request) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Separa a query string em (filtros, busca).

    `search_<campo>=x` vai para busca; qualquer outro parâmetro que não
    seja de controle vai para filtros. Valores vazios são ignorados.
    """
    filters: dict[str, Any] = {}
    search: dict[str, Any] = {}
    for key, value in request.query_params.multi_items():
        if key in LIST_CONTROL_PARAMS or value == "":
            continue
        if key.startswith(SEARCH_PARAM_PREFIX):
            search[key[len(SEARCH_PARAM_PREFIX):]] = value
        else:
            filters[key] = value
    return filters, search


def parse_order(request: Request) -> tuple[str, str]:
    order_by = request.query_params.get("order_by", "")
    direction = request.query_params.get("order_direction", "").upper()
    if direction not in ("ASC", "DESC"):
        direction = "DESC"
    return order_by, direction


def create_resource_router(service: "ResourceService", settings: "Settings") -> APIRouter:
    """Cria o router CRUD genérico."""
    router = APIRouter(prefix=settings.resource_url_prefix, tags=["resource-crud"])

    @router.get("/{slug}")
    async def list_view(
        slug: str,
        request: Request,
        ctx: RequestContext = Depends(build_context),
    ) -> dict:
        """Lista paginada."""
        params = request.query_params
        page = max(_int_param(params.get("page"), 1), 1)
        page_size = _int_param(params.get("page_size"), settings.list_default_page_size)
        if page_size < 1:
            page_size = settings.list_default_page_size
        page_size = min(page_size, settings.list_max_page_size)

        filters, search = parse_query_maps(request)
        order_by, order_dir = parse_order(request)

        items, total = await service.list(
            slug, page, page_size, filters, search, order_by, order_dir, ctx=ctx,
        )
        return success({
            "items": items,
            "total": total,
            "page": page,
            "page_size": page_size,
        })

    @router.post("/{slug}")
    async def create_view(
        slug: str,
        payload: dict[str, Any],
        ctx: RequestContext = Depends(build_context),
    ) -> dict:
        row = await service.create(slug, payload, ctx=ctx)
        return success(row)

    @router.delete("/{slug}")
    async def batch_delete_view(
        slug: str,
        payload: BatchDeleteRequest,
        ctx: RequestContext = Depends(build_context),
    ) -> dict:
        if not payload.ids:
            raise ValidationError({"ids": ["no ids provided"]})
        deleted = await service.delete_batch(slug, payload.ids, ctx=ctx)
        return success({"deleted": deleted})

    @router.get("/{slug}/export")
    async def export_view(
        slug: str,
        request: Request,
        ctx: RequestContext = Depends(build_context),
    ) -> Response:
        filters, search = parse_query_maps(request)
        order_by, order_dir = parse_order(request)
        fmt = request.query_params.get("format", "csv")

        result = await service.export(slug, filters, search, order_by, order_dir, fmt, ctx=ctx)
        return Response(
            content=result.content,
            media_type=result.media_type,
            headers={
                "Content-Disposition": f"attachment; filename*=UTF-8''{quote(result.filename)}",
            },
        )

    @router.post("/{slug}/actions/{action}")
    async def action_view(
        slug: str,
        action: str,
        payload: ActionRequest | None = None,
        ctx: RequestContext = Depends(build_context),
    ) -> dict:
        """Corpo vazio equivale a {"ids": [], "params": {}}."""
        payload = payload or ActionRequest()
        result = await service.run_action(slug, action, payload.ids, payload.params, ctx=ctx)
        return success(result)

    @router.get("/{slug}/{record_id}")
    async def detail_view(
        slug: str,
        record_id: str,
        ctx: RequestContext = Depends(build_context),
    ) -> dict:
        row = await service.get(slug, _cast_id(record_id), ctx=ctx)
        return success(row)

    @router.put("/{slug}/{record_id}")
    async def update_view(
        slug: str,
        record_id: str,
        payload: dict[str, Any],
        ctx: RequestContext = Depends(build_context),
    ) -> dict:
        row = await service.update(slug, _cast_id(record_id), payload, ctx=ctx)
        return success(row)

    @router.delete("/{slug}/{record_id}")
    async def delete_view(
        slug: str,
        record_id: str,
        ctx: RequestContext = Depends(build_context),
    ) -> dict:
        await service.delete(slug, _cast_id(record_id), ctx=ctx)
        return success()

    @router.post("/{slug}/{record_id}/restore")
    async def restore_view(
        slug: str,
        record_id: str,
        ctx: RequestContext = Depends(build_context),
    ) -> dict:
        await service.restore(slug, _cast_id(record_id), ctx=ctx)
        return success()

    @router.delete("/{slug}/{record_id}/force")
    async def force_delete_view(
        slug: str,
        record_id: str,
        ctx: RequestContext = Depends(build_context),
    ) -> dict:
        await service.force_delete(slug, _cast_id(record_id), ctx=ctx)
        return success()

    return router


def create_introspection_router(service: "ResourceService", settings: "Settings") -> APIRouter:
    """Cria o router de metadados (menu, descrição de resources, busca global)."""
    router = APIRouter(prefix=settings.admin_api_prefix, tags=["admin-metadata"])
    manager = service.manager

    @router.get("/resources")
    async def resources_view(ctx: RequestContext = Depends(build_context)) -> dict:
        return success(await list_navigation(manager, ctx))

    @router.get("/resources/{slug}")
    async def resource_detail_view(
        slug: str,
        ctx: RequestContext = Depends(build_context),
    ) -> dict:
        resource = manager.get_resource_by_slug(slug)
        if resource is not None:
            return success(describe_resource(manager, resource, ctx))

        page = manager.get_page_by_slug(slug)
        if page is not None:
            return success(page.to_dict())

        raise ResourceNotFoundError(slug)

    @router.get("/search")
    async def global_search_view(
        keyword: str = "",
        limit: int | None = None,
        ctx: RequestContext = Depends(build_context),
    ) -> dict:
        if not keyword.strip():
            raise ValidationError({"keyword": ["keyword is required"]})
        return success(await service.global_search(keyword, limit, ctx=ctx))

    return router
