"""
ResourceService: orquestração do CRUD genérico.

Único componente que chama o ResourceRepository com mapas de
filtro/busca/ordenação vindos do cliente, porque é aqui que esses mapas
são reduzidos às whitelists declaradas pelo resource.

Fluxo de toda escrita:
    resolve -> autoriza -> hook before -> valida -> persiste
    -> hook after -> invalida cache

Qualquer etapa que falha interrompe o fluxo; nada é compensado.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, TYPE_CHECKING

from adminkit.admin.capabilities import Capability
from adminkit.admin.permissions import has_permission
from adminkit.admin.resource import RequestContext, Resource
from adminkit.admin.validators import validate_resource_data
from adminkit.cache.base import DEFAULT_EXPIRATION
from adminkit.exceptions import (
    ActionNotSupported,
    ExportNotAllowed,
    PermissionDenied,
    RecordNotFoundError,
    ResourceNotFoundError,
    ValidationError,
)
from adminkit.export import ExportResult, ExportService
from adminkit.repository import (
    BASE_COLUMNS,
    CREATED_FROM_KEY,
    CREATED_TO_KEY,
    RESERVED_FILTER_KEYS,
    TableSchema,
    parse_datetime_bound,
)

if TYPE_CHECKING:
    from adminkit.admin.manager import ResourceManager
    from adminkit.cache.base import CacheManager
    from adminkit.config import Settings
    from adminkit.repository import ResourceRepository

logger = logging.getLogger("adminkit.service")

READONLY_MESSAGE = "field is read-only"
NOT_WRITABLE_MESSAGE = "no permission to write this field"

TEXT_FIELD_TYPES = frozenset({"text", "email", "textarea"})


class ResourceService:
    """
    Exemplo:
        service = ResourceService(manager, repository, MemoryCache())
        row = await service.create("crud_items", {"name": "a", "value": "1"})
        items, total = await service.list("crud_items", filters={"name": "a"})
    """

    def __init__(
        self,
        manager: "ResourceManager",
        repository: "ResourceRepository",
        cache: "CacheManager",
        export_service: ExportService | None = None,
        settings: "Settings | None" = None,
    ) -> None:
        self.manager = manager
        self.repository = repository
        self.cache = cache
        self.export_service = export_service or ExportService()

        self.cache_ttl = settings.cache_default_ttl if settings else DEFAULT_EXPIRATION
        self.key_prefix = settings.cache_key_prefix if settings else "resource"
        self.default_page_size = settings.list_default_page_size if settings else 10
        self.export_max_rows = settings.export_max_rows if settings else 10000
        self.quick_search_limit = settings.quick_search_limit if settings else 5

        self._schemas: dict[str, TableSchema] = {}
        # Incrementado a cada invalidação: leituras iniciadas antes não repopulam o cache
        self._generations: dict[str, int] = {}

    # =========================================================================
    # Escrita
    # =========================================================================

    async def create(
        self,
        slug: str,
        data: dict[str, Any],
        *,
        ctx: RequestContext | None = None,
    ) -> dict[str, Any]:
        ctx = ctx or RequestContext()
        resource = self._resolve(slug)
        data = dict(data or {})

        await self._authorize(resource, "create", "can_create", ctx, data)
        data = self._enforce_writable(resource, ctx, data)

        if self._has(slug, Capability.CREATE_HOOK):
            await resource.before_create(ctx, data)

        self._validate(resource, data)

        schema = self._schema(resource)
        new_id = await self.repository.create(schema, data)
        data["id"] = new_id

        if self._has(slug, Capability.CREATE_HOOK):
            await resource.after_create(ctx, data)

        await self.clear_resource_cache(slug)
        logger.info("Created %s id=%s", slug, new_id)

        row = await self.repository.find_by_id(schema, new_id)
        return self._filter_readable(resource, ctx, row if row is not None else data)

    async def update(
        self,
        slug: str,
        record_id: Any,
        data: dict[str, Any],
        *,
        ctx: RequestContext | None = None,
    ) -> dict[str, Any]:
        ctx = ctx or RequestContext()
        resource = self._resolve(slug)
        data = dict(data or {})
        data.pop("id", None)

        await self._authorize(resource, "update", "can_update", ctx, record_id, data)
        data = self._enforce_writable(resource, ctx, data)

        if self._has(slug, Capability.UPDATE_HOOK):
            await resource.before_update(ctx, record_id, data)

        self._validate(resource, data)

        schema = self._schema(resource)
        affected = await self.repository.update(schema, record_id, data)
        if not affected:
            raise RecordNotFoundError(slug, record_id)

        if self._has(slug, Capability.UPDATE_HOOK):
            await resource.after_update(ctx, record_id, data)

        await self.clear_resource_cache(slug)
        logger.info("Updated %s id=%s", slug, record_id)

        row = await self.repository.find_by_id(schema, record_id)
        return self._filter_readable(resource, ctx, row if row is not None else {**data, "id": record_id})

    async def delete(self, slug: str, record_id: Any, *, ctx: RequestContext | None = None) -> None:
        """Soft delete."""
        ctx = ctx or RequestContext()
        resource = self._resolve(slug)

        await self._authorize(resource, "delete", "can_delete", ctx, record_id)

        if self._has(slug, Capability.DELETE_HOOK):
            await resource.before_delete(ctx, record_id)

        affected = await self.repository.delete(self._schema(resource), record_id)
        if not affected:
            raise RecordNotFoundError(slug, record_id)

        if self._has(slug, Capability.DELETE_HOOK):
            await resource.after_delete(ctx, record_id)

        await self.clear_resource_cache(slug)
        logger.info("Deleted %s id=%s", slug, record_id)

    async def delete_batch(self, slug: str, ids: list[Any], *, ctx: RequestContext | None = None) -> int:
        """Soft delete em lote. Autoriza id a id; não dispara hooks."""
        ctx = ctx or RequestContext()
        resource = self._resolve(slug)
        ids = list(ids or [])
        if not ids:
            return 0

        for record_id in ids:
            await self._authorize(resource, "delete", "can_delete", ctx, record_id)

        affected = await self.repository.delete_batch(self._schema(resource), ids)
        await self.clear_resource_cache(slug)
        logger.info("Batch deleted %d rows of %s", affected, slug)
        return affected

    async def restore(self, slug: str, record_id: Any, *, ctx: RequestContext | None = None) -> None:
        ctx = ctx or RequestContext()
        resource = self._resolve(slug)

        await self._authorize(resource, "update", "can_update", ctx, record_id, {})

        affected = await self.repository.restore(self._schema(resource), record_id)
        if not affected:
            raise RecordNotFoundError(slug, record_id)

        await self.clear_resource_cache(slug)
        logger.info("Restored %s id=%s", slug, record_id)

    async def force_delete(self, slug: str, record_id: Any, *, ctx: RequestContext | None = None) -> None:
        """DELETE físico. Sem hooks."""
        ctx = ctx or RequestContext()
        resource = self._resolve(slug)

        await self._authorize(resource, "delete", "can_delete", ctx, record_id)

        affected = await self.repository.force_delete(self._schema(resource), record_id)
        if not affected:
            raise RecordNotFoundError(slug, record_id)

        await self.clear_resource_cache(slug)
        logger.info("Force deleted %s id=%s", slug, record_id)

    # =========================================================================
    # Leitura
    # =========================================================================

    async def get(self, slug: str, record_id: Any, *, ctx: RequestContext | None = None) -> dict[str, Any]:
        """
        Leitura cache-through de um registro (inclui registros na lixeira).

        Raises:
            RecordNotFoundError: id inexistente
        """
        ctx = ctx or RequestContext()
        resource = self._resolve(slug)

        await self._authorize(resource, "view", "can_view", ctx, record_id)

        key = self.record_cache_key(slug, record_id)
        cached = await self._cache_get(key)
        if cached is not None:
            return self._filter_readable(resource, ctx, cached)

        generation = self._generation(slug)
        row = await self.repository.find_by_id_with_relationships(
            self._schema(resource), record_id, self._relationships(resource),
        )
        if row is None:
            raise RecordNotFoundError(slug, record_id)

        await self._cache_set(slug, generation, key, row)
        return self._filter_readable(resource, ctx, row)

    async def list(
        self,
        slug: str,
        page: int = 1,
        page_size: int | None = None,
        filters: dict[str, Any] | None = None,
        search: dict[str, Any] | None = None,
        order_by: str = "",
        order_dir: str = "",
        *,
        ctx: RequestContext | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Listagem paginada com whitelist de filtros, busca e ordenação.

        Returns:
            (itens da página, total)
        """
        ctx = ctx or RequestContext()
        resource = self._resolve(slug)
        page = max(int(page or 1), 1)
        page_size = max(int(page_size or self.default_page_size), 1)

        await self._authorize(resource, "list", "can_list", ctx)

        filters, search, order_by, order_dir = self._sanitize_query(resource, filters, search, order_by, order_dir)

        key = self.list_cache_key(slug, page, page_size, filters, search, order_by, order_dir)
        cached = await self._cache_get(key)
        if cached is not None:
            items = [self._filter_readable(resource, ctx, row) for row in cached["items"]]
            return items, int(cached["total"])

        generation = self._generation(slug)
        rows, total = await self.repository.list_with_relationships_and_filters(
            self._schema(resource),
            page,
            page_size,
            self._relationships(resource),
            filters,
            search,
            order_by,
            order_dir,
        )

        await self._cache_set(slug, generation, key, {"items": rows, "total": total})
        return [self._filter_readable(resource, ctx, row) for row in rows], total

    async def quick_search(
        self,
        slug: str,
        keyword: str,
        limit: int | None = None,
        *,
        ctx: RequestContext | None = None,
    ) -> list[dict[str, Any]]:
        """Busca rápida (OR entre campos pesquisáveis), fora da lixeira."""
        ctx = ctx or RequestContext()
        resource = self._resolve(slug)
        await self._authorize(resource, "list", "can_list", ctx)

        schema = self._schema(resource)
        if self._has(slug, Capability.SEARCHABLE):
            fields = [f for f in resource.get_searchable_fields() if f in schema.columns]
        else:
            fields = [f.name for f in resource.get_fields() if f.type in TEXT_FIELD_TYPES]

        rows = await self.repository.quick_search(schema, fields, keyword, limit or self.quick_search_limit)
        return [self._filter_readable(resource, ctx, row) for row in rows]

    async def global_search(
        self,
        keyword: str,
        limit: int | None = None,
        *,
        ctx: RequestContext | None = None,
    ) -> list[dict[str, Any]]:
        """
        Busca rápida em todos os resources visíveis que o usuário pode listar.

        Returns:
            [{"resource": slug, "title": ..., "items": [...]}] apenas com grupos não vazios
        """
        ctx = ctx or RequestContext()
        keyword = (keyword or "").strip()
        if not keyword:
            return []

        results: list[dict[str, Any]] = []
        for resource in self.manager.get_resources():
            slug = resource.slug
            if self._has(slug, Capability.HIDDEN_IN_NAVIGATION) and resource.is_hidden_in_navigation():
                continue
            try:
                items = await self.quick_search(slug, keyword, limit, ctx=ctx)
            except PermissionDenied:
                logger.debug("Global search skipped %s: permission denied", slug)
                continue
            if items:
                results.append({"resource": slug, "title": resource.title, "items": items})
        return results

    # =========================================================================
    # Export / Actions
    # =========================================================================

    async def export(
        self,
        slug: str,
        filters: dict[str, Any] | None = None,
        search: dict[str, Any] | None = None,
        order_by: str = "",
        order_dir: str = "",
        fmt: str | None = "csv",
        *,
        ctx: RequestContext | None = None,
    ) -> ExportResult:
        """Exporta até export_max_rows linhas com o mesmo pipeline de sanitização do list."""
        ctx = ctx or RequestContext()
        resource = self._resolve(slug)

        if self._has(slug, Capability.EXPORTABLE) and not resource.is_exportable():
            raise ExportNotAllowed(slug)

        await self._authorize(resource, "list", "can_list", ctx)

        filters, search, order_by, order_dir = self._sanitize_query(resource, filters, search, order_by, order_dir)
        rows, _ = await self.repository.list_with_filters(
            self._schema(resource), 1, self.export_max_rows, filters, search, order_by, order_dir,
        )
        rows = [self._filter_readable(resource, ctx, row) for row in rows]

        readable = self._readable_fields(resource, ctx)
        headers = [(f.name, f.label) for f in resource.get_fields() if f.name in readable]
        return self.export_service.export(rows, headers, fmt, resource.title or slug)

    async def run_action(
        self,
        slug: str,
        action_name: str,
        ids: list[Any] | None = None,
        params: dict[str, Any] | None = None,
        *,
        ctx: RequestContext | None = None,
    ) -> Any:
        """
        Executa uma ação declarada pelo resource via ActionExecutor.

        Raises:
            ActionNotSupported: ação não declarada ou resource sem ActionExecutor
            PermissionDenied: ação exige permissão que o usuário não tem
        """
        ctx = ctx or RequestContext()
        resource = self._resolve(slug)

        action = resource.get_action(action_name)
        if action is None or not self._has(slug, Capability.ACTION_EXECUTOR):
            raise ActionNotSupported(slug, action_name)

        if action.permission and not await has_permission(ctx.user, action.permission):
            raise PermissionDenied(
                f"permission denied for action {action_name}",
                permission=action.permission,
                resource=slug,
            )

        result = await resource.run_action(ctx, action_name, list(ids or []), dict(params or {}))
        await self.clear_resource_cache(slug)
        logger.info("Ran action %s on %s (%d ids)", action_name, slug, len(ids or []))
        return result

    # =========================================================================
    # Cache
    # =========================================================================

    def record_cache_key(self, slug: str, record_id: Any) -> str:
        return f"{self.key_prefix}:{slug}:record:{_key_value(record_id)}"

    def list_cache_key(
        self,
        slug: str,
        page: int,
        page_size: int,
        filters: dict[str, Any],
        search: dict[str, Any],
        order_by: str,
        order_dir: str,
    ) -> str:
        """Chave determinística: filtros e busca em ordem alfabética de chave."""
        key = f"{self.key_prefix}:{slug}:list:page-{page}:size-{page_size}"
        if order_by:
            key += f":order-{order_by}-{order_dir}"
        for k in sorted(filters):
            key += f":filter-{k}-{_key_value(filters[k])}"
        for k in sorted(search):
            key += f":search-{k}-{_key_value(search[k])}"
        return key

    async def clear_resource_cache(self, slug: str) -> None:
        """
        Invalida todas as entradas do resource (registros e listagens).

        Usa remoção por prefixo; se o backend não suportar ou falhar,
        limpa o cache inteiro.
        """
        self._generations[slug] = self._generation(slug) + 1
        prefix = f"{self.key_prefix}:{slug}:"
        try:
            removed = await self.cache.delete_by_prefix(prefix)
            logger.debug("Invalidated %d cache entries for %s", removed, slug)
        except NotImplementedError:
            await self.cache.flush()
            logger.debug("Flushed cache after change in %s", slug)
        except Exception:
            logger.warning("Prefix invalidation failed for %s; flushing cache", slug, exc_info=True)
            await self.cache.flush()

    def _generation(self, slug: str) -> int:
        return self._generations.get(slug, 0)

    async def _cache_get(self, key: str) -> Any | None:
        try:
            value = await self.cache.get(key)
        except Exception:
            logger.warning("Cache read failed for %s", key, exc_info=True)
            return None
        if value is None:
            logger.debug("Cache miss %s", key)
        return value

    async def _cache_set(self, slug: str, generation: int, key: str, value: Any) -> None:
        if self._generation(slug) != generation:
            logger.debug("Skipping stale cache write for %s", key)
            return
        try:
            await self.cache.set(key, value, self.cache_ttl)
        except Exception:
            logger.warning("Cache write failed for %s", key, exc_info=True)

    # =========================================================================
    # Internos
    # =========================================================================

    def _resolve(self, slug: str) -> Resource:
        resource = self.manager.get_resource_by_slug(slug)
        if resource is None:
            raise ResourceNotFoundError(slug)
        return resource

    def _has(self, slug: str, capability: Capability) -> bool:
        return self.manager.has_capability(slug, capability)

    def _schema(self, resource: Resource) -> TableSchema:
        schema = self._schemas.get(resource.slug)
        if schema is None:
            schema = TableSchema.from_resource(resource)
            self._schemas[resource.slug] = schema
        return schema

    def _relationships(self, resource: Resource) -> dict[str, TableSchema]:
        relationships: dict[str, TableSchema] = {}
        for f in resource.get_relationship_fields():
            related = self.manager.get_resource_by_slug(f.related_resource)
            if related is None:
                logger.warning(
                    "Relationship %s.%s points to unregistered resource %s",
                    resource.slug, f.name, f.related_resource,
                )
                continue
            relationships[f.name] = self._schema(related)
        return relationships

    async def _authorize(self, resource: Resource, action: str, method_name: str, *args: Any) -> None:
        """
        Chama o método can_* do resource, se ele for Authorizable.

        False vira PermissionDenied; exceções levantadas pelo resource
        propagam como estão.
        """
        if not self._has(resource.slug, Capability.AUTHORIZABLE):
            return

        allowed = await getattr(resource, method_name)(*args)
        if not allowed:
            raise PermissionDenied(
                f"permission denied: {action} on {resource.slug}",
                permission=f"{resource.slug}.{action}",
                resource=resource.slug,
            )

    def _validate(self, resource: Resource, data: dict[str, Any]) -> None:
        errors = validate_resource_data(resource, data)
        if errors:
            raise ValidationError(errors)

    def _writable_fields(self, resource: Resource, ctx: RequestContext) -> set[str]:
        if self._has(resource.slug, Capability.FIELD_PERMISSIONS):
            return set(resource.get_writable_fields(ctx))
        return set(resource.get_field_names())

    def _readable_fields(self, resource: Resource, ctx: RequestContext) -> set[str]:
        if self._has(resource.slug, Capability.FIELD_PERMISSIONS):
            readable = set(resource.get_readable_fields(ctx))
        else:
            readable = set(resource.get_field_names())
        return readable | BASE_COLUMNS

    def _enforce_writable(self, resource: Resource, ctx: RequestContext, data: dict[str, Any]) -> dict[str, Any]:
        """Rejeita chaves somente-leitura ou fora do conjunto gravável."""
        readonly = set(resource.get_readonly_fields())
        writable = self._writable_fields(resource, ctx)

        clean: dict[str, Any] = {}
        errors: dict[str, list[str]] = {}
        for key, value in data.items():
            if key in readonly:
                errors.setdefault(key, []).append(READONLY_MESSAGE)
            elif key not in writable:
                errors.setdefault(key, []).append(NOT_WRITABLE_MESSAGE)
            else:
                clean[key] = value

        if errors:
            raise ValidationError(errors)
        return clean

    def _filter_readable(self, resource: Resource, ctx: RequestContext, row: dict[str, Any]) -> dict[str, Any]:
        """
        Projeta a linha nos campos legíveis do resource.

        `<campo>_data` só passa para relacionamentos declarados e legíveis,
        e a linha aninhada é projetada nos campos legíveis do resource
        relacionado.
        """
        readable = self._readable_fields(resource, ctx)
        projected = {k: v for k, v in row.items() if k in readable}

        for f in resource.get_relationship_fields():
            key = f"{f.name}_data"
            if f.name not in readable or key not in row:
                continue
            nested = row[key]
            related = self.manager.get_resource_by_slug(f.related_resource)
            if related is not None and isinstance(nested, dict):
                related_readable = self._readable_fields(related, ctx)
                nested = {k: v for k, v in nested.items() if k in related_readable}
            projected[key] = nested
        return projected

    def _sanitize_query(
        self,
        resource: Resource,
        filters: dict[str, Any] | None,
        search: dict[str, Any] | None,
        order_by: str,
        order_dir: str,
    ) -> tuple[dict[str, Any], dict[str, Any], str, str]:
        """
        Reduz filtros, busca e ordenação às whitelists do resource.

        Chaves fora da whitelist são descartadas silenciosamente;
        trashed/created_at_from/created_at_to sempre passam.
        """
        slug = resource.slug
        schema = self._schema(resource)
        field_names = resource.get_field_names()

        filterable = set(
            resource.get_filterable_fields() if self._has(slug, Capability.FILTERABLE) else field_names
        ) & schema.columns
        searchable = set(
            resource.get_searchable_fields() if self._has(slug, Capability.SEARCHABLE) else field_names
        ) & schema.columns

        clean_filters: dict[str, Any] = {}
        for key, value in (filters or {}).items():
            value = _coerce_bool(value)
            if key in RESERVED_FILTER_KEYS or key in filterable:
                clean_filters[key] = value

        for key, end_of_day in ((CREATED_FROM_KEY, False), (CREATED_TO_KEY, True)):
            value = clean_filters.get(key)
            if value in (None, ""):
                clean_filters.pop(key, None)
                continue
            try:
                parse_datetime_bound(value, end_of_day=end_of_day)
            except ValueError:
                raise ValidationError({key: ["invalid date value"]}) from None

        clean_search = {
            key: value for key, value in (search or {}).items()
            if key in searchable and value not in (None, "")
        }

        order_by, order_dir = self._sanitize_order(resource, schema, order_by, order_dir)
        return clean_filters, clean_search, order_by, order_dir

    def _sanitize_order(self, resource: Resource, schema: TableSchema, order_by: str, order_dir: str) -> tuple[str, str]:
        slug = resource.slug
        direction = _normalize_direction(order_dir)

        if order_by and self._has(slug, Capability.SORTABLE):
            sortable = set(resource.get_sortable_fields()) & schema.columns
            if order_by in sortable:
                return order_by, direction

        if self._has(slug, Capability.DEFAULT_ORDER):
            default_field, default_dir = resource.get_default_order()
            if default_field:
                return default_field, _normalize_direction(default_dir)

        return "", ""


def _normalize_direction(direction: str | None) -> str:
    direction = (direction or "").upper()
    return direction if direction in ("ASC", "DESC") else "DESC"


def _coerce_bool(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return value


def _key_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
