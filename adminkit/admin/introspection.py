"""
Documentos de metadados para o frontend do admin.

list_navigation() monta o menu (resources + páginas); describe_resource()
monta tudo que a tela de um resource precisa: campos, colunas, filtros,
ações visíveis e whitelists.
"""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

from adminkit.admin.capabilities import Capability
from adminkit.admin.resource import FrontendCapabilities, RequestContext, Resource
from adminkit.exceptions import PermissionDenied

if TYPE_CHECKING:
    from adminkit.admin.manager import ResourceManager

logger = logging.getLogger("adminkit.admin")

# Slug reservado para a página inicial; nunca listado como resource
DASHBOARD_SLUG = "dashboard"


def get_frontend_capabilities(manager: "ResourceManager", resource: Resource) -> FrontendCapabilities:
    if manager.has_capability(resource.slug, Capability.CAPABILITY_PROVIDER):
        return resource.get_capabilities()
    return FrontendCapabilities()


def is_hidden(manager: "ResourceManager", resource: Resource) -> bool:
    return (
        manager.has_capability(resource.slug, Capability.HIDDEN_IN_NAVIGATION)
        and bool(resource.is_hidden_in_navigation())
    )


async def can_list(manager: "ResourceManager", resource: Resource, ctx: RequestContext) -> bool:
    """False quando o resource é Authorizable e nega a listagem."""
    if not manager.has_capability(resource.slug, Capability.AUTHORIZABLE):
        return True
    try:
        return bool(await resource.can_list(ctx))
    except PermissionDenied:
        return False


async def navigation_entry(
    manager: "ResourceManager",
    resource: Resource,
    ctx: RequestContext,
) -> dict[str, Any]:
    """Entrada de menu de um resource."""
    slug = resource.slug
    caps = manager.get_capabilities(slug)

    badge = None
    if Capability.NAVIGATION_BADGE in caps:
        badge = await resource.get_navigation_badge(ctx)

    return {
        "type": "resource",
        "title": resource.title,
        "slug": slug,
        "nav_icon": resource.get_navigation_icon() if Capability.NAVIGATION_ICON in caps else "",
        "nav_group": resource.get_navigation_group() if Capability.NAVIGATION_GROUP in caps else "",
        "nav_sort": resource.get_navigation_sort() if Capability.NAVIGATION_SORT in caps else 0,
        "nav_badge": badge,
        **get_frontend_capabilities(manager, resource).to_dict(),
        "fields": [f.to_dict() for f in resource.get_fields()],
        "columns": [c.to_dict() for c in resource.get_columns()],
        "filters": [f.to_dict() for f in resource.get_filters()],
        "actions": [a.to_dict() for a in resource.get_actions() if a.is_visible(ctx)],
    }


async def list_navigation(manager: "ResourceManager", ctx: RequestContext) -> dict[str, Any]:
    """
    Menu do admin.

    Ficam de fora resources ocultos (HiddenInNavigation) e o slug
    "dashboard". Resources Authorizable cujo can_list nega também somem.
    Ordenação por (nav_sort, título).
    """
    resources, pages = manager.get_all_resources_and_pages()

    entries = []
    for resource in resources:
        if resource.slug == DASHBOARD_SLUG or is_hidden(manager, resource):
            continue
        if not await can_list(manager, resource, ctx):
            logger.debug("Navigation skipped %s: permission denied", resource.slug)
            continue
        entries.append(await navigation_entry(manager, resource, ctx))

    entries.sort(key=lambda e: (e["nav_sort"], e["title"]))

    return {
        "resources": entries,
        "pages": [p.to_dict() for p in pages if p.visible],
    }


def describe_resource(manager: "ResourceManager", resource: Resource, ctx: RequestContext) -> dict[str, Any]:
    """Metadados completos de um resource."""
    slug = resource.slug
    caps = manager.get_capabilities(slug)

    data: dict[str, Any] = {
        "type": "resource",
        "title": resource.title,
        "slug": slug,
        "fields": [f.to_dict() for f in resource.get_fields()],
        "form_fields": [f.to_dict() for f in resource.get_form_fields()],
        "readonly_fields": resource.get_readonly_fields(),
        "columns": [c.to_dict() for c in resource.get_columns()],
        "filters": [f.to_dict() for f in resource.get_filters()],
        "actions": [a.to_dict() for a in resource.get_actions() if a.is_visible(ctx)],
        **get_frontend_capabilities(manager, resource).to_dict(),
    }

    if Capability.EXPORTABLE in caps:
        data["exportable"] = data["exportable"] and bool(resource.is_exportable())
    if Capability.SORTABLE in caps:
        data["sortable_fields"] = list(resource.get_sortable_fields())
    if Capability.FILTERABLE in caps:
        data["filterable_fields"] = list(resource.get_filterable_fields())
    if Capability.SEARCHABLE in caps:
        data["searchable_fields"] = list(resource.get_searchable_fields())
    if Capability.DEFAULT_ORDER in caps:
        field, direction = resource.get_default_order()
        data["default_order"] = {"field": field, "direction": direction}

    return data
