"""
ResourceManager: registry de resources e páginas.

Instância explícita (sem singleton global): a aplicação cria o manager,
registra os resources no startup e o injeta no service e nas rotas.
Testes criam managers isolados.
"""

from __future__ import annotations

import logging
import threading

from adminkit.admin.capabilities import Capability, detect_capabilities
from adminkit.admin.fields import is_safe_identifier
from adminkit.admin.pages import Page
from adminkit.admin.resource import Resource
from adminkit.exceptions import RegistrationError

logger = logging.getLogger("adminkit.admin")


class ResourceManager:
    """
    Registry de resources e páginas customizadas.

    - Registro acontece no startup; não existe desregistro.
    - Slug é único entre resources e é validado como identificador SQL.
    - Leituras retornam cópias: alterar a lista retornada não afeta o registry.

    Exemplo:
        manager = ResourceManager()
        manager.register(ProductResource())
        manager.register_page(Page("Dashboard", "dashboard"))
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._resources: list[Resource] = []
        self._pages: list[Page] = []
        self._capabilities: dict[str, frozenset[Capability]] = {}

    def register(self, resource: Resource) -> Resource:
        """
        Registra um resource.

        Raises:
            RegistrationError: slug vazio, inválido ou duplicado; nome de
                campo que não é identificador SQL seguro.
        """
        slug = resource.slug
        if not slug or not is_safe_identifier(slug):
            raise RegistrationError(
                f"Invalid resource slug {slug!r} on {type(resource).__name__}: "
                "slugs are table names and must match [A-Za-z_][A-Za-z0-9_]*",
                slug=slug or None,
            )

        for f in resource.get_fields():
            if not is_safe_identifier(f.name):
                raise RegistrationError(
                    f"Invalid field name {f.name!r} on resource {slug!r}",
                    slug=slug,
                )

        capabilities = detect_capabilities(resource)

        with self._lock:
            if any(r.slug == slug for r in self._resources):
                raise RegistrationError(f"Resource {slug!r} is already registered", slug=slug)
            self._resources.append(resource)
            self._capabilities[slug] = capabilities

        logger.debug(
            "Registered resource %s (%s)",
            slug,
            ", ".join(sorted(c.value for c in capabilities)) or "no capabilities",
        )
        return resource

    def register_page(self, page: Page) -> Page:
        if not page.slug:
            raise RegistrationError("Page slug cannot be empty")

        with self._lock:
            if any(p.slug == page.slug for p in self._pages):
                raise RegistrationError(f"Page {page.slug!r} is already registered", slug=page.slug)
            self._pages.append(page)

        logger.debug("Registered page %s", page.slug)
        return page

    def get_resources(self) -> list[Resource]:
        with self._lock:
            return list(self._resources)

    def get_pages(self) -> list[Page]:
        with self._lock:
            return list(self._pages)

    def get_resource_by_slug(self, slug: str) -> Resource | None:
        for resource in self.get_resources():
            if resource.slug == slug:
                return resource
        return None

    def get_page_by_slug(self, slug: str) -> Page | None:
        for page in self.get_pages():
            if page.slug == slug:
                return page
        return None

    def get_capabilities(self, slug: str) -> frozenset[Capability]:
        with self._lock:
            return self._capabilities.get(slug, frozenset())

    def has_capability(self, slug: str, capability: Capability) -> bool:
        return capability in self.get_capabilities(slug)

    def get_all_resources_and_pages(self) -> tuple[list[Resource], list[Page]]:
        """Snapshot consistente de resources e páginas."""
        with self._lock:
            return list(self._resources), list(self._pages)

    def __len__(self) -> int:
        with self._lock:
            return len(self._resources)

    def __contains__(self, slug: object) -> bool:
        return isinstance(slug, str) and self.get_resource_by_slug(slug) is not None
