"""Páginas customizadas (dashboards, relatórios) registradas ao lado dos resources."""

from __future__ import annotations

from typing import Any


class Page:
    def __init__(
        self,
        title: str,
        slug: str,
        path: str | None = None,
        *,
        icon: str | None = None,
        visible: bool = True,
        permissions: list[str] | None = None,
    ) -> None:
        self.title = title
        self.slug = slug
        self.path = path or f"/{slug}"
        self.icon = icon
        self.visible = visible
        self.permissions = list(permissions or [])

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "page",
            "title": self.title,
            "slug": self.slug,
            "path": self.path,
            "icon": self.icon,
            "visible": self.visible,
            "permissions": self.permissions,
        }

    def __repr__(self) -> str:
        return f"<Page {self.slug}>"
