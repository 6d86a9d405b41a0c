"""
Metadados de listagem: colunas e filtros.

Apenas renderização. O repository nunca consulta estes objetos;
quem decide o que é filtrável/ordenável são as capabilities do resource.
"""

from __future__ import annotations

from typing import Any


class Column:
    def __init__(
        self,
        name: str,
        label: str | None = None,
        *,
        type: str = "text",
        sortable: bool = False,
        align: str = "left",
        visible: bool = True,
        width: int | None = None,
        sticky: str | None = None,
        formatter: str | None = None,
        enum_map: dict[str, str] | None = None,
        badge_map: dict[str, str] | None = None,
        url_field: str | None = None,
    ) -> None:
        self.name = name
        self.label = label or name
        self.type = type
        self.sortable = sortable
        self.align = align
        self.visible = visible
        self.width = width
        self.sticky = sticky
        self.formatter = formatter
        self.enum_map = dict(enum_map or {})
        self.badge_map = dict(badge_map or {})
        self.url_field = url_field

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "sortable": self.sortable,
            "align": self.align,
            "visible": self.visible,
        }
        optional = {
            "width": self.width,
            "sticky": self.sticky,
            "formatter": self.formatter,
            "enum_map": self.enum_map,
            "badge_map": self.badge_map,
            "url_field": self.url_field,
        }
        data.update({k: v for k, v in optional.items() if v})
        return data


class Filter:
    """Tipos usuais: text, select, boolean, date_range."""

    def __init__(
        self,
        name: str,
        label: str | None = None,
        *,
        type: str = "text",
        options: list[dict[str, Any]] | None = None,
    ) -> None:
        self.name = name
        self.label = label or name
        self.type = type
        self.options = list(options or [])

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "label": self.label, "type": self.type}
        if self.options:
            data["options"] = self.options
        return data
