"""
Resources de exemplo: categorias e itens CRUD.

CrudItemResource exercita quase todas as capabilities: whitelists,
ordem padrão, hooks, ações customizadas e navegação.
"""

from __future__ import annotations

import logging
from typing import Any

from adminkit.admin import (
    Action,
    Column,
    DateTimeField,
    Filter,
    IDField,
    MaxLengthValidator,
    RelationshipField,
    RequestContext,
    Resource,
    TextareaField,
    TextField,
    create_action,
    delete_action,
    edit_action,
    force_delete_action,
    restore_action,
    view_action,
)
from adminkit.repository import ResourceRepository, TableSchema

logger = logging.getLogger("example.resources")


class CategoryResource(Resource):
    title = "Categories"
    slug = "categories"

    def get_fields(self):
        return [
            IDField(),
            TextField("name", "Name", required=True),
            DateTimeField("created_at", "Created at", readonly=True),
            DateTimeField("updated_at", "Updated at", readonly=True),
        ]

    def get_searchable_fields(self) -> list[str]:
        return ["name"]

    def get_navigation_icon(self) -> str:
        return "folder"

    def get_navigation_group(self) -> str:
        return "Catalog"


class CrudItemResource(Resource):
    """Itens com nome/valor, agrupados por categoria."""

    title = "CRUD Items"
    slug = "crud_items"

    def __init__(self) -> None:
        self.repository: ResourceRepository | None = None

    def bind(self, repository: ResourceRepository) -> None:
        """Dá ao resource acesso ao repository para as ações customizadas."""
        self.repository = repository

    # -- Metadados --

    def get_fields(self):
        return [
            IDField(),
            TextField("name", "Name", required=True).add_validator(MaxLengthValidator(100)),
            TextField("value", "Value", required=True),
            TextareaField("remark", "Remark"),
            RelationshipField("category_id", "Category", related_resource="categories"),
            DateTimeField("created_at", "Created at", readonly=True),
            DateTimeField("updated_at", "Updated at", readonly=True),
        ]

    def get_columns(self) -> list[Column]:
        return [
            Column("id", "ID", type="number", width=80, sortable=True),
            Column("name", "Name", sortable=True),
            Column("value", "Value", sortable=True),
            Column("remark", "Remark"),
            Column("created_at", "Created at", type="datetime", sortable=True),
        ]

    def get_filters(self) -> list[Filter]:
        return [
            Filter("name", "Name"),
            Filter("value", "Value"),
            Filter("created_at", "Created at", type="date_range"),
        ]

    def get_actions(self) -> list[Action]:
        return [
            create_action(),
            edit_action(),
            delete_action(),
            view_action(),
            restore_action(),
            force_delete_action(),
            Action(
                "reset_values",
                "Reset values",
                icon="refresh",
                confirm="Reset the value of the selected items?",
                bulk=True,
            ),
        ]

    # -- Capabilities --

    def get_searchable_fields(self) -> list[str]:
        return ["name", "value", "remark"]

    def get_filterable_fields(self) -> list[str]:
        return ["name", "value", "remark", "category_id"]

    def get_sortable_fields(self) -> list[str]:
        return ["name", "value", "created_at", "updated_at"]

    def get_default_order(self) -> tuple[str, str]:
        return "created_at", "DESC"

    def get_navigation_icon(self) -> str:
        return "table"

    def get_navigation_group(self) -> str:
        return "Catalog"

    def get_navigation_sort(self) -> int:
        return 10

    async def before_create(self, ctx: RequestContext, data: dict[str, Any]) -> None:
        if isinstance(data.get("name"), str):
            data["name"] = data["name"].strip()

    async def after_create(self, ctx: RequestContext, data: dict[str, Any]) -> None:
        logger.info("crud item %s created", data.get("id"))

    async def run_action(
        self,
        ctx: RequestContext,
        name: str,
        ids: list[Any],
        params: dict[str, Any],
    ) -> dict[str, Any]:
        if self.repository is None:
            raise RuntimeError("CrudItemResource is not bound to a repository")

        schema = TableSchema.from_resource(self)
        affected = 0
        if name == "reset_values":
            value = str(params.get("value", "0"))
            for record_id in ids:
                affected += await self.repository.update(schema, record_id, {"value": value})
        return {"affected": affected}
