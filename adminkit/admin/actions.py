"""
Ações de resource.

Os built-ins (create, edit, delete, view, restore, force_delete) são
tratados pelo próprio engine. Qualquer outra ação é customizada e exige
que o resource implemente ActionExecutor.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from adminkit.admin.fields import Field
    from adminkit.admin.resource import RequestContext


BUILTIN_ACTIONS = frozenset({"create", "edit", "delete", "view", "restore", "force_delete"})


class Action:
    """
    Descritor de ação.

    Exemplo:
        Action(
            "reset_values",
            "Resetar valores",
            icon="refresh",
            confirm="Resetar os itens selecionados?",
            bulk=True,
        )
    """

    def __init__(
        self,
        name: str,
        label: str | None = None,
        *,
        primary: bool = False,
        icon: str | None = None,
        color: str | None = None,
        confirm: str | None = None,
        permission: str | None = None,
        bulk: bool = False,
        form_fields: list[Field] | None = None,
        visible: Callable[[RequestContext], bool] | None = None,
    ) -> None:
        self.name = name
        self.label = label or name
        self.primary = primary
        self.icon = icon
        self.color = color
        self.confirm = confirm
        self.permission = permission
        self.bulk = bulk
        self.form_fields = list(form_fields or [])
        self._visible = visible

    @property
    def is_builtin(self) -> bool:
        return self.name in BUILTIN_ACTIONS

    def is_visible(self, ctx: RequestContext | None) -> bool:
        if self._visible is None:
            return True
        return bool(self._visible(ctx))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "primary": self.primary,
            "bulk": self.bulk,
        }
        for key in ("icon", "color", "confirm", "permission"):
            value = getattr(self, key)
            if value:
                data[key] = value
        if self.form_fields:
            data["form_fields"] = [f.to_dict() for f in self.form_fields]
        return data

    def __repr__(self) -> str:
        return f"<Action {self.name}>"


def create_action() -> Action:
    return Action("create", "Create", primary=True, icon="plus")


def edit_action() -> Action:
    return Action("edit", "Edit", icon="edit")


def delete_action() -> Action:
    return Action("delete", "Delete", icon="delete", color="danger", confirm="Delete this record?")


def view_action() -> Action:
    return Action("view", "View", icon="eye")


def restore_action() -> Action:
    return Action("restore", "Restore", icon="undo")


def force_delete_action() -> Action:
    return Action(
        "force_delete",
        "Force Delete",
        icon="delete",
        color="danger",
        confirm="Permanently delete this record? This cannot be undone.",
    )


def default_actions() -> list[Action]:
    """Ações padrão de um resource CRUD."""
    return [create_action(), edit_action(), delete_action(), view_action()]
