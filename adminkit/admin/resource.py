"""
Resource: classe base dos resources do admin.

Um Resource é uma entidade apoiada em tabela: o `slug` é ao mesmo tempo
o identificador único no registry e o nome da tabela SQL. O resto do
comportamento é opt-in via capabilities (ver adminkit.admin.capabilities):
basta implementar o método correspondente na subclasse.

Exemplo:
    class ProductResource(Resource):
        title = "Produtos"
        slug = "products"

        def get_fields(self):
            return [IDField(), TextField("name", required=True)]

        def get_sortable_fields(self):          # Sortable
            return ["name"]

        async def before_create(self, ctx, data):   # CreateHook
            data["name"] = data["name"].strip()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from adminkit.admin.actions import Action, default_actions
from adminkit.admin.fields import Field, RelationshipField
from adminkit.admin.table import Column, Filter

if TYPE_CHECKING:
    from fastapi import Request


@dataclass
class RequestContext:
    """
    Contexto da chamada: quem está pedindo e a partir de qual request.

    `user` é o objeto colocado em request.state.user pelo middleware de
    autenticação da aplicação (ou None para chamadas anônimas/internas).
    """

    user: Any = None
    request: "Request | None" = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FrontendCapabilities:
    """Quais operações a UI deve oferecer para o resource."""

    editable: bool = True
    creatable: bool = True
    viewable: bool = True
    deletable: bool = True
    exportable: bool = True

    def to_dict(self) -> dict[str, bool]:
        return {
            "editable": self.editable,
            "creatable": self.creatable,
            "viewable": self.viewable,
            "deletable": self.deletable,
            "exportable": self.exportable,
        }


class Resource:
    """
    Classe base para um resource apoiado em tabela.

    Subclasses devem definir `title`, `slug` e `get_fields()`.
    O slug nunca muda depois do registro: é o nome da tabela.
    """

    title: str = ""
    slug: str = ""

    # -- Metadados (override nos subclasses) --

    def get_fields(self) -> list[Field]:
        return []

    def get_actions(self) -> list[Action]:
        return default_actions()

    def get_columns(self) -> list[Column]:
        """Por padrão uma coluna por campo, sem ordenação."""
        return [Column(f.name, f.label, type=f.type) for f in self.get_fields()]

    def get_filters(self) -> list[Filter]:
        return []

    def get_readonly_fields(self) -> list[str]:
        return [f.name for f in self.get_fields() if f.readonly]

    # -- Helpers --

    def get_field(self, name: str) -> Field | None:
        for f in self.get_fields():
            if f.name == name:
                return f
        return None

    def get_field_names(self) -> list[str]:
        return [f.name for f in self.get_fields()]

    def get_action(self, name: str) -> Action | None:
        for action in self.get_actions():
            if action.name == name:
                return action
        return None

    def get_relationship_fields(self) -> list[RelationshipField]:
        return [f for f in self.get_fields() if isinstance(f, RelationshipField)]

    def get_form_fields(self) -> list[Field]:
        """Campos editáveis no formulário (exclui somente-leitura)."""
        readonly = set(self.get_readonly_fields())
        return [f for f in self.get_fields() if f.name not in readonly]

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.slug}>"
