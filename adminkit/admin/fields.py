"""
Descritores de campo dos resources.

Um Field descreve uma coluna da tabela do resource: nome (identificador
SQL), tipo semântico, label, obrigatoriedade, default e validadores.
Não tem comportamento além de se autodescrever e validar valores.

Exemplo:
    fields = [
        IDField(),
        TextField("name", "Nome", required=True).add_validator(MaxLengthValidator(100)),
        EmailField("email"),
        SelectField("status", options=[{"value": "on", "label": "Ativo"}]),
        RelationshipField("category_id", related_resource="categories"),
    ]
"""

from __future__ import annotations

import re
from typing import Any

from adminkit.admin.validators import (
    ChoiceValidator,
    EmailValidator,
    FieldValidationError,
    MaxValueValidator,
    MinValueValidator,
    Validator,
)

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_safe_identifier(name: str) -> bool:
    """Nome utilizável como identificador SQL sem escaping."""
    return isinstance(name, str) and bool(IDENTIFIER_RE.match(name))


class Field:
    """
    Campo base.

    Subclasses definem `type` e atributos extras; to_dict() inclui
    tudo que o frontend precisa para renderizar o formulário.
    """

    type: str = "text"

    def __init__(
        self,
        name: str,
        label: str | None = None,
        *,
        required: bool = False,
        default: Any = None,
        readonly: bool = False,
        help_text: str | None = None,
        validators: list[Validator] | None = None,
    ) -> None:
        self.name = name
        self.label = label or name
        self.required = required
        self.default = default
        self.readonly = readonly
        self.help_text = help_text
        self.validators: list[Validator] = list(validators or [])

    def add_validator(self, validator: Validator) -> Field:
        self.validators.append(validator)
        return self

    def validate(self, value: Any) -> list[str]:
        """Executa os validadores e retorna as mensagens de erro."""
        messages: list[str] = []
        for validator in self.validators:
            try:
                validator(value)
            except FieldValidationError as e:
                messages.append(e.message)
        return messages

    def extra(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        data = {
            "name": self.name,
            "type": self.type,
            "label": self.label,
            "required": self.required,
            "readonly": self.readonly,
            "default": self.default,
        }
        if self.help_text:
            data["help_text"] = self.help_text
        data.update(self.extra())
        return data

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


class IDField(Field):
    type = "number"

    def __init__(self, name: str = "id", label: str | None = "ID") -> None:
        super().__init__(name, label, readonly=True)


class TextField(Field):
    type = "text"

    def __init__(self, name: str, label: str | None = None, *, placeholder: str | None = None, **kwargs: Any) -> None:
        super().__init__(name, label, **kwargs)
        self.placeholder = placeholder

    def extra(self) -> dict[str, Any]:
        return {"placeholder": self.placeholder} if self.placeholder else {}


class EmailField(TextField):
    type = "email"

    def __init__(self, name: str = "email", label: str | None = None, **kwargs: Any) -> None:
        super().__init__(name, label, **kwargs)
        self.add_validator(EmailValidator())


class NumberField(Field):
    type = "number"

    def __init__(
        self,
        name: str,
        label: str | None = None,
        *,
        min_value: float | None = None,
        max_value: float | None = None,
        default: Any = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, label, default=default, **kwargs)
        self.min_value = min_value
        self.max_value = max_value
        if min_value is not None:
            self.add_validator(MinValueValidator(min_value))
        if max_value is not None:
            self.add_validator(MaxValueValidator(max_value))

    def extra(self) -> dict[str, Any]:
        return {"min": self.min_value, "max": self.max_value}


class SelectField(Field):
    """Options no formato [{"value": ..., "label": ...}]."""

    type = "select"

    def __init__(
        self,
        name: str,
        label: str | None = None,
        *,
        options: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, label, **kwargs)
        self.options = list(options or [])
        if self.options:
            self.add_validator(ChoiceValidator([o["value"] for o in self.options]))

    def extra(self) -> dict[str, Any]:
        return {"options": self.options}


class TextareaField(Field):
    type = "textarea"

    def __init__(self, name: str, label: str | None = None, *, rows: int = 4, **kwargs: Any) -> None:
        super().__init__(name, label, **kwargs)
        self.rows = rows

    def extra(self) -> dict[str, Any]:
        return {"rows": self.rows}


class BooleanField(Field):
    type = "boolean"

    def __init__(self, name: str, label: str | None = None, *, default: Any = False, **kwargs: Any) -> None:
        super().__init__(name, label, default=default, **kwargs)


class DateTimeField(Field):
    type = "datetime"


class DateField(Field):
    type = "date"


class RelationshipField(Field):
    """
    Referência a outro resource.

    O valor armazenado é o id do registro relacionado; na leitura o
    repository anexa o registro completo em `<name>_data`.
    """

    type = "relationship"

    def __init__(
        self,
        name: str,
        label: str | None = None,
        *,
        related_resource: str,
        display_field: str = "name",
        **kwargs: Any,
    ) -> None:
        super().__init__(name, label, **kwargs)
        self.related_resource = related_resource
        self.display_field = display_field

    def extra(self) -> dict[str, Any]:
        return {
            "related_resource": self.related_resource,
            "display_field": self.display_field,
        }


class FileField(Field):
    type = "file"

    def __init__(
        self,
        name: str,
        label: str | None = None,
        *,
        allowed_types: list[str] | None = None,
        max_size: int = 10 * 1024 * 1024,  # 10MB
        **kwargs: Any,
    ) -> None:
        super().__init__(name, label, **kwargs)
        self.allowed_types = list(allowed_types or [])
        self.max_size = max_size

    def extra(self) -> dict[str, Any]:
        return {"allowed_types": self.allowed_types, "max_size": self.max_size}
