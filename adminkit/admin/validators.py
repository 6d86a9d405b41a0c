"""
Validadores de campo dos resources.

Cada validador é um callable que recebe o valor e levanta
FieldValidationError quando inválido. Os Fields agregam validadores
e convertem as falhas em mensagens (ver Field.validate).

validate_resource_data() roda a validação declarada de todos os
campos de um resource contra um payload e retorna os erros por campo.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from adminkit.admin.resource import Resource


REQUIRED_MESSAGE = "This field is required."
EMAIL_MESSAGE = "Enter a valid email address."


class FieldValidationError(Exception):
    """Falha de um validador individual."""

    def __init__(self, message: str, code: str = "invalid") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


def is_empty(value: Any) -> bool:
    """None, string em branco ou coleção vazia."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


# =============================================================================
# Validadores Base
# =============================================================================

class Validator(ABC):
    """Classe base para validadores."""

    message: str = "Invalid value."
    code: str = "invalid"

    @abstractmethod
    def __call__(self, value: Any) -> Any:
        """Valida o valor."""
        ...

    def fail(self, message: str | None = None) -> None:
        """Levanta erro de validação."""
        raise FieldValidationError(message or self.message, self.code)


@dataclass
class RequiredValidator(Validator):
    """Valor presente e não vazio. Zero e False são valores válidos."""

    message: str = REQUIRED_MESSAGE
    code: str = "required"

    def __call__(self, value: Any) -> Any:
        if is_empty(value):
            self.fail()
        return value


@dataclass
class EmailValidator(Validator):
    """Valida formato de email."""

    message: str = EMAIL_MESSAGE
    code: str = "invalid_email"

    def __call__(self, value: Any) -> Any:
        if value is None or value == "":
            return value

        if not isinstance(value, str):
            self.fail("Email must be a string.")

        if "@" not in value:
            self.fail()

        return value


@dataclass
class RegexValidator(Validator):
    """Valida contra expressão regular."""

    pattern: str
    message: str = "Value does not match the required pattern."
    code: str = "invalid_format"
    flags: int = 0

    def __post_init__(self) -> None:
        self._regex = re.compile(self.pattern, self.flags)

    def __call__(self, value: Any) -> Any:
        if value is None or value == "":
            return value

        if not self._regex.match(str(value)):
            self.fail()

        return value


@dataclass
class MinLengthValidator(Validator):
    """Valida comprimento mínimo."""

    min_length: int
    message: str = "Ensure this value has at least {min_length} characters."
    code: str = "min_length"

    def __call__(self, value: Any) -> Any:
        if value is None:
            return value

        if not isinstance(value, str):
            self.fail("This validator only applies to strings.")

        if len(value) < self.min_length:
            self.fail(self.message.format(min_length=self.min_length))

        return value


@dataclass
class MaxLengthValidator(Validator):
    """Valida comprimento máximo."""

    max_length: int
    message: str = "Ensure this value has at most {max_length} characters."
    code: str = "max_length"

    def __call__(self, value: Any) -> Any:
        if value is None:
            return value

        if not isinstance(value, str):
            self.fail("This validator only applies to strings.")

        if len(value) > self.max_length:
            self.fail(self.message.format(max_length=self.max_length))

        return value


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class MinValueValidator(Validator):
    """Valida valor mínimo."""

    min_value: float
    message: str = "Ensure this value is greater than or equal to {min_value}."
    code: str = "min_value"

    def __call__(self, value: Any) -> Any:
        if value is None or value == "":
            return value

        number = _as_number(value)
        if number is None:
            self.fail("A valid number is required.")
        if number < self.min_value:
            self.fail(self.message.format(min_value=self.min_value))

        return value


@dataclass
class MaxValueValidator(Validator):
    """Valida valor máximo."""

    max_value: float
    message: str = "Ensure this value is less than or equal to {max_value}."
    code: str = "max_value"

    def __call__(self, value: Any) -> Any:
        if value is None or value == "":
            return value

        number = _as_number(value)
        if number is None:
            self.fail("A valid number is required.")
        if number > self.max_value:
            self.fail(self.message.format(max_value=self.max_value))

        return value


@dataclass
class ChoiceValidator(Validator):
    """Valida que o valor está entre as opções permitidas."""

    choices: list[Any] = field(default_factory=list)
    message: str = "Select a valid choice. {value} is not one of the available choices."
    code: str = "invalid_choice"

    def __call__(self, value: Any) -> Any:
        if value is None or value == "":
            return value

        allowed = {str(c) for c in self.choices}
        if str(value) not in allowed:
            self.fail(self.message.format(value=value))

        return value


# =============================================================================
# Validação de payload
# =============================================================================

def validate_resource_data(
    resource: "Resource",
    data: dict[str, Any],
) -> dict[str, list[str]]:
    """
    Valida um payload contra os Fields declarados no resource.

    - Campo obrigatório ausente, None ou vazio gera erro e encerra
      a validação daquele campo.
    - Validadores declarados no campo contribuem suas mensagens.
    - Campos do tipo email são checados quanto à presença de '@'.

    Returns:
        Dict campo -> lista de mensagens. Vazio se o payload é válido.
    """
    errors: dict[str, list[str]] = {}

    for resource_field in resource.get_fields():
        name = resource_field.name
        value = data.get(name)

        if resource_field.required and is_empty(value):
            errors.setdefault(name, []).append(REQUIRED_MESSAGE)
            continue

        messages = resource_field.validate(value)

        if (
            resource_field.type == "email"
            and isinstance(value, str)
            and value != ""
            and "@" not in value
            and EMAIL_MESSAGE not in messages
        ):
            messages.append(EMAIL_MESSAGE)

        if messages:
            errors.setdefault(name, []).extend(messages)

    return errors
