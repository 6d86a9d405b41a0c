"""
Centralized exception classes for adminkit.

Exception Hierarchy:
    AdminKitError (base)
    ├── ResourceNotFoundError (404)
    ├── RecordNotFoundError (404)
    ├── ValidationError (400)
    ├── PermissionDenied (403)
    │   └── ExportNotAllowed (403)
    ├── ActionNotSupported (501)
    ├── QueryBuildError (500)
    │   ├── UnsafeIdentifierError
    │   └── UnknownColumnError
    ├── RegistrationError (startup)
    └── MissingDependency (500)

Database errors raised by SQLAlchemy are NOT wrapped: they propagate
as-is and are mapped to 500 by the HTTP layer.

Example:
    from adminkit.exceptions import ValidationError

    raise ValidationError({"name": ["field is required"]})
"""

from __future__ import annotations

from typing import Any

from fastapi import status


# =============================================================================
# Base Exception
# =============================================================================

class AdminKitError(Exception):
    """
    Base exception for all adminkit exceptions.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional error details
        status_code: HTTP status the REST surface answers with
    """

    message: str = "An error occurred"
    code: str = "error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, code={self.code!r})"


# =============================================================================
# Lookup Exceptions
# =============================================================================

class ResourceNotFoundError(AdminKitError):
    """Raised when no resource is registered under the given slug."""

    code = "resource_not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"resource not found: {slug}", details={"slug": slug})


class RecordNotFoundError(AdminKitError):
    """Raised when a row with the given id does not exist in the resource table."""

    code = "record_not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, slug: str, record_id: Any) -> None:
        self.slug = slug
        self.record_id = record_id
        super().__init__(
            f"record {record_id} not found in {slug}",
            details={"slug": slug, "id": record_id},
        )


# =============================================================================
# Validation Exceptions
# =============================================================================

class ValidationError(AdminKitError):
    """
    Field-level validation failures, accumulated per field.

    Example:
        raise ValidationError({
            "name": ["field is required"],
            "email": ["invalid email format"],
        })
    """

    message = "validation failed"
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        errors: dict[str, list[str]],
        message: str | None = None,
    ) -> None:
        self.errors = {field: list(msgs) for field, msgs in errors.items()}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["errors"] = self.errors
        return result


# =============================================================================
# Authorization Exceptions
# =============================================================================

class PermissionDenied(AdminKitError):
    """
    Raised when the caller is not allowed to perform an operation.

    Example:
        raise PermissionDenied(
            "You cannot delete this record",
            permission="crud_items.delete",
            resource="crud_items",
        )
    """

    message = "permission denied"
    code = "permission_denied"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        message: str | None = None,
        permission: str | None = None,
        resource: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if permission:
            details["permission"] = permission
        if resource:
            details["resource"] = resource
        self.permission = permission
        self.resource = resource
        super().__init__(message, details=details)


class ExportNotAllowed(PermissionDenied):
    """Raised when exporting a resource that declares itself not exportable."""

    code = "export_not_allowed"

    def __init__(self, slug: str) -> None:
        super().__init__(f"export is not allowed for {slug}", resource=slug)


# =============================================================================
# Action Exceptions
# =============================================================================

class ActionNotSupported(AdminKitError):
    """Raised when an action is unknown or the resource cannot execute it."""

    code = "action_not_supported"
    status_code = status.HTTP_501_NOT_IMPLEMENTED

    def __init__(self, slug: str, action: str) -> None:
        self.slug = slug
        self.action = action
        super().__init__(
            f"action {action!r} is not supported by {slug}",
            details={"slug": slug, "action": action},
        )


# =============================================================================
# Query Building Exceptions
# =============================================================================

class QueryBuildError(AdminKitError):
    """Base for identifier problems detected before any SQL is executed."""

    code = "query_build_error"


class UnsafeIdentifierError(QueryBuildError):
    """Raised when a table or column name is not a plain SQL identifier."""

    code = "unsafe_identifier"

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"unsafe SQL identifier: {identifier!r}")


class UnknownColumnError(QueryBuildError):
    """Raised when a column is not part of the table's declared column set."""

    code = "unknown_column"

    def __init__(self, table: str, column: str) -> None:
        self.table = table
        self.column = column
        super().__init__(
            f"column {column!r} is not declared on {table}",
            details={"table": table, "column": column},
        )


# =============================================================================
# Configuration Exceptions
# =============================================================================

class RegistrationError(AdminKitError):
    """
    Raised at startup when a resource or page cannot be registered.

    Examples:
        - Duplicate slug
        - Slug or field name that is not a safe SQL identifier
    """

    code = "registration_error"

    def __init__(self, message: str, slug: str | None = None) -> None:
        self.slug = slug
        super().__init__(message, details={"slug": slug} if slug else None)


class MissingDependency(AdminKitError):
    """
    Raised when an optional dependency is required but not installed.

    Example:
        raise MissingDependency("openpyxl", "Excel export")
    """

    code = "missing_dependency"

    def __init__(self, package: str, feature: str | None = None) -> None:
        self.package = package
        self.feature = feature
        msg = f"Missing dependency: {package}"
        if feature:
            msg += f" (required for {feature})"
        msg += f". Install with: pip install {package}"
        super().__init__(msg, details={"package": package})
