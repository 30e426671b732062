"""
Custom exceptions for Report Builder.

Provides a hierarchy of exceptions that map to HTTP status codes
and include structured error information.

Evaluation problems (malformed dates, non-numeric operands, division
by zero) are deliberately absent: the evaluator turns them into empty
cells instead of raising.
"""

from typing import Any


class ReportBuilderException(Exception):
    """
    Base exception for all Report Builder errors.

    All custom exceptions should inherit from this class.
    """

    # Default status code for base exception
    status_code = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# HTTP 400 - Bad Request Errors
# =============================================================================


class BadRequestError(ReportBuilderException):
    """Invalid request parameters or payload."""

    status_code = 400


class FieldNotCalculatedError(BadRequestError):
    """Expression evaluation was requested for a raw field."""

    def __init__(self, key: str) -> None:
        super().__init__(
            message=f"Field '{key}' is not a calculated field",
            code="FIELD_NOT_CALCULATED",
            details={"key": key},
        )


class UnsupportedExportFormatError(BadRequestError):
    """Export format is not one of the supported encoders."""

    def __init__(self, export_format: str, supported: list[str]) -> None:
        super().__init__(
            message=f"Unsupported export format: {export_format}",
            code="UNSUPPORTED_EXPORT_FORMAT",
            details={"format": export_format, "supported": supported},
        )


# =============================================================================
# HTTP 403 - Authorization Errors
# =============================================================================


class ProtectedFieldError(ReportBuilderException):
    """Built-in fields cannot be removed."""

    status_code = 403

    def __init__(self, key: str) -> None:
        super().__init__(
            message=f"Field '{key}' is a built-in field and cannot be deleted",
            code="PROTECTED_FIELD",
            details={"key": key},
        )


# =============================================================================
# HTTP 404 - Not Found Errors
# =============================================================================


class NotFoundError(ReportBuilderException):
    """Requested resource not found."""

    status_code = 404

    def __init__(
        self,
        resource: str,
        identifier: str | None = None,
    ) -> None:
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} '{identifier}' not found"

        super().__init__(
            message=message,
            code="NOT_FOUND",
            details={"resource": resource, "identifier": identifier},
        )


class FieldNotFoundError(NotFoundError):
    """Field not found."""

    def __init__(self, key: str | None = None) -> None:
        super().__init__(resource="Field", identifier=key)


# =============================================================================
# HTTP 409 - Conflict Errors
# =============================================================================


class ConflictError(ReportBuilderException):
    """Resource conflict."""

    status_code = 409

    def __init__(
        self,
        message: str,
        resource: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="CONFLICT",
            details={"resource": resource},
        )


class DuplicateFieldKeyError(ConflictError):
    """A field with the same key already exists."""

    def __init__(self, key: str) -> None:
        super().__init__(
            message=f"Field key '{key}' already exists",
            resource="Field",
        )
        self.code = "DUPLICATE_FIELD_KEY"
        self.details["key"] = key


# =============================================================================
# HTTP 422 - Unprocessable Entity
# =============================================================================


class UnprocessableEntityError(ReportBuilderException):
    """Request cannot be processed."""

    status_code = 422


class ValidationError(UnprocessableEntityError):
    """Field definition validation failed."""

    def __init__(
        self,
        message: str = "Validation error",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"errors": errors or []},
        )


class RequiredFieldError(UnprocessableEntityError):
    """Required attribute of a field definition is missing."""

    def __init__(self, attribute: str) -> None:
        super().__init__(
            message=f"Please provide {attribute}",
            code="REQUIRED_FIELD",
            details={"attribute": attribute},
        )


class UnknownFieldReferenceError(UnprocessableEntityError):
    """Formula references a field key that does not exist."""

    def __init__(self, key: str, missing: list[str]) -> None:
        super().__init__(
            message=f"Formula of '{key}' references unknown fields: {', '.join(missing)}",
            code="UNKNOWN_FIELD_REFERENCE",
            details={"key": key, "missing": missing},
        )


class CircularReferenceError(UnprocessableEntityError):
    """Formula references itself directly or through other fields."""

    def __init__(self, key: str) -> None:
        super().__init__(
            message=f"Circular reference detected in formula of '{key}'",
            code="CIRCULAR_REFERENCE",
            details={"key": key},
        )


# =============================================================================
# HTTP 428 - Precondition Required
# =============================================================================


class DeletionNotConfirmedError(ReportBuilderException):
    """Destructive action requested without explicit confirmation."""

    status_code = 428

    def __init__(self, key: str) -> None:
        super().__init__(
            message=f"Delete field {key}? Confirmation is required",
            code="CONFIRMATION_REQUIRED",
            details={"key": key},
        )


# =============================================================================
# HTTP 500 - Internal Server Errors
# =============================================================================


class InternalError(ReportBuilderException):
    """Internal server error."""

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="INTERNAL_ERROR",
        )
        self.original_error = original_error


class FieldStoreError(InternalError):
    """User field definitions could not be persisted."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message=message, original_error=original_error)
        self.code = "FIELD_STORE_ERROR"
