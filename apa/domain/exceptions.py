"""Domain exceptions for the APA back office.

Business rule violations raised by the workflow machine and services.
The presentation layer maps error_code to an HTTP status in
apa.core.exception_handlers; nothing here knows about HTTP.
"""

from typing import Any


class ApaException(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, record_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body: error, message, details."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(ApaException):
    """Raised when input validation fails (missing field, malformed phone, missing reason)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize with message, optional field name and per-field errors.

        Args:
            message: Description of the validation failure.
            field: Optional field that failed validation.
            errors: Optional list of {field, message} entries (e.g. from pydantic).
        """
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if errors:
            details["errors"] = errors
        self.field = field
        super().__init__(message, "VALIDATION_ERROR", details)


class UnauthorizedException(ApaException):
    """Raised when the actor lacks the role required for the operation."""

    def __init__(
        self,
        action: str | None = None,
        resource: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class AuthenticationException(UnauthorizedException):
    """Raised when no valid identity is present (missing, invalid or expired token)."""

    def __init__(self, message: str = "Authentication required") -> None:
        ApaException.__init__(self, message, "AUTHENTICATION_ERROR")


class IllegalTransitionException(ApaException):
    """Raised when the target status is not reachable from the current one."""

    def __init__(
        self, workflow: str, from_state: str | None, to_state: str
    ) -> None:
        """Initialize with the workflow name and the rejected edge.

        Args:
            workflow: Workflow name (e.g. 'lead', 'pet_listing').
            from_state: Current status of the record (None when unset).
            to_state: Requested target status.
        """
        super().__init__(
            f"Cannot move {workflow} from {from_state!r} to {to_state!r}",
            "ILLEGAL_TRANSITION",
            {"workflow": workflow, "from": from_state, "to": to_state},
        )


class ResourceNotFoundException(ApaException):
    """Raised when a requested record does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class DuplicateActiveLeadException(ApaException):
    """Raised when the applicant already has an active lead in the same scope."""

    def __init__(self, lead_id: str, status: str) -> None:
        super().__init__(
            "An active application already exists for this applicant",
            "DUPLICATE_ACTIVE_LEAD",
            {"lead_id": lead_id, "status": status},
        )


class RecordAlreadyExistsException(ApaException):
    """Raised when creating a record whose id is already taken."""

    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(
            f"Record already exists: {collection}/{record_id}",
            "RECORD_ALREADY_EXISTS",
            {"collection": collection, "record_id": record_id},
        )


class FeatureDisabledException(ApaException):
    """Raised when a site section is switched off in flags/global."""

    def __init__(self, feature: str) -> None:
        super().__init__(
            f"Feature disabled: {feature}",
            "FEATURE_DISABLED",
            {"feature": feature},
        )


class ConfigurationException(ApaException):
    """Raised when the store rejects a query for a setup reason (e.g. missing composite index).

    Not retryable; an operator has to act (create the index, fix credentials).
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "CONFIGURATION_PENDING", details)


class TransientIOException(ApaException):
    """Raised on network failures, timeouts or store unavailability. Retry is reasonable."""

    def __init__(self, message: str = "Service temporarily unavailable", operation: str | None = None) -> None:
        details = {"operation": operation, "retryable": True} if operation else {"retryable": True}
        super().__init__(message, "SERVICE_UNAVAILABLE", details)
