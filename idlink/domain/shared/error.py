"""Error hierarchy for idlink.

Error layers:
- IdLinkError: Base class for all idlink errors
- DomainError: Business rule violations, validation failures (4xx responses)
- InfrastructureError: System-level failures like storage/network issues (503 responses)

These errors are mapped to HTTP responses by the global exception handler in app.py.
"""


class IdLinkError(Exception):
    """Base class for all idlink errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(IdLinkError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Input validation failed. User-correctable, never retried."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


class ConflictError(DomainError):
    """Resource already exists or version conflict."""


class AuthorizationError(DomainError):
    """Caller not authenticated or not authorized for this operation."""


class PolicyBlockedError(DomainError):
    """Organizational policy forbids the operation (e.g. unauthorized guest)."""


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(IdLinkError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Storage backend (database) is unavailable or rejected the statement."""


class ExternalServiceError(InfrastructureError):
    """External service (directory, mail provider) is unavailable or failed."""


class DirectoryLookupError(ExternalServiceError):
    """The corporate directory could not resolve an identity."""


class NotificationError(ExternalServiceError):
    """Rendering or sending a notification failed. Never surfaced to users."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""


class PersistenceError(InfrastructureError):
    """A link could not be stored.

    When the compensating update after an insert conflict also fails,
    `original` holds the insert error and the update error is the
    chained `__cause__`.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message, code=code or "persistence_error")
        self.original = original
