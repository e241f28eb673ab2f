"""Error Hierarchy - typed, categorized exceptions for every Garante failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are local, synchronous and non-retryable
    - A raised domain error always means the operation was a no-op
    - to_response() produces the REST envelope; no internal details leak

Design Decisions:
    - Single hierarchy with GaranteError base: one FastAPI handler catches all
    - ErrorContext as dataclass: entity ids for observability without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Entity context attached to an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    guarantee_id: str | None = None
    dispute_id: str | None = None
    restitution_id: str | None = None
    debug_info: dict[str, Any] | None = None


class GaranteError(Exception):
    """Base exception for all Garante errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "user_id": self.context.user_id,
                    "guarantee_id": self.context.guarantee_id,
                    "dispute_id": self.context.dispute_id,
                    "restitution_id": self.context.restitution_id,
                },
            }
        }


# ─── Authorization (401/403) ─────────────────────────────────────

class UnauthenticatedError(GaranteError):
    """No resolvable caller identity on the request."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A valid caller identity is required",
            "UNAUTHENTICATED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 401,
        )


class UnauthorizedError(GaranteError):
    """Wrong actor for the action."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ForbiddenError(GaranteError):
    """Actor is valid but a business rule forbids the action."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


# ─── State rules (409/422) ───────────────────────────────────────

class InvalidTransitionError(GaranteError):
    """Current state does not permit the requested move."""
    def __init__(
        self, entity: str, current: str, target: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{entity} cannot move from '{current}' to '{target}'",
            "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.entity = entity
        self.current = current
        self.target = target


class AlreadyExistsError(GaranteError):
    """Entity already exists where only one is allowed."""
    def __init__(
        self, message: str, code: str = "ALREADY_EXISTS",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class DisputeAlreadyActiveError(AlreadyExistsError):
    """Guarantee already has a pending or in-review dispute."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Guarantee already has an active dispute",
            "DISPUTE_ALREADY_ACTIVE", context,
        )


class AlreadyResolvedError(GaranteError):
    """Dispute already carries a verdict."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Dispute has already been resolved",
            "ALREADY_RESOLVED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class AlreadyConsentedError(GaranteError):
    """Party has already given consent."""
    def __init__(self, party: str, context: ErrorContext | None = None):
        super().__init__(
            f"Consent already provided by {party}",
            "ALREADY_CONSENTED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.party = party


class ExpiredError(GaranteError):
    """Time-based invalidation (guarantee or invitation past expires_at)."""
    def __init__(self, entity: str, context: ErrorContext | None = None):
        super().__init__(
            f"{entity} has expired",
            "EXPIRED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )


class NotYetResolvableError(GaranteError):
    """Dispute cooling-off window has not elapsed."""
    def __init__(
        self, business_days: int, required: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Dispute cannot be resolved yet: {business_days}/{required} "
            f"business days elapsed without a defense",
            "NOT_YET_RESOLVABLE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )
        self.business_days = business_days
        self.required = required


class ConsentRequiredError(GaranteError):
    """Both parties must consent first."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Both parties must consent before completion",
            "CONSENT_REQUIRED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )


class InputValidationError(GaranteError):
    """Malformed or missing input."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class ResourceNotFoundError(GaranteError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (5xx / conflicts) ─────────────────────

class DatabaseError(GaranteError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ConcurrencyError(GaranteError):
    """Concurrent modification detected; the losing write was rolled back."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
