"""Error Hierarchy — typed, categorized exceptions for all Gatherwise failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope consumed by the dashboard
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with GatherwiseError base: one FastAPI handler renders every failure
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - TransactionFailureError reports the driver message; the full cause (SQL, parameters)
      stays on `cause` for logs only
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
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    organization_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class GatherwiseError(Exception):
    """Base exception for all Gatherwise errors."""

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
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "user_id": self.context.user_id,
                    "organization_id": self.context.organization_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationFailedError(GatherwiseError):
    """Request payload failed a domain validation rule."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class UnauthorizedError(GatherwiseError):
    """Caller could not be identified."""
    def __init__(self, message: str = "Unauthorized", context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(GatherwiseError):
    """Caller is known but lacks the capability for this organization."""
    def __init__(self, message: str = "Forbidden", context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(GatherwiseError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(GatherwiseError):
    """Write would violate a uniqueness rule (duplicate email, name...)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class AccountLockedError(GatherwiseError):
    """Too many failed logins; account locked until a point in time."""
    def __init__(self, locked_until: datetime, context: ErrorContext | None = None):
        super().__init__(
            f"Account locked until {locked_until.isoformat()}",
            "ACCOUNT_LOCKED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 423,
        )
        self.locked_until = locked_until


# ─── Infrastructure Errors (500-level) ──────────────────────────

class GenerationExhaustedError(GatherwiseError):
    """No free organization identifier found within the attempt budget."""
    def __init__(self, attempts: int, context: ErrorContext | None = None):
        super().__init__(
            f"Unable to generate unique organization ID after {attempts} attempts",
            "GENERATION_EXHAUSTED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.attempts = attempts


def _driver_message(cause: Exception) -> str:
    """Driver text only: SQLAlchemy's str() appends the statement and bound parameters."""
    orig = getattr(cause, "orig", None)
    return str(orig if orig is not None else cause)


class TransactionFailureError(GatherwiseError):
    """A write inside an atomic block failed; everything was rolled back."""
    def __init__(
        self, operation: str, cause: Exception | None = None,
        context: ErrorContext | None = None,
    ):
        detail = _driver_message(cause) if cause else "unknown failure"
        super().__init__(
            f"{operation} failed: {detail}",
            "TRANSACTION_FAILURE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
        self.cause = cause


class DatabaseError(GatherwiseError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ExternalServiceError(GatherwiseError):
    """Third-party API call (AI completion) failed."""
    def __init__(
        self,
        message: str,
        service_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"AI service error ({service_error_type}): {message}",
            "EXTERNAL_SERVICE_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.service_error_type = service_error_type
