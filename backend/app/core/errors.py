"""Error Hierarchy — typed, categorized exceptions for all Ghibli Favorites failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) fail before any storage access
    - PersistenceUnavailableError never reaches a caller: the backend selector
      turns it into the file fallback transition
    - to_response() produces the REST envelope; no internal details leaked
    - ErrorContext is stamped at the raise site (stores, services): backend, user_id, open_id

Design Decisions:
    - Single hierarchy with GhibliFavoritesError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


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
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    open_id: str | None = None
    user_id: int | None = None
    backend: str | None = None
    user_message: str | None = None


class GhibliFavoritesError(Exception):
    """Base exception for all Ghibli Favorites errors."""

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
                    "backend": self.context.backend,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidArgumentError(GhibliFavoritesError):
    """Precondition violated — raised before touching storage."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ARGUMENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class UnauthorizedError(GhibliFavoritesError):
    """Protected operation invoked without a resolved identity."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Please login (10001)",
            "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class PersistenceUnavailableError(GhibliFavoritesError):
    """Relational connection could not be established."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Relational store unavailable: {message}",
            "PERSISTENCE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )


class PersistenceFailureError(GhibliFavoritesError):
    """Query or write failed on an already-available backend."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Persistence {operation} failed: {message}",
            "PERSISTENCE_FAILURE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
