"""Error Hierarchy - typed, categorized exceptions for all Funko Store failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Request-level errors are recoverable; storage and connection errors are logged
      server side and rendered with a fixed user message
    - user_message is what the client sees; message is what the operator logs
    - No OS-level details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with FunkoStoreError base: the dispatcher catches the base
      class once and turns it into a response
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CONFLICT = "conflict"
    RESOURCE_NOT_FOUND = "resource_not_found"
    STORAGE = "storage"
    CONNECTION = "connection"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user: str | None = None
    funko_id: int | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class FunkoStoreError(Exception):
    """Base exception for all Funko Store errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    @property
    def user_message(self) -> str:
        return self.context.user_message or self.message

    def log_extra(self) -> dict:
        """Fields surfaced by the JSON log formatter."""
        return {
            "error_code": self.code,
            "usuario": self.context.user,
            "funko_id": self.context.funko_id,
        }


# ─── Request Errors ─────────────────────────────────────────────

class FrameDecodeError(FunkoStoreError):
    """A complete frame arrived but its payload is not a JSON object."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or "Could not parse request JSON."
        super().__init__(
            message, "MALFORMED_MESSAGE", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, ctx,
        )


class RequestValidationError(FunkoStoreError):
    """Request is missing a field its kind requires, or a field is invalid."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context,
        )
        self.field = field


class UnsupportedOperationError(FunkoStoreError):
    """Request kind is not one of the known operations."""
    def __init__(self, kind: object, context: ErrorContext | None = None):
        super().__init__(
            f"Unsupported operation '{kind}'.",
            "UNSUPPORTED_OPERATION", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context,
        )
        self.kind = kind


class FunkoConflictError(FunkoStoreError):
    """An add targeted an id that already exists in the user's collection."""
    def __init__(self, user: str, funko_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext(user=user, funko_id=funko_id)
        super().__init__(
            f"Funko with ID {funko_id} already exists for {user}.",
            "FUNKO_ALREADY_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx,
        )


class FunkoNotFoundError(FunkoStoreError):
    """Target id does not exist in the user's collection."""
    def __init__(
        self, user: str, funko_id: int, message: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext(user=user, funko_id=funko_id)
        super().__init__(
            message or f"No Funko with ID {funko_id} found for {user}.",
            "FUNKO_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx,
        )


# ─── Infrastructure Errors ──────────────────────────────────────

class StorageUnavailableError(FunkoStoreError):
    """User directory could not be created or listed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or "Error reading funkos for user."
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_UNAVAILABLE", ErrorCategory.STORAGE,
            ErrorSeverity.ERROR, ctx,
        )
        self.operation = operation


class StorageWriteError(FunkoStoreError):
    """A record file could not be written or removed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "STORAGE_WRITE_FAILED", ErrorCategory.STORAGE,
            ErrorSeverity.ERROR, context,
        )


class ConnectionClosedError(FunkoStoreError):
    """Peer closed the connection before a complete response arrived."""
    def __init__(self, message: str = "Connection closed before a response arrived."):
        super().__init__(
            message, "CONNECTION_CLOSED", ErrorCategory.CONNECTION,
            ErrorSeverity.ERROR,
        )
