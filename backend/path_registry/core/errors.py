"""Error Hierarchy — typed, categorized exceptions for registry failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Expected validation failures travel as OpResult and are never raised by the core;
      RegistryOperationError exists only for callers that opt in via OpResult.unwrap()
    - Storage errors (DatabaseError) are critical; registry errors are recoverable

Design Decisions:
    - Single hierarchy with PathRegistryError base: one except clause catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - ErrorKind -> ErrorCategory table kept here, next to the exceptions that use it
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from path_registry.core.domain_types import ErrorKind


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
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    CAPACITY = "capacity"
    SNAPSHOT = "snapshot"
    DATABASE = "database"


_KIND_CATEGORIES: dict[ErrorKind, ErrorCategory] = {
    ErrorKind.NOT_AUTHORIZED: ErrorCategory.AUTHORIZATION,
    ErrorKind.INVALID_ORACLE: ErrorCategory.AUTHORIZATION,
    ErrorKind.PATH_NOT_FOUND: ErrorCategory.RESOURCE_NOT_FOUND,
    ErrorKind.PATH_ALREADY_EXISTS: ErrorCategory.CONFLICT,
    ErrorKind.MAX_PATHS_EXCEEDED: ErrorCategory.CAPACITY,
}


def category_for(kind: ErrorKind) -> ErrorCategory:
    """Map an ErrorKind to its category. Unlisted kinds are validation failures."""
    return _KIND_CATEGORIES.get(kind, ErrorCategory.VALIDATION)


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    caller: str | None = None
    owner: str | None = None
    path_id: int | None = None
    debug_info: dict[str, Any] | None = None


class PathRegistryError(Exception):
    """Base exception for all registry errors."""

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

    def to_response(self) -> dict:
        """Convert to a JSON-safe error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "operation": self.context.operation,
                    "caller": self.context.caller,
                    "owner": self.context.owner,
                    "path_id": self.context.path_id,
                },
            }
        }


# ─── Registry Errors (recoverable) ──────────────────────────────

class RegistryOperationError(PathRegistryError):
    """A registry operation was rejected with a specific ErrorKind."""
    def __init__(self, kind: ErrorKind, context: ErrorContext | None = None):
        super().__init__(
            f"Registry operation rejected: {kind.name} ({kind.value})",
            kind.name, category_for(kind),
            ErrorSeverity.WARNING, context,
        )
        self.kind = kind


class SnapshotError(PathRegistryError):
    """A registry snapshot could not be validated or reconstructed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid registry snapshot: {message}",
            "INVALID_SNAPSHOT", ErrorCategory.SNAPSHOT,
            ErrorSeverity.ERROR, context,
        )


# ─── Infrastructure Errors (critical) ───────────────────────────

class DatabaseError(PathRegistryError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation
