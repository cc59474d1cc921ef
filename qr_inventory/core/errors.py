"""Error Hierarchy — typed, categorized exceptions for all inventory failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Business-rule errors (NOT_FOUND, ALREADY_LENT, ALREADY_EXISTS, UNAUTHORIZED) are never retried
    - StoreError means nothing was committed; SearchIndexError means the registry
      write committed and only the index copy is stale
    - to_response() produces a transport-neutral envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with QrInventoryError base: callers catch one type at the boundary
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - The index failure is named SearchIndexError so it never shadows the builtin IndexError
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    SEARCH_INDEX = "search_index"
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    item_id: str | None = None
    lending_id: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class QrInventoryError(Exception):
    """Base exception for all inventory core errors."""

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
        """Convert to a structured error envelope for the transport layer."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "item_id": self.context.item_id,
                    "lending_id": self.context.lending_id,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Domain Errors ──────────────────────────────────────────────

class ParseError(QrInventoryError):
    """A free-form value could not be converted into a domain type."""
    def __init__(self, kind: str, raw: object, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot parse {raw!r} as {kind}",
            "PARSE_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.kind = kind
        self.raw = raw


class NotFoundError(QrInventoryError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(QrInventoryError):
    """Base for state conflicts."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.CONFLICT, ErrorSeverity.ERROR, context,
        )


class AlreadyLentError(ConflictError):
    """Item (or the QR code it carries) already has an open lending."""
    def __init__(self, item_id: str, qr_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Item '{item_id}' (QR '{qr_id}') is already lent",
            "ALREADY_LENT", context,
        )
        self.item_id = item_id
        self.qr_id = qr_id


class AlreadyExistsError(ConflictError):
    """A row with the same key already exists."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' already exists",
            "ALREADY_EXISTS", context,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class UnauthorizedError(QrInventoryError):
    """Bad, expired or insufficiently privileged credential."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unauthorized: {reason}",
            "UNAUTHORIZED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context,
        )
        self.reason = reason


class ConfigMissingError(QrInventoryError):
    """Secret or TTL for a role is not configured."""
    def __init__(self, role: str, context: ErrorContext | None = None):
        super().__init__(
            f"No credential configuration for role '{role}'",
            "CONFIG_MISSING", ErrorCategory.CONFIGURATION,
            ErrorSeverity.ERROR, context,
        )
        self.role = role


# ─── Infrastructure Errors ──────────────────────────────────────

class StoreError(QrInventoryError):
    """Registry (relational store) operation failed; nothing was committed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Registry {operation} failed: {message}",
            "STORE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation


class SearchIndexError(QrInventoryError):
    """Search index operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Search index {operation} failed: {message}",
            "INDEX_OUT_OF_SYNC", ErrorCategory.SEARCH_INDEX,
            ErrorSeverity.WARNING, context,
        )
        self.operation = operation
