# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common helpers used across the application: identifier normalization,
# name ordering and the base error class.
# =============================================================================

from typing import Any, Callable, Iterable, TypeVar
from uuid import UUID

T = TypeVar("T")


# =============================================================================
# Identifier Utilities
# =============================================================================

def normalize_id(value: str | UUID | None) -> str | None:
    """
    Normalize an identifier to string format.

    Supabase returns UUID columns as strings, while FastAPI path/query
    parameters may arrive as UUID objects. Empty strings are treated as
    missing so that blank filters never match anything.

    Example:
        normalize_id(uuid_obj)       # "550e8400-..."
        normalize_id("550e8400-...") # "550e8400-..."
        normalize_id("")             # None
    """
    if value is None:
        return None
    text = str(value) if isinstance(value, UUID) else value
    return text or None


def unique_by_id(items: Iterable[T], key: Callable[[T], str] = lambda item: item.id) -> list[T]:
    """
    Deduplicate items by identifier.

    The first occurrence keeps its position and the last occurrence wins
    the value, mirroring how a dict built from the rows behaves.
    """
    by_id: dict[str, T] = {}
    for item in items:
        by_id[key(item)] = item
    return list(by_id.values())


def name_sort_key(name: str | None) -> str:
    """Case-insensitive sort key for display names."""
    return (name or "").casefold()


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
