# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class FoititisException(Exception):
    """
    Base exception for the Foititis API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "FOITITIS_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Profile Exceptions
# =============================================================================

class ProfileNotFoundError(FoititisException):
    """Raised when the requesting user has no profile row."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"Profile not found: {user_id}",
            code="PROFILE_NOT_FOUND",
            status_code=404,
            suggestion="Finish onboarding so a profile is created for this account",
            details={"user_id": user_id}
        )


class PeerQueryError(FoititisException):
    """Raised when the peer directory query fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Unable to load students: {error}",
            code="PEER_QUERY_FAILED",
            status_code=502,
            suggestion="Try again later; check the public_profiles view and its RLS policies",
            details={"error": error}
        )


# =============================================================================
# Lookup Exceptions
# =============================================================================

class LookupFailedError(FoititisException):
    """Raised when a cascading lookup hits an error that has no fallback."""

    def __init__(self, operation: str, error: str | None):
        super().__init__(
            message=f"Lookup failed ({operation}): {error or 'unknown error'}",
            code="LOOKUP_FAILED",
            status_code=502,
            suggestion="Check that the lookup tables are readable by this role",
            details={"operation": operation, "error": error}
        )


# =============================================================================
# Saved Items Exceptions
# =============================================================================

class SavedItemsError(FoititisException):
    """Raised when saved items cannot be read or written."""

    def __init__(self, operation: str, error: str | None):
        super().__init__(
            message=f"Unable to {operation} saved items: {error or 'unknown error'}",
            code="SAVED_ITEMS_FAILED",
            status_code=502,
            suggestion="Try again later or contact support if the issue persists",
            details={"operation": operation, "error": error}
        )


class InvalidSavedItemTypeError(FoititisException):
    """Raised when an unknown item type is used."""

    def __init__(self, item_type: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid saved item type: {item_type}",
            code="INVALID_ITEM_TYPE",
            status_code=400,
            suggestion=f"Use one of: {', '.join(allowed)}",
            details={"item_type": item_type, "allowed_types": allowed}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def foititis_exception_handler(
    request: Request,
    exc: FoititisException
) -> JSONResponse:
    """
    Convert FoititisException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
