# =============================================================================
# core/models/cleanup.py - Pre-student Cleanup Result
# =============================================================================
# Pre-students are accounts waiting for university email verification.
# Unverified ones past the retention window are pruned by a scheduled task;
# this module describes what one run reports.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class CleanupStep(str, Enum):
    """Where a cleanup error happened."""
    QUERY = "query"
    PROFILE_DELETE = "profile_delete"
    AUTH_DELETE = "auth_delete"


class CleanupError(BaseModel):
    """A failure for one profile (or for the initial query)."""
    id: str
    step: CleanupStep
    message: str


class CleanupResult(BaseModel):
    """
    Summary of one cleanup run.

    Example:
        {"scanned": 3, "deleted": 2, "errors": [{"id": "...", "step": "auth_delete", "message": "..."}]}
    """
    scanned: int = Field(default=0, ge=0)
    deleted: int = Field(default=0, ge=0)
    errors: list[CleanupError] = Field(default_factory=list)

    @property
    def status_code(self) -> int:
        """HTTP-style status: 500 query failed, 207 partial, 200 clean."""
        if any(error.step is CleanupStep.QUERY for error in self.errors):
            return 500
        if self.errors:
            return 207
        return 200
