# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from the Supabase JWT.

    Only what the token itself carries; no database lookup.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None
    role: Optional[str] = None


class UserResponse(BaseModel):
    """The token owner with their community profile status."""
    id: UUID
    email: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_verified_student: bool = False
    is_pre_student: bool = False
    onboarding_completed: bool = False
