# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Signup, login and email verification happen client-side with Supabase
# Auth. These routes only report who the token belongs to.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

PROFILE_STATUS_COLUMNS = (
    "display_name, avatar_url, is_verified_student, is_pre_student, onboarding_completed"
)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Current user with profile status.

    Users who have not finished onboarding have no profile row yet and
    get the token fields only.
    """
    result = SupabaseClient.execute(
        SupabaseClient.table("profiles").select(PROFILE_STATUS_COLUMNS).eq("id", str(user.id)).limit(1),
        description="profile status",
    )
    profile = result.data[0] if result.ok and result.data else {}
    if not result.ok:
        logger.warning(f"Could not fetch profile for {user.id}: {result.message}")

    verified = profile.get("is_verified_student") is True
    return UserResponse(
        id=user.id,
        email=user.email,
        display_name=profile.get("display_name"),
        avatar_url=profile.get("avatar_url"),
        is_verified_student=verified,
        is_pre_student=profile.get("is_pre_student") is True and not verified,
        onboarding_completed=profile.get("onboarding_completed") is True,
    )


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """Confirm that a stored token is still valid."""
    return {"valid": True, "user_id": str(user.id)}
