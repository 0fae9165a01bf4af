# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Verifies Supabase Auth JWTs for the API.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
# =============================================================================

from app.auth.dependencies import decode_access_token, get_current_user, get_current_user_optional
from app.auth.models import AuthUser, UserResponse

__all__ = [
    "decode_access_token",
    "get_current_user",
    "get_current_user_optional",
    "AuthUser",
    "UserResponse",
]
