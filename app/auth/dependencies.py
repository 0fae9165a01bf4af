# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Verifies the Supabase access token sent by the web app.
#
# Supabase projects sign tokens either with asymmetric signing keys
# (ES256/RS256, published as JWKS) or with the legacy HS256 JWT secret.
# Both are accepted.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/peers")
#   async def peers(user: AuthUser = Depends(get_current_user)): ...
# =============================================================================

import logging
import time
from typing import Any, Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import AuthUser
from app.config import settings

logger = logging.getLogger(__name__)

security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)

JWKS_CACHE_TTL = 3600  # 1 hour
TOKEN_AUDIENCE = "authenticated"


class _JwksCache:
    """Signing keys of the Supabase project, refreshed hourly."""

    def __init__(self) -> None:
        self.keys: list[dict[str, Any]] = []
        self.fetched_at: float = 0.0

    @property
    def url(self) -> str:
        return f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"

    def get(self, kid: str) -> dict[str, Any] | None:
        if not self.keys or time.time() - self.fetched_at >= JWKS_CACHE_TTL:
            self.refresh()
        return next((key for key in self.keys if key.get("kid") == kid), None)

    def refresh(self) -> None:
        try:
            response = httpx.get(self.url, timeout=10)
            response.raise_for_status()
            self.keys = response.json().get("keys", [])
            self.fetched_at = time.time()
            logger.debug(f"Fetched {len(self.keys)} signing keys from {self.url}")
        except httpx.HTTPError as e:
            # Keep serving the previous keys if the refresh fails
            logger.warning(f"Failed to fetch JWKS: {e}")


_jwks = _JwksCache()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _signing_key(token: str) -> tuple[Any, str]:
    """Key and algorithm to verify `token` with."""
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    algorithm = header.get("alg", "HS256")
    kid = header.get("kid")
    if algorithm == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    key = _jwks.get(kid) if kid else None
    if key is None:
        logger.warning(f"No signing key for alg={algorithm}, kid={kid}; trying HS256")
        return settings.SUPABASE_JWT_SECRET, "HS256"
    return key, algorithm


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and return its user.

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no user id
    """
    key, algorithm = _signing_key(token)
    try:
        payload = jwt.decode(token, key, algorithms=[algorithm], audience=TOKEN_AUDIENCE)
    except ExpiredSignatureError:
        logger.warning("Access token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"Access token rejected: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    subject = payload.get("sub")
    if not subject:
        raise _unauthorized("Invalid token: missing user ID")
    try:
        user_id = UUID(subject)
    except ValueError:
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_id, email=payload.get("email"), role=payload.get("role"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """Authenticated user from the Bearer token (401 otherwise)."""
    user = decode_access_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional)
) -> Optional[AuthUser]:
    """Authenticated user, or None for anonymous or invalid tokens."""
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except HTTPException:
        return None
