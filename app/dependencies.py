# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

import logging
from functools import lru_cache
from typing import Annotated

import redis
from fastapi import Depends, Header, Query

from app.config import settings
from core.services.saved_items_service import (
    SavedItemsService,
    SavedItemStore,
    select_saved_item_store,
)
from lib.i18n import Locale, resolve_locale

logger = logging.getLogger(__name__)


# =============================================================================
# Locale
# =============================================================================

def get_locale(
    lang: Annotated[str | None, Query(description="Response language (en, el)")] = None,
    accept_language: Annotated[str | None, Header()] = None,
) -> Locale:
    """
    Request-scoped locale: ?lang=, then Accept-Language, then DEFAULT_LOCALE.
    """
    return resolve_locale(lang, accept_language, default=Locale(settings.DEFAULT_LOCALE))


LocaleDep = Annotated[Locale, Depends(get_locale)]


# =============================================================================
# Saved Items
# =============================================================================

@lru_cache
def get_redis_client() -> redis.Redis:
    """Shared Redis client (key-value fallback for saved items)."""
    return redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)


@lru_cache
def get_saved_item_store() -> SavedItemStore:
    """Store chosen once per process by probing for the saved_items table."""
    store = select_saved_item_store(get_redis_client())
    logger.info(f"Saved items backend: {type(store).__name__}")
    return store


def get_saved_items_service() -> SavedItemsService:
    return SavedItemsService(get_saved_item_store(), get_redis_client())


SavedItemsDep = Annotated[SavedItemsService, Depends(get_saved_items_service)]
