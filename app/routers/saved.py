# =============================================================================
# app/routers/saved.py - Saved Items Endpoints
# =============================================================================
# Bookmarks on listings, wanted requests and events. The active storage
# backend is reported as `uses_fallback` so the web app can show that saved
# items are only kept server-side in the key-value store.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_user
from app.dependencies import SavedItemsDep
from app.exceptions import InvalidSavedItemTypeError
from core.models.saved import (
    SavedItemList,
    SavedItemType,
    SavedToggleRequest,
    SavedToggleResponse,
)

router = APIRouter()


def _parse_type(value: str) -> SavedItemType:
    try:
        return SavedItemType(value)
    except ValueError:
        raise InvalidSavedItemTypeError(value, [item.value for item in SavedItemType])


@router.get("", response_model=SavedItemList)
async def list_saved(
    service: SavedItemsDep,
    user: AuthUser = Depends(get_current_user),
    item_type: Annotated[str | None, Query(description="listing, wanted or event")] = None,
):
    """Everything the current user saved, optionally of one type."""
    wanted_type = _parse_type(item_type) if item_type else None
    items = service.list_items(str(user.id), wanted_type)
    return SavedItemList(items=items, uses_fallback=service.uses_fallback)


@router.post("/toggle", response_model=SavedToggleResponse)
async def toggle_saved(
    request: SavedToggleRequest,
    service: SavedItemsDep,
    user: AuthUser = Depends(get_current_user),
):
    """Save the item if it is not saved, unsave it otherwise."""
    saved = service.toggle(str(user.id), request.item_type, request.item_id)
    return SavedToggleResponse(
        item_type=request.item_type,
        item_id=request.item_id,
        saved=saved,
        uses_fallback=service.uses_fallback,
    )


@router.delete("/{item_type}/{item_id}", status_code=204)
async def remove_saved(
    item_type: Annotated[str, Path()],
    item_id: Annotated[str, Path(min_length=1)],
    service: SavedItemsDep,
    user: AuthUser = Depends(get_current_user),
):
    """Remove one saved item (no-op if it was not saved)."""
    service.remove(str(user.id), _parse_type(item_type), item_id)
