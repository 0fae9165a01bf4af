# =============================================================================
# core/models/saved.py - Saved Items Schemas
# =============================================================================
# A saved item is a bookmark a user places on a marketplace listing, a
# wanted request or an event. The same record is produced by both storage
# backends (saved_items table and key-value fallback).
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SavedItemType(str, Enum):
    """Kinds of things that can be saved."""
    LISTING = "listing"
    WANTED = "wanted"
    EVENT = "event"


class SavedItem(BaseModel):
    """One saved item of one user."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    user_id: str
    item_type: SavedItemType
    item_id: str
    created_at: datetime | None = Field(
        default=None,
        description="When the item was saved; the key-value backend reports load time",
    )

    @property
    def key(self) -> str:
        """Key used by clients to look up saved state: "{type}:{id}"."""
        return saved_key(self.item_type, self.item_id)


def saved_key(item_type: SavedItemType, item_id: str) -> str:
    return f"{item_type.value}:{item_id}"


class SavedToggleRequest(BaseModel):
    """Body of POST /saved/toggle."""
    item_type: SavedItemType
    item_id: str = Field(..., min_length=1)


class SavedToggleResponse(BaseModel):
    """Result of a toggle: the new state and which backend served it."""
    item_type: SavedItemType
    item_id: str
    saved: bool
    uses_fallback: bool


class SavedItemList(BaseModel):
    """Response of GET /saved."""
    items: list[SavedItem] = Field(default_factory=list)
    uses_fallback: bool = False
