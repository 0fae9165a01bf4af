# =============================================================================
# core/services/saved_items_service.py - Saved Items Persistence
# =============================================================================
# Users bookmark listings, wanted requests and events. Bookmarks live in the
# `saved_items` table; projects that have not run that migration yet keep
# them in a key-value store (Redis) instead.
#
# Both backends implement SavedItemStore. A capability probe picks one at
# startup, and SavedItemsService switches to the key-value store if the
# table disappears mid-operation, so callers never need to know which
# store is active.
# =============================================================================

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Protocol

from app.exceptions import SavedItemsError
from core.models.saved import SavedItem, SavedItemType, saved_key
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

SAVED_ITEMS_TABLE = "saved_items"
KEY_PREFIX = "saved"
SAVED_MARKER = "1"


class SavedItemsUnavailableError(Exception):
    """The saved_items table does not exist on this project."""


# =============================================================================
# Store Interface
# =============================================================================

class SavedItemStore(ABC):
    """Where saved items are kept."""

    uses_fallback: bool = False

    @abstractmethod
    def list_items(self, user_id: str) -> list[SavedItem]:
        """All saved items of a user, newest first where known."""

    @abstractmethod
    def is_saved(self, user_id: str, item_type: SavedItemType, item_id: str) -> bool:
        ...

    @abstractmethod
    def add(self, user_id: str, item_type: SavedItemType, item_id: str) -> None:
        ...

    @abstractmethod
    def remove(self, user_id: str, item_type: SavedItemType, item_id: str) -> None:
        ...


class RemoteSavedItemStore(SavedItemStore):
    """The `saved_items` table."""

    def _run(self, query, operation: str) -> list[dict[str, Any]]:
        result = SupabaseClient.execute(query, description=f"saved_items {operation}")
        if result.unsupported:
            raise SavedItemsUnavailableError(result.message)
        if not result.ok:
            raise SavedItemsError(operation, result.message)
        return result.data

    def list_items(self, user_id: str) -> list[SavedItem]:
        rows = self._run(
            SupabaseClient.table(SAVED_ITEMS_TABLE)
            .select("id, user_id, item_type, item_id, created_at")
            .eq("user_id", user_id)
            .order("created_at", desc=True),
            "load",
        )
        items = []
        for row in rows:
            try:
                item_type = SavedItemType(row.get("item_type"))
            except ValueError:
                continue
            items.append(SavedItem(
                user_id=row["user_id"],
                item_type=item_type,
                item_id=row["item_id"],
                created_at=row.get("created_at"),
            ))
        return items

    def is_saved(self, user_id: str, item_type: SavedItemType, item_id: str) -> bool:
        rows = self._run(
            SupabaseClient.table(SAVED_ITEMS_TABLE)
            .select("id")
            .eq("user_id", user_id)
            .eq("item_type", item_type.value)
            .eq("item_id", item_id)
            .limit(1),
            "check",
        )
        return bool(rows)

    def add(self, user_id: str, item_type: SavedItemType, item_id: str) -> None:
        self._run(
            SupabaseClient.table(SAVED_ITEMS_TABLE).insert({
                "user_id": user_id,
                "item_type": item_type.value,
                "item_id": item_id,
            }),
            "save",
        )

    def remove(self, user_id: str, item_type: SavedItemType, item_id: str) -> None:
        self._run(
            SupabaseClient.table(SAVED_ITEMS_TABLE)
            .delete()
            .eq("user_id", user_id)
            .eq("item_type", item_type.value)
            .eq("item_id", item_id),
            "remove",
        )


class KeyValueClient(Protocol):
    """The subset of redis.Redis used by KeyValueSavedItemStore."""

    def get(self, name: str) -> Any: ...

    def set(self, name: str, value: str) -> Any: ...

    def delete(self, *names: str) -> Any: ...

    def scan_iter(self, match: str | None = None) -> Any: ...


def local_key(user_id: str, item_type: SavedItemType, item_id: str) -> str:
    return f"{KEY_PREFIX}:{user_id}:{item_type.value}:{item_id}"


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class KeyValueSavedItemStore(SavedItemStore):
    """
    Key-value fallback: one key per saved item.

    Keys look like "saved:{user_id}:{item_type}:{item_id}" with value "1".
    """

    uses_fallback = True

    def __init__(self, client: KeyValueClient):
        self.client = client

    def list_items(self, user_id: str) -> list[SavedItem]:
        loaded_at = datetime.now(timezone.utc)
        items = []
        for raw_key in self.client.scan_iter(match=f"{KEY_PREFIX}:{user_id}:*"):
            key = _text(raw_key)
            parts = key.split(":", 3) if key else []
            if len(parts) != 4 or parts[0] != KEY_PREFIX or parts[1] != user_id:
                continue
            try:
                item_type = SavedItemType(parts[2])
            except ValueError:
                continue
            if _text(self.client.get(key)) != SAVED_MARKER:
                continue
            items.append(SavedItem(
                user_id=user_id,
                item_type=item_type,
                item_id=parts[3],
                created_at=loaded_at,
            ))
        return items

    def is_saved(self, user_id: str, item_type: SavedItemType, item_id: str) -> bool:
        return _text(self.client.get(local_key(user_id, item_type, item_id))) == SAVED_MARKER

    def add(self, user_id: str, item_type: SavedItemType, item_id: str) -> None:
        self.client.set(local_key(user_id, item_type, item_id), SAVED_MARKER)

    def remove(self, user_id: str, item_type: SavedItemType, item_id: str) -> None:
        self.client.delete(local_key(user_id, item_type, item_id))


# =============================================================================
# Capability Probe
# =============================================================================

def probe_saved_items_table() -> bool:
    """
    Check whether the saved_items table is deployed.

    Raises:
        SavedItemsError: If the probe fails for another reason
    """
    result = SupabaseClient.execute(
        SupabaseClient.table(SAVED_ITEMS_TABLE).select("id").limit(1),
        description="saved_items probe",
    )
    if result.unsupported:
        return False
    if not result.ok:
        raise SavedItemsError("probe", result.message)
    return True


def select_saved_item_store(kv_client: KeyValueClient) -> SavedItemStore:
    """Remote store when the table exists, key-value store otherwise."""
    if probe_saved_items_table():
        return RemoteSavedItemStore()
    logger.warning("saved_items table missing; saved items are kept in the key-value store")
    return KeyValueSavedItemStore(kv_client)


# =============================================================================
# Service
# =============================================================================

class SavedItemsService:
    """
    Saved-item operations independent of the active store.

    Example:
        service = SavedItemsService(select_saved_item_store(redis_client), redis_client)
        service.toggle(user_id, SavedItemType.LISTING, listing_id)  # True
        service.is_saved(user_id, SavedItemType.LISTING, listing_id)  # True
    """

    def __init__(self, store: SavedItemStore, kv_client: KeyValueClient | None = None):
        self.store = store
        self.kv_client = kv_client

    @property
    def uses_fallback(self) -> bool:
        return self.store.uses_fallback

    def _switch_to_fallback(self, error: SavedItemsUnavailableError) -> None:
        if self.kv_client is None:
            raise SavedItemsError("reach", f"saved_items table unavailable: {error}")
        logger.warning("saved_items table became unavailable; switching to key-value store")
        self.store = KeyValueSavedItemStore(self.kv_client)

    def _call(self, method: str, *args):
        try:
            return getattr(self.store, method)(*args)
        except SavedItemsUnavailableError as e:
            self._switch_to_fallback(e)
            return getattr(self.store, method)(*args)

    def list_items(self, user_id: str, item_type: SavedItemType | None = None) -> list[SavedItem]:
        items = self._call("list_items", user_id)
        if item_type is None:
            return items
        return [item for item in items if item.item_type is item_type]

    def saved_keys(self, user_id: str) -> set[str]:
        """Keys "{type}:{id}" of everything the user saved."""
        return {item.key for item in self.list_items(user_id)}

    def is_saved(self, user_id: str, item_type: SavedItemType, item_id: str) -> bool:
        return self._call("is_saved", user_id, item_type, item_id)

    def toggle(self, user_id: str, item_type: SavedItemType, item_id: str) -> bool:
        """
        Flip the saved state of an item.

        Returns:
            True if the item is saved after the call
        """
        if self.is_saved(user_id, item_type, item_id):
            self._call("remove", user_id, item_type, item_id)
            logger.info(f"Unsaved {saved_key(item_type, item_id)} for {user_id}")
            return False

        self._call("add", user_id, item_type, item_id)
        logger.info(f"Saved {saved_key(item_type, item_id)} for {user_id}")
        return True

    def remove(self, user_id: str, item_type: SavedItemType, item_id: str) -> None:
        self._call("remove", user_id, item_type, item_id)
