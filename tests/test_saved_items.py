# =============================================================================
# tests/test_saved_items.py - Saved Items Tests
# =============================================================================
# This module contains tests for:
# - The key-value store (key layout, listing, validation of stray keys)
# - The saved_items probe and store selection
# - SavedItemsService toggling and switching stores mid-operation
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import SavedItemsError
from core.models.saved import SavedItemType
from core.services.saved_items_service import (
    KeyValueSavedItemStore,
    RemoteSavedItemStore,
    SavedItemsService,
    SavedItemsUnavailableError,
    local_key,
    select_saved_item_store,
)
from lib.supabase_client import QueryResult, ResultStatus

UNSUPPORTED = QueryResult(status=ResultStatus.UNSUPPORTED, message="relation does not exist", error_code="42P01")
FAILED = QueryResult(status=ResultStatus.FAILED, message="permission denied", error_code="42501")


@pytest.fixture
def supabase():
    with patch("core.services.saved_items_service.SupabaseClient") as mock:
        yield mock


# =============================================================================
# Key-value store
# =============================================================================

class TestKeyValueStore:
    """Tests for KeyValueSavedItemStore."""

    def test_key_layout(self):
        assert local_key("u1", SavedItemType.LISTING, "l9") == "saved:u1:listing:l9"

    def test_add_is_saved_remove(self, kv_client):
        store = KeyValueSavedItemStore(kv_client)

        store.add("u1", SavedItemType.EVENT, "e1")
        assert kv_client.data == {"saved:u1:event:e1": "1"}
        assert store.is_saved("u1", SavedItemType.EVENT, "e1")

        store.remove("u1", SavedItemType.EVENT, "e1")
        assert not store.is_saved("u1", SavedItemType.EVENT, "e1")

    def test_list_only_own_valid_keys(self, kv_client):
        kv_client.data.update({
            "saved:u1:listing:l1": "1",
            "saved:u1:wanted:w1": "1",
            "saved:u1:post:p1": "1",
            "saved:u1:event:e1": "0",
            "saved:u2:listing:l2": "1",
            "saved:u1:listing": "1",
        })
        store = KeyValueSavedItemStore(kv_client)

        items = store.list_items("u1")

        assert sorted(item.key for item in items) == ["listing:l1", "wanted:w1"]
        assert all(item.created_at is not None for item in items)

    def test_bytes_values_are_decoded(self, kv_client):
        kv_client.data["saved:u1:listing:l1"] = b"1"
        assert KeyValueSavedItemStore(kv_client).is_saved("u1", SavedItemType.LISTING, "l1")

    def test_item_id_with_colon_is_listed(self, kv_client):
        store = KeyValueSavedItemStore(kv_client)
        store.add("u1", SavedItemType.LISTING, "ext:42")

        items = store.list_items("u1")

        assert store.is_saved("u1", SavedItemType.LISTING, "ext:42")
        assert [item.item_id for item in items] == ["ext:42"]


# =============================================================================
# Probe
# =============================================================================

class TestSelectStore:
    """Tests for select_saved_item_store."""

    def test_table_present_uses_remote(self, supabase, kv_client):
        supabase.execute.return_value = QueryResult.success([])

        store = select_saved_item_store(kv_client)

        assert isinstance(store, RemoteSavedItemStore)
        assert store.uses_fallback is False

    def test_table_missing_uses_key_value(self, supabase, kv_client):
        supabase.execute.return_value = UNSUPPORTED

        store = select_saved_item_store(kv_client)

        assert isinstance(store, KeyValueSavedItemStore)
        assert store.uses_fallback is True

    def test_probe_failure_raises(self, supabase, kv_client):
        supabase.execute.return_value = FAILED

        with pytest.raises(SavedItemsError):
            select_saved_item_store(kv_client)


# =============================================================================
# Remote store
# =============================================================================

class TestRemoteStore:
    """Tests for RemoteSavedItemStore."""

    def test_list_skips_unknown_types(self, supabase):
        supabase.execute.return_value = QueryResult.success([
            {"id": "1", "user_id": "u1", "item_type": "listing", "item_id": "l1", "created_at": "2025-03-01T10:00:00Z"},
            {"id": "2", "user_id": "u1", "item_type": "story", "item_id": "s1", "created_at": "2025-03-01T09:00:00Z"},
        ])

        items = RemoteSavedItemStore().list_items("u1")

        assert [item.key for item in items] == ["listing:l1"]

    def test_missing_table_signals_unavailable(self, supabase):
        supabase.execute.return_value = UNSUPPORTED

        with pytest.raises(SavedItemsUnavailableError):
            RemoteSavedItemStore().is_saved("u1", SavedItemType.LISTING, "l1")

    def test_other_errors_raise_saved_items_error(self, supabase):
        supabase.execute.return_value = FAILED

        with pytest.raises(SavedItemsError):
            RemoteSavedItemStore().add("u1", SavedItemType.LISTING, "l1")


# =============================================================================
# Service
# =============================================================================

class TestSavedItemsService:
    """Tests for SavedItemsService."""

    def test_toggle_twice_returns_to_start(self, kv_client):
        service = SavedItemsService(KeyValueSavedItemStore(kv_client))

        assert service.toggle("u1", SavedItemType.LISTING, "l1") is True
        assert service.is_saved("u1", SavedItemType.LISTING, "l1")
        assert service.toggle("u1", SavedItemType.LISTING, "l1") is False
        assert kv_client.data == {}

    def test_list_filtered_by_type(self, kv_client):
        service = SavedItemsService(KeyValueSavedItemStore(kv_client))
        service.toggle("u1", SavedItemType.LISTING, "l1")
        service.toggle("u1", SavedItemType.EVENT, "e1")

        assert [item.key for item in service.list_items("u1", SavedItemType.EVENT)] == ["event:e1"]
        assert service.saved_keys("u1") == {"listing:l1", "event:e1"}

    def test_switches_to_key_value_when_table_disappears(self, supabase, kv_client):
        supabase.execute.return_value = UNSUPPORTED
        service = SavedItemsService(RemoteSavedItemStore(), kv_client)
        assert service.uses_fallback is False

        saved = service.toggle("u1", SavedItemType.WANTED, "w1")

        assert saved is True
        assert service.uses_fallback is True
        assert kv_client.data == {"saved:u1:wanted:w1": "1"}

    def test_missing_table_without_key_value_client_raises(self, supabase):
        supabase.execute.return_value = UNSUPPORTED
        service = SavedItemsService(RemoteSavedItemStore())

        with pytest.raises(SavedItemsError):
            service.list_items("u1")

    def test_remove_missing_item_is_noop(self, kv_client):
        service = SavedItemsService(KeyValueSavedItemStore(kv_client))
        service.remove("u1", SavedItemType.LISTING, "nope")
        assert kv_client.data == {}
