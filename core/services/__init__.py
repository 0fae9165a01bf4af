# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .lookup_service import LookupService, resolve_lookup
from .peer_service import PeerFilters, PeerService, ScoredPeer, Viewer
from .pre_student_cleanup_service import PreStudentCleanupService
from .saved_items_service import (
    KeyValueSavedItemStore,
    RemoteSavedItemStore,
    SavedItemsService,
    SavedItemStore,
    select_saved_item_store,
)

__all__ = [
    "LookupService",
    "resolve_lookup",
    "PeerFilters",
    "PeerService",
    "ScoredPeer",
    "Viewer",
    "PreStudentCleanupService",
    "KeyValueSavedItemStore",
    "RemoteSavedItemStore",
    "SavedItemsService",
    "SavedItemStore",
    "select_saved_item_store",
]
