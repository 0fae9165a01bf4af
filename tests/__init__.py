# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Foititis API:
# - test_recommendations.py: Peer scoring and directory ordering
# - test_match_tiers.py: Tiered match labels and buckets
# - test_lookup_service.py: RPC-then-fallback lookups
# - test_saved_items.py: Saved item stores and the store switch
# - test_pre_student_cleanup.py: Scheduled pre-student pruning
# - test_peer_service.py: Directory and matches with mocked Supabase
# - test_api.py: Endpoint tests through TestClient
#
# Run tests with: pytest
# =============================================================================
