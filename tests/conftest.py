# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides common fixtures (profile rows, peers, a fake key-value store)
# =============================================================================

import fnmatch
import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-123")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("DEFAULT_LOCALE", "en")

import pytest

from core.models.recommendation import PeerProfile, RecommendationContext


# =============================================================================
# Fakes
# =============================================================================

class FakeKeyValueClient:
    """In-memory stand-in for the redis client used by the saved-items fallback."""

    def __init__(self):
        self.data: dict[str, str] = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = str(value)
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def scan_iter(self, match=None):
        for key in list(self.data):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def kv_client():
    """Empty fake key-value client."""
    return FakeKeyValueClient()


@pytest.fixture
def viewer_profile_row():
    """A `profiles` row for the requesting student."""
    return {
        "id": "viewer-1",
        "city_id": "C1",
        "university_id": "U1",
        "school_id": "S1",
        "department_id": "D1",
        "study_year": 3,
        "is_verified_student": True,
        "is_pre_student": False,
    }


@pytest.fixture
def viewer_context(viewer_profile_row):
    return RecommendationContext.from_profile_row(viewer_profile_row)


@pytest.fixture
def sample_peers():
    """Peers at varying distance from the viewer fixture."""
    return [
        PeerProfile(
            id="p-stranger",
            display_name="Nikos",
            city_id="C7",
            university_id="U7",
            study_year=1,
            is_verified_student=False,
            followers_count=5,
        ),
        PeerProfile(
            id="p-department",
            display_name="Maria",
            city_id="C1",
            university_id="U1",
            school_id="S1",
            department_id="D1",
            study_year=3,
            is_verified_student=True,
            is_pre_student=False,
            followers_count=45,
        ),
        PeerProfile(
            id="p-city",
            display_name="Eleni",
            city_id="C1",
            university_id="U2",
            study_year=2,
            is_verified_student=True,
            is_pre_student=False,
            followers_count=0,
        ),
    ]
