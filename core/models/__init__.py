# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - recommendation.py: scoring context, candidates, backend match tiers
# - lookup.py: city/university/school/department lookup rows
# - saved.py: saved items and their API payloads
# - cleanup.py: pre-student cleanup run summary
# =============================================================================

from .recommendation import (
    MatchTier,
    PeerProfile,
    RecommendationCandidate,
    RecommendationContext,
    TieredRecommendationRow,
)
from .lookup import (
    DepartmentLookupRow,
    LookupOption,
    SchoolLookupRow,
    UniversityLookupRow,
)
from .saved import (
    SavedItem,
    SavedItemList,
    SavedItemType,
    SavedToggleRequest,
    SavedToggleResponse,
)
from .cleanup import CleanupError, CleanupResult, CleanupStep

__all__ = [
    # Recommendation
    "MatchTier",
    "PeerProfile",
    "RecommendationCandidate",
    "RecommendationContext",
    "TieredRecommendationRow",
    # Lookup
    "DepartmentLookupRow",
    "LookupOption",
    "SchoolLookupRow",
    "UniversityLookupRow",
    # Saved
    "SavedItem",
    "SavedItemList",
    "SavedItemType",
    "SavedToggleRequest",
    "SavedToggleResponse",
    # Cleanup
    "CleanupError",
    "CleanupResult",
    "CleanupStep",
]
