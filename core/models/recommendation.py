# =============================================================================
# core/models/recommendation.py - Peer Recommendation Schemas
# =============================================================================
# Value records consumed by the recommendation scorer and the tiered match
# classifier:
# - RecommendationContext: the viewer's academic/location attributes
# - RecommendationCandidate: the attributes of one peer that scoring reads
# - PeerProfile: a candidate plus the display fields of public_profiles
# - MatchTier: the ordinal assigned by the backend recommendation RPC
# - TieredRecommendationRow: one row returned by that RPC
#
# All records are immutable and compared structurally. They are built from
# fetched rows and discarded after one scoring pass.
# =============================================================================

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecommendationContext(BaseModel):
    """
    The current user's attributes for one scoring pass.

    Any field may be None; a None field never produces a match.
    """

    model_config = ConfigDict(frozen=True)

    university_id: str | None = None
    school_id: str | None = None
    department_id: str | None = None
    city_id: str | None = None
    study_year: int | None = None

    @field_validator("university_id", "school_id", "department_id", "city_id", mode="before")
    @classmethod
    def blank_id_is_missing(cls, value: Any) -> Any:
        return value or None

    @classmethod
    def from_profile_row(cls, row: dict[str, Any]) -> RecommendationContext:
        """Build the context from a `profiles` row."""
        return cls(
            university_id=row.get("university_id"),
            school_id=row.get("school_id"),
            department_id=row.get("department_id"),
            city_id=row.get("city_id"),
            study_year=row.get("study_year"),
        )


class RecommendationCandidate(BaseModel):
    """Attributes of a peer that the scorer reads."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    university_id: str | None = None
    school_id: str | None = None
    department_id: str | None = None
    city_id: str | None = None
    study_year: int | None = None
    is_verified_student: bool | None = None
    is_pre_student: bool | None = None
    followers_count: int | None = Field(
        default=None,
        ge=0,
        description="Number of followers; None when the follow system is not deployed",
    )


class PeerProfile(RecommendationCandidate):
    """
    A row from the `public_profiles` view.

    Example:
        {
            "id": "4b7c...",
            "display_name": "Maria",
            "city_id": "c9",
            "university_id": "u1",
            "study_year": 3,
            "is_verified_student": true,
            "followers_count": 45
        }
    """

    id: str
    display_name: str | None = None
    avatar_url: str | None = None
    last_seen_at: str | None = None


class MatchTier(IntEnum):
    """
    Ordinal assigned by the backend recommendation RPC.

    Lower is closer; UNRANKED covers missing or unknown values.
    """
    UNRANKED = 0
    SAME_SCHOOL = 1
    SAME_UNIVERSITY = 2
    SAME_SCHOOL_OTHER_UNIVERSITY = 3
    SAME_CITY = 4

    @classmethod
    def parse(cls, value: Any) -> MatchTier:
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.UNRANKED


class TieredRecommendationRow(BaseModel):
    """One pre-tiered row from the backend recommendation RPC."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    profile_id: str
    match_tier: MatchTier = MatchTier.UNRANKED
    school_id: str | None = None
    university_id: str | None = None
    city_id: str | None = None

    @field_validator("match_tier", mode="before")
    @classmethod
    def _parse_tier(cls, value: Any) -> MatchTier:
        return MatchTier.parse(value)
