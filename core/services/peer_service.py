# =============================================================================
# core/services/peer_service.py - Student Directory & Matches
# =============================================================================
# Fetches what the scorer and the match classifier need, then hands it to
# the pure functions in lib/recommendations.py and lib/match_tiers.py:
# - the viewer's own profile (recommendation context)
# - peer rows from the public_profiles view
# - pre-tiered rows from the recommendation RPC plus name lookups
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from app.exceptions import PeerQueryError, ProfileNotFoundError
from core.models.recommendation import (
    PeerProfile,
    RecommendationContext,
    TieredRecommendationRow,
)
from lib.match_tiers import MatchNames, TieredMatches, ViewerAffiliation, group_matches
from lib.recommendations import (
    ViewMode,
    filter_peers,
    is_verified_campus_member,
    rank_peers,
    recommendation_score,
)
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_id

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = (
    "id, city_id, university_id, school_id, department_id, study_year, "
    "is_verified_student, is_pre_student"
)
PEER_COLUMNS = (
    "id, display_name, avatar_url, city_id, university_id, school_id, department_id, "
    "study_year, is_verified_student, is_pre_student, followers_count, last_seen_at"
)
# public_profiles before the social migration (no location or followers)
LEGACY_PEER_COLUMNS = "id, display_name, avatar_url, university_id, study_year, is_verified_student, is_pre_student"

RECOMMENDATION_RPC = "get_peer_recommendations"


@dataclass(frozen=True)
class Viewer:
    """The requesting user's profile, as the directory sees it."""
    id: str
    context: RecommendationContext
    is_verified_student: bool
    is_pre_student: bool


@dataclass(frozen=True)
class PeerFilters:
    """Optional directory filters; None means no filter."""
    city_id: str | None = None
    university_id: str | None = None
    school_id: str | None = None
    department_id: str | None = None


@dataclass(frozen=True)
class ScoredPeer:
    peer: PeerProfile
    score: int
    verified_member: bool
    university_name: str | None


class PeerService:
    """Service for the student directory and the matches screen."""

    @staticmethod
    def get_viewer(user_id: str) -> Viewer:
        """
        Load the viewer's profile.

        Raises:
            ProfileNotFoundError: If the user has no profile row
            PeerQueryError: If the profile query fails
        """
        result = SupabaseClient.execute(
            SupabaseClient.table("profiles").select(PROFILE_COLUMNS).eq("id", user_id).limit(1),
            description="viewer profile",
        )
        if not result.ok:
            raise PeerQueryError(result.message or "profile query failed")
        if not result.data:
            raise ProfileNotFoundError(user_id)

        row = result.data[0]
        verified = row.get("is_verified_student") is True
        return Viewer(
            id=user_id,
            context=RecommendationContext.from_profile_row(row),
            is_verified_student=verified,
            # Verification supersedes the pre-student flag
            is_pre_student=row.get("is_pre_student") is True and not verified,
        )

    @staticmethod
    def fetch_peers(
        user_id: str,
        filters: PeerFilters | None = None,
        limit: int = 240,
    ) -> list[PeerProfile]:
        """
        Fetch candidate peers, excluding the viewer.

        Projects without the social columns get the legacy column set; only
        the university filter applies there and followers count as 0.
        """
        filters = filters or PeerFilters()
        query = (
            SupabaseClient.table("public_profiles")
            .select(PEER_COLUMNS)
            .neq("id", user_id)
            .limit(limit)
        )
        for column in ("city_id", "university_id", "school_id", "department_id"):
            value = normalize_id(getattr(filters, column))
            if value:
                query = query.eq(column, value)

        result = SupabaseClient.execute(query, description="peer directory")
        if result.ok:
            return [PeerProfile.model_validate(row) for row in result.data]
        if not result.unsupported:
            raise PeerQueryError(result.message or "peer query failed")

        logger.info("public_profiles has no social columns, using legacy peer query")
        legacy = (
            SupabaseClient.table("public_profiles")
            .select(LEGACY_PEER_COLUMNS)
            .neq("id", user_id)
            .limit(limit)
        )
        university_id = normalize_id(filters.university_id)
        if university_id:
            legacy = legacy.eq("university_id", university_id)

        legacy_result = SupabaseClient.execute(legacy, description="legacy peer directory")
        if not legacy_result.ok:
            raise PeerQueryError(legacy_result.message or "legacy peer query failed")
        return [
            PeerProfile.model_validate({**row, "followers_count": 0})
            for row in legacy_result.data
        ]

    @staticmethod
    def names_for(table: str, ids: Iterable[str | None]) -> dict[str, str]:
        """id -> name for a lookup table; failures degrade to no names."""
        unique = sorted({value for value in ids if value})
        if not unique:
            return {}
        result = SupabaseClient.execute(
            SupabaseClient.table(table).select("id, name").in_("id", unique),
            description=f"{table} names",
        )
        if not result.ok:
            return {}
        return {row["id"]: row["name"] for row in result.data if row.get("id")}

    @staticmethod
    def directory(
        user_id: str,
        mode: ViewMode = "recommended",
        query: str | None = None,
        filters: PeerFilters | None = None,
        fetch_limit: int = 240,
        view_limit: int = 80,
    ) -> list[ScoredPeer]:
        """
        The student directory for one viewer: fetch, rank, search.

        Returns:
            Peers in display order with their score against the viewer
        """
        viewer = PeerService.get_viewer(user_id)
        peers = PeerService.fetch_peers(user_id, filters, limit=fetch_limit)
        university_names = PeerService.names_for("universities", (peer.university_id for peer in peers))

        ranked = rank_peers(peers, viewer.context, mode)
        visible = filter_peers(ranked, query, university_names, limit=view_limit)
        logger.debug(f"Directory for {user_id}: {len(peers)} fetched, {len(visible)} shown ({mode})")

        return [
            ScoredPeer(
                peer=peer,
                score=recommendation_score(peer, viewer.context),
                verified_member=is_verified_campus_member(peer),
                university_name=university_names.get(peer.university_id) if peer.university_id else None,
            )
            for peer in visible
        ]

    @staticmethod
    def fetch_tiered_rows(user_id: str) -> list[TieredRecommendationRow]:
        """
        Pre-tiered recommendations from the backend.

        An undeployed RPC yields no rows; other failures raise.
        """
        result = SupabaseClient.rpc(RECOMMENDATION_RPC, {"p_user_id": user_id})
        if result.unsupported:
            return []
        if not result.ok:
            raise PeerQueryError(result.message or "recommendation rpc failed")
        return [TieredRecommendationRow.model_validate(_tiered_row(row)) for row in result.data]

    @staticmethod
    def matches(user_id: str) -> TieredMatches:
        """Tiered matches for the viewer, grouped by local match count."""
        viewer = PeerService.get_viewer(user_id)
        rows = PeerService.fetch_tiered_rows(user_id)

        names = MatchNames(
            schools=PeerService.names_for("schools", (row.school_id for row in rows)),
            universities=PeerService.names_for("universities", (row.university_id for row in rows)),
            cities=PeerService.names_for("cities", (row.city_id for row in rows)),
        )
        affiliation = ViewerAffiliation(
            school_id=viewer.context.school_id,
            university_id=viewer.context.university_id,
            city_id=viewer.context.city_id,
        )
        return group_matches(rows, affiliation, names)


def _tiered_row(row: dict[str, Any]) -> dict[str, Any]:
    """Accept both `profile_id` and `id` from the RPC."""
    if "profile_id" not in row and "id" in row:
        return {**row, "profile_id": row["id"]}
    return row
