# =============================================================================
# lib/recommendations.py - Peer Recommendation Scoring
# =============================================================================
# Scores how close a peer is to the current user and orders peers for the
# student directory. Everything here is pure: no I/O, no shared state, so
# it is tested without mocking Supabase.
#
# Scoring is additive. Weights grow with how specific the shared level is
# (department > school > university > city) and several matches stack.
#
# Usage:
#   from lib.recommendations import recommendation_score, sort_by_recommendation
#   ranked = sort_by_recommendation(peers, context)
# =============================================================================

from __future__ import annotations

from typing import Literal, Mapping, Sequence, TypeVar

from core.models.recommendation import RecommendationCandidate, RecommendationContext

C = TypeVar("C", bound=RecommendationCandidate)

ViewMode = Literal["recommended", "all"]

# -----------------------------------------------------------------------------
# Weights
# -----------------------------------------------------------------------------

VERIFIED_MEMBER_BONUS = 6
FOLLOWERS_PER_POINT = 20
MAX_POPULARITY_BONUS = 6

UNIVERSITY_MATCH_POINTS = 36
SCHOOL_MATCH_POINTS = 42
DEPARTMENT_MATCH_POINTS = 56
CITY_MATCH_POINTS = 20
STUDY_YEAR_MATCH_POINTS = 10

DEFAULT_VIEW_LIMIT = 80


def is_verified_campus_member(candidate: RecommendationCandidate) -> bool:
    """Verified student who is not (or no longer) a pre-student."""
    return candidate.is_verified_student is True and candidate.is_pre_student is not True


def popularity_bonus(followers_count: int | None) -> int:
    """One point per 20 followers, capped at 6."""
    if not followers_count or followers_count <= 0:
        return 0
    return min(MAX_POPULARITY_BONUS, followers_count // FOLLOWERS_PER_POINT)


def _matches(context_value, candidate_value) -> bool:
    return context_value not in (None, "") and candidate_value == context_value


def recommendation_score(
    candidate: RecommendationCandidate,
    context: RecommendationContext,
) -> int:
    """
    Affinity score between the current user (context) and one peer.

    Example:
        context = RecommendationContext(city_id="C9", study_year=3)
        peer = RecommendationCandidate(
            city_id="C9", study_year=3, is_verified_student=True,
            is_pre_student=False, followers_count=45,
        )
        recommendation_score(peer, context)  # 6 + 2 + 20 + 10 = 38
    """
    score = 0

    if is_verified_campus_member(candidate):
        score += VERIFIED_MEMBER_BONUS
    score += popularity_bonus(candidate.followers_count)

    if _matches(context.university_id, candidate.university_id):
        score += UNIVERSITY_MATCH_POINTS
    if _matches(context.school_id, candidate.school_id):
        score += SCHOOL_MATCH_POINTS
    if _matches(context.department_id, candidate.department_id):
        score += DEPARTMENT_MATCH_POINTS
    if _matches(context.city_id, candidate.city_id):
        score += CITY_MATCH_POINTS
    # Study year 0 is a real year, so only None is skipped
    if _matches(context.study_year, candidate.study_year):
        score += STUDY_YEAR_MATCH_POINTS

    return score


def _activity_key(candidate: RecommendationCandidate) -> tuple[bool, int]:
    return (not is_verified_campus_member(candidate), -(candidate.followers_count or 0))


def sort_by_recommendation(
    candidates: Sequence[C],
    context: RecommendationContext,
) -> list[C]:
    """
    Return a new list ordered by score, then verified members first,
    then followers (None counts as 0). The input is left untouched.
    """
    return sorted(
        candidates,
        key=lambda candidate: (-recommendation_score(candidate, context), *_activity_key(candidate)),
    )


def sort_by_activity(candidates: Sequence[C]) -> list[C]:
    """Directory order without locality: verified members first, then followers."""
    return sorted(candidates, key=_activity_key)


def rank_peers(
    peers: Sequence[C],
    context: RecommendationContext,
    mode: ViewMode = "recommended",
) -> list[C]:
    """
    Order peers for a directory view.

    "recommended" keeps only peers with a positive score, unless none
    score, in which case the whole ranked list is shown. "all" ignores
    locality entirely.
    """
    if mode == "all":
        return sort_by_activity(peers)

    ranked = sort_by_recommendation(peers, context)
    close = [peer for peer in ranked if recommendation_score(peer, context) > 0]
    return close or ranked


def filter_peers(
    peers: Sequence[C],
    query: str | None,
    university_names: Mapping[str, str] | None = None,
    limit: int = DEFAULT_VIEW_LIMIT,
) -> list[C]:
    """
    Free-text filter on display name or university name, then truncate.

    Peers without a display_name attribute only match by university.
    """
    normalized = (query or "").strip().lower()
    if not normalized:
        return list(peers[:limit])

    names = university_names or {}
    matched = []
    for peer in peers:
        display_name = (getattr(peer, "display_name", None) or "").lower()
        university_name = (names.get(peer.university_id, "") if peer.university_id else "").lower()
        if normalized in display_name or normalized in university_name:
            matched.append(peer)
    return matched[:limit]
