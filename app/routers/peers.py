# =============================================================================
# app/routers/peers.py - Student Directory Endpoints
# =============================================================================
# GET /peers          ranked and searchable student directory
# GET /peers/matches  tiered matches grouped by shared school/university/city
# =============================================================================

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from app.auth import AuthUser, get_current_user
from app.config import settings
from app.dependencies import LocaleDep
from core.models.recommendation import PeerProfile
from core.services.peer_service import PeerFilters, PeerService
from lib.i18n import Locale
from lib.match_tiers import ClassifiedMatch

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class PeerEntry(BaseModel):
    """One student in the directory."""
    peer: PeerProfile
    score: int = Field(..., ge=0, description="Affinity with the viewer")
    verified_member: bool
    university_name: str | None = None


class PeerDirectoryResponse(BaseModel):
    mode: Literal["recommended", "all"]
    peers: list[PeerEntry] = Field(default_factory=list)
    total: int = 0


class MatchEntry(BaseModel):
    """One classified match."""
    profile_id: str
    match_tier: int = Field(..., description="Tier assigned by the backend (0 = unranked)")
    match_count: int = Field(..., ge=0, le=3, description="Shared school/university/city count")
    same_school: bool
    same_university: bool
    same_city: bool
    label_kind: str
    label: str

    @classmethod
    def from_match(cls, match: ClassifiedMatch, locale: Locale) -> "MatchEntry":
        return cls(
            profile_id=match.profile_id,
            match_tier=int(match.match_tier),
            match_count=match.match_count,
            same_school=match.same_school,
            same_university=match.same_university,
            same_city=match.same_city,
            label_kind=match.label_kind.value,
            label=match.render_label(locale),
        )


class MatchesResponse(BaseModel):
    strong_matches: list[MatchEntry] = Field(default_factory=list)
    medium_matches: list[MatchEntry] = Field(default_factory=list)
    weak_matches: list[MatchEntry] = Field(default_factory=list)


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=PeerDirectoryResponse)
async def list_peers(
    user: AuthUser = Depends(get_current_user),
    mode: Annotated[Literal["recommended", "all"], Query(description="Ranking mode")] = "recommended",
    q: Annotated[str | None, Query(max_length=100, description="Name or university search")] = None,
    city_id: Annotated[str | None, Query()] = None,
    university_id: Annotated[str | None, Query()] = None,
    school_id: Annotated[str | None, Query()] = None,
    department_id: Annotated[str | None, Query()] = None,
):
    """
    Students ranked for the current user.

    `recommended` orders by affinity and hides unrelated students when at
    least one related student exists; `all` orders verified students first,
    then by followers.
    """
    entries = PeerService.directory(
        str(user.id),
        mode=mode,
        query=q,
        filters=PeerFilters(
            city_id=city_id,
            university_id=university_id,
            school_id=school_id,
            department_id=department_id,
        ),
        fetch_limit=settings.PEER_FETCH_LIMIT,
        view_limit=settings.PEER_VIEW_LIMIT,
    )

    return PeerDirectoryResponse(
        mode=mode,
        peers=[
            PeerEntry(
                peer=entry.peer,
                score=entry.score,
                verified_member=entry.verified_member,
                university_name=entry.university_name,
            )
            for entry in entries
        ],
        total=len(entries),
    )


@router.get("/matches", response_model=MatchesResponse)
async def list_matches(
    locale: LocaleDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Backend recommendations grouped by how many of school, university and
    city the student shares with the viewer. Labels use the request locale.
    """
    grouped = PeerService.matches(str(user.id))

    return MatchesResponse(
        strong_matches=[MatchEntry.from_match(match, locale) for match in grouped.strong_matches],
        medium_matches=[MatchEntry.from_match(match, locale) for match in grouped.medium_matches],
        weak_matches=[MatchEntry.from_match(match, locale) for match in grouped.weak_matches],
    )
