# =============================================================================
# lib/match_tiers.py - Tiered Match Classification
# =============================================================================
# Groups pre-tiered recommendation rows for display.
#
# Rows arrive from the backend recommendation RPC already carrying a
# `match_tier` (1-4). This module does a second, independent pass: it
# checks three predicates (same school, same university, same city) against
# the viewer, picks a label from the first matching combination, and
# buckets rows by how many predicates hold. The backend tier is passed
# through untouched and never used for bucketing.
#
# NOTE: which of the two groupings (backend tier vs. local match count)
# should drive the matches screen is still open with product.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Sequence

from core.models.recommendation import MatchTier, TieredRecommendationRow
from lib.i18n import Locale, LocalizedMessage


class MatchLabelKind(str, Enum):
    """Predicate combinations, declared in evaluation order."""
    SCHOOL_UNIVERSITY_CITY = "school_university_city"
    SCHOOL_UNIVERSITY = "school_university"
    SCHOOL_CITY = "school_city"
    UNIVERSITY_CITY = "university_city"
    SCHOOL = "school"
    UNIVERSITY = "university"
    CITY = "city"
    SUGGESTION = "suggestion"

    @property
    def priority(self) -> int:
        """1-based position in the evaluation order."""
        return list(MatchLabelKind).index(self) + 1


# (school, university, city) requirement per kind; first hit wins
_LABEL_RULES: tuple[tuple[MatchLabelKind, bool, bool, bool], ...] = (
    (MatchLabelKind.SCHOOL_UNIVERSITY_CITY, True, True, True),
    (MatchLabelKind.SCHOOL_UNIVERSITY, True, True, False),
    (MatchLabelKind.SCHOOL_CITY, True, False, True),
    (MatchLabelKind.UNIVERSITY_CITY, False, True, True),
    (MatchLabelKind.SCHOOL, True, False, False),
    (MatchLabelKind.UNIVERSITY, False, True, False),
    (MatchLabelKind.CITY, False, False, True),
)

_LABEL_TEMPLATES: dict[MatchLabelKind, LocalizedMessage] = {
    MatchLabelKind.SCHOOL_UNIVERSITY_CITY: LocalizedMessage(
        en="Same school at {university} in {city}",
        el="Ίδια σχολή στο {university}, {city}",
    ),
    MatchLabelKind.SCHOOL_UNIVERSITY: LocalizedMessage(
        en="Same school at {university}",
        el="Ίδια σχολή στο {university}",
    ),
    MatchLabelKind.SCHOOL_CITY: LocalizedMessage(
        en="Studies {school} in {city}",
        el="Σπουδάζει {school} στην {city}",
    ),
    MatchLabelKind.UNIVERSITY_CITY: LocalizedMessage(
        en="Same university in {city}",
        el="Ίδιο πανεπιστήμιο στην {city}",
    ),
    MatchLabelKind.SCHOOL: LocalizedMessage(
        en="Also studies {school}",
        el="Σπουδάζει επίσης {school}",
    ),
    MatchLabelKind.UNIVERSITY: LocalizedMessage(
        en="Also at {university}",
        el="Επίσης στο {university}",
    ),
    MatchLabelKind.CITY: LocalizedMessage(
        en="Lives in {city}",
        el="Μένει στην {city}",
    ),
    MatchLabelKind.SUGGESTION: LocalizedMessage(
        en="Suggested for you",
        el="Προτείνεται για εσένα",
    ),
}

# Used when an enrichment lookup has no name for the id
_FALLBACK_NAMES = {
    "school": LocalizedMessage(en="the same school", el="την ίδια σχολή"),
    "university": LocalizedMessage(en="your university", el="το πανεπιστήμιό σου"),
    "city": LocalizedMessage(en="your city", el="την πόλη σου"),
}


@dataclass(frozen=True)
class MatchNames:
    """Enrichment lookups (id -> display name) supplied by the caller."""
    schools: Mapping[str, str] = field(default_factory=dict)
    universities: Mapping[str, str] = field(default_factory=dict)
    cities: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ViewerAffiliation:
    """The current user's own school/university/city."""
    school_id: str | None = None
    university_id: str | None = None
    city_id: str | None = None


@dataclass(frozen=True)
class ClassifiedMatch:
    """One row after classification."""
    profile_id: str
    match_tier: MatchTier
    same_school: bool
    same_university: bool
    same_city: bool
    label_kind: MatchLabelKind
    label: LocalizedMessage
    arrival_index: int

    @property
    def match_count(self) -> int:
        return int(self.same_school) + int(self.same_university) + int(self.same_city)

    def render_label(self, locale: Locale) -> str:
        return self.label.render(locale)


@dataclass(frozen=True)
class TieredMatches:
    """Rows grouped by local match count."""
    strong_matches: list[ClassifiedMatch] = field(default_factory=list)
    medium_matches: list[ClassifiedMatch] = field(default_factory=list)
    weak_matches: list[ClassifiedMatch] = field(default_factory=list)


def _same(viewer_value: str | None, row_value: str | None) -> bool:
    return bool(viewer_value) and row_value == viewer_value


def choose_label_kind(same_school: bool, same_university: bool, same_city: bool) -> MatchLabelKind:
    """First combination whose required predicates all hold."""
    for kind, needs_school, needs_university, needs_city in _LABEL_RULES:
        if (
            (not needs_school or same_school)
            and (not needs_university or same_university)
            and (not needs_city or same_city)
        ):
            return kind
    return MatchLabelKind.SUGGESTION


def _name(names: Mapping[str, str], key: str | None, kind: str, locale_field: str) -> str:
    if key and names.get(key):
        return names[key]
    return getattr(_FALLBACK_NAMES[kind], locale_field)


def build_label(kind: MatchLabelKind, row: TieredRecommendationRow, names: MatchNames) -> LocalizedMessage:
    """Fill the label template for `kind` with the row's enrichment names."""
    template = _LABEL_TEMPLATES[kind]
    rendered = {}
    for locale_field in ("en", "el"):
        rendered[locale_field] = getattr(template, locale_field).format(
            school=_name(names.schools, row.school_id, "school", locale_field),
            university=_name(names.universities, row.university_id, "university", locale_field),
            city=_name(names.cities, row.city_id, "city", locale_field),
        )
    return LocalizedMessage(**rendered)


def classify_match(
    row: TieredRecommendationRow,
    viewer: ViewerAffiliation,
    names: MatchNames,
    arrival_index: int = 0,
) -> ClassifiedMatch:
    same_school = _same(viewer.school_id, row.school_id)
    same_university = _same(viewer.university_id, row.university_id)
    same_city = _same(viewer.city_id, row.city_id)
    kind = choose_label_kind(same_school, same_university, same_city)

    return ClassifiedMatch(
        profile_id=row.profile_id,
        match_tier=row.match_tier,
        same_school=same_school,
        same_university=same_university,
        same_city=same_city,
        label_kind=kind,
        label=build_label(kind, row, names),
        arrival_index=arrival_index,
    )


def group_matches(
    rows: Sequence[TieredRecommendationRow],
    viewer: ViewerAffiliation,
    names: MatchNames | None = None,
) -> TieredMatches:
    """
    Classify every row and bucket by match count.

    strong: 2 or 3 matches, most matches first, then arrival order
    medium: exactly 1 match, arrival order
    weak: no match, arrival order
    """
    names = names or MatchNames()
    classified = [classify_match(row, viewer, names, index) for index, row in enumerate(rows)]

    strong = sorted(
        (match for match in classified if match.match_count >= 2),
        key=lambda match: (-match.match_count, match.arrival_index),
    )
    medium = [match for match in classified if match.match_count == 1]
    weak = [match for match in classified if match.match_count == 0]

    return TieredMatches(strong_matches=strong, medium_matches=medium, weak_matches=weak)
