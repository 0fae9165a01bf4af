# =============================================================================
# core/services/lookup_service.py - Academic Lookup Cascade
# =============================================================================
# Resolves the city -> university -> school -> department pickers.
#
# Each lookup first asks a Postgres function that does the aggregation
# server-side. Projects where that function (or a table it reads) has not
# been migrated yet answer UNSUPPORTED, and the lookup falls back to plain
# table queries joined here, deduplicated by id and sorted by name. Any
# other error is fatal for the lookup.
# =============================================================================

import logging
from typing import Any, Callable, Sequence, TypeVar

from pydantic import BaseModel

from app.exceptions import LookupFailedError
from core.models.lookup import (
    DepartmentLookupRow,
    LookupOption,
    SchoolLookupRow,
    UniversityLookupRow,
)
from lib.supabase_client import QueryResult, SupabaseClient
from lib.utils import name_sort_key, normalize_id, unique_by_id

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Placeholder school created for universities without faculties
CENTRAL_SCHOOL_NAME = "Κεντρική Σχολή"

UNIVERSITY_COLUMNS = "id, name"
UNIVERSITY_COLUMNS_WITH_DOMAINS = "id, name, email_domains, allowed_email_domains"


# =============================================================================
# Cleaning
# =============================================================================

def sort_by_name(rows: Sequence[M]) -> list[M]:
    return sorted(unique_by_id(rows), key=lambda row: name_sort_key(row.name))


def clean_schools(rows: Sequence[SchoolLookupRow]) -> list[SchoolLookupRow]:
    """Dedupe, sort, and hide the central-school placeholder when real schools exist."""
    ordered = sort_by_name(rows)
    if not any(row.name != CENTRAL_SCHOOL_NAME for row in ordered):
        return ordered
    return [row for row in ordered if row.name != CENTRAL_SCHOOL_NAME]


def _ids(rows: list[dict[str, Any]], column: str) -> list[str]:
    """Distinct non-empty ids of one column, in first-seen order."""
    seen: dict[str, None] = {}
    for row in rows:
        value = row.get(column)
        if isinstance(value, str) and value:
            seen[value] = None
    return list(seen)


def _require(result: QueryResult, operation: str) -> list[dict[str, Any]]:
    """Rows of a query that has no fallback of its own."""
    if not result.ok:
        raise LookupFailedError(operation, result.message)
    return result.data


# =============================================================================
# RPC-then-fallback
# =============================================================================

def resolve_lookup(
    rpc_name: str,
    params: dict[str, Any],
    row_model: type[M],
    clean: Callable[[list[M]], list[M]],
    fallback: Callable[[], list[M]],
) -> list[M]:
    """
    Run one lookup through its RPC, falling back to table queries.

    Args:
        rpc_name: Postgres function doing the aggregation
        params: RPC arguments
        row_model: Model the RPC rows are validated into
        clean: Dedupe/sort applied to RPC rows
        fallback: Table-query implementation used when the RPC is unsupported

    Raises:
        LookupFailedError: RPC failed for any reason other than missing schema
    """
    result = SupabaseClient.rpc(rpc_name, params)

    if result.ok:
        return clean([row_model.model_validate(row) for row in result.data])

    if result.unsupported:
        logger.info(f"{rpc_name} unavailable, resolving with table queries")
        return fallback()

    raise LookupFailedError(rpc_name, result.message)


class LookupService:
    """Cascading lookups for the academic pickers."""

    # -------------------------------------------------------------------------
    # Plain listings
    # -------------------------------------------------------------------------

    @staticmethod
    def list_cities() -> list[LookupOption]:
        result = SupabaseClient.execute(
            SupabaseClient.table("cities").select("id, name").order("name"),
            description="list cities",
        )
        rows = _require(result, "list cities")
        return [LookupOption.model_validate(row) for row in rows]

    @staticmethod
    def list_universities() -> list[LookupOption]:
        result = SupabaseClient.execute(
            SupabaseClient.table("universities").select(UNIVERSITY_COLUMNS).order("name"),
            description="list universities",
        )
        rows = _require(result, "list universities")
        return [LookupOption.model_validate(row) for row in rows]

    # -------------------------------------------------------------------------
    # Universities
    # -------------------------------------------------------------------------

    @staticmethod
    def universities_for_city(
        city_id: str,
        with_domains: bool = False,
    ) -> list[UniversityLookupRow]:
        """
        Universities present in a city.

        A university counts when it is registered in the city or when one of
        its schools has departments located there (satellite campuses).
        Email domains are only returned when `with_domains` is set.
        """

        def clean(rows: list[UniversityLookupRow]) -> list[UniversityLookupRow]:
            ordered = sort_by_name(rows)
            if with_domains:
                return ordered
            return [UniversityLookupRow(id=row.id, name=row.name) for row in ordered]

        return resolve_lookup(
            "get_universities_for_city",
            {"p_city_id": city_id},
            UniversityLookupRow,
            clean,
            lambda: LookupService._universities_for_city_fallback(city_id, with_domains),
        )

    @staticmethod
    def _universities_for_city_fallback(city_id: str, with_domains: bool) -> list[UniversityLookupRow]:
        columns = UNIVERSITY_COLUMNS_WITH_DOMAINS if with_domains else UNIVERSITY_COLUMNS

        direct = _require(
            SupabaseClient.execute(
                SupabaseClient.table("universities").select(columns).eq("city_id", city_id),
                description="universities by city",
            ),
            "universities by city",
        )
        direct_rows = [UniversityLookupRow.model_validate(row) for row in direct]

        departments = SupabaseClient.execute(
            SupabaseClient.table("departments").select("school_id").eq("city_id", city_id),
            description="departments by city",
        )
        if departments.unsupported:
            return sort_by_name(direct_rows)
        school_ids = _ids(_require(departments, "departments by city"), "school_id")
        if not school_ids:
            return sort_by_name(direct_rows)

        schools = _require(
            SupabaseClient.execute(
                SupabaseClient.table("schools").select("university_id").in_("id", school_ids),
                description="schools of city departments",
            ),
            "schools of city departments",
        )
        university_ids = _ids(schools, "university_id")
        if not university_ids:
            return sort_by_name(direct_rows)

        campus = _require(
            SupabaseClient.execute(
                SupabaseClient.table("universities").select(columns).in_("id", university_ids),
                description="universities with city campuses",
            ),
            "universities with city campuses",
        )
        campus_rows = [UniversityLookupRow.model_validate(row) for row in campus]

        return sort_by_name(direct_rows + campus_rows)

    # -------------------------------------------------------------------------
    # Schools
    # -------------------------------------------------------------------------

    @staticmethod
    def schools_for_university(
        university_id: str,
        city_id: str | None = None,
    ) -> list[SchoolLookupRow]:
        """
        Schools of a university, narrowed to a city when that city has
        departments of at least one of them.
        """
        city_id = normalize_id(city_id)
        return resolve_lookup(
            "get_schools_for_university_city",
            {"p_university_id": university_id, "p_city_id": city_id},
            SchoolLookupRow,
            clean_schools,
            lambda: LookupService._schools_for_university_fallback(university_id, city_id),
        )

    @staticmethod
    def _schools_for_university_fallback(university_id: str, city_id: str | None) -> list[SchoolLookupRow]:
        base = _require(
            SupabaseClient.execute(
                SupabaseClient.table("schools")
                .select("id, name, university_id")
                .eq("university_id", university_id)
                .order("name"),
                description="schools by university",
            ),
            "schools by university",
        )
        all_schools = [SchoolLookupRow.model_validate(row) for row in base]
        cleaned_all = clean_schools(all_schools)

        if not city_id or not all_schools:
            return cleaned_all

        departments = SupabaseClient.execute(
            SupabaseClient.table("departments")
            .select("school_id")
            .eq("city_id", city_id)
            .in_("school_id", [school.id for school in all_schools]),
            description="departments of schools in city",
        )
        if departments.unsupported:
            return cleaned_all
        city_school_ids = set(_ids(_require(departments, "departments of schools in city"), "school_id"))
        if not city_school_ids:
            return cleaned_all

        city_schools = clean_schools([school for school in all_schools if school.id in city_school_ids])
        return city_schools or cleaned_all

    # -------------------------------------------------------------------------
    # Departments
    # -------------------------------------------------------------------------

    @staticmethod
    def departments_for_school(
        school_id: str,
        city_id: str | None = None,
    ) -> list[DepartmentLookupRow]:
        """
        Departments of a school located in a city, or all of the school's
        departments when none are located there.
        """
        city_id = normalize_id(city_id)
        return resolve_lookup(
            "get_departments_for_school_city",
            {"p_school_id": school_id, "p_city_id": city_id},
            DepartmentLookupRow,
            sort_by_name,
            lambda: LookupService._departments_for_school_fallback(school_id, city_id),
        )

    @staticmethod
    def _departments_query(school_id: str):
        return (
            SupabaseClient.table("departments")
            .select("id, name, school_id")
            .eq("school_id", school_id)
            .order("name")
        )

    @staticmethod
    def _departments_for_school_fallback(school_id: str, city_id: str | None) -> list[DepartmentLookupRow]:
        query = LookupService._departments_query(school_id)
        if city_id:
            query = query.eq("city_id", city_id)

        by_city = SupabaseClient.execute(query, description="departments by school")
        if by_city.unsupported:
            return []
        city_rows = sort_by_name(
            [DepartmentLookupRow.model_validate(row) for row in _require(by_city, "departments by school")]
        )
        if not city_id or city_rows:
            return city_rows

        everywhere = _require(
            SupabaseClient.execute(
                LookupService._departments_query(school_id),
                description="departments by school (any city)",
            ),
            "departments by school (any city)",
        )
        return sort_by_name([DepartmentLookupRow.model_validate(row) for row in everywhere])
