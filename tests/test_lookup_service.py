# =============================================================================
# tests/test_lookup_service.py - Lookup Cascade Tests
# =============================================================================
# This module contains tests for:
# - RPC success, dedupe and name ordering
# - Fallback to table queries when the RPC is not deployed
# - Fatal errors for anything other than a missing schema object
#
# Tests use a mocked SupabaseClient returning QueryResult values.
# =============================================================================

from unittest.mock import patch

import pytest
from postgrest.exceptions import APIError

from app.exceptions import LookupFailedError
from core.services.lookup_service import CENTRAL_SCHOOL_NAME, LookupService, clean_schools
from core.models.lookup import SchoolLookupRow
from lib.supabase_client import QueryResult, ResultStatus

UNSUPPORTED = QueryResult(status=ResultStatus.UNSUPPORTED, message="function not found", error_code="PGRST202")
FAILED = QueryResult(status=ResultStatus.FAILED, message="permission denied", error_code="42501")


def ok(rows):
    return QueryResult.success(rows)


@pytest.fixture
def supabase():
    with patch("core.services.lookup_service.SupabaseClient") as mock:
        yield mock


# =============================================================================
# QueryResult classification
# =============================================================================

class TestQueryResultClassification:
    """Missing schema objects are recognised by error code."""

    @pytest.mark.parametrize("code", ["42883", "42P01", "42703", "PGRST202", "PGRST205"])
    def test_missing_schema_codes_are_unsupported(self, code):
        error = APIError({"message": "whatever the wording", "code": code})
        assert QueryResult.from_api_error(error).unsupported

    def test_other_codes_fail(self):
        error = APIError({"message": "function get_x does not exist", "code": "42501"})
        result = QueryResult.from_api_error(error)
        assert result.failed
        assert result.error_code == "42501"

    def test_success_wraps_single_row(self):
        assert QueryResult.success({"id": "a"}).data == [{"id": "a"}]
        assert QueryResult.success(None).data == []


# =============================================================================
# Universities
# =============================================================================

class TestUniversitiesForCity:
    """Tests for LookupService.universities_for_city."""

    def test_rpc_rows_deduped_and_sorted(self, supabase):
        supabase.rpc.return_value = ok([
            {"id": "u2", "name": "panteion", "email_domains": ["panteion.gr"]},
            {"id": "u1", "name": "Athens"},
            {"id": "u2", "name": "Panteion", "email_domains": ["panteion.gr"]},
        ])

        result = LookupService.universities_for_city("c1")

        assert [(u.id, u.name) for u in result] == [("u1", "Athens"), ("u2", "Panteion")]
        assert all(u.email_domains is None for u in result)
        supabase.rpc.assert_called_once_with("get_universities_for_city", {"p_city_id": "c1"})
        supabase.execute.assert_not_called()

    def test_rpc_rows_keep_domains_when_asked(self, supabase):
        supabase.rpc.return_value = ok([{"id": "u1", "name": "UoA", "email_domains": ["uoa.gr"]}])

        result = LookupService.universities_for_city("c1", with_domains=True)

        assert result[0].email_domains == ["uoa.gr"]

    def test_fallback_merges_direct_and_campus_universities(self, supabase):
        supabase.rpc.return_value = UNSUPPORTED
        supabase.execute.side_effect = [
            ok([{"id": "u1", "name": "Zeta"}]),
            ok([{"school_id": "s1"}, {"school_id": "s2"}, {"school_id": "s1"}]),
            ok([{"university_id": "u2"}, {"university_id": "u1"}]),
            ok([{"id": "u2", "name": "alpha"}, {"id": "u1", "name": "Zeta"}]),
        ]

        result = LookupService.universities_for_city("c1")

        assert [u.id for u in result] == ["u2", "u1"]
        assert supabase.execute.call_count == 4

    def test_fallback_without_departments_table(self, supabase):
        supabase.rpc.return_value = UNSUPPORTED
        supabase.execute.side_effect = [
            ok([{"id": "u1", "name": "UoA"}]),
            UNSUPPORTED,
        ]

        result = LookupService.universities_for_city("c1")

        assert [u.id for u in result] == ["u1"]

    def test_fallback_query_failure_raises(self, supabase):
        supabase.rpc.return_value = UNSUPPORTED
        supabase.execute.return_value = FAILED

        with pytest.raises(LookupFailedError):
            LookupService.universities_for_city("c1")

    def test_rpc_failure_raises_without_fallback(self, supabase):
        supabase.rpc.return_value = FAILED

        with pytest.raises(LookupFailedError) as exc_info:
            LookupService.universities_for_city("c1")

        assert exc_info.value.status_code == 502
        supabase.execute.assert_not_called()


# =============================================================================
# Schools
# =============================================================================

class TestSchoolsForUniversity:
    """Tests for LookupService.schools_for_university."""

    def test_clean_schools_hides_central_placeholder(self):
        rows = [
            SchoolLookupRow(id="s0", name=CENTRAL_SCHOOL_NAME),
            SchoolLookupRow(id="s1", name="Law"),
        ]
        assert [s.id for s in clean_schools(rows)] == ["s1"]

    def test_clean_schools_keeps_placeholder_when_alone(self):
        rows = [SchoolLookupRow(id="s0", name=CENTRAL_SCHOOL_NAME)]
        assert [s.id for s in clean_schools(rows)] == ["s0"]

    def test_rpc_passes_city(self, supabase):
        supabase.rpc.return_value = ok([{"id": "s1", "name": "Law", "university_id": "u1"}])

        LookupService.schools_for_university("u1", city_id="c1")

        supabase.rpc.assert_called_once_with(
            "get_schools_for_university_city",
            {"p_university_id": "u1", "p_city_id": "c1"},
        )

    def test_blank_city_becomes_null(self, supabase):
        supabase.rpc.return_value = ok([])

        LookupService.schools_for_university("u1", city_id="")

        assert supabase.rpc.call_args[0][1]["p_city_id"] is None

    def test_fallback_narrows_to_city(self, supabase):
        supabase.rpc.return_value = UNSUPPORTED
        supabase.execute.side_effect = [
            ok([
                {"id": "s1", "name": "Law", "university_id": "u1"},
                {"id": "s2", "name": "Medicine", "university_id": "u1"},
            ]),
            ok([{"school_id": "s2"}]),
        ]

        result = LookupService.schools_for_university("u1", city_id="c2")

        assert [s.id for s in result] == ["s2"]

    def test_fallback_city_without_departments_returns_all(self, supabase):
        supabase.rpc.return_value = UNSUPPORTED
        supabase.execute.side_effect = [
            ok([
                {"id": "s2", "name": "medicine", "university_id": "u1"},
                {"id": "s1", "name": "Law", "university_id": "u1"},
            ]),
            ok([]),
        ]

        result = LookupService.schools_for_university("u1", city_id="c9")

        assert [s.id for s in result] == ["s1", "s2"]

    def test_fallback_without_city_is_single_query(self, supabase):
        supabase.rpc.return_value = UNSUPPORTED
        supabase.execute.return_value = ok([{"id": "s1", "name": "Law"}])

        result = LookupService.schools_for_university("u1")

        assert [s.id for s in result] == ["s1"]
        assert supabase.execute.call_count == 1


# =============================================================================
# Departments
# =============================================================================

class TestDepartmentsForSchool:
    """Tests for LookupService.departments_for_school."""

    def test_rpc_success(self, supabase):
        supabase.rpc.return_value = ok([
            {"id": "d2", "name": "Physics", "school_id": "s1"},
            {"id": "d1", "name": "chemistry", "school_id": "s1"},
        ])

        result = LookupService.departments_for_school("s1", city_id="c1")

        assert [d.id for d in result] == ["d1", "d2"]

    def test_fallback_city_rows(self, supabase):
        supabase.rpc.return_value = UNSUPPORTED
        supabase.execute.return_value = ok([{"id": "d1", "name": "Physics", "school_id": "s1"}])

        result = LookupService.departments_for_school("s1", city_id="c1")

        assert [d.id for d in result] == ["d1"]
        assert supabase.execute.call_count == 1

    def test_fallback_retries_without_city(self, supabase):
        supabase.rpc.return_value = UNSUPPORTED
        supabase.execute.side_effect = [
            ok([]),
            ok([{"id": "d1", "name": "Physics", "school_id": "s1"}]),
        ]

        result = LookupService.departments_for_school("s1", city_id="c1")

        assert [d.id for d in result] == ["d1"]

    def test_fallback_table_missing_gives_empty(self, supabase):
        supabase.rpc.return_value = UNSUPPORTED
        supabase.execute.return_value = UNSUPPORTED

        assert LookupService.departments_for_school("s1", city_id="c1") == []


# =============================================================================
# Plain listings
# =============================================================================

class TestListings:
    """Tests for list_cities and list_universities."""

    def test_list_cities(self, supabase):
        supabase.execute.return_value = ok([{"id": "c1", "name": "Athens"}])
        assert [c.name for c in LookupService.list_cities()] == ["Athens"]

    def test_list_cities_failure(self, supabase):
        supabase.execute.return_value = FAILED
        with pytest.raises(LookupFailedError):
            LookupService.list_cities()
