# =============================================================================
# tests/test_pre_student_cleanup.py - Pre-student Cleanup Tests
# =============================================================================
# This module contains tests for:
# - The retention cutoff (calendar months, clamped to month end)
# - Per-account error collection and the run status code
# - The Celery task wrapper
# =============================================================================

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from core.models.cleanup import CleanupStep
from core.services.pre_student_cleanup_service import PreStudentCleanupService, months_before
from lib.supabase_client import QueryResult, ResultStatus, SupabaseClientError

FAILED = QueryResult(status=ResultStatus.FAILED, message="permission denied", error_code="42501")
NOW = datetime(2025, 6, 30, 3, 0, tzinfo=timezone.utc)


@pytest.fixture
def supabase():
    with patch("core.services.pre_student_cleanup_service.SupabaseClient") as mock:
        yield mock


class TestMonthsBefore:
    """Tests for months_before."""

    def test_simple(self):
        assert months_before(datetime(2025, 6, 15), 4) == datetime(2025, 2, 15)

    def test_clamps_to_month_end(self):
        assert months_before(NOW, 4) == datetime(2025, 2, 28, 3, 0, tzinfo=timezone.utc)

    def test_crosses_year(self):
        assert months_before(datetime(2025, 2, 10), 4) == datetime(2024, 10, 10)


class TestCleanupRun:
    """Tests for PreStudentCleanupService.run."""

    def test_deletes_profile_then_auth_user(self, supabase):
        supabase.execute.side_effect = [
            QueryResult.success([{"id": "p1"}, {"id": "p2"}]),
            QueryResult.success([]),
            QueryResult.success([]),
        ]

        result = PreStudentCleanupService.run(retention_months=4, now=NOW)

        assert (result.scanned, result.deleted, result.errors) == (2, 2, [])
        assert result.status_code == 200
        assert [c.args[0] for c in supabase.delete_auth_user.call_args_list] == ["p1", "p2"]

    def test_cutoff_is_passed_to_query(self, supabase):
        supabase.execute.return_value = QueryResult.success([])

        PreStudentCleanupService.run(retention_months=4, now=NOW)

        query = supabase.table.return_value.select.return_value
        query.eq.assert_called_with("is_pre_student", True)
        lt = query.eq.return_value.eq.return_value.is_.return_value.lt
        lt.assert_called_once_with("created_at", "2025-02-28T03:00:00+00:00")

    def test_query_failure_is_500(self, supabase):
        supabase.execute.return_value = FAILED

        result = PreStudentCleanupService.run(now=NOW)

        assert result.status_code == 500
        assert result.errors[0].step is CleanupStep.QUERY
        supabase.delete_auth_user.assert_not_called()

    def test_profile_delete_failure_skips_auth_delete(self, supabase):
        supabase.execute.side_effect = [
            QueryResult.success([{"id": "p1"}, {"id": "p2"}]),
            FAILED,
            QueryResult.success([]),
        ]

        result = PreStudentCleanupService.run(now=NOW)

        assert result.deleted == 1
        assert result.status_code == 207
        assert [(e.id, e.step) for e in result.errors] == [("p1", CleanupStep.PROFILE_DELETE)]
        supabase.delete_auth_user.assert_called_once_with("p2")

    def test_profile_delete_request_error_continues_loop(self, supabase):
        supabase.execute.side_effect = [
            QueryResult.success([{"id": "p1"}, {"id": "p2"}]),
            SupabaseClientError("timeout", code="REQUEST_FAILED"),
            QueryResult.success([]),
        ]

        result = PreStudentCleanupService.run(now=NOW)

        assert result.deleted == 1
        assert result.status_code == 207
        assert [(e.id, e.step, e.message) for e in result.errors] == [
            ("p1", CleanupStep.PROFILE_DELETE, "timeout"),
        ]
        supabase.delete_auth_user.assert_called_once_with("p2")

    def test_query_request_error_is_500(self, supabase):
        supabase.execute.side_effect = SupabaseClientError("connection refused", code="REQUEST_FAILED")

        result = PreStudentCleanupService.run(now=NOW)

        assert result.status_code == 500
        assert result.errors[0].step is CleanupStep.QUERY
        assert result.errors[0].message == "connection refused"
        supabase.delete_auth_user.assert_not_called()

    def test_auth_delete_failure_is_collected(self, supabase):
        supabase.execute.side_effect = [
            QueryResult.success([{"id": "p1"}]),
            QueryResult.success([]),
        ]
        supabase.delete_auth_user.side_effect = SupabaseClientError("user not found", code="AUTH_DELETE_FAILED")

        result = PreStudentCleanupService.run(now=NOW)

        assert result.deleted == 0
        assert result.errors[0].step is CleanupStep.AUTH_DELETE
        assert result.status_code == 207


class TestCleanupTask:
    """Tests for the Celery task wrapper."""

    def test_task_returns_summary_with_status(self, supabase):
        from workers.tasks import cleanup_pre_students

        supabase.execute.return_value = QueryResult.success([])

        outcome = cleanup_pre_students.run()

        assert outcome["status_code"] == 200
        assert outcome["scanned"] == 0
        assert outcome["errors"] == []
