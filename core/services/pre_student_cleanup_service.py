# =============================================================================
# core/services/pre_student_cleanup_service.py - Pre-student Pruning
# =============================================================================
# Pre-students sign up before they have a university email. Accounts that
# never verified within the retention window are deleted: first the
# profile row, then the auth user. One failing account never stops the run.
# =============================================================================

import calendar
import logging
from datetime import datetime, timezone

from core.models.cleanup import CleanupError, CleanupResult, CleanupStep
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)


def months_before(moment: datetime, months: int) -> datetime:
    """Same wall-clock time `months` calendar months earlier, clamped to month end."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class PreStudentCleanupService:
    """Deletes expired, unverified pre-student accounts."""

    @staticmethod
    def find_expired(cutoff: datetime):
        """Profiles eligible for deletion (QueryResult)."""
        return SupabaseClient.execute(
            SupabaseClient.table("profiles")
            .select("id")
            .eq("is_pre_student", True)
            .eq("is_verified_student", False)
            .is_("university_email", "null")
            .lt("created_at", cutoff.isoformat()),
            description="expired pre-students",
        )

    @staticmethod
    def run(retention_months: int = 4, now: datetime | None = None) -> CleanupResult:
        """
        Delete every expired pre-student.

        Args:
            retention_months: Accounts created before now minus this many months go
            now: Reference time (UTC); defaults to the current time

        Returns:
            CleanupResult with per-account errors; status_code is 500 when
            the initial query failed, 207 on partial failure, 200 otherwise
        """
        cutoff = months_before(now or datetime.now(timezone.utc), retention_months)
        logger.info(f"Pruning pre-students created before {cutoff.isoformat()}")

        try:
            found = PreStudentCleanupService.find_expired(cutoff)
        except SupabaseClientError as e:
            logger.error(f"Pre-student query failed: {e.message}")
            return CleanupResult(errors=[
                CleanupError(id="query", step=CleanupStep.QUERY, message=e.message),
            ])
        if not found.ok:
            logger.error(f"Pre-student query failed: {found.message}")
            return CleanupResult(errors=[
                CleanupError(id="query", step=CleanupStep.QUERY, message=found.message or "query failed"),
            ])

        errors: list[CleanupError] = []
        deleted = 0

        for row in found.data:
            profile_id = row["id"]

            try:
                removed = SupabaseClient.execute(
                    SupabaseClient.table("profiles").delete().eq("id", profile_id),
                    description="delete profile",
                )
            except SupabaseClientError as e:
                errors.append(CleanupError(id=profile_id, step=CleanupStep.PROFILE_DELETE, message=e.message))
                continue
            if not removed.ok:
                errors.append(CleanupError(
                    id=profile_id,
                    step=CleanupStep.PROFILE_DELETE,
                    message=removed.message or "profile delete failed",
                ))
                continue

            try:
                SupabaseClient.delete_auth_user(profile_id)
            except SupabaseClientError as e:
                errors.append(CleanupError(id=profile_id, step=CleanupStep.AUTH_DELETE, message=e.message))
                continue

            deleted += 1

        result = CleanupResult(scanned=len(found.data), deleted=deleted, errors=errors)
        logger.info(
            f"Pre-student cleanup: scanned={result.scanned} deleted={result.deleted} "
            f"errors={len(result.errors)}"
        )
        return result
