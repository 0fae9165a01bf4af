# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Tasks:
# - cleanup_pre_students: daily pruning of unverified pre-student accounts
# =============================================================================

import logging
from typing import Any

from celery import shared_task

from app.config import settings
from core.services.pre_student_cleanup_service import PreStudentCleanupService

logger = logging.getLogger(__name__)


@shared_task(bind=True, name="workers.tasks.cleanup_pre_students")
def cleanup_pre_students(self, retention_months: int | None = None) -> dict[str, Any]:
    """
    Delete pre-students that never verified a university email.

    Args:
        retention_months: Override for PRE_STUDENT_RETENTION_MONTHS

    Returns:
        Dict with scanned, deleted, errors and an HTTP-style status_code
        (500 query failed, 207 partial failure, 200 clean)
    """
    months = retention_months or settings.PRE_STUDENT_RETENTION_MONTHS
    result = PreStudentCleanupService.run(retention_months=months)

    if result.status_code != 200:
        logger.warning(f"Pre-student cleanup finished with status {result.status_code}")

    return {
        **result.model_dump(mode="json"),
        "status_code": result.status_code,
    }
