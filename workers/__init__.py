# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# Scheduled maintenance for the community backend.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (pre-student cleanup)
# - config.py: Worker settings and beat schedule
#
# Usage:
#   # Start worker with beat
#   celery -A workers.celery_app worker --beat --loglevel=info
#
#   # Trigger a run by hand
#   from workers.tasks import cleanup_pre_students
#   result = cleanup_pre_students.delay()
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
