# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers, including the beat schedule.
# =============================================================================

from celery.schedules import crontab

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge after completion so a crashed worker re-runs the task
    task_acks_late = True
    worker_prefetch_multiplier = 1

    # Cleanup results are kept for a day
    result_expires = 86400

    # Deleting many auth users can take a while
    task_time_limit = 900
    task_soft_time_limit = 840

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "maintenance": {
            "exchange": "maintenance",
            "routing_key": "maintenance",
        },
    }

    task_routes = {
        "workers.tasks.cleanup_pre_students": {"queue": "maintenance"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Retry Settings
    # -------------------------------------------------------------------------

    task_annotations = {
        "*": {
            "max_retries": 3,
            "default_retry_delay": 60,
        }
    }

    # -------------------------------------------------------------------------
    # Beat Schedule
    # -------------------------------------------------------------------------

    beat_schedule = {
        "cleanup-pre-students-daily": {
            "task": "workers.tasks.cleanup_pre_students",
            "schedule": crontab(hour=settings.CLEANUP_HOUR_UTC, minute=0),
            "options": {"queue": "maintenance"},
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    # -------------------------------------------------------------------------
    # Timezone
    # -------------------------------------------------------------------------

    timezone = "UTC"
    enable_utc = True
