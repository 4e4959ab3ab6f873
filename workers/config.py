# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================

from celery.schedules import crontab

from app.config import settings


class CeleryConfig:
    """Applied to the Celery app via app.config_from_object()."""

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    task_acks_late = True
    worker_prefetch_multiplier = 1

    result_expires = 3600

    # Tasks only call out to n8n and Supabase
    task_time_limit = 120
    task_soft_time_limit = 90

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
        "workflows": {
            "exchange": "workflows",
            "routing_key": "workflows",
        },
    }

    task_routes = {
        "workers.tasks.trigger_avatar_video": {"queue": "workflows"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Periodic Tasks
    # -------------------------------------------------------------------------

    beat_schedule = {
        "cleanup-orphaned-email-secrets": {
            "task": "workers.tasks.cleanup_orphaned_email_secrets",
            "schedule": crontab(hour=3, minute=0),
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    timezone = "UTC"
    enable_utc = True
