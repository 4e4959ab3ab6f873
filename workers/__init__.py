# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# Celery configuration and task definitions for work that runs outside the
# request cycle: AI avatar renders and vault housekeeping.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions
# - config.py: Worker-specific settings and the beat schedule
#
# Usage:
#   celery -A workers.celery_app worker -Q default,workflows --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import trigger_avatar_video
#   result = trigger_avatar_video.delay(content_id, "short")
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
