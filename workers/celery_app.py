# =============================================================================
# workers/celery_app.py - Celery Application Configuration
# =============================================================================
# Builds the Celery app from app.config settings; the broker and result
# backend share REDIS_URL.
#
# Usage:
#   celery -A workers.celery_app worker -Q default,workflows --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
# =============================================================================

import logging
import time

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun

from app.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# task_id -> monotonic start time
_started_at: dict[str, float] = {}


def _broker_host(url: str) -> str:
    """Strip credentials before logging a Redis URL."""
    return url.rsplit("@", 1)[-1]


def create_celery_app() -> Celery:
    app = Celery("transformo_worker", include=["workers.tasks"])
    app.config_from_object("workers.config:CeleryConfig")
    logger.info(f"Celery broker: {_broker_host(settings.REDIS_URL)}")
    return app


celery_app = create_celery_app()


@celery_app.task(name="workers.ping")
def ping() -> str:
    """Round-trip check: `ping.delay().get(timeout=5)` returns "pong"."""
    return "pong"


# =============================================================================
# Task Lifecycle Logging
# =============================================================================

@task_prerun.connect
def on_task_start(task_id=None, task=None, **_):
    _started_at[task_id] = time.monotonic()
    logger.info(f"{task.name} [{task_id}] started")


@task_postrun.connect
def on_task_done(task_id=None, task=None, state=None, **_):
    started = _started_at.pop(task_id, None)
    elapsed = f" in {time.monotonic() - started:.2f}s" if started is not None else ""
    logger.info(f"{task.name} [{task_id}] {state}{elapsed}")


@task_failure.connect
def on_task_failure(sender=None, task_id=None, exception=None, **_):
    logger.error(f"{sender.name} [{task_id}] failed: {exception}")
