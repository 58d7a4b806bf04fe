"""
Celery application: broker and result backend from settings.
Tasks are in wifidash.workers.tasks; beat entries come from wifidash.core.schedule.
"""
from celery import Celery
from celery.signals import setup_logging

from wifidash.core.config import settings
from wifidash.core.logging import configure_logging
from wifidash.core.schedule import beat_schedule

celery_app = Celery(
    "wifidash",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "wifidash.workers.tasks.reminders",
        "wifidash.workers.tasks.cleanup",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_track_started=True,
    task_time_limit=3600,
    result_expires=86400,
    timezone=settings.timezone,
    enable_utc=True,
    beat_schedule=beat_schedule(),
)


@setup_logging.connect
def _setup_logging(**kwargs) -> None:
    # worker and beat log in the same JSON format as the API
    configure_logging()
