"""
Daily wall-clock triggers for Celery beat.
"""
from dataclasses import dataclass

from celery.schedules import crontab

from wifidash.core.config import settings


@dataclass(frozen=True)
class DailyTrigger:
    name: str
    task: str
    hour: int
    minute: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"{self.name}: hour must be 0-23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"{self.name}: minute must be 0-59, got {self.minute}")

    def to_beat_entry(self) -> dict:
        return {"task": self.task, "schedule": crontab(hour=self.hour, minute=self.minute)}


def daily_triggers() -> list[DailyTrigger]:
    return [
        DailyTrigger(
            name="send-payment-reminders",
            task="wifidash.workers.tasks.reminders.send_payment_reminders",
            hour=settings.reminder_hour,
            minute=settings.reminder_minute,
        ),
        DailyTrigger(
            name="cleanup-expired-screenshots",
            task="wifidash.workers.tasks.cleanup.cleanup_expired_screenshots",
            hour=settings.cleanup_hour,
            minute=settings.cleanup_minute,
        ),
    ]


def beat_schedule(triggers: list[DailyTrigger] | None = None) -> dict[str, dict]:
    triggers = daily_triggers() if triggers is None else triggers
    return {t.name: t.to_beat_entry() for t in triggers}
