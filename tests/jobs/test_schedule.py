"""Tests for the daily beat triggers."""
import pytest
from celery.schedules import crontab

from wifidash.core.schedule import DailyTrigger, beat_schedule


def test_default_schedule_has_both_jobs():
    schedule = beat_schedule()

    reminders = schedule["send-payment-reminders"]
    cleanup = schedule["cleanup-expired-screenshots"]
    assert reminders["task"] == "wifidash.workers.tasks.reminders.send_payment_reminders"
    assert reminders["schedule"] == crontab(hour=9, minute=0)
    assert cleanup["task"] == "wifidash.workers.tasks.cleanup.cleanup_expired_screenshots"
    assert cleanup["schedule"] == crontab(hour=2, minute=0)


def test_custom_triggers():
    schedule = beat_schedule([DailyTrigger("nightly", "pkg.task", hour=23, minute=30)])
    assert list(schedule) == ["nightly"]
    assert schedule["nightly"]["schedule"] == crontab(hour=23, minute=30)


@pytest.mark.parametrize("hour, minute", [(24, 0), (-1, 0), (9, 60)])
def test_invalid_time_rejected(hour, minute):
    with pytest.raises(ValueError):
        DailyTrigger("bad", "pkg.task", hour=hour, minute=minute)
