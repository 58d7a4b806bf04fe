"""
Payment lifecycle config — typed wrappers over wifidash.core.config.settings.
"""
from __future__ import annotations

from wifidash.core.config import settings

MIN_DURATION_MONTHS = 1
MAX_DURATION_MONTHS = 12
MIN_REJECTION_REASON_LENGTH = 10


def get_reminder_days_ahead() -> int:
    return settings.reminder_days_ahead


def get_screenshot_grace_days() -> int:
    return settings.screenshot_grace_days


def get_frontend_url() -> str:
    return settings.frontend_url
