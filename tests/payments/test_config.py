"""Tests for payment config getters."""
from unittest.mock import patch


def test_getters_read_settings():
    with patch("wifidash.payments.config.settings") as mock_settings:
        mock_settings.reminder_days_ahead = 5
        mock_settings.screenshot_grace_days = 30
        mock_settings.frontend_url = "https://wifi.example.org"
        from wifidash.payments.config import (
            get_frontend_url,
            get_reminder_days_ahead,
            get_screenshot_grace_days,
        )

        assert get_reminder_days_ahead() == 5
        assert get_screenshot_grace_days() == 30
        assert get_frontend_url() == "https://wifi.example.org"


def test_defaults():
    from wifidash.payments.config import get_reminder_days_ahead, get_screenshot_grace_days

    assert get_reminder_days_ahead() == 3
    assert get_screenshot_grace_days() == 15
