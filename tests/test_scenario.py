"""
Full subscription cycle: submit, approve, remind before expiry, clean up the
proof after the grace period.
"""
from datetime import datetime, timedelta, timezone

from wifidash.payments.lifecycle import PaymentLifecycle
from wifidash.payments.models import CleanupResult, NotificationType, PaymentStatus, ReminderResult
from wifidash.services.cleanup.service import ScreenshotCleanupService
from wifidash.services.notifications.service import NotificationDispatcher
from wifidash.services.reminders.service import PaymentReminderService

SUBMITTED = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def test_payment_lifecycle_end_to_end(payments, notifications, users, mailer, storage):
    dispatcher = NotificationDispatcher(notifications, users, mailer, "https://dash.example.com")
    lifecycle = PaymentLifecycle(payments, dispatcher, clock=lambda: SUBMITTED)
    reminders = PaymentReminderService(payments, users, notifications, mailer, "https://dash.example.com", days_ahead=3)
    cleanup = ScreenshotCleanupService(payments, storage, grace_days=15)

    payment = lifecycle.create("user-1", 500, "qr_code", 1, screenshot_url="https://blobs.example.com/proofs/p1")
    assert payment.end_date == datetime(2024, 4, 1, 9, 0, tzinfo=timezone.utc)
    assert [n.title for n in notifications.for_user("admin-1")] == ["New Payment Submission"]

    lifecycle.approve(payment.id, "admin-1")
    assert payments.find_by_id(payment.id).status == PaymentStatus.APPROVED

    # nothing due a week before expiry
    assert reminders.run(payment.end_date - timedelta(days=7)) == ReminderResult()
    # two days before expiry the owner gets an in-app reminder and an email
    assert reminders.run(payment.end_date - timedelta(days=2)) == ReminderResult(notified=1, emailed=1, errors=0)
    types = [n.type for n in notifications.for_user("user-1")]
    assert types.count(NotificationType.PAYMENT_REMINDER) == 1
    assert types.count(NotificationType.PAYMENT_APPROVED) == 1

    # still inside the grace period
    assert cleanup.run(payment.end_date + timedelta(days=10)) == CleanupResult()
    assert payments.find_by_id(payment.id).screenshot_url is not None

    after_grace = payment.end_date + timedelta(days=16)
    assert cleanup.run(after_grace) == CleanupResult(success=1, errors=0)
    assert storage.deleted == ["proofs/p1"]
    assert payments.find_by_id(payment.id).screenshot_url is None
    assert cleanup.run(after_grace) == CleanupResult(success=0, errors=0)
