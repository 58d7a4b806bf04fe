"""Tests for the daily payment reminder job."""
from datetime import timedelta

import pytest

from tests.fakes import make_payment
from wifidash.payments.models import EmailErrorKind, NotificationType, PaymentStatus, ReminderResult
from wifidash.services.email.mailer import EmailDeliveryError
from wifidash.services.reminders.service import PaymentReminderService


@pytest.fixture
def service(payments, users, notifications, mailer):
    return PaymentReminderService(
        payments, users, notifications, mailer, "https://dash.example.com", days_ahead=3
    )


def test_reminds_approved_payments_in_window(service, payments, notifications, mailer, now):
    due = make_payment(end_date=now + timedelta(days=2))
    already_expired = make_payment(end_date=now - timedelta(days=1))
    later = make_payment(end_date=now + timedelta(days=5))
    pending = make_payment(end_date=now + timedelta(days=1), status=PaymentStatus.PENDING)
    payments.seed(due, already_expired, later, pending)

    result = service.run(now)

    assert result == ReminderResult(notified=2, emailed=2, errors=0)
    rows = notifications.for_user("user-1")
    assert {r.metadata["payment_id"] for r in rows} == {due.id, already_expired.id}
    assert all(r.type == NotificationType.PAYMENT_REMINDER for r in rows)
    assert rows[0].title == "Payment Reminder"
    to, subject, html = mailer.attempts[0]
    assert to == "jane@example.com"
    assert subject == "Payment Reminder - WiFi Dashboard"
    assert "https://dash.example.com/dashboard/next-payments" in html


def test_due_date_in_metadata(service, payments, notifications, now):
    p = make_payment(end_date=now + timedelta(days=1))
    payments.seed(p)

    service.run(now)

    assert notifications.for_user("user-1")[0].metadata["due_date"] == p.end_date.isoformat()


def test_email_failure_does_not_stop_the_loop(service, payments, mailer, now):
    payments.seed(
        make_payment(end_date=now + timedelta(days=1)),
        make_payment(end_date=now + timedelta(days=2), user_id="admin-1"),
    )
    mailer.fail_for["jane@example.com"] = EmailDeliveryError(EmailErrorKind.TRANSPORT_ERROR, "smtp down")

    result = service.run(now)

    assert result == ReminderResult(notified=2, emailed=1, errors=1)
    assert len(mailer.attempts) == 2


def test_insert_failure_still_sends_email(service, payments, notifications, mailer, now):
    payments.seed(make_payment(end_date=now + timedelta(days=1)))
    notifications.fail_add_for.add("user-1")

    result = service.run(now)

    assert result == ReminderResult(notified=0, emailed=1, errors=1)
    assert len(mailer.attempts) == 1


def test_without_mailer_only_in_app(payments, users, notifications, now):
    service = PaymentReminderService(payments, users, notifications, None, "https://dash.example.com", days_ahead=3)
    payments.seed(make_payment(end_date=now + timedelta(days=1)))

    assert service.run(now) == ReminderResult(notified=1, emailed=0, errors=0)


def test_nothing_due(service, now):
    assert service.run(now) == ReminderResult()
