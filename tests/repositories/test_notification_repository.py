"""SqlNotificationRepository against a real SQLite session, plus reminder job isolation on a real store."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import event

from wifidash.models.notification import Notification
from wifidash.models.user import User
from wifidash.payments.models import (
    NotificationStatus,
    NotificationType,
    PaymentMethod,
    PaymentStatus,
    ReminderResult,
)
from wifidash.repositories.notifications import SqlNotificationRepository
from wifidash.repositories.payments import SqlPaymentRepository
from wifidash.repositories.users import SqlUserRepository
from wifidash.services.reminders.service import PaymentReminderService

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db(db_session):
    for user_id in ("u1", "u2", "u3"):
        db_session.add(User(
            id=user_id,
            email=f"{user_id}@example.com",
            first_name=user_id,
            last_name="Test",
            password_hash="x",
        ))
    db_session.commit()
    return db_session


@pytest.fixture
def repo(db):
    return SqlNotificationRepository(db)


def _add(repo, user_id, title="Hello"):
    return repo.add(user_id, title, "message body", NotificationType.SYSTEM, metadata={"k": "v"})


def test_add_round_trips_metadata(repo):
    n = _add(repo, "u1")

    stored = repo.find_by_id(n.id)
    assert stored.metadata == {"k": "v"}
    assert stored.status == NotificationStatus.UNREAD
    assert stored.type == NotificationType.SYSTEM


def test_add_many_inserts_one_row_per_recipient(repo):
    rows = repo.add_many([
        {"user_id": uid, "title": "Bulk", "message": "m", "type": NotificationType.SYSTEM}
        for uid in ("u1", "u2", "u3")
    ])

    assert sorted(r.user_id for r in rows) == ["u1", "u2", "u3"]
    assert repo.list(1, 10)[1] == 3


def test_mark_all_read_returns_affected_rows(repo):
    first = _add(repo, "u1")
    _add(repo, "u1")
    _add(repo, "u1")
    _add(repo, "u2")
    repo.mark_read(first.id, NOW)

    assert repo.mark_all_read("u1", NOW) == 2
    assert repo.count_unread("u1") == 0
    assert repo.count_unread("u2") == 1
    assert repo.mark_all_read("u1", NOW) == 0


def test_list_filters_and_pages(repo):
    for i in range(3):
        _add(repo, "u1", title=f"n{i}")
    _add(repo, "u2")

    items, total = repo.list(1, 2, user_id="u1")

    assert total == 3
    assert len(items) == 2
    assert repo.list(1, 10, status=NotificationStatus.READ)[1] == 0


def test_delete(repo):
    n = _add(repo, "u1")

    assert repo.delete(n.id) is True
    assert repo.find_by_id(n.id) is None
    assert repo.delete(n.id) is False


def test_reminders_continue_after_failed_insert(db):
    payments = SqlPaymentRepository(db)
    for days, user_id in ((1, "u1"), (2, "u2"), (2.5, "u3")):
        payments.add(
            user_id=user_id,
            amount=Decimal("500.00"),
            method=PaymentMethod.UPI,
            status=PaymentStatus.APPROVED,
            duration_months=1,
            start_date=NOW - timedelta(days=30),
            end_date=NOW + timedelta(days=days),
        )

    def fail_for_u1(mapper, connection, target):
        if target.user_id == "u1":
            raise RuntimeError("insert failed")

    event.listen(Notification, "before_insert", fail_for_u1)
    try:
        service = PaymentReminderService(
            payments,
            SqlUserRepository(db),
            SqlNotificationRepository(db),
            None,
            "https://dash.example.com",
            days_ahead=3,
        )
        result = service.run(NOW)
    finally:
        event.remove(Notification, "before_insert", fail_for_u1)

    assert result == ReminderResult(notified=2, emailed=0, errors=1)
    assert sorted(n.user_id for n in db.query(Notification).all()) == ["u2", "u3"]
