"""SqlPaymentRepository against a real SQLite session: conditional updates, job queries, constraints."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError

from tests.fakes import FakeStorage
from wifidash.core.errors import InvalidStateError
from wifidash.models.user import User
from wifidash.payments.lifecycle import PaymentLifecycle
from wifidash.payments.models import CleanupResult, PaymentMethod, PaymentStatus
from wifidash.repositories.payments import SqlPaymentRepository
from wifidash.services.cleanup.service import ScreenshotCleanupService

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def add_user(db, user_id, role="user"):
    db.add(User(
        id=user_id,
        email=f"{user_id}@example.com",
        first_name=user_id,
        last_name="Test",
        password_hash="x",
        role=role,
    ))
    db.commit()


def add_payment(repo, **kwargs):
    fields = {
        "user_id": "u1",
        "amount": Decimal("500.00"),
        "method": PaymentMethod.UPI,
        "status": PaymentStatus.APPROVED,
        "duration_months": 1,
        "start_date": NOW - timedelta(days=90),
        "end_date": NOW,
        "screenshot_url": f"{FakeStorage.PREFIX}proofs/{uuid4().hex}.png",
    }
    fields.update(kwargs)
    return repo.add(**fields)


@pytest.fixture
def repo(db_session):
    add_user(db_session, "u1")
    add_user(db_session, "u2")
    return SqlPaymentRepository(db_session)


class TestConditionalUpdates:
    def test_add_persists_pending_payment(self, repo):
        p = add_payment(repo, status=PaymentStatus.PENDING)

        assert p.id
        assert p.status == PaymentStatus.PENDING
        assert repo.find_by_id(p.id).amount == Decimal("500.00")

    def test_second_approve_matches_no_row(self, repo):
        p = add_payment(repo, status=PaymentStatus.PENDING)

        first = repo.update_status(p.id, PaymentStatus.APPROVED, {"approved_by": "admin-1", "approved_at": NOW})
        second = repo.update_status(p.id, PaymentStatus.APPROVED, {"approved_by": "admin-2", "approved_at": NOW})

        assert first.status == PaymentStatus.APPROVED
        assert second is None
        assert repo.find_by_id(p.id).approved_by == "admin-1"

    def test_reject_after_approve_matches_no_row(self, repo):
        p = add_payment(repo, status=PaymentStatus.PENDING)
        repo.update_status(p.id, PaymentStatus.APPROVED, {"approved_by": "admin-1"})

        assert repo.update_status(p.id, PaymentStatus.REJECTED, {"rejection_reason": "too late now"}) is None
        assert repo.find_by_id(p.id).status == PaymentStatus.APPROVED

    def test_update_pending_ignores_terminal_rows(self, repo):
        p = add_payment(repo, status=PaymentStatus.REJECTED)

        assert repo.update_pending(p.id, {"notes": "edited"}) is None
        assert repo.find_by_id(p.id).notes is None

    def test_missing_row_returns_none(self, repo):
        assert repo.update_status("nope", PaymentStatus.APPROVED, {}) is None

    def test_lifecycle_double_approve_raises(self, repo):
        lifecycle = PaymentLifecycle(repo, MagicMock(), clock=lambda: NOW)
        p = lifecycle.create("u1", 500, "upi", 1)

        lifecycle.approve(p.id, "admin-1")
        with pytest.raises(InvalidStateError, match="not pending"):
            lifecycle.approve(p.id, "admin-2")


class TestConstraints:
    def test_negative_amount_rejected(self, repo):
        with pytest.raises(IntegrityError):
            add_payment(repo, amount=Decimal("-1"))

    def test_duration_out_of_range_rejected(self, repo):
        with pytest.raises(IntegrityError):
            add_payment(repo, duration_months=13)

    def test_session_usable_after_failed_write(self, repo):
        with pytest.raises(IntegrityError):
            add_payment(repo, end_date=NOW - timedelta(days=120))

        p = add_payment(repo)

        assert repo.find_by_id(p.id) is not None


class TestJobQueries:
    def test_expiring_window_is_inclusive_and_ordered(self, repo):
        cutoff = NOW + timedelta(days=3)
        later = add_payment(repo, end_date=cutoff)
        sooner = add_payment(repo, end_date=NOW - timedelta(days=1))
        add_payment(repo, end_date=cutoff + timedelta(seconds=1))
        add_payment(repo, end_date=NOW, status=PaymentStatus.PENDING)
        other = add_payment(repo, user_id="u2", end_date=NOW)

        assert [p.id for p in repo.find_expiring_before(cutoff)] == [sooner.id, other.id, later.id]
        assert [p.id for p in repo.find_expiring_before(cutoff, user_id="u2")] == [other.id]

    def test_cleanup_eligibility_boundaries(self, repo):
        cutoff = NOW - timedelta(days=15)
        eligible = add_payment(repo, end_date=cutoff - timedelta(seconds=1))
        add_payment(repo, end_date=cutoff)
        add_payment(repo, end_date=cutoff - timedelta(days=30), screenshot_url=None)
        add_payment(repo, end_date=cutoff - timedelta(days=30), status=PaymentStatus.PENDING)
        add_payment(repo, end_date=cutoff - timedelta(days=30), status=PaymentStatus.REJECTED)

        service = ScreenshotCleanupService(repo, FakeStorage(), grace_days=15)

        assert [p.id for p in service.find_eligible(NOW)] == [eligible.id]

    def test_clear_screenshot(self, repo):
        p = add_payment(repo)

        assert repo.clear_screenshot(p.id) is True
        assert repo.find_by_id(p.id).screenshot_url is None
        assert repo.clear_screenshot("nope") is False

    def test_stats(self, repo):
        add_payment(repo, amount=Decimal("500.00"))
        add_payment(repo, amount=Decimal("1400.00"))
        add_payment(repo, status=PaymentStatus.PENDING)
        add_payment(repo, status=PaymentStatus.REJECTED)

        counts = repo.count_by_status()

        assert counts == {PaymentStatus.PENDING: 1, PaymentStatus.APPROVED: 2, PaymentStatus.REJECTED: 1}
        assert repo.approved_revenue() == Decimal("1900.00")
        assert len(repo.recent(3)) == 3


def test_cleanup_continues_after_database_failure(db_session, repo):
    cutoff = NOW - timedelta(days=15)
    broken = add_payment(repo, end_date=cutoff - timedelta(days=3))
    ok_1 = add_payment(repo, end_date=cutoff - timedelta(days=2))
    ok_2 = add_payment(repo, end_date=cutoff - timedelta(days=1))

    def fail_for_broken(conn, cursor, statement, parameters, context, executemany):
        if statement.startswith("UPDATE payments") and broken.id in parameters:
            raise RuntimeError("disk I/O error")

    engine = db_session.get_bind()
    event.listen(engine, "before_cursor_execute", fail_for_broken)
    try:
        storage = FakeStorage()
        result = ScreenshotCleanupService(repo, storage, grace_days=15).run(NOW)
    finally:
        event.remove(engine, "before_cursor_execute", fail_for_broken)

    assert result == CleanupResult(success=2, errors=1)
    assert repo.find_by_id(ok_1.id).screenshot_url is None
    assert repo.find_by_id(ok_2.id).screenshot_url is None
    assert repo.find_by_id(broken.id).screenshot_url is not None
