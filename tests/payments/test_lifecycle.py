"""Tests for PaymentLifecycle: creation, review transitions, owner edits and reads."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tests.fakes import make_payment
from wifidash.core.errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from wifidash.payments.lifecycle import PaymentLifecycle
from wifidash.payments.models import Actor, NotificationType, PaymentStatus, UserRole
from wifidash.services.notifications.service import NotificationDispatcher

START = datetime(2024, 1, 31, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def dispatcher(notifications, users, mailer):
    return NotificationDispatcher(notifications, users, mailer, "https://dash.example.com")


@pytest.fixture
def lifecycle(payments, dispatcher):
    return PaymentLifecycle(payments, dispatcher, clock=lambda: START)


def _submit(lifecycle, **overrides):
    kwargs = {"amount": "500", "method": "upi", "duration_months": 1, "screenshot_url": "https://blobs.example.com/p1"}
    kwargs.update(overrides)
    return lifecycle.create("user-1", **kwargs)


class TestCreate:
    def test_creates_pending_with_computed_period(self, lifecycle):
        payment = _submit(lifecycle, duration_months=1)

        assert payment.status == PaymentStatus.PENDING
        assert payment.amount == Decimal("500")
        assert payment.start_date == START
        assert payment.end_date == datetime(2024, 2, 29, 10, 30, tzinfo=timezone.utc)
        assert payment.approved_at is None
        assert payment.rejection_reason is None

    def test_notifies_every_admin(self, lifecycle, notifications):
        payment = _submit(lifecycle)

        admin_rows = notifications.for_user("admin-1")
        assert len(admin_rows) == 1
        assert admin_rows[0].title == "New Payment Submission"
        assert admin_rows[0].metadata == {"payment_id": payment.id, "user_id": "user-1"}
        assert notifications.for_user("user-1") == []

    @pytest.mark.parametrize("amount", ["-1", "abc", None, "NaN"])
    def test_rejects_bad_amount(self, lifecycle, payments, amount):
        with pytest.raises(ValidationError) as exc:
            _submit(lifecycle, amount=amount)
        assert exc.value.field == "amount"
        assert payments.rows == {}

    def test_zero_amount_allowed(self, lifecycle):
        assert _submit(lifecycle, amount=0).amount == Decimal("0")

    @pytest.mark.parametrize("duration", [0, 13, 2.5, True, "3"])
    def test_rejects_bad_duration(self, lifecycle, duration):
        with pytest.raises(ValidationError) as exc:
            _submit(lifecycle, duration_months=duration)
        assert exc.value.field == "duration_months"

    def test_rejects_unknown_method(self, lifecycle):
        with pytest.raises(ValidationError) as exc:
            _submit(lifecycle, method="cash")
        assert exc.value.field == "method"


class TestApprove:
    def test_approve_pending(self, lifecycle, notifications):
        payment = _submit(lifecycle)

        approved = lifecycle.approve(payment.id, "admin-1")

        assert approved.status == PaymentStatus.APPROVED
        assert approved.approved_by == "admin-1"
        assert approved.approved_at == START
        assert approved.rejection_reason is None
        owner_rows = notifications.for_user("user-1")
        assert [n.type for n in owner_rows] == [NotificationType.PAYMENT_APPROVED]
        assert owner_rows[0].title == "Payment Approved"

    def test_approve_twice_fails_and_keeps_record(self, lifecycle, payments, notifications):
        payment = _submit(lifecycle)
        first = lifecycle.approve(payment.id, "admin-1")

        with pytest.raises(InvalidStateError):
            lifecycle.approve(payment.id, "admin-2")

        assert payments.find_by_id(payment.id) == first
        assert len(notifications.for_user("user-1")) == 1

    def test_approve_rejected_payment_fails(self, lifecycle):
        payment = _submit(lifecycle)
        lifecycle.reject(payment.id, "admin-1", "Screenshot is unreadable")

        with pytest.raises(InvalidStateError):
            lifecycle.approve(payment.id, "admin-1")

    def test_lost_race_raises_invalid_state(self, lifecycle, payments, notifications):
        payment = _submit(lifecycle)
        payments.race_on_update = True

        with pytest.raises(InvalidStateError):
            lifecycle.approve(payment.id, "admin-1")
        assert notifications.for_user("user-1") == []

    def test_approve_missing(self, lifecycle):
        with pytest.raises(NotFoundError):
            lifecycle.approve("nope", "admin-1")


class TestReject:
    def test_reject_with_reason(self, lifecycle, notifications):
        payment = _submit(lifecycle)

        rejected = lifecycle.reject(payment.id, "admin-1", "  Amount does not match  ")

        assert rejected.status == PaymentStatus.REJECTED
        assert rejected.rejection_reason == "Amount does not match"
        assert rejected.approved_at is None and rejected.approved_by is None
        row = notifications.for_user("user-1")[0]
        assert row.type == NotificationType.PAYMENT_REJECTED
        assert row.message.endswith("Reason: Amount does not match")

    @pytest.mark.parametrize("reason", [None, "", "too short", "         x"])
    def test_short_reason_leaves_payment_pending(self, lifecycle, payments, reason):
        payment = _submit(lifecycle)

        with pytest.raises(ValidationError) as exc:
            lifecycle.reject(payment.id, "admin-1", reason)

        assert exc.value.field == "reason"
        assert payments.find_by_id(payment.id).status == PaymentStatus.PENDING

    def test_reject_approved_fails(self, lifecycle):
        payment = _submit(lifecycle)
        lifecycle.approve(payment.id, "admin-1")

        with pytest.raises(InvalidStateError):
            lifecycle.reject(payment.id, "admin-1", "Changed my mind about it")


class TestUpdate:
    owner = Actor(user_id="user-1")

    def test_owner_updates_pending(self, lifecycle):
        payment = _submit(lifecycle)

        updated = lifecycle.update(payment.id, {"duration_months": 3, "notes": "ref 42"}, self.owner)

        assert updated.duration_months == 3
        assert updated.end_date == datetime(2024, 4, 30, 10, 30, tzinfo=timezone.utc)
        assert updated.notes == "ref 42"

    def test_other_user_forbidden(self, lifecycle):
        payment = _submit(lifecycle)
        with pytest.raises(ForbiddenError):
            lifecycle.update(payment.id, {"notes": "x"}, Actor(user_id="user-2"))

    def test_approved_payment_is_frozen(self, lifecycle):
        payment = _submit(lifecycle)
        lifecycle.approve(payment.id, "admin-1")
        with pytest.raises(InvalidStateError):
            lifecycle.update(payment.id, {"notes": "x"}, self.owner)

    def test_status_is_not_patchable(self, lifecycle):
        payment = _submit(lifecycle)
        with pytest.raises(ValidationError):
            lifecycle.update(payment.id, {"status": "approved"}, self.owner)


class TestReads:
    def test_get_enforces_ownership(self, lifecycle):
        payment = _submit(lifecycle)

        assert lifecycle.get(payment.id, Actor(user_id="user-1")).id == payment.id
        assert lifecycle.get(payment.id, Actor(user_id="admin-1", role=UserRole.ADMIN)).id == payment.id
        with pytest.raises(ForbiddenError):
            lifecycle.get(payment.id, Actor(user_id="user-2"))

    def test_upcoming_uses_reminder_window(self, lifecycle, payments):
        now = datetime(2024, 6, 15, tzinfo=timezone.utc)
        soon = make_payment(end_date=now + timedelta(days=2))
        edge = make_payment(end_date=now + timedelta(days=3))
        later = make_payment(end_date=now + timedelta(days=4))
        pending = make_payment(end_date=now + timedelta(days=1), status=PaymentStatus.PENDING)
        payments.seed(soon, edge, later, pending)

        ids = [p.id for p in lifecycle.upcoming(now=now)]

        assert ids == [soon.id, edge.id]

    def test_dashboard_stats(self, lifecycle, payments):
        payments.seed(
            make_payment(amount=Decimal("500")),
            make_payment(amount=Decimal("1400")),
            make_payment(status=PaymentStatus.PENDING, amount=Decimal("999")),
            make_payment(status=PaymentStatus.REJECTED, amount=Decimal("50")),
        )

        stats = lifecycle.dashboard_stats()

        assert stats["total_payments"] == 4
        assert stats["pending_payments"] == 1
        assert stats["approved_payments"] == 2
        assert stats["rejected_payments"] == 1
        assert stats["total_revenue"] == Decimal("1900")
        assert len(stats["recent_payments"]) == 4

    def test_list_for_user_pages(self, lifecycle, payments):
        for i in range(3):
            payments.seed(make_payment(created_at=START + timedelta(minutes=i)))
        payments.seed(make_payment(user_id="user-2"))

        page = lifecycle.list_for_user("user-1", page=1, limit=2)

        assert page.total == 3
        assert page.total_pages == 2
        assert len(page.items) == 2

    def test_delete_missing(self, lifecycle):
        with pytest.raises(NotFoundError):
            lifecycle.delete("missing")
