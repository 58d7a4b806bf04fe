"""
PaymentLifecycle — submission and review of manual payment proofs.

    (none) --create--> PENDING --approve--> APPROVED (terminal)
                          |
                          +----reject---> REJECTED (terminal)

Approve/reject go through PaymentRepository.update_status, a single-row update
conditioned on status='pending'; when two admins race, the second sees no
matching row and gets InvalidStateError.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from wifidash.core.errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from wifidash.payments.config import (
    MAX_DURATION_MONTHS,
    MIN_DURATION_MONTHS,
    MIN_REJECTION_REASON_LENGTH,
    get_reminder_days_ahead,
)
from wifidash.payments.dates import add_months
from wifidash.payments.models import (
    Actor,
    NotificationType,
    Page,
    PaymentMethod,
    PaymentRecord,
    PaymentStatus,
)
from wifidash.repositories.payments import PaymentRepository
from wifidash.services.notifications.service import NotificationDispatcher
from wifidash.utils.metrics import (
    payment_transition_conflicts_total,
    payment_transitions_total,
    payments_created_total,
)

logger = logging.getLogger(__name__)

NOT_PENDING_MESSAGE = "Payment is not pending approval"

# Fields an owner may change while the payment is still pending.
PATCHABLE_FIELDS = frozenset({
    "amount", "method", "duration_months", "screenshot_url", "notes", "upi_number", "transaction_id",
})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_amount(amount: Any) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError("Amount must be a number", field="amount") from None
    if not value.is_finite() or value < 0:
        raise ValidationError("Amount must be zero or greater", field="amount")
    return value


def validate_method(method: Any) -> PaymentMethod:
    try:
        return PaymentMethod(method)
    except ValueError:
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(f"Method must be one of: {allowed}", field="method") from None


def validate_duration(duration_months: Any) -> int:
    if isinstance(duration_months, bool) or not isinstance(duration_months, int):
        raise ValidationError("Duration must be a whole number of months", field="duration_months")
    if not MIN_DURATION_MONTHS <= duration_months <= MAX_DURATION_MONTHS:
        raise ValidationError(
            f"Duration must be between {MIN_DURATION_MONTHS} and {MAX_DURATION_MONTHS} months",
            field="duration_months",
        )
    return duration_months


def validate_rejection_reason(reason: str | None) -> str:
    reason = (reason or "").strip()
    if len(reason) < MIN_REJECTION_REASON_LENGTH:
        raise ValidationError(
            f"Rejection reason must be at least {MIN_REJECTION_REASON_LENGTH} characters",
            field="reason",
        )
    return reason


def format_amount(amount: Decimal) -> str:
    return f"{amount:,.2f}"


class PaymentLifecycle:
    def __init__(
        self,
        payments: PaymentRepository,
        notifier: NotificationDispatcher,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.payments = payments
        self.notifier = notifier
        self.clock = clock

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def create(
        self,
        payer_id: str,
        amount: Any,
        method: Any,
        duration_months: Any,
        screenshot_url: str | None = None,
        notes: str | None = None,
        upi_number: str | None = None,
        transaction_id: str | None = None,
    ) -> PaymentRecord:
        value = validate_amount(amount)
        method = validate_method(method)
        duration_months = validate_duration(duration_months)

        start_date = self.clock()
        payment = self.payments.add(
            user_id=payer_id,
            amount=value,
            method=method,
            status=PaymentStatus.PENDING,
            duration_months=duration_months,
            start_date=start_date,
            end_date=add_months(start_date, duration_months),
            screenshot_url=screenshot_url,
            notes=notes,
            upi_number=upi_number,
            transaction_id=transaction_id,
        )
        payments_created_total.labels(method=method.value).inc()
        logger.info("payment_created", extra={"payment_id": payment.id, "user_id": payer_id})

        self.notifier.notify_admins(
            "New Payment Submission",
            f"A new payment of {format_amount(payment.amount)} has been submitted and is awaiting approval.",
            NotificationType.SYSTEM,
            metadata={"payment_id": payment.id, "user_id": payer_id},
        )
        return payment

    def approve(self, payment_id: str, admin_id: str, notes: str | None = None) -> PaymentRecord:
        self._get_pending(payment_id)
        changes: dict[str, Any] = {"approved_at": self.clock(), "approved_by": admin_id}
        if notes is not None:
            changes["notes"] = notes
        payment = self._transition(payment_id, PaymentStatus.APPROVED, changes)
        logger.info("payment_approved", extra={"payment_id": payment_id, "admin_id": admin_id})

        self.notifier.notify(
            payment.user_id,
            "Payment Approved",
            f"Your payment of {format_amount(payment.amount)} has been approved. Your service is now active.",
            NotificationType.PAYMENT_APPROVED,
            metadata={"payment_id": payment.id, "end_date": payment.end_date.isoformat()},
        )
        return payment

    def reject(
        self,
        payment_id: str,
        admin_id: str,
        reason: str | None,
        notes: str | None = None,
    ) -> PaymentRecord:
        reason = validate_rejection_reason(reason)
        self._get_pending(payment_id)
        changes: dict[str, Any] = {"rejection_reason": reason}
        if notes is not None:
            changes["notes"] = notes
        payment = self._transition(payment_id, PaymentStatus.REJECTED, changes)
        logger.info("payment_rejected", extra={"payment_id": payment_id, "admin_id": admin_id})

        self.notifier.notify(
            payment.user_id,
            "Payment Rejected",
            f"Your payment of {format_amount(payment.amount)} has been rejected. Reason: {reason}",
            NotificationType.PAYMENT_REJECTED,
            metadata={"payment_id": payment.id, "reason": reason},
        )
        return payment

    def update(self, payment_id: str, patch: dict[str, Any], requester: Actor) -> PaymentRecord:
        """Owner edits their own submission while it is still pending."""
        payment = self._get(payment_id)
        if payment.user_id != requester.user_id:
            raise ForbiddenError("You can only update your own payments")
        if payment.status != PaymentStatus.PENDING:
            raise InvalidStateError("You can only update pending payments")

        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValidationError(f"Field cannot be changed: {sorted(unknown)[0]}", field=sorted(unknown)[0])

        changes = dict(patch)
        if "amount" in changes:
            changes["amount"] = validate_amount(changes["amount"])
        if "method" in changes:
            changes["method"] = validate_method(changes["method"])
        if "duration_months" in changes:
            changes["duration_months"] = validate_duration(changes["duration_months"])
            changes["end_date"] = add_months(payment.start_date, changes["duration_months"])
        if not changes:
            return payment

        updated = self.payments.update_pending(payment_id, changes)
        if updated is None:
            raise InvalidStateError("You can only update pending payments")
        return updated

    def _get(self, payment_id: str) -> PaymentRecord:
        payment = self.payments.find_by_id(payment_id)
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    def _get_pending(self, payment_id: str) -> PaymentRecord:
        payment = self._get(payment_id)
        if payment.status != PaymentStatus.PENDING:
            raise InvalidStateError(NOT_PENDING_MESSAGE)
        return payment

    def _transition(self, payment_id: str, status: PaymentStatus, changes: dict[str, Any]) -> PaymentRecord:
        payment = self.payments.update_status(payment_id, status, changes)
        if payment is None:
            # Lost the race: another admin moved it out of pending after our read.
            payment_transition_conflicts_total.inc()
            raise InvalidStateError(NOT_PENDING_MESSAGE)
        payment_transitions_total.labels(status=status.value).inc()
        return payment

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, payment_id: str, requester: Actor) -> PaymentRecord:
        payment = self._get(payment_id)
        if not requester.is_admin and payment.user_id != requester.user_id:
            raise ForbiddenError("You can only view your own payments")
        return payment

    def list(
        self,
        page: int = 1,
        limit: int = 10,
        status: PaymentStatus | None = None,
        method: PaymentMethod | None = None,
        user_id: str | None = None,
    ) -> Page:
        items, total = self.payments.list(page, limit, status=status, method=method, user_id=user_id)
        return Page.build(items, total, page, limit)

    def list_for_user(self, user_id: str, page: int = 1, limit: int = 10) -> Page:
        items, total = self.payments.list(page, limit, user_id=user_id)
        return Page.build(items, total, page, limit)

    def upcoming(self, user_id: str | None = None, now: datetime | None = None) -> list[PaymentRecord]:
        """Approved payments whose service period ends within the reminder window."""
        cutoff = (now or self.clock()) + timedelta(days=get_reminder_days_ahead())
        return self.payments.find_expiring_before(cutoff, user_id=user_id)

    def dashboard_stats(self) -> dict[str, Any]:
        counts = self.payments.count_by_status()
        return {
            "total_payments": sum(counts.values()),
            "pending_payments": counts.get(PaymentStatus.PENDING, 0),
            "approved_payments": counts.get(PaymentStatus.APPROVED, 0),
            "rejected_payments": counts.get(PaymentStatus.REJECTED, 0),
            "total_revenue": self.payments.approved_revenue(),
            "recent_payments": self.payments.recent(5),
        }

    def delete(self, payment_id: str) -> None:
        if not self.payments.delete(payment_id):
            raise NotFoundError("Payment not found")
        logger.info("payment_deleted", extra={"payment_id": payment_id})
