"""
Payment record store: a narrow repository interface and its SQLAlchemy implementation.
The lifecycle engine only talks to PaymentRepository, never to the ORM.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from wifidash.db.session import committing
from wifidash.models.payment import Payment
from wifidash.payments.models import PaymentMethod, PaymentRecord, PaymentStatus


class PaymentRepository(Protocol):
    def add(self, **fields: Any) -> PaymentRecord: ...

    def find_by_id(self, payment_id: str) -> PaymentRecord | None: ...

    def update_status(
        self, payment_id: str, status: PaymentStatus, changes: dict[str, Any]
    ) -> PaymentRecord | None: ...

    def update_pending(self, payment_id: str, changes: dict[str, Any]) -> PaymentRecord | None: ...

    def list(
        self,
        page: int,
        limit: int,
        status: PaymentStatus | None = None,
        method: PaymentMethod | None = None,
        user_id: str | None = None,
    ) -> tuple[list[PaymentRecord], int]: ...

    def find_expiring_before(self, cutoff: datetime, user_id: str | None = None) -> list[PaymentRecord]: ...

    def find_cleanup_candidates(self, expired_before: datetime) -> list[PaymentRecord]: ...

    def clear_screenshot(self, payment_id: str) -> bool: ...

    def count_by_status(self) -> dict[PaymentStatus, int]: ...

    def approved_revenue(self) -> Decimal: ...

    def recent(self, limit: int) -> list[PaymentRecord]: ...

    def delete(self, payment_id: str) -> bool: ...


def _column_values(changes: dict[str, Any]) -> dict[str, Any]:
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in changes.items()}


class SqlPaymentRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def _record(row: Payment) -> PaymentRecord:
        return PaymentRecord.model_validate(row)

    def add(self, **fields: Any) -> PaymentRecord:
        payment = Payment(**_column_values(fields))
        with committing(self.db):
            self.db.add(payment)
        self.db.refresh(payment)
        return self._record(payment)

    def find_by_id(self, payment_id: str) -> PaymentRecord | None:
        row = self.db.query(Payment).filter(Payment.id == payment_id).one_or_none()
        return self._record(row) if row else None

    def _update_if_pending(self, payment_id: str, values: dict[str, Any]) -> PaymentRecord | None:
        """Single-row conditional UPDATE; None when the row is missing or no longer pending."""
        values = dict(_column_values(values), updated_at=datetime.now(timezone.utc))
        with committing(self.db):
            result = self.db.execute(
                update(Payment)
                .where(Payment.id == payment_id, Payment.status == PaymentStatus.PENDING.value)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        if result.rowcount == 0:
            return None
        return self.find_by_id(payment_id)

    def update_status(
        self, payment_id: str, status: PaymentStatus, changes: dict[str, Any]
    ) -> PaymentRecord | None:
        return self._update_if_pending(payment_id, {**changes, "status": status})

    def update_pending(self, payment_id: str, changes: dict[str, Any]) -> PaymentRecord | None:
        return self._update_if_pending(payment_id, changes)

    def list(
        self,
        page: int,
        limit: int,
        status: PaymentStatus | None = None,
        method: PaymentMethod | None = None,
        user_id: str | None = None,
    ) -> tuple[list[PaymentRecord], int]:
        q = self.db.query(Payment)
        if status:
            q = q.filter(Payment.status == status.value)
        if method:
            q = q.filter(Payment.method == method.value)
        if user_id:
            q = q.filter(Payment.user_id == user_id)
        total = q.count()
        rows = q.order_by(Payment.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return [self._record(r) for r in rows], total

    def find_expiring_before(self, cutoff: datetime, user_id: str | None = None) -> list[PaymentRecord]:
        q = self.db.query(Payment).filter(
            Payment.status == PaymentStatus.APPROVED.value,
            Payment.end_date <= cutoff,
        )
        if user_id:
            q = q.filter(Payment.user_id == user_id)
        return [self._record(r) for r in q.order_by(Payment.end_date.asc()).all()]

    def find_cleanup_candidates(self, expired_before: datetime) -> list[PaymentRecord]:
        rows = (
            self.db.query(Payment)
            .filter(
                Payment.status == PaymentStatus.APPROVED.value,
                Payment.screenshot_url.isnot(None),
                Payment.end_date < expired_before,
            )
            .order_by(Payment.end_date.asc())
            .all()
        )
        return [self._record(r) for r in rows]

    def clear_screenshot(self, payment_id: str) -> bool:
        with committing(self.db):
            result = self.db.execute(
                update(Payment)
                .where(Payment.id == payment_id)
                .values(screenshot_url=None, updated_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
        return result.rowcount > 0

    def count_by_status(self) -> dict[PaymentStatus, int]:
        rows = self.db.query(Payment.status, func.count(Payment.id)).group_by(Payment.status).all()
        counts = {s: 0 for s in PaymentStatus}
        for status, cnt in rows:
            counts[PaymentStatus(status)] = cnt
        return counts

    def approved_revenue(self) -> Decimal:
        total = (
            self.db.query(func.coalesce(func.sum(Payment.amount), 0))
            .filter(Payment.status == PaymentStatus.APPROVED.value)
            .scalar()
        )
        return Decimal(total or 0)

    def recent(self, limit: int) -> list[PaymentRecord]:
        rows = self.db.query(Payment).order_by(Payment.created_at.desc()).limit(limit).all()
        return [self._record(r) for r in rows]

    def delete(self, payment_id: str) -> bool:
        row = self.db.query(Payment).filter(Payment.id == payment_id).one_or_none()
        if not row:
            return False
        with committing(self.db):
            self.db.delete(row)
        return True
