import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import update
from sqlalchemy.orm import Session

from wifidash.core.errors import NotFoundError
from wifidash.models.payment_plan import PaymentPlan
from wifidash.payments.lifecycle import validate_amount, validate_duration

logger = logging.getLogger(__name__)

DEFAULT_PLANS = [
    {"duration_months": 1, "duration_label": "1 Month", "amount": Decimal("500"), "sort_order": 1},
    {"duration_months": 3, "duration_label": "3 Months", "amount": Decimal("1400"), "sort_order": 2},
    {"duration_months": 6, "duration_label": "6 Months", "amount": Decimal("2700"), "sort_order": 3},
    {"duration_months": 12, "duration_label": "1 Year", "amount": Decimal("5000"), "sort_order": 4},
]


class PaymentPlanService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _ordered(self):
        return self.db.query(PaymentPlan).order_by(
            PaymentPlan.sort_order.asc(), PaymentPlan.duration_months.asc()
        )

    def list_all(self) -> list[PaymentPlan]:
        return self._ordered().all()

    def list_active(self) -> list[PaymentPlan]:
        return self._ordered().filter(PaymentPlan.is_active.is_(True)).all()

    def get(self, plan_id: str) -> PaymentPlan:
        plan = self.db.query(PaymentPlan).filter(PaymentPlan.id == plan_id).one_or_none()
        if not plan:
            raise NotFoundError("Payment plan not found")
        return plan

    @staticmethod
    def _clean(data: dict[str, Any]) -> dict[str, Any]:
        data = dict(data)
        if "amount" in data:
            data["amount"] = validate_amount(data["amount"])
        if "duration_months" in data:
            data["duration_months"] = validate_duration(data["duration_months"])
        return data

    def create(self, data: dict[str, Any]) -> PaymentPlan:
        plan = PaymentPlan(**self._clean(data))
        self.db.add(plan)
        self.db.commit()
        self.db.refresh(plan)
        return plan

    def update(self, plan_id: str, data: dict[str, Any]) -> PaymentPlan:
        plan = self.get(plan_id)
        for key, value in self._clean(data).items():
            setattr(plan, key, value)
        self.db.add(plan)
        self.db.commit()
        self.db.refresh(plan)
        return plan

    def delete(self, plan_id: str) -> None:
        plan = self.get(plan_id)
        self.db.delete(plan)
        self.db.commit()

    def reorder(self, items: list[dict[str, Any]]) -> list[PaymentPlan]:
        """Apply [{id, sort_order}, ...] in one transaction; unknown ids abort the whole batch."""
        try:
            for item in items:
                result = self.db.execute(
                    update(PaymentPlan)
                    .where(PaymentPlan.id == item["id"])
                    .values(sort_order=item["sort_order"])
                )
                if result.rowcount == 0:
                    raise NotFoundError(f"Payment plan not found: {item['id']}")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self.list_all()

    def seed_defaults(self) -> int:
        """Insert default plans whose duration is not present yet. Returns how many were created."""
        existing = {d for (d,) in self.db.query(PaymentPlan.duration_months).all()}
        created = 0
        for plan in DEFAULT_PLANS:
            if plan["duration_months"] in existing:
                continue
            self.db.add(PaymentPlan(**plan, is_active=True))
            created += 1
        self.db.commit()
        logger.info("payment_plans_seeded", extra={"success": created})
        return created
