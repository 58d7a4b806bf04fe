from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String

from wifidash.db.base import Base


class PaymentPlan(Base):
    """Catalog entry shown on the pricing page and the payment form."""

    __tablename__ = "payment_plans"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    duration_months = Column(Integer, nullable=False)
    duration_label = Column(String, nullable=False)  # "1 Month", "3 Months", "1 Year"
    amount = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
