"""
Payment API schemas. Amount/method/duration are validated by PaymentLifecycle
so that every entry point reports the same field errors.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wifidash.payments.models import PaymentMethod, PaymentStatus


class PaymentCreateIn(BaseModel):
    amount: Any
    method: str
    duration_months: Any
    screenshot_url: str | None = None
    transaction_id: str | None = None
    upi_number: str | None = None
    notes: str | None = None


class PaymentUpdateIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: Any = None
    method: str | None = None
    duration_months: Any = None
    screenshot_url: str | None = None
    transaction_id: str | None = None
    upi_number: str | None = None
    notes: str | None = None


class ApproveIn(BaseModel):
    notes: str | None = None


class RejectIn(BaseModel):
    reason: str | None = None
    notes: str | None = None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    duration_months: int
    start_date: datetime
    end_date: datetime
    screenshot_url: str | None = None
    transaction_id: str | None = None
    upi_number: str | None = None
    notes: str | None = None
    rejection_reason: str | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PaymentPageOut(BaseModel):
    payments: list[PaymentOut]
    total: int
    page: int
    total_pages: int


class DashboardStatsOut(BaseModel):
    total_payments: int
    pending_payments: int
    approved_payments: int
    rejected_payments: int
    total_revenue: Decimal
    recent_payments: list[PaymentOut] = Field(default_factory=list)
