"""Schemas for tickets, contact queries, payment plans and admin settings."""
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ----- Tickets -----


class TicketCreateIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    category: str = "general"
    priority: str = "medium"


class TicketUpdateIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: str | None = None
    priority: str | None = None
    admin_response: str | None = None
    assigned_to_id: str | None = None


class TicketOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    category: str
    priority: str
    status: str
    user_id: str
    assigned_to_id: str | None = None
    admin_response: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TicketPageOut(BaseModel):
    tickets: list[TicketOut]
    total: int
    page: int
    total_pages: int


# ----- Contact queries -----


class ContactQueryCreateIn(BaseModel):
    full_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=20)
    subject: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1)
    company: str | None = Field(default=None, max_length=100)


class ContactQueryUpdateIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: str | None = None
    priority: str | None = None
    admin_notes: str | None = None
    assigned_to_user_id: str | None = None


class ContactQueryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    email: str
    phone: str | None = None
    subject: str
    message: str
    company: str | None = None
    status: str
    priority: str
    admin_notes: str | None = None
    assigned_to_user_id: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None


class ContactQueryPageOut(BaseModel):
    queries: list[ContactQueryOut]
    total: int
    page: int
    total_pages: int


# ----- Payment plans -----


class PaymentPlanIn(BaseModel):
    duration_months: int
    duration_label: str = Field(min_length=1)
    amount: Decimal
    is_active: bool = True
    sort_order: int = 0


class PaymentPlanUpdateIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    duration_months: int | None = None
    duration_label: str | None = None
    amount: Decimal | None = None
    is_active: bool | None = None
    sort_order: int | None = None


class ReorderItem(BaseModel):
    id: str
    sort_order: int


class PaymentPlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    duration_months: int
    duration_label: str
    amount: Decimal
    is_active: bool
    sort_order: int


# ----- Admin settings -----


class AdminSettingsIn(BaseModel):
    qr_code_url: str | None = None
    upi_number: str | None = None


class AdminSettingsOut(BaseModel):
    qr_code_url: str
    upi_number: str
    updated_at: str | None = None


class CleanupRunOut(BaseModel):
    success: int
    errors: int
    message: str


class CleanupPreviewOut(BaseModel):
    eligible_count: int
    grace_days: int


def dump_changes(model: BaseModel) -> dict[str, Any]:
    """Only the fields the client actually sent."""
    return model.model_dump(exclude_unset=True)
