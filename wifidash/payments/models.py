"""
Value types for the payment lifecycle, notifications and scheduled jobs.
Records are frozen snapshots of rows; services never mutate them in place.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class PaymentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentMethod(str, Enum):
    QR_CODE = "qr_code"
    UPI = "upi"


class NotificationType(str, Enum):
    PAYMENT_REMINDER = "payment_reminder"
    PAYMENT_APPROVED = "payment_approved"
    PAYMENT_REJECTED = "payment_rejected"
    ACCOUNT_STATUS = "account_status"
    SYSTEM = "system"


class NotificationStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class EmailErrorKind(str, Enum):
    DISABLED = "disabled"
    NO_RECIPIENT = "no_recipient"
    INVALID_ADDRESS = "invalid_address"
    TRANSPORT_ERROR = "transport_error"


# ----- Actors -----


class Actor(BaseModel):
    """Authenticated caller: id + role, supplied by the auth layer."""

    user_id: str
    role: UserRole = UserRole.USER

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserRecord(BaseModel):
    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: UserRole = UserRole.USER
    status: str = "active"

    model_config = {"frozen": True, "from_attributes": True}

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# ----- Payments -----


class PaymentRecord(BaseModel):
    id: str
    user_id: str
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
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

    model_config = {"frozen": True, "from_attributes": True}

    @property
    def is_terminal(self) -> bool:
        return self.status != PaymentStatus.PENDING


class Page(BaseModel):
    """One page of a listing plus totals for the pager."""

    items: list[Any]
    total: int
    page: int
    total_pages: int

    model_config = {"frozen": True}

    @classmethod
    def build(cls, items: list[Any], total: int, page: int, limit: int) -> "Page":
        return cls(
            items=items,
            total=total,
            page=page,
            total_pages=(total + limit - 1) // limit if limit > 0 else 0,
        )


# ----- Notifications -----


class NotificationRecord(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    status: NotificationStatus = NotificationStatus.UNREAD
    metadata: dict[str, Any] | None = None
    read_at: datetime | None = None
    created_at: datetime | None = None

    model_config = {"frozen": True}


class NotifyOutcome(BaseModel):
    """Result of one notification: the in-app row is authoritative, email is best effort."""

    notification: NotificationRecord
    in_app_ok: bool = True
    email_ok: bool = False
    email_error: EmailErrorKind | None = Field(
        None,
        description="Why the email was not delivered; None when email_ok",
    )

    model_config = {"frozen": True}


# ----- Scheduled jobs -----


class ReminderResult(BaseModel):
    notified: int = 0
    emailed: int = 0
    errors: int = 0

    model_config = {"frozen": True}


class CleanupResult(BaseModel):
    success: int = 0
    errors: int = 0

    model_config = {"frozen": True}
