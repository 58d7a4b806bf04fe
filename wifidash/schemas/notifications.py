from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wifidash.payments.models import EmailErrorKind, NotificationStatus, NotificationType


class NotificationCreateIn(BaseModel):
    user_id: str
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1)
    type: NotificationType = NotificationType.SYSTEM
    metadata: dict[str, Any] | None = None


class BulkNotificationIn(BaseModel):
    user_ids: list[str] = Field(min_length=1)
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1)
    type: NotificationType = NotificationType.SYSTEM
    metadata: dict[str, Any] | None = None


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    status: NotificationStatus
    metadata: dict[str, Any] | None = None
    read_at: datetime | None = None
    created_at: datetime | None = None


class NotifyOutcomeOut(BaseModel):
    notification: NotificationOut
    in_app_ok: bool
    email_ok: bool
    email_error: EmailErrorKind | None = None


class NotificationPageOut(BaseModel):
    notifications: list[NotificationOut]
    total: int
    page: int
    total_pages: int
    unread_count: int | None = None
