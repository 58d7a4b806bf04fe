from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import update
from sqlalchemy.orm import Session

from wifidash.db.session import committing
from wifidash.models.notification import Notification
from wifidash.payments.models import NotificationRecord, NotificationStatus, NotificationType


class NotificationRepository(Protocol):
    def add(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType,
        metadata: dict[str, Any] | None = None,
    ) -> NotificationRecord: ...

    def add_many(self, rows: list[dict[str, Any]]) -> list[NotificationRecord]: ...

    def find_by_id(self, notification_id: str) -> NotificationRecord | None: ...

    def mark_read(self, notification_id: str, read_at: datetime) -> NotificationRecord | None: ...

    def mark_all_read(self, user_id: str, read_at: datetime) -> int: ...

    def list(
        self,
        page: int,
        limit: int,
        user_id: str | None = None,
        status: NotificationStatus | None = None,
        type: NotificationType | None = None,
    ) -> tuple[list[NotificationRecord], int]: ...

    def count_unread(self, user_id: str) -> int: ...

    def delete(self, notification_id: str) -> bool: ...


class SqlNotificationRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def _record(row: Notification) -> NotificationRecord:
        return NotificationRecord(
            id=row.id,
            user_id=row.user_id,
            title=row.title,
            message=row.message,
            type=row.type,
            status=row.status,
            metadata=row.meta,
            read_at=row.read_at,
            created_at=row.created_at,
        )

    @staticmethod
    def _row(user_id: str, title: str, message: str, type: NotificationType, metadata: dict | None) -> Notification:
        return Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=NotificationType(type).value,
            status=NotificationStatus.UNREAD.value,
            meta=metadata,
        )

    def add(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType,
        metadata: dict[str, Any] | None = None,
    ) -> NotificationRecord:
        row = self._row(user_id, title, message, type, metadata)
        with committing(self.db):
            self.db.add(row)
        self.db.refresh(row)
        return self._record(row)

    def add_many(self, rows: list[dict[str, Any]]) -> list[NotificationRecord]:
        entities = [
            self._row(r["user_id"], r["title"], r["message"], r["type"], r.get("metadata"))
            for r in rows
        ]
        if not entities:
            return []
        with committing(self.db):
            self.db.add_all(entities)
        for entity in entities:
            self.db.refresh(entity)
        return [self._record(e) for e in entities]

    def find_by_id(self, notification_id: str) -> NotificationRecord | None:
        row = self.db.query(Notification).filter(Notification.id == notification_id).one_or_none()
        return self._record(row) if row else None

    def mark_read(self, notification_id: str, read_at: datetime) -> NotificationRecord | None:
        row = self.db.query(Notification).filter(Notification.id == notification_id).one_or_none()
        if not row:
            return None
        with committing(self.db):
            row.status = NotificationStatus.READ.value
            row.read_at = read_at
        self.db.refresh(row)
        return self._record(row)

    def mark_all_read(self, user_id: str, read_at: datetime) -> int:
        with committing(self.db):
            result = self.db.execute(
                update(Notification)
                .where(
                    Notification.user_id == user_id,
                    Notification.status == NotificationStatus.UNREAD.value,
                )
                .values(status=NotificationStatus.READ.value, read_at=read_at)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount

    def list(
        self,
        page: int,
        limit: int,
        user_id: str | None = None,
        status: NotificationStatus | None = None,
        type: NotificationType | None = None,
    ) -> tuple[list[NotificationRecord], int]:
        q = self.db.query(Notification)
        if user_id:
            q = q.filter(Notification.user_id == user_id)
        if status:
            q = q.filter(Notification.status == status.value)
        if type:
            q = q.filter(Notification.type == type.value)
        total = q.count()
        rows = q.order_by(Notification.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return [self._record(r) for r in rows], total

    def count_unread(self, user_id: str) -> int:
        return (
            self.db.query(Notification)
            .filter(
                Notification.user_id == user_id,
                Notification.status == NotificationStatus.UNREAD.value,
            )
            .count()
        )

    def delete(self, notification_id: str) -> bool:
        row = self.db.query(Notification).filter(Notification.id == notification_id).one_or_none()
        if not row:
            return False
        with committing(self.db):
            self.db.delete(row)
        return True
