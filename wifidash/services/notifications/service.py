"""
NotificationDispatcher — in-app notifications with best-effort email.

The in-app row is written first and is the source of truth for unread counts.
Email is a courtesy channel: any delivery failure is logged, counted and
reported in NotifyOutcome, and never undoes the in-app row.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from wifidash.core.errors import ForbiddenError, NotFoundError
from wifidash.payments.models import (
    Actor,
    EmailErrorKind,
    NotificationRecord,
    NotificationStatus,
    NotificationType,
    NotifyOutcome,
    Page,
    UserRecord,
)
from wifidash.repositories.notifications import NotificationRepository
from wifidash.repositories.users import UserRepository
from wifidash.services.email import templates
from wifidash.services.email.mailer import EmailDeliveryError, Mailer
from wifidash.utils.metrics import notification_emails_total, notifications_created_total

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationDispatcher:
    def __init__(
        self,
        notifications: NotificationRepository,
        users: UserRepository,
        mailer: Mailer | None,
        frontend_url: str,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.notifications = notifications
        self.users = users
        self.mailer = mailer
        self.frontend_url = frontend_url
        self.clock = clock

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType,
        metadata: dict[str, Any] | None = None,
    ) -> NotifyOutcome:
        record = self.notifications.add(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            metadata=metadata,
        )
        notifications_created_total.labels(type=NotificationType(type).value).inc()
        user = self.users.find_by_id(user_id)
        return self._email(record, user)

    def notify_bulk(
        self,
        user_ids: list[str],
        title: str,
        message: str,
        type: NotificationType,
        metadata: dict[str, Any] | None = None,
    ) -> list[NotifyOutcome]:
        """One bulk insert, then one isolated email attempt per recipient."""
        if not user_ids:
            return []
        records = self.notifications.add_many([
            {"user_id": uid, "title": title, "message": message, "type": type, "metadata": metadata}
            for uid in user_ids
        ])
        notifications_created_total.labels(type=NotificationType(type).value).inc(len(records))
        users = self.users.find_many(user_ids)
        outcomes = [self._email(record, users.get(record.user_id)) for record in records]
        failed = sum(1 for o in outcomes if not o.email_ok)
        if failed:
            logger.warning(
                "notification_bulk_partial_email",
                extra={"recipients": len(outcomes), "errors": failed},
            )
        return outcomes

    def notify_admins(
        self,
        title: str,
        message: str,
        type: NotificationType = NotificationType.SYSTEM,
        metadata: dict[str, Any] | None = None,
    ) -> list[NotifyOutcome]:
        return self.notify_bulk(self.users.list_admin_ids(), title, message, type, metadata)

    def _email(self, record: NotificationRecord, user: UserRecord | None) -> NotifyOutcome:
        if self.mailer is None:
            return self._outcome(record, EmailErrorKind.DISABLED)
        if user is None or not user.email:
            return self._outcome(record, EmailErrorKind.NO_RECIPIENT)
        template = templates.notification(
            user.full_name or user.email, record.title, record.message, self.frontend_url
        )
        try:
            self.mailer.send(user.email, template.subject, template.html)
        except EmailDeliveryError as e:
            logger.warning(
                "notification_email_failed",
                extra={"notification_id": record.id, "user_id": record.user_id, "error_kind": e.kind.value, "error": str(e)},
            )
            return self._outcome(record, e.kind)
        except Exception as e:
            logger.exception(
                "notification_email_failed",
                extra={"notification_id": record.id, "user_id": record.user_id, "error": str(e)},
            )
            return self._outcome(record, EmailErrorKind.TRANSPORT_ERROR)
        notification_emails_total.labels(result="sent").inc()
        return NotifyOutcome(notification=record, email_ok=True)

    @staticmethod
    def _outcome(record: NotificationRecord, kind: EmailErrorKind) -> NotifyOutcome:
        notification_emails_total.labels(result=kind.value).inc()
        return NotifyOutcome(notification=record, email_ok=False, email_error=kind)

    # ------------------------------------------------------------------
    # Reads and recipient actions
    # ------------------------------------------------------------------

    def get(self, notification_id: str, requester: Actor) -> NotificationRecord:
        record = self.notifications.find_by_id(notification_id)
        if not record:
            raise NotFoundError("Notification not found")
        if not requester.is_admin and record.user_id != requester.user_id:
            raise ForbiddenError("You can only view your own notifications")
        return record

    def list(
        self,
        page: int = 1,
        limit: int = 10,
        user_id: str | None = None,
        status: NotificationStatus | None = None,
        type: NotificationType | None = None,
    ) -> Page:
        items, total = self.notifications.list(page, limit, user_id=user_id, status=status, type=type)
        return Page.build(items, total, page, limit)

    def list_for_user(self, user_id: str, page: int = 1, limit: int = 10) -> tuple[Page, int]:
        """Page of the user's notifications plus their unread count."""
        items, total = self.notifications.list(page, limit, user_id=user_id)
        return Page.build(items, total, page, limit), self.notifications.count_unread(user_id)

    def mark_read(self, notification_id: str, requester: Actor) -> NotificationRecord:
        self.get(notification_id, requester)
        record = self.notifications.mark_read(notification_id, self.clock())
        if not record:
            raise NotFoundError("Notification not found")
        return record

    def mark_all_read(self, user_id: str) -> int:
        count = self.notifications.mark_all_read(user_id, self.clock())
        logger.info("notifications_mark_all_read", extra={"user_id": user_id, "success": count})
        return count

    def delete(self, notification_id: str, requester: Actor) -> None:
        self.get(notification_id, requester)
        self.notifications.delete(notification_id)
