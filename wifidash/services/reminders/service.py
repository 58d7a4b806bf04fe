"""
Daily payment reminders for plans about to expire.

Works on a snapshot of approved payments whose end_date falls within the
reminder window. Each payment is handled on its own: a failed insert or email
is logged and counted, and the loop moves on.
"""
import logging
from datetime import datetime, timedelta, timezone

from wifidash.payments.config import get_reminder_days_ahead
from wifidash.payments.models import NotificationType, PaymentRecord, ReminderResult, UserRecord
from wifidash.repositories.notifications import NotificationRepository
from wifidash.repositories.payments import PaymentRepository
from wifidash.repositories.users import UserRepository
from wifidash.services.email import templates
from wifidash.services.email.mailer import Mailer
from wifidash.utils.metrics import payment_reminders_total

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Payment Reminder"
REMINDER_MESSAGE = (
    "Your WiFi service payment is due soon. Please make your payment to avoid service interruption."
)


class PaymentReminderService:
    def __init__(
        self,
        payments: PaymentRepository,
        users: UserRepository,
        notifications: NotificationRepository,
        mailer: Mailer | None,
        frontend_url: str,
        days_ahead: int | None = None,
    ) -> None:
        self.payments = payments
        self.users = users
        self.notifications = notifications
        self.mailer = mailer
        self.frontend_url = frontend_url
        self.days_ahead = get_reminder_days_ahead() if days_ahead is None else days_ahead

    def find_due(self, now: datetime) -> list[PaymentRecord]:
        return self.payments.find_expiring_before(now + timedelta(days=self.days_ahead))

    def run(self, now: datetime | None = None) -> ReminderResult:
        now = now or datetime.now(timezone.utc)
        due = self.find_due(now)
        users = self.users.find_many([p.user_id for p in due])
        notified = 0
        emailed = 0
        errors = 0
        for payment in due:
            user = users.get(payment.user_id)
            try:
                self.notifications.add(
                    user_id=payment.user_id,
                    title=REMINDER_TITLE,
                    message=REMINDER_MESSAGE,
                    type=NotificationType.PAYMENT_REMINDER,
                    metadata={"payment_id": payment.id, "due_date": payment.end_date.isoformat()},
                )
                notified += 1
                payment_reminders_total.labels(result="notified").inc()
            except Exception as e:
                errors += 1
                payment_reminders_total.labels(result="error").inc()
                logger.warning(
                    "payment_reminder_notification_failed",
                    extra={"payment_id": payment.id, "user_id": payment.user_id, "error": str(e)},
                )
            try:
                if self._send_email(payment, user):
                    emailed += 1
                    payment_reminders_total.labels(result="emailed").inc()
            except Exception as e:
                errors += 1
                payment_reminders_total.labels(result="error").inc()
                logger.warning(
                    "payment_reminder_email_failed",
                    extra={"payment_id": payment.id, "user_id": payment.user_id, "error": str(e)},
                )
        result = ReminderResult(notified=notified, emailed=emailed, errors=errors)
        logger.info("payment_reminders_done", extra=result.model_dump())
        return result

    def _send_email(self, payment: PaymentRecord, user: UserRecord | None) -> bool:
        if self.mailer is None or user is None or not user.email:
            return False
        template = templates.payment_reminder(
            user.full_name or user.email,
            payment.end_date.strftime("%d %b %Y"),
            self.frontend_url,
        )
        self.mailer.send(user.email, template.subject, template.html)
        return True
