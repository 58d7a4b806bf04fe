"""
Celery periodic task: daily reminders for approved plans about to expire.
"""
import logging

from wifidash.core.celery_app import celery_app
from wifidash.db.session import SessionLocal
from wifidash.payments.config import get_frontend_url
from wifidash.repositories.notifications import SqlNotificationRepository
from wifidash.repositories.payments import SqlPaymentRepository
from wifidash.repositories.users import SqlUserRepository
from wifidash.services.email.mailer import build_mailer
from wifidash.services.reminders.service import PaymentReminderService

logger = logging.getLogger(__name__)


@celery_app.task(name="wifidash.workers.tasks.reminders.send_payment_reminders")
def send_payment_reminders() -> dict:
    db = SessionLocal()
    try:
        svc = PaymentReminderService(
            payments=SqlPaymentRepository(db),
            users=SqlUserRepository(db),
            notifications=SqlNotificationRepository(db),
            mailer=build_mailer(),
            frontend_url=get_frontend_url(),
        )
        return svc.run().model_dump()
    except Exception:
        db.rollback()
        logger.exception("send_payment_reminders_error", extra={"task": "send_payment_reminders"})
        return {"notified": 0, "emailed": 0, "errors": 0, "error": "exception"}
    finally:
        db.close()
