"""
Service factories for route dependencies. Tests swap these through
app.dependency_overrides to run routes against in-memory fakes.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from wifidash.db.session import get_db
from wifidash.payments.config import get_frontend_url
from wifidash.payments.lifecycle import PaymentLifecycle
from wifidash.repositories.notifications import SqlNotificationRepository
from wifidash.repositories.payments import SqlPaymentRepository
from wifidash.repositories.users import SqlUserRepository
from wifidash.services.admin_settings.service import AdminSettingsService
from wifidash.services.audit.service import AuditService
from wifidash.services.cleanup.service import ScreenshotCleanupService
from wifidash.services.contact_queries.service import ContactQueryService
from wifidash.services.email.mailer import build_mailer
from wifidash.services.notifications.service import NotificationDispatcher
from wifidash.services.payment_plans.service import PaymentPlanService
from wifidash.services.tickets.service import TicketService
from wifidash.storage.cloudinary import build_storage


def get_dispatcher(db: Session = Depends(get_db)) -> NotificationDispatcher:
    return NotificationDispatcher(
        notifications=SqlNotificationRepository(db),
        users=SqlUserRepository(db),
        mailer=build_mailer(),
        frontend_url=get_frontend_url(),
    )


def get_lifecycle(
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> PaymentLifecycle:
    return PaymentLifecycle(SqlPaymentRepository(db), dispatcher)


def get_cleanup_service(db: Session = Depends(get_db)):
    storage = build_storage()
    try:
        yield ScreenshotCleanupService(SqlPaymentRepository(db), storage)
    finally:
        storage.close()


def get_audit(db: Session = Depends(get_db)) -> AuditService:
    return AuditService(db)


def get_ticket_service(
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> TicketService:
    return TicketService(db, dispatcher)


def get_contact_query_service(db: Session = Depends(get_db)) -> ContactQueryService:
    return ContactQueryService(db, build_mailer())


def get_payment_plan_service(db: Session = Depends(get_db)) -> PaymentPlanService:
    return PaymentPlanService(db)


def get_admin_settings_service(db: Session = Depends(get_db)) -> AdminSettingsService:
    return AdminSettingsService(db)
