"""
Celery periodic task: delete proof screenshots past the retention window.
"""
import logging

from wifidash.core.celery_app import celery_app
from wifidash.db.session import SessionLocal
from wifidash.repositories.payments import SqlPaymentRepository
from wifidash.services.cleanup.service import ScreenshotCleanupService
from wifidash.storage.cloudinary import build_storage

logger = logging.getLogger(__name__)


@celery_app.task(name="wifidash.workers.tasks.cleanup.cleanup_expired_screenshots")
def cleanup_expired_screenshots() -> dict:
    db = SessionLocal()
    storage = build_storage()
    try:
        svc = ScreenshotCleanupService(SqlPaymentRepository(db), storage)
        return svc.run().model_dump()
    except Exception:
        db.rollback()
        logger.exception("cleanup_expired_screenshots_error", extra={"task": "cleanup_expired_screenshots"})
        return {"success": 0, "errors": 0, "error": "exception"}
    finally:
        storage.close()
        db.close()
