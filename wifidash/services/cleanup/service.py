"""
Screenshot retention policy.

A payment proof is kept while the plan is active and for a grace period after
it ends (for dispute resolution). Once an approved payment's end_date is more
than the grace period in the past, the image is deleted from blob storage and
screenshot_url is cleared. Pending and rejected payments are never touched.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from wifidash.payments.config import get_screenshot_grace_days
from wifidash.payments.models import CleanupResult, PaymentRecord
from wifidash.repositories.payments import PaymentRepository
from wifidash.storage.base import BlobStorage
from wifidash.utils.metrics import screenshot_cleanup_total

logger = logging.getLogger(__name__)


class ScreenshotCleanupService:
    def __init__(
        self,
        payments: PaymentRepository,
        storage: BlobStorage,
        grace_days: int | None = None,
    ) -> None:
        self.payments = payments
        self.storage = storage
        self.grace_days = get_screenshot_grace_days() if grace_days is None else grace_days

    def cutoff(self, now: datetime) -> datetime:
        return now - timedelta(days=self.grace_days)

    def find_eligible(self, now: datetime | None = None) -> list[PaymentRecord]:
        now = now or datetime.now(timezone.utc)
        return self.payments.find_cleanup_candidates(self.cutoff(now))

    def preview(self, now: datetime | None = None) -> dict[str, Any]:
        """Dry-run: how many screenshots the next run would delete."""
        eligible = self.find_eligible(now)
        return {"eligible_count": len(eligible), "grace_days": self.grace_days}

    def run(self, now: datetime | None = None) -> CleanupResult:
        eligible = self.find_eligible(now)
        success = 0
        errors = 0
        for payment in eligible:
            try:
                self._purge(payment)
                success += 1
                screenshot_cleanup_total.labels(result="deleted").inc()
            except Exception as e:
                errors += 1
                screenshot_cleanup_total.labels(result="error").inc()
                logger.warning(
                    "screenshot_cleanup_item_failed",
                    extra={"payment_id": payment.id, "error": str(e)},
                )
        logger.info("screenshot_cleanup_done", extra={"success": success, "errors": errors})
        return CleanupResult(success=success, errors=errors)

    def _purge(self, payment: PaymentRecord) -> None:
        blob_id = self.storage.extract_id(payment.screenshot_url)
        self.storage.delete(blob_id)
        self.payments.clear_screenshot(payment.id)
