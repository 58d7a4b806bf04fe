"""
Admin API: screenshot retention (manual run + preview) and payment settings.
The public /payment-settings read lives on public_router.
"""
import logging

from fastapi import APIRouter, Body, Depends

from wifidash.api.deps import get_admin_settings_service, get_audit, get_cleanup_service
from wifidash.payments.models import Actor
from wifidash.schemas.support import AdminSettingsIn, AdminSettingsOut, CleanupPreviewOut, CleanupRunOut
from wifidash.services.admin_settings.service import AdminSettingsService
from wifidash.services.audit.service import AuditAction, AuditService
from wifidash.services.auth.jwt import require_admin
from wifidash.services.cleanup.service import ScreenshotCleanupService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])
public_router = APIRouter(tags=["settings"])


# ---------- Screenshot cleanup ----------
@router.post("/cleanup-screenshots", response_model=CleanupRunOut)
def run_screenshot_cleanup(
    admin: Actor = Depends(require_admin),
    svc: ScreenshotCleanupService = Depends(get_cleanup_service),
    audit: AuditService = Depends(get_audit),
):
    result = svc.run()
    audit.log(admin, AuditAction.SCREENSHOTS_CLEANUP, payload=result.model_dump())
    logger.info("manual_screenshot_cleanup", extra={"admin_id": admin.user_id, **result.model_dump()})
    return CleanupRunOut(
        success=result.success,
        errors=result.errors,
        message=f"Cleanup completed: {result.success} screenshots deleted, {result.errors} errors",
    )


@router.get("/cleanup-screenshots/preview", response_model=CleanupPreviewOut)
def preview_screenshot_cleanup(
    _: Actor = Depends(require_admin),
    svc: ScreenshotCleanupService = Depends(get_cleanup_service),
):
    return CleanupPreviewOut(**svc.preview())


# ---------- Payment settings ----------
@router.get("/settings", response_model=AdminSettingsOut)
def get_settings(
    _: Actor = Depends(require_admin),
    svc: AdminSettingsService = Depends(get_admin_settings_service),
):
    return svc.as_dict()


@router.put("/settings", response_model=AdminSettingsOut)
def update_settings(
    body: AdminSettingsIn = Body(...),
    admin: Actor = Depends(require_admin),
    svc: AdminSettingsService = Depends(get_admin_settings_service),
    audit: AuditService = Depends(get_audit),
):
    changes = body.model_dump(exclude_unset=True)
    result = svc.update(changes)
    audit.log(admin, AuditAction.SETTINGS_UPDATE, payload=changes)
    return result


@public_router.get("/payment-settings", response_model=AdminSettingsOut)
def public_payment_settings(svc: AdminSettingsService = Depends(get_admin_settings_service)):
    """QR code and UPI handle shown on the payment page."""
    return svc.as_dict()
