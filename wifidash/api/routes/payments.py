"""
Payment submission and review. Static paths are declared before /{payment_id}.
"""
from fastapi import APIRouter, Body, Depends, Query, status

from wifidash.api.deps import get_audit, get_lifecycle
from wifidash.payments.lifecycle import PaymentLifecycle
from wifidash.payments.models import Actor, Page, PaymentMethod, PaymentStatus
from wifidash.schemas.payments import (
    ApproveIn,
    DashboardStatsOut,
    PaymentCreateIn,
    PaymentOut,
    PaymentPageOut,
    PaymentUpdateIn,
    RejectIn,
)
from wifidash.services.audit.service import AuditAction, AuditService
from wifidash.services.auth.jwt import get_current_actor, require_admin

router = APIRouter(prefix="/payments", tags=["payments"])


def _page_out(page: Page) -> PaymentPageOut:
    return PaymentPageOut(
        payments=[PaymentOut.model_validate(p) for p in page.items],
        total=page.total,
        page=page.page,
        total_pages=page.total_pages,
    )


@router.post("", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def create_payment(
    body: PaymentCreateIn = Body(...),
    actor: Actor = Depends(get_current_actor),
    lifecycle: PaymentLifecycle = Depends(get_lifecycle),
):
    payment = lifecycle.create(actor.user_id, **body.model_dump())
    return PaymentOut.model_validate(payment)


@router.get("", response_model=PaymentPageOut)
def list_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: PaymentStatus | None = None,
    method: PaymentMethod | None = None,
    user_id: str | None = None,
    _: Actor = Depends(require_admin),
    lifecycle: PaymentLifecycle = Depends(get_lifecycle),
):
    return _page_out(lifecycle.list(page, limit, status=status, method=method, user_id=user_id))


@router.get("/dashboard-stats", response_model=DashboardStatsOut)
def dashboard_stats(
    _: Actor = Depends(require_admin),
    lifecycle: PaymentLifecycle = Depends(get_lifecycle),
):
    stats = lifecycle.dashboard_stats()
    stats["recent_payments"] = [PaymentOut.model_validate(p) for p in stats["recent_payments"]]
    return DashboardStatsOut(**stats)


@router.get("/my-payments", response_model=PaymentPageOut)
def my_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    lifecycle: PaymentLifecycle = Depends(get_lifecycle),
):
    return _page_out(lifecycle.list_for_user(actor.user_id, page, limit))


@router.get("/upcoming", response_model=list[PaymentOut])
def upcoming_payments(
    actor: Actor = Depends(get_current_actor),
    lifecycle: PaymentLifecycle = Depends(get_lifecycle),
):
    """Approved plans ending within the reminder window; admins see everyone's."""
    user_id = None if actor.is_admin else actor.user_id
    return [PaymentOut.model_validate(p) for p in lifecycle.upcoming(user_id=user_id)]


@router.get("/{payment_id}", response_model=PaymentOut)
def get_payment(
    payment_id: str,
    actor: Actor = Depends(get_current_actor),
    lifecycle: PaymentLifecycle = Depends(get_lifecycle),
):
    return PaymentOut.model_validate(lifecycle.get(payment_id, actor))


@router.patch("/{payment_id}", response_model=PaymentOut)
def update_payment(
    payment_id: str,
    body: PaymentUpdateIn = Body(...),
    actor: Actor = Depends(get_current_actor),
    lifecycle: PaymentLifecycle = Depends(get_lifecycle),
):
    payment = lifecycle.update(payment_id, body.model_dump(exclude_unset=True), actor)
    return PaymentOut.model_validate(payment)


@router.post("/{payment_id}/approve", response_model=PaymentOut)
def approve_payment(
    payment_id: str,
    body: ApproveIn | None = Body(None),
    admin: Actor = Depends(require_admin),
    lifecycle: PaymentLifecycle = Depends(get_lifecycle),
    audit: AuditService = Depends(get_audit),
):
    payment = lifecycle.approve(payment_id, admin.user_id, notes=body.notes if body else None)
    audit.log(admin, AuditAction.PAYMENT_APPROVE, payment_id)
    return PaymentOut.model_validate(payment)


@router.post("/{payment_id}/reject", response_model=PaymentOut)
def reject_payment(
    payment_id: str,
    body: RejectIn = Body(...),
    admin: Actor = Depends(require_admin),
    lifecycle: PaymentLifecycle = Depends(get_lifecycle),
    audit: AuditService = Depends(get_audit),
):
    payment = lifecycle.reject(payment_id, admin.user_id, body.reason, notes=body.notes)
    audit.log(admin, AuditAction.PAYMENT_REJECT, payment_id, {"reason": payment.rejection_reason})
    return PaymentOut.model_validate(payment)


@router.delete("/{payment_id}")
def delete_payment(
    payment_id: str,
    admin: Actor = Depends(require_admin),
    lifecycle: PaymentLifecycle = Depends(get_lifecycle),
    audit: AuditService = Depends(get_audit),
):
    lifecycle.delete(payment_id)
    audit.log(admin, AuditAction.PAYMENT_DELETE, payment_id)
    return {"message": "Payment deleted successfully"}
