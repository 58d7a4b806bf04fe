from fastapi import APIRouter, Body, Depends, status

from wifidash.api.deps import get_payment_plan_service
from wifidash.payments.models import Actor
from wifidash.schemas.support import (
    PaymentPlanIn,
    PaymentPlanOut,
    PaymentPlanUpdateIn,
    ReorderItem,
    dump_changes,
)
from wifidash.services.auth.jwt import require_admin
from wifidash.services.payment_plans.service import PaymentPlanService

router = APIRouter(prefix="/payment-plans", tags=["payment-plans"])


@router.get("", response_model=list[PaymentPlanOut])
def list_active_plans(svc: PaymentPlanService = Depends(get_payment_plan_service)):
    """Public pricing: active plans only."""
    return svc.list_active()


@router.get("/all", response_model=list[PaymentPlanOut])
def list_all_plans(
    _: Actor = Depends(require_admin),
    svc: PaymentPlanService = Depends(get_payment_plan_service),
):
    return svc.list_all()


@router.post("", response_model=PaymentPlanOut, status_code=status.HTTP_201_CREATED)
def create_plan(
    body: PaymentPlanIn = Body(...),
    _: Actor = Depends(require_admin),
    svc: PaymentPlanService = Depends(get_payment_plan_service),
):
    return svc.create(body.model_dump())


@router.put("/reorder", response_model=list[PaymentPlanOut])
def reorder_plans(
    items: list[ReorderItem] = Body(...),
    _: Actor = Depends(require_admin),
    svc: PaymentPlanService = Depends(get_payment_plan_service),
):
    return svc.reorder([i.model_dump() for i in items])


@router.get("/{plan_id}", response_model=PaymentPlanOut)
def get_plan(
    plan_id: str,
    _: Actor = Depends(require_admin),
    svc: PaymentPlanService = Depends(get_payment_plan_service),
):
    return svc.get(plan_id)


@router.patch("/{plan_id}", response_model=PaymentPlanOut)
def update_plan(
    plan_id: str,
    body: PaymentPlanUpdateIn = Body(...),
    _: Actor = Depends(require_admin),
    svc: PaymentPlanService = Depends(get_payment_plan_service),
):
    return svc.update(plan_id, dump_changes(body))


@router.delete("/{plan_id}")
def delete_plan(
    plan_id: str,
    _: Actor = Depends(require_admin),
    svc: PaymentPlanService = Depends(get_payment_plan_service),
):
    svc.delete(plan_id)
    return {"message": "Payment plan deleted successfully"}
