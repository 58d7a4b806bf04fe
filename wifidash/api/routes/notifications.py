from fastapi import APIRouter, Body, Depends, Query, status

from wifidash.api.deps import get_dispatcher
from wifidash.payments.models import Actor, NotificationStatus, NotificationType, NotifyOutcome, Page
from wifidash.schemas.notifications import (
    BulkNotificationIn,
    NotificationCreateIn,
    NotificationOut,
    NotificationPageOut,
    NotifyOutcomeOut,
)
from wifidash.services.auth.jwt import get_current_actor, require_admin
from wifidash.services.notifications.service import NotificationDispatcher

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _page_out(page: Page, unread_count: int | None = None) -> NotificationPageOut:
    return NotificationPageOut(
        notifications=[NotificationOut.model_validate(n) for n in page.items],
        total=page.total,
        page=page.page,
        total_pages=page.total_pages,
        unread_count=unread_count,
    )


def _outcome_out(outcome: NotifyOutcome) -> NotifyOutcomeOut:
    return NotifyOutcomeOut.model_validate(outcome.model_dump())


@router.post("", response_model=NotifyOutcomeOut, status_code=status.HTTP_201_CREATED)
def create_notification(
    body: NotificationCreateIn = Body(...),
    _: Actor = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    outcome = dispatcher.notify(body.user_id, body.title, body.message, body.type, body.metadata)
    return _outcome_out(outcome)


@router.post("/bulk", status_code=status.HTTP_201_CREATED)
def create_bulk_notifications(
    body: BulkNotificationIn = Body(...),
    _: Actor = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    outcomes = dispatcher.notify_bulk(body.user_ids, body.title, body.message, body.type, body.metadata)
    return {
        "created": len(outcomes),
        "emailed": sum(1 for o in outcomes if o.email_ok),
        "outcomes": [_outcome_out(o) for o in outcomes],
    }


@router.get("", response_model=NotificationPageOut)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: str | None = None,
    status: NotificationStatus | None = None,
    type: NotificationType | None = None,
    _: Actor = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return _page_out(dispatcher.list(page, limit, user_id=user_id, status=status, type=type))


@router.get("/my-notifications", response_model=NotificationPageOut)
def my_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    result, unread = dispatcher.list_for_user(actor.user_id, page, limit)
    return _page_out(result, unread)


@router.post("/mark-all-read")
def mark_all_read(
    actor: Actor = Depends(get_current_actor),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return {"updated": dispatcher.mark_all_read(actor.user_id)}


@router.post("/{notification_id}/mark-read", response_model=NotificationOut)
def mark_read(
    notification_id: str,
    actor: Actor = Depends(get_current_actor),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return NotificationOut.model_validate(dispatcher.mark_read(notification_id, actor))


@router.get("/{notification_id}", response_model=NotificationOut)
def get_notification(
    notification_id: str,
    actor: Actor = Depends(get_current_actor),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return NotificationOut.model_validate(dispatcher.get(notification_id, actor))


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: str,
    actor: Actor = Depends(get_current_actor),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    dispatcher.delete(notification_id, actor)
    return {"message": "Notification deleted successfully"}
