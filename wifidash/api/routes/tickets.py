from fastapi import APIRouter, Body, Depends, Query, status

from wifidash.api.deps import get_ticket_service
from wifidash.payments.models import Actor, Page
from wifidash.schemas.support import TicketCreateIn, TicketOut, TicketPageOut, TicketUpdateIn, dump_changes
from wifidash.services.auth.jwt import get_current_actor, require_admin
from wifidash.services.tickets.service import TicketService

router = APIRouter(prefix="/tickets", tags=["tickets"])


def _page_out(page: Page) -> TicketPageOut:
    return TicketPageOut(
        tickets=[TicketOut.model_validate(t) for t in page.items],
        total=page.total,
        page=page.page,
        total_pages=page.total_pages,
    )


@router.post("", response_model=TicketOut, status_code=status.HTTP_201_CREATED)
def create_ticket(
    body: TicketCreateIn = Body(...),
    actor: Actor = Depends(get_current_actor),
    svc: TicketService = Depends(get_ticket_service),
):
    return svc.create(actor.user_id, **body.model_dump())


@router.get("", response_model=TicketPageOut)
def list_tickets(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: str | None = None,
    _: Actor = Depends(require_admin),
    svc: TicketService = Depends(get_ticket_service),
):
    return _page_out(svc.list(page, limit, status=status))


@router.get("/stats")
def ticket_stats(_: Actor = Depends(require_admin), svc: TicketService = Depends(get_ticket_service)):
    return svc.stats()


@router.get("/my-tickets", response_model=TicketPageOut)
def my_tickets(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    svc: TicketService = Depends(get_ticket_service),
):
    return _page_out(svc.list(page, limit, user_id=actor.user_id))


@router.get("/{ticket_id}", response_model=TicketOut)
def get_ticket(
    ticket_id: str,
    actor: Actor = Depends(get_current_actor),
    svc: TicketService = Depends(get_ticket_service),
):
    return svc.get_for(ticket_id, actor)


@router.patch("/{ticket_id}", response_model=TicketOut)
def update_ticket(
    ticket_id: str,
    body: TicketUpdateIn = Body(...),
    _: Actor = Depends(require_admin),
    svc: TicketService = Depends(get_ticket_service),
):
    return svc.update(ticket_id, dump_changes(body))


@router.delete("/{ticket_id}")
def delete_ticket(
    ticket_id: str,
    actor: Actor = Depends(get_current_actor),
    svc: TicketService = Depends(get_ticket_service),
):
    svc.delete(ticket_id, actor)
    return {"message": "Ticket deleted successfully"}
