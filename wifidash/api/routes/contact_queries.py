from fastapi import APIRouter, Body, Depends, Query, status

from wifidash.api.deps import get_contact_query_service
from wifidash.payments.models import Actor
from wifidash.schemas.support import (
    ContactQueryCreateIn,
    ContactQueryOut,
    ContactQueryPageOut,
    ContactQueryUpdateIn,
    dump_changes,
)
from wifidash.services.auth.jwt import require_admin
from wifidash.services.contact_queries.service import ContactQueryService

router = APIRouter(prefix="/contact-queries", tags=["contact-queries"])


@router.post("", response_model=ContactQueryOut, status_code=status.HTTP_201_CREATED)
def submit_contact_query(
    body: ContactQueryCreateIn = Body(...),
    svc: ContactQueryService = Depends(get_contact_query_service),
):
    """Public contact form."""
    return svc.create(body.model_dump())


@router.get("", response_model=ContactQueryPageOut)
def list_contact_queries(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: str | None = None,
    _: Actor = Depends(require_admin),
    svc: ContactQueryService = Depends(get_contact_query_service),
):
    result = svc.list(page, limit, status=status)
    return ContactQueryPageOut(
        queries=[ContactQueryOut.model_validate(q) for q in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get("/stats")
def contact_query_stats(
    _: Actor = Depends(require_admin),
    svc: ContactQueryService = Depends(get_contact_query_service),
):
    return svc.stats()


@router.get("/{query_id}", response_model=ContactQueryOut)
def get_contact_query(
    query_id: int,
    _: Actor = Depends(require_admin),
    svc: ContactQueryService = Depends(get_contact_query_service),
):
    return svc.get(query_id)


@router.patch("/{query_id}", response_model=ContactQueryOut)
def update_contact_query(
    query_id: int,
    body: ContactQueryUpdateIn = Body(...),
    _: Actor = Depends(require_admin),
    svc: ContactQueryService = Depends(get_contact_query_service),
):
    return svc.update(query_id, dump_changes(body))


@router.delete("/{query_id}")
def delete_contact_query(
    query_id: int,
    _: Actor = Depends(require_admin),
    svc: ContactQueryService = Depends(get_contact_query_service),
):
    svc.delete(query_id)
    return {"message": "Contact query deleted successfully"}
