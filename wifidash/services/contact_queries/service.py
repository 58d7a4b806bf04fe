"""Contact form inquiries from the public site; admins triage them in the dashboard."""
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from wifidash.core.config import settings
from wifidash.core.errors import NotFoundError, ValidationError
from wifidash.models.contact_query import ContactQuery
from wifidash.payments.models import Page
from wifidash.services.email import templates
from wifidash.services.email.mailer import Mailer

logger = logging.getLogger(__name__)

QUERY_STATUSES = ("pending", "in_progress", "resolved", "closed")
QUERY_PRIORITIES = ("low", "medium", "high", "urgent")
ADMIN_FIELDS = frozenset({"status", "priority", "admin_notes", "assigned_to_user_id"})


class ContactQueryService:
    def __init__(self, db: Session, mailer: Mailer | None, notify_to: str | None = None) -> None:
        self.db = db
        self.mailer = mailer
        self.notify_to = notify_to if notify_to is not None else (
            settings.admin_notification_email or settings.smtp_user
        )

    def create(self, data: dict[str, Any]) -> ContactQuery:
        query = ContactQuery(**data, status="pending")
        self.db.add(query)
        self.db.commit()
        self.db.refresh(query)
        logger.info("contact_query_created", extra={"query_id": query.id})
        self._notify_admin(query)
        return query

    def _notify_admin(self, query: ContactQuery) -> None:
        if self.mailer is None or not self.notify_to:
            return
        template = templates.contact_query_notice(
            query.full_name, query.email, query.subject, query.message, query.phone, query.company
        )
        try:
            self.mailer.send(self.notify_to, template.subject, template.html)
        except Exception as e:
            # best effort
            logger.warning("contact_query_notice_failed", extra={"query_id": query.id, "error": str(e)})

    def get(self, query_id: int) -> ContactQuery:
        query = self.db.query(ContactQuery).filter(ContactQuery.id == query_id).one_or_none()
        if not query:
            raise NotFoundError(f"Contact query with ID {query_id} not found")
        return query

    def list(self, page: int = 1, limit: int = 10, status: str | None = None) -> Page:
        q = self.db.query(ContactQuery)
        if status:
            q = q.filter(ContactQuery.status == status)
        total = q.count()
        items = q.order_by(ContactQuery.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return Page.build(items, total, page, limit)

    def update(self, query_id: int, data: dict[str, Any]) -> ContactQuery:
        unknown = set(data) - ADMIN_FIELDS
        if unknown:
            field = sorted(unknown)[0]
            raise ValidationError(f"Field cannot be changed: {field}", field=field)
        if "status" in data and data["status"] not in QUERY_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(QUERY_STATUSES)}", field="status")
        if "priority" in data and data["priority"] not in QUERY_PRIORITIES:
            raise ValidationError(f"priority must be one of: {', '.join(QUERY_PRIORITIES)}", field="priority")

        query = self.get(query_id)
        if data.get("status") == "resolved" and query.status != "resolved":
            query.resolved_at = datetime.now(timezone.utc)
        for key, value in data.items():
            setattr(query, key, value)
        self.db.add(query)
        self.db.commit()
        self.db.refresh(query)
        return query

    def delete(self, query_id: int) -> None:
        query = self.get(query_id)
        self.db.delete(query)
        self.db.commit()

    def stats(self) -> dict[str, int]:
        rows = self.db.query(ContactQuery.status, func.count(ContactQuery.id)).group_by(ContactQuery.status).all()
        counts = {status: count for status, count in rows}
        result = {status: counts.get(status, 0) for status in QUERY_STATUSES}
        result["total"] = sum(counts.values())
        return result
