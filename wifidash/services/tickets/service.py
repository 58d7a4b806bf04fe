import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from wifidash.core.errors import ForbiddenError, NotFoundError, ValidationError
from wifidash.models.ticket import Ticket
from wifidash.payments.models import Actor, NotificationType, Page
from wifidash.services.notifications.service import NotificationDispatcher

logger = logging.getLogger(__name__)

TICKET_CATEGORIES = ("technical", "billing", "general", "complaint")
TICKET_PRIORITIES = ("low", "medium", "high", "urgent")
TICKET_STATUSES = ("open", "in_progress", "resolved", "closed")

ADMIN_FIELDS = frozenset({"status", "priority", "admin_response", "assigned_to_id"})


def _check_choice(field: str, value: Any, allowed: tuple[str, ...]) -> None:
    if value not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(allowed)}", field=field)


class TicketService:
    def __init__(self, db: Session, notifier: NotificationDispatcher) -> None:
        self.db = db
        self.notifier = notifier

    def create(
        self,
        user_id: str,
        title: str,
        description: str,
        category: str = "general",
        priority: str = "medium",
    ) -> Ticket:
        _check_choice("category", category, TICKET_CATEGORIES)
        _check_choice("priority", priority, TICKET_PRIORITIES)
        ticket = Ticket(
            user_id=user_id,
            title=title.strip(),
            description=description.strip(),
            category=category,
            priority=priority,
            status="open",
        )
        self.db.add(ticket)
        self.db.commit()
        self.db.refresh(ticket)
        logger.info("ticket_created", extra={"ticket_id": ticket.id, "user_id": user_id})

        self.notifier.notify_admins(
            "New Support Ticket",
            f'A new support ticket "{ticket.title}" has been created.',
            NotificationType.SYSTEM,
            metadata={"ticket_id": ticket.id, "user_id": user_id},
        )
        return ticket

    def get(self, ticket_id: str) -> Ticket:
        ticket = self.db.query(Ticket).filter(Ticket.id == ticket_id).one_or_none()
        if not ticket:
            raise NotFoundError("Ticket not found")
        return ticket

    def get_for(self, ticket_id: str, requester: Actor) -> Ticket:
        ticket = self.get(ticket_id)
        if not requester.is_admin and ticket.user_id != requester.user_id:
            raise ForbiddenError("You can only view your own tickets")
        return ticket

    def list(self, page: int = 1, limit: int = 10, status: str | None = None, user_id: str | None = None) -> Page:
        q = self.db.query(Ticket)
        if status:
            q = q.filter(Ticket.status == status)
        if user_id:
            q = q.filter(Ticket.user_id == user_id)
        total = q.count()
        items = q.order_by(Ticket.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return Page.build(items, total, page, limit)

    def update(self, ticket_id: str, data: dict[str, Any]) -> Ticket:
        """Admin update; stamps resolved_at on the transition into resolved and tells the owner."""
        unknown = set(data) - ADMIN_FIELDS
        if unknown:
            field = sorted(unknown)[0]
            raise ValidationError(f"Field cannot be changed: {field}", field=field)
        if "status" in data:
            _check_choice("status", data["status"], TICKET_STATUSES)
        if "priority" in data:
            _check_choice("priority", data["priority"], TICKET_PRIORITIES)

        ticket = self.get(ticket_id)
        if data.get("status") == "resolved" and ticket.status != "resolved":
            ticket.resolved_at = datetime.now(timezone.utc)
        for key, value in data.items():
            setattr(ticket, key, value)
        self.db.add(ticket)
        self.db.commit()
        self.db.refresh(ticket)

        message = f'Your ticket "{ticket.title}" has been updated'
        if data.get("status"):
            message += f" - Status: {data['status']}"
        if data.get("admin_response"):
            message += f" - Response: {data['admin_response']}"
        self.notifier.notify(
            ticket.user_id,
            "Ticket Updated",
            message,
            NotificationType.SYSTEM,
            metadata={"ticket_id": ticket.id},
        )
        return ticket

    def delete(self, ticket_id: str, requester: Actor) -> None:
        ticket = self.get(ticket_id)
        if not requester.is_admin and ticket.user_id != requester.user_id:
            raise ForbiddenError("You can only delete your own tickets")
        self.db.delete(ticket)
        self.db.commit()
        logger.info("ticket_deleted", extra={"ticket_id": ticket_id, "user_id": requester.user_id})

    def stats(self) -> dict[str, int]:
        rows = self.db.query(Ticket.status, func.count(Ticket.id)).group_by(Ticket.status).all()
        counts = {status: count for status, count in rows}
        result = {status: counts.get(status, 0) for status in TICKET_STATUSES}
        result["total"] = sum(counts.values())
        return result
