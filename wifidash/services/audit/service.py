"""Append-only record of admin actions on payments and payment settings."""
from enum import Enum
from typing import Any

from sqlalchemy.orm import Session

from wifidash.db.session import committing
from wifidash.models.audit_log import AuditLog
from wifidash.payments.models import Actor


class AuditEntity(str, Enum):
    PAYMENT = "payment"
    ADMIN_SETTINGS = "admin_settings"


class AuditAction(str, Enum):
    PAYMENT_APPROVE = "payment.approve"
    PAYMENT_REJECT = "payment.reject"
    PAYMENT_DELETE = "payment.delete"
    SCREENSHOTS_CLEANUP = "screenshots.cleanup"
    SETTINGS_UPDATE = "settings.update"

    @property
    def entity(self) -> AuditEntity:
        if self is AuditAction.SETTINGS_UPDATE:
            return AuditEntity.ADMIN_SETTINGS
        return AuditEntity.PAYMENT


class ActorType(str, Enum):
    ADMIN = "admin"
    USER = "user"


class AuditService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def log(
        self,
        actor: Actor,
        action: AuditAction,
        entity_id: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> AuditLog:
        entry = AuditLog(
            actor_type=(ActorType.ADMIN if actor.is_admin else ActorType.USER).value,
            actor_id=actor.user_id,
            action=action.value,
            entity_type=action.entity.value,
            entity_id=entity_id,
            payload=payload or {},
        )
        with committing(self.db):
            self.db.add(entry)
        self.db.refresh(entry)
        return entry
