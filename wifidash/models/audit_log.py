from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, DateTime, Index, String

from wifidash.db.base import Base
from wifidash.models.types import JsonDict


class AuditLog(Base):
    """One admin action: approve/reject/delete of a payment, manual cleanup or a settings change."""

    __tablename__ = "audit_logs"
    __table_args__ = (
        CheckConstraint("actor_type IN ('admin', 'user')", name="ck_audit_logs_actor_type"),
        CheckConstraint("entity_type IN ('payment', 'admin_settings')", name="ck_audit_logs_entity_type"),
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    actor_type = Column(String, nullable=False, default="admin")
    actor_id = Column(String, nullable=False, index=True)
    action = Column(String, nullable=False)                  # payment.approve, settings.update, ...
    entity_type = Column(String, nullable=False)
    entity_id = Column(String, nullable=True)                # None for bulk cleanup and settings
    payload = Column(JsonDict, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
