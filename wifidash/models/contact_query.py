from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from wifidash.db.base import Base


class ContactQuery(Base):
    """Inquiry submitted from the public landing page contact form."""

    __tablename__ = "contact_queries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String(20), nullable=True)
    subject = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    company = Column(String(100), nullable=True)
    status = Column(String, nullable=False, default="pending")    # pending / in_progress / resolved / closed
    priority = Column(String, nullable=False, default="medium")
    admin_notes = Column(Text, nullable=True)
    assigned_to_user_id = Column(String, nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
