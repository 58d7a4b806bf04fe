from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text

from wifidash.db.base import Base


class AdminSettings(Base):
    """Single row: where customers send money (QR image, UPI handle)."""

    __tablename__ = "admin_settings"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    qr_code_url = Column(Text, nullable=True)
    upi_number = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
