"""Payment destination shown to customers: QR code image and UPI handle."""
from typing import Any

from sqlalchemy.orm import Session

from wifidash.models.admin_settings import AdminSettings

EDITABLE_FIELDS = ("qr_code_url", "upi_number")


class AdminSettingsService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self) -> AdminSettings | None:
        return self.db.query(AdminSettings).order_by(AdminSettings.created_at.asc()).first()

    def get_or_create(self) -> AdminSettings:
        row = self.get()
        if row:
            return row
        row = AdminSettings(qr_code_url="", upi_number="")
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def as_dict(self) -> dict[str, Any]:
        row = self.get_or_create()
        return {
            "qr_code_url": row.qr_code_url or "",
            "upi_number": row.upi_number or "",
            "updated_at": row.updated_at.isoformat() if row.updated_at else None,
        }

    def update(self, data: dict[str, Any]) -> dict[str, Any]:
        row = self.get_or_create()
        for key in EDITABLE_FIELDS:
            if key in data:
                setattr(row, key, (data[key] or "").strip())
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return self.as_dict()
