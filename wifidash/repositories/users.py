from __future__ import annotations

from typing import Protocol

from sqlalchemy.orm import Session

from wifidash.models.user import User
from wifidash.payments.models import UserRecord, UserRole


class UserRepository(Protocol):
    def find_by_id(self, user_id: str) -> UserRecord | None: ...

    def find_many(self, user_ids: list[str]) -> dict[str, UserRecord]: ...

    def list_admin_ids(self) -> list[str]: ...


class SqlUserRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, user_id: str) -> UserRecord | None:
        row = self.db.query(User).filter(User.id == user_id).one_or_none()
        return UserRecord.model_validate(row) if row else None

    def find_many(self, user_ids: list[str]) -> dict[str, UserRecord]:
        if not user_ids:
            return {}
        rows = self.db.query(User).filter(User.id.in_(list(set(user_ids)))).all()
        return {r.id: UserRecord.model_validate(r) for r in rows}

    def list_admin_ids(self) -> list[str]:
        rows = self.db.query(User.id).filter(User.role == UserRole.ADMIN.value).all()
        return [r.id for r in rows]
