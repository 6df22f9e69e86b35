"""
SQLAlchemy Implementation of User Repository.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import DatabaseError, MappingError
from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.role import Role
from app.domain.schemas.user import (
    BaseView,
    CredentialView,
    FullView,
    NewUser,
    ProfileUpdate,
    SensitiveUpdate,
)
from app.infrastructure.mappers.user_mapper import UserRowMapper

logger = structlog.get_logger(__name__)

users = User.__table__


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SQLAlchemyUserRepository(UserRepository):
    """User repository backed by a SQLAlchemy session.

    Queries select plain rows from the ``users`` table and hand them to
    :class:`UserRowMapper`; ORM instances never leave this class.
    """

    def __init__(self, db: Session, mapper: type[UserRowMapper] = UserRowMapper):
        self.db = db
        self.mapper = mapper

    def _fetch_one(self, stmt, action: str):
        try:
            return self.db.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Failed to {action}", cause=exc) from exc

    def _map(self, fn, *args):
        try:
            return fn(*args)
        except MappingError as exc:
            logger.error("Stored user row failed validation", error=exc.message, errors=exc.errors)
            raise DatabaseError("Stored user record is inconsistent", cause=exc) from exc

    def find_by_id(self, user_id: str, requested_role: Role) -> Optional[Union[BaseView, FullView]]:
        row = self._fetch_one(select(users).where(users.c.id == user_id), "fetch user")
        if row is None:
            return None
        return self._map(self.mapper.to_view, row, requested_role)

    def find_all(self, requested_role: Role) -> List[Union[BaseView, FullView]]:
        stmt = (
            select(users)
            .where(users.c.is_active.is_(True))
            .order_by(users.c.created_at.asc(), users.c.id.asc())
        )
        try:
            rows = self.db.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            raise DatabaseError("Failed to fetch users", cause=exc) from exc
        return self._map(self.mapper.to_views, rows, requested_role)

    def find_by_email(self, email: str) -> Optional[CredentialView]:
        row = self._fetch_one(select(users).where(users.c.email == email), "fetch user by email")
        if row is None:
            return None
        return self._map(self.mapper.to_credential_view, row)

    def _apply(self, user_id: str, values: Dict[str, Any], action: str) -> bool:
        values["updated_at"] = _now()
        try:
            result = self.db.execute(update(users).where(users.c.id == user_id).values(**values))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise DatabaseError(f"Failed to {action}", cause=exc) from exc
        return result.rowcount > 0

    def update(self, user_id: str, patch: ProfileUpdate) -> bool:
        values = patch.changes()
        if not values:
            return False
        return self._apply(user_id, values, "update user")

    def update_sensitive(self, user_id: str, patch: SensitiveUpdate) -> bool:
        values = patch.changes()
        if not values:
            return False
        if values.get("salary") is not None:
            values["salary"] = Decimal(str(values["salary"]))
        return self._apply(user_id, values, "update sensitive data")

    def create(self, new_user: NewUser, password_hash: str) -> FullView:
        now = _now()
        user = User(
            name=new_user.name,
            email=new_user.email,
            role=new_user.role.value,
            is_active=True,
            password_hash=password_hash,
            salary=Decimal(str(new_user.salary)) if new_user.salary is not None else None,
            national_id=new_user.national_id,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(user)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise DatabaseError("Failed to create user", cause=exc) from exc

        found = self.find_by_id(user.id, Role.ADMIN)
        if found is None:
            raise DatabaseError("Created user could not be read back")
        return found
