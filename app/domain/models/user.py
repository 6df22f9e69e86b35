"""User domain model: maps to the 'users' table."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Numeric, String
from sqlalchemy.sql import func

from app.infrastructure.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(String(50), nullable=False, default="user")  # admin, user
    is_active = Column(Boolean, nullable=False, default=True)

    # bcrypt hash, never exposed
    password_hash = Column(String(255), nullable=False)

    # Sensitive (admin only)
    salary = Column(Numeric(12, 2, asdecimal=True), nullable=True)
    national_id = Column(String(11), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<User {self.email}>"
