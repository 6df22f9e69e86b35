"""Audit record shape. Validated only; nothing in this service writes it."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from app.domain.schemas.role import Role


class AuditRecord(BaseModel):
    id: int
    table_name: str = Field(min_length=1)
    record_id: str = Field(min_length=1)
    action: Literal["INSERT", "UPDATE", "DELETE"]
    old_data: Optional[dict[str, Any]] = None
    new_data: Optional[dict[str, Any]] = None
    changed_by: str = Field(min_length=1)
    changed_by_role: Role
    changed_at: datetime

    model_config = {"frozen": True}
