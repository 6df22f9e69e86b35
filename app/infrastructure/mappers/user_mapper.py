"""
User row mapper (anti-corruption layer).

Turns storage rows into validated domain views. The view is picked by the
*requested role*, never by what the row contains, and any row that fails
domain validation raises :class:`MappingError` instead of leaking through.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional

from app.core.exceptions import MappingError, ValidationError
from app.domain.schemas.role import Role
from app.domain.schemas.user import BaseView, CredentialView, FullView
from app.domain.validation import (
    decode_base_view,
    decode_credential_view,
    decode_full_view,
)

USER_COLUMNS = ("id", "email", "name", "role", "is_active", "created_at", "updated_at")
SENSITIVE_COLUMNS = ("salary", "national_id")


def parse_decimal(value: Any, field: str) -> Optional[float]:
    """Parse a stored decimal (often a string) into a float.

    ``None`` and empty strings mean "no value". Anything else that is not a
    finite number raises ``MappingError``, it is never coerced to null or zero.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise MappingError(f"Column '{field}' is not numeric", [_error(field, "Expected a number")])
    try:
        parsed = Decimal(value.strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise MappingError(
            f"Column '{field}' is not numeric", [_error(field, "Expected a number")]
        ) from exc
    if not parsed.is_finite():
        raise MappingError(f"Column '{field}' is not finite", [_error(field, "Expected a finite number")])
    return float(parsed)


def _error(field: str, message: str) -> dict:
    return {"field": field, "message": message, "type": "mapping_error"}


def _pick(row: Mapping[str, Any], columns: Iterable[str]) -> dict:
    return {column: row.get(column) for column in columns}


class UserRowMapper:
    """Stateless mapper between ``users`` rows and domain views."""

    @staticmethod
    def to_base_view(row: Mapping[str, Any]) -> BaseView:
        try:
            return decode_base_view(_pick(row, USER_COLUMNS))
        except ValidationError as exc:
            raise MappingError("Failed to map database row to BaseView", exc.errors) from exc

    @staticmethod
    def to_full_view(row: Mapping[str, Any]) -> FullView:
        data = _pick(row, USER_COLUMNS + SENSITIVE_COLUMNS)
        data["salary"] = parse_decimal(data["salary"], "salary")
        try:
            return decode_full_view(data)
        except ValidationError as exc:
            raise MappingError("Failed to map database row to FullView", exc.errors) from exc

    @staticmethod
    def to_credential_view(row: Mapping[str, Any]) -> CredentialView:
        data = _pick(row, USER_COLUMNS + SENSITIVE_COLUMNS + ("password_hash",))
        data["salary"] = parse_decimal(data["salary"], "salary")
        try:
            return decode_credential_view(data)
        except ValidationError as exc:
            raise MappingError("Failed to map database row to CredentialView", exc.errors) from exc

    @classmethod
    def to_view(cls, row: Mapping[str, Any], requested_role: Role):
        """Map a row to the view ``requested_role`` is allowed to see."""
        if Role(requested_role) is Role.ADMIN:
            return cls.to_full_view(row)
        return cls.to_base_view(row)

    @classmethod
    def to_views(cls, rows: Iterable[Mapping[str, Any]], requested_role: Role) -> List:
        """Map rows in order. One bad row fails the whole batch."""
        return [cls.to_view(row, requested_role) for row in rows]
