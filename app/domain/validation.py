"""Validation core: decode untyped data into domain objects.

Every decoder raises :class:`ValidationError` listing *all* violated rules,
not just the first one pydantic hits.
"""

from typing import Any, Dict, List, Mapping, Type, TypeVar

import pydantic
from pydantic import BaseModel, TypeAdapter

from app.core.exceptions import ValidationError
from app.domain.schemas.audit import AuditRecord
from app.domain.schemas.auth import AuthorizationContext, LoginRequest
from app.domain.schemas.role import Role
from app.domain.schemas.user import (
    BaseView,
    CredentialView,
    FullView,
    NewUser,
    ProfileUpdate,
    SensitiveUpdate,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

_role_adapter = TypeAdapter(Role)

# Messages callers see instead of pydantic's raw regex dumps
_PATTERN_MESSAGES = {
    "email": "Invalid email format",
    "national_id": "National id must be in format DDD-DD-DDDD",
}


def format_errors(exc: pydantic.ValidationError) -> List[Dict[str, Any]]:
    """Flatten a pydantic error into ``{field, message, type}`` entries."""
    errors = []
    for err in exc.errors(include_url=False, include_input=False):
        field = ".".join(str(part) for part in err["loc"])
        message = err["msg"]
        if err["type"] == "string_pattern_mismatch" and field in _PATTERN_MESSAGES:
            message = _PATTERN_MESSAGES[field]
        errors.append({"field": field, "message": message, "type": err["type"]})
    return errors


def _decode(model: Type[ModelT], raw: Any, label: str) -> ModelT:
    if isinstance(raw, model):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(exclude_unset=True)
    if not isinstance(raw, Mapping):
        raise ValidationError(
            f"Invalid {label}",
            [{"field": "", "message": "Expected an object", "type": "model_type"}],
        )
    try:
        return model.model_validate(dict(raw))
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid {label}", format_errors(exc)) from exc


def _project(model: Type[BaseModel], raw: Any) -> Any:
    # Keep only the model's own keys; the view tag comes from the decoder, never from input
    if isinstance(raw, Mapping):
        return {k: raw[k] for k in model.model_fields if k in raw and k != "view"}
    return raw


def decode_role(raw: Any) -> Role:
    try:
        return _role_adapter.validate_python(raw)
    except pydantic.ValidationError as exc:
        raise ValidationError("Invalid role", format_errors(exc)) from exc


def decode_base_view(raw: Any) -> BaseView:
    return _decode(BaseView, _project(BaseView, raw), "user")


def decode_full_view(raw: Any) -> FullView:
    return _decode(FullView, _project(FullView, raw), "user")


def decode_credential_view(raw: Any) -> CredentialView:
    return _decode(CredentialView, _project(CredentialView, raw), "user credentials")


def decode_profile_update(raw: Any) -> ProfileUpdate:
    return _decode(ProfileUpdate, raw, "profile update")


def decode_sensitive_update(raw: Any) -> SensitiveUpdate:
    return _decode(SensitiveUpdate, raw, "sensitive data update")


def decode_new_user(raw: Any) -> NewUser:
    return _decode(NewUser, raw, "new user")


def decode_login(raw: Any) -> LoginRequest:
    return _decode(LoginRequest, raw, "login request")


def decode_auth_context(raw: Any) -> AuthorizationContext:
    return _decode(AuthorizationContext, raw, "auth context")


def decode_audit_record(raw: Any) -> AuditRecord:
    return _decode(AuditRecord, raw, "audit record")
