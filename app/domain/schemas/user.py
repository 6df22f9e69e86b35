"""Pydantic schemas for the User entity and its role-scoped views.

``BaseView`` is what a ``user`` caller sees, ``FullView`` adds the sensitive
fields for ``admin`` callers. Both carry a ``view`` tag so a ``UserView`` can
be told apart without a role parameter. ``CredentialView`` adds the stored
password hash and never leaves the authentication layer.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, Field, StrictBool, field_validator

from app.domain.schemas.role import Role

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
NATIONAL_ID_PATTERN = r"^\d{3}-\d{2}-\d{4}$"
PASSWORD_MIN_LENGTH = 8


def normalize_email(value):
    """Emails are stored and looked up trimmed and lower-cased."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


Email = Annotated[str, Field(pattern=EMAIL_PATTERN, max_length=255)]
# Input-side email: every write and lookup goes through this
NormalizedEmail = Annotated[Email, BeforeValidator(normalize_email)]
Name = Annotated[str, Field(min_length=1, max_length=255)]
# Strict: bools and numeric strings are not salaries (stored decimals are parsed by the mapper)
Salary = Annotated[float, Field(ge=0, allow_inf_nan=False, strict=True)]
NationalId = Annotated[str, Field(pattern=NATIONAL_ID_PATTERN)]


class UserFields(BaseModel):
    id: str = Field(min_length=1)
    email: Email
    name: Name
    role: Role
    is_active: StrictBool
    created_at: datetime
    updated_at: datetime

    model_config = {"frozen": True}


class SensitiveUserData(BaseModel):
    salary: Optional[Salary] = None
    national_id: Optional[NationalId] = None

    model_config = {"frozen": True}


class BaseView(UserFields):
    view: Literal["base"] = "base"


class FullView(UserFields, SensitiveUserData):
    view: Literal["full"] = "full"

    def to_base(self) -> BaseView:
        return BaseView(**self.model_dump(include=set(UserFields.model_fields)))


class CredentialView(UserFields, SensitiveUserData):
    """Full record plus password hash. Authentication use only."""

    password_hash: str = Field(min_length=1, repr=False)

    def to_full(self) -> FullView:
        return FullView(**self.model_dump(exclude={"password_hash"}))


UserView = Annotated[Union[BaseView, FullView], Field(discriminator="view")]


class ProfileUpdate(BaseModel):
    name: Optional[Name] = None
    email: Optional[NormalizedEmail] = None

    model_config = {"extra": "forbid"}

    @field_validator("name", "email", mode="before")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    def changes(self) -> dict:
        """Only the fields the caller actually supplied."""
        return self.model_dump(exclude_unset=True)


class SensitiveUpdate(BaseModel):
    salary: Optional[Salary] = None
    national_id: Optional[NationalId] = None

    model_config = {"extra": "forbid"}

    def changes(self) -> dict:
        """Supplied fields, keeping explicit nulls (they clear the value)."""
        return self.model_dump(exclude_unset=True)


class NewUser(BaseModel):
    email: NormalizedEmail
    name: Name
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, repr=False)
    role: Role = Role.USER
    salary: Optional[Salary] = None
    national_id: Optional[NationalId] = None

    model_config = {"extra": "forbid"}
