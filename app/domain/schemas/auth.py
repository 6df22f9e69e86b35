"""Pydantic schemas for authentication and authorization."""

from pydantic import BaseModel, Field

from app.domain.schemas.role import Role


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=1024, repr=False)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AuthorizationContext(BaseModel):
    """Who is calling, derived from the freshly loaded user record."""

    user_id: str = Field(min_length=1)
    role: Role

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class UpdateResult(BaseModel):
    updated: bool
