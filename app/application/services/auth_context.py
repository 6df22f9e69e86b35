"""Authorization context resolver: bearer token to a freshly validated caller."""

from typing import Optional

import structlog

from app.config import TokenSettings
from app.core.exceptions import AuthenticationError, TokenError, ValidationError
from app.core.security import decode_token
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.auth import AuthorizationContext
from app.domain.validation import decode_auth_context

logger = structlog.get_logger(__name__)

MISSING_TOKEN = "Missing authorization token"
INVALID_TOKEN = "Invalid or expired token"


class AuthContextResolver:
    """Builds an :class:`AuthorizationContext` for one request.

    The token only proves who the caller claims to be. Role and active status
    are always re-read from storage, so a promotion or demotion takes effect
    before outstanding tokens expire. Nothing is cached between calls.
    """

    def __init__(self, repository: UserRepository, token_settings: TokenSettings):
        self.repository = repository
        self.token_settings = token_settings

    def resolve(self, token: Optional[str]) -> AuthorizationContext:
        if not token or not token.strip():
            raise AuthenticationError(MISSING_TOKEN)

        try:
            payload = decode_token(token.strip(), self.token_settings)
        except TokenError as exc:
            raise AuthenticationError(INVALID_TOKEN) from exc

        email = payload.get("email")
        if not isinstance(email, str) or not email:
            raise AuthenticationError(INVALID_TOKEN, reason="token has no email claim")

        user = self.repository.find_by_email(email)
        if user is None:
            raise AuthenticationError(INVALID_TOKEN, reason="user not found")

        if not user.is_active:
            raise AuthenticationError(INVALID_TOKEN, reason="account inactive")

        try:
            context = decode_auth_context({"user_id": user.id, "role": user.role})
        except ValidationError as exc:
            raise AuthenticationError(INVALID_TOKEN, reason="invalid auth context") from exc

        if payload.get("role") != context.role.value:
            logger.info(
                "Token role differs from stored role",
                user_id=context.user_id,
                token_role=payload.get("role"),
                stored_role=context.role.value,
            )
        return context
