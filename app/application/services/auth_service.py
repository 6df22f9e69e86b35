"""Credential service: password verification and JWT issuance."""

import structlog

from app.config import TokenSettings
from app.core.exceptions import AuthenticationError, TokenError
from app.core.security import PasswordHasher, encode_token
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.auth import TokenResponse
from app.domain.schemas.role import Role
from app.domain.schemas.user import normalize_email

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class CredentialService:
    """Verifies email/password pairs and issues signed access tokens.

    Unknown email, wrong password and inactive account all surface the same
    public message; the distinct internal reason is kept on the error for logs.
    """

    def __init__(self, repository: UserRepository, token_settings: TokenSettings, hasher: PasswordHasher):
        self.repository = repository
        self.token_settings = token_settings
        self.hasher = hasher

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.hasher.verify(plain_password, hashed_password)

    def issue_token(self, user_id: str, email: str, role: Role) -> str:
        claims = {"sub": user_id, "email": email, "role": Role(role).value}
        try:
            return encode_token(claims, self.token_settings)
        except TokenError as exc:
            logger.error("Token signing failed", user_id=user_id, error=str(exc.__cause__ or exc))
            raise AuthenticationError("Failed to generate token") from exc

    def login(self, email: str, password: str) -> TokenResponse:
        normalized_email = normalize_email(email or "")
        user = self.repository.find_by_email(normalized_email) if normalized_email else None

        if user is None:
            # Same bcrypt cost as a known email, so timing does not reveal it
            self.hasher.verify_dummy(password)
            raise AuthenticationError(INVALID_CREDENTIALS, reason="invalid credentials")

        password_ok = self.verify_password(password, user.password_hash)

        if not user.is_active:
            raise AuthenticationError(INVALID_CREDENTIALS, reason="account inactive")

        if not password_ok:
            raise AuthenticationError(INVALID_CREDENTIALS, reason="invalid credentials")

        token = self.issue_token(user.id, user.email, user.role)
        logger.info("User logged in", user_id=user.id, role=user.role.value)
        return TokenResponse(
            access_token=token,
            expires_in=self.token_settings.expiration_minutes * 60,
        )
