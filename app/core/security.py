"""Security primitives: password hashing (passlib) and JWT signing (python-jose)."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt
from jose.exceptions import JOSEError
from passlib.context import CryptContext

from app.config import TokenSettings
from app.core.exceptions import TokenError


_DUMMY_PASSWORD = "not-a-real-password"


class PasswordHasher:
    """Slow salted hashing. ``verify`` never raises.

    One instance is shared per process. The dummy hash is computed once here
    so ``verify_dummy`` costs exactly one bcrypt verification, the same as a
    real ``verify``.
    """

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)
        self._dummy_hash = self._context.hash(_DUMMY_PASSWORD)

    def verify_dummy(self, plain_password: Optional[str]) -> bool:
        """Spend one verification on a password that has no stored hash."""
        self.verify(plain_password or _DUMMY_PASSWORD, self._dummy_hash)
        return False

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        if not plain_password or not hashed_password:
            return False
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            # Unknown or malformed hash
            return False


def encode_token(claims: Dict[str, Any], settings: TokenSettings, now: Optional[datetime] = None) -> str:
    """Sign ``claims`` with ``iat`` and ``exp`` added."""
    issued_at = now or datetime.now(timezone.utc)
    to_encode = dict(claims)
    to_encode.update(
        {
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + timedelta(minutes=settings.expiration_minutes)).timestamp()),
        }
    )
    try:
        return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
    except (JOSEError, TypeError, ValueError) as exc:
        raise TokenError("Failed to sign token") from exc


def decode_token(token: str, settings: TokenSettings) -> Dict[str, Any]:
    """Verify signature and expiry, returning the claims."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except (JOSEError, TypeError, ValueError) as exc:
        raise TokenError("Invalid or expired token") from exc
