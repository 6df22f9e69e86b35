"""
Tests for the authorization context resolver.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.application.services.auth_context import INVALID_TOKEN, MISSING_TOKEN, AuthContextResolver
from app.config import TokenSettings
from app.core.exceptions import AuthenticationError, DatabaseError
from app.core.security import encode_token
from app.domain.schemas.role import Role


def _token(settings, email, role="user", sub="ignored", now=None):
    return encode_token({"sub": sub, "email": email, "role": role}, settings, now=now)


@pytest.fixture
def resolver(memory_repo, token_settings):
    return AuthContextResolver(memory_repo, token_settings)


@pytest.mark.unit
class TestResolve:
    def test_valid_token_yields_context_from_storage(self, resolver, token_settings):
        ctx = resolver.resolve(_token(token_settings, "user@example.com"))

        assert ctx.user_id == "user-1"
        assert ctx.role is Role.USER

    @pytest.mark.parametrize("token", [None, "", "   "])
    def test_missing_token(self, resolver, token):
        with pytest.raises(AuthenticationError) as exc_info:
            resolver.resolve(token)

        assert exc_info.value.message == MISSING_TOKEN

    def test_invalid_signature(self, resolver):
        other = TokenSettings(secret_key="not-the-secret", expiration_minutes=30)

        with pytest.raises(AuthenticationError) as exc_info:
            resolver.resolve(_token(other, "user@example.com"))

        assert exc_info.value.message == INVALID_TOKEN

    def test_expired_token(self, resolver, token_settings):
        issued = datetime.now(timezone.utc) - timedelta(minutes=31)

        with pytest.raises(AuthenticationError) as exc_info:
            resolver.resolve(_token(token_settings, "user@example.com", now=issued))

        assert exc_info.value.message == INVALID_TOKEN

    def test_token_without_email_claim(self, resolver, token_settings):
        token = encode_token({"sub": "user-1", "role": "user"}, token_settings)

        with pytest.raises(AuthenticationError) as exc_info:
            resolver.resolve(token)

        assert exc_info.value.message == INVALID_TOKEN

    def test_unknown_user(self, resolver, token_settings):
        with pytest.raises(AuthenticationError) as exc_info:
            resolver.resolve(_token(token_settings, "deleted@example.com"))

        assert exc_info.value.message == INVALID_TOKEN
        assert exc_info.value.reason == "user not found"

    def test_inactive_user(self, resolver, token_settings):
        with pytest.raises(AuthenticationError) as exc_info:
            resolver.resolve(_token(token_settings, "gone@example.com"))

        assert exc_info.value.message == INVALID_TOKEN
        assert exc_info.value.reason == "account inactive"

    def test_deactivation_takes_effect_before_expiry(self, resolver, memory_repo, token_settings):
        token = _token(token_settings, "user@example.com")
        assert resolver.resolve(token).user_id == "user-1"

        memory_repo.rows["user-1"]["is_active"] = False

        with pytest.raises(AuthenticationError):
            resolver.resolve(token)


@pytest.mark.unit
class TestRoleIsRederived:
    def test_promotion_applies_to_outstanding_token(self, resolver, memory_repo, token_settings):
        token = _token(token_settings, "user@example.com", role="user")
        memory_repo.rows["user-1"]["role"] = "admin"

        assert resolver.resolve(token).role is Role.ADMIN

    def test_demotion_applies_to_outstanding_token(self, resolver, memory_repo, token_settings):
        token = _token(token_settings, "admin@example.com", role="admin")
        memory_repo.rows["admin-1"]["role"] = "user"

        assert resolver.resolve(token).role is Role.USER

    def test_forged_role_claim_is_ignored(self, resolver, token_settings):
        token = _token(token_settings, "user@example.com", role="admin", sub="admin-1")

        ctx = resolver.resolve(token)

        assert ctx.role is Role.USER
        assert ctx.user_id == "user-1"

    def test_no_caching_between_calls(self, resolver, memory_repo, token_settings):
        token = _token(token_settings, "user@example.com")

        resolver.resolve(token)
        resolver.resolve(token)

        assert memory_repo.calls.count("find_by_email") == 2


class _BrokenRepository:
    def __init__(self, exc):
        self.exc = exc

    def find_by_email(self, email):
        raise self.exc


@pytest.mark.unit
class TestStorageFailures:
    def test_database_error_propagates(self, token_settings):
        resolver = AuthContextResolver(_BrokenRepository(DatabaseError("down")), token_settings)

        with pytest.raises(DatabaseError):
            resolver.resolve(_token(token_settings, "user@example.com"))

    def test_corrupt_stored_row_is_not_authenticated(self, memory_repo, token_settings):
        memory_repo.rows["user-1"]["role"] = "superuser"
        resolver = AuthContextResolver(memory_repo, token_settings)

        with pytest.raises(DatabaseError):
            resolver.resolve(_token(token_settings, "user@example.com"))
