"""FastAPI dependencies: repositories, services and the per-request auth context."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.application.services.auth_context import AuthContextResolver
from app.application.services.auth_service import CredentialService
from app.application.services.user_service import UserService
from app.config import TokenSettings
from app.core.security import PasswordHasher
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.auth import AuthorizationContext
from app.infrastructure.database import get_db
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

security = HTTPBearer(auto_error=False)


def get_token_settings(request: Request) -> TokenSettings:
    return request.app.state.token_settings


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    """Get user repository instance."""
    return SQLAlchemyUserRepository(db)


def get_credential_service(
    repo: UserRepository = Depends(get_user_repository),
    token_settings: TokenSettings = Depends(get_token_settings),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> CredentialService:
    return CredentialService(repo, token_settings, hasher)


def get_user_service(repo: UserRepository = Depends(get_user_repository)) -> UserService:
    return UserService(repo)


def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repo: UserRepository = Depends(get_user_repository),
    token_settings: TokenSettings = Depends(get_token_settings),
) -> AuthorizationContext:
    """Resolve the caller from the bearer token, re-checked against storage."""
    token = None
    if credentials is not None and credentials.scheme.lower() == "bearer":
        token = credentials.credentials
    return AuthContextResolver(repo, token_settings).resolve(token)
