"""Auth API routes: login, me."""

from fastapi import APIRouter, Depends

from app.application.services.auth_service import CredentialService
from app.application.services.user_service import UserService
from app.domain.schemas.auth import AuthorizationContext, LoginRequest, TokenResponse
from app.domain.schemas.user import UserView
from app.interfaces.api.deps import get_auth_context, get_credential_service, get_user_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, service: CredentialService = Depends(get_credential_service)):
    return service.login(body.email, body.password)


@router.get("/me", response_model=UserView)
def get_me(
    ctx: AuthorizationContext = Depends(get_auth_context),
    service: UserService = Depends(get_user_service),
):
    return service.get_user(ctx.user_id, ctx)
