"""User API routes: role-scoped reads and updates."""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from app.application.services.user_service import UserService
from app.domain.schemas.auth import AuthorizationContext, UpdateResult
from app.domain.schemas.user import UserView
from app.interfaces.api.deps import get_auth_context, get_user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/me", response_model=UserView)
def get_current_user(
    ctx: AuthorizationContext = Depends(get_auth_context),
    service: UserService = Depends(get_user_service),
):
    """Get the authenticated user's own profile."""
    return service.get_user(ctx.user_id, ctx)


@router.get("", response_model=List[UserView])
def list_users(
    ctx: AuthorizationContext = Depends(get_auth_context),
    service: UserService = Depends(get_user_service),
):
    """List active users (full view for admins, base view otherwise)."""
    return service.get_all_users(ctx)


@router.get("/{user_id}", response_model=UserView)
def get_user(
    user_id: str,
    ctx: AuthorizationContext = Depends(get_auth_context),
    service: UserService = Depends(get_user_service),
):
    return service.get_user(user_id, ctx)


# Bodies stay untyped here so the validation core reports every violation as a 400
@router.patch("/{user_id}", response_model=UpdateResult)
def update_profile(
    user_id: str,
    body: Dict[str, Any] = Body(...),
    ctx: AuthorizationContext = Depends(get_auth_context),
    service: UserService = Depends(get_user_service),
):
    """Update name/email. Users may only update themselves."""
    return UpdateResult(updated=service.update_profile(user_id, body, ctx))


@router.patch("/{user_id}/sensitive", response_model=UpdateResult)
def update_sensitive_data(
    user_id: str,
    body: Dict[str, Any] = Body(...),
    ctx: AuthorizationContext = Depends(get_auth_context),
    service: UserService = Depends(get_user_service),
):
    """Update salary/national id. Admin only."""
    return UpdateResult(updated=service.update_sensitive_data(user_id, body, ctx))
