"""User service: role-aware access to user records."""

from typing import Any, List, Mapping, Union

import structlog

from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.auth import AuthorizationContext
from app.domain.schemas.role import Role
from app.domain.schemas.user import BaseView, FullView, ProfileUpdate, SensitiveUpdate
from app.domain.validation import decode_profile_update, decode_sensitive_update

logger = structlog.get_logger(__name__)


class UserService:
    """Authorization rules on top of an already resolved context.

    The context is always passed in by the caller; the view kind returned is
    chosen by ``ctx.role`` alone.
    """

    def __init__(self, repository: UserRepository):
        self.repository = repository

    def get_user(self, target_id: str, ctx: AuthorizationContext) -> Union[BaseView, FullView]:
        if ctx.role is Role.USER and ctx.user_id != target_id:
            raise ForbiddenError("Users may only view their own profile")

        user = self.repository.find_by_id(target_id, ctx.role)
        if user is None:
            raise NotFoundError("User", target_id)
        return user

    def get_all_users(self, ctx: AuthorizationContext) -> List[Union[BaseView, FullView]]:
        # No ownership filter: user-role callers get every active user's BaseView
        return self.repository.find_all(ctx.role)

    def update_profile(
        self,
        target_id: str,
        patch: Union[ProfileUpdate, Mapping[str, Any]],
        ctx: AuthorizationContext,
    ) -> bool:
        if ctx.role is Role.USER and ctx.user_id != target_id:
            raise ForbiddenError("Users may only update their own profile")

        update = decode_profile_update(patch)
        if not update.changes():
            return False

        new_email = update.changes().get("email")
        if new_email is not None:
            owner = self.repository.find_by_email(new_email)
            if owner is not None and owner.id != target_id:
                raise ValidationError(
                    "Invalid profile update",
                    [{"field": "email", "message": "Email is already in use", "type": "email_taken"}],
                )

        updated = self.repository.update(target_id, update)
        logger.info(
            "Profile updated",
            target_id=target_id,
            actor_id=ctx.user_id,
            fields=sorted(update.changes()),
            updated=updated,
        )
        return updated

    def update_sensitive_data(
        self,
        target_id: str,
        patch: Union[SensitiveUpdate, Mapping[str, Any]],
        ctx: AuthorizationContext,
    ) -> bool:
        if ctx.role is not Role.ADMIN:
            raise ForbiddenError("Admin access required")

        update = decode_sensitive_update(patch)
        if not update.changes():
            return False

        updated = self.repository.update_sensitive(target_id, update)
        logger.info(
            "Sensitive data updated",
            target_id=target_id,
            actor_id=ctx.user_id,
            fields=sorted(update.changes()),
            updated=updated,
        )
        return updated
