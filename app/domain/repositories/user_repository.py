"""
User Repository Interface.
Every method returns validated domain views, never storage rows, and raises
DatabaseError on I/O failure or when a stored row fails validation.
"""

from typing import List, Optional, Protocol, Union

from app.domain.schemas.role import Role
from app.domain.schemas.user import (
    BaseView,
    CredentialView,
    FullView,
    NewUser,
    ProfileUpdate,
    SensitiveUpdate,
)


class UserRepository(Protocol):
    """Interface for User data access."""

    def find_by_id(self, user_id: str, requested_role: Role) -> Optional[Union[BaseView, FullView]]:
        """Get a user by id, as the view ``requested_role`` may see."""
        ...

    def find_all(self, requested_role: Role) -> List[Union[BaseView, FullView]]:
        """List active users, as the view ``requested_role`` may see."""
        ...

    def find_by_email(self, email: str) -> Optional[CredentialView]:
        """Get a user with its password hash (authentication only)."""
        ...

    def update(self, user_id: str, patch: ProfileUpdate) -> bool:
        """Update name/email. True iff a row changed."""
        ...

    def update_sensitive(self, user_id: str, patch: SensitiveUpdate) -> bool:
        """Update salary/national id. True iff a row changed."""
        ...

    def create(self, new_user: NewUser, password_hash: str) -> FullView:
        """Insert a user with an already hashed password."""
        ...
