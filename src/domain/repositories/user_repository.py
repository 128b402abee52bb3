"""User repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.user import User


class IUserRepository(Protocol):
    """Repository interface for User entities."""

    async def get(self, id: UUID) -> User | None:
        """Get a user by ID."""
        ...

    async def email_taken(self, email: str, ignore_id: UUID | None = None) -> bool:
        """Check whether another user already owns this email."""
        ...

    async def create(self, user: User) -> User:
        """Create a new user."""
        ...

    async def update(self, user: User) -> User:
        """Persist name, email, password and avatar of an existing user."""
        ...

    async def update_avatar(self, id: UUID, avatar: str | None) -> User:
        """Persist only the avatar column of an existing user."""
        ...
