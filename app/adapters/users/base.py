"""User repository interface.

Routes depend on this abstraction so the in-memory store can be swapped for
a database-backed one without touching the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from app.schemas.users import UserOut


class AbstractUserRepository(ABC):
    """Create/find access to users."""

    @abstractmethod
    def create(self, *, email: str, name: str) -> UserOut:
        """Persist a new user.

        Raises:
            ConflictAppError: If the email is already registered.
        """
        raise NotImplementedError

    @abstractmethod
    def find(self, *, user_id: UUID | None = None, email: str | None = None) -> list[UserOut]:
        """Return users matching every provided filter (all users if none)."""
        raise NotImplementedError
