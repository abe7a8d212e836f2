"""In-memory user repository (per-process, thread-safe)."""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Callable

from app.adapters.users.base import AbstractUserRepository
from app.core.errors import ConflictAppError
from app.schemas.users import UserOut


class InMemoryUserRepository(AbstractUserRepository):
    """Keeps users in insertion order; emails are unique case-insensitively."""

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        self._users: dict[uuid.UUID, UserOut] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def create(self, *, email: str, name: str) -> UserOut:
        with self._lock:
            if any(u.email.lower() == email.lower() for u in self._users.values()):
                raise ConflictAppError(
                    code="email_taken",
                    message="A user with this email already exists",
                    details={"field": "email", "resource": "user"},
                )
            user = UserOut(id=uuid.uuid4(), email=email, name=name, created_at=self._clock())
            self._users[user.id] = user
            return user

    def find(self, *, user_id: uuid.UUID | None = None, email: str | None = None) -> list[UserOut]:
        with self._lock:
            users = list(self._users.values())

        if user_id is not None:
            users = [u for u in users if u.id == user_id]
        if email is not None:
            users = [u for u in users if u.email.lower() == email.lower()]
        return users
