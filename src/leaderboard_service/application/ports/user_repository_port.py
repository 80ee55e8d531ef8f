"""Port for user account persistence used by the account service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID


class UsernameTakenError(ValueError):
    """Raised when a user with the same username already exists."""

    def __init__(self, *, username: str) -> None:
        super().__init__(f"username already taken: {username}")
        self.username = username


class BackendUnavailableError(RuntimeError):
    """Raised when the persistence backend cannot be reached."""


@dataclass(frozen=True)
class UserCreateInput:
    """Insert payload for one new user account."""

    user_id: UUID
    username: str
    password_hash: str


@dataclass(frozen=True)
class UserRecord:
    """User persistence model."""

    user_id: UUID
    username: str
    password_hash: str
    highest_score: int
    created_at: datetime
    updated_at: datetime


class UserRepositoryPort(Protocol):
    """User repository contract."""

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert user with a zero score or raise UsernameTakenError."""

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        """Return user by exact username or None."""

    async def update_score_if_higher(self, *, username: str, score: int) -> bool:
        """Raise stored highest score to `score` when strictly higher."""

    async def list_top_by_score(self, *, limit: int) -> list[UserRecord]:
        """Return at most `limit` users ordered by highest score descending."""
