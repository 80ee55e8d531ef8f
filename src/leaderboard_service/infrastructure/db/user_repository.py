"""SQLAlchemy adapter for user account persistence."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, cast
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult, RowMapping
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from leaderboard_service.application.ports.user_repository_port import (
    BackendUnavailableError,
    UserCreateInput,
    UserRecord,
    UserRepositoryPort,
    UsernameTakenError,
)
from leaderboard_service.infrastructure.db.metadata import users

logger = logging.getLogger(__name__)

_USER_COLUMNS = (
    users.c.id,
    users.c.username,
    users.c.password_hash,
    users.c.highest_score,
    users.c.created_at,
    users.c.updated_at,
)


def _is_duplicate_username_error(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "uq_users_username" in message or "users.username" in message


@contextmanager
def _backend_errors(operation: str) -> Iterator[None]:
    """Surface connectivity failures as BackendUnavailableError.

    Drivers such as asyncpg raise socket errors on connect without SQLAlchemy
    wrapping them.
    """

    try:
        yield
    except (OperationalError, InterfaceError, OSError, TimeoutError) as error:
        logger.warning("user_repository_backend_unavailable operation=%s error=%s", operation, error)
        raise BackendUnavailableError(f"{operation}: backend unavailable") from error


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one user row; the unique constraint arbitrates concurrent inserts."""

        statement = (
            sa.insert(users)
            .values(
                id=payload.user_id,
                username=payload.username,
                password_hash=payload.password_hash,
                highest_score=0,
            )
            .returning(*_USER_COLUMNS)
        )

        with _backend_errors("create_user"):
            async with self._session_factory() as session:
                try:
                    result = await session.execute(statement)
                    row = result.mappings().one()
                    await session.commit()
                except IntegrityError as error:
                    await session.rollback()
                    if _is_duplicate_username_error(error):
                        raise UsernameTakenError(username=payload.username) from error
                    raise

        return _to_user_record(row)

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        """Return user by exact, case-sensitive username."""

        statement = sa.select(*_USER_COLUMNS).where(users.c.username == username).limit(1)

        with _backend_errors("get_by_username"):
            async with self._session_factory() as session:
                result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def update_score_if_higher(self, *, username: str, score: int) -> bool:
        """Raise highest score in one conditional UPDATE; False when nothing changed."""

        statement = (
            sa.update(users)
            .where(
                users.c.username == username,
                users.c.highest_score < score,
            )
            .values(
                highest_score=score,
                updated_at=sa.func.current_timestamp(),
            )
        )

        with _backend_errors("update_score_if_higher"):
            async with self._session_factory() as session:
                result = cast(CursorResult[Any], await session.execute(statement))
                await session.commit()

        return int(result.rowcount or 0) == 1

    async def list_top_by_score(self, *, limit: int) -> list[UserRecord]:
        """Return top users by highest score; ties ordered by username."""

        statement = (
            sa.select(*_USER_COLUMNS)
            .order_by(users.c.highest_score.desc(), users.c.username.asc())
            .limit(limit)
        )

        with _backend_errors("list_top_by_score"):
            async with self._session_factory() as session:
                result = await session.execute(statement)

        return [_to_user_record(row) for row in result.mappings().all()]


def _to_user_record(row: RowMapping) -> UserRecord:
    raw_user_id = row["id"]
    user_id = raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))
    return UserRecord(
        user_id=user_id,
        username=cast(str, row["username"]),
        password_hash=cast(str, row["password_hash"]),
        highest_score=int(row["highest_score"]),
        created_at=cast(datetime, row["created_at"]),
        updated_at=cast(datetime, row["updated_at"]),
    )
