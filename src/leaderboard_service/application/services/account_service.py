"""Application service for account registration, login, and score tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from uuid import uuid4

from leaderboard_service.application.ports.password_hasher_port import PasswordHasherPort
from leaderboard_service.application.ports.user_repository_port import (
    UserCreateInput,
    UsernameTakenError,
    UserRecord,
    UserRepositoryPort,
)
from leaderboard_service.domain.auth.credentials import normalize_username

DEFAULT_LEADERBOARD_LIMIT = 10
logger = logging.getLogger(__name__)


class RegisterOutcome(StrEnum):
    """Supported registration outcomes."""

    CREATED = "created"
    USERNAME_TAKEN = "username_taken"


class AuthOutcome(StrEnum):
    """Supported authentication outcomes."""

    SUCCESS = "success"
    USER_NOT_FOUND = "user_not_found"
    INVALID_PASSWORD = "invalid_password"


class ScoreSubmissionOutcome(StrEnum):
    """Supported score submission outcomes."""

    UPDATED = "updated"
    NOT_UPDATED = "not_updated"


@dataclass(frozen=True)
class RegisterResult:
    """Registration result model."""

    outcome: RegisterOutcome
    user: UserRecord | None = None


@dataclass(frozen=True)
class AuthResult:
    """Authentication result model."""

    outcome: AuthOutcome
    user: UserRecord | None = None


@dataclass(frozen=True)
class ScoreSubmissionResult:
    """Score submission result model."""

    outcome: ScoreSubmissionOutcome


@dataclass(frozen=True)
class LeaderboardEntry:
    """Public projection of one ranked user."""

    username: str
    highest_score: int


class AccountService:
    """Register and authenticate players and maintain their high scores."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
        default_leaderboard_limit: int = DEFAULT_LEADERBOARD_LIMIT,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._default_leaderboard_limit = default_leaderboard_limit

    async def register(self, *, username: str, password: str) -> RegisterResult:
        """Create one account with a hashed password and a zero score.

        Any password, including an empty one, is accepted.
        """

        username = normalize_username(username=username)
        password_hash = self._password_hasher.hash_password(password)

        try:
            user = await self._users.create_user(
                UserCreateInput(
                    user_id=uuid4(),
                    username=username,
                    password_hash=password_hash,
                )
            )
        except UsernameTakenError:
            logger.info("account_register_conflict username=%s", username)
            return RegisterResult(outcome=RegisterOutcome.USERNAME_TAKEN)

        logger.info("account_registered username=%s user_id=%s", username, user.user_id)
        return RegisterResult(outcome=RegisterOutcome.CREATED, user=user)

    async def authenticate(self, *, username: str, password: str) -> AuthResult:
        """Verify credentials for one username."""

        user = await self._users.get_by_username(username=username)
        if user is None:
            logger.info("account_login_failed username=%s reason=user_not_found", username)
            return AuthResult(outcome=AuthOutcome.USER_NOT_FOUND)

        is_valid = self._password_hasher.verify_password(
            password=password,
            password_hash=user.password_hash,
        )
        if not is_valid:
            logger.info("account_login_failed username=%s reason=invalid_password", username)
            return AuthResult(outcome=AuthOutcome.INVALID_PASSWORD)

        logger.info("account_login_success username=%s", username)
        return AuthResult(outcome=AuthOutcome.SUCCESS, user=user)

    async def submit_score(self, *, username: str, score: int) -> ScoreSubmissionResult:
        """Record `score` only when it beats the stored highest score.

        Unknown users and non-improving scores both yield NOT_UPDATED.
        """

        updated = await self._users.update_score_if_higher(username=username, score=score)
        if not updated:
            logger.debug("score_not_updated username=%s score=%s", username, score)
            return ScoreSubmissionResult(outcome=ScoreSubmissionOutcome.NOT_UPDATED)

        logger.info("score_updated username=%s score=%s", username, score)
        return ScoreSubmissionResult(outcome=ScoreSubmissionOutcome.UPDATED)

    async def leaderboard(self, *, limit: int | None = None) -> list[LeaderboardEntry]:
        """Return top users by highest score, projected to public fields."""

        resolved_limit = self._default_leaderboard_limit if limit is None else limit
        if resolved_limit < 1:
            raise ValueError("limit must be at least 1")

        top_users = await self._users.list_top_by_score(limit=resolved_limit)
        return [
            LeaderboardEntry(username=user.username, highest_score=user.highest_score)
            for user in top_users
        ]
