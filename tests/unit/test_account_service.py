from __future__ import annotations

from datetime import UTC, datetime

import pytest

from leaderboard_service.application.ports.user_repository_port import (
    BackendUnavailableError,
    UserCreateInput,
    UsernameTakenError,
    UserRecord,
)
from leaderboard_service.application.services.account_service import (
    AccountService,
    AuthOutcome,
    LeaderboardEntry,
    RegisterOutcome,
    ScoreSubmissionOutcome,
)
from leaderboard_service.domain.auth.credentials import InvalidUsernameError


class FakeUserRepository:
    def __init__(self) -> None:
        self.users: dict[str, UserRecord] = {}
        self.create_calls: list[UserCreateInput] = []

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        self.create_calls.append(payload)
        if payload.username in self.users:
            raise UsernameTakenError(username=payload.username)
        now = datetime.now(tz=UTC)
        record = UserRecord(
            user_id=payload.user_id,
            username=payload.username,
            password_hash=payload.password_hash,
            highest_score=0,
            created_at=now,
            updated_at=now,
        )
        self.users[payload.username] = record
        return record

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        return self.users.get(username)

    async def update_score_if_higher(self, *, username: str, score: int) -> bool:
        user = self.users.get(username)
        if user is None or score <= user.highest_score:
            return False
        self.users[username] = UserRecord(
            user_id=user.user_id,
            username=user.username,
            password_hash=user.password_hash,
            highest_score=score,
            created_at=user.created_at,
            updated_at=datetime.now(tz=UTC),
        )
        return True

    async def list_top_by_score(self, *, limit: int) -> list[UserRecord]:
        ranked = sorted(self.users.values(), key=lambda user: -user.highest_score)
        return ranked[:limit]


class UnavailableUserRepository(FakeUserRepository):
    async def get_by_username(self, *, username: str) -> UserRecord | None:
        _ = username
        raise BackendUnavailableError("get_by_username: backend unavailable")


class FakePasswordHasher:
    def __init__(self) -> None:
        self.verify_calls: list[tuple[str, str]] = []

    def hash_password(self, password: str) -> str:
        return f"hashed::{password}"

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        self.verify_calls.append((password, password_hash))
        return password_hash == f"hashed::{password}"


def _service(
    users: FakeUserRepository | None = None,
    hasher: FakePasswordHasher | None = None,
) -> AccountService:
    return AccountService(
        users=users or FakeUserRepository(),
        password_hasher=hasher or FakePasswordHasher(),
    )


@pytest.mark.asyncio
async def test_register_hashes_password_and_starts_at_zero() -> None:
    users = FakeUserRepository()
    service = _service(users)

    result = await service.register(username="alice", password="pw1")

    assert result.outcome is RegisterOutcome.CREATED
    assert result.user is not None
    assert result.user.highest_score == 0
    assert users.create_calls[0].password_hash == "hashed::pw1"
    assert users.users["alice"].password_hash != "pw1"


@pytest.mark.asyncio
async def test_register_duplicate_username_reports_taken() -> None:
    service = _service()

    await service.register(username="alice", password="pw1")
    second = await service.register(username="alice", password="other")

    assert second.outcome is RegisterOutcome.USERNAME_TAKEN
    assert second.user is None


@pytest.mark.asyncio
async def test_register_usernames_are_case_sensitive() -> None:
    service = _service()

    first = await service.register(username="alice", password="pw1")
    second = await service.register(username="Alice", password="pw1")

    assert first.outcome is RegisterOutcome.CREATED
    assert second.outcome is RegisterOutcome.CREATED


@pytest.mark.asyncio
@pytest.mark.parametrize("username", ["", "   "])
async def test_register_rejects_blank_username_without_writing(username: str) -> None:
    users = FakeUserRepository()
    service = _service(users)

    with pytest.raises(InvalidUsernameError):
        await service.register(username=username, password="pw")

    assert users.create_calls == []


@pytest.mark.asyncio
async def test_register_accepts_empty_password() -> None:
    service = _service()

    result = await service.register(username="bob", password="")
    auth = await service.authenticate(username="bob", password="")

    assert result.outcome is RegisterOutcome.CREATED
    assert auth.outcome is AuthOutcome.SUCCESS


@pytest.mark.asyncio
async def test_authenticate_success_returns_user() -> None:
    hasher = FakePasswordHasher()
    service = _service(hasher=hasher)
    await service.register(username="alice", password="pw1")

    result = await service.authenticate(username="alice", password="pw1")

    assert result.outcome is AuthOutcome.SUCCESS
    assert result.user is not None
    assert result.user.username == "alice"
    assert hasher.verify_calls == [("pw1", "hashed::pw1")]


@pytest.mark.asyncio
async def test_authenticate_wrong_password_is_invalid_password() -> None:
    service = _service()
    await service.register(username="alice", password="pw1")

    result = await service.authenticate(username="alice", password="wrong")

    assert result.outcome is AuthOutcome.INVALID_PASSWORD
    assert result.user is None


@pytest.mark.asyncio
async def test_authenticate_unknown_user_skips_password_check() -> None:
    hasher = FakePasswordHasher()
    service = _service(hasher=hasher)

    result = await service.authenticate(username="ghost", password="pw")

    assert result.outcome is AuthOutcome.USER_NOT_FOUND
    assert hasher.verify_calls == []


@pytest.mark.asyncio
async def test_authenticate_propagates_backend_unavailable() -> None:
    service = _service(UnavailableUserRepository())

    with pytest.raises(BackendUnavailableError):
        await service.authenticate(username="alice", password="pw1")


@pytest.mark.asyncio
async def test_submit_score_ratchets_upwards_only() -> None:
    users = FakeUserRepository()
    service = _service(users)
    await service.register(username="alice", password="pw1")

    higher = await service.submit_score(username="alice", score=50)
    lower = await service.submit_score(username="alice", score=30)
    equal = await service.submit_score(username="alice", score=50)

    assert higher.outcome is ScoreSubmissionOutcome.UPDATED
    assert lower.outcome is ScoreSubmissionOutcome.NOT_UPDATED
    assert equal.outcome is ScoreSubmissionOutcome.NOT_UPDATED
    assert users.users["alice"].highest_score == 50


@pytest.mark.asyncio
async def test_submit_score_for_unknown_user_is_not_updated() -> None:
    service = _service()

    result = await service.submit_score(username="ghost", score=10)

    assert result.outcome is ScoreSubmissionOutcome.NOT_UPDATED


@pytest.mark.asyncio
async def test_leaderboard_projects_public_fields_in_rank_order() -> None:
    service = _service()
    for username, score in (("alice", 50), ("bob", 70), ("carol", 10)):
        await service.register(username=username, password="pw")
        await service.submit_score(username=username, score=score)

    entries = await service.leaderboard(limit=2)

    assert entries == [
        LeaderboardEntry(username="bob", highest_score=70),
        LeaderboardEntry(username="alice", highest_score=50),
    ]


@pytest.mark.asyncio
async def test_leaderboard_uses_default_limit() -> None:
    users = FakeUserRepository()
    service = AccountService(
        users=users,
        password_hasher=FakePasswordHasher(),
        default_leaderboard_limit=3,
    )
    for index in range(5):
        await service.register(username=f"player-{index}", password="pw")

    entries = await service.leaderboard()

    assert len(entries) == 3


@pytest.mark.asyncio
async def test_leaderboard_rejects_non_positive_limit() -> None:
    service = _service()

    with pytest.raises(ValueError):
        await service.leaderboard(limit=0)


@pytest.mark.asyncio
async def test_register_login_and_score_flow_for_one_player() -> None:
    users = FakeUserRepository()
    service = _service(users)

    assert (await service.register(username="alice", password="pw1")).outcome is (
        RegisterOutcome.CREATED
    )
    assert (await service.register(username="alice", password="x")).outcome is (
        RegisterOutcome.USERNAME_TAKEN
    )
    assert (await service.authenticate(username="alice", password="pw1")).outcome is (
        AuthOutcome.SUCCESS
    )
    assert (await service.authenticate(username="alice", password="wrong")).outcome is (
        AuthOutcome.INVALID_PASSWORD
    )
    assert (await service.submit_score(username="alice", score=50)).outcome is (
        ScoreSubmissionOutcome.UPDATED
    )
    assert (await service.submit_score(username="alice", score=30)).outcome is (
        ScoreSubmissionOutcome.NOT_UPDATED
    )
    assert users.users["alice"].highest_score == 50
    assert await service.leaderboard(limit=1) == [
        LeaderboardEntry(username="alice", highest_score=50)
    ]
