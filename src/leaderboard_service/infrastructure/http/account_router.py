"""FastAPI router for account registration, login, and leaderboard endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query

from leaderboard_service.application.dto.account_models import (
    CredentialsRequest,
    LeaderboardEntryResponse,
    MessageResponse,
    ScoreSubmissionRequest,
    ScoreSubmissionResponse,
)
from leaderboard_service.application.services.account_service import (
    AccountService,
    AuthOutcome,
    RegisterOutcome,
    ScoreSubmissionOutcome,
)
from leaderboard_service.domain.auth.credentials import InvalidUsernameError

MAX_LEADERBOARD_LIMIT = 100


def build_account_router(
    *,
    account_service: AccountService,
    default_leaderboard_limit: int = 10,
) -> APIRouter:
    """Build router exposing account and leaderboard endpoints."""

    router = APIRouter(prefix="/api/user", tags=["user"])

    @router.post("/register", response_model=MessageResponse)
    async def register(payload: CredentialsRequest) -> MessageResponse:
        try:
            result = await account_service.register(
                username=payload.username,
                password=payload.password,
            )
        except InvalidUsernameError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        if result.outcome is RegisterOutcome.USERNAME_TAKEN:
            raise HTTPException(status_code=409, detail="username taken")
        return MessageResponse(message="user registered")

    @router.post("/login", response_model=MessageResponse)
    async def login(payload: CredentialsRequest) -> MessageResponse:
        result = await account_service.authenticate(
            username=payload.username,
            password=payload.password,
        )
        if result.outcome is not AuthOutcome.SUCCESS:
            raise HTTPException(status_code=401, detail="invalid credentials")
        return MessageResponse(message="login successful")

    @router.post("/submit-score", response_model=ScoreSubmissionResponse)
    async def submit_score(payload: ScoreSubmissionRequest) -> ScoreSubmissionResponse:
        result = await account_service.submit_score(
            username=payload.username,
            score=payload.score,
        )
        return ScoreSubmissionResponse(updated=result.outcome is ScoreSubmissionOutcome.UPDATED)

    @router.get("/leaderboard", response_model=list[LeaderboardEntryResponse])
    async def leaderboard(
        limit: Annotated[int, Query(ge=1, le=MAX_LEADERBOARD_LIMIT)] = default_leaderboard_limit,
    ) -> list[LeaderboardEntryResponse]:
        entries = await account_service.leaderboard(limit=limit)
        return [
            LeaderboardEntryResponse(username=entry.username, highest_score=entry.highest_score)
            for entry in entries
        ]

    return router
