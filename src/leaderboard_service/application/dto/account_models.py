"""Pydantic models for account and leaderboard HTTP contracts."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

# Bounds of the 32-bit integer `users.highest_score` column.
SCORE_MIN = -(2**31)
SCORE_MAX = 2**31 - 1

Score = Annotated[int, Field(ge=SCORE_MIN, le=SCORE_MAX)]


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid")


class CredentialsRequest(StrictModel):
    """Username/password payload shared by register and login."""

    username: str
    password: str


class ScoreSubmissionRequest(StrictModel):
    """Score submission payload."""

    username: str
    score: Score


class MessageResponse(BaseModel):
    """Plain acknowledgement payload."""

    message: str


class ScoreSubmissionResponse(BaseModel):
    """Score submission payload reporting whether the high score moved."""

    updated: bool


class LeaderboardEntryResponse(BaseModel):
    """Public leaderboard row; never carries ids or password hashes."""

    username: str
    highest_score: int
