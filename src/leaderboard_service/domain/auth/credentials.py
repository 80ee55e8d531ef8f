"""Shared input policy for account credentials."""

from __future__ import annotations


class InvalidUsernameError(ValueError):
    """Raised when a username does not satisfy the account input policy."""


def normalize_username(*, username: str) -> str:
    """Validate one username and return it unchanged.

    Usernames are case-sensitive and kept verbatim; only blank values are
    rejected. Passwords have no equivalent policy and are accepted as given.
    """

    if not username.strip():
        raise InvalidUsernameError("username cannot be blank")
    return username
