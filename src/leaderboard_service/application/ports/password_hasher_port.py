"""Port for the credential hasher used on register and login paths."""

from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    """Salted one-way hashing of player passwords."""

    def hash_password(self, password: str) -> str:
        """Return an encoded salted hash; never the plaintext."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Return whether `password` matches; False for any malformed stored hash."""
