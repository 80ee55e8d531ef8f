"""PBKDF2-SHA256 password hasher adapter."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets

from leaderboard_service.application.ports.password_hasher_port import PasswordHasherPort

DEFAULT_ITERATIONS = 100_000
SALT_SIZE_BYTES = 16
KEY_SIZE_BYTES = 32
_SEPARATOR = "."


class Pbkdf2PasswordHasher(PasswordHasherPort):
    """Password hashing adapter using salted PBKDF2-HMAC-SHA256.

    Encoded hashes have the form ``base64(salt) + "." + base64(key)``.
    """

    def __init__(
        self,
        *,
        iterations: int = DEFAULT_ITERATIONS,
        salt_size: int = SALT_SIZE_BYTES,
        key_size: int = KEY_SIZE_BYTES,
    ) -> None:
        if iterations <= 0:
            raise ValueError("iterations must be positive")
        self._iterations = iterations
        self._salt_size = salt_size
        self._key_size = key_size

    def hash_password(self, password: str) -> str:
        salt = secrets.token_bytes(self._salt_size)
        key = self._derive(password=password, salt=salt)
        return _b64encode(salt) + _SEPARATOR + _b64encode(key)

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        if not isinstance(password_hash, str):
            return False

        parts = password_hash.split(_SEPARATOR)
        if len(parts) != 2:
            return False

        try:
            salt = base64.b64decode(parts[0], validate=True)
            stored_key = base64.b64decode(parts[1], validate=True)
            candidate_key = self._derive(password=password, salt=salt)
        except (binascii.Error, ValueError, TypeError):
            return False

        return hmac.compare_digest(candidate_key, stored_key)

    def _derive(self, *, password: str, salt: bytes) -> bytes:
        return hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8", "surrogatepass"),
            salt,
            self._iterations,
            dklen=self._key_size,
        )


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")
