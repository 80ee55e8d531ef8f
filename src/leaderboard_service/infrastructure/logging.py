"""Logging configuration for the leaderboard API process."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
# Driver loggers that flood DEBUG output with per-statement chatter.
_CHATTY_LOGGERS = ("aiosqlite", "asyncio")


def resolve_log_level(level: str) -> int:
    """Map a level name such as ``"debug"`` to its numeric value, INFO on unknown."""

    normalized_level = level.strip().upper() or "INFO"
    resolved = logging.getLevelName(normalized_level)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(*, level: str) -> None:
    """Configure root logging once and keep driver loggers at INFO or above."""

    resolved_level = resolve_log_level(level)
    logging.basicConfig(level=resolved_level, format=_LOG_FORMAT)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved_level, logging.INFO))
