"""Logging for the analytics engine and its service layer.

Every module takes its logger from `get_logger(__name__)`. Messages about a
single game go through `game_logger`, which prefixes them with the game id
so per-game skips and classifier counts can be traced in long season runs.
"""

import logging
import sys
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple

from ice_analytics.config import settings

CONSOLE_FORMAT = "%(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: Optional[str]) -> int:
    """Numeric level for a level name; unknown names fall back to INFO."""
    name = (level or settings.log_level).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: str,
    log_file: Optional[Path] = None,
    level: Optional[str] = None,
) -> logging.Logger:
    """Attach console (and optionally file) handlers to a named logger.

    Args:
        name: Logger name (usually __name__ of the module)
        log_file: File receiving DEBUG and above; defaults to LOG_FILE
        level: Level name; defaults to LOG_LEVEL

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))

    # Reconfiguring replaces handlers instead of stacking them
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logger.level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    log_file = log_file if log_file is not None else settings.log_file
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logger(name)
    return logger


class GameLogAdapter(logging.LoggerAdapter):
    """Prefixes messages with the game they concern."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[game {self.extra['game_id']}] {msg}", kwargs


def game_logger(logger: logging.Logger, game_id: int) -> GameLogAdapter:
    return GameLogAdapter(logger, {"game_id": game_id})
