"""Game feed file I/O.

Play-by-play payloads are stored one per game as ``<game_id>.json``. Shift
charts, when available, live beside them as ``shifts/<game_id>.json``.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ice_analytics.config import settings
from ice_analytics.events import GameFeed, normalize_game_feed
from ice_analytics.utils.logging import get_logger

logger = get_logger(__name__)


class GameDataUnavailable(Exception):
    """No usable play-by-play data could be obtained for a game."""

    def __init__(self, game_id: int, reason: str):
        super().__init__(f"Game {game_id} unavailable: {reason}")
        self.game_id = game_id
        self.reason = reason


FetchGame = Callable[[int], GameFeed]


class GameFeedLoader:
    """Loader for locally stored game feeds."""

    def __init__(self, data_path: Optional[Path] = None):
        """Initialize the game feed loader.

        Args:
            data_path: Directory holding ``<game_id>.json`` files
        """
        self.data_path = Path(data_path or settings.game_feed_path)
        self.shifts_dir = self.data_path / "shifts"

    def _read_json(self, path: Path, game_id: int) -> Any:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            raise GameDataUnavailable(game_id, f"file not found: {path}")
        except (OSError, json.JSONDecodeError) as e:
            raise GameDataUnavailable(game_id, f"unreadable file {path}: {e}") from e

    def load_raw(self, game_id: int) -> Dict[str, Any]:
        """Load the raw play-by-play payload for a game.

        Args:
            game_id: Game ID

        Returns:
            Raw payload dictionary

        Raises:
            GameDataUnavailable: If the file is missing, unreadable or not a
                JSON object
        """
        payload = self._read_json(self.data_path / f"{game_id}.json", game_id)
        if not isinstance(payload, dict):
            raise GameDataUnavailable(game_id, "payload is not a JSON object")

        shifts_file = self.shifts_dir / f"{game_id}.json"
        if "shifts" not in payload and shifts_file.exists():
            shifts = self._read_json(shifts_file, game_id)
            if isinstance(shifts, dict):
                shifts = shifts.get("data", [])
            payload["shifts"] = shifts if isinstance(shifts, list) else []

        return payload

    def load_game(self, game_id: int) -> GameFeed:
        """Load and normalize a game feed.

        Raises:
            GameDataUnavailable: If the payload cannot be loaded
        """
        feed = normalize_game_feed(self.load_raw(game_id), game_id=game_id)
        logger.debug(
            f"Loaded game {game_id}: {len(feed.events)} events, {len(feed.shots)} shots"
        )
        return feed

    def __call__(self, game_id: int) -> GameFeed:
        return self.load_game(game_id)

    def list_game_ids(self) -> List[int]:
        """List the game IDs with a stored feed, sorted ascending."""
        if not self.data_path.exists():
            logger.warning(f"Game feed directory not found: {self.data_path}")
            return []

        game_ids = []
        for path in self.data_path.glob("*.json"):
            if path.stem.isdigit():
                game_ids.append(int(path.stem))
        return sorted(game_ids)
