"""Normalized play-by-play records and raw feed parsing.

Raw plays follow the NHL gamecenter play-by-play layout (``eventId``,
``periodDescriptor``, ``timeInPeriod``, ``typeDescKey``, ``details``). Every
parser returns ``None`` for a play that is missing a required field so that
callers can skip it and keep going.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ice_analytics.utils.logging import game_logger, get_logger
from ice_analytics.utils.time import parse_clock, to_game_seconds

logger = get_logger(__name__)


class ShotResult(str, Enum):
    """Outcome of a shot attempt."""

    GOAL = "goal"
    SHOT_ON_GOAL = "shot-on-goal"
    MISSED_SHOT = "missed-shot"
    BLOCKED_SHOT = "blocked-shot"

    @property
    def on_goal(self) -> bool:
        return self in (ShotResult.GOAL, ShotResult.SHOT_ON_GOAL)

    @property
    def unblocked(self) -> bool:
        return self is not ShotResult.BLOCKED_SHOT


SHOT_ATTEMPT_TYPES = frozenset(result.value for result in ShotResult)

GOAL = "goal"
FACEOFF = "faceoff"
HIT = "hit"
GIVEAWAY = "giveaway"
TAKEAWAY = "takeaway"
STOPPAGE = "stoppage"
PENALTY = "penalty"
PASS = "pass"
PERIOD_START = "period-start"
PERIOD_END = "period-end"

_PLAYER_ID_KEYS = (
    "playerId",
    "shootingPlayerId",
    "scoringPlayerId",
    "hittingPlayerId",
    "winningPlayerId",
    "committedByPlayerId",
    "blockingPlayerId",
)


@dataclass(frozen=True)
class GameEvent:
    """A single normalized play in chronological order."""

    event_id: int
    period: int
    period_seconds: float
    type_key: str
    x: Optional[float] = None
    y: Optional[float] = None
    team_id: Optional[int] = None
    player_id: Optional[int] = None
    assist_ids: Tuple[int, ...] = ()

    @property
    def game_seconds(self) -> float:
        return to_game_seconds(self.period, self.period_seconds)

    @property
    def has_location(self) -> bool:
        return self.x is not None and self.y is not None

    @property
    def is_shot_attempt(self) -> bool:
        return self.type_key in SHOT_ATTEMPT_TYPES


@dataclass(frozen=True)
class ShotEvent:
    """A single shot attempt with the context needed to score it."""

    event_id: int
    period: int
    period_seconds: float
    x: float
    y: float
    shooter_id: int
    team_id: int
    result: ShotResult
    shot_type: str = "wrist"
    home_on_ice: Tuple[int, ...] = ()
    away_on_ice: Tuple[int, ...] = ()
    situation_code: str = "1551"
    is_home: Optional[bool] = None
    goalie_id: Optional[int] = None
    defenders_between: Optional[int] = None

    @property
    def game_seconds(self) -> float:
        return to_game_seconds(self.period, self.period_seconds)

    @property
    def is_goal(self) -> bool:
        return self.result is ShotResult.GOAL


@dataclass(frozen=True)
class PlayerShift:
    """A player's shift, used to resolve on-ice membership."""

    player_id: int
    team_id: int
    period: int
    start_seconds: float
    end_seconds: float

    def covers(self, period: int, period_seconds: float) -> bool:
        return (
            self.period == period
            and self.start_seconds <= period_seconds <= self.end_seconds
        )


@dataclass
class GameFeed:
    """Normalized content of one game's play-by-play feed."""

    game_id: int
    home_team_id: int
    away_team_id: int
    game_date: str = ""
    events: List[GameEvent] = field(default_factory=list)
    shots: List[ShotEvent] = field(default_factory=list)
    shifts: List[PlayerShift] = field(default_factory=list)
    skipped_plays: int = 0

    def is_home(self, team_id: int) -> bool:
        return team_id == self.home_team_id

    def opponent_of(self, team_id: int) -> int:
        return self.away_team_id if team_id == self.home_team_id else self.home_team_id


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _player_ids(values: Any) -> Tuple[int, ...]:
    """Extract ids from a list of ints or dicts carrying ``playerId``."""
    if not isinstance(values, list):
        return ()
    ids = []
    for item in values:
        pid = _as_int(item.get("playerId")) if isinstance(item, dict) else _as_int(item)
        if pid is not None:
            ids.append(pid)
    return tuple(ids)


def _assist_ids(details: Dict[str, Any]) -> Tuple[int, ...]:
    assists = _player_ids(details.get("assists"))
    if assists:
        return assists
    ids = [
        _as_int(details.get(key))
        for key in ("assist1PlayerId", "assist2PlayerId")
    ]
    return tuple(pid for pid in ids if pid is not None)


def _period_number(raw: Dict[str, Any]) -> Optional[int]:
    descriptor = raw.get("periodDescriptor")
    if isinstance(descriptor, dict):
        return _as_int(descriptor.get("number"))
    return _as_int(raw.get("period"))


def parse_play(raw: Dict[str, Any]) -> Optional[GameEvent]:
    """Parse one raw play into a `GameEvent`.

    Args:
        raw: Raw play dictionary

    Returns:
        GameEvent, or None when event id, period, clock or type is missing
    """
    if not isinstance(raw, dict):
        return None

    event_id = _as_int(raw.get("eventId"))
    period = _period_number(raw)
    period_seconds = parse_clock(raw.get("timeInPeriod"))
    type_key = raw.get("typeDescKey")

    if event_id is None or period is None or period < 1:
        return None
    if period_seconds is None or not isinstance(type_key, str) or not type_key:
        return None

    details = raw.get("details") if isinstance(raw.get("details"), dict) else {}

    player_id = None
    for key in _PLAYER_ID_KEYS:
        player_id = _as_int(details.get(key))
        if player_id is not None:
            break

    return GameEvent(
        event_id=event_id,
        period=period,
        period_seconds=period_seconds,
        type_key=type_key,
        x=_as_float(details.get("xCoord")),
        y=_as_float(details.get("yCoord")),
        team_id=_as_int(details.get("eventOwnerTeamId")),
        player_id=player_id,
        assist_ids=_assist_ids(details) if type_key == GOAL else (),
    )


def parse_shot(raw: Dict[str, Any], home_team_id: Optional[int] = None) -> Optional[ShotEvent]:
    """Parse one raw play into a `ShotEvent`.

    Args:
        raw: Raw play dictionary
        home_team_id: Home team of the game, used to set `is_home`

    Returns:
        ShotEvent, or None when the play is not a shot attempt or lacks
        coordinates, owning team or shooter
    """
    event = parse_play(raw)
    if event is None or not event.is_shot_attempt or not event.has_location:
        return None
    if event.team_id is None:
        return None

    details = raw.get("details") if isinstance(raw.get("details"), dict) else {}
    shooter_id = (
        _as_int(details.get("shootingPlayerId"))
        or _as_int(details.get("scoringPlayerId"))
        or _as_int(details.get("playerId"))
    )
    if shooter_id is None:
        return None

    situation_code = raw.get("situationCode")
    shot_type = details.get("shotType")

    return ShotEvent(
        event_id=event.event_id,
        period=event.period,
        period_seconds=event.period_seconds,
        x=event.x,
        y=event.y,
        shooter_id=shooter_id,
        team_id=event.team_id,
        result=ShotResult(event.type_key),
        shot_type=shot_type if isinstance(shot_type, str) and shot_type else "wrist",
        home_on_ice=_player_ids(raw.get("homePlayersOnIce")),
        away_on_ice=_player_ids(raw.get("awayPlayersOnIce")),
        situation_code=situation_code if isinstance(situation_code, str) else "1551",
        is_home=(event.team_id == home_team_id) if home_team_id is not None else None,
        goalie_id=_as_int(details.get("goalieInNetId")),
        defenders_between=_as_int(details.get("defendersBetween")),
    )


def parse_shift(raw: Dict[str, Any]) -> Optional[PlayerShift]:
    """Parse a shift chart row; returns None when any field is unusable."""
    if not isinstance(raw, dict):
        return None
    player_id = _as_int(raw.get("playerId"))
    team_id = _as_int(raw.get("teamId"))
    period = _as_int(raw.get("period"))
    start = parse_clock(raw.get("startTime"))
    end = parse_clock(raw.get("endTime"))
    if None in (player_id, team_id, period, start, end):
        return None
    return PlayerShift(player_id, team_id, period, start, end)


def sort_chronologically(events: Iterable[GameEvent]) -> List[GameEvent]:
    """Stable sort by (period, seconds in period)."""
    return sorted(events, key=lambda e: (e.period, e.period_seconds))


def normalize_game_feed(raw: Dict[str, Any], game_id: Optional[int] = None) -> GameFeed:
    """Build a `GameFeed` from a raw play-by-play payload.

    Malformed plays are skipped and counted in `skipped_plays`.

    Args:
        raw: Raw payload with ``plays``, ``homeTeam`` and ``awayTeam``
        game_id: Game id override (defaults to the payload's ``id``)

    Returns:
        Normalized game feed
    """
    home = raw.get("homeTeam") if isinstance(raw.get("homeTeam"), dict) else {}
    away = raw.get("awayTeam") if isinstance(raw.get("awayTeam"), dict) else {}
    home_team_id = _as_int(home.get("id")) or 0
    away_team_id = _as_int(away.get("id")) or 0

    events: List[GameEvent] = []
    shots: List[ShotEvent] = []
    skipped = 0

    plays = raw.get("plays") if isinstance(raw.get("plays"), list) else []
    for play in plays:
        event = parse_play(play)
        if event is None:
            skipped += 1
            continue
        events.append(event)
        if event.is_shot_attempt:
            shot = parse_shot(play, home_team_id)
            if shot is not None:
                shots.append(shot)

    shifts_raw = raw.get("shifts") if isinstance(raw.get("shifts"), list) else []
    shifts = [shift for shift in (parse_shift(s) for s in shifts_raw) if shift is not None]

    resolved_id = game_id if game_id is not None else (_as_int(raw.get("id")) or 0)
    if skipped:
        game_logger(logger, resolved_id).debug(f"Skipped {skipped} malformed plays")

    game_date = raw.get("gameDate")
    return GameFeed(
        game_id=resolved_id,
        home_team_id=home_team_id,
        away_team_id=away_team_id,
        game_date=game_date if isinstance(game_date, str) else "",
        events=sort_chronologically(events),
        shots=sorted(shots, key=lambda s: (s.period, s.period_seconds)),
        shifts=shifts,
        skipped_plays=skipped,
    )
