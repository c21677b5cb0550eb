"""Context feature calculations for shots.

Turns a `ShotEvent` plus the surrounding event stream into the feature
record consumed by the expected-goals model.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple, Union

from ice_analytics.events import GOAL, GameEvent, ShotEvent
from ice_analytics.features.geometry import calculate_shot_metrics, relative_zone


class ShotType(str, Enum):
    WRIST = "wrist"
    SLAP = "slap"
    SNAP = "snap"
    BACKHAND = "backhand"
    TIP = "tip"
    WRAP = "wrap"


class Strength(str, Enum):
    EVEN = "5v5"
    POWER_PLAY = "PP"
    SHORT_HANDED = "SH"
    FOUR_ON_FOUR = "4v4"
    THREE_ON_THREE = "3v3"


# Feed spellings that differ from the model's categories
_SHOT_TYPE_ALIASES = {
    "tip-in": ShotType.TIP,
    "deflected": ShotType.TIP,
    "wrap-around": ShotType.WRAP,
}


@dataclass(frozen=True)
class XGFeatures:
    """Inputs to the expected-goals model.

    `shot_type` and `strength` accept any string; values outside the known
    categories are scored with a neutral multiplier.
    """

    distance: float
    angle: float
    shot_type: Union[ShotType, str] = ShotType.WRIST
    strength: Union[Strength, str] = Strength.EVEN
    is_rebound: bool = False
    is_rush: bool = False


@dataclass(frozen=True)
class ContextParams:
    """Time windows used to flag rebounds and rush shots."""

    rebound_window_seconds: float = 3.0
    rush_window_seconds: float = 4.0


DEFAULT_CONTEXT = ContextParams()


def normalize_shot_type(raw: Optional[str]) -> Union[ShotType, str]:
    """Map a feed shot type onto a `ShotType`.

    Unrecognized values are returned lower-cased so they still reach the
    model (which treats them as neutral). Missing values become wrist shots.
    """
    if not raw:
        return ShotType.WRIST
    key = raw.strip().lower()
    if key in _SHOT_TYPE_ALIASES:
        return _SHOT_TYPE_ALIASES[key]
    try:
        return ShotType(key)
    except ValueError:
        return key


def parse_strength(situation_code: Optional[str], is_home: Optional[bool]) -> Strength:
    """Derive the shooting side's strength state from a situation code.

    The code is four digits: away goalie, away skaters, home skaters, home
    goalie. Malformed codes fall back to even strength.

    Args:
        situation_code: Feed situation code (e.g., "1451")
        is_home: Whether the shooting team is the home team; None compares
            home against away

    Returns:
        Strength state of the shooting team
    """
    if not situation_code or len(situation_code) != 4 or not situation_code.isdigit():
        return Strength.EVEN

    away_skaters = int(situation_code[1])
    home_skaters = int(situation_code[2])
    own, other = (away_skaters, home_skaters) if is_home is False else (home_skaters, away_skaters)

    if own > other:
        return Strength.POWER_PLAY
    if own < other:
        return Strength.SHORT_HANDED
    if own == 4:
        return Strength.FOUR_ON_FOUR
    if own == 3:
        return Strength.THREE_ON_THREE
    return Strength.EVEN


def shot_index(shot: ShotEvent, events: Sequence[GameEvent]) -> int:
    """Index of the shot in `events`, or of the first event after it."""
    for index, event in enumerate(events):
        if event.event_id == shot.event_id:
            return index
    key = (shot.period, shot.period_seconds)
    return sum(1 for event in events if (event.period, event.period_seconds) <= key)


def detect_shot_context(
    shot: ShotEvent,
    events: Sequence[GameEvent],
    params: ContextParams = DEFAULT_CONTEXT,
) -> Tuple[bool, bool]:
    """Flag a shot as rebound and/or rush from the preceding events.

    Rebound: an earlier shot attempt (not a goal) by the same team within
    the rebound window. Rush: an earlier same-team event located outside the
    shot's offensive zone within the rush window, i.e. the puck crossed the
    blue line just before the shot.

    Returns:
        (is_rebound, is_rush)
    """
    if not events:
        return False, False

    horizon = max(params.rebound_window_seconds, params.rush_window_seconds)
    is_rebound = False
    is_rush = False

    for index in range(shot_index(shot, events) - 1, -1, -1):
        event = events[index]
        if event.period != shot.period:
            break
        elapsed = shot.period_seconds - event.period_seconds
        if elapsed > horizon:
            break
        if event.team_id != shot.team_id or elapsed < 0:
            continue

        if (
            not is_rebound
            and event.is_shot_attempt
            and event.type_key != GOAL
            and elapsed <= params.rebound_window_seconds
        ):
            is_rebound = True

        if (
            not is_rush
            and event.has_location
            and elapsed <= params.rush_window_seconds
            and relative_zone(event.x, shot.x) != "offensive"
        ):
            is_rush = True

    return is_rebound, is_rush


def build_xg_features(
    shot: ShotEvent,
    events: Optional[Sequence[GameEvent]] = None,
    params: ContextParams = DEFAULT_CONTEXT,
) -> XGFeatures:
    """Build model features for a shot.

    Args:
        shot: Shot to describe
        events: Chronological events of the game; without them the rebound
            and rush flags stay False
        params: Context time windows

    Returns:
        XGFeatures for the shot
    """
    distance, angle = calculate_shot_metrics(shot.x, shot.y)
    is_rebound, is_rush = detect_shot_context(shot, events or (), params)
    return XGFeatures(
        distance=distance,
        angle=angle,
        shot_type=normalize_shot_type(shot.shot_type),
        strength=parse_strength(shot.situation_code, shot.is_home),
        is_rebound=is_rebound,
        is_rush=is_rush,
    )
