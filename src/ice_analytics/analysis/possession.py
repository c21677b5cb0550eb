"""Derived possession state over a chronological event stream.

Possession is either neutral or controlled by one team. The state is
recomputed incrementally from each event; nothing is stored between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ice_analytics.events import (
    FACEOFF,
    GIVEAWAY,
    GOAL,
    HIT,
    PASS,
    PENALTY,
    PERIOD_END,
    PERIOD_START,
    STOPPAGE,
    TAKEAWAY,
    GameEvent,
)

# Events that end the current possession
_NEUTRALIZING_TYPES = frozenset({GOAL, STOPPAGE, PENALTY, PERIOD_START, PERIOD_END})

# Events that hand control to the acting team
_CONTROL_TYPES = frozenset({FACEOFF, TAKEAWAY, PASS})


@dataclass(frozen=True)
class PossessionState:
    controlled_by: Optional[int] = None

    @property
    def is_neutral(self) -> bool:
        return self.controlled_by is None

    def is_held_by_opponent_of(self, team_id: int) -> bool:
        return self.controlled_by is not None and self.controlled_by != team_id


NEUTRAL = PossessionState()


def resolve_teams(events: Sequence[GameEvent]) -> Tuple[Optional[int], Optional[int]]:
    """First two distinct team ids seen in the stream."""
    seen: List[int] = []
    for event in events:
        if event.team_id is not None and event.team_id not in seen:
            seen.append(event.team_id)
            if len(seen) == 2:
                break
    seen.extend([None] * (2 - len(seen)))
    return seen[0], seen[1]


def _other_team(team_id: int, teams: Tuple[Optional[int], Optional[int]]) -> Optional[int]:
    first, second = teams
    if team_id == first:
        return second
    if team_id == second:
        return first
    return None


def advance_possession(
    state: PossessionState,
    event: GameEvent,
    teams: Tuple[Optional[int], Optional[int]],
) -> PossessionState:
    """Return the possession state after `event`.

    Args:
        state: State before the event
        event: Next event in chronological order
        teams: The two team ids of the game (see `resolve_teams`)

    Returns:
        New possession state
    """
    if event.type_key in _NEUTRALIZING_TYPES:
        return NEUTRAL
    if event.team_id is None:
        return state

    if event.type_key == HIT:
        return state
    if event.type_key == GIVEAWAY:
        other = _other_team(event.team_id, teams)
        return PossessionState(other) if other is not None else NEUTRAL
    if event.type_key in _CONTROL_TYPES or event.is_shot_attempt:
        return PossessionState(event.team_id)
    return state


def possession_timeline(events: Sequence[GameEvent]) -> List[PossessionState]:
    """Possession state after each event, aligned with `events`."""
    teams = resolve_teams(events)
    state = NEUTRAL
    timeline: List[PossessionState] = []
    for event in events:
        state = advance_possession(state, event, teams)
        timeline.append(state)
    return timeline
