"""Zone entry and exit classification.

Entries and exits are blue-line crossings between consecutive located
events. Teams switch ends between periods, so crossings into both end zones
are tracked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from ice_analytics.events import (
    FACEOFF,
    GIVEAWAY,
    GOAL,
    HIT,
    PASS,
    STOPPAGE,
    TAKEAWAY,
    GameEvent,
    ShotResult,
)
from ice_analytics.features.geometry import zone_side

# Entering event that means the puck was immediately given up
IMMEDIATE_LOSS_TYPES = frozenset({FACEOFF, GIVEAWAY, STOPPAGE})

# Entering event that shows the team already had the puck
POSSESSION_INDICATOR_TYPES = frozenset({ShotResult.SHOT_ON_GOAL.value, GOAL, HIT, TAKEAWAY})

_SUSTAINED_TYPES = frozenset({ShotResult.SHOT_ON_GOAL.value, GOAL, HIT})
_QUICK_SHOT_TYPES = frozenset({ShotResult.SHOT_ON_GOAL.value, ShotResult.MISSED_SHOT.value, GOAL})
_EXIT_LOSS_TYPES = frozenset({TAKEAWAY, ShotResult.SHOT_ON_GOAL.value, HIT})


class EntryType(str, Enum):
    CONTROLLED = "controlled"
    DUMP = "dump"
    PASS = "pass"


class ExitType(str, Enum):
    CONTROLLED = "controlled"
    CLEAR = "clear"
    PASS = "pass"


@dataclass(frozen=True)
class ZoneParams:
    carry_lookahead_events: int = 4
    success_lookahead_events: int = 4
    quick_shot_seconds: float = 5.0
    quick_shot_lookahead_events: int = 9
    exit_lookahead_events: int = 3


DEFAULT_ZONE_PARAMS = ZoneParams()


@dataclass(frozen=True)
class ZoneEntry:
    event_id: int
    player_id: Optional[int]
    team_id: int
    period: int
    period_seconds: float
    entry_type: EntryType
    x: float
    y: float
    success: bool
    shot_within_seconds: bool


@dataclass(frozen=True)
class ZoneExit:
    event_id: int
    player_id: Optional[int]
    team_id: int
    period: int
    period_seconds: float
    exit_type: ExitType
    x: float
    y: float
    success: bool


@dataclass(frozen=True)
class ZoneAnalytics:
    total_entries: int
    controlled_entries: int
    dump_ins: int
    pass_entries: int
    controlled_entry_rate: float
    entries_with_shot: int
    total_exits: int
    successful_exits: int
    exit_success_rate: float
    entries: List[ZoneEntry] = field(default_factory=list)
    exits: List[ZoneExit] = field(default_factory=list)


def _is_crossing_pair(previous: GameEvent, current: GameEvent) -> bool:
    return (
        previous.has_location
        and current.has_location
        and current.team_id is not None
        and previous.period == current.period
    )


def is_zone_entry(previous_x: float, current_x: float) -> bool:
    return zone_side(previous_x) == "neutral" and zone_side(current_x) != "neutral"


def is_zone_exit(previous_x: float, current_x: float) -> bool:
    return zone_side(previous_x) != "neutral" and zone_side(current_x) == "neutral"


def _carried_in(events: Sequence[GameEvent], index: int, lookahead: int) -> bool:
    """Whether the entering team kept making plays in the zone it entered."""
    entry = events[index]
    end_zone = zone_side(entry.x)
    team_events = 0
    for event in events[index : index + lookahead]:
        if event.team_id != entry.team_id:
            break
        if event.has_location and zone_side(event.x) == end_zone:
            team_events += 1
    return team_events >= 2


def classify_entry(
    events: Sequence[GameEvent], index: int, params: ZoneParams = DEFAULT_ZONE_PARAMS
) -> EntryType:
    """Classify the entry whose entering event is `events[index]`.

    Args:
        events: Chronological events
        index: Index of the first event inside the end zone (must be >= 1)
        params: Lookahead settings

    Returns:
        Entry type
    """
    previous, current = events[index - 1], events[index]

    if current.type_key in IMMEDIATE_LOSS_TYPES:
        return EntryType.DUMP

    if previous.team_id == current.team_id:
        if (
            previous.player_id is None
            or current.player_id is None
            or previous.player_id == current.player_id
        ):
            return EntryType.CONTROLLED
        return EntryType.PASS

    if current.type_key in POSSESSION_INDICATOR_TYPES:
        return EntryType.CONTROLLED

    if _carried_in(events, index, params.carry_lookahead_events):
        return EntryType.CONTROLLED
    return EntryType.DUMP


def _entry_sustained(events: Sequence[GameEvent], index: int, lookahead: int) -> bool:
    team_id = events[index].team_id
    for event in events[index + 1 : index + 1 + lookahead]:
        if event.team_id is not None and event.team_id != team_id:
            return False
        if event.type_key == FACEOFF:
            return False
        if event.type_key in _SUSTAINED_TYPES:
            return True
    return True


def _shot_follows(events: Sequence[GameEvent], index: int, params: ZoneParams) -> bool:
    entry = events[index]
    for event in events[index + 1 : index + 1 + params.quick_shot_lookahead_events]:
        if abs(event.game_seconds - entry.game_seconds) > params.quick_shot_seconds:
            break
        if event.type_key in _QUICK_SHOT_TYPES:
            return True
    return False


def detect_zone_entries(
    events: Sequence[GameEvent], params: ZoneParams = DEFAULT_ZONE_PARAMS
) -> List[ZoneEntry]:
    """Detect and classify every neutral-to-end-zone crossing."""
    entries: List[ZoneEntry] = []

    for i in range(1, len(events)):
        previous, current = events[i - 1], events[i]
        if not _is_crossing_pair(previous, current):
            continue
        if not is_zone_entry(previous.x, current.x):
            continue

        entries.append(
            ZoneEntry(
                event_id=current.event_id,
                player_id=current.player_id,
                team_id=current.team_id,
                period=current.period,
                period_seconds=current.period_seconds,
                entry_type=classify_entry(events, i, params),
                x=current.x,
                y=current.y,
                success=_entry_sustained(events, i, params.success_lookahead_events),
                shot_within_seconds=_shot_follows(events, i, params),
            )
        )

    return entries


def classify_exit(event: GameEvent) -> ExitType:
    if event.type_key in (HIT, TAKEAWAY):
        return ExitType.CLEAR
    if event.type_key in (ShotResult.SHOT_ON_GOAL.value, PASS):
        return ExitType.PASS
    return ExitType.CONTROLLED


def _exit_successful(events: Sequence[GameEvent], index: int, lookahead: int) -> bool:
    team_id = events[index].team_id
    return not any(
        event.team_id is not None
        and event.team_id != team_id
        and event.type_key in _EXIT_LOSS_TYPES
        for event in events[index + 1 : index + 1 + lookahead]
    )


def detect_zone_exits(
    events: Sequence[GameEvent], params: ZoneParams = DEFAULT_ZONE_PARAMS
) -> List[ZoneExit]:
    """Detect and classify every end-zone-to-neutral crossing."""
    exits: List[ZoneExit] = []

    for i in range(1, len(events)):
        previous, current = events[i - 1], events[i]
        if not _is_crossing_pair(previous, current):
            continue
        if not is_zone_exit(previous.x, current.x):
            continue

        exits.append(
            ZoneExit(
                event_id=current.event_id,
                player_id=current.player_id,
                team_id=current.team_id,
                period=current.period,
                period_seconds=current.period_seconds,
                exit_type=classify_exit(current),
                x=current.x,
                y=current.y,
                success=_exit_successful(events, i, params.exit_lookahead_events),
            )
        )

    return exits


def calculate_zone_analytics(
    entries: Sequence[ZoneEntry], exits: Sequence[ZoneExit] = ()
) -> ZoneAnalytics:
    """Summarize entries and exits. Rates are fractions."""
    total_entries = len(entries)
    controlled = sum(1 for entry in entries if entry.entry_type is EntryType.CONTROLLED)
    total_exits = len(exits)
    successful_exits = sum(1 for zone_exit in exits if zone_exit.success)

    return ZoneAnalytics(
        total_entries=total_entries,
        controlled_entries=controlled,
        dump_ins=sum(1 for entry in entries if entry.entry_type is EntryType.DUMP),
        pass_entries=sum(1 for entry in entries if entry.entry_type is EntryType.PASS),
        controlled_entry_rate=controlled / total_entries if total_entries else 0.0,
        entries_with_shot=sum(1 for entry in entries if entry.shot_within_seconds),
        total_exits=total_exits,
        successful_exits=successful_exits,
        exit_success_rate=successful_exits / total_exits if total_exits else 0.0,
        entries=list(entries),
        exits=list(exits),
    )
