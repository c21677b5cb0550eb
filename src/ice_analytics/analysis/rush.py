"""Rush attack classification.

A rush is a shot taken shortly after the shooting team had the puck in its
own defensive zone, before the opponent could set up.
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
    TAKEAWAY,
    GameEvent,
    GameFeed,
    ShotEvent,
    ShotResult,
)
from ice_analytics.features.context import DEFAULT_CONTEXT, ContextParams, shot_index
from ice_analytics.features.rink import BLUE_LINE_X, DEEP_ZONE_X
from ice_analytics.modeling.xg_model import DEFAULT_COEFFICIENTS, XGCoefficients, score_shot
from ice_analytics.utils.logging import game_logger, get_logger

logger = get_logger(__name__)

RUSH_START_TYPES = frozenset(
    {
        TAKEAWAY,
        HIT,
        FACEOFF,
        GIVEAWAY,
        PASS,
        ShotResult.BLOCKED_SHOT.value,
        ShotResult.SHOT_ON_GOAL.value,
        ShotResult.MISSED_SHOT.value,
    }
)

RUSH_ENTRY_DEPTH_X = 75.0

DEFENSIVE_EVENT_TYPES = frozenset({HIT, TAKEAWAY, ShotResult.BLOCKED_SHOT.value})


class RushType(str, Enum):
    BREAKAWAY = "breakaway"
    ODD_MAN = "odd-man"
    STANDARD = "standard"


@dataclass(frozen=True)
class RushParams:
    """Rush thresholds.

    Defaults are informal tuning values, kept adjustable per call.
    """

    max_transition_seconds: float = 10.0
    lookback_events: int = 8
    pressure_lookback_events: int = 6
    breakaway_max_defenders: int = 0
    odd_man_max_defenders: int = 1


DEFAULT_RUSH_PARAMS = RushParams()


@dataclass(frozen=True)
class RushAttack:
    event_id: int
    player_id: int
    team_id: int
    period: int
    period_seconds: float
    rush_type: RushType
    transition_seconds: float
    defenders: int
    start_x: float
    end_x: float
    shot_xg: float
    was_goal: bool
    was_shot_on_goal: bool


@dataclass(frozen=True)
class RushAnalytics:
    total_rushes: int
    rush_goals: int
    conversion_rate: float
    shot_on_goal_rate: float
    breakaways: int
    odd_man_rushes: int
    average_transition_seconds: float
    total_rush_xg: float
    rushes: List[RushAttack] = field(default_factory=list)


@dataclass(frozen=True)
class MissedRushOpportunity:
    event_id: int
    team_id: Optional[int]
    period: int
    period_seconds: float
    reason: str


def _relative_x(x: float, shot: ShotEvent) -> float:
    """X coordinate in the shooting team's attacking direction."""
    return x if shot.x >= 0 else -x


def _find_rush_start(
    events: Sequence[GameEvent], index: int, shot: ShotEvent, lookback: int
) -> Optional[GameEvent]:
    for i in range(index - 1, max(index - 1 - lookback, -1), -1):
        event = events[i]
        if event.period != shot.period:
            break
        if event.team_id != shot.team_id or not event.has_location:
            continue
        if event.type_key not in RUSH_START_TYPES:
            continue
        if _relative_x(event.x, shot) < -BLUE_LINE_X:
            return event
    return None


def estimate_defenders(
    events: Sequence[GameEvent],
    index: int,
    shot: ShotEvent,
    start: GameEvent,
    params: RushParams = DEFAULT_RUSH_PARAMS,
) -> int:
    """Defending skaters between puck and net at the time of the shot.

    Uses the observed count when the feed carries one. Otherwise counts
    opponent defensive plays just before the shot, plus one when the rush
    began outside the deep defensive zone.
    """
    if shot.defenders_between is not None:
        return max(shot.defenders_between, 0)

    pressure = sum(
        1
        for event in events[max(index - params.pressure_lookback_events, 0) : index]
        if event.team_id is not None
        and event.team_id != shot.team_id
        and event.type_key in DEFENSIVE_EVENT_TYPES
    )
    started_deep = _relative_x(start.x, shot) < -DEEP_ZONE_X
    return pressure + (0 if started_deep else 1)


def classify_rush_type(defenders: int, params: RushParams = DEFAULT_RUSH_PARAMS) -> RushType:
    if defenders <= params.breakaway_max_defenders:
        return RushType.BREAKAWAY
    if defenders <= params.odd_man_max_defenders:
        return RushType.ODD_MAN
    return RushType.STANDARD


def detect_rush_attacks(
    feed: GameFeed,
    params: RushParams = DEFAULT_RUSH_PARAMS,
    coefficients: XGCoefficients = DEFAULT_COEFFICIENTS,
    context: ContextParams = DEFAULT_CONTEXT,
) -> List[RushAttack]:
    """Classify each shot of a game as a rush or not.

    Args:
        feed: Normalized game feed
        params: Rush thresholds
        coefficients: xG model used to value rush shots
        context: Rebound / rush windows for xG features

    Returns:
        Rush attacks in shot order
    """
    events = feed.events
    rushes: List[RushAttack] = []

    for shot in feed.shots:
        index = shot_index(shot, events)
        start = _find_rush_start(events, index, shot, params.lookback_events)
        if start is None:
            continue

        elapsed = shot.period_seconds - start.period_seconds
        if not 0 < elapsed <= params.max_transition_seconds:
            continue

        defenders = estimate_defenders(events, index, shot, start, params)
        rushes.append(
            RushAttack(
                event_id=shot.event_id,
                player_id=shot.shooter_id,
                team_id=shot.team_id,
                period=shot.period,
                period_seconds=shot.period_seconds,
                rush_type=classify_rush_type(defenders, params),
                transition_seconds=elapsed,
                defenders=defenders,
                start_x=start.x,
                end_x=shot.x,
                shot_xg=score_shot(shot, events, coefficients, context).x_goal,
                was_goal=shot.is_goal,
                was_shot_on_goal=shot.result.on_goal,
            )
        )

    game_logger(logger, feed.game_id).debug(
        f"{len(rushes)} rush attacks from {len(feed.shots)} shots"
    )
    return rushes


def calculate_rush_analytics(rushes: Sequence[RushAttack]) -> RushAnalytics:
    """Summarize rush attacks. Rates are fractions of all rushes."""
    total = len(rushes)
    goals = sum(1 for rush in rushes if rush.was_goal)
    on_goal = sum(1 for rush in rushes if rush.was_shot_on_goal)

    return RushAnalytics(
        total_rushes=total,
        rush_goals=goals,
        conversion_rate=goals / total if total else 0.0,
        shot_on_goal_rate=on_goal / total if total else 0.0,
        breakaways=sum(1 for rush in rushes if rush.rush_type is RushType.BREAKAWAY),
        odd_man_rushes=sum(1 for rush in rushes if rush.rush_type is RushType.ODD_MAN),
        average_transition_seconds=(
            sum(rush.transition_seconds for rush in rushes) / total if total else 0.0
        ),
        total_rush_xg=sum(rush.shot_xg for rush in rushes),
        rushes=list(rushes),
    )


_TURNOVER_REASONS = {GIVEAWAY: "giveaway", TAKEAWAY: "takeaway", HIT: "hit"}
_SHOT_TYPES = frozenset({GOAL, ShotResult.SHOT_ON_GOAL.value, ShotResult.MISSED_SHOT.value})


def detect_missed_rush_opportunities(
    events: Sequence[GameEvent], lookahead_events: int = 4
) -> List[MissedRushOpportunity]:
    """Find fast zone entries that ended in a turnover before any shot.

    An opportunity is a jump from outside x < 50 to deep in the zone
    (x > 75) on consecutive events, followed within `lookahead_events` by a
    giveaway, takeaway or hit with no shot in between.
    """
    missed: List[MissedRushOpportunity] = []

    for i in range(1, len(events)):
        previous, current = events[i - 1], events[i]
        if not (previous.has_location and current.has_location):
            continue
        if not (previous.x < DEEP_ZONE_X and current.x > RUSH_ENTRY_DEPTH_X):
            continue

        reason = None
        for follow in events[i + 1 : i + 1 + lookahead_events]:
            if follow.type_key in _SHOT_TYPES:
                break
            if follow.type_key in _TURNOVER_REASONS:
                reason = _TURNOVER_REASONS[follow.type_key]
                break

        if reason is not None:
            missed.append(
                MissedRushOpportunity(
                    event_id=current.event_id,
                    team_id=current.team_id,
                    period=current.period,
                    period_seconds=current.period_seconds,
                    reason=reason,
                )
            )

    return missed
