"""Royal-road pass detection.

A royal-road pass moves the puck laterally across the middle of the ice into
the slot. The feed rarely tags passes, so they are inferred from two
consecutive same-team events by different players with no change of
possession in between.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from ice_analytics.analysis.possession import possession_timeline
from ice_analytics.events import GameEvent, GameFeed, ShotEvent
from ice_analytics.features.context import DEFAULT_CONTEXT, ContextParams
from ice_analytics.features.geometry import in_slot_x_range
from ice_analytics.modeling.xg_model import DEFAULT_COEFFICIENTS, XGCoefficients, score_shot
from ice_analytics.utils.logging import game_logger, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RoyalRoadParams:
    min_cross_ice_distance: float = 20.0
    lookback_events: int = 5
    follow_up_seconds: float = 3.0


DEFAULT_ROYAL_ROAD_PARAMS = RoyalRoadParams()


@dataclass(frozen=True)
class RoyalRoadPass:
    pass_event_id: int
    receive_event_id: int
    team_id: int
    passer_id: int
    receiver_id: int
    period: int
    period_seconds: float
    from_x: float
    from_y: float
    to_x: float
    to_y: float
    lateral_distance: float
    shot_event_id: Optional[int] = None
    shot_xg: float = 0.0
    is_goal: bool = False

    @property
    def led_to_shot(self) -> bool:
        return self.shot_event_id is not None


@dataclass(frozen=True)
class RoyalRoadAnalytics:
    total_passes: int
    passes_with_shots: int
    goals: int
    conversion_rate: float
    total_xg: float
    passes: List[RoyalRoadPass] = field(default_factory=list)


def _is_candidate(event: GameEvent) -> bool:
    return event.has_location and event.team_id is not None and event.player_id is not None


def _find_passer(
    events: Sequence[GameEvent],
    timeline: Sequence,
    index: int,
    lookback: int,
) -> Optional[int]:
    """Index of the nearest earlier same-team event by another player.

    The search stops at a period boundary or as soon as the other team held
    the puck between the two events.
    """
    receiver = events[index]
    for i in range(index - 1, max(index - 1 - lookback, -1), -1):
        previous = events[i]
        if previous.period != receiver.period:
            return None
        if (
            _is_candidate(previous)
            and previous.team_id == receiver.team_id
            and previous.player_id != receiver.player_id
        ):
            return i
        if timeline[i].is_held_by_opponent_of(receiver.team_id):
            return None
    return None


def _find_follow_up_shot(
    events: Sequence[GameEvent],
    index: int,
    follow_up_seconds: float,
    used_shots: Set[int],
) -> Optional[GameEvent]:
    """First shot attempt by the receiver within the follow-up window."""
    receiver = events[index]
    for event in events[index:]:
        if event.period != receiver.period:
            break
        if event.period_seconds - receiver.period_seconds > follow_up_seconds:
            break
        if event.is_shot_attempt and event.player_id == receiver.player_id:
            return None if event.event_id in used_shots else event
    return None


def detect_royal_road_passes(
    feed: GameFeed,
    params: RoyalRoadParams = DEFAULT_ROYAL_ROAD_PARAMS,
    coefficients: XGCoefficients = DEFAULT_COEFFICIENTS,
    context: ContextParams = DEFAULT_CONTEXT,
) -> List[RoyalRoadPass]:
    """Detect royal-road passes in a game.

    Args:
        feed: Normalized game feed
        params: Detection thresholds
        coefficients: xG model used to value the follow-up shot
        context: Rebound / rush windows for xG features

    Returns:
        Detected passes in chronological order
    """
    events = feed.events
    timeline = possession_timeline(events)
    shots_by_id: Dict[int, ShotEvent] = {shot.event_id: shot for shot in feed.shots}
    used_shots: Set[int] = set()
    passes: List[RoyalRoadPass] = []

    for j, receiver in enumerate(events):
        if not _is_candidate(receiver):
            continue

        i = _find_passer(events, timeline, j, params.lookback_events)
        if i is None:
            continue
        passer = events[i]

        lateral = abs(receiver.y - passer.y)
        if lateral <= params.min_cross_ice_distance or not in_slot_x_range(receiver.x):
            continue

        shot_event = _find_follow_up_shot(events, j, params.follow_up_seconds, used_shots)
        shot_xg = 0.0
        is_goal = False
        if shot_event is not None:
            used_shots.add(shot_event.event_id)
            shot = shots_by_id.get(shot_event.event_id)
            if shot is not None:
                shot_xg = score_shot(shot, events, coefficients, context).x_goal
                is_goal = shot.is_goal

        passes.append(
            RoyalRoadPass(
                pass_event_id=passer.event_id,
                receive_event_id=receiver.event_id,
                team_id=receiver.team_id,
                passer_id=passer.player_id,
                receiver_id=receiver.player_id,
                period=receiver.period,
                period_seconds=receiver.period_seconds,
                from_x=passer.x,
                from_y=passer.y,
                to_x=receiver.x,
                to_y=receiver.y,
                lateral_distance=lateral,
                shot_event_id=shot_event.event_id if shot_event is not None else None,
                shot_xg=shot_xg,
                is_goal=is_goal,
            )
        )

    game_logger(logger, feed.game_id).debug(f"{len(passes)} royal-road passes")
    return passes


def calculate_royal_road_analytics(passes: Sequence[RoyalRoadPass]) -> RoyalRoadAnalytics:
    """Summarize detected passes; conversion rate is goals per pass that led to a shot."""
    with_shots = [p for p in passes if p.led_to_shot]
    goals = sum(1 for p in with_shots if p.is_goal)
    return RoyalRoadAnalytics(
        total_passes=len(passes),
        passes_with_shots=len(with_shots),
        goals=goals,
        conversion_rate=goals / len(with_shots) if with_shots else 0.0,
        total_xg=sum(p.shot_xg for p in passes),
        passes=list(passes),
    )
