"""Game momentum from shot-attempt differentials.

Momentum is sampled at a fixed interval as the normalized home-minus-away
shot attempt differential inside a trailing window. Positive values favour
the home team, negative values the away team.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from ice_analytics.events import GIVEAWAY, GOAL, HIT, TAKEAWAY, GameEvent
from ice_analytics.features.context import XGFeatures
from ice_analytics.features.geometry import calculate_shot_metrics
from ice_analytics.modeling.xg_model import DEFAULT_COEFFICIENTS, XGCoefficients, calculate_xg
from ice_analytics.utils.time import period_for_game_seconds


class MomentumEventKind(str, Enum):
    SHOT = "shot"
    GOAL = "goal"
    HIT = "hit"
    TAKEAWAY = "takeaway"
    GIVEAWAY = "giveaway"

    @property
    def is_attempt(self) -> bool:
        return self in (MomentumEventKind.SHOT, MomentumEventKind.GOAL)


@dataclass(frozen=True)
class MomentumParams:
    sample_interval_seconds: float = 30.0
    window_seconds: float = 120.0
    min_denominator: int = 5
    swing_threshold: float = 0.4
    run_intensity: float = 0.3
    run_gap_seconds: float = 120.0
    min_game_seconds: float = 3600.0

    def __post_init__(self):
        if not self.sample_interval_seconds > 0:
            raise ValueError(
                f"sample_interval_seconds must be positive, got {self.sample_interval_seconds}"
            )
        if not self.window_seconds > 0:
            raise ValueError(f"window_seconds must be positive, got {self.window_seconds}")
        if self.min_denominator < 1:
            raise ValueError(f"min_denominator must be at least 1, got {self.min_denominator}")


DEFAULT_MOMENTUM_PARAMS = MomentumParams()


@dataclass(frozen=True)
class MomentumEvent:
    event_id: int
    period: int
    game_seconds: float
    team_id: int
    kind: MomentumEventKind
    x_goal: Optional[float] = None


@dataclass(frozen=True)
class MomentumSample:
    time: float
    home_attempts: int
    away_attempts: int
    momentum: float


@dataclass(frozen=True)
class MomentumSwing:
    time: float
    period: int
    change: float
    from_team: Optional[int]
    to_team: Optional[int]
    trigger_event_id: Optional[int] = None
    trigger_kind: Optional[MomentumEventKind] = None


@dataclass(frozen=True)
class PeriodMomentum:
    period: int
    dominant_team: Optional[int]
    shot_differential: int
    high_danger_differential: int


@dataclass(frozen=True)
class MomentumRun:
    team_id: int
    start_time: float
    end_time: float
    intensity: float


@dataclass(frozen=True)
class MomentumAnalytics:
    samples: List[MomentumSample] = field(default_factory=list)
    swings: List[MomentumSwing] = field(default_factory=list)
    period_momentum: List[PeriodMomentum] = field(default_factory=list)
    runs: List[MomentumRun] = field(default_factory=list)


def _classify(type_key: str) -> Optional[MomentumEventKind]:
    if type_key == GOAL:
        return MomentumEventKind.GOAL
    if type_key in ("shot-on-goal", "missed-shot", "blocked-shot"):
        return MomentumEventKind.SHOT
    if type_key == HIT:
        return MomentumEventKind.HIT
    if type_key == TAKEAWAY:
        return MomentumEventKind.TAKEAWAY
    if type_key == GIVEAWAY:
        return MomentumEventKind.GIVEAWAY
    return None


def parse_momentum_events(
    events: Sequence[GameEvent], coefficients: XGCoefficients = DEFAULT_COEFFICIENTS
) -> List[MomentumEvent]:
    """Keep the events that carry momentum, ordered by game time.

    Located shot attempts get a location-only xG value.
    """
    parsed: List[MomentumEvent] = []
    for event in events:
        kind = _classify(event.type_key)
        if kind is None or event.team_id is None:
            continue

        x_goal = None
        if kind.is_attempt and event.has_location:
            distance, angle = calculate_shot_metrics(event.x, event.y)
            x_goal = calculate_xg(XGFeatures(distance, angle), coefficients).x_goal

        parsed.append(
            MomentumEvent(
                event_id=event.event_id,
                period=event.period,
                game_seconds=event.game_seconds,
                team_id=event.team_id,
                kind=kind,
                x_goal=x_goal,
            )
        )
    return sorted(parsed, key=lambda e: e.game_seconds)


def calculate_rolling_momentum(
    events: Sequence[MomentumEvent],
    home_team_id: int,
    away_team_id: int,
    params: MomentumParams = DEFAULT_MOMENTUM_PARAMS,
) -> List[MomentumSample]:
    """Sample momentum from time 0 to the end of the game.

    Each sample counts attempts in the window (t - window, t]. The value is
    (home - away) / max(total, min_denominator), so it stays within [-1, 1]
    and small samples are damped.
    """
    attempts = [e for e in events if e.kind.is_attempt]
    end_time = max([e.game_seconds for e in events] + [params.min_game_seconds])

    samples: List[MomentumSample] = []
    step = 0
    while step * params.sample_interval_seconds <= end_time:
        time = step * params.sample_interval_seconds
        in_window = [
            e for e in attempts if time - params.window_seconds < e.game_seconds <= time
        ]
        home = sum(1 for e in in_window if e.team_id == home_team_id)
        away = sum(1 for e in in_window if e.team_id == away_team_id)
        total = home + away
        momentum = (home - away) / max(total, params.min_denominator) if total > 0 else 0.0

        samples.append(MomentumSample(time, home, away, momentum))
        step += 1

    return samples


def _favoured_team(momentum: float, home_team_id: int, away_team_id: int) -> Optional[int]:
    if momentum > 0:
        return home_team_id
    if momentum < 0:
        return away_team_id
    return None


def _nearest_event(events: Sequence[MomentumEvent], time: float) -> Optional[MomentumEvent]:
    """Event closest to `time`; on a tie the earlier event wins."""
    nearest = None
    best = None
    for event in events:
        gap = abs(event.game_seconds - time)
        if best is None or gap < best:
            nearest, best = event, gap
    return nearest


def detect_momentum_swings(
    samples: Sequence[MomentumSample],
    events: Sequence[MomentumEvent],
    home_team_id: int,
    away_team_id: int,
    params: MomentumParams = DEFAULT_MOMENTUM_PARAMS,
) -> List[MomentumSwing]:
    """Flag sample-to-sample changes larger than the swing threshold.

    Args:
        samples: Momentum samples in time order
        events: Momentum events used to find the trigger of each swing
        home_team_id: Home team id
        away_team_id: Away team id
        params: Swing threshold

    Returns:
        Detected swings in time order
    """
    swings: List[MomentumSwing] = []
    for previous, current in zip(samples, samples[1:]):
        change = current.momentum - previous.momentum
        if abs(change) <= params.swing_threshold:
            continue

        trigger = _nearest_event(events, current.time)
        swings.append(
            MomentumSwing(
                time=current.time,
                period=period_for_game_seconds(current.time),
                change=change,
                from_team=_favoured_team(previous.momentum, home_team_id, away_team_id),
                to_team=_favoured_team(current.momentum, home_team_id, away_team_id),
                trigger_event_id=trigger.event_id if trigger else None,
                trigger_kind=trigger.kind if trigger else None,
            )
        )
    return swings


def analyze_period_momentum(
    events: Sequence[MomentumEvent],
    home_team_id: int,
    away_team_id: int,
    coefficients: XGCoefficients = DEFAULT_COEFFICIENTS,
) -> List[PeriodMomentum]:
    """Shot and high-danger chance differentials (home minus away) per period."""
    last_period = max([e.period for e in events] + [3])
    summaries: List[PeriodMomentum] = []

    for period in range(1, last_period + 1):
        attempts = [e for e in events if e.period == period and e.kind.is_attempt]
        high_danger = [
            e for e in attempts
            if e.x_goal is not None and e.x_goal >= coefficients.high_danger_threshold
        ]

        shot_diff = sum(1 for e in attempts if e.team_id == home_team_id) - sum(
            1 for e in attempts if e.team_id == away_team_id
        )
        chance_diff = sum(1 for e in high_danger if e.team_id == home_team_id) - sum(
            1 for e in high_danger if e.team_id == away_team_id
        )
        summaries.append(
            PeriodMomentum(
                period=period,
                dominant_team=_favoured_team(shot_diff, home_team_id, away_team_id),
                shot_differential=shot_diff,
                high_danger_differential=chance_diff,
            )
        )

    return summaries


def find_momentum_runs(
    samples: Sequence[MomentumSample],
    home_team_id: int,
    away_team_id: int,
    params: MomentumParams = DEFAULT_MOMENTUM_PARAMS,
) -> List[MomentumRun]:
    """Group consecutive high-intensity samples for one team into runs."""
    runs: List[MomentumRun] = []
    current: Optional[MomentumRun] = None

    for sample in samples:
        intensity = abs(sample.momentum)
        if intensity <= params.run_intensity:
            continue

        team_id = home_team_id if sample.momentum > 0 else away_team_id
        if (
            current is None
            or current.team_id != team_id
            or sample.time - current.end_time > params.run_gap_seconds
        ):
            if current is not None:
                runs.append(current)
            current = MomentumRun(team_id, sample.time, sample.time, intensity)
        else:
            current = MomentumRun(
                team_id, current.start_time, sample.time, max(current.intensity, intensity)
            )

    if current is not None:
        runs.append(current)
    return runs


def analyze_momentum(
    events: Sequence[GameEvent],
    home_team_id: int,
    away_team_id: int,
    params: MomentumParams = DEFAULT_MOMENTUM_PARAMS,
    coefficients: XGCoefficients = DEFAULT_COEFFICIENTS,
) -> MomentumAnalytics:
    """Run the full momentum analysis for one game."""
    momentum_events = parse_momentum_events(events, coefficients)
    samples = calculate_rolling_momentum(momentum_events, home_team_id, away_team_id, params)
    return MomentumAnalytics(
        samples=samples,
        swings=detect_momentum_swings(
            samples, momentum_events, home_team_id, away_team_id, params
        ),
        period_momentum=analyze_period_momentum(
            momentum_events, home_team_id, away_team_id, coefficients
        ),
        runs=find_momentum_runs(samples, home_team_id, away_team_id, params),
    )
