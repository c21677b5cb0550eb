"""Multi-game analytics for a player or team.

Games are fetched one at a time. A game whose data cannot be fetched is
logged and skipped; the remaining games still produce a result, marked as
partial. A cancellation token is checked before every game, and a cancelled
run publishes nothing.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from ice_analytics.analysis.defense import DefensiveAnalytics, analyze_defensive_coverage
from ice_analytics.analysis.royal_road import (
    DEFAULT_ROYAL_ROAD_PARAMS,
    RoyalRoadAnalytics,
    RoyalRoadParams,
    calculate_royal_road_analytics,
    detect_royal_road_passes,
)
from ice_analytics.analysis.rush import (
    DEFAULT_RUSH_PARAMS,
    RushAnalytics,
    RushParams,
    calculate_rush_analytics,
    detect_rush_attacks,
)
from ice_analytics.analysis.zone_entries import (
    DEFAULT_ZONE_PARAMS,
    ZoneAnalytics,
    ZoneParams,
    calculate_zone_analytics,
    detect_zone_entries,
    detect_zone_exits,
)
from ice_analytics.events import GameFeed, ShotEvent
from ice_analytics.features.context import DEFAULT_CONTEXT, ContextParams
from ice_analytics.ingestion.game_feed_io import GameDataUnavailable
from ice_analytics.modeling.xg_model import (
    DEFAULT_COEFFICIENTS,
    DangerTier,
    XGCoefficients,
    XGDifferential,
    XGPrediction,
    score_shot,
    xg_share,
)
from ice_analytics.pipelines.game_metrics import (
    GameMetrics,
    Subject,
    SubjectKind,
    aggregate_game_metrics,
    filter_subject_shots,
)
from ice_analytics.pipelines.rolling import (
    RollingMetrics,
    TrendSummary,
    calculate_rolling_metrics,
    detect_trend,
)
from ice_analytics.utils.logging import game_logger, get_logger

logger = get_logger(__name__)


class CancellationToken:
    """Thread-safe cooperative cancellation flag."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


class AnalyticsStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    CANCELLED = "cancelled"
    EMPTY = "empty"


@dataclass(frozen=True)
class ShotXGPoint:
    game_id: int
    event_id: int
    shooter_id: int
    x: float
    y: float
    x_goal: float
    danger_tier: DangerTier
    result: str


@dataclass(frozen=True)
class IndividualXGSummary:
    shots: int
    goals: int
    ixg: float
    goals_above_expected: float
    ixg_per_game: float


@dataclass(frozen=True)
class SubjectAnalytics:
    subject: Subject
    status: AnalyticsStatus
    games_requested: int
    games_used: int
    skipped_game_ids: List[int] = field(default_factory=list)
    game_metrics: List[GameMetrics] = field(default_factory=list)
    rolling: List[RollingMetrics] = field(default_factory=list)
    trend: Optional[TrendSummary] = None
    xg_differential: Optional[XGDifferential] = None
    individual_xg: Optional[IndividualXGSummary] = None
    royal_road: Optional[RoyalRoadAnalytics] = None
    rush: Optional[RushAnalytics] = None
    zones: Optional[ZoneAnalytics] = None
    defense: Optional[DefensiveAnalytics] = None
    shot_points: List[ShotXGPoint] = field(default_factory=list)


def _belongs_to(subject: Subject, player_id: Optional[int], team_id: Optional[int]) -> bool:
    if subject.kind is SubjectKind.TEAM:
        return team_id == subject.team_id
    return player_id == subject.subject_id


def _own_shots(feed: GameFeed, subject: Subject) -> List[ShotEvent]:
    return [shot for shot in feed.shots if _belongs_to(subject, shot.shooter_id, shot.team_id)]


def compute_subject_analytics(
    game_ids: Sequence[int],
    fetch_game: Callable[[int], GameFeed],
    subject: Subject,
    window: int = 10,
    cancel_token: Optional[CancellationToken] = None,
    coefficients: XGCoefficients = DEFAULT_COEFFICIENTS,
    context: ContextParams = DEFAULT_CONTEXT,
    rush_params: RushParams = DEFAULT_RUSH_PARAMS,
    royal_road_params: RoyalRoadParams = DEFAULT_ROYAL_ROAD_PARAMS,
    zone_params: ZoneParams = DEFAULT_ZONE_PARAMS,
) -> SubjectAnalytics:
    """Compute season analytics for a subject over a list of games.

    Args:
        game_ids: Games in chronological order
        fetch_game: Returns the normalized feed of a game; raises
            GameDataUnavailable when it cannot
        subject: Player or team to analyze
        window: Rolling window size in games
        cancel_token: Checked before each game
        coefficients: xG model coefficients
        context: Rebound / rush windows for xG features
        rush_params: Rush classifier thresholds
        royal_road_params: Royal-road detector thresholds
        zone_params: Zone entry classifier settings

    Returns:
        SubjectAnalytics with status complete, partial, empty or cancelled

    Raises:
        ValueError: If window is smaller than 1
    """
    if window < 1:
        raise ValueError(f"window must be at least 1, got {window}")

    requested = len(game_ids)
    logger.info(
        f"Computing {subject.kind.value} analytics for {subject.subject_id} over {requested} games"
    )

    game_metrics: List[GameMetrics] = []
    skipped: List[int] = []
    shots_against: List[ShotEvent] = []
    against_predictions: List[XGPrediction] = []
    shot_points: List[ShotXGPoint] = []
    passes, rushes, entries, exits = [], [], [], []
    xg_for = xg_against = 0.0

    for game_id in game_ids:
        if cancel_token is not None and cancel_token.is_cancelled:
            game_logger(logger, game_id).info(
                f"Analytics for {subject.subject_id} cancelled before this game"
            )
            return SubjectAnalytics(
                subject=subject,
                status=AnalyticsStatus.CANCELLED,
                games_requested=requested,
                games_used=0,
            )

        try:
            feed = fetch_game(game_id)
        except GameDataUnavailable as e:
            game_logger(logger, game_id).warning(f"Skipped: {e.reason}")
            skipped.append(game_id)
            continue

        metrics = aggregate_game_metrics(feed, subject, coefficients, context)
        game_metrics.append(metrics)
        xg_for += metrics.xg_for
        xg_against += metrics.xg_against

        _, game_against = filter_subject_shots(feed, subject)
        shots_against.extend(game_against)
        against_predictions.extend(
            score_shot(shot, feed.events, coefficients, context) for shot in game_against
        )

        for shot in _own_shots(feed, subject):
            prediction = score_shot(shot, feed.events, coefficients, context)
            shot_points.append(
                ShotXGPoint(
                    game_id=feed.game_id,
                    event_id=shot.event_id,
                    shooter_id=shot.shooter_id,
                    x=shot.x,
                    y=shot.y,
                    x_goal=prediction.x_goal,
                    danger_tier=prediction.danger_tier,
                    result=shot.result.value,
                )
            )

        passes.extend(
            p
            for p in detect_royal_road_passes(feed, royal_road_params, coefficients, context)
            if _belongs_to(subject, p.passer_id, p.team_id)
        )
        rushes.extend(
            r
            for r in detect_rush_attacks(feed, rush_params, coefficients, context)
            if _belongs_to(subject, r.player_id, r.team_id)
        )
        entries.extend(
            e for e in detect_zone_entries(feed.events, zone_params)
            if _belongs_to(subject, e.player_id, e.team_id)
        )
        exits.extend(
            e for e in detect_zone_exits(feed.events, zone_params)
            if _belongs_to(subject, e.player_id, e.team_id)
        )

    used = len(game_metrics)
    if used == 0:
        status = AnalyticsStatus.EMPTY
    elif skipped:
        status = AnalyticsStatus.PARTIAL
    else:
        status = AnalyticsStatus.COMPLETE

    rolling = calculate_rolling_metrics(game_metrics, window)
    goals = sum(1 for point in shot_points if point.result == "goal")
    ixg = sum(point.x_goal for point in shot_points)

    logger.info(
        f"Analytics for {subject.subject_id}: {status.value}, "
        f"{used}/{requested} games used, {len(skipped)} skipped"
    )

    return SubjectAnalytics(
        subject=subject,
        status=status,
        games_requested=requested,
        games_used=used,
        skipped_game_ids=skipped,
        game_metrics=game_metrics,
        rolling=rolling,
        trend=detect_trend(rolling),
        xg_differential=XGDifferential(
            xg_for=xg_for,
            xg_against=xg_against,
            xg_diff=xg_for - xg_against,
            xg_pct=xg_share(xg_for, xg_against),
        ),
        individual_xg=IndividualXGSummary(
            shots=len(shot_points),
            goals=goals,
            ixg=ixg,
            goals_above_expected=goals - ixg,
            ixg_per_game=ixg / used if used else 0.0,
        ),
        royal_road=calculate_royal_road_analytics(passes),
        rush=calculate_rush_analytics(rushes),
        zones=calculate_zone_analytics(entries, exits),
        defense=analyze_defensive_coverage(
            shots_against, coefficients=coefficients, predictions=against_predictions
        ),
        shot_points=shot_points,
    )
