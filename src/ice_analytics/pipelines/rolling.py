"""Rolling-window performance metrics and trend detection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Sequence, Union

import numpy as np

from ice_analytics.modeling.xg_model import xg_share
from ice_analytics.pipelines.game_metrics import GameMetrics


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient-data"


@dataclass(frozen=True)
class RollingMetrics:
    game_number: int
    game_id: int
    date: str
    rolling_pdo: float
    rolling_corsi_pct: float
    rolling_fenwick_pct: float
    rolling_xg_pct: float
    rolling_shooting_pct: float
    rolling_points_per_game: float
    rolling_goals_per_game: float
    rolling_xg_for_per_game: float
    rolling_xg_against_per_game: float
    game_pdo: float
    game_corsi_pct: float
    game_fenwick_pct: float
    game_xg_for: float
    game_goals_for: int


@dataclass(frozen=True)
class TrendSummary:
    direction: TrendDirection
    delta: float
    recent_mean: float
    early_mean: float
    sample_size: int


def _share(for_count: float, against_count: float) -> float:
    total = for_count + against_count
    return 100.0 * for_count / total if total > 0 else 50.0


def calculate_pdo(goals_for: int, shots_for: int, goals_against: int, shots_against: int) -> float:
    """On-ice shooting% plus save%.

    With no shots for the shooting% term is 0; with no shots against the
    save% term is 100.
    """
    shooting_pct = 100.0 * goals_for / shots_for if shots_for > 0 else 0.0
    save_pct = 100.0 * (shots_against - goals_against) / shots_against if shots_against > 0 else 100.0
    return shooting_pct + save_pct


def calculate_rolling_metrics(games: Sequence[GameMetrics], window_size: int) -> List[RollingMetrics]:
    """Compute rolling metrics over a chronological list of games.

    Entry `i` (for every `i >= window_size - 1`) uses only games
    `i - window_size + 1 .. i`.

    Args:
        games: Per-game metrics in chronological order
        window_size: Number of games per window

    Returns:
        Rolling metrics, empty when there are fewer games than the window

    Raises:
        ValueError: If window_size is smaller than 1
    """
    if window_size < 1:
        raise ValueError(f"window_size must be at least 1, got {window_size}")

    series: List[RollingMetrics] = []
    for i in range(window_size - 1, len(games)):
        window = games[i - window_size + 1 : i + 1]
        current = games[i]

        goals_for = sum(g.goals_for for g in window)
        goals_against = sum(g.goals_against for g in window)
        shots_for = sum(g.shots_for for g in window)
        shots_against = sum(g.shots_against for g in window)
        xg_for = sum(g.xg_for for g in window)
        xg_against = sum(g.xg_against for g in window)
        goals = sum(g.goals for g in window)

        series.append(
            RollingMetrics(
                game_number=i + 1,
                game_id=current.game_id,
                date=current.date,
                rolling_pdo=calculate_pdo(goals_for, shots_for, goals_against, shots_against),
                rolling_corsi_pct=_share(
                    sum(g.shot_attempts_for for g in window),
                    sum(g.shot_attempts_against for g in window),
                ),
                rolling_fenwick_pct=_share(
                    sum(g.unblocked_for for g in window),
                    sum(g.unblocked_against for g in window),
                ),
                rolling_xg_pct=xg_share(xg_for, xg_against),
                rolling_shooting_pct=100.0 * goals / shots_for if shots_for > 0 else 0.0,
                rolling_points_per_game=sum(g.points for g in window) / window_size,
                rolling_goals_per_game=goals / window_size,
                rolling_xg_for_per_game=xg_for / window_size,
                rolling_xg_against_per_game=xg_against / window_size,
                game_pdo=calculate_pdo(
                    current.goals_for, current.shots_for, current.goals_against, current.shots_against
                ),
                game_corsi_pct=_share(current.shot_attempts_for, current.shot_attempts_against),
                game_fenwick_pct=_share(current.unblocked_for, current.unblocked_against),
                game_xg_for=current.xg_for,
                game_goals_for=current.goals_for,
            )
        )

    return series


MetricSelector = Union[str, Callable[[RollingMetrics], float]]


def detect_trend(
    series: Sequence[RollingMetrics],
    metric: MetricSelector = "rolling_pdo",
    sample_size: int = 5,
) -> TrendSummary:
    """Compare the latest entries of a rolling series against the earliest.

    Args:
        series: Rolling series in chronological order
        metric: Attribute name or accessor for the value to compare
        sample_size: Entries taken from each end of the series

    Returns:
        TrendSummary; `insufficient-data` with fewer than two entries

    Raises:
        ValueError: If sample_size is smaller than 1
    """
    if sample_size < 1:
        raise ValueError(f"sample_size must be at least 1, got {sample_size}")

    if len(series) < 2:
        return TrendSummary(TrendDirection.INSUFFICIENT_DATA, 0.0, 0.0, 0.0, len(series))

    accessor = metric if callable(metric) else (lambda entry: getattr(entry, metric))
    values = np.array([float(accessor(entry)) for entry in series])

    recent_mean = float(values[-sample_size:].mean())
    early_mean = float(values[:sample_size].mean())
    delta = recent_mean - early_mean

    if delta > 0:
        direction = TrendDirection.IMPROVING
    elif delta < 0:
        direction = TrendDirection.DECLINING
    else:
        direction = TrendDirection.STABLE

    return TrendSummary(
        direction=direction,
        delta=delta,
        recent_mean=recent_mean,
        early_mean=early_mean,
        sample_size=min(sample_size, len(series)),
    )
