"""Pipeline modules for per-game, rolling and multi-game analytics."""

from ice_analytics.pipelines.game_metrics import aggregate_game_metrics
from ice_analytics.pipelines.rolling import calculate_rolling_metrics, detect_trend
from ice_analytics.pipelines.season import CancellationToken, compute_subject_analytics

__all__ = [
    "aggregate_game_metrics",
    "calculate_rolling_metrics",
    "detect_trend",
    "CancellationToken",
    "compute_subject_analytics",
]
