"""Tabular reports built from analytics results."""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Dict, Sequence

import pandas as pd

from ice_analytics.pipelines.game_metrics import GameMetrics
from ice_analytics.pipelines.rolling import RollingMetrics
from ice_analytics.pipelines.season import ShotXGPoint, SubjectAnalytics
from ice_analytics.utils.logging import get_logger

logger = get_logger(__name__)

SHOT_COLUMNS = ["game_id", "event_id", "shooter_id", "x", "y", "x_goal", "danger_tier", "result"]


def game_metrics_frame(games: Sequence[GameMetrics]) -> pd.DataFrame:
    frame = pd.DataFrame([asdict(game) for game in games])
    if frame.empty:
        return pd.DataFrame(columns=list(GameMetrics.__dataclass_fields__))
    frame["xg_diff"] = frame["xg_for"] - frame["xg_against"]
    frame["goals_minus_xg"] = frame["goals_for"] - frame["xg_for"]
    return frame


def rolling_frame(series: Sequence[RollingMetrics]) -> pd.DataFrame:
    if not series:
        return pd.DataFrame(columns=list(RollingMetrics.__dataclass_fields__))
    return pd.DataFrame([asdict(entry) for entry in series])


def shot_points_frame(points: Sequence[ShotXGPoint]) -> pd.DataFrame:
    rows = [asdict(point) for point in points]
    frame = pd.DataFrame(rows, columns=SHOT_COLUMNS)
    frame["danger_tier"] = frame["danger_tier"].map(
        lambda tier: getattr(tier, "value", tier)
    )
    frame["is_goal"] = frame["result"] == "goal"
    return frame


def aggregate_shots_by_game(shots: pd.DataFrame) -> pd.DataFrame:
    """Per-game shot totals, xG and goals above expected."""
    required = {"game_id", "x_goal", "is_goal", "event_id", "danger_tier"}
    missing = required - set(shots.columns)
    if missing:
        raise KeyError(f"Missing columns in shot frame: {missing}")

    grouped = shots.groupby("game_id", as_index=False).agg(
        shots=("event_id", "count"),
        goals=("is_goal", "sum"),
        xg=("x_goal", "sum"),
        high_danger=("danger_tier", lambda tiers: int((tiers == "high").sum())),
    )
    grouped["goals_minus_xg"] = grouped["goals"] - grouped["xg"]
    return grouped


def write_season_report(analytics: SubjectAnalytics, output_dir: Path) -> Dict[str, Path]:
    """Write game, rolling and shot CSVs for one subject.

    Args:
        analytics: Result of the multi-game pipeline
        output_dir: Directory for the CSV files (created if missing)

    Returns:
        Mapping of report name to written path
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    prefix = f"{analytics.subject.kind.value}_{analytics.subject.subject_id}"

    shots = shot_points_frame(analytics.shot_points)
    frames = {
        "games": game_metrics_frame(analytics.game_metrics),
        "rolling": rolling_frame(analytics.rolling),
        "shots": shots,
        "shots_by_game": aggregate_shots_by_game(shots),
    }

    paths: Dict[str, Path] = {}
    for name, frame in frames.items():
        path = output_dir / f"{prefix}_{name}.csv"
        frame.to_csv(path, index=False)
        paths[name] = path
        logger.info(f"Saved {name} report ({len(frame)} rows) to {path}")

    return paths
