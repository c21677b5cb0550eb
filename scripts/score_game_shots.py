"""Score every shot of one game with the xG model and export a CSV.

Example usage (from project root):

    python scripts/score_game_shots.py 2023020001
    python scripts/score_game_shots.py 2023020001 --output data/reports/shots/game.csv
"""

import argparse
import sys
from pathlib import Path

import pandas as pd

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ice_analytics.config import ensure_directories, settings
from ice_analytics.ingestion.game_feed_io import GameDataUnavailable, GameFeedLoader
from ice_analytics.modeling.xg_model import score_shot
from ice_analytics.utils.logging import get_logger
from ice_analytics.utils.time import format_clock

logger = get_logger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Score a game's shots with the xG model")
    parser.add_argument("game_id", type=int, help="Game ID of a stored feed")
    parser.add_argument(
        "--data-path",
        type=Path,
        default=settings.game_feed_path,
        help="Directory containing <game_id>.json feeds",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="CSV path (default: <reports>/shots/<game_id>.csv)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    ensure_directories()

    try:
        feed = GameFeedLoader(args.data_path).load_game(args.game_id)
    except GameDataUnavailable as e:
        logger.error(str(e))
        sys.exit(1)

    rows = []
    for shot in feed.shots:
        prediction = score_shot(shot, feed.events)
        rows.append(
            {
                "event_id": shot.event_id,
                "period": shot.period,
                "clock": format_clock(shot.period_seconds),
                "team_id": shot.team_id,
                "shooter_id": shot.shooter_id,
                "x": shot.x,
                "y": shot.y,
                "result": shot.result.value,
                "distance": prediction.features.distance,
                "angle": prediction.features.angle,
                "shot_type": getattr(prediction.features.shot_type, "value", prediction.features.shot_type),
                "strength": prediction.features.strength.value,
                "is_rebound": prediction.features.is_rebound,
                "is_rush": prediction.features.is_rush,
                "x_goal": prediction.x_goal,
                "danger_tier": prediction.danger_tier.value,
            }
        )

    df = pd.DataFrame(rows)
    output = args.output or settings.reports_path / "shots" / f"{args.game_id}.csv"
    output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output, index=False)

    logger.info(f"Scored {len(df)} shots for game {args.game_id}")
    if not df.empty:
        summary = df.groupby("team_id").agg(shots=("event_id", "count"), xg=("x_goal", "sum"))
        print(summary.to_string())
    print(f"Saved shot scores to {output}")


if __name__ == "__main__":
    main()
