"""Compute season analytics for a player or team from stored game feeds.

Reads every ``<game_id>.json`` under the game feed directory (or the games
given with --games), runs the multi-game pipeline and writes game, rolling
and shot CSVs.

Example usage (from project root):

    python scripts/analyze_player_season.py --player-id 8478402 --team-id 22 --window 10
    python scripts/analyze_player_season.py --team-id 22 --output data/reports/rolling
"""

import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ice_analytics.config import ensure_directories, settings
from ice_analytics.ingestion.game_feed_io import GameFeedLoader
from ice_analytics.pipelines.game_metrics import Subject
from ice_analytics.pipelines.reports import write_season_report
from ice_analytics.pipelines.season import compute_subject_analytics
from ice_analytics.utils.logging import get_logger

logger = get_logger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute season analytics from game feeds")
    parser.add_argument(
        "--player-id",
        type=int,
        default=None,
        help="Player to analyze (omit for team analytics)",
    )
    parser.add_argument(
        "--team-id",
        type=int,
        required=True,
        help="Team of the player, or the team to analyze",
    )
    parser.add_argument(
        "--window",
        type=int,
        default=settings.default_rolling_window,
        help=f"Rolling window size (default: {settings.default_rolling_window})",
    )
    parser.add_argument(
        "--games",
        type=int,
        nargs="*",
        default=None,
        help="Game IDs in chronological order (default: every stored feed)",
    )
    parser.add_argument(
        "--data-path",
        type=Path,
        default=settings.game_feed_path,
        help="Directory containing <game_id>.json feeds",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=settings.reports_path / "rolling",
        help="Output directory for CSV reports",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    ensure_directories()

    loader = GameFeedLoader(args.data_path)
    game_ids = args.games if args.games else loader.list_game_ids()
    if not game_ids:
        logger.error(f"No game feeds found in {args.data_path}")
        sys.exit(1)

    if args.player_id is not None:
        subject = Subject.player(args.player_id, args.team_id)
    else:
        subject = Subject.team(args.team_id)

    analytics = compute_subject_analytics(game_ids, loader, subject, window=args.window)

    logger.info("=" * 60)
    logger.info(f"Status: {analytics.status.value}")
    logger.info(f"Games used: {analytics.games_used}/{analytics.games_requested}")
    if analytics.skipped_game_ids:
        logger.info(f"Skipped games: {analytics.skipped_game_ids}")
    if analytics.trend is not None:
        logger.info(
            f"PDO trend: {analytics.trend.direction.value} ({analytics.trend.delta:+.2f})"
        )
    if analytics.individual_xg is not None:
        logger.info(
            f"ixG: {analytics.individual_xg.ixg:.2f}, goals: {analytics.individual_xg.goals}"
        )
    logger.info("=" * 60)

    if analytics.games_used == 0:
        logger.warning("No usable games; no reports written")
        return

    paths = write_season_report(analytics, args.output)
    for name, path in paths.items():
        print(f"{name}: {path}")


if __name__ == "__main__":
    main()
