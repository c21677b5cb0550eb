"""Test multi-game analytics orchestration."""

import pytest
from ice_analytics.events import normalize_game_feed
from ice_analytics.ingestion.game_feed_io import GameDataUnavailable, GameFeedLoader
from ice_analytics.pipelines.game_metrics import Subject
from ice_analytics.pipelines.rolling import TrendDirection
from ice_analytics.pipelines.season import (
    AnalyticsStatus,
    CancellationToken,
    compute_subject_analytics,
)


@pytest.fixture
def fetch_games(sample_raw_game):
    """Fetcher serving three games, the second of which is unavailable."""
    feeds = {
        game_id: normalize_game_feed(dict(sample_raw_game, id=game_id))
        for game_id in (1, 3)
    }

    def _fetch(game_id):
        if game_id not in feeds:
            raise GameDataUnavailable(game_id, "not stored")
        return feeds[game_id]

    return _fetch


def test_complete_player_analytics(fetch_games):
    """Test a full run for a player over two games."""
    analytics = compute_subject_analytics([1, 3], fetch_games, Subject.player(11, 1), window=1)

    assert analytics.status is AnalyticsStatus.COMPLETE
    assert analytics.games_requested == 2
    assert analytics.games_used == 2
    assert analytics.skipped_game_ids == []
    assert [g.game_id for g in analytics.game_metrics] == [1, 3]
    assert [r.game_number for r in analytics.rolling] == [1, 2]
    assert analytics.trend.direction is TrendDirection.STABLE

    # One shot by the player per game, no goals
    assert analytics.individual_xg.shots == 2
    assert analytics.individual_xg.goals == 0
    assert analytics.individual_xg.ixg_per_game == pytest.approx(analytics.individual_xg.ixg / 2)
    assert [p.event_id for p in analytics.shot_points] == [4, 4]

    assert analytics.rush.total_rushes == 2
    assert analytics.rush.breakaways == 2
    assert analytics.royal_road.total_passes == 0
    assert analytics.zones.total_entries == 2
    assert analytics.defense.total_shots_against == 2
    assert analytics.xg_differential.xg_for == pytest.approx(
        sum(g.xg_for for g in analytics.game_metrics)
    )


def test_partial_failure_keeps_remaining_games(fetch_games):
    """Test that one unavailable game out of N leaves N-1 games in the result."""
    analytics = compute_subject_analytics([1, 2, 3], fetch_games, Subject.team(1), window=2)

    assert analytics.status is AnalyticsStatus.PARTIAL
    assert analytics.games_requested == 3
    assert analytics.games_used == 2
    assert analytics.skipped_game_ids == [2]
    assert len(analytics.rolling) == 1
    assert analytics.individual_xg.goals == 2


def test_all_games_unavailable(fetch_games):
    analytics = compute_subject_analytics([2, 4], fetch_games, Subject.team(1))

    assert analytics.status is AnalyticsStatus.EMPTY
    assert analytics.games_used == 0
    assert analytics.skipped_game_ids == [2, 4]
    assert analytics.rolling == []
    assert analytics.trend.direction is TrendDirection.INSUFFICIENT_DATA
    assert analytics.individual_xg.ixg_per_game == 0.0


def test_cancelled_before_start(fetch_games):
    token = CancellationToken()
    token.cancel()
    analytics = compute_subject_analytics([1, 3], fetch_games, Subject.team(1), cancel_token=token)

    assert analytics.status is AnalyticsStatus.CANCELLED
    assert analytics.games_used == 0
    assert analytics.game_metrics == []
    assert analytics.rolling == []


def test_cancelled_mid_run(fetch_games):
    """Test that cancelling between games discards the games already done."""
    token = CancellationToken()
    fetched = []

    def _fetch_then_cancel(game_id):
        fetched.append(game_id)
        token.cancel()
        return fetch_games(game_id)

    analytics = compute_subject_analytics(
        [1, 3], _fetch_then_cancel, Subject.team(1), cancel_token=token
    )
    assert fetched == [1]
    assert analytics.status is AnalyticsStatus.CANCELLED
    assert analytics.game_metrics == []
    assert analytics.trend is None


def test_invalid_window(fetch_games):
    with pytest.raises(ValueError):
        compute_subject_analytics([1], fetch_games, Subject.team(1), window=0)


def test_short_season_has_no_rolling_entries(fetch_games):
    """Test that a window longer than the season yields an empty series."""
    analytics = compute_subject_analytics([1, 3], fetch_games, Subject.team(1), window=10)
    assert analytics.status is AnalyticsStatus.COMPLETE
    assert analytics.rolling == []


def test_with_file_loader(feed_dir):
    """Test the pipeline over stored feeds with one missing file."""
    loader = GameFeedLoader(feed_dir)
    game_ids = loader.list_game_ids() + [2023020099]
    analytics = compute_subject_analytics(game_ids, loader, Subject.player(12, 1), window=1)

    assert analytics.status is AnalyticsStatus.PARTIAL
    assert analytics.skipped_game_ids == [2023020099]
    assert sum(g.goals for g in analytics.game_metrics) == 2
