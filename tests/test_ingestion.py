"""Test game feed file loading."""

import json

import pytest
from ice_analytics.ingestion.game_feed_io import GameDataUnavailable, GameFeedLoader


def test_list_game_ids(feed_dir):
    (feed_dir / "notes.json").write_text("{}")
    loader = GameFeedLoader(feed_dir)
    assert loader.list_game_ids() == [2023020001, 2023020002]


def test_list_missing_directory(tmp_path):
    assert GameFeedLoader(tmp_path / "nowhere").list_game_ids() == []


def test_load_game(feed_dir):
    feed = GameFeedLoader(feed_dir).load_game(2023020002)
    assert feed.game_id == 2023020002
    assert len(feed.shots) == 3
    assert feed.skipped_plays == 1


def test_loader_is_a_fetch_function(feed_dir):
    loader = GameFeedLoader(feed_dir)
    assert loader(2023020001).events == loader.load_game(2023020001).events


def test_missing_game(feed_dir):
    with pytest.raises(GameDataUnavailable) as exc_info:
        GameFeedLoader(feed_dir).load_game(1)
    assert exc_info.value.game_id == 1
    assert "not found" in exc_info.value.reason


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_unusable_payload(tmp_path, content):
    (tmp_path / "5.json").write_text(content)
    with pytest.raises(GameDataUnavailable):
        GameFeedLoader(tmp_path).load_raw(5)


def test_shifts_are_merged(feed_dir):
    """Test that a stored shift chart is attached to the payload."""
    shifts_dir = feed_dir / "shifts"
    shifts_dir.mkdir()
    shifts = {
        "data": [
            {"playerId": 11, "teamId": 1, "period": 1, "startTime": "00:00", "endTime": "00:50"},
            {"playerId": 12, "teamId": 1, "period": 1, "startTime": "bad", "endTime": "00:50"},
        ]
    }
    with open(shifts_dir / "2023020001.json", "w", encoding="utf-8") as f:
        json.dump(shifts, f)

    loader = GameFeedLoader(feed_dir)
    assert len(loader.load_raw(2023020001)["shifts"]) == 2
    feed = loader.load_game(2023020001)
    assert [shift.player_id for shift in feed.shifts] == [11]
    assert loader.load_game(2023020002).shifts == []
