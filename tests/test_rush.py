"""Test rush attack classification."""

import pytest
from ice_analytics.analysis.rush import (
    RushParams,
    RushType,
    calculate_rush_analytics,
    classify_rush_type,
    detect_missed_rush_opportunities,
    detect_rush_attacks,
)
from ice_analytics.events import GameEvent


def test_breakaway_from_defensive_zone(sample_feed):
    """Test a 3-second rush from deep in the zone with no defenders back."""
    rushes = detect_rush_attacks(sample_feed)

    assert len(rushes) == 1
    rush = rushes[0]
    assert rush.event_id == 4
    assert rush.player_id == 11
    assert rush.transition_seconds == pytest.approx(3.0)
    assert rush.defenders == 0
    assert rush.rush_type is RushType.BREAKAWAY
    assert rush.was_shot_on_goal
    assert not rush.was_goal


def test_odd_man_and_standard_rushes(make_play, make_feed):
    """Test defender estimates from start depth and opponent pressure."""
    odd_man = make_feed(
        [
            make_play(1, "takeaway", "00:05", x=-40, y=0, team_id=1, player_id=11),
            make_play(2, "shot-on-goal", "00:08", x=80, y=0, team_id=1, player_id=11),
        ]
    )
    assert detect_rush_attacks(odd_man)[0].rush_type is RushType.ODD_MAN

    standard = make_feed(
        [
            make_play(1, "takeaway", "00:05", x=-40, y=0, team_id=1, player_id=11),
            make_play(2, "hit", "00:06", x=10, y=0, team_id=2, hittingPlayerId=21),
            make_play(3, "shot-on-goal", "00:08", x=80, y=0, team_id=1, player_id=11),
        ]
    )
    rush = detect_rush_attacks(standard)[0]
    assert rush.defenders == 2
    assert rush.rush_type is RushType.STANDARD


def test_observed_defenders_win(make_play, make_feed):
    feed = make_feed(
        [
            make_play(1, "takeaway", "00:05", x=-60, y=0, team_id=1, player_id=11),
            make_play(
                2, "shot-on-goal", "00:08", x=80, y=0, team_id=1, player_id=11, defendersBetween=3
            ),
        ]
    )
    rush = detect_rush_attacks(feed)[0]
    assert rush.defenders == 3
    assert rush.rush_type is RushType.STANDARD


def test_rush_towards_negative_net(make_play, make_feed):
    """Test that the attacking direction follows the shot's end of the ice."""
    feed = make_feed(
        [
            make_play(1, "takeaway", "00:05", x=60, y=0, team_id=2, player_id=21),
            make_play(2, "goal", "00:09", x=-80, y=0, team_id=2, player_id=21),
        ]
    )
    rushes = detect_rush_attacks(feed)
    assert len(rushes) == 1
    assert rushes[0].was_goal


@pytest.mark.parametrize(
    "start_clock, start_x, shot_clock",
    [
        ("00:00", -60, "00:11"),  # too slow
        ("00:10", -60, "00:10"),  # no elapsed time
        ("00:05", 0, "00:10"),  # neutral zone start
    ],
)
def test_not_a_rush(make_play, make_feed, start_clock, start_x, shot_clock):
    feed = make_feed(
        [
            make_play(1, "takeaway", start_clock, x=start_x, y=0, team_id=1, player_id=11),
            make_play(2, "shot-on-goal", shot_clock, x=80, y=0, team_id=1, player_id=11),
        ]
    )
    assert detect_rush_attacks(feed) == []


def test_custom_transition_window(make_play, make_feed):
    feed = make_feed(
        [
            make_play(1, "takeaway", "00:00", x=-60, y=0, team_id=1, player_id=11),
            make_play(2, "shot-on-goal", "00:12", x=80, y=0, team_id=1, player_id=11),
        ]
    )
    assert detect_rush_attacks(feed) == []
    assert len(detect_rush_attacks(feed, RushParams(max_transition_seconds=15))) == 1


def test_classify_rush_type():
    assert classify_rush_type(0) is RushType.BREAKAWAY
    assert classify_rush_type(1) is RushType.ODD_MAN
    assert classify_rush_type(2) is RushType.STANDARD


def test_rush_analytics(sample_feed):
    analytics = calculate_rush_analytics(detect_rush_attacks(sample_feed))
    assert analytics.total_rushes == 1
    assert analytics.breakaways == 1
    assert analytics.odd_man_rushes == 0
    assert analytics.conversion_rate == 0.0
    assert analytics.shot_on_goal_rate == 1.0
    assert analytics.average_transition_seconds == pytest.approx(3.0)
    assert analytics.total_rush_xg > 0

    empty = calculate_rush_analytics([])
    assert empty.total_rushes == 0
    assert empty.average_transition_seconds == 0.0


def _located(event_id, type_key, x, team_id=1):
    return GameEvent(event_id, 1, float(event_id), type_key, x=x, y=0.0, team_id=team_id)


def test_missed_rush_opportunities():
    """Test fast entries that end in a turnover before a shot."""
    events = [
        _located(1, "pass", 40),
        _located(2, "pass", 80),
        _located(3, "giveaway", 85),
    ]
    missed = detect_missed_rush_opportunities(events)
    assert len(missed) == 1
    assert missed[0].event_id == 2
    assert missed[0].reason == "giveaway"

    with_shot = [
        _located(1, "pass", 40),
        _located(2, "pass", 80),
        _located(3, "shot-on-goal", 82),
        _located(4, "takeaway", 70, team_id=2),
    ]
    assert detect_missed_rush_opportunities(with_shot) == []
