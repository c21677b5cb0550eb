"""Test per-game metric aggregation."""

import pytest
from ice_analytics.modeling.xg_model import score_shot
from ice_analytics.pipelines.game_metrics import (
    Subject,
    SubjectKind,
    aggregate_game_metrics,
    filter_subject_shots,
)


def test_player_metrics(sample_feed):
    """Test on-ice counts and scoring for a player."""
    metrics = aggregate_game_metrics(sample_feed, Subject.player(11, 1))

    assert metrics.game_id == 2023020001
    assert metrics.date == "2023-10-10"
    assert metrics.subject_id == 11
    assert (metrics.goals, metrics.assists, metrics.points) == (0, 1, 1)
    assert (metrics.shots_for, metrics.shots_against) == (2, 0)
    assert (metrics.shot_attempts_for, metrics.shot_attempts_against) == (2, 1)
    assert (metrics.unblocked_for, metrics.unblocked_against) == (2, 1)
    assert (metrics.goals_for, metrics.goals_against) == (1, 0)

    expected_xg_for = sum(
        score_shot(shot, sample_feed.events).x_goal
        for shot in sample_feed.shots
        if shot.team_id == 1
    )
    assert metrics.xg_for == pytest.approx(expected_xg_for)
    assert metrics.xg_against > 0


def test_team_metrics(sample_feed):
    """Test that a team subject sees every shot and credits team goals."""
    subject = Subject.team(1)
    assert subject.kind is SubjectKind.TEAM
    assert subject.subject_id == subject.team_id == 1

    metrics = aggregate_game_metrics(sample_feed, subject)
    assert (metrics.goals, metrics.assists, metrics.points) == (1, 1, 2)
    assert metrics.shot_attempts_for == 2
    assert metrics.shot_attempts_against == 1

    away = aggregate_game_metrics(sample_feed, Subject.team(2))
    assert away.goals_against == 1
    assert away.xg_against == pytest.approx(metrics.xg_for)


def test_player_off_ice(sample_feed):
    """Test that a player who was never on the ice has no on-ice events."""
    metrics = aggregate_game_metrics(sample_feed, Subject.player(99, 1))
    assert metrics.shot_attempts_for == 0
    assert metrics.shot_attempts_against == 0
    assert metrics.xg_for == 0.0
    assert metrics.points == 0


def test_on_ice_from_shifts(make_play, make_feed):
    """Test that shifts decide on-ice membership when plays carry no on-ice lists."""
    shifts = [
        {"playerId": 11, "teamId": 1, "period": 1, "startTime": "00:00", "endTime": "00:45"},
    ]
    feed = make_feed(
        [
            make_play(1, "shot-on-goal", "00:30", x=70, y=0, team_id=1, player_id=12),
            make_play(2, "shot-on-goal", "01:30", x=70, y=0, team_id=1, player_id=12),
        ],
        shifts=shifts,
    )
    shots_for, shots_against = filter_subject_shots(feed, Subject.player(11, 1))
    assert [shot.event_id for shot in shots_for] == [1]
    assert shots_against == []


def test_aggregation_is_idempotent(sample_feed):
    """Test that aggregating the same feed twice yields identical records."""
    subject = Subject.player(11, 1)
    assert aggregate_game_metrics(sample_feed, subject) == aggregate_game_metrics(sample_feed, subject)
