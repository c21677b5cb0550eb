"""Test defensive coverage analytics."""

import pytest
from ice_analytics.analysis.defense import (
    DefensiveZone,
    LeagueRank,
    SlotDangerRating,
    analyze_defensive_coverage,
    calculate_goals_saved_above_expected,
    classify_defensive_zone,
    compare_defense_to_league,
    slot_danger_rating,
)
from ice_analytics.events import ShotEvent, ShotResult
from ice_analytics.modeling.xg_model import DangerTier, score_shot


def _against(event_id, x, y, result):
    return ShotEvent(event_id, 1, float(event_id * 10), x, y, shooter_id=21, team_id=2, result=result)


@pytest.fixture
def shots_against():
    return [
        _against(1, 80.0, 0.0, ShotResult.GOAL),
        _against(2, 80.0, 2.0, ShotResult.SHOT_ON_GOAL),
        _against(3, 85.0, 3.0, ShotResult.BLOCKED_SHOT),
        _against(4, 30.0, 30.0, ShotResult.MISSED_SHOT),
    ]


@pytest.mark.parametrize(
    "x, y, zone",
    [
        (80, 5, DefensiveZone.SLOT),
        (-80, -5, DefensiveZone.SLOT),
        (80, 15, DefensiveZone.FACEOFF_CIRCLE),
        (65, 10, DefensiveZone.POINT),
        (40, 40, DefensiveZone.BOARDS),
        (80, 30, DefensiveZone.BOARDS),
    ],
)
def test_classify_defensive_zone(x, y, zone):
    assert classify_defensive_zone(x, y) is zone


def test_defensive_coverage(shots_against):
    """Test totals, danger tiers and slot protection."""
    analytics = analyze_defensive_coverage(shots_against)
    xg_total = sum(score_shot(shot).x_goal for shot in shots_against)

    assert analytics.total_shots_against == 4
    assert analytics.total_goals_against == 1
    assert analytics.total_xg_against == pytest.approx(xg_total)
    assert analytics.shots_blocked == 1
    assert analytics.block_rate == pytest.approx(0.25)

    assert analytics.tier_counts[DangerTier.HIGH] == 3
    assert analytics.tier_counts[DangerTier.LOW] == 1
    assert analytics.high_danger_goals == 1
    assert analytics.high_danger_saves == 1
    assert analytics.high_danger_save_share == pytest.approx(0.5)

    expected_rating = 100.0 - (3 / 4 * 100.0 + xg_total / 4 * 50.0)
    assert analytics.shot_suppression_rating == pytest.approx(expected_rating)
    assert analytics.goals_saved_above_expected == pytest.approx(xg_total - 1)

    slot = analytics.slot
    assert slot.slot_shots_allowed == 3
    assert slot.slot_goals_allowed == 1
    assert slot.slot_block_rate == pytest.approx(1 / 3)
    assert slot.slot_save_pct == pytest.approx(200.0 / 3)
    assert slot.danger_rating is SlotDangerRating.EXCELLENT

    zones = {zone.zone: zone for zone in analytics.zones}
    assert zones[DefensiveZone.BOARDS].shots_allowed == 1
    assert sum(zone.shots_allowed for zone in analytics.zones) == 4


def test_no_shots_against():
    analytics = analyze_defensive_coverage([])
    assert analytics.shot_suppression_rating == 100.0
    assert analytics.high_danger_save_share is None
    assert analytics.goals_saved_above_expected == 0.0
    assert analytics.block_rate == 0.0


def test_precomputed_predictions(shots_against):
    predictions = [score_shot(shot) for shot in shots_against]
    analytics = analyze_defensive_coverage(shots_against, predictions=predictions)
    assert analytics == analyze_defensive_coverage(shots_against)

    with pytest.raises(ValueError):
        analyze_defensive_coverage(shots_against, predictions=predictions[:2])


def test_slot_danger_rating():
    assert slot_danger_rating(4) is SlotDangerRating.EXCELLENT
    assert slot_danger_rating(5) is SlotDangerRating.GOOD
    assert slot_danger_rating(10) is SlotDangerRating.AVERAGE
    assert slot_danger_rating(15) is SlotDangerRating.POOR


def test_goals_saved_above_expected():
    assert calculate_goals_saved_above_expected(2, 3.5) == pytest.approx(1.5)
    assert calculate_goals_saved_above_expected(4, 3.0) == pytest.approx(-1.0)


def test_compare_defense_to_league(shots_against):
    """Test ranks against league reference points."""
    comparison = compare_defense_to_league(analyze_defensive_coverage(shots_against))
    assert comparison.slot_protection_rank is LeagueRank.ELITE
    assert comparison.shot_suppression_rank is LeagueRank.POOR
    assert comparison.block_rate_rank is LeagueRank.ELITE

    clean = compare_defense_to_league(analyze_defensive_coverage([]))
    assert clean.shot_suppression_rank is LeagueRank.ELITE
    assert clean.block_rate_rank is LeagueRank.POOR
