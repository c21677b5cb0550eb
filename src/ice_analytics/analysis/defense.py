"""Defensive coverage and slot protection.

Everything here is computed from the shots a player or team allowed while
on the ice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ice_analytics.events import GameEvent, ShotEvent, ShotResult
from ice_analytics.features.context import DEFAULT_CONTEXT, ContextParams
from ice_analytics.features.rink import (
    INNER_SLOT_HALF_WIDTH,
    INNER_SLOT_MIN_X,
    NET_X,
    POINT_HALF_WIDTH,
    POINT_MAX_X,
    POINT_MIN_X,
    SLOT_HALF_WIDTH,
)
from ice_analytics.modeling.xg_model import (
    DEFAULT_COEFFICIENTS,
    DangerTier,
    XGCoefficients,
    XGPrediction,
    score_shot,
)

# League reference points
LEAGUE_AVG_SLOT_SHOTS_PER_GAME = 12.0
LEAGUE_AVG_BLOCK_PCT = 15.0


class DefensiveZone(str, Enum):
    SLOT = "slot"
    FACEOFF_CIRCLE = "faceoff-circle"
    POINT = "point"
    BOARDS = "boards"


class SlotDangerRating(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"


class LeagueRank(str, Enum):
    ELITE = "elite"
    ABOVE_AVERAGE = "above-average"
    AVERAGE = "average"
    BELOW_AVERAGE = "below-average"
    POOR = "poor"


@dataclass(frozen=True)
class ZoneDefense:
    zone: DefensiveZone
    shots_allowed: int
    goals_allowed: int
    xg_allowed: float
    shots_blocked: int
    block_rate: float


@dataclass(frozen=True)
class SlotProtection:
    slot_shots_allowed: int
    slot_goals_allowed: int
    slot_xg_allowed: float
    slot_block_rate: float
    slot_save_pct: float
    danger_rating: SlotDangerRating


@dataclass(frozen=True)
class DefensiveAnalytics:
    total_shots_against: int
    total_goals_against: int
    total_xg_against: float
    shots_blocked: int
    block_rate: float
    tier_counts: Dict[DangerTier, int]
    high_danger_shots_against: int
    high_danger_goals: int
    high_danger_saves: int
    high_danger_save_share: Optional[float]
    low_danger_shots_against: int
    shot_suppression_rating: float
    goals_saved_above_expected: float
    zones: List[ZoneDefense] = field(default_factory=list)
    slot: Optional[SlotProtection] = None


@dataclass(frozen=True)
class LeagueComparison:
    slot_protection_rank: LeagueRank
    shot_suppression_rank: LeagueRank
    block_rate_rank: LeagueRank


def classify_defensive_zone(x: float, y: float) -> DefensiveZone:
    """Classify a shot location against the defending net.

    Locations are mirrored onto the positive end so either net works.
    """
    depth = abs(x)
    lateral = abs(y)
    if INNER_SLOT_MIN_X <= depth <= NET_X:
        if lateral <= INNER_SLOT_HALF_WIDTH:
            return DefensiveZone.SLOT
        if lateral <= SLOT_HALF_WIDTH:
            return DefensiveZone.FACEOFF_CIRCLE
    if POINT_MIN_X <= depth < POINT_MAX_X and lateral <= POINT_HALF_WIDTH:
        return DefensiveZone.POINT
    return DefensiveZone.BOARDS


def slot_danger_rating(slot_shots: int) -> SlotDangerRating:
    if slot_shots < 5:
        return SlotDangerRating.EXCELLENT
    if slot_shots < 10:
        return SlotDangerRating.GOOD
    if slot_shots < 15:
        return SlotDangerRating.AVERAGE
    return SlotDangerRating.POOR


def calculate_goals_saved_above_expected(goals_allowed: int, xg_allowed: float) -> float:
    """Expected goals allowed minus actual goals; positive means fewer goals than expected."""
    return xg_allowed - goals_allowed


def _suppression_rating(total: int, high_danger: int, xg_total: float) -> float:
    """0-100 rating; lower high-danger share and xG per shot score higher."""
    if total == 0:
        return 100.0
    rating = 100.0 - (high_danger / total * 100.0 + xg_total / total * 50.0)
    return min(max(rating, 0.0), 100.0)


def analyze_defensive_coverage(
    shots_against: Sequence[ShotEvent],
    events: Optional[Sequence[GameEvent]] = None,
    coefficients: XGCoefficients = DEFAULT_COEFFICIENTS,
    context: ContextParams = DEFAULT_CONTEXT,
    predictions: Optional[Sequence[XGPrediction]] = None,
) -> DefensiveAnalytics:
    """Summarize the shots a subject allowed while on the ice.

    Args:
        shots_against: On-ice shots against
        events: Game events for rebound / rush context (single-game input)
        coefficients: xG model and danger tier thresholds
        context: Rebound / rush windows for xG features
        predictions: Already computed predictions aligned with
            `shots_against` (multi-game input); `events` is then unused

    Returns:
        DefensiveAnalytics; the high-danger save share is None when no
        high-danger shot reached the net

    Raises:
        ValueError: If predictions and shots differ in length
    """
    if predictions is None:
        predictions = [score_shot(shot, events, coefficients, context) for shot in shots_against]
    elif len(predictions) != len(shots_against):
        raise ValueError(
            f"Got {len(predictions)} predictions for {len(shots_against)} shots against"
        )

    tier_counts = {tier: 0 for tier in DangerTier}
    zone_totals = {
        zone: {"shots": 0, "goals": 0, "xg": 0.0, "blocked": 0} for zone in DefensiveZone
    }
    xg_total = 0.0
    goals = blocked = 0
    hd_goals = hd_saves = 0
    slot_goals = slot_blocks = slot_saves = 0

    for shot, prediction in zip(shots_against, predictions):
        zone = classify_defensive_zone(shot.x, shot.y)
        bucket = zone_totals[zone]

        tier_counts[prediction.danger_tier] += 1
        xg_total += prediction.x_goal
        bucket["shots"] += 1
        bucket["xg"] += prediction.x_goal

        if shot.is_goal:
            goals += 1
            bucket["goals"] += 1
        elif shot.result is ShotResult.BLOCKED_SHOT:
            blocked += 1
            bucket["blocked"] += 1

        if prediction.danger_tier is DangerTier.HIGH:
            if shot.is_goal:
                hd_goals += 1
            elif shot.result is ShotResult.SHOT_ON_GOAL:
                hd_saves += 1

        if zone is DefensiveZone.SLOT:
            if shot.is_goal:
                slot_goals += 1
            elif shot.result is ShotResult.BLOCKED_SHOT:
                slot_blocks += 1
            elif shot.result is ShotResult.SHOT_ON_GOAL:
                slot_saves += 1

    total = len(shots_against)
    zones = [
        ZoneDefense(
            zone=zone,
            shots_allowed=values["shots"],
            goals_allowed=values["goals"],
            xg_allowed=values["xg"],
            shots_blocked=values["blocked"],
            block_rate=values["blocked"] / values["shots"] if values["shots"] else 0.0,
        )
        for zone, values in zone_totals.items()
    ]

    slot_totals = zone_totals[DefensiveZone.SLOT]
    slot_shots = slot_totals["shots"]
    slot = SlotProtection(
        slot_shots_allowed=slot_shots,
        slot_goals_allowed=slot_goals,
        slot_xg_allowed=slot_totals["xg"],
        slot_block_rate=slot_blocks / slot_shots if slot_shots else 0.0,
        slot_save_pct=100.0 * (slot_saves + slot_blocks) / slot_shots if slot_shots else 0.0,
        danger_rating=slot_danger_rating(slot_shots),
    )

    hd_on_goal = hd_saves + hd_goals
    return DefensiveAnalytics(
        total_shots_against=total,
        total_goals_against=goals,
        total_xg_against=xg_total,
        shots_blocked=blocked,
        block_rate=blocked / total if total else 0.0,
        tier_counts=tier_counts,
        high_danger_shots_against=tier_counts[DangerTier.HIGH],
        high_danger_goals=hd_goals,
        high_danger_saves=hd_saves,
        high_danger_save_share=hd_saves / hd_on_goal if hd_on_goal else None,
        low_danger_shots_against=tier_counts[DangerTier.LOW],
        shot_suppression_rating=_suppression_rating(total, tier_counts[DangerTier.HIGH], xg_total),
        goals_saved_above_expected=calculate_goals_saved_above_expected(goals, xg_total),
        zones=zones,
        slot=slot,
    )


def _rank_lower_is_better(diff: float, elite: float, good: float) -> LeagueRank:
    if diff < -elite:
        return LeagueRank.ELITE
    if diff < -good:
        return LeagueRank.ABOVE_AVERAGE
    if diff < good:
        return LeagueRank.AVERAGE
    if diff < elite:
        return LeagueRank.BELOW_AVERAGE
    return LeagueRank.POOR


def compare_defense_to_league(analytics: DefensiveAnalytics, games: int = 1) -> LeagueComparison:
    """Rank defensive results against approximate league averages.

    Args:
        analytics: Defensive analytics to rank
        games: Number of games the analytics cover, used to put slot shots
            on a per-game basis

    Returns:
        LeagueComparison with one rank per dimension
    """
    games = max(games, 1)
    slot_shots = analytics.slot.slot_shots_allowed if analytics.slot else 0
    slot_rank = _rank_lower_is_better(
        slot_shots / games - LEAGUE_AVG_SLOT_SHOTS_PER_GAME, elite=5.0, good=2.0
    )

    rating = analytics.shot_suppression_rating
    if rating > 70:
        suppression_rank = LeagueRank.ELITE
    elif rating > 60:
        suppression_rank = LeagueRank.ABOVE_AVERAGE
    elif rating > 40:
        suppression_rank = LeagueRank.AVERAGE
    elif rating > 30:
        suppression_rank = LeagueRank.BELOW_AVERAGE
    else:
        suppression_rank = LeagueRank.POOR

    # More blocks is better, so rank the negated difference
    block_rank = _rank_lower_is_better(
        LEAGUE_AVG_BLOCK_PCT - analytics.block_rate * 100.0, elite=5.0, good=2.0
    )

    return LeagueComparison(
        slot_protection_rank=slot_rank,
        shot_suppression_rank=suppression_rank,
        block_rate_rank=block_rank,
    )
