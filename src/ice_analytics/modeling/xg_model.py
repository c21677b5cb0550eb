"""Expected-goals (xG) model.

A logistic curve over shot distance and angle, scaled by shot-type and
strength multipliers, plus flat rebound/rush bonuses in probability space.
The result is clamped to a reasonable range and bucketed into a danger tier.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence, Type, Union

from ice_analytics.events import GameEvent, ShotEvent
from ice_analytics.features.context import (
    DEFAULT_CONTEXT,
    ContextParams,
    ShotType,
    Strength,
    XGFeatures,
    build_xg_features,
)
from ice_analytics.features.rink import HIGH_DANGER_MAX_ANGLE, HIGH_DANGER_MAX_DISTANCE

MAX_DISTANCE = 200.0
MAX_ANGLE = 90.0


class DangerTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class XGCoefficients:
    """Model coefficients, multipliers, bonuses, clamp bounds and tier cut-offs."""

    intercept: float = -0.5
    distance: float = -0.045
    angle: float = -0.025
    shot_type_multipliers: Mapping[ShotType, float] = field(
        default_factory=lambda: _frozen(
            {
                ShotType.WRIST: 1.0,
                ShotType.SLAP: 0.85,
                ShotType.SNAP: 1.05,
                ShotType.BACKHAND: 0.80,
                ShotType.TIP: 1.35,
                ShotType.WRAP: 0.70,
            }
        )
    )
    strength_multipliers: Mapping[Strength, float] = field(
        default_factory=lambda: _frozen(
            {
                Strength.EVEN: 1.0,
                Strength.POWER_PLAY: 1.10,
                Strength.SHORT_HANDED: 0.90,
                Strength.FOUR_ON_FOUR: 1.05,
                Strength.THREE_ON_THREE: 1.08,
            }
        )
    )
    rebound_bonus: float = 0.05
    rush_bonus: float = 0.0
    min_reasonable: float = 0.005
    max_reasonable: float = 0.60
    high_danger_threshold: float = 0.15
    medium_danger_threshold: float = 0.08


DEFAULT_COEFFICIENTS = XGCoefficients()


@dataclass(frozen=True)
class XGPrediction:
    x_goal: float
    danger_tier: DangerTier
    features: XGFeatures


@dataclass(frozen=True)
class XGDifferential:
    xg_for: float
    xg_against: float
    xg_diff: float
    xg_pct: float


def _lookup_multiplier(
    table: Mapping, enum_cls: Type[Enum], value: Union[Enum, str, None]
) -> float:
    """Multiplier for a category; 1.0 for anything outside the enumeration."""
    try:
        key = value if isinstance(value, enum_cls) else enum_cls(value)
    except ValueError:
        return 1.0
    return table.get(key, 1.0)


def _sigmoid(logit: float) -> float:
    if logit >= 0:
        return 1.0 / (1.0 + math.exp(-logit))
    exp_logit = math.exp(logit)
    return exp_logit / (1.0 + exp_logit)


def danger_tier_for(x_goal: float, coefficients: XGCoefficients = DEFAULT_COEFFICIENTS) -> DangerTier:
    """Bucket a probability into a danger tier."""
    if x_goal >= coefficients.high_danger_threshold:
        return DangerTier.HIGH
    if x_goal >= coefficients.medium_danger_threshold:
        return DangerTier.MEDIUM
    return DangerTier.LOW


def calculate_xg(
    features: XGFeatures, coefficients: XGCoefficients = DEFAULT_COEFFICIENTS
) -> XGPrediction:
    """Score a single shot.

    Args:
        features: Shot features
        coefficients: Model coefficients and bounds

    Returns:
        Clamped goal probability with its danger tier
    """
    distance = features.distance
    angle = features.angle
    if distance is None or not math.isfinite(distance):
        distance = MAX_DISTANCE
    if angle is None or not math.isfinite(angle):
        angle = 0.0
    distance = min(max(distance, 0.0), MAX_DISTANCE)
    angle = min(max(angle, 0.0), MAX_ANGLE)

    if distance == 0.0:
        # At the net the angle formula degenerates; treat as the most dangerous shot
        x_goal = coefficients.max_reasonable
    else:
        logit = coefficients.intercept + distance * coefficients.distance + angle * coefficients.angle
        probability = _sigmoid(logit)
        probability *= _lookup_multiplier(
            coefficients.shot_type_multipliers, ShotType, features.shot_type
        )
        probability *= _lookup_multiplier(
            coefficients.strength_multipliers, Strength, features.strength
        )
        if features.is_rebound:
            probability += coefficients.rebound_bonus
        if features.is_rush:
            probability += coefficients.rush_bonus
        x_goal = min(max(probability, coefficients.min_reasonable), coefficients.max_reasonable)

    return XGPrediction(
        x_goal=x_goal,
        danger_tier=danger_tier_for(x_goal, coefficients),
        features=features,
    )


def calculate_batch_xg(
    shots: Iterable[XGFeatures], coefficients: XGCoefficients = DEFAULT_COEFFICIENTS
) -> List[XGPrediction]:
    return [calculate_xg(shot, coefficients) for shot in shots]


def calculate_total_xg(
    shots: Iterable[XGFeatures], coefficients: XGCoefficients = DEFAULT_COEFFICIENTS
) -> float:
    return sum(calculate_xg(shot, coefficients).x_goal for shot in shots)


def xg_share(xg_for: float, xg_against: float) -> float:
    """xG-for share in percent; 50 when neither side generated anything."""
    total = xg_for + xg_against
    return 100.0 * xg_for / total if total > 0 else 50.0


def calculate_xg_differential(
    shots_for: Iterable[XGFeatures],
    shots_against: Iterable[XGFeatures],
    coefficients: XGCoefficients = DEFAULT_COEFFICIENTS,
) -> XGDifferential:
    xg_for = calculate_total_xg(shots_for, coefficients)
    xg_against = calculate_total_xg(shots_against, coefficients)
    return XGDifferential(
        xg_for=xg_for,
        xg_against=xg_against,
        xg_diff=xg_for - xg_against,
        xg_pct=xg_share(xg_for, xg_against),
    )


def is_high_danger_location(features: XGFeatures) -> bool:
    """Location-only high danger test (close and not too wide)."""
    return (
        features.distance < HIGH_DANGER_MAX_DISTANCE
        and features.angle < HIGH_DANGER_MAX_ANGLE
    )


def calculate_goals_above_expected(
    actual_goals: int,
    shots: Iterable[XGFeatures],
    coefficients: XGCoefficients = DEFAULT_COEFFICIENTS,
) -> float:
    """Actual goals minus expected goals; positive means finishing above expectation."""
    return actual_goals - calculate_total_xg(shots, coefficients)


def score_shot(
    shot: ShotEvent,
    events: Optional[Sequence[GameEvent]] = None,
    coefficients: XGCoefficients = DEFAULT_COEFFICIENTS,
    context: ContextParams = DEFAULT_CONTEXT,
) -> XGPrediction:
    """Derive features for a shot from its game context and score it."""
    return calculate_xg(build_xg_features(shot, events, context), coefficients)
