"""Geometric feature calculations for shots and skater movement."""

import math
from typing import Tuple

import numpy as np

from ice_analytics.features.rink import (
    BLUE_LINE_X,
    NET_X,
    RINK_HALF_LENGTH,
    RINK_HALF_WIDTH,
    SLOT_HALF_WIDTH,
    SLOT_MAX_X,
    SLOT_MIN_X,
)

TWO_PI = 2 * math.pi


def net_x_for(x: float) -> float:
    """Get the x coordinate of the net a shot from `x` is aimed at.

    Shots from the positive half attack the net at +89, shots from the
    negative half attack the net at -89.
    """
    return NET_X if x >= 0 else -NET_X


def calculate_distance(x: float, y: float) -> float:
    """Calculate distance in feet from (x, y) to the attacked net.

    Args:
        x: X coordinate of shot
        y: Y coordinate of shot

    Returns:
        Euclidean distance to the net
    """
    net_x = net_x_for(x)
    return float(np.sqrt((x - net_x) ** 2 + y**2))


def calculate_shot_angle(x: float, y: float) -> float:
    """Calculate shot angle from the net's perspective.

    0 degrees is straight in front of the net; the angle grows towards 90 as
    the shot moves to the side. On the goal line with a lateral offset the
    angle is 90; exactly at the net it is 0.

    Args:
        x: X coordinate of shot
        y: Y coordinate of shot

    Returns:
        Angle in degrees in [0, 90]
    """
    net_x = net_x_for(x)
    from_goal_line = abs(net_x - x)
    lateral = abs(y)

    if from_goal_line == 0:
        return 90.0 if lateral > 0 else 0.0

    return float(np.degrees(np.arctan(lateral / from_goal_line)))


def calculate_shot_metrics(x: float, y: float) -> Tuple[float, float]:
    """Calculate (distance, angle) for a shot location."""
    return calculate_distance(x, y), calculate_shot_angle(x, y)


def is_slot(x: float, y: float) -> bool:
    """Check whether a location is in the slot at either end of the ice."""
    return SLOT_MIN_X <= abs(x) <= SLOT_MAX_X and abs(y) <= SLOT_HALF_WIDTH


def in_slot_x_range(x: float) -> bool:
    """Check whether an x coordinate lies within the slot's depth range."""
    return SLOT_MIN_X <= abs(x) <= SLOT_MAX_X


def zone_side(x: float) -> str:
    """Classify an x coordinate as 'positive', 'negative' or 'neutral' ice."""
    if x > BLUE_LINE_X:
        return "positive"
    if x < -BLUE_LINE_X:
        return "negative"
    return "neutral"


def relative_zone(x: float, attacking_x: float) -> str:
    """Classify a location relative to an attacking direction.

    Args:
        x: X coordinate to classify
        attacking_x: Any x coordinate on the attacked half (its sign sets
            the direction of attack)

    Returns:
        'offensive', 'neutral' or 'defensive'
    """
    direction = 1.0 if attacking_x >= 0 else -1.0
    relative_x = x * direction
    if relative_x > BLUE_LINE_X:
        return "offensive"
    if relative_x < -BLUE_LINE_X:
        return "defensive"
    return "neutral"


def normalize_coordinates(x: float, y: float) -> Tuple[float, float]:
    """Map feed coordinates onto a 0-100 chart frame for both axes."""
    norm_x = (x + RINK_HALF_LENGTH) / (2 * RINK_HALF_LENGTH) * 100
    norm_y = (y + RINK_HALF_WIDTH) / (2 * RINK_HALF_WIDTH) * 100
    return (
        float(np.clip(norm_x, 0.0, 100.0)),
        float(np.clip(norm_y, 0.0, 100.0)),
    )


def calculate_direction(x1: float, y1: float, x2: float, y2: float) -> float:
    """Heading in radians of the movement from (x1, y1) to (x2, y2)."""
    return float(np.arctan2(y2 - y1, x2 - x1))


def calculate_speed(
    x1: float, y1: float, t1: float, x2: float, y2: float, t2: float
) -> float:
    """Speed in feet per second between two timestamped points (seconds)."""
    elapsed = t2 - t1
    if elapsed <= 0:
        return 0.0
    return float(np.hypot(x2 - x1, y2 - y1) / elapsed)


def normalize_angle(angle: float) -> float:
    """Normalize an angle in radians to [0, 2*pi)."""
    normalized = math.fmod(angle, TWO_PI)
    if normalized < 0:
        normalized += TWO_PI
    # fmod of a tiny negative value can round up to exactly 2*pi
    if normalized >= TWO_PI:
        normalized = 0.0
    return normalized
