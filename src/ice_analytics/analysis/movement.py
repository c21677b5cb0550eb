"""Movement fingerprints: directional skating histograms."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

import numpy as np

from ice_analytics.features.geometry import (
    TWO_PI,
    calculate_direction,
    calculate_speed,
    normalize_angle,
)

VALID_BUCKET_COUNTS = (8, 16)

# Below this magnitude the weighted heading sum is treated as zero
_VECTOR_EPSILON = 1e-12


@dataclass(frozen=True)
class TrailPoint:
    x: float
    y: float
    t: float


@dataclass(frozen=True)
class MovementSample:
    heading: float
    speed: float
    game_id: Optional[int] = None


@dataclass(frozen=True)
class DirectionalBucket:
    direction: float
    frequency: float
    avg_speed: float
    total_count: int


@dataclass(frozen=True)
class MovementFingerprint:
    bucket_count: int
    buckets: List[DirectionalBucket] = field(default_factory=list)
    dominant_direction: float = 0.0
    avg_overall_speed: float = 0.0
    total_samples: int = 0
    games_analyzed: int = 0


def bucket_index(heading: float, bucket_count: int) -> int:
    """Sector index of a heading in radians."""
    size = TWO_PI / bucket_count
    return int(math.floor(normalize_angle(heading) / size)) % bucket_count


def bucket_center(index: int, bucket_count: int) -> float:
    return (index + 0.5) * TWO_PI / bucket_count


def samples_from_trail(
    points: Sequence[TrailPoint], game_id: Optional[int] = None
) -> List[MovementSample]:
    """Derive heading/speed samples from consecutive timestamped positions.

    Pairs without forward time progress are skipped.
    """
    samples: List[MovementSample] = []
    for start, end in zip(points, points[1:]):
        if end.t <= start.t:
            continue
        samples.append(
            MovementSample(
                heading=calculate_direction(start.x, start.y, end.x, end.y),
                speed=calculate_speed(start.x, start.y, start.t, end.x, end.y, end.t),
                game_id=game_id,
            )
        )
    return samples


def calculate_movement_fingerprint(
    samples: Iterable[MovementSample],
    bucket_count: int = 16,
    min_speed: float = 0.0,
) -> MovementFingerprint:
    """Bucket movement samples into a directional fingerprint.

    Args:
        samples: Heading (radians) and speed samples
        bucket_count: Number of angular sectors, 8 or 16
        min_speed: Samples slower than this are ignored

    Returns:
        MovementFingerprint whose bucket frequencies sum to 1 when any
        sample was used; an all-zero fingerprint otherwise

    Raises:
        ValueError: If bucket_count is not 8 or 16
    """
    if bucket_count not in VALID_BUCKET_COUNTS:
        raise ValueError(f"bucket_count must be 8 or 16, got {bucket_count}")

    counts = np.zeros(bucket_count, dtype=int)
    speed_sums = np.zeros(bucket_count, dtype=float)
    games = set()

    for sample in samples:
        if not (math.isfinite(sample.heading) and math.isfinite(sample.speed)):
            continue
        if sample.speed < min_speed:
            continue
        index = bucket_index(sample.heading, bucket_count)
        counts[index] += 1
        speed_sums[index] += sample.speed
        if sample.game_id is not None:
            games.add(sample.game_id)

    centers = np.array([bucket_center(i, bucket_count) for i in range(bucket_count)])
    total = int(counts.sum())

    if total == 0:
        buckets = [DirectionalBucket(float(c), 0.0, 0.0, 0) for c in centers]
        return MovementFingerprint(bucket_count=bucket_count, buckets=buckets)

    frequencies = counts / total
    avg_speeds = np.divide(
        speed_sums, counts, out=np.zeros(bucket_count), where=counts > 0
    )

    vector_x = float(np.sum(frequencies * np.cos(centers)))
    vector_y = float(np.sum(frequencies * np.sin(centers)))
    if math.hypot(vector_x, vector_y) < _VECTOR_EPSILON:
        dominant = 0.0
    else:
        dominant = normalize_angle(math.atan2(vector_y, vector_x))

    buckets = [
        DirectionalBucket(
            direction=float(centers[i]),
            frequency=float(frequencies[i]),
            avg_speed=float(avg_speeds[i]),
            total_count=int(counts[i]),
        )
        for i in range(bucket_count)
    ]

    return MovementFingerprint(
        bucket_count=bucket_count,
        buckets=buckets,
        dominant_direction=dominant,
        avg_overall_speed=float(speed_sums.sum() / total),
        total_samples=total,
        games_analyzed=len(games),
    )


def compare_fingerprints(first: MovementFingerprint, second: MovementFingerprint) -> float:
    """Similarity of two fingerprints in percent (100 = identical frequencies)."""
    if first.bucket_count != second.bucket_count:
        raise ValueError(
            f"Fingerprints must have the same bucket count "
            f"({first.bucket_count} != {second.bucket_count})"
        )
    a = np.array([b.frequency for b in first.buckets])
    b = np.array([b.frequency for b in second.buckets])
    return float(np.mean(1.0 - np.abs(a - b)) * 100.0)
