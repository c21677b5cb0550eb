"""Test movement fingerprints."""

import math

import numpy as np
import pytest
from ice_analytics.analysis.movement import (
    MovementSample,
    TrailPoint,
    bucket_center,
    bucket_index,
    calculate_movement_fingerprint,
    compare_fingerprints,
    samples_from_trail,
)


@pytest.mark.parametrize("bucket_count", [8, 16])
def test_frequencies_sum_to_one(bucket_count):
    """Test that bucket frequencies of a non-empty fingerprint sum to 1."""
    rng = np.random.default_rng(42)
    samples = [
        MovementSample(heading=float(h), speed=float(s))
        for h, s in zip(rng.uniform(-10, 10, 500), rng.uniform(0, 30, 500))
    ]
    fingerprint = calculate_movement_fingerprint(samples, bucket_count)

    assert len(fingerprint.buckets) == bucket_count
    assert sum(b.frequency for b in fingerprint.buckets) == pytest.approx(1.0, abs=1e-9)
    assert fingerprint.total_samples == 500
    assert sum(b.total_count for b in fingerprint.buckets) == 500


def test_invalid_bucket_count():
    with pytest.raises(ValueError):
        calculate_movement_fingerprint([], bucket_count=12)


def test_empty_fingerprint():
    fingerprint = calculate_movement_fingerprint([], bucket_count=8)
    assert fingerprint.total_samples == 0
    assert all(b.frequency == 0.0 for b in fingerprint.buckets)
    assert fingerprint.dominant_direction == 0.0


def test_dominant_direction():
    samples = [MovementSample(0.1, 10.0, game_id=1), MovementSample(0.2, 20.0, game_id=2)]
    fingerprint = calculate_movement_fingerprint(samples, bucket_count=16)

    assert fingerprint.dominant_direction == pytest.approx(math.pi / 16)
    assert fingerprint.buckets[0].avg_speed == pytest.approx(15.0)
    assert fingerprint.avg_overall_speed == pytest.approx(15.0)
    assert fingerprint.games_analyzed == 2


def test_balanced_movement_has_zero_direction():
    samples = [MovementSample(0.1, 10.0), MovementSample(0.1 + math.pi, 10.0)]
    fingerprint = calculate_movement_fingerprint(samples, bucket_count=16)
    assert fingerprint.dominant_direction == 0.0


def test_min_speed_filter():
    samples = [MovementSample(0.1, 1.0), MovementSample(1.0, 10.0)]
    fingerprint = calculate_movement_fingerprint(samples, bucket_count=8, min_speed=5.0)
    assert fingerprint.total_samples == 1
    assert fingerprint.buckets[bucket_index(1.0, 8)].frequency == 1.0


def test_bucket_index():
    assert bucket_index(0.0, 8) == 0
    assert bucket_index(-0.01, 8) == 7
    assert bucket_index(2 * math.pi, 16) == 0
    assert bucket_center(0, 8) == pytest.approx(math.pi / 8)


def test_samples_from_trail():
    points = [TrailPoint(0, 0, 0.0), TrailPoint(3, 4, 1.0), TrailPoint(3, 4, 1.0), TrailPoint(3, 0, 2.0)]
    samples = samples_from_trail(points, game_id=7)

    assert len(samples) == 2
    assert samples[0].speed == pytest.approx(5.0)
    assert samples[1].heading == pytest.approx(-math.pi / 2)
    assert samples[1].game_id == 7


def test_compare_fingerprints():
    east = calculate_movement_fingerprint([MovementSample(0.1, 5.0)], 16)
    north = calculate_movement_fingerprint([MovementSample(math.pi / 2 + 0.1, 5.0)], 16)

    assert compare_fingerprints(east, east) == pytest.approx(100.0)
    assert compare_fingerprints(east, north) == pytest.approx(87.5)

    with pytest.raises(ValueError):
        compare_fingerprints(east, calculate_movement_fingerprint([], 8))
