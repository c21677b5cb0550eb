"""Event classifiers for a single game's play-by-play stream.

Each classifier is a pure function over the chronological event list and
returns a (possibly empty) list of classified events plus a summary helper.
"""

from .defense import analyze_defensive_coverage, compare_defense_to_league
from .momentum import analyze_momentum
from .movement import calculate_movement_fingerprint, compare_fingerprints, samples_from_trail
from .possession import possession_timeline
from .royal_road import calculate_royal_road_analytics, detect_royal_road_passes
from .rush import calculate_rush_analytics, detect_missed_rush_opportunities, detect_rush_attacks
from .zone_entries import calculate_zone_analytics, detect_zone_entries, detect_zone_exits

__all__ = [
    "analyze_defensive_coverage",
    "compare_defense_to_league",
    "analyze_momentum",
    "calculate_movement_fingerprint",
    "compare_fingerprints",
    "samples_from_trail",
    "possession_timeline",
    "calculate_royal_road_analytics",
    "detect_royal_road_passes",
    "calculate_rush_analytics",
    "detect_missed_rush_opportunities",
    "detect_rush_attacks",
    "calculate_zone_analytics",
    "detect_zone_entries",
    "detect_zone_exits",
]
