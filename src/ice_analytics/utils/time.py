"""Time utilities for the ice analytics project."""

from typing import Optional

PERIOD_LENGTH_SECONDS = 1200


def parse_clock(time_str: Optional[str]) -> Optional[float]:
    """Parse a period clock string to seconds.

    Args:
        time_str: Clock string in "MM:SS" format (e.g., "12:30")

    Returns:
        Seconds as float, or None when the string cannot be parsed
    """
    if not time_str or not isinstance(time_str, str):
        return None

    parts = time_str.strip().split(":")
    if len(parts) != 2:
        return None

    try:
        minutes = int(parts[0])
        seconds = float(parts[1])
    except ValueError:
        return None

    if minutes < 0 or seconds < 0 or seconds >= 60:
        return None

    return minutes * 60 + seconds


def format_clock(total_seconds: float) -> str:
    """Convert seconds to a "MM:SS" clock string.

    Args:
        total_seconds: Seconds elapsed in the period

    Returns:
        Clock string (e.g., 750 -> "12:30")
    """
    whole = int(total_seconds)
    minutes, seconds = divmod(whole, 60)
    return f"{minutes}:{seconds:02d}"


def to_game_seconds(period: int, period_seconds: float) -> float:
    """Convert a (period, seconds-in-period) pair to total game seconds.

    Args:
        period: Period number (1-based)
        period_seconds: Seconds elapsed in the period

    Returns:
        Total seconds elapsed in the game
    """
    return (period - 1) * PERIOD_LENGTH_SECONDS + period_seconds


def period_for_game_seconds(game_seconds: float) -> int:
    """Get the period number containing a game time."""
    return int(game_seconds // PERIOD_LENGTH_SECONDS) + 1
