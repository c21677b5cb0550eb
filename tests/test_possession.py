"""Test the derived possession state machine."""

from ice_analytics.analysis.possession import (
    NEUTRAL,
    PossessionState,
    advance_possession,
    possession_timeline,
    resolve_teams,
)
from ice_analytics.events import GameEvent


def _event(event_id, type_key, team_id=None, seconds=0.0):
    return GameEvent(event_id, 1, seconds, type_key, team_id=team_id)


def test_possession_timeline():
    """Test control changes over a short sequence."""
    events = [
        _event(1, "period-start"),
        _event(2, "faceoff", 1),
        _event(3, "hit", 2),
        _event(4, "giveaway", 1),
        _event(5, "shot-on-goal", 2),
        _event(6, "takeaway", 1),
        _event(7, "stoppage"),
    ]
    states = [state.controlled_by for state in possession_timeline(events)]
    assert states == [None, 1, 1, 2, 2, 1, None]


def test_resolve_teams():
    events = [_event(1, "period-start"), _event(2, "hit", 7), _event(3, "hit", 7), _event(4, "hit", 3)]
    assert resolve_teams(events) == (7, 3)
    assert resolve_teams([_event(1, "hit", 7)]) == (7, None)
    assert resolve_teams([]) == (None, None)


def test_advance_possession():
    """Test single transitions."""
    teams = (1, 2)
    held = PossessionState(1)

    assert advance_possession(held, _event(1, "goal", 1), teams) is NEUTRAL
    assert advance_possession(held, _event(2, "penalty", 2), teams).is_neutral
    assert advance_possession(held, _event(3, "pass", 2), teams).controlled_by == 2
    assert advance_possession(held, _event(4, "blocked-shot", 2), teams).controlled_by == 2
    assert advance_possession(held, _event(5, "hit", 2), teams) == held

    # A giveaway by an unknown team cannot be resolved
    assert advance_possession(held, _event(6, "giveaway", 9), teams).is_neutral
    # Events without a team keep the state
    assert advance_possession(held, _event(7, "delayed-penalty"), teams) == held


def test_is_held_by_opponent_of():
    assert PossessionState(2).is_held_by_opponent_of(1)
    assert not PossessionState(1).is_held_by_opponent_of(1)
    assert not NEUTRAL.is_held_by_opponent_of(1)
