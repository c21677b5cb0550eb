"""Pytest configuration and fixtures."""

import json
import sys
from pathlib import Path

import pytest


# Ensure the src directory is on the path so that the
# `ice_analytics` package can be imported in tests.
SRC_ROOT = Path(__file__).parent.parent / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from ice_analytics.events import normalize_game_feed


HOME_TEAM_ID = 1
AWAY_TEAM_ID = 2

_SHOOTER_KEYS = {
    "goal": "scoringPlayerId",
    "shot-on-goal": "shootingPlayerId",
    "missed-shot": "shootingPlayerId",
    "blocked-shot": "shootingPlayerId",
}


def build_play(
    event_id,
    type_key,
    clock="00:00",
    period=1,
    x=None,
    y=None,
    team_id=None,
    player_id=None,
    situation_code=None,
    home_on_ice=None,
    away_on_ice=None,
    **details,
):
    """Build one raw play in the gamecenter play-by-play layout."""
    raw_details = dict(details)
    if x is not None:
        raw_details["xCoord"] = x
    if y is not None:
        raw_details["yCoord"] = y
    if team_id is not None:
        raw_details["eventOwnerTeamId"] = team_id
    if player_id is not None:
        raw_details[_SHOOTER_KEYS.get(type_key, "playerId")] = player_id

    play = {
        "eventId": event_id,
        "periodDescriptor": {"number": period},
        "timeInPeriod": clock,
        "typeDescKey": type_key,
        "details": raw_details,
    }
    if situation_code is not None:
        play["situationCode"] = situation_code
    if home_on_ice is not None:
        play["homePlayersOnIce"] = list(home_on_ice)
    if away_on_ice is not None:
        play["awayPlayersOnIce"] = list(away_on_ice)
    return play


def build_payload(plays, game_id=2023020001, game_date="2023-10-10", shifts=None):
    payload = {
        "id": game_id,
        "gameDate": game_date,
        "homeTeam": {"id": HOME_TEAM_ID, "abbrev": "HOM"},
        "awayTeam": {"id": AWAY_TEAM_ID, "abbrev": "AWY"},
        "plays": plays,
    }
    if shifts is not None:
        payload["shifts"] = shifts
    return payload


@pytest.fixture
def make_play():
    """Factory for raw plays."""
    return build_play


@pytest.fixture
def make_feed():
    """Factory turning a list of raw plays into a normalized game feed."""

    def _make(plays, game_id=2023020001, game_date="2023-10-10", shifts=None):
        return normalize_game_feed(build_payload(plays, game_id, game_date, shifts))

    return _make


@pytest.fixture
def sample_raw_game():
    """A short first period: a breakaway shot, a hit, a missed shot and a goal.

    One play has no event id and is expected to be skipped.
    """
    home_skaters = [11, 12, 13, 14, 15]
    away_skaters = [21, 22, 23, 24, 25]
    on_ice = {"home_on_ice": home_skaters, "away_on_ice": away_skaters}

    plays = [
        build_play(1, "period-start"),
        build_play(2, "faceoff", "00:00", x=0.0, y=0.0, team_id=1, winningPlayerId=11),
        build_play(3, "takeaway", "00:05", x=-60.0, y=5.0, team_id=1, player_id=11),
        build_play(
            4, "shot-on-goal", "00:08", x=80.0, y=4.0, team_id=1, player_id=11,
            situation_code="1551", shotType="wrist", goalieInNetId=30, **on_ice,
        ),
        build_play(5, "hit", "00:20", x=-40.0, y=30.0, team_id=2, hittingPlayerId=21),
        build_play(
            6, "missed-shot", "00:40", x=-70.0, y=-10.0, team_id=2, player_id=22,
            situation_code="1551", shotType="slap", **on_ice,
        ),
        build_play(
            7, "goal", "01:10", x=75.0, y=-15.0, team_id=1, player_id=12,
            situation_code="1551", shotType="snap", assist1PlayerId=11, **on_ice,
        ),
        {"periodDescriptor": {"number": 1}, "timeInPeriod": "01:30", "typeDescKey": "stoppage"},
        build_play(9, "period-end", "20:00"),
    ]
    return build_payload(plays)


@pytest.fixture
def sample_feed(sample_raw_game):
    return normalize_game_feed(sample_raw_game)


@pytest.fixture
def feed_dir(tmp_path, sample_raw_game):
    """A game feed directory holding two stored games."""
    games = tmp_path / "games"
    games.mkdir()
    for game_id in (2023020001, 2023020002):
        payload = dict(sample_raw_game, id=game_id)
        with open(games / f"{game_id}.json", "w", encoding="utf-8") as f:
            json.dump(payload, f)
    return games
