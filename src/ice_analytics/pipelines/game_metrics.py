"""Per-game metrics for a player or team.

Reduces one game's shots and events into a single `GameMetrics` record:
attempts at each quality tier (all attempts, unblocked, on goal), goals and
xG for and against, plus the subject's own scoring.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from ice_analytics.events import GOAL, GameFeed, ShotEvent
from ice_analytics.features.context import DEFAULT_CONTEXT, ContextParams
from ice_analytics.modeling.xg_model import DEFAULT_COEFFICIENTS, XGCoefficients, score_shot


class SubjectKind(str, Enum):
    PLAYER = "player"
    TEAM = "team"


@dataclass(frozen=True)
class Subject:
    """Who the metrics are computed for.

    For a team subject `subject_id` equals `team_id`.
    """

    subject_id: int
    team_id: int
    kind: SubjectKind = SubjectKind.PLAYER

    @classmethod
    def player(cls, player_id: int, team_id: int) -> "Subject":
        return cls(player_id, team_id, SubjectKind.PLAYER)

    @classmethod
    def team(cls, team_id: int) -> "Subject":
        return cls(team_id, team_id, SubjectKind.TEAM)


@dataclass(frozen=True)
class GameMetrics:
    game_id: int
    date: str
    subject_id: int
    goals: int
    assists: int
    points: int
    shots_for: int
    shots_against: int
    shot_attempts_for: int
    shot_attempts_against: int
    unblocked_for: int
    unblocked_against: int
    xg_for: float
    xg_against: float
    goals_for: int
    goals_against: int
    toi: float = 0.0


def _player_on_ice(feed: GameFeed, shot: ShotEvent, subject: Subject) -> bool:
    if shot.home_on_ice or shot.away_on_ice:
        side = shot.home_on_ice if feed.is_home(subject.team_id) else shot.away_on_ice
        return subject.subject_id in side

    return any(
        shift.player_id == subject.subject_id
        and shift.covers(shot.period, shot.period_seconds)
        for shift in feed.shifts
    )


def filter_subject_shots(
    feed: GameFeed, subject: Subject
) -> Tuple[List[ShotEvent], List[ShotEvent]]:
    """Split a game's shots into (for, against) from the subject's view.

    Players only see shots taken while they were on the ice; teams see every
    shot of the game.
    """
    shots_for: List[ShotEvent] = []
    shots_against: List[ShotEvent] = []

    for shot in feed.shots:
        if subject.kind is SubjectKind.PLAYER and not _player_on_ice(feed, shot, subject):
            continue
        if shot.team_id == subject.team_id:
            shots_for.append(shot)
        else:
            shots_against.append(shot)

    return shots_for, shots_against


def _subject_scoring(feed: GameFeed, subject: Subject) -> Tuple[int, int]:
    goal_events = [event for event in feed.events if event.type_key == GOAL]

    if subject.kind is SubjectKind.TEAM:
        team_goals = [event for event in goal_events if event.team_id == subject.team_id]
        return len(team_goals), sum(len(event.assist_ids) for event in team_goals)

    goals = sum(1 for event in goal_events if event.player_id == subject.subject_id)
    assists = sum(1 for event in goal_events if subject.subject_id in event.assist_ids)
    return goals, assists


def aggregate_game_metrics(
    feed: GameFeed,
    subject: Subject,
    coefficients: XGCoefficients = DEFAULT_COEFFICIENTS,
    context: ContextParams = DEFAULT_CONTEXT,
) -> GameMetrics:
    """Compute the per-game metrics record for a subject.

    The computation is a pure function of the feed: calling it twice on the
    same feed returns identical records.

    Args:
        feed: Normalized game feed
        subject: Player or team to evaluate
        coefficients: xG model coefficients
        context: Rebound / rush windows for xG features

    Returns:
        GameMetrics for the subject in this game
    """
    shots_for, shots_against = filter_subject_shots(feed, subject)
    goals, assists = _subject_scoring(feed, subject)

    def total_xg(shots: List[ShotEvent]) -> float:
        return sum(score_shot(shot, feed.events, coefficients, context).x_goal for shot in shots)

    return GameMetrics(
        game_id=feed.game_id,
        date=feed.game_date,
        subject_id=subject.subject_id,
        goals=goals,
        assists=assists,
        points=goals + assists,
        shots_for=sum(1 for shot in shots_for if shot.result.on_goal),
        shots_against=sum(1 for shot in shots_against if shot.result.on_goal),
        shot_attempts_for=len(shots_for),
        shot_attempts_against=len(shots_against),
        unblocked_for=sum(1 for shot in shots_for if shot.result.unblocked),
        unblocked_against=sum(1 for shot in shots_against if shot.result.unblocked),
        xg_for=total_xg(shots_for),
        xg_against=total_xg(shots_against),
        goals_for=sum(1 for shot in shots_for if shot.is_goal),
        goals_against=sum(1 for shot in shots_against if shot.is_goal),
    )
