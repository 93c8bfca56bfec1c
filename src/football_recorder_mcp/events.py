"""Event-derived match facts: scores, clean sheets and finalization."""

from dataclasses import replace
from typing import Iterable, Optional

from .models import (
    RED,
    YELLOW,
    CleanSheetEvent,
    GoalEvent,
    Match,
    MatchEvent,
    OwnGoalEvent,
    Team,
)


def derive_scores(events: Iterable[MatchEvent]) -> tuple[int, int]:
    """Compute ``(yellow_score, red_score)`` from a match event log.

    A goal counts for the scorer's team, an own goal counts for the
    opposing team. Clean sheets carry no score information.
    """
    scores = {YELLOW: 0, RED: 0}
    for event in events:
        if isinstance(event, GoalEvent):
            scores[event.team] += 1
        elif isinstance(event, OwnGoalEvent):
            scores[event.benefiting_team] += 1
    return scores[YELLOW], scores[RED]


def generate_clean_sheets(
    yellow_player_ids: Iterable[str],
    red_player_ids: Iterable[str],
    yellow_score: int,
    red_score: int,
) -> list[CleanSheetEvent]:
    """Create clean-sheet events for every team that conceded nothing.

    Called once with the final scores. A 0-0 draw credits both teams.
    """
    clean_sheets: list[CleanSheetEvent] = []

    if red_score == 0:
        clean_sheets.extend(CleanSheetEvent(player_id=pid, team=YELLOW) for pid in yellow_player_ids)

    if yellow_score == 0:
        clean_sheets.extend(CleanSheetEvent(player_id=pid, team=RED) for pid in red_player_ids)

    return clean_sheets


def finalize_match(match: Match) -> Match:
    """Return a copy of ``match`` with scores and clean sheets rebuilt from its events.

    Existing clean-sheet events are discarded first, so finalizing an already
    finalized match gives the same result.
    """
    user_events = [e for e in match.events if not isinstance(e, CleanSheetEvent)]
    yellow_score, red_score = derive_scores(user_events)

    yellow_ids = match.yellow_team.player_ids if match.yellow_team else []
    red_ids = match.red_team.player_ids if match.red_team else []
    clean_sheets = generate_clean_sheets(yellow_ids, red_ids, yellow_score, red_score)

    return replace(
        match,
        yellow_team=Team(player_ids=list(yellow_ids), score=yellow_score),
        red_team=Team(player_ids=list(red_ids), score=red_score),
        events=user_events + clean_sheets,
    )


def get_player_team(match: Match, player_id: str) -> Optional[str]:
    """Return the color the player played for in ``match``, or None."""
    if match.yellow_team and player_id in match.yellow_team.player_ids:
        return YELLOW
    if match.red_team and player_id in match.red_team.player_ids:
        return RED
    return None


def did_player_win(match: Match, player_id: str) -> Optional[bool]:
    """Whether the player's team won; None if they did not play or the match is incomplete."""
    team = get_player_team(match, player_id)
    if team is None or not match.is_complete:
        return None

    yellow_score = match.yellow_team.score
    red_score = match.red_team.score
    if team == YELLOW:
        return yellow_score > red_score
    return red_score > yellow_score
