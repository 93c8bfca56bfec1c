"""Advisory checks for match events and rosters.

Nothing here raises on bad data: problems are returned to the caller,
which decides whether to block persistence.
"""

from typing import Iterable, Optional

from .models import (
    RED,
    TEAM_SIZE,
    YELLOW,
    GoalEvent,
    Match,
    MatchEvent,
    OwnGoalEvent,
    opposing_team,
)


def _team_lookup(yellow_player_ids: Iterable[str], red_player_ids: Iterable[str]) -> dict[str, str]:
    lookup = {pid: YELLOW for pid in yellow_player_ids}
    for pid in red_player_ids:
        # A player listed on both sides stays yellow here; validate_match reports the overlap.
        lookup.setdefault(pid, RED)
    return lookup


def _is_valid(event: MatchEvent, teams: dict[str, str]) -> bool:
    actor_team = teams.get(event.player_id)
    if actor_team is None:
        return False

    assist_id = getattr(event, "assist_player_id", None)
    if assist_id is None:
        return True

    assist_team = teams.get(assist_id)
    if isinstance(event, GoalEvent):
        return assist_team == actor_team
    if isinstance(event, OwnGoalEvent):
        return assist_team == opposing_team(actor_team)
    return True


def validate_events(
    events: Iterable[MatchEvent],
    yellow_player_ids: Iterable[str],
    red_player_ids: Iterable[str],
) -> list[MatchEvent]:
    """Return the events that reference players or assists inconsistent with the rosters.

    An event is invalid when its player is on neither roster, when a goal is
    assisted by someone outside the scorer's team, or when an own goal is
    assisted by someone outside the team that benefits from it.
    """
    teams = _team_lookup(yellow_player_ids, red_player_ids)
    return [event for event in events if not _is_valid(event, teams)]


def _describe(event: MatchEvent) -> str:
    assist: Optional[str] = getattr(event, "assist_player_id", None)
    text = f"{event.type} by {event.player_id} ({event.team})"
    if assist:
        text += f" assisted by {assist}"
    return text


def validate_match(match: Match) -> list[str]:
    """Return human-readable problems with a match; an empty list means it is valid."""
    problems: list[str] = []

    if match.yellow_team is None:
        problems.append("Yellow team is missing")
    if match.red_team is None:
        problems.append("Red team is missing")
    if problems:
        return problems

    yellow_ids = match.yellow_team.player_ids
    red_ids = match.red_team.player_ids

    for color, ids in ((YELLOW, yellow_ids), (RED, red_ids)):
        if len(ids) != TEAM_SIZE:
            problems.append(f"{color.capitalize()} team must have exactly {TEAM_SIZE} players (has {len(ids)})")
        if len(set(ids)) != len(ids):
            problems.append(f"{color.capitalize()} team lists a player more than once")

    overlap = sorted(set(yellow_ids) & set(red_ids))
    if overlap:
        problems.append(f"Players on both teams: {', '.join(overlap)}")

    if match.man_of_the_match and match.man_of_the_match not in set(yellow_ids) | set(red_ids):
        problems.append(f"Man of the Match {match.man_of_the_match} did not play in this match")

    for event in validate_events(match.events, yellow_ids, red_ids):
        problems.append(f"Invalid event: {_describe(event)}")

    return problems
