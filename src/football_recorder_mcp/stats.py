"""Player statistics aggregation and leaderboard ranking.

Provided utilities:
    - :func:`calculate_player_stats` - fold the match history into one
      :class:`PlayerStats` per non-guest player.
    - :func:`calculate_stats_for_player` - the same fold for a single player.
    - :func:`get_top_players` - rank stats by a metric with a deterministic
      tie-break.
    - :func:`summarize_dashboard` - totals and top-three lists for the home
      dashboard.

Every function is pure: the accumulator is a local dict created per call.
"""

import logging
from datetime import date
from typing import Iterable

from .exceptions import InvalidSortError
from .models import (
    CleanSheetEvent,
    DashboardSummary,
    GoalEvent,
    Match,
    OwnGoalEvent,
    Player,
    PlayerStats,
)

logger = logging.getLogger(__name__)

__all__ = [
    "SORTABLE_METRICS",
    "calculate_player_stats",
    "calculate_stats_for_player",
    "get_top_players",
    "summarize_dashboard",
]

# Wire name -> PlayerStats attribute.
SORTABLE_METRICS: dict[str, str] = {
    "matchesPlayed": "matches_played",
    "wins": "wins",
    "draws": "draws",
    "losses": "losses",
    "goals": "goals",
    "assists": "assists",
    "cleanSheets": "clean_sheets",
    "manOfTheMatchAwards": "man_of_the_match_awards",
}

SORT_DIRECTIONS = ("asc", "desc")


def _new_stats(player: Player) -> PlayerStats:
    return PlayerStats(player_id=player.player_id, player_name=player.name)


def _fold_matches(stats_map: dict[str, PlayerStats], matches: Iterable[Match]) -> None:
    """Accumulate every match into ``stats_map``; ids missing from the map are ignored."""
    for match in matches:
        if not match.is_complete:
            logger.debug("Skipping match %s: team data missing", match.match_id)
            continue

        yellow_score = match.yellow_team.score
        red_score = match.red_team.score

        for roster, own, other in (
            (match.yellow_team.player_ids, yellow_score, red_score),
            (match.red_team.player_ids, red_score, yellow_score),
        ):
            for player_id in roster:
                stats = stats_map.get(player_id)
                if stats is None:
                    continue
                stats.matches_played += 1
                if own > other:
                    stats.wins += 1
                elif own < other:
                    stats.losses += 1
                else:
                    stats.draws += 1

        for event in match.events:
            actor = stats_map.get(event.player_id)
            if isinstance(event, GoalEvent):
                if actor:
                    actor.goals += 1
            elif isinstance(event, OwnGoalEvent):
                if actor:
                    actor.own_goals += 1
            elif isinstance(event, CleanSheetEvent):
                if actor:
                    actor.clean_sheets += 1
                continue

            # Assists are credited even when the scorer is untracked (e.g. a guest).
            if event.assist_player_id:
                assister = stats_map.get(event.assist_player_id)
                if assister:
                    assister.assists += 1

        if match.man_of_the_match:
            motm = stats_map.get(match.man_of_the_match)
            if motm:
                motm.man_of_the_match_awards += 1


def calculate_player_stats(players: Iterable[Player], matches: Iterable[Match]) -> list[PlayerStats]:
    """Compute cumulative statistics for every non-guest player.

    Archived players are included so their history stays on the leaderboard.
    Guests get no entry, but their events still credit tracked teammates and
    opponents (e.g. an assist on a guest's goal). Matches missing a team are
    skipped. Output order follows ``players``.

    Args:
        players: Full player roster, archived players included.
        matches: Full match history.

    Returns:
        list[PlayerStats]: One record per non-guest player, zeroed when the
        player has not played.
    """
    stats_map: dict[str, PlayerStats] = {}
    for player in players:
        if player.is_guest:
            continue
        stats_map[player.player_id] = _new_stats(player)

    _fold_matches(stats_map, matches)
    return list(stats_map.values())


def calculate_stats_for_player(player: Player, matches: Iterable[Match]) -> PlayerStats:
    """Compute statistics for one player, guests included."""
    stats_map = {player.player_id: _new_stats(player)}
    _fold_matches(stats_map, matches)
    return stats_map[player.player_id]


def _resolve_metric(sort_by: str) -> str:
    if sort_by in SORTABLE_METRICS:
        return SORTABLE_METRICS[sort_by]
    if sort_by in SORTABLE_METRICS.values():
        return sort_by
    raise InvalidSortError(
        f"Unknown sort metric {sort_by!r}; expected one of {', '.join(SORTABLE_METRICS)}"
    )


def get_top_players(
    stats: Iterable[PlayerStats],
    sort_by: str,
    limit: int = 10,
    direction: str = "desc",
) -> list[PlayerStats]:
    """Rank players by ``sort_by`` and return at most ``limit`` of them.

    Ties on the metric go to the player with fewer matches played; remaining
    ties keep their input order. The input is not modified.

    Raises:
        InvalidSortError: ``sort_by`` or ``direction`` is not recognised.
    """
    attr = _resolve_metric(sort_by)
    if direction not in SORT_DIRECTIONS:
        raise InvalidSortError(f"Unknown sort direction {direction!r}; expected 'asc' or 'desc'")

    sign = -1 if direction == "desc" else 1
    ranked = sorted(
        stats,
        key=lambda s: (sign * getattr(s, attr), s.matches_played),
    )
    return ranked[: max(limit, 0)]


def _recency_key(match: Match) -> tuple[date, float]:
    created = match.created_at.timestamp() if match.created_at else float("-inf")
    return match.date, created


def summarize_dashboard(players: list[Player], matches: list[Match], top: int = 3) -> DashboardSummary:
    """Build the numbers shown on the dashboard landing page."""
    player_stats = calculate_player_stats(players, matches)
    return DashboardSummary(
        total_matches=len(matches),
        total_players=sum(1 for p in players if not p.is_guest and not p.archived),
        top_goals=get_top_players(player_stats, "goals", top),
        top_assists=get_top_players(player_stats, "assists", top),
        top_wins=get_top_players(player_stats, "wins", top),
        recent_matches=sorted(matches, key=_recency_key, reverse=True)[:5],
    )
