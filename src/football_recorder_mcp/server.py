"""MCP Server exposing Football Recorder statistics."""

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent

from .config import Settings
from .data_loader import fetch_match, fetch_matches, fetch_player, fetch_players
from .database import Neo4jDatabase
from .events import derive_scores
from .exceptions import InvalidSortError, MalformedRecordError, RecordNotFoundError
from .models import CleanSheetEvent, GoalEvent, OwnGoalEvent, Player, PlayerStats
from .stats import (
    SORTABLE_METRICS,
    calculate_player_stats,
    calculate_stats_for_player,
    get_top_players,
    summarize_dashboard,
)
from .validation import validate_match as check_match

logger = logging.getLogger(__name__)

# Initialize the server
server = FastMCP("football-recorder")

# Database connection (lazy initialization)
_db: Optional[Neo4jDatabase] = None


def get_db() -> Neo4jDatabase:
    """Get or create database connection."""
    global _db
    if _db is None:
        _db = Neo4jDatabase()
        _db.connect()
    return _db


def _text(output: str) -> list[TextContent]:
    return [TextContent(type="text", text=output)]


def _names(players: list[Player]) -> dict[str, str]:
    return {p.player_id: p.name for p in players}


def _stats_line(rank: int, stats: PlayerStats, metric: str) -> str:
    value = getattr(stats, SORTABLE_METRICS.get(metric, metric))
    return f"{rank}. {stats.player_name} - {value} ({stats.matches_played} played)\n"


# ============================================================================
# Leaderboard Tools
# ============================================================================


@server.tool()
async def get_leaderboard(
    sort_by: str = "wins", limit: Optional[int] = None, direction: str = "desc"
) -> list[TextContent]:
    """Rank players by a statistic.

    Args:
        sort_by: One of matchesPlayed, wins, draws, losses, goals, assists,
            cleanSheets, manOfTheMatchAwards
        limit: Maximum number of players to return (default from settings)
        direction: "desc" (highest first) or "asc"
    """
    db = get_db()
    if limit is None:
        limit = Settings.from_env().leaderboard_limit

    stats = calculate_player_stats(fetch_players(db), fetch_matches(db))
    try:
        ranked = get_top_players(stats, sort_by, limit, direction)
    except InvalidSortError as exc:
        return _text(str(exc))

    if not ranked:
        return _text("No players recorded yet")

    output = f"**Leaderboard - {sort_by} ({direction})**\n\n"
    for i, entry in enumerate(ranked, 1):
        output += _stats_line(i, entry, sort_by)
    return _text(output)


@server.tool()
async def get_player_stats(player_id: str) -> list[TextContent]:
    """Get statistics for a specific player.

    Args:
        player_id: The unique player identifier
    """
    db = get_db()
    try:
        player = fetch_player(db, player_id)
    except RecordNotFoundError as exc:
        return _text(str(exc))

    stats = calculate_stats_for_player(player, fetch_matches(db))

    output = f"**{player.name}** Statistics\n\n"
    output += f"- Position: {player.position}\n"
    if player.is_guest:
        output += "- Guest player (not ranked on leaderboards)\n"
    if player.archived:
        output += "- Archived\n"
    output += f"- Matches Played: {stats.matches_played}\n"
    output += f"- Wins: {stats.wins}\n"
    output += f"- Draws: {stats.draws}\n"
    output += f"- Losses: {stats.losses}\n"
    output += f"- Goals: {stats.goals}\n"
    output += f"- Assists: {stats.assists}\n"
    output += f"- Own Goals: {stats.own_goals}\n"
    output += f"- Clean Sheets: {stats.clean_sheets}\n"
    output += f"- Man of the Match: {stats.man_of_the_match_awards}\n"
    output += f"- Win Rate: {stats.win_rate:.1f}%\n"

    return _text(output)


@server.tool()
async def get_dashboard() -> list[TextContent]:
    """Get totals, top performers and the most recent matches."""
    db = get_db()
    players = fetch_players(db)
    matches = fetch_matches(db)

    if not players:
        return _text("No players recorded yet. Add some players to get started.")

    summary = summarize_dashboard(players, matches)

    output = "**Dashboard**\n\n"
    output += f"- Total Matches: {summary.total_matches}\n"
    output += f"- Active Players: {summary.total_players}\n"

    for title, metric, entries in (
        ("Top Scorers", "goals", summary.top_goals),
        ("Top Assists", "assists", summary.top_assists),
        ("Most Wins", "wins", summary.top_wins),
    ):
        output += f"\n**{title}:**\n"
        for i, entry in enumerate(entries, 1):
            output += _stats_line(i, entry, metric)

    if summary.recent_matches:
        output += "\n**Recent Matches:**\n"
        for match in summary.recent_matches:
            if not match.is_complete:
                output += f"- {match.date}: incomplete record [ID: {match.match_id}]\n"
                continue
            output += (
                f"- {match.date}: Yellow {match.yellow_team.score}-{match.red_team.score} Red"
                f" [ID: {match.match_id}]\n"
            )

    return _text(output)


# ============================================================================
# Match Tools
# ============================================================================


@server.tool()
async def get_match_details(match_id: str) -> list[TextContent]:
    """Get details of a specific match.

    Args:
        match_id: The unique match identifier
    """
    db = get_db()
    try:
        match = fetch_match(db, match_id)
    except (RecordNotFoundError, MalformedRecordError) as exc:
        return _text(str(exc))

    names = _names(fetch_players(db))

    def name(pid: Optional[str]) -> str:
        return names.get(pid, "Unknown Player") if pid else ""

    output = "**Match Details**\n\n"
    if match.is_complete:
        output += f"**Yellow** {match.yellow_team.score} - {match.red_team.score} **Red**\n\n"
    else:
        output += "Team data missing for this match\n\n"
    output += f"- Date: {match.date}\n"

    yellow_events, red_events = derive_scores(match.events)
    if match.is_complete and (yellow_events, red_events) != (
        match.yellow_team.score,
        match.red_team.score,
    ):
        output += f"- Events add up to {yellow_events}-{red_events}\n"

    if match.man_of_the_match:
        output += f"- Man of the Match: {name(match.man_of_the_match)}\n"

    goals = [e for e in match.events if isinstance(e, (GoalEvent, OwnGoalEvent))]
    if goals:
        output += "\n**Goals:**\n"
        for event in goals:
            line = f"- {name(event.player_id)} ({event.team})"
            if isinstance(event, OwnGoalEvent):
                line += " own goal"
            if event.assist_player_id:
                line += f", assist {name(event.assist_player_id)}"
            output += line + "\n"

    clean_sheets = [e for e in match.events if isinstance(e, CleanSheetEvent)]
    if clean_sheets:
        teams = sorted({e.team for e in clean_sheets})
        output += f"\nClean sheet: {', '.join(t.capitalize() for t in teams)}\n"

    return _text(output)


@server.tool()
async def validate_match(match_id: str) -> list[TextContent]:
    """Check a stored match for roster and event problems.

    Args:
        match_id: The unique match identifier
    """
    db = get_db()
    try:
        match = fetch_match(db, match_id)
    except (RecordNotFoundError, MalformedRecordError) as exc:
        return _text(str(exc))

    problems = check_match(match)
    if not problems:
        return _text(f"Match {match_id} is valid")

    output = f"Match {match_id} has {len(problems)} problem(s):\n\n"
    for problem in problems:
        output += f"- {problem}\n"
    return _text(output)


# ============================================================================
# Player Tools
# ============================================================================


@server.tool()
async def search_players(name: str, include_archived: bool = False) -> list[TextContent]:
    """Search for players by name.

    Args:
        name: Player name (partial match supported)
        include_archived: Also return archived players
    """
    db = get_db()
    needle = name.lower()
    results = [
        p
        for p in fetch_players(db)
        if needle in p.name.lower() and (include_archived or not p.archived)
    ]

    if not results:
        return _text(f"No players found matching '{name}'")

    output = f"Found {len(results)} player(s):\n\n"
    for player in results:
        tags = [player.position]
        if player.is_guest:
            tags.append("guest")
        if player.archived:
            tags.append("archived")
        output += f"- **{player.name}** ({player.player_id}) {', '.join(tags)}\n"

    return _text(output)


def main() -> None:
    """Run the MCP server over stdio."""
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting football-recorder MCP server")
    server.run()


if __name__ == "__main__":
    main()
