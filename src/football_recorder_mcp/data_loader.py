"""Read and write players and matches in the Neo4j store."""

import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

from .codec import dumps_events, loads_events, parse_date, parse_datetime
from .database import Neo4jDatabase
from .events import finalize_match
from .exceptions import MalformedRecordError, RecordNotFoundError
from .models import (
    RED,
    YELLOW,
    GoalEvent,
    Match,
    OwnGoalEvent,
    Player,
    Team,
)

logger = logging.getLogger(__name__)

PLAYER_FIELDS = """
    p.player_id as player_id, p.name as name, p.position as position,
    p.created_at as created_at, p.archived as archived, p.is_guest as is_guest
"""

MATCH_FIELDS = """
    m.match_id as match_id, m.date as date,
    m.yellow_player_ids as yellow_player_ids, m.yellow_score as yellow_score,
    m.red_player_ids as red_player_ids, m.red_score as red_score,
    m.events as events, m.created_at as created_at,
    m.man_of_the_match as man_of_the_match
"""


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _team_params(team: Optional[Team]) -> tuple[Optional[list[str]], Optional[int]]:
    if team is None:
        return None, None
    return list(team.player_ids), team.score


class DataLoader:
    """Load players and matches into the Neo4j database."""

    def __init__(self, db: Neo4jDatabase):
        self.db = db

    def load_player(self, player: Player) -> None:
        """Create or update a player node."""
        query = """
        MERGE (p:Player {player_id: $player_id})
        SET p.name = $name,
            p.position = $position,
            p.created_at = coalesce(p.created_at, $created_at),
            p.archived = $archived,
            p.is_guest = $is_guest
        """
        self.db.execute_write(
            query,
            {
                "player_id": player.player_id,
                "name": player.name,
                "position": player.position,
                "created_at": _isoformat(player.created_at),
                "archived": player.archived,
                "is_guest": player.is_guest,
            },
        )

    def load_match(self, match: Match) -> None:
        """Create or update a match node and rebuild its ``PLAYED_IN`` relationships.

        Rosters are stored as list properties and the event log as a JSON
        string; a missing team is stored as absent properties.
        """
        yellow_ids, yellow_score = _team_params(match.yellow_team)
        red_ids, red_score = _team_params(match.red_team)
        appearances = [{"player_id": pid, "team": YELLOW} for pid in yellow_ids or []]
        appearances += [{"player_id": pid, "team": RED} for pid in red_ids or []]

        query = """
        MERGE (m:Match {match_id: $match_id})
        SET m.date = $date,
            m.yellow_player_ids = $yellow_player_ids,
            m.yellow_score = $yellow_score,
            m.red_player_ids = $red_player_ids,
            m.red_score = $red_score,
            m.events = $events,
            m.created_at = coalesce(m.created_at, $created_at),
            m.man_of_the_match = $man_of_the_match
        WITH m
        OPTIONAL MATCH (:Player)-[old:PLAYED_IN]->(m)
        DELETE old
        WITH DISTINCT m
        UNWIND $appearances AS app
        MATCH (p:Player {player_id: app.player_id})
        MERGE (p)-[r:PLAYED_IN]->(m)
        SET r.team = app.team
        """
        self.db.execute_write(
            query,
            {
                "match_id": match.match_id,
                "date": match.date.isoformat(),
                "yellow_player_ids": yellow_ids,
                "yellow_score": yellow_score,
                "red_player_ids": red_ids,
                "red_score": red_score,
                "events": dumps_events(match.events),
                "created_at": _isoformat(match.created_at),
                "man_of_the_match": match.man_of_the_match,
                "appearances": appearances,
            },
        )

    def delete_match(self, match_id: str) -> None:
        """Delete a match and its relationships."""
        self.db.execute_write(
            "MATCH (m:Match {match_id: $match_id}) DETACH DELETE m",
            {"match_id": match_id},
        )

    def archive_player(self, player_id: str, archived: bool = True) -> None:
        """Set or clear a player's archived flag."""
        self.db.execute_write(
            "MATCH (p:Player {player_id: $player_id}) SET p.archived = $archived",
            {"player_id": player_id, "archived": archived},
        )

    def delete_player(self, player_id: str) -> bool:
        """Delete a player without match history; otherwise archive them.

        Returns:
            bool: True if the player was deleted, False if archived instead.
        """
        rows = self.db.execute_query(
            """
            MATCH (p:Player {player_id: $player_id})
            OPTIONAL MATCH (p)-[r:PLAYED_IN]->(:Match)
            RETURN count(r) as appearances
            """,
            {"player_id": player_id},
        )
        appearances = rows[0]["appearances"] if rows else 0
        if appearances:
            logger.info("Player %s has %d appearances; archiving instead of deleting", player_id, appearances)
            self.archive_player(player_id)
            return False

        self.db.execute_write(
            "MATCH (p:Player {player_id: $player_id}) DETACH DELETE p",
            {"player_id": player_id},
        )
        return True


def _player_from_row(row: dict[str, Any]) -> Player:
    return Player(
        player_id=row["player_id"],
        name=row["name"],
        position=row.get("position") or "MID",
        created_at=parse_datetime(row.get("created_at")),
        archived=bool(row.get("archived")),
        is_guest=bool(row.get("is_guest")),
    )


def _match_from_row(row: dict[str, Any]) -> Match:
    def team(ids: Optional[list[str]], score: Optional[int]) -> Optional[Team]:
        if ids is None:
            return None
        return Team(player_ids=list(ids), score=int(score or 0))

    return Match(
        match_id=row["match_id"],
        date=parse_date(row["date"]),
        yellow_team=team(row.get("yellow_player_ids"), row.get("yellow_score")),
        red_team=team(row.get("red_player_ids"), row.get("red_score")),
        events=loads_events(row.get("events")),
        created_at=parse_datetime(row.get("created_at")),
        man_of_the_match=row.get("man_of_the_match"),
    )


def fetch_players(db: Neo4jDatabase) -> list[Player]:
    """Return every player, guests and archived players included, oldest first."""
    rows = db.execute_query(
        f"MATCH (p:Player) RETURN {PLAYER_FIELDS} ORDER BY p.created_at, p.player_id"
    )
    return [_player_from_row(row) for row in rows]


def fetch_player(db: Neo4jDatabase, player_id: str) -> Player:
    rows = db.execute_query(
        f"MATCH (p:Player {{player_id: $player_id}}) RETURN {PLAYER_FIELDS}",
        {"player_id": player_id},
    )
    if not rows:
        raise RecordNotFoundError(f"Player with ID '{player_id}' not found")
    return _player_from_row(rows[0])


def fetch_matches(db: Neo4jDatabase) -> list[Match]:
    """Return every decodable match, newest first.

    A stored match that cannot be decoded is logged and left out, so one bad
    record does not take down every leaderboard.
    """
    rows = db.execute_query(
        f"MATCH (m:Match) RETURN {MATCH_FIELDS} ORDER BY m.date DESC, m.created_at DESC"
    )
    matches = []
    for row in rows:
        try:
            matches.append(_match_from_row(row))
        except MalformedRecordError as exc:
            logger.warning("Skipping stored match %s: %s", row.get("match_id"), exc)
    return matches


def fetch_match(db: Neo4jDatabase, match_id: str) -> Match:
    rows = db.execute_query(
        f"MATCH (m:Match {{match_id: $match_id}}) RETURN {MATCH_FIELDS}",
        {"match_id": match_id},
    )
    if not rows:
        raise RecordNotFoundError(f"Match with ID '{match_id}' not found")
    return _match_from_row(rows[0])


def _created(day: int) -> datetime:
    return datetime(2024, 3, day, 9, 0, tzinfo=timezone.utc)


def get_sample_data() -> dict[str, Any]:
    """Get a small demo league: twenty regulars, one guest and three matches."""
    roster = [
        ("P01", "Alice Moreau", "GK"),
        ("P02", "Bob Carter", "DEF"),
        ("P03", "Chidi Okafor", "DEF"),
        ("P04", "Dan Murphy", "DEF"),
        ("P05", "Elif Kaya", "MID"),
        ("P06", "Femi Adeyemi", "MID"),
        ("P07", "Gus Lindqvist", "WING"),
        ("P08", "Hana Sato", "WING"),
        ("P09", "Ivan Petrov", "ST"),
        ("P10", "Jonas Berg", "GK"),
        ("P11", "Kofi Mensah", "DEF"),
        ("P12", "Luca Romano", "DEF"),
        ("P13", "Mateo Ruiz", "DEF"),
        ("P14", "Nadia Haddad", "MID"),
        ("P15", "Oscar Lund", "MID"),
        ("P16", "Pedro Alves", "WING"),
        ("P17", "Quinn Walsh", "WING"),
        ("P18", "Rui Costa", "ST"),
        ("P19", "Sam Ortiz", "MID"),
        ("P20", "Tomas Vidal", "ST"),
    ]
    players = [
        Player(pid, name, position, created_at=_created(1))
        for pid, name, position in roster
    ]
    players[18].archived = True
    players.append(Player("G01", "Guest Keeper", "GK", created_at=_created(16), is_guest=True))

    def ids(*numbers: int) -> list[str]:
        return [f"P{n:02d}" for n in numbers]

    first = ids(*range(1, 10))
    second = ids(*range(10, 19))

    matches = [
        Match(
            match_id="M001",
            date=date(2024, 3, 2),
            yellow_team=Team(first),
            red_team=Team(second),
            events=[
                GoalEvent("P09", YELLOW, assist_player_id="P05"),
                GoalEvent("P09", YELLOW),
                OwnGoalEvent("P12", RED, assist_player_id="P07"),
            ],
            created_at=_created(2),
            man_of_the_match="P09",
        ),
        Match(
            match_id="M002",
            date=date(2024, 3, 9),
            yellow_team=Team(ids(*range(2, 10)) + ["P19"]),
            red_team=Team(second),
            events=[
                GoalEvent("P18", RED, assist_player_id="P14"),
                GoalEvent("P05", YELLOW, assist_player_id="P19"),
            ],
            created_at=_created(9),
            man_of_the_match="P14",
        ),
        Match(
            match_id="M003",
            date=date(2024, 3, 16),
            yellow_team=Team(["G01"] + ids(*range(2, 10))),
            red_team=Team(ids(*range(10, 18)) + ["P19"]),
            events=[
                GoalEvent("P08", YELLOW, assist_player_id="G01"),
                OwnGoalEvent("G01", YELLOW, assist_player_id="P16"),
                GoalEvent("P16", RED, assist_player_id="P11"),
            ],
            created_at=_created(16),
            man_of_the_match="P16",
        ),
    ]

    return {
        "players": players,
        "matches": [finalize_match(m) for m in matches],
    }


def load_sample_data(db: Neo4jDatabase) -> dict[str, int]:
    """Load the demo league into the database."""
    db.create_constraints()
    db.create_indexes()

    data = get_sample_data()
    loader = DataLoader(db)
    for player in data["players"]:
        loader.load_player(player)
    for match in data["matches"]:
        loader.load_match(match)

    counts = {"players": len(data["players"]), "matches": len(data["matches"])}
    logger.info("Loaded sample data: %s", counts)
    return counts
