"""JSON encoding of players, matches and backup files.

Records use the camelCase field names of the recorder's export format.
Events without a known ``type`` are rejected here, before they reach the
statistics engine.
"""

import json
from datetime import date, datetime, timezone
from typing import Any, Optional

from .exceptions import MalformedEventError, MalformedRecordError
from .models import (
    EVENT_TYPES,
    CleanSheetEvent,
    Match,
    MatchEvent,
    Player,
    Team,
)

BACKUP_VERSION = "1.0.0"


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def parse_date(value: str) -> date:
    """Parse a calendar date; any time-of-day part is dropped."""
    return date.fromisoformat(value[:10])


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def player_from_dict(data: dict[str, Any]) -> Player:
    try:
        return Player(
            player_id=str(data["id"]),
            name=data["name"],
            position=data.get("position", "MID"),
            created_at=parse_datetime(data.get("createdAt")),
            archived=bool(data.get("archived", False)),
            is_guest=bool(data.get("isGuest", False)),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedRecordError(f"Invalid player record: {exc}", record=data) from exc


def player_to_dict(player: Player) -> dict[str, Any]:
    return {
        "id": player.player_id,
        "name": player.name,
        "position": player.position,
        "createdAt": _format_datetime(player.created_at),
        "archived": player.archived,
        "isGuest": player.is_guest,
    }


def event_from_dict(data: dict[str, Any]) -> MatchEvent:
    """Decode one event; raises :class:`MalformedEventError` on a missing or unknown type."""
    event_type = data.get("type") if isinstance(data, dict) else None
    event_cls = EVENT_TYPES.get(event_type)
    if event_cls is None:
        raise MalformedEventError(f"Event has missing or unknown type: {event_type!r}", record=data)

    try:
        kwargs: dict[str, Any] = {
            "player_id": str(data["playerId"]),
            "team": data["team"],
            "timestamp": parse_datetime(data.get("timestamp")),
        }
        if event_cls is not CleanSheetEvent and data.get("assistPlayerId"):
            kwargs["assist_player_id"] = str(data["assistPlayerId"])
        return event_cls(**kwargs)
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedEventError(f"Invalid {event_type} event: {exc}", record=data) from exc


def event_to_dict(event: MatchEvent) -> dict[str, Any]:
    data: dict[str, Any] = {
        "type": event.type,
        "playerId": event.player_id,
        "team": event.team,
    }
    assist = getattr(event, "assist_player_id", None)
    if assist:
        data["assistPlayerId"] = assist
    if event.timestamp:
        data["timestamp"] = event.timestamp.isoformat()
    return data


def team_from_dict(data: Optional[dict[str, Any]]) -> Optional[Team]:
    if not data:
        return None
    return Team(
        player_ids=[str(pid) for pid in data.get("playerIds", [])],
        score=int(data.get("score", 0)),
    )


def team_to_dict(team: Optional[Team]) -> Optional[dict[str, Any]]:
    if team is None:
        return None
    return {"playerIds": list(team.player_ids), "score": team.score}


def match_from_dict(data: dict[str, Any]) -> Match:
    try:
        match_id = str(data["id"])
        match_date = parse_date(data["date"])
        yellow = team_from_dict(data.get("yellowTeam"))
        red = team_from_dict(data.get("redTeam"))
        created_at = parse_datetime(data.get("createdAt"))
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedRecordError(f"Invalid match record: {exc}", record=data) from exc

    return Match(
        match_id=match_id,
        date=match_date,
        yellow_team=yellow,
        red_team=red,
        events=[event_from_dict(e) for e in data.get("events") or []],
        created_at=created_at,
        man_of_the_match=data.get("manOfTheMatch") or None,
    )


def match_to_dict(match: Match) -> dict[str, Any]:
    return {
        "id": match.match_id,
        "date": match.date.isoformat(),
        "yellowTeam": team_to_dict(match.yellow_team),
        "redTeam": team_to_dict(match.red_team),
        "events": [event_to_dict(e) for e in match.events],
        "createdAt": _format_datetime(match.created_at),
        "manOfTheMatch": match.man_of_the_match,
    }


def dumps_events(events: list[MatchEvent]) -> str:
    return json.dumps([event_to_dict(e) for e in events])


def loads_events(text: Optional[str]) -> list[MatchEvent]:
    if not text:
        return []
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedRecordError(f"Event list is not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise MalformedRecordError("Event list must be a JSON array", record=raw)
    return [event_from_dict(e) for e in raw]


def dumps_backup(
    players: list[Player],
    matches: list[Match],
    exported_at: Optional[datetime] = None,
) -> str:
    """Serialize a full backup in the recorder's export format."""
    exported_at = exported_at or datetime.now(timezone.utc)
    data = {
        "version": BACKUP_VERSION,
        "players": [player_to_dict(p) for p in players],
        "matches": [match_to_dict(m) for m in matches],
        "exportedAt": exported_at.isoformat(),
    }
    return json.dumps(data, indent=2)


def loads_backup(text: str) -> tuple[list[Player], list[Match]]:
    """Parse a backup file into players and matches.

    Missing ``players`` or ``matches`` arrays are read as empty.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedRecordError(f"Backup is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedRecordError("Backup must be a JSON object", record=data)

    players = data.get("players")
    matches = data.get("matches")
    return (
        [player_from_dict(p) for p in players] if isinstance(players, list) else [],
        [match_from_dict(m) for m in matches] if isinstance(matches, list) else [],
    )
