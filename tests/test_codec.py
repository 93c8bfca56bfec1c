"""Tests for JSON decoding at the persistence boundary."""

import json
from datetime import date, datetime, timezone

import pytest

from football_recorder_mcp.codec import (
    BACKUP_VERSION,
    dumps_backup,
    event_from_dict,
    event_to_dict,
    loads_backup,
    loads_events,
    match_from_dict,
    match_to_dict,
    player_from_dict,
)
from football_recorder_mcp.exceptions import MalformedEventError, MalformedRecordError
from football_recorder_mcp.models import CleanSheetEvent, GoalEvent, OwnGoalEvent


class TestEventDecoding:
    """Event discriminators and fields."""

    def test_goal_with_assist(self):
        event = event_from_dict({
            "type": "goal",
            "playerId": "p1",
            "assistPlayerId": "p2",
            "team": "yellow",
            "timestamp": "2024-05-04T10:15:00.000Z",
        })
        assert event == GoalEvent(
            "p1", "yellow", assist_player_id="p2",
            timestamp=datetime(2024, 5, 4, 10, 15, tzinfo=timezone.utc),
        )

    def test_own_goal_and_clean_sheet(self):
        assert isinstance(event_from_dict({"type": "own-goal", "playerId": "p1", "team": "red"}), OwnGoalEvent)
        sheet = event_from_dict({"type": "clean-sheet", "playerId": "p1", "team": "red", "assistPlayerId": "p2"})
        assert sheet == CleanSheetEvent("p1", "red")

    def test_missing_type_is_rejected(self):
        with pytest.raises(MalformedEventError):
            event_from_dict({"playerId": "p1", "team": "yellow"})

    def test_unknown_type_is_rejected(self):
        with pytest.raises(MalformedEventError):
            event_from_dict({"type": "yellow-card", "playerId": "p1", "team": "yellow"})

    def test_bad_team_is_rejected(self):
        with pytest.raises(MalformedEventError):
            event_from_dict({"type": "goal", "playerId": "p1", "team": "blue"})

    def test_encoding_omits_empty_fields(self):
        assert event_to_dict(GoalEvent("p1", "red")) == {"type": "goal", "playerId": "p1", "team": "red"}

    def test_event_list(self):
        assert loads_events(None) == []
        assert loads_events('[{"type": "goal", "playerId": "p1", "team": "red"}]') == [GoalEvent("p1", "red")]
        with pytest.raises(MalformedRecordError):
            loads_events('{"type": "goal"}')


class TestMatchDecoding:
    """Whole match records."""

    @pytest.fixture
    def record(self):
        return {
            "id": "m1",
            "date": "2024-05-04",
            "yellowTeam": {"playerIds": ["y1", "y2"], "score": 1},
            "redTeam": {"playerIds": ["r1", "r2"], "score": 0},
            "events": [
                {"type": "goal", "playerId": "y1", "assistPlayerId": "y2", "team": "yellow"},
                {"type": "clean-sheet", "playerId": "y1", "team": "yellow"},
            ],
            "createdAt": "2024-05-04T12:00:00+00:00",
            "manOfTheMatch": "y1",
        }

    def test_decode(self, record):
        match = match_from_dict(record)
        assert match.date == date(2024, 5, 4)
        assert match.yellow_team.player_ids == ["y1", "y2"]
        assert match.red_team.score == 0
        assert len(match.events) == 2
        assert match.man_of_the_match == "y1"

    def test_encode_keeps_wire_names(self, record):
        assert match_to_dict(match_from_dict(record)) == record

    def test_legacy_record_without_team(self, record):
        del record["redTeam"]
        match = match_from_dict(record)
        assert match.red_team is None
        assert not match.is_complete

    def test_date_with_time_part(self, record):
        record["date"] = "2024-05-04T00:00:00.000Z"
        assert match_from_dict(record).date == date(2024, 5, 4)

    def test_untyped_event_rejects_match(self, record):
        record["events"].append({"playerId": "y1", "team": "yellow"})
        with pytest.raises(MalformedEventError):
            match_from_dict(record)

    def test_missing_id(self, record):
        del record["id"]
        with pytest.raises(MalformedRecordError):
            match_from_dict(record)


class TestBackup:
    """Backup files in the recorder's export format."""

    def test_round_trip(self, sample_data):
        text = dumps_backup(sample_data["players"], sample_data["matches"])
        assert json.loads(text)["version"] == BACKUP_VERSION
        players, matches = loads_backup(text)
        assert players == sample_data["players"]
        assert matches == sample_data["matches"]

    def test_missing_sections_read_as_empty(self):
        assert loads_backup('{"version": "1.0.0"}') == ([], [])

    def test_invalid_json(self):
        with pytest.raises(MalformedRecordError):
            loads_backup("not json")

    def test_player_defaults(self):
        player = player_from_dict({"id": 7, "name": "Sam"})
        assert player.player_id == "7"
        assert player.position == "MID"
        assert not player.archived and not player.is_guest

    def test_unknown_position(self):
        with pytest.raises(MalformedRecordError):
            player_from_dict({"id": "p1", "name": "Sam", "position": "CB"})
