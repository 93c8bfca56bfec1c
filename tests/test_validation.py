"""Unit tests for event and match validation."""

from football_recorder_mcp.events import finalize_match
from football_recorder_mcp.models import RED, YELLOW, CleanSheetEvent, GoalEvent, OwnGoalEvent
from football_recorder_mcp.validation import validate_events, validate_match

from builders import make_match, make_roster

YELLOW_IDS = make_roster("Y")
RED_IDS = make_roster("R")


class TestValidateEvents:
    """Advisory event checks."""

    def test_valid_events_return_empty_list(self):
        events = [
            GoalEvent("Y1", YELLOW, assist_player_id="Y2"),
            GoalEvent("R1", RED),
            OwnGoalEvent("R2", RED, assist_player_id="Y3"),
            CleanSheetEvent("Y4", YELLOW),
        ]
        assert validate_events(events, YELLOW_IDS, RED_IDS) == []

    def test_goal_assisted_by_opponent_is_invalid(self):
        bad = GoalEvent("Y1", YELLOW, assist_player_id="R1")
        good = GoalEvent("Y1", YELLOW, assist_player_id="Y2")
        assert validate_events([bad, good], YELLOW_IDS, RED_IDS) == [bad]

    def test_own_goal_assisted_by_teammate_is_invalid(self):
        bad = OwnGoalEvent("R1", RED, assist_player_id="R2")
        good = OwnGoalEvent("R1", RED, assist_player_id="Y5")
        assert validate_events([bad, good], YELLOW_IDS, RED_IDS) == [bad]

    def test_player_outside_rosters_is_invalid(self):
        stray = GoalEvent("X1", YELLOW)
        sheet = CleanSheetEvent("X2", RED)
        assert validate_events([stray, sheet], YELLOW_IDS, RED_IDS) == [stray, sheet]

    def test_assist_outside_rosters_is_invalid(self):
        goal = GoalEvent("Y1", YELLOW, assist_player_id="X1")
        own_goal = OwnGoalEvent("Y1", YELLOW, assist_player_id="X1")
        assert validate_events([goal, own_goal], YELLOW_IDS, RED_IDS) == [goal, own_goal]

    def test_self_assists_follow_the_team_rules(self):
        goal = GoalEvent("Y1", YELLOW, assist_player_id="Y1")
        own_goal = OwnGoalEvent("R1", RED, assist_player_id="R1")
        assert validate_events([goal, own_goal], YELLOW_IDS, RED_IDS) == [own_goal]

    def test_membership_comes_from_rosters_not_event_team(self):
        # The event claims red, but the rosters put Y1 on yellow with Y2.
        event = GoalEvent("Y1", RED, assist_player_id="Y2")
        assert validate_events([event], YELLOW_IDS, RED_IDS) == []

    def test_accepts_sets_and_keeps_input_order(self):
        events = [GoalEvent("X1", YELLOW), GoalEvent("Y1", YELLOW), GoalEvent("X2", RED)]
        invalid = validate_events(events, set(YELLOW_IDS), set(RED_IDS))
        assert [e.player_id for e in invalid] == ["X1", "X2"]


class TestValidateMatch:
    """Roster and match-level rules."""

    def test_finalized_match_is_valid(self):
        match = finalize_match(
            make_match(
                "M1",
                YELLOW_IDS,
                RED_IDS,
                events=[GoalEvent("Y1", YELLOW, assist_player_id="Y2")],
                man_of_the_match="Y1",
            )
        )
        assert validate_match(match) == []

    def test_missing_team(self):
        match = make_match("M1", YELLOW_IDS, RED_IDS)
        match.red_team = None
        assert validate_match(match) == ["Red team is missing"]

    def test_wrong_roster_size(self):
        match = make_match("M1", YELLOW_IDS[:8], RED_IDS)
        problems = validate_match(match)
        assert len(problems) == 1
        assert "exactly 9 players" in problems[0]

    def test_player_on_both_teams(self):
        match = make_match("M1", YELLOW_IDS, RED_IDS[:8] + ["Y1"])
        assert any("both teams" in p and "Y1" in p for p in validate_match(match))

    def test_man_of_the_match_must_have_played(self):
        match = make_match("M1", YELLOW_IDS, RED_IDS, man_of_the_match="X1")
        assert any("Man of the Match" in p for p in validate_match(match))

    def test_invalid_events_are_reported(self):
        match = make_match(
            "M1",
            YELLOW_IDS,
            RED_IDS,
            events=[GoalEvent("Y1", YELLOW, assist_player_id="R1")],
        )
        problems = validate_match(match)
        assert problems == ["Invalid event: goal by Y1 (yellow) assisted by R1"]
