"""Data models for the Football Recorder statistics engine."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar, Optional, Union

YELLOW = "yellow"
RED = "red"
TEAM_COLORS = (YELLOW, RED)

POSITIONS = ("GK", "DEF", "MID", "WING", "ST")

TEAM_SIZE = 9


def opposing_team(team: str) -> str:
    """Return the other team color."""
    if team == YELLOW:
        return RED
    if team == RED:
        return YELLOW
    raise ValueError(f"Unknown team color: {team!r}")


def _check_team(team: str) -> None:
    if team not in TEAM_COLORS:
        raise ValueError(f"Unknown team color: {team!r}")


@dataclass
class Player:
    player_id: str
    name: str
    position: str  # one of POSITIONS
    created_at: Optional[datetime] = None
    archived: bool = False
    is_guest: bool = False

    def __post_init__(self) -> None:
        if self.position not in POSITIONS:
            raise ValueError(f"Unknown position: {self.position!r}")


@dataclass
class Team:
    player_ids: list[str] = field(default_factory=list)
    score: int = 0


@dataclass(frozen=True)
class GoalEvent:
    type: ClassVar[str] = "goal"

    player_id: str
    team: str
    assist_player_id: Optional[str] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self) -> None:
        _check_team(self.team)


@dataclass(frozen=True)
class OwnGoalEvent:
    """Own goal; ``team`` is the side of the player who conceded it."""

    type: ClassVar[str] = "own-goal"

    player_id: str
    team: str
    assist_player_id: Optional[str] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self) -> None:
        _check_team(self.team)

    @property
    def benefiting_team(self) -> str:
        return opposing_team(self.team)


@dataclass(frozen=True)
class CleanSheetEvent:
    type: ClassVar[str] = "clean-sheet"

    player_id: str
    team: str
    timestamp: Optional[datetime] = None

    def __post_init__(self) -> None:
        _check_team(self.team)


MatchEvent = Union[GoalEvent, OwnGoalEvent, CleanSheetEvent]

EVENT_TYPES: dict[str, type] = {
    GoalEvent.type: GoalEvent,
    OwnGoalEvent.type: OwnGoalEvent,
    CleanSheetEvent.type: CleanSheetEvent,
}


@dataclass
class Match:
    match_id: str
    date: date
    yellow_team: Optional[Team]
    red_team: Optional[Team]
    events: list[MatchEvent] = field(default_factory=list)
    created_at: Optional[datetime] = None
    man_of_the_match: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """True when both team records are present."""
        return self.yellow_team is not None and self.red_team is not None


@dataclass
class PlayerStats:
    player_id: str
    player_name: str
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    goals: int = 0
    assists: int = 0
    own_goals: int = 0
    clean_sheets: int = 0
    man_of_the_match_awards: int = 0

    @property
    def win_rate(self) -> float:
        """Percentage of matches won, halves rounded up to one decimal; 0.0 without matches."""
        if self.matches_played == 0:
            return 0.0
        rate = Decimal(self.wins * 100) / Decimal(self.matches_played)
        return float(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))

    def to_dict(self) -> dict:
        """Serialize using the field names leaderboard consumers expect."""
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "matchesPlayed": self.matches_played,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "goals": self.goals,
            "assists": self.assists,
            "ownGoals": self.own_goals,
            "cleanSheets": self.clean_sheets,
            "manOfTheMatchAwards": self.man_of_the_match_awards,
            "winRate": self.win_rate,
        }


@dataclass
class DashboardSummary:
    total_matches: int
    total_players: int
    top_goals: list[PlayerStats]
    top_assists: list[PlayerStats]
    top_wins: list[PlayerStats]
    recent_matches: list[Match]
