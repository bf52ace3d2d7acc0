"""Domain types shared by the standings pipeline."""

from dataclasses import dataclass, field

TEAM_COUNT = 20
MAX_GAMEWEEK = 38  # 38 rounds in a Premier League season
ALL_GROUPS = "all"
CONSENSUS_NAME = "Group Consensus"


@dataclass(frozen=True, slots=True)
class StandingsSnapshot:
    """League table for one gameweek: position (1-20) -> canonical team name."""

    gameweek: int
    positions: dict[int, str]

    def team_positions(self) -> dict[str, int]:
        """Invert the table into team -> position."""
        return {team: position for position, team in self.positions.items()}

    def ordered_teams(self) -> list[str]:
        """Team names from first to last."""
        return [self.positions[p] for p in sorted(self.positions)]


@dataclass(frozen=True, slots=True)
class Prediction:
    """A participant's pre-season ranking of all 20 teams."""

    name: str
    groups: tuple[str, ...]
    rankings: tuple[str, ...]  # position = index + 1

    def in_group(self, group: str) -> bool:
        return group == ALL_GROUPS or group in self.groups


@dataclass(slots=True)
class TeamScore:
    """Distance between predicted and actual position for one team."""

    score: int
    predicted_position: int
    actual_position: int
    difference: int  # predicted - actual


@dataclass(slots=True)
class ScoredResult:
    """Scored prediction for one participant at one gameweek.

    The synthetic group consensus shares this shape and is tagged with
    ``is_consensus`` so consumers can filter it without special-casing.
    """

    name: str
    groups: list[str]
    total_score: int
    team_scores: dict[str, TeamScore] = field(default_factory=dict)
    is_consensus: bool = False
    consensus_ranking: list[str] | None = None

    def in_group(self, group: str) -> bool:
        return group == ALL_GROUPS or group in self.groups


@dataclass(slots=True)
class LiveTableEntry:
    """One row of the provider's live league table."""

    position: int
    team_name: str  # Provider spelling, not yet normalized
    played_games: int
    points: int = 0


@dataclass(slots=True)
class SeasonInfo:
    """Season descriptor returned alongside the live table."""

    start_date: str | None
    end_date: str | None
    current_matchday: int | None


@dataclass(slots=True)
class LiveStandings:
    """Live table snapshot from the standings provider."""

    season: SeasonInfo
    table: list[LiveTableEntry]
