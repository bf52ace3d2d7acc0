"""Leaderboard API request and response schemas.

Response models are populated from the service dataclasses with
model_validate(obj, from_attributes=True).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TeamScoreResponse(BaseModel):
    """One team's contribution to a participant's total."""

    model_config = ConfigDict(from_attributes=True)

    score: int = Field(ge=0)
    predicted_position: int = Field(ge=1, le=20)
    actual_position: int = Field(ge=1, le=20)
    difference: int  # predicted - actual


class ScoredResultResponse(BaseModel):
    """A participant (or the group consensus) on the leaderboard."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    groups: list[str]
    total_score: int = Field(ge=0)
    team_scores: dict[str, TeamScoreResponse]
    is_consensus: bool = False
    consensus_ranking: list[str] | None = None


class StandingsIndexResponse(BaseModel):
    """Stored gameweeks at a glance."""

    gameweeks: list[int]
    last_saved: int = Field(ge=0, le=38)
    last_updated: datetime | None


class StandingsResponse(BaseModel):
    """League table for one gameweek, position -> canonical team name."""

    model_config = ConfigDict(from_attributes=True)

    gameweek: int = Field(ge=1, le=38)
    positions: dict[int, str]


class LeaderboardResponse(BaseModel):
    """Response for GET /scores/{gameweek}."""

    gameweek: int = Field(ge=1, le=38)
    group: str
    results: list[ScoredResultResponse]


class WeekComparisonResponse(BaseModel):
    """One participant's movement between two gameweeks."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    current_position: int
    current_score: int
    previous_position: int | None
    previous_score: int | None
    position_change: int | None  # positive = moved up
    score_change: int | None  # negative = improved


class ComparisonResponse(BaseModel):
    """Response for GET /compare."""

    week_a: int
    week_b: int
    group: str
    comparisons: list[WeekComparisonResponse]
    biggest_movers: list[WeekComparisonResponse]
    biggest_improvers: list[WeekComparisonResponse]
    biggest_decliners: list[WeekComparisonResponse]


class GapRecordResponse(BaseModel):
    """A gameweek the automatic update skipped."""

    model_config = ConfigDict(from_attributes=True)

    gameweek: int
    detected_at: datetime
    status: str
    reason: str
    filled_at: datetime | None = None


class GapsResponse(BaseModel):
    """Response for GET /gaps."""

    missed_gameweeks: list[GapRecordResponse]
    records: list[GapRecordResponse]


class TeamGroupStatsResponse(BaseModel):
    """Spread of a group's predictions for one team."""

    model_config = ConfigDict(from_attributes=True)

    team: str
    mean: float | None
    median: float | None
    std_dev: float | None
    range_low: float | None
    range_high: float | None
    count: int = Field(ge=0)
    positions: list[int]


class TeamPerformanceResponse(BaseModel):
    """A team's actual position against the group's consensus rank."""

    model_config = ConfigDict(from_attributes=True)

    team: str
    current_position: int
    group_predicted: int
    delta: int  # positive = overachieving


class GroupStatisticsResponse(BaseModel):
    """Response for GET /groups/{group}/statistics."""

    group: str
    participant_count: int = Field(ge=0)
    teams: list[TeamGroupStatsResponse]
    consensus_ranking: list[str]
    gameweek: int | None = None
    overachievers: list[TeamPerformanceResponse] = Field(default_factory=list)
    underachievers: list[TeamPerformanceResponse] = Field(default_factory=list)


class OverrideRequest(BaseModel):
    """Manually supplied table for one gameweek, position -> canonical team name."""

    positions: dict[str, str] = Field(
        description="Position (1-20, as a string key) -> canonical team name"
    )


class OverrideResponse(BaseModel):
    """Response for POST /standings/{gameweek}/override."""

    gameweek: int
    participants_scored: int
    gap_resolved: bool
