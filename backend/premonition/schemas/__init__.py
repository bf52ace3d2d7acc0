"""API response schemas."""

from premonition.schemas.leaderboard import (
    ComparisonResponse,
    GapsResponse,
    GroupStatisticsResponse,
    LeaderboardResponse,
    OverrideRequest,
    OverrideResponse,
    ScoredResultResponse,
    StandingsIndexResponse,
    StandingsResponse,
)

__all__ = [
    "ComparisonResponse",
    "GapsResponse",
    "GroupStatisticsResponse",
    "LeaderboardResponse",
    "OverrideRequest",
    "OverrideResponse",
    "ScoredResultResponse",
    "StandingsIndexResponse",
    "StandingsResponse",
]
