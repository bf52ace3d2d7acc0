"""Leaderboard API routes - stored standings, scores, comparison, gaps and overrides."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from premonition.dependencies import get_gap_tracker, get_history_store, get_predictions
from premonition.exceptions import (
    GameweekAlreadySavedError,
    NonContiguousGameweekError,
    UnknownTeamError,
    ValidationError,
)
from premonition.schemas.leaderboard import (
    ComparisonResponse,
    GapsResponse,
    GroupStatisticsResponse,
    LeaderboardResponse,
    OverrideRequest,
    OverrideResponse,
    StandingsIndexResponse,
    StandingsResponse,
)
from premonition.services.comparison import (
    compare_weeks,
    get_biggest_decliners,
    get_biggest_improvers,
    get_biggest_movers,
)
from premonition.services.consensus import (
    calculate_group_statistics,
    calculate_over_under_achievers,
    create_group_consensus,
)
from premonition.services.gap_tracker import GapTracker
from premonition.services.history_store import HistoryStore
from premonition.services.models import ALL_GROUPS, Prediction
from premonition.services.override import apply_manual_override
from premonition.services.predictions import available_groups, filter_by_group
from premonition.services.scoring import build_leaderboard

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/leaderboard", tags=["leaderboard"])


# =============================================================================
# Route Parameters
# =============================================================================

GameweekPath = Annotated[int, Path(ge=1, le=38, description="Gameweek (1-38)")]
GroupQuery = Annotated[str, Query(description='Group tag, or "all" for everyone')]

StoreDep = Annotated[HistoryStore, Depends(get_history_store)]
GapTrackerDep = Annotated[GapTracker, Depends(get_gap_tracker)]
PredictionsDep = Annotated[list[Prediction], Depends(get_predictions)]


def _require_known_group(predictions: list[Prediction], group: str) -> None:
    if group != ALL_GROUPS and group not in available_groups(predictions):
        raise HTTPException(status_code=404, detail=f"Unknown group: {group}")


# =============================================================================
# Routes
# =============================================================================


@router.get("/standings", response_model=StandingsIndexResponse)
async def list_standings(store: StoreDep) -> dict:
    """List the stored gameweeks and when the store last changed."""
    standings = await store.get_all_standings()
    return {
        "gameweeks": sorted(standings),
        "last_saved": max(standings, default=0),
        "last_updated": await store.last_updated(),
    }


@router.get("/standings/{gameweek}", response_model=StandingsResponse)
async def get_standings(gameweek: GameweekPath, store: StoreDep) -> StandingsResponse:
    """Get the stored league table for one gameweek."""
    standings = await store.get_standings(gameweek)
    if standings is None:
        raise HTTPException(status_code=404, detail=f"No standings stored for GW{gameweek}")
    return StandingsResponse.model_validate(standings, from_attributes=True)


@router.get("/scores/{gameweek}", response_model=LeaderboardResponse)
async def get_scores(
    gameweek: GameweekPath,
    store: StoreDep,
    predictions: PredictionsDep,
    group: GroupQuery = ALL_GROUPS,
    include_consensus: bool = Query(default=True, description="Merge in the group consensus"),
) -> dict:
    """
    Get the leaderboard for one gameweek.

    Scores are recomputed from the stored table so the group filter and the
    consensus entry can be applied; they equal the stored scores for "all".
    """
    _require_known_group(predictions, group)

    standings = await store.get_standings(gameweek)
    if standings is None:
        raise HTTPException(status_code=404, detail=f"No standings stored for GW{gameweek}")

    results = build_leaderboard(standings, predictions, group, include_consensus)
    return {"gameweek": gameweek, "group": group, "results": results}


@router.get("/compare", response_model=ComparisonResponse)
async def compare(
    store: StoreDep,
    week_a: int = Query(..., ge=1, le=38, description="Earlier gameweek"),
    week_b: int = Query(..., ge=1, le=38, description="Later gameweek"),
    group: GroupQuery = ALL_GROUPS,
) -> dict:
    """Compare two stored leaderboards, with the biggest movers of the period."""
    comparisons = await compare_weeks(store, week_a, week_b, group)
    if comparisons is None:
        raise HTTPException(
            status_code=404,
            detail=f"Scores not available for GW{week_a} and GW{week_b}",
        )

    return {
        "week_a": week_a,
        "week_b": week_b,
        "group": group,
        "comparisons": comparisons,
        "biggest_movers": get_biggest_movers(comparisons),
        "biggest_improvers": get_biggest_improvers(comparisons),
        "biggest_decliners": get_biggest_decliners(comparisons),
    }


@router.get("/gaps", response_model=GapsResponse)
async def get_gaps(gap_tracker: GapTrackerDep) -> dict:
    """Gameweeks the automatic update skipped, outstanding and resolved."""
    return {
        "missed_gameweeks": await gap_tracker.get_missed_gameweeks(),
        "records": await gap_tracker.get_all_records(),
    }


@router.get("/groups/{group}/statistics", response_model=GroupStatisticsResponse)
async def get_group_statistics(
    group: str,
    store: StoreDep,
    predictions: PredictionsDep,
    gameweek: int | None = Query(
        default=None, ge=1, le=38, description="Add over/under-achievers against this gameweek"
    ),
) -> dict:
    """
    Get per-team prediction statistics and the consensus ranking for a group.

    With ``gameweek`` the response also lists the teams furthest above and
    below where the group expected them.
    """
    _require_known_group(predictions, group)

    stats = calculate_group_statistics(predictions, group)
    response = {
        "group": group,
        "participant_count": len(filter_by_group(predictions, group)),
        "teams": list(stats.values()),
        "consensus_ranking": create_group_consensus(predictions, group),
        "gameweek": gameweek,
    }

    if gameweek is not None:
        standings = await store.get_standings(gameweek)
        if standings is None:
            raise HTTPException(status_code=404, detail=f"No standings stored for GW{gameweek}")
        overachievers, underachievers = calculate_over_under_achievers(
            predictions, standings, group
        )
        response["overachievers"] = overachievers
        response["underachievers"] = underachievers

    return response


@router.post("/standings/{gameweek}/override", response_model=OverrideResponse)
async def override_standings(
    gameweek: GameweekPath,
    request: OverrideRequest,
    store: StoreDep,
    gap_tracker: GapTrackerDep,
    predictions: PredictionsDep,
) -> dict:
    """
    Save a manually supplied table for a gameweek the automatic update missed.

    The table goes through the same validation as the automatic path. Stored
    gameweeks are never overwritten.
    """
    try:
        result = await apply_manual_override(
            store, gap_tracker, predictions, gameweek, request.positions
        )
    except (ValidationError, UnknownTeamError) as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except (GameweekAlreadySavedError, NonContiguousGameweekError) as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return {
        "gameweek": result.gameweek,
        "participants_scored": len(result.scores),
        "gap_resolved": result.gap_resolved,
    }
