"""Manual override: save an operator-supplied table for one gameweek."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from premonition.exceptions import ValidationError
from premonition.services.gap_tracker import GapTracker
from premonition.services.history_store import HistoryStore
from premonition.services.models import Prediction, ScoredResult, StandingsSnapshot
from premonition.services.scoring import score_all_participants
from premonition.services.validators import (
    log_preview,
    validate_gameweek_number,
    validate_snapshot,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OverrideResult:
    gameweek: int
    scores: list[ScoredResult]
    gap_resolved: bool  # a missed-gameweek record was flipped to manually_filled


def positions_from_ordered_teams(teams: list[str]) -> dict[int, str]:
    """First team is position 1."""
    return {index + 1: team for index, team in enumerate(teams)}


async def apply_manual_override(
    store: HistoryStore,
    gap_tracker: GapTracker,
    predictions: list[Prediction],
    gameweek: int,
    positions: Mapping[Any, str],
) -> OverrideResult:
    """
    Validate and append a hand-supplied snapshot, exactly as the automatic path would.

    Used to backfill gameweeks the scheduled update skipped. The gameweek
    must be the next contiguous one and must not already exist; the store
    enforces both.

    Returns:
        The scores written alongside the snapshot, and whether a gap record was resolved

    Raises:
        ValidationError: If the gameweek number or the snapshot is invalid
        GameweekAlreadySavedError: If the gameweek is already stored
        NonContiguousGameweekError: If earlier gameweeks are still missing
    """
    gw_validation = validate_gameweek_number(gameweek)
    if not gw_validation.valid:
        raise ValidationError(gw_validation.errors)

    data_validation = validate_snapshot(positions)
    if not data_validation.valid:
        raise ValidationError(data_validation.errors)

    standings = StandingsSnapshot(
        gameweek=gameweek,
        positions={int(position): team for position, team in positions.items()},
    )
    log_preview(gameweek, standings.positions)

    scores = score_all_participants(standings, predictions)
    await store.append_gameweek(standings, scores)
    logger.info(f"GW{gameweek} saved by manual override")

    gap_resolved = await gap_tracker.mark_as_manually_filled(gameweek)
    return OverrideResult(gameweek=gameweek, scores=scores, gap_resolved=gap_resolved)
