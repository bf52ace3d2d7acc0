"""Recompute stored scores from stored standings.

Run after the prediction dataset is corrected. Standings are never touched.
"""

import logging

from premonition.services.history_store import HistoryStore
from premonition.services.models import Prediction
from premonition.services.scoring import score_all_participants

logger = logging.getLogger(__name__)


async def regenerate_scores(
    store: HistoryStore,
    predictions: list[Prediction],
    gameweek: int | None = None,
) -> list[int]:
    """Replace scores for one gameweek, or every stored gameweek when None.

    Returns:
        The gameweeks whose scores were rewritten

    Raises:
        KeyError: If ``gameweek`` has no stored standings
    """
    all_standings = await store.get_all_standings()

    if gameweek is not None:
        if gameweek not in all_standings:
            raise KeyError(f"No standings stored for GW{gameweek}")
        targets = [gameweek]
    else:
        targets = sorted(all_standings)

    for gw in targets:
        scores = score_all_participants(all_standings[gw], predictions)
        await store.replace_scores(gw, scores)
        logger.info(f"GW{gw}: regenerated scores for {len(scores)} participants")

    return targets
