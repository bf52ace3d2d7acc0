"""Week-over-week leaderboard comparison."""

from dataclasses import dataclass

from premonition.services.history_store import HistoryStore
from premonition.services.models import ScoredResult

DEFAULT_LIMIT = 3


@dataclass(slots=True)
class WeekComparison:
    """One participant's movement between two gameweeks.

    ``position_change`` is positive when the participant moved up.
    ``score_change`` is negative when they improved (lower totals are better).
    Previous fields are None for participants missing from the earlier week.
    """

    name: str
    current_position: int
    current_score: int
    previous_position: int | None
    previous_score: int | None
    position_change: int | None
    score_change: int | None


def _ranked(results: list[ScoredResult], group_filter: str) -> list[ScoredResult]:
    return [r for r in results if not r.is_consensus and r.in_group(group_filter)]


def compare_scores(
    week_a: list[ScoredResult],
    week_b: list[ScoredResult],
    group_filter: str = "all",
) -> list[WeekComparison]:
    """Join two sorted leaderboards by participant name.

    Positions are 1-indexed ranks within the (group-filtered) list.
    """
    previous = {
        result.name: (position, result.total_score)
        for position, result in enumerate(_ranked(week_a, group_filter), start=1)
    }

    comparisons = []
    for position, result in enumerate(_ranked(week_b, group_filter), start=1):
        prior = previous.get(result.name)
        if prior is None:
            comparisons.append(
                WeekComparison(
                    name=result.name,
                    current_position=position,
                    current_score=result.total_score,
                    previous_position=None,
                    previous_score=None,
                    position_change=None,
                    score_change=None,
                )
            )
            continue

        previous_position, previous_score = prior
        comparisons.append(
            WeekComparison(
                name=result.name,
                current_position=position,
                current_score=result.total_score,
                previous_position=previous_position,
                previous_score=previous_score,
                position_change=previous_position - position,
                score_change=result.total_score - previous_score,
            )
        )

    return comparisons


async def compare_weeks(
    store: HistoryStore, week_a: int, week_b: int, group_filter: str = "all"
) -> list[WeekComparison] | None:
    """Compare stored leaderboards; None when either week has no scores."""
    scores_a = await store.get_scores(week_a)
    scores_b = await store.get_scores(week_b)
    if scores_a is None or scores_b is None:
        return None
    return compare_scores(scores_a, scores_b, group_filter)


def get_biggest_movers(
    comparisons: list[WeekComparison], limit: int = DEFAULT_LIMIT
) -> list[WeekComparison]:
    """Largest absolute rank change first."""
    moved = [c for c in comparisons if c.position_change is not None]
    return sorted(moved, key=lambda c: abs(c.position_change), reverse=True)[:limit]


def get_biggest_improvers(
    comparisons: list[WeekComparison], limit: int = DEFAULT_LIMIT
) -> list[WeekComparison]:
    """Most negative score change first (only those who improved)."""
    improved = [c for c in comparisons if c.score_change is not None and c.score_change < 0]
    return sorted(improved, key=lambda c: c.score_change)[:limit]


def get_biggest_decliners(
    comparisons: list[WeekComparison], limit: int = DEFAULT_LIMIT
) -> list[WeekComparison]:
    """Most positive score change first (only those who got worse)."""
    declined = [c for c in comparisons if c.score_change is not None and c.score_change > 0]
    return sorted(declined, key=lambda c: c.score_change, reverse=True)[:limit]
