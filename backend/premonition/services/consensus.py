"""Group statistics over the prediction dataset.

Pure functions: the consensus ranking of a group is the 20 teams ordered by
their mean predicted position across the group's participants.
"""

import math
from dataclasses import dataclass, field
from statistics import median, pstdev

from premonition.services.models import Prediction, StandingsSnapshot
from premonition.services.predictions import filter_by_group
from premonition.services.team_names import CANONICAL_TEAMS

ACHIEVER_LIMIT = 5


@dataclass(slots=True)
class TeamGroupStats:
    """Spread of predicted positions for one team within a group."""

    team: str
    mean: float | None
    median: float | None
    std_dev: float | None
    range_low: float | None  # mean + 1 sd (numerically larger = lower in the table)
    range_high: float | None  # mean - 1 sd
    count: int
    positions: list[int] = field(default_factory=list)


@dataclass(slots=True)
class TeamPerformance:
    """A team's actual position against the group's consensus rank."""

    team: str
    current_position: int
    group_predicted: int
    delta: int  # positive = overachieving


def round_half_up(value: float, digits: int = 1) -> float:
    """Round like a spreadsheet does (2.25 -> 2.3), not banker's rounding."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def calculate_group_statistics(
    predictions: list[Prediction], group_filter: str = "all"
) -> dict[str, TeamGroupStats]:
    """Per-team statistics of predicted positions, keyed by canonical team name.

    Teams nobody in the group predicted report None statistics and count 0.
    Ranking entries that are not canonical team names are ignored.
    """
    collected: dict[str, list[int]] = {team: [] for team in CANONICAL_TEAMS}
    for prediction in filter_by_group(predictions, group_filter):
        for index, team in enumerate(prediction.rankings):
            if team in collected:
                collected[team].append(index + 1)

    stats: dict[str, TeamGroupStats] = {}
    for team, positions in collected.items():
        if not positions:
            stats[team] = TeamGroupStats(
                team=team,
                mean=None,
                median=None,
                std_dev=None,
                range_low=None,
                range_high=None,
                count=0,
            )
            continue

        mean = sum(positions) / len(positions)
        sd = pstdev(positions)
        stats[team] = TeamGroupStats(
            team=team,
            mean=round_half_up(mean),
            median=float(median(positions)),
            std_dev=round_half_up(sd),
            range_low=round_half_up(mean + sd),
            range_high=round_half_up(mean - sd),
            count=len(positions),
            positions=positions,
        )

    return stats


def create_group_consensus(
    predictions: list[Prediction], group_filter: str = "all"
) -> list[str]:
    """Teams ordered by rounded mean predicted position, best first.

    Ties keep alphabetical order. Teams without predictions are left out.
    """
    stats = calculate_group_statistics(predictions, group_filter)
    ranked = [s for s in stats.values() if s.mean is not None]
    ranked.sort(key=lambda s: s.mean)
    return [s.team for s in ranked]


def create_group_prediction_ranks(
    predictions: list[Prediction], group_filter: str = "all"
) -> dict[str, int]:
    """Team -> consensus rank (1-20)."""
    consensus = create_group_consensus(predictions, group_filter)
    return {team: index + 1 for index, team in enumerate(consensus)}


def calculate_over_under_achievers(
    predictions: list[Prediction],
    standings: StandingsSnapshot,
    group_filter: str = "all",
    limit: int = ACHIEVER_LIMIT,
) -> tuple[list[TeamPerformance], list[TeamPerformance]]:
    """Teams furthest above and below where the group expected them.

    Returns:
        (overachievers, underachievers), each at most ``limit`` long.
        Overachievers have the largest positive delta first; underachievers
        the most negative delta first.
    """
    ranks = create_group_prediction_ranks(predictions, group_filter)
    actual = standings.team_positions()

    performance = [
        TeamPerformance(
            team=team,
            current_position=actual[team],
            group_predicted=predicted,
            delta=predicted - actual[team],
        )
        for team, predicted in ranks.items()
        if team in actual
    ]

    overachievers = sorted(
        (p for p in performance if p.delta > 0), key=lambda p: p.delta, reverse=True
    )[:limit]
    underachievers = sorted((p for p in performance if p.delta < 0), key=lambda p: p.delta)[
        :limit
    ]
    return overachievers, underachievers
