"""Prediction scoring against official standings.

These functions are stateless: the same snapshot and predictions always
produce the same ordered output, which the health check relies on to verify
stored scores.

Scoring is golf-style. Each team contributes |predicted - actual| and the
lowest total wins.
"""

from collections.abc import Sequence

from premonition.services.consensus import create_group_consensus
from premonition.services.models import (
    CONSENSUS_NAME,
    Prediction,
    ScoredResult,
    StandingsSnapshot,
    TeamScore,
)
from premonition.services.predictions import filter_by_group


def score_rankings(
    name: str,
    groups: list[str],
    rankings: Sequence[str],
    team_positions: dict[str, int],
) -> ScoredResult:
    """Score one ordered ranking against a team -> actual position lookup.

    Teams with no actual position are skipped rather than failing the whole
    computation, so a misspelled team only lowers that participant's total.
    """
    total_score = 0
    team_scores: dict[str, TeamScore] = {}

    for index, team in enumerate(rankings):
        predicted = index + 1
        actual = team_positions.get(team)
        if actual is None:
            continue

        score = abs(predicted - actual)
        total_score += score
        team_scores[team] = TeamScore(
            score=score,
            predicted_position=predicted,
            actual_position=actual,
            difference=predicted - actual,
        )

    return ScoredResult(
        name=name,
        groups=list(groups),
        total_score=total_score,
        team_scores=team_scores,
    )


def score_all_participants(
    standings: StandingsSnapshot,
    predictions: list[Prediction],
    group_filter: str = "all",
) -> list[ScoredResult]:
    """Score every participant in ``group_filter`` for the snapshot's gameweek.

    Returns:
        Results sorted ascending by total score; ties keep dataset order.
    """
    team_positions = standings.team_positions()
    results = [
        score_rankings(p.name, list(p.groups), p.rankings, team_positions)
        for p in filter_by_group(predictions, group_filter)
    ]
    return sorted(results, key=lambda r: r.total_score)


def score_group_consensus(
    standings: StandingsSnapshot,
    predictions: list[Prediction],
    group_filter: str = "all",
) -> ScoredResult:
    """Score the group's mean-position ranking as a synthetic participant."""
    consensus = create_group_consensus(predictions, group_filter)
    result = score_rankings(
        CONSENSUS_NAME, [group_filter], consensus, standings.team_positions()
    )
    result.is_consensus = True
    result.consensus_ranking = consensus
    return result


def build_leaderboard(
    standings: StandingsSnapshot,
    predictions: list[Prediction],
    group_filter: str = "all",
    include_consensus: bool = True,
) -> list[ScoredResult]:
    """Participants plus (optionally) the group consensus, ranked together.

    The consensus entry is appended after the participants before the stable
    sort, so it ranks below anyone it ties with.
    """
    results = score_all_participants(standings, predictions, group_filter)
    if include_consensus and filter_by_group(predictions, group_filter):
        results.append(score_group_consensus(standings, predictions, group_filter))
    return sorted(results, key=lambda r: r.total_score)


def scores_match(expected: list[ScoredResult], actual: list[ScoredResult]) -> list[str]:
    """Compare two leaderboards by participant total.

    Returns:
        Human-readable mismatch descriptions (empty when they agree)
    """
    mismatches: list[str] = []
    actual_totals = {r.name: r.total_score for r in actual}

    for result in expected:
        saved = actual_totals.get(result.name)
        if saved != result.total_score:
            mismatches.append(f"{result.name}: saved={saved}, calculated={result.total_score}")

    if not mismatches and len(expected) != len(actual):
        mismatches.append(f"Player count mismatch: saved={len(actual)}, calculated={len(expected)}")

    return mismatches
