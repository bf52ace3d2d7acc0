"""Tests for group statistics and the consensus ranking."""

import pytest

from premonition.services.consensus import (
    calculate_group_statistics,
    calculate_over_under_achievers,
    create_group_consensus,
    create_group_prediction_ranks,
    round_half_up,
)
from premonition.services.models import Prediction
from tests.factories import TABLE_ORDER, make_snapshot


class TestRoundHalfUp:
    """Tests for round_half_up."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(2.25, 2.3), (2.24, 2.2), (7.333, 7.3), (8.667, 8.7), (14.0, 14.0)],
    )
    def test_rounding(self, value: float, expected: float):
        assert round_half_up(value) == expected


class TestGroupStatistics:
    """Tests for calculate_group_statistics."""

    def test_spread_for_one_team(self, predictions):
        stats = calculate_group_statistics(predictions, "TOG")

        arsenal = stats["Arsenal"]
        assert arsenal.positions == [20, 2, 20]
        assert arsenal.count == 3
        assert arsenal.mean == 14.0
        assert arsenal.median == 20.0
        assert arsenal.std_dev == 8.5
        assert arsenal.range_low == 22.5
        assert arsenal.range_high == 5.5

    def test_unanimous_team(self):
        predictions = [
            Prediction(name=n, groups=("X",), rankings=tuple(TABLE_ORDER)) for n in ("A", "B")
        ]

        stats = calculate_group_statistics(predictions, "X")

        assert stats["Chelsea"].mean == 4.0
        assert stats["Chelsea"].std_dev == 0.0

    def test_empty_group(self, predictions):
        stats = calculate_group_statistics(predictions, "NOPE")

        assert len(stats) == 20
        assert all(s.mean is None and s.count == 0 for s in stats.values())


class TestConsensus:
    """Tests for the consensus ranking."""

    def test_ties_break_alphabetically(self, predictions):
        """Arsenal and Manchester City both average 1.5 in LIV."""
        assert create_group_consensus(predictions, "LIV") == TABLE_ORDER

    def test_mean_ordering(self, predictions):
        consensus = create_group_consensus(predictions, "TOG")

        assert consensus[:3] == ["Manchester City", "Wolverhampton Wanderers", "Aston Villa"]
        assert consensus[-1] == "Arsenal"
        assert len(consensus) == 20

    def test_prediction_ranks(self, predictions):
        ranks = create_group_prediction_ranks(predictions, "TOG")

        assert ranks["Manchester City"] == 1
        assert ranks["Arsenal"] == 20
        assert sorted(ranks.values()) == list(range(1, 21))

    def test_empty_group(self, predictions):
        assert create_group_consensus(predictions, "NOPE") == []


class TestOverUnderAchievers:
    """Tests for calculate_over_under_achievers."""

    def test_tog_against_table(self, predictions):
        over, under = calculate_over_under_achievers(predictions, make_snapshot(1), "TOG")

        assert [(p.team, p.delta) for p in over] == [("Arsenal", 19)]
        assert [(p.team, p.delta) for p in under] == [
            ("Wolverhampton Wanderers", -18),
            ("Manchester City", -1),
        ]
        assert under[0].current_position == 20
        assert under[0].group_predicted == 2

    def test_limit(self, predictions):
        reversed_table = list(reversed(TABLE_ORDER))

        over, under = calculate_over_under_achievers(
            predictions, make_snapshot(1, reversed_table), "LIV", limit=5
        )

        assert len(over) == 5
        assert len(under) == 5
        assert over[0].delta >= over[-1].delta
        assert under[0].delta <= under[-1].delta
