"""Tests for prediction scoring."""

from premonition.services.models import CONSENSUS_NAME, Prediction, ScoredResult
from premonition.services.scoring import (
    build_leaderboard,
    score_all_participants,
    score_group_consensus,
    score_rankings,
    scores_match,
)
from tests.factories import TABLE_ORDER, make_snapshot, swapped


class TestScoreRankings:
    """Tests for scoring a single ranking."""

    def test_perfect_prediction_scores_zero(self):
        snapshot = make_snapshot(1)

        result = score_rankings("Alice", ["LIV"], TABLE_ORDER, snapshot.team_positions())

        assert result.total_score == 0
        assert all(ts.score == 0 for ts in result.team_scores.values())

    def test_per_team_breakdown(self):
        snapshot = make_snapshot(1)
        rankings = swapped(TABLE_ORDER, 0, 2)  # Aston Villa first, Arsenal third

        result = score_rankings("Eve", [], rankings, snapshot.team_positions())

        villa = result.team_scores["Aston Villa"]
        assert villa.predicted_position == 1
        assert villa.actual_position == 3
        assert villa.difference == -2
        assert villa.score == 2
        assert result.team_scores["Arsenal"].difference == 2
        assert result.total_score == 4

    def test_unknown_team_skipped(self):
        """A misspelled team contributes nothing instead of failing."""
        snapshot = make_snapshot(1)
        rankings = ["Arsenl"] + TABLE_ORDER[1:]

        result = score_rankings("Typo", [], rankings, snapshot.team_positions())

        assert "Arsenl" not in result.team_scores
        assert len(result.team_scores) == 19
        assert result.total_score == 0


class TestScoreAllParticipants:
    """Tests for scoring the whole dataset."""

    def test_sorted_ascending(self, predictions):
        results = score_all_participants(make_snapshot(1), predictions)

        assert [r.name for r in results] == ["Alice", "Carol", "Dan", "Bob"]
        assert [r.total_score for r in results] == [0, 2, 38, 200]

    def test_total_is_sum_of_team_scores(self, predictions):
        snapshot = make_snapshot(1, swapped(TABLE_ORDER, 3, 17))

        for result in score_all_participants(snapshot, predictions):
            assert result.total_score == sum(ts.score for ts in result.team_scores.values())
            assert all(ts.score >= 0 for ts in result.team_scores.values())

    def test_deterministic(self, predictions):
        snapshot = make_snapshot(3, swapped(TABLE_ORDER, 5, 9))

        first = score_all_participants(snapshot, predictions)
        second = score_all_participants(snapshot, predictions)

        assert first == second

    def test_ties_keep_dataset_order(self):
        predictions = [
            Prediction(name="Zed", groups=(), rankings=tuple(swapped(TABLE_ORDER, 0, 1))),
            Prediction(name="Amy", groups=(), rankings=tuple(swapped(TABLE_ORDER, 2, 3))),
        ]

        results = score_all_participants(make_snapshot(1), predictions)

        assert [r.name for r in results] == ["Zed", "Amy"]

    def test_group_filter(self, predictions):
        everyone = score_all_participants(make_snapshot(1), predictions)
        liv = score_all_participants(make_snapshot(1), predictions, "LIV")

        assert [r.name for r in liv] == ["Alice", "Carol"]
        assert all("LIV" in r.groups for r in liv)
        assert len(liv) <= len(everyone)

    def test_unknown_group_is_empty(self, predictions):
        assert score_all_participants(make_snapshot(1), predictions, "NOPE") == []


class TestConsensusScoring:
    """Tests for the synthetic consensus participant."""

    def test_consensus_entry_is_tagged(self, predictions):
        result = score_group_consensus(make_snapshot(1), predictions, "LIV")

        assert result.name == CONSENSUS_NAME
        assert result.is_consensus is True
        assert result.groups == ["LIV"]
        assert result.consensus_ranking == TABLE_ORDER
        assert result.total_score == 0

    def test_leaderboard_merges_consensus(self, predictions):
        results = build_leaderboard(make_snapshot(1), predictions, "LIV")

        assert [r.name for r in results] == ["Alice", CONSENSUS_NAME, "Carol"]

    def test_leaderboard_without_consensus(self, predictions):
        results = build_leaderboard(make_snapshot(1), predictions, include_consensus=False)

        assert not any(r.is_consensus for r in results)

    def test_empty_group_has_no_consensus(self, predictions):
        assert build_leaderboard(make_snapshot(1), predictions, "NOPE") == []


class TestScoresMatch:
    """Tests for comparing two leaderboards."""

    def test_identical(self, predictions):
        results = score_all_participants(make_snapshot(1), predictions)

        assert scores_match(results, results) == []

    def test_total_mismatch(self):
        expected = [ScoredResult(name="Alice", groups=[], total_score=4)]
        actual = [ScoredResult(name="Alice", groups=[], total_score=6)]

        assert scores_match(expected, actual) == ["Alice: saved=6, calculated=4"]

    def test_missing_participant(self):
        expected = [ScoredResult(name="Alice", groups=[], total_score=4)]

        assert scores_match(expected, []) == ["Alice: saved=None, calculated=4"]

    def test_extra_participant(self):
        alice = ScoredResult(name="Alice", groups=[], total_score=4)
        bob = ScoredResult(name="Bob", groups=[], total_score=9)

        assert scores_match([alice], [alice, bob]) == [
            "Player count mismatch: saved=2, calculated=1"
        ]
