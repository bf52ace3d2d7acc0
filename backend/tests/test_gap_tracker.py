"""Tests for the missed-gameweek tracker."""

import json
from datetime import UTC, datetime

import pytest

from premonition.services.gap_tracker import (
    GAPS_FILENAME,
    MANUALLY_FILLED,
    NEEDS_MANUAL_BACKFILL,
    GapRecord,
    GapTracker,
    InMemoryGapRepository,
    JsonGapRepository,
)


@pytest.fixture(params=["memory", "json"])
def tracker(request, tmp_path) -> GapTracker:
    """Same behaviour expected from every repository."""
    if request.param == "memory":
        return GapTracker(InMemoryGapRepository())
    return GapTracker(JsonGapRepository(tmp_path))


class TestRecordGap:
    """Tests for record_gap."""

    async def test_records_range_between_saved_and_complete(self, tracker: GapTracker):
        recorded = await tracker.record_gap(last_saved=5, current_complete=8)

        assert recorded == [6, 7]
        missed = await tracker.get_missed_gameweeks()
        assert [r.gameweek for r in missed] == [6, 7]
        assert all(r.status == NEEDS_MANUAL_BACKFILL for r in missed)
        assert "Last saved: GW5" in missed[0].reason

    async def test_idempotent(self, tracker: GapTracker):
        await tracker.record_gap(5, 8)

        recorded = await tracker.record_gap(5, 8)

        assert recorded == []
        assert len(await tracker.get_all_records()) == 2

    async def test_overlapping_ranges_deduplicated(self, tracker: GapTracker):
        await tracker.record_gap(5, 8)
        await tracker.record_gap(6, 10)

        assert [r.gameweek for r in await tracker.get_all_records()] == [6, 7, 8, 9]

    async def test_adjacent_gameweeks_record_nothing(self, tracker: GapTracker):
        assert await tracker.record_gap(5, 6) == []
        assert await tracker.get_all_records() == []


class TestMarkAsManuallyFilled:
    """Tests for mark_as_manually_filled."""

    async def test_flips_status(self, tracker: GapTracker):
        await tracker.record_gap(5, 8)

        assert await tracker.mark_as_manually_filled(6) is True

        missed = await tracker.get_missed_gameweeks()
        assert [r.gameweek for r in missed] == [7]
        filled = [r for r in await tracker.get_all_records() if r.gameweek == 6][0]
        assert filled.status == MANUALLY_FILLED
        assert filled.filled_at is not None

    async def test_no_record_is_noop(self, tracker: GapTracker):
        assert await tracker.mark_as_manually_filled(12) is False
        assert await tracker.get_all_records() == []


class TestClearAndCheck:
    """Tests for clear_all_gaps and check_for_gaps."""

    async def test_clear_all_gaps(self, tracker: GapTracker):
        await tracker.record_gap(1, 4)

        await tracker.clear_all_gaps()

        assert await tracker.get_all_records() == []

    async def test_check_for_gaps(self, tracker: GapTracker):
        assert await tracker.check_for_gaps() is False

        await tracker.record_gap(1, 3)

        assert await tracker.check_for_gaps() is True

    async def test_filled_gaps_not_outstanding(self, tracker: GapTracker):
        await tracker.record_gap(1, 3)
        await tracker.mark_as_manually_filled(2)

        assert await tracker.check_for_gaps() is False


class TestJsonGapRepository:
    """On-disk document format."""

    async def test_document_shape(self, tmp_path):
        tracker = GapTracker(JsonGapRepository(tmp_path))

        await tracker.record_gap(5, 7)

        document = json.loads((tmp_path / GAPS_FILENAME).read_text())
        assert set(document) == {"missedGameweeks", "lastChecked", "notes"}
        assert document["missedGameweeks"][0]["gameweek"] == 6
        assert document["missedGameweeks"][0]["status"] == "needs_manual_backfill"
        assert document["missedGameweeks"][0]["detectedAt"].endswith("Z")
        assert "filledAt" not in document["missedGameweeks"][0]

    async def test_missing_file_reads_empty(self, tmp_path):
        repository = JsonGapRepository(tmp_path / "nested")

        assert await repository.list_records() == []

    def test_record_round_trip(self):
        record = GapRecord(
            gameweek=14,
            detected_at=datetime(2025, 12, 1, 6, 0, tzinfo=UTC),
            status=MANUALLY_FILLED,
            reason="Skipped",
            filled_at=datetime(2025, 12, 2, 9, 30, tzinfo=UTC),
        )

        data = record.to_dict()

        assert data["detectedAt"] == "2025-12-01T06:00:00Z"
        assert GapRecord.from_dict(data) == record
