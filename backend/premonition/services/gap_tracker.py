"""Gap tracking for gameweeks the automatic update could not save.

The live provider only ever returns the current table, so a gameweek that
completed between two runs cannot be reconstructed automatically. Each such
gameweek gets a durable record until an operator backfills it by hand.
"""

import json
import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from premonition.services.history_store import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

NEEDS_MANUAL_BACKFILL = "needs_manual_backfill"
MANUALLY_FILLED = "manually_filled"

GAPS_FILENAME = "missed_gameweeks.json"
GAPS_NOTES = (
    "This file tracks gameweeks that were skipped due to automation failures or missed runs."
)


@dataclass(slots=True)
class GapRecord:
    """A skipped gameweek awaiting (or having received) manual backfill."""

    gameweek: int
    detected_at: datetime
    status: str
    reason: str
    filled_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "gameweek": self.gameweek,
            "detectedAt": format_timestamp(self.detected_at),
            "status": self.status,
            "reason": self.reason,
        }
        if self.filled_at is not None:
            data["filledAt"] = format_timestamp(self.filled_at)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GapRecord":
        filled_at = data.get("filledAt")
        return cls(
            gameweek=int(data["gameweek"]),
            detected_at=parse_timestamp(data["detectedAt"]),
            status=data["status"],
            reason=data.get("reason", ""),
            filled_at=parse_timestamp(filled_at) if filled_at else None,
        )


class GapRepository(Protocol):
    """Protocol for gap record persistence."""

    async def list_records(self) -> list[GapRecord]: ...

    async def insert_if_absent(self, record: GapRecord) -> bool: ...

    async def update(self, record: GapRecord) -> None: ...

    async def delete_all(self) -> None: ...


class InMemoryGapRepository:
    """Gap records held in memory (tests and dry runs)."""

    def __init__(self, records: list[GapRecord] | None = None):
        self._records: list[GapRecord] = list(records or [])

    async def list_records(self) -> list[GapRecord]:
        return list(self._records)

    async def insert_if_absent(self, record: GapRecord) -> bool:
        if any(r.gameweek == record.gameweek for r in self._records):
            return False
        self._records.append(record)
        return True

    async def update(self, record: GapRecord) -> None:
        for index, existing in enumerate(self._records):
            if existing.gameweek == record.gameweek:
                self._records[index] = record
                return

    async def delete_all(self) -> None:
        self._records.clear()


class JsonGapRepository:
    """Gap records stored in a JSON document, created on first use."""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / GAPS_FILENAME

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"missedGameweeks": [], "lastChecked": None, "notes": GAPS_NOTES}
        return json.loads(self.path.read_text(encoding="utf-8"))

    def _write(self, data: dict[str, Any]) -> None:
        data["lastChecked"] = format_timestamp(datetime.now(UTC))
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self.path)

    async def list_records(self) -> list[GapRecord]:
        return [GapRecord.from_dict(item) for item in self._read()["missedGameweeks"]]

    async def insert_if_absent(self, record: GapRecord) -> bool:
        data = self._read()
        if any(item["gameweek"] == record.gameweek for item in data["missedGameweeks"]):
            return False
        data["missedGameweeks"].append(record.to_dict())
        self._write(data)
        return True

    async def update(self, record: GapRecord) -> None:
        data = self._read()
        for index, item in enumerate(data["missedGameweeks"]):
            if item["gameweek"] == record.gameweek:
                data["missedGameweeks"][index] = record.to_dict()
                self._write(data)
                return

    async def delete_all(self) -> None:
        data = self._read()
        data["missedGameweeks"] = []
        self._write(data)


class GapTracker:
    """Records, resolves and reports missed gameweeks."""

    def __init__(self, repository: GapRepository):
        self.repository = repository

    async def record_gap(self, last_saved: int, current_complete: int) -> list[int]:
        """Record every gameweek in [last_saved + 1, current_complete - 1].

        Idempotent: gameweeks that already have a record are left untouched.

        Returns:
            The gameweeks newly recorded
        """
        missed = list(range(last_saved + 1, current_complete))
        if not missed:
            return []

        now = datetime.now(UTC)
        reason = (
            f"Skipped during update. Last saved: GW{last_saved}, "
            f"Current complete: GW{current_complete}"
        )
        recorded = []
        for gameweek in missed:
            record = GapRecord(
                gameweek=gameweek,
                detected_at=now,
                status=NEEDS_MANUAL_BACKFILL,
                reason=reason,
            )
            if await self.repository.insert_if_absent(record):
                recorded.append(gameweek)

        logger.warning(
            f"GAP DETECTED: missed gameweeks {', '.join(map(str, missed))}. "
            "Manual backfill needed."
        )
        return recorded

    async def mark_as_manually_filled(self, gameweek: int) -> bool:
        """Flip a record to manually_filled. No-op if there is no record."""
        for record in await self.repository.list_records():
            if record.gameweek == gameweek:
                record.status = MANUALLY_FILLED
                record.filled_at = datetime.now(UTC)
                await self.repository.update(record)
                logger.info(f"Marked GW{gameweek} as manually filled in gap tracker")
                return True
        return False

    async def get_missed_gameweeks(self) -> list[GapRecord]:
        """Records still waiting for manual backfill."""
        records = await self.repository.list_records()
        return sorted(
            (r for r in records if r.status == NEEDS_MANUAL_BACKFILL),
            key=lambda r: r.gameweek,
        )

    async def get_all_records(self) -> list[GapRecord]:
        return sorted(await self.repository.list_records(), key=lambda r: r.gameweek)

    async def clear_all_gaps(self) -> None:
        """Delete every record. Deliberate operator reset only."""
        await self.repository.delete_all()
        logger.info("All gap records cleared")

    async def check_for_gaps(self) -> bool:
        """Log outstanding gaps; True if any exist."""
        missed = await self.get_missed_gameweeks()
        if not missed:
            return False

        details = "\n".join(
            f"  GW{r.gameweek} - detected at {format_timestamp(r.detected_at)}: {r.reason}"
            for r in missed
        )
        logger.warning(
            f"The following gameweeks need manual backfill:\n{details}\n"
            f"To fill, run: python -m scripts.manual_override {missed[0].gameweek} <20 teams>"
        )
        return True
