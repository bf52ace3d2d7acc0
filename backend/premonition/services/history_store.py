"""Append-only history of standings and scores, keyed by gameweek.

Invariants every backend enforces:
- Standings are never overwritten once saved.
- Gameweeks are appended contiguously from 1 (next = last saved + 1).
- Standings and scores for a gameweek are saved together.

Only scores may be replaced, by score regeneration.
"""

import json
import logging
import os
import shutil
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from premonition.exceptions import GameweekAlreadySavedError, NonContiguousGameweekError
from premonition.services.models import ScoredResult, StandingsSnapshot, TeamScore

logger = logging.getLogger(__name__)

STANDINGS_FILENAME = "standings_by_gameweek.json"
SCORES_FILENAME = "scores_by_gameweek.json"
LAST_UPDATED_KEY = "lastUpdated"

BackupHook = Callable[[list[Path]], list[Path]]


class HistoryStore(Protocol):
    """Protocol for history store dependency injection."""

    async def get_all_standings(self) -> dict[int, StandingsSnapshot]: ...

    async def get_standings(self, gameweek: int) -> StandingsSnapshot | None: ...

    async def get_all_scores(self) -> dict[int, list[ScoredResult]]: ...

    async def get_scores(self, gameweek: int) -> list[ScoredResult] | None: ...

    async def last_saved_gameweek(self) -> int: ...

    async def has_gameweek(self, gameweek: int) -> bool: ...

    async def last_updated(self) -> datetime | None: ...

    async def append_gameweek(
        self, standings: StandingsSnapshot, scores: list[ScoredResult]
    ) -> None: ...

    async def replace_scores(self, gameweek: int, scores: list[ScoredResult]) -> None: ...


# =============================================================================
# Document encoding
# =============================================================================


def scored_result_to_dict(result: ScoredResult) -> dict[str, Any]:
    """Encode a ScoredResult in the camelCase shape the dashboard reads."""
    data: dict[str, Any] = {
        "name": result.name,
        "groups": list(result.groups),
        "totalScore": result.total_score,
        "teamScores": {
            team: {
                "score": ts.score,
                "predictedPosition": ts.predicted_position,
                "actualPosition": ts.actual_position,
                "difference": ts.difference,
            }
            for team, ts in result.team_scores.items()
        },
    }
    if result.is_consensus:
        data["isConsensus"] = True
        data["consensusRanking"] = list(result.consensus_ranking or [])
    return data


def scored_result_from_dict(data: dict[str, Any]) -> ScoredResult:
    return ScoredResult(
        name=data["name"],
        groups=list(data.get("groups", [])),
        total_score=int(data["totalScore"]),
        team_scores={
            team: TeamScore(
                score=int(ts["score"]),
                predicted_position=int(ts["predictedPosition"]),
                actual_position=int(ts["actualPosition"]),
                difference=int(ts["difference"]),
            )
            for team, ts in data.get("teamScores", {}).items()
        },
        is_consensus=bool(data.get("isConsensus", False)),
        consensus_ranking=data.get("consensusRanking"),
    )


def positions_to_dict(standings: StandingsSnapshot) -> dict[str, str]:
    return {str(position): standings.positions[position] for position in sorted(standings.positions)}


def positions_from_dict(data: dict[str, str]) -> dict[int, str]:
    return {int(position): team for position, team in data.items()}


def _gameweek_keys(document: dict[str, Any]) -> list[int]:
    """Numeric keys of a document, skipping lastUpdated and other metadata."""
    return sorted(int(key) for key in document if key.isascii() and key.isdecimal())


def parse_timestamp(value: str | None) -> datetime | None:
    """ISO 8601 with a trailing Z, as written by format_timestamp."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def format_timestamp(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


# =============================================================================
# In-memory store
# =============================================================================


class InMemoryHistoryStore:
    """History store held entirely in memory.

    Used directly as a test double and as the working copy of the JSON file
    store, which loads, mutates and writes back a full document per write.
    """

    def __init__(
        self,
        standings: dict[int, StandingsSnapshot] | None = None,
        scores: dict[int, list[ScoredResult]] | None = None,
        last_updated: datetime | None = None,
    ):
        self._standings: dict[int, StandingsSnapshot] = dict(standings or {})
        self._scores: dict[int, list[ScoredResult]] = dict(scores or {})
        self._last_updated = last_updated
        self.write_count = 0

    async def get_all_standings(self) -> dict[int, StandingsSnapshot]:
        return dict(sorted(self._standings.items()))

    async def get_standings(self, gameweek: int) -> StandingsSnapshot | None:
        return self._standings.get(gameweek)

    async def get_all_scores(self) -> dict[int, list[ScoredResult]]:
        return dict(sorted(self._scores.items()))

    async def get_scores(self, gameweek: int) -> list[ScoredResult] | None:
        scores = self._scores.get(gameweek)
        return list(scores) if scores is not None else None

    async def last_saved_gameweek(self) -> int:
        return max(self._standings, default=0)

    async def has_gameweek(self, gameweek: int) -> bool:
        return gameweek in self._standings

    async def last_updated(self) -> datetime | None:
        return self._last_updated

    async def append_gameweek(
        self, standings: StandingsSnapshot, scores: list[ScoredResult]
    ) -> None:
        gameweek = standings.gameweek
        if gameweek in self._standings:
            raise GameweekAlreadySavedError(gameweek)

        last_saved = max(self._standings, default=0)
        if gameweek != last_saved + 1:
            raise NonContiguousGameweekError(gameweek, last_saved)

        self._standings[gameweek] = standings
        self._scores[gameweek] = list(scores)
        self._last_updated = datetime.now(UTC)
        self.write_count += 1

    async def replace_scores(self, gameweek: int, scores: list[ScoredResult]) -> None:
        if gameweek not in self._standings:
            raise KeyError(f"No standings stored for GW{gameweek}")
        self._scores[gameweek] = list(scores)
        self._last_updated = datetime.now(UTC)
        self.write_count += 1


# =============================================================================
# JSON file store
# =============================================================================


def make_file_backup(backup_dir: Path) -> BackupHook:
    """Build a backup hook copying each file to a timestamped name in ``backup_dir``."""

    def backup(paths: list[Path]) -> list[Path]:
        backup_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(UTC).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        copies = []
        for path in paths:
            if not path.exists():
                continue
            target = backup_dir / f"{path.stem}-{timestamp}{path.suffix}"
            shutil.copy2(path, target)
            logger.info(f"Backup created: {target}")
            copies.append(target)
        return copies

    return backup


def _write_json_tmp(path: Path, data: dict[str, Any]) -> Path:
    """Write ``data`` to a sibling temp file of ``path`` and return the temp path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return tmp_path


def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    return json.loads(path.read_text(encoding="utf-8"))


class JsonFileHistoryStore:
    """History store backed by two JSON documents in ``data_dir``.

    Each operation reads both documents fully. Writes call the backup hook
    immediately before overwriting, so a bad write can be rolled back by hand.
    Not safe for concurrent writers; a single scheduler is assumed.
    """

    def __init__(self, data_dir: Path, backup: BackupHook | None = None):
        self.standings_path = Path(data_dir) / STANDINGS_FILENAME
        self.scores_path = Path(data_dir) / SCORES_FILENAME
        self._backup = backup

    def _load(self) -> InMemoryHistoryStore:
        standings_doc = _read_json(self.standings_path)
        scores_doc = _read_json(self.scores_path)

        standings = {
            gw: StandingsSnapshot(gameweek=gw, positions=positions_from_dict(standings_doc[str(gw)]))
            for gw in _gameweek_keys(standings_doc)
        }
        scores = {
            gw: [scored_result_from_dict(item) for item in scores_doc[str(gw)]]
            for gw in _gameweek_keys(scores_doc)
        }
        return InMemoryHistoryStore(
            standings=standings,
            scores=scores,
            last_updated=parse_timestamp(standings_doc.get(LAST_UPDATED_KEY)),
        )

    async def _save(self, working: InMemoryHistoryStore) -> None:
        updated = await working.last_updated() or datetime.now(UTC)
        stamp = format_timestamp(updated)

        standings_doc: dict[str, Any] = {
            str(gw): positions_to_dict(snapshot)
            for gw, snapshot in (await working.get_all_standings()).items()
        }
        standings_doc[LAST_UPDATED_KEY] = stamp

        scores_doc: dict[str, Any] = {
            str(gw): [scored_result_to_dict(r) for r in results]
            for gw, results in (await working.get_all_scores()).items()
        }
        scores_doc[LAST_UPDATED_KEY] = stamp

        if self._backup is not None:
            self._backup([self.standings_path, self.scores_path])

        # Both documents are fully written before either is replaced
        tmp_paths: list[Path] = []
        try:
            tmp_paths.append(_write_json_tmp(self.standings_path, standings_doc))
            tmp_paths.append(_write_json_tmp(self.scores_path, scores_doc))
        except OSError:
            for tmp_path in tmp_paths:
                tmp_path.unlink(missing_ok=True)
            raise

        previous_standings = (
            self.standings_path.read_bytes() if self.standings_path.exists() else None
        )
        os.replace(tmp_paths[0], self.standings_path)
        try:
            os.replace(tmp_paths[1], self.scores_path)
        except OSError:
            logger.error(f"Failed to replace {self.scores_path}; restoring {self.standings_path}")
            self._restore_standings(previous_standings)
            tmp_paths[1].unlink(missing_ok=True)
            raise

    def _restore_standings(self, previous: bytes | None) -> None:
        """Put the standings document back as it was before the failed save."""
        if previous is None:
            self.standings_path.unlink(missing_ok=True)
            return
        tmp_path = self.standings_path.with_suffix(self.standings_path.suffix + ".tmp")
        tmp_path.write_bytes(previous)
        os.replace(tmp_path, self.standings_path)

    async def get_all_standings(self) -> dict[int, StandingsSnapshot]:
        return await self._load().get_all_standings()

    async def get_standings(self, gameweek: int) -> StandingsSnapshot | None:
        return await self._load().get_standings(gameweek)

    async def get_all_scores(self) -> dict[int, list[ScoredResult]]:
        return await self._load().get_all_scores()

    async def get_scores(self, gameweek: int) -> list[ScoredResult] | None:
        return await self._load().get_scores(gameweek)

    async def last_saved_gameweek(self) -> int:
        return await self._load().last_saved_gameweek()

    async def has_gameweek(self, gameweek: int) -> bool:
        return await self._load().has_gameweek(gameweek)

    async def last_updated(self) -> datetime | None:
        return await self._load().last_updated()

    async def append_gameweek(
        self, standings: StandingsSnapshot, scores: list[ScoredResult]
    ) -> None:
        working = self._load()
        await working.append_gameweek(standings, scores)
        await self._save(working)
        logger.info(f"GW{standings.gameweek} written to {self.standings_path}")

    async def replace_scores(self, gameweek: int, scores: list[ScoredResult]) -> None:
        working = self._load()
        await working.replace_scores(gameweek, scores)
        await self._save(working)
        logger.info(f"GW{gameweek} scores replaced in {self.scores_path}")
