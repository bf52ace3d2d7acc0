"""Postgres-backed history store and gap repository (asyncpg)."""

import logging
from datetime import datetime

from premonition.db import get_connection
from premonition.exceptions import GameweekAlreadySavedError, NonContiguousGameweekError
from premonition.services.gap_tracker import GapRecord
from premonition.services.history_store import scored_result_from_dict, scored_result_to_dict
from premonition.services.models import ScoredResult, StandingsSnapshot

logger = logging.getLogger(__name__)


# =============================================================================
# SQL
# =============================================================================

_ALL_STANDINGS_SQL = """
    SELECT gameweek, position, team_name
    FROM standings_snapshot
    ORDER BY gameweek, position
"""

_STANDINGS_SQL = """
    SELECT position, team_name
    FROM standings_snapshot
    WHERE gameweek = $1
    ORDER BY position
"""

_ALL_SCORES_SQL = """
    SELECT gameweek, name, groups, total_score, team_scores
    FROM participant_score
    ORDER BY gameweek, rank
"""

_SCORES_SQL = """
    SELECT name, groups, total_score, team_scores
    FROM participant_score
    WHERE gameweek = $1
    ORDER BY rank
"""

_LAST_SAVED_SQL = "SELECT COALESCE(MAX(gameweek), 0) FROM standings_snapshot"

_HAS_GAMEWEEK_SQL = "SELECT EXISTS(SELECT 1 FROM standings_snapshot WHERE gameweek = $1)"

_LAST_UPDATED_SQL = """
    SELECT GREATEST(
        (SELECT MAX(created_at) FROM standings_snapshot),
        (SELECT MAX(updated_at) FROM participant_score)
    )
"""

_INSERT_STANDING_SQL = """
    INSERT INTO standings_snapshot (gameweek, position, team_name)
    VALUES ($1, $2, $3)
"""

_INSERT_SCORE_SQL = """
    INSERT INTO participant_score (gameweek, rank, name, groups, total_score, team_scores)
    VALUES ($1, $2, $3, $4, $5, $6)
"""

_DELETE_SCORES_SQL = "DELETE FROM participant_score WHERE gameweek = $1"

_LIST_GAPS_SQL = """
    SELECT gameweek, detected_at, status, reason, filled_at
    FROM missed_gameweek
    ORDER BY gameweek
"""

_INSERT_GAP_SQL = """
    INSERT INTO missed_gameweek (gameweek, detected_at, status, reason)
    VALUES ($1, $2, $3, $4)
    ON CONFLICT (gameweek) DO NOTHING
"""

_UPDATE_GAP_SQL = """
    UPDATE missed_gameweek
    SET status = $2, filled_at = $3
    WHERE gameweek = $1
"""

_DELETE_GAPS_SQL = "DELETE FROM missed_gameweek"


def _score_rows(gameweek: int, scores: list[ScoredResult]) -> list[tuple]:
    rows = []
    for rank, result in enumerate(scores, start=1):
        encoded = scored_result_to_dict(result)
        rows.append(
            (
                gameweek,
                rank,
                result.name,
                list(result.groups),
                result.total_score,
                encoded["teamScores"],
            )
        )
    return rows


def _result_from_row(row) -> ScoredResult:
    # team_scores is decoded by the jsonb codec registered in premonition.db
    return scored_result_from_dict(
        {
            "name": row["name"],
            "groups": list(row["groups"] or []),
            "totalScore": row["total_score"],
            "teamScores": row["team_scores"],
        }
    )


class PostgresHistoryStore:
    """History store on the ``standings_snapshot`` and ``participant_score`` tables."""

    async def get_all_standings(self) -> dict[int, StandingsSnapshot]:
        async with get_connection() as conn:
            rows = await conn.fetch(_ALL_STANDINGS_SQL)

        positions: dict[int, dict[int, str]] = {}
        for row in rows:
            positions.setdefault(row["gameweek"], {})[row["position"]] = row["team_name"]
        return {gw: StandingsSnapshot(gameweek=gw, positions=p) for gw, p in positions.items()}

    async def get_standings(self, gameweek: int) -> StandingsSnapshot | None:
        async with get_connection() as conn:
            rows = await conn.fetch(_STANDINGS_SQL, gameweek)

        if not rows:
            return None
        return StandingsSnapshot(
            gameweek=gameweek,
            positions={row["position"]: row["team_name"] for row in rows},
        )

    async def get_all_scores(self) -> dict[int, list[ScoredResult]]:
        async with get_connection() as conn:
            rows = await conn.fetch(_ALL_SCORES_SQL)

        scores: dict[int, list[ScoredResult]] = {}
        for row in rows:
            scores.setdefault(row["gameweek"], []).append(_result_from_row(row))
        return scores

    async def get_scores(self, gameweek: int) -> list[ScoredResult] | None:
        async with get_connection() as conn:
            rows = await conn.fetch(_SCORES_SQL, gameweek)

        if not rows:
            return None
        return [_result_from_row(row) for row in rows]

    async def last_saved_gameweek(self) -> int:
        async with get_connection() as conn:
            return await conn.fetchval(_LAST_SAVED_SQL)

    async def has_gameweek(self, gameweek: int) -> bool:
        async with get_connection() as conn:
            return bool(await conn.fetchval(_HAS_GAMEWEEK_SQL, gameweek))

    async def last_updated(self) -> datetime | None:
        async with get_connection() as conn:
            return await conn.fetchval(_LAST_UPDATED_SQL)

    async def append_gameweek(
        self, standings: StandingsSnapshot, scores: list[ScoredResult]
    ) -> None:
        gameweek = standings.gameweek
        async with get_connection() as conn:
            async with conn.transaction():
                if await conn.fetchval(_HAS_GAMEWEEK_SQL, gameweek):
                    raise GameweekAlreadySavedError(gameweek)

                last_saved = await conn.fetchval(_LAST_SAVED_SQL)
                if gameweek != last_saved + 1:
                    raise NonContiguousGameweekError(gameweek, last_saved)

                await conn.executemany(
                    _INSERT_STANDING_SQL,
                    [(gameweek, position, team) for position, team in sorted(standings.positions.items())],
                )
                await conn.executemany(_INSERT_SCORE_SQL, _score_rows(gameweek, scores))

        logger.info(f"GW{gameweek} written to Postgres ({len(scores)} scores)")

    async def replace_scores(self, gameweek: int, scores: list[ScoredResult]) -> None:
        async with get_connection() as conn:
            async with conn.transaction():
                if not await conn.fetchval(_HAS_GAMEWEEK_SQL, gameweek):
                    raise KeyError(f"No standings stored for GW{gameweek}")

                await conn.execute(_DELETE_SCORES_SQL, gameweek)
                await conn.executemany(_INSERT_SCORE_SQL, _score_rows(gameweek, scores))

        logger.info(f"GW{gameweek} scores replaced in Postgres")


class PostgresGapRepository:
    """Gap records on the ``missed_gameweek`` table."""

    async def list_records(self) -> list[GapRecord]:
        async with get_connection() as conn:
            rows = await conn.fetch(_LIST_GAPS_SQL)

        return [
            GapRecord(
                gameweek=row["gameweek"],
                detected_at=row["detected_at"],
                status=row["status"],
                reason=row["reason"],
                filled_at=row["filled_at"],
            )
            for row in rows
        ]

    async def insert_if_absent(self, record: GapRecord) -> bool:
        async with get_connection() as conn:
            result = await conn.execute(
                _INSERT_GAP_SQL,
                record.gameweek,
                record.detected_at,
                record.status,
                record.reason,
            )
        # asyncpg returns the command tag, e.g. "INSERT 0 1"
        return result.endswith(" 1")

    async def update(self, record: GapRecord) -> None:
        async with get_connection() as conn:
            await conn.execute(
                _UPDATE_GAP_SQL,
                record.gameweek,
                record.status,
                record.filled_at,
            )

    async def delete_all(self) -> None:
        async with get_connection() as conn:
            await conn.execute(_DELETE_GAPS_SQL)
