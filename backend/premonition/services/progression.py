"""Gameweek progression: decide whether the live table completes a new gameweek.

A gameweek is complete only when every team has played it, so the minimum
games-played value across the table is the authoritative boundary. The
maximum is informational and never gates a write.

Each run moves the history forward by at most one gameweek. When more than
one gameweek completed since the last save, the run writes nothing, records
the gap and raises, because the provider cannot return historical tables.
"""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field

from premonition.exceptions import (
    GameweekAlreadySavedError,
    GamesPlayedMismatchError,
    MissedGameweekError,
    UnknownTeamError,
    ValidationError,
)
from premonition.services.gap_tracker import GapTracker
from premonition.services.history_store import HistoryStore
from premonition.services.models import (
    LiveStandings,
    LiveTableEntry,
    Prediction,
    ScoredResult,
    StandingsSnapshot,
)
from premonition.services.scoring import score_all_participants
from premonition.services.team_names import check_all_mappable, normalize_team_name
from premonition.services.validators import (
    log_preview,
    validate_gameweek_number,
    validate_games_played,
    validate_snapshot,
)

logger = logging.getLogger(__name__)

# Progression outcomes
IN_PROGRESS = "in_progress"
ALREADY_SAVED = "already_saved"
ALREADY_EXISTS = "already_exists"
ADVANCED = "advanced"
DRY_RUN = "dry_run"


@dataclass(slots=True)
class GamesPlayedSummary:
    """Distribution of games played across the live table."""

    min_games: int
    max_games: int
    all_level: bool
    teams_by_games: dict[int, list[str]] = field(default_factory=dict)


@dataclass(slots=True)
class ProgressionResult:
    """What a progression run decided and, on advance, what it wrote."""

    outcome: str
    last_saved: int
    highest_complete: int
    max_games_played: int
    gameweek: int | None = None
    standings: StandingsSnapshot | None = None
    scores: list[ScoredResult] | None = None

    @property
    def saved(self) -> bool:
        return self.outcome == ADVANCED


def summarize_games_played(table: list[LiveTableEntry]) -> GamesPlayedSummary:
    """Min/max games played and the teams at each count."""
    if not table:
        raise ValidationError(["Live table is empty"])

    teams_by_games: dict[int, list[str]] = defaultdict(list)
    for entry in table:
        teams_by_games[entry.played_games].append(entry.team_name)

    min_games = min(teams_by_games)
    max_games = max(teams_by_games)
    return GamesPlayedSummary(
        min_games=min_games,
        max_games=max_games,
        all_level=min_games == max_games,
        teams_by_games=dict(sorted(teams_by_games.items())),
    )


def highest_complete_gameweek(table: list[LiveTableEntry]) -> int:
    """The latest gameweek every team has played (minimum games played)."""
    return summarize_games_played(table).min_games


def duplicate_live_positions(table: list[LiveTableEntry]) -> list[int]:
    """Positions reported by more than one live row.

    Checked on the raw table because converting to a position map keeps
    only the last row for each position.
    """
    counts = Counter(entry.position for entry in table)
    return sorted(position for position, count in counts.items() if count > 1)


def convert_live_table(table: list[LiveTableEntry]) -> dict[int, str]:
    """Live table -> position: canonical team name.

    Raises:
        UnknownTeamError: If any team name has no mapping
    """
    return {entry.position: normalize_team_name(entry.team_name) for entry in table}


class GameweekProgressionEngine:
    """Advances the history store by exactly one gameweek when the live table allows.

    Stateless between runs: the decision depends only on the store contents
    and the live table passed to ``run``.
    """

    def __init__(
        self,
        store: HistoryStore,
        gap_tracker: GapTracker,
        predictions: list[Prediction],
    ) -> None:
        self.store = store
        self.gap_tracker = gap_tracker
        self.predictions = predictions

    async def run(
        self, live: LiveStandings | list[LiveTableEntry], dry_run: bool = False
    ) -> ProgressionResult:
        """Evaluate the live table and save the next gameweek if it is complete.

        Raises:
            UnknownTeamError: A live team name has no canonical mapping
            MissedGameweekError: More than one gameweek completed since the last save
            GamesPlayedMismatchError: Not every team has played the target gameweek
            ValidationError: The converted snapshot or gameweek number is invalid
        """
        table = live.table if isinstance(live, LiveStandings) else live

        unmapped = check_all_mappable(entry.team_name for entry in table)
        if unmapped:
            raise UnknownTeamError(unmapped)
        logger.info("Team mapping validation: PASSED")

        summary = summarize_games_played(table)
        logger.info(f"Games played - Min: {summary.min_games}, Max: {summary.max_games}")
        if not summary.all_level:
            lagging = summary.teams_by_games[summary.min_games]
            logger.info(f"Teams with {summary.min_games} games: {', '.join(lagging)}")

        last_saved = await self.store.last_saved_gameweek()
        highest_complete = summary.min_games
        next_to_save = last_saved + 1

        result = ProgressionResult(
            outcome=IN_PROGRESS,
            last_saved=last_saved,
            highest_complete=highest_complete,
            max_games_played=summary.max_games,
        )

        if highest_complete < next_to_save:
            if highest_complete == last_saved:
                result.outcome = ALREADY_SAVED
                logger.info(f"GW{highest_complete} is the latest complete gameweek (already saved)")
            else:
                logger.info(
                    f"No new complete gameweek. Next to save: GW{next_to_save}, "
                    f"highest complete: GW{highest_complete}"
                )
            return result

        if highest_complete > next_to_save:
            logger.warning(
                f"Multiple gameweeks completed since last update: last saved GW{last_saved}, "
                f"current complete GW{highest_complete}. Refusing to write."
            )
            if not dry_run:
                await self.gap_tracker.record_gap(last_saved, highest_complete)
            raise MissedGameweekError(last_saved, highest_complete)

        return await self._advance(table, result, next_to_save, dry_run)

    async def _advance(
        self,
        table: list[LiveTableEntry],
        result: ProgressionResult,
        gameweek: int,
        dry_run: bool,
    ) -> ProgressionResult:
        result.gameweek = gameweek

        if await self.store.has_gameweek(gameweek):
            logger.warning(f"GW{gameweek} already exists and will NOT be overwritten")
            result.outcome = ALREADY_EXISTS
            return result

        gw_validation = validate_gameweek_number(gameweek)
        if not gw_validation.valid:
            raise ValidationError(gw_validation.errors)

        games_validation = validate_games_played(table, gameweek)
        if not games_validation.valid:
            raise GamesPlayedMismatchError(gameweek, games_validation.offending)

        duplicates = duplicate_live_positions(table)
        positions = convert_live_table(table)
        data_validation = validate_snapshot(positions)
        errors = list(data_validation.errors)
        if duplicates:
            errors.append(
                f"Duplicate positions found: {', '.join(str(p) for p in duplicates)}"
            )
        if errors:
            raise ValidationError(errors)

        standings = StandingsSnapshot(gameweek=gameweek, positions=positions)
        log_preview(gameweek, positions)
        scores = score_all_participants(standings, self.predictions)

        result.standings = standings
        result.scores = scores

        if dry_run:
            logger.info(f"DRY RUN: GW{gameweek} would be saved")
            result.outcome = DRY_RUN
            return result

        try:
            await self.store.append_gameweek(standings, scores)
        except GameweekAlreadySavedError:
            logger.warning(f"GW{gameweek} appeared in the store during the run; not overwritten")
            result.outcome = ALREADY_EXISTS
            return result

        logger.info(f"GW{gameweek} saved with {len(scores)} participant scores")
        result.outcome = ADVANCED
        return result
