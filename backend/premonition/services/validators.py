"""Validation checks run before anything is written to the history store.

Each validator evaluates all of its checks independently and returns every
problem found, so an operator sees the full picture from one run.
"""

import logging
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from premonition.services.models import MAX_GAMEWEEK, TEAM_COUNT, LiveTableEntry
from premonition.services.team_names import CANONICAL_TEAMS

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ValidationResult:
    """Outcome of a validation pass."""

    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class GamesPlayedResult:
    """Outcome of the games-played check, with the offending teams."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    offending: list[tuple[str, int]] = field(default_factory=list)


def _as_position(key: Any) -> int | None:
    """Coerce a position key (int or ASCII digit string) to int; None if it is neither."""
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, str):
        stripped = key.strip()
        # ASCII only: "²" passes isdigit() but int() rejects it
        if stripped.isascii() and stripped.isdecimal():
            return int(stripped)
    return None


def validate_snapshot(candidate: Mapping[Any, str]) -> ValidationResult:
    """Validate a position -> team map before it is persisted.

    Checks:
    1. Exactly 20 entries
    2. Positions are exactly 1..20 (every missing or out-of-range one reported)
    3. No team appears twice
    4. No position appears twice (e.g. both 3 and "3" as keys)
    5. Every team is a canonical name
    """
    errors: list[str] = []

    # Check 1: team count
    if len(candidate) != TEAM_COUNT:
        errors.append(f"Expected {TEAM_COUNT} teams, got {len(candidate)}")

    # Check 2: positions 1-20 all present, nothing else
    positions = [_as_position(key) for key in candidate]
    present = {p for p in positions if p is not None}
    for position in range(1, TEAM_COUNT + 1):
        if position not in present:
            errors.append(f"Missing position {position}")
    unexpected = [
        repr(key)
        for key, p in zip(candidate, positions)
        if p is None or not 1 <= p <= TEAM_COUNT
    ]
    if unexpected:
        errors.append(f"Unexpected positions: {', '.join(unexpected)}")

    # Check 3: duplicate teams
    team_names = list(candidate.values())
    team_counts = Counter(team_names)
    duplicate_teams = [name for name, count in team_counts.items() if count > 1]
    if duplicate_teams:
        errors.append(f"Duplicate teams found: {', '.join(duplicate_teams)}")

    # Check 4: duplicate positions
    position_counts = Counter(p for p in positions if p is not None)
    duplicate_positions = sorted(p for p, count in position_counts.items() if count > 1)
    if duplicate_positions:
        errors.append(
            f"Duplicate positions found: {', '.join(str(p) for p in duplicate_positions)}"
        )

    # Check 5: canonical names only
    unexpected_teams = [name for name in team_names if name not in CANONICAL_TEAMS]
    if unexpected_teams:
        errors.append(f"Unexpected team names: {', '.join(map(str, unexpected_teams))}")

    return ValidationResult(valid=not errors, errors=errors)


def validate_gameweek_number(gameweek: Any) -> ValidationResult:
    """Gameweek must be an integer between 1 and 38."""
    errors: list[str] = []

    is_number = isinstance(gameweek, (int, float)) and not isinstance(gameweek, bool)
    if not isinstance(gameweek, int) or isinstance(gameweek, bool):
        errors.append("Gameweek must be an integer")

    if is_number and not 1 <= gameweek <= MAX_GAMEWEEK:
        errors.append(f"Gameweek must be between 1 and {MAX_GAMEWEEK}")

    return ValidationResult(valid=not errors, errors=errors)


def validate_games_played(
    live_table: Sequence[LiveTableEntry], expected: int
) -> GamesPlayedResult:
    """Every team in the live table must have played exactly ``expected`` games."""
    offending = [
        (entry.team_name, entry.played_games)
        for entry in live_table
        if entry.played_games != expected
    ]

    errors: list[str] = []
    if offending:
        errors.append(
            f"Not all teams have played {expected} games: "
            + ", ".join(f"{name} ({played})" for name, played in offending)
        )

    return GamesPlayedResult(valid=not errors, errors=errors, offending=offending)


def log_preview(gameweek: int, positions: Mapping[int, str]) -> None:
    """Log the table about to be written."""
    lines = [f"{position:>2}. {positions[position]}" for position in sorted(positions)]
    logger.info(f"Preview of GW{gameweek} standings:\n" + "\n".join(lines))
