"""Errors raised by the standings pipeline.

Every error here is fail-safe-closed: when one is raised, nothing has been
written to the history store.
"""


class PremonitionError(Exception):
    """Base class for pipeline errors."""


class UnknownTeamError(PremonitionError):
    """One or more external team names have no canonical mapping."""

    def __init__(self, names: list[str]):
        self.names = list(names)
        super().__init__(
            f"Unknown team name(s) from API: {', '.join(repr(n) for n in self.names)}. "
            "Update the team name mapping."
        )


class ValidationError(PremonitionError):
    """A standings snapshot or gameweek number failed validation."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(f"Validation failed: {'; '.join(self.errors)}")


class MissedGameweekError(PremonitionError):
    """More than one gameweek completed since the last saved gameweek."""

    def __init__(self, last_saved: int, highest_complete: int):
        self.last_saved = last_saved
        self.highest_complete = highest_complete
        super().__init__(
            f"Missed gameweeks {last_saved + 1} through {highest_complete - 1} "
            f"(last saved GW{last_saved}, current complete GW{highest_complete}). "
            "Manual backfill required before the next automatic update."
        )

    @property
    def missed_gameweeks(self) -> list[int]:
        return list(range(self.last_saved + 1, self.highest_complete))


class GamesPlayedMismatchError(PremonitionError):
    """Live table games-played values disagree with the gameweek being saved."""

    def __init__(self, expected: int, offending: list[tuple[str, int]]):
        self.expected = expected
        self.offending = list(offending)
        details = ", ".join(f"{name} ({played})" for name, played in self.offending)
        super().__init__(f"Not all teams have played {expected} games: {details}")


class GameweekAlreadySavedError(PremonitionError):
    """Refused to overwrite a gameweek that already exists in the store."""

    def __init__(self, gameweek: int):
        self.gameweek = gameweek
        super().__init__(f"GW{gameweek} already exists and will not be overwritten")


class NonContiguousGameweekError(PremonitionError):
    """Refused an append that would leave a hole in the stored gameweeks."""

    def __init__(self, gameweek: int, last_saved: int):
        self.gameweek = gameweek
        self.last_saved = last_saved
        super().__init__(
            f"Cannot save GW{gameweek}: next gameweek to save is GW{last_saved + 1}"
        )


class StandingsUnavailableError(PremonitionError):
    """The live standings provider returned no table."""
