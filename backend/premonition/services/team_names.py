"""Team name normalization.

Football-Data.org returns names with "FC"/"AFC" suffixes (e.g. "Arsenal FC").
Stored standings and predictions use the canonical names without suffixes.
"""

from collections.abc import Iterable

from premonition.exceptions import UnknownTeamError

# API name -> canonical name
TEAM_NAME_MAP: dict[str, str] = {
    "Arsenal FC": "Arsenal",
    "Manchester City FC": "Manchester City",
    "Aston Villa FC": "Aston Villa",
    "Chelsea FC": "Chelsea",
    "Crystal Palace FC": "Crystal Palace",
    "Sunderland AFC": "Sunderland",
    "Brighton & Hove Albion FC": "Brighton & Hove Albion",
    "Liverpool FC": "Liverpool",
    "Manchester United FC": "Manchester United",
    "Everton FC": "Everton",
    "Tottenham Hotspur FC": "Tottenham Hotspur",
    "Newcastle United FC": "Newcastle United",
    "Brentford FC": "Brentford",
    "AFC Bournemouth": "AFC Bournemouth",
    "Fulham FC": "Fulham",
    "Nottingham Forest FC": "Nottingham Forest",
    "Leeds United FC": "Leeds United",
    "West Ham United FC": "West Ham United",
    "Burnley FC": "Burnley",
    "Wolverhampton Wanderers FC": "Wolverhampton Wanderers",
}

# Alphabetical; also the tie-break order for consensus rankings
CANONICAL_TEAMS: tuple[str, ...] = tuple(sorted(set(TEAM_NAME_MAP.values())))


def normalize_team_name(external_name: str) -> str:
    """Map an API team name to its canonical name.

    Raises:
        UnknownTeamError: If the name has no mapping entry
    """
    canonical = TEAM_NAME_MAP.get(external_name)
    if canonical is None:
        raise UnknownTeamError([external_name])
    return canonical


def check_all_mappable(external_names: Iterable[str]) -> list[str]:
    """Return the names that have no mapping, in encounter order."""
    return [name for name in external_names if name not in TEAM_NAME_MAP]


def is_canonical_team(name: str) -> bool:
    return name in CANONICAL_TEAMS
