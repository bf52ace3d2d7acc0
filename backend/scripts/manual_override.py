#!/usr/bin/env python
"""
Manually save standings for one gameweek.

Backfills gameweeks the scheduled update skipped. The table is validated
exactly as in the automatic path, scored, and saved; the gap record for the
gameweek (if any) is marked as manually filled. Stored gameweeks are never
overwritten, and gameweeks must be filled in order.

Usage:
    python -m scripts.manual_override <gameweek> <team1> <team2> ... <team20>
    python -m scripts.manual_override --list-teams

Example:
    python -m scripts.manual_override 14 "Arsenal" "Manchester City" "Chelsea" ...
"""

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from premonition.config import get_settings
from premonition.dependencies import get_predictions, open_backends
from premonition.exceptions import PremonitionError
from premonition.services.override import apply_manual_override, positions_from_ordered_teams
from premonition.services.team_names import CANONICAL_TEAMS

# Load environment
load_dotenv(".env.local")
load_dotenv(".env")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def print_teams() -> None:
    print("Canonical team names:")
    for team in CANONICAL_TEAMS:
        print(f"  {team}")


async def run_override(gameweek: int, teams: list[str]) -> None:
    settings = get_settings()
    async with open_backends(settings) as (store, gap_tracker):
        result = await apply_manual_override(
            store,
            gap_tracker,
            get_predictions(),
            gameweek,
            positions_from_ordered_teams(teams),
        )

    print(f"\n✓ GW{gameweek} saved ({len(result.scores)} participants scored)")
    if result.gap_resolved:
        print(f"✓ GW{gameweek} marked as manually filled in gap tracker")


async def main() -> None:
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(description="Manually save standings for a gameweek")
    parser.add_argument("gameweek", type=int, nargs="?", help="Gameweek number (1-38)")
    parser.add_argument("teams", nargs="*", help="20 canonical team names, first to last")
    parser.add_argument(
        "--list-teams", action="store_true", help="Print the canonical team names"
    )

    args = parser.parse_args()

    if args.list_teams:
        print_teams()
        return

    if args.gameweek is None:
        parser.error("gameweek is required")

    try:
        await run_override(args.gameweek, args.teams)
    except PremonitionError as e:
        logger.error(f"Manual override failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
