#!/usr/bin/env python
"""
Scheduled standings update.

Run daily via cron. Saves the league table for the next gameweek once every
team has played it, then scores all predictions against it.

At most one gameweek is saved per run. If more than one gameweek completed
since the last save, nothing is written: the skipped gameweeks are recorded
for manual backfill and the run exits non-zero.

Usage:
    python -m scripts.scheduled_update             # Run scheduled update
    python -m scripts.scheduled_update --dry-run   # Validate without saving
    python -m scripts.scheduled_update --status    # Show stored gameweeks and gaps
"""

import argparse
import asyncio
import logging
import os
import sys
from datetime import UTC, datetime

from dotenv import load_dotenv

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from premonition.config import Settings, get_settings
from premonition.dependencies import get_predictions, open_backends
from premonition.exceptions import PremonitionError
from premonition.services.football_data_client import FootballDataClient
from premonition.services.progression import GameweekProgressionEngine, ProgressionResult

# Load environment
load_dotenv(".env.local")
load_dotenv(".env")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def validate_api_key(settings: Settings) -> None:
    """Fail before any work when the provider key is missing."""
    if not settings.football_api_key:
        raise ValueError(
            "FOOTBALL_API_KEY environment variable is not set. "
            "Get a free key at https://www.football-data.org/client/register"
        )


async def run_scheduled_update(dry_run: bool = False) -> ProgressionResult:
    """Fetch the live table and advance the stored history by at most one gameweek."""
    settings = get_settings()
    validate_api_key(settings)

    logger.info("=" * 60)
    logger.info("Automated Gameweek Standings Update")
    logger.info(f"Mode: {'DRY RUN (no changes will be saved)' if dry_run else 'LIVE'}")
    logger.info(f"Time: {datetime.now(UTC).isoformat()}")
    logger.info("=" * 60)

    async with open_backends(settings) as (store, gap_tracker):
        await gap_tracker.check_for_gaps()

        async with FootballDataClient(
            api_key=settings.football_api_key,
            base_url=settings.football_api_base_url,
            competition_code=settings.competition_code,
        ) as client:
            live = await client.get_current_standings()
            logger.info(f"Season: {live.season.start_date} to {live.season.end_date}")
            logger.info(f"Current matchday: {live.season.current_matchday}")

            engine = GameweekProgressionEngine(store, gap_tracker, get_predictions())
            result = await engine.run(live, dry_run=dry_run)

            logger.info(
                f"Outcome: {result.outcome} (last saved GW{result.last_saved}, "
                f"highest complete GW{result.highest_complete})"
            )
            logger.info(f"API calls made: {client.api_call_count}")

    return result


async def show_status() -> None:
    """Print stored gameweeks and outstanding gaps."""
    settings = get_settings()
    async with open_backends(settings) as (store, gap_tracker):
        last_saved = await store.last_saved_gameweek()
        last_updated = await store.last_updated()
        missed = await gap_tracker.get_missed_gameweeks()

    print("\nScheduled Update Status")
    print("-" * 40)
    print(f"Storage backend:     {settings.storage_backend}")
    print(f"Last saved gameweek: GW{last_saved}" if last_saved else "No gameweeks saved yet")
    print(f"Last update:         {last_updated or 'never'}")
    if missed:
        print(f"Needs backfill:      {', '.join(f'GW{r.gameweek}' for r in missed)}")
    else:
        print("Needs backfill:      none")
    print("-" * 40)


async def main() -> None:
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(description="Scheduled standings update")
    parser.add_argument(
        "--status", action="store_true", help="Show stored gameweeks and gaps"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Check what would be saved without making changes",
    )

    args = parser.parse_args()

    if args.status:
        await show_status()
        return

    try:
        await run_scheduled_update(dry_run=args.dry_run)
    except (PremonitionError, ValueError) as e:
        logger.error(f"Scheduled update failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
