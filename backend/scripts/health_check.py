#!/usr/bin/env python
"""
Health check for the stored history.

Read-only. Exits 0 when HEALTHY, 1 otherwise.

Usage:
    python -m scripts.health_check             # Stored data only
    python -m scripts.health_check --live      # Also check freshness against the live table
"""

import argparse
import asyncio
import logging
import os
import sys

import httpx
from dotenv import load_dotenv
from tenacity import RetryError

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from premonition.config import get_settings
from premonition.dependencies import get_predictions, open_backends
from premonition.exceptions import StandingsUnavailableError
from premonition.services.football_data_client import FootballDataClient
from premonition.services.health import HEALTHY, HealthReport, run_health_check
from premonition.services.models import LiveTableEntry

# Load environment
load_dotenv(".env.local")
load_dotenv(".env")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def fetch_live_table() -> list[LiveTableEntry] | None:
    settings = get_settings()
    if not settings.football_api_key:
        logger.warning("FOOTBALL_API_KEY not set, skipping live freshness check")
        return None

    try:
        async with FootballDataClient(
            api_key=settings.football_api_key,
            base_url=settings.football_api_base_url,
            competition_code=settings.competition_code,
        ) as client:
            return (await client.get_current_standings()).table
    except (httpx.HTTPError, RetryError, StandingsUnavailableError) as e:
        logger.warning(f"Live table unavailable: {e}")
        return None


def print_report(report: HealthReport) -> None:
    print("\nHealth Check")
    print("=" * 60)
    category = None
    for check in report.checks:
        if check.category != category:
            category = check.category
            print(f"\n{category}")
        mark = "✓" if check.passed else ("!" if check.severity == "warning" else "✗")
        print(f"  {mark} {check.name}: {check.message}")
    print("\n" + "=" * 60)
    print(f"Overall status: {report.status}")


async def main() -> None:
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(description="Health check")
    parser.add_argument(
        "--live", action="store_true", help="Compare against the live table (1 API call)"
    )

    args = parser.parse_args()

    live_table = await fetch_live_table() if args.live else None

    async with open_backends(get_settings()) as (store, gap_tracker):
        report = await run_health_check(store, gap_tracker, get_predictions(), live_table)

    print_report(report)
    sys.exit(0 if report.status == HEALTHY else 1)


if __name__ == "__main__":
    asyncio.run(main())
