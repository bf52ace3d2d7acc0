#!/usr/bin/env python
"""
Compare the leaderboard between two stored gameweeks.

Usage:
    python -m scripts.compare_weeks                  # Two latest gameweeks
    python -m scripts.compare_weeks 12 13            # GW12 -> GW13
    python -m scripts.compare_weeks 12 13 LIV        # Only the LIV group
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
from premonition.dependencies import open_backends
from premonition.services.comparison import (
    WeekComparison,
    compare_weeks,
    get_biggest_decliners,
    get_biggest_improvers,
    get_biggest_movers,
)

# Load environment
load_dotenv(".env.local")
load_dotenv(".env")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _signed(value: int | None) -> str:
    if value is None:
        return "new"
    return f"{value:+d}" if value else "0"


def print_comparison(week_a: int, week_b: int, comparisons: list[WeekComparison]) -> None:
    print(f"\nGW{week_a} -> GW{week_b}")
    print("-" * 56)
    print(f"{'Pos':>3}  {'Name':<24} {'Score':>5} {'Rank Δ':>7} {'Score Δ':>8}")
    for c in comparisons:
        print(
            f"{c.current_position:>3}  {c.name:<24} {c.current_score:>5} "
            f"{_signed(c.position_change):>7} {_signed(c.score_change):>8}"
        )

    sections = [
        ("Biggest movers", get_biggest_movers(comparisons), "position_change"),
        ("Most improved", get_biggest_improvers(comparisons), "score_change"),
        ("Biggest decliners", get_biggest_decliners(comparisons), "score_change"),
    ]
    for title, entries, attr in sections:
        print(f"\n{title}:")
        if not entries:
            print("  none")
        for c in entries:
            print(f"  {c.name}: {_signed(getattr(c, attr))}")


async def main() -> None:
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(description="Compare two gameweeks")
    parser.add_argument("week_a", type=int, nargs="?", help="Earlier gameweek")
    parser.add_argument("week_b", type=int, nargs="?", help="Later gameweek")
    parser.add_argument("group", nargs="?", default="all", help='Group tag (default "all")')

    args = parser.parse_args()

    async with open_backends(get_settings()) as (store, _):
        week_a, week_b = args.week_a, args.week_b
        if week_a is None or week_b is None:
            scored = sorted(await store.get_all_scores())
            if len(scored) < 2:
                logger.error("Need at least two scored gameweeks to compare")
                sys.exit(1)
            week_a, week_b = scored[-2], scored[-1]

        comparisons = await compare_weeks(store, week_a, week_b, args.group)

    if comparisons is None:
        logger.error(f"Scores not available for GW{week_a} and GW{week_b}")
        sys.exit(1)

    print_comparison(week_a, week_b, comparisons)


if __name__ == "__main__":
    asyncio.run(main())
