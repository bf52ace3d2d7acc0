#!/usr/bin/env python
"""
Recompute stored scores from stored standings.

Run after correcting the prediction dataset. Standings are left untouched.

Usage:
    python -m scripts.regenerate_scores        # Every stored gameweek
    python -m scripts.regenerate_scores 14     # GW14 only
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
from premonition.services.regenerate import regenerate_scores

# Load environment
load_dotenv(".env.local")
load_dotenv(".env")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def main() -> None:
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(description="Regenerate stored scores")
    parser.add_argument("gameweek", type=int, nargs="?", help="Only this gameweek")

    args = parser.parse_args()

    async with open_backends(get_settings()) as (store, _):
        try:
            regenerated = await regenerate_scores(store, get_predictions(), args.gameweek)
        except KeyError as e:
            logger.error(str(e))
            sys.exit(1)

    print(f"\n✓ Regenerated scores for {len(regenerated)} gameweek(s)")


if __name__ == "__main__":
    asyncio.run(main())
