#!/usr/bin/env python
"""
Show how many games each team has played in the live table.

Diagnostic only; nothing is saved. The highest complete gameweek is the
minimum across all teams.

Usage:
    python -m scripts.check_games_played
"""

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from premonition.config import get_settings
from premonition.services.football_data_client import FootballDataClient
from premonition.services.progression import summarize_games_played

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
    settings = get_settings()
    if not settings.football_api_key:
        logger.error("FOOTBALL_API_KEY environment variable is not set")
        sys.exit(1)

    async with FootballDataClient(
        api_key=settings.football_api_key,
        base_url=settings.football_api_base_url,
        competition_code=settings.competition_code,
    ) as client:
        live = await client.get_current_standings()

    print(f"\nMatchday: {live.season.current_matchday}")
    print(f"{'Pos':>3}  {'Team':<28} {'Games':>5} {'Pts':>4}")
    for entry in live.table:
        print(f"{entry.position:>3}  {entry.team_name:<28} {entry.played_games:>5} {entry.points:>4}")

    summary = summarize_games_played(live.table)
    print(f"\nMin games: {summary.min_games}, Max games: {summary.max_games}")
    if summary.all_level:
        print(f"All teams have played {summary.min_games} games; GW{summary.min_games} is complete")
    else:
        for games, teams in summary.teams_by_games.items():
            print(f"  {games} games: {', '.join(teams)}")
        print(f"Highest complete gameweek: GW{summary.min_games}")


if __name__ == "__main__":
    asyncio.run(main())
