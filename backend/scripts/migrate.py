#!/usr/bin/env python
"""
Run SQL migrations in order, and optionally import the JSON history into Postgres.

Usage:
    python -m scripts.migrate                # Run pending migrations
    python -m scripts.migrate --status       # Show migration status
    python -m scripts.migrate --import-json  # Copy JSON history into empty Postgres tables
"""
import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

import asyncpg
from dotenv import load_dotenv

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from premonition.config import get_settings
from premonition.db import close_pool, init_pool
from premonition.services.gap_tracker import JsonGapRepository
from premonition.services.history_store import JsonFileHistoryStore
from premonition.services.pg_store import PostgresGapRepository, PostgresHistoryStore

# Load local environment
load_dotenv(".env.local")
load_dotenv(".env")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"


async def ensure_migrations_table(conn: asyncpg.Connection) -> None:
    """Create migrations tracking table if it doesn't exist."""
    await conn.execute("""
        CREATE TABLE IF NOT EXISTS _migrations (
            name TEXT PRIMARY KEY,
            applied_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)


async def get_applied_migrations(conn: asyncpg.Connection) -> set[str]:
    rows = await conn.fetch("SELECT name FROM _migrations ORDER BY name")
    return {row["name"] for row in rows}


async def get_pending_migrations(conn: asyncpg.Connection) -> list[Path]:
    applied = await get_applied_migrations(conn)
    return [m for m in sorted(MIGRATIONS_DIR.glob("*.sql")) if m.name not in applied]


async def run_all_pending(conn: asyncpg.Connection) -> int:
    """Apply each pending file in its own transaction. Returns count applied."""
    await ensure_migrations_table(conn)
    pending = await get_pending_migrations(conn)

    if not pending:
        logger.info("No pending migrations.")
        return 0

    for migration_file in pending:
        logger.info(f"Applying {migration_file.name}...")
        async with conn.transaction():
            await conn.execute(migration_file.read_text())
            await conn.execute("INSERT INTO _migrations (name) VALUES ($1)", migration_file.name)

    logger.info(f"Migrations complete! Applied {len(pending)} migration(s).")
    return len(pending)


async def show_status(conn: asyncpg.Connection) -> None:
    await ensure_migrations_table(conn)
    applied = await get_applied_migrations(conn)
    all_migrations = sorted(MIGRATIONS_DIR.glob("*.sql"))

    print("Migration Status:")
    print("-" * 50)
    for migration_file in all_migrations:
        status = "✓ applied" if migration_file.name in applied else "  pending"
        print(f"  {status}  {migration_file.name}")
    print("-" * 50)
    print(f"Applied: {len(applied)}, Pending: {len(all_migrations) - len(applied)}")


async def import_json_history() -> int:
    """Append every JSON gameweek to Postgres, in order, through the store's own checks.

    Returns:
        Number of gameweeks imported
    """
    settings = get_settings()
    source = JsonFileHistoryStore(settings.data_dir)
    source_gaps = JsonGapRepository(settings.data_dir)

    await init_pool()
    try:
        target = PostgresHistoryStore()
        if await target.last_saved_gameweek() > 0:
            raise RuntimeError("Postgres history is not empty; refusing to import")

        all_standings = await source.get_all_standings()
        all_scores = await source.get_all_scores()
        for gameweek, standings in all_standings.items():
            await target.append_gameweek(standings, all_scores.get(gameweek, []))
            logger.info(f"Imported GW{gameweek}")

        target_gaps = PostgresGapRepository()
        for record in await source_gaps.list_records():
            await target_gaps.insert_if_absent(record)
    finally:
        await close_pool()

    return len(all_standings)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Database migration runner")
    parser.add_argument("--status", action="store_true", help="Show migration status")
    parser.add_argument(
        "--import-json",
        action="store_true",
        help="Copy the JSON history and gap records into Postgres",
    )
    args = parser.parse_args()

    if args.import_json:
        count = await import_json_history()
        print(f"✓ Imported {count} gameweek(s)")
        return

    db_url = get_settings().db_connection_string
    if not db_url:
        logger.error("DATABASE_URL is not set")
        sys.exit(1)

    try:
        conn = await asyncpg.connect(db_url)
    except OSError as e:
        logger.error(f"Failed to connect to database: {e}")
        sys.exit(1)

    try:
        if args.status:
            await show_status(conn)
        else:
            await run_all_pending(conn)
    finally:
        await conn.close()


if __name__ == "__main__":
    asyncio.run(main())
