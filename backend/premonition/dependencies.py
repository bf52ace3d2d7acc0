"""Shared dependencies: storage backends and the prediction dataset."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import HTTPException

from premonition.config import Settings, get_settings
from premonition.db import close_pool, get_pool, init_pool
from premonition.services.gap_tracker import GapTracker, JsonGapRepository
from premonition.services.history_store import (
    HistoryStore,
    JsonFileHistoryStore,
    make_file_backup,
)
from premonition.services.models import Prediction
from premonition.services.pg_store import PostgresGapRepository, PostgresHistoryStore
from premonition.services.predictions import load_predictions


def build_history_store(settings: Settings) -> HistoryStore:
    """History store for the configured backend."""
    if settings.storage_backend == "postgres":
        return PostgresHistoryStore()
    return JsonFileHistoryStore(settings.data_dir, backup=make_file_backup(settings.backup_dir))


def build_gap_tracker(settings: Settings) -> GapTracker:
    """Gap tracker for the configured backend."""
    if settings.storage_backend == "postgres":
        return GapTracker(PostgresGapRepository())
    return GapTracker(JsonGapRepository(settings.data_dir))


@asynccontextmanager
async def open_backends(settings: Settings) -> AsyncIterator[tuple[HistoryStore, GapTracker]]:
    """Store and gap tracker for a script run, opening the Postgres pool if needed."""
    if settings.storage_backend != "postgres":
        yield build_history_store(settings), build_gap_tracker(settings)
        return

    await init_pool()
    try:
        yield build_history_store(settings), build_gap_tracker(settings)
    finally:
        await close_pool()


@lru_cache
def get_predictions() -> list[Prediction]:
    """Prediction dataset, loaded once per process."""
    return load_predictions(get_settings().predictions_path)


def require_db() -> None:
    """Raise 503 when the Postgres backend is configured but its pool is down."""
    if get_settings().storage_backend != "postgres":
        return
    try:
        get_pool()
    except RuntimeError as e:
        raise HTTPException(
            status_code=503,
            detail="Database not available. This feature requires database connection.",
        ) from e


def get_history_store() -> HistoryStore:
    """FastAPI dependency for the history store."""
    require_db()
    return build_history_store(get_settings())


def get_gap_tracker() -> GapTracker:
    """FastAPI dependency for the gap tracker."""
    require_db()
    return build_gap_tracker(get_settings())
