"""Shared pytest fixtures for backend tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from premonition.main import app
from premonition.services.gap_tracker import GapTracker, InMemoryGapRepository
from premonition.services.history_store import InMemoryHistoryStore
from premonition.services.models import Prediction
from tests.factories import make_predictions


@pytest.fixture
async def async_client():
    """Async HTTP client for testing the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def store() -> InMemoryHistoryStore:
    """Empty in-memory history store."""
    return InMemoryHistoryStore()


@pytest.fixture
def gap_tracker() -> GapTracker:
    """Gap tracker over an in-memory repository."""
    return GapTracker(InMemoryGapRepository())


@pytest.fixture
def predictions() -> list[Prediction]:
    """Four participants across two groups."""
    return make_predictions()
