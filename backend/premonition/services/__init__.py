"""Service layer for business logic."""

from premonition.services.football_data_client import FootballDataClient
from premonition.services.gap_tracker import GapTracker
from premonition.services.progression import GameweekProgressionEngine

__all__ = ["FootballDataClient", "GapTracker", "GameweekProgressionEngine"]
