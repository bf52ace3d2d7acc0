"""football-data.org client for the live league table."""

import asyncio
import logging
from typing import Any

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from premonition.exceptions import StandingsUnavailableError
from premonition.services.models import LiveStandings, LiveTableEntry, SeasonInfo

logger = logging.getLogger(__name__)

FOOTBALL_DATA_BASE_URL = "https://api.football-data.org/v4"

# HTTP status codes that should trigger a retry
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

RATE_LIMIT_HEADER = "X-Requests-Available-Minute"


def _safe_int(val: Any, default: int = 0) -> int:
    """Safely convert API value to int, handling None and empty strings."""
    if val is None or val == "":
        return default
    try:
        return int(val)
    except (ValueError, TypeError):
        return default


def _is_retryable_error(exception: BaseException) -> bool:
    """Check if an error should trigger a retry."""
    if isinstance(exception, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in RETRYABLE_STATUS_CODES
    return False


class FootballDataClient:
    """
    football-data.org v4 client.

    The free tier allows 10 requests/minute; one scheduled run makes a
    single standings request, so no client-side throttling is applied.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = FOOTBALL_DATA_BASE_URL,
        competition_code: str = "PL",
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.competition_code = competition_code
        self.timeout = timeout
        self.api_call_count = 0
        self._lock = asyncio.Lock()
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy initialization, coroutine-safe)."""
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        timeout=self.timeout,
                        headers={"X-Auth-Token": self.api_key},
                    )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources (coroutine-safe)."""
        async with self._lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    async def __aenter__(self) -> "FootballDataClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception(_is_retryable_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    async def _get(self, url: str) -> dict[str, Any]:
        """GET with retries on timeouts, network errors and 429/5xx."""
        client = await self._get_client()
        self.api_call_count += 1
        response = await client.get(url)

        remaining = response.headers.get(RATE_LIMIT_HEADER)
        if remaining is not None:
            logger.info(f"API rate limit remaining: {remaining} requests/minute")

        response.raise_for_status()
        return response.json()

    async def get_current_standings(self) -> LiveStandings:
        """
        Fetch the current league table for the configured competition.

        Returns:
            LiveStandings with the season descriptor and the total table

        Raises:
            StandingsUnavailableError: If the response carries no table
        """
        data = await self._get(f"{self.base_url}/competitions/{self.competition_code}/standings")

        standings = data.get("standings") or []
        if not standings or not standings[0].get("table"):
            raise StandingsUnavailableError(
                f"No standings data in response for competition {self.competition_code}"
            )

        season_data = data.get("season") or {}
        season = SeasonInfo(
            start_date=season_data.get("startDate"),
            end_date=season_data.get("endDate"),
            current_matchday=season_data.get("currentMatchday"),
        )

        table = [
            LiveTableEntry(
                position=_safe_int(row.get("position")),
                team_name=(row.get("team") or {}).get("name", ""),
                played_games=_safe_int(row.get("playedGames")),
                points=_safe_int(row.get("points")),
            )
            for row in standings[0]["table"]
        ]

        logger.info(f"Fetched live table: {len(table)} teams, matchday {season.current_matchday}")
        return LiveStandings(season=season, table=table)
