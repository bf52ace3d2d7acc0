"""Tests for the football-data.org client with mocked HTTP responses."""

import httpx
import pytest
import respx
from httpx import Response
from tenacity import RetryError, wait_none

from premonition.exceptions import StandingsUnavailableError
from premonition.services.football_data_client import FootballDataClient
from premonition.services.models import LiveStandings

STANDINGS_URL = "https://api.football-data.org/v4/competitions/PL/standings"


def standings_payload(rows: int = 20, played: int = 6) -> dict:
    return {
        "season": {"startDate": "2025-08-15", "endDate": "2026-05-24", "currentMatchday": 7},
        "standings": [
            {
                "stage": "REGULAR_SEASON",
                "type": "TOTAL",
                "table": [
                    {
                        "position": i + 1,
                        "team": {"id": 100 + i, "name": f"Team {i + 1} FC"},
                        "playedGames": played,
                        "points": 40 - i,
                    }
                    for i in range(rows)
                ],
            }
        ],
    }


@pytest.fixture
def client():
    """Client with a fake key."""
    return FootballDataClient(api_key="test-key")


@pytest.fixture
def no_retry_wait(monkeypatch):
    """Skip the exponential backoff between attempts."""
    monkeypatch.setattr(FootballDataClient._get.retry, "wait", wait_none())


class TestGetCurrentStandings:
    """Tests for the competition standings endpoint."""

    @respx.mock
    async def test_parses_table(self, client: FootballDataClient):
        respx.get(STANDINGS_URL).mock(return_value=Response(200, json=standings_payload()))

        result = await client.get_current_standings()
        await client.close()

        assert isinstance(result, LiveStandings)
        assert result.season.current_matchday == 7
        assert result.season.start_date == "2025-08-15"
        assert len(result.table) == 20
        first = result.table[0]
        assert first.position == 1
        assert first.team_name == "Team 1 FC"
        assert first.played_games == 6
        assert first.points == 40

    @respx.mock
    async def test_sends_auth_token(self, client: FootballDataClient):
        route = respx.get(STANDINGS_URL).mock(return_value=Response(200, json=standings_payload()))

        await client.get_current_standings()
        await client.close()

        assert route.calls.last.request.headers["X-Auth-Token"] == "test-key"

    @respx.mock
    async def test_competition_and_base_url(self):
        client = FootballDataClient(
            api_key="k", base_url="https://example.test/v4/", competition_code="ELC"
        )
        route = respx.get("https://example.test/v4/competitions/ELC/standings").mock(
            return_value=Response(200, json=standings_payload())
        )

        await client.get_current_standings()
        await client.close()

        assert route.called

    @respx.mock
    async def test_missing_standings_raises(self, client: FootballDataClient):
        respx.get(STANDINGS_URL).mock(return_value=Response(200, json={"standings": []}))

        with pytest.raises(StandingsUnavailableError):
            await client.get_current_standings()
        await client.close()

    @respx.mock
    async def test_empty_table_raises(self, client: FootballDataClient):
        respx.get(STANDINGS_URL).mock(return_value=Response(200, json=standings_payload(rows=0)))

        with pytest.raises(StandingsUnavailableError):
            await client.get_current_standings()
        await client.close()

    @respx.mock
    async def test_counts_api_calls(self, client: FootballDataClient):
        respx.get(STANDINGS_URL).mock(return_value=Response(200, json=standings_payload()))

        await client.get_current_standings()
        await client.get_current_standings()
        await client.close()

        assert client.api_call_count == 2

    @respx.mock
    async def test_logs_rate_limit_header(self, client: FootballDataClient, caplog):
        respx.get(STANDINGS_URL).mock(
            return_value=Response(
                200,
                json=standings_payload(),
                headers={"X-Requests-Available-Minute": "9"},
            )
        )

        with caplog.at_level("INFO"):
            await client.get_current_standings()
        await client.close()

        assert "API rate limit remaining: 9" in caplog.text


class TestRetry:
    """Tests for retry behavior on transient errors."""

    @respx.mock
    async def test_retries_on_429(self, client: FootballDataClient, no_retry_wait):
        route = respx.get(STANDINGS_URL)
        route.side_effect = [Response(429), Response(200, json=standings_payload())]

        result = await client.get_current_standings()
        await client.close()

        assert route.call_count == 2
        assert len(result.table) == 20

    @respx.mock
    async def test_retries_on_timeout(self, client: FootballDataClient, no_retry_wait):
        route = respx.get(STANDINGS_URL)
        route.side_effect = [
            httpx.TimeoutException("Connection timed out"),
            Response(200, json=standings_payload()),
        ]

        await client.get_current_standings()
        await client.close()

        assert route.call_count == 2

    @respx.mock
    async def test_gives_up_after_three_attempts(self, client: FootballDataClient, no_retry_wait):
        route = respx.get(STANDINGS_URL).mock(return_value=Response(503))

        with pytest.raises(RetryError):
            await client.get_current_standings()
        await client.close()

        assert route.call_count == 3

    @respx.mock
    async def test_no_retry_on_403(self, client: FootballDataClient, no_retry_wait):
        """A bad key is not transient."""
        route = respx.get(STANDINGS_URL).mock(return_value=Response(403))

        with pytest.raises(httpx.HTTPStatusError):
            await client.get_current_standings()
        await client.close()

        assert route.call_count == 1


class TestResourceManagement:
    """Tests for HTTP client lifecycle."""

    @respx.mock
    async def test_client_reused_across_calls(self, client: FootballDataClient):
        respx.get(STANDINGS_URL).mock(return_value=Response(200, json=standings_payload()))

        await client.get_current_standings()
        first = client._client
        await client.get_current_standings()

        assert client._client is first
        await client.close()
        assert client._client is None

    @respx.mock
    async def test_context_manager_closes(self):
        respx.get(STANDINGS_URL).mock(return_value=Response(200, json=standings_payload()))

        async with FootballDataClient(api_key="k") as client:
            await client.get_current_standings()

        assert client._client is None
