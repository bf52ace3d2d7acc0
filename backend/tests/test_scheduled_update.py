"""Tests for the scheduled update script against the JSON file backend."""

import json
from unittest.mock import patch

import pytest
import respx
from httpx import Response

from premonition.config import Settings
from tests.factories import API_NAMES, TABLE_ORDER

STANDINGS_URL = "https://api.football-data.org/v4/competitions/PL/standings"


def provider_payload(played: int) -> dict:
    return {
        "season": {"startDate": "2025-08-15", "endDate": "2026-05-24", "currentMatchday": played},
        "standings": [
            {
                "table": [
                    {
                        "position": i + 1,
                        "team": {"name": API_NAMES[team]},
                        "playedGames": played,
                        "points": 60 - 3 * i,
                    }
                    for i, team in enumerate(TABLE_ORDER)
                ]
            }
        ],
    }


@pytest.fixture
def settings(tmp_path) -> Settings:
    """File-backed settings rooted in a temp directory."""
    return Settings(
        football_api_key="test-key",
        storage_backend="file",
        data_dir=tmp_path / "data",
        backup_dir=tmp_path / "backups",
    )


class TestValidateApiKey:
    """Tests for validate_api_key."""

    def test_missing_key_raises(self):
        from scripts.scheduled_update import validate_api_key

        with pytest.raises(ValueError, match="FOOTBALL_API_KEY"):
            validate_api_key(Settings(football_api_key=""))

    def test_present_key_passes(self, settings: Settings):
        from scripts.scheduled_update import validate_api_key

        validate_api_key(settings)


class TestRunScheduledUpdate:
    """End-to-end runs with a mocked provider."""

    @respx.mock
    async def test_saves_first_gameweek(self, settings: Settings):
        from scripts.scheduled_update import run_scheduled_update

        respx.get(STANDINGS_URL).mock(return_value=Response(200, json=provider_payload(1)))

        with patch("scripts.scheduled_update.get_settings", return_value=settings):
            result = await run_scheduled_update()

        assert result.saved is True
        assert result.gameweek == 1
        standings = json.loads((settings.data_dir / "standings_by_gameweek.json").read_text())
        assert standings["1"]["1"] == "Arsenal"
        assert "lastUpdated" in standings

    @respx.mock
    async def test_dry_run_writes_no_files(self, settings: Settings):
        from scripts.scheduled_update import run_scheduled_update

        respx.get(STANDINGS_URL).mock(return_value=Response(200, json=provider_payload(1)))

        with patch("scripts.scheduled_update.get_settings", return_value=settings):
            result = await run_scheduled_update(dry_run=True)

        assert result.saved is False
        assert not (settings.data_dir / "standings_by_gameweek.json").exists()

    async def test_missing_key_fails_before_fetch(self, settings: Settings):
        from scripts.scheduled_update import run_scheduled_update

        settings.football_api_key = ""
        with patch("scripts.scheduled_update.get_settings", return_value=settings):
            with pytest.raises(ValueError):
                await run_scheduled_update()
