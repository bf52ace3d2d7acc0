"""Tests for team name normalization."""

import pytest

from premonition.exceptions import UnknownTeamError
from premonition.services.team_names import (
    CANONICAL_TEAMS,
    TEAM_NAME_MAP,
    check_all_mappable,
    is_canonical_team,
    normalize_team_name,
)


class TestNormalizeTeamName:
    """Tests for normalize_team_name."""

    @pytest.mark.parametrize(
        ("api_name", "canonical"),
        [
            ("Arsenal FC", "Arsenal"),
            ("AFC Bournemouth", "AFC Bournemouth"),
            ("Brighton & Hove Albion FC", "Brighton & Hove Albion"),
            ("Wolverhampton Wanderers FC", "Wolverhampton Wanderers"),
            ("Sunderland AFC", "Sunderland"),
        ],
    )
    def test_maps_provider_names(self, api_name: str, canonical: str):
        assert normalize_team_name(api_name) == canonical

    def test_unknown_name_raises(self):
        """Unmapped names fail loudly instead of passing through."""
        with pytest.raises(UnknownTeamError) as exc_info:
            normalize_team_name("Ipswich Town FC")

        assert exc_info.value.names == ["Ipswich Town FC"]
        assert "Ipswich Town FC" in str(exc_info.value)

    def test_canonical_name_is_not_a_provider_name(self):
        """Only provider spellings are accepted as input."""
        with pytest.raises(UnknownTeamError):
            normalize_team_name("Arsenal")


class TestMappingTable:
    """Tests for the mapping table itself."""

    def test_twenty_distinct_canonical_teams(self):
        assert len(TEAM_NAME_MAP) == 20
        assert len(CANONICAL_TEAMS) == 20

    def test_canonical_teams_sorted(self):
        assert list(CANONICAL_TEAMS) == sorted(CANONICAL_TEAMS)

    def test_is_canonical_team(self):
        assert is_canonical_team("Liverpool")
        assert not is_canonical_team("Liverpool FC")


class TestCheckAllMappable:
    """Tests for the pre-flight mapping check."""

    def test_all_known(self):
        assert check_all_mappable(["Arsenal FC", "Chelsea FC"]) == []

    def test_reports_unknown_in_order(self):
        names = ["Leicester City FC", "Arsenal FC", "Ipswich Town FC"]

        assert check_all_mappable(names) == ["Leicester City FC", "Ipswich Town FC"]

    def test_accepts_generator(self):
        assert check_all_mappable(name for name in ["Mystery FC"]) == ["Mystery FC"]
