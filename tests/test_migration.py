"""Tests for the legacy team-name migration."""

import pytest

from judging.errors import ConfigurationError
from judging.models.enums import SchemaVersion
from judging.models.team import Team
from judging.storage.migration import (
    ensure_schema_supported,
    match_team,
    migrate_legacy_evaluations,
)


@pytest.fixture
def teams() -> list[Team]:
    return [
        Team(id=1, number=1, name="Alpha"),
        Team(id=2, number=2),
        Team(id=3, number=7, name="Team 2"),
    ]


class TestSchemaVersion:
    def test_team_id_schema_is_served(self) -> None:
        ensure_schema_supported(SchemaVersion.TEAM_ID)

    def test_legacy_schema_refused(self) -> None:
        with pytest.raises(ConfigurationError):
            ensure_schema_supported(SchemaVersion.TEAM_NAME)


class TestMatchTeam:
    """Exact names win over "Team N" numbering."""

    def test_exact_name(self, teams: list[Team]) -> None:
        assert match_team("Alpha", teams).id == 1

    def test_exact_name_beats_number_pattern(self, teams: list[Team]) -> None:
        assert match_team("Team 2", teams).id == 3

    def test_number_pattern(self, teams: list[Team]) -> None:
        assert match_team("Team 1", teams).id == 1

    def test_no_match(self, teams: list[Team]) -> None:
        assert match_team("Team 99", teams) is None
        assert match_team("alpha", teams) is None


class TestMigrateRows:
    def test_rows_get_team_ids(self, teams: list[Team]) -> None:
        rows = [
            {"id": 10, "team_name": "Alpha", "participant_name": "Ana"},
            {"id": 11, "team_name": "Ghosts", "participant_name": "Ben"},
            {"id": 12, "team_name": "Ghosts", "participant_name": "Cy"},
            {"id": 13, "team_name": "Team 7", "participant_name": "Di"},
        ]
        report = migrate_legacy_evaluations(rows, teams)

        assert report.migrated == [
            {"id": 10, "participant_name": "Ana", "team_id": 1},
            {"id": 13, "participant_name": "Di", "team_id": 3},
        ]
        assert report.unmatched_team_names == ["Ghosts"]
