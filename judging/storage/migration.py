"""One-time migration of legacy evaluations that referenced teams by name.

Early deployments stored ``team_name`` on each evaluation. The application
only serves the ``team_id`` schema; rows are converted here, once, as an
operational step before switching SCHEMA_VERSION.
"""

import re
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from judging.errors import ConfigurationError
from judging.models.enums import SchemaVersion
from judging.models.team import Team

_TEAM_NUMBER_NAME = re.compile(r"^Team (\d+)$")


class MigrationReport(BaseModel):
    migrated: List[Dict[str, Any]] = Field(default_factory=list)
    unmatched_team_names: List[str] = Field(default_factory=list)


def ensure_schema_supported(version: SchemaVersion) -> None:
    """Called once at startup with the configured schema version."""
    if version != SchemaVersion.TEAM_ID:
        raise ConfigurationError(
            f"Schema version '{version.value}' is not served. Run the legacy "
            "evaluation migration and set SCHEMA_VERSION=team_id."
        )


def match_team(team_name: str, teams: Iterable[Team]) -> Optional[Team]:
    """Exact name match first, then "Team <number>" against team numbers."""
    teams = list(teams)
    name = (team_name or "").strip()
    for team in teams:
        if team.name and team.name == name:
            return team
    found = _TEAM_NUMBER_NAME.match(name)
    if found:
        number = int(found.group(1))
        for team in teams:
            if team.number == number:
                return team
    return None


def migrate_legacy_evaluations(
    rows: Iterable[Dict[str, Any]], teams: Iterable[Team]
) -> MigrationReport:
    """Replaces ``team_name`` with ``team_id`` on each legacy evaluation row.

    Rows whose team cannot be matched are left out of ``migrated`` and their
    team names listed for manual review; nothing is created implicitly.
    """
    teams = list(teams)
    report = MigrationReport()
    for row in rows:
        team = match_team(row.get("team_name", ""), teams)
        if team is None:
            name = row.get("team_name", "")
            if name not in report.unmatched_team_names:
                report.unmatched_team_names.append(name)
            continue
        migrated = {k: v for k, v in row.items() if k != "team_name"}
        migrated["team_id"] = team.id
        report.migrated.append(migrated)

    if report.unmatched_team_names:
        logger.warning(
            f"{len(report.unmatched_team_names)} legacy team name(s) need manual review: "
            f"{report.unmatched_team_names}"
        )
    logger.info(f"Migrated {len(report.migrated)} legacy evaluation row(s) to team ids.")
    return report
