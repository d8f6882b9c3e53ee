from typing import Any, Iterable, List, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from judging.errors import (
    ConflictError,
    DependencyError,
    DuplicateNameError,
    DuplicateNumberError,
    JudgingError,
    NotFoundError,
    StoreError,
    TeamHasEvaluationsError,
    ValidationError,
)
from judging.models.summary import ImportReport, ImportRowError
from judging.models.team import Team, TeamInput
from judging.services.admin import AdminCapability, AdminGate
from judging.storage.base import JudgingStore

TeamData = Union[TeamInput, Mapping[str, Any]]

# Row error reasons reported by bulk operations
INVALID_REASONS = {
    "number": "InvalidNumber",
    "location": "InvalidLocation",
    "name": "InvalidName",
    "active": "InvalidActive",
}
MISSING_IDENTITY = "MissingIdentity"


def parse_team_input(data: TeamData) -> TeamInput:
    """Builds a TeamInput, turning pydantic errors into a ValidationError naming the field."""
    if isinstance(data, TeamInput):
        return data
    try:
        return TeamInput.model_validate(dict(data))
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else None
        message = first["msg"].removeprefix("Value error, ")
        raise ValidationError(message, field=field) from e


def row_error_reason(error: JudgingError) -> str:
    if isinstance(error, ConflictError):
        return error.reason
    if isinstance(error, NotFoundError):
        return "UnknownTeam"
    if isinstance(error, ValidationError):
        if error.field is None:
            return MISSING_IDENTITY
        return INVALID_REASONS.get(error.field, "Invalid")
    return "StoreError"


class TeamRegistry:
    """Owns team identity: CRUD, uniqueness and the delete guard.

    Reads are open to everyone (judges pick from ``list_active``); every
    mutation needs an AdminCapability from the gate.
    """

    def __init__(self, store: JudgingStore, gate: AdminGate):
        self.store = store
        self.gate = gate

    async def _check_unique(self, data: TeamInput, exclude_id: Optional[int] = None) -> None:
        for team in await self.store.list_teams():
            if team.id == exclude_id:
                continue
            if data.number is not None and team.number == data.number:
                raise DuplicateNumberError(data.number)
            if (
                data.name is not None
                and team.name is not None
                and team.name.casefold() == data.name.casefold()
            ):
                raise DuplicateNameError(data.name)

    # --- Reads ---

    async def list_active(self) -> List[Team]:
        return await self.store.list_teams(active_only=True)

    async def list_all(self) -> List[Team]:
        return await self.store.list_teams()

    async def lookup(self, team_id: Optional[int]) -> Optional[Team]:
        if team_id is None:
            return None
        return await self.store.get_team(team_id)

    async def resolve(self, team_id: int) -> Team:
        team = await self.lookup(team_id)
        if team is None:
            raise NotFoundError("team", team_id)
        return team

    # --- Mutations ---

    async def create(self, data: TeamData, *, capability: AdminCapability) -> Team:
        self.gate.require(capability)
        team_input = parse_team_input(data)
        await self._check_unique(team_input)
        team = await self.store.insert_team(team_input)
        logger.info(f"Created team {team.id}: {team.display_name}")
        return team

    async def update(
        self, team_id: int, data: TeamData, *, capability: AdminCapability
    ) -> Team:
        self.gate.require(capability)
        team_input = parse_team_input(data)
        await self.resolve(team_id)
        await self._check_unique(team_input, exclude_id=team_id)
        team = await self.store.update_team(team_id, team_input)
        logger.info(f"Updated team {team.id}: {team.display_name}")
        return team

    async def delete(self, team_id: int, *, capability: AdminCapability) -> None:
        """Deletes a team with no evaluations. Dependents are never cascaded."""
        self.gate.require(capability)
        team = await self.resolve(team_id)
        blocking = await self.store.count_evaluations(team_id)
        if blocking:
            logger.warning(
                f"Refusing to delete {team.display_name}: {blocking} evaluation(s) reference it."
            )
            raise TeamHasEvaluationsError(team_id, blocking)
        await self.store.delete_team(team_id)
        logger.info(f"Deleted team {team_id} ({team.display_name})")

    async def delete_all(self, *, capability: AdminCapability) -> int:
        self.gate.require(capability)
        blocking = await self.store.count_evaluations()
        if blocking:
            raise DependencyError(
                f"Cannot delete teams while {blocking} evaluation(s) exist. "
                "Please delete evaluations first.",
                blocking_count=blocking,
            )
        deleted = await self.store.delete_all_teams()
        logger.warning(f"Deleted all {deleted} team(s).")
        return deleted

    async def rename_by_number(
        self, number: int, new_name: str, *, capability: AdminCapability
    ) -> Team:
        self.gate.require(capability)
        if not (new_name or "").strip():
            raise ValidationError("New team name is required", field="name")
        team = next((t for t in await self.list_all() if t.number == number), None)
        if team is None:
            raise NotFoundError("team", number)
        return await self.update(
            team.id,
            TeamInput(
                number=team.number,
                name=new_name,
                location=team.location,
                active=team.active,
            ),
            capability=capability,
        )

    # --- Bulk operations: partial success, one error entry per failed row ---

    async def bulk_import(
        self, rows: Iterable[TeamData], *, capability: AdminCapability
    ) -> ImportReport:
        self.gate.require(capability)
        report = ImportReport()
        for row_index, row in enumerate(rows, start=1):
            try:
                await self.create(row, capability=capability)
                report.success_count += 1
            except (ValidationError, ConflictError, StoreError) as e:
                logger.warning(f"Row {row_index}: {e}")
                report.errors.append(
                    ImportRowError(
                        row_index=row_index, reason=row_error_reason(e), message=str(e)
                    )
                )
        logger.info(
            f"Imported {report.success_count} out of {report.total} team row(s); "
            f"{len(report.errors)} error(s)."
        )
        return report

    async def bulk_rename(
        self, rows: Iterable[Mapping[str, Any]], *, capability: AdminCapability
    ) -> ImportReport:
        """Rows of ``{"number": ..., "name": ...}``."""
        self.gate.require(capability)
        report = ImportReport()
        for row_index, row in enumerate(rows, start=1):
            try:
                number = row.get("number")
                if not isinstance(number, int) or isinstance(number, bool):
                    raise ValidationError("Team number is required", field="number")
                await self.rename_by_number(
                    number, row.get("name") or "", capability=capability
                )
                report.success_count += 1
            except (ValidationError, ConflictError, NotFoundError, StoreError) as e:
                logger.warning(f"Row {row_index}: {e}")
                report.errors.append(
                    ImportRowError(
                        row_index=row_index, reason=row_error_reason(e), message=str(e)
                    )
                )
        logger.info(f"Renamed {report.success_count} out of {report.total} team(s).")
        return report
