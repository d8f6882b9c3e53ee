# judging/models/team.py
from datetime import datetime, timezone
from typing import Optional, Any

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from .enums import Location


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def team_display_name(
    team_id: Optional[int], number: Optional[int], name: Optional[str]
) -> str:
    """Name if non-empty, else "Team {number}", else "Team #{id}"."""
    if name and name.strip():
        return name.strip()
    if number:
        return f"Team {number}"
    return f"Team #{team_id}"


def _clean_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _check_number(value: Optional[int]) -> Optional[int]:
    if value is not None and value <= 0:
        raise ValueError("Team number must be a positive integer")
    return value


class TeamInput(BaseModel):
    """Admin-supplied team fields for create/update and bulk import rows."""

    number: Optional[int] = None
    name: Optional[str] = None
    location: Optional[Location] = None
    active: bool = True

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> Optional[str]:
        return _clean_name(value)

    @field_validator("location", mode="before")
    @classmethod
    def blank_location_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("number")
    @classmethod
    def positive_number(cls, value: Optional[int]) -> Optional[int]:
        return _check_number(value)

    @model_validator(mode="after")
    def number_or_name(self) -> "TeamInput":
        if self.number is None and self.name is None:
            raise ValueError("Either team number or team name is required")
        return self


class Team(BaseModel):
    """A team being judged. `id` is the join key used by every evaluation."""

    id: int
    number: Optional[int] = None
    name: Optional[str] = None
    location: Optional[Location] = None
    active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> Optional[str]:
        return _clean_name(value)

    @computed_field  # type: ignore[misc]
    @property
    def display_name(self) -> str:
        return team_display_name(self.id, self.number, self.name)

    @property
    def sort_key(self) -> str:
        """Lower-cased name, else a zero-padded "team 007" style key."""
        if self.name:
            return self.name.lower()
        if self.number:
            return f"team {self.number:03d}"
        return f"team #{self.id}"

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, Team):
            return NotImplemented
        return (
            self.id == other.id
            and self.number == other.number
            and self.name == other.name
            and self.location == other.location
            and self.active == other.active
        )
