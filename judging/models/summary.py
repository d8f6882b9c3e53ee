from datetime import datetime
from decimal import Decimal
from typing import Optional, Dict, List

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, computed_field

from .enums import Location


class Tier(BaseModel):
    """A named AI-proficiency bucket. Higher rank means a higher tier."""

    model_config = ConfigDict(frozen=True)

    name: str
    rank: int
    min_score: float  # Inclusive lower bound on the cumulative scale


class EvaluationFilter(BaseModel):
    """Optional filters shared by raw and summary queries."""

    team_id: Optional[int] = None
    location: Optional[Location] = None
    participant_name_substring: Optional[str] = None


class TeamSummary(BaseModel):
    """Aggregate of all (filtered) evaluations referencing one team."""

    team_id: int
    display_name: str
    location: Optional[Location] = None
    evaluation_count: int
    criterion_averages: Dict[str, float]  # 2 dp
    overall_average: float  # Mean of the per-field averages, 2 dp
    total_score_average: float  # 1 dp
    boolean_counts: Dict[str, int] = Field(default_factory=dict)
    boolean_percentages: Dict[str, float] = Field(default_factory=dict)  # 1 dp
    tier: Tier
    rank: Optional[int] = None  # Leaderboard position, set by leaderboard()

    # Unrounded averages, kept for rollups that average across teams
    _exact_total: Optional[Decimal] = PrivateAttr(default=None)
    _exact_overall: Optional[Decimal] = PrivateAttr(default=None)

    @computed_field  # type: ignore[misc]
    @property
    def bool_question_percentage(self) -> Optional[float]:
        """Percentage for the score model's yes/no question, if it has one."""
        if not self.boolean_percentages:
            return None
        return next(iter(self.boolean_percentages.values()))

    @property
    def exact_total_score_average(self) -> Decimal:
        if self._exact_total is not None:
            return self._exact_total
        return Decimal(str(self.total_score_average))

    @property
    def exact_overall_average(self) -> Decimal:
        if self._exact_overall is not None:
            return self._exact_overall
        return Decimal(str(self.overall_average))


class LocationSummary(BaseModel):
    location: str  # Location value, or "Unknown"
    team_count: int
    evaluation_count: int
    average_total_score: float  # 1 dp
    average_overall: float  # 2 dp


class EvaluationStats(BaseModel):
    total_evaluations: int
    total_teams: int
    total_participants: int
    average_overall_score: Optional[float] = None
    latest_evaluation: Optional[datetime] = None


class ImportRowError(BaseModel):
    row_index: int  # 1-based, as shown to the admin
    reason: str
    message: Optional[str] = None


class ImportReport(BaseModel):
    success_count: int = 0
    errors: List[ImportRowError] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def total(self) -> int:
        return self.success_count + len(self.errors)
