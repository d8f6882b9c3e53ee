from datetime import datetime
from typing import Optional, Dict, Any, Union

from pydantic import BaseModel, Field

from .team import utcnow

ScoreValue = Union[bool, int]


class EvaluationSubmission(BaseModel):
    """A judge's candidate evaluation, exactly as received from the form."""

    participant_name: str = ""
    team_id: Optional[int] = None
    # Values stay raw here; the validator checks and coerces them
    scores: Dict[str, Any] = Field(default_factory=dict)
    comments: Optional[str] = None


class Evaluation(BaseModel):
    """One judge's accepted, scored evaluation of one team."""

    id: Optional[int] = None  # Assigned by the store on insert
    participant_name: str
    team_id: int  # FK to Team.id
    scores: Dict[str, ScoreValue]
    comments: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
