import re
from typing import Any, Dict, Optional

from loguru import logger

from judging.errors import (
    MissingScoreError,
    ScoreOutOfRangeError,
    UnknownFieldError,
    UnknownTeamError,
    ValidationError,
)
from judging.models.evaluation import Evaluation, EvaluationSubmission, ScoreValue
from judging.models.team import Team
from judging.scoring.score_model import ScoreField, ScoreModel

_INTEGER = re.compile(r"-?[0-9]+")


def _coerce_value(field: ScoreField, value: Any) -> ScoreValue:
    """Returns the value as int (bool for yes/no fields) or raises ScoreOutOfRangeError."""
    if not field.is_numeric:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        raise ScoreOutOfRangeError(field.name, value, field.min_value, field.max_value)

    # bool is an int subclass, but True is not a Likert answer
    if isinstance(value, bool):
        raise ScoreOutOfRangeError(field.name, value, field.min_value, field.max_value)
    if isinstance(value, str):
        # Form posts send radio values as strings ("0".."4")
        stripped = value.strip()
        if not _INTEGER.fullmatch(stripped):
            raise ScoreOutOfRangeError(
                field.name, value, field.min_value, field.max_value
            )
        value = int(stripped)
    if not isinstance(value, int) or not field.min_value <= value <= field.max_value:
        raise ScoreOutOfRangeError(field.name, value, field.min_value, field.max_value)
    return value


def validate_scores(scores: Dict[str, Any], score_model: ScoreModel) -> Dict[str, ScoreValue]:
    """Checks presence, then range, field by field in model order."""
    for field in score_model.score_fields:
        if field.name not in scores or scores[field.name] is None:
            raise MissingScoreError(field.name)

    for name in scores:
        if name not in score_model.field_names:
            raise UnknownFieldError(name)

    return {
        field.name: _coerce_value(field, scores[field.name])
        for field in score_model.score_fields
    }


def validate_submission(
    submission: EvaluationSubmission,
    team: Optional[Team],
    score_model: ScoreModel,
    require_active: bool = True,
) -> Evaluation:
    """Gatekeeper run before anything is persisted.

    Args:
        submission: The candidate evaluation as received.
        team: Result of a read-only lookup of ``submission.team_id``
            (None when the id does not resolve).
        score_model: The score model in effect.
        require_active: Judge-facing submissions may only target active teams.
            Admin edits of historical evaluations pass False.

    Returns:
        A normalized Evaluation ready for persistence (no id yet).

    Raises:
        ValidationError: The first violation found, in check order.
    """
    participant_name = (submission.participant_name or "").strip()
    if not participant_name:
        raise ValidationError("Participant name is required", field="participant_name")

    if team is None or submission.team_id is None or team.id != submission.team_id:
        raise UnknownTeamError(submission.team_id)
    if require_active and not team.active:
        raise UnknownTeamError(submission.team_id, inactive=True)

    scores = validate_scores(submission.scores, score_model)

    comments = (submission.comments or "").strip() or None
    evaluation = Evaluation(
        participant_name=participant_name,
        team_id=team.id,
        scores=scores,
        comments=comments,
    )
    logger.debug(
        f"Validated evaluation by '{participant_name}' for {team.display_name}: "
        f"total {score_model.total_score(scores)}/{score_model.max_total}"
    )
    return evaluation
