"""Tests for evaluation validation."""

import pytest

from judging.errors import (
    MissingScoreError,
    ScoreOutOfRangeError,
    UnknownFieldError,
    UnknownTeamError,
    ValidationError,
)
from judging.models.evaluation import EvaluationSubmission
from judging.models.team import Team
from judging.scoring.score_model import AI_TOOLS, LIKERT_5
from judging.scoring.validator import validate_scores, validate_submission


def full_scores(value: int = 3) -> dict:
    return {name: value for name in LIKERT_5.field_names}


@pytest.fixture
def team() -> Team:
    return Team(id=7, number=7, name="Vector Vikings")


def submission(**overrides) -> EvaluationSubmission:
    data = {"participant_name": "Ana", "team_id": 7, "scores": full_scores()}
    data.update(overrides)
    return EvaluationSubmission(**data)


class TestValidateSubmission:
    """Fail-fast checks in order: participant, team, scores."""

    def test_valid_submission(self, team: Team) -> None:
        evaluation = validate_submission(
            submission(comments="  Great demo  "), team, LIKERT_5
        )
        assert evaluation.id is None
        assert evaluation.team_id == 7
        assert evaluation.participant_name == "Ana"
        assert evaluation.scores == full_scores()
        assert evaluation.comments == "Great demo"

    def test_participant_name_required(self, team: Team) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_submission(submission(participant_name="   "), team, LIKERT_5)
        assert exc_info.value.field == "participant_name"

    def test_participant_checked_before_team(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_submission(submission(participant_name=""), None, LIKERT_5)
        assert exc_info.value.field == "participant_name"

    def test_unknown_team(self) -> None:
        with pytest.raises(UnknownTeamError) as exc_info:
            validate_submission(submission(team_id=99), None, LIKERT_5)
        assert exc_info.value.field == "team_id"
        assert not exc_info.value.inactive

    def test_missing_team_id(self, team: Team) -> None:
        with pytest.raises(UnknownTeamError):
            validate_submission(submission(team_id=None), team, LIKERT_5)

    def test_inactive_team_rejected_for_judges(self) -> None:
        inactive = Team(id=7, number=7, active=False)
        with pytest.raises(UnknownTeamError) as exc_info:
            validate_submission(submission(), inactive, LIKERT_5)
        assert exc_info.value.inactive

    def test_inactive_team_allowed_for_admin_edit(self) -> None:
        inactive = Team(id=7, number=7, active=False)
        evaluation = validate_submission(
            submission(), inactive, LIKERT_5, require_active=False
        )
        assert evaluation.team_id == 7

    def test_out_of_range_names_field(self, team: Team) -> None:
        scores = full_scores()
        scores["innovation"] = 5
        with pytest.raises(ScoreOutOfRangeError) as exc_info:
            validate_submission(submission(scores=scores), team, LIKERT_5)
        assert exc_info.value.field == "innovation"
        assert "innovation" in str(exc_info.value)

    def test_empty_comments_become_none(self, team: Team) -> None:
        evaluation = validate_submission(submission(comments="   "), team, LIKERT_5)
        assert evaluation.comments is None


class TestValidateScores:
    """Presence, known fields, then range and coercion."""

    def test_missing_field(self) -> None:
        scores = full_scores()
        del scores["learning"]
        with pytest.raises(MissingScoreError) as exc_info:
            validate_scores(scores, LIKERT_5)
        assert exc_info.value.field == "learning"

    def test_none_counts_as_missing(self) -> None:
        scores = full_scores()
        scores["curiosity"] = None
        with pytest.raises(MissingScoreError):
            validate_scores(scores, LIKERT_5)

    def test_missing_reported_before_range(self) -> None:
        scores = full_scores()
        scores["curiosity"] = 9
        del scores["collaboration"]
        with pytest.raises(MissingScoreError):
            validate_scores(scores, LIKERT_5)

    def test_unknown_field_rejected(self) -> None:
        scores = full_scores()
        scores["charisma"] = 2
        with pytest.raises(UnknownFieldError) as exc_info:
            validate_scores(scores, LIKERT_5)
        assert exc_info.value.field == "charisma"

    @pytest.mark.parametrize("value", [-1, 5, 2.5, "high", True, "--3", "²", " 4 5 "])
    def test_rejects_non_scores(self, value) -> None:
        scores = full_scores()
        scores["experimentation"] = value
        with pytest.raises(ScoreOutOfRangeError):
            validate_scores(scores, LIKERT_5)

    def test_digit_strings_coerced(self) -> None:
        scores = {name: "2" for name in LIKERT_5.field_names}
        assert validate_scores(scores, LIKERT_5) == full_scores(2)

    def test_boundaries_accepted(self) -> None:
        assert validate_scores(full_scores(0), LIKERT_5) == full_scores(0)
        assert validate_scores(full_scores(4), LIKERT_5) == full_scores(4)

    def test_boolean_field_coercion(self) -> None:
        scores = {f.name: 2 for f in AI_TOOLS.numeric_fields}
        for raw, expected in [(True, True), (0, False), ("true", True), ("False", False)]:
            scores["learned_new_technique"] = raw
            assert validate_scores(scores, AI_TOOLS)["learned_new_technique"] is expected

    def test_boolean_field_rejects_other_values(self) -> None:
        scores = {f.name: 2 for f in AI_TOOLS.numeric_fields}
        scores["learned_new_technique"] = 2
        with pytest.raises(ScoreOutOfRangeError) as exc_info:
            validate_scores(scores, AI_TOOLS)
        assert exc_info.value.field == "learned_new_technique"

    def test_ai_tool_range_is_zero_to_three(self) -> None:
        scores = {f.name: 3 for f in AI_TOOLS.numeric_fields}
        scores["learned_new_technique"] = False
        scores["drafting_product_docs"] = 4
        with pytest.raises(ScoreOutOfRangeError) as exc_info:
            validate_scores(scores, AI_TOOLS)
        assert exc_info.value.field == "drafting_product_docs"
