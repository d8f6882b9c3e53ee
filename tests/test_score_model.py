"""Tests for score model configuration."""

import pytest

from judging.errors import MissingScoreError, ScoreOutOfRangeError, UnknownFieldError
from judging.models.enums import ScoreKind, ScoreModelName
from judging.scoring.score_model import (
    AI_TOOLS,
    LIKERT_5,
    ScoreField,
    ScoreModel,
    get_score_model,
)


class TestLikertModel:
    """The shipped five-question model."""

    def test_fields_in_order(self) -> None:
        assert LIKERT_5.field_names == (
            "curiosity",
            "experimentation",
            "learning",
            "innovation",
            "collaboration",
        )

    def test_ranges_and_total(self) -> None:
        for name in LIKERT_5.field_names:
            assert LIKERT_5.range_for(name) == (0, 4)
        assert LIKERT_5.max_total == 20
        assert LIKERT_5.min_total == 0

    def test_columns_use_score_suffix(self) -> None:
        assert [f.column for f in LIKERT_5.score_fields] == [
            "curiosity_score",
            "experimentation_score",
            "learning_score",
            "innovation_score",
            "collaboration_score",
        ]
        assert LIKERT_5.detail_fields == ()

    def test_labels(self) -> None:
        assert LIKERT_5.label_for("curiosity", 0) == "Strongly Disagree"
        assert LIKERT_5.label_for("curiosity", 2) == "Neutral"
        assert LIKERT_5.label_for("collaboration", 4) == "Strongly Agree"

    def test_label_out_of_range(self) -> None:
        with pytest.raises(ScoreOutOfRangeError):
            LIKERT_5.label_for("learning", 5)

    def test_unknown_field(self) -> None:
        with pytest.raises(UnknownFieldError) as exc_info:
            LIKERT_5.range_for("charisma")
        assert exc_info.value.field == "charisma"

    def test_total_score(self) -> None:
        scores = {name: 3 for name in LIKERT_5.field_names}
        assert LIKERT_5.total_score(scores) == 15

    def test_total_score_requires_every_field(self) -> None:
        with pytest.raises(MissingScoreError) as exc_info:
            LIKERT_5.total_score({"curiosity": 1})
        assert exc_info.value.field == "experimentation"


class TestAIToolsModel:
    """The alternative model with a detail table and a yes/no question."""

    def test_shape(self) -> None:
        assert len(AI_TOOLS.detail_fields) == 11
        assert AI_TOOLS.detail_table == "ai_tool_scores"
        assert [f.name for f in AI_TOOLS.boolean_fields] == ["learned_new_technique"]
        assert len(AI_TOOLS.numeric_fields) == 13

    def test_max_total_ignores_boolean(self) -> None:
        assert AI_TOOLS.max_total == 39

    def test_boolean_labels(self) -> None:
        assert AI_TOOLS.label_for("learned_new_technique", True) == "Yes"
        assert AI_TOOLS.label_for("learned_new_technique", 0) == "No"

    def test_categorical_labels(self) -> None:
        assert AI_TOOLS.label_for("updating_ui_copy", 3) == "Exemplary usage"
        assert AI_TOOLS.label_for("solution_description", 1) == "Basic"

    def test_total_skips_boolean(self) -> None:
        scores = {f.name: 1 for f in AI_TOOLS.numeric_fields}
        scores["learned_new_technique"] = True
        assert AI_TOOLS.total_score(scores) == 13


class TestModelDefinition:
    """Validation of score model declarations."""

    def test_lookup_by_name(self) -> None:
        assert get_score_model(ScoreModelName.LIKERT_5) is LIKERT_5
        assert get_score_model("ai_tools") is AI_TOOLS

    def test_label_count_must_match_range(self) -> None:
        with pytest.raises(ValueError):
            ScoreField(
                name="x",
                label="X",
                kind=ScoreKind.LIKERT,
                max_value=4,
                value_labels=("a", "b"),
                column="x",
            )

    def test_duplicate_field_names_rejected(self) -> None:
        field = ScoreField(name="x", label="X", kind=ScoreKind.LIKERT, max_value=4, column="x")
        with pytest.raises(ValueError):
            ScoreModel(name=ScoreModelName.LIKERT_5, score_fields=(field, field))

    def test_detail_fields_need_table(self) -> None:
        field = ScoreField(
            name="x",
            label="X",
            kind=ScoreKind.CATEGORICAL,
            max_value=3,
            column="x",
            in_detail_table=True,
        )
        with pytest.raises(ValueError):
            ScoreModel(name=ScoreModelName.AI_TOOLS, score_fields=(field,))
