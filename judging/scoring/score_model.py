"""Score model: which sub-scores exist, their ranges and their labels.

A ScoreModel is plain configuration. The validator and the aggregation engine
take one as an argument and never hard-code field names, so switching the
event format means switching the model, not the engine.
"""

from typing import Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from judging.errors import MissingScoreError, ScoreOutOfRangeError, UnknownFieldError
from judging.models.enums import ScoreKind, ScoreModelName

LIKERT_LABELS = (
    "Strongly Disagree",
    "Disagree",
    "Neutral",
    "Agree",
    "Strongly Agree",
)
AI_TOOL_LABELS = ("Did not use", "Basic usage", "Good usage", "Exemplary usage")
CRITERION_LABELS = ("Did not demonstrate", "Basic", "Thoughtful", "Extraordinary")
BOOLEAN_LABELS = ("No", "Yes")


class ScoreField(BaseModel):
    """One sub-score: a closed integer range and a label per value."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str  # Question text shown to the judge
    kind: ScoreKind
    min_value: int = 0
    max_value: int
    value_labels: Tuple[str, ...] = ()
    column: str  # Column (or detail-table category) the value is stored under
    in_detail_table: bool = False

    @model_validator(mode="after")
    def labels_cover_range(self) -> "ScoreField":
        if self.min_value > self.max_value:
            raise ValueError(f"Field '{self.name}' has an empty range")
        span = self.max_value - self.min_value + 1
        if self.value_labels and len(self.value_labels) != span:
            raise ValueError(
                f"Field '{self.name}' declares {len(self.value_labels)} labels for {span} values"
            )
        return self

    @property
    def is_numeric(self) -> bool:
        return self.kind != ScoreKind.BOOLEAN


class ScoreModel(BaseModel):
    """An ordered set of score fields plus how they are persisted."""

    model_config = ConfigDict(frozen=True)

    name: ScoreModelName
    score_fields: Tuple[ScoreField, ...]
    # Separate table holding the detail-table fields, one row per field
    detail_table: Optional[str] = None

    @model_validator(mode="after")
    def unique_field_names(self) -> "ScoreModel":
        names = [f.name for f in self.score_fields]
        if len(names) != len(set(names)):
            raise ValueError(f"Score model '{self.name.value}' repeats a field name")
        if any(f.in_detail_table for f in self.score_fields) and not self.detail_table:
            raise ValueError(
                f"Score model '{self.name.value}' stores fields in a detail table but names none"
            )
        return self

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.score_fields)

    @property
    def numeric_fields(self) -> Tuple[ScoreField, ...]:
        return tuple(f for f in self.score_fields if f.is_numeric)

    @property
    def boolean_fields(self) -> Tuple[ScoreField, ...]:
        return tuple(f for f in self.score_fields if not f.is_numeric)

    @property
    def detail_fields(self) -> Tuple[ScoreField, ...]:
        return tuple(f for f in self.score_fields if f.in_detail_table)

    @property
    def column_fields(self) -> Tuple[ScoreField, ...]:
        return tuple(f for f in self.score_fields if not f.in_detail_table)

    @property
    def max_total(self) -> int:
        """Largest possible total score (sum of per-field maxima)."""
        return sum(f.max_value for f in self.numeric_fields)

    @property
    def min_total(self) -> int:
        return sum(f.min_value for f in self.numeric_fields)

    def field(self, field_name: str) -> ScoreField:
        for f in self.score_fields:
            if f.name == field_name:
                return f
        raise UnknownFieldError(field_name)

    def range_for(self, field_name: str) -> Tuple[int, int]:
        f = self.field(field_name)
        return f.min_value, f.max_value

    def label_for(self, field_name: str, value: int) -> str:
        f = self.field(field_name)
        if isinstance(value, bool):
            value = int(value)
        if not isinstance(value, int) or not f.min_value <= value <= f.max_value:
            raise ScoreOutOfRangeError(field_name, value, f.min_value, f.max_value)
        if not f.value_labels:
            return str(value)
        return f.value_labels[value - f.min_value]

    def total_score(self, scores: Mapping[str, int]) -> int:
        """Sum of every numeric field. Boolean questions do not count."""
        total = 0
        for f in self.numeric_fields:
            if f.name not in scores:
                raise MissingScoreError(f.name)
            total += int(scores[f.name])
        return total


def _likert(name: str, label: str) -> ScoreField:
    return ScoreField(
        name=name,
        label=label,
        kind=ScoreKind.LIKERT,
        max_value=4,
        value_labels=LIKERT_LABELS,
        column=f"{name}_score",
    )


def _ai_tool(name: str, label: str) -> ScoreField:
    return ScoreField(
        name=name,
        label=label,
        kind=ScoreKind.CATEGORICAL,
        max_value=3,
        value_labels=AI_TOOL_LABELS,
        column=name,
        in_detail_table=True,
    )


# Shipped default: five 0-4 questions, cumulative maximum 20.
LIKERT_5 = ScoreModel(
    name=ScoreModelName.LIKERT_5,
    score_fields=(
        _likert(
            "curiosity",
            "The team showed curiosity by trying different prompts to complete the tasks.",
        ),
        _likert(
            "experimentation",
            "The team experimented with multiple tools to get answers to the tasks.",
        ),
        _likert("learning", "I, as a judge, learned something new from this team"),
        _likert(
            "innovation",
            "The team used the tools available in novel ways (different from the training we received).",
        ),
        _likert("collaboration", "The team showed examples of effective collaboration"),
    ),
)

# Alternative: eleven 0-3 AI tool categories in their own table, two 0-3
# criteria and one yes/no question. Cumulative maximum 39.
AI_TOOLS = ScoreModel(
    name=ScoreModelName.AI_TOOLS,
    detail_table="ai_tool_scores",
    score_fields=(
        _ai_tool("synthesizing_research", "Synthesizing existing research"),
        _ai_tool("reviewing_transcripts", "Reviewing transcripts"),
        _ai_tool(
            "service_blueprint_journey_map",
            "Generating a service blueprint or journey map",
        ),
        _ai_tool("summarize_product_docs", "Summarize existing product documentation"),
        _ai_tool(
            "generate_design_concepts", "Generate at least 3 different design concepts"
        ),
        _ai_tool("generate_messaging_ui", "Generate messaging and UI content"),
        _ai_tool("updating_ui_copy", "Updating UI copy"),
        _ai_tool("generate_research_plan", "Generate a research study plan"),
        _ai_tool("drafting_product_docs", "Drafting product documentation"),
        _ai_tool(
            "generate_multimedia_content",
            "Generate multimedia content for documentation",
        ),
        _ai_tool(
            "create_release_posts", "Create release-related posts for Community"
        ),
        ScoreField(
            name="solution_description",
            label="How well did the team describe their solution?",
            kind=ScoreKind.CATEGORICAL,
            max_value=3,
            value_labels=CRITERION_LABELS,
            column="solution_description",
        ),
        ScoreField(
            name="ex_roles_contribution",
            label="How well did the team show the contribution of each role?",
            kind=ScoreKind.CATEGORICAL,
            max_value=3,
            value_labels=CRITERION_LABELS,
            column="ex_roles_contribution",
        ),
        ScoreField(
            name="learned_new_technique",
            label="I learned a new technique from this team",
            kind=ScoreKind.BOOLEAN,
            max_value=1,
            value_labels=BOOLEAN_LABELS,
            column="learned_new_technique",
        ),
    ),
)

SCORE_MODELS: Dict[ScoreModelName, ScoreModel] = {
    LIKERT_5.name: LIKERT_5,
    AI_TOOLS.name: AI_TOOLS,
}


def get_score_model(name: ScoreModelName) -> ScoreModel:
    return SCORE_MODELS[ScoreModelName(name)]
