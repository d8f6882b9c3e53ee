from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from judging.errors import NotFoundError, ValidationError
from judging.models.evaluation import Evaluation, EvaluationSubmission
from judging.models.summary import (
    EvaluationFilter,
    EvaluationStats,
    LocationSummary,
    TeamSummary,
)
from judging.models.team import Team, utcnow
from judging.scoring import aggregation
from judging.scoring.score_model import ScoreModel
from judging.scoring.tiers import TierClassifier
from judging.scoring.validator import validate_submission
from judging.services.admin import AdminCapability, AdminGate
from judging.services.teams import TeamRegistry
from judging.storage.base import JudgingStore

SubmissionData = Union[EvaluationSubmission, Mapping[str, Any]]


def parse_submission(data: SubmissionData) -> EvaluationSubmission:
    if isinstance(data, EvaluationSubmission):
        return data
    try:
        return EvaluationSubmission.model_validate(dict(data))
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else None
        raise ValidationError(first["msg"], field=field) from e


class EvaluationService:
    """Judge submissions, admin edits, and every read-side view.

    Summaries are recomputed from a fresh read of the store on each call.
    """

    def __init__(
        self,
        store: JudgingStore,
        registry: TeamRegistry,
        gate: AdminGate,
        score_model: ScoreModel,
        classifier: Optional[TierClassifier] = None,
    ):
        self.store = store
        self.registry = registry
        self.gate = gate
        self.score_model = score_model
        self.classifier = classifier or TierClassifier(score_model.max_total)

    # --- Submission ---

    async def submit(self, data: SubmissionData) -> int:
        """Validates and persists a judge's evaluation. Returns the new id."""
        submission = parse_submission(data)
        team = await self.registry.lookup(submission.team_id)
        evaluation = validate_submission(submission, team, self.score_model)
        stored = await self.store.insert_evaluation(evaluation)
        logger.info(
            f"Evaluation {stored.id} submitted by '{stored.participant_name}' "
            f"for {team.display_name}."
        )
        return stored.id

    # --- Admin mutations ---

    async def get(self, evaluation_id: int) -> Evaluation:
        evaluation = await self.store.get_evaluation(evaluation_id)
        if evaluation is None:
            raise NotFoundError("evaluation", evaluation_id)
        return evaluation

    async def update(
        self,
        evaluation_id: int,
        data: SubmissionData,
        *,
        capability: AdminCapability,
    ) -> Evaluation:
        """Re-submission of an existing evaluation. Inactive teams are allowed here."""
        self.gate.require(capability)
        submission = parse_submission(data)
        existing = await self.get(evaluation_id)
        team = await self.registry.lookup(submission.team_id)
        candidate = validate_submission(
            submission, team, self.score_model, require_active=False
        )
        updated_at = (
            utcnow() if candidate.scores != existing.scores else existing.updated_at
        )
        candidate = candidate.model_copy(
            update={
                "id": evaluation_id,
                "created_at": existing.created_at,
                "updated_at": updated_at,
            }
        )
        stored = await self.store.update_evaluation(evaluation_id, candidate)
        logger.info(f"Evaluation {evaluation_id} updated.")
        return stored

    async def delete(self, evaluation_id: int, *, capability: AdminCapability) -> None:
        self.gate.require(capability)
        await self.store.delete_evaluation(evaluation_id)
        logger.info(f"Evaluation {evaluation_id} deleted.")

    async def delete_all(self, *, capability: AdminCapability) -> int:
        self.gate.require(capability)
        deleted = await self.store.delete_all_evaluations()
        logger.warning(f"Deleted all {deleted} evaluation(s).")
        return deleted

    # --- Queries ---

    async def _snapshot(
        self, filters: Optional[EvaluationFilter]
    ) -> Tuple[List[Evaluation], List[Team]]:
        filters = filters or EvaluationFilter()
        evaluations = await self.store.list_evaluations(
            team_id=filters.team_id,
            participant_name_substring=filters.participant_name_substring,
        )
        teams = await self.store.list_teams()
        return aggregation.filter_evaluations(evaluations, teams, filters), teams

    async def list_evaluations(
        self, filters: Optional[EvaluationFilter] = None
    ) -> List[Evaluation]:
        evaluations, _ = await self._snapshot(filters)
        return evaluations

    async def team_summaries(
        self, filters: Optional[EvaluationFilter] = None
    ) -> List[TeamSummary]:
        evaluations, teams = await self._snapshot(filters)
        return aggregation.summarize(
            evaluations, teams, self.score_model, classifier=self.classifier
        )

    async def leaderboard(
        self, filters: Optional[EvaluationFilter] = None
    ) -> List[TeamSummary]:
        return aggregation.rank_summaries(await self.team_summaries(filters))

    async def tier_groups(
        self, filters: Optional[EvaluationFilter] = None
    ) -> Dict[str, List[TeamSummary]]:
        return aggregation.group_by_tier(
            await self.team_summaries(filters), self.classifier
        )

    async def location_summaries(
        self, filters: Optional[EvaluationFilter] = None
    ) -> List[LocationSummary]:
        return aggregation.summarize_locations(await self.team_summaries(filters))

    async def stats(self) -> EvaluationStats:
        evaluations = await self.store.list_evaluations()
        return aggregation.evaluation_stats(evaluations, self.score_model)
