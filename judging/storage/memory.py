from typing import Dict, List, Optional

from loguru import logger

from judging.errors import DuplicateNameError, DuplicateNumberError, NotFoundError
from judging.models.evaluation import Evaluation
from judging.models.team import Team, TeamInput, utcnow
from judging.scoring.score_model import ScoreModel
from judging.storage.base import JudgingStore


class InMemoryStore(JudgingStore):
    """Process-local store with the same constraints as the database schema.

    Used by the test suite and for local dry runs (STORE_BACKEND=memory).
    Returned models are copies; mutating them does not touch the store.
    """

    def __init__(self, score_model: ScoreModel):
        super().__init__(score_model)
        self._teams: Dict[int, Team] = {}
        self._evaluations: Dict[int, Evaluation] = {}
        self._next_team_id = 1
        self._next_evaluation_id = 1

    def _check_unique(self, data: TeamInput, exclude_id: Optional[int] = None) -> None:
        for team in self._teams.values():
            if team.id == exclude_id:
                continue
            if data.number is not None and team.number == data.number:
                raise DuplicateNumberError(data.number)
            if (
                data.name is not None
                and team.name is not None
                and team.name.lower() == data.name.lower()
            ):
                raise DuplicateNameError(data.name)

    # --- Teams ---

    async def list_teams(self, active_only: bool = False) -> List[Team]:
        teams = [
            t.model_copy()
            for t in self._teams.values()
            if t.active or not active_only
        ]
        return sorted(teams, key=lambda t: (t.number is None, t.number or 0, t.id))

    async def get_team(self, team_id: int) -> Optional[Team]:
        team = self._teams.get(team_id)
        return team.model_copy() if team else None

    async def insert_team(self, data: TeamInput) -> Team:
        self._check_unique(data)
        team = Team(
            id=self._next_team_id,
            number=data.number,
            name=data.name,
            location=data.location,
            active=data.active,
        )
        self._teams[team.id] = team
        self._next_team_id += 1
        logger.debug(f"Inserted team {team.id} ({team.display_name}) in memory.")
        return team.model_copy()

    async def update_team(self, team_id: int, data: TeamInput) -> Team:
        current = self._teams.get(team_id)
        if current is None:
            raise NotFoundError("team", team_id)
        self._check_unique(data, exclude_id=team_id)
        updated = current.model_copy(
            update={
                "number": data.number,
                "name": data.name,
                "location": data.location,
                "active": data.active,
                "updated_at": utcnow(),
            }
        )
        self._teams[team_id] = updated
        return updated.model_copy()

    async def delete_team(self, team_id: int) -> None:
        if team_id not in self._teams:
            raise NotFoundError("team", team_id)
        del self._teams[team_id]

    async def delete_all_teams(self) -> int:
        count = len(self._teams)
        self._teams.clear()
        return count

    # --- Evaluations ---

    async def list_evaluations(
        self,
        team_id: Optional[int] = None,
        participant_name_substring: Optional[str] = None,
    ) -> List[Evaluation]:
        needle = (participant_name_substring or "").casefold()
        return [
            e.model_copy(deep=True)
            for e in self._evaluations.values()
            if (team_id is None or e.team_id == team_id)
            and needle in e.participant_name.casefold()
        ]

    async def get_evaluation(self, evaluation_id: int) -> Optional[Evaluation]:
        evaluation = self._evaluations.get(evaluation_id)
        return evaluation.model_copy(deep=True) if evaluation else None

    async def insert_evaluation(self, evaluation: Evaluation) -> Evaluation:
        if evaluation.team_id not in self._teams:
            raise NotFoundError("team", evaluation.team_id)
        stored = evaluation.model_copy(
            update={"id": self._next_evaluation_id}, deep=True
        )
        self._evaluations[stored.id] = stored
        self._next_evaluation_id += 1
        return stored.model_copy(deep=True)

    async def update_evaluation(
        self, evaluation_id: int, evaluation: Evaluation
    ) -> Evaluation:
        if evaluation_id not in self._evaluations:
            raise NotFoundError("evaluation", evaluation_id)
        if evaluation.team_id not in self._teams:
            raise NotFoundError("team", evaluation.team_id)
        stored = evaluation.model_copy(update={"id": evaluation_id}, deep=True)
        self._evaluations[evaluation_id] = stored
        return stored.model_copy(deep=True)

    async def delete_evaluation(self, evaluation_id: int) -> None:
        if evaluation_id not in self._evaluations:
            raise NotFoundError("evaluation", evaluation_id)
        del self._evaluations[evaluation_id]

    async def delete_all_evaluations(self) -> int:
        count = len(self._evaluations)
        self._evaluations.clear()
        return count

    async def count_evaluations(self, team_id: Optional[int] = None) -> int:
        return sum(
            1
            for e in self._evaluations.values()
            if team_id is None or e.team_id == team_id
        )
