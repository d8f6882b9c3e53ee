from abc import ABC, abstractmethod
from typing import List, Optional

from judging.models.evaluation import Evaluation
from judging.models.team import Team, TeamInput
from judging.scoring.score_model import ScoreModel


class JudgingStore(ABC):
    """Persistence contract for teams and evaluations.

    Implementations enforce team number/name uniqueness (raising
    DuplicateNumberError / DuplicateNameError), refuse evaluations for
    unknown teams, and translate backend failures into StoreError.
    Lookups by id return None when nothing matches; updates and deletes
    of a missing id raise NotFoundError.
    """

    def __init__(self, score_model: ScoreModel):
        self.score_model = score_model

    # --- Teams ---

    @abstractmethod
    async def list_teams(self, active_only: bool = False) -> List[Team]:
        """Teams ordered by number (teams without a number last), then id."""
        pass

    @abstractmethod
    async def get_team(self, team_id: int) -> Optional[Team]:
        pass

    @abstractmethod
    async def insert_team(self, data: TeamInput) -> Team:
        pass

    @abstractmethod
    async def update_team(self, team_id: int, data: TeamInput) -> Team:
        pass

    @abstractmethod
    async def delete_team(self, team_id: int) -> None:
        pass

    @abstractmethod
    async def delete_all_teams(self) -> int:
        pass

    # --- Evaluations ---

    @abstractmethod
    async def list_evaluations(
        self,
        team_id: Optional[int] = None,
        participant_name_substring: Optional[str] = None,
    ) -> List[Evaluation]:
        """Evaluations in insertion order, optionally narrowed server-side."""
        pass

    @abstractmethod
    async def get_evaluation(self, evaluation_id: int) -> Optional[Evaluation]:
        pass

    @abstractmethod
    async def insert_evaluation(self, evaluation: Evaluation) -> Evaluation:
        """Persists all of the evaluation's scores or none of them."""
        pass

    @abstractmethod
    async def update_evaluation(
        self, evaluation_id: int, evaluation: Evaluation
    ) -> Evaluation:
        pass

    @abstractmethod
    async def delete_evaluation(self, evaluation_id: int) -> None:
        pass

    @abstractmethod
    async def delete_all_evaluations(self) -> int:
        pass

    @abstractmethod
    async def count_evaluations(self, team_id: Optional[int] = None) -> int:
        pass

    async def health_check(self) -> bool:
        """True when the store answers a trivial read."""
        await self.count_evaluations()
        return True
