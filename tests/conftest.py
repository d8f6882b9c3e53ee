"""Shared pytest fixtures for judging tests."""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from judging.models.enums import Location
from judging.models.evaluation import Evaluation
from judging.models.team import Team
from judging.scoring.score_model import AI_TOOLS, LIKERT_5, ScoreModel
from judging.services.admin import AdminCapability, AdminGate
from judging.services.evaluations import EvaluationService
from judging.services.teams import TeamRegistry
from judging.storage.memory import InMemoryStore

ADMIN_PASSPHRASE = "correct horse battery staple"
ADMIN_DIGEST = hashlib.sha256(ADMIN_PASSPHRASE.encode("utf-8")).hexdigest()

BASE_TIME = datetime(2025, 3, 14, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def score_model() -> ScoreModel:
    return LIKERT_5


@pytest.fixture
def ai_tools_model() -> ScoreModel:
    return AI_TOOLS


@pytest.fixture
def store(score_model: ScoreModel) -> InMemoryStore:
    return InMemoryStore(score_model)


@pytest.fixture
def gate() -> AdminGate:
    return AdminGate(ADMIN_DIGEST)


@pytest.fixture
def capability(gate: AdminGate) -> AdminCapability:
    return gate.unlock(ADMIN_PASSPHRASE)


@pytest.fixture
def registry(store: InMemoryStore, gate: AdminGate) -> TeamRegistry:
    return TeamRegistry(store, gate)


@pytest.fixture
def service(
    store: InMemoryStore,
    registry: TeamRegistry,
    gate: AdminGate,
    score_model: ScoreModel,
) -> EvaluationService:
    return EvaluationService(store, registry, gate, score_model)


@pytest.fixture
def make_team() -> Callable[..., Team]:
    def factory(team_id: int, **kwargs: Any) -> Team:
        kwargs.setdefault("number", team_id)
        return Team(id=team_id, **kwargs)

    return factory


@pytest.fixture
def make_evaluation() -> Callable[..., Evaluation]:
    counter = {"next": 1}

    def factory(team_id: int, scores: dict[str, Any], **kwargs: Any) -> Evaluation:
        evaluation_id = counter["next"]
        counter["next"] += 1
        kwargs.setdefault("participant_name", f"Judge {evaluation_id}")
        kwargs.setdefault("created_at", BASE_TIME + timedelta(minutes=evaluation_id))
        return Evaluation(id=evaluation_id, team_id=team_id, scores=scores, **kwargs)

    return factory


@pytest.fixture
def sample_teams(make_team: Callable[..., Team]) -> list[Team]:
    return [
        make_team(1, name="Prompt Pioneers", location=Location.AMSTERDAM),
        make_team(2, location=Location.HYDERABAD),
        make_team(3, name="Bot Builders", location=Location.AMERICAS),
        make_team(4),
    ]
