from dataclasses import dataclass
from typing import Optional

from loguru import logger

from judging.config.settings import AppSettings, settings
from judging.errors import StoreError
from judging.models.enums import StoreBackend
from judging.scoring.score_model import ScoreModel, get_score_model
from judging.services.admin import AdminGate
from judging.services.evaluations import EvaluationService
from judging.services.teams import TeamRegistry
from judging.storage.base import JudgingStore
from judging.storage.memory import InMemoryStore
from judging.storage.migration import ensure_schema_supported
from judging.storage.supabase_client import SupabaseStore, initialize_supabase


@dataclass
class JudgingApp:
    """Everything a presentation layer needs, wired against one store."""

    store: JudgingStore
    score_model: ScoreModel
    gate: AdminGate
    teams: TeamRegistry
    evaluations: EvaluationService


async def create_app(
    app_settings: AppSettings = settings, store: Optional[JudgingStore] = None
) -> JudgingApp:
    """Resolves schema version, score model and store once, at startup."""
    ensure_schema_supported(app_settings.schema_version)
    score_model = get_score_model(app_settings.score_model)

    if store is None:
        if app_settings.store_backend == StoreBackend.MEMORY:
            store = InMemoryStore(score_model)
        else:
            client = await initialize_supabase()
            if not client:
                raise StoreError("Could not connect to Supabase.")
            store = SupabaseStore(client, score_model)

    gate = AdminGate(app_settings.admin_passphrase_sha256)
    if not gate.enabled:
        logger.warning("ADMIN_PASSPHRASE_SHA256 is not set; admin actions are locked.")

    registry = TeamRegistry(store, gate)
    logger.info(
        f"Judging app ready: score model '{score_model.name.value}' "
        f"(max total {score_model.max_total}), store {type(store).__name__}."
    )
    return JudgingApp(
        store=store,
        score_model=score_model,
        gate=gate,
        teams=registry,
        evaluations=EvaluationService(store, registry, gate, score_model),
    )
