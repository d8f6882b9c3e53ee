# judging/storage/supabase_client.py
from datetime import datetime
from typing import List, Dict, Any, Optional

from loguru import logger
from supabase import create_async_client, AsyncClient
from postgrest import APIResponse
from postgrest.exceptions import APIError

from judging.config.settings import settings
from judging.errors import (
    DuplicateNameError,
    DuplicateNumberError,
    NotFoundError,
    StoreError,
)
from judging.models.evaluation import Evaluation
from judging.models.team import Team, TeamInput, utcnow
from judging.scoring.score_model import ScoreModel
from judging.storage.base import JudgingStore

TEAMS_TABLE = "teams"
EVALUATIONS_TABLE = "evaluations"

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NO_ROWS_RETURNED = "PGRST116"

# Module-level storage for the async client instance
_async_supabase_client: Optional[AsyncClient] = None


async def initialize_supabase() -> Optional[AsyncClient]:
    """Initializes the global ASYNC Supabase client and returns it."""
    global _async_supabase_client
    if _async_supabase_client:
        logger.debug("Async Supabase client already initialized.")
        return _async_supabase_client

    api_key = settings.supabase_api_key
    if not settings.supabase_url or not api_key:
        logger.critical("Supabase URL or Key not configured in settings.")
        raise SystemExit("Supabase configuration missing.")

    logger.debug(
        f"Attempting to initialize Async Supabase client with URL: {settings.supabase_url}"
    )
    logger.debug(f"Using Supabase Key (snippet): {api_key[:5]}...{api_key[-5:]}")

    try:
        client: AsyncClient = await create_async_client(settings.supabase_url, api_key)
        _async_supabase_client = client
        logger.success("Async Supabase client initialized successfully.")
        return client
    except Exception as e:
        logger.exception(f"Failed to initialize Async Supabase client: {e}")
        return None


def _translate_api_error(e: APIError, action: str) -> Exception:
    """Maps a PostgREST error onto the judging error hierarchy."""
    message = e.message or ""
    if e.code == UNIQUE_VIOLATION:
        if "team_number" in message:
            return DuplicateNumberError()
        if "name" in message:
            return DuplicateNameError()
    if e.code == FOREIGN_KEY_VIOLATION and message.startswith("insert or update"):
        return NotFoundError("team", None)
    if e.code == NO_ROWS_RETURNED:
        return NotFoundError("record", None)
    return StoreError(f"Failed to {action}: {message}", code=e.code)


async def _execute(query: Any, action: str) -> APIResponse:
    try:
        return await query.execute()
    except APIError as e:
        logger.error(f"Supabase error while trying to {action}: {e.message}")
        logger.debug(f"Full APIError details: {e}")
        raise _translate_api_error(e, action) from e


def _parse_time(value: Optional[str]) -> datetime:
    if not value:
        return utcnow()
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def team_from_row(row: Dict[str, Any]) -> Team:
    return Team(
        id=row["id"],
        number=row.get("team_number"),
        name=row.get("name"),
        location=row.get("location") or None,
        active=row.get("is_active", True),
        created_at=_parse_time(row.get("created_at")),
        updated_at=_parse_time(row.get("updated_at")),
    )


def team_to_row(data: TeamInput) -> Dict[str, Any]:
    return {
        "team_number": data.number,
        "name": data.name,
        "location": data.location.value if data.location else None,
        "is_active": data.active,
    }


class SupabaseStore(JudgingStore):
    """Teams and evaluations in Supabase tables.

    Column-stored score fields live on the evaluations row. When the score
    model keeps fields in a detail table (one row per field), an evaluation
    insert is two writes; if the second fails the evaluation row is deleted
    again so no half-scored evaluation is left behind.
    """

    def __init__(self, client: AsyncClient, score_model: ScoreModel):
        super().__init__(score_model)
        self.client = client

    # --- Row mapping ---

    def _evaluation_to_row(self, evaluation: Evaluation) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "participant_name": evaluation.participant_name,
            "team_id": evaluation.team_id,
            "comments": evaluation.comments,
            "created_at": evaluation.created_at.isoformat(),
            "updated_at": evaluation.updated_at.isoformat(),
        }
        for field in self.score_model.column_fields:
            row[field.column] = evaluation.scores[field.name]
        return row

    def _detail_rows(self, evaluation_id: int, evaluation: Evaluation) -> List[Dict[str, Any]]:
        return [
            {
                "evaluation_id": evaluation_id,
                "tool_category": field.column,
                "score": evaluation.scores[field.name],
            }
            for field in self.score_model.detail_fields
        ]

    def _evaluation_from_row(
        self, row: Dict[str, Any], details: List[Dict[str, Any]]
    ) -> Evaluation:
        scores: Dict[str, Any] = {}
        for field in self.score_model.column_fields:
            value = row.get(field.column)
            scores[field.name] = value if field.is_numeric else bool(value)
        by_category = {d["tool_category"]: d["score"] for d in details}
        for field in self.score_model.detail_fields:
            scores[field.name] = by_category.get(field.column, field.min_value)
        return Evaluation(
            id=row["id"],
            participant_name=row["participant_name"],
            team_id=row["team_id"],
            scores=scores,
            comments=row.get("comments"),
            created_at=_parse_time(row.get("created_at")),
            updated_at=_parse_time(row.get("updated_at")),
        )

    async def _fetch_details(self, evaluation_ids: List[int]) -> Dict[int, List[Dict[str, Any]]]:
        grouped: Dict[int, List[Dict[str, Any]]] = {}
        if not self.score_model.detail_table or not evaluation_ids:
            return grouped
        response = await _execute(
            self.client.table(self.score_model.detail_table)
            .select("*")
            .in_("evaluation_id", evaluation_ids),
            "fetch detail scores",
        )
        for detail in response.data or []:
            grouped.setdefault(detail["evaluation_id"], []).append(detail)
        return grouped

    # --- Teams ---

    async def list_teams(self, active_only: bool = False) -> List[Team]:
        query = self.client.table(TEAMS_TABLE).select("*")
        if active_only:
            query = query.eq("is_active", True)
        response = await _execute(query.order("id"), "fetch teams")
        teams = [team_from_row(row) for row in response.data or []]
        return sorted(teams, key=lambda t: (t.number is None, t.number or 0, t.id))

    async def get_team(self, team_id: int) -> Optional[Team]:
        response = await _execute(
            self.client.table(TEAMS_TABLE).select("*").eq("id", team_id).limit(1),
            f"fetch team {team_id}",
        )
        return team_from_row(response.data[0]) if response.data else None

    async def insert_team(self, data: TeamInput) -> Team:
        response = await _execute(
            self.client.table(TEAMS_TABLE).insert(team_to_row(data)), "create team"
        )
        team = team_from_row(response.data[0])
        logger.success(f"Team {team.id} ({team.display_name}) created.")
        return team

    async def update_team(self, team_id: int, data: TeamInput) -> Team:
        row = team_to_row(data)
        row["updated_at"] = utcnow().isoformat()
        response = await _execute(
            self.client.table(TEAMS_TABLE).update(row).eq("id", team_id),
            f"update team {team_id}",
        )
        if not response.data:
            raise NotFoundError("team", team_id)
        return team_from_row(response.data[0])

    async def delete_team(self, team_id: int) -> None:
        response = await _execute(
            self.client.table(TEAMS_TABLE).delete().eq("id", team_id),
            f"delete team {team_id}",
        )
        if not response.data:
            raise NotFoundError("team", team_id)

    async def delete_all_teams(self) -> int:
        # PostgREST refuses an unfiltered delete
        response = await _execute(
            self.client.table(TEAMS_TABLE).delete().gte("id", 0), "delete all teams"
        )
        return len(response.data or [])

    # --- Evaluations ---

    async def list_evaluations(
        self,
        team_id: Optional[int] = None,
        participant_name_substring: Optional[str] = None,
    ) -> List[Evaluation]:
        query = self.client.table(EVALUATIONS_TABLE).select("*")
        if team_id is not None:
            query = query.eq("team_id", team_id)
        if participant_name_substring:
            query = query.ilike("participant_name", f"%{participant_name_substring}%")
        response = await _execute(query.order("id"), "fetch evaluations")
        rows = response.data or []
        details = await self._fetch_details([row["id"] for row in rows])
        return [self._evaluation_from_row(row, details.get(row["id"], [])) for row in rows]

    async def get_evaluation(self, evaluation_id: int) -> Optional[Evaluation]:
        response = await _execute(
            self.client.table(EVALUATIONS_TABLE)
            .select("*")
            .eq("id", evaluation_id)
            .limit(1),
            f"fetch evaluation {evaluation_id}",
        )
        if not response.data:
            return None
        details = await self._fetch_details([evaluation_id])
        return self._evaluation_from_row(response.data[0], details.get(evaluation_id, []))

    async def insert_evaluation(self, evaluation: Evaluation) -> Evaluation:
        response = await _execute(
            self.client.table(EVALUATIONS_TABLE).insert(
                self._evaluation_to_row(evaluation)
            ),
            "create evaluation",
        )
        row = response.data[0]
        evaluation_id = row["id"]

        detail_rows = self._detail_rows(evaluation_id, evaluation)
        if detail_rows:
            try:
                await _execute(
                    self.client.table(self.score_model.detail_table).insert(detail_rows),
                    "create detail scores",
                )
            except Exception:
                logger.warning(
                    f"Detail scores for evaluation {evaluation_id} failed; removing the evaluation row."
                )
                try:
                    await _execute(
                        self.client.table(EVALUATIONS_TABLE)
                        .delete()
                        .eq("id", evaluation_id),
                        f"roll back evaluation {evaluation_id}",
                    )
                except StoreError:
                    logger.exception(
                        f"Rollback failed; evaluation {evaluation_id} is orphaned "
                        "without detail scores and must be removed manually."
                    )
                raise

        logger.success(f"Evaluation {evaluation_id} saved to Supabase.")
        return evaluation.model_copy(update={"id": evaluation_id})

    async def update_evaluation(
        self, evaluation_id: int, evaluation: Evaluation
    ) -> Evaluation:
        row = self._evaluation_to_row(evaluation)
        row.pop("created_at")
        response = await _execute(
            self.client.table(EVALUATIONS_TABLE).update(row).eq("id", evaluation_id),
            f"update evaluation {evaluation_id}",
        )
        if not response.data:
            raise NotFoundError("evaluation", evaluation_id)

        detail_rows = self._detail_rows(evaluation_id, evaluation)
        if detail_rows:
            await _execute(
                self.client.table(self.score_model.detail_table).upsert(
                    detail_rows, on_conflict="evaluation_id,tool_category"
                ),
                f"update detail scores of evaluation {evaluation_id}",
            )
        return evaluation.model_copy(update={"id": evaluation_id})

    async def delete_evaluation(self, evaluation_id: int) -> None:
        # Detail rows go with the evaluation (ON DELETE CASCADE)
        response = await _execute(
            self.client.table(EVALUATIONS_TABLE).delete().eq("id", evaluation_id),
            f"delete evaluation {evaluation_id}",
        )
        if not response.data:
            raise NotFoundError("evaluation", evaluation_id)

    async def delete_all_evaluations(self) -> int:
        response = await _execute(
            self.client.table(EVALUATIONS_TABLE).delete().gte("id", 0),
            "delete all evaluations",
        )
        return len(response.data or [])

    async def count_evaluations(self, team_id: Optional[int] = None) -> int:
        query = self.client.table(EVALUATIONS_TABLE).select("id", count="exact")
        if team_id is not None:
            query = query.eq("team_id", team_id)
        response = await _execute(query, "count evaluations")
        return response.count or 0
