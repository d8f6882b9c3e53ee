import json
from pathlib import Path
from typing import Any, Dict, List, Union

from loguru import logger

from judging.models.summary import TeamSummary


def leaderboard_payload(summaries: List[TeamSummary]) -> List[Dict[str, Any]]:
    return [summary.model_dump(mode="json") for summary in summaries]


def export_leaderboard(summaries: List[TeamSummary], path: Union[str, Path]) -> bool:
    """Writes the ranked summaries as JSON. Returns False if the file could not be written."""
    path = Path(path)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(leaderboard_payload(summaries), f, indent=4, ensure_ascii=False)
    except OSError as e:
        logger.error(f"Failed to write leaderboard to {path}: {e}")
        return False
    logger.success(f"Saved leaderboard for {len(summaries)} team(s) to {path}")
    return True
