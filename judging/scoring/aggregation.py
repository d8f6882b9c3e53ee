"""Aggregation engine: per-team summaries, leaderboard and tier views.

Everything here is a pure function of the evaluations and teams passed in.
Nothing is cached; callers re-read the store and recompute on every query.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence

from loguru import logger

from judging.models.enums import Location
from judging.models.evaluation import Evaluation
from judging.models.summary import (
    EvaluationFilter,
    EvaluationStats,
    LocationSummary,
    TeamSummary,
)
from judging.models.team import Team
from judging.scoring.score_model import ScoreModel
from judging.scoring.tiers import TierClassifier

UNKNOWN_LOCATION = "Unknown"

# Per-field averages sit on a 0-4 scale, totals on a 0-20 scale
FIELD_PLACES = 2
TOTAL_PLACES = 1
PERCENT_PLACES = 1


def round_half_up(value: Decimal, places: int) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def _mean(values: Sequence[Decimal]) -> Decimal:
    return sum(values, Decimal(0)) / Decimal(len(values))


def _index_teams(teams: Iterable[Team]) -> Dict[int, Team]:
    return {team.id: team for team in teams}


def filter_evaluations(
    evaluations: Iterable[Evaluation],
    teams: Iterable[Team],
    filters: Optional[EvaluationFilter] = None,
) -> List[Evaluation]:
    """Exact match on team and location, case-insensitive substring on participant."""
    evaluations = list(evaluations)
    if filters is None:
        return evaluations

    teams_by_id = _index_teams(teams)
    needle = (filters.participant_name_substring or "").strip().casefold()

    selected: List[Evaluation] = []
    for evaluation in evaluations:
        if filters.team_id is not None and evaluation.team_id != filters.team_id:
            continue
        if filters.location is not None:
            team = teams_by_id.get(evaluation.team_id)
            if team is None or team.location != filters.location:
                continue
        if needle and needle not in evaluation.participant_name.casefold():
            continue
        selected.append(evaluation)
    return selected


def _summarize_group(
    team: Team,
    group: List[Evaluation],
    score_model: ScoreModel,
    classifier: TierClassifier,
) -> TeamSummary:
    count = Decimal(len(group))

    raw_averages: Dict[str, Decimal] = {}
    for field in score_model.numeric_fields:
        raw_averages[field.name] = (
            sum((Decimal(int(e.scores[field.name])) for e in group), Decimal(0))
            / count
        )

    overall = _mean(list(raw_averages.values())) if raw_averages else Decimal(0)
    total_average = (
        sum((Decimal(score_model.total_score(e.scores)) for e in group), Decimal(0))
        / count
    )

    boolean_counts: Dict[str, int] = {}
    boolean_percentages: Dict[str, float] = {}
    for field in score_model.boolean_fields:
        yes = sum(1 for e in group if e.scores.get(field.name) is True)
        boolean_counts[field.name] = yes
        boolean_percentages[field.name] = round_half_up(
            Decimal(100 * yes) / count, PERCENT_PLACES
        )

    total_score_average = round_half_up(total_average, TOTAL_PLACES)
    summary = TeamSummary(
        team_id=team.id,
        display_name=team.display_name,
        location=team.location,
        evaluation_count=len(group),
        criterion_averages={
            name: round_half_up(value, FIELD_PLACES)
            for name, value in raw_averages.items()
        },
        overall_average=round_half_up(overall, FIELD_PLACES),
        total_score_average=total_score_average,
        boolean_counts=boolean_counts,
        boolean_percentages=boolean_percentages,
        tier=classifier.classify(total_score_average),
    )
    summary._exact_total = total_average
    summary._exact_overall = overall
    return summary


def summarize(
    evaluations: Iterable[Evaluation],
    teams: Iterable[Team],
    score_model: ScoreModel,
    filters: Optional[EvaluationFilter] = None,
    classifier: Optional[TierClassifier] = None,
) -> List[TeamSummary]:
    """Builds one TeamSummary per team with at least one matching evaluation.

    Summaries come back in order of each team's first evaluation in the
    input. Teams without evaluations are omitted, and so are evaluations
    whose team is not in ``teams``. A team_id filter that matches nothing
    gives an empty list.
    """
    teams = list(teams)
    teams_by_id = _index_teams(teams)
    classifier = classifier or TierClassifier(score_model.max_total)

    groups: Dict[int, List[Evaluation]] = {}
    orphaned = 0
    for evaluation in filter_evaluations(evaluations, teams, filters):
        if evaluation.team_id not in teams_by_id:
            orphaned += 1
            continue
        groups.setdefault(evaluation.team_id, []).append(evaluation)

    if orphaned:
        logger.warning(
            f"Skipped {orphaned} evaluation(s) referencing teams that no longer exist."
        )

    return [
        _summarize_group(teams_by_id[team_id], group, score_model, classifier)
        for team_id, group in groups.items()
    ]


def rank_summaries(summaries: Iterable[TeamSummary]) -> List[TeamSummary]:
    """Sorts by total score average, highest first, and numbers the positions.

    The sort is stable: tied teams keep their incoming order.
    """
    ordered = sorted(summaries, key=lambda s: s.total_score_average, reverse=True)
    return [
        summary.model_copy(update={"rank": position})
        for position, summary in enumerate(ordered, start=1)
    ]


def leaderboard(
    evaluations: Iterable[Evaluation],
    teams: Iterable[Team],
    score_model: ScoreModel,
    filters: Optional[EvaluationFilter] = None,
    classifier: Optional[TierClassifier] = None,
) -> List[TeamSummary]:
    return rank_summaries(
        summarize(evaluations, teams, score_model, filters, classifier)
    )


def group_by_tier(
    summaries: Iterable[TeamSummary], classifier: TierClassifier
) -> Dict[str, List[TeamSummary]]:
    """Teams per tier, highest tier first, best team first within each tier.

    Every tier is present as a key, even when no team falls into it.
    """
    groups: Dict[str, List[TeamSummary]] = {name: [] for name in classifier.tier_names}
    for summary in summaries:
        groups[summary.tier.name].append(summary)
    for name in groups:
        groups[name] = sorted(
            groups[name], key=lambda s: s.total_score_average, reverse=True
        )
    return groups


def tier_distribution(
    summaries: Iterable[TeamSummary], classifier: TierClassifier
) -> Dict[str, int]:
    return {
        name: len(members)
        for name, members in group_by_tier(summaries, classifier).items()
    }


def summarize_locations(summaries: Iterable[TeamSummary]) -> List[LocationSummary]:
    """Per-location rollup of team summaries; teams without a location go under "Unknown".

    Averages are taken over the unrounded per-team values and rounded once.
    """
    buckets: Dict[str, List[TeamSummary]] = {}
    for summary in summaries:
        key = summary.location.value if summary.location else UNKNOWN_LOCATION
        buckets.setdefault(key, []).append(summary)

    order = [location.value for location in Location] + [UNKNOWN_LOCATION]
    results: List[LocationSummary] = []
    for key in order:
        members = buckets.get(key)
        if not members:
            continue
        results.append(
            LocationSummary(
                location=key,
                team_count=len(members),
                evaluation_count=sum(s.evaluation_count for s in members),
                average_total_score=round_half_up(
                    _mean([s.exact_total_score_average for s in members]),
                    TOTAL_PLACES,
                ),
                average_overall=round_half_up(
                    _mean([s.exact_overall_average for s in members]),
                    FIELD_PLACES,
                ),
            )
        )
    return results


def evaluation_stats(
    evaluations: Iterable[Evaluation], score_model: ScoreModel
) -> EvaluationStats:
    """Headline numbers for the admin dashboard."""
    evaluations = list(evaluations)
    if not evaluations:
        return EvaluationStats(total_evaluations=0, total_teams=0, total_participants=0)

    numeric = score_model.numeric_fields
    per_evaluation = [
        _mean([Decimal(int(e.scores[f.name])) for f in numeric]) for e in evaluations
    ]
    return EvaluationStats(
        total_evaluations=len(evaluations),
        total_teams=len({e.team_id for e in evaluations}),
        total_participants=len({e.participant_name.casefold() for e in evaluations}),
        average_overall_score=round_half_up(_mean(per_evaluation), FIELD_PLACES),
        latest_evaluation=max(e.created_at for e in evaluations),
    )
