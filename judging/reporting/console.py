from typing import Dict, List

from rich.console import Group
from rich.panel import Panel
from rich.table import Table

from judging.models.summary import EvaluationStats, LocationSummary, TeamSummary
from judging.scoring.score_model import ScoreModel

TIER_STYLES = {
    "Agentic Ace": "bold green",
    "Cognitive Crafter": "bold cyan",
    "Neural Novice": "yellow",
    "Booting Bot": "red",
}


def _tier_text(name: str) -> str:
    style = TIER_STYLES.get(name, "white")
    return f"[{style}]{name}[/{style}]"


def leaderboard_table(summaries: List[TeamSummary], score_model: ScoreModel) -> Table:
    table = Table(title="Leaderboard", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Team")
    table.add_column("Location")
    table.add_column("Evals", justify="right")
    for field in score_model.numeric_fields:
        table.add_column(field.name.replace("_", " ").title(), justify="right")
    for field in score_model.boolean_fields:
        table.add_column(f"{field.name.replace('_', ' ').title()} %", justify="right")
    table.add_column("Overall", justify="right")
    table.add_column(f"Total /{score_model.max_total}", justify="right")
    table.add_column("Tier")

    for summary in summaries:
        table.add_row(
            str(summary.rank or ""),
            summary.display_name,
            summary.location.value if summary.location else "-",
            str(summary.evaluation_count),
            *[f"{summary.criterion_averages[f.name]:.2f}" for f in score_model.numeric_fields],
            *[f"{summary.boolean_percentages[f.name]:.1f}" for f in score_model.boolean_fields],
            f"{summary.overall_average:.2f}",
            f"{summary.total_score_average:.1f}",
            _tier_text(summary.tier.name),
        )
    return table


def tier_panels(groups: Dict[str, List[TeamSummary]], max_total: int) -> Group:
    """One panel per tier, listing team names the way admins copy them out."""
    panels = []
    for name, members in groups.items():
        if not members:
            continue
        lines = [
            f"{s.display_name}  [dim]{s.total_score_average:.1f}/{max_total} "
            f"({s.total_score_average / max_total:.0%})[/dim]"
            for s in members
        ]
        count = len(members)
        panels.append(
            Panel(
                "\n".join(lines),
                title=f"{_tier_text(name)} - {count} team{'s' if count != 1 else ''}",
                title_align="left",
            )
        )
    return Group(*panels)


def locations_table(locations: List[LocationSummary]) -> Table:
    table = Table(title="By location")
    table.add_column("Location")
    table.add_column("Teams", justify="right")
    table.add_column("Evaluations", justify="right")
    table.add_column("Avg total", justify="right")
    table.add_column("Avg overall", justify="right")
    for loc in locations:
        table.add_row(
            loc.location,
            str(loc.team_count),
            str(loc.evaluation_count),
            f"{loc.average_total_score:.1f}",
            f"{loc.average_overall:.2f}",
        )
    return table


def stats_panel(stats: EvaluationStats) -> Panel:
    average = (
        f"{stats.average_overall_score:.2f}"
        if stats.average_overall_score is not None
        else "-"
    )
    latest = (
        stats.latest_evaluation.strftime("%Y-%m-%d %H:%M UTC")
        if stats.latest_evaluation
        else "-"
    )
    body = (
        f"Evaluations: [bold]{stats.total_evaluations}[/bold]\n"
        f"Teams evaluated: [bold]{stats.total_teams}[/bold]\n"
        f"Judges: [bold]{stats.total_participants}[/bold]\n"
        f"Average overall score: [bold]{average}[/bold]\n"
        f"Latest evaluation: {latest}"
    )
    return Panel(body, title="Evaluation statistics", title_align="left")
