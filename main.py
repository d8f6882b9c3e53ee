import sys
import asyncio
import json
from pathlib import Path
from typing import Optional

# --- Settings/Logging ---
from judging.logging.setup import setup_logging
from judging.config.settings import settings

setup_logging()

from loguru import logger

import click
from rich.console import Console

from judging.app import JudgingApp, create_app
from judging.errors import JudgingError
from judging.models.enums import Location
from judging.models.summary import EvaluationFilter
from judging.reporting.console import (
    leaderboard_table,
    locations_table,
    stats_panel,
    tier_panels,
)
from judging.reporting.export import export_leaderboard

console = Console()


def _filters(
    team_id: Optional[int], location: Optional[str], participant: Optional[str]
) -> EvaluationFilter:
    return EvaluationFilter(
        team_id=team_id,
        location=Location(location) if location else None,
        participant_name_substring=participant,
    )


def _run(coro_factory) -> None:
    """Builds the app, runs one command against it, and maps failures to exit codes."""

    async def runner() -> None:
        app = await create_app()
        await coro_factory(app)

    try:
        asyncio.run(runner())
    except JudgingError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)


filter_options = [
    click.option("--team-id", type=int, default=None, help="Only this team."),
    click.option(
        "--location",
        type=click.Choice([loc.value for loc in Location]),
        default=None,
        help="Only teams at this location.",
    ),
    click.option(
        "--participant", default=None, help="Judge name contains this text."
    ),
]


def with_filters(func):
    for option in reversed(filter_options):
        func = option(func)
    return func


@click.group()
def cli() -> None:
    """Presentation judging: leaderboards and team administration."""


@cli.command()
@with_filters
def leaderboard(team_id, location, participant) -> None:
    """Ranked team summaries, best average total first."""

    async def command(app: JudgingApp) -> None:
        summaries = await app.evaluations.leaderboard(
            _filters(team_id, location, participant)
        )
        if not summaries:
            console.print("No evaluation data available yet.")
            return
        console.print(leaderboard_table(summaries, app.score_model))

    _run(command)


@cli.command()
@with_filters
def tiers(team_id, location, participant) -> None:
    """Teams grouped by AI proficiency level."""

    async def command(app: JudgingApp) -> None:
        groups = await app.evaluations.tier_groups(
            _filters(team_id, location, participant)
        )
        console.print(tier_panels(groups, app.score_model.max_total))

    _run(command)


@cli.command()
def locations() -> None:
    """Per-location rollup of team results."""

    async def command(app: JudgingApp) -> None:
        console.print(locations_table(await app.evaluations.location_summaries()))

    _run(command)


@cli.command()
def stats() -> None:
    """Headline evaluation statistics."""

    async def command(app: JudgingApp) -> None:
        console.print(stats_panel(await app.evaluations.stats()))

    _run(command)


@cli.command()
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@with_filters
def export(output, team_id, location, participant) -> None:
    """Write the leaderboard to OUTPUT as JSON."""

    async def command(app: JudgingApp) -> None:
        summaries = await app.evaluations.leaderboard(
            _filters(team_id, location, participant)
        )
        if not export_leaderboard(summaries, output):
            sys.exit(1)

    _run(command)


@cli.command(name="import-teams")
@click.argument("rows_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--passphrase", prompt=True, hide_input=True, help="Admin passphrase.")
def import_teams(rows_file, passphrase) -> None:
    """Create teams from a JSON list of {number, name, location} rows."""
    rows = json.loads(rows_file.read_text(encoding="utf-8"))

    async def command(app: JudgingApp) -> None:
        capability = app.gate.unlock(passphrase)
        report = await app.teams.bulk_import(rows, capability=capability)
        console.print(
            f"Successfully imported {report.success_count} out of {report.total} teams"
        )
        for error in report.errors:
            console.print(f"[red]Row {error.row_index}[/red]: {error.reason} - {error.message}")

    _run(command)


if __name__ == "__main__":
    logger.debug(f"Score model in effect: {settings.score_model.value}")
    cli()
