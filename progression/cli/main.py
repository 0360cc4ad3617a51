"""
Typer CLI for coach-progression.

Commands:
    coach-progress init                     - Create an empty progress file
    coach-progress show                     - Show ledger, score breakdown, level, badges
    coach-progress complete e10 --score 80  - Record a completed exercise
    coach-progress checkup --title "..."    - Record the strategic check-up
    coach-progress explain                  - Show how the overall score is weighted

Usage:
    coach-progress --help
    coach-progress complete v1 --score 72 --modality verbal --analysis result.json
    COACH_PROGRESS_FILE=~/me.json coach-progress show
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import get_settings
from progression.core.achievements import get_achievement
from progression.core.competence import Modality
from progression.core.completion import process_checkup_completion, process_completion
from progression.core.exceptions import InvalidProgressDataError
from progression.core.ledger import MAX_COMPETENCE, UNASSIGNED_SLICE
from progression.core.levels import ProficiencyLevel
from progression.core.persistence import load_state, save_state
from progression.core.scoring import compute_breakdown, score_explanation
from progression.core.state import CheckupProfile, ProgressState

app = typer.Typer(
    help="coach-progression CLI: competence ledger, proficiency score and achievements",
    no_args_is_help=True,
)

console = Console()


# =============================================================================
# Helpers
# =============================================================================


def _progress_path(path: Path | None) -> Path:
    return path or Path(get_settings().progress_file).expanduser()


def _load(path: Path) -> ProgressState:
    try:
        return load_state(path, round_to=get_settings().ledger_round_to)
    except InvalidProgressDataError as e:
        console.print(f"[red]Cannot read progress:[/red] {e}")
        raise typer.Exit(1) from e


def format_progress_bar(value: float, maximum: float = 100.0, width: int = 20) -> str:
    """Text progress bar, e.g. ``█████░░░░░``."""
    filled = int(max(0.0, min(value, maximum)) / maximum * width) if maximum > 0 else 0
    return "█" * filled + "░" * (width - filled)


def _render_ledger(state: ProgressState) -> Table:
    table = Table(title="Competence Ledger")
    table.add_column("Competence", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("", style="green")

    for key, value in state.ledger.items():
        table.add_row(key.display_name, f"{value:g}", format_progress_bar(value, MAX_COMPETENCE))
    table.add_row(
        f"[dim]Unassigned ({UNASSIGNED_SLICE})[/dim]",
        f"[dim]{state.ledger.unassigned:g}[/dim]",
        "",
    )
    return table


def _render_breakdown(state: ProgressState) -> tuple[Table, int, ProficiencyLevel]:
    breakdown = compute_breakdown(state)
    level = ProficiencyLevel.from_score(breakdown.overall, started=state.has_started)

    table = Table(title="Score Breakdown")
    table.add_column("Sub-score", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Weighted", justify="right", style="dim")
    for name, value in breakdown.as_dict().items():
        table.add_row(name, f"{value:.1f}", f"{breakdown.contributions()[name]:.1f}")
    return table, breakdown.overall, level


def _announce_badges(badge_ids: tuple[str, ...]) -> None:
    for badge_id in badge_ids:
        achievement = get_achievement(badge_id)
        title = achievement.title if achievement else badge_id
        console.print(f"[bold yellow]Achievement unlocked:[/bold yellow] {title}")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def init(
    file: Path | None = typer.Option(None, "--file", "-f", help="Progress file (default: from config)"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Create an empty progress file."""
    path = _progress_path(file)
    if path.exists() and not force:
        console.print(f"[yellow]{path} already exists (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)
    save_state(path, ProgressState.initial(get_settings().ledger_round_to))
    console.print(f"[green]Created {path}[/green]")


@app.command()
def show(
    file: Path | None = typer.Option(None, "--file", "-f", help="Progress file (default: from config)"),
) -> None:
    """Show ledger, score breakdown, level and unlocked achievements."""
    state = _load(_progress_path(file))
    breakdown_table, overall, level = _render_breakdown(state)

    console.print(
        Panel(
            f"[bold]{overall}/100[/bold]  {format_progress_bar(overall)}\n"
            f"[{level.color}]{level.label}[/{level.color}]",
            title="Proficiency",
        )
    )
    console.print(_render_ledger(state))
    console.print(breakdown_table)

    badges = ", ".join(state.unlocked_badges) or "[dim]none yet[/dim]"
    console.print(f"Completed exercises: {state.completed_count}")
    console.print(f"Achievements: {badges}")


@app.command()
def complete(
    exercise_id: str = typer.Argument(..., help="Id of the completed exercise (e.g. e10)"),
    score: float = typer.Option(..., "--score", "-s", help="Exercise score 0-100"),
    modality: Modality = typer.Option(Modality.WRITTEN, "--modality", "-m", help="written or verbal"),
    retake: bool | None = typer.Option(
        None, "--retake/--first-attempt", help="Force retake detection (default: from history)"
    ),
    response: str = typer.Option("", "--response", "-r", help="Learner's answer text"),
    analysis: Path | None = typer.Option(None, "--analysis", "-a", help="JSON file with the analysis payload"),
    timestamp: str | None = typer.Option(None, "--timestamp", help="ISO-8601 completion time (default: now)"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Progress file (default: from config)"),
) -> None:
    """Record a completed exercise."""
    path = _progress_path(file)
    state = _load(path)

    payload = {}
    if analysis is not None:
        try:
            payload = json.loads(analysis.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            console.print(f"[red]Cannot read analysis payload:[/red] {e}")
            raise typer.Exit(1) from e

    try:
        outcome = process_completion(
            state,
            exercise_id,
            score,
            is_retake=retake,
            modality=modality,
            analysis=payload,
            user_response=response,
            timestamp=timestamp,
        )
    except ValueError as e:
        console.print(f"[red]Invalid completion:[/red] {e}")
        raise typer.Exit(1) from e

    save_state(path, outcome.state)

    console.print(f"Recorded [cyan]{exercise_id}[/cyan] - overall score [bold]{outcome.score}/100[/bold]")
    _announce_badges(outcome.new_badges)
    if outcome.level_transition is not None:
        arrow = "up" if outcome.level_transition.is_promotion else "down"
        console.print(
            f"[bold green]Level {arrow}:[/bold green] "
            f"{outcome.level_transition.previous.label} -> {outcome.level_transition.current.label}"
        )


@app.command()
def checkup(
    title: str = typer.Option(..., "--title", "-t", help="Communicator profile title"),
    description: str = typer.Option("", "--description", "-d", help="Profile description"),
    strength: list[str] | None = typer.Option(None, "--strength", help="A strength (repeatable)"),
    improve: list[str] | None = typer.Option(None, "--improve", help="An area to improve (repeatable)"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Progress file (default: from config)"),
) -> None:
    """Record the strategic check-up and its communicator profile."""
    path = _progress_path(file)
    state = _load(path)

    profile = CheckupProfile(
        title=title,
        description=description,
        strengths=tuple(strength or ()),
        areas_to_improve=tuple(improve or ()),
    )
    outcome = process_checkup_completion(state, profile)
    save_state(path, outcome.state)

    console.print(f"Check-up recorded: [cyan]{title}[/cyan]")
    _announce_badges(outcome.new_badges)


@app.command()
def explain() -> None:
    """Show how the overall score is weighted."""
    table = Table(title="Overall Score Weights")
    table.add_column("Sub-score", style="cyan")
    table.add_column("Weight", justify="right")
    for name, percent in score_explanation().items():
        table.add_row(name, f"{percent:g}%")
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    settings = get_settings()

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="1 MB")

    app()


if __name__ == "__main__":
    main()
