"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of advice, scores and history.
"""

from typing import Sequence

from rich.console import Console
from rich.table import Table

from ..core.ascii_plot import create_simple_bar_chart, create_test_max_plot, create_weekly_volume_chart
from ..core.metrics import week_feedback
from ..core.models import AlgorithmScore, DailyPlan, Reliability, WeekAdvice, WeekRecord
from ..core.strategies import StrategyInfo

console = Console()

RELIABILITY_STYLES = {
    "reliable": "green",
    "improving": "yellow",
    "unreliable": "red",
}


def format_plan_table(plan: Sequence[DailyPlan], title: str = "Weekly Plan") -> Table:
    """
    Create a Rich table of a 6-day plan (days 2–7).

    Args:
        plan: Plan days in order
        title: Table title

    Returns:
        Rich Table object
    """
    table = Table(title=title)

    table.add_column("Day", justify="right", style="dim")
    table.add_column("Type", style="magenta")
    table.add_column("Sets", justify="right", style="bold")
    table.add_column("Reps", justify="right", style="bold")
    table.add_column("Rest(s)", justify="right")
    table.add_column("Volume", justify="right", style="cyan")

    for day_number, day in enumerate(plan, start=2):
        table.add_row(
            str(day_number),
            day.training_type,
            str(day.sets),
            str(day.reps),
            str(day.rest_seconds),
            str(day.volume),
        )

    return table


def format_scores_table(scores: dict[str, AlgorithmScore], selected: str | None = None) -> Table:
    """
    Create a Rich table of per-strategy scores.

    The selected strategy is highlighted.
    """
    table = Table(title="Model Scores")

    table.add_column("Algorithm", style="cyan")
    table.add_column("Prediction", justify="right")
    table.add_column("Precision", justify="right")
    table.add_column("Feedback", justify="right")
    table.add_column("Trend", justify="right")
    table.add_column("Composite", justify="right", style="bold")

    for name, score in scores.items():
        marker = " ✓" if name == selected else ""
        table.add_row(
            f"{name}{marker}",
            str(score.prediction) if score.prediction is not None else "-",
            f"{score.precision_score:.1f}",
            f"{score.feedback_score:.1f}",
            f"{score.trend_score:.1f}",
            f"{score.composite_score:.1f}",
            style="green" if name == selected else None,
        )

    return table


def format_history_table(weeks: Sequence[WeekRecord]) -> Table:
    """Create a Rich table of training weeks."""
    table = Table(title="Training History")

    table.add_column("Week", justify="right", style="dim")
    table.add_column("Test max", justify="right", style="bold")
    table.add_column("Algorithm", style="cyan")
    table.add_column("Easy", justify="right")
    table.add_column("Perfect", justify="right")
    table.add_column("Impossible", justify="right", style="red")
    table.add_column("Volume", justify="right")

    for week in weeks:
        summary = week_feedback(week)
        table.add_row(
            str(week.week_number),
            str(week.test_max) if week.test_max is not None else "-",
            week.selected_algorithm,
            str(summary.easy),
            str(summary.perfect),
            str(summary.impossible),
            str(sum(day.volume for day in week.plan)) if week.plan else "-",
        )

    return table


def format_strategies_table(infos: Sequence[StrategyInfo]) -> Table:
    table = Table(title="Progression Models")

    table.add_column("Name", style="cyan")
    table.add_column("Label", style="bold")
    table.add_column("Description")

    for info in infos:
        table.add_row(info.name, info.label, info.description)

    return table


def format_reliability(reliability: Reliability) -> str:
    style = RELIABILITY_STYLES.get(reliability.status, "white")
    return f"[{style}]{reliability.status}[/{style}] ({reliability.reason})"


def print_advice(advice: WeekAdvice, week_number: int) -> None:
    """
    Print a full week advice: selection, scores and plan.

    Args:
        advice: Result of process_new_week()
        week_number: Week the advice is for
    """
    console.print()
    console.print(f"[bold cyan]Week {week_number}[/bold cyan] — {advice.label} ([cyan]{advice.algorithm}[/cyan])")
    if advice.is_beginner_mode:
        console.print("[yellow]Beginner mode: fixed plan until the test reaches 5 reps.[/yellow]")
    console.print(advice.reason)
    console.print(f"Reliability: {format_reliability(advice.reliability)}")

    if advice.scores:
        console.print()
        console.print(format_scores_table(advice.scores, advice.algorithm))

    console.print()
    console.print(format_plan_table(advice.plan, title=f"Plan — week {week_number}"))
    console.print(f"Total volume: [bold]{advice.total_volume}[/bold] reps")
    console.print()


def print_history(weeks: Sequence[WeekRecord]) -> None:
    """
    Print week history to console.

    Args:
        weeks: Weeks to display
    """
    if not weeks:
        console.print("[yellow]No weeks recorded yet.[/yellow]")
        return

    console.print(format_history_table(weeks))


def print_test_max_plot(
    weeks: Sequence[WeekRecord],
    trajectory: Sequence[tuple[int, float]] | None = None,
) -> None:
    """Print ASCII plot of capacity test progress."""
    console.print(create_test_max_plot(weeks, trajectory=trajectory))


def print_volume_chart(weeks: Sequence[WeekRecord], count: int = 4) -> None:
    console.print(create_weekly_volume_chart(weeks, count))


def print_score_chart(scores: dict[str, AlgorithmScore]) -> None:
    """Horizontal bars of composite scores."""
    console.print(
        create_simple_bar_chart(
            list(scores),
            [s.composite_score for s in scores.values()],
            title="Composite Scores",
        )
    )


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
