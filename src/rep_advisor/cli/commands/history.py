"""History commands: init, log-feedback, show-history."""

import json
from typing import Annotated, Optional

import typer

from ...core.models import FeedbackSummary
from ...io.serializers import ValidationError, week_record_to_dict
from .. import views
from ..app import HistoryPathOption, JsonOption, app, get_store, load_history_or_exit


@app.command()
def init(
    history_path: HistoryPathOption = None,
) -> None:
    """
    Create an empty history file (kept as-is when it already exists).
    """
    store = get_store(history_path)
    if store.exists():
        views.print_info(f"History file already exists: {store.history_path}")
        return

    store.init()
    views.print_success(f"Created history file: {store.history_path}")


@app.command("log-feedback")
def log_feedback(
    week: Annotated[int, typer.Argument(help="Week number to update")],
    easy: Annotated[int, typer.Option("--easy", "-e", help="Sessions that felt easy")] = 0,
    perfect: Annotated[int, typer.Option("--perfect", "-f", help="Sessions that felt right")] = 0,
    impossible: Annotated[
        int, typer.Option("--impossible", "-i", help="Sessions that could not be completed")
    ] = 0,
    avg_reserve: Annotated[
        Optional[float],
        typer.Option("--avg-reserve", "-r", help="Average reps in reserve, if measured"),
    ] = None,
    volume_actual: Annotated[
        int, typer.Option("--volume", "-v", help="Total reps completed this week")
    ] = 0,
    history_path: HistoryPathOption = None,
) -> None:
    """
    Record the feedback of a finished week and mark it completed.
    """
    store = get_store(history_path)
    weeks, _ = load_history_or_exit(store)

    target = next((w for w in weeks if w.week_number == week), None)
    if target is None:
        views.print_error(f"Week {week} not found. Run 'advise --save' for that week first.")
        raise typer.Exit(1)

    try:
        target.feedback_summary = FeedbackSummary(
            easy=easy,
            perfect=perfect,
            impossible=impossible,
            avg_reserve=avg_reserve,
            volume_target=sum(day.volume for day in target.plan),
            volume_actual=volume_actual,
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    target.status = "completed"
    try:
        store.append_week(target)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(
        f"Week {week}: {easy} easy, {perfect} perfect, {impossible} impossible"
    )


@app.command("show-history")
def show_history(
    history_path: HistoryPathOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Limit number of weeks to show"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Display training weeks as a table.
    """
    store = get_store(history_path)
    weeks, _ = load_history_or_exit(store)

    if limit is not None:
        weeks = weeks[-limit:]

    if json_out:
        print(json.dumps([week_record_to_dict(w) for w in weeks], indent=2))
        return

    views.print_history(weeks)
