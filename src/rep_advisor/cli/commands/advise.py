"""Advice commands: advise, predict, strategies."""

import json
from typing import Annotated, Optional

import typer

from ...core.advisor import InvalidInputError
from ...core.metrics import had_impossible_session
from ...core.models import WeekRecord
from ...io.serializers import ValidationError, week_advice_to_dict
from .. import views
from ..app import HistoryPathOption, JsonOption, app, get_advisor, get_store, load_history_or_exit


@app.command()
def advise(
    test_max: Annotated[
        int,
        typer.Option("--test-max", "-t", help="Max reps reached in this week's capacity test"),
    ],
    week: Annotated[
        Optional[int],
        typer.Option("--week", "-w", help="Week number (default: last recorded week + 1)"),
    ] = None,
    impossible: Annotated[
        Optional[bool],
        typer.Option(
            "--impossible/--no-impossible",
            help="Force the impossible rule on or off (default: from last week's feedback)",
        ),
    ] = None,
    save: Annotated[
        bool,
        typer.Option("--save", "-s", help="Store the week and its scoring entry in the history"),
    ] = False,
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Pick the best progression model and print this week's 6-day plan.
    """
    store = get_store(history_path)
    weeks, scoring_history = load_history_or_exit(store)

    week_number = week if week is not None else (weeks[-1].week_number + 1 if weeks else 1)
    history = [w for w in weeks if w.week_number < week_number]
    if impossible is None:
        impossible = had_impossible_session(history[-1]) if history else False

    advisor = get_advisor()
    try:
        advice = advisor.process_new_week(
            week_number, test_max, history, scoring_history, impossible
        )
    except InvalidInputError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if save:
        record = WeekRecord(
            week_number=week_number,
            test_max=test_max,
            selected_algorithm=advice.algorithm,
            algorithm_scores=advice.scores,
            predictions=advice.predictions,
            plan=advice.plan,
            status="current",
        )
        try:
            store.append_week(record)
            store.save_scoring_entry(advisor.build_scoring_entry(week_number, test_max, advice))
        except (FileNotFoundError, ValidationError) as e:
            views.print_error(str(e))
            raise typer.Exit(1)

    if json_out:
        print(json.dumps({"week_number": week_number, **week_advice_to_dict(advice)}, indent=2))
        return

    views.print_advice(advice, week_number)
    if impossible:
        views.print_warning("Impossible session last week: sets doubled, reps halved.")
    if save:
        views.print_success(f"Saved week {week_number} to {store.history_path}")


@app.command()
def predict(
    week: Annotated[
        Optional[int],
        typer.Option("--week", "-w", help="Week to predict (default: last recorded week + 1)"),
    ] = None,
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show every eligible model's prediction for the next capacity test.
    """
    store = get_store(history_path)
    weeks, _ = load_history_or_exit(store)

    week_number = week if week is not None else (weeks[-1].week_number + 1 if weeks else 1)
    if week_number < 1:
        views.print_error("Week number must be >= 1")
        raise typer.Exit(1)

    history = [w for w in weeks if w.week_number < week_number]
    predictions = get_advisor().all_predictions(week_number, history)

    if json_out:
        print(json.dumps({"week_number": week_number, "predictions": predictions}, indent=2))
        return

    views.console.print()
    views.console.print(f"[bold]Predicted capacity test — week {week_number}[/bold]")
    for name, value in predictions.items():
        shown = f"{value} reps" if value is not None else "[red]failed[/red]"
        views.console.print(f"- {name}: {shown}")
    views.console.print()


@app.command()
def strategies(
    json_out: JsonOption = False,
) -> None:
    """
    List the progression models in tie-break order.
    """
    infos = get_advisor().all_strategy_info()

    if json_out:
        print(json.dumps(
            [{"name": i.name, "label": i.label, "description": i.description} for i in infos],
            indent=2,
        ))
        return

    views.console.print(views.format_strategies_table(infos))
