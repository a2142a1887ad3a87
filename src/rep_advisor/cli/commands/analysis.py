"""Analysis commands: status, simulate, metrics, plot, volume."""

import json
from dataclasses import asdict
from typing import Annotated

import typer

from ...core.metrics import latest_test_max
from ...core.strategies import BanisterStrategy, RegressionStrategy, RIRStrategy
from ...io.serializers import algorithm_score_to_dict, reliability_to_dict
from .. import views
from ..app import HistoryPathOption, JsonOption, app, get_advisor, get_store, load_history_or_exit


@app.command()
def status(
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show current training status as seen by each model.
    """
    store = get_store(history_path)
    weeks, scoring_history = load_history_or_exit(store)

    if not weeks:
        views.print_info("No weeks recorded yet. Run 'advise --test-max N --save' to start.")
        return

    advisor = get_advisor()
    next_week = weeks[-1].week_number + 1
    reliability = advisor.scorer.assess_reliability(
        scoring_history, advisor.eligible_algorithms(next_week)
    )

    banister = next(s for s in advisor.registry if isinstance(s, BanisterStrategy))
    rir = next(s for s in advisor.registry if isinstance(s, RIRStrategy))
    regression = next(s for s in advisor.registry if isinstance(s, RegressionStrategy))

    training_status = banister.analyze_training_status(weeks)
    load = rir.analyze_training_load(weeks)
    reserve = rir.reserve_trend(weeks)
    quality = regression.analyze_model_quality(weeks)

    if json_out:
        print(json.dumps({
            "weeks": len(weeks),
            "latest_test_max": latest_test_max(weeks),
            "current_algorithm": weeks[-1].selected_algorithm,
            "reliability": reliability_to_dict(reliability),
            "training_status": asdict(training_status),
            "training_load": asdict(load),
            "reserve_trend": asdict(reserve),
            "model_quality": asdict(quality),
        }, indent=2))
        return

    views.console.print()
    views.console.print("[bold]Current status[/bold]")
    views.console.print(f"- Weeks recorded: {len(weeks)}")
    views.console.print(f"- Latest test max: {latest_test_max(weeks)} reps")
    views.console.print(f"- Current model: {weeks[-1].selected_algorithm}")
    views.console.print(f"- Reliability: {views.format_reliability(reliability)}")
    views.console.print(
        f"- Fitness/fatigue: {training_status.status} (ratio {training_status.ratio:.2f}). "
        f"{training_status.recommendation}"
    )
    views.console.print(f"- Load (RIR {load.rir:.1f}): {load.volume_label}. {load.recommendation}")
    views.console.print(f"- Reserve trend: {reserve.trend.replace('_', ' ')}")
    views.console.print(
        f"- Regression fit: {quality.quality} ({quality.equation}, confidence {quality.confidence}%)"
    )
    views.console.print()


@app.command()
def simulate(
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Replay model selection over every recorded week.
    """
    store = get_store(history_path)
    weeks, scoring_history = load_history_or_exit(store)

    results = get_advisor().simulate_historical_scoring(weeks, scoring_history)

    if json_out:
        print(json.dumps([
            {
                "week_number": r.week_number,
                "selected": r.selected,
                "actual": r.actual,
                "predictions": r.predictions,
                "scores": {name: algorithm_score_to_dict(s) for name, s in r.scores.items()},
            }
            for r in results
        ], indent=2))
        return

    if not results:
        views.print_info("At least two recorded weeks are needed to replay the selection.")
        return

    for r in results:
        views.console.print()
        views.console.print(
            f"[bold]Week {r.week_number}[/bold]: selected [cyan]{r.selected}[/cyan]"
            f" (actual test: {r.actual if r.actual is not None else '-'})"
        )
        views.print_score_chart(r.scores)
    views.console.print()


@app.command()
def metrics(
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show how the advisor behaved over the history.
    """
    store = get_store(history_path)
    weeks, scoring_history = load_history_or_exit(store)

    result = get_advisor().engine_metrics(weeks, scoring_history)

    if json_out:
        print(json.dumps(asdict(result), indent=2))
        return

    views.console.print()
    views.console.print("[bold]Advisor metrics[/bold]")
    views.console.print(f"- Average precision of selected model: {result.average_precision:.1f}/100")
    views.console.print(f"- Model changes: {result.algorithm_changes}")
    views.console.print(f"- Dominant model: {result.dominant_algorithm}")
    views.console.print(f"- Failure rate: {result.failure_rate:.1f}%")
    views.console.print()


@app.command()
def plot(
    history_path: HistoryPathOption = None,
    trajectory: Annotated[
        bool,
        typer.Option("--trajectory", "-t", help="Overlay the regression model's projection"),
    ] = False,
    weeks_ahead: Annotated[
        int,
        typer.Option("--weeks-ahead", "-a", help="Weeks to project past the last test"),
    ] = 4,
) -> None:
    """
    Show an ASCII chart of capacity test progress.
    """
    store = get_store(history_path)
    weeks, _ = load_history_or_exit(store)

    curve = None
    if trajectory and weeks:
        regression = next(s for s in get_advisor().registry if isinstance(s, RegressionStrategy))
        points = regression.prediction_curve(
            weeks, weeks[0].week_number, weeks[-1].week_number + max(0, weeks_ahead)
        )
        curve = [(p.week, p.predicted) for p in points]

    views.print_test_max_plot(weeks, trajectory=curve)


@app.command()
def volume(
    history_path: HistoryPathOption = None,
    count: Annotated[
        int,
        typer.Option("--weeks", "-w", help="Number of weeks to show"),
    ] = 4,
) -> None:
    """
    Show completed volume of recent weeks.
    """
    store = get_store(history_path)
    weeks, _ = load_history_or_exit(store)
    views.print_volume_chart(weeks, count)
