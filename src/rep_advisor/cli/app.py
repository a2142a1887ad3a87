"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.advisor import ProgressionAdvisor
from ..core.engine.config_loader import load_model_config
from ..core.models import ScoringEntry, WeekRecord
from ..io.history_store import HistoryStore, get_default_history_path
from ..io.serializers import ValidationError
from . import views

# Shared --history-path option type used across all commands
HistoryPathOption = Annotated[
    Optional[Path],
    typer.Option("--history-path", "-p", help="Path to history JSON file"),
]

# Shared --json option type used by the data commands
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="rep-advisor",
    help="Weekly training advisor: picks the best of five progression models and builds your 6-day plan.",
    no_args_is_help=True,
)


def get_store(history_path: Path | None) -> HistoryStore:
    """Get history store from path or default location."""
    if history_path is None:
        history_path = get_default_history_path()
    return HistoryStore(history_path)


def get_advisor() -> ProgressionAdvisor:
    """Advisor configured from the bundled and user model.yaml."""
    return ProgressionAdvisor.from_config(load_model_config())


def load_history_or_exit(store: HistoryStore) -> tuple[list[WeekRecord], list[ScoringEntry]]:
    """
    Load weeks and scoring entries, exiting with an error message on failure.

    Raises:
        typer.Exit: If the file is missing or invalid
    """
    if not store.exists():
        views.print_error(f"History file not found: {store.history_path}")
        views.print_info("Run 'init' first to create the history file.")
        raise typer.Exit(1)

    try:
        return store.load_weeks(), store.load_scoring_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
