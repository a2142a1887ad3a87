"""
CLI entry point using Typer.

Provides commands for weekly training advice:
- init: Create the history file
- advise: Pick the best model and build this week's plan
- log-feedback: Record a finished week's feedback
- show-history: Display recorded weeks
- predict / strategies: Inspect the models
- status / simulate / metrics / plot / volume: Analysis
"""

from .app import app
from .commands import advise, analysis, history  # noqa: F401  (register commands)

if __name__ == "__main__":
    app()
