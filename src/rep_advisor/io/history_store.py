"""
JSON-based history storage for training weeks and scoring entries.

Handles reading, writing, and managing the history file.
"""

import json
from pathlib import Path
from typing import Any

from ..core.models import ScoringEntry, WeekRecord
from .serializers import (
    ValidationError,
    dict_to_scoring_entry,
    dict_to_week_record,
    scoring_entry_to_dict,
    week_record_to_dict,
)


class HistoryStore:
    """
    Manages training history stored in a single JSON document.

    Layout:
        {"weeks": [...], "scoring_history": [...]}

    Weeks are kept sorted by week_number; one scoring entry is kept per week.
    """

    def __init__(self, history_path: str | Path):
        """
        Initialize the history store.

        Args:
            history_path: Path to the JSON history file
        """
        self.history_path = Path(history_path)

    def exists(self) -> bool:
        """Check if the history file exists."""
        return self.history_path.exists()

    def init(self) -> None:
        """
        Initialize an empty history file if it doesn't exist.

        Creates parent directories if needed.
        """
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.history_path.exists():
            self._write({"weeks": [], "scoring_history": []})

    def _read(self) -> dict[str, Any]:
        if not self.history_path.exists():
            raise FileNotFoundError(
                f"History file not found: {self.history_path}. Run 'init' first."
            )
        try:
            with open(self.history_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {self.history_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValidationError(f"{self.history_path}: expected a JSON object at top level")
        for key in ("weeks", "scoring_history"):
            if not isinstance(data.get(key, []), list):
                raise ValidationError(f"{self.history_path}: '{key}' must be a list")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        with open(self.history_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def load_weeks(self) -> list[WeekRecord]:
        """
        Load all training weeks.

        Returns:
            List of WeekRecord, sorted by week_number

        Raises:
            FileNotFoundError: If history file doesn't exist
            ValidationError: If a week record is invalid
        """
        weeks: list[WeekRecord] = []
        for index, raw in enumerate(self._read().get("weeks", []), 1):
            try:
                weeks.append(dict_to_week_record(raw))
            except ValidationError as e:
                raise ValidationError(
                    f"Error parsing week #{index} in {self.history_path}: {e}"
                ) from e
        weeks.sort(key=lambda w: w.week_number)
        return weeks

    def load_scoring_history(self) -> list[ScoringEntry]:
        """
        Load all scoring entries sorted by week_number.

        Raises:
            FileNotFoundError: If history file doesn't exist
            ValidationError: If an entry is invalid
        """
        entries: list[ScoringEntry] = []
        for index, raw in enumerate(self._read().get("scoring_history", []), 1):
            try:
                entries.append(dict_to_scoring_entry(raw))
            except ValidationError as e:
                raise ValidationError(
                    f"Error parsing scoring entry #{index} in {self.history_path}: {e}"
                ) from e
        return entries

    def append_week(self, week: WeekRecord) -> None:
        """
        Store a week, replacing any existing week with the same number.

        Args:
            week: Week to store
        """
        weeks = [w for w in self.load_weeks() if w.week_number != week.week_number]
        weeks.append(week)
        weeks.sort(key=lambda w: w.week_number)

        data = self._read()
        data["weeks"] = [week_record_to_dict(w) for w in weeks]
        self._write(data)

    def save_scoring_entry(self, entry: ScoringEntry) -> None:
        """
        Store a scoring entry, replacing any entry for the same week.

        Args:
            entry: Entry to store
        """
        entries = [e for e in self.load_scoring_history() if e.week_number != entry.week_number]
        entries.append(entry)
        entries.sort(key=lambda e: e.week_number)

        data = self._read()
        data["scoring_history"] = [scoring_entry_to_dict(e) for e in entries]
        self._write(data)

    def latest_week(self) -> WeekRecord | None:
        """
        Get the most recent week.

        Returns:
            Latest WeekRecord or None if no history
        """
        try:
            weeks = self.load_weeks()
        except FileNotFoundError:
            return None
        return weeks[-1] if weeks else None


def get_default_history_path() -> Path:
    """
    Get the default history file path.

    Returns:
        ~/.rep-advisor/history.json
    """
    return Path.home() / ".rep-advisor" / "history.json"


def get_default_store() -> HistoryStore:
    """
    Get a HistoryStore with the default path.

    Returns:
        HistoryStore instance
    """
    return HistoryStore(get_default_history_path())
