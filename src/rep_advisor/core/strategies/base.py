"""
Base types for progression strategies.

Every strategy predicts next week's capacity test and builds a 6-day plan
from the same inputs; the orchestrator treats them interchangeably.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from ..config import (
    BEGINNER_REPS,
    BEGINNER_REST,
    BEGINNER_SETS,
    BEGINNER_THRESHOLD,
    MAX_REST,
    MIN_REST,
    TRAINING_DAYS,
)
from ..metrics import clamp, round_int
from ..models import DailyPlan, TrainingType, WeekRecord


@dataclass(frozen=True)
class StrategyInfo:
    """Identity of a strategy."""

    name: str  # e.g. "linear"
    label: str  # e.g. "Linear progression"
    description: str


def is_beginner(test_max: int) -> bool:
    return test_max < BEGINNER_THRESHOLD


def beginner_plan(training_type: TrainingType = "BEGINNER") -> list[DailyPlan]:
    """Fixed low-volume week used below the beginner threshold."""
    return [
        DailyPlan(BEGINNER_SETS, BEGINNER_REPS, BEGINNER_REST, training_type)
        for _ in range(TRAINING_DAYS)
    ]


def clamp_rest(rest: float) -> int:
    """Round a rest interval and clamp it into the safe range."""
    return int(clamp(round_int(rest), MIN_REST, MAX_REST))


class Strategy(ABC):
    """Contract shared by all progression strategies."""

    info: StrategyInfo

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def label(self) -> str:
        return self.info.label

    def identity(self) -> StrategyInfo:
        return self.info

    @abstractmethod
    def predict(self, week_number: int, history: Sequence[WeekRecord]) -> int:
        """
        Predict the capacity test result of week_number.

        Args:
            week_number: Week whose test is predicted (1-based)
            history: Past weeks, ascending

        Returns:
            Predicted max reps (>= 1); 1 on empty history
        """

    @abstractmethod
    def plan(
        self, week_number: int, test_max: int, history: Sequence[WeekRecord]
    ) -> list[DailyPlan]:
        """
        Build the plan for days 2–7 of week_number.

        Args:
            week_number: Current week (1-based)
            test_max: This week's capacity test result
            history: Past weeks, ascending

        Returns:
            Six DailyPlan entries
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
