"""
Fitness-fatigue (Banister) strategy.

Predicts the next capacity test from the accumulated fitness and fatigue of
all logged sessions, and sizes each training day by whether a rep done that
day still helps the next test once its fatigue has decayed.
"""

from dataclasses import dataclass
from typing import Literal, Sequence

from ..config import (
    BANISTER_MIN_CHARGE,
    BANISTER_NEGATIVE_RATIO,
    BANISTER_POSITIVE_RATIO,
    BANISTER_REST_BASE,
    BANISTER_REST_PER_REP,
    BanisterParams,
)
from ..metrics import first_test_max, round_half_up, round_int, volume_to_sets_reps
from ..models import DailyPlan, TrainingType, WeekRecord
from ..physiology import (
    PerformanceState,
    absolute_day,
    banister_performance,
    flatten_sessions,
    net_effect_per_unit,
)
from .base import Strategy, StrategyInfo, beginner_plan, clamp_rest, is_beginner

TrainingStatusLabel = Literal["undertrained", "peaking", "optimal", "overreaching", "overtrained"]

# Day number → day type (day 1 is the capacity test)
DAY_TYPES: dict[int, TrainingType] = {
    2: "RECOVERY",
    3: "MODERATE",
    4: "INTENSE",
    5: "MODERATE",
    6: "MODERATE",
    7: "LIGHT",
}

DAY_CHARGE_MODIFIERS: dict[str, float] = {
    "RECOVERY": 0.70,
    "MODERATE": 0.85,
    "INTENSE": 1.00,
    "LIGHT": 0.60,
}

DAY_REST_MODIFIERS: dict[str, float] = {
    "RECOVERY": 0.85,
    "INTENSE": 1.15,
    "LIGHT": 0.80,
}

# Fitness/fatigue ratio thresholds, checked in order
STATUS_THRESHOLDS: tuple[tuple[float, TrainingStatusLabel, str], ...] = (
    (2.0, "peaking", "Performance at its peak: a good time for an ambitious test."),
    (1.2, "optimal", "Fitness and fatigue are well balanced. Keep the program going."),
    (0.8, "overreaching", "Accumulated fatigue detected. Reduce volume this week."),
)


@dataclass(frozen=True)
class CurvePoint:
    day: int
    performance: float
    fitness: float
    fatigue: float


@dataclass(frozen=True)
class TrainingStatus:
    status: TrainingStatusLabel
    ratio: float  # fitness / fatigue
    recommendation: str


class BanisterStrategy(Strategy):
    """Bi-exponential supercompensation model."""

    info = StrategyInfo(
        name="banister",
        label="Fitness-Fatigue (Banister)",
        description=(
            "Bi-exponential supercompensation model. Sizes each day's load to "
            "maximize performance at the next test by balancing accumulated "
            "fitness against residual fatigue."
        ),
    )

    def __init__(self, params: BanisterParams = BanisterParams()):
        self.params = params

    def predict(self, week_number: int, history: Sequence[WeekRecord]) -> int:
        if not history:
            return 1
        state = self.state_at_day(history, absolute_day(week_number, 1))
        return max(1, round_int(state.performance))

    def plan(
        self, week_number: int, test_max: int, history: Sequence[WeekRecord]
    ) -> list[DailyPlan]:
        if is_beginner(test_max):
            return beginner_plan()

        base = first_test_max(history)
        sessions = flatten_sessions(history)
        next_test_day = absolute_day(week_number + 1, 1)

        plan: list[DailyPlan] = []
        for day_number, day_type in DAY_TYPES.items():
            session_day = absolute_day(week_number, day_number)
            net_effect = net_effect_per_unit(session_day, next_test_day, self.params)
            current = banister_performance(base, sessions, session_day, self.params)

            charge = self._optimal_charge(current.performance, net_effect, day_type)
            sets, reps = volume_to_sets_reps(charge, test_max)
            plan.append(DailyPlan(sets, reps, self._day_rest(reps, day_type), day_type))
        return plan

    def _optimal_charge(self, performance: float, net_effect: float, day_type: str) -> int:
        ratio = BANISTER_POSITIVE_RATIO if net_effect > 0 else BANISTER_NEGATIVE_RATIO
        charge = performance * ratio * DAY_CHARGE_MODIFIERS[day_type]
        return max(BANISTER_MIN_CHARGE, round_int(charge))

    def _day_rest(self, reps: int, day_type: str) -> int:
        rest = (BANISTER_REST_BASE + reps * BANISTER_REST_PER_REP) * DAY_REST_MODIFIERS.get(day_type, 1.0)
        return clamp_rest(rest)

    # ------------------------------------------------------------------
    # Analysis helpers
    # ------------------------------------------------------------------

    def state_at_day(self, history: Sequence[WeekRecord], target_day: int) -> PerformanceState:
        """Fitness, fatigue and performance at an absolute day."""
        return banister_performance(
            first_test_max(history), flatten_sessions(history), target_day, self.params
        )

    def performance_curve(
        self, history: Sequence[WeekRecord], from_day: int, to_day: int, step: int = 1
    ) -> list[CurvePoint]:
        """Model state sampled every `step` days, values rounded to 0.1."""
        if step < 1:
            raise ValueError("step must be >= 1")
        base = first_test_max(history)
        sessions = flatten_sessions(history)
        curve = []
        for day in range(from_day, to_day + 1, step):
            state = banister_performance(base, sessions, day, self.params)
            curve.append(
                CurvePoint(
                    day=day,
                    performance=round_half_up(state.performance, 1),
                    fitness=round_half_up(state.fitness, 1),
                    fatigue=round_half_up(state.fatigue, 1),
                )
            )
        return curve

    def analyze_training_status(self, history: Sequence[WeekRecord]) -> TrainingStatus:
        """
        Classify the fitness/fatigue balance at the end of the last week.

        ratio > 2.0 peaking, > 1.2 optimal, > 0.8 overreaching, else
        overtrained. Without fatigue the ratio is 999 (or 0 with no fitness).
        """
        if not history:
            return TrainingStatus("undertrained", 0.0, "Start with a capacity test.")

        end_of_week = absolute_day(history[-1].week_number, 7)
        state = self.state_at_day(history, end_of_week)
        if state.fatigue > 0:
            ratio = round_half_up(state.fitness / state.fatigue, 2)
        else:
            ratio = 999.0 if state.fitness > 0 else 0.0

        for threshold, status, recommendation in STATUS_THRESHOLDS:
            if ratio > threshold:
                return TrainingStatus(status, ratio, recommendation)
        return TrainingStatus(
            "overtrained", ratio, "Probable overtraining. Consider a deload week."
        )
