"""
Fitness-fatigue impulse response model (Banister model family).

Performance(t) = P_base + Σ fitness_i(t) − Σ fatigue_i(t)

Each session adds a long-lived fitness impulse (k1, τ1) and a larger but
shorter-lived fatigue impulse (k2, τ2). Days are absolute: day 1 is the
capacity test of week 1, day (w − 1)·7 + d is day d of week w.
"""

import math
from dataclasses import dataclass
from typing import Sequence

from .config import BanisterParams, K_FATIGUE, K_FITNESS, TAU_FATIGUE, TAU_FITNESS
from .models import WeekRecord


@dataclass(frozen=True)
class TrainingImpulse:
    """A session reduced to its absolute day and rep volume."""

    day: int
    volume: int


@dataclass(frozen=True)
class PerformanceState:
    """Model output at one day."""

    performance: float  # Floored at 1
    fitness: float
    fatigue: float


def absolute_day(week_number: int, day_number: int) -> int:
    """Absolute day index of a week/day pair (week 1, day 1 → 1)."""
    return (week_number - 1) * 7 + day_number


def fitness_contribution(
    charge: float, dt: float, k: float = K_FITNESS, tau: float = TAU_FITNESS
) -> float:
    """
    Fitness left by one session after dt days.

    fitness = charge · k1 · e^(−dt/τ1); zero for dt ≤ 0 (the session has not
    happened yet from the target day's point of view).
    """
    if dt <= 0:
        return 0.0
    return charge * k * math.exp(-dt / tau)


def fatigue_contribution(
    charge: float, dt: float, k: float = K_FATIGUE, tau: float = TAU_FATIGUE
) -> float:
    """Fatigue left by one session after dt days (zero for dt ≤ 0)."""
    if dt <= 0:
        return 0.0
    return charge * k * math.exp(-dt / tau)


def banister_performance(
    base_performance: float,
    sessions: Sequence[TrainingImpulse],
    target_day: int,
    params: BanisterParams = BanisterParams(),
) -> PerformanceState:
    """
    Evaluate the fitness-fatigue model at target_day.

    Only sessions strictly before the target day with a positive volume
    contribute.

    Args:
        base_performance: Baseline capacity (first test result)
        sessions: Training impulses, any order
        target_day: Absolute day to evaluate
        params: Model gains and time constants

    Returns:
        PerformanceState with performance floored at 1
    """
    fitness = 0.0
    fatigue = 0.0
    for session in sessions:
        dt = target_day - session.day
        if dt > 0 and session.volume > 0:
            fitness += fitness_contribution(session.volume, dt, params.k1, params.tau1)
            fatigue += fatigue_contribution(session.volume, dt, params.k2, params.tau2)

    return PerformanceState(
        performance=max(1.0, base_performance + fitness - fatigue),
        fitness=fitness,
        fatigue=fatigue,
    )


def net_effect_per_unit(
    session_day: int, target_day: int, params: BanisterParams = BanisterParams()
) -> float:
    """
    Net effect of one rep done on session_day on performance at target_day.

    k1·e^(−dt/τ1) − k2·e^(−dt/τ2); negative when the session is so close to
    the target that its fatigue has not yet cleared. Zero for dt ≤ 0.
    """
    dt = target_day - session_day
    if dt <= 0:
        return 0.0
    return params.k1 * math.exp(-dt / params.tau1) - params.k2 * math.exp(-dt / params.tau2)


def flatten_sessions(history: Sequence[WeekRecord]) -> list[TrainingImpulse]:
    """
    Reduce a history to training impulses sorted by absolute day.

    Volume is the logged total reps; an unlogged capacity-test session
    counts as the week's test result. Sessions with no volume are dropped.
    """
    impulses: list[TrainingImpulse] = []
    for week in history:
        for session in week.sessions:
            if session.actual_reps is not None:
                volume = session.actual_reps
            elif session.session_type == "test" and week.test_max:
                volume = week.test_max
            else:
                volume = 0
            if volume > 0:
                impulses.append(
                    TrainingImpulse(absolute_day(week.week_number, session.day_number), volume)
                )

    impulses.sort(key=lambda s: s.day)
    return impulses
