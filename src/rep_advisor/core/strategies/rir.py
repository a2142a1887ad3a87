"""
Reps-in-reserve autoregulation.

Last week's average RIR (measured, or derived from feedback) sets both the
weekly volume and the target reps per set. The most recent completed
session's feedback then nudges every day's reps up.

The two granularities are intentional: the week average sizes the volume,
the single last session fine-tunes the reps.
"""

from dataclasses import dataclass
from typing import Literal, Sequence

from ..config import (
    DEFAULT_RIR,
    MAX_SETS,
    MIN_REPS,
    MIN_SETS,
    RIR_BASE_RATE,
    RIR_DAY_RATIOS,
    RIR_MAX_RATE,
    RIR_RATE_PER_UNIT,
    RIR_REP_BASE_RATIO,
    RIR_REP_RATIO_PER_UNIT,
    RIR_SESSION_MULTIPLIERS,
    max_reps_for,
)
from ..metrics import calculate_rest, clamp, latest_test_max, mean, round_half_up, round_int, week_feedback
from ..models import DailyPlan, Feedback, SessionRecord, WeekRecord
from .base import Strategy, StrategyInfo, beginner_plan, clamp_rest, is_beginner

LoadStatus = Literal["under", "optimal", "moderate", "deload"]
ReserveTrend = Literal["insufficient", "fatigue_accumulating", "recovery", "stable"]

FEEDBACK_TO_RIR: dict[str, float] = {
    "easy": 4,
    "perfect": 2,
    "impossible": 0,
}


@dataclass(frozen=True)
class VolumeTier:
    min_rir: float
    multiplier: float  # Weekly volume = test_max × multiplier
    label: str
    status: LoadStatus
    base_rest: int


# Checked in order; first tier whose min_rir <= RIR wins
VOLUME_TIERS: tuple[VolumeTier, ...] = (
    VolumeTier(3.5, 4.0, "High volume", "under", 45),
    VolumeTier(2.0, 3.5, "Optimal volume", "optimal", 60),
    VolumeTier(1.0, 3.0, "Moderate volume", "moderate", 70),
    VolumeTier(float("-inf"), 2.0, "Deload", "deload", 90),
)

LOAD_RECOMMENDATIONS: dict[str, str] = {
    "under": "Undertraining detected. Volume is being increased.",
    "optimal": "Optimal load. Keep going.",
    "moderate": "Moderate fatigue detected. Volume slightly reduced.",
    "deload": "High fatigue. Deload week scheduled.",
}


@dataclass(frozen=True)
class TrainingLoad:
    rir: float
    status: LoadStatus | Literal["unknown"]
    recommendation: str
    volume_label: str


@dataclass(frozen=True)
class ReserveTrendResult:
    values: list[float]
    trend: ReserveTrend


def feedback_to_rir(feedback: str | None) -> float:
    """RIR implied by a feedback label; the target RIR when unknown."""
    if feedback is None:
        return DEFAULT_RIR
    return FEEDBACK_TO_RIR.get(feedback, DEFAULT_RIR)


def week_rir(week: WeekRecord | None) -> float:
    """
    Average RIR of a week.

    The measured average is used when present; otherwise the mean of the
    RIR implied by each feedback (one decimal); the target RIR without any.
    """
    if week is None:
        return DEFAULT_RIR
    summary = week_feedback(week)
    if summary.avg_reserve is not None:
        return summary.avg_reserve
    if summary.total == 0:
        return DEFAULT_RIR
    values = (
        [FEEDBACK_TO_RIR["easy"]] * summary.easy
        + [FEEDBACK_TO_RIR["perfect"]] * summary.perfect
        + [FEEDBACK_TO_RIR["impossible"]] * summary.impossible
    )
    return round_half_up(mean(values), 1)


def volume_tier(rir: float) -> VolumeTier:
    for tier in VOLUME_TIERS:
        if rir >= tier.min_rir:
            return tier
    return VOLUME_TIERS[-1]


def last_session_feedback(sessions: Sequence[SessionRecord]) -> Feedback | None:
    """Feedback of the latest completed training session that has one."""
    for session in reversed(sessions):
        if (
            session.feedback is not None
            and session.status == "completed"
            and session.session_type != "test"
        ):
            return session.feedback
    return None


class RIRStrategy(Strategy):
    """Volume and intensity autoregulated from reported effort."""

    info = StrategyInfo(
        name="rir",
        label="Autoregulation (RIR)",
        description=(
            "Adjusts volume and intensity from your feedback. Detects "
            "accumulated fatigue and adapts the load week to week."
        ),
    )

    def predict(self, week_number: int, history: Sequence[WeekRecord]) -> int:
        """
        last_test_max × (1 + clamp(3% + RIR × 1.5%, 0, 12%)).

        A high reserve means room to progress quickly.
        """
        if not history:
            return 1
        rir = week_rir(history[-1])
        rate = clamp(RIR_BASE_RATE + rir * RIR_RATE_PER_UNIT, 0.0, RIR_MAX_RATE)
        return max(1, round_int(latest_test_max(history) * (1 + rate)))

    def plan(
        self, week_number: int, test_max: int, history: Sequence[WeekRecord]
    ) -> list[DailyPlan]:
        if is_beginner(test_max):
            return beginner_plan()

        last_week = history[-1] if history else None
        rir = week_rir(last_week)
        tier = volume_tier(rir)
        total_volume = test_max * tier.multiplier
        max_reps = max_reps_for(test_max)
        target_reps = int(
            clamp(
                round_int(test_max * (RIR_REP_BASE_RATIO + rir * RIR_REP_RATIO_PER_UNIT)),
                MIN_REPS,
                max_reps,
            )
        )
        training_type = "DELOAD" if tier.status == "deload" else "STANDARD"
        rest = clamp_rest(calculate_rest(target_reps, tier.base_rest, 15, 5, 5))

        plan = []
        for ratio in RIR_DAY_RATIOS:
            day_volume = round_int(total_volume * ratio)
            sets = int(clamp(round_int(day_volume / target_reps), MIN_SETS, MAX_SETS))
            plan.append(DailyPlan(sets, target_reps, rest, training_type))

        if last_week is not None:
            plan = self._apply_last_session(plan, last_week, max_reps)
        return plan

    def _apply_last_session(
        self, plan: list[DailyPlan], last_week: WeekRecord, max_reps: int
    ) -> list[DailyPlan]:
        feedback = last_session_feedback(last_week.sessions)
        multiplier = RIR_SESSION_MULTIPLIERS.get(feedback) if feedback else None
        if multiplier is None:
            return plan
        return [
            DailyPlan(
                day.sets,
                int(clamp(round_int(day.reps * multiplier), MIN_REPS, max_reps)),
                day.rest_seconds,
                day.training_type,
            )
            for day in plan
        ]

    # ------------------------------------------------------------------
    # Analysis helpers
    # ------------------------------------------------------------------

    def analyze_training_load(self, history: Sequence[WeekRecord]) -> TrainingLoad:
        if not history:
            return TrainingLoad(DEFAULT_RIR, "unknown", "Not enough data.", "Standard volume")
        rir = week_rir(history[-1])
        tier = volume_tier(rir)
        return TrainingLoad(
            rir=round_half_up(rir, 1),
            status=tier.status,
            recommendation=LOAD_RECOMMENDATIONS[tier.status],
            volume_label=tier.label,
        )

    def reserve_trend(self, history: Sequence[WeekRecord], count: int = 4) -> ReserveTrendResult:
        """
        Direction of weekly RIR over the last `count` weeks.

        Strictly falling RIR means fatigue is accumulating; strictly rising
        means recovery.
        """
        values = [week_rir(week) for week in history[-count:]] if history else []
        if len(values) < 2:
            return ReserveTrendResult(values, "insufficient")

        decreasing = all(values[i] < values[i - 1] for i in range(1, len(values)))
        increasing = all(values[i] > values[i - 1] for i in range(1, len(values)))
        if decreasing:
            trend: ReserveTrend = "fatigue_accumulating"
        elif increasing:
            trend = "recovery"
        else:
            trend = "stable"
        return ReserveTrendResult([round_half_up(v, 1) for v in values], trend)

    def estimate_session_reserve(self, planned_total: int, completed: int | None) -> float:
        """
        RIR estimate from completed versus planned reps.

        Overshooting the plan reveals reserve (1–5); falling short of it
        means the sets went to failure.
        """
        if not planned_total or completed is None:
            return DEFAULT_RIR
        ratio = completed / planned_total
        if ratio >= 1.0:
            return clamp(round_int((ratio - 0.8) * 20), 1, 5)
        if ratio < 0.8:
            return 0
        return 1

    def predicted_weekly_volume(self, test_max: int, rir: float) -> int:
        return round_int(test_max * volume_tier(rir).multiplier)

    def feedback_mapping(self) -> dict[str, float]:
        return dict(FEEDBACK_TO_RIR)
