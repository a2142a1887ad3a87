"""
Daily undulating periodization (DUP).

Days rotate between endurance, hypertrophy and strength profiles. Reps per
set grow 5% per week; the predicted progression rate reacts to last week's
feedback and to the recent trend of capacity results.
"""

from dataclasses import dataclass
from typing import Literal, Sequence

from ..config import (
    DUP_BASE_RATE,
    DUP_EASY_BONUS,
    DUP_EASY_THRESHOLD,
    DUP_IMPOSSIBLE_PENALTY,
    DUP_MAX_RATE,
    DUP_TREND_ADJUST,
    DUP_WEEKLY_INTENSITY_STEP,
    MAX_SETS,
    MIN_REPS,
    MIN_SETS,
    TREND_WINDOW,
    max_reps_for,
)
from ..metrics import (
    calculate_rest,
    clamp,
    detect_trend,
    latest_test_max,
    recent_test_maxes,
    round_int,
    week_feedback,
)
from ..models import DailyPlan, FeedbackSummary, TrainingType, WeekRecord
from .base import Strategy, StrategyInfo, beginner_plan, clamp_rest, is_beginner

Diversity = Literal["unknown", "none", "optimal", "too_hard", "too_easy", "balanced"]


@dataclass(frozen=True)
class TrainingProfile:
    sets: int
    rep_ratio: float
    base_rest: int
    rest_threshold: int
    rest_add_per_chunk: int
    rest_chunk_size: int
    label: str


TRAINING_PROFILES: dict[str, TrainingProfile] = {
    "ENDURANCE": TrainingProfile(5, 0.65, 40, 15, 3, 1, "Endurance"),
    "HYPERTROPHY": TrainingProfile(4, 0.75, 70, 20, 2, 1, "Hypertrophy"),
    "FORCE": TrainingProfile(3, 0.90, 100, 25, 2, 1, "Strength"),
}

DAILY_ROTATION: tuple[TrainingType, ...] = (
    "ENDURANCE",  # day 2
    "HYPERTROPHY",
    "FORCE",
    "ENDURANCE",
    "HYPERTROPHY",
    "ENDURANCE",  # day 7
)


@dataclass(frozen=True)
class DayDetails:
    day_number: int
    training_type: TrainingType
    profile: TrainingProfile
    sets: int
    reps: int
    rest_seconds: int


@dataclass(frozen=True)
class FeedbackDiversity:
    diversity: Diversity
    score: int


class DUPStrategy(Strategy):
    """Endurance / hypertrophy / strength rotation with feedback-driven growth."""

    info = StrategyInfo(
        name="dup",
        label="Daily undulation (DUP)",
        description=(
            "Alternates endurance, hypertrophy and strength days. Adjusts "
            "progression from feedback and detects plateaus."
        ),
    )

    def predict(self, week_number: int, history: Sequence[WeekRecord]) -> int:
        if not history:
            return 1
        rate = self.progression_rate(history)
        return max(1, round_int(latest_test_max(history) * (1 + rate)))

    def plan(
        self, week_number: int, test_max: int, history: Sequence[WeekRecord]
    ) -> list[DailyPlan]:
        if is_beginner(test_max):
            return beginner_plan()
        return [
            self._day_plan(test_max, profile_name, week_number)
            for profile_name in DAILY_ROTATION
        ]

    def progression_rate(self, history: Sequence[WeekRecord]) -> float:
        """
        Base 5%, +2% for ≥ 4 easy sessions last week, −2% for any impossible,
        ±1% from the trend of the last 3 results; clamped to [0, 15%].
        """
        rate = DUP_BASE_RATE
        if history:
            rate += self._feedback_adjustment(week_feedback(history[-1]))
        rate += self._trend_adjustment(history)
        return clamp(rate, 0.0, DUP_MAX_RATE)

    def _feedback_adjustment(self, summary: FeedbackSummary) -> float:
        adjustment = 0.0
        if summary.easy >= DUP_EASY_THRESHOLD:
            adjustment += DUP_EASY_BONUS
        if summary.impossible >= 1:
            adjustment -= DUP_IMPOSSIBLE_PENALTY
        return adjustment

    def _trend_adjustment(self, history: Sequence[WeekRecord]) -> float:
        if len(history) < TREND_WINDOW:
            return 0.0
        maxes = recent_test_maxes(history, TREND_WINDOW)
        if len(maxes) < TREND_WINDOW:
            return 0.0
        trend = detect_trend(maxes)
        if trend == "increasing":
            return DUP_TREND_ADJUST
        if trend in ("stagnant", "decreasing"):
            return -DUP_TREND_ADJUST
        return 0.0

    def _progression_factor(self, week_number: int) -> float:
        return 1 + (week_number - 1) * DUP_WEEKLY_INTENSITY_STEP

    def _day_plan(self, test_max: int, profile_name: TrainingType, week_number: int) -> DailyPlan:
        profile = TRAINING_PROFILES[profile_name]
        factor = self._progression_factor(week_number)
        reps = int(clamp(round_int(test_max * profile.rep_ratio * factor), MIN_REPS, max_reps_for(test_max)))
        sets = int(clamp(profile.sets, MIN_SETS, MAX_SETS))
        rest = calculate_rest(
            reps,
            profile.base_rest,
            profile.rest_threshold,
            profile.rest_add_per_chunk,
            profile.rest_chunk_size,
        )
        return DailyPlan(sets, reps, clamp_rest(rest), profile_name)

    # ------------------------------------------------------------------
    # Analysis helpers
    # ------------------------------------------------------------------

    def day_details(self, day_number: int, test_max: int, week_number: int) -> DayDetails:
        """Profile and prescription of one day (2–7) of a week."""
        index = int(clamp(day_number - 2, 0, len(DAILY_ROTATION) - 1))
        profile_name = DAILY_ROTATION[index]
        day = self._day_plan(test_max, profile_name, week_number)
        return DayDetails(
            day_number=index + 2,
            training_type=profile_name,
            profile=TRAINING_PROFILES[profile_name],
            sets=day.sets,
            reps=day.reps,
            rest_seconds=day.rest_seconds,
        )

    def week_rotation(self) -> list[tuple[int, TrainingType, str]]:
        """(day number, type, label) for days 2–7."""
        return [
            (index + 2, name, TRAINING_PROFILES[name].label)
            for index, name in enumerate(DAILY_ROTATION)
        ]

    def feedback_diversity(self, summary: FeedbackSummary | None) -> FeedbackDiversity:
        """
        Judge whether a week's feedback mix suits undulating training.

        40–70% perfect sessions and a few easy ones score best; every
        impossible session costs up to 40 points.
        """
        if summary is None:
            return FeedbackDiversity("unknown", 50)
        total = summary.total
        if total == 0:
            return FeedbackDiversity("none", 50)

        perfect_ratio = summary.perfect / total
        impossible_ratio = summary.impossible / total

        score = 50.0
        if 0.4 <= perfect_ratio <= 0.7:
            score += 25
        elif perfect_ratio > 0.7:
            score += 15
        if 0 < summary.easy <= 3:
            score += 15
        score -= impossible_ratio * 40

        if perfect_ratio > 0.6 and impossible_ratio == 0:
            diversity: Diversity = "optimal"
        elif impossible_ratio > 0.3:
            diversity = "too_hard"
        elif summary.easy / total > 0.7:
            diversity = "too_easy"
        else:
            diversity = "balanced"
        return FeedbackDiversity(diversity, int(clamp(round_int(score), 0, 100)))

    def predicted_weekly_volume(self, week_number: int, test_max: int) -> int:
        """Total reps of the (non-beginner) plan for a week."""
        return sum(
            self._day_plan(test_max, name, week_number).volume for name in DAILY_ROTATION
        )
