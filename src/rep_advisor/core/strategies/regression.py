"""
Adaptive polynomial regression.

Fits a quadratic to the (week, test_max) trajectory and plans around the
predicted next result. Volume is scaled by how the real progression compares
with the model's expectation and reduced when sessions keep failing.
"""

from dataclasses import dataclass
from typing import Literal, Sequence

from ..config import (
    DEFAULT_TEST_MAX,
    MAX_SETS,
    MIN_REPS,
    MIN_SETS,
    REGRESSION_FAILURE_TIERS,
    REGRESSION_FAST_GROWTH,
    REGRESSION_FLAT_MODEL_EPSILON,
    REGRESSION_MAX_FACTOR,
    REGRESSION_MAX_WEEKLY_GROWTH,
    REGRESSION_MIN_FACTOR,
    REGRESSION_MIN_RATIO,
    REGRESSION_REP_RATIO,
    REGRESSION_SINGLE_POINT_GROWTH,
    REGRESSION_VOLUME_FACTOR,
    TRAINING_DAYS,
    max_reps_for,
)
from ..metrics import (
    FitModel,
    Point,
    calculate_rest,
    clamp,
    confidence_interval_95,
    evaluate_polynomial,
    failure_rate,
    fit_polynomial,
    progression_rate,
    round_half_up,
    round_int,
)
from ..models import DailyPlan, WeekRecord
from .base import Strategy, StrategyInfo, beginner_plan, clamp_rest, is_beginner

ModelQuality = Literal["insufficient", "linear_only", "excellent", "good", "fair", "poor"]

MIN_POLYNOMIAL_POINTS = 3

# Relative standard error thresholds, checked in order
QUALITY_TIERS: tuple[tuple[float, ModelQuality], ...] = (
    (0.05, "excellent"),
    (0.10, "good"),
    (0.20, "fair"),
)

ADJUSTMENT_INTERPRETATIONS: tuple[tuple[float, str], ...] = (
    (1.3, "Progressing faster than predicted. Volume increased."),
    (0.9, "Progression in line with predictions."),
    (0.6, "Progressing slower than predicted. Volume reduced."),
)


@dataclass(frozen=True)
class RegressionModel:
    model: FitModel | None  # None without any data point
    points: list[Point]


@dataclass(frozen=True)
class PredictionPoint:
    week: int
    predicted: float
    lower: float
    upper: float


@dataclass(frozen=True)
class ModelQualityReport:
    quality: ModelQuality
    std_error: float
    point_count: int
    confidence: int  # 0–100
    equation: str


@dataclass(frozen=True)
class AdjustmentReport:
    factor: float
    interpretation: str
    failure_rate: float  # Percent
    failure_label: str


def extract_points(history: Sequence[WeekRecord]) -> list[Point]:
    """(week_number, test_max) of every week with a result, sorted by week."""
    points = [
        (float(w.week_number), float(w.test_max))
        for w in history
        if w.test_max is not None and w.test_max > 0
    ]
    points.sort(key=lambda p: p[0])
    return points


def failure_multiplier(rate: float) -> tuple[float, str]:
    """Volume multiplier and label for a failure rate."""
    labels = ("Significant reduction", "Moderate reduction")
    for (threshold, multiplier), label in zip(REGRESSION_FAILURE_TIERS, labels):
        if rate > threshold:
            return multiplier, label
    return 1.0, "No reduction"


def format_equation(model: FitModel) -> str:
    """Human-readable model equation, e.g. 'y = -0.1x² +2.5x +8.0'."""
    b = round_half_up(model.b, 2)
    c = round_half_up(model.c, 1)
    sign_b = "+" if b >= 0 else ""
    sign_c = "+" if c >= 0 else ""
    if model.kind == "linear":
        return f"y = {b}x {sign_c}{c}"
    a = round_half_up(model.a, 3)
    return f"y = {a}x² {sign_b}{b}x {sign_c}{c}"


class RegressionStrategy(Strategy):
    """Personal trajectory model fitted on the whole history."""

    info = StrategyInfo(
        name="regression",
        label="Adaptive regression",
        description=(
            "Personal model built from your full history. Predicts the "
            "progression trajectory with a polynomial fit and adjusts "
            "volume to your failure patterns."
        ),
    )

    def predict(self, week_number: int, history: Sequence[WeekRecord]) -> int:
        """
        Quadratic fit evaluated at week_number, kept within
        [0.5 × last, last × 1.30^Δweeks].
        """
        if not history:
            return 1
        points = extract_points(history)
        if not points:
            return 1
        if len(points) == 1:
            return max(1, round_int(points[0][1] * (1 + REGRESSION_SINGLE_POINT_GROWTH)))

        model = fit_polynomial(points)
        predicted = self._safeguard(evaluate_polynomial(model, week_number), week_number, points)
        return max(1, round_int(predicted))

    def plan(
        self, week_number: int, test_max: int, history: Sequence[WeekRecord]
    ) -> list[DailyPlan]:
        if is_beginner(test_max):
            return beginner_plan()

        predicted_next = self.predict(week_number + 1, history)
        factor = self.adjust_factor(week_number, test_max, predicted_next, history)
        multiplier, _ = failure_multiplier(failure_rate(history))
        volume = predicted_next * REGRESSION_VOLUME_FACTOR * factor * multiplier

        reps = int(clamp(round_int(predicted_next * REGRESSION_REP_RATIO), MIN_REPS, max_reps_for(test_max)))
        sets = int(clamp(round_int(volume / reps / TRAINING_DAYS), MIN_SETS, MAX_SETS))
        rest = clamp_rest(calculate_rest(reps, 60, 15, 3, 1))

        return [DailyPlan(sets, reps, rest, "ADAPTIVE") for _ in range(TRAINING_DAYS)]

    def adjust_factor(
        self,
        week_number: int,
        test_max: int,
        predicted_next: int,
        history: Sequence[WeekRecord],
    ) -> float:
        """
        Ratio of real to predicted progression, clamped to [0.5, 2.0].

        A flat prediction (|rate| < 0.1%) cannot be divided by; the factor
        is then 1.5 for real growth above 5%, 0.7 for a real drop beyond 5%,
        otherwise 1.0. Fewer than two weeks of history gives 1.0.
        """
        if len(history) < 2:
            return 1.0

        real_rate = progression_rate(self._previous_test_max(week_number, history), test_max)
        model_rate = progression_rate(test_max, predicted_next)

        if abs(model_rate) < REGRESSION_FLAT_MODEL_EPSILON:
            if real_rate > REGRESSION_FAST_GROWTH:
                return 1.5
            if real_rate < -REGRESSION_FAST_GROWTH:
                return 0.7
            return 1.0
        return clamp(real_rate / model_rate, REGRESSION_MIN_FACTOR, REGRESSION_MAX_FACTOR)

    def _previous_test_max(self, week_number: int, history: Sequence[WeekRecord]) -> int:
        # Latest result from a week before the current one
        for week in reversed(history):
            if week.week_number < week_number and week.test_max is not None and week.test_max > 0:
                return week.test_max
        return DEFAULT_TEST_MAX

    def _safeguard(self, predicted: float, week_number: int, points: Sequence[Point]) -> float:
        last_week, last_max = points[-1]
        weeks_delta = max(1, week_number - last_week)
        lower = last_max * REGRESSION_MIN_RATIO
        upper = last_max * (1 + REGRESSION_MAX_WEEKLY_GROWTH) ** weeks_delta
        return clamp(predicted, lower, upper)

    # ------------------------------------------------------------------
    # Analysis helpers
    # ------------------------------------------------------------------

    def model(self, history: Sequence[WeekRecord]) -> RegressionModel:
        points = extract_points(history)
        if not points:
            return RegressionModel(None, [])
        return RegressionModel(fit_polynomial(points), points)

    def prediction_curve(
        self, history: Sequence[WeekRecord], from_week: int, to_week: int
    ) -> list[PredictionPoint]:
        """Safeguarded predictions with a 95% band, one point per week."""
        points = extract_points(history)
        if not points:
            return []
        model = fit_polynomial(points)
        ci = confidence_interval_95(model)
        curve = []
        for week in range(from_week, to_week + 1):
            predicted = self._safeguard(evaluate_polynomial(model, week), week, points)
            curve.append(
                PredictionPoint(
                    week=week,
                    predicted=round_half_up(predicted, 1),
                    lower=round_half_up(max(1.0, predicted - ci), 1),
                    upper=round_half_up(predicted + ci, 1),
                )
            )
        return curve

    def analyze_model_quality(self, history: Sequence[WeekRecord]) -> ModelQualityReport:
        """
        Grade the fit by its standard error relative to the last result.

        confidence = clamp(100 − 200 × relative error, 0, 100).
        """
        points = extract_points(history)
        if len(points) < 2:
            return ModelQualityReport("insufficient", 0.0, len(points), 0, "Not enough data")

        model = fit_polynomial(points)
        last_max = points[-1][1]
        relative_error = model.std_error / last_max if last_max > 0 else 1.0
        confidence = int(clamp(round_int(100 - relative_error * 200), 0, 100))

        quality: ModelQuality = "poor"
        if len(points) < MIN_POLYNOMIAL_POINTS:
            quality = "linear_only"
        else:
            for threshold, label in QUALITY_TIERS:
                if relative_error < threshold:
                    quality = label
                    break

        return ModelQualityReport(
            quality=quality,
            std_error=round_half_up(model.std_error, 2),
            point_count=len(points),
            confidence=confidence,
            equation=format_equation(model),
        )

    def analyze_adjustment(self, test_max: int, history: Sequence[WeekRecord]) -> AdjustmentReport:
        """Explain the volume adjustment the next plan would apply."""
        next_week = (history[-1].week_number if history else 1) + 1
        predicted_next = self.predict(next_week, history)
        factor = self.adjust_factor(next_week, test_max, predicted_next, history)
        rate = failure_rate(history)
        _, failure_label = failure_multiplier(rate)

        interpretation = "Regression detected. Volume strongly reduced."
        for threshold, text in ADJUSTMENT_INTERPRETATIONS:
            if factor > threshold:
                interpretation = text
                break

        return AdjustmentReport(
            factor=round_half_up(factor, 2),
            interpretation=interpretation,
            failure_rate=round_half_up(rate * 100, 1),
            failure_label=failure_label,
        )

    def predicted_weekly_volume(
        self, week_number: int, test_max: int, history: Sequence[WeekRecord]
    ) -> int:
        predicted_next = self.predict(week_number + 1, history)
        factor = self.adjust_factor(week_number, test_max, predicted_next, history)
        multiplier, _ = failure_multiplier(failure_rate(history))
        return round_int(predicted_next * REGRESSION_VOLUME_FACTOR * factor * multiplier)
