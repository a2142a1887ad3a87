"""
Pure numeric and history metric functions.

Rounding, descriptive statistics, least-squares fits, trend detection and
the volume/rest helpers shared by every progression strategy. All functions
are pure; none of them mutate their arguments.

Rounding rule: halves always round up (2.5 → 3, -2.5 → -2). Python's
built-in round() uses banker's rounding and is never used for model values.
"""

import math
from dataclasses import dataclass
from typing import Literal, Sequence

from .config import (
    CI95_Z,
    DEFAULT_TEST_MAX,
    MAX_SETS,
    MIN_REPS,
    MIN_SETS,
    SINGULAR_EPSILON,
    STAGNATION_THRESHOLD,
    max_reps_for,
)
from .models import FeedbackSummary, SessionRecord, WeekRecord

Trend = Literal["increasing", "decreasing", "stagnant", "insufficient"]
Point = tuple[float, float]


@dataclass(frozen=True)
class FitModel:
    """
    Quadratic model y = a·x² + b·x + c.

    kind is "linear" when a is structurally zero (too few points or a
    singular normal-equation system).
    """

    a: float
    b: float
    c: float
    std_error: float
    kind: Literal["linear", "polynomial"]


# =============================================================================
# ROUNDING & BOUNDS
# =============================================================================


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value into [lo, hi]; lo wins when lo > hi."""
    return max(lo, min(hi, value))


def round_half_up(value: float, decimals: int = 0) -> float:
    """
    Round to N decimals with halves rounded up.

    Args:
        value: Value to round
        decimals: Number of decimals to keep

    Returns:
        Rounded value (float)
    """
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return int(math.floor(value + 0.5))


def ceil_to(value: float, decimals: int = 0) -> float:
    factor = 10 ** decimals
    return math.ceil(value * factor) / factor


def floor_to(value: float, decimals: int = 0) -> float:
    factor = 10 ** decimals
    return math.floor(value * factor) / factor


# =============================================================================
# DESCRIPTIVE STATISTICS
# =============================================================================


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def variance(values: Sequence[float]) -> float:
    """Population variance; 0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    avg = mean(values)
    return sum((v - avg) ** 2 for v in values) / len(values)


def standard_deviation(values: Sequence[float]) -> float:
    return math.sqrt(variance(values))


def median(values: Sequence[float]) -> float:
    """Median; 0 for an empty sequence."""
    if not values:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def weighted_mean(values: Sequence[float], weights: Sequence[float]) -> float:
    """
    Weighted arithmetic mean.

    Args:
        values: Values to average
        weights: One non-negative weight per value

    Returns:
        Weighted mean, 0 for empty input or zero total weight

    Raises:
        ValueError: If values and weights differ in length
    """
    if not values:
        return 0.0
    if len(values) != len(weights):
        raise ValueError(
            f"weighted_mean: values ({len(values)}) and weights ({len(weights)}) "
            "must have the same length"
        )
    total_weight = sum(weights)
    if total_weight <= 0:
        return 0.0
    return sum(v * w for v, w in zip(values, weights)) / total_weight


# =============================================================================
# LEAST SQUARES
# =============================================================================


def determinant_2x2(m: Sequence[Sequence[float]]) -> float:
    return m[0][0] * m[1][1] - m[0][1] * m[1][0]


def determinant_3x3(m: Sequence[Sequence[float]]) -> float:
    return (
        m[0][0] * (m[1][1] * m[2][2] - m[1][2] * m[2][1])
        - m[0][1] * (m[1][0] * m[2][2] - m[1][2] * m[2][0])
        + m[0][2] * (m[1][0] * m[2][1] - m[1][1] * m[2][0])
    )


def fit_linear(points: Sequence[Point]) -> FitModel:
    """
    Ordinary least-squares line y = b·x + c.

    Degenerate inputs never raise:
    no points → all zeros; one point → flat line at its y;
    all x equal → flat line at the mean y.

    Args:
        points: (x, y) pairs

    Returns:
        FitModel with a = 0 and kind "linear"
    """
    n = len(points)
    if n == 0:
        return FitModel(0.0, 0.0, 0.0, 0.0, "linear")
    if n == 1:
        return FitModel(0.0, 0.0, float(points[0][1]), 0.0, "linear")

    sum_x = sum(x for x, _ in points)
    sum_y = sum(y for _, y in points)
    sum_xy = sum(x * y for x, y in points)
    sum_x2 = sum(x * x for x, _ in points)

    denom = n * sum_x2 - sum_x * sum_x
    if abs(denom) < SINGULAR_EPSILON:
        return FitModel(0.0, 0.0, sum_y / n, 0.0, "linear")

    b = (n * sum_xy - sum_x * sum_y) / denom
    c = (sum_y - b * sum_x) / n

    residuals = sum((y - (b * x + c)) ** 2 for x, y in points)
    std_error = math.sqrt(residuals / max(1, n - 2))
    return FitModel(0.0, b, c, std_error, "linear")


def fit_polynomial(points: Sequence[Point]) -> FitModel:
    """
    Second-order least-squares fit y = a·x² + b·x + c.

    Solves the 3×3 normal equations with Cramer's rule. Falls back to
    fit_linear() with fewer than 3 points or a near-singular system.

    Args:
        points: (x, y) pairs

    Returns:
        FitModel of kind "polynomial" (or "linear" on fallback)
    """
    n = len(points)
    if n < 3:
        return fit_linear(points)

    sum_x = sum_x2 = sum_x3 = sum_x4 = 0.0
    sum_y = sum_xy = sum_x2y = 0.0
    for x, y in points:
        x2 = x * x
        sum_x += x
        sum_x2 += x2
        sum_x3 += x2 * x
        sum_x4 += x2 * x2
        sum_y += y
        sum_xy += x * y
        sum_x2y += x2 * y

    m = [
        [sum_x4, sum_x3, sum_x2],
        [sum_x3, sum_x2, sum_x],
        [sum_x2, sum_x, float(n)],
    ]
    v = [sum_x2y, sum_xy, sum_y]

    det = determinant_3x3(m)
    if abs(det) < SINGULAR_EPSILON:
        return fit_linear(points)

    def _replace_column(col: int) -> list[list[float]]:
        return [[v[r] if c == col else m[r][c] for c in range(3)] for r in range(3)]

    a = determinant_3x3(_replace_column(0)) / det
    b = determinant_3x3(_replace_column(1)) / det
    c = determinant_3x3(_replace_column(2)) / det

    residuals = sum((y - (a * x * x + b * x + c)) ** 2 for x, y in points)
    std_error = math.sqrt(residuals / max(1, n - 3))
    return FitModel(a, b, c, std_error, "polynomial")


def evaluate_polynomial(model: FitModel, x: float) -> float:
    return model.a * x * x + model.b * x + model.c


def confidence_interval_95(model: FitModel) -> float:
    """Half-width of the 95% prediction band (1.96 × standard error)."""
    return CI95_Z * model.std_error


# =============================================================================
# PROGRESSION & TREND
# =============================================================================


def progression_rate(previous: float | None, current: float) -> float:
    """Relative change from previous to current; 0 when previous is 0 or None."""
    if not previous:
        return 0.0
    return (current - previous) / previous


def average_progression_rate(values: Sequence[float]) -> float:
    """Mean of consecutive relative changes; 0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    rates = [progression_rate(values[i - 1], values[i]) for i in range(1, len(values))]
    return mean(rates)


def detect_trend(values: Sequence[float]) -> Trend:
    """
    Classify a short series of capacity results.

    Stagnation (< 5% change end to end) is checked first, then strict
    monotonicity; a non-monotone series falls back to comparing endpoints.
    """
    if len(values) < 2:
        return "insufficient"
    first, last = values[0], values[-1]
    if first == 0:
        return "insufficient"

    if abs(last - first) / first < STAGNATION_THRESHOLD:
        return "stagnant"

    increasing = all(values[i] >= values[i - 1] for i in range(1, len(values)))
    decreasing = all(values[i] <= values[i - 1] for i in range(1, len(values)))
    if increasing:
        return "increasing"
    if decreasing:
        return "decreasing"
    return "increasing" if last > first else "decreasing"


def exponential_weight(current_week: int, target_week: int, decay: float = 0.9) -> float:
    """Recency weight decay^|current − target|."""
    return decay ** abs(current_week - target_week)


# =============================================================================
# PRESCRIPTION HELPERS
# =============================================================================


def calculate_rest(
    reps: int,
    base_rest: int = 60,
    threshold: int = 20,
    add_per_chunk: int = 10,
    chunk_size: int = 5,
) -> int:
    """
    Rest interval that grows stepwise with reps per set.

    rest = base                                          if reps ≤ threshold
    rest = base + floor((reps − threshold) / chunk) · add  otherwise

    Args:
        reps: Reps per set
        base_rest: Rest in seconds at or below the threshold
        threshold: Reps above which rest starts growing
        add_per_chunk: Seconds added per full chunk of extra reps
        chunk_size: Reps per chunk

    Returns:
        Rest in seconds (unclamped)
    """
    if reps <= threshold:
        return base_rest
    return base_rest + ((reps - threshold) // chunk_size) * add_per_chunk


def distribute_volume(total_volume: float, ratios: Sequence[float]) -> list[int]:
    """
    Split a weekly volume across days by ratio.

    Each share is rounded; the rounding residual goes to the largest share
    (the first one on ties) so the result sums to round(total_volume).

    Args:
        total_volume: Volume to split
        ratios: Relative weight of each day (need not sum to 1)

    Returns:
        Integer volume per day; [] for no ratios, zeros for zero-sum ratios
    """
    if not ratios:
        return []
    total_ratio = sum(ratios)
    if total_ratio == 0:
        return [0 for _ in ratios]

    distributed = [round_int(total_volume * r / total_ratio) for r in ratios]
    diff = round_int(total_volume) - sum(distributed)
    if diff != 0:
        max_index = distributed.index(max(distributed))
        distributed[max_index] += diff
    return distributed


def volume_to_sets_reps(target_volume: float, test_max: int) -> tuple[int, int]:
    """
    Convert a rep volume into a (sets, reps) pair.

    Volume has a floor of 6. Sets start at 3/4/5 for volumes below 30,
    below 60 and above; reps follow and are clamped to [3, ceil(1.2 × test_max)].
    If the clamped pair misses the volume, sets are recomputed from reps.

    Args:
        target_volume: Desired total reps for the day
        test_max: Current capacity test result

    Returns:
        (sets, reps)
    """
    volume = max(6, target_volume)
    if volume < 30:
        sets = 3
    elif volume < 60:
        sets = 4
    else:
        sets = 5

    reps = int(clamp(round_int(volume / sets), MIN_REPS, max_reps_for(test_max)))
    if reps * sets != volume:
        sets = int(clamp(round_int(volume / reps), MIN_SETS, MAX_SETS))
    return sets, reps


# =============================================================================
# HISTORY HELPERS
# =============================================================================


def valid_test_maxes(history: Sequence[WeekRecord]) -> list[int]:
    """Capacity results of the weeks that have one, in history order."""
    return [w.test_max for w in history if w.test_max is not None and w.test_max > 0]


def latest_test_max(history: Sequence[WeekRecord], default: int = DEFAULT_TEST_MAX) -> int:
    """Most recent valid capacity result, or default."""
    maxes = valid_test_maxes(history)
    return maxes[-1] if maxes else default


def first_test_max(history: Sequence[WeekRecord], default: int = DEFAULT_TEST_MAX) -> int:
    """Earliest valid capacity result, or default."""
    maxes = valid_test_maxes(history)
    return maxes[0] if maxes else default


def recent_test_maxes(history: Sequence[WeekRecord], count: int) -> list[int]:
    """Last `count` valid capacity results, oldest first."""
    return valid_test_maxes(history)[-count:]


def summarize_feedback(sessions: Sequence[SessionRecord]) -> FeedbackSummary:
    """
    Aggregate the feedback of completed training sessions into a summary.

    Capacity-test sessions are ignored. avg_reserve is the mean of the
    reported reserve estimates (one decimal), or None when none were given.
    """
    training = [s for s in sessions if s.session_type != "test" and s.status == "completed"]
    counts = {"easy": 0, "perfect": 0, "impossible": 0}
    reserves: list[float] = []
    for session in training:
        if session.feedback is not None:
            counts[session.feedback] += 1
        if session.reserve_estimate is not None:
            reserves.append(session.reserve_estimate)

    return FeedbackSummary(
        easy=counts["easy"],
        perfect=counts["perfect"],
        impossible=counts["impossible"],
        avg_reserve=round_half_up(mean(reserves), 1) if reserves else None,
        volume_target=sum(s.planned_volume for s in training),
        volume_actual=sum(s.actual_reps or 0 for s in training),
    )


def week_feedback(week: WeekRecord) -> FeedbackSummary:
    """Stored summary of a week, derived from its sessions when absent."""
    if week.feedback_summary is not None:
        return week.feedback_summary
    return summarize_feedback(week.sessions)


def had_impossible_session(week: WeekRecord) -> bool:
    """True when any session of the week was reported impossible."""
    if week.feedback_summary is not None and week.feedback_summary.impossible > 0:
        return True
    return any(s.feedback == "impossible" for s in week.sessions)


def failure_rate(history: Sequence[WeekRecord]) -> float:
    """
    Share of training sessions reported impossible over all history.

    Stored weekly summaries are used when present; otherwise every completed
    training session counts, and only those reported impossible fail.

    Returns:
        Failure rate in [0, 1]; 0 when no feedback exists
    """
    total = 0
    impossible = 0
    for week in history:
        if week.feedback_summary is not None:
            total += week.feedback_summary.total
            impossible += week.feedback_summary.impossible
            continue
        for session in week.sessions:
            if session.status == "completed" and session.session_type != "test":
                total += 1
                if session.feedback == "impossible":
                    impossible += 1
    return impossible / total if total > 0 else 0.0
