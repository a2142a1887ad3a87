"""
Comparative scoring of progression strategies.

Each eligible strategy gets three 0–100 scores:

- precision: how close its past capacity predictions were, recent weeks
  weighted more (0.9^age)
- feedback: share of "perfect" minus a penalty for "impossible" sessions
  during the weeks it was selected
- trend: direction of the last three capacity results (same for all)

composite = 0.5·precision + 0.3·feedback + 0.2·trend. The highest composite
wins; ties keep the registry declaration order.
"""

from dataclasses import dataclass
from typing import Mapping, Sequence

from .config import (
    CLEAR_LEAD_MARGIN,
    DEFAULT_ALGORITHM,
    IMPOSSIBLE_PENALTY,
    NEUTRAL_SCORE,
    PRECISION_PENALTY,
    RECENCY_DECAY,
    RELIABLE_MIN_ELIGIBLE,
    RELIABLE_MIN_WEEKS,
    SLIGHT_LEAD_MARGIN,
    TREND_WINDOW,
    ScoreWeights,
)
from .metrics import (
    clamp,
    detect_trend,
    exponential_weight,
    mean,
    recent_test_maxes,
    round_half_up,
    week_feedback,
)
from .models import AlgorithmScore, FeedbackSummary, Reliability, ScoringEntry, WeekRecord

MIN_TREND_POINTS = 2

DIMENSION_LABELS: tuple[tuple[str, str], ...] = (
    ("precision_score", "precision"),
    ("feedback_score", "feedback"),
    ("trend_score", "trend"),
)


@dataclass(frozen=True)
class Selection:
    name: str
    score: float
    reason: str


@dataclass(frozen=True)
class Comparison:
    winner: str
    gap: float
    precision_gap: float
    feedback_gap: float
    trend_gap: float
    reason: str


@dataclass(frozen=True)
class ScoringOverview:
    best: str | None
    worst: str | None
    average: float
    spread: float
    ranking: list[tuple[str, float]]


def _round1(value: float) -> float:
    return round_half_up(value, 1)


class AlgorithmScorer:
    """Scores strategies against the user's history and picks the best."""

    def __init__(self, weights: ScoreWeights = ScoreWeights()):
        self.weights = weights

    # ------------------------------------------------------------------
    # Precision
    # ------------------------------------------------------------------

    def single_precision_score(self, predicted: float, actual: float) -> float:
        """100 − 200 × relative error, clamped to [0, 100]."""
        if actual <= 0:
            return NEUTRAL_SCORE
        error = abs(predicted - actual) / actual
        return clamp(_round1(100 - error * PRECISION_PENALTY), 0.0, 100.0)

    def precision_score(
        self,
        scoring_history: Sequence[ScoringEntry],
        name: str,
        week_number: int,
        actual_test_max: int | None = None,
        live_prediction: float | None = None,
    ) -> float:
        """
        Recency-weighted precision of a strategy's capacity predictions.

        Every past entry with both a prediction and a known outcome counts.
        The prediction made for the current week is scored against the
        result just entered when both are given.

        Args:
            scoring_history: Past scoring entries
            name: Strategy name
            week_number: Current week (reference for recency weights)
            actual_test_max: This week's capacity result
            live_prediction: The strategy's prediction for this week

        Returns:
            Score in [0, 100]; neutral 50 without any scored prediction
        """
        samples: list[tuple[float, float, int]] = []  # (predicted, actual, week)
        for entry in scoring_history:
            outcome = entry.per_algorithm.get(name)
            if outcome is None or outcome.prediction is None:
                continue
            actual = entry.test_max or outcome.actual_outcome
            if actual is not None and actual > 0:
                samples.append((outcome.prediction, actual, entry.week_number))

        if live_prediction is not None and actual_test_max is not None and actual_test_max > 0:
            samples.append((live_prediction, actual_test_max, week_number))

        if not samples:
            return NEUTRAL_SCORE

        weighted = 0.0
        total_weight = 0.0
        for predicted, actual, week in samples:
            weight = exponential_weight(week_number, week, RECENCY_DECAY)
            weighted += self.single_precision_score(predicted, actual) * weight
            total_weight += weight
        if total_weight <= 0:
            return NEUTRAL_SCORE
        return clamp(_round1(weighted / total_weight), 0.0, 100.0)

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    def single_feedback_score(self, summary: FeedbackSummary) -> float | None:
        """perfect% × 100 − impossible% × 150; None for a week without feedback."""
        total = summary.total
        if total == 0:
            return None
        score = summary.perfect / total * 100 - summary.impossible / total * IMPOSSIBLE_PENALTY
        return clamp(_round1(score), 0.0, 100.0)

    def feedback_score(self, history: Sequence[WeekRecord], name: str) -> float:
        """Mean weekly feedback score over the weeks where name was selected."""
        scores = []
        for week in history:
            if week.selected_algorithm != name:
                continue
            score = self.single_feedback_score(week_feedback(week))
            if score is not None:
                scores.append(score)
        if not scores:
            return NEUTRAL_SCORE
        return clamp(_round1(mean(scores)), 0.0, 100.0)

    # ------------------------------------------------------------------
    # Trend
    # ------------------------------------------------------------------

    def trend_score(self, history: Sequence[WeekRecord]) -> float:
        """
        Score the direction of the last three capacity results.

        increasing → 80 + average growth × 200, within [80, 100]
        stagnant   → 40
        decreasing → 20 − average decline × 100, within [0, 20]
        """
        if len(history) < MIN_TREND_POINTS:
            return NEUTRAL_SCORE
        maxes = recent_test_maxes(history, TREND_WINDOW)
        if len(maxes) < MIN_TREND_POINTS:
            return NEUTRAL_SCORE

        trend = detect_trend(maxes)
        first, last = maxes[0], maxes[-1]
        if trend == "increasing":
            growth = (last - first) / first / len(maxes)
            return clamp(_round1(80 + growth * 200), 80.0, 100.0)
        if trend == "stagnant":
            return 40.0
        if trend == "decreasing":
            decline = (first - last) / first / len(maxes)
            return clamp(_round1(20 - decline * 100), 0.0, 20.0)
        return NEUTRAL_SCORE

    # ------------------------------------------------------------------
    # Composite & selection
    # ------------------------------------------------------------------

    def composite_score(self, precision: float, feedback: float, trend: float) -> float:
        composite = (
            self.weights.precision * precision
            + self.weights.feedback * feedback
            + self.weights.trend * trend
        )
        return clamp(_round1(composite), 0.0, 100.0)

    def score_all(
        self,
        history: Sequence[WeekRecord],
        scoring_history: Sequence[ScoringEntry],
        predictions: Mapping[str, int | None],
        week_number: int,
        test_max: int | None,
        eligible: Sequence[str],
    ) -> dict[str, AlgorithmScore]:
        """
        Score every eligible strategy.

        Returns:
            Scores keyed by name, in the order of `eligible`
        """
        trend = self.trend_score(history)
        scores: dict[str, AlgorithmScore] = {}
        for name in eligible:
            prediction = predictions.get(name)
            precision = self.precision_score(
                scoring_history, name, week_number, test_max, prediction
            )
            feedback = self.feedback_score(history, name)
            scores[name] = AlgorithmScore(
                prediction=prediction,
                precision_score=precision,
                feedback_score=feedback,
                trend_score=trend,
                composite_score=self.composite_score(precision, feedback, trend),
            )
        return scores

    def select_best(self, scores: Mapping[str, AlgorithmScore]) -> Selection:
        """
        Pick the highest composite score.

        Only a strictly higher score displaces an earlier candidate, so ties
        resolve to the first strategy in declaration order.
        """
        if not scores:
            return Selection(
                DEFAULT_ALGORITHM,
                NEUTRAL_SCORE,
                "No scores available. Linear progression by default.",
            )
        ranked = sorted(scores.items(), key=lambda item: item[1].composite_score, reverse=True)
        best_name, best = ranked[0]
        return Selection(best_name, best.composite_score, self._reason(best, ranked))

    def _reason(self, best: AlgorithmScore, ranked: list[tuple[str, AlgorithmScore]]) -> str:
        parts = [f"Composite score: {best.composite_score}/100"]

        # Later dimension wins an exact tie
        dimension, dimension_score = DIMENSION_LABELS[0][1], best.precision_score
        for attr, label in DIMENSION_LABELS[1:]:
            value = getattr(best, attr)
            if value >= dimension_score:
                dimension, dimension_score = label, value
        parts.append(f"Strongest on {dimension} ({dimension_score}/100)")

        if len(ranked) > 1:
            gap = _round1(best.composite_score - ranked[1][1].composite_score)
            if gap > CLEAR_LEAD_MARGIN:
                parts.append(f"Clear lead (+{gap} pts)")
            elif gap > SLIGHT_LEAD_MARGIN:
                parts.append(f"Slight lead (+{gap} pts)")
            else:
                parts.append(f"Tight lead (+{gap} pts)")

        if best.prediction is not None:
            parts.append(f"Prediction: {best.prediction} reps")
        return ". ".join(parts) + "."

    # ------------------------------------------------------------------
    # Reliability & diagnostics
    # ------------------------------------------------------------------

    def assess_reliability(
        self, scoring_history: Sequence[ScoringEntry], eligible: Sequence[str]
    ) -> Reliability:
        """
        Judge how trustworthy the selection is.

        Needs at least 4 scored weeks and 3 eligible strategies to be
        reliable; 2–3 weeks with enough candidates is "improving".
        """
        points = len(scoring_history)
        if points == 0:
            return Reliability("unreliable", "No scoring data yet. First week.", 0)
        if points < 2:
            return Reliability(
                "unreliable", "Only 1 week of data. Scoring is not reliable yet.", points
            )
        if len(eligible) < RELIABLE_MIN_ELIGIBLE:
            return Reliability(
                "unreliable",
                f"Only {len(eligible)} eligible algorithms. Limited comparison.",
                points,
            )
        if points >= RELIABLE_MIN_WEEKS:
            return Reliability("reliable", "Enough data for reliable scoring.", points)
        return Reliability("improving", f"{points} weeks of data. Scoring is improving.", points)

    def compare(self, scores: Mapping[str, AlgorithmScore], first: str, second: str) -> Comparison:
        """Head-to-head comparison of two scored strategies."""
        a = scores.get(first)
        b = scores.get(second)
        if a is None or b is None:
            winner = first if a is not None else second
            return Comparison(winner, 0.0, 0.0, 0.0, 0.0, "One of the algorithms has no score.")

        winner = first if a.composite_score >= b.composite_score else second
        gap = _round1(abs(a.composite_score - b.composite_score))
        if gap < SLIGHT_LEAD_MARGIN:
            reason = "Algorithms are very close; the choice could change next week."
        elif gap < CLEAR_LEAD_MARGIN:
            reason = f"{winner} has a moderate lead."
        else:
            reason = f"{winner} is clearly better."
        return Comparison(
            winner=winner,
            gap=gap,
            precision_gap=_round1(a.precision_score - b.precision_score),
            feedback_gap=_round1(a.feedback_score - b.feedback_score),
            trend_gap=_round1(a.trend_score - b.trend_score),
            reason=reason,
        )

    def overview(self, scores: Mapping[str, AlgorithmScore]) -> ScoringOverview:
        """Ranking, average and spread of composite scores."""
        if not scores:
            return ScoringOverview(None, None, NEUTRAL_SCORE, 0.0, [])
        ranking = sorted(
            ((name, s.composite_score) for name, s in scores.items()),
            key=lambda item: item[1],
            reverse=True,
        )
        composites = [value for _, value in ranking]
        spread = composites[0] - composites[-1] if len(composites) > 1 else 0.0
        return ScoringOverview(
            best=ranking[0][0],
            worst=ranking[-1][0],
            average=_round1(mean(composites)),
            spread=_round1(spread),
            ranking=ranking,
        )
