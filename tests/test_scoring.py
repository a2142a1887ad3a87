"""
Unit tests for the comparative scorer.

Covers the three score dimensions, the composite, selection with its
tie-break, the human-readable reason and the reliability assessment.
"""

import pytest

from rep_advisor.core.config import ScoreWeights
from rep_advisor.core.models import (
    AlgorithmOutcome,
    AlgorithmScore,
    FeedbackSummary,
    ScoringEntry,
    WeekRecord,
)
from rep_advisor.core.scoring import AlgorithmScorer

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _score(composite: float, precision=50.0, feedback=50.0, trend=50.0, prediction=None):
    return AlgorithmScore(
        prediction=prediction,
        precision_score=precision,
        feedback_score=feedback,
        trend_score=trend,
        composite_score=composite,
    )


def _entry(week: int, test_max: int | None = None, **predictions) -> ScoringEntry:
    return ScoringEntry(
        week_number=week,
        per_algorithm={
            name: AlgorithmOutcome(prediction=value, actual_outcome=test_max)
            for name, value in predictions.items()
        },
        test_max=test_max,
    )


def _maxes(*values: int) -> list[WeekRecord]:
    return [WeekRecord(i + 1, v) for i, v in enumerate(values)]


# ---------------------------------------------------------------------------
# Precision
# ---------------------------------------------------------------------------


class TestPrecision:
    def test_single_precision_score(self):
        scorer = AlgorithmScorer()
        assert scorer.single_precision_score(10, 10) == 100.0
        assert scorer.single_precision_score(12, 10) == pytest.approx(60.0)
        assert scorer.single_precision_score(8, 10) == pytest.approx(60.0)
        assert scorer.single_precision_score(20, 10) == 0.0
        assert scorer.single_precision_score(5, 0) == 50.0

    def test_neutral_without_data(self):
        assert AlgorithmScorer().precision_score([], "linear", 3) == 50.0

    def test_recency_weighted(self):
        scorer = AlgorithmScorer()
        history = [_entry(2, 10, linear=12)]
        # (60 × 0.9 + 100 × 1.0) / 1.9 = 81.05
        score = scorer.precision_score(history, "linear", 3, actual_test_max=10, live_prediction=10)
        assert score == pytest.approx(81.1)

    def test_entries_without_prediction_are_skipped(self):
        scorer = AlgorithmScorer()
        history = [_entry(2, 10, linear=None), _entry(3, 10, rir=10)]
        assert scorer.precision_score(history, "linear", 4) == 50.0

    def test_outcome_used_when_week_result_missing(self):
        entry = ScoringEntry(
            week_number=2,
            per_algorithm={"rir": AlgorithmOutcome(prediction=12, actual_outcome=10)},
        )
        assert AlgorithmScorer().precision_score([entry], "rir", 2) == pytest.approx(60.0)


# ---------------------------------------------------------------------------
# Feedback
# ---------------------------------------------------------------------------


class TestFeedback:
    def test_single_feedback_score(self):
        scorer = AlgorithmScorer()
        assert scorer.single_feedback_score(FeedbackSummary(perfect=4)) == 100.0
        # 75 − 25 × 1.5
        assert scorer.single_feedback_score(FeedbackSummary(perfect=3, impossible=1)) == pytest.approx(37.5)
        assert scorer.single_feedback_score(FeedbackSummary(impossible=2)) == 0.0
        assert scorer.single_feedback_score(FeedbackSummary()) is None

    def test_only_weeks_where_selected_count(self):
        history = [
            WeekRecord(1, 10, selected_algorithm="dup", feedback_summary=FeedbackSummary(perfect=3, impossible=1)),
            WeekRecord(2, 11, selected_algorithm="linear", feedback_summary=FeedbackSummary(impossible=4)),
            WeekRecord(3, 12, selected_algorithm="dup", feedback_summary=FeedbackSummary(perfect=4)),
        ]
        assert AlgorithmScorer().feedback_score(history, "dup") == pytest.approx(68.8)

    def test_neutral_when_never_selected(self):
        history = [WeekRecord(1, 10, feedback_summary=FeedbackSummary(perfect=4))]
        assert AlgorithmScorer().feedback_score(history, "rir") == 50.0

    def test_week_without_feedback_is_ignored(self):
        history = [WeekRecord(1, 10, selected_algorithm="rir")]
        assert AlgorithmScorer().feedback_score(history, "rir") == 50.0


# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------


class TestTrend:
    def test_increasing(self):
        # 80 + (2/10)/3 × 200
        assert AlgorithmScorer().trend_score(_maxes(10, 11, 12)) == pytest.approx(93.3)

    def test_stagnant(self):
        assert AlgorithmScorer().trend_score(_maxes(10, 10, 10)) == 40.0

    def test_decreasing(self):
        # 20 − (2/12)/3 × 100
        assert AlgorithmScorer().trend_score(_maxes(12, 11, 10)) == pytest.approx(14.4)

    def test_uses_last_three_results(self):
        assert AlgorithmScorer().trend_score(_maxes(20, 10, 10, 10)) == 40.0

    def test_neutral_with_short_history(self):
        assert AlgorithmScorer().trend_score(_maxes(10)) == 50.0
        assert AlgorithmScorer().trend_score([WeekRecord(1), WeekRecord(2, 10)]) == 50.0


# ---------------------------------------------------------------------------
# Composite & selection
# ---------------------------------------------------------------------------


class TestSelection:
    def test_composite_weights(self):
        assert AlgorithmScorer().composite_score(100, 50, 40) == pytest.approx(73.0)

    def test_custom_weights(self):
        scorer = AlgorithmScorer(ScoreWeights(precision=1.0, feedback=0.0, trend=0.0))
        assert scorer.composite_score(80, 0, 0) == pytest.approx(80.0)

    def test_score_all_keeps_eligible_order(self):
        scores = AlgorithmScorer().score_all(
            history=_maxes(10, 11),
            scoring_history=[],
            predictions={"linear": 12, "rir": 11},
            week_number=3,
            test_max=12,
            eligible=["linear", "dup", "rir"],
        )
        assert list(scores) == ["linear", "dup", "rir"]
        assert scores["linear"].precision_score == 100.0
        assert scores["dup"].prediction is None
        assert scores["dup"].precision_score == 50.0

    def test_highest_composite_wins(self):
        scores = {"linear": _score(60.0), "rir": _score(70.0)}
        assert AlgorithmScorer().select_best(scores).name == "rir"

    def test_tie_keeps_declaration_order(self):
        scores = {"linear": _score(60.0), "dup": _score(60.0), "rir": _score(60.0)}
        assert AlgorithmScorer().select_best(scores).name == "linear"

    def test_empty_scores_default_to_linear(self):
        selection = AlgorithmScorer().select_best({})
        assert selection.name == "linear"
        assert "by default" in selection.reason

    def test_reason(self):
        scores = {
            "linear": _score(73.0, precision=100.0, feedback=50.0, trend=40.0, prediction=11),
            "rir": _score(60.0),
        }
        assert AlgorithmScorer().select_best(scores).reason == (
            "Composite score: 73.0/100. Strongest on precision (100.0/100). "
            "Clear lead (+13.0 pts). Prediction: 11 reps."
        )

    def test_reason_dimension_tie_prefers_later(self):
        scores = {"linear": _score(50.0), "rir": _score(45.0)}
        reason = AlgorithmScorer().select_best(scores).reason
        assert "Strongest on trend (50.0/100)" in reason
        assert "Slight lead (+5.0 pts)" in reason

    def test_reason_tight_lead(self):
        scores = {"linear": _score(50.0), "rir": _score(49.0)}
        assert "Tight lead (+1.0 pts)" in AlgorithmScorer().select_best(scores).reason


# ---------------------------------------------------------------------------
# Reliability & diagnostics
# ---------------------------------------------------------------------------


class TestReliability:
    def test_no_data(self):
        result = AlgorithmScorer().assess_reliability([], ["linear"])
        assert result.status == "unreliable"
        assert result.data_points == 0

    def test_single_week(self):
        result = AlgorithmScorer().assess_reliability([_entry(1)], ["linear", "rir"])
        assert result.status == "unreliable"

    def test_few_eligible(self):
        entries = [_entry(1), _entry(2)]
        result = AlgorithmScorer().assess_reliability(entries, ["linear", "rir"])
        assert result.status == "unreliable"
        assert "Only 2 eligible" in result.reason

    def test_improving(self):
        entries = [_entry(1), _entry(2), _entry(3)]
        result = AlgorithmScorer().assess_reliability(entries, ["linear", "dup", "rir"])
        assert result.status == "improving"
        assert not result.reliable

    def test_reliable(self):
        entries = [_entry(i) for i in range(1, 5)]
        names = ["linear", "banister", "dup", "rir", "regression"]
        result = AlgorithmScorer().assess_reliability(entries, names)
        assert result.status == "reliable"
        assert result.reliable
        assert result.data_points == 4


class TestDiagnostics:
    def test_compare(self):
        scores = {
            "linear": _score(73.0, precision=100.0, feedback=50.0, trend=40.0),
            "rir": _score(60.0, precision=80.0, feedback=40.0, trend=40.0),
        }
        comparison = AlgorithmScorer().compare(scores, "rir", "linear")
        assert comparison.winner == "linear"
        assert comparison.gap == pytest.approx(13.0)
        assert comparison.precision_gap == pytest.approx(-20.0)
        assert comparison.trend_gap == 0.0
        assert comparison.reason == "linear is clearly better."

    def test_compare_missing_score(self):
        comparison = AlgorithmScorer().compare({"linear": _score(50.0)}, "linear", "dup")
        assert comparison.winner == "linear"
        assert comparison.gap == 0.0

    def test_overview(self):
        scores = {"linear": _score(60.0), "dup": _score(70.0), "rir": _score(50.0)}
        overview = AlgorithmScorer().overview(scores)
        assert overview.best == "dup"
        assert overview.worst == "rir"
        assert overview.average == pytest.approx(60.0)
        assert overview.spread == pytest.approx(20.0)
        assert [name for name, _ in overview.ranking] == ["dup", "linear", "rir"]

    def test_overview_empty(self):
        overview = AlgorithmScorer().overview({})
        assert overview.best is None
        assert overview.ranking == []
