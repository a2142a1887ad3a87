"""
Unit tests for the five progression strategies.

Expected plans and predictions are hand-computed from each strategy's
constants; every plan must hold exactly six days.
"""

import pytest

from rep_advisor.core.config import BanisterParams
from rep_advisor.core.metrics import FitModel
from rep_advisor.core.models import DailyPlan, FeedbackSummary, SessionRecord, WeekRecord
from rep_advisor.core.strategies import (
    STRATEGY_NAMES,
    STRATEGY_REGISTRY,
    BanisterStrategy,
    DUPStrategy,
    LinearStrategy,
    RegressionStrategy,
    RIRStrategy,
    beginner_plan,
    build_registry,
    get_strategy,
)
from rep_advisor.core.strategies.linear import INTENSITY_ZONES
from rep_advisor.core.strategies.regression import failure_multiplier, format_equation
from rep_advisor.core.strategies.rir import feedback_to_rir, last_session_feedback, volume_tier, week_rir

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _week(number: int, test_max: int | None, **kwargs) -> WeekRecord:
    return WeekRecord(week_number=number, test_max=test_max, **kwargs)


def _test_session(week: int) -> SessionRecord:
    return SessionRecord(week_number=week, day_number=1, session_type="test", status="completed")


def _training_session(week: int, day: int, feedback: str) -> SessionRecord:
    return SessionRecord(
        week_number=week,
        day_number=day,
        planned_sets=4,
        planned_reps=8,
        actual_reps=32,
        feedback=feedback,
        status="completed",
    )


def _progressing_history() -> list[WeekRecord]:
    return [
        _week(1, 10, feedback_summary=FeedbackSummary(easy=1, perfect=4, impossible=1)),
        _week(2, 11, feedback_summary=FeedbackSummary(easy=2, perfect=4)),
        _week(3, 12, feedback_summary=FeedbackSummary(easy=4, perfect=2)),
        _week(4, 14, feedback_summary=FeedbackSummary(perfect=5, impossible=1)),
    ]


# ---------------------------------------------------------------------------
# Shared contract
# ---------------------------------------------------------------------------


class TestStrategyContract:
    def test_registry_declaration_order(self):
        assert STRATEGY_NAMES == ("linear", "banister", "dup", "rir", "regression")
        assert tuple(s.name for s in STRATEGY_REGISTRY) == STRATEGY_NAMES

    def test_get_strategy(self):
        assert isinstance(get_strategy("dup"), DUPStrategy)
        with pytest.raises(ValueError, match="Unknown algorithm"):
            get_strategy("nope")

    def test_build_registry_passes_params(self):
        params = BanisterParams(k1=1.5, k2=2.5, tau1=40.0, tau2=12.0)
        registry = build_registry(params)
        assert registry[1].params == params

    def test_empty_history_predicts_one(self):
        for strategy in STRATEGY_REGISTRY:
            assert strategy.predict(1, []) == 1

    def test_every_plan_has_six_days(self):
        history = _progressing_history()
        for strategy in STRATEGY_REGISTRY:
            plan = strategy.plan(5, 15, history)
            assert len(plan) == 6, strategy.name
            assert all(isinstance(day, DailyPlan) for day in plan)

    def test_beginner_guard(self):
        history = _progressing_history()
        for strategy in STRATEGY_REGISTRY:
            for test_max in range(1, 5):
                assert strategy.plan(5, test_max, history) == beginner_plan(), strategy.name

    def test_beginner_plan_shape(self):
        assert beginner_plan() == [DailyPlan(5, 3, 90, "BEGINNER")] * 6

    def test_predictions_are_deterministic(self):
        history = _progressing_history()
        for strategy in STRATEGY_REGISTRY:
            assert strategy.predict(5, history) == strategy.predict(5, history)
            assert strategy.plan(5, 15, history) == strategy.plan(5, 15, history)


# ---------------------------------------------------------------------------
# Linear
# ---------------------------------------------------------------------------


class TestLinear:
    def test_predict_compounds_over_gap(self):
        strategy = LinearStrategy()
        history = [_week(1, 10)]
        assert strategy.predict(2, history) == 11
        assert strategy.predict(3, history) == 12  # 10 × 1.21

    def test_predict_minimum_gap_of_one(self):
        # Predicting a week already in history still applies one week of growth
        assert LinearStrategy().predict(1, [_week(1, 10)]) == 11

    def test_weekly_volume(self):
        strategy = LinearStrategy()
        assert strategy.predicted_weekly_volume(1, 10) == 30
        assert strategy.predicted_weekly_volume(2, 10) == 33

    def test_plan_first_day(self):
        plan = LinearStrategy().plan(1, 10, [])
        assert plan[0] == DailyPlan(5, 6, 50, "ENDURANCE")
        assert [d.training_type for d in plan] == [
            "ENDURANCE", "MIXED", "FORCE", "ENDURANCE", "MIXED", "ENDURANCE"
        ]

    def test_narrow_zone_raises_reps(self):
        # Week 30: 476 reps a week, 95 on day 2; 6 sets × 6 reps falls short,
        # so reps rise to 95 / 6 and are capped at ceil(1.2 × 10)
        assert LinearStrategy().predicted_weekly_volume(30, 10) == 476
        day = LinearStrategy().plan(30, 10, [])[0]
        assert (day.sets, day.reps) == (6, 12)

    def test_no_reps_raise_when_volume_fits(self):
        day = LinearStrategy()._day_plan(36, 10, INTENSITY_ZONES[0])
        assert (day.sets, day.reps) == (6, 6)

    def test_intensity_details(self):
        details = LinearStrategy().intensity_details(2, 10)
        assert details.zone.training_type == "FORCE"
        assert details.reps == 8
        assert details.intensity == pytest.approx(80.0)


# ---------------------------------------------------------------------------
# Banister
# ---------------------------------------------------------------------------


class TestBanister:
    def test_predict_without_sessions_is_base(self):
        assert BanisterStrategy().predict(2, [_week(1, 10)]) == 10

    def test_predict_counts_test_session_load(self):
        # 10 + 10·e^(−7/45) − 20·e^(−7/15) ≈ 6.02
        history = [_week(1, 10, sessions=[_test_session(1)])]
        assert BanisterStrategy().predict(2, history) == 6

    def test_first_week_plan(self):
        # Every day is close enough to the next test that fatigue dominates:
        # charge falls back to the minimum of 6 reps → 2 × 3
        plan = BanisterStrategy().plan(1, 10, [])
        assert plan == [
            DailyPlan(2, 3, 43, "RECOVERY"),
            DailyPlan(2, 3, 51, "MODERATE"),
            DailyPlan(2, 3, 59, "INTENSE"),
            DailyPlan(2, 3, 51, "MODERATE"),
            DailyPlan(2, 3, 51, "MODERATE"),
            DailyPlan(2, 3, 41, "LIGHT"),
        ]

    def test_training_status_without_history(self):
        status = BanisterStrategy().analyze_training_status([])
        assert status.status == "undertrained"
        assert status.ratio == 0.0

    def test_performance_curve(self):
        history = [_week(1, 10, sessions=[_test_session(1)])]
        curve = BanisterStrategy().performance_curve(history, 1, 15, step=7)
        assert [p.day for p in curve] == [1, 8, 15]
        assert curve[0].performance == pytest.approx(10.0)
        assert curve[1].performance == pytest.approx(6.0)

    def test_performance_curve_rejects_zero_step(self):
        with pytest.raises(ValueError):
            BanisterStrategy().performance_curve([], 1, 10, step=0)


# ---------------------------------------------------------------------------
# DUP
# ---------------------------------------------------------------------------


class TestDUP:
    def test_easy_bonus(self):
        history = [_week(1, 10, feedback_summary=FeedbackSummary(easy=4))]
        assert DUPStrategy().progression_rate(history) == pytest.approx(0.07)
        assert DUPStrategy().predict(2, history) == 11

    def test_impossible_penalty(self):
        history = [_week(1, 10, feedback_summary=FeedbackSummary(perfect=3, impossible=1))]
        assert DUPStrategy().progression_rate(history) == pytest.approx(0.03)
        assert DUPStrategy().predict(2, history) == 10

    def test_trend_adjustment(self):
        rising = [_week(1, 10), _week(2, 11), _week(3, 12)]
        flat = [_week(1, 10), _week(2, 10), _week(3, 10)]
        assert DUPStrategy().progression_rate(rising) == pytest.approx(0.06)
        assert DUPStrategy().progression_rate(flat) == pytest.approx(0.04)

    def test_feedback_from_sessions_when_no_summary(self):
        sessions = [_training_session(1, day, "easy") for day in range(2, 6)]
        history = [_week(1, 10, sessions=sessions)]
        assert DUPStrategy().progression_rate(history) == pytest.approx(0.07)

    def test_plan_rotation(self):
        plan = DUPStrategy().plan(1, 20, [])
        assert plan[:3] == [
            DailyPlan(5, 13, 40, "ENDURANCE"),
            DailyPlan(4, 15, 70, "HYPERTROPHY"),
            DailyPlan(3, 18, 100, "FORCE"),
        ]
        assert plan[3:] == [plan[0], plan[1], plan[0]]

    def test_reps_grow_weekly(self):
        plan = DUPStrategy().plan(3, 20, [])
        assert plan[0].reps == 14  # 20 × 0.65 × 1.10
        assert plan[2].reps == 20  # 20 × 0.90 × 1.10

    def test_feedback_diversity(self):
        strategy = DUPStrategy()
        assert strategy.feedback_diversity(None).diversity == "unknown"
        result = strategy.feedback_diversity(FeedbackSummary(easy=1, perfect=3))
        assert (result.diversity, result.score) == ("optimal", 80)


# ---------------------------------------------------------------------------
# RIR
# ---------------------------------------------------------------------------


class TestRIR:
    def test_feedback_to_rir(self):
        assert feedback_to_rir("easy") == 4
        assert feedback_to_rir("impossible") == 0
        assert feedback_to_rir(None) == 2

    def test_week_rir(self):
        assert week_rir(None) == 2.0
        assert week_rir(_week(1, 10, feedback_summary=FeedbackSummary(easy=2, perfect=2))) == 3.0
        measured = FeedbackSummary(easy=2, perfect=2, avg_reserve=1.5)
        assert week_rir(_week(1, 10, feedback_summary=measured)) == 1.5

    def test_predict(self):
        history = [_week(1, 10, feedback_summary=FeedbackSummary(easy=2, perfect=2))]
        # 3% + 3.0 × 1.5% = 7.5%
        assert RIRStrategy().predict(2, history) == 11

    def test_plan_without_history(self):
        plan = RIRStrategy().plan(1, 20, [])
        assert plan == [DailyPlan(2, 14, 60, "STANDARD")] * 6

    def test_last_session_nudges_reps(self):
        history = [_week(1, 18, sessions=[_training_session(1, 2, "easy")])]
        plan = RIRStrategy().plan(2, 20, history)
        # RIR 4 → high volume tier, 16 reps; easy last session → ×1.10
        assert plan == [DailyPlan(2, 18, 45, "STANDARD")] * 6

    def test_deload_when_failing(self):
        history = [_week(1, 20, feedback_summary=FeedbackSummary(impossible=3))]
        plan = RIRStrategy().plan(2, 20, history)
        assert {day.training_type for day in plan} == {"DELOAD"}
        assert {day.rest_seconds for day in plan} == {90}

    def test_last_session_feedback_skips_tests_and_pending(self):
        sessions = [
            _training_session(1, 2, "perfect"),
            SessionRecord(1, 3, feedback="easy", status="pending"),
        ]
        assert last_session_feedback(sessions) == "perfect"

    def test_estimate_session_reserve(self):
        strategy = RIRStrategy()
        assert strategy.estimate_session_reserve(20, 22) == 5
        assert strategy.estimate_session_reserve(20, 18) == 1
        assert strategy.estimate_session_reserve(20, 15) == 0
        assert strategy.estimate_session_reserve(0, 5) == 2.0

    @pytest.mark.parametrize(
        "rir, status",
        [
            (3.5, "under"),
            (3.49, "optimal"),
            (2.0, "optimal"),
            (1.99, "moderate"),
            (1.0, "moderate"),
            (0.99, "deload"),
        ],
    )
    def test_volume_tier_boundaries(self, rir, status):
        assert volume_tier(rir).status == status

    def test_reserve_trend(self):
        history = [
            _week(i + 1, 10, feedback_summary=FeedbackSummary(perfect=3, avg_reserve=rir))
            for i, rir in enumerate([3.0, 2.0, 1.0])
        ]
        assert RIRStrategy().reserve_trend(history).trend == "fatigue_accumulating"
        assert RIRStrategy().reserve_trend(history[:1]).trend == "insufficient"


# ---------------------------------------------------------------------------
# Regression
# ---------------------------------------------------------------------------


class TestRegression:
    def test_single_point(self):
        assert RegressionStrategy().predict(2, [_week(1, 10)]) == 11

    def test_fit_on_line(self):
        history = [_week(1, 10), _week(2, 11), _week(3, 12)]
        assert RegressionStrategy().predict(4, history) == 13

    def test_prediction_is_capped(self):
        # y = x² + 1 gives 17 at week 4; the 30% weekly cap holds it at 13
        history = [_week(1, 2), _week(2, 5), _week(3, 10)]
        assert RegressionStrategy().predict(4, history) == 13

    def test_weeks_without_result_are_skipped(self):
        history = [_week(1, 10), _week(2, None), _week(3, 12)]
        assert RegressionStrategy().predict(4, history) == 13

    def test_plan(self):
        history = [_week(1, 10), _week(2, 11), _week(3, 12)]
        plan = RegressionStrategy().plan(4, 13, history)
        assert plan == [DailyPlan(2, 10, 60, "ADAPTIVE")] * 6

    def test_adjust_factor_short_history(self):
        assert RegressionStrategy().adjust_factor(2, 12, 13, [_week(1, 10)]) == 1.0

    def test_adjust_factor_ratio(self):
        history = [_week(1, 10), _week(2, 10)]
        # real 10% over model 1/11
        assert RegressionStrategy().adjust_factor(3, 11, 12, history) == pytest.approx(1.1)

    def test_adjust_factor_clamped(self):
        strategy = RegressionStrategy()
        history = [_week(1, 10), _week(2, 10)]
        # 50% real growth against 6.7% modelled → 7.5, capped
        assert strategy.adjust_factor(3, 15, 16, history) == 2.0
        # no real growth against 20% modelled → 0, floored
        assert strategy.adjust_factor(3, 10, 12, history) == 0.5

    @pytest.mark.parametrize(
        "previous, test_max, expected",
        [
            (10, 12, 1.5),  # real +20%
            (10, 8, 0.7),  # real −20%
            (50, 51, 1.0),  # real +2%
        ],
    )
    def test_adjust_factor_flat_model(self, previous, test_max, expected):
        history = [_week(1, previous - 1), _week(2, previous)]
        assert RegressionStrategy().adjust_factor(3, test_max, test_max, history) == expected

    def test_failure_multiplier(self):
        assert failure_multiplier(0.4) == (0.70, "Significant reduction")
        assert failure_multiplier(0.2) == (0.85, "Moderate reduction")
        assert failure_multiplier(0.1) == (1.0, "No reduction")

    def test_format_equation(self):
        assert format_equation(FitModel(0.0, 1.0, 9.0, 0.0, "linear")) == "y = 1.0x +9.0"

    def test_model_quality(self):
        history = [_week(1, 10), _week(2, 11), _week(3, 12)]
        report = RegressionStrategy().analyze_model_quality(history)
        assert report.quality == "excellent"
        assert report.confidence == 100
        assert RegressionStrategy().analyze_model_quality(history[:1]).quality == "insufficient"

    def test_prediction_curve(self):
        history = [_week(1, 10), _week(2, 11), _week(3, 12)]
        curve = RegressionStrategy().prediction_curve(history, 1, 5)
        assert [p.week for p in curve] == [1, 2, 3, 4, 5]
        assert curve[-1].predicted == pytest.approx(14.0)
        assert RegressionStrategy().prediction_curve([], 1, 5) == []
