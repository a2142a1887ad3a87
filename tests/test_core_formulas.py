"""
Formula-focused unit tests for the shared numeric toolkit.

Values are hand-computed from the formulas in metrics.py and physiology.py;
the chart connector is checked cell by cell.
"""

import math

import pytest

from rep_advisor.core.ascii_plot import _connect
from rep_advisor.core.config import BanisterParams, max_reps_for
from rep_advisor.core.metrics import (
    FitModel,
    average_progression_rate,
    calculate_rest,
    ceil_to,
    clamp,
    confidence_interval_95,
    detect_trend,
    determinant_2x2,
    determinant_3x3,
    distribute_volume,
    evaluate_polynomial,
    exponential_weight,
    failure_rate,
    first_test_max,
    fit_linear,
    fit_polynomial,
    floor_to,
    had_impossible_session,
    latest_test_max,
    mean,
    median,
    progression_rate,
    recent_test_maxes,
    round_half_up,
    round_int,
    standard_deviation,
    summarize_feedback,
    variance,
    volume_to_sets_reps,
    week_feedback,
    weighted_mean,
)
from rep_advisor.core.models import FeedbackSummary, SessionRecord, WeekRecord
from rep_advisor.core.physiology import (
    TrainingImpulse,
    absolute_day,
    banister_performance,
    fatigue_contribution,
    fitness_contribution,
    flatten_sessions,
    net_effect_per_unit,
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _session(
    week: int,
    day: int,
    feedback=None,
    reserve=None,
    status="completed",
    session_type="training",
    actual=None,
) -> SessionRecord:
    return SessionRecord(
        week_number=week,
        day_number=day,
        session_type=session_type,
        planned_sets=4,
        planned_reps=5,
        actual_reps=actual,
        feedback=feedback,
        reserve_estimate=reserve,
        status=status,
    )


# ---------------------------------------------------------------------------
# Rounding & bounds
# ---------------------------------------------------------------------------


class TestRounding:
    def test_halves_round_up(self):
        assert round_int(2.5) == 3
        assert round_int(3.5) == 4
        assert round_int(-2.5) == -2

    def test_round_half_up_decimals(self):
        assert round_half_up(2.25, 1) == pytest.approx(2.3)
        assert round_half_up(68.75, 1) == pytest.approx(68.8)
        assert round_half_up(1.234, 2) == pytest.approx(1.23)

    def test_ceil_and_floor_to(self):
        assert ceil_to(1.21, 1) == pytest.approx(1.3)
        assert floor_to(1.29, 1) == pytest.approx(1.2)

    def test_clamp_lower_bound_wins(self):
        assert clamp(5, 0, 10) == 5
        assert clamp(-1, 0, 10) == 0
        assert clamp(11, 0, 10) == 10
        # lo > hi: lower bound wins (reps floor 3 vs cap 2 for test_max 1)
        assert clamp(3, 3, 2) == 3

    def test_max_reps_for(self):
        assert max_reps_for(10) == 12
        assert max_reps_for(1) == 2
        assert max_reps_for(11) == 14  # ceil(13.2)


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class TestStatistics:
    def test_empty_inputs(self):
        assert mean([]) == 0.0
        assert variance([]) == 0.0
        assert median([]) == 0.0
        assert weighted_mean([], []) == 0.0

    def test_population_variance(self):
        # mean 5, squared deviations 9+1+1+9 = 20, / 4
        assert variance([2, 4, 6, 8]) == pytest.approx(5.0)
        assert standard_deviation([2, 4, 6, 8]) == pytest.approx(math.sqrt(5.0))

    def test_median_even_and_odd(self):
        assert median([3, 1, 2]) == 2
        assert median([4, 1, 3, 2]) == pytest.approx(2.5)

    def test_weighted_mean(self):
        assert weighted_mean([10, 20], [1, 3]) == pytest.approx(17.5)

    def test_weighted_mean_length_mismatch(self):
        with pytest.raises(ValueError):
            weighted_mean([1, 2], [1])


# ---------------------------------------------------------------------------
# Least squares
# ---------------------------------------------------------------------------


class TestLeastSquares:
    def test_determinants(self):
        assert determinant_2x2([[1, 2], [3, 4]]) == -2
        assert determinant_3x3([[2, 0, 0], [0, 3, 0], [0, 0, 4]]) == 24

    def test_fit_linear_degenerate_inputs(self):
        assert fit_linear([]) == FitModel(0.0, 0.0, 0.0, 0.0, "linear")
        single = fit_linear([(3, 7)])
        assert (single.b, single.c) == (0.0, 7.0)
        same_x = fit_linear([(2, 4), (2, 8)])
        assert same_x.b == 0.0
        assert same_x.c == pytest.approx(6.0)

    def test_fit_linear_exact_line(self):
        model = fit_linear([(1, 3), (2, 5), (3, 7)])
        assert model.b == pytest.approx(2.0)
        assert model.c == pytest.approx(1.0)
        assert model.std_error == pytest.approx(0.0, abs=1e-9)

    def test_fit_polynomial_recovers_quadratic(self):
        # y = x² + 1
        model = fit_polynomial([(1, 2), (2, 5), (3, 10)])
        assert model.kind == "polynomial"
        assert evaluate_polynomial(model, 4) == pytest.approx(17.0, abs=1e-6)

    def test_fit_polynomial_falls_back_below_three_points(self):
        model = fit_polynomial([(1, 2), (2, 4)])
        assert model.kind == "linear"
        assert evaluate_polynomial(model, 3) == pytest.approx(6.0)

    def test_fit_polynomial_singular_system_falls_back(self):
        # All x equal → singular normal equations
        model = fit_polynomial([(2, 1), (2, 3), (2, 5)])
        assert model.kind == "linear"
        assert model.c == pytest.approx(3.0)

    def test_confidence_interval(self):
        model = FitModel(0.0, 1.0, 0.0, 2.0, "linear")
        assert confidence_interval_95(model) == pytest.approx(3.92)


# ---------------------------------------------------------------------------
# Progression & trend
# ---------------------------------------------------------------------------


class TestTrend:
    def test_progression_rate(self):
        assert progression_rate(10, 12) == pytest.approx(0.2)
        assert progression_rate(0, 12) == 0.0
        assert progression_rate(None, 12) == 0.0

    def test_average_progression_rate(self):
        # +10%, then +0%
        assert average_progression_rate([10, 11, 11]) == pytest.approx(0.05)
        assert average_progression_rate([10]) == 0.0

    def test_detect_trend(self):
        assert detect_trend([10]) == "insufficient"
        assert detect_trend([0, 5]) == "insufficient"
        assert detect_trend([10, 10, 10.4]) == "stagnant"
        assert detect_trend([10, 11, 12]) == "increasing"
        assert detect_trend([12, 11, 10]) == "decreasing"
        # Non-monotone: endpoints decide
        assert detect_trend([10, 9, 12]) == "increasing"

    def test_exponential_weight(self):
        assert exponential_weight(5, 5) == 1.0
        assert exponential_weight(5, 3) == pytest.approx(0.81)
        assert exponential_weight(3, 5) == pytest.approx(0.81)


# ---------------------------------------------------------------------------
# Prescription helpers
# ---------------------------------------------------------------------------


class TestPrescription:
    def test_calculate_rest_steps(self):
        assert calculate_rest(20) == 60
        assert calculate_rest(24) == 60
        assert calculate_rest(25) == 70
        assert calculate_rest(30) == 80
        assert calculate_rest(16, 45, 15, 5, 5) == 45

    def test_distribute_volume_sums_exactly(self):
        days = distribute_volume(100, [1, 1, 1])
        assert sum(days) == 100
        # Residual goes to the first of the largest shares
        assert days == [34, 33, 33]

    def test_distribute_volume_edge_cases(self):
        assert distribute_volume(50, []) == []
        assert distribute_volume(50, [0, 0]) == [0, 0]

    def test_volume_to_sets_reps(self):
        # 20 → 3 sets of round(6.67)=7 → 21 ≠ 20 → sets = round(20/7) = 3
        assert volume_to_sets_reps(20, 10) == (3, 7)
        # Volume floor of 6 → 3 sets of 2 → reps floor 3 → sets = round(6/3) = 2
        assert volume_to_sets_reps(2, 10) == (2, 3)
        assert volume_to_sets_reps(100, 20) == (5, 20)

    def test_volume_to_sets_reps_respects_reps_cap(self):
        sets, reps = volume_to_sets_reps(200, 10)
        assert reps == 12
        assert sets == 10  # round(200/12) = 17 → clamped


# ---------------------------------------------------------------------------
# History helpers
# ---------------------------------------------------------------------------


class TestHistoryHelpers:
    def test_test_max_lookups(self):
        history = [WeekRecord(1, 8), WeekRecord(2, None), WeekRecord(3, 11), WeekRecord(4, 12)]
        assert latest_test_max(history) == 12
        assert first_test_max(history) == 8
        assert recent_test_maxes(history, 2) == [11, 12]
        assert latest_test_max([]) == 10

    def test_summarize_feedback_ignores_tests_and_pending(self):
        sessions = [
            _session(1, 1, session_type="test", actual=10),
            _session(1, 2, feedback="easy", reserve=2),
            _session(1, 3, feedback="perfect", reserve=3),
            _session(1, 4, feedback="impossible"),
            _session(1, 5, feedback="easy", status="pending"),
        ]
        summary = summarize_feedback(sessions)
        assert (summary.easy, summary.perfect, summary.impossible) == (1, 1, 1)
        assert summary.avg_reserve == pytest.approx(2.5)
        assert summary.volume_target == 60

    def test_summarize_feedback_without_reserve(self):
        assert summarize_feedback([_session(1, 2, feedback="easy")]).avg_reserve is None

    def test_week_feedback_prefers_stored_summary(self):
        stored = FeedbackSummary(perfect=5)
        week = WeekRecord(1, 10, feedback_summary=stored, sessions=[_session(1, 2, feedback="easy")])
        assert week_feedback(week) is stored

    def test_had_impossible_session(self):
        assert had_impossible_session(WeekRecord(1, 10, feedback_summary=FeedbackSummary(impossible=1)))
        assert had_impossible_session(WeekRecord(1, 10, sessions=[_session(1, 3, feedback="impossible")]))
        assert not had_impossible_session(WeekRecord(1, 10))

    def test_failure_rate(self):
        history = [
            WeekRecord(1, 10, feedback_summary=FeedbackSummary(perfect=3, impossible=1)),
            WeekRecord(2, 11, sessions=[_session(2, 2, feedback="perfect"), _session(2, 3)]),
        ]
        # 1 impossible over 4 summarized + 2 completed sessions
        assert failure_rate(history) == pytest.approx(1 / 6)
        assert failure_rate([]) == 0.0


# ---------------------------------------------------------------------------
# Fitness-fatigue model
# ---------------------------------------------------------------------------


class TestPhysiology:
    def test_absolute_day(self):
        assert absolute_day(1, 1) == 1
        assert absolute_day(2, 1) == 8
        assert absolute_day(3, 7) == 21

    def test_contributions(self):
        assert fitness_contribution(10, 0) == 0.0
        assert fitness_contribution(10, 45) == pytest.approx(10 * math.exp(-1))
        assert fatigue_contribution(10, 15) == pytest.approx(20 * math.exp(-1))
        assert fatigue_contribution(10, -3) == 0.0

    def test_performance_ignores_same_day_and_future_sessions(self):
        state = banister_performance(10, [TrainingImpulse(5, 20), TrainingImpulse(9, 20)], 5)
        assert state.performance == 10
        assert state.fitness == 0.0

    def test_performance_after_one_session(self):
        state = banister_performance(10, [TrainingImpulse(1, 10)], 8)
        expected = 10 + 10 * math.exp(-7 / 45) - 20 * math.exp(-7 / 15)
        assert state.performance == pytest.approx(expected)

    def test_performance_floor(self):
        state = banister_performance(1, [TrainingImpulse(1, 100)], 2)
        assert state.performance == 1.0

    def test_net_effect_sign(self):
        # Fatigue dominates right after a session, fitness far from it
        assert net_effect_per_unit(7, 8) < 0
        assert net_effect_per_unit(1, 60) > 0
        assert net_effect_per_unit(8, 8) == 0.0

    def test_net_effect_uses_params(self):
        params = BanisterParams(k1=1.0, k2=0.0, tau1=10.0, tau2=10.0)
        assert net_effect_per_unit(0, 10, params) == pytest.approx(math.exp(-1))

    def test_flatten_sessions(self):
        week = WeekRecord(
            2,
            12,
            sessions=[
                _session(2, 3, actual=30),
                _session(2, 1, session_type="test"),
                _session(2, 4, actual=0),
            ],
        )
        impulses = flatten_sessions([week])
        assert impulses == [TrainingImpulse(8, 12), TrainingImpulse(10, 30)]


# ---------------------------------------------------------------------------
# Chart connector
# ---------------------------------------------------------------------------


def _blank_grid(width: int, height: int) -> list[list[str]]:
    return [[" "] * width for _ in range(height)]


class TestConnector:
    def test_rising_elbow(self):
        grid = _blank_grid(7, 5)
        _connect(grid, (0, 4), (6, 0))
        assert ["".join(row) for row in grid] == [
            "   ╭── ",
            "   │   ",
            "   │   ",
            "   │   ",
            " ──╯   ",
        ]

    def test_falling_elbow(self):
        grid = _blank_grid(5, 3)
        _connect(grid, (0, 0), (4, 2))
        assert ["".join(row) for row in grid] == [
            " ─╮  ",
            "  │  ",
            "  ╰─ ",
        ]

    def test_flat_segment(self):
        grid = _blank_grid(4, 1)
        _connect(grid, (0, 0), (3, 0))
        assert "".join(grid[0]) == " ── "

    def test_keeps_existing_marks(self):
        grid = _blank_grid(5, 3)
        grid[1][2] = "·"
        _connect(grid, (0, 0), (4, 2))
        assert grid[1][2] == "·"
