"""
Weekly progression advisor.

Entry point of the core: given this week's capacity test and the history,
picks the strategy that best explains the user's progression and builds a
safe 6-day plan from it.

Pipeline of process_new_week():
    1. Validate input
    2. Beginner override (test_max < 5) → fixed plan
    3. Cold start (first week or no history) → linear
    4. Predict with every eligible strategy, score, select
    5. Winner's plan (linear on failure)
    6. Impossible rule when last week had an impossible session
    7. Safety bounds
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass, replace
from typing import Any, Sequence

from .config import (
    BEGINNER_THRESHOLD,
    DEFAULT_ALGORITHM,
    IMPOSSIBLE_REPS_DIVISOR,
    IMPOSSIBLE_REST_FLOOR,
    IMPOSSIBLE_REST_REDUCTION,
    IMPOSSIBLE_SETS_FACTOR,
    MAX_REST,
    MAX_SETS,
    MIN_REPS,
    MIN_REST,
    MIN_SETS,
    TRAINING_DAYS,
    ScoreWeights,
    max_reps_for,
)
from .metrics import clamp, failure_rate, round_half_up, round_int
from .models import (
    AlgorithmOutcome,
    AlgorithmScore,
    DailyPlan,
    Reliability,
    ScoringEntry,
    WeekAdvice,
    WeekRecord,
)
from .scoring import AlgorithmScorer
from .strategies import STRATEGY_REGISTRY, Strategy, StrategyInfo, beginner_plan, build_registry

logger = logging.getLogger(__name__)

# (last week number, eligible strategies), checked in order
ELIGIBILITY: tuple[tuple[float, tuple[str, ...]], ...] = (
    (1, ("linear",)),
    (2, ("linear", "rir")),
    (3, ("linear", "dup", "rir")),
    (math.inf, ("linear", "banister", "dup", "rir", "regression")),
)

COLD_START_REASON = "First week: linear progression by default."
BEGINNER_REASON = (
    f"Beginner mode: capacity test below {BEGINNER_THRESHOLD} reps. Fixed plan."
)


class InvalidInputError(ValueError):
    """Raised when process_new_week receives malformed input."""


@dataclass
class AlgorithmSelection:
    """Outcome of model selection, before any plan is built."""

    algorithm: str
    scores: dict[str, AlgorithmScore] | None
    predictions: dict[str, int | None] | None
    reason: str
    reliability: Reliability


@dataclass
class HistoricalScoring:
    """Selection replayed for one past week."""

    week_number: int
    scores: dict[str, AlgorithmScore]
    predictions: dict[str, int | None]
    selected: str
    actual: int | None


@dataclass
class EngineMetrics:
    """Aggregate behaviour of the advisor over the whole history."""

    average_precision: float
    algorithm_changes: int
    dominant_algorithm: str
    failure_rate: float  # Percent


def _validate_input(week_number: Any, test_max: Any, history: Sequence[Any]) -> None:
    if isinstance(week_number, bool) or not isinstance(week_number, int) or week_number < 1:
        raise InvalidInputError(f"week_number must be an integer >= 1, got {week_number!r}")
    if isinstance(test_max, bool) or not isinstance(test_max, int) or test_max < 1:
        raise InvalidInputError(f"test_max must be an integer >= 1, got {test_max!r}")

    previous = 0
    for week in history:
        if not isinstance(week, WeekRecord):
            raise InvalidInputError(f"history must contain WeekRecord items, got {type(week).__name__}")
        if week.week_number <= previous:
            raise InvalidInputError(
                f"history must be sorted by ascending week_number "
                f"(week {week.week_number} after week {previous})"
            )
        previous = week.week_number


def apply_impossible_rule(plan: Sequence[DailyPlan]) -> list[DailyPlan]:
    """Double the sets, halve the reps (rounded up) and shorten rest."""
    return [
        replace(
            day,
            sets=day.sets * IMPOSSIBLE_SETS_FACTOR,
            reps=math.ceil(day.reps / IMPOSSIBLE_REPS_DIVISOR),
            rest_seconds=max(IMPOSSIBLE_REST_FLOOR, day.rest_seconds - IMPOSSIBLE_REST_REDUCTION),
        )
        for day in plan
    ]


def apply_safety_bounds(plan: Sequence[DailyPlan], test_max: int) -> list[DailyPlan]:
    """
    Clamp every day into the safe ranges.

    reps ∈ [3, ceil(test_max × 1.2)], sets ∈ [2, 10], rest ∈ [20, 180] s.
    For very small test_max the reps floor wins over the ceiling.
    """
    max_reps = max_reps_for(test_max)
    return [
        replace(
            day,
            reps=int(clamp(day.reps, MIN_REPS, max_reps)),
            sets=int(clamp(day.sets, MIN_SETS, MAX_SETS)),
            rest_seconds=int(clamp(round_int(day.rest_seconds), MIN_REST, MAX_REST)),
        )
        for day in plan
    ]


class ProgressionAdvisor:
    """
    Stateless orchestrator over a fixed strategy registry.

    The registry order is the tie-break order of model selection.
    """

    def __init__(
        self,
        registry: tuple[Strategy, ...] = STRATEGY_REGISTRY,
        scorer: AlgorithmScorer | None = None,
    ):
        self.registry = registry
        self.scorer = scorer or AlgorithmScorer()

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ProgressionAdvisor":
        """
        Build an advisor from a loaded model config.

        Args:
            config: Dict returned by load_model_config()

        Returns:
            Advisor using the configured Banister parameters and score weights
        """
        from .engine.config_loader import banister_params_from_config, score_weights_from_config

        registry = build_registry(banister_params_from_config(config))
        weights: ScoreWeights = score_weights_from_config(config)
        return cls(registry=registry, scorer=AlgorithmScorer(weights))

    # ------------------------------------------------------------------
    # Registry access
    # ------------------------------------------------------------------

    def strategy(self, name: str) -> Strategy | None:
        for strategy in self.registry:
            if strategy.name == name:
                return strategy
        return None

    def strategy_info(self, name: str) -> StrategyInfo | None:
        strategy = self.strategy(name)
        return strategy.identity() if strategy is not None else None

    def all_strategy_info(self) -> list[StrategyInfo]:
        return [strategy.identity() for strategy in self.registry]

    def _linear(self) -> Strategy:
        strategy = self.strategy(DEFAULT_ALGORITHM)
        if strategy is None:
            raise RuntimeError("linear strategy missing from registry")
        return strategy

    def _label(self, name: str) -> str:
        strategy = self.strategy(name)
        return strategy.label if strategy is not None else name

    # ------------------------------------------------------------------
    # Eligibility & predictions
    # ------------------------------------------------------------------

    def eligible_algorithms(self, week_number: int) -> list[str]:
        """Strategies allowed to compete in a given week, in registry order."""
        for last_week, names in ELIGIBILITY:
            if week_number <= last_week:
                allowed = names
                break
        return [s.name for s in self.registry if s.name in allowed]

    def all_predictions(
        self, week_number: int, history: Sequence[WeekRecord]
    ) -> dict[str, int | None]:
        """
        Capacity prediction of every eligible strategy for week_number.

        A strategy that raises gets None instead of aborting the others.
        """
        predictions: dict[str, int | None] = {}
        for name in self.eligible_algorithms(week_number):
            strategy = self.strategy(name)
            if strategy is None:
                continue
            try:
                predictions[name] = max(1, round_int(strategy.predict(week_number, history)))
            except Exception as exc:
                logger.warning("Prediction failed for %r in week %d: %s", name, week_number, exc)
                predictions[name] = None
        return predictions

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_algorithm(
        self,
        week_number: int,
        test_max: int | None,
        history: Sequence[WeekRecord],
        scoring_history: Sequence[ScoringEntry],
    ) -> AlgorithmSelection:
        """Score the eligible strategies and pick the best one."""
        if week_number <= 1 or not history:
            return AlgorithmSelection(
                algorithm=DEFAULT_ALGORITHM,
                scores=None,
                predictions=None,
                reason=COLD_START_REASON,
                reliability=Reliability("unreliable", "No scoring data yet. First week.", 0),
            )

        eligible = self.eligible_algorithms(week_number)
        predictions = self.all_predictions(week_number, history)
        scores = self.scorer.score_all(
            history, scoring_history, predictions, week_number, test_max, eligible
        )
        best = self.scorer.select_best(scores)
        return AlgorithmSelection(
            algorithm=best.name,
            scores=scores,
            predictions=predictions,
            reason=best.reason,
            reliability=self.scorer.assess_reliability(scoring_history, eligible),
        )

    # ------------------------------------------------------------------
    # Plan generation
    # ------------------------------------------------------------------

    def generate_week_plan(
        self,
        name: str,
        week_number: int,
        test_max: int,
        history: Sequence[WeekRecord],
        has_impossible: bool = False,
    ) -> list[DailyPlan]:
        """
        Build the final 6-day plan of a strategy.

        Beginners always get the fixed plan. Otherwise the strategy's raw
        plan (linear's when it fails) goes through the impossible rule and
        the safety bounds.
        """
        if test_max < BEGINNER_THRESHOLD:
            return apply_safety_bounds(beginner_plan(), test_max)

        plan = self._raw_plan(name, week_number, test_max, history)
        if has_impossible:
            plan = apply_impossible_rule(plan)
        return apply_safety_bounds(plan, test_max)

    def _raw_plan(
        self, name: str, week_number: int, test_max: int, history: Sequence[WeekRecord]
    ) -> list[DailyPlan]:
        strategy = self.strategy(name)
        if strategy is None:
            logger.warning("Unknown algorithm %r, falling back to linear", name)
            return self._linear().plan(week_number, test_max, history)

        try:
            plan = strategy.plan(week_number, test_max, history)
        except Exception as exc:
            logger.warning("Plan generation failed for %r: %s; falling back to linear", name, exc)
            return self._linear().plan(week_number, test_max, history)

        if len(plan) != TRAINING_DAYS:
            logger.warning(
                "%r returned %d days instead of %d; falling back to linear",
                name,
                len(plan),
                TRAINING_DAYS,
            )
            return self._linear().plan(week_number, test_max, history)
        return plan

    # ------------------------------------------------------------------
    # Full weekly pipeline
    # ------------------------------------------------------------------

    def process_new_week(
        self,
        week_number: int,
        test_max: int,
        history: Sequence[WeekRecord],
        scoring_history: Sequence[ScoringEntry] = (),
        impossible_last_week: bool = False,
    ) -> WeekAdvice:
        """
        Choose a strategy and build this week's plan.

        Args:
            week_number: Week that starts (1-based)
            test_max: Capacity test result just entered
            history: Completed weeks, ascending by week_number
            scoring_history: Past scoring entries
            impossible_last_week: At least one session of last week was impossible

        Returns:
            WeekAdvice with the chosen strategy, its scores and the plan

        Raises:
            InvalidInputError: If week_number, test_max or history are malformed
        """
        _validate_input(week_number, test_max, history)

        if test_max < BEGINNER_THRESHOLD:
            return WeekAdvice(
                algorithm=DEFAULT_ALGORITHM,
                label=self._label(DEFAULT_ALGORITHM),
                scores=None,
                predictions=None,
                plan=self.generate_week_plan(DEFAULT_ALGORITHM, week_number, test_max, history),
                reason=BEGINNER_REASON,
                reliability=Reliability("unreliable", "Beginner mode.", 0),
                is_beginner_mode=True,
            )

        selection = self.select_algorithm(week_number, test_max, history, scoring_history)
        plan = self.generate_week_plan(
            selection.algorithm, week_number, test_max, history, impossible_last_week
        )
        return WeekAdvice(
            algorithm=selection.algorithm,
            label=self._label(selection.algorithm),
            scores=selection.scores,
            predictions=selection.predictions,
            plan=plan,
            reason=selection.reason,
            reliability=selection.reliability,
        )

    def build_scoring_entry(
        self, week_number: int, test_max: int, advice: WeekAdvice
    ) -> ScoringEntry:
        """
        Scoring entry a caller appends after accepting an advice.

        Each strategy's prediction for this week is stored next to the
        capacity result that was actually reached.
        """
        per_algorithm: dict[str, AlgorithmOutcome] = {}
        for name, score in (advice.scores or {}).items():
            per_algorithm[name] = AlgorithmOutcome(
                prediction=score.prediction,
                actual_outcome=test_max,
                precision_score=(
                    self.scorer.single_precision_score(score.prediction, test_max)
                    if score.prediction is not None
                    else None
                ),
            )
        return ScoringEntry(
            week_number=week_number,
            per_algorithm=per_algorithm,
            selected_algorithm=advice.algorithm,
            reasoning=advice.reason,
            test_max=test_max,
        )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def simulate_historical_scoring(
        self, history: Sequence[WeekRecord], scoring_history: Sequence[ScoringEntry] = ()
    ) -> list[HistoricalScoring]:
        """
        Replay the selection of every week from the second one on.

        Each week is scored with only the history and scoring entries that
        preceded it.
        """
        if len(history) < 2:
            return []

        results = []
        for index in range(1, len(history)):
            week = history[index]
            previous_history = list(history[:index])
            previous_scoring = [e for e in scoring_history if e.week_number < week.week_number]

            eligible = self.eligible_algorithms(week.week_number)
            predictions = self.all_predictions(week.week_number, previous_history)
            scores = self.scorer.score_all(
                previous_history,
                previous_scoring,
                predictions,
                week.week_number,
                week.test_max,
                eligible,
            )
            best = self.scorer.select_best(scores)
            results.append(
                HistoricalScoring(
                    week_number=week.week_number,
                    scores=scores,
                    predictions=predictions,
                    selected=best.name,
                    actual=week.test_max,
                )
            )
        return results

    def engine_metrics(
        self, history: Sequence[WeekRecord], scoring_history: Sequence[ScoringEntry] = ()
    ) -> EngineMetrics:
        """
        Summarize how the advisor behaved over the history.

        average_precision is the mean recorded precision of the selected
        strategy; failure_rate is the share of impossible sessions in percent.
        """
        if len(history) < 2:
            return EngineMetrics(0.0, 0, DEFAULT_ALGORITHM, 0.0)

        changes = 0
        counts: Counter[str] = Counter()
        for previous, current in zip(history, history[1:]):
            if current.selected_algorithm != previous.selected_algorithm:
                changes += 1
            counts[current.selected_algorithm] += 1
        dominant = counts.most_common(1)[0][0] if counts else DEFAULT_ALGORITHM

        precisions = []
        for entry in scoring_history:
            outcome = entry.per_algorithm.get(entry.selected_algorithm)
            if outcome is not None and outcome.precision_score is not None:
                precisions.append(outcome.precision_score)
        average = round_half_up(sum(precisions) / len(precisions), 1) if precisions else 0.0

        return EngineMetrics(
            average_precision=average,
            algorithm_changes=changes,
            dominant_algorithm=dominant,
            failure_rate=round_half_up(failure_rate(history) * 100, 1),
        )


_default_advisor = ProgressionAdvisor()


def process_new_week(
    week_number: int,
    test_max: int,
    history: Sequence[WeekRecord],
    scoring_history: Sequence[ScoringEntry] = (),
    impossible_last_week: bool = False,
) -> WeekAdvice:
    """process_new_week() of an advisor with the default configuration."""
    return _default_advisor.process_new_week(
        week_number, test_max, history, scoring_history, impossible_last_week
    )
