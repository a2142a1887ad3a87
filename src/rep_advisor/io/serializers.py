"""
JSON serialization for training data models.

Handles conversion between dataclasses and JSON-compatible dicts.
"""

from typing import Any, Callable, TypeVar

from ..core.models import (
    FEEDBACK_VALUES,
    TRAINING_TYPES,
    AlgorithmOutcome,
    AlgorithmScore,
    DailyPlan,
    FeedbackSummary,
    Reliability,
    ScoringEntry,
    SessionRecord,
    WeekAdvice,
    WeekRecord,
)

T = TypeVar("T")


class ValidationError(Exception):
    """Raised when data validation fails."""


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is a non-negative number.

    Args:
        value: Value to validate
        name: Name for error message

    Returns:
        The value if valid

    Raises:
        ValidationError: If value is negative or not a number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is a positive number.

    Raises:
        ValidationError: If value is not positive
    """
    validate_non_negative(value, name)
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def validate_choice(value: Any, choices: tuple[str, ...], name: str) -> str:
    """
    Validate that a value is one of the allowed strings.

    Raises:
        ValidationError: If value is not in choices
    """
    if value not in choices:
        raise ValidationError(f"Invalid {name}: {value!r}. Must be one of {choices}")
    return value


def _require(data: dict[str, Any], key: str) -> Any:
    if not isinstance(data, dict):
        raise ValidationError(f"Expected an object, got {type(data).__name__}")
    if key not in data:
        raise ValidationError(f"Missing required field: {key}")
    return data[key]


def _optional_number(data: dict[str, Any], key: str) -> Any:
    if not isinstance(data, dict):
        raise ValidationError(f"Expected an object, got {type(data).__name__}")
    value = data.get(key)
    if value is not None:
        validate_non_negative(value, key)
    return value


def _build(factory: Callable[..., T], **kwargs: Any) -> T:
    """Instantiate a model, turning its own validation errors into ValidationError."""
    try:
        return factory(**kwargs)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {factory.__name__}: {e}") from e


# =============================================================================
# SESSIONS & FEEDBACK
# =============================================================================


def session_record_to_dict(session: SessionRecord) -> dict[str, Any]:
    """Convert SessionRecord to JSON-compatible dict."""
    d: dict[str, Any] = {
        "week_number": session.week_number,
        "day_number": session.day_number,
        "session_type": session.session_type,
        "planned_sets": session.planned_sets,
        "planned_reps": session.planned_reps,
        "status": session.status,
    }
    if session.actual_reps is not None:
        d["actual_reps"] = session.actual_reps
    if session.feedback is not None:
        d["feedback"] = session.feedback
    if session.reserve_estimate is not None:
        d["reserve_estimate"] = session.reserve_estimate
    return d


def dict_to_session_record(data: dict[str, Any]) -> SessionRecord:
    """
    Convert dict to SessionRecord.

    Args:
        data: Dict representation

    Returns:
        SessionRecord instance

    Raises:
        ValidationError: If data is invalid
    """
    validate_positive(_require(data, "week_number"), "week_number")
    validate_positive(_require(data, "day_number"), "day_number")
    feedback = data.get("feedback")
    if feedback is not None:
        validate_choice(feedback, FEEDBACK_VALUES, "feedback")

    return _build(
        SessionRecord,
        week_number=int(data["week_number"]),
        day_number=int(data["day_number"]),
        session_type=data.get("session_type", "training"),
        planned_sets=int(validate_non_negative(data.get("planned_sets", 0), "planned_sets")),
        planned_reps=int(validate_non_negative(data.get("planned_reps", 0), "planned_reps")),
        actual_reps=_optional_number(data, "actual_reps"),
        feedback=feedback,
        reserve_estimate=_optional_number(data, "reserve_estimate"),
        status=data.get("status", "pending"),
    )


def feedback_summary_to_dict(summary: FeedbackSummary) -> dict[str, Any]:
    return {
        "easy": summary.easy,
        "perfect": summary.perfect,
        "impossible": summary.impossible,
        "avg_reserve": summary.avg_reserve,
        "volume_target": summary.volume_target,
        "volume_actual": summary.volume_actual,
    }


def dict_to_feedback_summary(data: dict[str, Any]) -> FeedbackSummary:
    """
    Convert dict to FeedbackSummary.

    Raises:
        ValidationError: If a count is negative or not a number
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Expected an object, got {type(data).__name__}")
    counts = {
        key: int(validate_non_negative(data.get(key, 0), key))
        for key in ("easy", "perfect", "impossible", "volume_target", "volume_actual")
    }
    return _build(FeedbackSummary, avg_reserve=_optional_number(data, "avg_reserve"), **counts)


# =============================================================================
# PLANS & SCORES
# =============================================================================


def daily_plan_to_dict(day: DailyPlan) -> dict[str, Any]:
    return {
        "sets": day.sets,
        "reps": day.reps,
        "rest_seconds": day.rest_seconds,
        "training_type": day.training_type,
    }


def dict_to_daily_plan(data: dict[str, Any]) -> DailyPlan:
    """
    Convert dict to DailyPlan.

    Raises:
        ValidationError: If data is invalid
    """
    validate_choice(_require(data, "training_type"), TRAINING_TYPES, "training_type")
    return _build(
        DailyPlan,
        sets=int(validate_non_negative(_require(data, "sets"), "sets")),
        reps=int(validate_non_negative(_require(data, "reps"), "reps")),
        rest_seconds=int(validate_non_negative(_require(data, "rest_seconds"), "rest_seconds")),
        training_type=data["training_type"],
    )


def algorithm_score_to_dict(score: AlgorithmScore) -> dict[str, Any]:
    return {
        "prediction": score.prediction,
        "precision_score": score.precision_score,
        "feedback_score": score.feedback_score,
        "trend_score": score.trend_score,
        "composite_score": score.composite_score,
    }


def dict_to_algorithm_score(data: dict[str, Any]) -> AlgorithmScore:
    prediction = _optional_number(data, "prediction")
    return AlgorithmScore(
        prediction=int(prediction) if prediction is not None else None,
        precision_score=float(validate_non_negative(_require(data, "precision_score"), "precision_score")),
        feedback_score=float(validate_non_negative(_require(data, "feedback_score"), "feedback_score")),
        trend_score=float(validate_non_negative(_require(data, "trend_score"), "trend_score")),
        composite_score=float(validate_non_negative(_require(data, "composite_score"), "composite_score")),
    )


# =============================================================================
# WEEKS
# =============================================================================


def week_record_to_dict(week: WeekRecord) -> dict[str, Any]:
    """
    Convert WeekRecord to JSON-compatible dict.

    Optional parts (scores, predictions, feedback summary) are omitted
    when absent.
    """
    d: dict[str, Any] = {
        "week_number": week.week_number,
        "test_max": week.test_max,
        "selected_algorithm": week.selected_algorithm,
        "status": week.status,
        "plan": [daily_plan_to_dict(day) for day in week.plan],
        "sessions": [session_record_to_dict(s) for s in week.sessions],
    }
    if week.algorithm_scores is not None:
        d["algorithm_scores"] = {
            name: algorithm_score_to_dict(score) for name, score in week.algorithm_scores.items()
        }
    if week.predictions is not None:
        d["predictions"] = dict(week.predictions)
    if week.feedback_summary is not None:
        d["feedback_summary"] = feedback_summary_to_dict(week.feedback_summary)
    return d


def dict_to_week_record(data: dict[str, Any]) -> WeekRecord:
    """
    Convert dict to WeekRecord.

    Args:
        data: Dict representation

    Returns:
        WeekRecord instance

    Raises:
        ValidationError: If data is invalid
    """
    week_number = validate_positive(_require(data, "week_number"), "week_number")
    test_max = data.get("test_max")
    if test_max is not None:
        validate_positive(test_max, "test_max")

    scores = data.get("algorithm_scores")
    predictions = data.get("predictions")
    summary = data.get("feedback_summary")

    return _build(
        WeekRecord,
        week_number=int(week_number),
        test_max=int(test_max) if test_max is not None else None,
        selected_algorithm=str(data.get("selected_algorithm", "linear")),
        algorithm_scores=(
            {name: dict_to_algorithm_score(s) for name, s in scores.items()}
            if scores is not None
            else None
        ),
        predictions=dict(predictions) if predictions is not None else None,
        plan=[dict_to_daily_plan(day) for day in data.get("plan", [])],
        feedback_summary=dict_to_feedback_summary(summary) if summary is not None else None,
        sessions=[dict_to_session_record(s) for s in data.get("sessions", [])],
        status=data.get("status", "completed"),
    )


# =============================================================================
# SCORING HISTORY
# =============================================================================


def algorithm_outcome_to_dict(outcome: AlgorithmOutcome) -> dict[str, Any]:
    return {
        "prediction": outcome.prediction,
        "actual_outcome": outcome.actual_outcome,
        "precision_score": outcome.precision_score,
    }


def dict_to_algorithm_outcome(data: dict[str, Any]) -> AlgorithmOutcome:
    if not isinstance(data, dict):
        raise ValidationError(f"Expected an object, got {type(data).__name__}")
    actual = _optional_number(data, "actual_outcome")
    return AlgorithmOutcome(
        prediction=_optional_number(data, "prediction"),
        actual_outcome=int(actual) if actual is not None else None,
        precision_score=_optional_number(data, "precision_score"),
    )


def scoring_entry_to_dict(entry: ScoringEntry) -> dict[str, Any]:
    return {
        "week_number": entry.week_number,
        "test_max": entry.test_max,
        "selected_algorithm": entry.selected_algorithm,
        "reasoning": entry.reasoning,
        "per_algorithm": {
            name: algorithm_outcome_to_dict(outcome) for name, outcome in entry.per_algorithm.items()
        },
    }


def dict_to_scoring_entry(data: dict[str, Any]) -> ScoringEntry:
    """
    Convert dict to ScoringEntry.

    Raises:
        ValidationError: If data is invalid
    """
    week_number = validate_positive(_require(data, "week_number"), "week_number")
    test_max = data.get("test_max")
    if test_max is not None:
        validate_positive(test_max, "test_max")
    per_algorithm = data.get("per_algorithm", {})
    if not isinstance(per_algorithm, dict):
        raise ValidationError("per_algorithm must be an object")

    return _build(
        ScoringEntry,
        week_number=int(week_number),
        per_algorithm={name: dict_to_algorithm_outcome(o) for name, o in per_algorithm.items()},
        selected_algorithm=str(data.get("selected_algorithm", "linear")),
        reasoning=str(data.get("reasoning", "")),
        test_max=int(test_max) if test_max is not None else None,
    )


# =============================================================================
# ADVICE
# =============================================================================


def reliability_to_dict(reliability: Reliability) -> dict[str, Any]:
    return {
        "status": reliability.status,
        "reliable": reliability.reliable,
        "reason": reliability.reason,
        "data_points": reliability.data_points,
    }


def week_advice_to_dict(advice: WeekAdvice) -> dict[str, Any]:
    """
    Convert WeekAdvice to a JSON-compatible dict (output only).

    Plan days are keyed day2..day7; day 1 is the capacity test.
    """
    return {
        "algorithm": advice.algorithm,
        "label": advice.label,
        "is_beginner_mode": advice.is_beginner_mode,
        "reason": advice.reason,
        "reliability": reliability_to_dict(advice.reliability),
        "scores": (
            {name: algorithm_score_to_dict(s) for name, s in advice.scores.items()}
            if advice.scores is not None
            else None
        ),
        "predictions": dict(advice.predictions) if advice.predictions is not None else None,
        "plan": {f"day{i}": daily_plan_to_dict(day) for i, day in enumerate(advice.plan, start=2)},
        "total_volume": advice.total_volume,
    }
