"""
Data models for rep-advisor.

Core dataclasses for weekly training records, feedback, plans, scoring
history and the advice returned by the orchestrator.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Literal

Feedback = Literal["easy", "perfect", "impossible"]
SessionType = Literal["test", "training"]
SessionStatus = Literal["pending", "completed", "skipped"]
WeekStatus = Literal["pending", "current", "completed"]
ReliabilityStatus = Literal["unreliable", "improving", "reliable"]
TrainingType = Literal[
    "ENDURANCE",
    "MIXED",
    "FORCE",
    "HYPERTROPHY",
    "RECOVERY",
    "MODERATE",
    "INTENSE",
    "LIGHT",
    "STANDARD",
    "DELOAD",
    "ADAPTIVE",
    "BEGINNER",
]

FEEDBACK_VALUES: tuple[str, ...] = ("easy", "perfect", "impossible")
TRAINING_TYPES: tuple[str, ...] = TrainingType.__args__  # type: ignore[attr-defined]


@dataclass
class SessionRecord:
    """
    One day of a training week.

    actual_reps is the total number of reps completed across all sets
    (None until the session is logged).
    """

    week_number: int
    day_number: int  # 1 = capacity test day, 2–7 = training days
    session_type: SessionType = "training"
    planned_sets: int = 0
    planned_reps: int = 0
    actual_reps: int | None = None
    feedback: Feedback | None = None
    reserve_estimate: float | None = None  # RIR estimate for the session
    status: SessionStatus = "pending"

    def __post_init__(self) -> None:
        """Validate session data."""
        if self.week_number < 1:
            raise ValueError("week_number must be >= 1")
        if not 1 <= self.day_number <= 7:
            raise ValueError("day_number must be between 1 and 7")
        if self.session_type not in ("test", "training"):
            raise ValueError(f"Invalid session_type: {self.session_type}")
        if self.planned_sets < 0 or self.planned_reps < 0:
            raise ValueError("planned sets/reps must be non-negative")
        if self.actual_reps is not None and self.actual_reps < 0:
            raise ValueError("actual_reps must be non-negative")
        if self.feedback is not None and self.feedback not in FEEDBACK_VALUES:
            raise ValueError(f"Invalid feedback: {self.feedback}")
        if self.reserve_estimate is not None and self.reserve_estimate < 0:
            raise ValueError("reserve_estimate must be non-negative")
        if self.status not in ("pending", "completed", "skipped"):
            raise ValueError(f"Invalid status: {self.status}")

    @property
    def planned_volume(self) -> int:
        return self.planned_sets * self.planned_reps


@dataclass
class FeedbackSummary:
    """Aggregated feedback counts for one week."""

    easy: int = 0
    perfect: int = 0
    impossible: int = 0
    avg_reserve: float | None = None  # None = not measured
    volume_target: int = 0
    volume_actual: int = 0

    def __post_init__(self) -> None:
        """Validate counts."""
        if min(self.easy, self.perfect, self.impossible) < 0:
            raise ValueError("feedback counts must be non-negative")
        if self.volume_target < 0 or self.volume_actual < 0:
            raise ValueError("volumes must be non-negative")

    @property
    def total(self) -> int:
        """Number of sessions that received feedback."""
        return self.easy + self.perfect + self.impossible

    def count(self, feedback: str) -> int:
        return getattr(self, feedback)


@dataclass(frozen=True)
class DailyPlan:
    """Prescription for a single training day."""

    sets: int
    reps: int
    rest_seconds: int
    training_type: TrainingType

    def __post_init__(self) -> None:
        if self.sets < 0 or self.reps < 0 or self.rest_seconds < 0:
            raise ValueError("sets, reps and rest_seconds must be non-negative")
        if self.training_type not in TRAINING_TYPES:
            raise ValueError(f"Invalid training_type: {self.training_type}")

    @property
    def volume(self) -> int:
        return self.sets * self.reps


@dataclass
class AlgorithmScore:
    """Per-dimension and composite scores of one strategy (all 0–100)."""

    prediction: int | None
    precision_score: float
    feedback_score: float
    trend_score: float
    composite_score: float


@dataclass
class WeekRecord:
    """
    A full training week: capacity test, selected model, plan and feedback.

    test_max is None for a week whose capacity test has not been entered.
    """

    week_number: int
    test_max: int | None = None
    selected_algorithm: str = "linear"
    algorithm_scores: dict[str, AlgorithmScore] | None = None
    predictions: dict[str, int | None] | None = None
    plan: list[DailyPlan] = field(default_factory=list)
    feedback_summary: FeedbackSummary | None = None
    sessions: list[SessionRecord] = field(default_factory=list)
    status: WeekStatus = "completed"

    PLAN_LENGTHS: ClassVar[tuple[int, ...]] = (0, 6)

    def __post_init__(self) -> None:
        """Validate week data."""
        if self.week_number < 1:
            raise ValueError("week_number must be >= 1")
        if self.test_max is not None and self.test_max < 1:
            raise ValueError("test_max must be >= 1")
        if len(self.plan) not in self.PLAN_LENGTHS:
            raise ValueError(f"plan must have 0 or 6 days, got {len(self.plan)}")
        if self.status not in ("pending", "current", "completed"):
            raise ValueError(f"Invalid week status: {self.status}")
        for session in self.sessions:
            if session.week_number != self.week_number:
                raise ValueError(
                    f"Session for week {session.week_number} stored in week {self.week_number}"
                )

    @property
    def has_test_max(self) -> bool:
        return self.test_max is not None and self.test_max > 0


@dataclass
class AlgorithmOutcome:
    """What one strategy predicted for a week, and what actually happened."""

    prediction: float | None = None
    actual_outcome: int | None = None
    precision_score: float | None = None


@dataclass
class ScoringEntry:
    """
    Record of one week's model selection (one per week).

    test_max is the capacity result of that week when known; per-model
    actual_outcome values are used when it is missing.
    """

    week_number: int
    per_algorithm: dict[str, AlgorithmOutcome] = field(default_factory=dict)
    selected_algorithm: str = "linear"
    reasoning: str = ""
    test_max: int | None = None

    def __post_init__(self) -> None:
        if self.week_number < 1:
            raise ValueError("week_number must be >= 1")


@dataclass
class Reliability:
    """How much confidence the current model selection deserves."""

    status: ReliabilityStatus
    reason: str
    data_points: int = 0

    @property
    def reliable(self) -> bool:
        return self.status == "reliable"


@dataclass
class WeekAdvice:
    """Result of processing a new week: chosen model and its 6-day plan."""

    algorithm: str
    label: str
    scores: dict[str, AlgorithmScore] | None
    predictions: dict[str, int | None] | None
    plan: list[DailyPlan]
    reason: str
    reliability: Reliability
    is_beginner_mode: bool = False

    @property
    def total_volume(self) -> int:
        return sum(day.volume for day in self.plan)
