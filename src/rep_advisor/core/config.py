"""
Configuration constants for the progression advisor.

All adjustable parameters are centralized here for easy tuning.
Values can be overridden from YAML via core/engine/config_loader.py.
"""

import math
from dataclasses import dataclass
from typing import Final

# =============================================================================
# SAFETY BOUNDS (applied to every generated plan)
# =============================================================================

MIN_REPS: Final[int] = 3  # Floor for reps per set
MAX_REPS_FACTOR: Final[float] = 1.2  # Reps ceiling = ceil(test_max × factor)
MIN_SETS: Final[int] = 2
MAX_SETS: Final[int] = 10
MIN_REST: Final[int] = 20  # Seconds
MAX_REST: Final[int] = 180
TRAINING_DAYS: Final[int] = 6  # Days 2–7; day 1 is the capacity test

# =============================================================================
# BEGINNER MODE
# =============================================================================

BEGINNER_THRESHOLD: Final[int] = 5  # test_max below this → fixed plan
BEGINNER_SETS: Final[int] = 5
BEGINNER_REPS: Final[int] = 3
BEGINNER_REST: Final[int] = 90

# =============================================================================
# IMPOSSIBLE-FEEDBACK RULE
# =============================================================================

IMPOSSIBLE_SETS_FACTOR: Final[int] = 2
IMPOSSIBLE_REPS_DIVISOR: Final[int] = 2
IMPOSSIBLE_REST_REDUCTION: Final[int] = 15
IMPOSSIBLE_REST_FLOOR: Final[int] = 30

# =============================================================================
# DEFAULTS FOR SPARSE HISTORY
# =============================================================================

DEFAULT_TEST_MAX: Final[int] = 10  # Used when history has no valid test max
DEFAULT_ALGORITHM: Final[str] = "linear"

# =============================================================================
# COMPARATIVE SCORING
# =============================================================================

WEIGHT_PRECISION: Final[float] = 0.5
WEIGHT_FEEDBACK: Final[float] = 0.3
WEIGHT_TREND: Final[float] = 0.2
NEUTRAL_SCORE: Final[float] = 50.0
PRECISION_PENALTY: Final[float] = 200.0  # Points lost per 100% prediction error
IMPOSSIBLE_PENALTY: Final[float] = 150.0
RECENCY_DECAY: Final[float] = 0.9
TREND_WINDOW: Final[int] = 3  # Test maxes considered by the trend score
STAGNATION_THRESHOLD: Final[float] = 0.05  # Relative change below this is "stagnant"

CLEAR_LEAD_MARGIN: Final[float] = 10.0
SLIGHT_LEAD_MARGIN: Final[float] = 3.0

RELIABLE_MIN_WEEKS: Final[int] = 4
RELIABLE_MIN_ELIGIBLE: Final[int] = 3

# =============================================================================
# LINEAR PROGRESSION
# =============================================================================

LINEAR_GROWTH_RATE: Final[float] = 0.10  # Weekly growth
LINEAR_VOLUME_FACTOR: Final[int] = 3  # Week-1 volume = test_max × factor
LINEAR_VOLUME_RATIOS: Final[tuple[float, ...]] = (0.20, 0.18, 0.15, 0.18, 0.17, 0.12)
LINEAR_REPAIR_THRESHOLD: Final[float] = 0.8  # sets×reps below this share of volume → raise reps

# =============================================================================
# FITNESS-FATIGUE (BANISTER) MODEL
# =============================================================================

K_FITNESS: Final[float] = 1.0
K_FATIGUE: Final[float] = 2.0
TAU_FITNESS: Final[float] = 45.0  # Days
TAU_FATIGUE: Final[float] = 15.0  # Days
BANISTER_POSITIVE_RATIO: Final[float] = 0.80  # Charge ratio when net effect > 0
BANISTER_NEGATIVE_RATIO: Final[float] = 0.60
BANISTER_MIN_CHARGE: Final[int] = 6
BANISTER_REST_BASE: Final[int] = 45
BANISTER_REST_PER_REP: Final[int] = 2

# =============================================================================
# DAILY UNDULATING PERIODIZATION
# =============================================================================

DUP_BASE_RATE: Final[float] = 0.05
DUP_EASY_BONUS: Final[float] = 0.02
DUP_IMPOSSIBLE_PENALTY: Final[float] = 0.02
DUP_TREND_ADJUST: Final[float] = 0.01
DUP_MAX_RATE: Final[float] = 0.15
DUP_EASY_THRESHOLD: Final[int] = 4  # Easy sessions in a week to earn the bonus
DUP_WEEKLY_INTENSITY_STEP: Final[float] = 0.05

# =============================================================================
# REPS IN RESERVE
# =============================================================================

DEFAULT_RIR: Final[float] = 2.0
RIR_BASE_RATE: Final[float] = 0.03
RIR_RATE_PER_UNIT: Final[float] = 0.015
RIR_MAX_RATE: Final[float] = 0.12
RIR_REP_BASE_RATIO: Final[float] = 0.6
RIR_REP_RATIO_PER_UNIT: Final[float] = 0.05
RIR_DAY_RATIOS: Final[tuple[float, ...]] = (0.18, 0.17, 0.17, 0.17, 0.16, 0.15)
RIR_SESSION_MULTIPLIERS: Final[dict[str, float]] = {
    "easy": 1.10,
    "perfect": 1.05,
}

# =============================================================================
# POLYNOMIAL REGRESSION
# =============================================================================

REGRESSION_SINGLE_POINT_GROWTH: Final[float] = 0.10
REGRESSION_MAX_WEEKLY_GROWTH: Final[float] = 0.30
REGRESSION_MIN_RATIO: Final[float] = 0.5  # Prediction floor = ratio × last max
REGRESSION_VOLUME_FACTOR: Final[int] = 3
REGRESSION_REP_RATIO: Final[float] = 0.70
REGRESSION_MIN_FACTOR: Final[float] = 0.5
REGRESSION_MAX_FACTOR: Final[float] = 2.0
REGRESSION_FLAT_MODEL_EPSILON: Final[float] = 0.001
REGRESSION_FAST_GROWTH: Final[float] = 0.05
REGRESSION_FAILURE_TIERS: Final[tuple[tuple[float, float], ...]] = (
    (0.30, 0.70),  # failure rate above 30% → 70% volume
    (0.15, 0.85),
)

# =============================================================================
# NUMERIC TOLERANCES
# =============================================================================

SINGULAR_EPSILON: Final[float] = 1e-10
CI95_Z: Final[float] = 1.96


@dataclass(frozen=True)
class BanisterParams:
    """Gains and time constants of the fitness-fatigue model."""

    k1: float = K_FITNESS
    k2: float = K_FATIGUE
    tau1: float = TAU_FITNESS
    tau2: float = TAU_FATIGUE

    def __post_init__(self) -> None:
        if self.tau1 <= 0 or self.tau2 <= 0:
            raise ValueError("Banister time constants must be positive")


@dataclass(frozen=True)
class ScoreWeights:
    """Composite score weights (precision, feedback, trend)."""

    precision: float = WEIGHT_PRECISION
    feedback: float = WEIGHT_FEEDBACK
    trend: float = WEIGHT_TREND

    def __post_init__(self) -> None:
        if min(self.precision, self.feedback, self.trend) < 0:
            raise ValueError("Score weights must be non-negative")


def max_reps_for(test_max: int) -> int:
    """Upper reps bound for a given capacity test result."""
    return math.ceil(test_max * MAX_REPS_FACTOR)
