"""
Linear progression.

Weekly volume grows by a fixed 10% from a week-1 base of 3 × test_max and
is spread over six days of alternating intensity zones. Reliable for new
users, so it is the default and the fallback of every other strategy.
"""

from dataclasses import dataclass
from typing import Sequence

from ..config import (
    LINEAR_GROWTH_RATE,
    LINEAR_REPAIR_THRESHOLD,
    LINEAR_VOLUME_FACTOR,
    LINEAR_VOLUME_RATIOS,
    MAX_SETS,
    MIN_REPS,
    MIN_SETS,
    max_reps_for,
)
from ..metrics import calculate_rest, clamp, distribute_volume, latest_test_max, round_half_up, round_int
from ..models import DailyPlan, TrainingType, WeekRecord
from .base import Strategy, StrategyInfo, beginner_plan, clamp_rest, is_beginner


@dataclass(frozen=True)
class IntensityZone:
    """Rep ratio, allowed set range and label of one training day."""

    rep_ratio: float  # Reps per set as a fraction of test_max
    sets_min: int
    sets_max: int
    training_type: TrainingType
    label: str


@dataclass(frozen=True)
class RestConfig:
    base_rest: int
    threshold: int
    add_per_chunk: int
    chunk_size: int


INTENSITY_ZONES: tuple[IntensityZone, ...] = (
    IntensityZone(0.60, 5, 6, "ENDURANCE", "Volume endurance"),
    IntensityZone(0.70, 4, 5, "MIXED", "Mixed strength-endurance"),
    IntensityZone(0.80, 3, 4, "FORCE", "Near-max strength"),
    IntensityZone(0.65, 4, 5, "ENDURANCE", "Moderate endurance"),
    IntensityZone(0.70, 4, 5, "MIXED", "Mixed strength-endurance"),
    IntensityZone(0.55, 5, 6, "ENDURANCE", "Light endurance"),
)

REST_CONFIGS: dict[str, RestConfig] = {
    "ENDURANCE": RestConfig(50, 15, 8, 5),
    "MIXED": RestConfig(60, 20, 10, 5),
    "FORCE": RestConfig(75, 20, 10, 5),
}


@dataclass(frozen=True)
class IntensityDetails:
    zone: IntensityZone
    reps: int
    intensity: float  # Percent of test_max


class LinearStrategy(Strategy):
    """Fixed 10% weekly growth with Prilepin-style intensity zones."""

    info = StrategyInfo(
        name="linear",
        label="Linear progression",
        description=(
            "Weekly volume grows by 10% and is spread over six days "
            "of alternating intensity zones."
        ),
    )

    def predict(self, week_number: int, history: Sequence[WeekRecord]) -> int:
        """
        last_test_max × 1.10^Δweeks, Δweeks = max(1, week − last recorded week).
        """
        if not history:
            return 1
        last = latest_test_max(history)
        weeks_delta = max(1, week_number - history[-1].week_number)
        predicted = last * (1 + LINEAR_GROWTH_RATE) ** weeks_delta
        return max(1, round_int(predicted))

    def plan(
        self, week_number: int, test_max: int, history: Sequence[WeekRecord]
    ) -> list[DailyPlan]:
        if is_beginner(test_max):
            return beginner_plan()

        weekly_volume = self.predicted_weekly_volume(week_number, test_max)
        daily_volumes = distribute_volume(weekly_volume, LINEAR_VOLUME_RATIOS)
        return [
            self._day_plan(volume, test_max, zone)
            for volume, zone in zip(daily_volumes, INTENSITY_ZONES)
        ]

    def predicted_weekly_volume(self, week_number: int, test_max: int) -> int:
        """Week-1 volume of 3 × test_max compounded by 10% per week."""
        base = test_max * LINEAR_VOLUME_FACTOR
        return round_int(base * (1 + LINEAR_GROWTH_RATE) ** (week_number - 1))

    def intensity_details(self, day_index: int, test_max: int) -> IntensityDetails:
        """Zone, target reps and intensity percentage of a day (0 = day 2)."""
        zone = INTENSITY_ZONES[int(clamp(day_index, 0, len(INTENSITY_ZONES) - 1))]
        return IntensityDetails(
            zone=zone,
            reps=round_int(test_max * zone.rep_ratio),
            intensity=round_half_up(zone.rep_ratio * 100, 1),
        )

    def _day_plan(self, day_volume: int, test_max: int, zone: IntensityZone) -> DailyPlan:
        max_reps = max_reps_for(test_max)
        reps = int(clamp(round_int(test_max * zone.rep_ratio), MIN_REPS, max_reps))
        sets = int(clamp(round_int(day_volume / reps), zone.sets_min, zone.sets_max))

        # Zone set range too narrow for the volume: raise reps once.
        if sets * reps < day_volume * LINEAR_REPAIR_THRESHOLD and reps < max_reps:
            reps = int(clamp(round_int(day_volume / sets), MIN_REPS, max_reps))

        sets = int(clamp(sets, MIN_SETS, MAX_SETS))
        reps = int(clamp(reps, MIN_REPS, max_reps))

        cfg = REST_CONFIGS[zone.training_type]
        rest = calculate_rest(reps, cfg.base_rest, cfg.threshold, cfg.add_per_chunk, cfg.chunk_size)
        return DailyPlan(sets, reps, clamp_rest(rest), zone.training_type)
