"""
Velocity-based fatigue tracking.

Peak velocity drops as the athlete fatigues. For every movement type:
- The first K reps (default 3) set a fixed baseline velocity
- Every later rep is compared to that baseline and to the running peak
- Drop thresholds (default 10/20/30%) raise one alert each, once
- A least-squares trend predicts reps remaining until a threshold
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence
import logging

import numpy as np
from scipy import stats

from ironeye.config import Settings, get_settings
from ironeye.cv.kinematic_classifier import MovementType, RepEvent

logger = logging.getLogger(__name__)


class FatigueZone(Enum):
    """Ordered fatigue bands by drop from baseline."""
    FRESH = "fresh"
    MILD = "mild"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


# (lower bound %, zone), checked from the top
ZONE_BANDS = (
    (30.0, FatigueZone.CRITICAL),
    (20.0, FatigueZone.HIGH),
    (10.0, FatigueZone.MODERATE),
    (5.0, FatigueZone.MILD),
    (0.0, FatigueZone.FRESH),
)


def classify_zone(drop_percent: float) -> FatigueZone:
    """Step function from drop-from-baseline percentage to zone."""
    for lower, zone in ZONE_BANDS:
        if drop_percent >= lower:
            return zone
    return FatigueZone.FRESH


def drop_percent(reference: Optional[float], current: float) -> float:
    """max(0, (reference - current) / reference * 100); 0 without a reference."""
    if not reference:
        return 0.0
    return max(0.0, (reference - current) / reference * 100.0)


@dataclass(frozen=True)
class FatigueAlert:
    """A drop threshold crossed for the first time."""
    movement_type: MovementType
    threshold: float
    drop_from_baseline: float
    rep_index: int


@dataclass
class FatigueProfile:
    """Fatigue state for one movement type."""
    movement_type: MovementType
    velocities: List[float] = field(default_factory=list)
    baseline: Optional[float] = None
    peak: float = 0.0
    drop_from_baseline: float = 0.0
    drop_from_peak: float = 0.0
    crossed_thresholds: List[float] = field(default_factory=list)
    zone: FatigueZone = FatigueZone.FRESH

    @property
    def rep_count(self) -> int:
        return len(self.velocities)

    @property
    def last_velocity(self) -> Optional[float]:
        return self.velocities[-1] if self.velocities else None


class FatigueTracker:
    """
    Per-movement fatigue tracking driven only by rep events.

    Usage:
        tracker = FatigueTracker()
        for event in rep_events:
            for alert in tracker.record_rep(event):
                print(f"{alert.threshold:.0f}% drop reached")
    """

    MIN_TREND_REPS = 3

    def __init__(
        self,
        settings: Optional[Settings] = None,
        baseline_reps: Optional[int] = None,
        thresholds: Optional[Sequence[float]] = None
    ):
        settings = settings or get_settings()
        if baseline_reps is None:
            baseline_reps = settings.fatigue_baseline_reps
        self.baseline_reps = baseline_reps
        if self.baseline_reps < 1:
            raise ValueError(f"Baseline rep count must be positive: {self.baseline_reps}")
        if thresholds is None:
            thresholds = settings.fatigue_thresholds
        self.thresholds = tuple(sorted(thresholds))
        self.profiles: Dict[MovementType, FatigueProfile] = {}

        logger.info(f"FatigueTracker initialized: baseline={self.baseline_reps} reps, "
                    f"thresholds={self.thresholds}")

    def record_rep(self, event: RepEvent) -> List[FatigueAlert]:
        """Add one rep; returns thresholds newly crossed by it."""
        movement = event.movement_type
        profile = self.profiles.get(movement)
        if profile is None:
            profile = self.profiles[movement] = FatigueProfile(movement_type=movement)

        velocity = event.peak_velocity
        profile.velocities.append(velocity)
        profile.peak = max(profile.peak, velocity)

        if profile.baseline is None:
            if profile.rep_count == self.baseline_reps:
                profile.baseline = float(np.mean(profile.velocities))
                logger.info(f"{movement.value} baseline set: {profile.baseline:.2f} m/s")
            return []

        profile.drop_from_baseline = drop_percent(profile.baseline, velocity)
        profile.drop_from_peak = drop_percent(profile.peak, velocity)
        profile.zone = classify_zone(profile.drop_from_baseline)

        alerts = []
        for threshold in self.thresholds:
            if threshold in profile.crossed_thresholds:
                continue
            if profile.drop_from_baseline >= threshold:
                profile.crossed_thresholds.append(threshold)
                alerts.append(FatigueAlert(
                    movement_type=movement,
                    threshold=threshold,
                    drop_from_baseline=profile.drop_from_baseline,
                    rep_index=profile.rep_count,
                ))
                logger.info(f"{movement.value} fatigue threshold {threshold:.0f}% crossed "
                            f"(drop {profile.drop_from_baseline:.1f}%)")
        profile.crossed_thresholds.sort()
        return alerts

    def reps_remaining(
        self,
        movement: MovementType,
        threshold: Optional[float] = None
    ) -> Optional[int]:
        """
        Predict reps left until ``threshold`` percent drop from baseline.

        Fits velocity against rep index (1-based) by ordinary least squares.
        Returns None with too few reps, no baseline, or a non-negative slope.
        """
        profile = self.profiles.get(movement)
        if profile is None or profile.baseline is None:
            return None
        if profile.rep_count < self.MIN_TREND_REPS:
            return None

        if threshold is None:
            if not self.thresholds:
                return None
            threshold = self.thresholds[-1]
        target = profile.baseline * (1.0 - threshold / 100.0)

        indices = np.arange(1, profile.rep_count + 1, dtype=float)
        fit = stats.linregress(indices, np.asarray(profile.velocities, dtype=float))
        if not np.isfinite(fit.slope) or fit.slope >= 0:
            return None

        crossing = (target - fit.intercept) / fit.slope
        return max(0, math.ceil(crossing - profile.rep_count))

    def get_profile(self, movement: MovementType) -> Optional[FatigueProfile]:
        return self.profiles.get(movement)

    def reset(self):
        """Start a new fatigue epoch for every movement type."""
        self.profiles.clear()

    def get_fatigue_summary(self) -> dict:
        """Get summary of fatigue analysis."""
        return {
            movement.value: {
                "reps": profile.rep_count,
                "baseline": profile.baseline,
                "peak": profile.peak,
                "drop_from_baseline": profile.drop_from_baseline,
                "drop_from_peak": profile.drop_from_peak,
                "crossed_thresholds": list(profile.crossed_thresholds),
                "zone": profile.zone.value,
                "reps_remaining": self.reps_remaining(movement),
            }
            for movement, profile in self.profiles.items()
        }
