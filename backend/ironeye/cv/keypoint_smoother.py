"""
Temporal landmark smoothing using One Euro and Exponential Moving Average filters.

SMOOTHING STRATEGY:
1. One Euro filter: Primary smoother - cutoff frequency scales with the
   signal's rate of change, so fast movements get low lag and a still
   athlete gets strong denoising
2. EMA: Fixed-coefficient alternative for sources that are already clean

Both filters run independently per axis, per joint, per side. The first
sample of every filter passes through unchanged.
"""

import math
from typing import Dict, Optional, Tuple
import logging

from ironeye.config import Settings, get_settings
from ironeye.cv.landmarks import Joint, Landmark, PoseSnapshot, Side

logger = logging.getLogger(__name__)


class ExponentialSmoother:
    """Fixed-coefficient exponential smoothing."""

    def __init__(self, alpha: float = 0.3):
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"EMA alpha must be in (0, 1]: {alpha}")
        self.alpha = alpha
        self.value: Optional[float] = None

    def filter(self, value: float, timestamp: Optional[float] = None) -> float:
        if self.value is None:
            self.value = value
        else:
            self.value = self.value + self.alpha * (value - self.value)
        return self.value

    def reset(self):
        self.value = None


class OneEuroFilter:
    """
    Adaptive-cutoff low-pass filter.

    cutoff = min_cutoff + beta * |dx/dt|, where the derivative is itself
    low-passed at ``d_cutoff``. Timestamps are in seconds.
    """

    def __init__(
        self,
        min_cutoff: float = 0.05,
        beta: float = 0.25,
        d_cutoff: float = 1.0
    ):
        self.min_cutoff = min_cutoff
        self.beta = beta
        self.d_cutoff = d_cutoff
        self.value: Optional[float] = None
        self.dx = 0.0
        self.last_time: Optional[float] = None

    @staticmethod
    def _alpha(cutoff: float, freq: float) -> float:
        tau = 1.0 / (2.0 * math.pi * cutoff)
        return 1.0 / (1.0 + tau * freq)

    def filter(self, value: float, timestamp: float) -> float:
        if self.value is None or self.last_time is None:
            self.value = value
            self.last_time = timestamp
            return value

        dt = timestamp - self.last_time
        if dt <= 0:
            return self.value

        freq = 1.0 / dt
        dx = (value - self.value) * freq
        self.dx = self.dx + self._alpha(self.d_cutoff, freq) * (dx - self.dx)

        cutoff = self.min_cutoff + self.beta * abs(self.dx)
        self.value = self.value + self._alpha(cutoff, freq) * (value - self.value)
        self.last_time = timestamp
        return self.value

    def reset(self):
        self.value = None
        self.dx = 0.0
        self.last_time = None


class LandmarkSmoother:
    """
    Per-joint landmark smoother.

    Features:
    - One filter per axis for every (side, joint), created on first sight
    - Missing depth defaults to zero
    - Joints absent from the raw frame are absent from the output
      (their filter memory is kept for when they reappear)
    """

    MODES = ("one_euro", "ema")

    def __init__(self, settings: Optional[Settings] = None, mode: Optional[str] = None):
        self.settings = settings or get_settings()
        self.mode = mode or self.settings.smoothing_mode
        if self.mode not in self.MODES:
            raise ValueError(f"Unsupported smoothing mode: {self.mode}")

        # (side, joint) -> (x, y, z) filters
        self._filters: Dict[Tuple[Side, Joint], Tuple] = {}

        logger.info(f"LandmarkSmoother initialized: mode={self.mode}")

    def _make_filter(self):
        if self.mode == "ema":
            return ExponentialSmoother(self.settings.ema_alpha)
        return OneEuroFilter(
            min_cutoff=self.settings.one_euro_min_cutoff,
            beta=self.settings.one_euro_beta,
            d_cutoff=self.settings.one_euro_d_cutoff,
        )

    def smooth(self, pose: PoseSnapshot) -> PoseSnapshot:
        """Return a smoothed copy of ``pose``."""
        result = PoseSnapshot(timestamp=pose.timestamp)

        for side in Side:
            source = pose.side(side)
            target = result.side(side)
            for joint in Joint:
                raw = pose.get(side, joint)
                if raw is None:
                    continue

                key = (side, joint)
                if key not in self._filters:
                    self._filters[key] = tuple(self._make_filter() for _ in range(3))
                fx, fy, fz = self._filters[key]

                target[joint] = Landmark(
                    x=fx.filter(raw.x, pose.timestamp),
                    y=fy.filter(raw.y, pose.timestamp),
                    z=fz.filter(raw.z or 0.0, pose.timestamp),
                    visibility=source[joint].visibility,
                )

        return result

    def reset(self):
        """Reset all smoothing history."""
        self._filters.clear()
