"""
Metric velocity estimation for the tracked point (working-side wrist).

PIPELINE per update:
1. Frame-interval gate: dt outside [min, max] keeps the previous velocity
2. Normalized displacement -> pixels -> meters (calibration scale)
3. Raw vector clamped to the physical ceiling
4. Per-axis EMA to suppress detector jitter
5. Dead band: sub-threshold speeds are reported as exactly zero
"""

from dataclasses import dataclass
from typing import Optional
import logging

import numpy as np

from ironeye.config import Settings, get_settings
from ironeye.cv.landmarks import Landmark

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VelocitySample:
    """Filtered 3D velocity (m/s) at a timestamp."""
    vx: float
    vy: float
    vz: float
    speed: float
    timestamp: float
    reliable: bool = True

    @property
    def vertical(self) -> float:
        """Upward velocity (positive = ascending)."""
        return -self.vy


class VelocityEstimator:
    """Filtered, clamped, metric velocity of a single tracked point."""

    def __init__(self, settings: Optional[Settings] = None, meters_per_pixel: Optional[float] = None):
        self.settings = settings or get_settings()
        self.meters_per_pixel = meters_per_pixel
        self._axis_scale = np.array([
            self.settings.frame_width,
            self.settings.frame_height,
            self.settings.frame_width if self.settings.include_depth else 0.0,
        ], dtype=float)
        self.reset()

    def set_scale(self, meters_per_pixel: float):
        """Seed the metric conversion from a calibration profile."""
        if meters_per_pixel <= 0:
            raise ValueError(f"Scale must be positive: {meters_per_pixel}")
        self.meters_per_pixel = meters_per_pixel

    def reset(self):
        self._last_position: Optional[np.ndarray] = None
        self._last_timestamp: Optional[float] = None
        self._velocity = np.zeros(3)

    def update(self, point: Landmark, timestamp: float) -> VelocitySample:
        position = point.as_array()

        if self._last_position is None or self._last_timestamp is None or not self.meters_per_pixel:
            self._last_position = position
            self._last_timestamp = timestamp
            return self._sample(timestamp)

        dt = timestamp - self._last_timestamp
        self._last_position, previous = position, self._last_position
        self._last_timestamp = timestamp

        if dt < self.settings.min_frame_interval or dt > self.settings.max_frame_interval:
            logger.debug(f"Velocity update withheld: dt={dt:.4f}s")
            return self._sample(timestamp, reliable=False)

        raw = (position - previous) * self._axis_scale * self.meters_per_pixel / dt

        raw_speed = float(np.linalg.norm(raw))
        if raw_speed > self.settings.max_speed:
            raw = raw * (self.settings.max_speed / raw_speed)

        alpha = self.settings.velocity_alpha
        self._velocity = self._velocity + alpha * (raw - self._velocity)

        if float(np.linalg.norm(self._velocity)) < self.settings.speed_dead_band:
            self._velocity = np.zeros(3)

        return self._sample(timestamp)

    def _sample(self, timestamp: float, reliable: bool = True) -> VelocitySample:
        vx, vy, vz = (float(v) for v in self._velocity)
        speed = min(float(np.linalg.norm(self._velocity)), self.settings.max_speed)
        return VelocitySample(vx=vx, vy=vy, vz=vz, speed=speed, timestamp=timestamp, reliable=reliable)

    @property
    def current_speed(self) -> float:
        return float(np.linalg.norm(self._velocity))
