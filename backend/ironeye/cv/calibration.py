"""
One-time anthropometric calibration.

PROTOCOL:
1. Caller supplies the athlete's height (inches), validated to a sane range
2. CAPTURING: collect ankle-to-nose pixel distance while the athlete stands
   tall; frames where the distance is under 30% of the frame height are
   rejected without advancing the counter
3. COMPLETE: median distance -> cm-per-pixel scale, then body segments are
   measured on the final frame and converted to meters

The median (not the mean) keeps a single bad detection from shifting the scale.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
import logging

import numpy as np

from ironeye.config import Settings, get_settings
from ironeye.cv.landmarks import Joint, PoseSnapshot, Side, pixel_distance

logger = logging.getLogger(__name__)

CM_PER_INCH = 2.54


class CalibrationError(ValueError):
    """Input unusable for calibration."""


class InvalidHeightError(CalibrationError):
    """Height outside the plausible human range."""


class CalibrationStatus(Enum):
    WAITING = "waiting"
    CAPTURING = "capturing"
    INVALID = "invalid"
    COMPLETE = "complete"


@dataclass(frozen=True)
class CalibrationProgress:
    """Typed "not yet" status returned for every captured frame."""
    status: CalibrationStatus
    progress: float = 0.0
    message: str = ""


@dataclass(frozen=True)
class SegmentLengths:
    """Body segment lengths in meters (left/right average)."""
    torso: float = 0.0
    upper_arm: float = 0.0
    forearm: float = 0.0
    thigh: float = 0.0
    shin: float = 0.0


@dataclass(frozen=True)
class CalibrationProfile:
    """Immutable calibration result."""
    height_cm: float
    scale_factor: float  # cm per pixel
    median_pixel_height: float
    frame_height: int
    segments: SegmentLengths
    arm_length: float     # meters
    arm_length_px: float
    captured_at: Optional[float] = None

    @property
    def pixels_per_meter(self) -> float:
        return 100.0 / self.scale_factor

    @property
    def meters_per_pixel(self) -> float:
        return self.scale_factor / 100.0

    @property
    def arm_length_normalized(self) -> float:
        """Arm length as a fraction of the frame height."""
        return self.arm_length_px / self.frame_height if self.frame_height else 0.0


def validate_height(height_inches: float, settings: Optional[Settings] = None) -> float:
    """Validate a user-supplied height and return it in centimeters."""
    settings = settings or get_settings()
    if height_inches is None or not np.isfinite(height_inches):
        raise InvalidHeightError(f"Height must be a number: {height_inches}")
    if not settings.min_height_inches <= height_inches <= settings.max_height_inches:
        raise InvalidHeightError(
            f"Height {height_inches} in outside "
            f"{settings.min_height_inches}-{settings.max_height_inches} in"
        )
    return height_inches * CM_PER_INCH


class CalibrationSystem:
    """
    Height-based pixel-to-meter calibration.

    Usage:
        calibration = CalibrationSystem()
        calibration.start(70)
        for pose in poses:
            progress = calibration.capture_frame(pose)
            if progress.status is CalibrationStatus.COMPLETE:
                break
        scale = calibration.scale_factor
    """

    # (segment name, joint pair)
    SEGMENT_JOINTS = {
        "torso": (Joint.SHOULDER, Joint.HIP),
        "thigh": (Joint.HIP, Joint.KNEE),
        "shin": (Joint.KNEE, Joint.ANKLE),
        "upper_arm": (Joint.SHOULDER, Joint.ELBOW),
        "forearm": (Joint.ELBOW, Joint.WRIST),
    }

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.frames_needed = self.settings.calibration_frames
        self.frame_width = self.settings.frame_width
        self.frame_height = self.settings.frame_height
        self.reset()

    def reset(self):
        """Clear samples and the profile."""
        self.status = CalibrationStatus.WAITING
        self.height_cm: Optional[float] = None
        self.samples: List[float] = []
        self._profile: Optional[CalibrationProfile] = None

    def start(self, height_inches: float):
        """Validate height and begin capturing."""
        if self._profile is not None:
            raise CalibrationError("Calibration already complete; reset before recalibrating")
        self.height_cm = validate_height(height_inches, self.settings)
        self.samples = []
        self.status = CalibrationStatus.CAPTURING
        logger.info(f"Height set: {height_inches}\" = {self.height_cm:.1f}cm")

    def capture_frame(self, pose: PoseSnapshot) -> CalibrationProgress:
        """Add one standing-tall frame to the sample window."""
        if self.status is CalibrationStatus.COMPLETE:
            return CalibrationProgress(CalibrationStatus.COMPLETE, 1.0)
        if self.status is CalibrationStatus.WAITING:
            return CalibrationProgress(CalibrationStatus.WAITING, 0.0, "Height required")

        nose = pose.nose()
        ankles = [a for a in (pose.get(Side.LEFT, Joint.ANKLE), pose.get(Side.RIGHT, Joint.ANKLE)) if a]
        if nose is None or not ankles:
            return CalibrationProgress(
                CalibrationStatus.INVALID, self.progress, "Full body not visible"
            )

        ankle_y = float(np.mean([a.y for a in ankles]))
        height_px = abs(ankle_y - nose.y) * self.frame_height

        # Must be standing upright
        if height_px < self.frame_height * self.settings.min_upright_fraction:
            return CalibrationProgress(CalibrationStatus.INVALID, self.progress, "Stand upright")

        self.samples.append(height_px)

        if len(self.samples) >= self.frames_needed:
            self._finalize(pose)
            return CalibrationProgress(CalibrationStatus.COMPLETE, 1.0)

        return CalibrationProgress(CalibrationStatus.CAPTURING, self.progress)

    def _finalize(self, pose: PoseSnapshot):
        median_px = float(np.median(self.samples))

        # Ankle-to-nose is ~88% of standing height
        effective_height_cm = self.height_cm * (1.0 - self.settings.head_offset_fraction)
        scale = effective_height_cm / median_px
        meters_per_pixel = scale / 100.0

        lengths_px = {
            name: self._measure_segment(pose, a, b)
            for name, (a, b) in self.SEGMENT_JOINTS.items()
        }
        segments = SegmentLengths(**{
            name: length * meters_per_pixel for name, length in lengths_px.items()
        })
        arm_length_px = lengths_px["upper_arm"] + lengths_px["forearm"]

        self._profile = CalibrationProfile(
            height_cm=self.height_cm,
            scale_factor=scale,
            median_pixel_height=median_px,
            frame_height=self.frame_height,
            segments=segments,
            arm_length=arm_length_px * meters_per_pixel,
            arm_length_px=arm_length_px,
            captured_at=pose.timestamp,
        )
        self.status = CalibrationStatus.COMPLETE
        logger.info(
            f"Calibration complete: scale={scale:.4f} cm/px, "
            f"arm={self._profile.arm_length:.3f} m"
        )

    def _measure_segment(self, pose: PoseSnapshot, a: Joint, b: Joint) -> float:
        """Left/right average pixel length (single side if only one visible)."""
        lengths = []
        for side in Side:
            start = pose.get(side, a)
            end = pose.get(side, b)
            if start and end:
                lengths.append(pixel_distance(start, end, self.frame_width, self.frame_height))
        return float(np.mean(lengths)) if lengths else 0.0

    def load(self, profile: CalibrationProfile):
        """Restore a previously captured profile."""
        if self._profile is not None:
            raise CalibrationError("Calibration already complete; reset before loading")
        self._profile = profile
        self.height_cm = profile.height_cm
        self.status = CalibrationStatus.COMPLETE

    @property
    def profile(self) -> Optional[CalibrationProfile]:
        return self._profile

    @property
    def progress(self) -> float:
        if self.status is CalibrationStatus.COMPLETE:
            return 1.0
        return min(1.0, len(self.samples) / self.frames_needed)

    @property
    def is_complete(self) -> bool:
        return self._profile is not None

    @property
    def is_capturing(self) -> bool:
        return self.status is CalibrationStatus.CAPTURING

    @property
    def scale_factor(self) -> Optional[float]:
        return self._profile.scale_factor if self._profile else None

    @property
    def pixels_per_meter(self) -> Optional[float]:
        return self._profile.pixels_per_meter if self._profile else None

    @property
    def arm_length(self) -> Optional[float]:
        return self._profile.arm_length if self._profile else None
