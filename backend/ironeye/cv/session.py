"""
Frame-synchronous training session pipeline.

PIPELINE per frame:
1. Landmark smoothing (One Euro / EMA)
2. Calibration capture (calibration phase only; nothing else runs)
3. Working-wrist velocity estimation
4. Movement classification state machine
5. Rep events -> fatigue tracker, set/rest timer, rep log
   Boundary events -> set/rest timer

All state belongs to one session instance; call ``process_frame`` once per
rendered frame from a single thread.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional
import logging

from ironeye.config import Settings, get_settings
from ironeye.cv.calibration import (
    CalibrationError, CalibrationProgress, CalibrationStatus, CalibrationSystem
)
from ironeye.cv.fatigue_handler import FatigueAlert, FatigueTracker
from ironeye.cv.keypoint_smoother import LandmarkSmoother
from ironeye.cv.kinematic_classifier import (
    EngineEvent, EventType, MovementClassifier, RepEvent
)
from ironeye.cv.landmarks import Joint, PoseSnapshot, Side
from ironeye.cv.physics import PhysicsEngine
from ironeye.cv.rep_log import RepLog
from ironeye.cv.set_timer import SetRestTracker
from ironeye.cv.velocity_estimator import VelocityEstimator, VelocitySample
from ironeye.schemas.rep import RepRecord
from ironeye.schemas.status import (
    CalibrationResponse, FatigueStatusResponse, SessionStatusResponse, TimingStatusResponse
)

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Everything one frame produced."""
    timestamp: float
    events: List[EngineEvent] = field(default_factory=list)
    velocity: Optional[VelocitySample] = None
    calibration: Optional[CalibrationProgress] = None
    calibration_payload: Optional[CalibrationResponse] = None
    fatigue_alerts: List[FatigueAlert] = field(default_factory=list)
    rep_records: List[RepRecord] = field(default_factory=list)

    @property
    def reps(self) -> List[RepEvent]:
        return [e for e in self.events if e.type is EventType.REP_COMPLETE]


class TrainingSession:
    """
    Owns every pipeline component for one athlete session.

    Usage:
        session = TrainingSession()
        session.begin_calibration(70)
        for pose in stream:
            result = session.process_frame(pose)
            for rep in result.reps:
                print(rep.movement_type.value, rep.peak_velocity)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], float]] = None,
        working_side: Optional[Side] = None,
        kettlebell_mass_kg: Optional[float] = None
    ):
        self.settings = settings or get_settings()
        self.clock = clock or time.monotonic

        self.smoother = LandmarkSmoother(self.settings)
        self.calibration = CalibrationSystem(self.settings)
        self.velocity = VelocityEstimator(self.settings)
        self.classifier = MovementClassifier(self.settings, working_side=working_side)
        self.fatigue = FatigueTracker(self.settings)
        self.timing = SetRestTracker()
        self.physics = PhysicsEngine(kettlebell_mass_kg or self.settings.kettlebell_mass_kg)
        self.rep_log = RepLog(self.physics)

        self._tracked_side: Optional[Side] = None
        self._last_sample: Optional[VelocitySample] = None

    # -------------------------------------------------------------------------
    # Calibration
    # -------------------------------------------------------------------------

    def begin_calibration(self, height_inches: float):
        """Start capturing; raises InvalidHeightError for implausible heights."""
        self.calibration.start(height_inches)
        logger.info("Calibration started")

    def recalibrate(self, height_inches: float):
        """Discard the current profile and capture a new one (not mid-rep)."""
        if self.classifier.is_mid_rep:
            raise CalibrationError("Cannot recalibrate during a repetition")
        self.calibration.reset()
        self.velocity.meters_per_pixel = None
        self.velocity.reset()
        self.classifier.set_calibration(None)
        self.begin_calibration(height_inches)

    def _apply_calibration(self) -> CalibrationResponse:
        profile = self.calibration.profile
        self.velocity.set_scale(profile.meters_per_pixel)
        self.velocity.reset()
        self.classifier.set_calibration(profile)
        return CalibrationResponse.model_validate(profile)

    @property
    def calibration_payload(self) -> Optional[CalibrationResponse]:
        if not self.calibration.is_complete:
            return None
        return CalibrationResponse.model_validate(self.calibration.profile)

    # -------------------------------------------------------------------------
    # Frame processing
    # -------------------------------------------------------------------------

    def process_frame(self, raw_pose: PoseSnapshot, timestamp: Optional[float] = None) -> FrameResult:
        if timestamp is not None:
            raw_pose = PoseSnapshot(timestamp=timestamp, left=raw_pose.left, right=raw_pose.right)

        pose = self.smoother.smooth(raw_pose)
        result = FrameResult(timestamp=pose.timestamp)

        if self.calibration.is_capturing:
            result.calibration = self.calibration.capture_frame(pose)
            if result.calibration.status is CalibrationStatus.COMPLETE:
                result.calibration_payload = self._apply_calibration()
            return result

        result.velocity = self._update_velocity(pose)
        speed = result.velocity.speed if result.velocity else 0.0
        reliable = result.velocity.reliable if result.velocity else True

        result.events = self.classifier.update(pose, speed, reliable)

        for event in result.events:
            if event.type is EventType.REP_COMPLETE:
                result.fatigue_alerts.extend(self.fatigue.record_rep(event))
                self.timing.on_rep(event.timestamp)
                result.rep_records.append(self._log_rep(event))
            elif event.type is EventType.SET_BOUNDARY:
                self.timing.on_boundary(event.timestamp)

        return result

    def _update_velocity(self, pose: PoseSnapshot) -> Optional[VelocitySample]:
        side = self.classifier.locked_side
        if side is not self._tracked_side:
            self.velocity.reset()
            self._tracked_side = side
        if side is None:
            return None

        wrist = pose.get(side, Joint.WRIST)
        if wrist is None:
            return self._last_sample

        self._last_sample = self.velocity.update(wrist, pose.timestamp)
        return self._last_sample

    def _log_rep(self, event: RepEvent) -> RepRecord:
        profile = self.calibration.profile
        return self.rep_log.append(
            event,
            meters_per_pixel=profile.meters_per_pixel if profile else None,
            frame_height=self.settings.frame_height,
        )

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def get_fatigue_status(self) -> List[FatigueStatusResponse]:
        statuses = []
        for movement, profile in self.fatigue.profiles.items():
            statuses.append(FatigueStatusResponse(
                movement_type=movement.value,
                reps=profile.rep_count,
                baseline=profile.baseline,
                peak=profile.peak,
                last_velocity=profile.last_velocity,
                drop_from_baseline=profile.drop_from_baseline,
                drop_from_peak=profile.drop_from_peak,
                crossed_thresholds=list(profile.crossed_thresholds),
                zone=profile.zone.value,
                reps_remaining=self.fatigue.reps_remaining(movement),
            ))
        return statuses

    def get_timing_status(self, now: Optional[float] = None) -> TimingStatusResponse:
        now = self.clock() if now is None else now
        return TimingStatusResponse.model_validate(self.timing.status(now))

    def get_status(self, now: Optional[float] = None) -> SessionStatusResponse:
        summary = self.classifier.get_summary()
        return SessionStatusResponse(
            calibrated=self.calibration.is_complete,
            calibration_progress=self.calibration.progress,
            locked_side=summary["locked_side"],
            phase=summary["phase"],
            current_speed=self._last_sample.speed if self._last_sample else 0.0,
            total_reps=summary["total_reps"],
            counts=summary["counts"],
            fatigue=self.get_fatigue_status(),
            timing=self.get_timing_status(now),
        )

    def reset(self):
        """Full session reset between frames (calibration included)."""
        self.smoother.reset()
        self.calibration.reset()
        self.velocity.meters_per_pixel = None
        self.velocity.reset()
        self.classifier.set_calibration(None)
        self.classifier.reset()
        self.fatigue.reset()
        self.timing.reset()
        self.rep_log.reset()
        self._tracked_side = None
        self._last_sample = None
        logger.info("Session reset")
