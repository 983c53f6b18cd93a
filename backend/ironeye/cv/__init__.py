"""
Computer Vision pipeline for kettlebell velocity-based training.

PIPELINE COMPONENTS:
1. Landmarks: PoseSnapshot data model, joint geometry, MediaPipe adapter
2. LandmarkSmoother: One Euro / EMA per-joint temporal smoothing
3. CalibrationSystem: Height -> pixel-to-meter scale, body segment lengths
4. VelocityEstimator: Gated, clamped, filtered metric wrist velocity
5. MovementClassifier: IDLE/MOVING/RETURNING/SETTLING rep state machine
6. FatigueTracker: Per-movement velocity baseline, drop alerts, zones
7. SetRestTracker: Work/rest intervals from rep and boundary events
8. PhysicsEngine + RepLog: Per-rep power/work and tabular records
9. TrainingSession: Main orchestration pipeline

Usage:
    from ironeye.cv import TrainingSession

    session = TrainingSession()
    session.begin_calibration(70)
    for pose in poses:
        result = session.process_frame(pose)
        for rep in result.reps:
            print(f"{rep.movement_type.value}: {rep.peak_velocity:.2f} m/s")
"""

from ironeye.cv.landmarks import (
    Side, Joint, Landmark, PoseSnapshot, angle_between, joint_angle, elbow_flexion
)
from ironeye.cv.keypoint_smoother import LandmarkSmoother, OneEuroFilter, ExponentialSmoother
from ironeye.cv.calibration import (
    CalibrationSystem, CalibrationProfile, CalibrationProgress, CalibrationStatus,
    SegmentLengths, CalibrationError, InvalidHeightError, validate_height
)
from ironeye.cv.velocity_estimator import VelocityEstimator, VelocitySample
from ironeye.cv.kinematic_classifier import (
    MovementClassifier,
    MovementType,
    MovementPhase,
    StartPosition,
    RepValidity,
    EventType,
    RepEvent,
    PhaseChangeEvent,
    SideLockedEvent,
    SetBoundaryEvent,
    PostureFlags,
    RepState,
    StandingResetDetector,
)
from ironeye.cv.fatigue_handler import (
    FatigueTracker, FatigueProfile, FatigueAlert, FatigueZone, classify_zone
)
from ironeye.cv.set_timer import SetRestTracker, SetRecord, TimingStatus
from ironeye.cv.physics import PhysicsEngine
from ironeye.cv.rep_log import RepLog
from ironeye.cv.session import TrainingSession, FrameResult

__all__ = [
    # Landmarks & geometry
    "Side",
    "Joint",
    "Landmark",
    "PoseSnapshot",
    "angle_between",
    "joint_angle",
    "elbow_flexion",

    # Smoothing
    "LandmarkSmoother",
    "OneEuroFilter",
    "ExponentialSmoother",

    # Calibration
    "CalibrationSystem",
    "CalibrationProfile",
    "CalibrationProgress",
    "CalibrationStatus",
    "SegmentLengths",
    "CalibrationError",
    "InvalidHeightError",
    "validate_height",

    # Velocity
    "VelocityEstimator",
    "VelocitySample",

    # Movement classification (state machine)
    "MovementClassifier",
    "MovementType",
    "MovementPhase",
    "StartPosition",
    "RepValidity",
    "EventType",
    "RepEvent",
    "PhaseChangeEvent",
    "SideLockedEvent",
    "SetBoundaryEvent",
    "PostureFlags",
    "RepState",
    "StandingResetDetector",

    # Fatigue
    "FatigueTracker",
    "FatigueProfile",
    "FatigueAlert",
    "FatigueZone",
    "classify_zone",

    # Set/rest timing
    "SetRestTracker",
    "SetRecord",
    "TimingStatus",

    # Physics & logging
    "PhysicsEngine",
    "RepLog",

    # Main pipeline
    "TrainingSession",
    "FrameResult",
]
