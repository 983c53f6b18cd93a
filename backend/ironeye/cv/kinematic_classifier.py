"""
Kettlebell Movement Classifier

A frame-synchronous state machine that labels single-arm kettlebell
repetitions from smoothed landmarks on one locked working side.

DATA INPUT CONTEXT (per frame):
- Smoothed PoseSnapshot (normalized coordinates, y grows downward)
- Filtered wrist speed (m/s) from the VelocityEstimator
- Whether that speed update was reliable (frame interval inside the band)

SUPPORTED MOVEMENTS:
1. Clean: below hip -> elbow folds -> held rack (or rack -> below hip -> rack)
2. Press: held rack -> overhead lockout -> held rack, never below hip
3. Snatch: below hip -> overhead lockout -> below hip (or lockout -> drop -> lockout)
4. Swing: below hip -> swing height, never overhead -> below hip

PHASES: IDLE -> MOVING -> RETURNING, with a SETTLING window after snatches.

CONVENTION: elbow angles are FLEXION (180 - geometric angle):
0 = straight arm, ~150 = fully folded.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union
import logging

import numpy as np

from ironeye.config import Settings, get_settings
from ironeye.cv.calibration import CalibrationProfile
from ironeye.cv.landmarks import Joint, PoseSnapshot, Side, elbow_flexion

logger = logging.getLogger(__name__)


# =============================================================================
# SECTION 1: Core Data Structures
# =============================================================================

class MovementType(Enum):
    """Supported movement types."""
    CLEAN = "clean"
    PRESS = "press"
    SNATCH = "snatch"
    SWING = "swing"


class MovementPhase(Enum):
    """Classification phase."""
    IDLE = "idle"
    MOVING = "moving"
    RETURNING = "returning"
    SETTLING = "settling"


class StartPosition(Enum):
    """Confirmed starting posture of a rep."""
    RACK = "rack"
    OVERHEAD = "overhead"
    BELOW_HIP = "below_hip"


class RepValidity(Enum):
    """Rep quality flag."""
    VALID = "valid"
    AMBIGUOUS = "ambiguous"  # Velocity was withheld on at least one frame


class EventType(Enum):
    SIDE_LOCKED = "side_locked"
    PHASE_CHANGE = "phase_change"
    REP_COMPLETE = "rep_complete"
    SET_BOUNDARY = "set_boundary"


@dataclass(frozen=True)
class SideLockedEvent:
    side: Side
    timestamp: float
    type: EventType = EventType.SIDE_LOCKED


@dataclass(frozen=True)
class PhaseChangeEvent:
    phase: MovementPhase
    previous: MovementPhase
    timestamp: float
    type: EventType = EventType.PHASE_CHANGE


@dataclass(frozen=True)
class RepEvent:
    """A completed repetition."""
    movement_type: MovementType
    peak_velocity: float  # m/s
    timestamp: float
    quality: RepValidity = RepValidity.VALID
    avg_velocity: float = 0.0  # mean filtered speed over the rep
    start_timestamp: float = 0.0
    vertical_travel: float = 0.0  # normalized wrist rise during the rep
    side: Optional[Side] = None
    closed_from: MovementPhase = MovementPhase.MOVING
    type: EventType = EventType.REP_COMPLETE

    @property
    def duration_seconds(self) -> float:
        return self.timestamp - self.start_timestamp


@dataclass(frozen=True)
class SetBoundaryEvent:
    """Athlete stood neutral long enough: the set is over."""
    timestamp: float
    reps_in_set: int = 0
    type: EventType = EventType.SET_BOUNDARY


EngineEvent = Union[SideLockedEvent, PhaseChangeEvent, RepEvent, SetBoundaryEvent]


@dataclass
class PostureFlags:
    """Posture of the working arm on the current frame."""
    flexion: float = 0.0
    wrist_y: float = 0.0
    in_rack: bool = False
    in_lockout: bool = False
    overhead: bool = False
    below_hip: bool = False
    swing_height: bool = False


@dataclass
class RepState:
    """
    The current rep record.

    Sticky flags are set during MOVING and only cleared by starting a new
    rep or resetting the engine.
    """
    started_from: Optional[StartPosition] = None
    start_timestamp: float = 0.0
    start_wrist_y: float = 0.0
    min_wrist_y: float = 1.0

    reached_rack: bool = False
    reached_overhead: bool = False
    reached_lockout: bool = False
    relocked_after_drop: bool = False
    reached_swing_height: bool = False
    elbow_folded: bool = False
    went_below_hip: bool = False

    rack_hold: int = 0
    lockout_hold: int = 0

    pending: Optional[MovementType] = None
    peak_velocity: float = 0.0
    speed_total: float = 0.0
    frames: int = 0
    unreliable_frames: int = 0

    def clear_flags(self):
        self.reached_rack = False
        self.reached_overhead = False
        self.reached_lockout = False
        self.relocked_after_drop = False
        self.reached_swing_height = False
        self.elbow_folded = False
        self.went_below_hip = False
        self.rack_hold = 0
        self.lockout_hold = 0
        self.pending = None


# =============================================================================
# SECTION 2: Rep Decision Table
# =============================================================================

@dataclass(frozen=True)
class RepRule:
    """
    One rep-type decision.

    ``immediate`` rules emit on the frame they match; the others move the
    engine to RETURNING with ``movement`` pending.
    """
    name: str
    movement: MovementType
    immediate: bool
    matches: Callable[[RepState, PostureFlags, int], bool]


def _snatch_from_backswing(rep: RepState, posture: PostureFlags, rack_hold: int) -> bool:
    return (rep.started_from is StartPosition.BELOW_HIP
            and rep.reached_overhead and rep.reached_lockout)


def _resnatch(rep: RepState, posture: PostureFlags, rack_hold: int) -> bool:
    return (rep.started_from is StartPosition.OVERHEAD
            and rep.went_below_hip and rep.relocked_after_drop)


def _press(rep: RepState, posture: PostureFlags, rack_hold: int) -> bool:
    return (rep.started_from is StartPosition.RACK
            and rep.reached_lockout and not rep.went_below_hip)


def _clean(rep: RepState, posture: PostureFlags, rack_hold: int) -> bool:
    return (rep.started_from is StartPosition.BELOW_HIP
            and rep.elbow_folded and rep.reached_rack and rep.rack_hold >= rack_hold)


def _reclean(rep: RepState, posture: PostureFlags, rack_hold: int) -> bool:
    return (rep.started_from is StartPosition.RACK
            and rep.went_below_hip and rep.reached_rack and rep.rack_hold >= rack_hold)


def _swing(rep: RepState, posture: PostureFlags, rack_hold: int) -> bool:
    return (rep.started_from is StartPosition.BELOW_HIP
            and rep.reached_swing_height and not rep.reached_overhead
            and posture.below_hip)


# Evaluated in order every MOVING frame; first match wins
REP_RULES: Tuple[RepRule, ...] = (
    RepRule("snatch", MovementType.SNATCH, False, _snatch_from_backswing),
    RepRule("re-snatch", MovementType.SNATCH, False, _resnatch),
    RepRule("press", MovementType.PRESS, False, _press),
    RepRule("clean", MovementType.CLEAN, True, _clean),
    RepRule("re-clean", MovementType.CLEAN, True, _reclean),
    RepRule("swing", MovementType.SWING, True, _swing),
)


# =============================================================================
# SECTION 3: Standing Reset Detection (set boundary)
# =============================================================================

class StandingResetDetector:
    """
    Detects the athlete standing neutral with both arms at their sides.

    A short window at engine start records each side's wrist-to-shoulder
    offset and the torso length. Afterwards, both wrists back within
    tolerance of that offset with an upright torso, sustained, means the set
    is over.

    Once latched, the stance must be broken before another boundary can fire.
    """

    REQUIRED_JOINTS = (Joint.WRIST, Joint.SHOULDER, Joint.HIP)

    def __init__(
        self,
        window_frames: int = 30,
        hold_frames: int = 45,
        wrist_tolerance: float = 0.05,
        upright_ratio: float = 0.90,
        symmetry_tolerance: float = 0.10
    ):
        self.window_frames = window_frames
        self.hold_frames = hold_frames
        self.wrist_tolerance = wrist_tolerance
        self.upright_ratio = upright_ratio
        self.symmetry_tolerance = symmetry_tolerance
        self.reset()

    def reset(self):
        """Forget the neutral reference."""
        self._samples: Dict[str, List[float]] = {"left": [], "right": [], "torso": []}
        self.neutral_offsets: Optional[Dict[Side, float]] = None
        self.neutral_torso: Optional[float] = None
        self._hold = 0
        self._latched = False

    def reset_hold(self):
        self._hold = 0

    def latch(self):
        """Consume the current standing episode."""
        self._latched = True

    @property
    def is_calibrated(self) -> bool:
        return self.neutral_offsets is not None

    def update(self, pose: PoseSnapshot) -> bool:
        """Returns True while an unlatched neutral stance has been held long enough."""
        offsets = {}
        torsos = []
        for side in Side:
            wrist = pose.get(side, Joint.WRIST)
            shoulder = pose.get(side, Joint.SHOULDER)
            hip = pose.get(side, Joint.HIP)
            offsets[side] = wrist.y - shoulder.y
            torsos.append(hip.y - shoulder.y)
        torso = float(np.mean(torsos))

        if not self.is_calibrated:
            if abs(offsets[Side.LEFT] - offsets[Side.RIGHT]) < self.symmetry_tolerance:
                self._samples["left"].append(offsets[Side.LEFT])
                self._samples["right"].append(offsets[Side.RIGHT])
                self._samples["torso"].append(torso)
                if len(self._samples["torso"]) >= self.window_frames:
                    self.neutral_offsets = {
                        Side.LEFT: float(np.mean(self._samples["left"])),
                        Side.RIGHT: float(np.mean(self._samples["right"])),
                    }
                    self.neutral_torso = float(np.mean(self._samples["torso"]))
                    logger.info(f"Neutral stance recorded: torso={self.neutral_torso:.3f}")
            return False

        wrists_neutral = all(
            abs(offsets[side] - self.neutral_offsets[side]) < self.wrist_tolerance
            for side in Side
        )
        upright = torso >= self.neutral_torso * self.upright_ratio

        if wrists_neutral and upright:
            self._hold += 1
        else:
            self._hold = 0
            self._latched = False

        return not self._latched and self._hold >= self.hold_frames


# =============================================================================
# SECTION 4: Movement Classifier
# =============================================================================

class MovementClassifier:
    """
    Per-frame movement classification engine.

    Usage:
        classifier = MovementClassifier()
        classifier.set_calibration(profile)

        for pose, sample in stream:
            for event in classifier.update(pose, sample.speed, sample.reliable):
                if event.type is EventType.REP_COMPLETE:
                    print(f"{event.movement_type.value}: {event.peak_velocity:.2f} m/s")
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fps: Optional[float] = None,
        working_side: Optional[Side] = None
    ):
        self.settings = settings or get_settings()
        self.fps = fps or self.settings.nominal_fps
        self.working_side = working_side
        self.frame_width = self.settings.frame_width
        self.frame_height = self.settings.frame_height

        # Adjust hold counters for actual FPS
        frame_ratio = self.fps / 30.0
        s = self.settings
        self.side_lock_frames = self._scale(s.side_lock_frames, frame_ratio)
        self.rack_hold_frames = self._scale(s.rack_hold_frames, frame_ratio)
        self.lockout_hold_frames = self._scale(s.lockout_hold_frames, frame_ratio)
        self.below_hip_hold_frames = self._scale(s.below_hip_hold_frames, frame_ratio)
        self.settling_frames = self._scale(s.settling_frames, frame_ratio)
        self.max_rep_frames = self._scale(s.max_rep_frames, frame_ratio)

        self._standing = StandingResetDetector(
            window_frames=self._scale(s.neutral_window_frames, frame_ratio),
            hold_frames=self._scale(s.standing_reset_frames, frame_ratio),
            wrist_tolerance=s.neutral_wrist_tolerance,
            upright_ratio=s.upright_torso_ratio,
            symmetry_tolerance=s.side_lock_offset,
        )

        # Arm length as a fraction of frame height (None until calibrated)
        self._arm_length_norm: Optional[float] = None

        self._handlers = {
            MovementPhase.IDLE: self._process_idle,
            MovementPhase.MOVING: self._process_moving,
            MovementPhase.RETURNING: self._process_returning,
            MovementPhase.SETTLING: self._process_settling,
        }

        self.detected_reps: List[RepEvent] = []
        self._reset_tracking()

        logger.info(f"MovementClassifier initialized: {self.fps} fps, "
                    f"rack hold={self.rack_hold_frames} frames")

    @staticmethod
    def _scale(frames: int, ratio: float) -> int:
        return max(1, int(round(frames * ratio)))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def set_calibration(self, profile: Optional[CalibrationProfile]):
        """Enable the arm-length-relative overhead threshold."""
        if profile is None or profile.arm_length_normalized <= 0:
            self._arm_length_norm = None
            return
        self._arm_length_norm = profile.arm_length_normalized
        logger.info(f"Overhead threshold calibrated: arm={self._arm_length_norm:.3f}")

    def _reset_tracking(self):
        """Reinitialize phase, flags and side lock (keeps neutral stance and calibration)."""
        self.phase = MovementPhase.IDLE
        self.locked_side: Optional[Side] = self.working_side
        self.rep = RepState()
        self.posture_flags: Optional[PostureFlags] = None
        self._confirmed_start: Optional[StartPosition] = None
        self._idle_holds: Dict[StartPosition, int] = {p: 0 for p in StartPosition}
        self._side_candidate: Optional[Side] = None
        self._side_lock_count = 0
        self._settle_remaining = 0
        self.reps_in_set = 0
        self._standing.reset_hold()

    def reset(self):
        """Full session reset, including the neutral stance window."""
        self._reset_tracking()
        self._standing.reset()
        self.detected_reps = []

    @property
    def is_mid_rep(self) -> bool:
        return self.phase in (MovementPhase.MOVING, MovementPhase.RETURNING)

    @property
    def confirmed_start(self) -> Optional[StartPosition]:
        return self._confirmed_start

    # -------------------------------------------------------------------------
    # Frame processing
    # -------------------------------------------------------------------------

    def update(
        self,
        pose: PoseSnapshot,
        speed: float = 0.0,
        speed_reliable: bool = True
    ) -> List[EngineEvent]:
        """
        Process one smoothed frame.

        Returns:
            Events produced by this frame (usually empty)
        """
        events: List[EngineEvent] = []
        timestamp = pose.timestamp

        if not self._has_required_landmarks(pose):
            return events

        # Standing reset runs independently of rep phase
        if self._standing.update(pose) and self.locked_side is not None:
            if self.is_mid_rep:
                logger.info(f"Set boundary during {self.phase.value}: discarding rep in progress")
            boundary = SetBoundaryEvent(timestamp=timestamp, reps_in_set=self.reps_in_set)
            logger.info(f"Set boundary at {timestamp:.2f}s ({self.reps_in_set} reps)")
            self._standing.latch()
            self._reset_tracking()
            events.append(boundary)
            return events

        if self.locked_side is None:
            locked = self._update_side_lock(pose, timestamp)
            if locked:
                events.append(locked)
            return events

        posture = self._evaluate_posture(pose)
        self.posture_flags = posture
        self._handlers[self.phase](posture, speed, speed_reliable, timestamp, events)
        return events

    def _has_required_landmarks(self, pose: PoseSnapshot) -> bool:
        for side in Side:
            if not pose.has(side, StandingResetDetector.REQUIRED_JOINTS):
                return False
        if self.locked_side is not None:
            if pose.get(self.locked_side, Joint.ELBOW) is None or pose.nose() is None:
                return False
        return True

    def _update_side_lock(self, pose: PoseSnapshot, timestamp: float) -> Optional[SideLockedEvent]:
        left = pose.get(Side.LEFT, Joint.WRIST)
        right = pose.get(Side.RIGHT, Joint.WRIST)

        if abs(left.y - right.y) <= self.settings.side_lock_offset:
            self._side_candidate = None
            self._side_lock_count = 0
            return None

        # Higher wrist (smaller y) holds the bell
        candidate = Side.LEFT if left.y < right.y else Side.RIGHT
        if candidate is not self._side_candidate:
            self._side_candidate = candidate
            self._side_lock_count = 0
        self._side_lock_count += 1

        if self._side_lock_count >= self.side_lock_frames:
            self.locked_side = candidate
            logger.info(f"Side locked: {candidate.value}")
            return SideLockedEvent(side=candidate, timestamp=timestamp)
        return None

    def _evaluate_posture(self, pose: PoseSnapshot) -> PostureFlags:
        s = self.settings
        side = self.locked_side
        wrist = pose.get(side, Joint.WRIST)
        elbow = pose.get(side, Joint.ELBOW)
        shoulder = pose.get(side, Joint.SHOULDER)
        hip = pose.get(side, Joint.HIP)
        nose = pose.nose()

        flexion = elbow_flexion(shoulder, elbow, wrist, self.frame_width, self.frame_height)

        if self._arm_length_norm:
            overhead = wrist.y < nose.y - s.overhead_arm_ratio * self._arm_length_norm
        else:
            overhead = wrist.y < nose.y - s.overhead_nose_margin

        in_rack = (
            flexion > s.rack_flexion_degrees
            and abs(wrist.y - shoulder.y) < s.rack_shoulder_tolerance
            and abs(elbow.x - hip.x) < s.rack_elbow_hip_tolerance
        )

        return PostureFlags(
            flexion=flexion,
            wrist_y=wrist.y,
            in_rack=in_rack,
            in_lockout=flexion < s.lockout_flexion_degrees and overhead,
            overhead=overhead,
            below_hip=wrist.y > hip.y,
            swing_height=wrist.y < hip.y - s.swing_hip_margin and not overhead,
        )

    def _set_phase(self, phase: MovementPhase, timestamp: float, events: List[EngineEvent]):
        if phase is self.phase:
            return
        events.append(PhaseChangeEvent(phase=phase, previous=self.phase, timestamp=timestamp))
        logger.debug(f"{timestamp:.2f}s: {self.phase.name} -> {phase.name}")
        self.phase = phase

    # -------------------------------------------------------------------------
    # Phase handlers
    # -------------------------------------------------------------------------

    def _process_idle(self, posture, speed, speed_reliable, timestamp, events):
        if posture.in_lockout:
            self._hold_posture(StartPosition.OVERHEAD, self.lockout_hold_frames)
        elif posture.in_rack:
            self._hold_posture(StartPosition.RACK, self.rack_hold_frames)
        elif posture.below_hip:
            self._hold_posture(StartPosition.BELOW_HIP, self.below_hip_hold_frames)
        else:
            self._idle_holds = {p: 0 for p in StartPosition}

        if self._confirmed_start is not None and not self._in_start_posture(posture):
            self._start_rep(posture, timestamp, events)
            self._process_moving(posture, speed, speed_reliable, timestamp, events)

    def _hold_posture(self, position: StartPosition, required: int):
        for other in StartPosition:
            if other is not position:
                self._idle_holds[other] = 0
        self._idle_holds[position] += 1
        if self._idle_holds[position] >= required and self._confirmed_start is not position:
            logger.debug(f"Starting posture confirmed: {position.value}")
            self._confirmed_start = position

    def _in_start_posture(self, posture: PostureFlags) -> bool:
        if self._confirmed_start is StartPosition.RACK:
            return posture.in_rack
        if self._confirmed_start is StartPosition.OVERHEAD:
            return posture.in_lockout
        return posture.below_hip

    def _start_rep(self, posture: PostureFlags, timestamp: float, events: List[EngineEvent]):
        self.rep = RepState(
            started_from=self._confirmed_start,
            start_timestamp=timestamp,
            start_wrist_y=posture.wrist_y,
            min_wrist_y=posture.wrist_y,
        )
        self._idle_holds = {p: 0 for p in StartPosition}
        self._set_phase(MovementPhase.MOVING, timestamp, events)

    def _track_rep(self, posture: PostureFlags, speed: float, speed_reliable: bool):
        rep = self.rep
        rep.frames += 1
        rep.peak_velocity = max(rep.peak_velocity, speed)
        rep.speed_total += speed
        rep.min_wrist_y = min(rep.min_wrist_y, posture.wrist_y)
        if not speed_reliable:
            rep.unreliable_frames += 1
        if posture.in_rack:
            rep.reached_rack = True
            rep.rack_hold += 1
        else:
            rep.rack_hold = 0

    def _process_moving(self, posture, speed, speed_reliable, timestamp, events):
        rep = self.rep

        if posture.flexion > self.settings.rack_flexion_degrees and not rep.reached_rack:
            rep.elbow_folded = True
        self._track_rep(posture, speed, speed_reliable)

        if posture.below_hip:
            rep.went_below_hip = True
        # Overhead permanently supersedes swing height for this rep
        if posture.swing_height and not rep.reached_overhead:
            rep.reached_swing_height = True
        if posture.overhead:
            rep.reached_overhead = True
        if posture.in_lockout:
            rep.lockout_hold += 1
            if rep.lockout_hold >= self.lockout_hold_frames:
                rep.reached_lockout = True
                if rep.went_below_hip:
                    rep.relocked_after_drop = True
        else:
            rep.lockout_hold = 0

        for rule in REP_RULES:
            if not rule.matches(rep, posture, self.rack_hold_frames):
                continue
            if rule.immediate:
                self._emit_rep(rule.movement, timestamp, events)
                self._prime(StartPosition.RACK if rule.movement is MovementType.CLEAN
                            else StartPosition.BELOW_HIP, timestamp, events)
            else:
                logger.debug(f"{timestamp:.2f}s: {rule.name} pending")
                rep.pending = rule.movement
                self._set_phase(MovementPhase.RETURNING, timestamp, events)
            return

        if (rep.started_from is StartPosition.BELOW_HIP and posture.below_hip
                and rep.reached_overhead and not rep.reached_lockout):
            logger.info(f"{timestamp:.2f}s: overhead without lockout, rep abandoned")
            self._prime(StartPosition.BELOW_HIP, timestamp, events)
            return

        self._check_timeout(posture, timestamp, events)

    def _process_returning(self, posture, speed, speed_reliable, timestamp, events):
        rep = self.rep
        self._track_rep(posture, speed, speed_reliable)

        if rep.pending is MovementType.SNATCH and posture.below_hip:
            self._emit_rep(MovementType.SNATCH, timestamp, events)
            rep.clear_flags()
            self._confirmed_start = None
            self._settle_remaining = self.settling_frames
            self._set_phase(MovementPhase.SETTLING, timestamp, events)
        elif rep.pending is MovementType.PRESS and rep.rack_hold >= self.rack_hold_frames:
            self._emit_rep(MovementType.PRESS, timestamp, events)
            self._prime(StartPosition.RACK, timestamp, events)
        else:
            self._check_timeout(posture, timestamp, events)

    def _process_settling(self, posture, speed, speed_reliable, timestamp, events):
        self._settle_remaining -= 1
        if self._settle_remaining > 0:
            return

        # Current posture seeds the next start directly
        if posture.in_lockout:
            seed = StartPosition.OVERHEAD
        elif posture.in_rack:
            seed = StartPosition.RACK
        elif posture.below_hip:
            seed = StartPosition.BELOW_HIP
        else:
            seed = None
        self._prime(seed, timestamp, events)

    def _check_timeout(self, posture: PostureFlags, timestamp: float, events: List[EngineEvent]):
        if self.rep.frames <= self.max_rep_frames:
            return
        logger.warning(f"{timestamp:.2f}s: rep timeout after {self.rep.frames} frames "
                       f"(started from {self.rep.started_from})")
        self._prime(None, timestamp, events)

    def _prime(self, start: Optional[StartPosition], timestamp: float, events: List[EngineEvent]):
        """Return to IDLE with ``start`` already confirmed."""
        self.rep.clear_flags()
        self._confirmed_start = start
        self._idle_holds = {p: 0 for p in StartPosition}
        if start is StartPosition.RACK:
            self._idle_holds[start] = self.rack_hold_frames
        elif start is StartPosition.OVERHEAD:
            self._idle_holds[start] = self.lockout_hold_frames
        elif start is StartPosition.BELOW_HIP:
            self._idle_holds[start] = self.below_hip_hold_frames
        self._set_phase(MovementPhase.IDLE, timestamp, events)

    def _emit_rep(self, movement: MovementType, timestamp: float, events: List[EngineEvent]):
        rep = self.rep
        quality = RepValidity.AMBIGUOUS if rep.unreliable_frames else RepValidity.VALID
        event = RepEvent(
            movement_type=movement,
            peak_velocity=rep.peak_velocity,
            avg_velocity=rep.speed_total / rep.frames if rep.frames else 0.0,
            timestamp=timestamp,
            quality=quality,
            start_timestamp=rep.start_timestamp,
            vertical_travel=max(0.0, rep.start_wrist_y - rep.min_wrist_y),
            side=self.locked_side,
            closed_from=self.phase,
        )
        self.reps_in_set += 1
        self.detected_reps.append(event)
        events.append(event)
        logger.info(f"{timestamp:.2f}s: {movement.value.upper()} "
                    f"{rep.peak_velocity:.2f} m/s ({quality.value})")

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def get_summary(self) -> Dict[str, object]:
        """Counts per movement type since the last full reset."""
        counts = {m.value: 0 for m in MovementType}
        for rep in self.detected_reps:
            counts[rep.movement_type.value] += 1
        return {
            "locked_side": self.locked_side.value if self.locked_side else None,
            "phase": self.phase.value,
            "total_reps": len(self.detected_reps),
            "reps_in_set": self.reps_in_set,
            "counts": counts,
            "ambiguous_reps": sum(1 for r in self.detected_reps if r.quality is RepValidity.AMBIGUOUS),
        }
