"""Synthetic poses for a left-arm kettlebell athlete facing the camera."""

from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from ironeye.config import Settings
from ironeye.cv.landmarks import Joint, Landmark, PoseSnapshot, Side

FPS = 30.0
DT = 1.0 / FPS

# Square frame so normalized geometry equals pixel geometry
FRAME = 1000

BODY_LEFT = {
    Joint.NOSE: (0.50, 0.15),
    Joint.SHOULDER: (0.45, 0.30),
    Joint.HIP: (0.45, 0.55),
    Joint.KNEE: (0.45, 0.75),
    Joint.ANKLE: (0.45, 0.95),
}

BODY_RIGHT = {
    Joint.NOSE: (0.50, 0.15),
    Joint.SHOULDER: (0.55, 0.30),
    Joint.HIP: (0.55, 0.55),
    Joint.KNEE: (0.55, 0.75),
    Joint.ANKLE: (0.55, 0.95),
    Joint.ELBOW: (0.57, 0.42),
    Joint.WRIST: (0.57, 0.54),
}

# Left arm (elbow, wrist) per posture
ARM = {
    "neutral": ((0.43, 0.42), (0.43, 0.54)),
    "rack": ((0.45, 0.45), (0.47, 0.32)),
    "lockout": ((0.45, 0.16), (0.45, 0.02)),
    "bent_overhead": ((0.40, 0.20), (0.45, 0.03)),
    "below_hip": ((0.45, 0.45), (0.46, 0.62)),
    "mid": ((0.45, 0.42), (0.46, 0.50)),
    "swing": ((0.52, 0.33), (0.60, 0.36)),
    "press_mid": ((0.42, 0.25), (0.44, 0.12)),
}


def make_pose(
    posture: str,
    timestamp: float = 0.0,
    drop: Iterable[Tuple[Side, Joint]] = ()
) -> PoseSnapshot:
    """Build a pose with the left arm in ``posture``."""
    elbow, wrist = ARM[posture]
    left: Dict[Joint, Landmark] = {j: Landmark(*xy) for j, xy in BODY_LEFT.items()}
    left[Joint.ELBOW] = Landmark(*elbow)
    left[Joint.WRIST] = Landmark(*wrist)
    right = {j: Landmark(*xy) for j, xy in BODY_RIGHT.items()}
    pose = PoseSnapshot(timestamp=timestamp, left=left, right=right)
    for side, joint in drop:
        pose.side(side).pop(joint, None)
    return pose


def standing_pose(
    timestamp: float = 0.0,
    nose_y: float = 0.1,
    ankle_y: float = 0.725
) -> PoseSnapshot:
    """Upright calibration pose with configurable ankle-to-nose span."""
    pose = make_pose("neutral", timestamp)
    for side in Side:
        joints = pose.side(side)
        joints[Joint.NOSE] = Landmark(0.5, nose_y)
        ankle = joints[Joint.ANKLE]
        joints[Joint.ANKLE] = Landmark(ankle.x, ankle_y)
    return pose


class Script:
    """Feeds posture runs to a classifier and collects its events."""

    def __init__(self, classifier, start_time: float = 0.0):
        self.classifier = classifier
        self.t = start_time
        self.events: List = []

    def run(self, posture: str, frames: int = 1, speeds: Optional[List[float]] = None,
            reliable: bool = True):
        for i in range(frames):
            speed = speeds[i] if speeds else 0.0
            self.t += DT
            self.events.extend(
                self.classifier.update(make_pose(posture, self.t), speed, reliable)
            )
        return self

    def reps(self):
        from ironeye.cv.kinematic_classifier import EventType
        return [e for e in self.events if e.type is EventType.REP_COMPLETE]

    def of_type(self, event_type):
        return [e for e in self.events if e.type is event_type]


@pytest.fixture
def settings() -> Settings:
    """Square frame; standing reset effectively disabled."""
    return Settings(
        frame_width=FRAME,
        frame_height=FRAME,
        standing_reset_frames=100_000,
    )


@pytest.fixture
def standing_settings() -> Settings:
    return Settings(frame_width=FRAME, frame_height=FRAME)
