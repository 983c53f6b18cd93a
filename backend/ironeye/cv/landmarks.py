"""
Landmark data model and joint geometry.

Coordinates are normalized to the frame: x grows to the right, y grows
DOWNWARD (0 = top of frame), z is relative depth (0 when the upstream
detector does not provide it).
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence

import numpy as np


class Side(Enum):
    """Tracked body side."""
    LEFT = "left"
    RIGHT = "right"


class Joint(Enum):
    """Named joints tracked per side."""
    WRIST = "wrist"
    ELBOW = "elbow"
    SHOULDER = "shoulder"
    HIP = "hip"
    KNEE = "knee"
    ANKLE = "ankle"
    NOSE = "nose"


# MediaPipe Pose (33 landmarks) indices
MEDIAPIPE_INDICES: Dict[Side, Dict[Joint, int]] = {
    Side.LEFT: {
        Joint.NOSE: 0,
        Joint.SHOULDER: 11,
        Joint.ELBOW: 13,
        Joint.WRIST: 15,
        Joint.HIP: 23,
        Joint.KNEE: 25,
        Joint.ANKLE: 27,
    },
    Side.RIGHT: {
        Joint.NOSE: 0,
        Joint.SHOULDER: 12,
        Joint.ELBOW: 14,
        Joint.WRIST: 16,
        Joint.HIP: 24,
        Joint.KNEE: 26,
        Joint.ANKLE: 28,
    },
}


@dataclass(frozen=True)
class Landmark:
    """A single 3D landmark."""
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None

    @property
    def is_plausible(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.z))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass
class PoseSnapshot:
    """Named landmarks per side at a timestamp (seconds)."""
    timestamp: float
    left: Dict[Joint, Landmark] = field(default_factory=dict)
    right: Dict[Joint, Landmark] = field(default_factory=dict)

    def side(self, side: Side) -> Dict[Joint, Landmark]:
        return self.left if side is Side.LEFT else self.right

    def get(self, side: Side, joint: Joint) -> Optional[Landmark]:
        landmark = self.side(side).get(joint)
        if landmark is None or not landmark.is_plausible:
            return None
        return landmark

    def nose(self) -> Optional[Landmark]:
        """Nose from whichever side carries it."""
        return self.get(Side.LEFT, Joint.NOSE) or self.get(Side.RIGHT, Joint.NOSE)

    def has(self, side: Side, joints: Iterable[Joint]) -> bool:
        return all(self.get(side, joint) is not None for joint in joints)

    @classmethod
    def from_landmarks(
        cls,
        landmarks: Sequence,
        timestamp: float,
        min_visibility: float = 0.0
    ) -> "PoseSnapshot":
        """
        Build a snapshot from a MediaPipe-style 33 landmark list.

        Each item needs ``x`` and ``y`` attributes; ``z`` and ``visibility``
        are optional. Items below ``min_visibility`` are left out.
        """
        snapshot = cls(timestamp=timestamp)
        for side, indices in MEDIAPIPE_INDICES.items():
            target = snapshot.side(side)
            for joint, idx in indices.items():
                if idx >= len(landmarks):
                    continue
                raw = landmarks[idx]
                visibility = getattr(raw, "visibility", None)
                if visibility is not None and visibility < min_visibility:
                    continue
                target[joint] = Landmark(
                    x=float(raw.x),
                    y=float(raw.y),
                    z=float(getattr(raw, "z", 0.0) or 0.0),
                    visibility=visibility,
                )
        return snapshot


def angle_between(v1: np.ndarray, v2: np.ndarray) -> float:
    """Angle between two vectors in degrees (0 if either is degenerate)."""
    mag1 = np.linalg.norm(v1)
    mag2 = np.linalg.norm(v2)
    if mag1 == 0 or mag2 == 0:
        return 0.0
    cos_angle = np.dot(v1, v2) / (mag1 * mag2)
    return float(np.degrees(np.arccos(np.clip(cos_angle, -1.0, 1.0))))


def joint_angle(
    a: Landmark,
    vertex: Landmark,
    c: Landmark,
    width: float = 1.0,
    height: float = 1.0
) -> float:
    """
    Geometric angle at ``vertex`` between the bones to ``a`` and ``c``.

    Computed in 2D pixel space so a non-square frame does not skew it.
    """
    to_a = np.array([(a.x - vertex.x) * width, (a.y - vertex.y) * height])
    to_c = np.array([(c.x - vertex.x) * width, (c.y - vertex.y) * height])
    return angle_between(to_a, to_c)


def elbow_flexion(
    shoulder: Landmark,
    elbow: Landmark,
    wrist: Landmark,
    width: float = 1.0,
    height: float = 1.0
) -> float:
    """Elbow flexion in degrees: 0 = straight arm, ~150 = fully folded."""
    return 180.0 - joint_angle(shoulder, elbow, wrist, width, height)


def pixel_distance(a: Landmark, b: Landmark, width: float, height: float) -> float:
    """2D distance between two landmarks in pixels."""
    return float(np.hypot((a.x - b.x) * width, (a.y - b.y) * height))
