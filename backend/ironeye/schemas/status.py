"""Pull-based status snapshot schemas for dashboards and display."""

from typing import Dict, List, Optional
from pydantic import BaseModel


class SegmentLengthsResponse(BaseModel):
    """Body segment lengths in meters."""
    torso: float
    upper_arm: float
    forearm: float
    thigh: float
    shin: float

    class Config:
        from_attributes = True


class CalibrationResponse(BaseModel):
    """Calibration completion payload."""
    height_cm: float
    scale_factor: float
    pixels_per_meter: float
    arm_length: float
    segments: SegmentLengthsResponse

    class Config:
        from_attributes = True


class FatigueStatusResponse(BaseModel):
    """Fatigue snapshot for one movement type."""
    movement_type: str
    reps: int
    baseline: Optional[float] = None
    peak: float
    last_velocity: Optional[float] = None
    drop_from_baseline: float
    drop_from_peak: float
    crossed_thresholds: List[float]
    zone: str
    reps_remaining: Optional[int] = None


class TimingStatusResponse(BaseModel):
    """Work/rest snapshot."""
    set_active: bool
    current_set_number: int
    current_set_reps: int
    current_set_elapsed: float
    resting: bool
    rest_elapsed: float
    completed_sets: int
    avg_work_seconds: float
    avg_rest_seconds: float

    class Config:
        from_attributes = True


class SessionStatusResponse(BaseModel):
    """Aggregated session status."""
    calibrated: bool
    calibration_progress: float
    locked_side: Optional[str] = None
    phase: str
    current_speed: float
    total_reps: int
    counts: Dict[str, int]
    fatigue: List[FatigueStatusResponse]
    timing: TimingStatusResponse
