"""Per-rep record schemas."""

from typing import Dict, List, Optional
from pydantic import BaseModel


class RepRecord(BaseModel):
    """One row of the per-rep log."""
    rep_index: int
    movement_type: str
    peak_velocity: float
    avg_velocity: float = 0.0
    power: float
    work: float
    phase: str
    quality: str
    timestamp: float
    duration_seconds: Optional[float] = None

    class Config:
        from_attributes = True


class RepLogSummary(BaseModel):
    """Summary of a rep log."""
    total_reps: int
    counts: Dict[str, int]
    peak_velocity: float
    avg_velocity: float
    total_work: float
    reps: List[RepRecord]
