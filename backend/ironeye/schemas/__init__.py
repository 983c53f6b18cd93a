"""Pydantic schemas for rep records and status snapshots."""

from ironeye.schemas.rep import RepRecord, RepLogSummary
from ironeye.schemas.status import (
    SegmentLengthsResponse,
    CalibrationResponse,
    FatigueStatusResponse,
    TimingStatusResponse,
    SessionStatusResponse,
)

__all__ = [
    "RepRecord",
    "RepLogSummary",
    "SegmentLengthsResponse",
    "CalibrationResponse",
    "FatigueStatusResponse",
    "TimingStatusResponse",
    "SessionStatusResponse",
]
