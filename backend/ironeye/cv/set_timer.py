"""
Set and rest timing driven by rep and set-boundary events.

- A rep with no active set opens one (stopping a running rest timer)
- A boundary closes the active set if it has reps, then starts the rest timer
- Empty sets are dropped silently so they never skew the averages
"""

from dataclasses import dataclass
from typing import List, Optional
import logging

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetRecord:
    """A completed set (immutable once appended)."""
    set_number: int
    start_timestamp: float
    end_timestamp: float
    rep_count: int
    rest_before: float = 0.0

    @property
    def duration_seconds(self) -> float:
        return self.end_timestamp - self.start_timestamp


@dataclass
class TimingStatus:
    """Live timing snapshot."""
    set_active: bool
    current_set_number: int
    current_set_reps: int
    current_set_elapsed: float
    resting: bool
    rest_elapsed: float
    completed_sets: int
    avg_work_seconds: float
    avg_rest_seconds: float


class SetRestTracker:
    """Work/rest interval tracking."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.history: List[SetRecord] = []
        self._set_start: Optional[float] = None
        self._set_reps = 0
        self._rest_start: Optional[float] = None
        self.avg_work_seconds = 0.0
        self.avg_rest_seconds = 0.0

    @property
    def set_active(self) -> bool:
        return self._set_start is not None

    @property
    def resting(self) -> bool:
        return self._rest_start is not None

    @property
    def current_set_reps(self) -> int:
        return self._set_reps

    def on_rep(self, timestamp: float):
        if self.set_active:
            self._set_reps += 1
            return

        if self.resting:
            logger.debug(f"Rest ended after {timestamp - self._rest_start:.1f}s")
            self._rest_start = None
        self._set_start = timestamp
        self._set_reps = 1
        logger.info(f"Set {len(self.history) + 1} started at {timestamp:.2f}s")

    def on_boundary(self, timestamp: float) -> Optional[SetRecord]:
        """Close the active set; returns the appended record, if any."""
        # A set only opens on its first rep, so no active set means no reps
        if not self.set_active:
            return None

        rest_before = 0.0
        if self.history:
            rest_before = max(0.0, self._set_start - self.history[-1].end_timestamp)

        record = SetRecord(
            set_number=len(self.history) + 1,
            start_timestamp=self._set_start,
            end_timestamp=timestamp,
            rep_count=self._set_reps,
            rest_before=rest_before,
        )
        self.history.append(record)

        self.avg_work_seconds = float(np.mean([s.duration_seconds for s in self.history]))
        rests = [s.rest_before for s in self.history[1:]]
        self.avg_rest_seconds = float(np.mean(rests)) if rests else 0.0

        self._set_start = None
        self._set_reps = 0
        self._rest_start = timestamp

        logger.info(f"Set {record.set_number} closed: {record.rep_count} reps, "
                    f"{record.duration_seconds:.1f}s work, {rest_before:.1f}s rest before")
        return record

    def status(self, now: float) -> TimingStatus:
        return TimingStatus(
            set_active=self.set_active,
            current_set_number=len(self.history) + 1,
            current_set_reps=self._set_reps,
            current_set_elapsed=max(0.0, now - self._set_start) if self.set_active else 0.0,
            resting=self.resting,
            rest_elapsed=max(0.0, now - self._rest_start) if self.resting else 0.0,
            completed_sets=len(self.history),
            avg_work_seconds=self.avg_work_seconds,
            avg_rest_seconds=self.avg_rest_seconds,
        )
