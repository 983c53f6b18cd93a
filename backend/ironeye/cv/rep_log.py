"""
Tabular per-rep record built from the rep-event stream.

The log only produces rows; where they go (file, network) is up to the
caller, who supplies the text stream for CSV output.
"""

import csv
from typing import List, Optional, TextIO
import logging

import numpy as np

from ironeye.cv.kinematic_classifier import MovementType, RepEvent
from ironeye.cv.physics import PhysicsEngine
from ironeye.schemas.rep import RepLogSummary, RepRecord

logger = logging.getLogger(__name__)


class RepLog:
    """Append-only list of rep records."""

    CSV_HEADERS = (
        "Rep", "Movement", "Peak Velocity (m/s)", "Avg Velocity (m/s)",
        "Power (W)", "Work (J)",
        "Phase", "Quality", "Timestamp",
    )

    def __init__(self, physics: Optional[PhysicsEngine] = None):
        self.physics = physics or PhysicsEngine()
        self.records: List[RepRecord] = []

    def append(self, event: RepEvent, meters_per_pixel: Optional[float] = None,
               frame_height: int = 0) -> RepRecord:
        """Record one rep; work needs the calibration scale to convert wrist travel."""
        displacement = 0.0
        if meters_per_pixel:
            displacement = event.vertical_travel * frame_height * meters_per_pixel

        record = RepRecord(
            rep_index=len(self.records) + 1,
            movement_type=event.movement_type.value,
            peak_velocity=event.peak_velocity,
            avg_velocity=event.avg_velocity,
            power=self.physics.power(event.peak_velocity),
            work=self.physics.work(displacement),
            phase=event.closed_from.value,
            quality=event.quality.value,
            timestamp=event.timestamp,
            duration_seconds=event.duration_seconds,
        )
        self.records.append(record)
        return record

    def write_csv(self, stream: TextIO) -> int:
        """Write all records as CSV; returns the number of rows written."""
        writer = csv.writer(stream)
        writer.writerow(self.CSV_HEADERS)
        for record in self.records:
            writer.writerow([
                record.rep_index,
                record.movement_type,
                f"{record.peak_velocity:.2f}",
                f"{record.avg_velocity:.2f}",
                f"{record.power:.2f}",
                f"{record.work:.2f}",
                record.phase,
                record.quality,
                f"{record.timestamp:.3f}",
            ])
        logger.debug(f"Wrote {len(self.records)} rep rows")
        return len(self.records)

    def summary(self) -> RepLogSummary:
        velocities = [r.peak_velocity for r in self.records]
        counts = {m.value: 0 for m in MovementType}
        for record in self.records:
            counts[record.movement_type] += 1
        return RepLogSummary(
            total_reps=len(self.records),
            counts=counts,
            peak_velocity=float(max(velocities)) if velocities else 0.0,
            avg_velocity=float(np.mean(velocities)) if velocities else 0.0,
            total_work=float(sum(r.work for r in self.records)),
            reps=list(self.records),
        )

    def reset(self):
        self.records = []
