import csv
import io

import pytest

from ironeye.cv.kinematic_classifier import MovementPhase, MovementType, RepEvent, RepValidity
from ironeye.cv.physics import GRAVITY, PhysicsEngine
from ironeye.cv.rep_log import RepLog


def test_power_and_work():
    physics = PhysicsEngine(16.0)
    assert physics.power(1.5) == pytest.approx(16.0 * GRAVITY * 1.5)
    assert physics.work(0.8) == pytest.approx(16.0 * GRAVITY * 0.8)


def test_eccentric_values_are_zero():
    physics = PhysicsEngine(24.0)
    assert physics.power(-0.5) == 0.0
    assert physics.work(0.0) == 0.0


def test_invalid_mass():
    with pytest.raises(ValueError):
        PhysicsEngine(0)


@pytest.fixture
def log():
    return RepLog(PhysicsEngine(16.0))


def swing(velocity, t, quality=RepValidity.VALID):
    return RepEvent(
        movement_type=MovementType.SWING,
        peak_velocity=velocity,
        avg_velocity=velocity * 0.6,
        timestamp=t,
        quality=quality,
        start_timestamp=t - 1.0,
        vertical_travel=0.25,
        closed_from=MovementPhase.MOVING,
    )


def test_append_computes_power_and_work(log):
    record = log.append(swing(2.0, 5.0), meters_per_pixel=0.002, frame_height=1000)

    assert record.rep_index == 1
    assert record.movement_type == "swing"
    assert record.power == pytest.approx(16.0 * GRAVITY * 2.0)
    # 0.25 of 1000px at 2mm/px = 0.5 m
    assert record.work == pytest.approx(16.0 * GRAVITY * 0.5)
    assert record.duration_seconds == pytest.approx(1.0)
    assert record.phase == "moving"
    assert record.avg_velocity == pytest.approx(1.2)


def test_work_is_zero_without_calibration(log):
    assert log.append(swing(2.0, 5.0)).work == 0.0


def test_csv_output(log):
    log.append(swing(2.0, 5.0))
    log.append(swing(1.5, 8.0, RepValidity.AMBIGUOUS))

    stream = io.StringIO()
    assert log.write_csv(stream) == 2

    rows = list(csv.reader(io.StringIO(stream.getvalue())))
    assert rows[0] == list(RepLog.CSV_HEADERS)
    assert rows[1][:3] == ["1", "swing", "2.00"]
    assert rows[1][3] == "1.20"
    assert rows[2][7] == "ambiguous"
    assert rows[2][8] == "8.000"


def test_summary(log):
    log.append(swing(2.0, 5.0))
    log.append(swing(1.0, 8.0))

    summary = log.summary()

    assert summary.total_reps == 2
    assert summary.counts["swing"] == 2
    assert summary.counts["clean"] == 0
    assert summary.peak_velocity == pytest.approx(2.0)
    assert summary.avg_velocity == pytest.approx(1.5)


def test_empty_summary(log):
    summary = log.summary()
    assert summary.total_reps == 0
    assert summary.peak_velocity == 0.0
