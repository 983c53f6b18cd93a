import pytest

from ironeye.cv.set_timer import SetRestTracker


@pytest.fixture
def timer():
    return SetRestTracker()


def test_first_rep_opens_set(timer):
    timer.on_rep(10.0)
    timer.on_rep(12.0)
    status = timer.status(15.0)
    assert status.set_active
    assert status.current_set_number == 1
    assert status.current_set_reps == 2
    assert status.current_set_elapsed == pytest.approx(5.0)
    assert not status.resting


def test_boundary_closes_set_and_starts_rest(timer):
    timer.on_rep(10.0)
    timer.on_rep(14.0)
    record = timer.on_boundary(20.0)

    assert record.set_number == 1
    assert record.rep_count == 2
    assert record.duration_seconds == pytest.approx(10.0)
    assert record.rest_before == 0.0

    status = timer.status(50.0)
    assert not status.set_active
    assert status.resting
    assert status.rest_elapsed == pytest.approx(30.0)
    assert status.completed_sets == 1


def test_boundary_without_reps_is_dropped(timer):
    assert timer.on_boundary(5.0) is None
    assert timer.history == []
    assert not timer.resting


def test_second_boundary_during_rest_is_ignored(timer):
    timer.on_rep(0.0)
    timer.on_boundary(10.0)
    assert timer.on_boundary(12.0) is None
    assert len(timer.history) == 1
    assert timer.status(15.0).rest_elapsed == pytest.approx(5.0)


def test_averages(timer):
    # Set 1: 0 -> 20, rest 40, set 2: 60 -> 90, rest 60, set 3: 150 -> 160
    for start, end in [(0.0, 20.0), (60.0, 90.0), (150.0, 160.0)]:
        timer.on_rep(start)
        timer.on_rep(end - 1.0)
        timer.on_boundary(end)

    assert [s.rest_before for s in timer.history] == [0.0, 40.0, 60.0]
    assert timer.avg_work_seconds == pytest.approx(20.0)
    assert timer.avg_rest_seconds == pytest.approx(50.0)


def test_rep_ends_rest(timer):
    timer.on_rep(0.0)
    timer.on_boundary(5.0)
    timer.on_rep(30.0)
    status = timer.status(31.0)
    assert not status.resting
    assert status.current_set_number == 2


def test_reset(timer):
    timer.on_rep(0.0)
    timer.on_boundary(5.0)
    timer.reset()
    status = timer.status(100.0)
    assert status.completed_sets == 0
    assert not status.resting
    assert status.avg_work_seconds == 0.0
