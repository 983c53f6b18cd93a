import pytest

from ironeye.config import Settings
from ironeye.cv.fatigue_handler import FatigueTracker, FatigueZone, classify_zone, drop_percent
from ironeye.cv.kinematic_classifier import MovementType, RepEvent


def rep(velocity, movement=MovementType.SWING, t=0.0):
    return RepEvent(movement_type=movement, peak_velocity=velocity, timestamp=t)


@pytest.fixture
def tracker():
    return FatigueTracker(Settings())


def feed(tracker, velocities, movement=MovementType.SWING):
    alerts = []
    for v in velocities:
        alerts.extend(tracker.record_rep(rep(v, movement)))
    return alerts


def test_baseline_from_first_three_reps(tracker):
    feed(tracker, [2.0, 2.1])
    assert tracker.get_profile(MovementType.SWING).baseline is None

    feed(tracker, [1.9])
    profile = tracker.get_profile(MovementType.SWING)
    assert profile.baseline == pytest.approx(2.0)
    assert profile.drop_from_baseline == 0.0


def test_drop_after_baseline(tracker):
    alerts = feed(tracker, [2.0, 2.1, 1.9, 1.5])
    profile = tracker.get_profile(MovementType.SWING)

    assert profile.drop_from_baseline == pytest.approx(25.0)
    assert profile.drop_from_peak == pytest.approx((2.1 - 1.5) / 2.1 * 100)
    assert profile.zone is FatigueZone.HIGH
    assert [a.threshold for a in alerts] == [10.0, 20.0]
    assert all(a.rep_index == 4 for a in alerts)


def test_baseline_never_changes(tracker):
    feed(tracker, [2.0, 2.0, 2.0, 3.5, 1.0, 2.8])
    assert tracker.get_profile(MovementType.SWING).baseline == pytest.approx(2.0)


def test_thresholds_fire_once(tracker):
    first = feed(tracker, [2.0, 2.0, 2.0, 1.7])
    again = feed(tracker, [1.7, 2.0, 1.7])
    assert [a.threshold for a in first] == [10.0]
    assert again == []
    assert tracker.get_profile(MovementType.SWING).crossed_thresholds == [10.0]


def test_crossed_set_only_grows(tracker):
    feed(tracker, [2.0, 2.0, 2.0, 1.3])
    feed(tracker, [2.0])
    profile = tracker.get_profile(MovementType.SWING)
    assert profile.crossed_thresholds == [10.0, 20.0, 30.0]
    assert profile.zone is FatigueZone.FRESH


def test_movements_tracked_separately(tracker):
    feed(tracker, [2.0, 2.0, 2.0], MovementType.SWING)
    feed(tracker, [1.0], MovementType.PRESS)
    assert tracker.get_profile(MovementType.PRESS).baseline is None
    assert tracker.get_profile(MovementType.SNATCH) is None


@pytest.mark.parametrize("drop, zone", [
    (0.0, FatigueZone.FRESH),
    (4.9, FatigueZone.FRESH),
    (5.0, FatigueZone.MILD),
    (10.0, FatigueZone.MODERATE),
    (19.9, FatigueZone.MODERATE),
    (20.0, FatigueZone.HIGH),
    (30.0, FatigueZone.CRITICAL),
    (75.0, FatigueZone.CRITICAL),
])
def test_zone_bands(drop, zone):
    assert classify_zone(drop) is zone


def test_drop_clamped_at_zero():
    assert drop_percent(2.0, 2.5) == 0.0
    assert drop_percent(None, 1.0) == 0.0


class TestRepsRemaining:
    def test_needs_baseline_and_three_reps(self, tracker):
        assert tracker.reps_remaining(MovementType.SWING) is None
        feed(tracker, [2.0, 1.8])
        assert tracker.reps_remaining(MovementType.SWING) is None

    def test_flat_trend_has_no_prediction(self, tracker):
        feed(tracker, [2.0, 2.0, 2.0, 2.0])
        assert tracker.reps_remaining(MovementType.SWING) is None

    def test_rising_trend_has_no_prediction(self, tracker):
        feed(tracker, [1.8, 1.9, 2.0, 2.1])
        assert tracker.reps_remaining(MovementType.SWING) is None

    def test_linear_projection(self, tracker):
        feed(tracker, [2.0, 2.0, 2.0, 1.9, 1.8])
        # slope -0.05, intercept 2.09: 20% target 1.6 crossed at rep 9.8
        assert tracker.reps_remaining(MovementType.SWING, threshold=20.0) == 5

    def test_already_past_threshold_is_zero(self, tracker):
        feed(tracker, [2.0, 2.0, 2.0, 1.0])
        assert tracker.reps_remaining(MovementType.SWING, threshold=20.0) == 0


def test_custom_thresholds_sorted():
    tracker = FatigueTracker(Settings(), baseline_reps=1, thresholds=[25.0, 5.0])
    alerts = feed(tracker, [2.0, 1.4])
    assert [a.threshold for a in alerts] == [5.0, 25.0]


def test_reset_starts_new_epoch(tracker):
    feed(tracker, [2.0, 2.0, 2.0, 1.0])
    tracker.reset()
    assert tracker.get_fatigue_summary() == {}


def test_zero_baseline_reps_rejected():
    with pytest.raises(ValueError):
        FatigueTracker(Settings(), baseline_reps=0)


def test_empty_thresholds_disable_alerts():
    tracker = FatigueTracker(Settings(), thresholds=())
    alerts = feed(tracker, [2.0, 2.0, 2.0, 1.0, 0.9])
    assert alerts == []
    assert tracker.get_profile(MovementType.SWING).zone is FatigueZone.CRITICAL
    assert tracker.reps_remaining(MovementType.SWING) is None
