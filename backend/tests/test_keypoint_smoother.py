import pytest

from ironeye.config import Settings
from ironeye.cv.keypoint_smoother import ExponentialSmoother, LandmarkSmoother, OneEuroFilter
from ironeye.cv.landmarks import Joint, Landmark, PoseSnapshot, Side


class TestOneEuroFilter:
    def test_first_sample_passes_through(self):
        f = OneEuroFilter()
        assert f.filter(0.42, 0.0) == 0.42

    def test_constant_signal_is_unchanged(self):
        f = OneEuroFilter()
        for i in range(30):
            assert f.filter(0.3, i / 30) == pytest.approx(0.3)

    def test_step_moves_toward_target_without_overshoot(self):
        f = OneEuroFilter()
        f.filter(0.0, 0.0)
        values = [f.filter(1.0, i / 30) for i in range(1, 60)]
        assert all(0.0 < v <= 1.0 for v in values)
        assert values == sorted(values)

    def test_non_increasing_timestamp_returns_previous(self):
        f = OneEuroFilter()
        f.filter(0.2, 1.0)
        assert f.filter(0.9, 1.0) == 0.2
        assert f.filter(0.9, 0.5) == 0.2

    def test_reset(self):
        f = OneEuroFilter()
        f.filter(0.2, 0.0)
        f.reset()
        assert f.filter(0.8, 5.0) == 0.8


class TestExponentialSmoother:
    def test_blend(self):
        f = ExponentialSmoother(alpha=0.5)
        assert f.filter(0.0) == 0.0
        assert f.filter(10.0) == pytest.approx(5.0)

    @pytest.mark.parametrize("alpha", [0.0, -0.1, 1.5])
    def test_invalid_alpha(self, alpha):
        with pytest.raises(ValueError):
            ExponentialSmoother(alpha)


class TestLandmarkSmoother:
    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError, match="Unsupported smoothing mode"):
            LandmarkSmoother(Settings(), mode="kalman")

    def test_missing_joints_stay_missing(self):
        smoother = LandmarkSmoother(Settings())
        pose = PoseSnapshot(timestamp=0.0, left={Joint.WRIST: Landmark(0.4, 0.5)})
        out = smoother.smooth(pose)
        assert out.get(Side.LEFT, Joint.WRIST) == Landmark(0.4, 0.5, 0.0)
        assert out.get(Side.LEFT, Joint.ELBOW) is None
        assert out.right == {}

    def test_joints_filtered_independently(self):
        smoother = LandmarkSmoother(Settings(ema_alpha=0.5), mode="ema")
        smoother.smooth(PoseSnapshot(0.0, left={Joint.WRIST: Landmark(0.0, 0.0)},
                                     right={Joint.WRIST: Landmark(1.0, 1.0)}))
        out = smoother.smooth(PoseSnapshot(0.1, left={Joint.WRIST: Landmark(1.0, 1.0)},
                                           right={Joint.WRIST: Landmark(1.0, 1.0)}))
        assert out.get(Side.LEFT, Joint.WRIST).x == pytest.approx(0.5)
        assert out.get(Side.RIGHT, Joint.WRIST).x == pytest.approx(1.0)

    def test_reset_forgets_history(self):
        smoother = LandmarkSmoother(Settings(ema_alpha=0.5), mode="ema")
        smoother.smooth(PoseSnapshot(0.0, left={Joint.WRIST: Landmark(0.0, 0.0)}))
        smoother.reset()
        out = smoother.smooth(PoseSnapshot(0.1, left={Joint.WRIST: Landmark(0.8, 0.8)}))
        assert out.get(Side.LEFT, Joint.WRIST).x == 0.8
