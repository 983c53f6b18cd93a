"""Application configuration."""

from functools import lru_cache
from typing import Tuple
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings loaded from environment variables (IRONEYE_ prefix)."""

    # Frame geometry (pixels) and nominal call rate
    frame_width: int = 640
    frame_height: int = 480
    nominal_fps: float = 30.0

    # Landmark smoothing
    smoothing_mode: str = "one_euro"  # "one_euro" or "ema"
    one_euro_min_cutoff: float = 0.05
    one_euro_beta: float = 0.25
    one_euro_d_cutoff: float = 1.0
    ema_alpha: float = 0.3

    # Calibration
    calibration_frames: int = 60  # 2 seconds at 30fps
    head_offset_fraction: float = 0.12  # ~12% of height is above the nose
    min_upright_fraction: float = 0.30  # Ankle-to-nose must span 30% of frame
    min_height_inches: float = 48.0
    max_height_inches: float = 96.0

    # Velocity estimation
    min_frame_interval: float = 0.016  # Below this = duplicate frame
    max_frame_interval: float = 0.1    # Above this = dropped frames
    velocity_alpha: float = 0.15
    max_speed: float = 8.0             # m/s ceiling
    speed_dead_band: float = 0.05      # m/s
    include_depth: bool = False

    # Posture thresholds (flexion: 0 = straight arm)
    rack_flexion_degrees: float = 130.0
    lockout_flexion_degrees: float = 40.0
    rack_shoulder_tolerance: float = 0.08
    rack_elbow_hip_tolerance: float = 0.12
    overhead_arm_ratio: float = 0.30
    overhead_nose_margin: float = 0.10
    swing_hip_margin: float = 0.10

    # Hold counters (frames at 30fps)
    side_lock_offset: float = 0.10
    side_lock_frames: int = 5
    rack_hold_frames: int = 20
    lockout_hold_frames: int = 3
    below_hip_hold_frames: int = 3
    settling_frames: int = 8
    max_rep_frames: int = 150

    # Standing reset (set boundary)
    neutral_window_frames: int = 30
    neutral_wrist_tolerance: float = 0.05
    upright_torso_ratio: float = 0.90
    standing_reset_frames: int = 45

    # Fatigue
    fatigue_baseline_reps: int = 3
    fatigue_thresholds: Tuple[float, ...] = (10.0, 20.0, 30.0)

    # Physics
    kettlebell_mass_kg: float = 16.0

    class Config:
        env_file = ".env"
        env_prefix = "IRONEYE_"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
