"""Concentric power and work for a kettlebell of known mass."""

import logging

logger = logging.getLogger(__name__)

GRAVITY = 9.81  # m/s^2


class PhysicsEngine:
    """
    Power = Force x Velocity = (mass x gravity) x velocity
    Work = Force x Displacement = (mass x gravity) x height change

    Only concentric (upward) movement counts; eccentric values are 0.
    """

    def __init__(self, kettlebell_mass_kg: float = 16.0):
        self.set_mass(kettlebell_mass_kg)

    def set_mass(self, kettlebell_mass_kg: float):
        if kettlebell_mass_kg <= 0:
            raise ValueError(f"Kettlebell mass must be positive: {kettlebell_mass_kg}")
        self.mass = kettlebell_mass_kg

    @property
    def force(self) -> float:
        return self.mass * GRAVITY

    def power(self, velocity: float) -> float:
        """Watts."""
        if velocity <= 0:
            return 0.0
        return self.force * velocity

    def work(self, displacement: float) -> float:
        """Joules."""
        if displacement <= 0:
            return 0.0
        return self.force * displacement
