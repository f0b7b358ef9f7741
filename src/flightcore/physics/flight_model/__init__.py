"""Flight dynamics: state types and the per-tick integrator."""

from flightcore.physics.flight_model.base import ControlInput, KinematicState
from flightcore.physics.flight_model.simple_kinematic import step

__all__ = ["ControlInput", "KinematicState", "step"]
