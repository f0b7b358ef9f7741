"""Flight model data types.

Typical usage example:
    from flightcore.physics.flight_model.base import ControlInput, KinematicState

    state = KinematicState.initial()
    controls = ControlInput(pitch_up=True)
"""

import math
from dataclasses import dataclass, field

from flightcore.physics.vectors import Vector3

MAX_FUEL = 100.0
MAX_PITCH = math.pi / 3
MAX_ROLL = math.pi / 2

INITIAL_POSITION = (0.0, 10.0, 0.0)


@dataclass(frozen=True)
class ControlInput:
    """Pilot control flags sampled once per tick.

    Attributes:
        pitch_up: Nose up requested.
        pitch_down: Nose down requested.
        yaw_left: Left rudder requested.
        yaw_right: Right rudder requested.
        roll_left: Left aileron requested.
        roll_right: Right aileron requested.
    """

    pitch_up: bool = False
    pitch_down: bool = False
    yaw_left: bool = False
    yaw_right: bool = False
    roll_left: bool = False
    roll_right: bool = False

    @property
    def roll_active(self) -> bool:
        """Whether either roll input is held."""
        return self.roll_left or self.roll_right


@dataclass
class KinematicState:
    """Position, attitude, velocity and fuel of the aircraft.

    Attributes:
        position: Position in world units (y is altitude).
        rotation: Euler angles in radians (pitch=x, yaw=y, roll=z).
        velocity: Velocity in world units per second.
        fuel: Fuel remaining, 0 to 100.
    """

    position: Vector3 = field(default_factory=lambda: Vector3(*INITIAL_POSITION))
    rotation: Vector3 = field(default_factory=Vector3.zero)
    velocity: Vector3 = field(default_factory=Vector3.zero)
    fuel: float = MAX_FUEL

    @classmethod
    def initial(cls) -> "KinematicState":
        """State after a reset: 10 units above the origin, at rest, full tank."""
        return cls()

    def copy(self) -> "KinematicState":
        """Return a deep copy so callers can't alias the vectors."""
        return KinematicState(
            position=self.position.copy(),
            rotation=self.rotation.copy(),
            velocity=self.velocity.copy(),
            fuel=self.fuel,
        )

    def get_altitude(self) -> float:
        return self.position.y

    def get_pitch(self) -> float:
        return self.rotation.x

    def get_yaw(self) -> float:
        return self.rotation.y

    def get_roll(self) -> float:
        return self.rotation.z
