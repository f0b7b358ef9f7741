"""Display readout derived from the kinematic state."""

import math
from dataclasses import dataclass

from flightcore.physics.flight_model.base import KinematicState

METERS_TO_FEET = 3.28084
MPS_TO_FPM = 196.85


@dataclass(frozen=True)
class HudReadout:
    """Numbers a head-up display shows.

    Attributes:
        altitude_ft: Height in feet.
        ground_speed: Horizontal speed in world units per second.
        airspeed: Total speed in world units per second.
        heading_deg: Heading in degrees, 0 to 360.
        vertical_speed_fpm: Climb rate in feet per minute.
        fuel: Fuel percentage.
    """

    altitude_ft: float
    ground_speed: float
    airspeed: float
    heading_deg: float
    vertical_speed_fpm: float
    fuel: float

    @classmethod
    def from_state(cls, state: KinematicState) -> "HudReadout":
        """Build a readout from a kinematic state.

        Examples:
            >>> round(HudReadout.from_state(KinematicState.initial()).altitude_ft, 4)
            32.8084
        """
        return cls(
            altitude_ft=state.position.y * METERS_TO_FEET,
            ground_speed=state.velocity.horizontal_magnitude(),
            airspeed=state.velocity.magnitude(),
            heading_deg=(state.rotation.y * 180.0 / math.pi + 360.0) % 360.0,
            vertical_speed_fpm=state.velocity.y * MPS_TO_FPM,
            fuel=state.fuel,
        )
