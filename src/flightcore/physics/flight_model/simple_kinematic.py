"""Simple kinematic flight model.

A per-tick velocity integrator rather than a force/moment model: thrust,
lift, gravity and drag act directly on velocity, attitude is driven straight
from the control flags, and position is advanced with explicit Euler.

The model keeps no state of its own. Everything it needs lives in the
``KinematicState`` the caller passes in, and a fresh state is returned.

Ground contact is not handled here; the caller clamps altitude after each
step.

Physics model per tick:
- No fuel: glide (half gravity, horizontal velocity bleeds 1%)
- Fuel: burn, attitude from controls, thrust along the nose, lift above
  minimum flying speed
- Gravity, weather forces, drag, position integration
- Roll returns toward level when no roll input is held

Typical usage example:
    from flightcore.physics.flight_model.simple_kinematic import step

    state = step(state, controls, profile, effective_throttle=0.8, dt=1 / 60)
"""

import math

from flightcore.aircraft.profiles import AircraftProfile
from flightcore.core.logging_system import get_logger
from flightcore.physics.flight_model.base import (
    MAX_FUEL,
    MAX_PITCH,
    MAX_ROLL,
    ControlInput,
    KinematicState,
)
from flightcore.physics.vectors import Vector3
from flightcore.services.weather.models import WeatherEffects

logger = get_logger(__name__)

GRAVITY = 9.81
GLIDE_GRAVITY_FACTOR = 0.5
GLIDE_HORIZONTAL_DECAY = 0.99
MIN_FLYING_SPEED = 10.0
MAX_DRAG = 0.95
VERTICAL_DRAG_FACTOR = 0.5
TURBULENCE_ATTITUDE_FACTOR = 0.01
# Per call, not per second: the return to level depends on tick rate.
ROLL_AUTO_LEVEL = 0.95

# Attitude rate per unit of maneuverability (rad/s)
PITCH_RATE = 0.02
YAW_RATE = 0.01
ROLL_RATE = 0.03


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def forward_vector(pitch: float, yaw: float) -> Vector3:
    """Unit vector along the aircraft nose.

    Yaw 0 and pitch 0 point down the -z axis; positive pitch lowers the nose.

    Args:
        pitch: Pitch angle in radians.
        yaw: Yaw angle in radians.
    """
    cos_pitch = math.cos(pitch)
    return Vector3(
        math.sin(yaw) * cos_pitch,
        -math.sin(pitch),
        -math.cos(yaw) * cos_pitch,
    )


def fuel_consumption(effective_throttle: float, fuel_efficiency: float, dt: float) -> float:
    """Fuel burned over one tick.

    Args:
        effective_throttle: Throttle actually delivered by the engine, 0 to 1.
        fuel_efficiency: Profile fuel efficiency, 0 to 10.
        dt: Tick duration in seconds.
    """
    return (effective_throttle * 0.5 + 0.1) * dt * (11.0 - fuel_efficiency)


def _apply_controls(
    rotation: Vector3, controls: ControlInput, maneuverability: float, dt: float
) -> None:
    pitch_rate = maneuverability * PITCH_RATE * dt
    yaw_rate = maneuverability * YAW_RATE * dt
    roll_rate = maneuverability * ROLL_RATE * dt

    if controls.pitch_up:
        rotation.x -= pitch_rate
    if controls.pitch_down:
        rotation.x += pitch_rate
    if controls.yaw_left:
        rotation.y -= yaw_rate
    if controls.yaw_right:
        rotation.y += yaw_rate
    if controls.roll_left:
        rotation.z -= roll_rate
    if controls.roll_right:
        rotation.z += roll_rate

    rotation.x = _clamp(rotation.x, -MAX_PITCH, MAX_PITCH)
    rotation.z = _clamp(rotation.z, -MAX_ROLL, MAX_ROLL)


def step(
    state: KinematicState,
    controls: ControlInput,
    aircraft: AircraftProfile,
    effective_throttle: float,
    dt: float,
    weather: WeatherEffects | None = None,
) -> KinematicState:
    """Advance the kinematic state by one tick.

    Args:
        state: Current state. Not modified.
        controls: Control flags held during this tick.
        aircraft: Performance profile.
        effective_throttle: Throttle after engine gating, 0 to 1.
        dt: Tick duration in seconds.
        weather: Weather contribution, or None for still air.

    Returns:
        The next state.
    """
    new_state = state.copy()
    position = new_state.position
    rotation = new_state.rotation
    velocity = new_state.velocity

    if state.fuel <= 0.0:
        velocity.y -= GRAVITY * GLIDE_GRAVITY_FACTOR * dt
        velocity.x *= GLIDE_HORIZONTAL_DECAY
        velocity.z *= GLIDE_HORIZONTAL_DECAY
    else:
        burned = fuel_consumption(effective_throttle, aircraft.fuel_efficiency, dt)
        new_state.fuel = _clamp(state.fuel - burned, 0.0, MAX_FUEL)
        if new_state.fuel == 0.0:
            logger.warning("Fuel exhausted, aircraft is now gliding")

        _apply_controls(rotation, controls, aircraft.maneuverability, dt)

        thrust = effective_throttle * aircraft.max_thrust * dt
        forward = forward_vector(rotation.x, rotation.y)
        velocity.x += forward.x * thrust
        velocity.y += forward.y * thrust
        velocity.z += forward.z * thrust

        horizontal_speed = velocity.horizontal_magnitude()
        if horizontal_speed > MIN_FLYING_SPEED:
            lift = horizontal_speed * aircraft.lift_coefficient * dt
            velocity.y += lift * math.cos(rotation.x)

    velocity.y -= GRAVITY * dt

    atmospheric_drag = 0.0
    if weather is not None:
        velocity.x += (weather.wind_force.x + weather.turbulence.x) * dt
        velocity.y += (weather.wind_force.y + weather.turbulence.y) * dt
        velocity.z += (weather.wind_force.z + weather.turbulence.z) * dt

        rotation.x += weather.turbulence.x * TURBULENCE_ATTITUDE_FACTOR * dt
        rotation.z += weather.turbulence.z * TURBULENCE_ATTITUDE_FACTOR * dt
        rotation.x = _clamp(rotation.x, -MAX_PITCH, MAX_PITCH)
        rotation.z = _clamp(rotation.z, -MAX_ROLL, MAX_ROLL)

        atmospheric_drag = weather.atmospheric_drag

    speed = velocity.magnitude()
    drag = _clamp(aircraft.drag_coefficient * speed * dt + atmospheric_drag, 0.0, MAX_DRAG)
    velocity.x *= 1.0 - drag
    velocity.y *= 1.0 - drag * VERTICAL_DRAG_FACTOR
    velocity.z *= 1.0 - drag

    position.x += velocity.x * dt
    position.y += velocity.y * dt
    position.z += velocity.z * dt

    if not controls.roll_active:
        rotation.z *= ROLL_AUTO_LEVEL

    return new_state
