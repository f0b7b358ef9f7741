"""Per-tick simulation driver.

One tick runs weather, then the engine, then the flight integrator, then
ground handling:

    effects = weather.effects(altitude, dt)
    engine_state = engine.update(dt, throttle, altitude)
    effective_throttle = throttle if engine delivers power else 0
    state = step(state, controls, aircraft, effective_throttle, dt, effects)

All mutable simulation state lives in a ``SimulationContext`` that is passed
to ``tick``. ``FlightSimulation`` wraps a context with the command interface
displays use and publishes events on an ``EventBus``.

Typical usage example:
    sim = FlightSimulation("trainer", weather="calm")
    sim.start_engine()
    for _ in range(600):
        sim.tick(ControlInput(), 1 / 60, throttle_up=True)
    print(sim.hud.altitude_ft)
"""

import math
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from flightcore.aircraft.profiles import AircraftProfile, get_profile
from flightcore.core.event_bus import EventBus
from flightcore.core.logging_system import get_logger
from flightcore.physics.flight_model.base import ControlInput, KinematicState
from flightcore.physics.flight_model.simple_kinematic import step
from flightcore.physics.vectors import Vector3
from flightcore.services.weather.models import WeatherConditions, WeatherEffects
from flightcore.services.weather.weather_model import WeatherModel
from flightcore.simulation.events import (
    EngineStatusChangedEvent,
    FailureClearedEvent,
    FailureTriggeredEvent,
    GroundContactEvent,
    SimulationResetEvent,
)
from flightcore.simulation.hud import HudReadout
from flightcore.simulation.navigation import (
    BUILTIN_WAYPOINTS,
    NEARBY_RADIUS_NM,
    NavigationFix,
    Waypoint,
    gps_coordinates,
    nearby_waypoints,
)
from flightcore.systems.engines.base import EngineState, EngineStatus
from flightcore.systems.engines.failures import RandomSource, SystemFailure
from flightcore.systems.engines.piston_simple import SimplePistonEngine

logger = get_logger(__name__)

GROUND_LEVEL = 1.0
THROTTLE_RATE = 2.0  # throttle units per second while a throttle key is held


class SimulationError(Exception):
    """Raised when a tick can't run: bad timestep or a tick already in flight."""


@dataclass
class SimulationContext:
    """Everything one simulated aircraft needs between ticks.

    Attributes:
        aircraft: Performance profile.
        state: Current kinematic state.
        throttle: Commanded throttle, 0 to 1.
        weather: Weather model.
        engine: Engine subsystem.
        elapsed_time: Simulated seconds so far.
        tick_count: Ticks completed.
        lock: Held for the duration of a tick.
    """

    aircraft: AircraftProfile
    state: KinematicState = field(default_factory=KinematicState.initial)
    throttle: float = 0.0
    weather: WeatherModel = field(default_factory=WeatherModel)
    engine: SimplePistonEngine = field(default_factory=SimplePistonEngine)
    elapsed_time: float = 0.0
    tick_count: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


@dataclass(frozen=True)
class TickResult:
    """Outcome of one tick.

    Attributes:
        state: Kinematic state after ground handling (a copy).
        engine_state: Engine snapshot after the tick.
        weather_effects: Weather contribution used for the step.
        effective_throttle: Throttle that reached the airframe.
        ground_contact: The aircraft was clamped to ground level.
        impact_vertical_speed: Vertical speed just before the clamp.
        triggered_failures: Failures that entered the ledger this tick.
        expired_failures: Messages of failures that timed out this tick.
    """

    state: KinematicState
    engine_state: EngineState
    weather_effects: WeatherEffects
    effective_throttle: float
    ground_contact: bool = False
    impact_vertical_speed: float = 0.0
    triggered_failures: tuple[SystemFailure, ...] = ()
    expired_failures: tuple[str, ...] = ()


def _update_throttle(
    throttle: float, dt: float, throttle_up: bool, throttle_down: bool, powered: bool
) -> float:
    if throttle_up:
        throttle += THROTTLE_RATE * dt
    if throttle_down:
        throttle -= THROTTLE_RATE * dt
    throttle = max(0.0, min(1.0, throttle))
    return throttle if powered else 0.0


def tick(
    ctx: SimulationContext,
    controls: ControlInput,
    dt: float,
    throttle_up: bool = False,
    throttle_down: bool = False,
) -> TickResult:
    """Advance a simulation context by one tick.

    Args:
        ctx: Context to advance in place.
        controls: Control flags held during this tick.
        dt: Tick duration in seconds.
        throttle_up: Throttle-increase key held.
        throttle_down: Throttle-decrease key held.

    Returns:
        What happened during the tick.

    Raises:
        SimulationError: If ``dt`` is not a positive finite number, or another
            tick on the same context is in progress.
    """
    if not math.isfinite(dt) or dt <= 0.0:
        raise SimulationError(f"Tick duration must be positive and finite, got {dt!r}")

    if not ctx.lock.acquire(blocking=False):
        raise SimulationError("A tick is already in progress for this simulation")

    try:
        failures_before = [f.message for f in ctx.engine.failures]
        altitude = ctx.state.position.y

        ctx.throttle = _update_throttle(
            ctx.throttle,
            dt,
            throttle_up,
            throttle_down,
            ctx.engine.get_state().delivers_power,
        )

        effects = ctx.weather.effects(altitude, dt)
        engine_state = ctx.engine.update(dt, ctx.throttle, altitude)
        effective_throttle = ctx.throttle if engine_state.delivers_power else 0.0

        new_state = step(ctx.state, controls, ctx.aircraft, effective_throttle, dt, effects)

        ground_contact = False
        impact_vertical_speed = 0.0
        if new_state.position.y < GROUND_LEVEL:
            ground_contact = True
            impact_vertical_speed = new_state.velocity.y
            new_state.position.y = GROUND_LEVEL
            new_state.velocity = Vector3.zero()
            logger.debug(
                "Ground contact at %s, vertical speed %.2f",
                new_state.position,
                impact_vertical_speed,
            )

        ctx.state = new_state
        ctx.elapsed_time += dt
        ctx.tick_count += 1

        failures_after = ctx.engine.get_failures()
        messages_after = {f.message for f in failures_after}

        return TickResult(
            state=new_state.copy(),
            engine_state=engine_state,
            weather_effects=effects,
            effective_throttle=effective_throttle,
            ground_contact=ground_contact,
            impact_vertical_speed=impact_vertical_speed,
            triggered_failures=tuple(f for f in failures_after if f.message not in failures_before),
            expired_failures=tuple(m for m in failures_before if m not in messages_after),
        )
    finally:
        ctx.lock.release()


class FlightSimulation:
    """One aircraft with its engine and weather, behind a command interface.

    Commands return the same booleans as the engine and publish events on
    the bus. Reads return copies.

    Examples:
        >>> sim = FlightSimulation("trainer")
        >>> sim.start_engine()
        True
        >>> sim.engine_state.status
        <EngineStatus.STARTING: 'starting'>
    """

    def __init__(
        self,
        aircraft: AircraftProfile | str = "trainer",
        weather: WeatherModel | WeatherConditions | Mapping[str, Any] | str | None = None,
        engine: SimplePistonEngine | None = None,
        rng: RandomSource | None = None,
        event_bus: EventBus | None = None,
        waypoints: Iterable[Waypoint] | None = None,
    ) -> None:
        """Initialize the simulation.

        Args:
            aircraft: Profile, or a key of the built-in catalog.
            weather: Weather model, conditions, a mapping of overrides, or a
                preset name. Defaults to the default conditions.
            engine: Engine instance. Defaults to a new ``SimplePistonEngine``.
            rng: Random source for the default engine's failure rolls.
            event_bus: Bus to publish on. A private one is created if omitted.
            waypoints: Navigation catalog. Defaults to the built-in waypoints.

        Raises:
            AircraftProfileError: If the aircraft key is unknown.
            ValueError: If the weather preset or fields are unknown.
        """
        if isinstance(aircraft, str):
            aircraft = get_profile(aircraft)

        if isinstance(weather, WeatherModel):
            weather_model = weather
        elif isinstance(weather, str):
            weather_model = WeatherModel()
            weather_model.apply_preset(weather)
        else:
            weather_model = WeatherModel(weather)

        self.event_bus = event_bus or EventBus()
        self.waypoints = BUILTIN_WAYPOINTS if waypoints is None else tuple(waypoints)
        self.context = SimulationContext(
            aircraft=aircraft,
            weather=weather_model,
            engine=engine or SimplePistonEngine(rng=rng),
        )
        self._last_status = self.context.engine.get_state().status

        logger.info("Simulation created for %s (%s)", aircraft.name, aircraft.type)

    def tick(
        self,
        controls: ControlInput | None = None,
        dt: float = 1.0 / 60.0,
        throttle_up: bool = False,
        throttle_down: bool = False,
    ) -> TickResult:
        """Advance one tick and publish what happened.

        Raises:
            SimulationError: See ``tick``.
        """
        result = tick(self.context, controls or ControlInput(), dt, throttle_up, throttle_down)

        for failure in result.triggered_failures:
            self.event_bus.publish(FailureTriggeredEvent(failure))
        for message in result.expired_failures:
            self.event_bus.publish(FailureClearedEvent(message, repaired=False))
        if result.ground_contact:
            self.event_bus.publish(
                GroundContactEvent(result.state.position, result.impact_vertical_speed)
            )
        self._publish_status()
        return result

    def _publish_status(self) -> None:
        current = self.context.engine.get_state().status
        if current is not self._last_status:
            previous, self._last_status = self._last_status, current
            logger.info("Engine status: %s -> %s", previous.value, current.value)
            self.event_bus.publish(EngineStatusChangedEvent(previous, current))

    # Reads

    @property
    def state(self) -> KinematicState:
        return self.context.state.copy()

    @property
    def engine_state(self) -> EngineState:
        return self.context.engine.get_state()

    @property
    def engine_status(self) -> EngineStatus:
        return self.engine_state.status

    @property
    def failures(self) -> list[SystemFailure]:
        return self.context.engine.get_failures()

    @property
    def weather_conditions(self) -> WeatherConditions:
        return self.context.weather.get_conditions()

    @property
    def hud(self) -> HudReadout:
        return HudReadout.from_state(self.context.state)

    @property
    def gps_position(self) -> tuple[float, float]:
        """Approximate latitude and longitude."""
        return gps_coordinates(self.context.state.position)

    def nearby_waypoints(self, radius_nm: float = NEARBY_RADIUS_NM) -> list[NavigationFix]:
        """Waypoints within ``radius_nm``, nearest first."""
        return nearby_waypoints(self.context.state.position, self.waypoints, radius_nm)

    @property
    def throttle(self) -> float:
        return self.context.throttle

    @property
    def aircraft(self) -> AircraftProfile:
        return self.context.aircraft

    @property
    def elapsed_time(self) -> float:
        return self.context.elapsed_time

    # Commands

    def set_throttle(self, value: float) -> float:
        """Set the commanded throttle directly.

        The value is clamped to 0-1 and forced to 0 while the engine is not
        delivering power.

        Returns:
            The throttle now commanded.
        """
        powered = self.context.engine.get_state().delivers_power
        self.context.throttle = max(0.0, min(1.0, value)) if powered else 0.0
        return self.context.throttle

    def start_engine(self) -> bool:
        started = self.context.engine.start_engine()
        self._publish_status()
        return started

    def shutdown_engine(self) -> bool:
        stopping = self.context.engine.shutdown_engine()
        self._publish_status()
        return stopping

    def repair_failure(self, message: str) -> bool:
        """Repair an active failure by message.

        Repairing the last critical engine failure clears the failed status.
        """
        if not self.context.engine.repair_failure(message):
            return False
        self.event_bus.publish(FailureClearedEvent(message, repaired=True))
        self._publish_status()
        return True

    def emergency_restart(self) -> bool:
        restarted = self.context.engine.emergency_restart()
        self._publish_status()
        return restarted

    def set_weather_conditions(
        self, changes: WeatherConditions | Mapping[str, Any] | None = None, **kwargs: Any
    ) -> WeatherConditions:
        """Merge new weather values and return the resulting conditions."""
        self.context.weather.update_conditions(changes, **kwargs)
        return self.context.weather.get_conditions()

    def apply_weather_preset(self, name: str) -> WeatherConditions:
        """Switch to a named weather preset and return the resulting conditions."""
        self.context.weather.apply_preset(name)
        return self.context.weather.get_conditions()

    def reset(self) -> None:
        """Put the aircraft back at its starting point with a full tank.

        Position, attitude, velocity, fuel and throttle are reset. The engine
        and weather keep their state.
        """
        with self.context.lock:
            self.context.state = KinematicState.initial()
            self.context.throttle = 0.0

        logger.info("Simulation reset")
        self.event_bus.publish(SimulationResetEvent())
