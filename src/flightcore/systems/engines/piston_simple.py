"""Simple piston engine with start/stop sequences and failure modeling.

State machine:
    OFF -> STARTING -> RUNNING -> SHUTTING_DOWN -> OFF

``failed`` is an orthogonal flag. A critical engine failure sets it and
forces a shutdown; it clears on its own once no critical engine failure is
left in the ledger, or immediately through ``emergency_restart``.

Sequences:
- Startup (5 s): 2 s cranking around 200 RPM, 3 s ignition ramping RPM,
  oil pressure and temperature, then idle at 800 RPM / 35 PSI / 35 C.
- Shutdown (3 s): RPM and oil pressure spool down linearly from the values
  they had when shutdown began, fuel flow cut immediately.
- Running: RPM slews toward the throttle target, oil pressure and
  temperature approach their targets exponentially. Ambient temperature
  drops with altitude.

Requests that are illegal in the current state are rejected by returning
False; nothing is raised.
"""

from dataclasses import dataclass, fields
import math

from flightcore.core.logging_system import get_logger
from flightcore.systems.engines.base import EngineState
from flightcore.systems.engines.failures import (
    FailureGenerator,
    FailureLedger,
    RandomSource,
    SystemFailure,
)

logger = get_logger(__name__)


@dataclass
class SimplePistonEngineConfig:
    """Tuning constants for the piston engine."""

    idle_rpm: float = 800.0
    max_rpm: float = 2700.0
    rpm_rate: float = 1000.0  # RPM per second
    ambient_temp_c: float = 20.0
    temp_lapse_per_unit: float = 0.002  # C per world unit of altitude

    # Startup sequence
    cranking_duration: float = 2.0
    startup_duration: float = 5.0
    cranking_rpm: float = 200.0
    cranking_rpm_swing: float = 50.0
    ignition_rpm: float = 300.0
    ignition_rpm_rate: float = 200.0
    ignition_oil_rate: float = 10.0
    ignition_oil_max: float = 30.0
    ignition_temp_rate: float = 5.0
    idle_oil_pressure_psi: float = 35.0
    idle_temp_c: float = 35.0

    # Shutdown sequence
    shutdown_duration: float = 3.0
    cooling_rate: float = 5.0  # C per second while stopped

    # Running
    oil_pressure_base_psi: float = 20.0
    oil_pressure_span_psi: float = 60.0
    max_oil_pressure_psi: float = 80.0
    oil_response: float = 2.0  # 1/s
    throttle_heat_c: float = 60.0
    rpm_heat_c: float = 40.0
    temp_response: float = 0.5  # 1/s
    fuel_flow_throttle_gph: float = 15.0
    fuel_flow_base_gph: float = 2.0

    # Failures
    failure_check_interval: float = 30.0
    random_failure_probability: float = 0.001
    overheat_threshold_c: float = 120.0
    overheat_probability: float = 0.01
    low_oil_threshold_psi: float = 20.0
    low_oil_probability: float = 0.005


class SimplePistonEngine:
    """Piston engine state machine.

    Examples:
        >>> engine = SimplePistonEngine()
        >>> engine.start_engine()
        True
        >>> for _ in range(5):
        ...     state = engine.update(1.0, throttle=0.0, altitude=0.0)
        >>> state.is_running, state.rpm
        (True, 800.0)
    """

    def __init__(
        self,
        config: SimplePistonEngineConfig | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        """Initialize a stopped, cold engine.

        Args:
            config: Tuning constants. Defaults to ``SimplePistonEngineConfig()``.
            rng: Random source for failure rolls. Defaults to unseeded.
        """
        self.config = config or SimplePistonEngineConfig()
        self._rng = rng

        self.is_running = False
        self.startup_active = False
        self.shutdown_active = False
        self.failed = False
        self.failure_type: str | None = None

        self.rpm = 0.0
        self.temperature_c = self.config.ambient_temp_c
        self.oil_pressure_psi = 0.0
        self.fuel_flow_gph = 0.0

        self._startup_time = 0.0
        self._shutdown_time = 0.0
        self._shutdown_start_rpm = 0.0
        self._shutdown_start_oil = 0.0

        self.failures = FailureLedger()
        self.failure_generator = self._build_generator()

    def initialize(self, config: dict) -> None:
        """Override tuning constants from a configuration mapping.

        Keys matching ``SimplePistonEngineConfig`` fields are applied;
        anything else is logged and ignored.

        Args:
            config: Engine configuration dictionary.
        """
        known = {f.name for f in fields(SimplePistonEngineConfig)}
        for key, value in config.items():
            if key in known:
                setattr(self.config, key, float(value))
            else:
                logger.warning("Ignoring unknown engine setting: %s", key)

        self.failure_generator = self._build_generator()
        logger.info(
            "SimplePistonEngine initialized: idle %.0f RPM, max %.0f RPM",
            self.config.idle_rpm,
            self.config.max_rpm,
        )

    def _build_generator(self) -> FailureGenerator:
        return FailureGenerator(
            rng=self._rng,
            check_interval=self.config.failure_check_interval,
            random_failure_probability=self.config.random_failure_probability,
            overheat_threshold_c=self.config.overheat_threshold_c,
            overheat_probability=self.config.overheat_probability,
            low_oil_threshold_psi=self.config.low_oil_threshold_psi,
            low_oil_probability=self.config.low_oil_probability,
        )

    def start_engine(self) -> bool:
        """Begin the startup sequence.

        Returns:
            False if the engine is running, already starting, or failed.
        """
        if self.is_running or self.startup_active or self.failed:
            return False

        logger.info("Engine startup sequence initiated")
        self.startup_active = True
        self._startup_time = 0.0
        return True

    def shutdown_engine(self) -> bool:
        """Begin the shutdown sequence.

        Returns:
            False if the engine is not running or already shutting down.
        """
        if not self.is_running or self.shutdown_active:
            return False

        logger.info("Engine shutdown sequence initiated at %.0f RPM", self.rpm)
        self.shutdown_active = True
        self._shutdown_time = 0.0
        self._shutdown_start_rpm = self.rpm
        self._shutdown_start_oil = self.oil_pressure_psi
        return True

    def update(self, dt: float, throttle: float, altitude: float) -> EngineState:
        """Advance the engine by one tick.

        Runs the active phase (startup, shutdown, running or stopped), then
        the failure roll, then failure expiry.

        Args:
            dt: Tick duration in seconds.
            throttle: Throttle command, clamped to 0-1.
            altitude: Altitude in world units, sets the ambient temperature.

        Returns:
            Snapshot of the engine after the tick.
        """
        throttle = max(0.0, min(1.0, throttle))

        # One phase per tick. The tick that completes startup reports the idle
        # readings; steady-state takes over on the next tick.
        if self.startup_active:
            self._update_startup(dt)
        elif self.shutdown_active:
            self._update_shutdown(dt)
        elif self.is_running and not self.failed:
            self._update_running(dt, throttle, altitude)
        else:
            self._update_stopped(dt)

        for failure in self.failure_generator.evaluate(
            dt, self.temperature_c, self.oil_pressure_psi, self.is_running
        ):
            self._trigger_failure(failure)

        self._update_failures(dt)

        return self.get_state()

    def _update_startup(self, dt: float) -> None:
        cfg = self.config
        self._startup_time += dt
        t = self._startup_time

        if t < cfg.cranking_duration:
            self.rpm = cfg.cranking_rpm + math.sin(t * 10.0) * cfg.cranking_rpm_swing
            self.oil_pressure_psi = 0.0
            self.temperature_c = cfg.ambient_temp_c
        elif t < cfg.startup_duration:
            ignition_time = t - cfg.cranking_duration
            self.rpm = cfg.ignition_rpm + ignition_time * cfg.ignition_rpm_rate
            self.oil_pressure_psi = min(cfg.ignition_oil_max, ignition_time * cfg.ignition_oil_rate)
            self.temperature_c = cfg.ambient_temp_c + ignition_time * cfg.ignition_temp_rate
        else:
            self.startup_active = False
            self.is_running = True
            self.rpm = cfg.idle_rpm
            self.oil_pressure_psi = cfg.idle_oil_pressure_psi
            self.temperature_c = cfg.idle_temp_c
            logger.info("Engine startup complete, idling at %.0f RPM", self.rpm)

    def _update_shutdown(self, dt: float) -> None:
        cfg = self.config
        self._shutdown_time += dt
        t = self._shutdown_time

        if t < cfg.shutdown_duration:
            remaining = 1.0 - t / cfg.shutdown_duration
            self.rpm = self._shutdown_start_rpm * remaining
            self.oil_pressure_psi = self._shutdown_start_oil * remaining
            self.fuel_flow_gph = 0.0
        else:
            self.shutdown_active = False
            self.is_running = False
            self.rpm = 0.0
            self.oil_pressure_psi = 0.0
            self.fuel_flow_gph = 0.0
            self._cool_down(dt)
            logger.info("Engine shutdown complete")

    def _update_running(self, dt: float, throttle: float, altitude: float) -> None:
        cfg = self.config

        target_rpm = cfg.idle_rpm + (cfg.max_rpm - cfg.idle_rpm) * throttle
        if self.rpm < target_rpm:
            self.rpm = min(target_rpm, self.rpm + cfg.rpm_rate * dt)
        else:
            self.rpm = max(target_rpm, self.rpm - cfg.rpm_rate * dt)

        rpm_fraction = self.rpm / cfg.max_rpm

        target_oil = min(
            cfg.max_oil_pressure_psi,
            cfg.oil_pressure_base_psi + rpm_fraction * cfg.oil_pressure_span_psi,
        )
        self.oil_pressure_psi += (target_oil - self.oil_pressure_psi) * _response(
            cfg.oil_response, dt
        )

        ambient = cfg.ambient_temp_c - altitude * cfg.temp_lapse_per_unit
        target_temp = ambient + throttle * cfg.throttle_heat_c + rpm_fraction * cfg.rpm_heat_c
        self.temperature_c += (target_temp - self.temperature_c) * _response(
            cfg.temp_response, dt
        )

        self.fuel_flow_gph = (
            throttle * cfg.fuel_flow_throttle_gph + cfg.fuel_flow_base_gph
        ) * rpm_fraction

    def _update_stopped(self, dt: float) -> None:
        self.rpm = 0.0
        self.oil_pressure_psi = 0.0
        self.fuel_flow_gph = 0.0
        self._cool_down(dt)

    def _cool_down(self, dt: float) -> None:
        ambient = self.config.ambient_temp_c
        if self.temperature_c > ambient:
            self.temperature_c = max(ambient, self.temperature_c - self.config.cooling_rate * dt)

    def _trigger_failure(self, failure: SystemFailure) -> None:
        if self.failures.add(failure):
            logger.warning(
                "System failure (%s/%s): %s",
                failure.category.value,
                failure.severity.value,
                failure.message,
            )

        # Applies even when the entry is still listed from an earlier occurrence
        if failure.is_critical_engine_failure:
            self.failed = True
            self.failure_type = failure.message

            if self.startup_active:
                logger.warning("Startup aborted by critical failure")
                self.startup_active = False
                self.rpm = 0.0
                self.oil_pressure_psi = 0.0
            elif self.is_running:
                self.shutdown_engine()

    def _update_failures(self, dt: float) -> None:
        for failure in self.failures.tick(dt):
            logger.info("Failure cleared: %s", failure.message)
        self._clear_failed_if_resolved()

    def _clear_failed_if_resolved(self) -> None:
        if self.failed and not self.failures.has_critical_engine_failure():
            self.failed = False
            self.failure_type = None
            logger.info("Engine can be restarted - critical failures resolved")

    def simulate_failure(self, failure: SystemFailure) -> None:
        """Inject a failure, as if the generator had rolled it.

        Used for training scenarios and tests.

        Args:
            failure: Failure to record.
        """
        self._trigger_failure(failure)

    def repair_failure(self, message: str) -> bool:
        """Remove the first active failure with this message.

        Clears ``failed`` when this was the last critical engine failure.

        Returns:
            True if a failure was removed.
        """
        if self.failures.repair(message):
            logger.info("Repaired failure: %s", message)
            self._clear_failed_if_resolved()
            return True
        return False

    def emergency_restart(self) -> bool:
        """Clear the failed flag and attempt a start.

        Returns:
            False unless the engine is failed and fully stopped, otherwise the
            result of ``start_engine()``.
        """
        if not self.failed or self.is_running:
            return False

        logger.warning("Emergency engine restart attempted")
        self.failed = False
        self.failure_type = None
        return self.start_engine()

    def get_state(self) -> EngineState:
        """Get a snapshot of the engine."""
        return EngineState(
            is_running=self.is_running,
            startup_active=self.startup_active,
            shutdown_active=self.shutdown_active,
            failed=self.failed,
            rpm=self.rpm,
            temperature_c=self.temperature_c,
            oil_pressure_psi=self.oil_pressure_psi,
            fuel_flow_gph=self.fuel_flow_gph,
            failure_type=self.failure_type,
        )

    def get_failures(self) -> list[SystemFailure]:
        """Get copies of the active failures, in order."""
        return self.failures.snapshot()


def _response(rate: float, dt: float) -> float:
    """Fraction of the gap to close this tick for a first-order lag.

    Capped at 1 so long ticks land on the target instead of overshooting.
    """
    return min(1.0, rate * dt)
