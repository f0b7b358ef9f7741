"""Engine state types.

Typical usage:
    state = engine.get_state()
    if state.status is EngineStatus.RUNNING:
        ...
"""

from dataclasses import dataclass
from enum import Enum

HIGH_TEMPERATURE_WARNING_C = 100.0
LOW_OIL_PRESSURE_WARNING_PSI = 20.0


class EngineStatus(Enum):
    """Display status derived from the engine flags.

    FAILED takes precedence over every other flag, and a shutdown in
    progress is reported before the running flag it spools down.
    """

    OFF = "off"
    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    FAILED = "failed"


@dataclass
class EngineState:
    """Snapshot of the engine.

    Attributes:
        is_running: Engine is producing power (or spooling down).
        startup_active: Startup sequence in progress.
        shutdown_active: Shutdown sequence in progress.
        failed: A critical engine failure is active.
        rpm: Crankshaft speed.
        temperature_c: Engine temperature in Celsius.
        oil_pressure_psi: Oil pressure in PSI.
        fuel_flow_gph: Fuel flow in gallons per hour.
        failure_type: Message of the failure that set ``failed``.
    """

    is_running: bool = False
    startup_active: bool = False
    shutdown_active: bool = False
    failed: bool = False
    rpm: float = 0.0
    temperature_c: float = 20.0
    oil_pressure_psi: float = 0.0
    fuel_flow_gph: float = 0.0
    failure_type: str | None = None

    @property
    def status(self) -> EngineStatus:
        """Single status label for displays."""
        if self.failed:
            return EngineStatus.FAILED
        if self.shutdown_active:
            return EngineStatus.SHUTTING_DOWN
        if self.is_running:
            return EngineStatus.RUNNING
        if self.startup_active:
            return EngineStatus.STARTING
        return EngineStatus.OFF

    @property
    def delivers_power(self) -> bool:
        """Whether commanded throttle reaches the airframe."""
        return self.is_running and not self.failed

    @property
    def warnings(self) -> list[str]:
        """Gauge warnings for the current readings."""
        warnings = []
        if self.temperature_c > HIGH_TEMPERATURE_WARNING_C:
            warnings.append("HIGH TEMP")
        if self.is_running and self.oil_pressure_psi < LOW_OIL_PRESSURE_WARNING_PSI:
            warnings.append("LOW OIL PRESSURE")
        return warnings
