"""Events published by the simulation driver.

Typical usage example:
    bus.subscribe(GroundContactEvent, on_touchdown)
"""

from dataclasses import dataclass

from flightcore.core.event_bus import Event
from flightcore.physics.vectors import Vector3
from flightcore.systems.engines.base import EngineStatus
from flightcore.systems.engines.failures import SystemFailure


@dataclass
class EngineStatusChangedEvent(Event):
    """Engine display status changed between two ticks or after a command."""

    previous: EngineStatus
    current: EngineStatus


@dataclass
class FailureTriggeredEvent(Event):
    """A new failure entered the ledger."""

    failure: SystemFailure


@dataclass
class FailureClearedEvent(Event):
    """A failure left the ledger.

    Attributes:
        message: Message of the failure.
        repaired: True when removed by the pilot, False when it timed out.
    """

    message: str
    repaired: bool


@dataclass
class GroundContactEvent(Event):
    """The aircraft was clamped to ground level."""

    position: Vector3
    vertical_speed: float


@dataclass
class SimulationResetEvent(Event):
    """Aircraft state and throttle were reset; engine and weather are left as they are."""
