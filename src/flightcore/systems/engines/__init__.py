"""Engine systems package.

Provides the piston engine state machine, its state snapshot and the
failure model it feeds.
"""

from flightcore.systems.engines.base import EngineState, EngineStatus
from flightcore.systems.engines.failures import (
    PERMANENT,
    FailureCategory,
    FailureGenerator,
    FailureLedger,
    FailureSeverity,
    SystemFailure,
)
from flightcore.systems.engines.piston_simple import (
    SimplePistonEngine,
    SimplePistonEngineConfig,
)

__all__ = [
    "PERMANENT",
    "EngineState",
    "EngineStatus",
    "FailureCategory",
    "FailureGenerator",
    "FailureLedger",
    "FailureSeverity",
    "SimplePistonEngine",
    "SimplePistonEngineConfig",
    "SystemFailure",
]
