"""System failure model for the engine subsystem.

Failures are data: the engine records them in an ordered ledger, displays
read the ledger, and the pilot removes entries by repairing them. Timed
failures clear on their own; permanent ones stay until repaired.

The generator draws from an injected random source so tests can script the
exact sequence of draws. By default it uses an unseeded ``random.Random``.

Typical usage:
    generator = FailureGenerator(rng=random.Random(42))
    for failure in generator.evaluate(dt, temperature, oil_pressure, running):
        ledger.add(failure)
"""

import random
from collections.abc import Iterator
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

from flightcore.core.logging_system import get_logger

logger = get_logger(__name__)

# Sentinel duration for failures that only clear through repair
PERMANENT = None


class FailureCategory(Enum):
    """Aircraft system affected by a failure."""

    ENGINE = "engine"
    FUEL = "fuel"
    ELECTRICAL = "electrical"
    HYDRAULIC = "hydraulic"


class FailureSeverity(Enum):
    """Crew alerting level."""

    WARNING = "warning"
    CAUTION = "caution"
    CRITICAL = "critical"


class RandomSource(Protocol):
    """Anything with a ``random()`` method returning a float in [0, 1)."""

    def random(self) -> float: ...


@dataclass
class SystemFailure:
    """One active failure.

    Attributes:
        category: Affected system.
        severity: Alerting level.
        message: Display text, also the identity used for repair.
        affects_engine: Whether the failure degrades the engine.
        remaining_duration: Seconds until it clears, or ``PERMANENT``.
    """

    category: FailureCategory
    severity: FailureSeverity
    message: str
    affects_engine: bool
    remaining_duration: float | None

    @property
    def is_permanent(self) -> bool:
        return self.remaining_duration is PERMANENT

    @property
    def is_critical_engine_failure(self) -> bool:
        """Whether this failure grounds the engine."""
        return self.severity is FailureSeverity.CRITICAL and self.affects_engine

    def copy(self) -> "SystemFailure":
        return replace(self)


OVERHEAT_FAILURE = SystemFailure(
    category=FailureCategory.ENGINE,
    severity=FailureSeverity.CRITICAL,
    message="Engine overheating - emergency shutdown required",
    affects_engine=True,
    remaining_duration=PERMANENT,
)

LOW_OIL_PRESSURE_FAILURE = SystemFailure(
    category=FailureCategory.ENGINE,
    severity=FailureSeverity.CRITICAL,
    message="Low oil pressure - engine damage imminent",
    affects_engine=True,
    remaining_duration=PERMANENT,
)

GENERIC_FAILURES: tuple[SystemFailure, ...] = (
    SystemFailure(
        category=FailureCategory.FUEL,
        severity=FailureSeverity.CAUTION,
        message="Fuel pump pressure low",
        affects_engine=False,
        remaining_duration=60.0,
    ),
    SystemFailure(
        category=FailureCategory.ELECTRICAL,
        severity=FailureSeverity.WARNING,
        message="Alternator output low",
        affects_engine=False,
        remaining_duration=120.0,
    ),
    SystemFailure(
        category=FailureCategory.ENGINE,
        severity=FailureSeverity.CAUTION,
        message="Engine roughness detected",
        affects_engine=True,
        remaining_duration=90.0,
    ),
    SystemFailure(
        category=FailureCategory.HYDRAULIC,
        severity=FailureSeverity.WARNING,
        message="Hydraulic pressure fluctuation",
        affects_engine=False,
        remaining_duration=180.0,
    ),
)


class FailureLedger:
    """Ordered collection of active failures, unique by message.

    Insertion order is display order and repair order.
    """

    def __init__(self) -> None:
        self._failures: list[SystemFailure] = []

    def add(self, failure: SystemFailure) -> bool:
        """Record a failure.

        Args:
            failure: Failure to record. A copy is stored.

        Returns:
            False if a failure with the same message is already active.
        """
        if any(f.message == failure.message for f in self._failures):
            logger.debug("Failure already active: %s", failure.message)
            return False
        self._failures.append(failure.copy())
        return True

    def repair(self, message: str) -> bool:
        """Remove the first failure with this message.

        Returns:
            True if a failure was removed.
        """
        for index, failure in enumerate(self._failures):
            if failure.message == message:
                del self._failures[index]
                return True
        return False

    def tick(self, dt: float) -> list[SystemFailure]:
        """Count down timed failures and drop the ones that ran out.

        Args:
            dt: Elapsed time in seconds.

        Returns:
            The failures that expired during this tick.
        """
        kept = []
        expired = []
        for failure in self._failures:
            if failure.remaining_duration is not PERMANENT:
                failure.remaining_duration -= dt
                if failure.remaining_duration <= 0:
                    expired.append(failure)
                    continue
            kept.append(failure)
        self._failures = kept
        return expired

    def has_critical_engine_failure(self) -> bool:
        return any(f.is_critical_engine_failure for f in self._failures)

    def snapshot(self) -> list[SystemFailure]:
        """Copies of the active failures, in order."""
        return [f.copy() for f in self._failures]

    def clear(self) -> None:
        self._failures.clear()

    def __len__(self) -> int:
        return len(self._failures)

    def __iter__(self) -> Iterator[SystemFailure]:
        return iter(self.snapshot())


class FailureGenerator:
    """Rolls for failures on a fixed cadence.

    Every ``check_interval`` seconds of accumulated time it makes one generic
    roll and, when the engine is in a bad way, one roll each for overheating
    and oil starvation.

    Examples:
        >>> generator = FailureGenerator(rng=random.Random(1))
        >>> generator.evaluate(1.0, temperature_c=90.0, oil_pressure_psi=40.0, is_running=True)
        []
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        check_interval: float = 30.0,
        random_failure_probability: float = 0.001,
        overheat_threshold_c: float = 120.0,
        overheat_probability: float = 0.01,
        low_oil_threshold_psi: float = 20.0,
        low_oil_probability: float = 0.005,
    ) -> None:
        """Initialize the generator.

        Args:
            rng: Random source. Defaults to an unseeded ``random.Random``.
            check_interval: Seconds between rolls.
            random_failure_probability: Chance of a generic failure per roll.
            overheat_threshold_c: Temperature above which overheating can occur.
            overheat_probability: Chance of overheating per roll when hot.
            low_oil_threshold_psi: Oil pressure below which starvation can occur.
            low_oil_probability: Chance of oil starvation per roll when low.
        """
        self.rng: RandomSource = rng if rng is not None else random.Random()
        self.check_interval = check_interval
        self.random_failure_probability = random_failure_probability
        self.overheat_threshold_c = overheat_threshold_c
        self.overheat_probability = overheat_probability
        self.low_oil_threshold_psi = low_oil_threshold_psi
        self.low_oil_probability = low_oil_probability
        self._since_last_check = 0.0

    def evaluate(
        self,
        dt: float,
        temperature_c: float,
        oil_pressure_psi: float,
        is_running: bool,
    ) -> list[SystemFailure]:
        """Advance the cadence timer and roll if a check is due.

        Args:
            dt: Elapsed time in seconds.
            temperature_c: Current engine temperature.
            oil_pressure_psi: Current oil pressure.
            is_running: Whether the engine is running.

        Returns:
            New failures, in the order they were rolled. Empty between checks.
        """
        self._since_last_check += dt
        if self._since_last_check < self.check_interval:
            return []
        self._since_last_check = 0.0

        triggered = []

        if self.rng.random() < self.random_failure_probability:
            triggered.append(self._pick_generic_failure())

        if (
            temperature_c > self.overheat_threshold_c
            and self.rng.random() < self.overheat_probability
        ):
            triggered.append(OVERHEAT_FAILURE.copy())

        if (
            oil_pressure_psi < self.low_oil_threshold_psi
            and is_running
            and self.rng.random() < self.low_oil_probability
        ):
            triggered.append(LOW_OIL_PRESSURE_FAILURE.copy())

        return triggered

    def _pick_generic_failure(self) -> SystemFailure:
        index = min(int(self.rng.random() * len(GENERIC_FAILURES)), len(GENERIC_FAILURES) - 1)
        return GENERIC_FAILURES[index].copy()

    def reset(self) -> None:
        """Restart the cadence timer."""
        self._since_last_check = 0.0
