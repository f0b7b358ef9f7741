"""Flight data recorder.

Buffers one row per sample and exports the flight as a numpy array or a
CSV file for analysis and physics model validation.

Typical usage example:
    recorder = FlightRecorder()
    for _ in range(steps):
        sim.tick(controls, dt)
        recorder.sample(sim)
    recorder.save_csv("flight.csv")
"""

from pathlib import Path

import numpy as np
import numpy.typing as npt

from flightcore.core.logging_system import get_logger
from flightcore.physics.flight_model.base import KinematicState

logger = get_logger(__name__)

COLUMNS = (
    "time",
    "position_x",
    "position_y",
    "position_z",
    "pitch",
    "yaw",
    "roll",
    "velocity_x",
    "velocity_y",
    "velocity_z",
    "fuel",
    "rpm",
)


class FlightRecorder:
    """Records kinematic state and engine RPM over time.

    Examples:
        >>> recorder = FlightRecorder()
        >>> recorder.record(0.0, KinematicState.initial(), rpm=0.0)
        >>> recorder.as_array().shape
        (1, 12)
    """

    def __init__(self) -> None:
        self._rows: list[tuple[float, ...]] = []

    def record(self, time: float, state: KinematicState, rpm: float = 0.0) -> None:
        """Append one sample.

        Args:
            time: Simulated time in seconds.
            state: Kinematic state to record.
            rpm: Engine RPM at that time.
        """
        self._rows.append(
            (
                time,
                *state.position.to_array(),
                *state.rotation.to_array(),
                *state.velocity.to_array(),
                state.fuel,
                rpm,
            )
        )

    def sample(self, simulation) -> None:
        """Record the current state of a ``FlightSimulation``."""
        self.record(
            simulation.elapsed_time,
            simulation.state,
            simulation.engine_state.rpm,
        )

    def as_array(self) -> npt.NDArray[np.float64]:
        """Samples as an ``(n, len(COLUMNS))`` array."""
        if not self._rows:
            return np.empty((0, len(COLUMNS)), dtype=np.float64)
        return np.array(self._rows, dtype=np.float64)

    def save_csv(self, path: str | Path) -> Path:
        """Write the samples to a CSV file with a header row.

        Args:
            path: Destination file.

        Returns:
            The path written.
        """
        path = Path(path)
        np.savetxt(
            path,
            self.as_array(),
            fmt="%.6f",
            delimiter=",",
            header=",".join(COLUMNS),
            comments="",
        )
        logger.info("Flight recording saved: %s (%d samples)", path, len(self._rows))
        return path

    def clear(self) -> None:
        self._rows.clear()

    def __len__(self) -> int:
        return len(self._rows)
