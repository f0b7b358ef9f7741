"""Game loop with fixed timestep physics.

Drives a physics callback at a fixed rate from either the wall clock
(``run``) or a simulated clock (``run_for``). The simulated clock never
sleeps, which makes headless runs and tests deterministic.

Typical usage example:
    from flightcore.core.game_loop import GameLoop

    loop = GameLoop(simulation.tick_once, physics_hz=60)
    loop.run_for(30.0)
"""

import time
from collections.abc import Callable

from flightcore.core.logging_system import get_logger

logger = get_logger(__name__)


class GameLoop:
    """Main loop with fixed timestep physics.

    Frame time is accumulated and consumed in ``physics_dt`` slices so the
    physics callback always sees the same step regardless of frame rate.

    Examples:
        >>> steps = []
        >>> loop = GameLoop(steps.append, physics_hz=10)
        >>> loop.run_for(1.0)
        10
        >>> steps[0]
        0.1
    """

    def __init__(
        self,
        update: Callable[[float], None],
        target_fps: int = 60,
        physics_hz: int = 60,
    ) -> None:
        """Initialize the game loop.

        Args:
            update: Physics callback, called with the fixed timestep.
            target_fps: Target frames per second for ``run`` (default: 60).
            physics_hz: Physics update rate in Hz (default: 60).

        Raises:
            ValueError: If a rate is not positive.
        """
        if physics_hz <= 0 or target_fps <= 0:
            raise ValueError("physics_hz and target_fps must be positive")

        self.update = update
        self.target_fps = target_fps
        self.physics_hz = physics_hz

        self.physics_dt = 1.0 / physics_hz
        self.frame_time_target = 1.0 / target_fps

        self.running = False
        self.paused = False

        self.frame_count = 0
        self.physics_accumulator = 0.0
        self.physics_steps = 0
        self.simulated_time = 0.0

        self.last_time = 0.0
        self.last_fps_time = 0.0
        self.fps = 0.0

    def run(self) -> None:
        """Run against the wall clock until ``stop()`` is called."""
        self.running = True
        self.last_time = time.time()
        self.last_fps_time = self.last_time

        logger.info("Game loop started at %d Hz", self.physics_hz)

        try:
            while self.running:
                self._frame()

        except KeyboardInterrupt:
            logger.info("Game loop interrupted by user")

        finally:
            self.running = False
            logger.info("Game loop stopped")

    def run_for(self, duration: float) -> int:
        """Advance simulated time by ``duration`` seconds without sleeping.

        The duration is rounded to a whole number of physics steps. Nothing
        happens while paused.

        Args:
            duration: Simulated seconds to run.

        Returns:
            Number of physics steps executed.
        """
        if self.paused:
            logger.debug("run_for(%.3f) skipped, loop is paused", duration)
            return 0

        planned = max(0, round(duration * self.physics_hz))
        executed = 0
        self.running = True
        try:
            while executed < planned and self.running:
                self._update_physics(self.physics_dt)
                executed += 1
        finally:
            self.running = False
        return executed

    def advance(self, frame_time: float) -> int:
        """Feed one frame of elapsed time into the accumulator.

        Args:
            frame_time: Seconds since the previous frame.

        Returns:
            Number of physics steps executed.
        """
        if self.paused:
            return 0

        self.physics_accumulator += frame_time

        # Clamp accumulator to prevent spiral of death
        max_accumulator = self.physics_dt * 5
        if self.physics_accumulator > max_accumulator:
            logger.warning("Physics accumulator clamped: %.3fs", self.physics_accumulator)
            self.physics_accumulator = max_accumulator

        steps = 0
        while self.physics_accumulator >= self.physics_dt:
            self._update_physics(self.physics_dt)
            self.physics_accumulator -= self.physics_dt
            steps += 1
        return steps

    def _frame(self) -> None:
        current_time = time.time()
        frame_time = current_time - self.last_time
        self.last_time = current_time

        if current_time - self.last_fps_time >= 1.0:
            self.fps = self.frame_count / (current_time - self.last_fps_time)
            self.frame_count = 0
            self.last_fps_time = current_time

        self.advance(frame_time)
        self._limit_framerate()

        self.frame_count += 1

    def _update_physics(self, dt: float) -> None:
        self.update(dt)
        self.physics_steps += 1
        self.simulated_time += dt

    def _limit_framerate(self) -> None:
        """Sleep to maintain target frame rate."""
        elapsed = time.time() - self.last_time
        sleep_time = self.frame_time_target - elapsed

        if sleep_time > 0:
            time.sleep(sleep_time)

    def stop(self) -> None:
        """Stop the loop at the end of the current frame or step."""
        self.running = False
        logger.info("Game loop stop requested")

    def pause(self) -> None:
        """Pause physics updates."""
        self.paused = True
        logger.info("Game loop paused")

    def resume(self) -> None:
        """Resume physics updates."""
        self.paused = False
        self.physics_accumulator = 0.0  # Reset to avoid catchup
        logger.info("Game loop resumed")

    def get_fps(self) -> float:
        return self.fps

    def is_running(self) -> bool:
        return self.running

    def is_paused(self) -> bool:
        return self.paused
