"""Tests for the fixed timestep game loop."""

import pytest

from flightcore.core.game_loop import GameLoop


class TestRunFor:
    """Deterministic simulated-time runs."""

    def test_runs_whole_steps(self) -> None:
        """run_for executes duration * physics_hz fixed steps."""
        steps = []
        loop = GameLoop(steps.append, physics_hz=4)

        executed = loop.run_for(2.0)

        assert executed == 8
        assert steps == [0.25] * 8
        assert loop.simulated_time == pytest.approx(2.0)
        assert not loop.is_running()

    def test_paused_loop_does_nothing(self) -> None:
        steps = []
        loop = GameLoop(steps.append, physics_hz=4)
        loop.pause()

        assert loop.run_for(1.0) == 0
        assert steps == []
        assert loop.is_paused()

    def test_stop_from_callback(self) -> None:
        """stop() inside the callback ends the run early."""
        loop = GameLoop(lambda dt: None, physics_hz=10)
        calls = []

        def update(dt: float) -> None:
            calls.append(dt)
            if len(calls) == 3:
                loop.stop()

        loop.update = update

        assert loop.run_for(5.0) == 3

    def test_callback_exceptions_propagate(self) -> None:
        def update(dt: float) -> None:
            raise RuntimeError("physics blew up")

        loop = GameLoop(update, physics_hz=10)

        with pytest.raises(RuntimeError, match="physics blew up"):
            loop.run_for(1.0)
        assert not loop.is_running()


class TestAccumulator:
    """Frame time accumulation."""

    def test_partial_frames_accumulate(self) -> None:
        """Frame time below one step carries over to the next frame."""
        steps = []
        loop = GameLoop(steps.append, physics_hz=4)

        assert loop.advance(0.125) == 0
        assert loop.advance(0.125) == 1
        assert steps == [0.25]

    def test_accumulator_clamped(self) -> None:
        """A long stall runs at most five steps."""
        steps = []
        loop = GameLoop(steps.append, physics_hz=4)

        assert loop.advance(10.0) == 5

    def test_resume_discards_backlog(self) -> None:
        steps = []
        loop = GameLoop(steps.append, physics_hz=4)
        loop.advance(0.125)
        loop.pause()
        assert loop.advance(1.0) == 0

        loop.resume()

        assert loop.physics_accumulator == 0.0
        assert loop.advance(0.125) == 0

    def test_rates_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            GameLoop(lambda dt: None, physics_hz=0)
