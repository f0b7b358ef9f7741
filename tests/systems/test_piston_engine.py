"""Tests for SimplePistonEngine implementation."""

import pytest

from flightcore.systems.engines.base import EngineState, EngineStatus
from flightcore.systems.engines.failures import (
    GENERIC_FAILURES,
    LOW_OIL_PRESSURE_FAILURE,
    OVERHEAT_FAILURE,
    FailureCategory,
    FailureSeverity,
    SystemFailure,
)
from flightcore.systems.engines.piston_simple import SimplePistonEngine

IDLE_OIL_TARGET = 20.0 + 800.0 / 2700.0 * 60.0
IDLE_TEMP_TARGET = 20.0 + 800.0 / 2700.0 * 40.0


@pytest.fixture
def engine(never_fail) -> SimplePistonEngine:
    return SimplePistonEngine(rng=never_fail)


@pytest.fixture
def running_engine(engine: SimplePistonEngine) -> SimplePistonEngine:
    engine.start_engine()
    for _ in range(5):
        engine.update(1.0, throttle=0.0, altitude=0.0)
    assert engine.is_running
    return engine


class TestInitialization:
    """Engine construction and configuration."""

    def test_starts_cold_and_off(self, engine: SimplePistonEngine) -> None:
        state = engine.get_state()

        assert state == EngineState()
        assert state.status is EngineStatus.OFF
        assert engine.get_failures() == []

    def test_initialize_overrides_config(self, engine: SimplePistonEngine) -> None:
        """Known keys are applied, unknown keys ignored."""
        engine.initialize({"idle_rpm": 900, "bogus_setting": 1})

        engine.start_engine()
        for _ in range(5):
            state = engine.update(1.0, throttle=0.0, altitude=0.0)

        assert state.rpm == 900.0
        assert not hasattr(engine.config, "bogus_setting")


class TestStartupSequence:
    """Cranking, ignition and idle."""

    def test_start_from_off(self, engine: SimplePistonEngine) -> None:
        assert engine.start_engine()
        assert engine.get_state().status is EngineStatus.STARTING

    def test_cranking_phase(self, engine: SimplePistonEngine) -> None:
        engine.start_engine()
        state = engine.update(1.0, throttle=0.0, altitude=0.0)

        assert 150.0 <= state.rpm <= 250.0
        assert state.oil_pressure_psi == 0.0
        assert state.temperature_c == 20.0
        assert not state.is_running

    def test_ignition_phase(self, engine: SimplePistonEngine) -> None:
        engine.start_engine()
        readings = [engine.update(1.0, 0.0, 0.0) for _ in range(4)]

        assert [s.rpm for s in readings[1:]] == pytest.approx([300.0, 500.0, 700.0])
        assert [s.oil_pressure_psi for s in readings[1:]] == pytest.approx([0.0, 10.0, 20.0])
        assert [s.temperature_c for s in readings[1:]] == pytest.approx([20.0, 25.0, 30.0])

    def test_startup_completes_at_five_seconds(self, engine: SimplePistonEngine) -> None:
        """Startup lands exactly on the idle values."""
        engine.start_engine()
        for _ in range(5):
            state = engine.update(1.0, throttle=0.0, altitude=0.0)

        assert state.is_running
        assert not state.startup_active
        assert state.rpm == 800.0
        assert state.oil_pressure_psi == 35.0
        assert state.temperature_c == 35.0
        assert state.status is EngineStatus.RUNNING

    def test_six_seconds_after_start(self, engine: SimplePistonEngine) -> None:
        """One second of idling after startup keeps 800 RPM."""
        engine.start_engine()
        for _ in range(6):
            state = engine.update(1.0, throttle=0.0, altitude=0.0)

        assert state.is_running
        assert not state.startup_active
        assert state.rpm == 800.0
        assert state.oil_pressure_psi == pytest.approx(IDLE_OIL_TARGET)
        assert state.temperature_c == pytest.approx(35.0 + (IDLE_TEMP_TARGET - 35.0) * 0.5)

    def test_start_rejected_when_busy(self, running_engine: SimplePistonEngine) -> None:
        assert not running_engine.start_engine()

        running_engine.shutdown_engine()
        assert not running_engine.start_engine()

    def test_start_rejected_while_starting(self, engine: SimplePistonEngine) -> None:
        engine.start_engine()
        engine.update(1.0, 0.0, 0.0)

        assert not engine.start_engine()
        assert engine.get_state().rpm != 0.0


class TestShutdownSequence:
    """Spool-down and cooling."""

    def test_shutdown_scenario(self, running_engine: SimplePistonEngine) -> None:
        """Four seconds after shutdown the engine is stopped."""
        assert running_engine.shutdown_engine()
        for _ in range(4):
            state = running_engine.update(1.0, throttle=0.0, altitude=0.0)

        assert not state.is_running
        assert not state.shutdown_active
        assert state.rpm == 0.0
        assert state.oil_pressure_psi == 0.0
        assert state.status is EngineStatus.OFF

    def test_linear_spool_down(self, running_engine: SimplePistonEngine) -> None:
        running_engine.shutdown_engine()

        first = running_engine.update(1.0, throttle=1.0, altitude=0.0)
        second = running_engine.update(1.0, throttle=1.0, altitude=0.0)

        assert first.status is EngineStatus.SHUTTING_DOWN
        assert first.rpm == pytest.approx(800.0 * 2 / 3)
        assert first.oil_pressure_psi == pytest.approx(35.0 * 2 / 3)
        assert second.rpm == pytest.approx(800.0 / 3)
        assert first.fuel_flow_gph == 0.0

    def test_spool_down_starts_from_current_rpm(self, running_engine: SimplePistonEngine) -> None:
        for _ in range(20):
            running_engine.update(0.1, throttle=1.0, altitude=0.0)
        rpm_at_shutdown = running_engine.rpm

        running_engine.shutdown_engine()
        state = running_engine.update(1.5, throttle=1.0, altitude=0.0)

        assert rpm_at_shutdown > 800.0
        assert state.rpm == pytest.approx(rpm_at_shutdown * 0.5)

    def test_cools_to_ambient(self, running_engine: SimplePistonEngine) -> None:
        running_engine.shutdown_engine()
        for _ in range(3):
            state = running_engine.update(1.0, 0.0, 0.0)
        assert state.temperature_c == pytest.approx(30.0)

        for _ in range(10):
            state = running_engine.update(1.0, 0.0, 0.0)
        assert state.temperature_c == 20.0

    def test_shutdown_rejected_when_off(self, engine: SimplePistonEngine) -> None:
        assert not engine.shutdown_engine()

    def test_shutdown_rejected_twice(self, running_engine: SimplePistonEngine) -> None:
        assert running_engine.shutdown_engine()
        assert not running_engine.shutdown_engine()


class TestRunning:
    """Steady-state parameter tracking."""

    def test_rpm_slews_toward_throttle_target(self, running_engine: SimplePistonEngine) -> None:
        state = running_engine.update(0.5, throttle=1.0, altitude=0.0)
        assert state.rpm == pytest.approx(1300.0)

        for _ in range(10):
            state = running_engine.update(0.5, throttle=1.0, altitude=0.0)
        assert state.rpm == 2700.0

        state = running_engine.update(0.5, throttle=0.0, altitude=0.0)
        assert state.rpm == pytest.approx(2200.0)

    def test_throttle_clamped(self, running_engine: SimplePistonEngine) -> None:
        for _ in range(10):
            state = running_engine.update(1.0, throttle=5.0, altitude=0.0)
        assert state.rpm == 2700.0

    def test_fuel_flow(self, running_engine: SimplePistonEngine) -> None:
        for _ in range(10):
            state = running_engine.update(1.0, throttle=1.0, altitude=0.0)
        assert state.fuel_flow_gph == pytest.approx(17.0)

    def test_altitude_cools_engine(self, never_fail) -> None:
        low = SimplePistonEngine(rng=never_fail)
        high = SimplePistonEngine(rng=never_fail)
        for engine, altitude in ((low, 0.0), (high, 5000.0)):
            engine.start_engine()
            for _ in range(60):
                engine.update(1.0, throttle=0.5, altitude=altitude)

        assert high.temperature_c == pytest.approx(low.temperature_c - 10.0, abs=0.01)

    @pytest.mark.parametrize("dt", [0.01, 0.1, 1.0, 2.0])
    def test_parameters_stay_bounded(self, running_engine: SimplePistonEngine, dt: float) -> None:
        """Constant inputs never drive readings past their targets."""
        for i in range(int(600 / dt)):
            throttle = 1.0 if (i // 50) % 2 == 0 else 0.0
            state = running_engine.update(dt, throttle=throttle, altitude=2000.0)

            assert 0.0 <= state.rpm <= 2700.0
            assert 0.0 <= state.oil_pressure_psi <= 80.0
            assert 0.0 <= state.temperature_c <= 120.0


class TestFailures:
    """Critical failures, repair and emergency restart."""

    def test_critical_failure_forces_shutdown(self, running_engine: SimplePistonEngine) -> None:
        running_engine.simulate_failure(OVERHEAT_FAILURE)
        state = running_engine.get_state()

        assert state.failed
        assert state.failure_type == OVERHEAT_FAILURE.message
        assert state.shutdown_active
        assert state.status is EngineStatus.FAILED
        assert not state.delivers_power

    def test_non_critical_failure_keeps_running(self, running_engine: SimplePistonEngine) -> None:
        running_engine.simulate_failure(GENERIC_FAILURES[2])
        state = running_engine.get_state()

        assert not state.failed
        assert state.status is EngineStatus.RUNNING
        assert [f.message for f in running_engine.get_failures()] == ["Engine roughness detected"]

    def test_failed_blocks_start(self, running_engine: SimplePistonEngine) -> None:
        running_engine.simulate_failure(LOW_OIL_PRESSURE_FAILURE)
        for _ in range(4):
            running_engine.update(1.0, 0.0, 0.0)

        assert not running_engine.start_engine()
        assert running_engine.get_state().failed

    def test_repair_clears_failed(self, running_engine: SimplePistonEngine) -> None:
        """Repairing the last critical failure clears failed at once."""
        running_engine.simulate_failure(OVERHEAT_FAILURE)
        running_engine.simulate_failure(LOW_OIL_PRESSURE_FAILURE)

        assert running_engine.repair_failure(OVERHEAT_FAILURE.message)
        assert running_engine.get_state().failed

        assert running_engine.repair_failure(LOW_OIL_PRESSURE_FAILURE.message)
        assert not running_engine.get_state().failed
        assert running_engine.get_state().failure_type is None

    def test_repair_unknown_message(self, running_engine: SimplePistonEngine) -> None:
        assert not running_engine.repair_failure("Nothing wrong")

    def test_failed_clears_on_expiry(self, running_engine: SimplePistonEngine) -> None:
        """A timed critical failure clears failed exactly when it expires."""
        running_engine.simulate_failure(
            SystemFailure(
                category=FailureCategory.ENGINE,
                severity=FailureSeverity.CRITICAL,
                message="Magneto failure",
                affects_engine=True,
                remaining_duration=2.0,
            )
        )

        assert running_engine.update(1.0, 0.0, 0.0).failed
        assert not running_engine.update(1.0, 0.0, 0.0).failed
        assert running_engine.get_failures() == []

    def test_generated_overheat(self, sequence_random) -> None:
        """The failure roll runs after the parameter update each tick."""
        rng = sequence_random([0.5, 0.0])
        engine = SimplePistonEngine(rng=rng)
        engine.start_engine()
        for _ in range(5):
            engine.update(1.0, 0.0, 0.0)

        engine.initialize({"failure_check_interval": 0.25, "overheat_threshold_c": 100.0})
        engine.temperature_c = 130.0
        state = engine.update(0.25, throttle=0.0, altitude=0.0)

        assert state.failed
        assert state.failure_type == OVERHEAT_FAILURE.message
        assert rng.calls == 2

    def test_emergency_restart(self, running_engine: SimplePistonEngine) -> None:
        running_engine.simulate_failure(OVERHEAT_FAILURE)

        # Still spooling down
        assert not running_engine.emergency_restart()

        for _ in range(3):
            running_engine.update(1.0, 0.0, 0.0)

        assert running_engine.emergency_restart()
        state = running_engine.get_state()
        assert not state.failed
        assert state.startup_active
        assert state.status is EngineStatus.STARTING
        # The failure itself stays listed until repaired
        assert [f.message for f in running_engine.get_failures()] == [OVERHEAT_FAILURE.message]

    def test_overheat_after_emergency_restart(self, sequence_random) -> None:
        """A repeat critical failure grounds the engine even though it is still listed."""
        rng = sequence_random()
        engine = SimplePistonEngine(rng=rng)
        engine.start_engine()
        for _ in range(5):
            engine.update(1.0, 0.0, 0.0)

        engine.simulate_failure(OVERHEAT_FAILURE)
        for _ in range(3):
            engine.update(1.0, 0.0, 0.0)
        assert engine.emergency_restart()
        for _ in range(5):
            engine.update(1.0, 0.0, 0.0)
        assert engine.get_state().status is EngineStatus.RUNNING

        engine.initialize({"failure_check_interval": 0.25, "overheat_threshold_c": 100.0})
        engine.temperature_c = 150.0
        rng.values.extend([0.999, 0.0])
        state = engine.update(0.25, throttle=0.0, altitude=0.0)

        assert state.failed
        assert state.shutdown_active
        assert state.status is EngineStatus.FAILED
        assert state.failure_type == OVERHEAT_FAILURE.message
        assert [f.message for f in engine.get_failures()] == [OVERHEAT_FAILURE.message]

    def test_repeat_minor_failure_is_ignored(self, running_engine: SimplePistonEngine) -> None:
        running_engine.simulate_failure(GENERIC_FAILURES[2])
        running_engine.simulate_failure(GENERIC_FAILURES[2])

        state = running_engine.get_state()
        assert not state.failed
        assert state.is_running
        assert len(running_engine.get_failures()) == 1

    def test_emergency_restart_requires_failure(self, engine: SimplePistonEngine) -> None:
        assert not engine.emergency_restart()

    def test_critical_failure_during_startup_aborts(self, engine: SimplePistonEngine) -> None:
        engine.start_engine()
        engine.update(1.0, 0.0, 0.0)

        engine.simulate_failure(OVERHEAT_FAILURE)
        state = engine.get_state()

        assert state.failed
        assert not state.startup_active
        assert state.rpm == 0.0


class TestEngineState:
    """Derived status and warnings."""

    @pytest.mark.parametrize(
        ("flags", "status"),
        [
            ({}, EngineStatus.OFF),
            ({"startup_active": True}, EngineStatus.STARTING),
            ({"is_running": True}, EngineStatus.RUNNING),
            ({"is_running": True, "shutdown_active": True}, EngineStatus.SHUTTING_DOWN),
            ({"is_running": True, "shutdown_active": True, "failed": True}, EngineStatus.FAILED),
            ({"failed": True}, EngineStatus.FAILED),
        ],
    )
    def test_status_priority(self, flags: dict, status: EngineStatus) -> None:
        assert EngineState(**flags).status is status

    def test_warnings(self) -> None:
        assert EngineState(temperature_c=101.0).warnings == ["HIGH TEMP"]
        assert EngineState(is_running=True, oil_pressure_psi=19.0).warnings == [
            "LOW OIL PRESSURE"
        ]
        assert EngineState(oil_pressure_psi=0.0).warnings == []
        healthy = EngineState(is_running=True, oil_pressure_psi=35.0, temperature_c=100.0)
        assert healthy.warnings == []

    def test_snapshot_is_detached(self, running_engine: SimplePistonEngine) -> None:
        state = running_engine.get_state()
        state.rpm = 0.0
        assert running_engine.get_state().rpm == 800.0
