"""FlightCore - headless flight simulation.

Runs one aircraft for a fixed stretch of simulated time and prints a
summary of where it ended up.

Typical usage:
    python -m flightcore.main
    python -m flightcore.main --aircraft fighter --weather stormy --duration 120
    python -m flightcore.main --seed 7 --record flight.csv
"""

import argparse
import random
import sys
from collections.abc import Sequence

from flightcore.aircraft.profiles import get_profile, load_aircraft_catalog
from flightcore.core.event_bus import EventBus
from flightcore.core.game_loop import GameLoop
from flightcore.core.logging_system import get_logger, initialize_logging
from flightcore.core.resource_path import get_config_path
from flightcore.physics.flight_model.base import ControlInput
from flightcore.services.weather.weather_model import PRESETS
from flightcore.simulation.events import GroundContactEvent
from flightcore.simulation.navigation import load_waypoint_catalog
from flightcore.simulation.recorder import FlightRecorder
from flightcore.simulation.simulator import FlightSimulation

logger = get_logger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments to parse. Defaults to ``sys.argv[1:]``.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="FlightCore - headless flight simulation")

    parser.add_argument(
        "--aircraft",
        type=str,
        default="trainer",
        help="Aircraft type from the catalog (e.g., trainer, fighter, airliner)",
    )

    parser.add_argument(
        "--aircraft-config",
        type=str,
        help="YAML file with an 'aircraft' section to use instead of the built-in catalog",
    )

    parser.add_argument(
        "--waypoints",
        type=str,
        help="YAML file with a 'waypoints' section to use instead of the built-in waypoints",
    )

    parser.add_argument(
        "--weather",
        choices=["default", *PRESETS],
        default="default",
        help="Weather preset",
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=60.0,
        help="Simulated seconds to run after engine startup",
    )

    parser.add_argument(
        "--hz",
        type=int,
        default=60,
        help="Physics update rate",
    )

    parser.add_argument(
        "--throttle",
        type=float,
        default=0.8,
        help="Throttle to hold once the engine is running (0-1)",
    )

    parser.add_argument(
        "--no-start",
        action="store_true",
        help="Leave the engine off and glide",
    )

    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for failure rolls",
    )

    parser.add_argument(
        "--record",
        type=str,
        metavar="PATH",
        help="Write a CSV flight recording to PATH",
    )

    parser.add_argument(
        "--log-config",
        type=str,
        help="Logging YAML file (defaults to config/logging.yaml when present)",
    )

    return parser.parse_args(argv)


def _setup_logging(log_config: str | None) -> None:
    if log_config:
        initialize_logging(log_config, use_platform_dir=True)
        return

    default_config = get_config_path("logging.yaml")
    if default_config.exists():
        initialize_logging(str(default_config), use_platform_dir=True)
    else:
        initialize_logging(use_platform_dir=True)


def run(args: argparse.Namespace) -> FlightSimulation:
    """Build a simulation from parsed arguments and run it.

    Returns:
        The simulation after the run.
    """
    catalog = load_aircraft_catalog(args.aircraft_config) if args.aircraft_config else None
    profile = get_profile(args.aircraft, catalog)
    waypoints = load_waypoint_catalog(args.waypoints) if args.waypoints else None

    rng = random.Random(args.seed) if args.seed is not None else None
    weather = None if args.weather == "default" else args.weather

    bus = EventBus()
    sim = FlightSimulation(
        profile, weather=weather, rng=rng, event_bus=bus, waypoints=waypoints
    )

    ground_contacts = 0

    def on_ground_contact(event: GroundContactEvent) -> None:
        nonlocal ground_contacts
        ground_contacts += 1

    bus.subscribe(GroundContactEvent, on_ground_contact)

    recorder = FlightRecorder() if args.record else None
    controls = ControlInput()

    def update(dt: float) -> None:
        sim.set_throttle(args.throttle)
        sim.tick(controls, dt)
        if recorder is not None:
            recorder.sample(sim)

    loop = GameLoop(update, physics_hz=args.hz)

    if not args.no_start:
        sim.start_engine()
        loop.run_for(sim.context.engine.config.startup_duration)

    logger.info(
        "Running %s for %.1fs in %s weather", profile.name, args.duration, args.weather
    )
    loop.run_for(args.duration)

    if recorder is not None:
        recorder.save_csv(args.record)

    logger.info("Run complete: %d ticks, %d ground contacts", loop.physics_steps, ground_contacts)
    return sim


def _print_summary(sim: FlightSimulation) -> None:
    hud = sim.hud
    engine = sim.engine_state

    print(f"Aircraft:       {sim.aircraft.name}")
    print(f"Simulated time: {sim.elapsed_time:.1f} s")
    print(f"Altitude:       {hud.altitude_ft:.0f} ft")
    print(f"Airspeed:       {hud.airspeed:.1f}")
    print(f"Heading:        {hud.heading_deg:.0f} deg")
    print(f"Vertical speed: {hud.vertical_speed_fpm:.0f} fpm")
    print(f"Fuel:           {hud.fuel:.1f} %")
    latitude, longitude = sim.gps_position
    print(f"Position:       {latitude:.4f}, {longitude:.4f}")
    nearby = sim.nearby_waypoints()
    if nearby:
        nearest = nearby[0]
        print(
            f"Nearest fix:    {nearest.waypoint.id} {nearest.distance_nm:.1f} NM"
            f" at {nearest.bearing_deg:.0f} deg"
        )
    print(f"Engine:         {engine.status.value} at {engine.rpm:.0f} RPM")
    for warning in engine.warnings:
        print(f"Warning:        {warning}")
    for failure in sim.failures:
        print(f"Failure:        [{failure.severity.value}] {failure.message}")


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success).
    """
    try:
        args = parse_args(argv)
        _setup_logging(args.log_config)
        sim = run(args)
        _print_summary(sim)
        return 0
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
