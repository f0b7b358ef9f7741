"""Simulation driver: per-tick coupling of weather, engine and flight model."""

from flightcore.simulation.hud import HudReadout
from flightcore.simulation.navigation import (
    BUILTIN_WAYPOINTS,
    NavigationFix,
    Waypoint,
    WaypointError,
    WaypointType,
    gps_coordinates,
    load_waypoint_catalog,
    nearby_waypoints,
    waypoint_info,
)
from flightcore.simulation.recorder import FlightRecorder
from flightcore.simulation.simulator import (
    GROUND_LEVEL,
    FlightSimulation,
    SimulationContext,
    SimulationError,
    TickResult,
    tick,
)

__all__ = [
    "BUILTIN_WAYPOINTS",
    "GROUND_LEVEL",
    "FlightRecorder",
    "FlightSimulation",
    "HudReadout",
    "NavigationFix",
    "SimulationContext",
    "SimulationError",
    "TickResult",
    "Waypoint",
    "WaypointError",
    "WaypointType",
    "gps_coordinates",
    "load_waypoint_catalog",
    "nearby_waypoints",
    "tick",
    "waypoint_info",
]
