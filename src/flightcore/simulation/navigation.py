"""Waypoint navigation readouts.

Distances are horizontal and converted from world units (meters) to nautical
miles. Bearings are true, clockwise from -z (north):

    bearing = (atan2(dx, -dz) * 180 / pi + 360) % 360

A waypoint catalog can be loaded from the ``waypoints`` section of a YAML
file:

    waypoints:
      KJFK:
        name: JFK International
        position: [300, 0, -200]
        type: airport

Typical usage:
    from flightcore.simulation.navigation import nearby_waypoints

    for fix in nearby_waypoints(sim.state.position):
        print(fix.waypoint.id, f"{fix.distance_nm:.1f} NM", f"{fix.bearing_deg:.0f}")
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from flightcore.core.config import ConfigLoader
from flightcore.core.logging_system import get_logger
from flightcore.physics.vectors import Vector3

logger = get_logger(__name__)

METERS_TO_NM = 0.000539957
NEARBY_RADIUS_NM = 50.0
NEARBY_LIMIT = 8

# Reference point for the world origin, and meters per degree
ORIGIN_LATITUDE = 40.7128
ORIGIN_LONGITUDE = -74.0060
METERS_PER_DEGREE = 111111.0


class WaypointError(ValueError):
    """Raised when a waypoint catalog entry is malformed."""


class WaypointType(Enum):
    """Kind of waypoint, used for display symbols."""

    AIRPORT = "airport"
    NAVIGATION = "navigation"
    LANDMARK = "landmark"


@dataclass(frozen=True)
class Waypoint:
    """A named point on the map.

    Attributes:
        id: Identifier (e.g. "KJFK").
        name: Display name.
        position: World position; only x and z are used for navigation.
        type: Waypoint kind.
        description: Free text.
    """

    id: str
    name: str
    position: Vector3
    type: WaypointType
    description: str = ""

    @classmethod
    def from_dict(cls, waypoint_id: str, data: dict[str, Any]) -> "Waypoint":
        """Build a waypoint from a catalog entry.

        Raises:
            WaypointError: If the position or type is missing or invalid.
        """
        try:
            x, y, z = (float(v) for v in data["position"])
            waypoint_type = WaypointType(data.get("type", "navigation"))
        except KeyError as e:
            raise WaypointError(f"{waypoint_id}: missing {e}") from e
        except (TypeError, ValueError) as e:
            raise WaypointError(f"{waypoint_id}: invalid value ({e})") from e

        return cls(
            id=waypoint_id,
            name=str(data.get("name", waypoint_id)),
            position=Vector3(x, y, z),
            type=waypoint_type,
            description=str(data.get("description", "")),
        )


@dataclass(frozen=True)
class NavigationFix:
    """Distance and bearing from the aircraft to one waypoint."""

    waypoint: Waypoint
    distance_nm: float
    bearing_deg: float


BUILTIN_WAYPOINTS: tuple[Waypoint, ...] = (
    Waypoint(
        "KJFK",
        "JFK International",
        Vector3(300.0, 0.0, -200.0),
        WaypointType.AIRPORT,
        "Major international airport with multiple runways",
    ),
    Waypoint(
        "KLGA",
        "LaGuardia Airport",
        Vector3(-400.0, 0.0, 150.0),
        WaypointType.AIRPORT,
        "Regional airport in Queens, NY",
    ),
    Waypoint(
        "TEBN",
        "Teterboro Airport",
        Vector3(-100.0, 0.0, 250.0),
        WaypointType.AIRPORT,
        "General aviation airport",
    ),
    Waypoint(
        "NAV01",
        "Hudson VOR",
        Vector3(0.0, 0.0, 0.0),
        WaypointType.NAVIGATION,
        "VOR navigation beacon",
    ),
    Waypoint(
        "NAV02",
        "Central Park",
        Vector3(150.0, 0.0, 100.0),
        WaypointType.LANDMARK,
        "Famous urban park landmark",
    ),
    Waypoint(
        "NAV03",
        "Brooklyn Bridge",
        Vector3(200.0, 0.0, -50.0),
        WaypointType.LANDMARK,
        "Historic suspension bridge",
    ),
    Waypoint(
        "NAV04",
        "Statue of Liberty",
        Vector3(250.0, 0.0, -100.0),
        WaypointType.LANDMARK,
        "Iconic statue and landmark",
    ),
    Waypoint(
        "NAV05",
        "Bear Mountain",
        Vector3(-600.0, 0.0, 400.0),
        WaypointType.LANDMARK,
        "Mountain peak north of NYC",
    ),
)


def load_waypoint_catalog(path: str | Path) -> tuple[Waypoint, ...]:
    """Load waypoints from the ``waypoints`` section of a YAML file.

    Raises:
        ConfigError: If the file can't be read or has no ``waypoints`` section.
        WaypointError: If an entry is invalid.
    """
    section = ConfigLoader.load(path).get_section("waypoints")

    waypoints = []
    for waypoint_id, data in section.items():
        if not isinstance(data, dict):
            raise WaypointError(f"{waypoint_id}: entry must be a mapping")
        waypoints.append(Waypoint.from_dict(waypoint_id, data))

    logger.info("Loaded %d waypoints from %s", len(waypoints), path)
    return tuple(waypoints)


def waypoint_info(position: Vector3, waypoint: Waypoint) -> NavigationFix:
    """Distance and bearing from ``position`` to ``waypoint``.

    Examples:
        >>> fix = waypoint_info(Vector3(0.0, 10.0, 0.0), BUILTIN_WAYPOINTS[4])
        >>> round(fix.bearing_deg)
        124
    """
    dx = waypoint.position.x - position.x
    dz = waypoint.position.z - position.z
    distance = math.sqrt(dx * dx + dz * dz)
    bearing = (math.atan2(dx, -dz) * 180.0 / math.pi + 360.0) % 360.0
    return NavigationFix(waypoint, distance * METERS_TO_NM, bearing)


def nearby_waypoints(
    position: Vector3,
    waypoints: Iterable[Waypoint] | None = None,
    radius_nm: float = NEARBY_RADIUS_NM,
    limit: int = NEARBY_LIMIT,
) -> list[NavigationFix]:
    """Waypoints closer than ``radius_nm``, nearest first.

    Args:
        position: Aircraft position.
        waypoints: Catalog to search. Defaults to the built-in waypoints.
        radius_nm: Search radius in nautical miles (exclusive).
        limit: Maximum number of fixes returned.
    """
    catalog = BUILTIN_WAYPOINTS if waypoints is None else waypoints
    fixes = [waypoint_info(position, waypoint) for waypoint in catalog]
    fixes = [fix for fix in fixes if fix.distance_nm < radius_nm]
    fixes.sort(key=lambda fix: fix.distance_nm)
    return fixes[:limit]


def gps_coordinates(position: Vector3) -> tuple[float, float]:
    """Approximate latitude and longitude of a world position."""
    latitude = ORIGIN_LATITUDE + position.z / METERS_PER_DEGREE
    longitude = ORIGIN_LONGITUDE + position.x / METERS_PER_DEGREE
    return latitude, longitude
