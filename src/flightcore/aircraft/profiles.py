"""Aircraft performance profiles.

A profile is the immutable set of coefficients the integrator reads every
tick. Three types ship built in; more can be loaded from a YAML catalog:

    aircraft:
      glider:
        name: "ASK-21"
        max_thrust: 0.0
        lift_coefficient: 1.4
        drag_coefficient: 0.01
        maneuverability: 4
        fuel_efficiency: 10

Typical usage:
    from flightcore.aircraft.profiles import get_profile, load_aircraft_catalog

    trainer = get_profile("trainer")
    catalog = load_aircraft_catalog("config/aircraft.yaml")
"""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from flightcore.core.config import ConfigLoader
from flightcore.core.logging_system import get_logger

logger = get_logger(__name__)

_REQUIRED_FIELDS = (
    "max_thrust",
    "lift_coefficient",
    "drag_coefficient",
    "maneuverability",
    "fuel_efficiency",
)


class AircraftProfileError(ValueError):
    """Raised when a profile is unknown or has out-of-range coefficients."""


@dataclass(frozen=True)
class AircraftProfile:
    """Performance descriptor for one aircraft type.

    Attributes:
        type: Catalog key (e.g. "trainer").
        name: Display name.
        max_thrust: Velocity gain per second at full throttle.
        lift_coefficient: Vertical velocity gain per unit of horizontal speed.
        drag_coefficient: Velocity loss per unit of speed per second.
        maneuverability: Control authority, 0 to 10.
        fuel_efficiency: Fuel economy, 0 to 10 (10 burns least).
        max_speed: Nominal top speed, informational.
        description: Free text for selection screens.
        color: Display color hint.
    """

    type: str
    name: str
    max_thrust: float
    lift_coefficient: float
    drag_coefficient: float
    maneuverability: float
    fuel_efficiency: float
    max_speed: float = 0.0
    description: str = ""
    color: str = "#FFFFFF"

    def __post_init__(self) -> None:
        """Validate coefficient ranges."""
        if not 0.0 <= self.maneuverability <= 10.0:
            raise AircraftProfileError(
                f"{self.type}: maneuverability must be within 0-10, got {self.maneuverability}"
            )
        if not 0.0 <= self.fuel_efficiency <= 10.0:
            raise AircraftProfileError(
                f"{self.type}: fuel_efficiency must be within 0-10, got {self.fuel_efficiency}"
            )
        for name in ("max_thrust", "lift_coefficient", "drag_coefficient"):
            if getattr(self, name) < 0.0:
                raise AircraftProfileError(f"{self.type}: {name} must not be negative")

    @classmethod
    def from_dict(cls, aircraft_type: str, data: dict[str, Any]) -> "AircraftProfile":
        """Build a profile from a catalog entry.

        Args:
            aircraft_type: Catalog key.
            data: Mapping with at least the five performance coefficients.

        Raises:
            AircraftProfileError: If a coefficient is missing or invalid.
        """
        missing = [name for name in _REQUIRED_FIELDS if name not in data]
        if missing:
            raise AircraftProfileError(f"{aircraft_type}: missing {', '.join(missing)}")

        try:
            return cls(
                type=aircraft_type,
                name=str(data.get("name", aircraft_type)),
                max_thrust=float(data["max_thrust"]),
                lift_coefficient=float(data["lift_coefficient"]),
                drag_coefficient=float(data["drag_coefficient"]),
                maneuverability=float(data["maneuverability"]),
                fuel_efficiency=float(data["fuel_efficiency"]),
                max_speed=float(data.get("max_speed", 0.0)),
                description=str(data.get("description", "")),
                color=str(data.get("color", "#FFFFFF")),
            )
        except AircraftProfileError:
            raise
        except (TypeError, ValueError) as e:
            raise AircraftProfileError(f"{aircraft_type}: invalid value ({e})") from e


BUILTIN_PROFILES: MappingProxyType[str, AircraftProfile] = MappingProxyType(
    {
        "trainer": AircraftProfile(
            type="trainer",
            name="T-6 Trainer",
            description="Easy to fly training aircraft with forgiving flight characteristics",
            max_speed=180.0,
            maneuverability=6.0,
            fuel_efficiency=8.0,
            max_thrust=150.0,
            lift_coefficient=0.8,
            drag_coefficient=0.02,
            color="#4A90E2",
        ),
        "fighter": AircraftProfile(
            type="fighter",
            name="F-16 Falcon",
            description="High-performance fighter with excellent maneuverability",
            max_speed=450.0,
            maneuverability=9.0,
            fuel_efficiency=4.0,
            max_thrust=400.0,
            lift_coefficient=1.2,
            drag_coefficient=0.015,
            color="#E24A4A",
        ),
        "airliner": AircraftProfile(
            type="airliner",
            name="Boeing 737",
            description=(
                "Commercial airliner with stable flight characteristics "
                "and high fuel efficiency"
            ),
            max_speed=280.0,
            maneuverability=3.0,
            fuel_efficiency=9.0,
            max_thrust=200.0,
            lift_coefficient=1.0,
            drag_coefficient=0.018,
            color="#50C878",
        ),
    }
)


def load_aircraft_catalog(path: str | Path) -> dict[str, AircraftProfile]:
    """Load profiles from the ``aircraft`` section of a YAML file.

    Args:
        path: YAML file path.

    Returns:
        Profiles keyed by aircraft type, in file order.

    Raises:
        ConfigError: If the file can't be read or has no ``aircraft`` section.
        AircraftProfileError: If an entry is invalid.
    """
    section = ConfigLoader.load(path).get_section("aircraft")

    catalog = {}
    for aircraft_type, data in section.items():
        if not isinstance(data, dict):
            raise AircraftProfileError(f"{aircraft_type}: entry must be a mapping")
        catalog[aircraft_type] = AircraftProfile.from_dict(aircraft_type, data)

    logger.info("Loaded %d aircraft profiles from %s", len(catalog), path)
    return catalog


def get_profile(
    aircraft_type: str, catalog: dict[str, AircraftProfile] | None = None
) -> AircraftProfile:
    """Look up a profile by type.

    Args:
        aircraft_type: Catalog key.
        catalog: Profiles to search. Defaults to the built-in catalog.

    Raises:
        AircraftProfileError: If the type is unknown.
    """
    profiles = BUILTIN_PROFILES if catalog is None else catalog
    try:
        return profiles[aircraft_type]
    except KeyError:
        known = ", ".join(sorted(profiles))
        raise AircraftProfileError(
            f"Unknown aircraft type '{aircraft_type}' (known: {known})"
        ) from None
