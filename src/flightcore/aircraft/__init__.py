"""Aircraft performance profiles and catalogs."""

from flightcore.aircraft.profiles import (
    BUILTIN_PROFILES,
    AircraftProfile,
    AircraftProfileError,
    get_profile,
    load_aircraft_catalog,
)

__all__ = [
    "BUILTIN_PROFILES",
    "AircraftProfile",
    "AircraftProfileError",
    "get_profile",
    "load_aircraft_catalog",
]
