"""Atmosphere model that perturbs the flight dynamics.

The model holds the current conditions and turns them into a per-tick force
contribution. Wind and turbulence grow with altitude (up to twice their base
strength at 2000 units), while atmospheric drag thins out exponentially.

Turbulence is a fixed sum of sinusoids driven by an internal clock, so the
same sequence of ``dt`` values always produces the same buffeting.

Typical usage:
    from flightcore.services.weather import WeatherModel

    weather = WeatherModel({"wind_speed_kts": 20.0})
    effects = weather.effects(altitude=500.0, dt=1 / 60)
"""

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import fields
from typing import Any

from flightcore.core.logging_system import get_logger
from flightcore.physics.vectors import Vector3
from flightcore.services.weather.models import WeatherConditions, WeatherEffects

logger = get_logger(__name__)

_CONDITION_FIELDS = frozenset(f.name for f in fields(WeatherConditions))
_UNIT_RANGE_FIELDS = frozenset({"turbulence_intensity", "cloud_cover"})

# Turbulence oscillator: (angular frequency rad/s, axis weight)
_TURBULENCE_X = (3.7, 0.5)
_TURBULENCE_Y = (2.1, 0.3)
_TURBULENCE_Z = (4.3, 0.4)


def _as_vector(value: Vector3 | Sequence[float]) -> Vector3:
    if isinstance(value, Vector3):
        return value.copy()
    x, y, z = value
    return Vector3(float(x), float(y), float(z))


def _normalize_direction(direction: Vector3) -> Vector3:
    """Scale to unit length; a zero vector is returned unchanged."""
    magnitude = direction.magnitude()
    if magnitude > 0:
        return direction / magnitude
    return direction


class WeatherModel:
    """Holds weather conditions and derives their effect on the aircraft.

    Examples:
        >>> weather = WeatherModel(WeatherModel.calm())
        >>> round(weather.effects(altitude=0.0, dt=1.0).atmospheric_drag, 4)
        0.0204
    """

    def __init__(
        self, conditions: WeatherConditions | Mapping[str, Any] | None = None
    ) -> None:
        """Initialize the model.

        Args:
            conditions: Full conditions, or a mapping of fields to override on
                top of the defaults.

        Raises:
            ValueError: If a field is unknown, or turbulence or cloud cover is
                outside 0-1.
        """
        if isinstance(conditions, WeatherConditions):
            conditions = {f: getattr(conditions, f) for f in _CONDITION_FIELDS}

        self._conditions = WeatherConditions()
        if conditions:
            self._merge(conditions)

        self._conditions.wind_direction = _normalize_direction(self._conditions.wind_direction)
        self._elapsed = 0.0

    def update_conditions(
        self, changes: WeatherConditions | Mapping[str, Any] | None = None, **kwargs: Any
    ) -> None:
        """Merge new values into the current conditions.

        The wind direction is re-normalized only when it is part of the update.
        A full ``WeatherConditions`` replaces every field.

        Args:
            changes: Full conditions or a mapping of fields to change.
            **kwargs: Additional fields to change.

        Raises:
            ValueError: If a field is unknown or out of range. Nothing changes then.
        """
        if isinstance(changes, WeatherConditions):
            changes = {f: getattr(changes, f) for f in _CONDITION_FIELDS}

        merged = dict(changes or {})
        merged.update(kwargs)

        self._merge(merged)
        if "wind_direction" in merged:
            self._conditions.wind_direction = _normalize_direction(
                self._conditions.wind_direction
            )

        logger.info(
            "Weather updated: wind %.0f kt, turbulence %.2f, visibility %.1f mi",
            self._conditions.wind_speed_kts,
            self._conditions.turbulence_intensity,
            self._conditions.visibility_mi,
        )

    def _merge(self, changes: Mapping[str, Any]) -> None:
        unknown = set(changes) - _CONDITION_FIELDS
        if unknown:
            raise ValueError(f"Unknown weather fields: {', '.join(sorted(unknown))}")

        converted = {}
        for name, value in changes.items():
            if name == "wind_direction":
                converted[name] = _as_vector(value)
                continue
            value = float(value)
            if name in _UNIT_RANGE_FIELDS and not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within 0-1, got {value}")
            converted[name] = value

        for name, value in converted.items():
            setattr(self._conditions, name, value)

    def effects(self, altitude: float, dt: float) -> WeatherEffects:
        """Compute the weather contribution for one tick.

        Advances the turbulence clock by ``dt``.

        Args:
            altitude: Aircraft altitude in world units.
            dt: Tick duration in seconds.

        Returns:
            Wind force, turbulence and atmospheric drag for this tick.
        """
        self._elapsed += dt
        conditions = self._conditions

        altitude_factor = max(0.0, min(altitude / 1000.0, 2.0))

        wind_scale = conditions.wind_speed_kts * 0.1 * altitude_factor
        direction = conditions.wind_direction
        wind_force = Vector3(
            direction.x * wind_scale,
            direction.y * wind_scale * 0.5,
            direction.z * wind_scale,
        )

        base = conditions.turbulence_intensity * altitude_factor
        t = self._elapsed
        turbulence = Vector3(
            math.sin(t * _TURBULENCE_X[0]) * base * _TURBULENCE_X[1],
            math.cos(t * _TURBULENCE_Y[0]) * base * _TURBULENCE_Y[1],
            math.sin(t * _TURBULENCE_Z[0]) * base * _TURBULENCE_Z[1],
        )

        density_factor = math.exp(-altitude / 8000.0)
        atmospheric_drag = 0.02 * density_factor * (1.0 + conditions.cloud_cover * 0.1)

        return WeatherEffects(wind_force, turbulence, atmospheric_drag)

    def get_conditions(self) -> WeatherConditions:
        """Get a copy of the current conditions."""
        return self._conditions.copy()

    def get_elapsed_time(self) -> float:
        """Total simulated time fed through ``effects``."""
        return self._elapsed

    def apply_preset(self, name: str) -> None:
        """Replace the conditions with a named preset.

        Args:
            name: One of ``PRESETS``.

        Raises:
            ValueError: If the preset is unknown.
        """
        try:
            factory = PRESETS[name]
        except KeyError:
            raise ValueError(
                f"Unknown weather preset '{name}' (known: {', '.join(PRESETS)})"
            ) from None
        self.update_conditions(factory())

    @staticmethod
    def calm() -> WeatherConditions:
        """Light wind, smooth air, good visibility."""
        return WeatherConditions(
            wind_speed_kts=5.0,
            wind_direction=Vector3(1.0, 0.0, 0.0),
            turbulence_intensity=0.1,
            visibility_mi=15.0,
            cloud_cover=0.2,
            temperature_c=20.0,
            pressure_hpa=1013.25,
        )

    @staticmethod
    def turbulent() -> WeatherConditions:
        """Moderate wind with noticeable turbulence."""
        return WeatherConditions(
            wind_speed_kts=25.0,
            wind_direction=Vector3(0.6, 0.1, 0.8),
            turbulence_intensity=0.6,
            visibility_mi=8.0,
            cloud_cover=0.7,
            temperature_c=12.0,
            pressure_hpa=1008.0,
        )

    @staticmethod
    def stormy() -> WeatherConditions:
        """Strong wind with a downdraft component, low visibility."""
        return WeatherConditions(
            wind_speed_kts=35.0,
            wind_direction=Vector3(0.8, -0.2, 0.6),
            turbulence_intensity=0.8,
            visibility_mi=3.0,
            cloud_cover=0.9,
            temperature_c=10.0,
            pressure_hpa=995.0,
        )


PRESETS: dict[str, Callable[[], WeatherConditions]] = {
    "calm": WeatherModel.calm,
    "turbulent": WeatherModel.turbulent,
    "stormy": WeatherModel.stormy,
}
