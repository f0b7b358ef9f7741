"""Weather data models.

Provides the atmospheric conditions the weather model holds and the
per-tick effects it hands to the flight dynamics integrator.
"""

from dataclasses import dataclass, field

from flightcore.physics.vectors import Vector3


@dataclass
class WeatherConditions:
    """Atmospheric conditions.

    Attributes:
        wind_speed_kts: Wind speed in knots.
        wind_direction: Direction the wind blows toward, unit length.
        turbulence_intensity: 0 (smooth) to 1 (severe).
        visibility_mi: Visibility in statute miles.
        cloud_cover: Sky coverage fraction, 0 to 1.
        temperature_c: Surface temperature in Celsius.
        pressure_hpa: Surface pressure in hectopascals.
    """

    wind_speed_kts: float = 15.0
    wind_direction: Vector3 = field(default_factory=lambda: Vector3(1.0, 0.0, 0.3))
    turbulence_intensity: float = 0.3
    visibility_mi: float = 10.0
    cloud_cover: float = 0.4
    temperature_c: float = 15.0
    pressure_hpa: float = 1013.25

    def copy(self) -> "WeatherConditions":
        """Return a copy that doesn't share the direction vector."""
        return WeatherConditions(
            wind_speed_kts=self.wind_speed_kts,
            wind_direction=self.wind_direction.copy(),
            turbulence_intensity=self.turbulence_intensity,
            visibility_mi=self.visibility_mi,
            cloud_cover=self.cloud_cover,
            temperature_c=self.temperature_c,
            pressure_hpa=self.pressure_hpa,
        )


@dataclass(frozen=True)
class WeatherEffects:
    """Weather contribution for one tick.

    Attributes:
        wind_force: Velocity change per second from steady wind.
        turbulence: Velocity change per second from turbulence.
        atmospheric_drag: Extra drag fraction added to the aerodynamic drag.
    """

    wind_force: Vector3
    turbulence: Vector3
    atmospheric_drag: float

    @classmethod
    def none(cls) -> "WeatherEffects":
        """Effects of a still atmosphere."""
        return cls(Vector3.zero(), Vector3.zero(), 0.0)
