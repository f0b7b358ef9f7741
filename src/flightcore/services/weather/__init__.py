"""Weather services: atmospheric conditions and their effect on flight."""

from flightcore.services.weather.models import WeatherConditions, WeatherEffects
from flightcore.services.weather.weather_model import PRESETS, WeatherModel

__all__ = ["PRESETS", "WeatherConditions", "WeatherEffects", "WeatherModel"]
