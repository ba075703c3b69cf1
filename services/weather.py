# services/weather.py

"""
Thin OpenWeatherMap client used to pre-fill report weather fields.

Only observed readings are returned. When a reading cannot be obtained
(no API key, a date other than today, an HTTP failure) the caller gets
WeatherUnavailableError and must store the report without weather.
"""

import datetime as dt

import requests

from core.config import settings
from core.logging_config import logger
from models.enums import WeatherCondition


class WeatherUnavailableError(Exception):
    pass


def _map_conditions(main: str, description: str, snowfall_cm: float) -> str:
    main = (main or "").lower()
    description = (description or "").lower()

    if main == "snow":
        if "sleet" in description:
            return WeatherCondition.sleet.value
        if snowfall_cm >= 2.5 or "heavy" in description:
            return WeatherCondition.heavy_snow.value
        return WeatherCondition.light_snow.value

    if main in ("rain", "drizzle", "thunderstorm"):
        if "freezing" in description:
            return WeatherCondition.freezing_rain.value
        return WeatherCondition.rain.value

    return WeatherCondition.clear.value


def get_weather(lat: float, lon: float, date: dt.date) -> dict:
    """
    Returns:
        {temperature, conditions, precipitation, snowfall, wind_speed,
         trend, forecast_confidence, daytime_high, daytime_low, api_source}

    Raises:
        WeatherUnavailableError
    """
    if not settings.OPENWEATHER_API_KEY:
        raise WeatherUnavailableError("Weather API key not configured")

    if date != dt.datetime.now(dt.timezone.utc).date():
        raise WeatherUnavailableError("Observed weather is only available for today")

    try:
        response = requests.get(
            f"{settings.OPENWEATHER_BASE_URL}/weather",
            params={
                "lat": lat,
                "lon": lon,
                "units": "metric",
                "appid": settings.OPENWEATHER_API_KEY,
            },
            timeout=settings.WEATHER_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Weather lookup failed for ({lat}, {lon}): {e}")
        raise WeatherUnavailableError("Weather service unavailable") from e

    main = payload.get("main") or {}
    if "temp" not in main:
        raise WeatherUnavailableError("Weather response missing temperature")

    weather = (payload.get("weather") or [{}])[0]
    snow_mm = (payload.get("snow") or {}).get("1h", 0) or 0
    rain_mm = (payload.get("rain") or {}).get("1h", 0) or 0
    snowfall_cm = round(snow_mm / 10, 2)
    wind_ms = (payload.get("wind") or {}).get("speed")

    return {
        "temperature": main["temp"],
        "conditions": _map_conditions(weather.get("main"), weather.get("description"), snowfall_cm),
        "precipitation": rain_mm + snow_mm,
        "snowfall": snowfall_cm,
        "wind_speed": round(wind_ms * 3.6, 1) if wind_ms is not None else None,
        # A single observation carries no trend or forecast confidence
        "trend": None,
        "forecast_confidence": None,
        "daytime_high": main.get("temp_max"),
        "daytime_low": main.get("temp_min"),
        "api_source": "openweathermap",
    }
