#Purpose: The live weather "adapter/client" (OpenWeatherMap).
#Sole responsibility: fetch current weather at both ends of a lane and normalize it.
#Encapsulates OpenWeatherMap-specific details:
#condition-code mapping (2xx thunderstorm ... 8xx clear/clouds) to condition/severity
#unit handling (metric: celsius, m/s, visibility metres -> km)
#route-level impact summary (delay factor, risk, warnings) for display
#to_conditions() hands the data to the ETA core, which keeps its own multiplier table.

from dotenv import load_dotenv
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests

from eta.models import RiskLevel, Severity, WeatherCondition, WeatherKind
from routing.models import LatLng

# Example in .env:
# OPENWEATHER_API_KEY=xxxxx
load_dotenv()
OPENWEATHER_API_KEY = os.getenv("OPENWEATHER_API_KEY")
OPENWEATHER_BASE_URL = os.getenv("OPENWEATHER_BASE_URL", "https://api.openweathermap.org")

MS_TO_MPH = 2.237

# Route display table. Separate from eta.policy: this one describes the
# feed's own impact summary, not the ETA adjustment.
ROUTE_DELAY_FACTORS: Dict[WeatherKind, Dict[Severity, float]] = {
    WeatherKind.CLEAR: {Severity.LIGHT: 1.0, Severity.MODERATE: 1.0, Severity.SEVERE: 1.0},
    WeatherKind.RAIN: {Severity.LIGHT: 1.05, Severity.MODERATE: 1.15, Severity.SEVERE: 1.25},
    WeatherKind.SNOW: {Severity.LIGHT: 1.15, Severity.MODERATE: 1.25, Severity.SEVERE: 1.40},
    WeatherKind.WIND: {Severity.LIGHT: 1.03, Severity.MODERATE: 1.08, Severity.SEVERE: 1.15},
    WeatherKind.FOG: {Severity.LIGHT: 1.05, Severity.MODERATE: 1.12, Severity.SEVERE: 1.20},
}

logger = logging.getLogger(__name__)


class WeatherError(Exception):
    """Custom exception for weather client errors."""
    pass


@dataclass(frozen=True)
class PointWeather:
    condition: WeatherKind
    severity: Severity
    temperature_c: int
    wind_speed_ms: float
    visibility_km: float
    description: str
    icon: str


@dataclass(frozen=True)
class RouteWeatherImpact:
    delay_factor: float
    risk_level: RiskLevel
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RouteWeather:
    origin: PointWeather
    destination: PointWeather
    impact: RouteWeatherImpact

    def to_conditions(self) -> List[WeatherCondition]:
        """
        Endpoint weather as ETA conditions. Clear endpoints are dropped so a
        clear route yields an empty list (no weather factor).
        """
        conditions = []
        for label, point in (("origin", self.origin), ("destination", self.destination)):
            if point.condition is WeatherKind.CLEAR:
                continue
            conditions.append(WeatherCondition(point.condition, point.severity, label))
        return conditions


def map_weather_condition(weather_id: int, wind_speed: float) -> Tuple[WeatherKind, Severity]:
    """
    OpenWeatherMap condition code (+ wind speed in m/s) -> (condition, severity).
    """
    # Thunderstorm
    if 200 <= weather_id < 300:
        return WeatherKind.RAIN, Severity.SEVERE if weather_id >= 210 else Severity.MODERATE

    # Drizzle
    if 300 <= weather_id < 400:
        return WeatherKind.RAIN, Severity.LIGHT

    if 500 <= weather_id < 600:
        if weather_id >= 502:
            return WeatherKind.RAIN, Severity.SEVERE
        if weather_id >= 501:
            return WeatherKind.RAIN, Severity.MODERATE
        return WeatherKind.RAIN, Severity.LIGHT

    if 600 <= weather_id < 700:
        if weather_id >= 602 or weather_id == 622:
            return WeatherKind.SNOW, Severity.SEVERE
        if weather_id >= 601 or weather_id == 621:
            return WeatherKind.SNOW, Severity.MODERATE
        return WeatherKind.SNOW, Severity.LIGHT

    # Atmosphere: mist, fog, dust, tornado
    if 700 <= weather_id < 800:
        if weather_id == 781:
            return WeatherKind.WIND, Severity.SEVERE
        if weather_id == 741:
            return WeatherKind.FOG, Severity.MODERATE
        if weather_id in (751, 761):
            return WeatherKind.FOG, Severity.SEVERE
        return WeatherKind.FOG, Severity.LIGHT

    # Clear / clouds: decide on wind alone
    if wind_speed >= 20:
        return WeatherKind.WIND, Severity.SEVERE
    if wind_speed >= 13:
        return WeatherKind.WIND, Severity.MODERATE
    if wind_speed >= 9:
        return WeatherKind.WIND, Severity.LIGHT

    return WeatherKind.CLEAR, Severity.LIGHT


def parse_point_weather(data: Dict[str, Any]) -> PointWeather:
    weather = (data.get("weather") or [{}])[0]
    weather_id = weather.get("id") or 800
    wind_speed = (data.get("wind") or {}).get("speed") or 0
    condition, severity = map_weather_condition(weather_id, wind_speed)

    return PointWeather(
        condition=condition,
        severity=severity,
        temperature_c=int(round((data.get("main") or {}).get("temp") or 0)),
        wind_speed_ms=float(wind_speed),
        visibility_km=(data.get("visibility") or 10000) / 1000,
        description=weather.get("description") or "Unknown",
        icon=weather.get("icon") or "01d",
    )


def delay_factor(point: PointWeather) -> float:
    return ROUTE_DELAY_FACTORS[point.condition][point.severity]


def _warnings_for(point: PointWeather, where: str) -> List[str]:
    warnings = []

    if point.condition is WeatherKind.SNOW:
        if point.severity is Severity.SEVERE:
            warnings.append(f"Heavy snowfall at {where} - expect significant delays")
        elif point.severity is Severity.MODERATE:
            warnings.append(f"Moderate snow at {where} - roads may be slippery")

    if point.condition is WeatherKind.RAIN and point.severity is Severity.SEVERE:
        warnings.append(f"Heavy rain at {where} - reduced visibility expected")

    if point.condition is WeatherKind.FOG and point.severity is not Severity.LIGHT:
        density = "Dense" if point.severity is Severity.SEVERE else "Moderate"
        warnings.append(f"{density} fog at {where}")

    if point.condition is WeatherKind.WIND and point.severity is not Severity.LIGHT:
        warnings.append(f"High winds at {where} ({round(point.wind_speed_ms * MS_TO_MPH)} mph)")

    if point.temperature_c < 0:
        warnings.append(f"Freezing conditions at {where} - watch for ice")

    return warnings


def summarize_route(origin: PointWeather, destination: PointWeather) -> RouteWeatherImpact:
    """
    Worst endpoint wins. risk: >= 1.25 high, >= 1.10 medium, else low.
    """
    combined = max(delay_factor(origin), delay_factor(destination))

    if combined >= 1.25:
        risk = RiskLevel.HIGH
    elif combined >= 1.10:
        risk = RiskLevel.MEDIUM
    else:
        risk = RiskLevel.LOW

    warnings = _warnings_for(origin, "origin") + _warnings_for(destination, "destination")
    return RouteWeatherImpact(delay_factor=combined, risk_level=risk, warnings=warnings)


class WeatherClient:
    """
    Weather Adapter / Client

    Sole responsibility:
    - Talk to OpenWeatherMap via HTTP
    - Return normalized RouteWeather
    """
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, timeout: int = 5):
        self.api_key = api_key or OPENWEATHER_API_KEY
        self.base_url = (base_url or OPENWEATHER_BASE_URL).rstrip("/")
        self.timeout = timeout

        if not self.api_key:
            raise ValueError("OPENWEATHER_API_KEY not set. Please set it in the .env file.")

    def current_weather(self, point: LatLng) -> PointWeather:
        lat, lng = point
        logger.info(f"Fetching weather for coordinates: {lat}, {lng}")

        try:
            response = requests.get(
                f"{self.base_url}/data/2.5/weather",
                params={"lat": lat, "lon": lng, "appid": self.api_key, "units": "metric"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"OpenWeatherMap request failed: {e}")
            raise WeatherError(f"Weather request failed: {e}") from e

        if not response.ok:
            logger.error(f"OpenWeatherMap API error: {response.status_code} - {response.text}")
            raise WeatherError(f"Weather API error: {response.status_code}")

        try:
            return parse_point_weather(response.json())
        except ValueError as e:
            logger.error(f"OpenWeatherMap returned an unreadable body: {e}")
            raise WeatherError(f"Weather API returned invalid JSON: {e}") from e

    def route_weather(self, origin: LatLng, destination: LatLng) -> RouteWeather:
        origin_weather = self.current_weather(origin)
        destination_weather = self.current_weather(destination)
        impact = summarize_route(origin_weather, destination_weather)

        logger.info(f"Weather impact: factor={impact.delay_factor} risk={impact.risk_level.value}")
        return RouteWeather(origin=origin_weather, destination=destination_weather, impact=impact)
