"""
Purpose: Weather input for the ETA predictor.
What it does:
- simulate_weather: pseudo-random stand-in for a forecast feed along a route
  (seasonal snow on northern routes, random rain and wind events).
- weather_impact: maps a list of conditions to ONE multiplier (worst case wins,
  conditions never compound) plus a display description.

The random source is always injected so callers (and tests) control it.
A live feed can replace simulate_weather; weather_impact stays the same.
"""

from __future__ import annotations

import random
from typing import List, Sequence, Tuple

from .models import Severity, WeatherCondition, WeatherKind
from .policy import ETAPolicy, default_eta_policy

CLEAR_WEATHER_DESCRIPTION = "Clear weather conditions forecasted"


def simulate_weather(
    origin_lat: float,
    dest_lat: float,
    month: int,
    rng: random.Random,
    policy: ETAPolicy = None,
) -> List[WeatherCondition]:
    """
    Generate zero or more weather conditions for a route.

    Args:
        origin_lat / dest_lat: route endpoint latitudes
        month: calendar month 1..12 of the departure
        rng: random source (random.Random or anything with .random())
        policy: tunables (probabilities, snow months, latitude threshold)

    Returns:
        List[WeatherCondition], possibly empty.
    """
    policy = policy or default_eta_policy()
    conditions: List[WeatherCondition] = []

    # Winter months: snow on northern routes
    if month in policy.snow_months:
        threshold = policy.snow_latitude_threshold
        if origin_lat > threshold or dest_lat > threshold:
            severity = Severity.MODERATE if rng.random() < policy.snow_moderate_probability else Severity.LIGHT
            conditions.append(WeatherCondition(WeatherKind.SNOW, severity, "Midwest corridor"))

    if rng.random() < policy.rain_probability:
        severity = Severity.MODERATE if rng.random() < policy.rain_moderate_probability else Severity.LIGHT
        conditions.append(WeatherCondition(WeatherKind.RAIN, severity, "En route segments"))

    if rng.random() < policy.wind_probability:
        conditions.append(WeatherCondition(WeatherKind.WIND, Severity.MODERATE, "Plains region"))

    return conditions


def _describe(condition: WeatherCondition) -> str:
    kind = condition.condition
    if kind is WeatherKind.SNOW:
        return f"{condition.severity.value} snowfall expected in {condition.location}"
    if kind is WeatherKind.RAIN:
        return f"{condition.severity.value} rain forecasted along route"
    if kind is WeatherKind.WIND:
        return f"High wind advisory for {condition.location}"
    if kind is WeatherKind.FOG:
        return "Reduced visibility conditions expected"
    return ""


def weather_impact(
    conditions: Sequence[WeatherCondition],
    policy: ETAPolicy = None,
) -> Tuple[float, str]:
    """
    Returns (factor, description). factor is the max multiplier across all
    conditions and never below 1.0.
    """
    policy = policy or default_eta_policy()

    max_factor = 1.0
    descriptions: List[str] = []

    for condition in conditions:
        factor = policy.weather_multipliers[condition.condition][condition.severity]
        max_factor = max(max_factor, factor)

        text = _describe(condition)
        if text:
            descriptions.append(text)

    if not descriptions:
        return max_factor, CLEAR_WEATHER_DESCRIPTION

    return max_factor, ". ".join(descriptions)
