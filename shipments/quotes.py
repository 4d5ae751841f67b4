"""
Purpose: Quote building (the outermost caller of the ETA core).
What it does:
- resolves the inputs the core refuses to guess: departure time (defaults to now)
  and weather (live feed when a WeatherClient is given, simulation otherwise)
- chains distance -> base duration -> calculate_eta
- attaches a live traffic snapshot when a TrafficClient is given
- builds one quote per carrier mode for the comparison view

Rule: live-feed failures never fail a quote. Weather degrades to simulation,
traffic to None.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Sequence, Union

from eta.models import CarrierMode, ETAPrediction, WeatherCondition
from eta.policy import ETAPolicy, default_eta_policy
from eta.predictor import calculate_eta
from eta.weather import simulate_weather
from routing.distance import calculate_distance, estimate_base_duration
from routing.models import Location
from routing.traffic_client import TrafficClient, TrafficError, TrafficSummary
from routing.weather_client import WeatherClient, WeatherError

from .models import Quote

logger = logging.getLogger(__name__)


def live_weather_conditions(
    weather_client: Optional[WeatherClient],
    origin: Location,
    destination: Location,
) -> Optional[List[WeatherCondition]]:
    """
    Conditions from the live feed, or None when no client is configured or the
    feed is unavailable (caller falls back to simulation).
    """
    if weather_client is None:
        return None
    try:
        return weather_client.route_weather(origin.point, destination.point).to_conditions()
    except WeatherError as e:
        logger.warning(f"Live weather unavailable, using simulated conditions: {e}")
        return None


def live_traffic_summary(
    traffic_client: Optional[TrafficClient],
    origin: Location,
    destination: Location,
) -> Optional[TrafficSummary]:
    if traffic_client is None:
        return None
    try:
        return traffic_client.route_traffic(origin.point, destination.point)
    except TrafficError as e:
        logger.warning(f"Live traffic unavailable: {e}")
        return None


def _resolve_weather(
    origin: Location,
    destination: Location,
    departure_time: datetime,
    weather_conditions: Optional[Sequence[WeatherCondition]],
    weather_client: Optional[WeatherClient],
    rng: Optional[random.Random],
    policy: ETAPolicy,
) -> List[WeatherCondition]:
    if weather_conditions is not None:
        return list(weather_conditions)

    live = live_weather_conditions(weather_client, origin, destination)
    if live is not None:
        return live

    return simulate_weather(origin.lat, destination.lat, departure_time.month, rng or random.Random(), policy)


def predict_eta(
    base_duration_hours: float,
    carrier_mode: Union[CarrierMode, str],
    origin: Location,
    destination: Location,
    *,
    departure_time: Optional[datetime] = None,
    weather_conditions: Optional[Sequence[WeatherCondition]] = None,
    weather_client: Optional[WeatherClient] = None,
    rng: Optional[random.Random] = None,
    policy: Optional[ETAPolicy] = None,
) -> ETAPrediction:
    """
    calculate_eta with wall-clock / live-feed defaults filled in.
    """
    policy = policy or default_eta_policy()
    departure_time = departure_time or datetime.now()

    conditions = _resolve_weather(
        origin, destination, departure_time, weather_conditions, weather_client, rng, policy
    )

    return calculate_eta(
        base_duration_hours,
        carrier_mode,
        origin.lat,
        destination.lat,
        departure_time,
        weather_conditions=conditions,
        policy=policy,
    )


def build_quote(
    origin: Location,
    destination: Location,
    carrier_mode: Union[CarrierMode, str],
    *,
    departure_time: Optional[datetime] = None,
    weather_conditions: Optional[Sequence[WeatherCondition]] = None,
    weather_client: Optional[WeatherClient] = None,
    traffic_client: Optional[TrafficClient] = None,
    rng: Optional[random.Random] = None,
    policy: Optional[ETAPolicy] = None,
) -> Quote:
    """
    Quote a lane for one carrier mode.
    """
    mode = CarrierMode.parse(carrier_mode)
    departure_time = departure_time or datetime.now()

    distance = calculate_distance(origin.lat, origin.lng, destination.lat, destination.lng)
    base_hours = estimate_base_duration(distance)

    eta = predict_eta(
        base_hours,
        mode,
        origin,
        destination,
        departure_time=departure_time,
        weather_conditions=weather_conditions,
        weather_client=weather_client,
        rng=rng,
        policy=policy,
    )

    logger.info(
        f"Quoted {origin.label()} -> {destination.label()} ({mode.value}): "
        f"{distance} mi, {eta.duration_hours}h, risk={eta.risk_level.value}"
    )
    traffic = live_traffic_summary(traffic_client, origin, destination)
    return Quote.new(origin, destination, mode, distance, base_hours, eta, departure_time, traffic)


def compare_carriers(
    origin: Location,
    destination: Location,
    *,
    departure_time: Optional[datetime] = None,
    weather_conditions: Optional[Sequence[WeatherCondition]] = None,
    weather_client: Optional[WeatherClient] = None,
    traffic_client: Optional[TrafficClient] = None,
    rng: Optional[random.Random] = None,
    policy: Optional[ETAPolicy] = None,
) -> List[Quote]:
    """
    One quote per carrier mode, all sharing the same departure, weather draw
    and traffic snapshot so the quotes differ by carrier only.
    """
    policy = policy or default_eta_policy()
    departure_time = departure_time or datetime.now()

    conditions = _resolve_weather(
        origin, destination, departure_time, weather_conditions, weather_client, rng, policy
    )

    traffic = live_traffic_summary(traffic_client, origin, destination)

    return [
        replace(
            build_quote(
                origin,
                destination,
                mode,
                departure_time=departure_time,
                weather_conditions=conditions,
                policy=policy,
            ),
            traffic=traffic,
        )
        for mode in CarrierMode
    ]
