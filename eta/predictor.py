"""
Purpose: ETA estimation policy.
Converts a base transit duration into an explainable ETA prediction used by:
- the quote screen ("arrives Thursday 14:00, +/- 3h")
- the carrier comparison view
- the "Why this ETA?" breakdown

Every factor is a rate applied to the BASE duration and expressed as an
additive hour delta. Deltas are summed onto the base, so factor order never
changes the total.
"""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime, timedelta
from numbers import Real
from typing import List, Optional, Sequence, Tuple, Union

from .errors import InvalidInput
from .models import (
    CarrierMode,
    ConfidenceWindow,
    ETAFactor,
    ETAPrediction,
    FactorImpact,
    RiskLevel,
    WeatherCondition,
)
from .narrative import build_explanation, build_recommendations
from .policy import ETAPolicy, default_eta_policy
from .weather import simulate_weather, weather_impact

logger = logging.getLogger(__name__)

CARRIER_FACTOR = "Carrier Mode"
TRAFFIC_FACTOR = "Traffic Conditions"
DAY_FACTOR = "Day of Week"
WEATHER_FACTOR = "Weather"

FACTOR_NAMES = (CARRIER_FACTOR, TRAFFIC_FACTOR, DAY_FACTOR, WEATHER_FACTOR)

_DAY_DESCRIPTIONS = {
    0: "Sunday - reduced commercial traffic",
    5: "Friday - increased end-of-week freight volume",
    6: "Saturday - moderate traffic",
}


def _require_finite(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInput(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidInput(f"{name} must be finite, got {value!r}")
    return float(value)


def _impact_of(adjustment: float) -> FactorImpact:
    if adjustment > 0:
        return FactorImpact.NEGATIVE
    if adjustment < 0:
        return FactorImpact.POSITIVE
    return FactorImpact.NEUTRAL


def time_of_day_congestion(hour: int, policy: ETAPolicy = None) -> Tuple[float, str]:
    policy = policy or default_eta_policy()

    start, end = policy.morning_rush_hours
    if start <= hour <= end:
        return policy.morning_rush_factor, "Morning rush hour traffic expected"

    start, end = policy.evening_rush_hours
    if start <= hour <= end:
        return policy.evening_rush_factor, "Evening rush hour delays likely"

    if hour >= policy.overnight_start_hour or hour < policy.overnight_end_hour:
        return policy.overnight_factor, "Light overnight traffic conditions"

    return 1.0, "Normal traffic conditions"


def day_of_week_factor(day: int, policy: ETAPolicy = None) -> Tuple[float, str]:
    """
    day uses Sunday=0 .. Saturday=6.
    """
    policy = policy or default_eta_policy()
    factor = policy.day_factors.get(day, 1.0)
    return factor, _DAY_DESCRIPTIONS.get(day, "Standard weekday operations")


def sunday_based_weekday(moment: datetime) -> int:
    # isoweekday: Monday=1 .. Sunday=7
    return moment.isoweekday() % 7


def classify_risk(
    factors: Sequence[ETAFactor],
    base_risk: RiskLevel,
    has_weather: bool,
    policy: ETAPolicy = None,
) -> RiskLevel:
    """
    First match wins:
      high   -> many negative factors, large negative total, or weather on a risky carrier
      medium -> a couple of negative factors, moderate negative total, or any weather
      else   -> the carrier's own base risk
    """
    policy = policy or default_eta_policy()

    negative = [factor for factor in factors if factor.is_negative]
    negative_count = len(negative)
    negative_hours = sum(factor.adjustment_hours for factor in negative)

    if (
        negative_count >= policy.high_risk_negative_count
        or negative_hours > policy.high_risk_negative_hours
        or (has_weather and base_risk is not RiskLevel.LOW)
    ):
        return RiskLevel.HIGH

    if (
        negative_count >= policy.medium_risk_negative_count
        or negative_hours > policy.medium_risk_negative_hours
        or has_weather
    ):
        return RiskLevel.MEDIUM

    return base_risk


def calculate_eta(
    base_duration_hours: float,
    carrier_mode: Union[CarrierMode, str],
    origin_lat: float,
    dest_lat: float,
    departure_time: datetime,
    *,
    weather_conditions: Optional[Sequence[WeatherCondition]] = None,
    rng: Optional[random.Random] = None,
    policy: Optional[ETAPolicy] = None,
) -> ETAPrediction:
    """
    Predict arrival for a shipment.

    Args:
        base_duration_hours: naive transit time (see routing.distance.estimate_base_duration)
        carrier_mode: CarrierMode or its tag ("ltl", "tl-dry", "flatbed", "refrigerated")
        origin_lat / dest_lat: route latitudes (drive the seasonal snow simulation)
        departure_time: explicit departure; hour, weekday and month are read from it
        weather_conditions: conditions from a live feed or a test. When None,
            conditions are simulated with rng.
        rng: random source for the simulation. Required when weather_conditions is None.
        policy: tunables (defaults to default_eta_policy())

    Returns:
        ETAPrediction with exactly four factors.

    Raises:
        InvalidCarrierMode: unknown carrier tag
        InvalidInput: non-finite numbers, negative base duration, bad departure_time
    """
    policy = policy or default_eta_policy()

    mode = CarrierMode.parse(carrier_mode)
    base = _require_finite("base_duration_hours", base_duration_hours)
    if base < 0:
        raise InvalidInput(f"base_duration_hours must be >= 0, got {base}")
    origin_lat = _require_finite("origin_lat", origin_lat)
    dest_lat = _require_finite("dest_lat", dest_lat)
    if not isinstance(departure_time, datetime):
        raise InvalidInput(f"departure_time must be a datetime, got {departure_time!r}")

    if weather_conditions is None:
        if rng is None:
            raise InvalidInput("either weather_conditions or rng must be provided")
        weather_conditions = simulate_weather(origin_lat, dest_lat, departure_time.month, rng, policy)
    weather_conditions = tuple(weather_conditions)

    profile = policy.profile(mode)
    factors: List[ETAFactor] = []

    # 1. Carrier mode. An exactly-zero adjustment (tl-dry) counts as positive.
    carrier_adjustment = (profile.multiplier - 1) * base
    factors.append(
        ETAFactor(
            name=CARRIER_FACTOR,
            impact=FactorImpact.NEGATIVE if carrier_adjustment > 0 else FactorImpact.POSITIVE,
            description=profile.description,
            adjustment_hours=carrier_adjustment,
        )
    )

    # 2. Time-of-day congestion
    traffic_rate, traffic_text = time_of_day_congestion(departure_time.hour, policy)
    traffic_adjustment = (traffic_rate - 1) * base
    factors.append(
        ETAFactor(TRAFFIC_FACTOR, _impact_of(traffic_adjustment), traffic_text, traffic_adjustment)
    )

    # 3. Day of week
    day_rate, day_text = day_of_week_factor(sunday_based_weekday(departure_time), policy)
    day_adjustment = (day_rate - 1) * base
    factors.append(ETAFactor(DAY_FACTOR, _impact_of(day_adjustment), day_text, day_adjustment))

    # 4. Weather (worst condition wins)
    weather_rate, weather_text = weather_impact(weather_conditions, policy)
    weather_adjustment = (weather_rate - 1) * base
    factors.append(
        ETAFactor(
            name=WEATHER_FACTOR,
            impact=FactorImpact.NEGATIVE if weather_adjustment > 0 else FactorImpact.POSITIVE,
            description=weather_text,
            adjustment_hours=weather_adjustment,
        )
    )

    total = base + sum(factor.adjustment_hours for factor in factors)
    total = max(total, base * policy.min_duration_ratio)

    variance_hours = total * profile.delay_probability * policy.variance_scale
    try:
        estimated_arrival = departure_time + timedelta(hours=total)
        window = ConfidenceWindow(
            earliest=estimated_arrival - timedelta(hours=variance_hours),
            latest=estimated_arrival + timedelta(hours=variance_hours),
        )
    except OverflowError as e:
        raise InvalidInput(f"base_duration_hours too large for a calendar date: {base}") from e

    risk = classify_risk(factors, profile.base_risk, bool(weather_conditions), policy)
    explanation = build_explanation(factors, mode, weather_conditions, policy)
    recommendations = build_recommendations(factors, mode, risk, policy)

    logger.debug(
        "ETA %s base=%.2fh total=%.2fh risk=%s weather=%d",
        mode.value, base, total, risk.value, len(weather_conditions),
    )

    return ETAPrediction(
        estimated_arrival=estimated_arrival,
        duration_hours=round(total, 1),
        risk_level=risk,
        confidence_window=window,
        factors=tuple(factors),
        explanation=explanation,
        recommendations=tuple(recommendations),
        weather_conditions=weather_conditions,
    )
