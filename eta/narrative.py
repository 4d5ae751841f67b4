"""
Purpose: Human-readable output of a prediction ("Why this ETA?").
What it does:
- build_explanation: one paragraph summarizing weather + significant delays
- build_recommendations: up to N ordered suggestions, risk-tier first

Display only. Nothing here feeds back into the ETA math.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .models import CarrierMode, ETAFactor, RiskLevel, WeatherCondition
from .policy import ETAPolicy, default_eta_policy

LTL_HISTORY_SENTENCE = (
    "LTL shipments on this route historically experience ~20% delays under similar conditions."
)
OPTIMAL_CONDITIONS_SENTENCE = "Optimal conditions expected. No significant delays anticipated."

UPGRADE_FROM_LTL = "Consider upgrading to TL Dry for time-sensitive cargo"
OFF_PEAK_PICKUP = "Schedule pickup during off-peak hours if possible"
ENABLE_TRACKING = "Enable real-time tracking notifications for immediate updates"
MONITOR_WEATHER = "Monitor weather conditions along the route"
TL_DRY_AVAILABLE = "TL Dry option available for faster transit"
DELAY_PICKUP = "Consider delaying pickup by 24-48 hours for improved conditions"
SHIFT_PICKUP_TIME = "Early morning or late evening pickup recommended"
FAVORABLE = "Current conditions are favorable for on-time delivery"


def _find_factor(factors: Sequence[ETAFactor], name: str) -> Optional[ETAFactor]:
    for factor in factors:
        if factor.name == name:
            return factor
    return None


def build_explanation(
    factors: Sequence[ETAFactor],
    carrier_mode: CarrierMode,
    weather_conditions: Sequence[WeatherCondition],
    policy: ETAPolicy = None,
) -> str:
    policy = policy or default_eta_policy()
    parts: List[str] = []

    if weather_conditions:
        advisories = ", ".join(condition.describe() for condition in weather_conditions)
        parts.append(f"Weather advisory: {advisories}.")

    significant = [
        factor for factor in factors
        if factor.is_negative and factor.adjustment_hours > policy.explanation_threshold_hours
    ]
    if significant:
        parts.append(". ".join(factor.description for factor in significant) + ".")

    if carrier_mode is CarrierMode.LTL:
        parts.append(LTL_HISTORY_SENTENCE)

    if not parts:
        parts.append(OPTIMAL_CONDITIONS_SENTENCE)

    return " ".join(parts)


def build_recommendations(
    factors: Sequence[ETAFactor],
    carrier_mode: CarrierMode,
    risk_level: RiskLevel,
    policy: ETAPolicy = None,
) -> List[str]:
    """
    Ordered suggestions, truncated to policy.max_recommendations.

    Priority:
      1) risk-tier suggestions (high / medium)
      2) weather delay > threshold -> delay pickup
      3) negative traffic -> shift pickup time
      4) nothing applied -> favorable message
    """
    policy = policy or default_eta_policy()
    recommendations: List[str] = []

    if risk_level is RiskLevel.HIGH:
        if carrier_mode is CarrierMode.LTL:
            recommendations.append(UPGRADE_FROM_LTL)
        recommendations.append(OFF_PEAK_PICKUP)
        recommendations.append(ENABLE_TRACKING)
    elif risk_level is RiskLevel.MEDIUM:
        recommendations.append(MONITOR_WEATHER)
        if carrier_mode is not CarrierMode.TL_DRY:
            recommendations.append(TL_DRY_AVAILABLE)

    weather = _find_factor(factors, "Weather")
    if weather is not None and weather.is_negative and weather.adjustment_hours > policy.weather_delay_threshold_hours:
        recommendations.append(DELAY_PICKUP)

    traffic = _find_factor(factors, "Traffic Conditions")
    if traffic is not None and traffic.is_negative:
        recommendations.append(SHIFT_PICKUP_TIME)

    if not recommendations:
        recommendations.append(FAVORABLE)

    return recommendations[: policy.max_recommendations]
