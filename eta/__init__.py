"""
Purpose: Package entry + stable exports.
What it does:

Marks eta as a Python package and re-exports the public API so other modules can do:

from eta import calculate_eta, CarrierMode, ETAPrediction

Should not contain business logic.
"""
from .errors import ETAError, InvalidInput, InvalidCarrierMode
from .models import (
    CarrierMode,
    CarrierProfile,
    ConfidenceWindow,
    ETAFactor,
    ETAPrediction,
    FactorImpact,
    RiskLevel,
    Severity,
    WeatherCondition,
    WeatherKind,
)
from .policy import ETAPolicy, default_eta_policy
from .predictor import calculate_eta, classify_risk
from .weather import simulate_weather, weather_impact

__all__ = [
    "ETAError",
    "InvalidInput",
    "InvalidCarrierMode",
    "CarrierMode",
    "CarrierProfile",
    "ConfidenceWindow",
    "ETAFactor",
    "ETAPrediction",
    "FactorImpact",
    "RiskLevel",
    "Severity",
    "WeatherCondition",
    "WeatherKind",
    "ETAPolicy",
    "default_eta_policy",
    "calculate_eta",
    "classify_risk",
    "simulate_weather",
    "weather_impact",
]
