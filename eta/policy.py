"""
Purpose: Central configuration for ETA prediction (single source of truth).
What it does:

Stores all tunable tables and thresholds:

CARRIER PROFILES (multiplier / base risk / delay probability)
  ltl 1.35 medium 0.25, tl-dry 1.0 low 0.08,
  flatbed 1.15 medium 0.15, refrigerated 1.2 medium 0.18

TRAFFIC BANDS = 7-9h 1.25, 16-19h 1.35, 22h-5h 0.85, else 1.0

DAY FACTORS = Sunday 0.9, Friday 1.15, Saturday 0.95, else 1.0

WEATHER MULTIPLIERS per condition/severity (worst case wins)

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from .models import CarrierMode, CarrierProfile, RiskLevel, Severity, WeatherKind


def _default_carrier_profiles() -> Dict[CarrierMode, CarrierProfile]:
    return {
        CarrierMode.LTL: CarrierProfile(
            multiplier=1.35,
            base_risk=RiskLevel.MEDIUM,
            delay_probability=0.25,
            description="LTL shipments involve multiple stops, increasing transit variability",
        ),
        CarrierMode.TL_DRY: CarrierProfile(
            multiplier=1.0,
            base_risk=RiskLevel.LOW,
            delay_probability=0.08,
            description="Direct truckload provides fastest, most predictable transit",
        ),
        CarrierMode.FLATBED: CarrierProfile(
            multiplier=1.15,
            base_risk=RiskLevel.MEDIUM,
            delay_probability=0.15,
            description="Flatbed loads may require route adjustments for clearance",
        ),
        CarrierMode.REFRIGERATED: CarrierProfile(
            multiplier=1.2,
            base_risk=RiskLevel.MEDIUM,
            delay_probability=0.18,
            description="Temperature-controlled loads follow stricter scheduling",
        ),
    }


def _default_weather_multipliers() -> Dict[WeatherKind, Dict[Severity, float]]:
    return {
        WeatherKind.CLEAR: {Severity.LIGHT: 1.0, Severity.MODERATE: 1.0, Severity.SEVERE: 1.0},
        WeatherKind.SNOW: {Severity.LIGHT: 1.15, Severity.MODERATE: 1.3, Severity.SEVERE: 1.5},
        WeatherKind.RAIN: {Severity.LIGHT: 1.05, Severity.MODERATE: 1.15, Severity.SEVERE: 1.25},
        # Moderate wind and moderate fog have no agreed business value yet.
        # Both take the severe tier until product confirms (light would be 1.1 / 1.05).
        # Simulated wind is always moderate, so this tier drives every wind delay.
        WeatherKind.WIND: {Severity.LIGHT: 1.1, Severity.MODERATE: 1.2, Severity.SEVERE: 1.2},
        WeatherKind.FOG: {Severity.LIGHT: 1.05, Severity.MODERATE: 1.15, Severity.SEVERE: 1.15},
    }


@dataclass(frozen=True)
class ETAPolicy:
    """
    Central configuration for ETA prediction.

    Notes:
    - every factor is a rate applied to the BASE duration, then turned into
      an hour delta: adjustment = (factor - 1) * base_hours
    - day keys use Sunday=0 .. Saturday=6
    """

    # --- Carrier modes ---
    carrier_profiles: Dict[CarrierMode, CarrierProfile] = field(default_factory=_default_carrier_profiles)

    # --- Time-of-day congestion (inclusive hour ranges) ---
    morning_rush_hours: Tuple[int, int] = (7, 9)
    morning_rush_factor: float = 1.25
    evening_rush_hours: Tuple[int, int] = (16, 19)
    evening_rush_factor: float = 1.35
    # overnight wraps midnight: hour >= start or hour < end
    overnight_start_hour: int = 22
    overnight_end_hour: int = 5
    overnight_factor: float = 0.85

    # --- Day of week ---
    day_factors: Dict[int, float] = field(default_factory=lambda: {0: 0.9, 5: 1.15, 6: 0.95})

    # --- Weather ---
    weather_multipliers: Dict[WeatherKind, Dict[Severity, float]] = field(
        default_factory=_default_weather_multipliers
    )

    # Simulated weather feed (stand-in for a live forecast).
    snow_months: Tuple[int, ...] = (11, 12, 1, 2, 3)
    snow_latitude_threshold: float = 40.0
    snow_moderate_probability: float = 0.6
    rain_probability: float = 0.30
    rain_moderate_probability: float = 0.5
    wind_probability: float = 0.15

    # --- Aggregation ---
    # variance_hours = total * delay_probability * variance_scale
    variance_scale: float = 0.5

    # Floor on the total as a fraction of base. Unreachable with the default
    # tables (worst discount stack is 0.75x); guards custom policies.
    min_duration_ratio: float = 0.5

    # --- Risk classification ---
    high_risk_negative_count: int = 3
    high_risk_negative_hours: float = 4.0
    medium_risk_negative_count: int = 2
    medium_risk_negative_hours: float = 2.0

    # --- Narrative ---
    explanation_threshold_hours: float = 0.5
    weather_delay_threshold_hours: float = 1.0
    max_recommendations: int = 3

    def profile(self, mode: CarrierMode) -> CarrierProfile:
        return self.carrier_profiles[mode]

    def validate(self) -> None:
        """
        Basic sanity checks. Call once at startup if you want.
        """
        for mode in CarrierMode:
            if mode not in self.carrier_profiles:
                raise ValueError(f"missing carrier profile for {mode.value}")
            profile = self.carrier_profiles[mode]
            if profile.multiplier <= 0:
                raise ValueError(f"carrier multiplier for {mode.value} must be > 0")
            if not 0.0 <= profile.delay_probability <= 1.0:
                raise ValueError(f"delay_probability for {mode.value} must be in [0, 1]")

        for kind in WeatherKind:
            table = self.weather_multipliers.get(kind)
            if table is None:
                raise ValueError(f"missing weather multipliers for {kind.value}")
            for severity in Severity:
                if table.get(severity, 0) <= 0:
                    raise ValueError(f"weather multiplier {kind.value}/{severity.value} must be > 0")

        for factor in (self.morning_rush_factor, self.evening_rush_factor, self.overnight_factor):
            if factor <= 0:
                raise ValueError("traffic factors must be > 0")

        for day, factor in self.day_factors.items():
            if not 0 <= day <= 6:
                raise ValueError("day_factors keys must be 0 (Sunday) .. 6 (Saturday)")
            if factor <= 0:
                raise ValueError("day factors must be > 0")

        for p in (
            self.snow_moderate_probability,
            self.rain_probability,
            self.rain_moderate_probability,
            self.wind_probability,
        ):
            if not 0.0 <= p <= 1.0:
                raise ValueError("simulation probabilities must be in [0, 1]")

        if self.variance_scale < 0:
            raise ValueError("variance_scale must be >= 0")

        if not 0.0 <= self.min_duration_ratio <= 1.0:
            raise ValueError("min_duration_ratio must be in [0, 1]")

        if self.max_recommendations < 1:
            raise ValueError("max_recommendations must be >= 1")


def default_eta_policy() -> ETAPolicy:
    """
    Convenience factory for the default policy.
    """
    p = ETAPolicy()
    p.validate()
    return p
