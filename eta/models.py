"""
Purpose: Domain models for the ETA capability.
What it does:
- Defines the enums the predictor works with:
  CarrierMode = ltl | tl-dry | flatbed | refrigerated
  RiskLevel = low < medium < high
  FactorImpact = positive | negative | neutral
- Defines the immutable value objects produced by one prediction:
  WeatherCondition, ETAFactor, ConfidenceWindow, ETAPrediction

Rule: No factor math here. Models only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Tuple, Union

from .errors import InvalidCarrierMode


class CarrierMode(str, Enum):
    LTL = "ltl"
    TL_DRY = "tl-dry"
    FLATBED = "flatbed"
    REFRIGERATED = "refrigerated"

    @classmethod
    def parse(cls, value: Union[str, "CarrierMode"]) -> "CarrierMode":
        """
        Accepts a CarrierMode or its string tag ("ltl", "tl-dry", ...).
        Anything else raises InvalidCarrierMode.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidCarrierMode(value) from None


class RiskLevel(str, Enum):
    """
    Ordered risk classification. Comparisons follow low < medium < high,
    not the alphabetical order of the string values.
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self.value]

    def __lt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank >= other.rank


_RISK_RANK = {"low": 0, "medium": 1, "high": 2}


class FactorImpact(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class WeatherKind(str, Enum):
    CLEAR = "clear"
    RAIN = "rain"
    SNOW = "snow"
    WIND = "wind"
    FOG = "fog"


class Severity(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    SEVERE = "severe"


@dataclass(frozen=True)
class CarrierProfile:
    """
    Static behaviour of a carrier mode. Looked up by CarrierMode, never mutated.
    """
    multiplier: float
    base_risk: RiskLevel
    delay_probability: float
    description: str


@dataclass(frozen=True)
class WeatherCondition:
    condition: WeatherKind
    severity: Severity
    location: str

    def describe(self) -> str:
        return f"{self.severity.value} {self.condition.value} in {self.location}"


@dataclass(frozen=True)
class ETAFactor:
    """
    One contributing factor of a prediction.
    adjustment_hours is signed: negative values shorten the trip.
    """
    name: str
    impact: FactorImpact
    description: str
    adjustment_hours: float

    @property
    def is_negative(self) -> bool:
        return self.impact is FactorImpact.NEGATIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "impact": self.impact.value,
            "description": self.description,
            "adjustment": self.adjustment_hours,
        }


@dataclass(frozen=True)
class ConfidenceWindow:
    earliest: datetime
    latest: datetime

    def contains(self, moment: datetime) -> bool:
        return self.earliest <= moment <= self.latest


@dataclass(frozen=True)
class ETAPrediction:
    """
    Output aggregate of calculate_eta. Built once, never mutated.

    factors always holds four entries, in order:
    Carrier Mode, Traffic Conditions, Day of Week, Weather.
    """
    estimated_arrival: datetime
    duration_hours: float
    risk_level: RiskLevel
    confidence_window: ConfidenceWindow
    factors: Tuple[ETAFactor, ...]
    explanation: str
    recommendations: Tuple[str, ...]

    # what fed the Weather factor (for the "Why this ETA?" view)
    weather_conditions: Tuple[WeatherCondition, ...] = field(default_factory=tuple)

    def factor(self, name: str) -> ETAFactor:
        for f in self.factors:
            if f.name == name:
                return f
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "estimatedArrival": self.estimated_arrival.isoformat(),
            "durationHours": self.duration_hours,
            "riskLevel": self.risk_level.value,
            "confidenceWindow": {
                "earliest": self.confidence_window.earliest.isoformat(),
                "latest": self.confidence_window.latest.isoformat(),
            },
            "factors": [f.to_dict() for f in self.factors],
            "explanation": self.explanation,
            "recommendations": list(self.recommendations),
        }
