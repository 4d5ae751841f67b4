"""
Purpose: Shared geographic types for the routing package.
What it does:
Defines LatLng and Location, the normalized output of geocoding and the
input of every distance / traffic / weather lookup.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

# internal coordinate type: (lat, lng)
LatLng = Tuple[float, float]


@dataclass(frozen=True)
class Location:
    """
    A geocoded address. lat/lng are decimal degrees.
    """
    address: str
    city: str
    state: str
    zip: str
    lat: float
    lng: float
    country: str = ""
    id: str = ""

    @property
    def point(self) -> LatLng:
        return (self.lat, self.lng)

    def label(self) -> str:
        return f"{self.city}, {self.state}" if self.state else self.city

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
