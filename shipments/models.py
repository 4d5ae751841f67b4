"""
Purpose: Domain models for the Shipments capability.
What it does:
- Defines core data structures:
- Quote (origin, destination, carrier mode, distance, eta)
- Shipment (tracking number, status, parties, eta, events, current location)
- ShipmentEvent (status change with location + timestamp)
- DashboardStats (aggregate counters for the dashboard)

Defines enums/constants:
- ShipmentStatus = QUOTE | PENDING | PICKED_UP | IN_TRANSIT | OUT_FOR_DELIVERY | DELIVERED | DELAYED

Rule: No ETA math, no HTTP calls. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional
import uuid

from eta.models import CarrierMode, ETAPrediction
from routing.models import Location
from routing.traffic_client import TrafficSummary


class ShipmentStatus(str, Enum):
    QUOTE = "quote"
    PENDING = "pending"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    DELAYED = "delayed"


@dataclass(frozen=True)
class Contact:
    name: str
    email: str


@dataclass(frozen=True)
class CurrentLocation:
    lat: float
    lng: float
    updated_at: datetime


@dataclass(frozen=True)
class ShipmentEvent:
    """
    One entry of a shipment timeline.
    """
    id: str
    status: ShipmentStatus
    location: str
    description: str
    timestamp: datetime


@dataclass(frozen=True)
class Quote:
    id: str
    origin: Location
    destination: Location
    carrier_mode: CarrierMode
    distance_miles: int
    base_duration_hours: float
    eta: ETAPrediction
    created_at: datetime
    traffic: Optional[TrafficSummary] = None  # live snapshot, display only

    @staticmethod # Factory method to stamp a new quote id
    def new(origin: Location, destination: Location, carrier_mode: CarrierMode,
            distance_miles: int, base_duration_hours: float, eta: ETAPrediction,
            created_at: datetime, traffic: Optional[TrafficSummary] = None) -> Quote:
        return Quote(
            id=f"quote-{uuid.uuid4().hex[:12]}",
            origin=origin,
            destination=destination,
            carrier_mode=carrier_mode,
            distance_miles=distance_miles,
            base_duration_hours=base_duration_hours,
            eta=eta,
            created_at=created_at,
            traffic=traffic,
        )


@dataclass
class Shipment:
    """
    A booked shipment. Mutable: status, events and position change while it travels.
    The eta is the prediction made at booking time and is display-only.
    """
    id: str
    tracking_number: str
    status: ShipmentStatus
    origin: Location
    destination: Location
    carrier_mode: CarrierMode
    sender: Contact
    receiver: Contact
    eta: ETAPrediction

    distance_miles: int = 0
    current_location: Optional[CurrentLocation] = None
    events: List[ShipmentEvent] = field(default_factory=list)

    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def latest_event(self) -> Optional[ShipmentEvent]:
        return self.events[-1] if self.events else None


@dataclass(frozen=True)
class DashboardStats:
    total_shipments: int
    in_transit: int
    delivered: int
    delayed: int
    average_delivery_time: float  # hours
    on_time_rate: float  # percent
