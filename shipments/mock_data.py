"""
Purpose: Demo shipments for the dashboard and tracking views.
What it does:
Builds realistic-looking shipments over four fixed US lanes, cycling carrier
modes and statuses so every view has something to show. Runs the real
quote pipeline, so ETAs are genuine predictions.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import List, Optional

from eta.models import CarrierMode
from routing.models import Location

from .models import Contact, CurrentLocation, Shipment, ShipmentEvent, ShipmentStatus
from .quotes import build_quote
from .state import EVENT_DESCRIPTIONS, event_location
from .store import ShipmentStore

MOCK_ROUTES = [
    (
        Location("123 Main St", "Los Angeles", "CA", "90001", 34.0522, -118.2437),
        Location("456 Broadway", "New York", "NY", "10001", 40.7128, -74.0060),
    ),
    (
        Location("789 Oak Ave", "Chicago", "IL", "60601", 41.8781, -87.6298),
        Location("321 Pine St", "Miami", "FL", "33101", 25.7617, -80.1918),
    ),
    (
        Location("555 Market St", "Seattle", "WA", "98101", 47.6062, -122.3321),
        Location("222 Elm St", "Denver", "CO", "80202", 39.7392, -104.9903),
    ),
    (
        Location("100 Tech Blvd", "Houston", "TX", "77001", 29.7604, -95.3698),
        Location("200 Innovation Dr", "Atlanta", "GA", "30308", 33.7490, -84.3880),
    ),
]

CARRIER_ROTATION = list(CarrierMode)

STATUS_ROTATION = [
    ShipmentStatus.PENDING,
    ShipmentStatus.PICKED_UP,
    ShipmentStatus.IN_TRANSIT,
    ShipmentStatus.OUT_FOR_DELIVERY,
    ShipmentStatus.DELIVERED,
    ShipmentStatus.DELAYED,
]

DEMO_SENDER = Contact("John Smith", "john.smith@company.com")
DEMO_RECEIVER = Contact("Jane Doe", "jane.doe@business.com")

EVENT_SPACING_HOURS = 6


def timeline_for(status: ShipmentStatus) -> List[ShipmentStatus]:
    """
    Statuses a shipment has passed through to reach `status`.
    """
    timeline = [ShipmentStatus.PENDING]
    if status is ShipmentStatus.PENDING:
        return timeline
    timeline.append(ShipmentStatus.PICKED_UP)
    if status in (ShipmentStatus.IN_TRANSIT, ShipmentStatus.OUT_FOR_DELIVERY, ShipmentStatus.DELIVERED):
        timeline.append(ShipmentStatus.IN_TRANSIT)
    if status in (ShipmentStatus.OUT_FOR_DELIVERY, ShipmentStatus.DELIVERED):
        timeline.append(ShipmentStatus.OUT_FOR_DELIVERY)
    if status is ShipmentStatus.DELIVERED:
        timeline.append(ShipmentStatus.DELIVERED)
    if status is ShipmentStatus.DELAYED:
        timeline.append(ShipmentStatus.DELAYED)
    return timeline


def generate_mock_shipment(index: int, rng: random.Random, now: Optional[datetime] = None) -> Shipment:
    now = now or datetime.now()
    origin, destination = MOCK_ROUTES[index % len(MOCK_ROUTES)]
    carrier_mode = CARRIER_ROTATION[index % len(CARRIER_ROTATION)]
    status = STATUS_ROTATION[index % len(STATUS_ROTATION)]

    created_at = now - timedelta(days=index)
    quote = build_quote(origin, destination, carrier_mode, departure_time=created_at, rng=rng)

    timeline = timeline_for(status)
    # first event at creation, the rest at most 6 hours apart and never after now
    spacing = min(timedelta(hours=EVENT_SPACING_HOURS), (now - created_at) / len(timeline))

    events = []
    for i, step in enumerate(timeline):
        events.append(
            ShipmentEvent(
                id=f"evt-{index}-{i}",
                status=step,
                location=event_location(step, origin.city, destination.city),
                description=EVENT_DESCRIPTIONS[step],
                timestamp=created_at + spacing * i,
            )
        )

    current_location = None
    if status is ShipmentStatus.IN_TRANSIT:
        progress = 0.3 + rng.random() * 0.4
        current_location = CurrentLocation(
            lat=origin.lat + (destination.lat - origin.lat) * progress,
            lng=origin.lng + (destination.lng - origin.lng) * progress,
            updated_at=now,
        )

    return Shipment(
        id=f"ship-{index}",
        tracking_number="",
        status=status,
        origin=origin,
        destination=destination,
        carrier_mode=carrier_mode,
        sender=DEMO_SENDER,
        receiver=DEMO_RECEIVER,
        eta=quote.eta,
        distance_miles=quote.distance_miles,
        current_location=current_location,
        events=events,
        created_at=created_at,
        updated_at=now,
    )


def seed_store(store: ShipmentStore, count: int = 10, now: Optional[datetime] = None) -> List[Shipment]:
    """
    Fill `store` with `count` demo shipments (ids ship-0 .. ship-N).
    """
    seeded = []
    for index in range(count):
        shipment = generate_mock_shipment(index, store.rng, now)
        shipment.tracking_number = store.new_tracking_number()
        seeded.append(store.add(shipment))
    return seeded
