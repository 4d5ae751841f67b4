"""
Purpose: In-memory shipment registry (no persistence).
What it does:
- Owns the shipments created in this process:
   - create_shipment(origin, destination, carrier, sender, receiver)
   - find / get by id or tracking number
   - list_shipments (newest first)
   - advance(shipment, status)
   - stats() for the dashboard

Rule: Store owns records and lookups, shipments.state owns status rules,
quotes owns ETA inputs.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Union

from eta.models import CarrierMode
from eta.policy import ETAPolicy
from routing.models import Location
from routing.weather_client import WeatherClient

from .models import Contact, DashboardStats, Shipment, ShipmentStatus
from .quotes import build_quote
from .state import build_event, transition_shipment

logger = logging.getLogger(__name__)

TRACKING_PREFIX = "FRT"
TRACKING_DIGITS = 10


class ShipmentNotFound(KeyError):
    """Raised when no shipment matches an id or tracking number."""
    pass


def generate_tracking_number(rng: random.Random) -> str:
    digits = "".join(str(rng.randint(0, 9)) for _ in range(TRACKING_DIGITS))
    return f"{TRACKING_PREFIX}{digits}"


@dataclass
class ShipmentStore:
    """
    In-memory shipment lifecycle manager.

    Lookups accept either the internal id ("ship-...") or the public
    tracking number ("FRT...").
    """
    rng: random.Random = field(default_factory=random.Random)

    _shipments: Dict[str, Shipment] = field(default_factory=dict)  # by id
    _by_tracking: Dict[str, str] = field(default_factory=dict)  # tracking number -> id

    # --- Public API ---

    def add(self, shipment: Shipment) -> Shipment:
        """
        Register an already-built shipment (seeding, imports).
        """
        if shipment.id in self._shipments:
            #idempotency : dont double insert
            return self._shipments[shipment.id]
        self._shipments[shipment.id] = shipment
        self._by_tracking[shipment.tracking_number] = shipment.id
        return shipment

    def new_tracking_number(self) -> str:
        while True:
            tracking_number = generate_tracking_number(self.rng)
            if tracking_number not in self._by_tracking:
                return tracking_number

    def create_shipment(
        self,
        origin: Location,
        destination: Location,
        carrier_mode: Union[CarrierMode, str],
        sender: Contact,
        receiver: Contact,
        *,
        now: Optional[datetime] = None,
        weather_client: Optional[WeatherClient] = None,
        policy: Optional[ETAPolicy] = None,
    ) -> Shipment:
        """
        Book a shipment departing `now`: quote it, stamp a tracking number and
        open the timeline with a "Shipment confirmed" event.
        """
        now = now or datetime.now()
        quote = build_quote(
            origin,
            destination,
            carrier_mode,
            departure_time=now,
            weather_client=weather_client,
            rng=self.rng,
            policy=policy,
        )

        shipment = Shipment(
            id=f"ship-{int(now.timestamp() * 1000)}-{len(self._shipments)}",
            tracking_number=self.new_tracking_number(),
            status=ShipmentStatus.PENDING,
            origin=origin,
            destination=destination,
            carrier_mode=quote.carrier_mode,
            sender=sender,
            receiver=receiver,
            eta=quote.eta,
            distance_miles=quote.distance_miles,
            events=[build_event(ShipmentStatus.PENDING, origin.city, destination.city, now)],
            created_at=now,
            updated_at=now,
        )
        self.add(shipment)
        logger.info(f"Created shipment {shipment.id} ({shipment.tracking_number})")
        return shipment

    def find(self, key: str) -> Optional[Shipment]:
        if key in self._shipments:
            return self._shipments[key]
        shipment_id = self._by_tracking.get(key)
        return self._shipments.get(shipment_id) if shipment_id else None

    def get(self, key: str) -> Shipment:
        shipment = self.find(key)
        if shipment is None:
            raise ShipmentNotFound(key)
        return shipment

    def list_shipments(self, status: Optional[ShipmentStatus] = None) -> List[Shipment]:
        shipments = [s for s in self._shipments.values() if status is None or s.status is status]
        return sorted(shipments, key=lambda s: s.created_at, reverse=True)

    def advance(
        self,
        key: str,
        status: ShipmentStatus,
        *,
        now: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> Shipment:
        shipment = self.get(key)
        transition_shipment(shipment, status, now=now, description=description)
        logger.info(f"Shipment {shipment.id} -> {status.value}")
        return shipment

    def stats(self) -> DashboardStats:
        """
        Dashboard counters over everything in the store.

        average_delivery_time: mean predicted hours of delivered shipments
        on_time_rate: delivered / (delivered + delayed) as a percentage
        """
        shipments = list(self._shipments.values())
        delivered = [s for s in shipments if s.status is ShipmentStatus.DELIVERED]
        delayed = [s for s in shipments if s.status is ShipmentStatus.DELAYED]
        in_transit = [s for s in shipments if s.status is ShipmentStatus.IN_TRANSIT]

        average = (
            round(sum(s.eta.duration_hours for s in delivered) / len(delivered), 1)
            if delivered else 0.0
        )
        finished = len(delivered) + len(delayed)
        on_time = round(len(delivered) / finished * 100, 1) if finished else 0.0

        return DashboardStats(
            total_shipments=len(shipments),
            in_transit=len(in_transit),
            delivered=len(delivered),
            delayed=len(delayed),
            average_delivery_time=average,
            on_time_rate=on_time,
        )

    def __len__(self) -> int:
        return len(self._shipments)
