from datetime import datetime
from typing import Dict, FrozenSet, Optional
import uuid

from .models import Shipment, ShipmentEvent, ShipmentStatus


class ShipmentStateException(Exception):
    """Raised when an invalid status transition is attempted."""
    pass


ALLOWED_TRANSITIONS: Dict[ShipmentStatus, FrozenSet[ShipmentStatus]] = {
    ShipmentStatus.QUOTE: frozenset({ShipmentStatus.PENDING}),
    ShipmentStatus.PENDING: frozenset({ShipmentStatus.PICKED_UP}),
    ShipmentStatus.PICKED_UP: frozenset({ShipmentStatus.IN_TRANSIT, ShipmentStatus.DELAYED}),
    ShipmentStatus.IN_TRANSIT: frozenset({ShipmentStatus.OUT_FOR_DELIVERY, ShipmentStatus.DELAYED}),
    ShipmentStatus.OUT_FOR_DELIVERY: frozenset({ShipmentStatus.DELIVERED, ShipmentStatus.DELAYED}),
    ShipmentStatus.DELAYED: frozenset({ShipmentStatus.IN_TRANSIT, ShipmentStatus.OUT_FOR_DELIVERY}),
    ShipmentStatus.DELIVERED: frozenset(),
}

EVENT_DESCRIPTIONS: Dict[ShipmentStatus, str] = {
    ShipmentStatus.QUOTE: "Quote requested",
    ShipmentStatus.PENDING: "Shipment confirmed",
    ShipmentStatus.PICKED_UP: "Package picked up from sender",
    ShipmentStatus.IN_TRANSIT: "In transit to destination",
    ShipmentStatus.OUT_FOR_DELIVERY: "Out for delivery",
    ShipmentStatus.DELIVERED: "Package delivered",
    ShipmentStatus.DELAYED: "Shipment delayed due to weather",
}


def event_location(status: ShipmentStatus, origin_city: str, destination_city: str) -> str:
    """
    Where a status event is reported: origin before pickup completes,
    destination once out for delivery, "En Route" in between.
    """
    if status in (ShipmentStatus.QUOTE, ShipmentStatus.PENDING, ShipmentStatus.PICKED_UP):
        return origin_city
    if status in (ShipmentStatus.OUT_FOR_DELIVERY, ShipmentStatus.DELIVERED):
        return destination_city
    return "En Route"


def build_event(
    status: ShipmentStatus,
    origin_city: str,
    destination_city: str,
    timestamp: datetime,
    description: Optional[str] = None,
) -> ShipmentEvent:
    return ShipmentEvent(
        id=f"evt-{uuid.uuid4().hex[:8]}",
        status=status,
        location=event_location(status, origin_city, destination_city),
        description=description or EVENT_DESCRIPTIONS[status],
        timestamp=timestamp,
    )


def can_transition(current: ShipmentStatus, target: ShipmentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def transition_shipment(
    shipment: Shipment,
    target: ShipmentStatus,
    *,
    now: Optional[datetime] = None,
    description: Optional[str] = None,
) -> Shipment:
    """
    Move a shipment to `target`, appending the matching timeline event.
    Delivered is terminal. Delayed can resume to in_transit / out_for_delivery.
    """
    if not can_transition(shipment.status, target):
        raise ShipmentStateException(
            f"Cannot transition shipment {shipment.id} from {shipment.status.value} to {target.value}"
        )

    now = now or datetime.now()
    shipment.events.append(
        build_event(target, shipment.origin.city, shipment.destination.city, now, description)
    )
    shipment.status = target
    shipment.updated_at = now

    # position is only tracked while the truck is moving
    if target in (ShipmentStatus.DELIVERED, ShipmentStatus.PENDING):
        shipment.current_location = None

    return shipment
