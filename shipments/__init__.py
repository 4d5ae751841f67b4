"""
Shipments domain package.

Public API:
- Domain models: Quote, Shipment, ShipmentEvent, ShipmentStatus, Contact, DashboardStats
- Quoting: build_quote, compare_carriers, predict_eta
- Registry: ShipmentStore
"""
from .models import Contact, DashboardStats, Quote, Shipment, ShipmentEvent, ShipmentStatus
from .quotes import build_quote, compare_carriers, predict_eta
from .state import ShipmentStateException, transition_shipment
from .store import ShipmentNotFound, ShipmentStore

__all__ = [
    "Contact",
    "DashboardStats",
    "Quote",
    "Shipment",
    "ShipmentEvent",
    "ShipmentStatus",
    "build_quote",
    "compare_carriers",
    "predict_eta",
    "ShipmentStateException",
    "transition_shipment",
    "ShipmentNotFound",
    "ShipmentStore",
]
