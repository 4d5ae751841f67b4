import random
from datetime import datetime, timedelta

import pytest
import requests

from eta.models import CarrierMode, RiskLevel, Severity, WeatherCondition, WeatherKind
from routing.distance import estimate_base_duration
from routing import weather_client
from routing.models import Location
from routing.traffic_client import TrafficClient, TrafficError, TrafficSummary
from routing.weather_client import WeatherClient, WeatherError
from shipments.mock_data import DEMO_RECEIVER, DEMO_SENDER, MOCK_ROUTES, seed_store
from shipments.models import ShipmentStatus
from shipments.quotes import build_quote, compare_carriers, predict_eta
from shipments.state import ShipmentStateException, can_transition
from shipments.store import ShipmentNotFound, ShipmentStore

LOS_ANGELES = Location("123 Main St", "Los Angeles", "CA", "90001", 34.0522, -118.2437)
NEW_YORK = Location("456 Broadway", "New York", "NY", "10001", 40.7128, -74.0060)

# Tuesday 10:00, June: no snow season, no congestion window
DEPARTURE = datetime(2025, 6, 10, 10, 0)
CLEAR = []


class BrokenWeatherClient:
    def route_weather(self, origin, destination):
        raise WeatherError("feed down")


class BrokenTrafficClient:
    def route_traffic(self, origin, destination):
        raise TrafficError("no data")


class StaticTrafficClient:
    def __init__(self, summary):
        self.summary = summary
        self.calls = 0

    def route_traffic(self, origin, destination):
        self.calls += 1
        return self.summary


class FixedWeather:
    def __init__(self, conditions):
        self.conditions = conditions

    def to_conditions(self):
        return list(self.conditions)


class StaticWeatherClient:
    def __init__(self, conditions):
        self.conditions = conditions
        self.calls = []

    def route_weather(self, origin, destination):
        self.calls.append((origin, destination))
        return FixedWeather(self.conditions)


@pytest.fixture
def store():
    return ShipmentStore(rng=random.Random(42))


def test_quote_chains_distance_into_eta():
    quote = build_quote(LOS_ANGELES, NEW_YORK, "tl-dry", departure_time=DEPARTURE, weather_conditions=CLEAR)

    # 1. cross-country lane
    assert 2400 < quote.distance_miles < 2500
    # 2. base duration follows the distance
    assert quote.base_duration_hours == estimate_base_duration(quote.distance_miles)
    # 3. neutral carrier, clear skies, mid-morning Tuesday: no adjustment
    assert quote.eta.duration_hours == round(quote.base_duration_hours, 1)
    assert quote.carrier_mode is CarrierMode.TL_DRY
    assert quote.id.startswith("quote-")
    assert quote.created_at == DEPARTURE


def test_compare_carriers_returns_one_quote_per_mode():
    quotes = compare_carriers(LOS_ANGELES, NEW_YORK, departure_time=DEPARTURE, weather_conditions=CLEAR)

    assert [q.carrier_mode for q in quotes] == list(CarrierMode)
    assert len({q.distance_miles for q in quotes}) == 1

    fastest = min(quotes, key=lambda q: q.eta.duration_hours)
    slowest = max(quotes, key=lambda q: q.eta.duration_hours)
    assert fastest.carrier_mode is CarrierMode.TL_DRY
    assert slowest.carrier_mode is CarrierMode.LTL


def test_compare_carriers_shares_one_weather_draw():
    quotes = compare_carriers(LOS_ANGELES, NEW_YORK, departure_time=DEPARTURE, rng=random.Random(3))

    draws = {q.eta.weather_conditions for q in quotes}
    assert len(draws) == 1


def test_live_weather_is_used_when_available():
    snow = [WeatherCondition(WeatherKind.SNOW, Severity.SEVERE, "destination")]
    client = StaticWeatherClient(snow)

    eta = predict_eta(40.0, "tl-dry", LOS_ANGELES, NEW_YORK, departure_time=DEPARTURE, weather_client=client)

    assert client.calls == [(LOS_ANGELES.point, NEW_YORK.point)]
    assert eta.weather_conditions == tuple(snow)
    assert eta.factor("Weather").adjustment_hours == 20.0


def test_live_weather_failure_falls_back_to_simulation():
    degraded = predict_eta(
        40.0, "flatbed", LOS_ANGELES, NEW_YORK,
        departure_time=DEPARTURE, weather_client=BrokenWeatherClient(), rng=random.Random(11),
    )
    simulated = predict_eta(
        40.0, "flatbed", LOS_ANGELES, NEW_YORK,
        departure_time=DEPARTURE, rng=random.Random(11),
    )

    assert degraded == simulated


def test_create_and_lookup_by_tracking_number(store):
    now = datetime(2025, 3, 4, 8, 0)

    shipment = store.create_shipment(
        LOS_ANGELES, NEW_YORK, CarrierMode.REFRIGERATED, DEMO_SENDER, DEMO_RECEIVER, now=now
    )

    assert shipment.status is ShipmentStatus.PENDING
    assert shipment.tracking_number.startswith("FRT")
    assert len(shipment.tracking_number) == 13
    assert shipment.tracking_number[3:].isdigit()
    assert shipment.latest_event().description == "Shipment confirmed"
    assert shipment.latest_event().location == "Los Angeles"

    assert store.get(shipment.tracking_number) is shipment
    assert store.get(shipment.id) is shipment
    assert len(store) == 1


def test_unknown_shipment_raises(store):
    assert store.find("FRT0000000000") is None

    with pytest.raises(ShipmentNotFound):
        store.get("FRT0000000000")


def test_lifecycle_to_delivered(store):
    now = datetime(2025, 6, 10, 8, 0)
    shipment = store.create_shipment(LOS_ANGELES, NEW_YORK, "ltl", DEMO_SENDER, DEMO_RECEIVER, now=now)

    path = [
        ShipmentStatus.PICKED_UP,
        ShipmentStatus.IN_TRANSIT,
        ShipmentStatus.DELAYED,
        ShipmentStatus.IN_TRANSIT,
        ShipmentStatus.OUT_FOR_DELIVERY,
        ShipmentStatus.DELIVERED,
    ]
    for step, status in enumerate(path, start=1):
        store.advance(shipment.tracking_number, status, now=now + timedelta(hours=step))

    assert shipment.status is ShipmentStatus.DELIVERED
    assert [e.status for e in shipment.events] == [ShipmentStatus.PENDING] + path
    assert shipment.events[3].location == "En Route"
    assert shipment.latest_event().location == "New York"
    assert shipment.updated_at == now + timedelta(hours=len(path))


def test_illegal_transition_raises(store):
    shipment = store.create_shipment(LOS_ANGELES, NEW_YORK, "ltl", DEMO_SENDER, DEMO_RECEIVER)

    with pytest.raises(ShipmentStateException):
        store.advance(shipment.id, ShipmentStatus.DELIVERED)

    # 1. nothing recorded on a rejected move
    assert shipment.status is ShipmentStatus.PENDING
    assert len(shipment.events) == 1
    # 2. delivered is terminal
    assert not can_transition(ShipmentStatus.DELIVERED, ShipmentStatus.IN_TRANSIT)


def test_seeded_store_dashboard(store):
    now = datetime(2025, 6, 10, 12, 0)

    seeded = seed_store(store, count=10, now=now)
    stats = store.stats()

    assert len(seeded) == 10
    assert stats.total_shipments == 10
    assert stats.delivered == 1
    assert stats.delayed == 1
    assert stats.in_transit == 2
    assert stats.on_time_rate == 50.0
    assert stats.average_delivery_time == seeded[4].eta.duration_hours

    # newest first
    listed = store.list_shipments()
    assert [s.id for s in listed[:3]] == ["ship-0", "ship-1", "ship-2"]
    assert len({s.tracking_number for s in listed}) == 10


def test_seeded_shipments_follow_mock_lanes(store):
    seeded = seed_store(store, count=4, now=datetime(2025, 1, 15, 9, 0))

    for index, shipment in enumerate(seeded):
        origin, destination = MOCK_ROUTES[index]
        assert shipment.origin == origin
        assert shipment.destination == destination
        assert shipment.eta.risk_level in set(RiskLevel)

    in_transit = seeded[2]
    assert in_transit.status is ShipmentStatus.IN_TRANSIT
    assert in_transit.current_location is not None
    assert min(in_transit.origin.lat, in_transit.destination.lat) <= in_transit.current_location.lat
    assert in_transit.current_location.lat <= max(in_transit.origin.lat, in_transit.destination.lat)


def test_empty_store_stats(store):
    stats = store.stats()

    assert stats.total_shipments == 0
    assert stats.on_time_rate == 0.0
    assert stats.average_delivery_time == 0.0


def test_traffic_snapshot_is_shared_across_carriers():
    summary = TrafficSummary(35, "yellow", "Moderate congestion", 12, 2, 1, False, 3)
    client = StaticTrafficClient(summary)

    quotes = compare_carriers(
        LOS_ANGELES, NEW_YORK, departure_time=DEPARTURE, weather_conditions=CLEAR, traffic_client=client
    )

    assert client.calls == 1
    assert all(q.traffic is summary for q in quotes)


def test_traffic_failure_leaves_quote_intact():
    quote = build_quote(
        LOS_ANGELES, NEW_YORK, "ltl",
        departure_time=DEPARTURE, weather_conditions=CLEAR, traffic_client=BrokenTrafficClient(),
    )

    assert quote.traffic is None
    assert quote.eta.duration_hours > quote.base_duration_hours


@pytest.fixture
def html_instead_of_json(monkeypatch, fake_response):
    # a proxy or captive portal answering 200 with an HTML page
    error = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
    monkeypatch.setattr(
        weather_client.requests, "get",
        lambda *args, **kwargs: fake_response(text="<html>", json_error=error),
    )


def test_unreadable_weather_body_falls_back_to_simulation(html_instead_of_json):
    live = build_quote(
        LOS_ANGELES, NEW_YORK, "tl-dry",
        departure_time=DEPARTURE, weather_client=WeatherClient(api_key="k"), rng=random.Random(1),
    )
    simulated = build_quote(LOS_ANGELES, NEW_YORK, "tl-dry", departure_time=DEPARTURE, rng=random.Random(1))

    assert live.eta == simulated.eta


def test_unreadable_traffic_body_gives_no_snapshot(html_instead_of_json):
    quotes = compare_carriers(
        LOS_ANGELES, NEW_YORK,
        departure_time=DEPARTURE, weather_conditions=CLEAR, traffic_client=TrafficClient(api_key="k"),
    )

    assert len(quotes) == 4
    assert all(q.traffic is None for q in quotes)


def test_seeded_events_run_from_creation_to_now(store):
    now = datetime(2025, 6, 10, 12, 0)

    seeded = seed_store(store, count=6, now=now)

    for shipment in seeded:
        stamps = [e.timestamp for e in shipment.events]
        # 1. timeline opens when the shipment was created
        assert stamps[0] == shipment.created_at
        # 2. ordered and never in the future
        assert stamps == sorted(stamps)
        assert stamps[-1] <= now

    # a pending shipment has only its confirmation
    assert [e.status for e in seeded[0].events] == [ShipmentStatus.PENDING]
    # older shipments keep their 6 hour spacing
    delivered = seeded[4]
    assert delivered.events[1].timestamp - delivered.events[0].timestamp == timedelta(hours=6)
