"""
Purpose: Straight-line distance and naive transit time for a lane.
What it does:
- calculate_distance: haversine great-circle distance in whole miles
- estimate_base_duration: hours at freight speed plus mandatory rest stops

No HTTP calls here. Used before any live routing data is available.
"""

import math

from eta.errors import InvalidInput

EARTH_RADIUS_MILES = 3959
AVG_FREIGHT_SPEED_MPH = 50
REST_STOP_INTERVAL_MILES = 500
REST_STOP_HOURS = 0.75  # 45 min per stop


def _finite(name, value):
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidInput(f"{name} must be a finite number, got {value!r}")
    return float(value)


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> int:
    """
    Great-circle distance between two (lat, lng) points, rounded to the nearest mile.
    Coordinates are not range-checked; non-finite values raise InvalidInput.
    """
    lat1 = _finite("lat1", lat1)
    lng1 = _finite("lng1", lng1)
    lat2 = _finite("lat2", lat2)
    lng2 = _finite("lng2", lng2)

    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # keep a within [0, 1] for the square roots
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    # round half up
    return int(math.floor(EARTH_RADIUS_MILES * c + 0.5))


def estimate_base_duration(distance_miles: float) -> float:
    """
    Hours to cover distance_miles at 50 mph, plus one 45 minute rest stop
    per full 500 miles driven.
    """
    distance = _finite("distance_miles", distance_miles)
    if distance < 0:
        raise InvalidInput(f"distance_miles must be >= 0, got {distance}")

    rest_stops = math.floor(distance / REST_STOP_INTERVAL_MILES)
    return distance / AVG_FREIGHT_SPEED_MPH + rest_stops * REST_STOP_HOURS
