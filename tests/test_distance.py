import math

import pytest

from eta.errors import InvalidInput
from routing.distance import calculate_distance, estimate_base_duration

LOS_ANGELES = (34.0522, -118.2437)
NEW_YORK = (40.7128, -74.0060)
CHICAGO = (41.8781, -87.6298)


def test_distance_to_same_point_is_zero():
    for lat, lng in [LOS_ANGELES, NEW_YORK, (0.0, 0.0), (-33.86, 151.21)]:
        assert calculate_distance(lat, lng, lat, lng) == 0


def test_distance_is_symmetric():
    assert calculate_distance(*LOS_ANGELES, *NEW_YORK) == calculate_distance(*NEW_YORK, *LOS_ANGELES)
    assert calculate_distance(*CHICAGO, *NEW_YORK) == calculate_distance(*NEW_YORK, *CHICAGO)


def test_distance_los_angeles_to_new_york():
    """
    Great-circle LA -> NYC is roughly 2,450 miles.
    """
    distance = calculate_distance(*LOS_ANGELES, *NEW_YORK)

    assert isinstance(distance, int)
    assert 2400 <= distance <= 2500


def test_distance_rejects_nan():
    with pytest.raises(InvalidInput):
        calculate_distance(math.nan, 0.0, 1.0, 1.0)

    with pytest.raises(InvalidInput):
        calculate_distance(0.0, 0.0, 1.0, math.inf)


def test_base_duration_zero_distance():
    assert estimate_base_duration(0) == 0


def test_base_duration_adds_rest_stop_every_500_miles():
    # 499 miles: no rest stop yet
    assert estimate_base_duration(499) == pytest.approx(9.98)
    # 500 miles: 10h driving + one 45 min stop
    assert estimate_base_duration(500) == pytest.approx(10.75)
    # 1000 miles: 20h driving + two stops
    assert estimate_base_duration(1000) == pytest.approx(21.5)


def test_base_duration_is_monotonic():
    durations = [estimate_base_duration(miles) for miles in range(0, 3000, 7)]

    for earlier, later in zip(durations, durations[1:]):
        assert later >= earlier


def test_base_duration_rejects_negative_distance():
    with pytest.raises(InvalidInput):
        estimate_base_duration(-1)
