import random
from dataclasses import replace

import pytest

from eta.models import CarrierMode, Severity, WeatherCondition, WeatherKind
from eta.policy import default_eta_policy
from eta.weather import CLEAR_WEATHER_DESCRIPTION, simulate_weather, weather_impact


class ScriptedRandom:
    """
    Stand-in for random.Random that replays fixed draws in order.
    """
    def __init__(self, draws):
        self.draws = list(draws)

    def random(self):
        return self.draws.pop(0)


def test_winter_northern_route_gets_snow_rain_and_wind():
    # snow severity 0.5 (<0.6 moderate), rain hit 0.1, rain severity 0.9 (light), wind hit 0.05
    rng = ScriptedRandom([0.5, 0.1, 0.9, 0.05])

    conditions = simulate_weather(45.0, 39.0, month=1, rng=rng)

    assert conditions == [
        WeatherCondition(WeatherKind.SNOW, Severity.MODERATE, "Midwest corridor"),
        WeatherCondition(WeatherKind.RAIN, Severity.LIGHT, "En route segments"),
        WeatherCondition(WeatherKind.WIND, Severity.MODERATE, "Plains region"),
    ]
    assert rng.draws == []


def test_light_snow_when_severity_draw_is_high():
    rng = ScriptedRandom([0.95, 0.99, 0.99])

    conditions = simulate_weather(30.0, 42.0, month=12, rng=rng)

    assert conditions == [WeatherCondition(WeatherKind.SNOW, Severity.LIGHT, "Midwest corridor")]


@pytest.mark.parametrize("month", [11, 12, 1, 2, 3])
def test_snow_months(month):
    rng = ScriptedRandom([0.1, 0.99, 0.99])

    conditions = simulate_weather(41.0, 41.0, month=month, rng=rng)

    assert [c.condition for c in conditions] == [WeatherKind.SNOW]


def test_no_snow_in_summer_or_on_southern_routes():
    # summer, northern: only the rain and wind draws happen
    assert simulate_weather(45.0, 45.0, month=7, rng=ScriptedRandom([0.99, 0.99])) == []

    # winter, both endpoints at or below 40 degrees
    assert simulate_weather(40.0, 25.0, month=1, rng=ScriptedRandom([0.99, 0.99])) == []


def test_simulation_is_reproducible_with_seed():
    first = simulate_weather(44.0, 46.0, 2, random.Random(1234))
    second = simulate_weather(44.0, 46.0, 2, random.Random(1234))

    assert first == second


def test_simulation_probabilities_come_from_policy():
    policy = replace(default_eta_policy(), rain_probability=1.0, wind_probability=0.0)

    conditions = simulate_weather(30.0, 30.0, 6, random.Random(5), policy)

    assert [c.condition for c in conditions] == [WeatherKind.RAIN]


def test_clear_skies_have_no_impact():
    factor, description = weather_impact([])

    assert factor == 1.0
    assert description == CLEAR_WEATHER_DESCRIPTION


def test_impact_uses_worst_condition_not_sum():
    conditions = [
        WeatherCondition(WeatherKind.RAIN, Severity.MODERATE, "En route segments"),
        WeatherCondition(WeatherKind.SNOW, Severity.SEVERE, "Midwest corridor"),
        WeatherCondition(WeatherKind.WIND, Severity.LIGHT, "Plains region"),
    ]

    factor, description = weather_impact(conditions)

    assert factor == 1.5
    assert description == (
        "moderate rain forecasted along route. "
        "severe snowfall expected in Midwest corridor. "
        "High wind advisory for Plains region"
    )


@pytest.mark.parametrize(
    "kind, severity, expected",
    [
        (WeatherKind.WIND, Severity.LIGHT, 1.1),
        (WeatherKind.WIND, Severity.MODERATE, 1.2),
        (WeatherKind.WIND, Severity.SEVERE, 1.2),
        (WeatherKind.FOG, Severity.LIGHT, 1.05),
        (WeatherKind.FOG, Severity.MODERATE, 1.15),
        (WeatherKind.FOG, Severity.SEVERE, 1.15),
    ],
)
def test_undefined_moderate_tiers_use_conservative_value(kind, severity, expected):
    factor, _ = weather_impact([WeatherCondition(kind, severity, "route")])

    assert factor == expected


def test_fog_description():
    _, description = weather_impact([WeatherCondition(WeatherKind.FOG, Severity.LIGHT, "Valley")])

    assert description == "Reduced visibility conditions expected"


def test_default_policy_is_valid():
    policy = default_eta_policy()

    assert set(policy.carrier_profiles) == set(CarrierMode)
    assert policy.profile(CarrierMode.TL_DRY).multiplier == 1.0


def test_policy_validation_rejects_bad_probability():
    policy = replace(default_eta_policy(), rain_probability=1.5)

    with pytest.raises(ValueError):
        policy.validate()


def test_policy_validation_rejects_missing_carrier():
    profiles = dict(default_eta_policy().carrier_profiles)
    del profiles[CarrierMode.FLATBED]
    policy = replace(default_eta_policy(), carrier_profiles=profiles)

    with pytest.raises(ValueError):
        policy.validate()


def test_moderate_wind_tier_can_be_lowered_by_policy():
    multipliers = dict(default_eta_policy().weather_multipliers)
    multipliers[WeatherKind.WIND] = {Severity.LIGHT: 1.1, Severity.MODERATE: 1.1, Severity.SEVERE: 1.2}
    policy = replace(default_eta_policy(), weather_multipliers=multipliers)

    factor, _ = weather_impact([WeatherCondition(WeatherKind.WIND, Severity.MODERATE, "Plains region")], policy)

    assert factor == 1.1
