import math

import numpy as np
import pytest

from orbit_lock.data.scenarios import (
    DEFAULT_SCENARIO_KEY,
    SCENARIO_DISPLAY_ORDER,
    SCENARIOS,
)


def test_registry_contents():
    assert SCENARIO_DISPLAY_ORDER == ["single", "binary", "moon"]
    assert DEFAULT_SCENARIO_KEY == "single"
    for key, names in {
        "single": {"Planet"},
        "binary": {"Alpha", "Beta"},
        "moon": {"Planet", "Moon"},
    }.items():
        registry = SCENARIOS[key].build_registry()
        assert {body.name for body in registry} == names


def test_moon_orbits_planet():
    registry = SCENARIOS["moon"].build_registry()
    planet = registry.find("Planet")
    moon = registry.find("Moon")
    assert planet.is_stationary
    assert not moon.is_stationary
    assert moon.orbit_target is planet
    assert moon.orbit_radius == pytest.approx(90.0)


def test_each_build_returns_fresh_bodies():
    scenario = SCENARIOS["single"]
    first = scenario.build_registry().find("Planet")
    second = scenario.build_registry().find("Planet")
    assert first is not second


def test_ship_starts_facing_its_velocity():
    ship = SCENARIOS["single"].build_ship(10.0)
    np.testing.assert_allclose(ship.position, [0.0, -60.0])
    np.testing.assert_allclose(ship.velocity, [6.0, 0.0])
    assert ship.orientation == pytest.approx(0.0)
    assert ship.mass == 10.0

    binary = SCENARIOS["binary"]
    ship = binary.build_ship(5.0)
    vx, vy = binary.ship_velocity
    assert ship.orientation == pytest.approx(math.atan2(vy, vx))


def test_starting_ships_sit_inside_an_influence_region():
    for scenario in SCENARIOS.values():
        registry = scenario.build_registry()
        ship = scenario.build_ship(10.0)
        assert any(body.distance_to(ship.position) <= body.influence_radius for body in registry)
