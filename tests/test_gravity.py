import math

import numpy as np
import pytest

from orbit_lock.core.config import GravityCfg
from orbit_lock.core.gravity import (
    GRAVITY_FIELD,
    GravityField,
    clamp,
    nearest_influential_body,
    total_force,
)
from orbit_lock.core.model import GravitationalBody


def test_influence_radius_from_strength():
    assert GRAVITY_FIELD.influence_radius(100.0) == pytest.approx(100.0)
    assert GRAVITY_FIELD.influence_radius(64.0) == pytest.approx(80.0)
    assert GRAVITY_FIELD.influence_radius(0.0) == 0.0


def test_force_is_zero_outside_influence_and_inside_singularity():
    assert GRAVITY_FIELD.force_magnitude(100.0, 10.0, 150.0) == 0.0
    assert GRAVITY_FIELD.force_magnitude(100.0, 10.0, 0.4) == 0.0


def test_close_regime_inverse_cube_and_cap():
    # 0.5 * 100 * 10 / 20^3
    assert GRAVITY_FIELD.force_magnitude(100.0, 10.0, 20.0) == pytest.approx(0.0625)
    assert GRAVITY_FIELD.force_magnitude(100.0, 10.0, 1.0) == pytest.approx(150.0)


def test_normal_regime_exerts_no_pull():
    # -ln(6)/ln(11) clamps to zero halfway out.
    assert GRAVITY_FIELD.force_magnitude(100.0, 10.0, 50.0) == 0.0
    assert GRAVITY_FIELD.force_magnitude(100.0, 10.0, 30.0) == 0.0
    assert GRAVITY_FIELD.force_magnitude(100.0, 10.0, 99.0) == 0.0


def test_normal_regime_full_strength_inside_falloff_floor():
    field = GravityField(GravityCfg(close_fraction=0.005))
    # d / R = 0.01 keeps the falloff at 1: 100 * 10 * 0.01
    assert field.force_magnitude(100.0, 10.0, 1.0) == pytest.approx(10.0)
    # R = 1000, d = 8: raw 1000 capped at 50
    assert field.force_magnitude(10000.0, 10.0, 8.0) == pytest.approx(50.0)


def test_falloff_values():
    assert GRAVITY_FIELD.falloff(0.005) == 1.0
    assert GRAVITY_FIELD.falloff(0.01) == 1.0
    assert GRAVITY_FIELD.falloff(0.02) == 0.0
    assert GRAVITY_FIELD.falloff(0.5) == 0.0
    assert GRAVITY_FIELD.falloff(1.0) == 0.0


def test_force_vector_points_at_body():
    force = GRAVITY_FIELD.force_on(np.zeros(2), 100.0, 10.0, np.array([20.0, 0.0]))
    assert force[0] < 0.0
    np.testing.assert_allclose(force[1], 0.0, atol=1e-12)
    assert np.linalg.norm(force) == pytest.approx(GRAVITY_FIELD.force_magnitude(100.0, 10.0, 20.0))
    np.testing.assert_allclose(
        GRAVITY_FIELD.force_on(np.zeros(2), 100.0, 10.0, np.array([50.0, 0.0])), np.zeros(2)
    )


def test_circular_speed():
    assert GRAVITY_FIELD.circular_speed(100.0, 10.0) == pytest.approx(10.0)


def test_custom_close_fraction_moves_regime_boundary():
    field = GravityField(GravityCfg(close_fraction=0.1))
    # 20 is now outside the close band, where the falloff is zero.
    assert GRAVITY_FIELD.force_magnitude(100.0, 10.0, 20.0) == pytest.approx(0.0625)
    assert field.force_magnitude(100.0, 10.0, 20.0) == 0.0
    assert field.force_magnitude(100.0, 10.0, 9.0) > 0.0


def test_invalid_gravity_config():
    with pytest.raises(ValueError):
        GravityCfg(min_force_threshold=0.0)
    with pytest.raises(ValueError):
        GravityCfg(close_fraction=1.5)


def test_clamp():
    assert clamp(5.0, 0.0, 1.0) == 1.0
    assert clamp(-5.0, 0.0, 1.0) == 0.0
    assert clamp(0.25, 0.0, 1.0) == 0.25


def test_body_strength_validation_and_zero_strength():
    with pytest.raises(ValueError):
        GravitationalBody("Bad", (0.0, 0.0), -1.0)
    dead = GravitationalBody("Dead", (0.0, 0.0), 0.0)
    assert dead.influence_radius == 0.0
    np.testing.assert_allclose(dead.force_on(10.0, np.array([5.0, 0.0])), np.zeros(2))


def test_strength_change_updates_influence_radius():
    body = GravitationalBody("Planet", (0.0, 0.0), 100.0)
    body.strength = 25.0
    assert body.influence_radius == pytest.approx(50.0)


def test_total_force_sums_and_excludes():
    left = GravitationalBody("Left", (-10.0, 0.0), 100.0)
    right = GravitationalBody("Right", (10.0, 0.0), 100.0)
    both = total_force([left, right], 10.0, np.zeros(2))
    np.testing.assert_allclose(both, np.zeros(2), atol=1e-12)

    only_right = total_force([left, right], 10.0, np.zeros(2), exclude=left)
    assert only_right[0] > 0.0


def test_nearest_influential_body():
    near = GravitationalBody("Near", (10.0, 0.0), 100.0)
    far = GravitationalBody("Far", (-40.0, 0.0), 100.0)
    weak = GravitationalBody("Weak", (5.0, 0.0), 1.0)  # R = 10, covers the origin

    body, distance = nearest_influential_body([near, far, weak], np.zeros(2))
    assert body is weak
    assert distance == pytest.approx(5.0)

    body, distance = nearest_influential_body([near], np.array([500.0, 0.0]))
    assert body is None
    assert math.isinf(distance)
