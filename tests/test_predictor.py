import numpy as np
import pytest

from orbit_lock.core.config import PredictorCfg
from orbit_lock.core.controls import ControlSignals
from orbit_lock.core.fuel import FuelGate
from orbit_lock.core.integrator import FlightIntegrator
from orbit_lock.core.model import BodyRegistry, GravitationalBody, Ship
from orbit_lock.core.predictor import (
    CircleOverlay,
    PredictedPath,
    Termination,
    TrajectoryPredictor,
)
from orbit_lock.core.simulation import Simulation


@pytest.fixture
def planet():
    return GravitationalBody("Planet", (0.0, 0.0), 100.0)


def test_first_point_matches_live_tick(planet):
    ship = Ship(position=np.array([0.0, -60.0]), velocity=np.array([6.0, 0.0]))
    path = TrajectoryPredictor().predict(ship.position, ship.velocity, [planet], ship.mass)

    FlightIntegrator().step(ship, [planet], 0.02)
    np.testing.assert_allclose(path.points[0], [0.0, -60.0])
    np.testing.assert_allclose(path.points[1], ship.position, rtol=0, atol=1e-12)
    np.testing.assert_allclose(path.velocities[1], ship.velocity, rtol=0, atol=1e-12)


def test_step_limit(planet):
    path = TrajectoryPredictor().predict(np.array([0.0, -60.0]), np.array([6.0, 0.0]), [planet], 10.0)
    assert path.termination is Termination.STEP_LIMIT
    assert len(path) == 200
    assert len(path.velocities) == len(path.points)


def test_time_limit():
    predictor = TrajectoryPredictor(PredictorCfg(max_time=1.0, max_points=1000))
    path = predictor.predict(np.zeros(2), np.array([1.0, 0.0]), [], 10.0)
    assert path.termination is Termination.TIME_LIMIT
    assert path.elapsed >= 1.0
    assert len(path) in (51, 52)


def test_collision(planet):
    path = TrajectoryPredictor().predict(np.array([3.0, 0.0]), np.array([-10.0, 0.0]), [planet], 10.0)
    assert path.termination is Termination.COLLISION
    assert np.linalg.norm(path.points[-1]) < 0.8


def test_runaway():
    predictor = TrajectoryPredictor(PredictorCfg(max_distance=50.0))
    path = predictor.predict(np.zeros(2), np.array([20.0, 0.0]), [], 10.0)
    assert path.termination is Termination.RUNAWAY
    assert np.linalg.norm(path.points[-1]) > 50.0
    assert np.linalg.norm(path.points[-2]) <= 50.0


def test_stationary_ship_gets_single_point():
    path = TrajectoryPredictor().predict(np.array([4.0, 2.0]), np.array([0.05, 0.0]), [], 10.0)
    assert path.termination is Termination.STATIONARY
    assert path.points == ((4.0, 2.0),)


def test_thrusting_ship_is_never_stationary():
    path = TrajectoryPredictor().predict(np.zeros(2), np.zeros(2), [], 10.0, thrusting=True)
    assert path.termination is not Termination.STATIONARY
    assert path.points[-1][0] > 0.0


def test_inputs_are_not_mutated(planet):
    position = np.array([0.0, -60.0])
    velocity = np.array([6.0, 0.0])
    fuel = FuelGate(current=50.0)
    TrajectoryPredictor().predict(position, velocity, [planet], 10.0, thrusting=True, fuel=fuel)
    np.testing.assert_allclose(position, [0.0, -60.0])
    np.testing.assert_allclose(velocity, [6.0, 0.0])
    assert fuel.current == 50.0
    np.testing.assert_allclose(planet.position, [0.0, 0.0])


def test_shadow_fuel_stops_predicted_thrust():
    predictor = TrajectoryPredictor()
    fuel = FuelGate(current=0.2)
    limited = predictor.predict(np.zeros(2), np.array([1.0, 0.0]), [], 10.0, thrusting=True, fuel=fuel)
    unlimited = predictor.predict(np.zeros(2), np.array([1.0, 0.0]), [], 10.0, thrusting=True)

    np.testing.assert_allclose(limited.velocities[1], [1.03, 0.0])
    np.testing.assert_allclose(limited.velocities[2], [1.03, 0.0])
    np.testing.assert_allclose(unlimited.velocities[2], [1.06, 0.0])
    assert fuel.current == pytest.approx(0.2)


def test_circle_overlay_points():
    overlay = TrajectoryPredictor().circle(np.array([1.0, 2.0]), 10.0)
    points = overlay.points(8)
    assert len(points) == 9
    np.testing.assert_allclose(points[0], [11.0, 2.0])
    np.testing.assert_allclose(points[2], [1.0, 12.0], atol=1e-12)
    np.testing.assert_allclose(points[-1], points[0], atol=1e-12)
    assert len(overlay.points()) == 101


def test_preview_is_circle_when_locked(planet):
    sim = Simulation(BodyRegistry([planet]), Ship(position=np.array([50.0, 0.0]), velocity=np.array([0.0, 5.0])))
    sim.apply_controls(ControlSignals(lock_requested=True))
    sim.step()
    preview = sim.predict()
    assert isinstance(preview, CircleOverlay)
    assert preview.center == (0.0, 0.0)
    assert preview.radius == pytest.approx(50.0)


def test_preview_is_path_when_free(planet):
    sim = Simulation(BodyRegistry([planet]), Ship(position=np.array([0.0, -60.0]), velocity=np.array([6.0, 0.0])))
    preview = sim.predict()
    assert isinstance(preview, PredictedPath)
    assert len(preview) > 1
