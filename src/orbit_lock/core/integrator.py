"""Fixed-step force integration for free flight."""
from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from .config import SHIP_CFG, ShipCfg
from .gravity import total_force
from .model import GravitationalBody, Ship


def cap_speed(velocity: np.ndarray, max_speed: float) -> np.ndarray:
    """Scale *velocity* down to ``max_speed`` keeping its direction."""

    speed = float(np.linalg.norm(velocity))
    if speed > max_speed:
        return velocity * (max_speed / speed)
    return velocity


def ease_angle(current: float, target: float, factor: float) -> float:
    """Interpolate between two angles in radians along the shortest arc."""

    factor = max(0.0, min(1.0, factor))
    delta = (target - current + math.pi) % (2.0 * math.pi) - math.pi
    return current + delta * factor


def thrust_vector(orientation: float, thrust_force: float) -> np.ndarray:
    return thrust_force * np.array([math.cos(orientation), math.sin(orientation)])


def free_flight_step(
    position: np.ndarray,
    velocity: np.ndarray,
    force: np.ndarray,
    mass: float,
    dt: float,
    max_speed: float,
    force_epsilon: float = 0.0,
) -> tuple[np.ndarray, np.ndarray]:
    """Advance one semi-implicit Euler step with the speed cap applied last.

    Both the live integrator and the trajectory predictor go through this
    function so their dynamics cannot drift apart.
    """

    velocity = np.array(velocity, dtype=float)
    if float(np.linalg.norm(force)) > force_epsilon:
        velocity = velocity + (force / mass) * dt
    position = np.asarray(position, dtype=float) + velocity * dt
    velocity = cap_speed(velocity, max_speed)
    return position, velocity


class FlightIntegrator:
    """Applies gravity and thrust to the ship once per physics tick."""

    def __init__(self, cfg: ShipCfg = SHIP_CFG) -> None:
        self.cfg = cfg

    def net_force(
        self,
        bodies: Iterable[GravitationalBody],
        mass: float,
        position: np.ndarray,
        orientation: float,
        thrust_active: bool,
    ) -> np.ndarray:
        force = total_force(bodies, mass, position)
        if thrust_active:
            force += thrust_vector(orientation, self.cfg.thrust_force)
        return force

    def step(
        self,
        ship: Ship,
        bodies: Iterable[GravitationalBody],
        dt: float,
        *,
        thrust_active: bool = False,
    ) -> None:
        force = self.net_force(bodies, ship.mass, ship.position, ship.orientation, thrust_active)
        ship.position, ship.velocity = free_flight_step(
            ship.position,
            ship.velocity,
            force,
            ship.mass,
            dt,
            self.cfg.max_speed,
            self.cfg.force_epsilon,
        )
        self.rotate_towards_velocity(ship, dt)

    def rotate_towards_velocity(self, ship: Ship, dt: float) -> None:
        vx, vy = float(ship.velocity[0]), float(ship.velocity[1])
        if vx * vx + vy * vy <= self.cfg.min_rotation_speed_sq:
            return
        target = math.atan2(vy, vx)
        ship.orientation = ease_angle(ship.orientation, target, self.cfg.rotation_gain * dt)


__all__ = [
    "FlightIntegrator",
    "cap_speed",
    "ease_angle",
    "free_flight_step",
    "thrust_vector",
]
