"""Shadow simulation producing the trajectory preview."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable

import numpy as np

from .config import PREDICTOR_CFG, SHIP_CFG, PredictorCfg, ShipCfg
from .fuel import FuelGate
from .integrator import FlightIntegrator, free_flight_step
from .model import GravitationalBody, OrbitMode

if TYPE_CHECKING:  # pragma: no cover
    from .simulation import SimSnapshot


class Termination(Enum):
    STEP_LIMIT = "step_limit"
    TIME_LIMIT = "time_limit"
    COLLISION = "collision"
    RUNAWAY = "runaway"
    STATIONARY = "stationary"


@dataclass(frozen=True)
class PredictedPath:
    """Ordered preview points, starting at the ship's current position."""

    points: tuple[tuple[float, float], ...]
    velocities: tuple[tuple[float, float], ...]
    termination: Termination
    elapsed: float

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class CircleOverlay:
    """Exact locked-orbit circle drawn instead of a shadow path."""

    center: tuple[float, float]
    radius: float

    def points(self, segments: int = PREDICTOR_CFG.circle_segments) -> list[tuple[float, float]]:
        cx, cy = self.center
        result = []
        for i in range(segments + 1):
            angle = (i / segments) * 2.0 * math.pi
            result.append((cx + math.cos(angle) * self.radius, cy + math.sin(angle) * self.radius))
        return result


class TrajectoryPredictor:
    """Re-runs the free-flight force law on local copies of the ship state.

    Nothing here mutates live state. Each call returns a fresh result that
    replaces the previous preview.
    """

    def __init__(
        self,
        cfg: PredictorCfg = PREDICTOR_CFG,
        ship_cfg: ShipCfg = SHIP_CFG,
    ) -> None:
        self.cfg = cfg
        self.integrator = FlightIntegrator(ship_cfg)

    def circle(self, center: np.ndarray, radius: float) -> CircleOverlay:
        return CircleOverlay((float(center[0]), float(center[1])), float(radius))

    def preview(
        self,
        snapshot: "SimSnapshot",
        bodies: Iterable[GravitationalBody],
        ship_mass: float,
        fuel: FuelGate | None = None,
    ) -> PredictedPath | CircleOverlay:
        """Circle overlay while locked, shadow path otherwise.

        The regime is read from the same snapshot the caller draws, so the
        preview and the HUD always agree.
        """

        if snapshot.mode is OrbitMode.LOCKED and snapshot.locked_body_position is not None:
            return self.circle(snapshot.locked_body_position, snapshot.current_orbit_radius)
        return self.predict(
            snapshot.position,
            snapshot.velocity,
            bodies,
            ship_mass,
            thrusting=snapshot.thrust_requested,
            orientation=snapshot.orientation,
            fuel=fuel,
        )

    def predict(
        self,
        position: np.ndarray,
        velocity: np.ndarray,
        bodies: Iterable[GravitationalBody],
        ship_mass: float,
        *,
        thrusting: bool = False,
        orientation: float = 0.0,
        fuel: FuelGate | None = None,
    ) -> PredictedPath:
        cfg = self.cfg
        ship_cfg = self.integrator.cfg
        bodies = tuple(bodies)
        start = np.array(position, dtype=float)
        pos = start.copy()
        vel = np.array(velocity, dtype=float)
        points = [(float(pos[0]), float(pos[1]))]
        velocities = [(float(vel[0]), float(vel[1]))]

        if float(np.linalg.norm(vel)) < cfg.min_velocity and not thrusting:
            return PredictedPath(tuple(points), tuple(velocities), Termination.STATIONARY, 0.0)

        shadow_fuel = fuel.copy() if fuel is not None else None
        elapsed = 0.0
        termination = Termination.TIME_LIMIT
        while True:
            if elapsed >= cfg.max_time:
                termination = Termination.TIME_LIMIT
                break
            if len(points) >= cfg.max_points:
                termination = Termination.STEP_LIMIT
                break

            thrust_active = thrusting and (shadow_fuel is None or shadow_fuel.has_fuel())
            if thrust_active and shadow_fuel is not None:
                shadow_fuel.consume_thrust(cfg.time_step)
            force = self.integrator.net_force(bodies, ship_mass, pos, orientation, thrust_active)
            pos, vel = free_flight_step(
                pos,
                vel,
                force,
                ship_mass,
                cfg.time_step,
                ship_cfg.max_speed,
                ship_cfg.force_epsilon,
            )
            elapsed += cfg.time_step
            points.append((float(pos[0]), float(pos[1])))
            velocities.append((float(vel[0]), float(vel[1])))

            if any(body.distance_to(pos) < cfg.collision_distance for body in bodies):
                termination = Termination.COLLISION
                break
            if float(np.linalg.norm(pos - start)) > cfg.max_distance:
                termination = Termination.RUNAWAY
                break

        return PredictedPath(tuple(points), tuple(velocities), termination, elapsed)


__all__ = ["CircleOverlay", "PredictedPath", "Termination", "TrajectoryPredictor"]
