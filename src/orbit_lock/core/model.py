"""Data models for the orbit-lock simulation state."""
from __future__ import annotations

import math
import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator

import numpy as np

from .gravity import GRAVITY_FIELD, GravityField


class GravitationalBody:
    """Attracting body with a strength-derived influence radius.

    Bodies are stationary by default. A non-stationary body with an
    ``orbit_target`` circles that target at ``orbit_speed`` degrees per second.
    """

    def __init__(
        self,
        name: str,
        position: Iterable[float],
        strength: float,
        *,
        is_stationary: bool = True,
        orbit_target: "GravitationalBody | None" = None,
        orbit_radius: float = 0.0,
        orbit_speed: float = 30.0,
        clockwise: bool = False,
        gravity: GravityField = GRAVITY_FIELD,
    ) -> None:
        self.name = name
        self._position = np.array(position, dtype=float)
        self._gravity = gravity
        self._strength = 0.0
        self._influence_radius = 0.0
        self.strength = strength
        self.is_stationary = is_stationary
        self.orbit_target = orbit_target
        self.orbit_speed = orbit_speed
        self.clockwise = clockwise
        self.orbit_radius = orbit_radius
        self.orbit_angle = 0.0
        if orbit_target is not None:
            offset = self._position - orbit_target.position
            if self.orbit_radius <= 0.0:
                self.orbit_radius = float(np.linalg.norm(offset))
            self.orbit_angle = math.degrees(math.atan2(offset[1], offset[0]))

    def __repr__(self) -> str:
        return f"GravitationalBody({self.name!r}, strength={self._strength:g})"

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @position.setter
    def position(self, value: Iterable[float]) -> None:
        self._position = np.array(value, dtype=float)

    @property
    def strength(self) -> float:
        return self._strength

    @strength.setter
    def strength(self, value: float) -> None:
        if value < 0.0:
            raise ValueError("body strength must be non-negative")
        self._strength = float(value)
        self._influence_radius = self._gravity.influence_radius(self._strength)

    @property
    def influence_radius(self) -> float:
        return self._influence_radius

    @property
    def gravity(self) -> GravityField:
        return self._gravity

    def distance_to(self, point: np.ndarray) -> float:
        return float(np.linalg.norm(np.asarray(point, dtype=float) - self._position))

    def force_on(self, target_mass: float, target_position: np.ndarray) -> np.ndarray:
        return self._gravity.force_on(self._position, self._strength, target_mass, target_position)

    def circular_speed(self, radius: float) -> float:
        return self._gravity.circular_speed(self._strength, radius)

    def advance(self, dt: float) -> None:
        """Move along the scripted circle around ``orbit_target``."""

        if self.is_stationary or self.orbit_target is None:
            return
        step = self.orbit_speed * dt
        self.orbit_angle += -step if self.clockwise else step
        radians = math.radians(self.orbit_angle)
        center = self.orbit_target.position
        self._position = center + self.orbit_radius * np.array(
            [math.cos(radians), math.sin(radians)]
        )


class BodyRegistry:
    """Owned set of bodies, replaced wholesale so readers never see a partial update."""

    def __init__(self, bodies: Iterable[GravitationalBody] = ()) -> None:
        self._bodies: frozenset[GravitationalBody] = frozenset(bodies)

    def all_bodies(self) -> frozenset[GravitationalBody]:
        return self._bodies

    def replace(self, bodies: Iterable[GravitationalBody]) -> None:
        self._bodies = frozenset(bodies)

    def add(self, body: GravitationalBody) -> None:
        self._bodies = self._bodies | {body}

    def remove(self, body: GravitationalBody) -> None:
        self._bodies = self._bodies - {body}

    def find(self, name: str) -> GravitationalBody | None:
        for body in self._bodies:
            if body.name == name:
                return body
        return None

    def advance(self, dt: float) -> None:
        # Targets first so moons follow their planet's position from this tick.
        moving = [body for body in self._bodies if not body.is_stationary]
        moving.sort(key=_orbit_depth)
        for body in moving:
            body.advance(dt)

    def __contains__(self, body: object) -> bool:
        return body in self._bodies

    def __iter__(self) -> Iterator[GravitationalBody]:
        return iter(self._bodies)

    def __len__(self) -> int:
        return len(self._bodies)


def _orbit_depth(body: GravitationalBody) -> int:
    depth = 0
    target = body.orbit_target
    while target is not None and depth < 16:
        depth += 1
        target = target.orbit_target
    return depth


@dataclass
class Ship:
    """Mutable kinematic state of the controllable craft."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=float))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=float))
    mass: float = 10.0
    orientation: float = 0.0

    def __post_init__(self) -> None:
        self.position = np.array(self.position, dtype=float)
        self.velocity = np.array(self.velocity, dtype=float)

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @property
    def heading(self) -> np.ndarray:
        return np.array([math.cos(self.orientation), math.sin(self.orientation)])

    def copy(self) -> "Ship":
        return Ship(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            mass=self.mass,
            orientation=self.orientation,
        )


class OrbitMode(Enum):
    FREE = "free"
    TRACKING = "tracking"
    LOCKED = "locked"


@dataclass
class OrbitState:
    """Orbit state machine data. Bodies are held weakly."""

    mode: OrbitMode = OrbitMode.FREE
    current_radius: float = 0.0
    target_radius: float = 0.0
    angle: float = 0.0
    reference_speed: float = 0.0
    direction: int = 1
    revolution_progress: float = 0.0
    momentum_multiplier: float = 1.0
    last_relative_position: np.ndarray | None = None
    last_center: np.ndarray | None = None
    boosting: bool = False
    thrusting: bool = False
    _locked_ref: weakref.ReferenceType | None = field(default=None, repr=False)
    _tracked_ref: weakref.ReferenceType | None = field(default=None, repr=False)

    @property
    def locked_body(self) -> GravitationalBody | None:
        if self.mode is not OrbitMode.LOCKED or self._locked_ref is None:
            return None
        return self._locked_ref()

    @locked_body.setter
    def locked_body(self, body: GravitationalBody | None) -> None:
        self._locked_ref = weakref.ref(body) if body is not None else None

    @property
    def tracked_body(self) -> GravitationalBody | None:
        return self._tracked_ref() if self._tracked_ref is not None else None

    @tracked_body.setter
    def tracked_body(self, body: GravitationalBody | None) -> None:
        self._tracked_ref = weakref.ref(body) if body is not None else None

    def reset_tracking(self) -> None:
        self._tracked_ref = None
        self.revolution_progress = 0.0
        self.last_relative_position = None
        if self.mode is OrbitMode.TRACKING:
            self.mode = OrbitMode.FREE

    def clear_lock(self) -> None:
        self.mode = OrbitMode.FREE
        self._locked_ref = None
        self.momentum_multiplier = 1.0
        self.boosting = False
        self.direction = 1
        self.last_center = None
        self.reset_tracking()


__all__ = [
    "BodyRegistry",
    "GravitationalBody",
    "OrbitMode",
    "OrbitState",
    "Ship",
]
