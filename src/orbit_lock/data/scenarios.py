"""Scenario definitions for preset body layouts and ship starting conditions."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from orbit_lock.core.model import BodyRegistry, GravitationalBody, Ship


@dataclass(frozen=True)
class BodySpec:
    name: str
    position: tuple[float, float]
    strength: float
    orbit_target: str | None = None
    orbit_speed: float = 30.0
    clockwise: bool = False


@dataclass(frozen=True)
class Scenario:
    key: str
    name: str
    description: str
    bodies: tuple[BodySpec, ...]
    ship_position: tuple[float, float]
    ship_velocity: tuple[float, float]

    def build_registry(self) -> BodyRegistry:
        built: dict[str, GravitationalBody] = {}
        # Orbit targets are listed before the bodies that circle them.
        for entry in self.bodies:
            target = built.get(entry.orbit_target) if entry.orbit_target else None
            built[entry.name] = GravitationalBody(
                entry.name,
                entry.position,
                entry.strength,
                is_stationary=target is None,
                orbit_target=target,
                orbit_speed=entry.orbit_speed,
                clockwise=entry.clockwise,
            )
        return BodyRegistry(built.values())

    def build_ship(self, mass: float) -> Ship:
        ship = Ship(
            position=np.array(self.ship_position, dtype=float),
            velocity=np.array(self.ship_velocity, dtype=float),
            mass=mass,
        )
        vx, vy = self.ship_velocity
        if vx or vy:
            ship.orientation = float(np.arctan2(vy, vx))
        return ship


SCENARIO_DEFINITIONS: tuple[Scenario, ...] = (
    Scenario(
        key="single",
        name="Single planet",
        description="One planet (influence radius 100) with the ship drifting past its lock band.",
        bodies=(BodySpec("Planet", (0.0, 0.0), 100.0),),
        ship_position=(0.0, -60.0),
        ship_velocity=(6.0, 0.0),
    ),
    Scenario(
        key="binary",
        name="Binary",
        description="Two stationary planets whose influence regions overlap in the middle.",
        bodies=(
            BodySpec("Alpha", (-70.0, 0.0), 100.0),
            BodySpec("Beta", (70.0, 0.0), 64.0),
        ),
        ship_position=(-70.0, -55.0),
        ship_velocity=(7.0, 0.0),
    ),
    Scenario(
        key="moon",
        name="Planet and moon",
        description="A planet with a small moon on a scripted circular path.",
        bodies=(
            BodySpec("Planet", (0.0, 0.0), 144.0),
            BodySpec("Moon", (90.0, 0.0), 9.0, orbit_target="Planet", orbit_speed=4.0),
        ),
        ship_position=(0.0, -50.0),
        ship_velocity=(8.0, 0.0),
    ),
)

SCENARIOS: dict[str, Scenario] = {scenario.key: scenario for scenario in SCENARIO_DEFINITIONS}
SCENARIO_DISPLAY_ORDER: list[str] = [scenario.key for scenario in SCENARIO_DEFINITIONS]
DEFAULT_SCENARIO_KEY = SCENARIO_DISPLAY_ORDER[0]


__all__ = [
    "BodySpec",
    "DEFAULT_SCENARIO_KEY",
    "SCENARIO_DEFINITIONS",
    "SCENARIO_DISPLAY_ORDER",
    "SCENARIOS",
    "Scenario",
]
