"""Configuration dataclasses for the orbit-lock simulation."""
from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path


@dataclass(frozen=True)
class GravityCfg:
    min_force_threshold: float = 0.01
    singularity_distance: float = 0.5
    close_fraction: float = 0.3
    close_scale: float = 0.5
    close_force_cap: float = 150.0
    normal_scale: float = 0.01
    normal_force_cap: float = 50.0
    falloff_floor: float = 0.01
    orbital_gravity_scale: float = 0.1

    def __post_init__(self) -> None:
        if self.min_force_threshold <= 0.0:
            raise ValueError("min_force_threshold must be positive")
        if not 0.0 < self.close_fraction <= 1.0:
            raise ValueError("close_fraction must lie in (0, 1]")


@dataclass(frozen=True)
class ShipCfg:
    mass: float = 10.0
    thrust_force: float = 15.0
    max_speed: float = 25.0
    rotation_gain: float = 8.0
    min_rotation_speed_sq: float = 0.1
    force_epsilon: float = 0.01

    def __post_init__(self) -> None:
        if self.mass <= 0.0:
            raise ValueError("ship mass must be positive")
        if self.max_speed <= 0.0:
            raise ValueError("max_speed must be positive")


@dataclass(frozen=True)
class FuelCfg:
    max_fuel: float = 100.0
    thrust_consumption: float = 15.0
    boost_consumption: float = 25.0

    def __post_init__(self) -> None:
        if self.max_fuel <= 0.0:
            raise ValueError("max_fuel must be positive")
        if self.thrust_consumption < 0.0 or self.boost_consumption < 0.0:
            raise ValueError("fuel consumption rates must be non-negative")


@dataclass(frozen=True)
class OrbitCfg:
    detection_fraction: float = 0.75
    lock_fraction: float = 0.8
    stability_tolerance: float = 3.0
    radius_change_speed: float = 5.0
    radius_scroll_step: float = 1.0
    min_radius: float = 1.5
    max_radius: float = 80.0
    transition_speed: float = 10.0
    transition_boost: float = 3.0
    orbital_speed_boost: float = 1.3
    momentum_carryover: float = 1.2
    momentum_build_rate: float = 3.0
    momentum_decay_rate: float = 2.0
    min_lock_speed: float = 1.0
    direction_cross_threshold: float = 0.5
    direction_speed_threshold: float = 2.0
    tangential_speed_floor: float = 0.7
    perturbation_scale: float = 1.0
    auto_lock: bool = False

    def __post_init__(self) -> None:
        if self.min_radius <= 0.0:
            raise ValueError("min_radius must be positive")
        if self.min_radius > self.max_radius:
            raise ValueError("min_radius must not exceed max_radius")
        if self.momentum_carryover < 1.0:
            raise ValueError("momentum_carryover must be at least 1")
        if self.radius_change_speed < 0.0 or self.stability_tolerance < 0.0:
            raise ValueError("orbit rates and tolerances must be non-negative")


@dataclass(frozen=True)
class PredictorCfg:
    time_step: float = 0.02
    max_points: int = 200
    max_time: float = 10.0
    min_velocity: float = 0.1
    collision_distance: float = 0.8
    max_distance: float = 100.0
    circle_segments: int = 100

    def __post_init__(self) -> None:
        if self.time_step <= 0.0:
            raise ValueError("predictor time_step must be positive")
        if self.max_points < 2 or self.circle_segments < 3:
            raise ValueError("predictor needs at least two points and three segments")


@dataclass(frozen=True)
class SimCfg:
    timestep: float = 0.02
    max_substeps: int = 8
    max_frame_delta: float = 0.25
    log_every_steps: int = 25

    def __post_init__(self) -> None:
        if self.timestep <= 0.0:
            raise ValueError("timestep must be positive")
        if self.max_substeps < 1:
            raise ValueError("max_substeps must be at least 1")


@dataclass(frozen=True)
class RenderCfg:
    width: int = 1200
    height: int = 800
    fps: int = 120
    background_color: tuple[int, int, int] = (6, 12, 28)
    body_color: tuple[int, int, int] = (255, 183, 77)
    moving_body_color: tuple[int, int, int] = (120, 190, 255)
    body_pixel_radius: int = 10
    influence_ring_color: tuple[int, int, int, int] = (80, 200, 120, 60)
    close_ring_color: tuple[int, int, int, int] = (255, 80, 80, 70)
    lock_ring_color: tuple[int, int, int, int] = (255, 255, 255, 40)
    ship_color: tuple[int, int, int] = (255, 255, 255)
    ship_pixel_size: int = 9
    flame_color: tuple[int, int, int] = (255, 150, 60)
    boost_flame_color: tuple[int, int, int] = (255, 70, 70)
    path_color: tuple[int, int, int, int] = (0, 255, 255, 200)
    orbit_color: tuple[int, int, int, int] = (255, 237, 176, 200)
    path_line_width: int = 2
    max_rendered_path_points: int = 400
    hud_text_color: tuple[int, int, int] = (234, 241, 255)
    hud_warning_color: tuple[int, int, int] = (255, 176, 120)
    hud_background_color: tuple[int, int, int, int] = (12, 18, 30, 140)
    ppm: float = 4.0
    min_ppm: float = 0.5
    max_ppm: float = 40.0
    zoom_step: float = 1.1
    camera_smoothing: float = 0.1
    speed_display_scale: float = 10.0


GRAVITY_CFG = GravityCfg()
SHIP_CFG = ShipCfg()
FUEL_CFG = FuelCfg()
ORBIT_CFG = OrbitCfg()
PREDICTOR_CFG = PredictorCfg()
SIM_CFG = SimCfg()
RENDER_CFG = RenderCfg()


@dataclass(frozen=True)
class ConfigBundle:
    """All simulation sections together, as produced by :func:`load_config`."""

    gravity: GravityCfg = field(default_factory=lambda: GRAVITY_CFG)
    ship: ShipCfg = field(default_factory=lambda: SHIP_CFG)
    fuel: FuelCfg = field(default_factory=lambda: FUEL_CFG)
    orbit: OrbitCfg = field(default_factory=lambda: ORBIT_CFG)
    predictor: PredictorCfg = field(default_factory=lambda: PREDICTOR_CFG)
    sim: SimCfg = field(default_factory=lambda: SIM_CFG)


def _apply_overrides(cfg, overrides: object):
    if not isinstance(overrides, dict):
        return cfg
    known = {f.name for f in fields(cfg)}
    accepted = {key: value for key, value in overrides.items() if key in known}
    if not accepted:
        return cfg
    return replace(cfg, **accepted)


def load_config(path: str | Path | None = None) -> ConfigBundle:
    """Return the default configuration with the JSON overrides in *path* applied.

    A missing or unreadable file yields the defaults. Overrides that produce an
    invalid section still raise :class:`ValueError`.
    """

    bundle = ConfigBundle()
    if path is None:
        return bundle
    try:
        with Path(path).open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError):
        return bundle
    if not isinstance(data, dict):
        return bundle
    return ConfigBundle(
        gravity=_apply_overrides(bundle.gravity, data.get("gravity")),
        ship=_apply_overrides(bundle.ship, data.get("ship")),
        fuel=_apply_overrides(bundle.fuel, data.get("fuel")),
        orbit=_apply_overrides(bundle.orbit, data.get("orbit")),
        predictor=_apply_overrides(bundle.predictor, data.get("predictor")),
        sim=_apply_overrides(bundle.sim, data.get("sim")),
    )


__all__ = [
    "ConfigBundle",
    "FUEL_CFG",
    "FuelCfg",
    "GRAVITY_CFG",
    "GravityCfg",
    "ORBIT_CFG",
    "OrbitCfg",
    "PREDICTOR_CFG",
    "PredictorCfg",
    "RENDER_CFG",
    "RenderCfg",
    "SHIP_CFG",
    "SIM_CFG",
    "ShipCfg",
    "SimCfg",
    "load_config",
]
