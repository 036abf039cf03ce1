"""Gravity force law shared by the live integrator and the trajectory predictor."""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterable

import numpy as np

from .config import GRAVITY_CFG, GravityCfg

if TYPE_CHECKING:  # pragma: no cover
    from .model import GravitationalBody


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp *value* between *lo* and *hi*."""

    return max(lo, min(hi, value))


class GravityField:
    """Two-regime, clamped force law evaluated for a single body.

    Inside ``close_fraction`` of the influence radius the pull follows an
    inverse-cube law capped at ``close_force_cap``. Beyond that band the
    force is scaled by :meth:`falloff` and capped at ``normal_force_cap``.
    The falloff is only nonzero at or below ``falloff_floor``, so with the
    default band the outer region exerts no pull and only the close band
    bends a trajectory. Outside the influence radius, or closer than
    ``singularity_distance``, the force is zero.
    """

    def __init__(self, cfg: GravityCfg = GRAVITY_CFG) -> None:
        self.cfg = cfg
        self._log_eleven = math.log(11.0)

    def influence_radius(self, strength: float) -> float:
        if strength <= 0.0:
            return 0.0
        return math.sqrt(strength / self.cfg.min_force_threshold)

    def falloff(self, normalized_distance: float) -> float:
        """Logarithmic taper, clamped to [0, 1]; full strength very near the body."""

        if normalized_distance <= self.cfg.falloff_floor:
            return 1.0
        return clamp(-math.log(normalized_distance * 10.0 + 1.0) / self._log_eleven, 0.0, 1.0)

    def force_magnitude(self, strength: float, target_mass: float, distance: float) -> float:
        cfg = self.cfg
        radius = self.influence_radius(strength)
        if distance < cfg.singularity_distance or distance > radius:
            return 0.0
        if distance < radius * cfg.close_fraction:
            adjusted = max(distance, cfg.singularity_distance)
            magnitude = cfg.close_scale * strength * target_mass / (adjusted**3)
            return clamp(magnitude, 0.0, cfg.close_force_cap)
        magnitude = strength * target_mass * self.falloff(distance / radius) * cfg.normal_scale
        return clamp(magnitude, 0.0, cfg.normal_force_cap)

    def force_on(
        self,
        body_position: np.ndarray,
        strength: float,
        target_mass: float,
        target_position: np.ndarray,
    ) -> np.ndarray:
        """Force vector pulling a point mass at *target_position* toward the body."""

        direction = np.asarray(body_position, dtype=float) - np.asarray(target_position, dtype=float)
        distance = float(np.linalg.norm(direction))
        magnitude = self.force_magnitude(strength, target_mass, distance)
        if magnitude <= 0.0:
            return np.zeros(2, dtype=float)
        return direction / distance * magnitude

    def circular_speed(self, strength: float, radius: float) -> float:
        """Along-orbit speed of a circular orbit of *radius* around a body."""

        radius = max(radius, self.cfg.singularity_distance)
        return math.sqrt(self.cfg.orbital_gravity_scale * strength * strength / radius)


GRAVITY_FIELD = GravityField()


def total_force(
    bodies: Iterable["GravitationalBody"],
    target_mass: float,
    target_position: np.ndarray,
    *,
    exclude: "GravitationalBody | None" = None,
) -> np.ndarray:
    """Sum the pull of every body on a point mass, optionally skipping one."""

    force = np.zeros(2, dtype=float)
    for body in bodies:
        if body is exclude:
            continue
        force += body.force_on(target_mass, target_position)
    return force


def nearest_influential_body(
    bodies: Iterable["GravitationalBody"],
    position: np.ndarray,
) -> tuple["GravitationalBody | None", float]:
    """Return the nearest body whose influence radius contains *position*."""

    nearest = None
    nearest_distance = math.inf
    for body in bodies:
        distance = body.distance_to(position)
        if distance <= body.influence_radius and distance < nearest_distance:
            nearest = body
            nearest_distance = distance
    return nearest, nearest_distance


__all__ = [
    "GRAVITY_FIELD",
    "GravityField",
    "clamp",
    "nearest_influential_body",
    "total_force",
]
