"""Orbit detection, lock, maintenance and break state machine."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable

import numpy as np

from .config import ORBIT_CFG, OrbitCfg
from .fuel import FuelGate
from .gravity import clamp, nearest_influential_body, total_force
from .integrator import FlightIntegrator, cap_speed
from .model import GravitationalBody, OrbitMode, OrbitState, Ship


@dataclass(frozen=True)
class OrbitEvent:
    """State transition record, timestamped later by the simulation."""

    type: str
    body: str | None
    radius: float
    speed: float
    details: dict = field(default_factory=dict)


def cross2(a: np.ndarray, b: np.ndarray) -> float:
    return float(a[0] * b[1] - a[1] * b[0])


def tangent_for(relative_position: np.ndarray, direction: int) -> np.ndarray:
    """Unit tangent of a circle at *relative_position*; +1 is CCW, -1 is CW."""

    rx, ry = float(relative_position[0]), float(relative_position[1])
    norm = math.hypot(rx, ry)
    if norm <= 0.0:
        return np.array([0.0, float(direction)])
    return np.array([-direction * ry, direction * rx]) / norm


def _as_body_set(bodies: Iterable[GravitationalBody]) -> AbstractSet[GravitationalBody]:
    if isinstance(bodies, (set, frozenset)):
        return bodies
    all_bodies = getattr(bodies, "all_bodies", None)
    if all_bodies is not None:
        return all_bodies()
    return frozenset(bodies)


class OrbitController:
    """Drives the ship through FREE, TRACKING and LOCKED.

    Free flight is delegated to :class:`FlightIntegrator`. A locked orbit is
    maintained kinematically: the ship's angle advances by
    ``speed / radius * direction * dt`` and the ship is placed on the circle,
    with optional positional nudges from the other bodies. Commands arrive
    from the input layer between ticks and are consumed by the next
    :meth:`tick`.
    """

    def __init__(
        self,
        integrator: FlightIntegrator | None = None,
        cfg: OrbitCfg = ORBIT_CFG,
    ) -> None:
        self.integrator = integrator or FlightIntegrator()
        self.cfg = cfg
        self.state = OrbitState()
        self.events: list[OrbitEvent] = []
        self._thrust_held = False
        self._boost_held = False
        self._radius_drive = 0
        self._radius_delta = 0.0
        self._lock_requested = False
        self._break_requested = False

    # --- command set -------------------------------------------------
    def set_thrust(self, held: bool) -> None:
        self._thrust_held = bool(held)

    def set_boost(self, held: bool) -> None:
        self._boost_held = bool(held)

    def set_radius_drive(self, sign: int) -> None:
        self._radius_drive = (sign > 0) - (sign < 0)

    def adjust_radius(self, delta: float) -> None:
        self._radius_delta += float(delta)

    def request_lock(self) -> None:
        self._lock_requested = True

    def request_break(self) -> None:
        self._break_requested = True

    # --- outputs -----------------------------------------------------
    @property
    def mode(self) -> OrbitMode:
        return self.state.mode

    @property
    def is_locked(self) -> bool:
        return self.state.mode is OrbitMode.LOCKED

    @property
    def mode_label(self) -> str:
        label = {
            OrbitMode.FREE: "FREE FLIGHT",
            OrbitMode.TRACKING: "TRACKING",
            OrbitMode.LOCKED: "ORBIT LOCKED",
        }[self.state.mode]
        if self.state.boosting:
            label += " (BOOSTING)"
        return label

    @property
    def current_orbit_radius(self) -> float | None:
        return self.state.current_radius if self.is_locked else None

    @property
    def thrust_requested(self) -> bool:
        return self._thrust_held and not self.is_locked

    @property
    def show_thruster(self) -> bool:
        return (self.state.thrusting and not self.is_locked) or self.state.boosting

    def drain_events(self) -> list[OrbitEvent]:
        events, self.events = self.events, []
        return events

    # --- physics tick ------------------------------------------------
    def tick(
        self,
        ship: Ship,
        fuel: FuelGate,
        bodies: Iterable[GravitationalBody],
        dt: float,
    ) -> None:
        """Run one fixed physics step, mutating *ship* exactly once."""

        body_set = _as_body_set(bodies)
        state = self.state
        had_fuel = fuel.has_fuel()
        lock_requested, self._lock_requested = self._lock_requested, False
        break_requested, self._break_requested = self._break_requested, False
        radius_delta, self._radius_delta = self._radius_delta, 0.0
        state.thrusting = False
        state.boosting = False

        if state.mode is OrbitMode.LOCKED:
            body = state.locked_body
            if body is None or body not in body_set:
                self._emit("body_lost", None, state.current_radius, ship.speed)
                self.break_orbit(ship)
            elif break_requested:
                self.break_orbit(ship)
            else:
                boosting = self._boost_held and had_fuel
                if boosting:
                    fuel.consume_boost(dt)
                state.boosting = boosting
                self._steer_radius(body, radius_delta, dt)
                self._maintain(ship, body, body_set, dt)
                self._update_momentum(dt)
        else:
            state.momentum_multiplier = 1.0
            if not self._try_lock(ship, body_set, lock_requested):
                thrust_active = self._thrust_held and had_fuel
                if thrust_active:
                    fuel.consume_thrust(dt)
                state.thrusting = thrust_active
                self.integrator.step(ship, body_set, dt, thrust_active=thrust_active)
                self._track(ship, body_set)

        if had_fuel and not fuel.has_fuel():
            self._emit("fuel_empty", None, state.current_radius, ship.speed)

    # --- transitions -------------------------------------------------
    def lock(self, ship: Ship, body: GravitationalBody, *, event: str = "lock") -> None:
        """Enter LOCKED around *body* from the ship's current state."""

        cfg = self.cfg
        state = self.state
        center = body.position
        relative = ship.position - center
        distance = float(np.linalg.norm(relative))
        if distance <= 0.0:
            relative = np.array([cfg.min_radius, 0.0])
            distance = cfg.min_radius
        velocity = ship.velocity
        speed = float(np.linalg.norm(velocity))

        direction = self._lock_direction(relative, velocity)
        tangent = tangent_for(relative, direction)
        if speed > cfg.min_lock_speed:
            tangential = abs(float(np.dot(velocity, tangent)))
            reference = max(tangential, speed * cfg.tangential_speed_floor)
        else:
            reference = body.circular_speed(distance)
        reference = min(reference, self.integrator.cfg.max_speed)

        state.reset_tracking()
        state.mode = OrbitMode.LOCKED
        state.locked_body = body
        state.direction = direction
        state.current_radius = distance
        state.target_radius = clamp(distance, cfg.min_radius, self._max_radius(body))
        state.angle = math.atan2(relative[1], relative[0])
        state.reference_speed = reference
        state.momentum_multiplier = 1.0
        state.last_center = center
        ship.velocity = tangent * reference
        self._emit(
            event,
            body.name,
            distance,
            reference,
            {"direction": direction, "influence_radius": body.influence_radius},
        )

    def break_orbit(self, ship: Ship) -> None:
        """Leave LOCKED along the orbit tangent carrying stored momentum."""

        state = self.state
        if state.mode is not OrbitMode.LOCKED:
            return
        body = state.locked_body
        center = body.position if body is not None else state.last_center
        if center is not None:
            tangent = tangent_for(ship.position - center, state.direction)
            base_speed = ship.speed
            exit_speed = base_speed * state.momentum_multiplier
            ship.velocity = cap_speed(tangent * exit_speed, self.integrator.cfg.max_speed)
            self._emit(
                "break",
                body.name if body is not None else None,
                state.current_radius,
                float(np.linalg.norm(ship.velocity)),
                {
                    "base_speed": base_speed,
                    "momentum": state.momentum_multiplier,
                    "direction": state.direction,
                },
            )
        state.clear_lock()

    # --- internals ---------------------------------------------------
    def _try_lock(
        self,
        ship: Ship,
        bodies: AbstractSet[GravitationalBody],
        lock_requested: bool,
    ) -> bool:
        if lock_requested:
            body, distance = nearest_influential_body(bodies, ship.position)
            if body is not None and distance <= body.influence_radius * self.cfg.lock_fraction:
                self.lock(ship, body)
                return True
            self._emit(
                "lock_rejected",
                body.name if body is not None else None,
                distance if body is not None else 0.0,
                ship.speed,
            )
        if self.cfg.auto_lock and self._auto_lock_ready(ship, bodies):
            self.lock(ship, self.state.tracked_body, event="auto_lock")
            return True
        return False

    def _auto_lock_ready(self, ship: Ship, bodies: AbstractSet[GravitationalBody]) -> bool:
        state = self.state
        body = state.tracked_body
        if state.mode is not OrbitMode.TRACKING or body is None or body not in bodies:
            return False
        if state.revolution_progress < 360.0:
            return False
        distance = body.distance_to(ship.position)
        return abs(distance - state.current_radius) <= self.cfg.stability_tolerance

    def _lock_direction(self, relative: np.ndarray, velocity: np.ndarray) -> int:
        cfg = self.cfg
        cross = cross2(relative, velocity)
        if abs(cross) > cfg.direction_cross_threshold:
            return 1 if cross > 0.0 else -1
        speed = float(np.linalg.norm(velocity))
        if speed > cfg.direction_speed_threshold:
            unit = velocity / speed
            ccw = float(np.dot(unit, tangent_for(relative, 1)))
            cw = float(np.dot(unit, tangent_for(relative, -1)))
            return 1 if ccw > cw else -1
        return 1

    def _track(self, ship: Ship, bodies: AbstractSet[GravitationalBody]) -> None:
        state = self.state
        body, distance = nearest_influential_body(bodies, ship.position)
        if body is None or distance > body.influence_radius * self.cfg.detection_fraction:
            state.reset_tracking()
            return

        relative = ship.position - body.position
        if state.tracked_body is not body or state.last_relative_position is None:
            state.tracked_body = body
            state.mode = OrbitMode.TRACKING
            state.current_radius = distance
            state.last_relative_position = relative
            state.revolution_progress = 0.0
            self._emit("track_start", body.name, distance, ship.speed)
            return

        previous = state.last_relative_position
        swept = math.degrees(
            math.atan2(cross2(previous, relative), float(np.dot(previous, relative)))
        )
        state.revolution_progress += abs(swept)
        state.last_relative_position = relative

        if abs(distance - state.current_radius) > 2.0 * self.cfg.stability_tolerance:
            self._emit(
                "track_reset",
                body.name,
                distance,
                ship.speed,
                {"tracked_radius": state.current_radius},
            )
            state.reset_tracking()

    def _max_radius(self, body: GravitationalBody) -> float:
        return max(self.cfg.min_radius, min(self.cfg.max_radius, body.influence_radius))

    def _steer_radius(self, body: GravitationalBody, scroll: float, dt: float) -> None:
        cfg = self.cfg
        state = self.state
        target = state.target_radius
        target += self._radius_drive * cfg.radius_change_speed * dt
        target += scroll * cfg.radius_scroll_step
        state.target_radius = clamp(target, cfg.min_radius, self._max_radius(body))

    def _maintain(
        self,
        ship: Ship,
        body: GravitationalBody,
        bodies: AbstractSet[GravitationalBody],
        dt: float,
    ) -> None:
        cfg = self.cfg
        state = self.state
        center = body.position
        state.last_center = center

        transition = cfg.transition_speed * (cfg.transition_boost if state.boosting else 1.0)
        state.current_radius += (state.target_radius - state.current_radius) * min(1.0, transition * dt)
        radius = max(state.current_radius, cfg.min_radius)

        speed = state.reference_speed * (cfg.orbital_speed_boost if state.boosting else 1.0)
        speed = min(speed, self.integrator.cfg.max_speed)
        state.angle += speed / radius * state.direction * dt
        position = center + radius * np.array([math.cos(state.angle), math.sin(state.angle)])

        if cfg.perturbation_scale > 0.0:
            nudge = total_force(bodies, ship.mass, position, exclude=body)
            displacement = nudge / ship.mass * dt * dt * cfg.perturbation_scale
            if np.any(displacement):
                position = position + displacement
                relative = position - center
                state.current_radius = float(np.linalg.norm(relative))
                state.angle = math.atan2(relative[1], relative[0])

        ship.position = position
        ship.velocity = tangent_for(position - center, state.direction) * speed
        self.integrator.rotate_towards_velocity(ship, dt)

    def _update_momentum(self, dt: float) -> None:
        cfg = self.cfg
        state = self.state
        if state.boosting:
            goal, rate = cfg.momentum_carryover, cfg.momentum_build_rate
        else:
            goal, rate = 1.0, cfg.momentum_decay_rate
        state.momentum_multiplier += (goal - state.momentum_multiplier) * min(1.0, rate * dt)
        state.momentum_multiplier = clamp(state.momentum_multiplier, 1.0, cfg.momentum_carryover)

    def _emit(
        self,
        event_type: str,
        body: str | None,
        radius: float,
        speed: float,
        details: dict | None = None,
    ) -> None:
        self.events.append(OrbitEvent(event_type, body, float(radius), float(speed), details or {}))


__all__ = ["OrbitController", "OrbitEvent", "cross2", "tangent_for"]
