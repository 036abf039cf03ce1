"""Simulation loop state: fixed physics ticks and presentation snapshots."""
from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass

import numpy as np

from .config import ConfigBundle
from .controls import ControlSignals, apply_signals
from .fuel import FuelGate
from .integrator import FlightIntegrator
from .logging_utils import RunLogger
from .model import BodyRegistry, OrbitMode, Ship
from .orbit import OrbitController, OrbitEvent
from .predictor import CircleOverlay, PredictedPath, TrajectoryPredictor
from .timekeeping import FixedStepAccumulator


@dataclass(frozen=True)
class SimSnapshot:
    """Read-only view of the simulation taken at the start of a frame."""

    time: float
    position: np.ndarray
    velocity: np.ndarray
    orientation: float
    speed: float
    mode: OrbitMode
    mode_label: str
    boosting: bool
    thrusting: bool
    thrust_requested: bool
    fuel_percentage: float
    current_orbit_radius: float | None
    locked_body_name: str | None
    locked_body_position: np.ndarray | None
    show_thruster: bool


class Simulation:
    """Owns the ship, fuel, orbit controller and body registry.

    :meth:`step` is the fixed physics tick and the only place live state
    changes. :meth:`advance` feeds frame time through a fixed-step
    accumulator. :meth:`snapshot` and :meth:`predict` are for the
    presentation side and never mutate anything.
    """

    def __init__(
        self,
        registry: BodyRegistry,
        ship: Ship | None = None,
        *,
        config: ConfigBundle | None = None,
        logger: RunLogger | None = None,
        meta: dict | None = None,
    ) -> None:
        self.config = config or ConfigBundle()
        self.registry = registry
        self.ship = ship or Ship(mass=self.config.ship.mass)
        self.fuel = FuelGate(self.config.fuel)
        self.integrator = FlightIntegrator(self.config.ship)
        self.controller = OrbitController(self.integrator, self.config.orbit)
        self.predictor = TrajectoryPredictor(self.config.predictor, self.config.ship)
        self.stepper = FixedStepAccumulator(
            step=self.config.sim.timestep,
            max_substeps=self.config.sim.max_substeps,
        )
        self.time = 0.0
        self.step_count = 0
        self.recent_events: deque[tuple[float, OrbitEvent]] = deque(maxlen=32)
        self.logger = logger
        self._log_step_counter = 0
        if logger is not None:
            logger.write_meta(self._build_meta(meta or {}))
            self._log_state()

    @property
    def dt(self) -> float:
        return self.config.sim.timestep

    def apply_controls(self, signals: ControlSignals) -> None:
        apply_signals(self.controller, signals)

    def step(self, dt: float | None = None) -> None:
        """Run one fixed physics tick."""

        dt = self.dt if dt is None else dt
        if dt <= 0.0:
            raise ValueError("physics step must be positive")
        bodies = self.registry.all_bodies()
        self.registry.advance(dt)
        self.controller.tick(self.ship, self.fuel, bodies, dt)
        self.time += dt
        self.step_count += 1

        events = self.controller.drain_events()
        for event in events:
            self.recent_events.append((self.time, event))
        if self.logger is not None:
            for event in events:
                self.logger.log_orbit_event(self.time, event)
            self._log_step_counter += 1
            if events or self._log_step_counter >= self.config.sim.log_every_steps:
                self._log_state()

    def advance(self, frame_dt: float) -> int:
        """Accumulate presentation time and run the whole ticks it covers."""

        self.stepper.accrue(min(frame_dt, self.config.sim.max_frame_delta))
        steps = self.stepper.consume()
        for _ in range(steps):
            self.step()
        return steps

    def snapshot(self) -> SimSnapshot:
        ship = self.ship
        controller = self.controller
        state = controller.state
        body = state.locked_body
        return SimSnapshot(
            time=self.time,
            position=ship.position.copy(),
            velocity=ship.velocity.copy(),
            orientation=ship.orientation,
            speed=ship.speed,
            mode=state.mode,
            mode_label=controller.mode_label,
            boosting=state.boosting,
            thrusting=state.thrusting,
            thrust_requested=controller.thrust_requested and self.fuel.has_fuel(),
            fuel_percentage=self.fuel.percentage,
            current_orbit_radius=controller.current_orbit_radius,
            locked_body_name=body.name if body is not None else None,
            locked_body_position=body.position if body is not None else None,
            show_thruster=controller.show_thruster and self.fuel.has_fuel(),
        )

    def predict(self, snapshot: SimSnapshot | None = None) -> PredictedPath | CircleOverlay:
        snapshot = snapshot or self.snapshot()
        return self.predictor.preview(
            snapshot,
            self.registry.all_bodies(),
            self.ship.mass,
            self.fuel,
        )

    def close(self) -> None:
        if self.logger is not None:
            self._log_state()
            self.logger.close()
            self.logger = None

    def _log_state(self) -> None:
        if self.logger is None:
            return
        state = self.controller.state
        self.logger.log_snapshot(
            self.snapshot(),
            state.target_radius if state.mode is OrbitMode.LOCKED else 0.0,
            state.momentum_multiplier,
        )
        self._log_step_counter = 0

    def _build_meta(self, extra: dict) -> dict:
        meta = {
            "config": {
                "gravity": asdict(self.config.gravity),
                "ship": asdict(self.config.ship),
                "fuel": asdict(self.config.fuel),
                "orbit": asdict(self.config.orbit),
                "predictor": asdict(self.config.predictor),
                "sim": asdict(self.config.sim),
            },
            "bodies": [
                {
                    "name": body.name,
                    "position": body.position.tolist(),
                    "strength": body.strength,
                    "influence_radius": body.influence_radius,
                    "stationary": body.is_stationary,
                }
                for body in sorted(self.registry, key=lambda b: b.name)
            ],
            "ship_start": {
                "position": self.ship.position.tolist(),
                "velocity": self.ship.velocity.tolist(),
                "mass": self.ship.mass,
            },
            "strategy": "kinematic",
            "dt_phys": self.dt,
        }
        meta.update(extra)
        return meta


__all__ = ["SimSnapshot", "Simulation"]
