"""Source-agnostic control signals and their mapping onto orbit commands."""
from __future__ import annotations

from dataclasses import dataclass

from .orbit import OrbitController


@dataclass(frozen=True)
class ControlSignals:
    """Input state sampled once per presentation frame.

    ``break_requested`` and ``lock_requested`` are edges: set only on the
    frame the button went down. ``radius_delta`` is an analog amount such as
    scroll-wheel clicks.
    """

    thrust_held: bool = False
    boost_held: bool = False
    break_requested: bool = False
    lock_requested: bool = False
    radius_increase_held: bool = False
    radius_decrease_held: bool = False
    radius_delta: float = 0.0

    @property
    def radius_drive(self) -> int:
        return int(self.radius_increase_held) - int(self.radius_decrease_held)


def apply_signals(controller: OrbitController, signals: ControlSignals) -> None:
    """Forward one frame of input to the controller's command set."""

    controller.set_thrust(signals.thrust_held)
    controller.set_boost(signals.boost_held)
    controller.set_radius_drive(signals.radius_drive)
    if signals.radius_delta:
        controller.adjust_radius(signals.radius_delta)
    if signals.lock_requested:
        controller.request_lock()
    if signals.break_requested:
        controller.request_break()


__all__ = ["ControlSignals", "apply_signals"]
