"""pygame input schemes mapped onto :class:`ControlSignals`."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

import pygame

from orbit_lock.core.controls import ControlSignals


@dataclass(frozen=True)
class KeyBindings:
    thrust: int = pygame.K_SPACE
    radius_decrease: int = pygame.K_LCTRL
    boost: int = pygame.K_LSHIFT
    lock: int = pygame.K_x
    break_orbit: int = pygame.K_c


class InputScheme:
    """Collects edge events during a frame and samples held state at its end."""

    name = "base"

    def __init__(self, bindings: KeyBindings | None = None) -> None:
        self.bindings = bindings or KeyBindings()
        self._lock_edge = False
        self._break_edge = False
        self._wheel = 0.0

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEWHEEL:
            self._wheel += float(event.y)

    def sample(
        self,
        pressed: Sequence[bool],
        mouse_buttons: Sequence[bool],
        *,
        locked: bool,
    ) -> ControlSignals:
        raise NotImplementedError

    def _take_edges(self) -> tuple[bool, bool, float]:
        edges = (self._lock_edge, self._break_edge, self._wheel)
        self._lock_edge = False
        self._break_edge = False
        self._wheel = 0.0
        return edges


class KeyboardScheme(InputScheme):
    """Space thrusts (raises the orbit while locked), Ctrl lowers, Shift boosts,
    X locks, C breaks, the wheel nudges the orbit radius."""

    name = "keyboard"

    def handle_event(self, event: pygame.event.Event) -> None:
        super().handle_event(event)
        if event.type == pygame.KEYDOWN:
            if event.key == self.bindings.lock:
                self._lock_edge = True
            elif event.key == self.bindings.break_orbit:
                self._break_edge = True

    def sample(
        self,
        pressed: Sequence[bool],
        mouse_buttons: Sequence[bool],
        *,
        locked: bool,
    ) -> ControlSignals:
        lock_edge, break_edge, wheel = self._take_edges()
        thrust_key = bool(pressed[self.bindings.thrust])
        return ControlSignals(
            thrust_held=thrust_key and not locked,
            boost_held=bool(pressed[self.bindings.boost]),
            break_requested=break_edge,
            lock_requested=lock_edge,
            radius_increase_held=thrust_key and locked,
            radius_decrease_held=bool(pressed[self.bindings.radius_decrease]) and locked,
            radius_delta=wheel,
        )


class MouseScheme(InputScheme):
    """Left button thrusts (raises the orbit while locked), right button boosts,
    middle button toggles lock and break, Ctrl lowers, the wheel nudges."""

    name = "mouse"

    def __init__(self, bindings: KeyBindings | None = None) -> None:
        super().__init__(bindings)
        self._middle_edge = False

    def handle_event(self, event: pygame.event.Event) -> None:
        super().handle_event(event)
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 2:
            self._middle_edge = True
        elif event.type == pygame.KEYDOWN and event.key == self.bindings.break_orbit:
            self._break_edge = True

    def sample(
        self,
        pressed: Sequence[bool],
        mouse_buttons: Sequence[bool],
        *,
        locked: bool,
    ) -> ControlSignals:
        middle, self._middle_edge = self._middle_edge, False
        lock_edge, break_edge, wheel = self._take_edges()
        left = bool(mouse_buttons[0])
        right = bool(mouse_buttons[2])
        return ControlSignals(
            thrust_held=left and not locked,
            boost_held=right,
            break_requested=break_edge or (middle and locked),
            lock_requested=lock_edge or (middle and not locked),
            radius_increase_held=left and locked,
            radius_decrease_held=bool(pressed[self.bindings.radius_decrease]) and locked,
            radius_delta=wheel,
        )


SCHEMES: dict[str, Callable[[], InputScheme]] = {
    KeyboardScheme.name: KeyboardScheme,
    MouseScheme.name: MouseScheme,
}


def make_scheme(name: str) -> InputScheme:
    try:
        return SCHEMES[name]()
    except KeyError:
        raise ValueError(f"unknown input scheme {name!r}; choose from {sorted(SCHEMES)}") from None


__all__ = [
    "InputScheme",
    "KeyBindings",
    "KeyboardScheme",
    "MouseScheme",
    "SCHEMES",
    "make_scheme",
]
