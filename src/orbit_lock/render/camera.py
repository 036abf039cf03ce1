from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from orbit_lock.core.gravity import clamp

if TYPE_CHECKING:  # pragma: no cover
    from orbit_lock.core.simulation import SimSnapshot


class Camera:
    """Flight camera: chases the ship, frames the whole circle while locked.

    Scale is in pixels per world unit. ``zoom`` is the player's chosen
    scale; while locked the camera centres on the orbited body and zooms
    out further if needed so the orbit spans at most ``orbit_fill`` of the
    shorter screen side. Centre and scale both ease toward their aim in
    :meth:`update`.
    """

    def __init__(
        self,
        size: tuple[int, int],
        ppu: float,
        *,
        min_ppu: float,
        max_ppu: float,
        orbit_fill: float = 0.8,
    ) -> None:
        self.size = size
        self.min_ppu = min_ppu
        self.max_ppu = max_ppu
        self.orbit_fill = orbit_fill
        self.zoom = clamp(ppu, min_ppu, max_ppu)
        self.ppu = self.zoom
        self.center = np.zeros(2, dtype=float)
        self._aim = np.zeros(2, dtype=float)
        self._aim_ppu = self.zoom

    def update_size(self, size: tuple[int, int]) -> None:
        self.size = size

    def set_center(self, position: tuple[float, float]) -> None:
        self.center[:] = position
        self._aim[:] = position

    def follow(self, position: np.ndarray) -> None:
        self._aim[:] = position
        self._aim_ppu = self.zoom

    def track(self, snapshot: "SimSnapshot") -> None:
        """Aim at the ship in free flight or at the orbit while locked."""

        radius = snapshot.current_orbit_radius
        if snapshot.locked_body_position is None or not radius:
            self.follow(snapshot.position)
            return
        self._aim[:] = snapshot.locked_body_position
        fit = self.orbit_fill * min(self.size) / (2.0 * radius)
        self._aim_ppu = clamp(min(self.zoom, fit), self.min_ppu, self.max_ppu)

    def zoom_by_factor(self, factor: float) -> None:
        self.zoom = clamp(self.zoom * factor, self.min_ppu, self.max_ppu)
        self._aim_ppu = self.zoom

    def update(self, smoothing: float = 0.1) -> None:
        self.center += (self._aim - self.center) * smoothing
        self.ppu += (self._aim_ppu - self.ppu) * smoothing

    # --- conversions (screen y grows downward) ---
    def world_to_screen(self, x: float, y: float) -> tuple[int, int]:
        width, height = self.size
        return (
            width // 2 + int(round((x - self.center[0]) * self.ppu)),
            height // 2 - int(round((y - self.center[1]) * self.ppu)),
        )

    def screen_to_world(self, sx: float, sy: float) -> tuple[float, float]:
        width, height = self.size
        ppu = max(self.ppu, 1e-9)
        return (
            (sx - width / 2.0) / ppu + self.center[0],
            (height / 2.0 - sy) / ppu + self.center[1],
        )

    def to_pixels(self, length: float) -> int:
        return int(round(length * self.ppu))

    def is_visible(self, x: float, y: float, margin: float = 0.0) -> bool:
        sx, sy = self.world_to_screen(x, y)
        width, height = self.size
        return -margin <= sx <= width + margin and -margin <= sy <= height + margin


__all__ = ["Camera"]
