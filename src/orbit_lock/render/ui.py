from __future__ import annotations

from collections import OrderedDict
from typing import Sequence, TYPE_CHECKING

import pygame

if TYPE_CHECKING:  # pragma: no cover
    from orbit_lock.core.config import RenderCfg
    from orbit_lock.core.simulation import SimSnapshot


Color = tuple[int, int, int] | tuple[int, int, int, int]

LOW_FUEL_PERCENT = 20.0
HUD_FONT_NAMES = ("Inter", "Segoe UI", "Helvetica", "Arial")


class TextCache:
    """LRU of rendered strings keyed by font, text and colour.

    The HUD re-renders the same few rows every frame, so the surfaces are
    kept and handed out again. Callers must not draw onto them.
    """

    def __init__(self, max_size: int = 128) -> None:
        self.max_size = max_size
        self._surfaces: OrderedDict[tuple[int, str, Color], pygame.Surface] = OrderedDict()

    def __len__(self) -> int:
        return len(self._surfaces)

    def render(self, font: pygame.font.Font, text: str, color: Color) -> pygame.Surface:
        key = (id(font), text, color)
        surface = self._surfaces.pop(key, None)
        if surface is None:
            surface = font.render(text, True, color)
        self._surfaces[key] = surface
        while len(self._surfaces) > self.max_size:
            self._surfaces.popitem(last=False)
        return surface


HUD_TEXT = TextCache()


def hud_font(size: int = 18) -> pygame.font.Font:
    """First installed face from :data:`HUD_FONT_NAMES`, else pygame's bundled font."""

    for name in HUD_FONT_NAMES:
        path = pygame.font.match_font(name)
        if path:
            return pygame.font.Font(path, size)
    return pygame.font.Font(None, size)


def hud_lines(
    snapshot: "SimSnapshot",
    render_cfg: "RenderCfg",
    *,
    scheme_name: str = "",
) -> list[tuple[str, Color]]:
    """Text rows for the flight HUD: speed, mode, fuel and orbit radius."""

    normal = render_cfg.hud_text_color
    speed = snapshot.speed * render_cfg.speed_display_scale
    fuel_color = render_cfg.hud_warning_color if snapshot.fuel_percentage < LOW_FUEL_PERCENT else normal
    if snapshot.current_orbit_radius is not None:
        orbit_text = f"Orbit: {snapshot.current_orbit_radius:.1f}"
    else:
        orbit_text = "Orbit: --"
    lines = [
        (f"Speed: {speed:.1f}", normal),
        (f"Mode: {snapshot.mode_label}", normal),
        (f"Fuel: {snapshot.fuel_percentage:.1f}%", fuel_color),
        (orbit_text, normal),
    ]
    if snapshot.locked_body_name:
        lines.append((f"Body: {snapshot.locked_body_name}", normal))
    if scheme_name:
        lines.append((f"Controls: {scheme_name}", normal))
    return lines


def build_text_panel(
    font: pygame.font.Font,
    lines: Sequence[tuple[str, Color]],
    *,
    background_color: Color,
    padding: tuple[int, int] = (14, 14),
    cache: TextCache = HUD_TEXT,
) -> pygame.Surface:
    if not lines:
        raise ValueError("lines must not be empty")
    pad_x, pad_y = padding
    row_height = font.get_linesize()
    rows = [cache.render(font, text, color) if text else None for text, color in lines]
    width = max((row.get_width() for row in rows if row is not None), default=0)
    panel = pygame.Surface((width + pad_x * 2, row_height * len(rows) + pad_y * 2), pygame.SRCALPHA)
    pygame.draw.rect(panel, background_color, panel.get_rect(), border_radius=12)
    for idx, row in enumerate(rows):
        if row is not None:
            panel.blit(row, (pad_x, pad_y + idx * row_height))
    return panel


__all__ = [
    "HUD_TEXT",
    "LOW_FUEL_PERCENT",
    "TextCache",
    "build_text_panel",
    "hud_font",
    "hud_lines",
]
