"""pygame front end for the orbit-lock simulation."""

from .camera import Camera
from .draw import (
    downsample_points,
    draw_body,
    draw_preview,
    draw_ship,
    ship_outline,
)
from .input_map import (
    InputScheme,
    KeyBindings,
    KeyboardScheme,
    MouseScheme,
    SCHEMES,
    make_scheme,
)
from .ui import HUD_TEXT, TextCache, build_text_panel, hud_font, hud_lines

__all__ = [
    "Camera",
    "HUD_TEXT",
    "InputScheme",
    "KeyBindings",
    "KeyboardScheme",
    "MouseScheme",
    "SCHEMES",
    "TextCache",
    "build_text_panel",
    "downsample_points",
    "draw_body",
    "draw_preview",
    "draw_ship",
    "hud_font",
    "hud_lines",
    "make_scheme",
    "ship_outline",
]
