from __future__ import annotations

import math
from typing import Sequence, TYPE_CHECKING

import pygame

from orbit_lock.core.predictor import CircleOverlay, PredictedPath

from .camera import Camera

if TYPE_CHECKING:  # pragma: no cover
    from orbit_lock.core.config import RenderCfg
    from orbit_lock.core.model import GravitationalBody
    from orbit_lock.core.simulation import SimSnapshot


def ship_outline(
    center: tuple[int, int],
    orientation: float,
    size: int,
) -> list[tuple[int, int]]:
    """Screen-space triangle pointing along *orientation* (y axis flipped)."""

    cx, cy = center
    forward = (math.cos(orientation), -math.sin(orientation))
    side = (-forward[1], forward[0])
    nose = (cx + forward[0] * size, cy + forward[1] * size)
    back = (cx - forward[0] * size * 0.7, cy - forward[1] * size * 0.7)
    left = (back[0] + side[0] * size * 0.6, back[1] + side[1] * size * 0.6)
    right = (back[0] - side[0] * size * 0.6, back[1] - side[1] * size * 0.6)
    return [(int(round(x)), int(round(y))) for x, y in (nose, left, right)]


def _draw_ring(
    surface: pygame.Surface,
    color: tuple[int, int, int, int],
    center: tuple[int, int],
    radius: int,
) -> None:
    if radius <= 0:
        return
    ring = pygame.Surface((radius * 2 + 2, radius * 2 + 2), pygame.SRCALPHA)
    pygame.draw.circle(ring, color, (radius + 1, radius + 1), radius, 1)
    surface.blit(ring, (center[0] - radius - 1, center[1] - radius - 1))


def draw_body(
    surface: pygame.Surface,
    camera: Camera,
    body: "GravitationalBody",
    *,
    render_cfg: "RenderCfg",
    close_fraction: float,
    lock_fraction: float,
) -> None:
    position = body.position
    center = camera.world_to_screen(position[0], position[1])
    influence = body.influence_radius
    _draw_ring(surface, render_cfg.influence_ring_color, center, camera.to_pixels(influence))
    _draw_ring(surface, render_cfg.lock_ring_color, center, camera.to_pixels(influence * lock_fraction))
    _draw_ring(surface, render_cfg.close_ring_color, center, camera.to_pixels(influence * close_fraction))
    color = render_cfg.body_color if body.is_stationary else render_cfg.moving_body_color
    pygame.draw.circle(surface, color, center, render_cfg.body_pixel_radius)


def draw_ship(
    surface: pygame.Surface,
    camera: Camera,
    snapshot: "SimSnapshot",
    *,
    render_cfg: "RenderCfg",
) -> None:
    center = camera.world_to_screen(snapshot.position[0], snapshot.position[1])
    size = render_cfg.ship_pixel_size
    if snapshot.show_thruster:
        flame_color = render_cfg.boost_flame_color if snapshot.boosting else render_cfg.flame_color
        flame = ship_outline(center, snapshot.orientation + math.pi, int(size * 1.2))
        pygame.draw.polygon(surface, flame_color, flame)
    pygame.draw.polygon(surface, render_cfg.ship_color, ship_outline(center, snapshot.orientation, size))


def downsample_points(
    points: Sequence[tuple[float, float]], max_points: int
) -> list[tuple[float, float]]:
    if len(points) <= max_points:
        return list(points)
    step = max(1, math.ceil(len(points) / max_points))
    sampled = list(points[::step])
    if sampled[-1] != points[-1]:
        sampled.append(points[-1])
    return sampled


def draw_preview(
    surface: pygame.Surface,
    camera: Camera,
    preview: PredictedPath | CircleOverlay,
    *,
    render_cfg: "RenderCfg",
) -> None:
    if isinstance(preview, CircleOverlay):
        world_points = preview.points()
        color = render_cfg.orbit_color
    else:
        world_points = downsample_points(preview.points, render_cfg.max_rendered_path_points)
        color = render_cfg.path_color
    if len(world_points) < 2:
        return
    screen_points = [camera.world_to_screen(x, y) for x, y in world_points]
    width = render_cfg.path_line_width
    if width <= 1:
        pygame.draw.aalines(surface, color, False, screen_points)
    else:
        pygame.draw.lines(surface, color, False, screen_points, width)
