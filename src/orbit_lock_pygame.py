# src/orbit_lock_pygame.py
"""Interactive pygame front end: input sampling, fixed ticks, preview and HUD."""
from __future__ import annotations

import argparse
import sys

import pygame

from orbit_lock.core.config import RENDER_CFG, load_config
from orbit_lock.core.logging_utils import RunLogger
from orbit_lock.core.simulation import Simulation
from orbit_lock.core.timekeeping import FrameTimer
from orbit_lock.data.scenarios import DEFAULT_SCENARIO_KEY, SCENARIO_DISPLAY_ORDER, SCENARIOS
from orbit_lock.render import (
    SCHEMES,
    Camera,
    build_text_panel,
    draw_body,
    draw_preview,
    draw_ship,
    hud_font,
    hud_lines,
    make_scheme,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fly a craft between planets and lock into orbits.")
    parser.add_argument("--scenario", choices=SCENARIO_DISPLAY_ORDER, default=DEFAULT_SCENARIO_KEY)
    parser.add_argument("--scheme", choices=sorted(SCHEMES), default="keyboard")
    parser.add_argument("--config", help="JSON file with configuration overrides")
    parser.add_argument("--no-log", action="store_true", help="disable telemetry run logging")
    return parser.parse_args(argv)


def build_simulation(scenario_key: str, config_path: str | None, *, log: bool) -> Simulation:
    config = load_config(config_path)
    scenario = SCENARIOS[scenario_key]
    logger = RunLogger() if log else None
    return Simulation(
        scenario.build_registry(),
        scenario.build_ship(config.ship.mass),
        config=config,
        logger=logger,
        meta={"scenario_key": scenario.key, "scenario_name": scenario.name},
    )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    render_cfg = RENDER_CFG

    pygame.init()
    screen = pygame.display.set_mode((render_cfg.width, render_cfg.height), pygame.RESIZABLE)
    pygame.display.set_caption("Orbit Lock")
    clock = pygame.time.Clock()
    font = hud_font(18)

    sim = build_simulation(args.scenario, args.config, log=not args.no_log)
    scheme = make_scheme(args.scheme)
    camera = Camera(
        screen.get_size(),
        render_cfg.ppm,
        min_ppu=render_cfg.min_ppm,
        max_ppu=render_cfg.max_ppm,
    )
    camera.set_center(tuple(sim.ship.position))
    frame_timer = FrameTimer(max_delta=sim.config.sim.max_frame_delta)
    gravity_cfg = sim.config.gravity
    orbit_cfg = sim.config.orbit

    running = True
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    camera.update_size(event.size)
                elif event.type == pygame.KEYDOWN and event.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    camera.zoom_by_factor(render_cfg.zoom_step)
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_MINUS:
                    camera.zoom_by_factor(1.0 / render_cfg.zoom_step)
                scheme.handle_event(event)

            # --- Input -> commands (presentation tick) ---
            signals = scheme.sample(
                pygame.key.get_pressed(),
                pygame.mouse.get_pressed(),
                locked=sim.controller.is_locked,
            )
            sim.apply_controls(signals)

            # --- Fixed physics ticks ---
            sim.advance(frame_timer.tick())

            # --- Render from one snapshot ---
            snapshot = sim.snapshot()
            preview = sim.predict(snapshot)
            camera.track(snapshot)
            camera.update(render_cfg.camera_smoothing)

            screen.fill(render_cfg.background_color)
            for body in sim.registry.all_bodies():
                draw_body(
                    screen,
                    camera,
                    body,
                    render_cfg=render_cfg,
                    close_fraction=gravity_cfg.close_fraction,
                    lock_fraction=orbit_cfg.lock_fraction,
                )
            draw_preview(screen, camera, preview, render_cfg=render_cfg)
            draw_ship(screen, camera, snapshot, render_cfg=render_cfg)
            panel = build_text_panel(
                font,
                hud_lines(snapshot, render_cfg, scheme_name=scheme.name),
                background_color=render_cfg.hud_background_color,
            )
            screen.blit(panel, (16, 16))
            pygame.display.flip()
            clock.tick(render_cfg.fps)
    finally:
        sim.close()
        pygame.quit()


if __name__ == "__main__":
    main(sys.argv[1:])
