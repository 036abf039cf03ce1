import math
import os
from collections import defaultdict

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import numpy as np
import pygame
import pytest

from orbit_lock.core.config import RENDER_CFG
from orbit_lock.core.controls import ControlSignals
from orbit_lock.core.fuel import FuelGate
from orbit_lock.core.model import BodyRegistry, GravitationalBody, Ship
from orbit_lock.core.simulation import Simulation
from orbit_lock.render import (
    Camera,
    KeyboardScheme,
    MouseScheme,
    TextCache,
    build_text_panel,
    downsample_points,
    draw_body,
    draw_preview,
    draw_ship,
    hud_lines,
    make_scheme,
    ship_outline,
)

NO_MOUSE = (False, False, False)


def pressed(*keys):
    state = defaultdict(bool)
    for key in keys:
        state[key] = True
    return state


def locked_sim():
    sim = Simulation(
        BodyRegistry([GravitationalBody("Planet", (0.0, 0.0), 100.0)]),
        Ship(position=np.array([50.0, 0.0]), velocity=np.array([0.0, 5.0])),
    )
    sim.apply_controls(ControlSignals(lock_requested=True))
    sim.step()
    return sim


def test_camera_round_trip_and_flip():
    camera = Camera((800, 600), 4.0, min_ppu=0.5, max_ppu=40.0)
    camera.set_center((10.0, 5.0))
    assert camera.world_to_screen(10.0, 5.0) == (400, 300)
    assert camera.world_to_screen(11.0, 6.0) == (404, 296)
    np.testing.assert_allclose(camera.screen_to_world(404, 296), (11.0, 6.0))
    assert camera.to_pixels(2.5) == 10
    assert camera.is_visible(10.0, 5.0)
    assert not camera.is_visible(1000.0, 5.0)


def test_camera_zoom_is_clamped_and_eased():
    camera = Camera((800, 600), 4.0, min_ppu=0.5, max_ppu=40.0)
    camera.zoom_by_factor(100.0)
    camera.update(smoothing=1.0)
    assert camera.ppu == 40.0
    camera.follow(np.array([10.0, 0.0]))
    camera.update(smoothing=0.5)
    np.testing.assert_allclose(camera.center, [5.0, 0.0])


def test_camera_frames_locked_orbit():
    snapshot = locked_sim().snapshot()
    camera = Camera((800, 600), 40.0, min_ppu=0.5, max_ppu=40.0)
    camera.set_center((50.0, 0.0))
    camera.track(snapshot)
    camera.update(smoothing=1.0)
    # The 100-unit circle spans 80% of the 600 px side.
    assert camera.ppu == pytest.approx(4.8)
    np.testing.assert_allclose(camera.center, [0.0, 0.0])

    # A wider manual zoom than the fit is kept.
    camera.zoom_by_factor(0.05)
    camera.track(snapshot)
    camera.update(smoothing=1.0)
    assert camera.ppu == pytest.approx(2.0)


def test_camera_chases_ship_in_free_flight():
    sim = Simulation(BodyRegistry(), Ship(position=np.array([30.0, -10.0])))
    camera = Camera((800, 600), 4.0, min_ppu=0.5, max_ppu=40.0)
    camera.track(sim.snapshot())
    camera.update(smoothing=0.5)
    np.testing.assert_allclose(camera.center, [15.0, -5.0])
    assert camera.ppu == pytest.approx(4.0)


def test_downsample_keeps_last_point():
    points = [(float(i), 0.0) for i in range(1000)]
    sampled = downsample_points(points, 400)
    assert len(sampled) <= 401
    assert sampled[0] == points[0]
    assert sampled[-1] == points[-1]
    assert downsample_points(points[:10], 400) == points[:10]


def test_ship_outline_points_along_orientation():
    nose, left, right = ship_outline((100, 100), 0.0, 10)
    assert nose == (110, 100)
    assert left[0] < 100 and right[0] < 100
    nose, _, _ = ship_outline((100, 100), math.pi / 2.0, 10)
    # Screen y grows downward.
    assert nose == (100, 90)


def test_hud_lines_free_flight():
    sim = Simulation(BodyRegistry(), Ship(velocity=np.array([3.0, 4.0])))
    sim.fuel = FuelGate(current=10.0)
    lines = hud_lines(sim.snapshot(), RENDER_CFG, scheme_name="keyboard")
    texts = [text for text, _ in lines]
    assert texts == [
        "Speed: 50.0",
        "Mode: FREE FLIGHT",
        "Fuel: 10.0%",
        "Orbit: --",
        "Controls: keyboard",
    ]
    assert lines[2][1] == RENDER_CFG.hud_warning_color


def test_hud_lines_locked():
    texts = [text for text, _ in hud_lines(locked_sim().snapshot(), RENDER_CFG)]
    assert "Mode: ORBIT LOCKED" in texts
    assert "Orbit: 50.0" in texts
    assert "Body: Planet" in texts


def test_drawing_smoke():
    surface = pygame.Surface((320, 240))
    camera = Camera((320, 240), 2.0, min_ppu=0.5, max_ppu=40.0)
    sim = locked_sim()
    snapshot = sim.snapshot()
    for body in sim.registry:
        draw_body(surface, camera, body, render_cfg=RENDER_CFG, close_fraction=0.3, lock_fraction=0.8)
    draw_preview(surface, camera, sim.predict(snapshot), render_cfg=RENDER_CFG)
    draw_ship(surface, camera, snapshot, render_cfg=RENDER_CFG)

    free = Simulation(BodyRegistry(), Ship(velocity=np.array([1.0, 0.0])))
    draw_preview(surface, camera, free.predict(), render_cfg=RENDER_CFG)


def test_text_panel():
    pygame.font.init()
    font = pygame.font.Font(None, 18)
    panel = build_text_panel(font, [("Speed: 1.0", (255, 255, 255))], background_color=(0, 0, 0, 128))
    assert panel.get_width() > 28
    with pytest.raises(ValueError):
        build_text_panel(font, [], background_color=(0, 0, 0, 128))


def test_keyboard_scheme_free_flight():
    scheme = KeyboardScheme()
    scheme.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_x))
    scheme.handle_event(pygame.event.Event(pygame.MOUSEWHEEL, x=0, y=2))
    signals = scheme.sample(pressed(pygame.K_SPACE, pygame.K_LSHIFT), NO_MOUSE, locked=False)
    assert signals == ControlSignals(
        thrust_held=True,
        boost_held=True,
        lock_requested=True,
        radius_delta=2.0,
    )
    # Edges are consumed by the sample that reported them.
    assert scheme.sample(pressed(), NO_MOUSE, locked=False) == ControlSignals()


def test_keyboard_scheme_locked_maps_space_to_radius():
    scheme = KeyboardScheme()
    scheme.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_c))
    signals = scheme.sample(pressed(pygame.K_SPACE), NO_MOUSE, locked=True)
    assert not signals.thrust_held
    assert signals.radius_drive == 1
    assert signals.break_requested
    signals = scheme.sample(pressed(pygame.K_LCTRL), NO_MOUSE, locked=True)
    assert signals.radius_drive == -1


def test_mouse_scheme_middle_button_toggles():
    scheme = MouseScheme()
    scheme.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=2, pos=(0, 0)))
    signals = scheme.sample(pressed(), (True, False, True), locked=False)
    assert signals.lock_requested and not signals.break_requested
    assert signals.thrust_held and signals.boost_held

    scheme.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=2, pos=(0, 0)))
    signals = scheme.sample(pressed(), (True, False, False), locked=True)
    assert signals.break_requested and not signals.lock_requested
    assert signals.radius_drive == 1
    assert not signals.thrust_held


def test_make_scheme():
    assert isinstance(make_scheme("keyboard"), KeyboardScheme)
    assert isinstance(make_scheme("mouse"), MouseScheme)
    with pytest.raises(ValueError):
        make_scheme("gamepad")


def test_text_cache_reuses_and_evicts():
    pygame.font.init()
    font = pygame.font.Font(None, 18)
    cache = TextCache(max_size=2)
    first = cache.render(font, "a", (255, 255, 255))
    assert cache.render(font, "a", (255, 255, 255)) is first
    cache.render(font, "b", (255, 255, 255))
    cache.render(font, "c", (255, 255, 255))
    assert len(cache) == 2
    assert cache.render(font, "a", (255, 255, 255)) is not first
