import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame
import pytest

import snow
from snowfall import Snowflake

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


@pytest.fixture
def display():
    pygame.display.init()
    yield
    pygame.display.quit()


def flake_at(x, y, size, depth):
    return Snowflake(x, y, size=size, oscillation_offset=0, depth=depth)


def solid_sprite():
    sprite = pygame.Surface((4, 4))
    sprite.fill(WHITE)
    return sprite


def test_display_viewport_without_window(display):
    assert snow.display_viewport() is None


def test_display_viewport_reports_window_size(display):
    pygame.display.set_mode((320, 240))
    assert snow.display_viewport() == (320, 240)


def test_renderer_draws_square_of_size_over_depth():
    target = pygame.Surface((64, 64))
    target.fill(BLACK)
    renderer = snow.SnowRenderer(solid_sprite())

    renderer.draw(target, [flake_at(10.7, 20.2, size=8, depth=1.0)])

    assert target.get_at((10, 20)) == WHITE
    assert target.get_at((17, 27)) == WHITE
    assert target.get_at((18, 20)) == BLACK
    assert target.get_at((10, 28)) == BLACK
    assert target.get_at((9, 20)) == BLACK


def test_renderer_skips_flakes_smaller_than_a_pixel():
    target = pygame.Surface((16, 16))
    target.fill(BLACK)
    renderer = snow.SnowRenderer(solid_sprite())

    renderer.draw(target, [flake_at(2, 2, size=6, depth=10.0)])

    assert target.get_at((2, 2)) == BLACK
    assert renderer._scaled == {}


def test_renderer_caches_scaled_sprites():
    renderer = snow.SnowRenderer(solid_sprite())
    first = renderer.sprite_for(3)
    assert renderer.sprite_for(3) is first
    assert first.get_size() == (3, 3)


def test_make_sprite_fades_out():
    sprite = snow.make_sprite(32)
    assert sprite.get_size() == (32, 32)
    assert sprite.get_at((16, 16)).a > 200
    assert sprite.get_at((0, 0)).a == 0


def test_load_sprite_falls_back_when_missing(tmp_path):
    sprite = snow.load_sprite(str(tmp_path / "missing.png"))
    assert sprite.get_size() == (snow.SPRITE_SIZE, snow.SPRITE_SIZE)


def test_load_sprite_reads_image(tmp_path):
    path = tmp_path / "flake.png"
    image = pygame.Surface((5, 7), pygame.SRCALPHA)
    image.fill(WHITE)
    pygame.image.save(image, str(path))
    assert snow.load_sprite(str(path)).get_size() == (5, 7)


class CountingSnowfall(snow.Snowfall):
    instances = []

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.steps = 0
        CountingSnowfall.instances.append(self)

    def step_all(self, dt=snow.DELTA_TIME):
        assert dt == 1.0
        self.steps += 1
        super().step_all(dt)


def test_main_runs_fixed_tick_loop_until_quit(monkeypatch, tmp_path):
    frames = iter([[], [], [pygame.event.Event(pygame.QUIT)]])
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(snow, "desktop_resolution", lambda: (320, 240))
    monkeypatch.setattr(snow, "Snowfall", CountingSnowfall)
    monkeypatch.setattr(pygame.event, "get", lambda: next(frames))
    CountingSnowfall.instances.clear()

    snow.main()

    (sim,) = CountingSnowfall.instances
    assert sim.steps == 3
    assert len(sim) == snow.N_SNOWFLAKES
    assert not pygame.get_init()


def test_main_stops_on_escape(monkeypatch, tmp_path):
    escape = pygame.event.Event(pygame.KEYDOWN, key=pygame.K_ESCAPE)
    frames = iter([[escape]])
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(snow, "desktop_resolution", lambda: (320, 240))
    monkeypatch.setattr(snow, "Snowfall", CountingSnowfall)
    monkeypatch.setattr(pygame.event, "get", lambda: next(frames))
    CountingSnowfall.instances.clear()

    snow.main()

    assert CountingSnowfall.instances[0].steps == 1
