import pygame
import pytest

from newton_fractal.app import NewtonApp
from newton_fractal.menu import Dropdown, Menu, Slider, load_settings


def click(pos, event_type=pygame.MOUSEBUTTONDOWN):
    return pygame.event.Event(event_type, button=1, pos=pos)


def motion(pos):
    return pygame.event.Event(pygame.MOUSEMOTION, pos=pos, rel=(0, 0), buttons=(1, 0, 0))


@pytest.fixture
def menu():
    return Menu(0, 0, width=360, height=800)


def test_slider_maps_mouse_to_value():
    slider = Slider(0, 0, 101, "x", 0, 100, 50)
    assert slider.value_at(0) == 0
    assert slider.value_at(50) == 50
    assert slider.value_at(100) == 100
    assert slider.value_at(-20) == 0
    assert slider.value_at(500) == 100


def test_slider_clamps_initial_value():
    assert Slider(0, 0, 100, "n", 2, 30, 99).value == 30


def test_slider_drag():
    slider = Slider(0, 0, 101, "x", 0, 100, 50)
    assert slider.handle_event(click((10, 5))) == (True, True)
    assert slider.value == 10
    assert slider.handle_event(motion((80, 40))) == (True, True)
    assert slider.value == 80
    assert slider.handle_event(click((80, 40), pygame.MOUSEBUTTONUP)) == (True, False)
    assert slider.handle_event(motion((20, 5))) == (False, False)
    assert slider.value == 80


def test_menu_defaults_come_from_settings(menu):
    assert menu.resolution == 1024
    assert menu.n == 5
    assert menu.max_iter == 60
    assert menu.palette == "Hue"
    assert not menu.auto_render


def test_power_slider_click(menu):
    handled, changed = menu.handle_event(click((12, 125)))
    assert handled and changed
    assert menu.n == 2


def test_auto_render_checkbox_hides_render_button(menu):
    assert menu.render_button.visible
    handled, _ = menu.handle_event(click((15, 45)))
    assert handled
    assert menu.auto_render
    assert not menu.render_button.visible

    # The hidden button no longer reacts
    menu.handle_event(click((100, 260)))
    assert not menu.render_requested


def test_render_and_save_buttons(menu):
    menu.handle_event(click((100, 260)))
    assert menu.render_requested
    menu.handle_event(click((100, 295)))
    assert menu.save_requested


def test_palette_dropdown(menu):
    assert menu.handle_event(click((100, 210))) == (True, False)
    assert menu.palette_dropdown.expanded
    # Second item of the open list
    assert menu.handle_event(click((100, 260))) == (True, True)
    assert menu.palette == "Classic"
    assert menu.render_requested
    assert not menu.save_requested


def test_clicks_outside_the_panel_are_ignored():
    menu = Menu(900, 0, width=360, height=800)
    assert menu.handle_event(click((100, 100))) == (False, False)
    assert not menu.point_in_menu((100, 100))
    assert menu.point_in_menu((950, 100))


def test_load_settings_falls_back(tmp_path, capsys):
    assert load_settings(str(tmp_path / "missing.json")) is None
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    assert load_settings(str(broken)) is None
    assert "Warning" in capsys.readouterr().out


def test_app_snapshot_clamps_overrides():
    app = NewtonApp(resolution=10000, n=1, max_iter=50)
    app._init_components()
    params = app.snapshot()
    assert (params.width, params.height) == (4096, 4096)
    assert params.n == 2
    assert params.max_iter == 50


def test_dropdown_set_value_ignores_unknown_options():
    dropdown = Dropdown(0, 0, 100, ["a", "b", "c"])
    dropdown.set_value("c")
    assert dropdown.get_value() == "c"
    dropdown.set_value("missing")
    assert dropdown.get_value() == "c"


def test_menu_palette_default_from_settings(monkeypatch):
    monkeypatch.setitem(Menu.DEFAULTS, 'palette', 'Pastel')
    assert Menu(0, 0).palette == "Pastel"
    monkeypatch.setitem(Menu.DEFAULTS, 'palette', 'No such palette')
    assert Menu(0, 0).palette == "Hue"
