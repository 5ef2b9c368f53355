import numpy as np
import pytest

from newton_fractal import NO_ROOT
from newton_fractal.colormaps import (
    NO_ROOT_COLOR,
    PALETTES,
    build_palette,
    build_palette_lut,
    get_palette,
    hsv_to_rgb,
    list_palette_names,
    shade,
)


def test_hsv_to_rgb():
    assert hsv_to_rgb(0.0, 1.0, 1.0) == (255, 0, 0)
    assert hsv_to_rgb(0.5, 1.0, 1.0) == (0, 255, 255)
    assert hsv_to_rgb(0.3, 0.0, 0.5) == (127, 127, 127)


def test_shade_darkens_with_iterations():
    assert shade(0, 60) == 1.0
    assert shade(10, 60) > shade(30, 60) > shade(60, 60) > 0.0


@pytest.mark.parametrize("name", list(PALETTES))
@pytest.mark.parametrize("n", [2, 3, 7, 30])
def test_palette_table_layout(name, n):
    lut = get_palette(name, n, 40)
    assert lut.shape == (n + 1, 41, 4)
    assert lut.dtype == np.uint8
    # Row n is the no-root row
    assert np.all(lut[n] == NO_ROOT_COLOR)


@pytest.mark.parametrize("name", list(PALETTES))
@pytest.mark.parametrize("n", [2, 3, 7, 30])
def test_roots_are_distinct_from_no_root(name, n):
    lut = get_palette(name, n, 40)
    for k in range(n):
        assert tuple(lut[k, 0]) != NO_ROOT_COLOR
        assert lut[k, 0, :3].sum() > 0


@pytest.mark.parametrize("name", ["Hue", "Classic", "Pastel", "Grayscale"])
def test_each_root_has_its_own_color(name):
    lut = get_palette(name, 7, 20)
    assert len({tuple(lut[k, 0]) for k in range(7)}) == 7


@pytest.mark.parametrize("name", list(PALETTES))
def test_slow_convergence_is_darker(name):
    lut = get_palette(name, 5, 60).astype(int)
    for k in range(5):
        assert lut[k, 0, :3].sum() > lut[k, 59, :3].sum()


def test_palette_is_deterministic():
    np.testing.assert_array_equal(get_palette("Hue", 5, 60), get_palette("Hue", 5, 60))


def test_unknown_palette_name():
    with pytest.raises(KeyError):
        get_palette("Nope", 3, 10)


def test_build_palette_defaults_to_hue():
    np.testing.assert_array_equal(build_palette(None, 4, 10), get_palette("Hue", 4, 10))


def test_custom_function_keeps_alpha():
    def translucent(root_index, iterations, n, max_iter):
        if root_index == NO_ROOT:
            return (1, 2, 3, 0)
        return (root_index, iterations, 9, 128)

    lut = build_palette_lut(translucent, 3, 5)
    assert tuple(lut[2, 4]) == (2, 4, 9, 128)
    assert tuple(lut[3, 5]) == (1, 2, 3, 0)


@pytest.mark.parametrize("color", [(300, 0, 0), (0, 0), (0, -1, 0, 255), (0, 0, 0, 0, 0)])
def test_invalid_colors_are_rejected(color):
    with pytest.raises(ValueError):
        build_palette_lut(lambda *args: color, 3, 5)


def test_list_palette_names():
    assert list_palette_names() == ["Hue", "Classic", "Pastel", "Grayscale"]
