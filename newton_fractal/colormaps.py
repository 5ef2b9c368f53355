"""
Palette definitions for Newton fractal visualization.

A palette is a plain function

    color_fn(root_index, iterations, n, max_iter) -> (r, g, b) or (r, g, b, a)

where root_index is NO_ROOT (-1) for pixels that did not converge. The
render kernel never calls it directly: build_palette_lut() evaluates the
function once for every (root_index, iterations) pair and the JIT code
indexes the resulting (n + 1, max_iter + 1, 4) uint8 table, row n being
the "no root" row.

To add a new palette:
1. Define a color_xxx() function with the signature above
2. Add it to the PALETTES dictionary at the bottom of this file
"""

import numpy as np

from .params import NO_ROOT


NO_ROOT_COLOR = (0, 0, 0, 255)

# Ten well separated colors for the Classic palette
CLASSIC_COLORS = [
    (230, 57, 70),
    (42, 157, 143),
    (69, 123, 157),
    (244, 162, 97),
    (131, 56, 236),
    (233, 196, 106),
    (58, 134, 255),
    (255, 0, 110),
    (128, 185, 24),
    (141, 153, 174),
]


def hsv_to_rgb(h, s, v):
    """Convert HSV (0-1 range) to RGB (0-255 range)."""
    if s == 0:
        r = g = b = int(v * 255)
        return (r, g, b)

    h = (h % 1.0) * 6
    i = int(h)
    f = h - i
    p = v * (1 - s)
    q = v * (1 - s * f)
    t = v * (1 - s * (1 - f))

    if i == 0:
        r, g, b = v, t, p
    elif i == 1:
        r, g, b = q, v, p
    elif i == 2:
        r, g, b = p, v, t
    elif i == 3:
        r, g, b = p, q, v
    elif i == 4:
        r, g, b = t, p, v
    else:
        r, g, b = v, p, q

    return (int(r * 255), int(g * 255), int(b * 255))


def shade(iterations, max_iter):
    """
    Brightness factor for a converged pixel.

    1.0 for immediate convergence, falling towards 0.15 as the iteration
    count approaches max_iter. The power < 1 keeps fast basins bright.
    """
    t = min(1.0, iterations / max_iter)
    return 1.0 - 0.85 * t ** 0.6


def color_hue(root_index, iterations, n, max_iter):
    """
    Hue palette: one hue per root, evenly spaced around the color wheel.

    Root k gets hue k/n, so root 0 (z = 1) is red.
    """
    if root_index == NO_ROOT:
        return NO_ROOT_COLOR
    return hsv_to_rgb(root_index / n, 0.85, shade(iterations, max_iter))


def color_classic(root_index, iterations, n, max_iter):
    """
    Classic palette: a fixed table of distinguishable colors.

    Falls back to the hue rotation for roots past the end of the table.
    """
    if root_index == NO_ROOT:
        return NO_ROOT_COLOR
    if root_index >= len(CLASSIC_COLORS):
        return color_hue(root_index, iterations, n, max_iter)
    v = shade(iterations, max_iter)
    r, g, b = CLASSIC_COLORS[root_index]
    return (int(r * v), int(g * v), int(b * v))


def color_pastel(root_index, iterations, n, max_iter):
    """Pastel palette: hue rotation at low saturation."""
    if root_index == NO_ROOT:
        return NO_ROOT_COLOR
    return hsv_to_rgb(root_index / n + 0.08, 0.35, shade(iterations, max_iter))


def color_grayscale(root_index, iterations, n, max_iter):
    """
    Grayscale palette: one grey level per root.

    Levels run from 0.4 to 1.0 so no root is ever confused with black.
    """
    if root_index == NO_ROOT:
        return NO_ROOT_COLOR
    level = 0.4 + 0.6 * root_index / (n - 1)
    g = int(255 * level * shade(iterations, max_iter))
    return (g, g, g)


# Registry of all available palettes.
# Keys are display names, values are color functions.
# Add new palettes here to make them available in the UI.
PALETTES = {
    'Hue': color_hue,
    'Classic': color_classic,
    'Pastel': color_pastel,
    'Grayscale': color_grayscale,
}

DEFAULT_PALETTE = 'Hue'


def build_palette_lut(color_fn, n, max_iter):
    """
    Evaluate a color function over every (root_index, iterations) pair.

    Args:
        color_fn: Function (root_index, iterations, n, max_iter) -> RGB(A)
        n: Number of roots
        max_iter: Iteration cap

    Returns:
        (n + 1, max_iter + 1, 4) uint8 array; row n holds the colors for
        pixels that did not converge.

    Raises:
        ValueError if color_fn returns something that is not 3 or 4
        channels in 0..255
    """
    lut = np.zeros((n + 1, max_iter + 1, 4), dtype=np.uint8)
    for row in range(n + 1):
        root_index = row if row < n else NO_ROOT
        for iterations in range(max_iter + 1):
            color = tuple(color_fn(root_index, iterations, n, max_iter))
            if len(color) == 3:
                color = color + (255,)
            if len(color) != 4 or any(not 0 <= c <= 255 for c in color):
                raise ValueError(
                    f"palette returned invalid color {color!r} for "
                    f"root {root_index}, iteration {iterations}"
                )
            lut[row, iterations] = color
    return lut


def get_palette(name, n, max_iter):
    """
    Get a palette lookup table by name.

    Args:
        name: Key from PALETTES dictionary
        n: Number of roots
        max_iter: Iteration cap

    Returns:
        Palette table (n + 1, max_iter + 1, 4) of uint8 RGBA values

    Raises:
        KeyError if name not found
    """
    return build_palette_lut(PALETTES[name], n, max_iter)


def build_palette(palette, n, max_iter):
    """Resolve a palette name, color function or None (default) to a table."""
    if palette is None:
        palette = DEFAULT_PALETTE
    if isinstance(palette, str):
        return get_palette(palette, n, max_iter)
    return build_palette_lut(palette, n, max_iter)


def list_palette_names():
    """Get list of available palette names."""
    return list(PALETTES.keys())
