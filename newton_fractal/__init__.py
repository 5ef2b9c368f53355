"""
Newton Fractal Explorer Package

An interactive Newton fractal viewer for f(z) = z^n - 1, using Numba
for the parallel CPU render kernel and Pygame for display.

Quick Start:
    from newton_fractal import FractalParameters, render
    image = render(FractalParameters(width=512, height=512, n=3, max_iter=60))
    rgba_bytes = image.tobytes()

Or from command line:
    python -m newton_fractal

Package Structure:
    - params.py: FractalParameters and IterationResult
    - compute.py: JIT-compiled Newton iteration and render kernels
    - colormaps.py: Palettes mapping (root, iterations) to RGBA
    - renderer.py: Background rendering with request coalescing
    - menu.py: Controls pane and settings.json loading
    - app.py: Main application and event loop

Controls:
    - Sliders: resolution, n (power), max_iter
    - Auto render checkbox / Render Now button (or R)
    - S: Save the current image
    - ESC: Quit
"""

from .params import NO_ROOT, FractalParameters, IterationResult
from .compute import compute_basins, iterate, pixel_to_complex, render
from .colormaps import PALETTES, build_palette_lut, get_palette, list_palette_names
from .renderer import NewtonRenderer

__version__ = "1.0.0"
__all__ = [
    "NO_ROOT",
    "FractalParameters",
    "IterationResult",
    "compute_basins",
    "iterate",
    "pixel_to_complex",
    "render",
    "PALETTES",
    "build_palette_lut",
    "get_palette",
    "list_palette_names",
    "NewtonRenderer",
    "run",
]


def run(resolution=None, n=None, max_iter=None):
    """Start the interactive explorer (imports pygame on demand)."""
    from .app import run as _run
    _run(resolution, n, max_iter)
