"""
Newton fractal computation functions using Numba JIT compilation.

This module contains the performance-critical kernels for the Newton
fractal of f(z) = z^n - 1:
- Newton iteration for a single starting coordinate
- Classification of the converged value against the n roots of unity
- Pixel to complex-plane mapping over a fixed, aspect-preserving viewport
- Parallel rendering of a full RGBA buffer through a palette lookup table

All complex arithmetic is done on (real, imag) float64 pairs with the
same exponentiation routine for every pixel, and nothing is compiled with
fastmath, so renders are bit-for-bit reproducible.
"""

import math
import threading

import numpy as np
from numba import jit, prange

from .colormaps import build_palette
from .params import NO_ROOT, FractalParameters, IterationResult


# The shorter image side spans [-VIEWPORT_RADIUS, VIEWPORT_RADIUS]
VIEWPORT_RADIUS = 2.0

# |z^n - 1| below this counts as converged
TOLERANCE = 1e-6

# |f'(z)| below this counts as zero (z is at or next to the origin)
DERIVATIVE_EPSILON = 1e-14

# Numba's workqueue threading layer (its fallback when neither TBB nor
# OpenMP is installed) aborts on concurrent parallel launches, so every
# launch of a prange kernel is serialized through this lock.
KERNEL_LOCK = threading.Lock()


@jit(nopython=True, cache=True)
def complex_pow_n(zr, zi, n):
    """Compute z^n for integer n >= 0 using repeated squaring."""
    if n == 0:
        return 1.0, 0.0
    if n == 1:
        return zr, zi

    result_r, result_i = 1.0, 0.0
    base_r, base_i = zr, zi

    while n > 0:
        if n % 2 == 1:
            new_r = result_r * base_r - result_i * base_i
            new_i = result_r * base_i + result_i * base_r
            result_r, result_i = new_r, new_i
        new_r = base_r * base_r - base_i * base_i
        new_i = 2 * base_r * base_i
        base_r, base_i = new_r, new_i
        n //= 2

    return result_r, result_i


@jit(nopython=True, cache=True)
def pixel_to_plane(px, py, width, height):
    """
    Map a pixel position to (real, imag) in the complex plane.

    Both axes use the same scale, chosen so the shorter side covers
    [-2, 2]. For even dimensions pixel (width/2, height/2) is exactly 0.
    """
    step = 2.0 * VIEWPORT_RADIUS / min(width, height)
    return (px - width * 0.5) * step, (py - height * 0.5) * step


@jit(nopython=True, cache=True)
def classify_root(zr, zi, n):
    """Index k of the root of unity exp(2*pi*i*k/n) nearest in angle to z."""
    turns = math.atan2(zi, zr) * n / (2.0 * math.pi)
    k = int(math.floor(turns + 0.5))
    return (k + n) % n


@jit(nopython=True, cache=True)
def newton_iterate(cr, ci, n, max_iter):
    """
    Run Newton's method for z^n - 1 starting at c.

    Args:
        cr, ci: Real and imaginary parts of the starting coordinate
        n: Polynomial degree (>= 2)
        max_iter: Iteration cap (>= 1)

    Returns:
        (root_index, iterations). root_index is NO_ROOT when the
        iteration ran out of steps, hit a zero derivative, or overflowed.
    """
    zr, zi = cr, ci

    for iteration in range(max_iter):
        # z^(n-1) feeds both f(z) and f'(z)
        pr, pi = complex_pow_n(zr, zi, n - 1)
        fr = pr * zr - pi * zi - 1.0
        fi = pr * zi + pi * zr

        if fr * fr + fi * fi < TOLERANCE * TOLERANCE:
            return classify_root(zr, zi, n), iteration

        dr = n * pr
        di = n * pi
        d2 = dr * dr + di * di
        if d2 < DERIVATIVE_EPSILON * DERIVATIVE_EPSILON:
            return NO_ROOT, iteration

        # z <- z - f(z) / f'(z)
        zr -= (fr * dr + fi * di) / d2
        zi -= (fi * dr - fr * di) / d2

        if not (math.isfinite(zr) and math.isfinite(zi)):
            return NO_ROOT, iteration + 1

    return NO_ROOT, max_iter


@jit(nopython=True, parallel=True, cache=True)
def render_newton(width, height, n, max_iter, lut, out):
    """
    Render the fractal into an RGBA buffer.

    Rows are distributed across threads; every pixel writes only its own
    slot, so no synchronization is needed.

    Args:
        width, height: Image dimensions in pixels
        n: Polynomial degree
        max_iter: Iteration cap
        lut: (n + 1, max_iter + 1, 4) uint8 palette table, row n is "no root"
        out: (height, width, 4) uint8 output array (modified in place)
    """
    for py in prange(height):
        for px in range(width):
            cr, ci = pixel_to_plane(px, py, width, height)
            root, iteration = newton_iterate(cr, ci, n, max_iter)
            row = root if root >= 0 else n
            out[py, px, 0] = lut[row, iteration, 0]
            out[py, px, 1] = lut[row, iteration, 1]
            out[py, px, 2] = lut[row, iteration, 2]
            out[py, px, 3] = lut[row, iteration, 3]


@jit(nopython=True, parallel=True, cache=True)
def compute_basins_into(width, height, n, max_iter, roots, iterations):
    """Fill root-index and iteration-count maps (NO_ROOT for no convergence)."""
    for py in prange(height):
        for px in range(width):
            cr, ci = pixel_to_plane(px, py, width, height)
            root, iteration = newton_iterate(cr, ci, n, max_iter)
            roots[py, px] = root
            iterations[py, px] = iteration


def iterate(c, n, max_iter):
    """
    Iterate a single starting coordinate.

    Args:
        c: Complex starting point
        n: Polynomial degree (>= 2)
        max_iter: Iteration cap (>= 1)

    Returns:
        IterationResult with root_index None when the point did not converge
    """
    c = complex(c)
    root, iterations = newton_iterate(c.real, c.imag, int(n), int(max_iter))
    return IterationResult(None if root == NO_ROOT else int(root), int(iterations))


def pixel_to_complex(px, py, width, height):
    """Complex coordinate of pixel (px, py) in a width x height image."""
    re, im = pixel_to_plane(px, py, width, height)
    return complex(re, im)


def render(params, palette=None, out=None):
    """
    Render a Newton fractal.

    Args:
        params: FractalParameters snapshot
        palette: Palette name, color function, or None for the default
        out: Optional (height, width, 4) uint8 array to render into

    Returns:
        (height, width, 4) uint8 RGBA array, row-major. out.tobytes()
        is the tight width * height * 4 byte buffer.
    """
    shape = (params.height, params.width, 4)
    if out is None:
        out = np.empty(shape, dtype=np.uint8)
    elif out.shape != shape or out.dtype != np.uint8 or not out.flags.c_contiguous:
        raise ValueError(
            f"output buffer must be a C-contiguous uint8 array of shape {shape}, "
            f"got {out.dtype} {out.shape}"
        )

    lut = build_palette(palette, params.n, params.max_iter)
    with KERNEL_LOCK:
        render_newton(params.width, params.height, params.n, params.max_iter, lut, out)
    return out


def compute_basins(params):
    """
    Compute the raw per-pixel iteration results.

    Returns:
        (roots, iterations): two (height, width) int32 arrays. roots holds
        the root index of each pixel or NO_ROOT (-1).
    """
    roots = np.empty((params.height, params.width), dtype=np.int32)
    iterations = np.empty((params.height, params.width), dtype=np.int32)
    with KERNEL_LOCK:
        compute_basins_into(params.width, params.height, params.n, params.max_iter,
                            roots, iterations)
    return roots, iterations


def warmup_jit():
    """
    Warm up JIT compilation with a tiny render.

    Call this once at startup to pre-compile the Numba functions,
    avoiding a delay on first actual use.
    """
    params = FractalParameters(width=8, height=8, n=3, max_iter=4)
    render(params)
    compute_basins(params)
    iterate(1.0, 3, 4)
