"""
Asynchronous Newton fractal renderer.

The NewtonRenderer class handles:
- Background (async) computation so the UI stays responsive
- Coalescing of render requests: only the newest pending snapshot is
  rendered, stale ones are dropped
- Palette table caching per (palette, n, max_iter)
- Timing of each kernel call for display in the window title
"""

import threading
import time

import numpy as np

from .colormaps import DEFAULT_PALETTE, build_palette
from .compute import KERNEL_LOCK, render_newton


class NewtonRenderer:
    """
    Handles async Newton fractal rendering.

    Usage:
        renderer = NewtonRenderer(palette='Hue')
        renderer.compute_async(FractalParameters(1024, 1024, 5, 60))

        # In your game loop:
        image, params, elapsed_ms = renderer.get_result()
        if image is not None:
            display(image)

    Attributes:
        palette: Palette name or color function used for new renders
        last_render_ms: Kernel time of the most recent render
    """

    def __init__(self, palette=DEFAULT_PALETTE):
        self.palette = palette
        self.last_render_ms = None

        # (key, table) for the palette table of the last render
        self._lut_cache = (None, None)

        # Async computation state
        self.computing = False
        self.result_ready = False
        self.pending_params = None
        self.result = None
        self.result_params = None
        self.result_ms = None
        self.lock = threading.Lock()
        self.idle = threading.Condition(self.lock)

    def render(self, params):
        """
        Render synchronously on the calling thread.

        Returns:
            (height, width, 4) uint8 RGBA array
        """
        out = np.empty((params.height, params.width, 4), dtype=np.uint8)
        with KERNEL_LOCK:
            lut = self._palette_lut(params)
            t0 = time.perf_counter()
            render_newton(params.width, params.height, params.n, params.max_iter, lut, out)
            self.last_render_ms = (time.perf_counter() - t0) * 1000.0
        return out

    def compute_async(self, params):
        """
        Request a render of params in the background.

        If a render is already running, params replaces any request still
        waiting behind it.
        """
        with self.lock:
            self.pending_params = params
            if not self.computing:
                self.computing = True
                thread = threading.Thread(target=self._compute_thread)
                thread.daemon = True
                thread.start()

    def _compute_thread(self):
        """Background thread: render pending requests until none are left."""
        while True:
            with self.lock:
                params = self.pending_params
                self.pending_params = None

            if params is None:
                with self.lock:
                    self.computing = False
                    self.idle.notify_all()
                break

            try:
                image = self.render(params)
                elapsed_ms = self.last_render_ms
            except Exception:
                with self.lock:
                    self.computing = False
                    self.pending_params = None
                    self.idle.notify_all()
                raise

            with self.lock:
                self.result = image
                self.result_params = params
                self.result_ms = elapsed_ms
                self.result_ready = True
                if self.pending_params is None:
                    self.computing = False
                    self.idle.notify_all()
                    break

    def wait(self, timeout=None):
        """
        Block until no render is running or pending.

        Returns:
            True if idle, False if the timeout expired first
        """
        with self.lock:
            return self.idle.wait_for(lambda: not self.computing, timeout)

    def get_result(self):
        """
        Get the latest render result if ready.

        Returns:
            Tuple of (image, params, elapsed_ms) if a new result is ready,
            (None, None, None) otherwise. The image is in source row
            order; flip it vertically for display.
        """
        with self.lock:
            if self.result_ready:
                self.result_ready = False
                return self.result, self.result_params, self.result_ms
        return None, None, None

    def update_settings(self, palette=None):
        """
        Update rendering settings.

        Args:
            palette: New palette name or color function (or None to keep current)

        Returns:
            True if any setting changed, False otherwise
        """
        changed = False
        if palette is not None and palette != self.palette:
            self.palette = palette
            self._lut_cache = (None, None)
            changed = True
        return changed

    def _palette_lut(self, params):
        key = (self.palette, params.n, params.max_iter)
        cached_key, lut = self._lut_cache
        if cached_key != key:
            lut = build_palette(self.palette, params.n, params.max_iter)
            self._lut_cache = (key, lut)
        return lut
