"""
Main application module for the Newton fractal explorer.

Contains the NewtonApp class which handles:
- Window setup and main loop
- Keyboard input and the controls pane
- Deciding when to request a render (auto render or on demand)
- Displaying and saving the rendered image
"""

import os
from datetime import datetime

import pygame

from .compute import warmup_jit
from .menu import Menu, get_setting
from .params import FractalParameters
from .renderer import NewtonRenderer


class NewtonApp:
    """
    Main application class for the Newton fractal explorer.

    Handles the pygame window, event loop, and coordinates between the
    renderer, the controls pane, and the display.
    """

    # Default configuration
    DEFAULT_WINDOW_SIZE = (1280, 900)
    DEFAULT_PANEL_WIDTH = 360
    PADDING = 10
    BACKGROUND = (20, 20, 26)
    TITLE = "Newton Fractal"

    def __init__(self, resolution=None, n=None, max_iter=None):
        """
        Initialize the application.

        Args:
            resolution: Initial image width and height in pixels
            n: Initial polynomial power
            max_iter: Initial iteration cap

        Values outside the slider ranges are clamped.
        """
        self.width, self.height = get_setting('window_size', self.DEFAULT_WINDOW_SIZE)
        self.panel_width = get_setting('panel_width', self.DEFAULT_PANEL_WIDTH)
        self.save_directory = os.path.expanduser(get_setting('save_directory', '.'))
        self.overrides = (resolution, n, max_iter)

        # Pygame state (initialized in run())
        self.screen = None
        self.clock = None

        # Components
        self.renderer = None
        self.menu = None

        # Display state
        self.current_image = None
        self.current_params = None
        self.current_surface = None
        self.display_surface = None

        self.needs_render = True
        self.running = False

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        self._init_components()
        self._warmup_and_initial_render()

        self.running = True
        while self.running:
            self._handle_events()

            if self.menu.save_requested:
                self.menu.save_requested = False
                self._save_image()

            self._check_render_result()
            self._maybe_start_render()
            self._draw()

            self.clock.tick(60)

        pygame.quit()

    def _init_pygame(self):
        """Initialize pygame and create window."""
        pygame.init()
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.DOUBLEBUF)
        pygame.display.set_caption(self.TITLE)
        self.clock = pygame.time.Clock()

    def _init_components(self):
        """Initialize renderer and controls pane."""
        self.menu = Menu(self.width - self.panel_width, 0,
                         width=self.panel_width, height=self.height)

        resolution, n, max_iter = self.overrides
        if resolution is not None:
            self.menu.resolution_slider.value = self.menu.resolution_slider.clamp(resolution)
        if n is not None:
            self.menu.power_slider.value = self.menu.power_slider.clamp(n)
        if max_iter is not None:
            self.menu.iter_slider.value = self.menu.iter_slider.clamp(max_iter)

        self.renderer = NewtonRenderer(palette=self.menu.palette)

    def _warmup_and_initial_render(self):
        """Warm up JIT and do initial render."""
        pygame.display.set_caption("Compiling (first run only)...")
        pygame.display.flip()
        warmup_jit()

        params = self.snapshot()
        image = self.renderer.render(params)
        self._show_image(image, params, self.renderer.last_render_ms)
        self.needs_render = False

    def snapshot(self):
        """Current control values as an immutable parameter snapshot."""
        return FractalParameters(
            width=self.menu.resolution,
            height=self.menu.resolution,
            n=self.menu.n,
            max_iter=self.menu.max_iter,
        )

    def _handle_events(self):
        """Process all pending pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
                continue

            # Controls get first crack at events
            handled, _ = self.menu.handle_event(event)
            if handled:
                continue

            if event.type == pygame.KEYDOWN:
                self._handle_key(event)

    def _handle_key(self, event):
        """Handle keyboard input."""
        if event.key == pygame.K_r:
            self.needs_render = True
        elif event.key == pygame.K_s:
            self._save_image()
        elif event.key == pygame.K_ESCAPE:
            self.running = False

    def _maybe_start_render(self):
        """Request a render when auto render is on or one was asked for."""
        if self.menu.render_requested:
            self.menu.render_requested = False
            self.needs_render = True

        if not (self.menu.auto_render or self.needs_render):
            return

        self.renderer.update_settings(palette=self.menu.palette)
        self.renderer.compute_async(self.snapshot())
        if self.needs_render and not self.menu.auto_render:
            pygame.display.set_caption("Computing...")
        self.needs_render = False

    def _check_render_result(self):
        """Check if async render has completed."""
        image, params, elapsed_ms = self.renderer.get_result()
        if image is not None:
            self._show_image(image, params, elapsed_ms)

    def _show_image(self, image, params, elapsed_ms):
        """Turn an RGBA buffer into the surfaces used for display and saving."""
        self.current_image = image
        self.current_params = params

        data = image.tobytes()
        surface = pygame.image.frombuffer(data, (params.width, params.height), 'RGBA')
        # Row 0 is the bottom of the plane; pygame draws row 0 at the top
        self.current_surface = pygame.transform.flip(surface, False, True)

        size = self._image_size()
        self.display_surface = pygame.transform.scale(self.current_surface, (size, size))

        if elapsed_ms is not None:
            pygame.display.set_caption(f"{self.TITLE} [{elapsed_ms:.2f} ms]")

    def _image_size(self):
        """Side of the largest square that fits the image pane."""
        avail_w = self.width - self.panel_width - 2 * self.PADDING
        avail_h = self.height - 2 * self.PADDING
        return max(50, min(avail_w, avail_h))

    def _save_image(self):
        """Save the current image at full resolution as a PNG."""
        if self.current_surface is None:
            return

        p = self.current_params
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = os.path.join(
            self.save_directory,
            f"newton_n{p.n}_{p.width}x{p.height}_i{p.max_iter}_{timestamp}.png",
        )

        try:
            os.makedirs(self.save_directory, exist_ok=True)
            pygame.image.save(self.current_surface, filename)
        except (pygame.error, OSError) as e:
            print(f"Could not save image to {filename}: {e}")
            pygame.display.set_caption(f"{self.TITLE} - save failed")
            return

        pygame.display.set_caption(f"Saved: {os.path.basename(filename)} - {self.TITLE}")
        print(f"Image saved to: {filename}")

    def _draw(self):
        """Draw the current frame."""
        self.screen.fill(self.BACKGROUND)

        if self.display_surface is not None:
            pane_w = self.width - self.panel_width
            size = self.display_surface.get_width()
            x = (pane_w - size) // 2
            y = (self.height - size) // 2
            self.screen.blit(self.display_surface, (x, y))

        self.menu.draw(self.screen)

        pygame.display.flip()


def run(resolution=None, n=None, max_iter=None):
    """
    Run the Newton fractal explorer.

    Args:
        resolution: Image width and height (default from settings.json)
        n: Polynomial power (default from settings.json)
        max_iter: Maximum iterations (default from settings.json)
    """
    app = NewtonApp(resolution, n, max_iter)
    try:
        app.run()
    except KeyboardInterrupt:
        pygame.quit()
