"""
Control panel for the Newton fractal explorer.

Provides integer sliders for resolution, polynomial power and maximum
iterations, an auto render checkbox, a palette dropdown, and buttons to
render on demand or save the current image.
"""

import json
import os

import pygame

from .colormaps import DEFAULT_PALETTE, list_palette_names


# Load settings from JSON file
def load_settings(path=None):
    """Load settings from settings.json file."""
    settings_path = path or os.path.join(os.path.dirname(__file__), 'settings.json')
    try:
        with open(settings_path, 'r') as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        print(f"Warning: Could not load settings.json: {e}")
        return None


# Global settings loaded from JSON
_SETTINGS = load_settings()


def get_setting(key, default):
    """Value of a top-level settings.json key, or default."""
    if _SETTINGS and key in _SETTINGS:
        return _SETTINGS[key]
    return default


class Slider:
    """A horizontal integer slider."""

    HEIGHT = 20

    def __init__(self, x, y, width, label, min_value, max_value, value):
        self.x = x
        self.y = y
        self.width = width
        self.label = label
        self.min_value = int(min_value)
        self.max_value = int(max_value)
        self.value = self.clamp(value)
        self.dragging = False

    def clamp(self, value):
        return max(self.min_value, min(self.max_value, int(value)))

    def get_rect(self):
        return pygame.Rect(self.x, self.y, self.width, self.HEIGHT)

    def value_at(self, mx):
        """Slider value for a mouse x position."""
        span = self.max_value - self.min_value
        if span == 0 or self.width <= 1:
            return self.min_value
        t = (mx - self.x) / (self.width - 1)
        t = max(0.0, min(1.0, t))
        return self.clamp(round(self.min_value + t * span))

    def handle_event(self, event):
        """Returns (handled, value_changed)."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.get_rect().collidepoint(event.pos):
                self.dragging = True
                return True, self._set_from_mouse(event.pos[0])

        elif event.type == pygame.MOUSEMOTION and self.dragging:
            return True, self._set_from_mouse(event.pos[0])

        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1 and self.dragging:
            self.dragging = False
            return True, False

        return False, False

    def _set_from_mouse(self, mx):
        old_value = self.value
        self.value = self.value_at(mx)
        return self.value != old_value

    def draw(self, screen, font, small_font):
        rect = self.get_rect()
        pygame.draw.rect(screen, (50, 50, 55), rect)
        pygame.draw.rect(screen, (80, 80, 80), rect, 1)

        span = self.max_value - self.min_value
        t = (self.value - self.min_value) / span if span else 0.0
        fill = pygame.Rect(rect.x, rect.y, int(t * rect.width), rect.height)
        pygame.draw.rect(screen, (70, 100, 140) if self.dragging else (60, 85, 120), fill)

        text = small_font.render(f"{self.label}: {self.value}", True, (220, 220, 220))
        screen.blit(text, (rect.x + 6, rect.y + 3))


class Checkbox:
    """A labelled on/off toggle."""

    SIZE = 18

    def __init__(self, x, y, label, checked=False):
        self.x = x
        self.y = y
        self.label = label
        self.checked = checked

    def get_rect(self):
        return pygame.Rect(self.x, self.y, self.SIZE, self.SIZE)

    def handle_event(self, event):
        """Returns (handled, value_changed)."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.get_rect().collidepoint(event.pos):
                self.checked = not self.checked
                return True, True
        return False, False

    def draw(self, screen, font, small_font):
        rect = self.get_rect()
        pygame.draw.rect(screen, (50, 50, 55), rect)
        pygame.draw.rect(screen, (120, 120, 120), rect, 1)
        if self.checked:
            pygame.draw.rect(screen, (100, 150, 100), rect.inflate(-6, -6))
        text = font.render(self.label, True, (220, 220, 220))
        screen.blit(text, (rect.right + 8, rect.y + 1))


class Button:
    """A clickable push button."""

    HEIGHT = 26

    def __init__(self, x, y, width, label, color=(70, 100, 70)):
        self.x = x
        self.y = y
        self.width = width
        self.label = label
        self.color = color
        self.visible = True

    def get_rect(self):
        return pygame.Rect(self.x, self.y, self.width, self.HEIGHT)

    def handle_event(self, event):
        """Returns True if the button was clicked."""
        if not self.visible:
            return False
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            return self.get_rect().collidepoint(event.pos)
        return False

    def draw(self, screen, font, small_font):
        if not self.visible:
            return
        rect = self.get_rect()
        pygame.draw.rect(screen, self.color, rect)
        border = tuple(min(255, c + 40) for c in self.color)
        pygame.draw.rect(screen, border, rect, 1)
        text = font.render(self.label, True, (230, 240, 230))
        screen.blit(text, (rect.x + (rect.width - text.get_width()) // 2,
                           rect.y + (rect.height - text.get_height()) // 2))


class Dropdown:
    """A dropdown/select component."""

    def __init__(self, x, y, width, options, selected_idx=0):
        self.x = x
        self.y = y
        self.width = width
        self.height = 24
        self.options = options
        self.selected_idx = selected_idx
        self.expanded = False
        self.hovered_idx = -1

    def get_value(self):
        return self.options[self.selected_idx]

    def set_value(self, value):
        """Select value; unknown values leave the selection unchanged."""
        if value in self.options:
            self.selected_idx = self.options.index(value)

    def get_rect(self):
        """Get the full rect including dropdown items when expanded."""
        if self.expanded:
            total_height = self.height + len(self.options) * 22
            return pygame.Rect(self.x, self.y, self.width, total_height)
        return pygame.Rect(self.x, self.y, self.width, self.height)

    def handle_event(self, event):
        """Returns (handled, value_changed)."""
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            mx, my = event.pos

            button_rect = pygame.Rect(self.x, self.y, self.width, self.height)
            if button_rect.collidepoint(mx, my):
                self.expanded = not self.expanded
                return True, False

            if self.expanded:
                item_y = self.y + self.height
                for i in range(len(self.options)):
                    item_rect = pygame.Rect(self.x, item_y, self.width, 22)
                    if item_rect.collidepoint(mx, my):
                        old_idx = self.selected_idx
                        self.selected_idx = i
                        self.expanded = False
                        return True, (old_idx != i)
                    item_y += 22

                # Click outside dropdown - close it
                self.expanded = False
                return True, False

        elif event.type == pygame.MOUSEMOTION:
            mx, my = event.pos
            self.hovered_idx = -1
            if self.expanded:
                item_y = self.y + self.height
                for i in range(len(self.options)):
                    item_rect = pygame.Rect(self.x, item_y, self.width, 22)
                    if item_rect.collidepoint(mx, my):
                        self.hovered_idx = i
                    item_y += 22

        return False, False

    def draw(self, screen, font, small_font):
        button_rect = pygame.Rect(self.x, self.y, self.width, self.height)
        pygame.draw.rect(screen, (55, 55, 55), button_rect)
        pygame.draw.rect(screen, (100, 100, 100), button_rect, 1)

        text = small_font.render(str(self.get_value()), True, (220, 220, 220))
        screen.blit(text, (self.x + 8, self.y + 5))

        arrow = "▼" if not self.expanded else "▲"
        arrow_text = small_font.render(arrow, True, (150, 150, 150))
        screen.blit(arrow_text, (self.x + self.width - 18, self.y + 5))

        if self.expanded:
            item_y = self.y + self.height
            for i, opt in enumerate(self.options):
                item_rect = pygame.Rect(self.x, item_y, self.width, 22)

                if i == self.selected_idx:
                    pygame.draw.rect(screen, (70, 100, 70), item_rect)
                elif i == self.hovered_idx:
                    pygame.draw.rect(screen, (65, 65, 65), item_rect)
                else:
                    pygame.draw.rect(screen, (50, 50, 50), item_rect)

                pygame.draw.rect(screen, (80, 80, 80), item_rect, 1)

                color = (255, 255, 255) if i == self.selected_idx else (180, 180, 180)
                text = small_font.render(str(opt), True, color)
                screen.blit(text, (self.x + 8, item_y + 4))
                item_y += 22


class Menu:
    """
    Controls pane: auto render checkbox, resolution / power / iteration
    sliders, palette dropdown, Render Now and Save Image buttons.

    handle_event() reports whether the parameters changed; the app polls
    render_requested and save_requested each frame.
    """

    # Slider ranges and defaults from settings.json, or built-in defaults
    RESOLUTION_RANGE = tuple(get_setting('resolution_range', [256, 4096]))
    POWER_RANGE = tuple(get_setting('power_range', [2, 30]))
    MAX_ITER_RANGE = tuple(get_setting('max_iter_range', [3, 200]))
    DEFAULTS = {
        'resolution': 1024,
        'n': 5,
        'max_iter': 60,
        'palette': DEFAULT_PALETTE,
        'auto_render': False,
    }
    DEFAULTS.update(get_setting('defaults', {}))

    def __init__(self, x, y, width=360, height=800):
        self.x = x
        self.y = y
        self.width = width
        self.height = height

        # Fonts
        self.font = None
        self.small_font = None

        # Requests polled by the app
        self.render_requested = False
        self.save_requested = False

        inner_x = x + 12
        inner_w = width - 24

        self.auto_checkbox = Checkbox(inner_x, y + 40, 'Auto render (each frame)',
                                      bool(self.DEFAULTS['auto_render']))
        self.resolution_slider = Slider(inner_x, y + 80, inner_w, 'Resolution',
                                        *self.RESOLUTION_RANGE, self.DEFAULTS['resolution'])
        self.power_slider = Slider(inner_x, y + 115, inner_w, 'n (power)',
                                   *self.POWER_RANGE, self.DEFAULTS['n'])
        self.iter_slider = Slider(inner_x, y + 150, inner_w, 'max_iter',
                                  *self.MAX_ITER_RANGE, self.DEFAULTS['max_iter'])

        self.palette_dropdown = Dropdown(inner_x, y + 205, inner_w, list_palette_names())
        self.palette_dropdown.set_value(self.DEFAULTS['palette'])

        self.render_button = Button(inner_x, y + 250, inner_w, 'Render Now')
        self.save_button = Button(inner_x, y + 285, inner_w, 'Save Image', color=(70, 80, 110))
        self.render_button.visible = not self.auto_render

        self.sliders = [self.resolution_slider, self.power_slider, self.iter_slider]

    @property
    def auto_render(self):
        return self.auto_checkbox.checked

    @property
    def resolution(self):
        return self.resolution_slider.value

    @property
    def n(self):
        return self.power_slider.value

    @property
    def max_iter(self):
        return self.iter_slider.value

    @property
    def palette(self):
        return self.palette_dropdown.get_value()

    def init_fonts(self):
        pygame.font.init()
        self.font = pygame.font.SysFont('Arial', 16)
        self.small_font = pygame.font.SysFont('Arial', 14)

    def get_rect(self):
        return pygame.Rect(self.x, self.y, self.width, self.height)

    def handle_event(self, event):
        """
        Handle a pygame event.
        Returns (handled, params_changed).
        """
        # An open dropdown sits on top of everything below it
        if self.palette_dropdown.expanded or event.type == pygame.MOUSEMOTION:
            handled, changed = self.palette_dropdown.handle_event(event)
            if handled:
                if changed:
                    self.render_requested = True
                return True, changed

        # Sliders keep the drag even when the pointer leaves the panel
        for slider in self.sliders:
            handled, changed = slider.handle_event(event)
            if handled:
                return True, changed

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            handled, changed = self.auto_checkbox.handle_event(event)
            if handled:
                self.render_button.visible = not self.auto_render
                return True, False

            handled, changed = self.palette_dropdown.handle_event(event)
            if handled:
                return True, changed

            if self.render_button.handle_event(event):
                self.render_requested = True
                return True, False

            if self.save_button.handle_event(event):
                self.save_requested = True
                return True, False

            if self.get_rect().collidepoint(event.pos):
                return True, False

        return False, False

    def draw(self, screen):
        if self.font is None:
            self.init_fonts()

        menu_rect = self.get_rect()
        pygame.draw.rect(screen, (40, 40, 40), menu_rect)
        pygame.draw.rect(screen, (100, 100, 100), menu_rect, 1)

        title = self.font.render('Controls', True, (230, 230, 230))
        screen.blit(title, (self.x + 12, self.y + 10))
        pygame.draw.line(screen, (90, 90, 90),
                         (self.x + 12, self.y + 32), (self.x + self.width - 12, self.y + 32))

        self.auto_checkbox.draw(screen, self.font, self.small_font)
        for slider in self.sliders:
            slider.draw(screen, self.font, self.small_font)

        label = self.small_font.render('Palette:', True, (180, 180, 180))
        screen.blit(label, (self.x + 12, self.palette_dropdown.y - 18))

        self.render_button.draw(screen, self.font, self.small_font)
        self.save_button.draw(screen, self.font, self.small_font)

        note_y = self.save_button.y + Button.HEIGHT + 20
        pygame.draw.line(screen, (90, 90, 90),
                         (self.x + 12, note_y - 8), (self.x + self.width - 12, note_y - 8))
        notes = ['Note', '- Click Render Now when auto render is off',
                 '- R: render, S: save image, ESC: quit']
        for i, line in enumerate(notes):
            text = self.small_font.render(line, True, (160, 160, 160))
            screen.blit(text, (self.x + 12, note_y + i * 18))

        # Dropdown last so its list draws over the buttons
        self.palette_dropdown.draw(screen, self.font, self.small_font)

    def point_in_menu(self, pos):
        """Check if a point is inside the controls pane."""
        return self.get_rect().collidepoint(pos) or (
            self.palette_dropdown.expanded and self.palette_dropdown.get_rect().collidepoint(pos))
