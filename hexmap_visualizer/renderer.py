"""PyGame-based renderer for the hex lattice."""

from typing import Optional

try:
    import pygame
    HAS_PYGAME = True
except ImportError:
    HAS_PYGAME = False
    pygame = None  # type: ignore

from harmonic_hexmap import config as engine_config
from harmonic_hexmap.engine import RecomputeCompleted
from harmonic_hexmap.heatmap import Factor, lerp_color
from harmonic_hexmap.intervals import (
    ChordAnnotation,
    ReferenceInterval,
    annotate_chord,
    annotation_color,
    reference_intervals,
)
from harmonic_hexmap.lut import RGB
from harmonic_hexmap.main import HexmapApp

from . import config
from .layout import Layout
from .state import PointerState, next_edo

FACTOR_KEYS = {
    "z": Factor.CONSONANCE,
    "x": Factor.CLARITY,
    "v": Factor.TUNING,
}


def cents_to_x(cents: float, width: int, margin: int = config.LINEAR_VIEW_MARGIN) -> float:
    """Horizontal position of an interval (0-1200 cents) in the linear view."""
    return margin + (cents / 1200.0) * (width - margin * 2)


def reference_bar_height(interval: ReferenceInterval, height: int) -> float:
    """Bar height of a reference interval: simpler ratios stand taller."""
    complexity = interval.n * interval.d
    scale = 1.0 - min(complexity, 300) / 300.0
    if interval.limit <= 3:
        scale = 1.0
    return height * (0.3 + 0.5 * scale)


def shows_reference_label(interval: ReferenceInterval) -> bool:
    return interval.n * interval.d < 100 or interval.limit <= 5


def text_color_for(fill: RGB) -> RGB:
    """Readable text color on top of a heatmap fill."""
    brightness = sum(fill) / 3.0
    if brightness > config.TEXT_BRIGHTNESS_THRESHOLD:
        return config.COLOR_TEXT_DARK
    return config.COLOR_TEXT_LIGHT


class Renderer:
    """PyGame-based renderer and input handler for the hexmap."""

    def __init__(self, app: HexmapApp):
        """Initialize the renderer.

        Args:
            app: Running app (engine, playback and OSC output)
        """
        if not HAS_PYGAME:
            raise ImportError(
                "pygame is required for visualization. "
                "Install with: pip install pygame"
            )

        self.app = app
        self.engine = app.engine
        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.font: Optional[pygame.font.Font] = None
        self.font_small: Optional[pygame.font.Font] = None
        self.running = False

        self.map_height = config.WINDOW_HEIGHT - config.LINEAR_VIEW_HEIGHT - config.STATUS_BAR_HEIGHT
        self.layout = Layout(config.HEX_SIZE, (config.WINDOW_WIDTH / 2, self.map_height / 2))
        self.pointer = PointerState()

        self._references = reference_intervals(
            config.REFERENCE_MAX_LIMIT, config.REFERENCE_MAX_DENOMINATOR
        )
        self._annotations: list[ChordAnnotation] = []
        self.engine.subscribe(self._on_recompute)
        self._update_annotations()

    def start(self) -> None:
        """Initialize PyGame and create window."""
        pygame.init()
        pygame.font.init()

        self.screen = pygame.display.set_mode(
            (config.WINDOW_WIDTH, config.WINDOW_HEIGHT)
        )
        pygame.display.set_caption(config.WINDOW_TITLE)

        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 24)
        self.font_small = pygame.font.Font(None, 18)
        self.running = True

    def stop(self) -> None:
        """Shut down PyGame."""
        self.running = False
        self.engine.unsubscribe(self._on_recompute)
        pygame.quit()

    def _on_recompute(self, event: RecomputeCompleted) -> None:
        self._update_annotations()

    def _update_annotations(self) -> None:
        self._annotations = annotate_chord(self.engine.active_cells(), self.engine.tuning.edo)

    # =========================================================================
    # Input
    # =========================================================================

    def handle_events(self) -> bool:
        """Process PyGame events. Returns False if should quit."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                self._handle_key(event)
            elif event.type == pygame.KEYUP:
                if event.key == pygame.K_SPACE:
                    self.app.stop_playback()
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self.pointer.press(event.pos)
            elif event.type == pygame.MOUSEMOTION:
                self._handle_motion(event.pos)
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                if self.pointer.release():
                    self._click(self.pointer.start)
            elif event.type == pygame.MOUSEWHEEL:
                factor = config.ZOOM_IN_FACTOR if event.y > 0 else config.ZOOM_OUT_FACTOR
                self.layout.zoom(factor, config.HEX_SIZE_MIN, config.HEX_SIZE_MAX)
        return True

    def _handle_motion(self, pos: tuple[int, int]) -> None:
        if self.pointer.dragging:
            dx, dy = self.pointer.move(pos)
            self.layout.pan(dx, dy)
            return
        coord = self.layout.pixel_to_hex(pos)
        self.pointer.hovered = coord if pos[1] < self.map_height and coord in self.engine.grid else None

    def _click(self, pos: tuple[int, int]) -> None:
        if pos[1] >= self.map_height:
            return
        coord = self.layout.pixel_to_hex(pos)
        if coord in self.engine.grid:
            self.app.toggle_cell(coord)

    def _handle_key(self, event) -> None:
        engine = self.engine
        key = event.key

        if pygame.K_1 <= key <= pygame.K_9:
            engine.select_slot(key - pygame.K_1 + 1)
        elif key == pygame.K_0:
            engine.select_slot(10)
        elif key in (pygame.K_LEFTBRACKET, pygame.K_RIGHTBRACKET):
            direction = 1 if key == pygame.K_RIGHTBRACKET else -1
            engine.set_edo(next_edo(engine.tuning.edo, list(engine.config.presets), direction))
        elif key in (pygame.K_MINUS, pygame.K_EQUALS):
            step = config.COMPLEXITY_STEP if key == pygame.K_EQUALS else -config.COMPLEXITY_STEP
            engine.set_complexity_weight(engine.complexity_weight + step)
        elif key in (pygame.K_UP, pygame.K_DOWN):
            step = config.SENSITIVITY_STEP if key == pygame.K_UP else -config.SENSITIVITY_STEP
            engine.set_sensitivity(min(engine_config.SENSITIVITY_MAX, engine.sensitivity + step))
        elif key in (pygame.K_COMMA, pygame.K_PERIOD):
            step = config.BANDWIDTH_STEP if key == pygame.K_PERIOD else -config.BANDWIDTH_STEP
            scale = engine.filters.bandwidth_scale + step
            engine.set_bandwidth(max(engine_config.BANDWIDTH_MIN, min(engine_config.BANDWIDTH_MAX, scale)))
        elif pygame.K_F1 <= key <= pygame.K_F7:
            limit = engine_config.FILTER_LIMITS[key - pygame.K_F1]
            engine.set_limit_enabled(limit, not engine.filters.limit_enabled(limit))
        elif pygame.key.name(key) in FACTOR_KEYS:
            factor = FACTOR_KEYS[pygame.key.name(key)]
            engine.set_factor_enabled(factor, not engine.filters.factor_enabled(factor))
        elif key == pygame.K_SPACE:
            if event.mod & pygame.KMOD_SHIFT:
                self.app.start_arpeggio()
            else:
                self.app.play_chord()
        elif key == pygame.K_c:
            engine.clear_slot()
        elif key == pygame.K_BACKSPACE:
            engine.clear_all()

    # =========================================================================
    # Drawing
    # =========================================================================

    def render(self, dt: float) -> None:
        """Render one frame."""
        if not self.screen:
            return

        self.screen.fill(config.COLOR_BACKGROUND)

        self.screen.set_clip(pygame.Rect(0, 0, config.WINDOW_WIDTH, self.map_height))
        self._draw_cells()
        self.screen.set_clip(None)

        self._draw_info(10, 10)
        self._draw_legend(config.WINDOW_WIDTH - 130, 10)
        self._draw_linear_view(0, self.map_height, config.WINDOW_WIDTH, config.LINEAR_VIEW_HEIGHT)
        self._draw_status_bar(0, config.WINDOW_HEIGHT - config.STATUS_BAR_HEIGHT,
                              config.WINDOW_WIDTH, config.STATUS_BAR_HEIGHT)

        pygame.display.flip()

    def _cell_colors(self, cell) -> tuple[RGB, RGB]:
        """Fill and text color of a cell."""
        if self.engine.is_active(cell.coord):
            return config.COLOR_CELL_ACTIVE, config.COLOR_TEXT_ACTIVE

        visual = self.engine.visual(cell.coord)
        if visual is not None:
            fill = visual.color
            text = text_color_for(fill)
        elif cell.is_white_key:
            fill = config.COLOR_CELL_WHITE_KEY
            text = config.COLOR_TEXT_DARK
        else:
            fill = config.COLOR_CELL_BLACK_KEY
            text = config.COLOR_TEXT_MUTED

        if self.pointer.hovered == cell.coord:
            fill = lerp_color(fill, config.COLOR_HOVER, config.HOVER_MIX)
            text = (255, 255, 255)
        return fill, text

    def _draw_cells(self) -> None:
        if not self.font_small:
            return

        size = self.layout.size
        for cell in self.engine.grid.cells():
            cx, cy = self.layout.hex_to_pixel(cell.coord)
            if cx < -size or cx > config.WINDOW_WIDTH + size or cy < -size or cy > self.map_height + size:
                continue

            active = self.engine.is_active(cell.coord)
            fill, text_color = self._cell_colors(cell)
            corners = self.layout.corners(cell.coord)
            pygame.draw.polygon(self.screen, fill, corners)
            stroke = config.COLOR_CELL_ACTIVE if active else config.COLOR_CELL_STROKE
            pygame.draw.polygon(self.screen, stroke, corners, 3 if active else 1)

            if size >= 14:
                font = self.font if active else self.font_small
                label = font.render(str(cell.note_index), True, text_color)
                self.screen.blit(label, label.get_rect(center=(cx, cy)))

            # Root mark
            if cell.note_index == 0:
                pygame.draw.rect(self.screen, config.COLOR_ROOT_MARK,
                                 pygame.Rect(cx - 4, cy + 8, 8, 2))

    def _draw_info(self, x: int, y: int) -> None:
        """Draw details of the hovered cell."""
        if not self.font:
            return

        coord = self.pointer.hovered
        cell = self.engine.grid.cell(coord) if coord is not None else None
        if cell is None:
            lines = ["Click to activate notes."]
        else:
            lines = [f"Note: {cell.note_index}  Step: {cell.pitch_step}  {cell.frequency_hz:.2f} Hz"]
            visual = self.engine.visual(coord)
            if visual is not None and visual.label:
                lines.append(f"Interval: {visual.label}")

        for i, line in enumerate(lines):
            label = self.font.render(line, True, config.COLOR_TEXT)
            self.screen.blit(label, (x, y + i * 22))

    def _draw_legend(self, x: int, y: int) -> None:
        """Draw limit colors; disabled limits are dimmed."""
        if not self.font_small:
            return

        filters = self.engine.filters
        for i, limit in enumerate(engine_config.FILTER_LIMITS):
            color = engine_config.LIMIT_COLORS.get(limit, engine_config.COMPLEX_LIMIT_COLOR)
            enabled = filters.limit_enabled(limit)
            if not enabled:
                color = lerp_color(color, config.COLOR_BACKGROUND, 0.75)
            row_y = y + i * 20
            pygame.draw.rect(self.screen, color, pygame.Rect(x, row_y, 14, 14))
            text = f"F{i + 1} {config.LEGEND_LABELS.get(limit, f'Lim {limit}')}"
            text_color = config.COLOR_TEXT if enabled else config.COLOR_TEXT_MUTED
            self.screen.blit(self.font_small.render(text, True, text_color), (x + 20, row_y))

    def _draw_linear_view(self, x: int, y: int, w: int, h: int) -> None:
        """Draw the octave as a line: JI references, EDO steps, chord notes."""
        if not self.font_small:
            return

        pygame.draw.rect(self.screen, config.COLOR_PANEL, (x, y, w, h))
        bottom = y + h

        # Just intonation references
        for interval in self._references:
            bx = cents_to_x(interval.cents, w)
            bar_h = reference_bar_height(interval, h)
            bar_color = lerp_color(config.COLOR_PANEL, interval.color, 0.3)
            pygame.draw.rect(self.screen, bar_color, pygame.Rect(bx - 1, bottom - bar_h, 2, bar_h))
            if shows_reference_label(interval):
                label_color = lerp_color(config.COLOR_PANEL, interval.color, 0.7)
                label = self.font_small.render(interval.label, True, label_color)
                self.screen.blit(label, label.get_rect(midbottom=(bx, bottom - bar_h - 2)))

        # Axis
        axis_y = bottom - 20
        pygame.draw.line(self.screen, config.COLOR_AXIS,
                         (config.LINEAR_VIEW_MARGIN, axis_y),
                         (w - config.LINEAR_VIEW_MARGIN, axis_y))

        # EDO steps
        edo = self.engine.tuning.edo
        for i in range(edo + 1):
            tx = cents_to_x(1200.0 * i / edo, w)
            pygame.draw.rect(self.screen, config.COLOR_EDO_TICK, pygame.Rect(tx, bottom - 25, 1, 8))

        # Sounding notes and their nearest simple ratios
        for annotation in self._annotations:
            nx = cents_to_x(annotation.edo_cents, w)
            pygame.draw.circle(self.screen, config.COLOR_CELL_ACTIVE, (int(nx), axis_y), 4)
            if annotation.match is None:
                continue

            ji_x = cents_to_x(annotation.ji_cents, w)
            pygame.draw.line(self.screen, annotation_color(annotation),
                             (nx, axis_y), (ji_x, bottom - 60), 2)
            ratio = self.font.render(annotation.match.label, True, config.COLOR_CELL_ACTIVE)
            self.screen.blit(ratio, ratio.get_rect(midbottom=(ji_x, bottom - 62)))

            deviation = annotation.deviation_cents
            err_color = config.COLOR_ERROR_LARGE if abs(deviation) > config.LARGE_ERROR_CENTS else config.COLOR_ERROR_SMALL
            err = self.font_small.render(f"{deviation:+.1f}¢", True, err_color)
            self.screen.blit(err, err.get_rect(midbottom=(nx, bottom - 30)))

    def _draw_status_bar(self, x: int, y: int, w: int, h: int) -> None:
        """Draw engine parameters at the bottom."""
        if not self.font_small:
            return

        pygame.draw.rect(self.screen, config.COLOR_PANEL, (x, y, w, h))
        pygame.draw.line(self.screen, (60, 60, 80), (x, y), (x + w, y), 1)

        engine = self.engine
        factors = " ".join(
            name if engine.filters.factor_enabled(factor) else name.lower()
            for name, factor in (("Z:Cons", Factor.CONSONANCE), ("X:Clar", Factor.CLARITY), ("V:Tune", Factor.TUNING))
        )
        arp = "  ARP" if self.app.arpeggiator.active else ""
        text = (
            f"{engine.tuning.name}  |  Slot {engine.chords.current_slot}  |  "
            f"Complexity {engine.complexity_weight:.1f}  |  Sensitivity {engine.sensitivity}  |  "
            f"Bandwidth {engine.filters.bandwidth_scale:.2f}  |  {factors}  |  "
            f"Voices {self.app.voices.active_count}{arp}"
        )
        label = self.font_small.render(text, True, config.COLOR_TEXT)
        self.screen.blit(label, (x + 10, y + (h - label.get_height()) // 2))
