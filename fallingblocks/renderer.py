"""
Pygame renderer for the falling-blocks game.

Draws the board grid, active piece, ghost piece, next piece preview, held
piece preview, and a sidebar with score / best / level / lines information.
Everything is drawn from a RenderSnapshot, never from live session state.
"""

from __future__ import annotations

try:
    import pygame
except ImportError:
    pygame = None  # type: ignore[assignment]

from fallingblocks.game.geometry import Point, Shape, color_index
from fallingblocks.game.session import RenderSnapshot


# ── Color constants ───────────────────────────────────────────────────────
BACKGROUND_COLOR = (17, 17, 17)
GRID_LINE_COLOR = (60, 60, 60)
BORDER_COLOR = (200, 200, 200)
TEXT_COLOR = (255, 255, 255)
GHOST_ALPHA = 80  # transparency for ghost piece (0-255)
SIDEBAR_BG_COLOR = (20, 20, 20)
EMPTY_CELL_COLOR = (64, 64, 64)

# ── Palette, indexed by color_index(cell value) ──────────────────────────
PALETTE: tuple[tuple[int, int, int], ...] = (
    (0, 255, 255),    # I  cyan
    (255, 255, 0),    # O  yellow
    (255, 0, 255),    # T  magenta
    (0, 255, 0),      # S  green
    (255, 0, 0),      # Z  red
    (65, 105, 225),   # J  royal blue
    (255, 165, 0),    # L  orange
)


def cell_color(value: int) -> tuple[int, int, int]:
    """Return the RGB color for a board cell value (0 = empty)."""
    if value == 0:
        return EMPTY_CELL_COLOR
    return PALETTE[color_index(value)]


def shape_color(shape: Shape) -> tuple[int, int, int]:
    return cell_color(int(shape) + 1)


class GameRenderer:
    """Pygame-based render sink.

    The window is divided into:
      - Left: board area (cell_size * width) x (cell_size * height)
      - Right: sidebar with next piece, held piece, score, best, level, lines

    Attributes:
        width: Board width in cells.
        height: Board height in cells.
        cell_size: Pixel size of each grid cell.
        board_pixel_width: Pixel width of the board area.
        board_pixel_height: Pixel height of the board area.
        sidebar_width: Pixel width of the sidebar.
        screen: Pygame display surface (created on first render).
    """

    SIDEBAR_WIDTH_CELLS: int = 7

    def __init__(self, width: int = 10, height: int = 20, cell_size: int = 30) -> None:
        """Initialize the renderer.

        Does NOT create the Pygame window yet; that happens on the first
        call to render().
        """
        if pygame is None:
            raise ImportError("pygame is required for rendering. Install it: pip install pygame")

        self.width = width
        self.height = height
        self.cell_size = cell_size

        self.board_pixel_width = cell_size * width
        self.board_pixel_height = cell_size * height
        self.sidebar_width = cell_size * self.SIDEBAR_WIDTH_CELLS
        self.window_width = self.board_pixel_width + self.sidebar_width
        self.window_height = max(self.board_pixel_height, 520)

        self.screen: pygame.Surface | None = None
        self._font: pygame.font.Font | None = None
        self._initialized: bool = False

    def render(self, snap: RenderSnapshot, best: int = 0) -> None:
        """Draw ``snap`` to the screen and flip the display."""
        if not self._initialized:
            self._init_pygame()

        self.screen.fill(BACKGROUND_COLOR)
        self._draw_board(snap)
        self._draw_ghost_piece(snap)
        self._draw_cells(snap.active_cells, shape_color(snap.active_shape))
        self._draw_sidebar(snap, best)

        pygame.draw.rect(
            self.screen,
            BORDER_COLOR,
            (0, 0, self.board_pixel_width, self.board_pixel_height),
            2,
        )
        if snap.game_over:
            self._draw_game_over_overlay()

        pygame.display.flip()

    def _init_pygame(self) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        pygame.display.set_caption("Falling Blocks")
        self._font = pygame.font.SysFont("monospace", 20)
        self._initialized = True

    def _draw_block(self, x: int, y: int, size: int, color: tuple[int, int, int]) -> None:
        pygame.draw.rect(self.screen, color, (x, y, size, size))
        # Slightly darker border for 3D effect
        darker = tuple(max(0, c - 40) for c in color)
        pygame.draw.rect(self.screen, darker, (x, y, size, size), 1)

    def _draw_board(self, snap: RenderSnapshot) -> None:
        for row in range(self.height):
            for col in range(self.width):
                x = col * self.cell_size
                y = row * self.cell_size
                self._draw_block(x, y, self.cell_size, cell_color(int(snap.grid[row, col])))
                pygame.draw.rect(
                    self.screen, GRID_LINE_COLOR, (x, y, self.cell_size, self.cell_size), 1
                )

    def _draw_cells(self, cells: tuple[Point, ...], color: tuple[int, int, int]) -> None:
        for p in cells:
            if 0 <= p.x < self.width and 0 <= p.y < self.height:
                self._draw_block(p.x * self.cell_size, p.y * self.cell_size, self.cell_size, color)

    def _draw_ghost_piece(self, snap: RenderSnapshot) -> None:
        """Draw where the active piece would land, with transparency."""
        if snap.game_over or snap.ghost_cells == snap.active_cells:
            return

        color = shape_color(snap.active_shape)
        ghost_surface = pygame.Surface((self.cell_size, self.cell_size), pygame.SRCALPHA)
        ghost_surface.fill((*color, GHOST_ALPHA))
        for p in snap.ghost_cells:
            x = p.x * self.cell_size
            y = p.y * self.cell_size
            self.screen.blit(ghost_surface, (x, y))
            pygame.draw.rect(self.screen, color, (x, y, self.cell_size, self.cell_size), 1)

    def _draw_sidebar(self, snap: RenderSnapshot, best: int) -> None:
        sidebar_x = self.board_pixel_width
        pygame.draw.rect(
            self.screen,
            SIDEBAR_BG_COLOR,
            (sidebar_x, 0, self.sidebar_width, self.window_height),
        )
        pygame.draw.line(
            self.screen,
            BORDER_COLOR,
            (sidebar_x, 0),
            (sidebar_x, self.window_height),
            2,
        )

        x = sidebar_x + 15
        self._draw_piece_preview(snap.next_shape, snap.next_cells, x, 20, "NEXT")
        hold_label = "HOLD" if snap.can_hold else "HOLD (used)"
        self._draw_piece_preview(snap.held_shape, snap.held_cells, x, 140, hold_label)

        y = 260
        for label, value in (
            ("SCORE", snap.score),
            ("BEST", max(best, snap.score)),
            ("LEVEL", snap.level),
            ("LINES", snap.lines),
        ):
            self._draw_text(label, x, y)
            self._draw_text(str(value), x, y + 25)
            y += 65

    def _draw_piece_preview(
        self,
        shape: Shape | None,
        cells: tuple[Point, ...],
        x_offset: int,
        y_offset: int,
        label: str,
    ) -> None:
        preview_cell = self.cell_size * 2 // 3
        box_size = preview_cell * 5

        self._draw_text(label, x_offset, y_offset)
        box_y = y_offset + 25
        pygame.draw.rect(self.screen, EMPTY_CELL_COLOR, (x_offset, box_y, box_size, box_size))
        pygame.draw.rect(self.screen, BORDER_COLOR, (x_offset, box_y, box_size, box_size), 1)

        if shape is None:
            return

        cols = max(p.x for p in cells) + 1
        rows = max(p.y for p in cells) + 1
        offset_x = x_offset + (box_size - cols * preview_cell) // 2
        offset_y = box_y + (box_size - rows * preview_cell) // 2
        color = shape_color(shape)
        for p in cells:
            self._draw_block(
                offset_x + p.x * preview_cell, offset_y + p.y * preview_cell, preview_cell, color
            )

    def _draw_game_over_overlay(self) -> None:
        overlay = pygame.Surface(
            (self.board_pixel_width, self.board_pixel_height), pygame.SRCALPHA
        )
        overlay.fill((0, 0, 0, 150))
        self.screen.blit(overlay, (0, 0))

        font_large = pygame.font.SysFont("monospace", 32, bold=True)
        text_go = font_large.render("GAME OVER", True, (255, 50, 50))
        text_restart = self._font.render("Press R to restart", True, TEXT_COLOR)

        cx = self.board_pixel_width // 2
        cy = self.board_pixel_height // 2
        self.screen.blit(text_go, (cx - text_go.get_width() // 2, cy - 40))
        self.screen.blit(text_restart, (cx - text_restart.get_width() // 2, cy + 10))

    def _draw_text(self, text: str, x: int, y: int, color: tuple[int, int, int] = TEXT_COLOR) -> None:
        surface = self._font.render(text, True, color)
        self.screen.blit(surface, (x, y))

    def close(self) -> None:
        """Shut down Pygame and close the window."""
        if self._initialized:
            pygame.quit()
            self._initialized = False
