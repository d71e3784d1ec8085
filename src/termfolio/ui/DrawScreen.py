# termfolio/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen — paints the visible part of the `ScreenGrid` into a curses window.

It is responsible for:
- initialising the console colour pair from the configured hex colours,
- drawing each visible row cell by cell with its bold/italic/underline style,
- underlining link regions and OSC 8 hyperlinks,
- positioning the physical cursor on the grid cursor,
- flushing the frame with a single `doupdate()`.

Curses errors never escape: they are logged and the frame is skipped.
"""

import curses
import logging
from typing import TYPE_CHECKING, Any

from termfolio.ui.ScreenGrid import Cell
from termfolio.utils.utils import CALM_BG_IDX, WHITE_FG_IDX, hex_to_xterm

if TYPE_CHECKING:
    from termfolio.ui.ConsoleApp import ConsoleApp


CONSOLE_PAIR = 1


## ================= class DrawScreen ==============================
class DrawScreen:
    """DrawScreen Class
    =========================
    Renders a `ScreenGrid` viewport.

    Attributes:
        app (ConsoleApp): Owner of the window and the grid.
        config (dict[str, Any]): Console configuration.
        stdscr (curses.window): Target window.
        base_attr (int): Attribute applied to every cell (colour pair).
    """

    def __init__(self, app: "ConsoleApp", config: dict[str, Any]) -> None:
        self.app = app
        self.config = config
        self.stdscr = app.stdscr
        self.base_attr: int = curses.A_NORMAL
        self._init_colors()

    def _init_colors(self) -> None:
        """Creates the console pair from `[colors]`.
        - 256-colour terminals: nearest xterm-256 indices of the hex colours.
        - fewer colours: green on the terminal background.
        """
        try:
            if not curses.has_colors():
                return
            curses.start_color()
            curses.use_default_colors()
        except curses.error:
            return

        colors = self.config.get("colors", {})
        if curses.COLORS >= 256:
            fg_idx = hex_to_xterm(str(colors.get("foreground", ""))) or WHITE_FG_IDX
            bg_idx = hex_to_xterm(str(colors.get("background", ""))) or CALM_BG_IDX
        else:
            fg_idx, bg_idx = curses.COLOR_GREEN, -1

        try:
            curses.init_pair(CONSOLE_PAIR, fg_idx, bg_idx)
        except curses.error as exc:
            logging.warning("init_pair failed (%s) – using default colours", exc)
            return
        self.base_attr = curses.color_pair(CONSOLE_PAIR)

    def _attr_for(self, cell: Cell, is_link: bool) -> int:
        attr = self.base_attr
        if cell.style.bold:
            attr |= curses.A_BOLD
        if cell.style.italic:
            attr |= getattr(curses, "A_ITALIC", curses.A_NORMAL)
        if cell.style.underline or cell.style.uri or is_link:
            attr |= curses.A_UNDERLINE
        return attr

    def draw(self) -> None:
        """Draws every visible row and positions the cursor."""
        grid = self.app.grid
        try:
            height, width = self.stdscr.getmaxyx()
            self.stdscr.erase()
            try:
                self.stdscr.bkgd(" ", self.base_attr)
            except curses.error:
                pass

            for screen_y, y in enumerate(grid.visible_rows()):
                if screen_y >= height:
                    break
                self._draw_row(screen_y, y, width)

            self._position_cursor(height, width)
            grid.dirty = False
        except curses.error as e:
            logging.error(f"Curses error in DrawScreen.draw(): {e}", exc_info=True)
        except Exception:
            logging.exception("Unexpected error in DrawScreen.draw()")

    def _draw_row(self, screen_y: int, y: int, width: int) -> None:
        grid = self.app.grid
        cells = grid.row(y - 1).cells
        for x, cell in enumerate(cells[:width]):
            if not cell.char:
                continue  # second half of a wide glyph
            is_link = grid.link_at(x + 1, y) is not None
            try:
                self.stdscr.addstr(screen_y, x, cell.char, self._attr_for(cell, is_link))
            except curses.error:
                # Writing the bottom-right cell raises after a successful write.
                pass

    def _position_cursor(self, height: int, width: int) -> None:
        grid = self.app.grid
        screen_y = grid.cursor_y - grid.viewport_top
        if not (0 <= screen_y < height):
            curses.curs_set(0)
            return
        screen_x = min(grid.cursor_x, width - 1)
        try:
            curses.curs_set(1)
            self.stdscr.move(screen_y, screen_x)
        except curses.error as e:
            logging.warning(f"Curses error positioning cursor at ({screen_y}, {screen_x}): {e}")

    def update_display(self) -> None:
        """Flushes the prepared frame to the terminal in one go."""
        try:
            self.stdscr.noutrefresh()
            curses.doupdate()
        except curses.error as e:
            logging.error(f"Curses doupdate error: {e}")
