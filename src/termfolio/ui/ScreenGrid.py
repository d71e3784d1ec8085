# termfolio/ui/ScreenGrid.py
"""ScreenGrid.py
========================
ScreenGrid — the in-memory character grid the console writes to.

It implements the renderer side of the console contract:

- ``write(text)`` / ``write_line(text)`` interpret the control codes the core
  emits: ``\\r``, ``\\n``, ``\\b``, ``\\t``, CSI cursor and erase sequences
  (``A B C D G H J K``), SGR bold/italic/underline (``m``) and OSC 8
  hyperlinks. Other escape sequences are consumed and ignored. A sequence
  split across two writes is completed on the next write.
- ``clear_screen()`` / ``reset_screen()`` wipe the content (reset also drops
  attributes and any half-received sequence).
- ``read_row(index)`` exposes a physical row as a `GridRow`, flagged when it
  is a soft-wrap continuation of the row above.
- ``register_key_listener(handler)`` / ``emit_key(event)`` carry key events
  from the host to the core.
- ``register_link_region(start, end, activate)`` records a clickable range
  computed by the link scanner.

Rows live in one list (scrollback followed by the visible screen). A row
only holds the cells that were actually written, so ``read_row`` never
reports trailing padding. Wide glyphs (per `wcwidth`) take two cells; the
second is an empty placeholder.

Writing into the last column parks the cursor past it ("pending wrap"); the
next glyph starts a new row flagged as a continuation. Resizing does not
reflow existing rows.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from wcwidth import wcwidth

from termfolio.core.KeyEvent import KeyEvent
from termfolio.core.LinkScanner import Coordinate, GridRow

_CSI_RE = re.compile(r"\x1b\[([0-9;?]*)([@-~])")
_CSI_PARTIAL_RE = re.compile(r"\x1b\[[0-9;?]*")
_OSC_RE = re.compile(r"\x1b\](.*?)(?:\x1b\\|\x07)", re.DOTALL)
_MAX_PENDING = 4096
TAB_WIDTH = 8


@dataclass(frozen=True)
class CellStyle:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    uri: Optional[str] = None


PLAIN = CellStyle()


@dataclass
class Cell:
    char: str = " "
    style: CellStyle = PLAIN


@dataclass
class Row:
    cells: list[Cell] = field(default_factory=list)
    wrapped: bool = False

    @property
    def text(self) -> str:
        return "".join(cell.char for cell in self.cells)


@dataclass
class LinkRegion:
    start: Coordinate
    end: Coordinate
    activate: Callable[[], Any]

    def contains(self, x: int, y: int) -> bool:
        # Row-major comparison; `end` is exclusive.
        return (self.start[1], self.start[0]) <= (y, x) < (self.end[1], self.end[0])


## ================= class ScreenGrid ==============================
class ScreenGrid:
    """ScreenGrid Class
    ===================
    Fixed-width character grid with scrollback.

    Attributes:
        height (int): Number of visible rows.
        columns (int): Number of columns.
        scrollback (int): Rows kept above the visible screen.
        cursor_x (int): 0-based column; equals `columns` while a wrap is pending.
        cursor_y (int): 0-based index into all rows (scrollback included).
        scroll_offset (int): Rows the view is scrolled back from the bottom.
        dirty (bool): Set by every mutation; cleared by the drawer.
    """

    def __init__(self, height: int = 24, columns: int = 80, scrollback: int = 1000) -> None:
        self.height = max(height, 1)
        self.columns = max(columns, 1)
        self.scrollback = max(scrollback, 0)
        self._key_listeners: list[Callable[[KeyEvent], Any]] = []
        self._link_regions: list[LinkRegion] = []
        self.reset_screen()

    # ------------------------------------------------------------------
    # Renderer contract
    # ------------------------------------------------------------------
    def write(self, text: str) -> None:
        data = self._pending + text
        self._pending = ""
        i = 0
        while i < len(data):
            ch = data[i]
            if ch == "\x1b":
                next_i = self._consume_escape(data, i)
                if next_i is None:
                    self._pending = data[i:]
                    if len(self._pending) > _MAX_PENDING:
                        logging.warning("ScreenGrid: dropping unterminated escape sequence.")
                        self._pending = ""
                    break
                i = next_i
                continue
            if ch == "\r":
                self.cursor_x = 0
            elif ch == "\n":
                self._line_feed()
            elif ch == "\b":
                # From the pending-wrap position this lands on the last column.
                self.cursor_x = max(self.cursor_x - 1, 0)
            elif ch == "\t":
                self.cursor_x = min((self.cursor_x // TAB_WIDTH + 1) * TAB_WIDTH, self.columns - 1)
            else:
                self._put(ch)
            i += 1
        self.dirty = True

    def write_line(self, text: str = "") -> None:
        self.write(text + "\r\n")

    def clear_screen(self) -> None:
        """Wipes every row, scrollback included, and homes the cursor."""
        self._rows: list[Row] = [Row()]
        self.cursor_x = 0
        self.cursor_y = 0
        self.scroll_offset = 0
        self._link_regions.clear()
        self.dirty = True

    def reset_screen(self) -> None:
        """Full reset: content, attributes and any half-received sequence."""
        self._style = PLAIN
        self._pending = ""
        self.clear_screen()

    @property
    def row_count(self) -> int:
        return len(self._rows)

    def read_row(self, index: int) -> GridRow:
        row = self._rows[index]
        return GridRow(row.text, row.wrapped)

    def row(self, index: int) -> Row:
        return self._rows[index]

    def register_key_listener(self, handler: Callable[[KeyEvent], Any]) -> None:
        self._key_listeners.append(handler)

    def emit_key(self, event: KeyEvent) -> bool:
        """Delivers `event` to every listener; True if any reported a change."""
        changed = False
        for handler in list(self._key_listeners):
            if handler(event):
                changed = True
        return changed

    def register_link_region(
        self, start: Coordinate, end: Coordinate, activate: Callable[[], Any]
    ) -> None:
        self._link_regions = [
            region for region in self._link_regions if (region.start, region.end) != (start, end)
        ]
        self._link_regions.append(LinkRegion(start, end, activate))

    def clear_link_regions(self) -> None:
        self._link_regions.clear()

    @property
    def link_regions(self) -> list[LinkRegion]:
        return list(self._link_regions)

    def link_at(self, x: int, y: int) -> Optional[Callable[[], Any]]:
        """Activation callback of the region covering 1-based (x, y), if any."""
        for region in self._link_regions:
            if region.contains(x, y):
                return region.activate
        return None

    def uri_at(self, x: int, y: int) -> Optional[str]:
        """OSC 8 target of the cell at 1-based (x, y), if any."""
        if not (1 <= y <= len(self._rows)):
            return None
        cells = self._rows[y - 1].cells
        if not (1 <= x <= len(cells)):
            return None
        return cells[x - 1].style.uri

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------
    @property
    def viewport_top(self) -> int:
        """0-based index of the first visible row."""
        bottom_top = max(len(self._rows) - self.height, 0)
        return max(bottom_top - self.scroll_offset, 0)

    def visible_rows(self) -> range:
        """1-based row numbers currently on screen."""
        top = self.viewport_top
        return range(top + 1, min(top + self.height, len(self._rows)) + 1)

    def scroll(self, lines: int) -> bool:
        """Scrolls the view back (positive) or forward (negative)."""
        max_offset = max(len(self._rows) - self.height, 0)
        new_offset = min(max(self.scroll_offset + lines, 0), max_offset)
        if new_offset == self.scroll_offset:
            return False
        self.scroll_offset = new_offset
        self.dirty = True
        return True

    def resize(self, height: int, columns: int) -> None:
        self.height = max(height, 1)
        self.columns = max(columns, 1)
        self.cursor_x = min(self.cursor_x, self.columns)
        self.scroll_offset = 0
        self.dirty = True
        logging.debug(f"ScreenGrid resized to {self.height}x{self.columns}")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _current_row(self) -> Row:
        return self._rows[self.cursor_y]

    def _line_feed(self) -> None:
        self.cursor_y += 1
        if self.cursor_y == len(self._rows):
            self._rows.append(Row())
            self._trim_scrollback()
        # New output follows the bottom of the buffer.
        self.scroll_offset = 0

    def _trim_scrollback(self) -> None:
        excess = len(self._rows) - (self.scrollback + self.height)
        if excess <= 0:
            return
        del self._rows[:excess]
        self.cursor_y -= excess
        # Stored coordinates no longer match the shifted rows.
        self._link_regions.clear()

    def _wrap(self) -> None:
        self.cursor_x = 0
        self._line_feed()
        self._current_row().wrapped = True

    def _put(self, ch: str) -> None:
        width = wcwidth(ch)
        if width < 0:
            return  # control character
        if width == 0:
            cells = self._current_row().cells
            if cells and self.cursor_x > 0:
                target = cells[min(self.cursor_x, len(cells)) - 1]
                target.char += ch  # combining mark joins the previous glyph
            return
        if self.cursor_x + width > self.columns:
            self._wrap()
        cells = self._current_row().cells
        while len(cells) < self.cursor_x + width:
            cells.append(Cell())
        self._split_wide_glyphs(cells, self.cursor_x, self.cursor_x + width)
        cells[self.cursor_x] = Cell(ch, self._style)
        if width == 2:
            cells[self.cursor_x + 1] = Cell("", self._style)
        self.cursor_x += width

    @staticmethod
    def _split_wide_glyphs(cells: list[Cell], start: int, end: int) -> None:
        """Blanks the orphaned half of any wide glyph partly inside [start, end)."""
        if 0 < start < len(cells) and cells[start].char == "":
            cells[start - 1] = Cell()
        if end < len(cells) and cells[end].char == "":
            cells[end] = Cell()

    def _consume_escape(self, data: str, i: int) -> Optional[int]:
        """Handles the escape sequence at `data[i]`; returns the index after it.

        Returns None when the sequence is incomplete.
        """
        if i + 1 >= len(data):
            return None
        kind = data[i + 1]
        if kind == "[":
            match = _CSI_RE.match(data, i)
            if match:
                self._csi(match.group(1), match.group(2))
                return match.end()
            if _CSI_PARTIAL_RE.fullmatch(data, i):
                return None
            return i + 2
        if kind == "]":
            match = _OSC_RE.match(data, i)
            if match is None:
                return None
            self._osc(match.group(1))
            return match.end()
        return i + 2

    def _csi(self, raw_params: str, final: str) -> None:
        private = raw_params.startswith("?")
        params = [int(p) if p.isdigit() else 0 for p in raw_params.lstrip("?").split(";")] if raw_params else []
        if private:
            return  # mode switches (cursor visibility etc.) do not affect the grid
        n = params[0] if params and params[0] > 0 else 1
        top = max(len(self._rows) - self.height, 0)

        if final in "ABCD":
            self.cursor_x = min(self.cursor_x, self.columns - 1)
        if final == "A":
            self.cursor_y = max(self.cursor_y - n, top)
        elif final == "B":
            self.cursor_y = min(self.cursor_y + n, len(self._rows) - 1)
        elif final == "C":
            self.cursor_x = min(self.cursor_x + n, self.columns - 1)
        elif final == "D":
            self.cursor_x = max(self.cursor_x - n, 0)
        elif final == "G":
            self.cursor_x = min(n, self.columns) - 1
        elif final in "Hf":
            row = params[0] if params and params[0] > 0 else 1
            col = params[1] if len(params) > 1 and params[1] > 0 else 1
            self.cursor_y = top + min(row, self.height) - 1
            while self.cursor_y >= len(self._rows):
                self._rows.append(Row())
            self.cursor_x = min(col, self.columns) - 1
        elif final == "J":
            mode = params[0] if params else 0
            if mode == 0:
                del self._current_row().cells[self.cursor_x:]
                del self._rows[self.cursor_y + 1:]
            elif mode == 2:
                self.clear_screen()
            elif mode == 3:
                self.reset_screen()
        elif final == "K":
            mode = params[0] if params else 0
            cells = self._current_row().cells
            if mode == 0:
                del cells[self.cursor_x:]
            elif mode == 1:
                for x in range(min(self.cursor_x + 1, len(cells))):
                    cells[x] = Cell()
            elif mode == 2:
                cells.clear()
        elif final == "m":
            self._sgr(params or [0])

    def _sgr(self, params: list[int]) -> None:
        style = self._style
        for code in params:
            if code == 0:
                style = replace(PLAIN, uri=style.uri)
            elif code == 1:
                style = replace(style, bold=True)
            elif code == 3:
                style = replace(style, italic=True)
            elif code == 4:
                style = replace(style, underline=True)
            elif code == 22:
                style = replace(style, bold=False)
            elif code == 23:
                style = replace(style, italic=False)
            elif code == 24:
                style = replace(style, underline=False)
        self._style = style

    def _osc(self, body: str) -> None:
        # OSC 8 ; params ; URI. An empty URI closes the hyperlink.
        parts = body.split(";", 2)
        if parts[0] != "8" or len(parts) < 3:
            return
        self._style = replace(self._style, uri=parts[2] or None)
