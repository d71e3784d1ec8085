# termfolio/core/LineEditor.py
"""LineEditor Module
==================
The in-progress command line of the console.

`LineBuffer` owns the text itself; `LineEditor` applies edit operations to
the buffer and writes the matching control sequences to the grid so the
prompt row always shows the buffer contents.

The cursor always trails the buffer (no mid-line insertion), so the editor
only needs to know where the prompt started and how many cells it has
written since. That position is tracked with the same pending-wrap rule the
grid uses: writing into the last column leaves the cursor parked *past* the
last column until the next glyph wraps it onto a continuation row. A wide
glyph that does not fit in the last column moves whole onto the next row and
leaves that column blank; the editor remembers where every glyph started so
Backspace steps back over the gap.
"""

import logging
from typing import TYPE_CHECKING, Optional

from wcwidth import wcwidth

from termfolio.core.KeyEvent import is_printable_char

if TYPE_CHECKING:
    from termfolio.ui.ScreenGrid import ScreenGrid


class LineBuffer:
    """The editable command text. Never contains control characters."""

    def __init__(self) -> None:
        self._chars: list[str] = []

    @property
    def text(self) -> str:
        return "".join(self._chars)

    def __len__(self) -> int:
        return len(self._chars)

    def __str__(self) -> str:
        return self.text

    def insert(self, char: str) -> bool:
        if not is_printable_char(char):
            return False
        self._chars.append(char)
        return True

    def delete_last(self) -> Optional[str]:
        if not self._chars:
            return None
        return self._chars.pop()

    def clear(self) -> None:
        self._chars.clear()

    def replace(self, text: str) -> None:
        self._chars = [ch for ch in text if is_printable_char(ch)]


class LineEditor:
    """Applies edit operations to a `LineBuffer` and mirrors them on the grid.

    Attributes:
        grid (ScreenGrid): Output surface; only `write()` and `columns` are used.
        prompt (str): Marker rendered before the buffer on every prompt row.
        buffer (LineBuffer): The command text being edited.
    """

    def __init__(self, grid: "ScreenGrid", prompt: str = "$ ") -> None:
        self.grid = grid
        self.prompt = prompt
        self.buffer = LineBuffer()
        # Cursor position relative to the first cell of the prompt.
        self._row = 0
        self._col = 0
        # Cursor position before each buffer character was drawn.
        self._origins: list[tuple[int, int]] = []

    @property
    def text(self) -> str:
        return self.buffer.text

    # --- Edit operations ---
    def insert(self, char: str) -> bool:
        """Appends one printable character and echoes it."""
        if not self.buffer.insert(char):
            logging.debug("LineEditor.insert: rejected %r", char)
            return False
        self.grid.write(char)
        self._origins.append((self._row, self._col))
        self._advance(wcwidth(char))
        return True

    def delete_last(self) -> bool:
        """Removes the last character: move onto its cells, blank them, move back."""
        removed = self.buffer.delete_last()
        if removed is None:
            return False
        width = max(wcwidth(removed), 1)
        prev_row, prev_col = self._origins.pop()
        glyph_row, glyph_col = self._glyph_start(prev_row, prev_col, width)

        sequence = self._move_up(self._row - glyph_row)
        sequence += f"\x1b[{glyph_col + 1}G" + " " * width
        if prev_col >= self.grid.columns:
            # The cursor was parked past the last column; the glyph's own
            # cell is where the next one will land.
            self._row, self._col = glyph_row, glyph_col
        else:
            # Also steps back over a last column left blank by a wrapped wide glyph.
            sequence += self._move_up(glyph_row - prev_row)
            self._row, self._col = prev_row, prev_col
        self.grid.write(sequence + f"\x1b[{self._col + 1}G")
        return True

    def clear(self) -> None:
        """Empties the buffer without touching the grid."""
        self.buffer.clear()
        self._origins.clear()

    def replace(self, text: str) -> bool:
        """Overwrites the buffer and re-renders the whole prompt line."""
        self.buffer.replace(text)
        self.redraw()
        return True

    # --- Rendering ---
    def show_prompt(self) -> None:
        """Starts a fresh prompt row below the current output."""
        self.grid.write("\r\n" + self.prompt + self.buffer.text)
        self._reset_position()

    def redraw(self) -> None:
        """Erases every row the prompt line occupies and writes it again."""
        up = f"\x1b[{self._row}A" if self._row else ""
        self.grid.write(up + "\r\x1b[J" + self.prompt + self.buffer.text)
        self._reset_position()

    def show_candidates(self, candidates: list[str]) -> None:
        """Lists completion candidates below the prompt, then re-prompts."""
        self.grid.write("\r\n" + "\r\n".join(candidates))
        self.show_prompt()

    def newline(self) -> None:
        self.grid.write("\r\n")
        self._row = self._col = 0
        self._origins = []

    # --- Cursor bookkeeping ---
    def _reset_position(self) -> None:
        self._row = self._col = 0
        self._origins = []
        for char in self.prompt:
            self._advance(wcwidth(char))
        for char in self.buffer.text:
            self._origins.append((self._row, self._col))
            self._advance(wcwidth(char))

    def _glyph_start(self, row: int, col: int, width: int) -> tuple[int, int]:
        """Where a glyph of `width` cells lands when the cursor is at (row, col).

        A glyph that does not fit in the rest of the row moves whole onto the
        next row, as the grid does.
        """
        if col + width > max(self.grid.columns, 1):
            return row + 1, 0
        return row, col

    def _advance(self, width: int) -> None:
        if width <= 0:
            return
        self._row, self._col = self._glyph_start(self._row, self._col, width)
        self._col += width

    @staticmethod
    def _move_up(rows: int) -> str:
        return f"\x1b[{rows}A" if rows > 0 else ""
