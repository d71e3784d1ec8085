# termfolio/core/History.py
"""History Module for the termfolio console
=========================================
This module provides the `History` class, the ordered log of submitted
commands and the cursor used to browse it with the arrow keys.

Key Features:
-------------
- Append-only: every Enter adds exactly one entry, empty and duplicate
  commands included. Entries are never removed or reordered.
- Cursor-based browsing instead of popping a stack, so repeated Up/Down
  presses are reversible within one session.
- Browsing past either end is a silent no-op; there is no wrap-around.

The cursor lives in ``[0, len(entries)]``; ``cursor == len(entries)`` means
the user is not browsing and the buffer holds live input.
"""

import logging
from typing import Optional


## ==================== History Class ====================
class History:
    """Class History
    ===================
    Submitted-command log with a browsing cursor.

    Attributes:
        entries (list[str]): Submitted commands, oldest first.
        cursor (int): Index of the entry currently shown, or len(entries)
            when the buffer holds live input.

    Methods:
        append(command): Records a submitted command and stops browsing.
        navigate_up() -> Optional[str]: Steps to the previous entry.
        navigate_down() -> Optional[str]: Steps to the next entry, or back to
            live input with an empty string.
        reset_cursor(): Stops browsing without recording anything.

    Navigation methods return None when they did nothing.
    """

    def __init__(self) -> None:
        self._entries: list[str] = []
        self.cursor: int = 0

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def is_browsing(self) -> bool:
        return self.cursor < len(self._entries)

    def append(self, command: str) -> None:
        """Records a submitted command unconditionally."""
        self._entries.append(command)
        self.cursor = len(self._entries)
        logging.debug(f"History: Command {command!r} added. History size: {len(self._entries)}")

    def navigate_up(self) -> Optional[str]:
        if self.cursor <= 0:
            logging.debug("History: Already at the oldest entry.")
            return None
        self.cursor -= 1
        return self._entries[self.cursor]

    def navigate_down(self) -> Optional[str]:
        last_index = len(self._entries) - 1
        if self.cursor < last_index:
            self.cursor += 1
            return self._entries[self.cursor]
        if self.cursor == last_index:
            # Leaving the newest entry returns to an empty live buffer.
            self.cursor = len(self._entries)
            return ""
        return None

    def reset_cursor(self) -> None:
        self.cursor = len(self._entries)
