# termfolio/core/KeyEvent.py
"""KeyEvent Module
================
Structured key events consumed by the console core.

The host decodes raw terminal input into a `KeyEvent` exactly once per
physical key press; the core never sees raw key codes or escape sequences.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from wcwidth import wcswidth


class LogicalKey(Enum):
    """The closed set of keys the console core reacts to."""

    ENTER = "enter"
    BACKSPACE = "backspace"
    ARROW_UP = "up"
    ARROW_DOWN = "down"
    TAB = "tab"
    ESCAPE = "escape"
    CTRL_C = "ctrl+c"
    CTRL_L = "ctrl+l"
    PRINTABLE = "printable"


@dataclass(frozen=True)
class Modifiers:
    ctrl: bool = False
    alt: bool = False
    meta: bool = False

    @property
    def any(self) -> bool:
        return self.ctrl or self.alt or self.meta


NO_MODIFIERS = Modifiers()


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key press.

    Attributes:
        logical_key (LogicalKey): What the key means to the console.
        character (Optional[str]): The glyph produced by the key, if any.
        modifiers (Modifiers): Ctrl/Alt/Meta state at the time of the press.
    """

    logical_key: LogicalKey
    character: Optional[str] = None
    modifiers: Modifiers = NO_MODIFIERS

    @classmethod
    def printable(cls, character: str, **modifiers: bool) -> "KeyEvent":
        return cls(LogicalKey.PRINTABLE, character, Modifiers(**modifiers))

    @classmethod
    def special(cls, logical_key: LogicalKey) -> "KeyEvent":
        return cls(logical_key)

    @property
    def is_text_input(self) -> bool:
        """True when the event should insert its character into the buffer."""
        return (
            self.logical_key is LogicalKey.PRINTABLE
            and not self.modifiers.any
            and is_printable_char(self.character)
        )


def is_printable_char(char: Optional[str]) -> bool:
    """A single visible glyph; wcswidth > 0 rules out control characters."""
    return isinstance(char, str) and len(char) == 1 and wcswidth(char) > 0
