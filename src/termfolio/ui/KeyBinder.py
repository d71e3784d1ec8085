# termfolio/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
The KeyBinder class turns raw terminal input into what the console
understands. It sits on the host side: curses key codes and escape
sequences stop here, and only structured `KeyEvent`s travel on to the core.

Key Features:
- Reads keys with `get_wch()` and parses ESC/Alt/CSI/SS3 sequences.
- Translates raw keys into `KeyEvent`s (Enter, Backspace, arrows, Tab,
  Escape, Ctrl-C, Ctrl-L, printable glyphs with their modifiers).
- Loads the host keybindings (`quit`, `scroll_up`, `scroll_down`) from the
  configuration, accepting strings such as "ctrl+d" or "pageup".

Main Methods:
1. get_key_input: Reads a single key or key sequence from the terminal.
2. translate: Maps a raw key to a `KeyEvent`, or None for keys the core ignores.
3. host_action: Finds the host action (quit, scrolling) bound to a raw key.
4. _decode_keystring: Decodes a key specification string into a key code.
"""

import curses
import logging
import re
from typing import TYPE_CHECKING, Any, Optional

from termfolio.core.KeyEvent import KeyEvent, LogicalKey, Modifiers, is_printable_char
from termfolio.utils.logging_config import KEY_LOGGER

if TYPE_CHECKING:
    from termfolio.ui.ConsoleApp import ConsoleApp


RawKey = int | str

# Single control characters with a meaning of their own.
CONTROL_KEYS: dict[str, LogicalKey] = {
    "\n": LogicalKey.ENTER,
    "\r": LogicalKey.ENTER,
    "\t": LogicalKey.TAB,
    "\x7f": LogicalKey.BACKSPACE,
    "\b": LogicalKey.BACKSPACE,
    "\x03": LogicalKey.CTRL_C,
    "\x0c": LogicalKey.CTRL_L,
    "\x1b": LogicalKey.ESCAPE,
}

CURSES_KEYS: dict[int, LogicalKey] = {
    curses.KEY_ENTER: LogicalKey.ENTER,
    curses.KEY_BACKSPACE: LogicalKey.BACKSPACE,
    curses.KEY_UP: LogicalKey.ARROW_UP,
    curses.KEY_DOWN: LogicalKey.ARROW_DOWN,
    27: LogicalKey.ESCAPE,
}


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Class KeyBinder
    ====================
    Reads and translates terminal input for the console host.

    Attributes:
        app (ConsoleApp): The host owning the window.
        config (dict): Configuration with the `[keybindings]` section.
        stdscr (curses.window): Window input is read from.
        keybindings (dict): Host action name -> list of key codes.
    """

    # Keys do NOT include the leading ESC (0x1B); get_key_input() reads after it.
    ESCAPE_SEQUENCE_MAP: dict[str, str] = {
        # Arrows (CSI and SS3)
        "[A": "up", "[B": "down", "[C": "right", "[D": "left",
        "OA": "up", "OB": "down", "OC": "right", "OD": "left",

        # Home/End
        "[H": "home", "[F": "end", "OH": "home", "OF": "end",
        "[1~": "home", "[4~": "end",

        # Insert/Delete/PageUp/PageDown
        "[2~": "insert", "[3~": "delete", "[5~": "pageup", "[6~": "pagedown",
    }

    NAMED_KEYS: dict[str, int] = {
        "up": curses.KEY_UP,
        "down": curses.KEY_DOWN,
        "left": curses.KEY_LEFT,
        "right": curses.KEY_RIGHT,
        "home": curses.KEY_HOME,
        "end": curses.KEY_END,
        "insert": curses.KEY_IC,
        "delete": curses.KEY_DC,
        "pageup": curses.KEY_PPAGE,
        "pagedown": curses.KEY_NPAGE,
        "enter": curses.KEY_ENTER,
        "backspace": curses.KEY_BACKSPACE,
        "esc": 27,
        "tab": 9,
    }

    def __init__(self, app: "ConsoleApp") -> None:
        logging.debug("KeyBinder initialized with app: %s", app)
        self.app = app
        self.config: dict[str, Any] = app.config
        self.stdscr = app.stdscr
        self.keybindings = self._load_keybindings()

    def _load_keybindings(self) -> dict[str, list[int]]:
        """Resolves `[keybindings]` into key codes. Invalid entries are logged and skipped."""
        bindings: dict[str, list[int]] = {}
        for action, spec in self.config.get("keybindings", {}).items():
            specs = spec if isinstance(spec, list) else [spec]
            codes: list[int] = []
            for item in specs:
                try:
                    codes.append(self._decode_keystring(item))
                except ValueError as e:
                    logging.error(f"Invalid keybinding for {action!r}: {item!r} ({e})")
            if codes:
                bindings[action] = codes
        logging.debug(f"Loaded host keybindings: {bindings}")
        return bindings

    def _decode_keystring(self, key_input: str | int) -> int:
        """Decodes a key specification ("ctrl+d", "pageup", "q") into a key code.

        Raises:
            ValueError: If the key string is empty or unknown.
        """
        if isinstance(key_input, int):
            return key_input
        if not isinstance(key_input, str):
            raise ValueError(f"Invalid key_input type: {type(key_input)}. Expected str or int.")

        s = key_input.strip().lower()
        if not s:
            raise ValueError("Key string cannot be empty.")

        parts = s.split("+")
        base = parts[-1]
        modifiers = set(parts[:-1])

        if base in self.NAMED_KEYS:
            code = self.NAMED_KEYS[base]
        elif len(base) == 1:
            code = ord(base)
        else:
            raise ValueError(f"Unknown base key '{base}' in '{key_input}'")

        if "ctrl" in modifiers:
            modifiers.discard("ctrl")
            if "a" <= base <= "z" and len(base) == 1:
                code = ord(base) - ord("a") + 1
            else:
                raise ValueError(f"Unsupported Ctrl combination '{key_input}'")

        if modifiers:
            raise ValueError(f"Unknown or unhandled modifiers {sorted(modifiers)} in '{key_input}'")
        return code

    def lookup(self, key_spec: str | int) -> Optional[str]:
        """Finds the host action bound to a key specification, or None."""
        try:
            decoded = self._decode_keystring(key_spec)
        except ValueError:
            return None
        for action_name, codes in self.keybindings.items():
            if decoded in codes:
                return action_name
        return None

    def host_action(self, raw: RawKey) -> Optional[str]:
        """Host action for a raw key as returned by `get_key_input()`."""
        if isinstance(raw, str):
            if len(raw) != 1:
                return None
            raw = ord(raw)
        for action_name, codes in self.keybindings.items():
            if raw in codes:
                return action_name
        return None

    def get_key_input(self, window: Optional[Any] = None) -> RawKey:
        """Reads a single key or key sequence from the terminal with ESC parsing:
        - a lone ESC is returned as "\\x1b",
        - Alt/Meta chord: ESC + printable -> "alt-<char>",
        - CSI/SS3 sequences ("[A", "OB", "[5~", ...) -> curses key code.

        Returns:
            int | str: a character, a curses key code, "alt-<char>",
            or curses.ERR when no input is available.
        """
        target = window or self.stdscr
        try:
            ch = target.get_wch()
        except curses.error:
            return curses.ERR

        if ch != "\x1b":
            return ch  # fast path

        # ESC received: lone ESC, Alt chord, or an escape sequence
        seq = ""
        target.nodelay(True)
        try:
            while True:
                try:
                    nx = target.get_wch()
                except curses.error:
                    break
                seq += nx if isinstance(nx, str) else f"<{nx}>"
        finally:
            target.nodelay(False)
            # The main loop polls with a timeout; restore it.
            target.timeout(100)

        if not seq:
            KEY_LOGGER.debug("get_key_input: standalone ESC")
            return "\x1b"

        if seq[0] == "\x1b":
            seq = seq[1:]

        if len(seq) == 1 and seq.isprintable():
            alt_key = f"alt-{seq}"
            KEY_LOGGER.debug("get_key_input: Alt chord -> %r", alt_key)
            return alt_key

        mapped = self.ESCAPE_SEQUENCE_MAP.get(seq)
        if not mapped:
            cleaned = "".join(re.findall(r"[\[O0-9;~A-Za-z]", seq))
            mapped = self.ESCAPE_SEQUENCE_MAP.get(cleaned)

        if mapped:
            code = self._decode_keystring(mapped)
            KEY_LOGGER.debug("get_key_input: ESC %r -> %r -> code %r", seq, mapped, code)
            return code

        logging.warning("get_key_input: unknown escape sequence: ESC + %r", seq)
        return curses.ERR

    def translate(self, raw: RawKey) -> Optional[KeyEvent]:
        """Maps a raw key to a `KeyEvent`.

        Returns:
            Optional[KeyEvent]: None for keys the console core does not handle
            (function keys, left/right arrows, ...).
        """
        if isinstance(raw, int):
            if raw in CURSES_KEYS:
                return KeyEvent.special(CURSES_KEYS[raw])
            if 0 <= raw < 256:
                return self.translate(chr(raw))
            return None

        if not isinstance(raw, str) or not raw:
            return None

        if raw.startswith("alt-") and len(raw) == 5:
            char = raw[-1]
            return KeyEvent(LogicalKey.PRINTABLE, char, Modifiers(alt=True))

        if len(raw) != 1:
            return None

        if raw in CONTROL_KEYS:
            return KeyEvent.special(CONTROL_KEYS[raw])

        code = ord(raw)
        if code < 32:
            # Ctrl+<letter>: reported with the letter it was chorded with.
            return KeyEvent(LogicalKey.PRINTABLE, chr(code + 96), Modifiers(ctrl=True))

        if is_printable_char(raw):
            return KeyEvent.printable(raw)
        return None
