# termfolio/core/KeyRouter.py
"""KeyRouter.py
===============
Description:
-----------------------
The KeyRouter is the console's event loop body: it receives every decoded
`KeyEvent` and decides who handles it.

It is a two-state machine with a single "active SubMode" slot:

- EDITING (no SubMode): the event is mapped to an editor action (insert,
  backspace, history browsing, completion, submit, cancel, clear).
- AWAITING_SUB_MODE (a SubMode is installed): the event goes to the SubMode
  and nowhere else. An accepted key runs the SubMode's action, uninstalls it
  and returns to EDITING with a fresh prompt. Any other key is swallowed.
  Ctrl-C is the explicit cancel.

Because the slot holds at most one SubMode, the single-active-SubMode rule
is structural: installing happens only on Enter, and only while EDITING.

Links are not pushed by the router on every write; the host asks for them
with `refresh_links()` for the rows it is about to show.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

from termfolio.core.Completer import Completer, CompletionKind
from termfolio.core.Dispatcher import CommandDispatcher, SubMode, normalize_command
from termfolio.core.History import History
from termfolio.core.KeyEvent import KeyEvent, LogicalKey
from termfolio.core.LineEditor import LineEditor
from termfolio.core.LinkScanner import link_callbacks, provide_links
from termfolio.utils.logging_config import KEY_LOGGER

if TYPE_CHECKING:
    from termfolio.ui.ScreenGrid import ScreenGrid


class RouterState(Enum):
    EDITING = "editing"
    AWAITING_SUB_MODE = "awaiting_sub_mode"


# ==================== KeyRouter Class ====================
class KeyRouter:
    """Class KeyRouter
    ==================
    Routes key events to the active SubMode or to the line editor.

    Attributes:
        grid (ScreenGrid): Output surface shared with the editor and dispatcher.
        dispatcher (CommandDispatcher): Runs submitted commands.
        editor (LineEditor): The command line being edited.
        history (History): Submitted commands and the browsing cursor.
        completer (Completer): Completion over the dispatcher's command names.
        opener (Callable[[str], Any]): Host hook used when a link is activated.
        sub_mode (Optional[SubMode]): The installed SubMode, if any.
        action_map (dict): LogicalKey -> handler used while EDITING.
    """

    def __init__(
        self,
        grid: "ScreenGrid",
        dispatcher: CommandDispatcher,
        prompt: str = "$ ",
        history: Optional[History] = None,
        opener: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self.grid = grid
        self.dispatcher = dispatcher
        self.editor = LineEditor(grid, prompt)
        self.history = history if history is not None else History()
        self.completer = Completer(dispatcher.command_names)
        self.opener: Callable[[str], Any] = opener or dispatcher.opener
        self.sub_mode: Optional[SubMode] = None
        self.action_map: dict[LogicalKey, Callable[[KeyEvent], bool]] = self._setup_action_map()

    def _setup_action_map(self) -> dict[LogicalKey, Callable[[KeyEvent], bool]]:
        return {
            LogicalKey.ENTER: self.handle_enter,
            LogicalKey.BACKSPACE: self.handle_backspace,
            LogicalKey.ARROW_UP: self.handle_up,
            LogicalKey.ARROW_DOWN: self.handle_down,
            LogicalKey.TAB: self.handle_tab,
            LogicalKey.CTRL_C: self.handle_cancel,
            LogicalKey.CTRL_L: self.handle_clear_screen,
            LogicalKey.ESCAPE: self.handle_escape,
            LogicalKey.PRINTABLE: self.handle_printable,
        }

    @property
    def state(self) -> RouterState:
        if self.sub_mode is None:
            return RouterState.EDITING
        return RouterState.AWAITING_SUB_MODE

    def attach(self) -> None:
        """Subscribes to the grid's key stream and prints the first prompt."""
        self.grid.register_key_listener(self.handle_key)
        self.editor.show_prompt()

    # ---------------------- Handle Key --------------------
    def handle_key(self, event: KeyEvent) -> bool:
        """Processes one key event completely.

        Returns:
            bool: True if the event changed what is on screen.
        """
        KEY_LOGGER.debug("handle_key: %r (state: %s)", event, self.state.value)
        try:
            if self.sub_mode is not None:
                return self._route_to_sub_mode(self.sub_mode, event)
            action = self.action_map.get(event.logical_key)
            if action is None:
                logging.debug("handle_key: no action for %r", event)
                return False
            return action(event)
        except Exception:
            logging.exception("Key handler error. This should be investigated.")
            return False

    def _route_to_sub_mode(self, sub_mode: SubMode, event: KeyEvent) -> bool:
        if event.logical_key is LogicalKey.CTRL_C:
            logging.info(f"SubMode {sub_mode.name!r} cancelled.")
            self.sub_mode = None
            self.grid.write("^C")
            self.editor.show_prompt()
            return True
        if not sub_mode.handle(event):
            KEY_LOGGER.debug("SubMode %r swallowed %r", sub_mode.name, event)
            return False
        self.sub_mode = None
        self.editor.show_prompt()
        return True

    # ---------------------- Editing actions --------------------
    def handle_printable(self, event: KeyEvent) -> bool:
        if not event.is_text_input:
            logging.debug("handle_printable: ignored %r", event)
            return False
        return self.editor.insert(event.character or "")

    def handle_backspace(self, event: KeyEvent) -> bool:
        return self.editor.delete_last()

    def handle_up(self, event: KeyEvent) -> bool:
        entry = self.history.navigate_up()
        if entry is None:
            return False
        return self.editor.replace(entry)

    def handle_down(self, event: KeyEvent) -> bool:
        entry = self.history.navigate_down()
        if entry is None:
            return False
        return self.editor.replace(entry)

    def handle_tab(self, event: KeyEvent) -> bool:
        completion = self.completer.complete(self.editor.text)
        if completion.kind is CompletionKind.UNIQUE:
            return self.editor.replace(completion.candidate)
        if completion.kind is CompletionKind.MULTIPLE:
            self.editor.show_candidates(list(completion.candidates))
            return True
        return False

    def handle_enter(self, event: KeyEvent) -> bool:
        command = normalize_command(self.editor.text)
        self.editor.newline()
        sub_mode = self.dispatcher.dispatch(command)
        self.history.append(command)
        self.editor.clear()
        if sub_mode is not None:
            logging.info(f"Installing SubMode {sub_mode!r}")
            self.sub_mode = sub_mode
        else:
            self.editor.show_prompt()
        return True

    def handle_cancel(self, event: KeyEvent) -> bool:
        self.grid.write("^C")
        self.editor.clear()
        self.history.reset_cursor()
        self.editor.show_prompt()
        return True

    def handle_clear_screen(self, event: KeyEvent) -> bool:
        self.grid.clear_screen()
        self.editor.redraw()
        return True

    def handle_escape(self, event: KeyEvent) -> bool:
        self.editor.clear()
        self.editor.redraw()
        return True

    # ---------------------- Links --------------------
    def refresh_links(self, rows: range) -> int:
        """Registers every link on the given 1-based rows with the grid.

        Returns:
            int: Number of link regions registered.
        """
        seen: set[tuple[tuple[int, int], tuple[int, int]]] = set()
        for y in rows:
            for link, activate in link_callbacks(provide_links(self.grid, y), self.opener):
                # A wrapped link is reported once per row it spans.
                if (link.start, link.end) in seen:
                    continue
                seen.add((link.start, link.end))
                self.grid.register_link_region(link.start, link.end, activate)
        return len(seen)
