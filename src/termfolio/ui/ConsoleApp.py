# termfolio/ui/ConsoleApp.py
"""termfolio.ui.ConsoleApp
============================
ConsoleApp: the curses host of the terminal portfolio.

The host owns everything the console core deliberately knows nothing about:

- the curses window, colours, terminal modes and the main loop,
- decoding raw keys into `KeyEvent`s (via `KeyBinder`),
- the `ScreenGrid` the core writes to, its viewport and scrollback,
- turning mouse clicks on links into `open_external_resource()` calls,
- draining the `TaskScheduler` and executing due tasks on this thread.

The core (`KeyRouter`, `CommandDispatcher`, `LineEditor`) is wired to the grid
in `_initialize_components()` and only ever sees the renderer contract.
"""

import curses
import logging
import queue
from typing import Any, Optional

from termfolio.core.Dispatcher import CommandDispatcher
from termfolio.core.KeyRouter import KeyRouter
from termfolio.core.Scheduler import TaskScheduler
from termfolio.ui.DrawScreen import DrawScreen
from termfolio.ui.KeyBinder import KeyBinder, RawKey
from termfolio.ui.ScreenGrid import ScreenGrid
from termfolio.utils.utils import deep_merge, DEFAULT_CONFIG, open_external_resource


logger = logging.getLogger("termfolio")


class ConsoleApp:
    """Class ConsoleApp
    ====================
    Wires the console core to a curses window and runs the main loop.

    Attributes:
        stdscr (curses.window): The terminal window.
        config (dict[str, Any]): Merged configuration.
        is_lightweight (bool): No background scheduler, no terminal mode changes.
        running (bool): Main loop flag; cleared by `exit()`.
        grid (ScreenGrid): The output surface shared by the core.
        scheduler (Optional[TaskScheduler]): Deferred task timer.
        dispatcher (CommandDispatcher): Command table.
        router (KeyRouter): Key routing state machine.
        drawer (DrawScreen): Renderer of the grid.
        keybinder (KeyBinder): Raw input decoder.
    """

    def __init__(
        self,
        stdscr: "curses.window",
        config: dict[str, Any],
        lightweight_mode: bool = False,
    ) -> None:
        self.stdscr = stdscr
        self.config: dict[str, Any] = deep_merge(DEFAULT_CONFIG, config or {})
        self.is_lightweight: bool = lightweight_mode

        self._initialize_state()
        self._setup_environment()
        self._initialize_components()
        logger.info(f"ConsoleApp initialized. Lightweight: {self.is_lightweight}")

    # --- State Initialization ---
    def _initialize_state(self) -> None:
        self.running: bool = False
        self._force_full_redraw: bool = True
        self._exit_in_progress: bool = False
        self._task_q: queue.Queue[dict[str, Any]] = queue.Queue()
        self.last_window_size: tuple[int, int] = (0, 0)

    # --- Component Initialization ---
    def _initialize_components(self) -> None:
        console = self.config.get("console", {})
        height, width = self.stdscr.getmaxyx()
        self.last_window_size = (height, width)
        self.grid = ScreenGrid(height, width, int(console.get("scrollback", 1000)))

        self.scheduler: Optional[TaskScheduler] = None
        if not self.is_lightweight:
            self.scheduler = TaskScheduler(to_ui_queue=self._task_q)
            self.scheduler.start()

        self.dispatcher = CommandDispatcher(
            self.grid,
            config=self.config,
            scheduler=self.scheduler,
            opener=open_external_resource,
        )
        self.router = KeyRouter(
            self.grid,
            self.dispatcher,
            prompt=str(console.get("prompt", "$ ")),
            opener=open_external_resource,
        )
        self.drawer = DrawScreen(self, self.config)
        self.keybinder = KeyBinder(self)

        banner = console.get("banner", [])
        if banner:
            self.grid.write("\r\n".join(str(line) for line in banner))
        self.router.attach()

    # --- Environment Setup ---
    def _setup_environment(self) -> None:
        """Configures terminal modes: raw keys, no echo, mouse clicks."""
        self.stdscr.keypad(True)
        if self.is_lightweight:
            return
        try:
            curses.raw()
            curses.noecho()
            curses.curs_set(1)
            curses.mousemask(curses.BUTTON1_CLICKED | curses.BUTTON1_RELEASED)
        except curses.error as exc:
            logging.warning("Could not set terminal modes: %s", exc)

    # --- Main loop ---
    def run(self) -> None:
        """The main event loop.

        Each iteration processes background tasks and one key press, then
        redraws the screen if anything changed. Runs until `exit()` clears
        `self.running`.
        """
        logger.info("Console main loop started.")
        self.running = True
        self._force_full_redraw = True

        self.stdscr.nodelay(True)
        self.stdscr.timeout(100)

        while self.running:
            try:
                redraw_needed = self._process_events_and_input()
                self._render_screen(redraw_needed)
            except KeyboardInterrupt:
                logger.info("Main loop interrupted by KeyboardInterrupt. Initiating exit sequence.")
                self.exit()
                break
            except Exception as e:
                logger.critical("Unhandled exception in main loop: %s", e, exc_info=True)
                self.exit()
                break

        logger.info("Console main loop finished.")

    def _process_events_and_input(self) -> bool:
        redraw_needed = self._process_all_queues()

        key_input = self.keybinder.get_key_input()
        if key_input != curses.ERR and self._handle_raw_key(key_input):
            redraw_needed = True
        return redraw_needed

    def _process_all_queues(self) -> bool:
        """Executes every due deferred task on the UI thread."""
        if self.scheduler is None:
            return False
        changed = False
        for task in self.scheduler.drain():
            if self._handle_task(task):
                changed = True
        return changed

    def _handle_task(self, task: dict[str, Any]) -> bool:
        task_type = task.get("type")
        if task_type == "open_resource":
            target = str(task.get("target", ""))
            logger.info(f"Executing deferred open of {target!r}")
            open_external_resource(target)
            return False
        logging.warning(f"Unknown deferred task type: {task_type!r}")
        return False

    def _handle_raw_key(self, key_input: RawKey) -> bool:
        """Handles host keys itself and forwards everything else to the grid."""
        if key_input == curses.KEY_RESIZE:
            return self.handle_resize()
        if key_input == curses.KEY_MOUSE:
            return self.handle_mouse()

        action = self.keybinder.host_action(key_input)
        if action == "quit":
            self.exit()
            return False
        if action == "scroll_up":
            return self.grid.scroll(max(self.grid.height - 1, 1))
        if action == "scroll_down":
            return self.grid.scroll(-max(self.grid.height - 1, 1))

        event = self.keybinder.translate(key_input)
        if event is None:
            logging.debug(f"Ignoring untranslatable key {key_input!r}")
            return False
        return self.grid.emit_key(event)

    def handle_resize(self) -> bool:
        height, width = self.stdscr.getmaxyx()
        if (height, width) == self.last_window_size:
            return False
        self.last_window_size = (height, width)
        self.grid.resize(height, width)
        self._force_full_redraw = True
        return True

    def handle_mouse(self) -> bool:
        """Activates the link under a left click, if any."""
        try:
            _, mx, my, _, bstate = curses.getmouse()
        except curses.error:
            return False
        if not bstate & (curses.BUTTON1_CLICKED | curses.BUTTON1_RELEASED):
            return False
        return self.activate_link_at(mx, my)

    def activate_link_at(self, screen_x: int, screen_y: int) -> bool:
        """Opens the link at a 0-based screen position.

        Returns:
            bool: True if a link was found there.
        """
        x = screen_x + 1
        y = self.grid.viewport_top + screen_y + 1
        activate = self.grid.link_at(x, y)
        if activate is not None:
            activate()
            return True
        uri = self.grid.uri_at(x, y)
        if uri:
            open_external_resource(uri)
            return True
        return False

    def _render_screen(self, redraw_needed: bool) -> None:
        """Redraws only when something changed (or a full redraw was forced)."""
        if not redraw_needed and not self._force_full_redraw and not self.grid.dirty:
            return
        self.grid.clear_link_regions()
        self.router.refresh_links(self.grid.visible_rows())
        self.drawer.draw()
        self.drawer.update_display()
        self._force_full_redraw = False

    # --- Shutdown ---
    def exit(self) -> None:
        """Signals the main loop to stop and shuts down background services."""
        if self._exit_in_progress:
            return
        self._exit_in_progress = True
        logger.info("--- EXIT SEQUENCE INITIATED ---")
        self.running = False
        self.close()

    def close(self) -> None:
        """Stops the scheduler. Safe to call more than once."""
        if self.scheduler:
            self.scheduler.stop()
        logging.info("ConsoleApp components have been shut down.")
