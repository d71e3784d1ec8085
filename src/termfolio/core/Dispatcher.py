# termfolio/core/Dispatcher.py
"""Dispatcher Module
==================
Maps a finalized command string to the handler that answers it.

Dispatch is a table lookup over a closed set of command names; anything
outside the table gets the "not found" response. A handler writes its output
to the grid and may return a `SubMode`, a one-shot key interceptor that the
Key Router installs until the user presses one of the keys it accepts.

Command texts (profile, links, jokes) come from the configuration; see
`termfolio.utils.utils.DEFAULT_CONFIG`.

Side effects that must happen later (opening the resume, opening the
portfolio after a confirmation) are handed to the scheduler as plain task
dictionaries carrying the target by value, e.g.
``{"type": "open_resource", "target": "https://..."}``.
"""

import functools
import logging
import random
from typing import TYPE_CHECKING, Any, Callable, Optional

from termfolio.core.KeyEvent import KeyEvent, LogicalKey
from termfolio.utils.utils import DEFAULT_CONFIG, deep_merge

if TYPE_CHECKING:
    from termfolio.core.Scheduler import TaskScheduler
    from termfolio.ui.ScreenGrid import ScreenGrid


def normalize_command(command: str) -> str:
    """Canonical form used for dispatch, history and completion."""
    return command.strip().lower()


def hyperlink(url: str, label: str) -> str:
    """Wraps `label` in an OSC 8 hyperlink pointing at `url`."""
    return f"\x1b]8;;{url}\x1b\\{label}\x1b]8;;\x1b\\"


# ==================== SubMode Class ====================
class SubMode:
    """A transient key interceptor installed by a command handler.

    Maps accepted keys (compared upper-cased) to zero-argument actions. Keys
    outside the map are not handled, and the SubMode stays installed.
    """

    def __init__(self, name: str, actions: dict[str, Callable[[], None]]) -> None:
        self.name = name
        self.actions = {key.upper(): action for key, action in actions.items()}

    def __repr__(self) -> str:
        return f"SubMode({self.name!r}, keys={sorted(self.actions)})"

    @staticmethod
    def _key_for(event: KeyEvent) -> Optional[str]:
        if event.logical_key is not LogicalKey.PRINTABLE or not event.character:
            return None
        if event.modifiers.ctrl:
            return None
        return event.character.upper()

    def accepts(self, event: KeyEvent) -> bool:
        return self._key_for(event) in self.actions

    def handle(self, event: KeyEvent) -> bool:
        """Runs the action for `event`. Returns False when the key is not accepted."""
        action = self.actions.get(self._key_for(event) or "")
        if action is None:
            return False
        logging.debug(f"SubMode {self.name!r}: accepted {event.character!r}")
        action()
        return True


Handler = Callable[[], Optional[SubMode]]


# ==================== CommandDispatcher Class ====================
class CommandDispatcher:
    """Class CommandDispatcher
    ==========================
    Closed command table for the console.

    Attributes:
        grid (ScreenGrid): Output surface.
        config (dict): Configuration merged over the built-in defaults.
        scheduler (Optional[TaskScheduler]): Receives delayed tasks. Without
            one, delayed resources are opened immediately.
        opener (Callable[[str], Any]): Host hook that opens a URI.
        rng (random.Random): Random source used by `joke`.
        previous_joke (Optional[str]): The joke shown last; never repeated
            back to back.
        commands (dict[str, Handler]): Command name -> handler, in the order
            shown by `help` and used for completion.
    """

    def __init__(
        self,
        grid: "ScreenGrid",
        config: Optional[dict[str, Any]] = None,
        scheduler: Optional["TaskScheduler"] = None,
        opener: Optional[Callable[[str], Any]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.grid = grid
        self.config: dict[str, Any] = deep_merge(DEFAULT_CONFIG, config or {})
        self.profile: dict[str, Any] = self.config["profile"]
        self.jokes: list[str] = list(self.config.get("jokes") or [])
        self.scheduler = scheduler
        self.opener: Callable[[str], Any] = opener or (lambda target: None)
        self.rng = rng or random.Random()
        self.previous_joke: Optional[str] = None

        self.commands: dict[str, Handler] = {
            "help": self.show_help,
            "about": self.show_about,
            "projects": self.show_projects,
            "contact": self.show_contact,
            "clear": self.clear,
            "whoami": self.show_whoami,
            "joke": self.tell_joke,
            "resume": self.open_resume,
            "sudo hire-me": self.hire_me,
        }

    @property
    def command_names(self) -> list[str]:
        return list(self.commands)

    def dispatch(self, command: str) -> Optional[SubMode]:
        """Runs the handler for `command`; returns the SubMode it installs, if any."""
        name = normalize_command(command)
        handler = self.commands.get(name, self.not_found)
        logging.info(f"Dispatching command {name!r} (known={name in self.commands})")
        return handler()

    # --- Helpers ---
    def _say(self, *lines: str) -> None:
        for line in lines:
            self.grid.write_line(line)

    def _open(self, target: str) -> None:
        self.opener(target)

    def _open_later(self, delay_key: str, target: str) -> None:
        delay = float(self.config.get("timings", {}).get(delay_key, 0.0))
        task = {"type": "open_resource", "target": target}
        if self.scheduler is None:
            logging.debug("No scheduler attached; opening %r immediately.", target)
            self._open(target)
            return
        self.scheduler.schedule(delay, task)

    # --- Handlers ---
    def show_help(self) -> None:
        names = ", ".join(name for name in self.commands if name != "help")
        self._say(f"Available commands: {names}")

    def show_about(self) -> None:
        self._say(self.profile["about"])

    def show_whoami(self) -> None:
        self._say(self.profile["whoami"])

    def show_projects(self) -> None:
        projects = self.profile.get("projects") or []
        for number, project in enumerate(projects, start=1):
            self._say(f"{number}. {hyperlink(project['url'], project['title'])}")
        self._say(f"More info: {hyperlink(self.profile['portfolio'], 'Here')}")

    def show_contact(self) -> SubMode:
        email, phone = self.profile["email"], self.profile["phone"]
        github, portfolio = self.profile["github"], self.profile["portfolio"]
        self._say(
            f"Email: {email} press E to mail",
            f"Phone: {phone} press C to call",
            f"GitHub: {github} press G to open GitHub",
            f"Portfolio: {portfolio} press M to open main portfolio",
        )
        return SubMode(
            "contact",
            {
                "E": functools.partial(self._open, f"mailto:{email}"),
                "C": functools.partial(self._open, f"tel:{phone}"),
                "G": functools.partial(self._open, github),
                "M": functools.partial(self._open, portfolio),
            },
        )

    def clear(self) -> None:
        self.grid.clear_screen()

    def tell_joke(self) -> None:
        self._say(self.next_joke())

    def next_joke(self) -> str:
        """Picks a random joke different from the previous one."""
        if not self.jokes:
            return "I'm out of jokes. That's the joke."
        candidates = [joke for joke in self.jokes if joke != self.previous_joke]
        joke = self.rng.choice(candidates or self.jokes)
        self.previous_joke = joke
        return joke

    def open_resume(self) -> None:
        self._say("Opening resume...")
        self._open_later("resume_open_delay", self.profile["resume"])

    def hire_me(self) -> SubMode:
        portfolio = self.profile["portfolio"]
        contact_lines = (f"Phone: {self.profile['phone']}", f"Email: {self.profile['email']}")

        def accept() -> None:
            self._say("Opening portfolio...")
            self._open_later("portfolio_open_delay", portfolio)

        def decline() -> None:
            self._say(*contact_lines)

        self._say(
            "Congratulations! You made the best decision.",
            "Do you want to open my main portfolio? (Y/N)",
        )
        return SubMode("hire-me", {"Y": accept, "N": decline})

    def not_found(self) -> None:
        check = hyperlink(self.profile["portfolio"], "Check this!")
        self._say(
            "Command not found. Type 'help' for a list of commands or "
            f"\x1b[4m\x1b[3m{check}\x1b[24m\x1b[23m\x1b[0m"
        )
