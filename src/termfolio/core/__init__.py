# src/termfolio/core/__init__.py
"""Public facade for termfolio.core: re-export main classes from CamelCase modules.

Keeps the CamelCase file names (KeyRouter.py, History.py, ...),
but provides flat imports for convenience and stability.
"""

from .Completer import Completer, Completion, CompletionKind, complete  # noqa: F401
from .Dispatcher import CommandDispatcher, SubMode, normalize_command  # noqa: F401
from .History import History  # noqa: F401
from .KeyEvent import KeyEvent, LogicalKey, Modifiers  # noqa: F401
from .KeyRouter import KeyRouter, RouterState  # noqa: F401
from .LineEditor import LineBuffer, LineEditor  # noqa: F401
from .LinkScanner import GridRow, Link, provide_links  # noqa: F401
from .Scheduler import TaskScheduler  # noqa: F401


__all__ = [
    "CommandDispatcher",
    "Completer",
    "Completion",
    "CompletionKind",
    "GridRow",
    "History",
    "KeyEvent",
    "KeyRouter",
    "LineBuffer",
    "LineEditor",
    "Link",
    "LogicalKey",
    "Modifiers",
    "RouterState",
    "SubMode",
    "TaskScheduler",
    "complete",
    "normalize_command",
    "provide_links",
]
