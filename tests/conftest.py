# tests/conftest.py
"""Pytest configuration with shared fixtures for the termfolio console tests.

The console core only needs a `ScreenGrid`, so most fixtures build real
objects. Curses is replaced by a `MagicMock` only where a real window would
be required (the host `ConsoleApp` and `DrawScreen`).
"""

from __future__ import annotations

import curses as real_curses
import random
from typing import Any, Generator
from unittest.mock import MagicMock, patch

import pytest

from termfolio.core.Dispatcher import CommandDispatcher
from termfolio.core.KeyRouter import KeyRouter
from termfolio.ui.ConsoleApp import ConsoleApp
from termfolio.ui.ScreenGrid import ScreenGrid

from tests.stubs import RecordingOpener, StubScheduler


# Real values for the curses names the host code compares against or ORs together.
CURSES_CONSTANTS = (
    "ERR",
    "KEY_RESIZE",
    "KEY_MOUSE",
    "KEY_PPAGE",
    "KEY_NPAGE",
    "A_NORMAL",
    "A_BOLD",
    "A_UNDERLINE",
    "A_ITALIC",
    "COLOR_GREEN",
    "BUTTON1_CLICKED",
    "BUTTON1_RELEASED",
)


def make_curses_mock() -> MagicMock:
    """Build a `curses` stand-in usable without `initscr()`.

    Returns:
        MagicMock: Mocked module keeping the real `error` class and constants.
    """
    curses_mock = MagicMock()
    curses_mock.error = real_curses.error
    for name in CURSES_CONSTANTS:
        setattr(curses_mock, name, getattr(real_curses, name, 0))
    curses_mock.COLORS = 256
    curses_mock.has_colors.return_value = True
    curses_mock.color_pair.return_value = 0
    return curses_mock


# --- Base fixtures for curses and configuration ---
@pytest.fixture
def mock_curses() -> MagicMock:
    return make_curses_mock()


@pytest.fixture
def mock_stdscr() -> MagicMock:
    """Create a mock of the `curses` stdscr.

    Returns:
        MagicMock: A mocked `stdscr` with terminal size set to (24, 80).
    """
    stdscr = MagicMock()
    stdscr.getmaxyx.return_value = (24, 80)
    return stdscr


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Configuration overrides used across the tests (merged over defaults)."""
    return {
        "console": {"prompt": "$ ", "scrollback": 200},
        "timings": {"resume_open_delay": 1.0, "portfolio_open_delay": 2.0},
        "logging": {"log_to_console": False},
    }


# --- Core fixtures ---
@pytest.fixture
def grid() -> ScreenGrid:
    return ScreenGrid(height=24, columns=80, scrollback=200)


@pytest.fixture
def scheduler() -> StubScheduler:
    return StubScheduler()


@pytest.fixture
def opener() -> RecordingOpener:
    return RecordingOpener()


@pytest.fixture
def dispatcher(
    grid: ScreenGrid,
    mock_config: dict[str, Any],
    scheduler: StubScheduler,
    opener: RecordingOpener,
) -> CommandDispatcher:
    """A real dispatcher with a seeded random source and recording hooks."""
    return CommandDispatcher(
        grid,
        config=mock_config,
        scheduler=scheduler,  # type: ignore[arg-type]
        opener=opener,
        rng=random.Random(1234),
    )


@pytest.fixture
def router(grid: ScreenGrid, dispatcher: CommandDispatcher) -> KeyRouter:
    """A router attached to the grid, with its first prompt already shown."""
    key_router = KeyRouter(grid, dispatcher, prompt="$ ")
    key_router.attach()
    return key_router


# --- Host fixtures ---
@pytest.fixture
def console_app(
    mock_stdscr: MagicMock,
    mock_config: dict[str, Any],
    mock_curses: MagicMock,
) -> Generator[tuple[ConsoleApp, MagicMock], None, None]:
    """A lightweight `ConsoleApp` with curses and the resource opener mocked.

    Yields:
        tuple[ConsoleApp, MagicMock]: The app and the patched
        `open_external_resource`.
    """
    with (
        patch("termfolio.ui.ConsoleApp.curses", mock_curses),
        patch("termfolio.ui.DrawScreen.curses", mock_curses),
        patch("termfolio.ui.ConsoleApp.open_external_resource") as mock_open,
    ):
        app = ConsoleApp(mock_stdscr, mock_config, lightweight_mode=True)
        yield app, mock_open
