# tests/ui/test_draw_screen.py
"""Unit tests for the `DrawScreen` renderer.
============================================

A real `ScreenGrid` is painted into a mocked window with `curses` patched in
the `DrawScreen` module, so the tests can inspect every `addstr` call:

- colour pair set-up for 256-colour and basic terminals,
- cell attributes (bold, underline for OSC 8 links and link regions),
- skipping the placeholder half of wide glyphs,
- cursor placement inside and outside the viewport,
- curses errors being contained.
"""

from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from termfolio.ui.DrawScreen import CONSOLE_PAIR, DrawScreen
from termfolio.ui.ScreenGrid import ScreenGrid
from termfolio.utils.utils import DEFAULT_CONFIG, hex_to_xterm


@pytest.fixture
def setup(mock_curses: MagicMock, mock_stdscr: MagicMock) -> Any:
    """Yields a `DrawScreen` bound to a 24x80 grid, with curses mocked."""
    grid = ScreenGrid(height=24, columns=80)
    app = SimpleNamespace(stdscr=mock_stdscr, grid=grid)
    with patch("termfolio.ui.DrawScreen.curses", mock_curses):
        drawer = DrawScreen(app, DEFAULT_CONFIG)  # type: ignore[arg-type]
        yield drawer, grid, mock_stdscr, mock_curses


def drawn(stdscr: MagicMock) -> dict[tuple[int, int], tuple[str, int]]:
    """Maps (y, x) to the (text, attr) of every addstr call."""
    return {(c.args[0], c.args[1]): (c.args[2], c.args[3]) for c in stdscr.addstr.call_args_list}


def test_colors_256(setup: Any) -> None:
    drawer, _, _, curses_mock = setup
    curses_mock.init_pair.assert_called_once_with(
        CONSOLE_PAIR, hex_to_xterm("#00ff00"), hex_to_xterm("#000000")
    )
    assert drawer.base_attr == curses_mock.color_pair.return_value


def test_colors_basic_terminal(mock_curses: MagicMock, mock_stdscr: MagicMock) -> None:
    mock_curses.COLORS = 8
    app = SimpleNamespace(stdscr=mock_stdscr, grid=ScreenGrid())
    with patch("termfolio.ui.DrawScreen.curses", mock_curses):
        DrawScreen(app, DEFAULT_CONFIG)  # type: ignore[arg-type]
    mock_curses.init_pair.assert_called_once_with(CONSOLE_PAIR, mock_curses.COLOR_GREEN, -1)


def test_no_colors(mock_curses: MagicMock, mock_stdscr: MagicMock) -> None:
    mock_curses.has_colors.return_value = False
    app = SimpleNamespace(stdscr=mock_stdscr, grid=ScreenGrid())
    with patch("termfolio.ui.DrawScreen.curses", mock_curses):
        drawer = DrawScreen(app, DEFAULT_CONFIG)  # type: ignore[arg-type]
    mock_curses.init_pair.assert_not_called()
    assert drawer.base_attr == mock_curses.A_NORMAL


def test_draw_cells_with_styles(setup: Any) -> None:
    drawer, grid, stdscr, curses_mock = setup
    grid.write("a\x1b[1mb\x1b[0m\x1b]8;;https://x.io\x1b\\c\x1b]8;;\x1b\\")
    drawer.draw()

    cells = drawn(stdscr)
    assert cells[(0, 0)] == ("a", drawer.base_attr)
    assert cells[(0, 1)] == ("b", drawer.base_attr | curses_mock.A_BOLD)
    assert cells[(0, 2)] == ("c", drawer.base_attr | curses_mock.A_UNDERLINE)
    stdscr.erase.assert_called_once()
    assert not grid.dirty


def test_link_regions_are_underlined(setup: Any) -> None:
    drawer, grid, stdscr, curses_mock = setup
    grid.write("go here")
    grid.register_link_region((4, 1), (8, 1), lambda: None)
    drawer.draw()

    cells = drawn(stdscr)
    assert cells[(0, 0)][1] == drawer.base_attr
    assert cells[(0, 3)][1] & curses_mock.A_UNDERLINE


def test_wide_glyph_placeholder_is_skipped(setup: Any) -> None:
    drawer, grid, stdscr, _ = setup
    grid.write("你x")
    drawer.draw()

    cells = drawn(stdscr)
    assert cells[(0, 0)][0] == "你"
    assert (0, 1) not in cells
    assert cells[(0, 2)][0] == "x"


def test_cursor_is_positioned(setup: Any) -> None:
    drawer, grid, stdscr, curses_mock = setup
    grid.write("line\r\n$ ab")
    drawer.draw()
    curses_mock.curs_set.assert_called_with(1)
    stdscr.move.assert_called_with(1, 4)


def test_cursor_hidden_when_scrolled_away(setup: Any) -> None:
    drawer, grid, stdscr, curses_mock = setup
    for n in range(40):
        grid.write_line(f"row {n}")
    grid.scroll(10)
    drawer.draw()
    curses_mock.curs_set.assert_called_with(0)
    stdscr.move.assert_not_called()


def test_only_visible_rows_are_drawn(setup: Any) -> None:
    drawer, grid, stdscr, _ = setup
    for n in range(30):
        grid.write_line(f"{n:02d}")
    drawer.draw()
    rows_drawn = {y for (y, _x) in drawn(stdscr)}
    assert max(rows_drawn) < 24
    # Rows 0..6 scrolled off; row 7 is at the top of the screen.
    assert drawn(stdscr)[(0, 0)][0] == "0"
    assert drawn(stdscr)[(0, 1)][0] == "7"


def test_curses_errors_are_contained(setup: Any) -> None:
    drawer, grid, stdscr, curses_mock = setup
    grid.write("abc")
    stdscr.addstr.side_effect = curses_mock.error("out of bounds")
    drawer.draw()
    assert not grid.dirty

    stdscr.erase.side_effect = curses_mock.error("boom")
    grid.write("d")
    drawer.draw()
    assert grid.dirty


def test_update_display(setup: Any) -> None:
    drawer, _, stdscr, curses_mock = setup
    drawer.update_display()
    stdscr.noutrefresh.assert_called_once()
    curses_mock.doupdate.assert_called_once()
