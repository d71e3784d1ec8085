# tests/ui/test_screen_grid.py
"""Unit tests for the `ScreenGrid` renderer.
============================================

Covers the control codes the console emits and the bookkeeping the link
scanner and the drawer rely on:

- plain text, CR/LF, backspace and the pending-wrap rule,
- CSI cursor movement and erase sequences, SGR styles and OSC 8 links,
- sequences split across two writes,
- clear/reset, scrollback trimming, viewport scrolling,
- key listeners and link regions.
"""

from unittest.mock import MagicMock

import pytest

from termfolio.core.KeyEvent import KeyEvent
from termfolio.ui.ScreenGrid import LinkRegion, ScreenGrid


@pytest.fixture
def small() -> ScreenGrid:
    return ScreenGrid(height=4, columns=10, scrollback=3)


# --- Text and wrapping ---
def test_write_plain_text(small: ScreenGrid) -> None:
    small.write("hello")
    assert small.read_row(0).text == "hello"
    assert (small.cursor_x, small.cursor_y) == (5, 0)
    assert small.dirty


def test_write_line_moves_to_next_row(small: ScreenGrid) -> None:
    small.write_line("hi")
    assert small.row_count == 2
    assert (small.cursor_x, small.cursor_y) == (0, 1)


def test_pending_wrap_and_soft_wrap_flag(small: ScreenGrid) -> None:
    small.write("0123456789")
    assert small.row_count == 1
    assert small.cursor_x == 10

    small.write("abc")
    assert small.row_count == 2
    assert small.read_row(0).text == "0123456789"
    assert not small.read_row(0).is_wrapped
    assert small.read_row(1).text == "abc"
    assert small.read_row(1).is_wrapped


def test_hard_newline_is_not_a_continuation(small: ScreenGrid) -> None:
    small.write("0123456789\r\nabc")
    assert not small.read_row(1).is_wrapped


def test_backspace_from_pending_wrap_lands_on_last_column(small: ScreenGrid) -> None:
    small.write("0123456789\b")
    assert small.cursor_x == 9
    small.write("X")
    assert small.read_row(0).text == "012345678X"
    assert small.row_count == 1


def test_wide_glyph_takes_two_cells(small: ScreenGrid) -> None:
    small.write("a你b")
    row = small.row(0)
    assert [cell.char for cell in row.cells] == ["a", "你", "", "b"]
    assert small.read_row(0).text == "a你b"
    assert small.cursor_x == 4


def test_wide_glyph_wraps_when_it_does_not_fit(small: ScreenGrid) -> None:
    small.write("012345678你")
    assert small.read_row(0).text == "012345678"
    assert small.read_row(1).text == "你"


def test_overwriting_half_a_wide_glyph_blanks_the_other_half(small: ScreenGrid) -> None:
    small.write("你好\rx")
    assert [cell.char for cell in small.row(0).cells] == ["x", " ", "好", ""]
    small.write("\x1b[4Gy")
    assert [cell.char for cell in small.row(0).cells] == ["x", " ", " ", "y"]


def test_tab_advances_to_next_stop() -> None:
    grid = ScreenGrid(columns=20)
    grid.write("ab\tc")
    assert grid.cursor_x == 9


# --- CSI ---
def test_cursor_left_and_overwrite(small: ScreenGrid) -> None:
    small.write("abc\x1b[2Dz")
    assert small.read_row(0).text == "azc"


def test_cursor_up_and_column(small: ScreenGrid) -> None:
    small.write("first\r\nsecond\x1b[A\x1b[3GX")
    assert small.read_row(0).text == "fiXst"


def test_cursor_position(small: ScreenGrid) -> None:
    small.write("\x1b[2;4HX")
    assert small.read_row(1).text == "   X"


def test_erase_line_modes(small: ScreenGrid) -> None:
    small.write("abcdef\x1b[3G\x1b[K")
    assert small.read_row(0).text == "ab"
    small.write("\r\x1b[2K")
    assert small.read_row(0).text == ""


def test_erase_display_below(small: ScreenGrid) -> None:
    small.write("one\r\ntwo\r\nthree\x1b[2A\r\x1b[J")
    assert small.row_count == 1
    assert small.read_row(0).text == ""


def test_erase_display_all_clears(small: ScreenGrid) -> None:
    small.write("one\r\ntwo\x1b[2J")
    assert small.row_count == 1
    assert (small.cursor_x, small.cursor_y) == (0, 0)


def test_private_modes_are_ignored(small: ScreenGrid) -> None:
    small.write("\x1b[?25lok\x1b[?25h")
    assert small.read_row(0).text == "ok"


def test_sgr_styles(small: ScreenGrid) -> None:
    small.write("\x1b[1ma\x1b[3;4mb\x1b[0mc")
    cells = small.row(0).cells
    assert cells[0].style.bold and not cells[0].style.italic
    assert cells[1].style.bold and cells[1].style.italic and cells[1].style.underline
    assert not (cells[2].style.bold or cells[2].style.italic or cells[2].style.underline)


def test_osc8_hyperlink(small: ScreenGrid) -> None:
    small.write("\x1b]8;;https://x.io\x1b\\XY\x1b]8;;\x1b\\Z")
    assert small.read_row(0).text == "XYZ"
    assert small.uri_at(1, 1) == "https://x.io"
    assert small.uri_at(2, 1) == "https://x.io"
    assert small.uri_at(3, 1) is None
    assert small.uri_at(9, 9) is None


def test_sequence_split_across_writes(small: ScreenGrid) -> None:
    small.write("a\x1b[")
    small.write("1mb")
    cells = small.row(0).cells
    assert small.read_row(0).text == "ab"
    assert cells[1].style.bold


def test_unknown_escape_is_consumed(small: ScreenGrid) -> None:
    small.write("a\x1b7b\x1b[5Xc")
    assert small.read_row(0).text == "abc"


# --- Clear / reset / scrollback ---
def test_reset_screen_drops_style_and_pending_sequence(small: ScreenGrid) -> None:
    small.write("\x1b[1mbold\x1b[")
    small.reset_screen()
    small.write("x")
    assert small.read_row(0).text == "x"
    assert not small.row(0).cells[0].style.bold


def test_scrollback_is_trimmed(small: ScreenGrid) -> None:
    for n in range(20):
        small.write_line(f"line {n}")
    assert small.row_count == small.height + small.scrollback
    assert small.read_row(small.row_count - 2).text == "line 19"
    assert small.cursor_y == small.row_count - 1


def test_visible_rows_and_scrolling(small: ScreenGrid) -> None:
    for n in range(6):
        small.write_line(f"line {n}")
    # 7 rows, 4 visible
    assert list(small.visible_rows()) == [4, 5, 6, 7]
    assert small.viewport_top == 3

    assert small.scroll(2)
    assert list(small.visible_rows()) == [2, 3, 4, 5]
    assert small.scroll(10)
    assert small.viewport_top == 0
    assert not small.scroll(1)
    assert small.scroll(-3)
    assert small.viewport_top == 3


def test_new_output_scrolls_back_to_bottom(small: ScreenGrid) -> None:
    for n in range(6):
        small.write_line(f"line {n}")
    small.scroll(3)
    small.write_line("more")
    assert small.scroll_offset == 0


def test_resize(small: ScreenGrid) -> None:
    small.write("0123456789")
    small.resize(10, 5)
    assert (small.height, small.columns) == (10, 5)
    assert small.cursor_x == 5


# --- Key listeners ---
def test_emit_key_reaches_every_listener(small: ScreenGrid) -> None:
    first = MagicMock(return_value=False)
    second = MagicMock(return_value=True)
    small.register_key_listener(first)
    small.register_key_listener(second)
    event = KeyEvent.printable("a")
    assert small.emit_key(event)
    first.assert_called_once_with(event)
    second.assert_called_once_with(event)


# --- Link regions ---
def test_link_region_contains_is_row_major_and_exclusive() -> None:
    region = LinkRegion((5, 1), (4, 3), lambda: None)
    assert region.contains(5, 1)
    assert region.contains(80, 1)
    assert region.contains(1, 2)
    assert region.contains(3, 3)
    assert not region.contains(4, 3)
    assert not region.contains(4, 1)


def test_register_link_region_replaces_same_span(small: ScreenGrid) -> None:
    first, second = MagicMock(), MagicMock()
    small.register_link_region((1, 1), (5, 1), first)
    small.register_link_region((1, 1), (5, 1), second)
    assert len(small.link_regions) == 1
    assert small.link_at(2, 1) is second
    assert small.link_at(5, 1) is None

    small.clear_link_regions()
    assert small.link_regions == []


def test_clear_screen_drops_link_regions(small: ScreenGrid) -> None:
    small.register_link_region((1, 1), (5, 1), MagicMock())
    small.clear_screen()
    assert small.link_regions == []
