# termfolio/core/LinkScanner.py
"""LinkScanner Module
===================
Finds URLs in rendered output and maps them back to grid coordinates.

A URL printed near the right edge of the grid is soft-wrapped across several
physical rows, so scanning happens on the *logical* line: the run of rows
joined by soft-wrap that contains the requested row. Matches are found in
the joined text and each character is translated back to the physical cell
it occupies. A wide glyph covers two cells, so columns are counted in cells,
not characters.

Coordinates are 1-based, columns and rows alike. A link's ``start`` is its
first character; its ``end`` is one column past its last character, on the
row holding that last character. A URL that ends exactly at the row width
therefore ends at ``columns + 1`` on that row, never at column 1 of the next.

The scanner is stateless: links are recomputed on demand and never stored.
"""

import re
from dataclasses import dataclass
from typing import Callable, Protocol

from wcwidth import wcwidth


URL_PATTERN = re.compile(r"https?://\S+")

Coordinate = tuple[int, int]


@dataclass(frozen=True)
class GridRow:
    """One physical row as exposed by the renderer."""

    text: str
    is_wrapped: bool = False  # True when this row continues the row above


class RowSource(Protocol):
    @property
    def row_count(self) -> int: ...

    def read_row(self, index: int) -> GridRow: ...


@dataclass(frozen=True)
class Link:
    text: str
    start: Coordinate
    end: Coordinate


def logical_line_bounds(source: RowSource, index: int) -> tuple[int, int]:
    """Returns the 0-based, inclusive row range of the logical line at `index`."""
    start = index
    while start > 0 and source.read_row(start).is_wrapped:
        start -= 1
    end = index
    while end + 1 < source.row_count and source.read_row(end + 1).is_wrapped:
        end += 1
    return start, end


def _cell_spans(text: str) -> list[tuple[int, int]]:
    """Returns the 1-based start column and cell width of each character.

    Wide glyphs take two cells. A zero-width mark shares the cell of the
    glyph before it.
    """
    spans: list[tuple[int, int]] = []
    column = 1
    for ch in text:
        width = wcwidth(ch)
        if width <= 0 and spans:
            spans.append(spans[-1])
            continue
        width = max(width, 1)
        spans.append((column, width))
        column += width
    return spans


def provide_links(source: RowSource, y: int) -> list[Link]:
    """Scans the logical line containing 1-based row `y` for URLs."""
    index = y - 1
    if index < 0 or index >= source.row_count:
        return []

    first, last = logical_line_bounds(source, index)
    texts: list[str] = []
    # (column, width, row) of every character of the joined text.
    cells: list[tuple[int, int, int]] = []
    for row_index in range(first, last + 1):
        text = source.read_row(row_index).text
        texts.append(text)
        cells.extend((x, width, row_index + 1) for x, width in _cell_spans(text))
    logical = "".join(texts)

    links: list[Link] = []
    for match in URL_PATTERN.finditer(logical):
        start_x, _, start_y = cells[match.start()]
        last_x, last_width, last_y = cells[match.end() - 1]
        links.append(Link(match.group(0), (start_x, start_y), (last_x + last_width, last_y)))
    return links


def link_callbacks(
    links: list[Link], activate: Callable[[str], None]
) -> list[tuple[Link, Callable[[], None]]]:
    """Pairs each link with a zero-argument activation bound to its URL."""
    return [(link, _bind(activate, link.text)) for link in links]


def _bind(activate: Callable[[str], None], url: str) -> Callable[[], None]:
    return lambda: activate(url)
