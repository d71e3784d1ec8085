# termfolio/core/Completer.py
"""Tab completion against the static command table."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence

from termfolio.core.Dispatcher import normalize_command


class CompletionKind(Enum):
    NONE = "none"
    UNIQUE = "unique"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class Completion:
    kind: CompletionKind
    candidates: tuple[str, ...] = ()
    common_prefix: str = ""

    @property
    def candidate(self) -> str:
        """The single match of a UNIQUE completion."""
        return self.candidates[0] if self.kind is CompletionKind.UNIQUE else ""


def complete(prefix: str, table: Iterable[str]) -> Completion:
    """Matches `prefix` against `table`, keeping the table's declaration order.

    The prefix gets the same normalization as dispatch; table names are
    expected to be normalized already.
    """
    needle = normalize_command(prefix)
    matches = tuple(name for name in table if name.startswith(needle))
    logging.debug("complete: %r -> %d match(es)", prefix, len(matches))
    if not matches:
        return Completion(CompletionKind.NONE)
    common = os.path.commonprefix(list(matches))
    if len(matches) == 1:
        return Completion(CompletionKind.UNIQUE, matches, common)
    return Completion(CompletionKind.MULTIPLE, matches, common)


class Completer:
    """Binds `complete()` to one command table."""

    def __init__(self, table: Sequence[str]) -> None:
        self.table: tuple[str, ...] = tuple(table)

    def complete(self, prefix: str) -> Completion:
        return complete(prefix, self.table)
