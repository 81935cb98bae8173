from dataclasses import dataclass
from typing import List, Protocol, Sequence, runtime_checkable


@dataclass(frozen=True, order=True)
class Cell:
    """One short text token of the output grid."""
    value: str

    def __str__(self) -> str:
        return self.value

    @property
    def is_empty(self) -> bool:
        return self.value == ""


Row = List[Cell]
Grid = List[Row]


# ---------------------------------------------------------------------------
# Fixed vocabulary
# ---------------------------------------------------------------------------
EMPTY = Cell("")
ELLIPSIS = Cell("…")

IS = Cell("IS")
ISA = Cell("ISA")
OF = Cell("OF")
AND = Cell("AND")
THEN = Cell("THEN")
WHERE = Cell("WHERE")
TO = Cell("TO")
HAS = Cell("HAS")

# Rows made of exactly one of these are collapsed by the trailing cleanup.
FILLERS = frozenset({ELLIPSIS, AND})

BANNER = (Cell("SOURCE"), Cell("IS"), Cell("VIEW"))


@runtime_checkable
class Renderable(Protocol):
    """
    Anything that can stand as an argument of a predicate, requirement or
    generic list.

    ``has_trailing_arguments`` is true when the value's own cells end in a
    nested argument list, in which case a following ``AND`` would be
    ambiguous and ``AND THEN`` is used instead.
    """

    def as_cells(self) -> Row:
        ...

    @property
    def has_trailing_arguments(self) -> bool:
        ...


def join_arguments(arguments: Sequence[Renderable]) -> Row:
    """
    Join *arguments* into one run of cells.

    Every item but the last is followed by ``AND`` (``AND THEN`` when the
    item has trailing arguments); the last item gets no separator.
    """
    cells: Row = []
    for argument in arguments[:-1]:
        cells.extend(argument.as_cells())
        if argument.has_trailing_arguments:
            cells.extend([AND, THEN])
        else:
            cells.append(AND)
    if arguments:
        cells.extend(arguments[-1].as_cells())
    return cells


def row_values(row: Sequence[Cell]) -> List[str]:
    return [cell.value for cell in row]
