from typing import Iterable, Optional, Sequence, Union

from siv.cells import BANNER, EMPTY, Grid, Row
from siv.models import Entity
from siv.render import hierarchical_cells
from siv.settings import SivSettings
from siv.translate import translate_source


def _padded(row: Row, length: int) -> Row:
    return list(row) + [EMPTY] * (length - len(row))


def longest_row_length(grid: Sequence[Row]) -> int:
    return max((len(row) for row in grid), default=0)


def apply_banner(grid: Grid) -> Grid:
    """
    Write the three banner words down the right edge of the first three rows
    when the first four rows are all short enough to leave a free column.
    """
    longest = longest_row_length(grid)
    # Four rows are checked so that a grid with more than three rows keeps a
    # blank cell below the last banner word.
    if len(grid) < 3 or not all(len(row) < longest - 1 for row in grid[:4]):
        return grid
    result = [list(row) for row in grid]
    for index, word in enumerate(BANNER):
        result[index] = _padded(result[index], longest - 1) + [word]
    return result


def assemble_grid(entities: Iterable[Entity], banner: bool = True) -> Grid:
    """Whole-file grid: a leading blank row, then every entity's rows."""
    grid: Grid = [[]]
    for entity in entities:
        grid += hierarchical_cells(entity)
    if banner:
        grid = apply_banner(grid)
    return grid


def generate_cells(
    source: Union[str, bytes],
    settings: Optional[SivSettings] = None,
    path: Optional[str] = None,
) -> Grid:
    """Parse Swift *source* and lay it out as a cell grid."""
    settings = settings or SivSettings()
    entities = translate_source(source, include_imports=settings.include_imports, path=path)
    return assemble_grid(entities, banner=settings.banner)


def format_grid(grid: Sequence[Row], width: Optional[int] = None) -> str:
    """
    Monospaced text rendering, one line per row. Cells are upper-cased and
    left-justified to *width* (default: the widest cell).
    """
    if width is None:
        width = max((len(cell.value) for row in grid for cell in row), default=0)
    lines = []
    for row in grid:
        line = " ".join(cell.value.upper().ljust(width) for cell in row)
        lines.append(line.rstrip())
    return "\n".join(lines)
