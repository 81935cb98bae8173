from typing import Dict, List, Optional, Sequence

from siv.cells import (
    Cell,
    Grid,
    Row,
    AND,
    ELLIPSIS,
    EMPTY,
    FILLERS,
    HAS,
    IS,
    OF,
    WHERE,
    join_arguments,
)
from siv.errors import TranslatorInvariantError
from siv.models import Entity, EntityKind


KIND_CELLS: Dict[EntityKind, Cell] = {
    EntityKind.STRUCT: Cell("STRUCT"),
    EntityKind.CLASS: Cell("CLASS"),
    EntityKind.ENUM: Cell("ENUM"),
    EntityKind.PROTOCOL: Cell("PROTO"),
    EntityKind.ASSOCIATED_TYPE: Cell("ASSOC"),
    EntityKind.TYPE_ALIAS: Cell("ALIAS"),
    EntityKind.IMPORT: Cell("IMPORT"),
    EntityKind.FUNCTION: Cell("FUNC"),
    EntityKind.INITIALIZER: Cell("INIT"),
    EntityKind.LET: Cell("LET"),
    EntityKind.VAR: Cell("VAR"),
    EntityKind.ENUM_CASE: Cell("CASE"),
    EntityKind.SUBSCRIPT: Cell("SUBSCRIPT"),
    EntityKind.DEINITIALIZER: Cell("DEINIT"),
}


def kind_cell(kind: EntityKind) -> Cell:
    cell = KIND_CELLS.get(kind)
    if cell is None:
        raise TranslatorInvariantError(f"{kind.value} entities have no kind cell")
    return cell


def base_predicate_cells(entity: Entity) -> Row:
    """
    Header row: ``NAME IS KIND``, then either ``OF args WHERE requirements``
    for generic entities or ``AND descriptors`` for plain ones.
    """
    if entity.is_extension:
        raise TranslatorInvariantError("extensions have no header row")
    cells = [Cell(entity.name), IS, kind_cell(entity.kind)]
    if entity.is_generic:
        for index, argument in enumerate(entity.generic_arguments):
            cells += [OF if index == 0 else AND, Cell(argument)]
        if entity.generic_requirements:
            cells += [WHERE] + join_arguments(entity.generic_requirements)
    elif entity.descriptors:
        cells += [AND] + join_arguments(entity.descriptors)
    return cells


def children_predicate_cells(entity: Entity) -> Optional[Row]:
    """``NAME HAS child1 AND child2 ...``, or None for a childless entity."""
    if not entity.children:
        return None
    cells = [Cell(entity.name)]
    for index, child in enumerate(entity.children):
        cells += [HAS if index == 0 else AND, Cell(child.name)]
    return cells


def flat_predicate_cells(entity: Entity) -> List[Row]:
    """
    One row per predicate, each starting with the entity name.

    Generic entities and extensions have no room for descriptors in their
    header, so their descriptors come first as ``NAME IS desc...``.
    """
    rows: List[Row] = []
    if (entity.is_generic or entity.is_extension) and entity.descriptors:
        rows.append([Cell(entity.name), IS] + join_arguments(entity.descriptors))
    for predicate in entity.predicates:
        rows.append([Cell(entity.name)] + predicate.as_cells())
    return rows


def flat_predicate_cells_including_children(entity: Entity) -> List[Row]:
    rows = flat_predicate_cells(entity)
    children = children_predicate_cells(entity)
    if children is not None:
        rows.append(children)
    return rows


def flat_cells(entity: Entity) -> Grid:
    """Non-nested rendering: header, then every predicate after a blank row."""
    if entity.is_extension:
        rows: Grid = []
        for predicate in flat_predicate_cells_including_children(entity):
            rows += [predicate, []]
        return rows[:-1]
    rows = [base_predicate_cells(entity)]
    for predicate in flat_predicate_cells_including_children(entity):
        rows += [[], [EMPTY] + predicate]
    return rows


def collapse_trailing_fillers(rows: Sequence[Row]) -> Grid:
    """
    Scan from the end: rows holding a single filler token become blank and
    a leading ellipsis is blanked, until a row that is neither is reached.
    """
    result = [list(row) for row in rows]
    for index in range(len(result) - 1, -1, -1):
        row = result[index]
        if len(row) == 1 and row[0] in FILLERS:
            result[index] = []
            continue
        if row and row[0] == ELLIPSIS:
            result[index] = [EMPTY] + row[1:]
            continue
        break
    return result


def _continued(predicates: Sequence[Row]) -> Grid:
    rows: Grid = []
    for predicate in predicates:
        rows.append([ELLIPSIS, EMPTY] + predicate)
        rows.append([ELLIPSIS])
    return rows


def hierarchical_cells(entity: Entity) -> Grid:
    """
    Multi-row rendering of a top-level entity, its predicates and its
    children, terminated by a blank row.
    """
    predicates = flat_predicate_cells(entity)

    if not entity.children:
        if entity.is_extension:
            return flat_cells(entity) + [[]]
        rows: Grid = [base_predicate_cells(entity)]
        for predicate in predicates:
            rows += [[], [EMPTY] + predicate]
        rows.append([])
        return rows

    if entity.is_extension:
        # extensions open with their first predicate instead of a header
        rows = [[Cell(entity.name), EMPTY] + (predicates[0] if predicates else [])]
        remaining = predicates[1:]
    else:
        rows = [base_predicate_cells(entity)]
        remaining = predicates
    rows.append([HAS])
    rows += _continued(remaining)

    for child in entity.children:
        rows.append(base_predicate_cells(child))
        rows.append([AND])
        rows += _continued(flat_predicate_cells(child))

    rows = collapse_trailing_fillers(rows)
    rows.append([])
    return rows
