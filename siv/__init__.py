from siv.cells import Cell, Row, Grid
from siv.models import (
    Entity,
    EntityKind,
    TypeRepr,
    TypeKind,
    Requirement,
    RequirementKind,
    Descriptor,
    Predicate,
)
from siv.translate import translate_source, translate_declarations, translate_type
from siv.render import hierarchical_cells
from siv.grid import assemble_grid, generate_cells, format_grid
