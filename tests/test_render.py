import pytest

from siv.cells import AND, ELLIPSIS, EMPTY, Cell, row_values
from siv.errors import TranslatorInvariantError
from siv.models import (
    Descriptor,
    Entity,
    EntityKind,
    Predicate,
    Requirement,
    RequirementKind,
    TypeRepr,
)
from siv.render import (
    base_predicate_cells,
    collapse_trailing_fillers,
    flat_cells,
    flat_predicate_cells,
    hierarchical_cells,
)


INT = TypeRepr.named("Int")


def _rows(grid):
    return [row_values(row) for row in grid]


def _var(name, type_repr, descriptors=()):
    return Entity(
        name=name,
        kind=EntityKind.VAR,
        descriptors=tuple(Descriptor(name=d) for d in descriptors),
        predicates=(Predicate(name="HAS", arguments=(type_repr,)),),
    )


def _box():
    return Entity(
        name="Box",
        kind=EntityKind.STRUCT,
        generic_arguments=("T",),
        generic_requirements=(
            Requirement(type_a=TypeRepr.named("T"), kind=RequirementKind.ISA, type_b=TypeRepr.named("Equatable")),
        ),
        children=(_var("value", TypeRepr.named("T")),),
    )


def test_function_without_children():
    add = Entity(
        name="add",
        kind=EntityKind.FUNCTION,
        predicates=(
            Predicate(name="TAKES", arguments=(INT, INT)),
            Predicate(name="RETURN", arguments=(INT,)),
        ),
    )
    assert _rows(hierarchical_cells(add)) == [
        ["add", "IS", "FUNC"],
        [],
        ["", "add", "TAKES", "Int", "AND", "Int"],
        [],
        ["", "add", "RETURN", "Int"],
        [],
    ]


def test_generic_struct_with_child():
    assert _rows(hierarchical_cells(_box())) == [
        ["Box", "IS", "STRUCT", "OF", "T", "WHERE", "T", "ISA", "Equatable"],
        ["HAS"],
        ["value", "IS", "VAR"],
        [],
        ["", "", "value", "HAS", "T"],
        [],
        [],
    ]


def test_plain_descriptors_go_into_the_header():
    entity = _var("count", INT, descriptors=("PUBLIC", "STATIC"))
    assert row_values(base_predicate_cells(entity)) == ["count", "IS", "VAR", "AND", "PUBLIC", "AND", "STATIC"]
    assert _rows(flat_predicate_cells(entity)) == [["count", "HAS", "Int"]]


def test_generic_descriptors_get_their_own_row():
    entity = Entity(
        name="map",
        kind=EntityKind.FUNCTION,
        generic_arguments=("T", "U"),
        descriptors=(Descriptor(name="PUBLIC"),),
        predicates=(Predicate(name="RETURN", arguments=(TypeRepr.named("U"),)),),
    )
    assert row_values(base_predicate_cells(entity)) == ["map", "IS", "FUNC", "OF", "T", "AND", "U"]
    assert _rows(flat_predicate_cells(entity)) == [
        ["map", "IS", "PUBLIC"],
        ["map", "RETURN", "U"],
    ]


def test_requirements_without_generic_arguments():
    item = Entity(
        name="Item",
        kind=EntityKind.ASSOCIATED_TYPE,
        generic_requirements=(
            Requirement(type_a=TypeRepr.named("Item"), kind=RequirementKind.ISA, type_b=TypeRepr.named("Hashable")),
        ),
    )
    assert row_values(base_predicate_cells(item)) == ["Item", "IS", "ASSOC", "WHERE", "Item", "ISA", "Hashable"]


def test_own_predicates_before_children():
    shape = Entity(
        name="Shape",
        kind=EntityKind.CLASS,
        predicates=(Predicate(name="ISA", arguments=(TypeRepr.named("Base"),)),),
        children=(
            Entity(name="x", kind=EntityKind.LET, predicates=(Predicate(name="HAS", arguments=(INT,)),)),
        ),
    )
    assert _rows(hierarchical_cells(shape)) == [
        ["Shape", "IS", "CLASS"],
        ["HAS"],
        ["…", "", "Shape", "ISA", "Base"],
        ["…"],
        ["x", "IS", "LET"],
        [],
        ["", "", "x", "HAS", "Int"],
        [],
        [],
    ]


def test_filler_between_children_survives():
    owner = Entity(
        name="Owner",
        kind=EntityKind.CLASS,
        children=(
            _var("a", INT),
            Entity(name="deinit", kind=EntityKind.DEINITIALIZER),
        ),
    )
    assert _rows(hierarchical_cells(owner)) == [
        ["Owner", "IS", "CLASS"],
        ["HAS"],
        ["a", "IS", "VAR"],
        ["AND"],
        ["…", "", "a", "HAS", "Int"],
        ["…"],
        ["deinit", "IS", "DEINIT"],
        [],
        [],
    ]


def test_extension_with_children():
    extension = Entity(
        name="Foo",
        kind=EntityKind.EXTENSION,
        predicates=(Predicate(name="ISA", arguments=(TypeRepr.named("Equatable"),)),),
        children=(
            Entity(name="f", kind=EntityKind.FUNCTION, predicates=(Predicate(name="RETURN", arguments=(INT,)),)),
        ),
    )
    assert _rows(hierarchical_cells(extension)) == [
        ["Foo", "", "Foo", "ISA", "Equatable"],
        ["HAS"],
        ["f", "IS", "FUNC"],
        [],
        ["", "", "f", "RETURN", "Int"],
        [],
        [],
    ]


def test_extension_without_children():
    extension = Entity(
        name="Foo",
        kind=EntityKind.EXTENSION,
        predicates=(Predicate(name="ISA", arguments=(TypeRepr.named("P"), TypeRepr.named("Q"))),),
    )
    assert _rows(hierarchical_cells(extension)) == [
        ["Foo", "ISA", "P", "AND", "Q"],
        [],
    ]
    assert _rows(flat_cells(extension)) == [["Foo", "ISA", "P", "AND", "Q"]]


def test_extensions_have_no_header():
    with pytest.raises(TranslatorInvariantError):
        base_predicate_cells(Entity(name="Foo", kind=EntityKind.EXTENSION))


def test_flat_cells_lists_children():
    assert _rows(flat_cells(_box())) == [
        ["Box", "IS", "STRUCT", "OF", "T", "WHERE", "T", "ISA", "Equatable"],
        [],
        ["", "Box", "HAS", "value"],
    ]


def _unfinished_rows():
    return [
        [Cell("x"), Cell("IS"), Cell("VAR")],
        [ELLIPSIS],
        [Cell("y"), Cell("IS"), Cell("LET")],
        [AND],
        [ELLIPSIS, EMPTY, Cell("y"), Cell("HAS"), Cell("Int")],
        [ELLIPSIS],
    ]


def test_cleanup_is_idempotent():
    once = collapse_trailing_fillers(_unfinished_rows())
    assert collapse_trailing_fillers(once) == once


def test_cleanup_stops_at_first_content_row():
    assert _rows(collapse_trailing_fillers(_unfinished_rows())) == [
        ["x", "IS", "VAR"],
        ["…"],
        ["y", "IS", "LET"],
        [],
        ["", "", "y", "HAS", "Int"],
        [],
    ]
