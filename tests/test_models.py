import pytest
from pydantic import ValidationError

from siv.cells import Cell, AND, THEN, join_arguments, row_values
from siv.models import (
    Descriptor,
    Entity,
    EntityKind,
    Predicate,
    Requirement,
    RequirementKind,
    TypeKind,
    TypeRepr,
)


INT = TypeRepr.named("Int")
STRING = TypeRepr.named("String")


def _values(value) -> str:
    return " ".join(row_values(value.as_cells()))


@pytest.mark.parametrize(
    "type_repr, expected, trailing",
    [
        (INT, "Int", False),
        (TypeRepr.named("Array", [INT]), "Array OF Int", True),
        (TypeRepr.of(TypeKind.ARRAY, INT), "ARRAY OF Int", True),
        (TypeRepr.of(TypeKind.DICTIONARY, STRING, INT), "DICT OF String AND Int", True),
        (TypeRepr.of(TypeKind.OPTIONAL, INT), "OPT OF Int", True),
        (TypeRepr.of(TypeKind.IMPLICITLY_UNWRAPPED_OPTIONAL, INT), "IUO OF Int", True),
        (TypeRepr.of(TypeKind.TUPLE), "EMPTY", False),
        (TypeRepr.of(TypeKind.TUPLE, INT, STRING), "TUPLE OF Int AND String", True),
        (TypeRepr.of(TypeKind.EXISTENTIAL), "ANY", False),
        (TypeRepr.of(TypeKind.EXISTENTIAL, INT, STRING), "ANY OF Int AND String", True),
        (TypeRepr.of(TypeKind.ANY, INT), "ANY", True),
        (TypeRepr.of(TypeKind.INOUT, INT), "INOUT Int", False),
        (TypeRepr.of(TypeKind.INOUT, TypeRepr.of(TypeKind.ARRAY, INT)), "INOUT ARRAY OF Int", True),
        (TypeRepr.function(STRING, [INT]), "CLOSUR OF Int TO String", False),
        (
            TypeRepr.function(TypeRepr.of(TypeKind.ARRAY, INT), [TypeRepr.of(TypeKind.TUPLE)]),
            "CLOSUR OF EMPTY TO ARRAY OF Int",
            True,
        ),
    ],
)
def test_type_cells(type_repr, expected, trailing):
    assert _values(type_repr) == expected
    assert type_repr.has_trailing_arguments is trailing


def test_type_rendering_is_deterministic():
    nested = TypeRepr.of(
        TypeKind.DICTIONARY,
        STRING,
        TypeRepr.function(TypeRepr.of(TypeKind.OPTIONAL, INT), [INT, STRING]),
    )
    assert nested.as_cells() == nested.as_cells()
    assert str(nested) == "DICT OF String AND CLOSUR OF Int AND String TO OPT OF Int"


def test_inout_needs_exactly_one_argument():
    with pytest.raises(ValidationError):
        TypeRepr.of(TypeKind.INOUT)
    with pytest.raises(ValidationError):
        TypeRepr.of(TypeKind.INOUT, INT, STRING)


def test_named_and_function_shapes_are_validated():
    with pytest.raises(ValidationError):
        TypeRepr(kind=TypeKind.NAMED)
    with pytest.raises(ValidationError):
        TypeRepr(kind=TypeKind.FUNCTION, arguments=(INT,))


def test_requirement_cells():
    isa = Requirement(type_a=TypeRepr.named("T"), kind=RequirementKind.ISA, type_b=TypeRepr.named("Equatable"))
    same = Requirement(
        type_a=TypeRepr.named("T"),
        kind=RequirementKind.EQUALS,
        type_b=TypeRepr.of(TypeKind.ARRAY, INT),
    )
    assert _values(isa) == "T ISA Equatable"
    assert isa.has_trailing_arguments is False
    assert _values(same) == "T IS ARRAY OF Int"
    assert same.has_trailing_arguments is True


def test_predicate_cells():
    predicate = Predicate(name="CAN", arguments=(Descriptor(name="MUTATE"), Descriptor(name="THROW")))
    assert _values(predicate) == "CAN MUTATE AND THROW"


def test_join_single_argument_has_no_separator():
    assert join_arguments([INT]) == INT.as_cells()
    assert join_arguments([]) == []


def test_join_separator_count_and_placement():
    arguments = [
        TypeRepr.of(TypeKind.ARRAY, INT),
        INT,
        TypeRepr.of(TypeKind.OPTIONAL, STRING),
        Descriptor(name="STATIC"),
    ]
    cells = join_arguments(arguments)
    assert row_values(cells) == [
        "ARRAY", "OF", "Int", "AND", "THEN",
        "Int", "AND",
        "OPT", "OF", "String", "AND", "THEN",
        "STATIC",
    ]
    assert cells.count(AND) == len(arguments) - 1
    assert cells.count(THEN) == 2


def test_cells_compare_by_value():
    assert Cell("A") == Cell("A")
    assert Cell("A") < Cell("B")
    assert Cell("").is_empty


def test_entity_flags():
    entity = Entity(name="Foo", kind=EntityKind.EXTENSION)
    assert entity.is_extension
    assert not entity.is_generic
    generic = Entity(name="f", kind=EntityKind.FUNCTION, generic_arguments=("T",))
    assert generic.is_generic
