from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, model_validator

from siv.cells import (
    Cell,
    Row,
    IS,
    ISA,
    OF,
    TO,
    join_arguments,
)
from siv.errors import TranslatorInvariantError

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class EntityKind(str, Enum):
    STRUCT = "struct"
    CLASS = "class"
    ENUM = "enum"
    PROTOCOL = "protocol"
    ASSOCIATED_TYPE = "associatedtype"
    TYPE_ALIAS = "typealias"
    IMPORT = "import"
    FUNCTION = "func"
    INITIALIZER = "init"
    # Stored/computed property bound with `let`
    LET = "let"
    # Stored/computed property bound with `var`
    VAR = "var"
    ENUM_CASE = "case"
    SUBSCRIPT = "subscript"
    DEINITIALIZER = "deinit"
    EXTENSION = "extension"


class TypeKind(str, Enum):
    NAMED = "named"
    ANY = "any"
    EXISTENTIAL = "existential"
    OPTIONAL = "optional"
    IMPLICITLY_UNWRAPPED_OPTIONAL = "iuo"
    ARRAY = "array"
    DICTIONARY = "dictionary"
    TUPLE = "tuple"
    INOUT = "inout"
    FUNCTION = "function"


class RequirementKind(str, Enum):
    # Same-type constraint (`A == B`)
    EQUALS = "equals"
    # Conformance / subclass constraint (`A: B`)
    ISA = "isa"


# Head cell of every type kind that renders as `<HEAD> OF <arguments>`.
_TYPE_HEADS = {
    TypeKind.EXISTENTIAL: Cell("ANY"),
    TypeKind.OPTIONAL: Cell("OPT"),
    TypeKind.IMPLICITLY_UNWRAPPED_OPTIONAL: Cell("IUO"),
    TypeKind.ARRAY: Cell("ARRAY"),
    TypeKind.DICTIONARY: Cell("DICT"),
    TypeKind.TUPLE: Cell("TUPLE"),
}


# ---------------------------------------------------------------------------
# Renderable values
# ---------------------------------------------------------------------------
class TypeRepr(BaseModel):
    """
    Recursive representation of a type expression.

    ``name`` is set for ``NAMED`` types only, ``returning`` for ``FUNCTION``
    types only. ``INOUT`` always wraps exactly one argument.
    """
    model_config = ConfigDict(frozen=True)

    kind: TypeKind
    name: Optional[str] = None
    returning: Optional["TypeRepr"] = None
    arguments: Tuple["TypeRepr", ...] = ()

    @model_validator(mode="after")
    def _check_shape(self) -> "TypeRepr":
        if self.kind == TypeKind.NAMED and not self.name:
            raise ValueError("named types need a name")
        if self.kind == TypeKind.FUNCTION and self.returning is None:
            raise ValueError("function types need a result type")
        if self.kind == TypeKind.INOUT and len(self.arguments) != 1:
            raise ValueError("inout types wrap exactly one type")
        return self

    # Constructors
    @classmethod
    def named(cls, name: str, arguments=()) -> "TypeRepr":
        return cls(kind=TypeKind.NAMED, name=name, arguments=tuple(arguments))

    @classmethod
    def of(cls, kind: TypeKind, *arguments: "TypeRepr") -> "TypeRepr":
        return cls(kind=kind, arguments=arguments)

    @classmethod
    def function(cls, returning: "TypeRepr", arguments=()) -> "TypeRepr":
        return cls(kind=TypeKind.FUNCTION, returning=returning, arguments=tuple(arguments))

    # Rendering
    @property
    def has_trailing_arguments(self) -> bool:
        if self.kind == TypeKind.FUNCTION:
            return self.returning.has_trailing_arguments
        if self.kind == TypeKind.INOUT:
            return self.arguments[0].has_trailing_arguments
        return bool(self.arguments)

    def as_cells(self) -> Row:
        if self.kind == TypeKind.ANY:
            return [Cell("ANY")]
        if self.kind == TypeKind.INOUT:
            if len(self.arguments) != 1:
                raise TranslatorInvariantError("inout type without exactly one argument")
            return [Cell("INOUT")] + self.arguments[0].as_cells()
        if self.kind == TypeKind.FUNCTION:
            return (
                [Cell("CLOSUR"), OF]
                + join_arguments(self.arguments)
                + [TO]
                + self.returning.as_cells()
            )

        if self.kind == TypeKind.NAMED:
            head = Cell(self.name)
        elif self.kind == TypeKind.TUPLE and not self.arguments:
            return [Cell("EMPTY")]
        else:
            head = _TYPE_HEADS[self.kind]

        if not self.arguments:
            return [head]
        return [head, OF] + join_arguments(self.arguments)

    def __str__(self) -> str:
        return " ".join(cell.value for cell in self.as_cells())


class Requirement(BaseModel):
    """A generic constraint between two types."""
    model_config = ConfigDict(frozen=True)

    type_a: TypeRepr
    kind: RequirementKind
    type_b: TypeRepr

    @property
    def has_trailing_arguments(self) -> bool:
        return self.type_b.has_trailing_arguments

    def as_cells(self) -> Row:
        op = IS if self.kind == RequirementKind.EQUALS else ISA
        return self.type_a.as_cells() + [op] + self.type_b.as_cells()


class Descriptor(BaseModel):
    """Opaque modifier tag, e.g. ``PUBLIC`` or ``STATIC``."""
    model_config = ConfigDict(frozen=True)

    name: str

    @property
    def has_trailing_arguments(self) -> bool:
        return False

    def as_cells(self) -> Row:
        return [Cell(self.name)]


Argument = Union[TypeRepr, Requirement, Descriptor]


class Predicate(BaseModel):
    """A named, ordered argument list attached to an entity (``TAKES``, ``HAS``...)."""
    model_config = ConfigDict(frozen=True)

    name: str
    arguments: Tuple[Argument, ...] = ()

    def as_cells(self) -> Row:
        return [Cell(self.name)] + join_arguments(self.arguments)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
class Entity(BaseModel):
    """Translated representation of one source declaration."""
    model_config = ConfigDict(frozen=True)

    name: str
    kind: EntityKind
    generic_arguments: Tuple[str, ...] = ()
    children: Tuple["Entity", ...] = ()
    descriptors: Tuple[Descriptor, ...] = ()
    generic_requirements: Tuple[Requirement, ...] = ()
    predicates: Tuple[Predicate, ...] = ()

    @property
    def is_extension(self) -> bool:
        return self.kind == EntityKind.EXTENSION

    @property
    def is_generic(self) -> bool:
        return bool(self.generic_arguments or self.generic_requirements)


TypeRepr.model_rebuild()
Entity.model_rebuild()
