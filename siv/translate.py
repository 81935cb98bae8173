from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

from siv.errors import (
    TranslationError,
    BadType,
    BadRequirement,
    IncompleteSource,
    OtherBadness,
)
from siv.lang import swift
from siv.lang.swift import TypeSlot
from siv.logger import SivLogger
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


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------
ANY_OBJECT = TypeRepr.named("AnyObject")


def translate_type(node) -> TypeRepr:
    """
    Translate a type node into a ``TypeRepr``.

    Raises ``BadType`` for shapes that have no representation (metatypes,
    member types, opaque types...).
    """
    kind = node.type
    if kind == "user_type":
        components = swift.user_type_components(node)
        if len(components) != 1:
            raise BadType(node)
        name, arguments = components[0]
        return TypeRepr.named(name, [translate_type(a) for a in arguments])

    if kind == "array_type":
        (element,) = _wrapped(node, 1)
        return TypeRepr.of(TypeKind.ARRAY, translate_type(element))

    if kind == "dictionary_type":
        key, value = _wrapped(node, 2)
        return TypeRepr.of(TypeKind.DICTIONARY, translate_type(key), translate_type(value))

    if kind == "optional_type":
        (wrapped,) = _wrapped(node, 1)
        result = translate_type(wrapped)
        for _ in range(swift.optional_depth(node)):
            result = TypeRepr.of(TypeKind.OPTIONAL, result)
        return result

    if kind == "tuple_type":
        return TypeRepr.of(TypeKind.TUPLE, *_translate_slots(swift.element_slots(node)))

    if kind == "function_type":
        # "throws" and "async" are dropped
        params, result = swift.function_type_parts(node)
        if params is None or result is None:
            raise BadType(node)
        arguments = _translate_slots(params) or [TypeRepr.of(TypeKind.TUPLE)]
        return TypeRepr.function(translate_type(result), arguments)

    if kind == "protocol_composition_type":
        return TypeRepr.of(TypeKind.EXISTENTIAL, *[translate_type(t) for t in swift.wrapped_types(node)])

    if kind == "existential_type":
        return TypeRepr.of(TypeKind.EXISTENTIAL, *[translate_type(t) for t in swift.wrapped_types(node)])

    # FIXME: metatypes, member types and opaque types
    raise BadType(node)


def _wrapped(node, count: int) -> list:
    types = swift.wrapped_types(node)
    if len(types) != count:
        raise BadType(node)
    return types


def translate_slot(slot: Optional[TypeSlot], owner=None) -> TypeRepr:
    """Translate a type written in a parameter, annotation or tuple element."""
    if slot is None:
        raise IncompleteSource(owner)
    result = translate_type(slot.node)
    if slot.unwrapped:
        result = TypeRepr.of(TypeKind.IMPLICITLY_UNWRAPPED_OPTIONAL, result)
    if slot.inout:
        result = TypeRepr.of(TypeKind.INOUT, result)
    return result


def _translate_slots(slots, owner=None) -> List[TypeRepr]:
    return [translate_slot(slot, owner) for slot in slots]


def _translate_inherited(node) -> TypeRepr:
    if swift.node_text(node).strip() == "class":
        # legacy `protocol P: class`
        return ANY_OBJECT
    if node.type in swift.TYPE_NODES:
        return translate_type(node)
    return translate_slot(swift.type_slot(node), node)


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------
MODIFIER_DESCRIPTORS: Dict[str, str] = {
    "open": "OPEN",
    "public": "PUBLIC",
    "internal": "INTERN",
    "fileprivate": "FILE",
    "private": "PRIVAT",

    "class": "CLASS",
    "convenience": "CONV",
    "final": "FINAL",
    "indirect": "INDIRECT",
    "lazy": "LAZY",
    "override": "OVER",
    "static": "STATIC",
}

MUTATE = Descriptor(name="MUTATE")
THROW = Descriptor(name="THROW")
RETHROW = Descriptor(name="RETHROW")
FAIL = Descriptor(name="FAIL")
FAIL_FORCED = Descriptor(name="FAIL!")


def collect_modifiers(node) -> Tuple[List[Descriptor], bool]:
    """
    Map the declaration's modifiers to descriptors.

    Returns ``(descriptors, is_mutating)``; `mutating` is a capability, not
    a descriptor. Unknown modifiers are ignored.
    """
    descriptors: List[Descriptor] = []
    is_mutating = False
    for keyword in swift.modifier_keywords(node):
        if keyword == "mutating":
            is_mutating = True
            continue
        tag = MODIFIER_DESCRIPTORS.get(keyword)
        if tag is not None:
            descriptors.append(Descriptor(name=tag))
    return descriptors, is_mutating


# ---------------------------------------------------------------------------
# Generics
# ---------------------------------------------------------------------------
def collect_generic_arguments(node) -> List[str]:
    return [name for name, _ in swift.generic_parameters(node)]


def collect_generic_requirements(node, include_parameters: bool = True) -> List[Requirement]:
    """
    Inline bounds of the generic parameters (``T: P``), followed by the
    requirements of the `where` clause.
    """
    implicit: List[Requirement] = []
    if include_parameters:
        for name, bound in swift.generic_parameters(node):
            if bound is None:
                continue
            implicit.append(Requirement(
                type_a=TypeRepr.named(name),
                kind=RequirementKind.ISA,
                type_b=translate_type(bound),
            ))

    explicit = [translate_requirement(r) for r in swift.where_requirements(node)]
    return implicit + explicit


def translate_requirement(node) -> Requirement:
    operator, left, right = swift.requirement_parts(node)
    if operator is None or not left or len(right) != 1:
        raise BadRequirement(node)

    name = swift.constrained_name(left)
    if name is not None:
        type_a = TypeRepr.named(name)
    elif len(left) == 1 and left[0].type in swift.TYPE_NODES:
        type_a = translate_type(left[0])
    else:
        # `T.Element == U` and friends
        raise BadType(node)

    kind = RequirementKind.ISA if operator == "isa" else RequirementKind.EQUALS
    return Requirement(type_a=type_a, kind=kind, type_b=translate_type(right[0]))


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Translated:
    entities: Tuple[Entity, ...]


@dataclass(frozen=True)
class Dropped:
    reason: TranslationError


TranslationResult = Union[Translated, Dropped]

Handler = Callable[[object], List[Entity]]


def attempt(handler: Handler, node) -> TranslationResult:
    """
    Run *handler* on *node*, turning recoverable translation errors into a
    ``Dropped`` result. Anything else propagates.
    """
    try:
        return Translated(tuple(handler(node)))
    except TranslationError as exc:
        SivLogger.debug(
            "translate.dropped",
            reason=exc.reason,
            node_type=getattr(node, "type", None),
            failed_at=exc.node_type,
            line=exc.line,
        )
        return Dropped(exc)


_NOMINAL_KINDS = {
    "struct": EntityKind.STRUCT,
    "class": EntityKind.CLASS,
    "enum": EntityKind.ENUM,
    "protocol": EntityKind.PROTOCOL,
}


class DeclarationTranslator:
    """
    Walks a syntax tree top-down and builds one ``Entity`` per recognised
    declaration.

    Recognised declarations are not descended into; their member blocks are
    translated by a fresh translator whose entities become the children.
    Every instance owns its accumulator, so independent subtrees can be
    translated concurrently.
    """

    def __init__(self, include_imports: bool = False, nested: bool = False) -> None:
        self.include_imports = include_imports
        self.nested = nested
        self.entities: List[Entity] = []
        self._handlers: Dict[str, Handler] = {
            swift.CLASS_DECLARATION: self._handle_nominal,
            swift.PROTOCOL_DECLARATION: self._handle_nominal,
            swift.INIT_DECLARATION: self._handle_initializer,
            swift.DEINIT_DECLARATION: self._handle_deinitializer,
            swift.SUBSCRIPT_DECLARATION: self._handle_subscript,
            swift.ENUM_ENTRY: self._handle_enum_case,
            swift.ASSOCIATED_TYPE_DECLARATION: self._handle_associated_type,
            swift.TYPEALIAS_DECLARATION: self._handle_typealias,
        }
        for node_type in swift.FUNCTION_DECLARATIONS:
            self._handlers[node_type] = self._handle_function
        for node_type in swift.PROPERTY_DECLARATIONS:
            self._handlers[node_type] = self._handle_property
        if include_imports:
            self._handlers[swift.IMPORT_DECLARATION] = self._handle_import

    def walk(self, root) -> List[Entity]:
        stack = [root]
        while stack:
            node = stack.pop()
            handler = self._handlers.get(node.type)
            if handler is None:
                stack.extend(reversed(node.named_children))
                continue
            result = attempt(handler, node)
            if isinstance(result, Translated):
                self.entities.extend(result.entities)
        return self.entities

    def _translate_members(self, node) -> Tuple[Entity, ...]:
        block = swift.member_block(node)
        if block is None:
            return ()
        return tuple(translate_declarations(block, include_imports=self.include_imports, nested=True))

    # --- Node Handlers -------------------------------------------------------
    def _handle_nominal(self, node) -> List[Entity]:
        keyword = swift.nominal_keyword(node)
        if keyword == "extension":
            return self._handle_extension(node)
        kind = _NOMINAL_KINDS.get(keyword)
        if kind is None:
            raise OtherBadness(node)

        name = swift.identifier(node)
        if name is None:
            raise IncompleteSource(node)

        generic_arguments = collect_generic_arguments(node)
        requirements = collect_generic_requirements(node)
        descriptors, _ = collect_modifiers(node)

        predicates: List[Predicate] = []
        inherited = swift.inherited_types(node)
        if inherited is not None:
            predicates.append(Predicate(name="ISA", arguments=tuple(_translate_inherited(t) for t in inherited)))

        return [Entity(
            name=name,
            kind=kind,
            generic_arguments=tuple(generic_arguments),
            children=self._translate_members(node),
            descriptors=tuple(descriptors),
            generic_requirements=tuple(requirements),
            predicates=tuple(predicates),
        )]

    def _handle_extension(self, node) -> List[Entity]:
        if self.nested:
            # extensions only live at file scope
            raise OtherBadness(node)

        predicates: List[Predicate] = []
        inherited = swift.inherited_types(node)
        if inherited is not None:
            predicates.append(Predicate(name="ISA", arguments=tuple(_translate_inherited(t) for t in inherited)))

        children = self._translate_members(node)

        extended = swift.extended_type(node)
        if extended is None:
            raise IncompleteSource(node)
        extended_type = translate_type(extended)
        if extended_type.kind != TypeKind.NAMED:
            # FIXME: extensions of sugared types (`extension [Int]`)
            return []

        # FIXME: the `where` clause of constrained extensions is not rendered
        return [Entity(
            name=extended_type.name,
            kind=EntityKind.EXTENSION,
            children=children,
            predicates=tuple(predicates),
        )]

    def _parameter_types(self, node) -> List[TypeRepr]:
        return [translate_slot(swift.type_slot(p), p) for p in swift.parameters(node)]

    def _handle_function(self, node) -> List[Entity]:
        name = swift.identifier(node)
        if name is None:
            raise IncompleteSource(node)
        generic_arguments = collect_generic_arguments(node)
        requirements = collect_generic_requirements(node)

        predicates: List[Predicate] = []
        params = self._parameter_types(node)
        # FIXME: a function without parameters should still TAKE something
        if params:
            predicates.append(Predicate(name="TAKES", arguments=tuple(params)))

        result = swift.return_type(node)
        if result is not None:
            predicates.append(Predicate(name="RETURN", arguments=(translate_slot(result, node),)))

        descriptors, is_mutating = collect_modifiers(node)

        capabilities: List[Descriptor] = []
        if is_mutating:
            capabilities.append(MUTATE)
        throws = swift.throws_keyword(node)
        if throws == "throws":
            capabilities.append(THROW)
        elif throws == "rethrows":
            capabilities.append(RETHROW)
        if capabilities:
            predicates.append(Predicate(name="CAN", arguments=tuple(capabilities)))

        return [Entity(
            name=name,
            kind=EntityKind.FUNCTION,
            generic_arguments=tuple(generic_arguments),
            descriptors=tuple(descriptors),
            generic_requirements=tuple(requirements),
            predicates=tuple(predicates),
        )]

    def _handle_initializer(self, node) -> List[Entity]:
        generic_arguments = collect_generic_arguments(node)
        requirements = collect_generic_requirements(node)

        predicates: List[Predicate] = []
        params = self._parameter_types(node)
        # FIXME: an initializer without parameters should still TAKE something
        if params:
            predicates.append(Predicate(name="TAKES", arguments=tuple(params)))

        descriptors, _ = collect_modifiers(node)

        capabilities: List[Descriptor] = []
        throws = swift.throws_keyword(node)
        if throws == "throws":
            capabilities.append(THROW)
        elif throws == "rethrows":
            capabilities.append(RETHROW)
        mark = swift.failability(node)
        if mark == "?":
            capabilities.append(FAIL)
        elif mark == "!":
            capabilities.append(FAIL_FORCED)
        if capabilities:
            predicates.append(Predicate(name="CAN", arguments=tuple(capabilities)))

        labels = "".join(swift.parameter_label(p) + ":" for p in swift.parameters(node))
        return [Entity(
            name=f"init({labels})",
            kind=EntityKind.INITIALIZER,
            generic_arguments=tuple(generic_arguments),
            descriptors=tuple(descriptors),
            generic_requirements=tuple(requirements),
            predicates=tuple(predicates),
        )]

    def _handle_subscript(self, node) -> List[Entity]:
        generic_arguments = collect_generic_arguments(node)
        requirements = collect_generic_requirements(node)

        predicates: List[Predicate] = []
        params = self._parameter_types(node)
        if params:
            predicates.append(Predicate(name="TAKES", arguments=tuple(params)))
        predicates.append(Predicate(name="HAS", arguments=(translate_slot(swift.return_type(node), node),)))

        descriptors, _ = collect_modifiers(node)

        labels = "".join(swift.parameter_label(p) + ":" for p in swift.parameters(node))
        return [Entity(
            name=f"subs({labels})",
            kind=EntityKind.SUBSCRIPT,
            generic_arguments=tuple(generic_arguments),
            descriptors=tuple(descriptors),
            generic_requirements=tuple(requirements),
            predicates=tuple(predicates),
        )]

    def _handle_deinitializer(self, node) -> List[Entity]:
        descriptors, _ = collect_modifiers(node)
        return [Entity(name="deinit", kind=EntityKind.DEINITIALIZER, descriptors=tuple(descriptors))]

    def _handle_property(self, node) -> List[Entity]:
        descriptors, _ = collect_modifiers(node)

        keyword = swift.binding_keyword(node)
        if keyword == "var":
            kind = EntityKind.VAR
        elif keyword == "let":
            kind = EntityKind.LET
        else:
            raise OtherBadness(node)

        def _binding(binding) -> List[Entity]:
            pattern, slot = binding
            name = swift.binding_identifier(pattern)
            # FIXME: tuple patterns and inferred types
            if name is None or slot is None:
                return []
            return [Entity(
                name=name,
                kind=kind,
                descriptors=tuple(descriptors),
                predicates=(Predicate(name="HAS", arguments=(translate_slot(slot, pattern),)),),
            )]

        entities: List[Entity] = []
        for binding in swift.bindings(node):
            result = attempt(_binding, binding)
            if isinstance(result, Translated):
                entities.extend(result.entities)
        return entities

    def _handle_enum_case(self, node) -> List[Entity]:
        descriptors, _ = collect_modifiers(node)

        def _element(element) -> List[Entity]:
            name, values = element
            predicates: Tuple[Predicate, ...] = ()
            if values is not None:
                types = tuple(translate_slot(slot, values) for slot in swift.element_slots(values))
                predicates = (Predicate(name="HAS", arguments=types),)
            return [Entity(
                name=name,
                kind=EntityKind.ENUM_CASE,
                descriptors=tuple(descriptors),
                predicates=predicates,
            )]

        entities: List[Entity] = []
        for element in swift.case_elements(node):
            result = attempt(_element, element)
            if isinstance(result, Translated):
                entities.extend(result.entities)
        return entities

    def _handle_associated_type(self, node) -> List[Entity]:
        name = swift.identifier(node)
        if name is None:
            raise IncompleteSource(node)
        descriptors, _ = collect_modifiers(node)

        implicit = [
            Requirement(type_a=TypeRepr.named(name), kind=RequirementKind.ISA, type_b=_translate_inherited(t))
            for t in swift.inherited_types(node) or []
        ]
        explicit = collect_generic_requirements(node, include_parameters=False)

        return [Entity(
            name=name,
            kind=EntityKind.ASSOCIATED_TYPE,
            descriptors=tuple(descriptors),
            generic_requirements=tuple(implicit + explicit),
        )]

    def _handle_typealias(self, node) -> List[Entity]:
        name = swift.identifier(node)
        if name is None:
            raise IncompleteSource(node)
        generic_arguments = collect_generic_arguments(node)
        requirements = collect_generic_requirements(node)
        descriptors, _ = collect_modifiers(node)

        underlying = swift.aliased_type(node)
        if underlying is None:
            raise IncompleteSource(node)

        return [Entity(
            name=name,
            kind=EntityKind.TYPE_ALIAS,
            generic_arguments=tuple(generic_arguments),
            descriptors=tuple(descriptors),
            generic_requirements=tuple(requirements),
            predicates=(Predicate(name="HAS", arguments=(translate_slot(underlying, node),)),),
        )]

    def _handle_import(self, node) -> List[Entity]:
        path = swift.import_path(node)
        if path is None:
            raise IncompleteSource(node)
        descriptors, _ = collect_modifiers(node)
        return [Entity(name=path, kind=EntityKind.IMPORT, descriptors=tuple(descriptors))]


def translate_declarations(root, include_imports: bool = False, nested: bool = False) -> List[Entity]:
    """Translate every declaration under *root* into a fresh list of entities."""
    return DeclarationTranslator(include_imports=include_imports, nested=nested).walk(root)


def translate_source(source, include_imports: bool = False, path: Optional[str] = None) -> List[Entity]:
    """Parse Swift *source* and translate its top-level declarations."""
    tree = swift.parse_source(source, path=path)
    return translate_declarations(tree.root_node, include_imports=include_imports)
