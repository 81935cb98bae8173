"""
Typed traversal API over the tree-sitter Swift grammar.

All knowledge about the concrete shape of tree-sitter-swift nodes lives
here; the translator only asks questions such as "what are the generic
parameters of this declaration" or "which type fills this parameter".
"""
from typing import Any, List, NamedTuple, Optional, Tuple, Union

from tree_sitter import Language, Parser, Tree
import tree_sitter_swift as tsswift

from siv.logger import SivLogger


SWIFT_LANGUAGE = Language(tsswift.language())

_parser: Optional[Parser] = None


def _get_parser() -> Parser:
    global _parser
    if not _parser:
        _parser = Parser(SWIFT_LANGUAGE)
    return _parser


def parse_source(source: Union[str, bytes], path: Optional[str] = None) -> Tree:
    """Parse Swift *source* into a tree-sitter tree."""
    if isinstance(source, str):
        source = source.encode("utf8")
    tree = _get_parser().parse(source)
    if tree.root_node.has_error:
        SivLogger.warning(
            "swift.syntax_errors",
            path=path,
            first_error_line=_first_error_line(tree.root_node),
        )
    return tree


def _first_error_line(node) -> Optional[int]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current.start_point[0] + 1
        stack.extend(reversed([c for c in current.children if c.has_error or c.is_missing]))
    return None


# ---------------------------------------------------------------------------
# Node type names
# ---------------------------------------------------------------------------
TYPE_NODES = frozenset({
    "user_type",
    "array_type",
    "dictionary_type",
    "optional_type",
    "tuple_type",
    "function_type",
    "protocol_composition_type",
    "existential_type",
    "opaque_type",
    "metatype",
    "type_pack_expansion",
    "type_parameter_pack",
    "suppressed_constraint",
})

CLASS_DECLARATION = "class_declaration"
PROTOCOL_DECLARATION = "protocol_declaration"
FUNCTION_DECLARATIONS = ("function_declaration", "protocol_function_declaration")
INIT_DECLARATION = "init_declaration"
DEINIT_DECLARATION = "deinit_declaration"
SUBSCRIPT_DECLARATION = "subscript_declaration"
PROPERTY_DECLARATIONS = ("property_declaration", "protocol_property_declaration")
ENUM_ENTRY = "enum_entry"
ASSOCIATED_TYPE_DECLARATION = "associatedtype_declaration"
TYPEALIAS_DECLARATION = "typealias_declaration"
IMPORT_DECLARATION = "import_declaration"

MEMBER_BLOCKS = ("class_body", "enum_class_body", "protocol_body")

# `class_declaration` covers all of these, told apart by `declaration_kind`.
NOMINAL_KEYWORDS = ("struct", "class", "enum", "extension", "actor")

# Modifier nodes that never carry a keyword we care about.
_SKIPPED_MODIFIERS = ("attribute",)

# Tokens that behave like modifiers but sit directly on the declaration.
_INLINE_MODIFIERS = ("indirect",)


class TypeSlot(NamedTuple):
    """
    A place where a type is written: the type node itself plus the markers
    that tree-sitter keeps next to it rather than inside it.
    """
    node: Any
    inout: bool = False
    unwrapped: bool = False


# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------
def node_text(node) -> str:
    if node is None:
        return ""
    return node.text.decode("utf8", errors="replace")


def _named(node, *types: str) -> List[Any]:
    return [c for c in node.named_children if c.type in types]


def _first_named(node, *types: str):
    return next((c for c in node.named_children if c.type in types), None)


def _is_type(node) -> bool:
    return node is not None and node.type in TYPE_NODES


def _types_after(node, token: str) -> List[Any]:
    """Type children that follow the first *token* child of *node*."""
    seen = False
    result = []
    for child in node.children:
        if not seen:
            seen = not child.is_named and child.type == token
            continue
        if _is_type(child):
            result.append(child)
    return result


def _is_unwrapped(type_node) -> bool:
    sibling = type_node.next_sibling
    return sibling is not None and not sibling.is_named and sibling.type == "!"


def _has_inout(container) -> bool:
    for child in _named(container, "parameter_modifiers", "parameter_modifier", "type_modifiers"):
        if "inout" in node_text(child).split():
            return True
    return False


def type_slot(container) -> Optional[TypeSlot]:
    """The type written inside *container* (a parameter, annotation, tuple item...)."""
    node = next((c for c in container.named_children if _is_type(c)), None)
    if node is None:
        return None
    return TypeSlot(node, inout=_has_inout(container), unwrapped=_is_unwrapped(node))


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------
def nominal_keyword(node) -> Optional[str]:
    """`struct`, `class`, `enum`, `extension`, `actor` or `protocol`."""
    if node.type == PROTOCOL_DECLARATION:
        return "protocol"
    kind = node.child_by_field_name("declaration_kind")
    if kind is not None:
        return node_text(kind)
    for child in node.children:
        if not child.is_named and child.type in NOMINAL_KEYWORDS:
            return child.type
    return None


def identifier(node) -> Optional[str]:
    """The declared name of *node*."""
    name = node.child_by_field_name("name")
    if name is not None and name.type in ("simple_identifier", "type_identifier"):
        return node_text(name)
    if name is not None and not name.is_named:
        # operator functions: `static func == (...)`
        return node_text(name)
    fallback = _first_named(node, "simple_identifier", "type_identifier")
    return node_text(fallback) if fallback is not None else None


def extended_type(node):
    """The type node an extension extends."""
    name = node.child_by_field_name("name")
    if _is_type(name):
        return name
    return next((c for c in node.named_children if _is_type(c)), None)


def modifier_keywords(node) -> List[str]:
    """Modifier keywords of a declaration, in source order."""
    keywords: List[str] = []
    for modifiers in _named(node, "modifiers"):
        for modifier in modifiers.named_children:
            if modifier.type in _SKIPPED_MODIFIERS:
                continue
            # `private(set)` and friends map by their keyword
            keyword = node_text(modifier).split("(", 1)[0].strip()
            if keyword:
                keywords.append(keyword)
    for child in node.children:
        if not child.is_named and child.type in _INLINE_MODIFIERS:
            keywords.append(child.type)
    return keywords


def generic_parameters(node) -> List[Tuple[str, Any]]:
    """``(name, bound type node or None)`` for each generic parameter."""
    params = _first_named(node, "type_parameters")
    if params is None:
        return []
    result = []
    for param in _named(params, "type_parameter"):
        name = _first_named(param, "type_identifier", "simple_identifier")
        if name is None:
            continue
        bound = next((c for c in param.named_children if _is_type(c)), None)
        result.append((node_text(name), bound))
    return result


CONSTRAINT_NODES = ("inheritance_constraint", "equality_constraint")


def where_requirements(node) -> List[Any]:
    """Constraint nodes of the declaration's `where` clause(s), in source order."""
    clauses = _named(node, "type_constraints")
    params = _first_named(node, "type_parameters")
    if params is not None:
        clauses = _named(params, "type_constraints") + clauses
    result = []
    for clause in clauses:
        # skips `where_keyword`, attributes and separators
        for constraint in clause.named_children:
            if constraint.type == "type_constraint":
                result.extend(c for c in constraint.named_children if c.type in CONSTRAINT_NODES)
            elif constraint.type in CONSTRAINT_NODES:
                result.append(constraint)
    return result


REQUIREMENT_OPERATORS = {":": "isa", "==": "equals", "=": "equals"}


def requirement_parts(node) -> Tuple[Optional[str], List[Any], List[Any]]:
    """
    Split a constraint node into ``(operator kind, left nodes, right nodes)``.

    The operator kind is ``"isa"`` or ``"equals"``; it is ``None`` when the
    node is not a recognised constraint.
    """
    if node.type not in CONSTRAINT_NODES:
        return None, [], []
    kind = None
    left: List[Any] = []
    right: List[Any] = []
    for child in node.children:
        if kind is None and not child.is_named and child.type in REQUIREMENT_OPERATORS:
            kind = REQUIREMENT_OPERATORS[child.type]
            continue
        if not child.is_named or child.type == "attribute":
            continue
        (right if kind else left).append(child)
    return kind, left, right


def constrained_name(nodes: List[Any]) -> Optional[str]:
    """
    Name of the left-hand side of a constraint if it is a plain identifier
    (``T`` but not ``T.Element``).
    """
    if len(nodes) != 1:
        return None
    node = nodes[0]
    if node.type in ("simple_identifier", "type_identifier"):
        return node_text(node)
    if node.type == "identifier":
        parts = _named(node, "simple_identifier")
        if len(parts) == 1 and len(node.named_children) == 1:
            return node_text(parts[0])
    return None


def inherited_types(node) -> Optional[List[Any]]:
    """
    The inheritance clause of a declaration, one node per entry, or ``None``
    when the declaration has no clause.
    """
    specifiers = _named(node, "inheritance_specifier")
    if specifiers:
        return specifiers
    if node.type == ASSOCIATED_TYPE_DECLARATION:
        bounds = []
        for child in node.children:
            if not child.is_named and child.type == "=":
                break
            if child.type == "type_constraints":
                break
            if _is_type(child):
                bounds.append(child)
        return bounds or None
    return None


def parameters(node) -> List[Any]:
    return _named(node, "parameter")


def parameter_label(param) -> str:
    """First name of a parameter (the argument label, `_` when suppressed)."""
    for child in param.children:
        if child.type in ("simple_identifier", "wildcard_pattern") or node_text(child) == "_":
            return node_text(child)
    return "_"


def return_type(node) -> Optional[TypeSlot]:
    """Type after `->`, if any."""
    types = _types_after(node, "->")
    if not types:
        return None
    return TypeSlot(types[0], unwrapped=_is_unwrapped(types[0]))


def throws_keyword(node) -> Optional[str]:
    """`throws`, `rethrows` or None."""
    for child in node.children:
        if child.type in ("throws", "rethrows"):
            text = node_text(child)
            return "rethrows" if text.startswith("rethrows") else "throws"
    return None


def failability(node) -> Optional[str]:
    """`?` or `!` for failable initializers."""
    for child in node.children:
        if not child.is_named and child.type == "(":
            break
        if child.type == "?":
            return "?"
        if child.type in ("!", "bang"):
            return "!"
    return None


def member_block(node):
    return _first_named(node, *MEMBER_BLOCKS)


def binding_keyword(node) -> Optional[str]:
    """`let` or `var` of a property declaration; other values pass through."""
    pattern = _first_named(node, "value_binding_pattern")
    if pattern is None:
        for name in _binding_names(node):
            pattern = _first_named(name, "value_binding_pattern")
            if pattern is not None:
                break
    if pattern is None:
        return None
    mutability = pattern.child_by_field_name("mutability")
    words = node_text(mutability if mutability is not None else pattern).split()
    return words[-1] if words else None


def _binding_names(node) -> List[Any]:
    names = node.children_by_field_name("name")
    if names:
        return names
    return _named(node, "pattern")


def bindings(node) -> List[Tuple[Any, Optional[TypeSlot]]]:
    """``(pattern node, annotated type)`` for each binding of a property declaration."""
    names = _binding_names(node)
    if not names:
        return []
    spans = {(n.start_byte, n.end_byte) for n in names}
    result: List[List[Any]] = []
    for child in node.children:
        if (child.start_byte, child.end_byte) in spans and child.type == names[0].type:
            result.append([child, None])
        elif child.type == "type_annotation" and result and result[-1][1] is None:
            result[-1][1] = type_slot(child)
    return [(pattern, slot) for pattern, slot in result]


def binding_identifier(pattern) -> Optional[str]:
    """The bound name when *pattern* is a single identifier, else None."""
    if pattern.type == "simple_identifier":
        return node_text(pattern)
    named = [c for c in pattern.named_children if c.type != "value_binding_pattern"]
    if len(named) == 1 and named[0].type == "simple_identifier":
        return node_text(named[0])
    return None


def case_elements(node) -> List[Tuple[str, Any]]:
    """``(name, associated value list node or None)`` per element of an enum case."""
    elements: List[List[Any]] = []
    skip_raw_value = False
    for child in node.children:
        if not child.is_named:
            skip_raw_value = child.type == "="
            continue
        if skip_raw_value:
            skip_raw_value = False
            continue
        if child.type == "simple_identifier":
            elements.append([node_text(child), None])
        elif child.type == "enum_type_parameters" and elements:
            elements[-1][1] = child
    return [(name, values) for name, values in elements]


def element_slots(container) -> List[Optional[TypeSlot]]:
    """
    Types of a parenthesised list: associated values of an enum case, or the
    elements of a tuple type. ``None`` marks an element without a type.
    """
    slots: List[Optional[TypeSlot]] = []
    skip_default = False
    for child in container.children:
        if not child.is_named:
            skip_default = child.type == "="
            continue
        if skip_default:
            skip_default = False
            continue
        if child.type in ("tuple_type_item", "parameter"):
            slots.append(type_slot(child))
        elif _is_type(child):
            slots.append(TypeSlot(child, unwrapped=_is_unwrapped(child)))
    return slots


def aliased_type(node) -> Optional[TypeSlot]:
    types = _types_after(node, "=")
    if not types:
        return None
    return TypeSlot(types[0], unwrapped=_is_unwrapped(types[0]))


def import_path(node) -> Optional[str]:
    path = _first_named(node, "identifier")
    return node_text(path) if path is not None else None


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------
def user_type_components(node) -> List[Tuple[str, List[Any]]]:
    """``(name, generic argument nodes)`` per dotted component of a user type."""
    components: List[Tuple[str, List[Any]]] = []
    for child in node.named_children:
        if child.type in ("type_identifier", "simple_identifier"):
            components.append((node_text(child), []))
        elif child.type == "type_arguments" and components:
            components[-1][1].extend(c for c in child.named_children if _is_type(c))
    return components


def wrapped_types(node) -> List[Any]:
    """Type children of a sugared type (array element, dictionary key/value...)."""
    return [c for c in node.named_children if _is_type(c)]


def optional_depth(node) -> int:
    """Number of `?` marks on an optional type."""
    # `??` is lexed as one token
    return sum(c.type.count("?") for c in node.children if not c.is_named) or 1


def function_type_parts(node) -> Tuple[Optional[List[Optional[TypeSlot]]], Optional[Any]]:
    """
    ``(parameter slots, result node)`` of a function type. Parameter slots are
    ``None`` when the parameter list could not be located.
    """
    params = None
    result = None
    seen_arrow = False
    for child in node.children:
        if not child.is_named:
            seen_arrow = seen_arrow or child.type == "->"
            continue
        if seen_arrow:
            if result is None and _is_type(child):
                result = child
        elif params is None and child.type not in ("attribute", "type_modifiers", "throws", "async"):
            params = child
    if params is None:
        return None, result
    if params.type == "tuple_type" or params.type.endswith("parameters"):
        return element_slots(params), result
    if _is_type(params):
        return [TypeSlot(params)], result
    return None, result
