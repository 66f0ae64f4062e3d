"""
Document merger implementation for sdlbake.

Handles structural equality of GraphQL AST fragments and the per-kind
rules for folding a re-declared definition into the one seen first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from graphql import (
    DefinitionNode,
    DirectiveDefinitionNode,
    DirectiveNode,
    EnumTypeDefinitionNode,
    EnumValueDefinitionNode,
    FieldDefinitionNode,
    InputObjectTypeDefinitionNode,
    InputValueDefinitionNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    Node,
    ScalarTypeDefinitionNode,
    StringValueNode,
    TypeNode,
    UnionTypeDefinitionNode,
    ValueNode,
)

from .errors import (
    DirectiveConflict,
    EnumValueConflict,
    ErrorContext,
    FieldConflict,
    InputFieldConflict,
    KindConflict,
    UnsupportedDefinition,
    make_conflict,
)
from .ir import DefinitionKind, SourceLocation

logger = logging.getLogger(__name__)

N = TypeVar("N", bound=Node)


def replace_node(node: N, **changes: Any) -> N:
    """Copy a graphql-core node with some attributes replaced."""
    values = {key: getattr(node, key) for key in node.keys}
    values.update(changes)
    return node.__class__(**values)


def _location(node: Node | None) -> str:
    location = SourceLocation.of(node)
    return str(location) if location else "<unknown>"


# =============================================================================
# Structural equality
# =============================================================================


def _scalar_payload_equal(a: Any, b: Any) -> bool:
    return a.value == b.value


def _list_values_equal(a: Any, b: Any) -> bool:
    if len(a.values) != len(b.values):
        return False
    return all(values_equal(x, y) for x, y in zip(a.values, b.values, strict=True))


def _object_values_equal(a: Any, b: Any) -> bool:
    a_fields = {f.name.value: f.value for f in a.fields}
    b_fields = {f.name.value: f.value for f in b.fields}
    if a_fields.keys() != b_fields.keys():
        return False
    return all(values_equal(a_fields[name], b_fields[name]) for name in a_fields)


def _placeholder_equal(a: Any, b: Any) -> bool:
    return True


_VALUE_EQUALITY: dict[str, Callable[[Any, Any], bool]] = {
    "int_value": _scalar_payload_equal,
    "float_value": _scalar_payload_equal,
    "string_value": _scalar_payload_equal,
    "boolean_value": _scalar_payload_equal,
    "enum_value": _scalar_payload_equal,
    "null_value": _placeholder_equal,
    "variable": _placeholder_equal,
    "list_value": _list_values_equal,
    "object_value": _object_values_equal,
}


def values_equal(a: ValueNode | None, b: ValueNode | None) -> bool:
    """
    Structural equality of two value nodes.

    Nodes of different kinds are never equal. Null and variable nodes are
    placeholders: any two of the same kind compare equal. Absent values
    (no default) only equal other absent values.
    """
    if a is None or b is None:
        return a is None and b is None
    if a.kind != b.kind:
        return False
    return _VALUE_EQUALITY[a.kind](a, b)


def types_equal(a: TypeNode, b: TypeNode) -> bool:
    """Structural equality of two type references."""
    if isinstance(a, NonNullTypeNode) and isinstance(b, NonNullTypeNode):
        return types_equal(a.type, b.type)
    if isinstance(a, ListTypeNode) and isinstance(b, ListTypeNode):
        return types_equal(a.type, b.type)
    if isinstance(a, NamedTypeNode) and isinstance(b, NamedTypeNode):
        return a.name.value == b.name.value
    return False


def _arguments_of(node: DirectiveNode) -> dict[str, ValueNode]:
    return {arg.name.value: arg.value for arg in node.arguments or ()}


def directive_applications_equal(a: DirectiveNode, b: DirectiveNode) -> bool:
    if a.name.value != b.name.value:
        return False
    a_args, b_args = _arguments_of(a), _arguments_of(b)
    if a_args.keys() != b_args.keys():
        return False
    return all(values_equal(a_args[name], b_args[name]) for name in a_args)


def _group_by_name(directives: Sequence[DirectiveNode]) -> dict[str, list[DirectiveNode]]:
    groups: dict[str, list[DirectiveNode]] = {}
    for directive in directives:
        groups.setdefault(directive.name.value, []).append(directive)
    return groups


def _first_difference(a: Sequence[DirectiveNode], b: Sequence[DirectiveNode]) -> int | None:
    """Index of the first differing application of one name, or None if equal."""
    for index, (x, y) in enumerate(zip(a, b)):
        if not directive_applications_equal(x, y):
            return index
    if len(a) != len(b):
        return min(len(a), len(b))
    return None


def _directive_lists_equal(a: Sequence[DirectiveNode], b: Sequence[DirectiveNode]) -> bool:
    a_by_name, b_by_name = _group_by_name(a), _group_by_name(b)
    if a_by_name.keys() != b_by_name.keys():
        return False
    return all(_first_difference(a_by_name[n], b_by_name[n]) is None for n in a_by_name)


def input_values_equal(a: InputValueDefinitionNode, b: InputValueDefinitionNode) -> bool:
    """Arguments and input fields: same type, default, and directives."""
    return (
        types_equal(a.type, b.type)
        and values_equal(a.default_value, b.default_value)
        and _directive_lists_equal(a.directives or (), b.directives or ())
    )


def field_signatures_equal(a: FieldDefinitionNode, b: FieldDefinitionNode) -> bool:
    """Same return type and the same argument set."""
    if not types_equal(a.type, b.type):
        return False
    a_args = {arg.name.value: arg for arg in a.arguments or ()}
    b_args = {arg.name.value: arg for arg in b.arguments or ()}
    if a_args.keys() != b_args.keys():
        return False
    return all(input_values_equal(a_args[name], b_args[name]) for name in a_args)


# =============================================================================
# Shared merge helpers
# =============================================================================


def merge_directives(
    owner: str,
    existing: Sequence[DirectiveNode] | None,
    incoming: Sequence[DirectiveNode] | None,
) -> tuple[DirectiveNode, ...]:
    """
    Append incoming applications; identical ones are kept once.

    Applications are compared per directive name as ordered lists, so a
    repeatable directive used twice on both sides merges cleanly.
    """
    merged = list(existing or ())
    present = _group_by_name(merged)
    incoming = tuple(incoming or ())
    for name, applications in _group_by_name(incoming).items():
        current = present.get(name)
        if current is None:
            continue
        index = _first_difference(current, applications)
        if index is not None:
            raise make_conflict(
                DirectiveConflict,
                f"Directive '@{name}' is applied to {owner} with different arguments",
                SourceLocation.of(applications[min(index, len(applications) - 1)]),
                SourceLocation.of(current[min(index, len(current) - 1)]),
            )
    merged.extend(d for d in incoming if d.name.value not in present)
    return tuple(merged)


def merge_description(
    owner: str,
    existing: Node,
    incoming: Node,
) -> StringValueNode | None:
    """First description wins; differing descriptions only warn."""
    first = getattr(existing, "description", None)
    second = getattr(incoming, "description", None)
    if first and second and first.value != second.value:
        logger.warning(
            "Conflicting descriptions for %s (%s and %s); keeping the first",
            owner,
            _location(existing),
            _location(incoming),
        )
    return first or second


def _union_named_types(
    existing: Sequence[NamedTypeNode] | None,
    incoming: Sequence[NamedTypeNode] | None,
) -> tuple[NamedTypeNode, ...]:
    merged = list(existing or ())
    seen = {node.name.value for node in merged}
    for node in incoming or ():
        if node.name.value not in seen:
            merged.append(node)
            seen.add(node.name.value)
    return tuple(merged)


def _merge_fields(
    owner: str,
    existing: Sequence[FieldDefinitionNode] | None,
    incoming: Sequence[FieldDefinitionNode] | None,
) -> tuple[FieldDefinitionNode, ...]:
    fields = {node.name.value: node for node in existing or ()}
    for node in incoming or ():
        name = node.name.value
        current = fields.get(name)
        if current is None:
            fields[name] = node
            continue
        if not field_signatures_equal(current, node):
            raise make_conflict(
                FieldConflict,
                f"Field '{owner}.{name}' is declared with different signatures",
                SourceLocation.of(node),
                SourceLocation.of(current),
            )
        logger.warning(
            "There is more than one declaration for %s.%s (%s and %s)",
            owner,
            name,
            _location(current),
            _location(node),
        )
        fields[name] = replace_node(
            current,
            description=merge_description(f"{owner}.{name}", current, node),
            directives=merge_directives(
                f"{owner}.{name}", current.directives, node.directives
            ),
        )
    return tuple(fields.values())


def _merge_input_fields(
    owner: str,
    existing: Sequence[InputValueDefinitionNode] | None,
    incoming: Sequence[InputValueDefinitionNode] | None,
) -> tuple[InputValueDefinitionNode, ...]:
    fields = {node.name.value: node for node in existing or ()}
    for node in incoming or ():
        name = node.name.value
        current = fields.get(name)
        if current is None:
            fields[name] = node
            continue
        if not types_equal(current.type, node.type) or not values_equal(
            current.default_value, node.default_value
        ):
            raise make_conflict(
                InputFieldConflict,
                f"Input field '{owner}.{name}' is declared with a different type or default",
                SourceLocation.of(node),
                SourceLocation.of(current),
            )
        logger.warning(
            "There is more than one declaration for %s.%s (%s and %s)",
            owner,
            name,
            _location(current),
            _location(node),
        )
        fields[name] = replace_node(
            current,
            description=merge_description(f"{owner}.{name}", current, node),
            directives=merge_directives(
                f"{owner}.{name}", current.directives, node.directives
            ),
        )
    return tuple(fields.values())


# =============================================================================
# Per-kind merge rules
# =============================================================================


def _merge_scalar(
    existing: ScalarTypeDefinitionNode, incoming: ScalarTypeDefinitionNode
) -> ScalarTypeDefinitionNode:
    name = existing.name.value
    return replace_node(
        existing,
        description=merge_description(name, existing, incoming),
        directives=merge_directives(name, existing.directives, incoming.directives),
    )


def _merge_object(existing: Any, incoming: Any) -> Any:
    # Shared by object and interface definitions
    name = existing.name.value
    return replace_node(
        existing,
        description=merge_description(name, existing, incoming),
        interfaces=_union_named_types(existing.interfaces, incoming.interfaces),
        directives=merge_directives(name, existing.directives, incoming.directives),
        fields=_merge_fields(name, existing.fields, incoming.fields),
    )


def _merge_union(
    existing: UnionTypeDefinitionNode, incoming: UnionTypeDefinitionNode
) -> UnionTypeDefinitionNode:
    name = existing.name.value
    return replace_node(
        existing,
        description=merge_description(name, existing, incoming),
        directives=merge_directives(name, existing.directives, incoming.directives),
        types=_union_named_types(existing.types, incoming.types),
    )


def _merge_enum(
    existing: EnumTypeDefinitionNode, incoming: EnumTypeDefinitionNode
) -> EnumTypeDefinitionNode:
    name = existing.name.value
    values: dict[str, EnumValueDefinitionNode] = {v.name.value: v for v in existing.values or ()}
    for value in incoming.values or ():
        current = values.get(value.name.value)
        if current is not None:
            raise make_conflict(
                EnumValueConflict,
                f"Enum value '{name}.{value.name.value}' is declared more than once",
                SourceLocation.of(value),
                SourceLocation.of(current),
            )
        values[value.name.value] = value
    return replace_node(
        existing,
        description=merge_description(name, existing, incoming),
        directives=merge_directives(name, existing.directives, incoming.directives),
        values=tuple(values.values()),
    )


def _merge_input_object(
    existing: InputObjectTypeDefinitionNode, incoming: InputObjectTypeDefinitionNode
) -> InputObjectTypeDefinitionNode:
    name = existing.name.value
    return replace_node(
        existing,
        description=merge_description(name, existing, incoming),
        directives=merge_directives(name, existing.directives, incoming.directives),
        fields=_merge_input_fields(name, existing.fields, incoming.fields),
    )


def _merge_directive_definition(
    existing: DirectiveDefinitionNode, incoming: DirectiveDefinitionNode
) -> DirectiveDefinitionNode:
    raise make_conflict(
        DirectiveConflict,
        f"Directive '@{existing.name.value}' is defined more than once",
        SourceLocation.of(incoming),
        SourceLocation.of(existing),
    )


MERGE_RULES: dict[DefinitionKind, Callable[[Any, Any], DefinitionNode]] = {
    DefinitionKind.SCALAR: _merge_scalar,
    DefinitionKind.OBJECT: _merge_object,
    DefinitionKind.INTERFACE: _merge_object,
    DefinitionKind.UNION: _merge_union,
    DefinitionKind.ENUM: _merge_enum,
    DefinitionKind.INPUT_OBJECT: _merge_input_object,
    DefinitionKind.DIRECTIVE: _merge_directive_definition,
}


@dataclass
class DefinitionTable:
    """
    Name-keyed table of merged definitions.

    Types and directives live in separate namespaces, as in GraphQL.
    Insertion order is the order in which names were first seen.
    """

    types: dict[str, DefinitionNode] = field(default_factory=dict)
    directives: dict[str, DirectiveDefinitionNode] = field(default_factory=dict)

    def add(self, node: DefinitionNode) -> None:
        """Insert a definition or fold it into the existing one of the same name."""
        kind = DefinitionKind.of(node)
        if kind is None:
            raise UnsupportedDefinition(
                f"Unsupported definition kind '{node.kind}' in schema file "
                "(schema blocks, extensions, and operations are not accepted)",
                ErrorContext.from_location(SourceLocation.of(node)),
            )

        table: dict[str, Any] = self.directives if kind is DefinitionKind.DIRECTIVE else self.types
        name = node.name.value  # type: ignore[attr-defined]
        existing = table.get(name)
        if existing is None:
            table[name] = node
            return

        existing_kind = DefinitionKind(existing.kind)
        if existing_kind is not kind:
            raise make_conflict(
                KindConflict,
                f"'{name}' is declared as both {existing_kind.label} and {kind.label}",
                SourceLocation.of(node),
                SourceLocation.of(existing),
            )
        table[name] = MERGE_RULES[kind](existing, node)

    def definitions(self) -> tuple[DefinitionNode, ...]:
        return (*self.types.values(), *self.directives.values())
