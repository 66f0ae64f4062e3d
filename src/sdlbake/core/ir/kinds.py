"""
Definition kinds accepted in schema files.

The merger and renderer dispatch on this closed set through explicit
tables, so adding a kind means touching every table that is keyed by it.
"""

from __future__ import annotations

from enum import StrEnum

from graphql import DefinitionNode


class DefinitionKind(StrEnum):
    """Kinds of named definitions, valued by the graphql-core node kind."""

    SCALAR = "scalar_type_definition"
    OBJECT = "object_type_definition"
    INTERFACE = "interface_type_definition"
    UNION = "union_type_definition"
    ENUM = "enum_type_definition"
    INPUT_OBJECT = "input_object_type_definition"
    DIRECTIVE = "directive_definition"

    @property
    def label(self) -> str:
        """Human-readable kind name used in diagnostics."""
        return _LABELS[self]

    @classmethod
    def of(cls, node: DefinitionNode) -> DefinitionKind | None:
        """Kind of a definition node, or None when it is not a named definition."""
        try:
            return cls(node.kind)
        except ValueError:
            return None


_LABELS: dict[DefinitionKind, str] = {
    DefinitionKind.SCALAR: "scalar",
    DefinitionKind.OBJECT: "type",
    DefinitionKind.INTERFACE: "interface",
    DefinitionKind.UNION: "union",
    DefinitionKind.ENUM: "enum",
    DefinitionKind.INPUT_OBJECT: "input",
    DefinitionKind.DIRECTIVE: "directive",
}

