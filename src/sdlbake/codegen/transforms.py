"""
Input directive transforms.

An input object is directive-bearing when one of its fields carries a bound
input directive, or has a directive-bearing input object type. For each
such input object a ``_transform_input_<name>`` function is generated, and
each field whose arguments need rewriting gets a
``_transform_args_<type>_<field>`` function. Per value, the nested input
transform runs first, then each directive in declaration order; lists are
mapped element-wise and None passes through untouched.
"""

from __future__ import annotations

from graphql import (
    GraphQLArgument,
    GraphQLField,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLSchema,
    get_named_type,
)
from graphql.execution.values import get_argument_values

from ..analysis.bindings import Bindings
from . import names
from .layout import INDENT
from .literals import python_literal, string_literal
from .packages import RequiredPackages

InputValue = GraphQLArgument | GraphQLInputField


def directive_bearing_inputs(schema: GraphQLSchema, bindings: Bindings) -> set[str]:
    """Names of input objects whose values need transforming (fixpoint)."""
    inputs = [t for t in schema.type_map.values() if isinstance(t, GraphQLInputObjectType)]
    bearing: set[str] = set()
    changed = True
    while changed:
        changed = False
        for input_type in inputs:
            if input_type.name in bearing:
                continue
            for field in input_type.fields.values():
                if _bound_directives(field, bindings) or get_named_type(field.type).name in bearing:
                    bearing.add(input_type.name)
                    changed = True
                    break
    return bearing


def _bound_directives(value: InputValue, bindings: Bindings) -> list[str]:
    node = value.ast_node
    if node is None:
        return []
    return [
        d.name.value for d in node.directives or () if d.name.value in bindings.input_directives
    ]


class TransformRenderer:
    """Render input transform functions into the module owning ``packages``."""

    def __init__(self, schema: GraphQLSchema, bindings: Bindings, packages: RequiredPackages):
        self.schema = schema
        self.bindings = bindings
        self.packages = packages
        self.bearing = directive_bearing_inputs(schema, bindings)

    def needs_transform(self, value: InputValue) -> bool:
        return bool(self.steps(value))

    def field_needs_transform(self, field: GraphQLField) -> bool:
        return any(self.needs_transform(arg) for arg in field.args.values())

    def steps(self, value: InputValue) -> list[str]:
        """Callables applied to each element of the value, in order."""
        result: list[str] = []
        named = get_named_type(value.type)
        if named.name in self.bearing:
            result.append(names.input_transform_name(named.name))

        directives = value.ast_node.directives if value.ast_node is not None else None
        for directive in directives or ():
            ref = self.bindings.input_directives.get(directive.name.value)
            if ref is None:
                continue
            directive_def = self.schema.get_directive(directive.name.value)
            args = get_argument_values(directive_def, directive) if directive_def else {}
            func = self.packages.require_ref(ref)
            result.append(f"lambda item: {func}(item, {python_literal(args)})")
        return result

    def render_input(self, input_type: GraphQLInputObjectType) -> list[str]:
        any_ = self.packages.require("typing", "Any")
        function_name = names.input_transform_name(input_type.name)
        lines = [
            f"def {function_name}(value: dict[str, {any_}]) -> dict[str, {any_}]:",
            f"{INDENT}result = dict(value)",
        ]
        for name, field in sorted(input_type.fields.items()):
            lines += self._apply(field.out_name or name, self.steps(field))
        lines.append(f"{INDENT}return result")
        return lines

    def render_args(self, type_name: str, field_name: str, field: GraphQLField) -> list[str]:
        any_ = self.packages.require("typing", "Any")
        function_name = names.args_transform_name(type_name, field_name)
        lines = [
            f"def {function_name}(args: dict[str, {any_}]) -> dict[str, {any_}]:",
            f"{INDENT}result = dict(args)",
        ]
        for name, arg in sorted(field.args.items()):
            lines += self._apply(arg.out_name or name, self.steps(arg))
        lines.append(f"{INDENT}return result")
        return lines

    @staticmethod
    def _apply(key: str, steps: list[str]) -> list[str]:
        if not steps:
            return []
        key_literal = string_literal(key)
        lines = [
            f"{INDENT}if {key_literal} in result:",
            f"{INDENT * 2}field_value = result[{key_literal}]",
        ]
        lines.extend(f"{INDENT * 2}field_value = _map_input(field_value, {step})" for step in steps)
        lines.append(f"{INDENT * 2}result[{key_literal}] = field_value")
        return lines
