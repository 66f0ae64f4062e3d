"""
Type declarations describing the values of schema types.

Objects, interfaces and input objects become TypedDicts, unions and
scalars become type aliases, enums become ``str`` Enums with a TypeGuard
predicate, and field arguments become per-type namespaces of TypedDicts.
"""

from __future__ import annotations

from collections.abc import Sequence

from graphql import (
    GraphQLArgument,
    GraphQLEnumType,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNamedType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLType,
    GraphQLUnionType,
    Undefined,
    is_specified_scalar_type,
)

from ..analysis.bindings import Bindings
from ..core.strings import is_identifier
from . import names
from .layout import INDENT, call, dict_expr
from .literals import string_literal
from .packages import RequiredPackages

BUILTIN_SCALAR_TYPES: dict[str, str] = {
    "ID": "str",
    "String": "str",
    "Int": "int",
    "Float": "float",
    "Boolean": "bool",
}


def shape_names(type_: GraphQLNamedType) -> list[str]:
    """Top-level names a type's declarations define."""
    if isinstance(type_, GraphQLEnumType):
        return [names.shape_name(type_), names.guard_name(type_.name)]
    result = [names.shape_name(type_)]
    if isinstance(type_, GraphQLObjectType | GraphQLInterfaceType) and _has_arguments(type_):
        result.append(names.args_namespace_name(type_.name))
    return result


def _has_arguments(type_: GraphQLObjectType | GraphQLInterfaceType) -> bool:
    return any(field.args for field in type_.fields.values())


def _is_optional_input(value: GraphQLArgument | GraphQLInputField) -> bool:
    """Nullable without a default: the key may be missing entirely."""
    return not isinstance(value.type, GraphQLNonNull) and value.default_value is Undefined


class ShapeRenderer:
    """Render type declarations into the module owning ``packages``."""

    def __init__(self, bindings: Bindings, packages: RequiredPackages):
        self.bindings = bindings
        self.packages = packages

    def typing(self, name: str) -> str:
        return self.packages.require("typing", name)

    def annotation(self, type_: GraphQLType, nullable: bool = True) -> str:
        """Python annotation for values of a schema type reference."""
        if isinstance(type_, GraphQLNonNull):
            return self.annotation(type_.of_type, nullable=False)
        if isinstance(type_, GraphQLList):
            inner = f"list[{self.annotation(type_.of_type)}]"
        elif isinstance(type_, GraphQLScalarType) and is_specified_scalar_type(type_):
            inner = BUILTIN_SCALAR_TYPES[type_.name]
        else:
            inner = names.shape_name(type_)  # type: ignore[arg-type]
        return f"{inner} | None" if nullable else inner

    def render(self, type_: GraphQLNamedType) -> list[str]:
        if isinstance(type_, GraphQLObjectType | GraphQLInterfaceType):
            lines = self._typed_dict(
                names.shape_name(type_),
                [
                    (name, self.annotation(field.type))
                    for name, field in sorted(type_.fields.items())
                ],
                type_.description,
                total=False,
            )
            if _has_arguments(type_):
                lines += ["", ""] + self._args_namespace(type_)
            return lines
        if isinstance(type_, GraphQLInputObjectType):
            return self._typed_dict(
                names.shape_name(type_),
                [self._input_item(name, field) for name, field in sorted(type_.fields.items())],
                type_.description,
            )
        if isinstance(type_, GraphQLUnionType):
            members = " | ".join(names.shape_name(member) for member in type_.types)
            return [f"{type_.name}: {self.typing('TypeAlias')} = {string_literal(members)}"]
        if isinstance(type_, GraphQLEnumType):
            return self._enum(type_)
        if isinstance(type_, GraphQLScalarType):
            return self._scalar(type_)
        raise TypeError(f"Unexpected schema type {type_!r}")

    def _input_item(self, name: str, value: GraphQLArgument | GraphQLInputField) -> tuple[str, str]:
        annotation = self.annotation(value.type)
        if _is_optional_input(value):
            annotation = f"{self.typing('NotRequired')}[{annotation}]"
        return name, annotation

    def _typed_dict(
        self,
        name: str,
        items: Sequence[tuple[str, str]],
        description: str | None = None,
        total: bool = True,
    ) -> list[str]:
        typed_dict = self.typing("TypedDict")
        if all(is_identifier(key) for key, _ in items):
            bases = typed_dict if total else f"{typed_dict}, total=False"
            lines = [f"class {name}({bases}):"]
            if description:
                lines.append(INDENT + string_literal(description))
                lines.append("")
            lines.extend(f"{INDENT}{key}: {annotation}" for key, annotation in items)
            return lines

        # Keys that are not identifiers need the functional syntax
        fields = dict_expr([(string_literal(k), string_literal(a)) for k, a in items])
        args = [string_literal(name), fields]
        if not total:
            args.append("total=False")
        return f"{name} = {call(typed_dict, args)}".split("\n")

    def _args_namespace(self, type_: GraphQLObjectType | GraphQLInterfaceType) -> list[str]:
        lines = [f"class {names.args_namespace_name(type_.name)}:"]
        lines.append(f"{INDENT}{string_literal(f'Arguments of {type_.name} fields.')}")
        for field_name, field in sorted(type_.fields.items()):
            if not field.args:
                continue
            items = [self._input_item(name, arg) for name, arg in sorted(field.args.items())]
            lines.append("")
            body = self._typed_dict(names.field_args_name(field_name), items, total=True)
            lines.extend(INDENT + line if line else line for line in body)
        return lines

    def _enum(self, type_: GraphQLEnumType) -> list[str]:
        enum = self.packages.require("enum", "Enum")
        shape = names.shape_name(type_)
        members = names.enum_member_names(list(type_.values))

        if all(is_identifier(m) and not m.startswith("_") for m in members.values()):
            lines = [f"class {shape}(str, {enum}):"]
            if type_.description:
                lines += [INDENT + string_literal(type_.description), ""]
            lines.extend(
                f"{INDENT}{member} = {string_literal(value)}" for value, member in members.items()
            )
        else:
            pairs = ", ".join(
                f"({string_literal(member)}, {string_literal(value)})"
                for value, member in members.items()
            )
            lines = [f"{shape} = {enum}({string_literal(shape)}, [{pairs}], type=str)"]

        any_ = self.typing("Any")
        guard = self.typing("TypeGuard")
        lines += [
            "",
            "",
            f"def {names.guard_name(type_.name)}(value: {any_}) -> {guard}[{shape}]:",
            f"{INDENT}return isinstance(value, str) and value in {shape}",
        ]
        return lines

    def _scalar(self, type_: GraphQLScalarType) -> list[str]:
        binding = self.bindings.scalars.get(type_.name)
        if binding is not None and binding.type is not None:
            target = self.packages.require_ref(binding.type)
        else:
            target = self.typing("Any")
        return [f"{type_.name}: {self.typing('TypeAlias')} = {target}"]
