"""
Identifier conventions of generated modules.

| GraphQL element | Runtime object | Type declaration |
|---|---|---|
| type / interface / union / input `User` | `UserType` | `User` |
| enum `Color` | `ColorEnum` | `EColor`, `is_color()` |
| scalar `Date` | `DateScalar` | `Date` |
| directive `@auth` | `AuthDirective` | |
"""

from __future__ import annotations

from graphql import (
    GraphQLEnumType,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLUnionType,
)

from ..core.strings import camel_to_snake, pascal_case

GENERATED_HEADER = "# Code generated by sdlbake. DO NOT EDIT."
DISCRIMINANT_PREFIX = "__sdlbake"
SCHEMA_NAME = "schema"


def runtime_name(type_: GraphQLNamedType) -> str:
    """Name of the module-level object constructing a schema type."""
    if isinstance(type_, GraphQLEnumType):
        return f"{type_.name}Enum"
    if isinstance(type_, GraphQLScalarType):
        return f"{type_.name}Scalar"
    if isinstance(
        type_,
        GraphQLObjectType | GraphQLInterfaceType | GraphQLUnionType | GraphQLInputObjectType,
    ):
        return f"{type_.name}Type"
    raise TypeError(f"Unexpected schema type {type_!r}")


def directive_name(name: str) -> str:
    return f"{pascal_case(name)}Directive"


def shape_name(type_: GraphQLNamedType) -> str:
    """Name of the type declaration describing values of a schema type."""
    if isinstance(type_, GraphQLEnumType):
        return f"E{type_.name}"
    return type_.name


def guard_name(enum_name: str) -> str:
    return f"is_{camel_to_snake(enum_name)}"


def args_namespace_name(type_name: str) -> str:
    return f"{type_name}Args"


def field_args_name(field_name: str) -> str:
    return f"{pascal_case(field_name)}Args"


def scalar_codec_alias(scalar_name: str) -> str:
    return f"{scalar_name}Codec"


def resolve_type_name(type_name: str) -> str:
    return f"_resolve_{camel_to_snake(type_name)}_type"


def member_tokens_name(type_name: str) -> str:
    return f"_{camel_to_snake(type_name).upper()}_MEMBERS"


def cast_name(member: str, container: str) -> str:
    return f"as_{camel_to_snake(member)}_{camel_to_snake(container)}"


def input_transform_name(input_name: str) -> str:
    return f"_transform_input_{camel_to_snake(input_name)}"


def args_transform_name(type_name: str, field_name: str) -> str:
    return f"_transform_args_{camel_to_snake(type_name)}_{camel_to_snake(field_name)}"


def discriminant_key(container_id: int) -> str:
    return f"{DISCRIMINANT_PREFIX}_{container_id}"


def member_token(container_id: int, member_id: int) -> str:
    return f"{DISCRIMINANT_PREFIX}_{container_id}_{member_id}"


def _rejected_by_enum(name: str) -> bool:
    sunder = len(name) > 2 and name[0] == name[-1] == "_" and name[1] != "_" and name[-2] != "_"
    dunder = len(name) > 4 and name[:2] == name[-2:] == "__" and name[2] != "_" and name[-3] != "_"
    return name == "mro" or sunder or dunder


def enum_member_names(values: list[str]) -> dict[str, str]:
    """Python member name for each enum value; reserved names get trailing underscores."""
    taken = set(values)
    members: dict[str, str] = {}
    for value in values:
        name = value
        if _rejected_by_enum(name):
            name += "_"
            while name in taken or _rejected_by_enum(name):
                name += "_"
            taken.add(name)
        members[value] = name
    return members
