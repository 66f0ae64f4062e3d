"""
Runtime narrowing of interface and union values.

Each interface or union gets a hidden discriminant key, and each of its
members a token. ``as_<member>_<container>()`` stamps a value with the
member's token; the container's resolve_type function reads it back, and
falls back to graphql-core's default type resolution (``__typename`` and
``is_type_of``) for unstamped values.

Keys and tokens come from per-pass counters, so two containers never
share a key even when their members overlap.
"""

from __future__ import annotations

from dataclasses import dataclass

from graphql import GraphQLInterfaceType, GraphQLObjectType, GraphQLSchema, GraphQLUnionType

from ..context import GenerationContext
from . import names
from .layout import INDENT, dict_expr
from .literals import string_literal
from .packages import RequiredPackages


@dataclass(frozen=True)
class Discriminant:
    """Key and member tokens of one interface or union."""

    container: str
    key: str
    tokens: dict[str, str]  # member type name -> token

    def helper_names(self) -> list[str]:
        return [
            names.member_tokens_name(self.container),
            names.resolve_type_name(self.container),
            *(names.cast_name(member, self.container) for member in self.tokens),
        ]


def allocate_discriminants(
    schema: GraphQLSchema,
    containers: list[GraphQLInterfaceType | GraphQLUnionType],
    ctx: GenerationContext,
) -> dict[str, Discriminant]:
    """Assign keys and tokens in container-name, then member-name order."""
    result: dict[str, Discriminant] = {}
    for container in sorted(containers, key=lambda c: c.name):
        container_id = ctx.next_id("discriminant")
        members: list[GraphQLObjectType] = sorted(
            schema.get_possible_types(container), key=lambda m: m.name
        )
        tokens = {
            member.name: names.member_token(container_id, index)
            for index, member in enumerate(members, start=1)
        }
        result[container.name] = Discriminant(
            container=container.name,
            key=names.discriminant_key(container_id),
            tokens=tokens,
        )
    return result


def render_narrowing(
    discriminant: Discriminant, packages: RequiredPackages, graphql: str
) -> list[str]:
    """Member table, resolve_type function and cast helpers of one container."""
    any_ = packages.require("typing", "Any")
    info = packages.require(graphql, "GraphQLResolveInfo")
    abstract = packages.require(graphql, "GraphQLAbstractType")
    table = names.member_tokens_name(discriminant.container)
    key = string_literal(discriminant.key)

    members = dict_expr(
        [
            (string_literal(token), string_literal(member))
            for member, token in discriminant.tokens.items()
        ]
    )
    lines = [
        *f"{table}: dict[str, str] = {members}".split("\n"),
        "",
        "",
        f"def {names.resolve_type_name(discriminant.container)}(",
        f"{INDENT}value: {any_}, info: {info}, abstract_type: {abstract}",
        ") -> str | None:",
        f"{INDENT}return _resolve_member(value, info, abstract_type, {key}, {table})",
    ]
    container = discriminant.container
    for member, token in discriminant.tokens.items():
        docstring = string_literal(f"Mark value as a {member} wherever a {container} is expected.")
        lines += [
            "",
            "",
            f"def {names.cast_name(member, container)}(value: _V) -> _V:",
            f"{INDENT}{docstring}",
            f"{INDENT}return _stamp(value, {key}, {string_literal(token)})",
        ]
    return lines
