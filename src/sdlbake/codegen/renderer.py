"""
Schema module renderer.

Walks a validated GraphQLSchema and emits a Python module that builds the
same schema with graphql-core's type constructors, wired to the resolver,
scalar and directive bindings found by static analysis. Output is
deterministic: types, fields, arguments and directive locations are
emitted in name order; interface lists and union members keep their
declared order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from graphql import (
    DirectiveLocation,
    GraphQLArgument,
    GraphQLDirective,
    GraphQLEnumType,
    GraphQLField,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNamedType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLSchema,
    GraphQLType,
    GraphQLUnionType,
    Undefined,
    is_introspection_type,
    is_specified_directive,
    is_specified_scalar_type,
)
from graphql.execution.values import get_argument_values

from ..analysis.bindings import Bindings
from ..context import GenerationContext
from ..core.ir import SymbolReference
from . import names
from .layout import INDENT, call, dict_expr, list_expr
from .literals import input_literal, python_literal, string_literal
from .narrowing import Discriminant, allocate_discriminants, render_narrowing
from .packages import RequiredPackages
from .shapes import ShapeRenderer, shape_names
from .transforms import TransformRenderer

logger = logging.getLogger(__name__)

Locate = Callable[[str], str]

HELPER_NAMES = ("_identity", "_V", "_stamp", "_resolve_member", "_map_input", "_rewrite_args")


@dataclass
class _ModuleState:
    """Per-module rendering state."""

    packages: RequiredPackages
    helpers: set[str] = field(default_factory=set)


class SchemaRenderer:
    """
    Render schema and type declaration modules.

    ``render()`` produces one self-contained module. ``render_schema()`` and
    ``render_types()`` split the runtime construction and the type
    declarations into two modules with independent imports.
    """

    def __init__(
        self,
        schema: GraphQLSchema,
        bindings: Bindings,
        ctx: GenerationContext,
        graphql_module: str = "graphql",
    ):
        self.schema = schema
        self.bindings = bindings
        self.ctx = ctx
        self.graphql = graphql_module

        self.types: list[GraphQLNamedType] = [
            type_
            for _, type_ in sorted(schema.type_map.items())
            if not is_introspection_type(type_) and not is_specified_scalar_type(type_)
        ]
        self.directives: list[GraphQLDirective] = sorted(
            (d for d in schema.directives if not is_specified_directive(d)),
            key=lambda d: d.name,
        )
        containers = [
            t for t in self.types if isinstance(t, GraphQLInterfaceType | GraphQLUnionType)
        ]
        self.discriminants: dict[str, Discriminant] = allocate_discriminants(
            schema, containers, ctx
        )

    # =========================================================================
    # Modules
    # =========================================================================

    def render(self, locate: Locate) -> str:
        """Render one module holding both type declarations and the schema."""
        state = _ModuleState(RequiredPackages([*self._shape_names(), *self._runtime_names()]))
        shapes = self._shape_blocks(state)
        runtime = self._runtime_blocks(state)
        return self._assemble(state, locate, [*shapes, *runtime])

    def render_schema(self, locate: Locate) -> str:
        """Render the runtime module only."""
        state = _ModuleState(RequiredPackages(self._runtime_names()))
        return self._assemble(state, locate, self._runtime_blocks(state))

    def render_types(self, locate: Locate) -> str:
        """Render the type declarations module only."""
        state = _ModuleState(RequiredPackages(self._shape_names()))
        return self._assemble(state, locate, self._shape_blocks(state))

    def _assemble(self, state: _ModuleState, locate: Locate, blocks: list[list[str]]) -> str:
        helpers = self._helper_blocks(state)
        lines = [names.GENERATED_HEADER, "", "from __future__ import annotations", ""]
        lines += state.packages.render(locate)
        for block in [*helpers, *blocks]:
            lines += ["", *block, ""]
        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines) + "\n"

    def _shape_names(self) -> list[str]:
        return [name for type_ in self.types for name in shape_names(type_)]

    def _runtime_names(self) -> list[str]:
        result = [names.runtime_name(t) for t in self.types]
        result += [names.directive_name(d.name) for d in self.directives]
        result += [names.SCHEMA_NAME, *HELPER_NAMES]
        for discriminant in self.discriminants.values():
            result += discriminant.helper_names()
        for type_ in self.types:
            if isinstance(type_, GraphQLInputObjectType):
                result.append(names.input_transform_name(type_.name))
            elif isinstance(type_, GraphQLObjectType | GraphQLInterfaceType):
                result += [names.args_transform_name(type_.name, f) for f in type_.fields]
        return result

    # =========================================================================
    # Type declarations
    # =========================================================================

    def _shape_blocks(self, state: _ModuleState) -> list[list[str]]:
        shapes = ShapeRenderer(self.bindings, state.packages)
        return [shapes.render(type_) for type_ in self.types]

    # =========================================================================
    # Runtime construction
    # =========================================================================

    def _runtime_blocks(self, state: _ModuleState) -> list[list[str]]:
        transforms = TransformRenderer(self.schema, self.bindings, state.packages)
        blocks: list[list[str]] = []
        for type_ in self.types:
            blocks += self._type_blocks(state, transforms, type_)
        for directive in self.directives:
            blocks.append(self._directive(state, directive))
        blocks.append(self._schema(state))
        return blocks

    def _type_blocks(
        self,
        state: _ModuleState,
        transforms: TransformRenderer,
        type_: GraphQLNamedType,
    ) -> list[list[str]]:
        blocks: list[list[str]] = []
        discriminant = self.discriminants.get(type_.name)
        if discriminant is not None:
            state.helpers.update(("_V", "_stamp", "_resolve_member"))
            blocks.append(render_narrowing(discriminant, state.packages, self.graphql))

        if isinstance(type_, GraphQLObjectType | GraphQLInterfaceType):
            for field_name, field_ in sorted(type_.fields.items()):
                if self._rewrites_args(type_, field_name, field_, transforms):
                    state.helpers.update(("_map_input", "_rewrite_args"))
                    blocks.append(transforms.render_args(type_.name, field_name, field_))
            blocks.append(self._object(state, transforms, type_))
        elif isinstance(type_, GraphQLUnionType):
            blocks.append(self._union(state, type_))
        elif isinstance(type_, GraphQLInputObjectType):
            if type_.name in transforms.bearing:
                state.helpers.add("_map_input")
                blocks.append(transforms.render_input(type_))
            blocks.append(self._input_object(state, type_))
        elif isinstance(type_, GraphQLEnumType):
            blocks.append(self._enum(state, type_))
        elif isinstance(type_, GraphQLScalarType):
            blocks.append(self._scalar(state, type_))
        else:
            raise TypeError(f"Unexpected schema type {type_!r}")
        return blocks

    def _gql(self, state: _ModuleState, name: str) -> str:
        return state.packages.require(self.graphql, name)

    def _type_expr(self, state: _ModuleState, type_: GraphQLType) -> str:
        if isinstance(type_, GraphQLNonNull):
            return f"{self._gql(state, 'GraphQLNonNull')}({self._type_expr(state, type_.of_type)})"
        if isinstance(type_, GraphQLList):
            return f"{self._gql(state, 'GraphQLList')}({self._type_expr(state, type_.of_type)})"
        if isinstance(type_, GraphQLScalarType) and is_specified_scalar_type(type_):
            return self._gql(state, f"GraphQL{type_.name}")
        return names.runtime_name(type_)  # type: ignore[arg-type]

    def _assign(self, name: str, expression: str) -> list[str]:
        return f"{name} = {expression}".split("\n")

    @staticmethod
    def _documented(
        args: list[str], description: str | None, deprecation: str | None = None
    ) -> list[str]:
        if description:
            args.append(f"description={string_literal(description)}")
        if deprecation:
            args.append(f"deprecation_reason={string_literal(deprecation)}")
        return args

    def _object(
        self,
        state: _ModuleState,
        transforms: TransformRenderer,
        type_: GraphQLObjectType | GraphQLInterfaceType,
    ) -> list[str]:
        fields = dict_expr(
            [
                (string_literal(name), self._field(state, transforms, type_, name, field_))
                for name, field_ in sorted(type_.fields.items())
            ]
        )
        args = [string_literal(type_.name), f"fields=lambda: {fields}"]
        if type_.interfaces:
            interfaces = list_expr([names.runtime_name(i) for i in type_.interfaces])
            args.append(f"interfaces=lambda: {interfaces}")
        if isinstance(type_, GraphQLInterfaceType):
            args.append(f"resolve_type={names.resolve_type_name(type_.name)}")
            constructor = self._gql(state, "GraphQLInterfaceType")
        else:
            constructor = self._gql(state, "GraphQLObjectType")
        self._documented(args, type_.description)
        return self._assign(names.runtime_name(type_), call(constructor, args))

    def _field(
        self,
        state: _ModuleState,
        transforms: TransformRenderer,
        type_: GraphQLObjectType | GraphQLInterfaceType,
        name: str,
        field_: GraphQLField,
    ) -> str:
        args = [self._type_expr(state, field_.type)]
        if field_.args:
            arguments = dict_expr(
                [
                    (string_literal(arg_name), self._argument(state, arg))
                    for arg_name, arg in sorted(field_.args.items())
                ]
            )
            args.append(f"args={arguments}")

        resolve = self._resolver(state, transforms, type_, name, field_)
        if resolve is not None:
            args.append(f"resolve={resolve}")
        subscriber = self.bindings.subscriber_for(self.schema, type_, name)
        if subscriber is not None:
            args.append(f"subscribe={state.packages.require_ref(subscriber)}")
        self._documented(args, field_.description, field_.deprecation_reason)
        return call(self._gql(state, "GraphQLField"), args)

    def _field_directives(
        self, state: _ModuleState, field_: GraphQLField
    ) -> list[tuple[str, str]]:
        """Bound field directives of a field, in declaration order."""
        result: list[tuple[str, str]] = []
        node = field_.ast_node
        for directive in (node.directives or ()) if node is not None else ():
            ref = self.bindings.field_directives.get(directive.name.value)
            if ref is None:
                continue
            definition = self.schema.get_directive(directive.name.value)
            values = get_argument_values(definition, directive) if definition else {}
            result.append((state.packages.require_ref(ref), python_literal(values)))
        return result

    def _rewrites_args(
        self,
        type_: GraphQLObjectType | GraphQLInterfaceType,
        name: str,
        field_: GraphQLField,
        transforms: TransformRenderer,
    ) -> bool:
        has_resolver = self.bindings.resolver_for(self.schema, type_, name) is not None or any(
            d.name.value in self.bindings.field_directives
            for d in (field_.ast_node.directives or () if field_.ast_node else ())
        )
        return has_resolver and transforms.field_needs_transform(field_)

    def _resolver(
        self,
        state: _ModuleState,
        transforms: TransformRenderer,
        type_: GraphQLObjectType | GraphQLInterfaceType,
        name: str,
        field_: GraphQLField,
    ) -> str | None:
        """
        Resolver expression of a field.

        The bound resolver (or graphql-core's default resolver) is wrapped by
        each field directive, the first declared innermost; argument
        transforms wrap the result.
        """
        ref = self.bindings.resolver_for(self.schema, type_, name)
        directives = self._field_directives(state, field_)
        if ref is None and not directives:
            return None

        if ref is not None:
            expression = state.packages.require_ref(ref)
        else:
            expression = self._gql(state, "default_field_resolver")
        for directive, values in directives:
            expression = f"{directive}({expression}, {values})"

        if self._rewrites_args(type_, name, field_, transforms):
            transform = names.args_transform_name(type_.name, name)
            expression = f"_rewrite_args({expression}, {transform})"
        return expression

    def _scalar_parser(self, state: _ModuleState) -> Callable[[GraphQLScalarType], str | None]:
        def parser(scalar: GraphQLScalarType) -> str | None:
            binding = self.bindings.scalars.get(scalar.name)
            if binding is None or binding.parse_value is None:
                return None
            return self._codec(state, binding.parse_value)

        return parser

    def _argument(self, state: _ModuleState, arg: GraphQLArgument) -> str:
        args = [self._type_expr(state, arg.type)]
        if arg.default_value is not Undefined:
            default = input_literal(arg.default_value, arg.type, self._scalar_parser(state))
            args.append(f"default_value={default}")
        self._documented(args, arg.description, arg.deprecation_reason)
        return call(self._gql(state, "GraphQLArgument"), args)

    def _input_field(self, state: _ModuleState, input_field: GraphQLInputField) -> str:
        args = [self._type_expr(state, input_field.type)]
        if input_field.default_value is not Undefined:
            default = input_literal(
                input_field.default_value, input_field.type, self._scalar_parser(state)
            )
            args.append(f"default_value={default}")
        self._documented(args, input_field.description, input_field.deprecation_reason)
        return call(self._gql(state, "GraphQLInputField"), args)

    def _union(self, state: _ModuleState, type_: GraphQLUnionType) -> list[str]:
        members = list_expr([names.runtime_name(member) for member in type_.types])
        args = [
            string_literal(type_.name),
            f"types=lambda: {members}",
            f"resolve_type={names.resolve_type_name(type_.name)}",
        ]
        self._documented(args, type_.description)
        constructor = self._gql(state, "GraphQLUnionType")
        return self._assign(names.runtime_name(type_), call(constructor, args))

    def _input_object(self, state: _ModuleState, type_: GraphQLInputObjectType) -> list[str]:
        fields = dict_expr(
            [
                (string_literal(name), self._input_field(state, input_field))
                for name, input_field in sorted(type_.fields.items())
            ]
        )
        args = [string_literal(type_.name), f"fields=lambda: {fields}"]
        self._documented(args, type_.description)
        return self._assign(
            names.runtime_name(type_), call(self._gql(state, "GraphQLInputObjectType"), args)
        )

    def _enum(self, state: _ModuleState, type_: GraphQLEnumType) -> list[str]:
        enum_value = self._gql(state, "GraphQLEnumValue")
        values = []
        for name, value in type_.values.items():
            value_args = self._documented(
                [string_literal(name)], value.description, value.deprecation_reason
            )
            values.append((string_literal(name), call(enum_value, value_args)))
        args = [string_literal(type_.name), dict_expr(values)]
        self._documented(args, type_.description)
        constructor = self._gql(state, "GraphQLEnumType")
        return self._assign(names.runtime_name(type_), call(constructor, args))

    def _codec(self, state: _ModuleState, ref: SymbolReference) -> str:
        assert ref.module is not None
        local = state.packages.require(ref.module, ref.symbol, names.scalar_codec_alias(ref.symbol))
        return f"{local}.{ref.property}"

    def _scalar(self, state: _ModuleState, type_: GraphQLScalarType) -> list[str]:
        binding = self.bindings.scalars.get(type_.name)
        args = [string_literal(type_.name)]
        if binding is not None and binding.serialize is not None:
            args.append(f"serialize={self._codec(state, binding.serialize)}")
        else:
            logger.warning(
                "Scalar %s has no serialize binding; values are passed through unchanged",
                type_.name,
            )
            state.helpers.add("_identity")
            args.append("serialize=_identity")
        if binding is not None and binding.parse_value is not None:
            args.append(f"parse_value={self._codec(state, binding.parse_value)}")
        if binding is not None and binding.parse_literal is not None:
            args.append(f"parse_literal={self._codec(state, binding.parse_literal)}")
        self._documented(args, type_.description)
        if type_.specified_by_url:
            args.append(f"specified_by_url={string_literal(type_.specified_by_url)}")
        constructor = self._gql(state, "GraphQLScalarType")
        return self._assign(names.runtime_name(type_), call(constructor, args))

    def _directive(self, state: _ModuleState, directive: GraphQLDirective) -> list[str]:
        if (
            DirectiveLocation.FIELD_DEFINITION in directive.locations
            and directive.name not in self.bindings.field_directives
        ):
            logger.warning(
                "Directive @%s can be used on field definitions but has no binding",
                directive.name,
            )

        location = self._gql(state, "DirectiveLocation")
        ordered = sorted(directive.locations, key=lambda item: item.name)
        locations = list_expr([f"{location}.{loc.name}" for loc in ordered])
        args = [string_literal(directive.name), f"locations={locations}"]
        if directive.args:
            arguments = dict_expr(
                [
                    (string_literal(name), self._argument(state, arg))
                    for name, arg in sorted(directive.args.items())
                ]
            )
            args.append(f"args={arguments}")
        if directive.is_repeatable:
            args.append("is_repeatable=True")
        self._documented(args, directive.description)
        return self._assign(
            names.directive_name(directive.name), call(self._gql(state, "GraphQLDirective"), args)
        )

    def _schema(self, state: _ModuleState) -> list[str]:
        args: list[str] = []
        for operation, root in (
            ("query", self.schema.query_type),
            ("mutation", self.schema.mutation_type),
            ("subscription", self.schema.subscription_type),
        ):
            if root is not None:
                args.append(f"{operation}={names.runtime_name(root)}")
        args.append(f"types={list_expr([names.runtime_name(t) for t in self.types])}")
        if self.directives:
            specified = self._gql(state, "specified_directives")
            directives = [f"*{specified}", *(names.directive_name(d.name) for d in self.directives)]
            args.append(f"directives={list_expr(directives)}")
        if self.schema.description:
            args.append(f"description={string_literal(self.schema.description)}")
        return self._assign(names.SCHEMA_NAME, call(self._gql(state, "GraphQLSchema"), args))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _helper_blocks(self, state: _ModuleState) -> list[list[str]]:
        packages = state.packages
        blocks: list[list[str]] = []
        if not state.helpers:
            return blocks

        any_ = packages.require("typing", "Any")
        if "_identity" in state.helpers:
            blocks.append([f"def _identity(value: {any_}) -> {any_}:", f"{INDENT}return value"])

        if "_stamp" in state.helpers:
            type_var = packages.require("typing", "TypeVar")
            info = self._gql(state, "GraphQLResolveInfo")
            abstract = self._gql(state, "GraphQLAbstractType")
            default_resolver = self._gql(state, "default_type_resolver")
            blocks.append([f'_V = {type_var}("_V")'])
            blocks.append(
                [
                    "def _stamp(value: _V, key: str, token: str) -> _V:",
                    f"{INDENT}if isinstance(value, dict):",
                    f"{INDENT * 2}return {{**value, key: token}}  # type: ignore[return-value]",
                    f"{INDENT}setattr(value, key, token)",
                    f"{INDENT}return value",
                ]
            )
            blocks.append(
                [
                    "def _resolve_member(",
                    f"{INDENT}value: {any_},",
                    f"{INDENT}info: {info},",
                    f"{INDENT}abstract_type: {abstract},",
                    f"{INDENT}key: str,",
                    f"{INDENT}members: dict[str, str],",
                    f") -> {any_}:",
                    f"{INDENT}if isinstance(value, dict):",
                    f"{INDENT * 2}token = value.get(key)",
                    f"{INDENT}else:",
                    f"{INDENT * 2}token = getattr(value, key, None)",
                    f"{INDENT}if token in members:",
                    f"{INDENT * 2}return members[token]",
                    f"{INDENT}return {default_resolver}(value, info, abstract_type)",
                ]
            )

        if "_map_input" in state.helpers or "_rewrite_args" in state.helpers:
            callable_ = packages.require("collections.abc", "Callable")
            blocks.append(
                [
                    "def _map_input(",
                    f"{INDENT}value: {any_}, transform: {callable_}[[{any_}], {any_}]",
                    f") -> {any_}:",
                    f"{INDENT}if value is None:",
                    f"{INDENT * 2}return None",
                    f"{INDENT}if isinstance(value, list):",
                    f"{INDENT * 2}return [_map_input(item, transform) for item in value]",
                    f"{INDENT}return transform(value)",
                ]
            )
            if "_rewrite_args" in state.helpers:
                info = self._gql(state, "GraphQLResolveInfo")
                blocks.append(
                    [
                        "def _rewrite_args(",
                        f"{INDENT}resolve: {callable_}[..., {any_}],",
                        f"{INDENT}transform: {callable_}[[dict[str, {any_}]], dict[str, {any_}]],",
                        f") -> {callable_}[..., {any_}]:",
                        f"{INDENT}def resolver(",
                        f"{INDENT * 2}obj: {any_}, info: {info}, **args: {any_}",
                        f"{INDENT}) -> {any_}:",
                        f"{INDENT * 2}return resolve(obj, info, **transform(args))",
                        "",
                        f"{INDENT}return resolver",
                    ]
                )
        return blocks
