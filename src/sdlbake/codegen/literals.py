"""
Python literal rendering for default values and directive arguments.
"""

from __future__ import annotations

import json
import math
from collections.abc import Callable
from typing import Any

from graphql import (
    GraphQLInputObjectType,
    GraphQLInputType,
    GraphQLList,
    GraphQLNonNull,
    GraphQLScalarType,
    is_specified_scalar_type,
)

from ..core.errors import GenerationError


def string_literal(value: str) -> str:
    """Double-quoted Python string literal."""
    return json.dumps(value)


def python_literal(value: Any) -> str:
    """
    Render a JSON-like Python value as source text.

    Raises:
        GenerationError: For values without a literal form
    """
    if value is None or isinstance(value, bool):
        return repr(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise GenerationError(f"Cannot render non-finite float {value!r}")
        return repr(value)
    if isinstance(value, str):
        return string_literal(value)
    if isinstance(value, list | tuple):
        return "[" + ", ".join(python_literal(item) for item in value) + "]"
    if isinstance(value, dict):
        items = (f"{string_literal(str(k))}: {python_literal(v)}" for k, v in value.items())
        return "{" + ", ".join(items) + "}"
    raise GenerationError(f"Cannot render value {value!r} of type {type(value).__name__}")


def input_literal(
    value: Any,
    type_: GraphQLInputType,
    scalar_parser: Callable[[GraphQLScalarType], str | None],
) -> str:
    """
    Render an input value built by graphql-core for ``type_``.

    Values of custom scalars were parsed without the scalar's codec, so they
    are wrapped in a call to the codec's parse_value when one is bound.
    """
    if isinstance(type_, GraphQLNonNull):
        return input_literal(value, type_.of_type, scalar_parser)
    if value is None:
        return "None"
    if isinstance(type_, GraphQLList):
        items = value if isinstance(value, list | tuple) else [value]
        return "[" + ", ".join(input_literal(v, type_.of_type, scalar_parser) for v in items) + "]"
    if isinstance(type_, GraphQLInputObjectType):
        parts = []
        for name, field in type_.fields.items():
            key = field.out_name or name
            if key in value:
                parts.append(
                    f"{string_literal(key)}: {input_literal(value[key], field.type, scalar_parser)}"
                )
        return "{" + ", ".join(parts) + "}"
    if isinstance(type_, GraphQLScalarType) and not is_specified_scalar_type(type_):
        parser = scalar_parser(type_)
        if parser is not None:
            return f"{parser}({python_literal(value)})"
    return python_literal(value)
