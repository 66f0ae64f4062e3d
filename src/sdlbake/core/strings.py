"""
String utility functions for sdlbake.

Case conversions used to derive Python identifiers from GraphQL names.
"""

from __future__ import annotations

import builtins
import keyword
import re

# Names a generated module must never rebind at top level
RESERVED_NAMES: frozenset[str] = frozenset(keyword.kwlist) | frozenset(
    name for name in dir(builtins) if not name.startswith("_")
)


def camel_to_snake(name: str) -> str:
    """
    Convert a camelCase or PascalCase name to snake_case.

    Examples:
        >>> camel_to_snake("parseValue")
        'parse_value'
        >>> camel_to_snake("HTTPHeader")
        'http_header'
        >>> camel_to_snake("already_snake")
        'already_snake'
    """
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def pascal_case(name: str) -> str:
    """
    Convert a name to PascalCase, keeping existing inner capitals.

    Examples:
        >>> pascal_case("hero")
        'Hero'
        >>> pascal_case("created_at")
        'CreatedAt'
        >>> pascal_case("isAdmin")
        'IsAdmin'
    """
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def is_identifier(name: str) -> bool:
    """True when name can be used as a Python attribute or keyword argument."""
    return name.isidentifier() and not keyword.iskeyword(name)
