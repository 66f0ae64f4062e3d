"""
Binding records produced by static analysis of binding modules.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .reference import SymbolReference


class ScalarBinding(BaseModel):
    """
    Codec functions and represented type for one custom scalar.

    Attributes:
        name: Scalar name (the exported class name)
        serialize: Reference to the serialize function, if bound
        parse_value: Reference to the parse_value function, if bound
        parse_literal: Reference to the parse_literal function, if bound
        type: Python type the scalar parses into, None when unknown
    """

    name: str
    serialize: SymbolReference | None = None
    parse_value: SymbolReference | None = None
    parse_literal: SymbolReference | None = None
    type: SymbolReference | None = None

    model_config = ConfigDict(frozen=True)
