"""
Intermediate representation shared by the merger, analyser and renderer.
"""

from .bindings import ScalarBinding
from .kinds import DefinitionKind
from .location import SourceLocation
from .reference import SymbolReference

__all__ = [
    "DefinitionKind",
    "ScalarBinding",
    "SourceLocation",
    "SymbolReference",
]
