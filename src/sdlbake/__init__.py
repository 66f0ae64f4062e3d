"""
sdlbake - static GraphQL schema code generator.

Merges GraphQL SDL files, statically analyses resolver and scalar binding
modules, and generates a Python module that builds the executable schema
with graphql-core.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.errors import (
    BindingError,
    ConfigError,
    GenerationError,
    MergeError,
    SchemaValidationFailed,
    SdlBakeError,
)
from .generate import generate, generate_files

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "generate",
    "generate_files",
    "SdlBakeError",
    "ConfigError",
    "MergeError",
    "SchemaValidationFailed",
    "BindingError",
    "GenerationError",
]
