"""Core sdlbake functionality: IR, schema loading, document merging, configuration."""

from . import ir
from .errors import (
    BindingError,
    ConfigError,
    ErrorContext,
    GenerationError,
    MergeConflict,
    MergeError,
    SchemaValidationFailed,
    SdlBakeError,
)
from .fileset import discover_schema_files
from .manifest import GeneratorConfig, find_config, load_config
from .merger import merge_documents
from .schema_loader import build_schema, load_schema, parse_schema_files

__all__ = [
    "ir",
    "SdlBakeError",
    "ConfigError",
    "MergeError",
    "MergeConflict",
    "SchemaValidationFailed",
    "BindingError",
    "GenerationError",
    "ErrorContext",
    "discover_schema_files",
    "GeneratorConfig",
    "find_config",
    "load_config",
    "merge_documents",
    "build_schema",
    "load_schema",
    "parse_schema_files",
]
