"""
Generation pipeline.

Schema files are loaded and validated, binding modules are analysed, and
the output modules are rendered in memory. Files are written only after
every step has succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from graphql import GraphQLSchema, is_introspection_type

from .analysis.bindings import BindingLoader, Bindings
from .codegen.packages import ModuleLocator
from .codegen.renderer import SchemaRenderer
from .context import GenerationContext
from .core.errors import ConfigError
from .core.fileset import discover_schema_files
from .core.manifest import GeneratorConfig
from .core.schema_loader import load_schema

logger = logging.getLogger(__name__)


@dataclass
class GeneratedFile:
    path: Path
    content: str

    def write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.content, encoding="utf-8")


def generate(config: GeneratorConfig) -> list[GeneratedFile]:
    """
    Run one generation pass and return the rendered files without writing them.

    Raises:
        ConfigError: If no schema file is found
        MergeError: If schema documents conflict
        SchemaValidationFailed: If graphql-core rejects the schema
        BindingError: If binding modules cannot be analysed
        GenerationError: If the output cannot be rendered
    """
    files = discover_schema_files(config.schema, config.ignore)
    if not files:
        searched = ", ".join(str(path) for path in config.schema) or "(nothing)"
        raise ConfigError(f"No schema files found in {searched}")
    logger.info("Loading %d schema file(s)", len(files))
    schema = load_schema(files)

    ctx = GenerationContext(strict=config.strict)
    bindings = BindingLoader(ctx).load(
        config.bindings, include_subscription_resolvers=config.include_subscription_resolvers
    )
    _check_unused(schema, bindings)

    output = config.output
    renderer = SchemaRenderer(schema, bindings, ctx, graphql_module=output.graphql_module)
    out = output.out.resolve()
    types_path = output.types_path

    if types_path is None:
        locate = ModuleLocator(out, output.import_mode, output.import_root)
        return [GeneratedFile(out, renderer.render(locate))]

    types_path = types_path.resolve()
    schema_locate = ModuleLocator(out, output.import_mode, output.import_root)
    types_locate = ModuleLocator(types_path, output.import_mode, output.import_root)
    return [
        GeneratedFile(out, renderer.render_schema(schema_locate)),
        GeneratedFile(types_path, renderer.render_types(types_locate)),
    ]


def generate_files(config: GeneratorConfig) -> list[Path]:
    """Run a generation pass and write its output."""
    generated = generate(config)
    for file in generated:
        file.write()
        logger.info("Wrote %s", file.path)
    return [file.path for file in generated]


def _check_unused(schema: GraphQLSchema, bindings: Bindings) -> None:
    """Warn about bindings that target nothing in the schema."""
    types = {name for name, type_ in schema.type_map.items() if not is_introspection_type(type_)}
    for type_name in sorted(set(bindings.resolvers) - types):
        logger.warning("Resolvers for %s do not match any schema type", type_name)
    for scalar_name in sorted(set(bindings.scalars) - types):
        logger.warning("Scalar binding %s does not match any schema scalar", scalar_name)
    directives = {directive.name for directive in schema.directives}
    for name in sorted(
        (set(bindings.field_directives) | set(bindings.input_directives)) - directives
    ):
        logger.warning("Directive binding %s does not match any schema directive", name)
