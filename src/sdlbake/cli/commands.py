"""
sdlbake commands.

- generate: merge schema files, analyse bindings, write the schema module
- merge:    print the merged and validated SDL
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import typer
from graphql import print_ast
from rich.console import Console

from sdlbake.core.errors import ConfigError, SchemaValidationFailed, SdlBakeError
from sdlbake.core.fileset import discover_schema_files
from sdlbake.core.manifest import GeneratorConfig, ImportMode, find_config, load_config
from sdlbake.core.merger import merge_documents
from sdlbake.core.schema_loader import build_schema, parse_schema_files
from sdlbake.generate import generate

from .utils import err_console, setup_logging

console = Console()


def _report(error: SdlBakeError) -> None:
    if isinstance(error, SchemaValidationFailed):
        err_console.print("[red]Schema is invalid:[/red]", highlight=False)
        for message in error.errors:
            err_console.print(f"  {message}", markup=False, highlight=False)
        return
    err_console.print(f"[red]Error:[/red] {error}", highlight=False)


def _base_config(config_path: Path | None) -> GeneratorConfig:
    if config_path is not None:
        return load_config(config_path.resolve())
    found = find_config(Path.cwd())
    if found is not None:
        return load_config(found)
    return GeneratorConfig()


def _resolved(path: Path | None) -> Path | None:
    return path.resolve() if path is not None else None


def build_config(
    config_path: Path | None = None,
    schema: list[Path] | None = None,
    ignore: list[str] | None = None,
    out: Path | None = None,
    types_out: Path | None = None,
    split_types: bool | None = None,
    scalars: Path | None = None,
    resolvers: Path | None = None,
    subscribers: Path | None = None,
    field_directives: Path | None = None,
    input_directives: Path | None = None,
    import_mode: ImportMode | None = None,
    import_root: Path | None = None,
    graphql_module: str | None = None,
    strict: bool | None = None,
    include_subscription_resolvers: bool | None = None,
) -> GeneratorConfig:
    """Load the configuration file and apply command line overrides."""
    config = _base_config(config_path)

    bindings = config.bindings
    bindings = replace(
        bindings,
        scalars=_resolved(scalars) or bindings.scalars,
        resolvers=_resolved(resolvers) or bindings.resolvers,
        subscribers=_resolved(subscribers) or bindings.subscribers,
        field_directives=_resolved(field_directives) or bindings.field_directives,
        input_directives=_resolved(input_directives) or bindings.input_directives,
    )

    output = config.output
    output = replace(
        output,
        out=_resolved(out) or output.out,
        types_out=_resolved(types_out) or output.types_out,
        split_types=output.split_types if split_types is None else split_types,
        import_mode=import_mode or output.import_mode,
        import_root=_resolved(import_root) or output.import_root,
        graphql_module=graphql_module or output.graphql_module,
    )

    return replace(
        config,
        schema=[path.resolve() for path in schema] if schema else config.schema,
        ignore=[*config.ignore, *(ignore or [])],
        bindings=bindings,
        output=output,
        strict=config.strict if strict is None else strict,
        include_subscription_resolvers=(
            config.include_subscription_resolvers
            if include_subscription_resolvers is None
            else include_subscription_resolvers
        ),
    )


def generate_command(
    schema: list[Path] | None = typer.Argument(  # noqa: B008
        None, help="Schema files or directories (default: from config)"
    ),
    config_path: Path | None = typer.Option(  # noqa: B008
        None, "--config", "-c", help="Path to sdlbake.toml or pyproject.toml"
    ),
    out: Path | None = typer.Option(  # noqa: B008
        None, "--out", "-o", help="Output module (default: schema_gen.py)"
    ),
    types_out: Path | None = typer.Option(  # noqa: B008
        None, "--types-out", "-t", help="Write type declarations to a separate module"
    ),
    split_types: bool | None = typer.Option(
        None, "--split-types/--inline-types", help="Write type declarations to types_gen.py"
    ),
    scalars: Path | None = typer.Option(  # noqa: B008
        None, "--scalars", help="Scalar codec module"
    ),
    resolvers: Path | None = typer.Option(  # noqa: B008
        None, "--resolvers", help="Resolvers directory (one entry per type)"
    ),
    subscribers: Path | None = typer.Option(  # noqa: B008
        None, "--subscribers", help="Subscription subscribers module or directory"
    ),
    field_directives: Path | None = typer.Option(  # noqa: B008
        None, "--field-directives", help="Field directive module or directory"
    ),
    input_directives: Path | None = typer.Option(  # noqa: B008
        None, "--input-directives", help="Input directive module or directory"
    ),
    import_mode: ImportMode | None = typer.Option(
        None, "--import-mode", help="How binding modules are imported"
    ),
    import_root: Path | None = typer.Option(  # noqa: B008
        None, "--import-root", help="Root of absolute imports (default: output directory)"
    ),
    graphql_module: str | None = typer.Option(
        None, "--graphql-module", help="Module providing graphql-core's API"
    ),
    ignore: list[str] | None = typer.Option(  # noqa: B008
        None, "--ignore", "-i", help="Glob of schema files to skip (repeatable)"
    ),
    strict: bool | None = typer.Option(
        None, "--strict/--no-strict", help="Fail on binding constructs that cannot be analysed"
    ),
    include_subscription_resolvers: bool | None = typer.Option(
        None,
        "--include-subscription-resolvers/--no-subscription-resolvers",
        help="Bind resolvers of subscription root fields",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print output instead of writing"),
    verbose: bool = typer.Option(False, "--verbose", help="Log analysis details"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
) -> None:
    """
    Generate the executable schema module.
    """
    setup_logging(verbose=verbose, quiet=quiet)
    try:
        config = build_config(
            config_path=config_path,
            schema=schema,
            ignore=ignore,
            out=out,
            types_out=types_out,
            split_types=split_types,
            scalars=scalars,
            resolvers=resolvers,
            subscribers=subscribers,
            field_directives=field_directives,
            input_directives=input_directives,
            import_mode=import_mode,
            import_root=import_root,
            graphql_module=graphql_module,
            strict=strict,
            include_subscription_resolvers=include_subscription_resolvers,
        )
        generated = generate(config)
    except SdlBakeError as e:
        _report(e)
        raise typer.Exit(code=1)

    for file in generated:
        if dry_run:
            typer.echo(f"# {file.path}")
            typer.echo(file.content, nl=False)
        else:
            file.write()
            console.print(f"[green]✓[/green] Wrote {file.path}", highlight=False)


def merge_command(
    schema: list[Path] = typer.Argument(..., help="Schema files or directories"),  # noqa: B008
    ignore: list[str] | None = typer.Option(  # noqa: B008
        None, "--ignore", "-i", help="Glob of schema files to skip (repeatable)"
    ),
    out: Path | None = typer.Option(  # noqa: B008
        None, "--out", "-o", help="Write the merged SDL to a file"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log merge details"),
) -> None:
    """
    Merge schema files and print the validated SDL.
    """
    setup_logging(verbose=verbose)
    try:
        files = discover_schema_files(schema, ignore or [])
        if not files:
            raise ConfigError("No schema files found")
        document = merge_documents(parse_schema_files(files))
        build_schema(document)
    except SdlBakeError as e:
        _report(e)
        raise typer.Exit(code=1)

    sdl = print_ast(document) + "\n"
    if out is None:
        typer.echo(sdl, nl=False)
    else:
        out.write_text(sdl, encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote {out}", highlight=False)
