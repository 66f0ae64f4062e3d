"""
Generator configuration loaded from ``sdlbake.toml`` or ``pyproject.toml``.

Examples:

    # sdlbake.toml
    [generate]
    schema = ["schema"]
    out = "app/schema_gen.py"

    [bindings]
    resolvers = "app/resolvers"
    scalars = "app/scalars.py"

    # pyproject.toml
    [tool.sdlbake.generate]
    schema = ["schema"]

    [tool.sdlbake.bindings]
    resolvers = "app/resolvers"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

from .errors import ConfigError

CONFIG_FILENAME = "sdlbake.toml"


class ImportMode(StrEnum):
    """How imports of local binding modules are written."""

    ABSOLUTE = "absolute"  # from app.resolvers.Query import hero
    RELATIVE = "relative"  # from .resolvers.Query import hero


@dataclass
class BindingPaths:
    """Locations of binding modules (files or directories)."""

    scalars: Path | None = None
    resolvers: Path | None = None
    subscribers: Path | None = None
    field_directives: Path | None = None
    input_directives: Path | None = None


@dataclass
class OutputConfig:
    """Where and how generated modules are written."""

    out: Path = Path("schema_gen.py")
    types_out: Path | None = None
    split_types: bool = False
    graphql_module: str = "graphql"
    import_mode: ImportMode = ImportMode.ABSOLUTE
    import_root: Path | None = None  # defaults to the output file's directory

    @property
    def types_path(self) -> Path | None:
        """Path of the separate types module, or None when types stay inline."""
        if self.types_out is not None:
            return self.types_out
        if self.split_types:
            return self.out.with_name("types_gen.py")
        return None


@dataclass
class GeneratorConfig:
    """
    Full configuration of one generation pass.

    Relative paths in a config file are resolved against the directory of
    that file.
    """

    schema: list[Path] = field(default_factory=list)
    ignore: list[str] = field(default_factory=list)
    bindings: BindingPaths = field(default_factory=BindingPaths)
    output: OutputConfig = field(default_factory=OutputConfig)
    strict: bool = False
    include_subscription_resolvers: bool = False


def find_config(start: Path) -> Path | None:
    """Locate the nearest sdlbake.toml, or a pyproject.toml with a [tool.sdlbake] table."""
    for directory in [start, *start.parents]:
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / "pyproject.toml"
        if pyproject.is_file() and "sdlbake" in _read_toml(pyproject).get("tool", {}):
            return pyproject
    return None


def load_config(path: Path) -> GeneratorConfig:
    data = _read_toml(path)
    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("sdlbake", {})

    base = path.parent
    generate = data.get("generate", {})
    bindings_data = data.get("bindings", {})

    def resolve(value: str | None) -> Path | None:
        if value is None:
            return None
        return (base / value).resolve()

    try:
        import_mode = ImportMode(generate.get("import_mode", ImportMode.ABSOLUTE))
    except ValueError:
        raise ConfigError(
            f"{path}: import_mode must be one of "
            f"{', '.join(mode.value for mode in ImportMode)}, "
            f"got '{generate.get('import_mode')}'"
        ) from None

    schema = generate.get("schema", [])
    if isinstance(schema, str):
        schema = [schema]

    output = OutputConfig(
        out=resolve(generate.get("out", "schema_gen.py")) or Path("schema_gen.py"),
        types_out=resolve(generate.get("types_out")),
        split_types=generate.get("split_types", False),
        graphql_module=generate.get("graphql_module", "graphql"),
        import_mode=import_mode,
        import_root=resolve(generate.get("import_root")),
    )

    bindings = BindingPaths(
        scalars=resolve(bindings_data.get("scalars")),
        resolvers=resolve(bindings_data.get("resolvers")),
        subscribers=resolve(bindings_data.get("subscribers")),
        field_directives=resolve(bindings_data.get("field_directives")),
        input_directives=resolve(bindings_data.get("input_directives")),
    )

    return GeneratorConfig(
        schema=[(base / entry).resolve() for entry in schema],
        ignore=list(generate.get("ignore", [])),
        bindings=bindings,
        output=output,
        strict=generate.get("strict", False),
        include_subscription_resolvers=generate.get("include_subscription_resolvers", False),
    )


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e
