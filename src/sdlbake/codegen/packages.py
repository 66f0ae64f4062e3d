"""
Import bookkeeping for one generated module.

Every name a generated module uses from elsewhere is requested through
RequiredPackages.require(), which hands out a collision-free local name
and remembers the import statement needed for it.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from pathlib import Path

from ..core.errors import GenerationError
from ..core.ir import SymbolReference
from ..core.manifest import ImportMode
from ..core.strings import RESERVED_NAMES

MAX_LINE_LENGTH = 99


def is_local_module(module: str) -> bool:
    return module.endswith(".py")


class RequiredPackages:
    """
    Modules and names a generated module imports.

    Local names are unique across the whole module: a name already taken by
    another import, by a definition of the generated module, by a keyword or
    by a builtin is suffixed (``name_1``, ``name_2``, ...) until free.
    """

    def __init__(self, reserved: Iterable[str] = ()):
        self.requires: dict[str, set[str]] = {}
        self.aliases: dict[str, str] = {}
        self._owners: dict[str, str] = {}
        self._locals: dict[tuple[str, str], str] = {}
        self._reserved: set[str] = set(RESERVED_NAMES) | set(reserved)

    def reserve(self, *names: str) -> None:
        """Mark names defined by the generated module itself."""
        self._reserved.update(names)

    def require(self, module: str, name: str, alias: str | None = None) -> str:
        """
        Request ``name`` from ``module``.

        Args:
            module: Dotted package name or path of a local ``.py`` module
            name: Name exported by the module
            alias: Preferred local name, defaults to ``name``

        Returns:
            The local name to use in generated code
        """
        key = (module, name)
        existing = self._locals.get(key)
        if existing is not None:
            return existing

        base = alias or name
        local = base
        suffix = 0
        while local in self._reserved or local in self._owners:
            suffix += 1
            local = f"{base}_{suffix}"

        self.requires.setdefault(module, set()).add(local)
        self._owners[local] = module
        self._locals[key] = local
        if local != name:
            self.aliases[local] = name
        return local

    def require_ref(self, ref: SymbolReference) -> str:
        """Expression evaluating to the referenced symbol (or its property)."""
        if ref.module is None:
            local = ref.symbol
        else:
            local = self.require(ref.module, ref.symbol, ref.alias)
        if ref.property is not None:
            return f"{local}.{ref.property}"
        return local

    def render(self, locate: Callable[[str], str]) -> list[str]:
        """
        Render import statements.

        Package imports come first, then local binding modules; each group is
        sorted by module specifier, names by local name.
        """
        groups: tuple[list[tuple[str, str]], list[tuple[str, str]]] = ([], [])
        for module in self.requires:
            group = groups[1] if is_local_module(module) else groups[0]
            group.append((locate(module), module))

        lines: list[str] = []
        for group in groups:
            if not group:
                continue
            for specifier, module in sorted(group):
                items = [self._import_item(local) for local in sorted(self.requires[module])]
                line = f"from {specifier} import {', '.join(items)}"
                if len(line) <= MAX_LINE_LENGTH:
                    lines.append(line)
                else:
                    lines.append(f"from {specifier} import (")
                    lines.extend(f"    {item}," for item in items)
                    lines.append(")")
            lines.append("")
        return lines

    def _import_item(self, local: str) -> str:
        exported = self.aliases.get(local)
        return f"{exported} as {local}" if exported else local


class ModuleLocator:
    """Turn module identities into import specifiers for one output file."""

    def __init__(self, output: Path, mode: ImportMode, import_root: Path | None = None):
        self.output = output.resolve()
        self.mode = mode
        self.import_root = (import_root or self.output.parent).resolve()

    def __call__(self, module: str) -> str:
        if not is_local_module(module):
            return module
        path = Path(module).resolve()
        if self.mode is ImportMode.RELATIVE:
            return self._relative(path)
        return self._absolute(path)

    def _absolute(self, path: Path) -> str:
        try:
            relative = path.relative_to(self.import_root)
        except ValueError:
            raise GenerationError(
                f"Binding module {path} is outside the import root {self.import_root}"
            ) from None
        return ".".join(_module_parts(relative))

    def _relative(self, path: Path) -> str:
        relative = Path(os.path.relpath(path, self.output.parent))
        ups = 0
        parts: list[str] = []
        for part in _module_parts(relative):
            if part == "..":
                ups += 1
            else:
                parts.append(part)
        return "." * (ups + 1) + ".".join(parts)


def _module_parts(relative: Path) -> list[str]:
    parts = [*relative.parent.parts, relative.stem]
    if parts[-1] == "__init__":
        parts.pop()
    return [part for part in parts if part != "."]
