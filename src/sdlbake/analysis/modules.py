"""
Binding module sources and import resolution.

Binding modules are only ever parsed, never imported, so analysis has no
side effects on the running interpreter.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path

from ..context import GenerationContext
from ..core.errors import BindingSyntaxError, ErrorContext

SOURCE_SUFFIX = ".py"
PACKAGE_INIT = "__init__.py"


@dataclass(frozen=True)
class ModuleSource:
    """A parsed binding module."""

    path: Path
    tree: ast.Module

    @property
    def name(self) -> str:
        return str(self.path)

    def statements(self, include_type_checking: bool = False) -> list[ast.stmt]:
        """Top-level statements, optionally with ``if TYPE_CHECKING:`` bodies inlined."""
        result: list[ast.stmt] = []
        for stmt in self.tree.body:
            if include_type_checking and isinstance(stmt, ast.If) and is_type_checking(stmt.test):
                result.extend(stmt.body)
            else:
                result.append(stmt)
        return result


def is_type_checking(test: ast.expr) -> bool:
    if isinstance(test, ast.Name):
        return test.id == "TYPE_CHECKING"
    if isinstance(test, ast.Attribute):
        return test.attr == "TYPE_CHECKING"
    return False


def load_module(ctx: GenerationContext, path: Path) -> ModuleSource:
    """Parse a binding module once per pass."""
    path = path.resolve()
    cached = ctx.modules.get(path)
    if cached is not None:
        return cached

    text = path.read_text(encoding="utf-8")
    try:
        tree = ast.parse(text, filename=str(path))
    except SyntaxError as e:
        raise BindingSyntaxError(
            f"Cannot parse binding module: {e.msg}",
            ErrorContext(file=str(path), line=e.lineno or 1, column=e.offset or 1),
        ) from e

    source = ModuleSource(path=path, tree=tree)
    ctx.modules[path] = source
    return source


def resolve_relative(referrer: Path, module: str | None, level: int) -> Path | None:
    """
    Resolve ``from <dots><module> import ...`` to a source file.

    ``a.b`` resolves to ``a/b.py`` or ``a/b/__init__.py`` below the
    package directory selected by ``level``.

    Returns:
        The resolved file, or None when nothing exists at that location
    """
    base = referrer.parent
    for _ in range(level - 1):
        base = base.parent

    parts = module.split(".") if module else []
    if not parts:
        candidates = [base / PACKAGE_INIT]
    else:
        target = base.joinpath(*parts)
        candidates = [target.with_name(target.name + SOURCE_SUFFIX), target / PACKAGE_INIT]

    for candidate in candidates:
        if candidate.is_file():
            return candidate.resolve()
    return None


def describe_import(module: str | None, level: int) -> str:
    """Render an import target the way it appears in source."""
    return "." * level + (module or "")
