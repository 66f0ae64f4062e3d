"""
Static export discovery for binding modules.

A module's exports are computed from its top-level statements:

1. Direct declarations: functions, classes, assignments and type aliases
   bound to a public name (listed in ``__all__``, or not starting with an
   underscore when there is no ``__all__``).
2. Named re-exports: ``from .x import a as b``, or a relative
   ``from .x import a`` whose name is listed in ``__all__``.
3. Star re-exports: ``from .x import *``. Direct and named exports win
   over star exports; a later star export wins over an earlier one.
4. Local aliases: ``b = a`` records whatever ``a`` is bound to.

Absolute imports name installed packages; they are never followed and
surface as opaque external declarations.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from ..context import GenerationContext
from ..core.errors import CyclicExport, UnresolvedExport, make_binding_error
from .modules import ModuleSource, describe_import, load_module, resolve_relative

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Declaration:
    """
    One declaration reachable through an export.

    Attributes:
        node: Declaring statement, None for names imported from packages
        name: Name of the declaration inside its own module
        source: Declaring module, None for names imported from packages
        module: Dotted package name for imported declarations
    """

    node: ast.stmt | None
    name: str
    source: ModuleSource | None = None
    module: str | None = None

    @property
    def is_external(self) -> bool:
        return self.source is None

    @property
    def line(self) -> int:
        return getattr(self.node, "lineno", 1)

    def is_callable(self) -> bool:
        """True for functions, lambdas, factory results, and package imports."""
        if self.is_external:
            return True
        node = self.node
        if isinstance(node, ast.FunctionDef | ast.AsyncFunctionDef):
            return True
        if isinstance(node, ast.Assign | ast.AnnAssign):
            return isinstance(node.value, ast.Lambda | ast.Call)
        return False


ExportTable = dict[str, list[Declaration]]


class BindingKind(StrEnum):
    """How a top-level name is bound."""

    DECLARATION = "declaration"
    ALIAS = "alias"
    IMPORT_FROM = "import_from"
    IMPORT = "import"


@dataclass(frozen=True)
class _Binding:
    kind: BindingKind
    node: ast.stmt
    target: str | None = None
    module: str | None = None
    level: int = 0
    explicit_as: bool = False


def _string_list(node: ast.expr | None) -> list[str] | None:
    if not isinstance(node, ast.List | ast.Tuple):
        return None
    values: list[str] = []
    for element in node.elts:
        if not isinstance(element, ast.Constant) or not isinstance(element.value, str):
            return None
        values.append(element.value)
    return values


def _assigned_names(target: ast.expr) -> list[str]:
    if isinstance(target, ast.Name):
        return [target.id]
    if isinstance(target, ast.Tuple | ast.List):
        return [name for element in target.elts for name in _assigned_names(element)]
    return []


class ExportAnalyzer:
    """Compute and memoize export tables for one generation pass."""

    def __init__(self, ctx: GenerationContext):
        self.ctx = ctx

    def exports(self, path: Path) -> ExportTable:
        """
        Export table of a binding module.

        Raises:
            UnresolvedExport: If a re-exported name or module cannot be found
            CyclicExport: If re-exports lead back to a module being resolved
            BindingSyntaxError: If a module cannot be parsed
        """
        path = path.resolve()
        cached = self.ctx.exports.get(path)
        if cached is not None:
            return cached

        if path in self.ctx.resolving:
            chain = [*self.ctx.resolving[self.ctx.resolving.index(path) :], path]
            raise CyclicExport("Cyclic re-export: " + " -> ".join(str(p) for p in chain))

        self.ctx.resolving.append(path)
        try:
            table = self._build(load_module(self.ctx, path))
        finally:
            self.ctx.resolving.pop()

        self.ctx.exports[path] = table
        logger.debug("Exports of %s: %s", path, ", ".join(sorted(table)))
        return table

    def _build(self, source: ModuleSource) -> ExportTable:
        bindings, stars = self._collect(source)
        all_names = self._static_all(source)
        table: ExportTable = {}

        for stmt in stars:
            target = self._import_target(source, stmt)
            for name, decls in self.exports(target).items():
                if all_names is None or name in all_names:
                    table[name] = decls

        for name in self._exported_names(bindings, all_names):
            binding = bindings.get(name)
            if binding is None:
                if name in table:
                    continue
                raise make_binding_error(
                    UnresolvedExport,
                    f"'{name}' is listed in __all__ but never defined",
                    source.name,
                )
            table[name] = self._resolve(source, bindings, name, binding, frozenset())
        return table

    def _collect(self, source: ModuleSource) -> tuple[dict[str, _Binding], list[ast.ImportFrom]]:
        bindings: dict[str, _Binding] = {}
        stars: list[ast.ImportFrom] = []

        for stmt in source.statements():
            if isinstance(stmt, ast.FunctionDef | ast.AsyncFunctionDef | ast.ClassDef):
                bindings[stmt.name] = _Binding(BindingKind.DECLARATION, stmt)
            elif isinstance(stmt, ast.TypeAlias) and isinstance(stmt.name, ast.Name):
                bindings[stmt.name.id] = _Binding(BindingKind.DECLARATION, stmt)
            elif isinstance(stmt, ast.Assign):
                for target in stmt.targets:
                    for name in _assigned_names(target):
                        if isinstance(target, ast.Name) and isinstance(stmt.value, ast.Name):
                            bindings[name] = _Binding(BindingKind.ALIAS, stmt, target=stmt.value.id)
                        else:
                            bindings[name] = _Binding(BindingKind.DECLARATION, stmt)
            elif isinstance(stmt, ast.AnnAssign) and stmt.value is not None:
                if isinstance(stmt.target, ast.Name):
                    bindings[stmt.target.id] = _Binding(BindingKind.DECLARATION, stmt)
            elif isinstance(stmt, ast.ImportFrom):
                for alias in stmt.names:
                    if alias.name == "*":
                        if stmt.level == 0:
                            self.ctx.unsupported(
                                f"Star import from package '{stmt.module}' is not followed",
                                source.name,
                                stmt.lineno,
                            )
                        else:
                            stars.append(stmt)
                        continue
                    bindings[alias.asname or alias.name] = _Binding(
                        BindingKind.IMPORT_FROM,
                        stmt,
                        target=alias.name,
                        module=stmt.module,
                        level=stmt.level,
                        explicit_as=alias.asname is not None,
                    )
            elif isinstance(stmt, ast.Import):
                for alias in stmt.names:
                    local = alias.asname or alias.name.split(".")[0]
                    bindings[local] = _Binding(BindingKind.IMPORT, stmt, module=alias.name)

        return bindings, stars

    def _static_all(self, source: ModuleSource) -> list[str] | None:
        names: list[str] | None = None
        for stmt in source.statements():
            if isinstance(stmt, ast.Assign | ast.AnnAssign):
                targets = stmt.targets if isinstance(stmt, ast.Assign) else [stmt.target]
                if not any(isinstance(t, ast.Name) and t.id == "__all__" for t in targets):
                    continue
                values = _string_list(stmt.value)
                if values is None:
                    self.ctx.unsupported(
                        "__all__ is not a literal list of strings; falling back to public names",
                        source.name,
                        stmt.lineno,
                    )
                    return None
                names = values
            elif (
                isinstance(stmt, ast.AugAssign)
                and isinstance(stmt.target, ast.Name)
                and stmt.target.id == "__all__"
            ):
                values = _string_list(stmt.value)
                if values is None:
                    self.ctx.unsupported(
                        "__all__ is extended with a non-literal value", source.name, stmt.lineno
                    )
                    return None
                names = [*(names or []), *values]
        return names

    @staticmethod
    def _exported_names(bindings: dict[str, _Binding], all_names: list[str] | None) -> list[str]:
        if all_names is not None:
            return list(dict.fromkeys(all_names))
        return [
            name
            for name, binding in bindings.items()
            if not name.startswith("_")
            and (
                binding.kind in (BindingKind.DECLARATION, BindingKind.ALIAS)
                or (
                    binding.kind is BindingKind.IMPORT_FROM
                    and binding.level > 0
                    and binding.explicit_as
                )
            )
        ]

    def _resolve(
        self,
        source: ModuleSource,
        bindings: dict[str, _Binding],
        name: str,
        binding: _Binding,
        seen: frozenset[str],
    ) -> list[Declaration]:
        """Follow one local binding to the declaration(s) it stands for."""
        if binding.kind is BindingKind.DECLARATION:
            return [Declaration(binding.node, name, source)]

        if binding.kind is BindingKind.ALIAS:
            target = binding.target or ""
            target_binding = bindings.get(target)
            if target_binding is None or target in seen:
                # Bound to a builtin or to itself; the assignment is the declaration
                return [Declaration(binding.node, name, source)]
            return self._resolve(source, bindings, target, target_binding, seen | {name})

        if binding.kind is BindingKind.IMPORT:
            return [Declaration(binding.node, name, source, module=binding.module)]

        if binding.level == 0:
            return [Declaration(None, binding.target or name, None, module=binding.module)]

        # from . import submodule
        submodule = ".".join(filter(None, [binding.module, binding.target]))
        if resolve_relative(source.path, submodule, binding.level) is not None:
            return [Declaration(binding.node, name, source)]

        target_path = self._import_target(source, binding.node)
        decls = self.exports(target_path).get(binding.target or name)
        if decls is not None:
            return decls

        raise make_binding_error(
            UnresolvedExport,
            f"'{binding.target}' is not exported by {target_path}",
            source.name,
            binding.node.lineno,
            binding.node.col_offset + 1,
        )

    def _import_target(self, source: ModuleSource, stmt: ast.stmt) -> Path:
        assert isinstance(stmt, ast.ImportFrom)
        target = resolve_relative(source.path, stmt.module, stmt.level)
        if target is None:
            raise make_binding_error(
                UnresolvedExport,
                f"Cannot resolve module '{describe_import(stmt.module, stmt.level)}'",
                source.name,
                stmt.lineno,
                stmt.col_offset + 1,
            )
        return target
