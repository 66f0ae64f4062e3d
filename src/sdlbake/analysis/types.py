"""
Resolution of return annotations to importable type references.

Supported annotations are plain names (optionally quoted). A name is
resolved through the module's ``from ... import`` statements (including
those under ``if TYPE_CHECKING:``), then through its own declarations,
and is otherwise treated as a builtin such as ``str`` or ``int``.
"""

from __future__ import annotations

import ast
import logging

from ..context import GenerationContext
from ..core.ir import SymbolReference
from .exports import ExportAnalyzer
from .modules import ModuleSource, describe_import, resolve_relative

logger = logging.getLogger(__name__)

AWAITABLE_WRAPPERS = frozenset({"Awaitable", "Coroutine"})

_DECLARATION_NODES = (ast.ClassDef, ast.Assign, ast.AnnAssign, ast.TypeAlias)


def unwrap_awaitable(annotation: ast.expr) -> ast.expr:
    """Strip one level of ``Awaitable[X]`` or ``Coroutine[Any, Any, X]``."""
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        try:
            annotation = ast.parse(annotation.value, mode="eval").body
        except SyntaxError:
            return annotation
    if not isinstance(annotation, ast.Subscript):
        return annotation

    wrapper = annotation.value
    if isinstance(wrapper, ast.Attribute):
        wrapper_name = wrapper.attr
    else:
        wrapper_name = getattr(wrapper, "id", None)
    if wrapper_name not in AWAITABLE_WRAPPERS:
        return annotation

    inner = annotation.slice
    if wrapper_name == "Coroutine" and isinstance(inner, ast.Tuple) and inner.elts:
        return inner.elts[-1]
    return inner


class TypeResolver:
    """Resolve annotations in binding modules to SymbolReferences."""

    def __init__(self, ctx: GenerationContext, analyzer: ExportAnalyzer):
        self.ctx = ctx
        self.analyzer = analyzer

    def resolve(self, source: ModuleSource, annotation: ast.expr) -> SymbolReference | None:
        """
        Resolve an annotation to a type reference.

        Returns:
            The reference, or None when the type cannot be expressed
            (reported as a warning, or raised in strict mode)
        """
        if isinstance(annotation, ast.Constant):
            if annotation.value is None:
                return SymbolReference(symbol="None")
            if isinstance(annotation.value, str):
                try:
                    parsed = ast.parse(annotation.value, mode="eval").body
                except SyntaxError:
                    self._unsupported(
                        source, annotation, f"Unparsable annotation {annotation.value!r}"
                    )
                    return None
                return self.resolve(source, parsed)

        if isinstance(annotation, ast.Name):
            return self._resolve_name(source, annotation)

        if isinstance(annotation, ast.Attribute):
            self._unsupported(
                source, annotation, f"Qualified type reference '{ast.unparse(annotation)}'"
            )
        else:
            self._unsupported(
                source, annotation, f"Type annotation '{ast.unparse(annotation)}'"
            )
        return None

    def _resolve_name(self, source: ModuleSource, node: ast.Name) -> SymbolReference | None:
        name = node.id
        statements = source.statements(include_type_checking=True)

        for stmt in reversed(statements):
            if isinstance(stmt, ast.ImportFrom):
                for alias in stmt.names:
                    if (alias.asname or alias.name) != name:
                        continue
                    return self._imported(source, stmt, alias, node)
            elif isinstance(stmt, ast.Import):
                for alias in stmt.names:
                    if (alias.asname or alias.name.split(".")[0]) == name:
                        self._unsupported(source, node, f"Module '{alias.name}' used as a type")
                        return None
            elif isinstance(stmt, _DECLARATION_NODES) and name in _declared_names(stmt):
                return self._local(source, name, node)

        return SymbolReference(symbol=name)

    def _imported(
        self,
        source: ModuleSource,
        stmt: ast.ImportFrom,
        alias: ast.alias,
        node: ast.Name,
    ) -> SymbolReference | None:
        local = alias.asname if alias.asname and alias.asname != alias.name else None
        if stmt.level == 0:
            return SymbolReference(module=stmt.module, symbol=alias.name, alias=local)

        target = resolve_relative(source.path, stmt.module, stmt.level)
        if target is None:
            self._unsupported(
                source, node, f"Cannot resolve module '{describe_import(stmt.module, stmt.level)}'"
            )
            return None
        return SymbolReference(module=str(target), symbol=alias.name, alias=local)

    def _local(self, source: ModuleSource, name: str, node: ast.Name) -> SymbolReference | None:
        exported = self.analyzer.exports(source.path).get(name, [])
        if any(decl.source is source and decl.name == name for decl in exported):
            return SymbolReference(module=str(source.path), symbol=name)
        logger.warning(
            "%s:%d: type '%s' is declared but not exported; its values will be typed as Any",
            source.name,
            node.lineno,
            name,
        )
        return None

    def _unsupported(self, source: ModuleSource, node: ast.expr, what: str) -> None:
        self.ctx.unsupported(
            f"{what} is not supported for scalar type inference",
            source.name,
            getattr(node, "lineno", 1),
            getattr(node, "col_offset", 0) + 1,
        )


def _declared_names(stmt: ast.stmt) -> list[str]:
    if isinstance(stmt, ast.ClassDef):
        return [stmt.name]
    if isinstance(stmt, ast.TypeAlias) and isinstance(stmt.name, ast.Name):
        return [stmt.name.id]
    if isinstance(stmt, ast.Assign):
        return [t.id for t in stmt.targets if isinstance(t, ast.Name)]
    if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
        return [stmt.target.id]
    return []
