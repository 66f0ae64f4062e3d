"""
Custom scalar discovery.

A scalar binding is an exported class whose body provides any of the codec
functions ``serialize``, ``parse_value`` and ``parse_literal``. Each may be
a static method, a lambda, or the name of a module-level function:

    class Date:
        @staticmethod
        def serialize(value: date) -> str: ...

        @staticmethod
        def parse_value(value: str) -> date: ...

        parse_literal = parse_date_literal

The scalar's Python type is read from the return annotations of
``parse_value`` and ``parse_literal``.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from pathlib import Path

from ..context import GenerationContext
from ..core.errors import AmbiguousScalarType, make_binding_error
from ..core.ir import ScalarBinding, SymbolReference
from .exports import Declaration, ExportAnalyzer
from .modules import ModuleSource
from .types import TypeResolver, unwrap_awaitable

logger = logging.getLogger(__name__)

CODEC_FUNCTIONS = ("serialize", "parse_value", "parse_literal")
PARSER_FUNCTIONS = ("parse_value", "parse_literal")

_STATIC_DECORATORS = frozenset({"staticmethod", "classmethod"})


@dataclass(frozen=True)
class _CodecMember:
    name: str
    node: ast.stmt
    returns: ast.expr | None


class ScalarAnalyzer:
    """Extract ScalarBindings from a scalars module."""

    def __init__(self, ctx: GenerationContext, analyzer: ExportAnalyzer):
        self.ctx = ctx
        self.analyzer = analyzer
        self.types = TypeResolver(ctx, analyzer)

    def scalars(self, path: Path) -> dict[str, ScalarBinding]:
        """
        Scalar bindings exported by a module, keyed by scalar name.

        Raises:
            AmbiguousScalarType: If parse_value and parse_literal disagree
        """
        path = path.resolve()
        result: dict[str, ScalarBinding] = {}
        for name, decls in self.analyzer.exports(path).items():
            decl = decls[0]
            if not isinstance(decl.node, ast.ClassDef) or decl.source is None:
                continue
            members = self._codec_members(decl)
            if not members:
                continue

            refs = {
                member: SymbolReference(module=str(path), symbol=name, property=member)
                for member in members
            }
            result[name] = ScalarBinding(
                name=name,
                serialize=refs.get("serialize"),
                parse_value=refs.get("parse_value"),
                parse_literal=refs.get("parse_literal"),
                type=self._scalar_type(path, name, decl.source, members),
            )
            logger.debug("Scalar %s bound to %s (%s)", name, path, ", ".join(members))
        return result

    def _codec_members(self, decl: Declaration) -> dict[str, _CodecMember]:
        assert isinstance(decl.node, ast.ClassDef) and decl.source is not None
        source = decl.source
        members: dict[str, _CodecMember] = {}
        extraneous: list[str] = []

        for stmt in decl.node.body:
            if isinstance(stmt, ast.FunctionDef | ast.AsyncFunctionDef):
                if stmt.name in CODEC_FUNCTIONS:
                    if not _is_static(stmt):
                        self.ctx.unsupported(
                            f"{decl.node.name}.{stmt.name} should be a staticmethod or "
                            "classmethod; it is called without an instance",
                            source.name,
                            stmt.lineno,
                        )
                    members[stmt.name] = _CodecMember(stmt.name, stmt, stmt.returns)
                elif not stmt.name.startswith("_"):
                    extraneous.append(stmt.name)
            elif isinstance(stmt, ast.Assign):
                for target in stmt.targets:
                    if not isinstance(target, ast.Name):
                        continue
                    if target.id in CODEC_FUNCTIONS:
                        members[target.id] = _CodecMember(
                            target.id, stmt, self._assigned_returns(source, stmt.value)
                        )
                    elif not target.id.startswith("_"):
                        extraneous.append(target.id)

        if members:
            for name in extraneous:
                logger.warning(
                    "%s: extraneous scalar property %s.%s is ignored",
                    source.name,
                    decl.node.name,
                    name,
                )
        return members

    @staticmethod
    def _assigned_returns(source: ModuleSource, value: ast.expr) -> ast.expr | None:
        """Return annotation of a module-level function a codec name is bound to."""
        if not isinstance(value, ast.Name):
            return None
        for stmt in source.statements():
            if isinstance(stmt, ast.FunctionDef | ast.AsyncFunctionDef) and stmt.name == value.id:
                return stmt.returns
        return None

    def _scalar_type(
        self,
        path: Path,
        name: str,
        source: ModuleSource,
        members: dict[str, _CodecMember],
    ) -> SymbolReference | None:
        key = (str(path), name)
        if key in self.ctx.scalar_types:
            return self.ctx.scalar_types[key]

        inferred: dict[str, SymbolReference] = {}
        for function in PARSER_FUNCTIONS:
            member = members.get(function)
            if member is None or member.returns is None:
                continue
            ref = self.types.resolve(source, unwrap_awaitable(member.returns))
            if ref is not None:
                inferred[function] = ref

        value_type = inferred.get("parse_value")
        literal_type = inferred.get("parse_literal")
        if value_type and literal_type and not value_type.same_target(literal_type):
            raise make_binding_error(
                AmbiguousScalarType,
                f"Scalar '{name}' parses values into {value_type} but literals into "
                f"{literal_type}",
                source.name,
                members["parse_value"].node.lineno,
            )

        result = value_type or literal_type
        if result is None:
            logger.warning(
                "%s: cannot infer the Python type of scalar '%s'; it will be typed as Any",
                source.name,
                name,
            )
        self.ctx.scalar_types[key] = result
        return result


def _is_static(node: ast.FunctionDef | ast.AsyncFunctionDef) -> bool:
    return any(
        isinstance(decorator, ast.Name) and decorator.id in _STATIC_DECORATORS
        for decorator in node.decorator_list
    )
