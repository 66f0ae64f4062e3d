"""
Per-pass generation state.

Everything cached during one generation run lives here, so a new run
never observes results of a previous one.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .core.errors import ErrorContext, UnsupportedConstruct
from .core.ir import SymbolReference

if TYPE_CHECKING:
    from .analysis.exports import ExportTable
    from .analysis.modules import ModuleSource

logger = logging.getLogger(__name__)


@dataclass
class GenerationContext:
    """
    Shared state of one generation pass.

    Attributes:
        strict: Escalate unsupported binding constructs to errors
        modules: Parsed binding modules, keyed by resolved path
        exports: Export tables, keyed by resolved path
        resolving: Modules whose exports are being computed (cycle guard)
        scalar_types: Inferred scalar types, keyed by (module path, scalar name)
    """

    strict: bool = False
    modules: dict[Path, ModuleSource] = field(default_factory=dict)
    exports: dict[Path, ExportTable] = field(default_factory=dict)
    resolving: list[Path] = field(default_factory=list)
    scalar_types: dict[tuple[str, str], SymbolReference | None] = field(default_factory=dict)
    _counters: dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def next_id(self, scope: str) -> int:
        """Allocate the next id in a named counter, starting at 1."""
        self._counters[scope] += 1
        return self._counters[scope]

    def unsupported(self, message: str, file: str, line: int = 1, column: int = 1) -> None:
        """Report a construct the analyser cannot follow.

        Logged as a warning, or raised as UnsupportedConstruct in strict mode.
        """
        if self.strict:
            raise UnsupportedConstruct(message, ErrorContext(file=file, line=line, column=column))
        logger.warning("%s:%d:%d: %s", file, line, column, message)
