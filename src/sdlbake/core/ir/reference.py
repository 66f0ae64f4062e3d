"""
Symbol references: the addressing unit for bindings.

A reference names where a callable or type lives so that generated code
can import it. ``module`` is an absolute ``.py`` path for local binding
modules, a dotted name for installed packages, and ``None`` for builtins
that need no import.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SymbolReference(BaseModel):
    """
    Address of an exported symbol.

    Attributes:
        module: Owning module (file path, dotted package name, or None)
        symbol: Exported name within the module
        alias: Name the symbol was imported under in the referring module
        property: Attribute to read off the symbol (scalar codec methods)
    """

    module: str | None = None
    symbol: str
    alias: str | None = None
    property: str | None = None

    model_config = ConfigDict(frozen=True)

    def same_target(self, other: SymbolReference) -> bool:
        """Compare by (module, symbol, property), ignoring the import alias."""
        return (self.module, self.symbol, self.property) == (
            other.module,
            other.symbol,
            other.property,
        )

    def __str__(self) -> str:
        target = self.symbol if self.property is None else f"{self.symbol}.{self.property}"
        if self.module is None:
            return target
        return f"{self.module}:{target}"
