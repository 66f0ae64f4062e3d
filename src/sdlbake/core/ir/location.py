"""Source location tracking for schema definitions.

Records the file, line, and column where a GraphQL construct was defined,
enabling source-mapped error messages and merge warnings.
"""

from __future__ import annotations

from graphql import Node, get_location
from pydantic import BaseModel, ConfigDict


class SourceLocation(BaseModel):
    """Source position where a GraphQL construct was defined.

    Attributes:
        file: Path to the schema file (as handed to the parser)
        line: 1-indexed line number
        column: 1-indexed column number
        offset: 0-indexed character offset into the file
    """

    file: str
    line: int
    column: int
    offset: int = 0

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    @classmethod
    def of(cls, node: Node | None) -> SourceLocation | None:
        """Location of a parsed node, or None for synthesized nodes."""
        if node is None or node.loc is None:
            return None
        source = node.loc.source
        position = get_location(source, node.loc.start)
        return cls(
            file=source.name,
            line=position.line,
            column=position.column,
            offset=node.loc.start,
        )
