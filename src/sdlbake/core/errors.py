"""
Error types for schema merging, binding analysis, and code generation.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ir.location import SourceLocation


class SdlBakeError(Exception):
    """Base exception for all sdlbake errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ConfigError(SdlBakeError):
    """
    Raised when the generator configuration is unusable.

    Examples:
    - Unknown import mode
    - No schema files found
    - Malformed sdlbake.toml
    """

    pass


class MergeError(SdlBakeError):
    """Raised when schema documents cannot be combined into one."""

    pass


class UnsupportedDefinition(MergeError):
    """
    Raised for definitions the merger does not accept.

    Examples:
    - schema { query: ... } blocks
    - extend type ...
    - operations and fragments in schema files
    """

    pass


class MergeConflict(MergeError):
    """Raised when two definitions cannot be reconciled.

    Carries both source locations: ``context`` is the later occurrence,
    ``previous`` the one it collides with.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        previous: ErrorContext | None = None,
    ):
        self.previous = previous
        super().__init__(message, context)

    def _format_message(self) -> str:
        message = super()._format_message()
        if self.previous:
            return f"{message}\npreviously declared at {self.previous.format()}"
        return message


class KindConflict(MergeConflict):
    """A name is declared as two different kinds of definition."""

    pass


class FieldConflict(MergeConflict):
    """A field is re-declared with a different signature."""

    pass


class EnumValueConflict(MergeConflict):
    """An enum value is declared twice."""

    pass


class DirectiveConflict(MergeConflict):
    """
    Raised for directive clashes.

    Examples:
    - A directive definition declared twice
    - One directive applied twice with different arguments
    """

    pass


class InputFieldConflict(MergeConflict):
    """An input field is re-declared with a different type or default."""

    pass


class SchemaValidationFailed(SdlBakeError):
    """Raised when graphql-core rejects the merged schema.

    The validator messages are kept verbatim in ``errors``.
    """

    def __init__(self, errors: Sequence[str], context: ErrorContext | None = None):
        self.errors = list(errors)
        super().__init__("\n".join(self.errors), context)


class BindingError(SdlBakeError):
    """Raised when binding modules cannot be analysed."""

    pass


class BindingSyntaxError(BindingError):
    """A binding module is not valid Python source."""

    pass


class UnresolvedExport(BindingError):
    """A re-exported name does not exist in its source module."""

    pass


class CyclicExport(UnresolvedExport):
    """Re-export chains loop back on a module still being resolved."""

    pass


class AmbiguousScalarType(BindingError):
    """A scalar's parse_value and parse_literal return different types."""

    pass


class UnsupportedConstruct(BindingError):
    """
    Raised (in strict mode) for binding code the analyser cannot follow.

    Examples:
    - Qualified type references such as ``datetime.date``
    - Module imports used as scalar types
    - Union or generic return annotations
    """

    pass


class GenerationError(SdlBakeError):
    """
    Raised when the schema module cannot be rendered.

    Examples:
    - Binding module outside the import root
    - Default values the renderer cannot express
    """

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source file where error occurred
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    file: str
    line: int
    column: int

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "schema/user.graphql:10:5"
        """
        return f"{self.file}:{self.line}:{self.column}"

    @classmethod
    def from_location(cls, location: SourceLocation | None) -> ErrorContext | None:
        if location is None:
            return None
        return cls(file=location.file, line=location.line, column=location.column)


def make_conflict(
    error_cls: type[MergeConflict],
    message: str,
    location: SourceLocation | None,
    previous: SourceLocation | None,
) -> MergeConflict:
    """
    Helper to create a merge conflict carrying both locations.

    Args:
        error_cls: Concrete conflict class to raise
        message: Error description
        location: Where the later definition was found
        previous: Where the earlier definition was found

    Returns:
        Conflict instance ready to raise
    """
    return error_cls(
        message,
        ErrorContext.from_location(location),
        ErrorContext.from_location(previous),
    )


def make_binding_error(
    error_cls: type[BindingError],
    message: str,
    file: str,
    line: int = 1,
    column: int = 1,
) -> BindingError:
    """Helper to create a binding error pointing into a Python module."""
    return error_cls(message, ErrorContext(file=file, line=line, column=column))
