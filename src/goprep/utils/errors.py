"""
Error types and source location tracking for the goprep preprocessor.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from goprep.utils.diagnostics import Diagnostic


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Attributes:
        line: 1-indexed line number
        column: 1-indexed column number
        offset: 0-indexed character offset from start of source
        filename: Optional filename for error reporting
    """

    line: int
    column: int
    offset: int = 0
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class GoPrepError(Exception):
    """
    Base exception for all goprep errors.

    ``diagnostic`` holds the rich diagnostic recorded when the error was
    raised, if the raising stage had the source text to build one.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        self.message = message
        self.location = location
        self.source_line = source_line
        self.diagnostic: Optional["Diagnostic"] = None
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []

        if self.location:
            parts.append(f"[{self.location}]")

        parts.append(self.message)

        if self.source_line and self.location:
            parts.append(f"\n    {self.source_line}")
            # Caret under the error column
            padding = " " * (4 + self.location.column - 1)
            parts.append(f"\n{padding}^")

        return " ".join(parts) if not self.source_line else parts[0] + " " + "".join(parts[1:])


class LexerError(GoPrepError):
    """Raised when the lexer encounters an invalid token or character."""

    pass


class ParserError(GoPrepError):
    """Raised when the parser encounters a syntax error."""

    pass


class PrintError(GoPrepError):
    """Raised when a tree node cannot be printed back to source text."""

    pass
