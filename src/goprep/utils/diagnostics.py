"""
Rust-like rich error diagnostics for goprep.

Parse failures are reported as diagnostics with source context, in the
style of Rust's compiler messages.

Example output:
    error[E0202]: unclosed delimiter '{'
      --> worker.go:9:1
       |
     3 | func run(n int) {
       |                 - unclosed '{' starts here
     9 |
       | ^
       |
       = help: add matching closing '}'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from goprep.utils.errors import GoPrepError, LexerError


# =============================================================================
# Error Codes Catalog
# =============================================================================


class ErrorCode:
    """
    Catalog of error codes for goprep diagnostics.

    Only syntax errors (E02xx) exist: the preprocessor performs no semantic
    validation of its input.
    """

    E0201 = "E0201"  # unexpected token
    E0202 = "E0202"  # unclosed delimiter
    E0203 = "E0203"  # missing token
    E0204 = "E0204"  # invalid expression
    E0205 = "E0205"  # invalid statement
    E0206 = "E0206"  # unterminated string
    E0207 = "E0207"  # invalid number
    E0208 = "E0208"  # unexpected character


ERROR_DESCRIPTIONS: dict[str, str] = {
    ErrorCode.E0201: "unexpected token",
    ErrorCode.E0202: "unclosed delimiter",
    ErrorCode.E0203: "missing token",
    ErrorCode.E0204: "invalid expression",
    ErrorCode.E0205: "invalid statement",
    ErrorCode.E0206: "unterminated string",
    ErrorCode.E0207: "invalid number",
    ErrorCode.E0208: "unexpected character",
}


# =============================================================================
# Diagnostic Types
# =============================================================================


class DiagnosticLevel(Enum):
    """Severity level of a diagnostic message."""

    ERROR = "error"

    def color_code(self) -> str:
        """Get ANSI color code for this level."""
        return "\033[91m"  # Red


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """
    A span of source code, representing a range of characters.

    Attributes:
        start_line: 1-indexed starting line number
        start_col: 1-indexed starting column number
        end_line: 1-indexed ending line number
        end_col: 1-indexed ending column number (exclusive)
        filename: Optional filename for display
    """

    start_line: int
    start_col: int
    end_line: int
    end_col: int
    filename: str = "<input>"

    @classmethod
    def from_location(
        cls, line: int, col: int, length: int = 1, filename: str = "<input>"
    ) -> "SourceSpan":
        """Create a span from a single location with a given length."""
        return cls(
            start_line=line,
            start_col=col,
            end_line=line,
            end_col=col + length,
            filename=filename,
        )

    def __str__(self) -> str:
        return f"{self.filename}:{self.start_line}:{self.start_col}"

    @property
    def is_multiline(self) -> bool:
        """Check if this span covers multiple lines."""
        return self.start_line != self.end_line

    @property
    def length(self) -> int:
        """Get the length of the span on a single line."""
        if self.is_multiline:
            return 1
        return max(1, self.end_col - self.start_col)


@dataclass(slots=True)
class DiagnosticLabel:
    """
    A label pointing to a specific span of source code.

    Attributes:
        span: The source span this label points to
        message: Optional message to display with the label
        is_primary: Whether this is the primary label (shown with ^^^)
    """

    span: SourceSpan
    message: str = ""
    is_primary: bool = True


@dataclass
class Diagnostic:
    """
    A rich diagnostic message with source context.

    Attributes:
        code: Error code (e.g., "E0201")
        level: Severity level
        message: The main diagnostic message
        labels: Source code labels
        helps: Help messages
    """

    code: str
    level: DiagnosticLevel
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    helps: list[str] = field(default_factory=list)

    def render(self, source_code: str, use_color: bool = True) -> str:
        """
        Render this diagnostic as a formatted string.

        Args:
            source_code: The original source code for context
            use_color: Whether to use ANSI color codes

        Returns:
            A formatted multi-line string representation
        """
        lines: list[str] = []
        source_lines = source_code.splitlines()

        reset = "\033[0m" if use_color else ""
        bold = "\033[1m" if use_color else ""
        level_color = self.level.color_code() if use_color else ""
        blue = "\033[94m" if use_color else ""
        green = "\033[92m" if use_color else ""

        level_str = self.level.value
        if self.code in ERROR_DESCRIPTIONS:
            header = (
                f"{level_color}{bold}{level_str}[{self.code}]{reset}: {bold}{self.message}{reset}"
            )
        else:
            header = f"{level_color}{bold}{level_str}{reset}: {bold}{self.message}{reset}"
        lines.append(header)

        if self.labels:
            primary_label = next((l for l in self.labels if l.is_primary), self.labels[0])
            lines.append(f"  {blue}-->{reset} {primary_label.span}")

        if self.labels and source_lines:
            lines.append(f"   {blue}|{reset}")

            labels_by_line: dict[int, list[DiagnosticLabel]] = {}
            for label in self.labels:
                labels_by_line.setdefault(label.span.start_line, []).append(label)

            for line_num in sorted(labels_by_line.keys()):
                if 1 <= line_num <= len(source_lines):
                    source_line = source_lines[line_num - 1]
                    lines.append(f"{blue}{line_num:3} |{reset} {source_line}")

                    for label in labels_by_line[line_num]:
                        underline_char = "^" if label.is_primary else "-"
                        underline_color = level_color if label.is_primary else blue

                        padding = " " * (label.span.start_col - 1)
                        underline = underline_char * label.span.length

                        underline_line = (
                            f"   {blue}|{reset} {padding}{underline_color}{underline}{reset}"
                        )
                        if label.message:
                            underline_line += f" {underline_color}{label.message}{reset}"
                        lines.append(underline_line)

            lines.append(f"   {blue}|{reset}")

        for help_msg in self.helps:
            lines.append(f"   {blue}={reset} {green}help:{reset} {help_msg}")

        return "\n".join(lines)


# =============================================================================
# Diagnostic Builder (Fluent API)
# =============================================================================


class DiagnosticBuilder:
    """
    Fluent builder for constructing Diagnostic objects.

        emitter.error(ErrorCode.E0202, "unclosed delimiter '{'", span)
            .secondary_label(open_span, "unclosed '{' starts here")
            .help("add matching closing '}'")
            .emit()
    """

    def __init__(
        self,
        emitter: "DiagnosticEmitter",
        code: str,
        level: DiagnosticLevel,
        message: str,
        primary_span: Optional[SourceSpan] = None,
    ) -> None:
        self._emitter = emitter
        self._code = code
        self._level = level
        self._message = message
        self._labels: list[DiagnosticLabel] = []
        self._helps: list[str] = []

        if primary_span:
            self._labels.append(DiagnosticLabel(primary_span, "", True))

    def secondary_label(self, span: SourceSpan, message: str = "") -> "DiagnosticBuilder":
        """Add a secondary label."""
        self._labels.append(DiagnosticLabel(span, message, False))
        return self

    def help(self, message: str) -> "DiagnosticBuilder":
        """Add a help message."""
        self._helps.append(message)
        return self

    def build(self) -> Diagnostic:
        """Build the diagnostic without emitting."""
        return Diagnostic(
            code=self._code,
            level=self._level,
            message=self._message,
            labels=self._labels,
            helps=self._helps,
        )

    def emit(self) -> Diagnostic:
        """Build and emit the diagnostic to the emitter."""
        diagnostic = self.build()
        self._emitter.add_diagnostic(diagnostic)
        return diagnostic


# =============================================================================
# Diagnostic Emitter
# =============================================================================


class DiagnosticEmitter:
    """
    Collects and renders diagnostics for a source file.

    Usage:
        emitter = DiagnosticEmitter(source, "main.go")
        emitter.error(ErrorCode.E0201, "expected ';', found 'x'", span).emit()
        print(emitter.render_all())
    """

    def __init__(self, source: str, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.diagnostics: list[Diagnostic] = []

    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic to the collection."""
        self.diagnostics.append(diagnostic)

    def error(
        self, code: str, message: str, span: Optional[SourceSpan] = None
    ) -> DiagnosticBuilder:
        """Create an error diagnostic builder."""
        return DiagnosticBuilder(self, code, DiagnosticLevel.ERROR, message, span)

    def render_all(self, use_color: bool = True) -> str:
        """Render all diagnostics as a single string."""
        return "\n\n".join(d.render(self.source, use_color) for d in self.diagnostics)


# =============================================================================
# Common Diagnostics
# =============================================================================


def create_unexpected_token_diagnostic(
    emitter: DiagnosticEmitter,
    expected: str,
    found: str,
    span: SourceSpan,
) -> Diagnostic:
    """Create a diagnostic for unexpected token."""
    return emitter.error(
        ErrorCode.E0201,
        f"expected {expected}, found {found}",
        span,
    ).emit()


def create_unclosed_delimiter_diagnostic(
    emitter: DiagnosticEmitter,
    delimiter: str,
    open_span: SourceSpan,
    error_span: SourceSpan,
) -> Diagnostic:
    """Create a diagnostic for unclosed delimiter."""
    builder = emitter.error(
        ErrorCode.E0202,
        f"unclosed delimiter '{delimiter}'",
        error_span,
    )
    builder.secondary_label(open_span, f"unclosed '{delimiter}' starts here")
    builder.help(f"add matching closing '{_matching_delimiter(delimiter)}'")
    return builder.emit()


def diagnostic_from_error(error: GoPrepError, filename: str = "<input>") -> Diagnostic:
    """
    Get a renderable diagnostic for a lexer or parser exception.

    The diagnostic recorded by the parser is returned when there is one;
    otherwise one is built from the error's message and location.
    """
    if error.diagnostic is not None:
        return error.diagnostic

    code = ErrorCode.E0208 if isinstance(error, LexerError) else ErrorCode.E0201
    labels: list[DiagnosticLabel] = []
    if error.location is not None:
        span = SourceSpan.from_location(
            error.location.line,
            error.location.column,
            1,
            error.location.filename or filename,
        )
        labels.append(DiagnosticLabel(span, "", True))
    return Diagnostic(code=code, level=DiagnosticLevel.ERROR, message=error.message, labels=labels)


def _matching_delimiter(opening: str) -> str:
    """Get the matching closing delimiter."""
    matches = {"(": ")", "[": "]", "{": "}"}
    return matches.get(opening, opening)


__all__ = [
    "ErrorCode",
    "ERROR_DESCRIPTIONS",
    "DiagnosticLevel",
    "SourceSpan",
    "DiagnosticLabel",
    "Diagnostic",
    "DiagnosticBuilder",
    "DiagnosticEmitter",
    "create_unexpected_token_diagnostic",
    "create_unclosed_delimiter_diagnostic",
    "diagnostic_from_error",
]
