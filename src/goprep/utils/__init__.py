"""
goprep utilities package.

Error types, source locations, and diagnostics.
"""

from goprep.utils.diagnostics import (
    ERROR_DESCRIPTIONS,
    Diagnostic,
    DiagnosticBuilder,
    DiagnosticEmitter,
    DiagnosticLabel,
    DiagnosticLevel,
    ErrorCode,
    SourceSpan,
    create_unclosed_delimiter_diagnostic,
    create_unexpected_token_diagnostic,
    diagnostic_from_error,
)
from goprep.utils.errors import (
    GoPrepError,
    LexerError,
    ParserError,
    PrintError,
    SourceLocation,
)

__all__ = [
    # Errors
    "GoPrepError",
    "LexerError",
    "ParserError",
    "PrintError",
    "SourceLocation",
    # Diagnostics
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
