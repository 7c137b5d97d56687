"""
Go Lexer (Tokenizer).

Transforms Go source code into a stream of tokens. The lexer implements
Go's automatic semicolon insertion and attaches every comment to the next
significant token, so later stages can keep comments that sit between
statements.
"""

from typing import Iterator, Optional

from goprep.compiler.tokens import (
    DOUBLE_CHAR_TOKENS,
    KEYWORDS,
    SEMICOLON_TRIGGERS,
    SINGLE_CHAR_TOKENS,
    TRIPLE_CHAR_TOKENS,
    Token,
    TokenType,
)
from goprep.utils.errors import LexerError, SourceLocation


_DECIMAL_DIGITS = "0123456789_"
_HEX_DIGITS = "0123456789abcdefABCDEF_"


class Lexer:
    """
    Tokenizer for Go source code.

    The lexer supports:
    - Identifiers and the 25 Go keywords
    - Integer (decimal, hex, octal, binary), float and imaginary literals
    - Rune literals, interpreted strings and raw (backquoted) strings
    - Line (//) and general (/* */) comments
    - Automatic semicolon insertion at line ends

    Literal tokens keep their exact source text as value.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()
        # or iterate: for token in lexer: ...
    """

    def __init__(self, source: str, filename: Optional[str] = None) -> None:
        """
        Initialize the lexer with source code.

        Args:
            source: The Go source code to tokenize
            filename: Optional filename for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

        # Track the start of the current line for error reporting
        self._line_start = 0
        # Whether a newline here ends the statement
        self._insert_semi = False
        self._pending_comments: list[str] = []
        # Line on which the last comment ended
        self._comment_end_line = 0

    @property
    def _current_char(self) -> Optional[str]:
        """Return the current character or None if at end."""
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    @property
    def _peek_char(self) -> Optional[str]:
        """Return the next character without consuming it."""
        peek_pos = self.pos + 1
        if peek_pos >= len(self.source):
            return None
        return self.source[peek_pos]

    def _location(self) -> SourceLocation:
        """Create a SourceLocation for the current position."""
        return SourceLocation(
            line=self.line,
            column=self.column,
            offset=self.pos,
            filename=self.filename,
        )

    def _current_line_text(self) -> str:
        """Extract the current line of source for error messages."""
        end = self.source.find("\n", self._line_start)
        if end == -1:
            end = len(self.source)
        return self.source[self._line_start:end]

    def _advance(self) -> str:
        """Consume and return the current character."""
        char = self.source[self.pos]
        self.pos += 1

        if char == "\n":
            self.line += 1
            self.column = 1
            self._line_start = self.pos
        else:
            self.column += 1

        return char

    def _error(self, message: str, location: Optional[SourceLocation] = None) -> LexerError:
        return LexerError(message, location or self._location(), self._current_line_text())

    def _skip_whitespace(self) -> None:
        """Skip whitespace; newlines are skipped only where no semicolon is due."""
        while self._current_char is not None:
            if self._current_char in " \t\r":
                self._advance()
            elif self._current_char == "\n" and not self._insert_semi:
                self._advance()
            else:
                break

    def _read_line_comment(self) -> str:
        """Read a // comment up to (not including) the end of the line."""
        start = self.pos
        while self._current_char is not None and self._current_char != "\n":
            self._advance()
        return self.source[start:self.pos].rstrip("\r")

    def _read_general_comment(self) -> str:
        """
        Read a /* ... */ comment.

        Returns:
            The full comment text including delimiters.
        """
        start_loc = self._location()
        start = self.pos
        self._advance()  # /
        self._advance()  # *

        while True:
            if self._current_char is None:
                raise LexerError(
                    "comment not terminated",
                    start_loc,
                    self._current_line_text(),
                )
            if self._current_char == "*" and self._peek_char == "/":
                self._advance()  # *
                self._advance()  # /
                return self.source[start:self.pos]
            self._advance()

    def _read_escape(self, quote_char: str) -> None:
        """Consume one escape sequence after the backslash."""
        char = self._current_char
        if char is None or char == "\n":
            raise self._error("escape sequence not terminated")

        simple = "abfnrtv\\" + quote_char
        if char in simple:
            self._advance()
            return

        expected = {"x": 2, "u": 4, "U": 8}.get(char)
        if expected is not None:
            self._advance()
            digits = _HEX_DIGITS.replace("_", "")
        elif char in "01234567":
            expected = 3
            digits = "01234567"
        else:
            raise self._error("unknown escape sequence")

        for _ in range(expected):
            if self._current_char is None or self._current_char not in digits:
                raise self._error("invalid character in escape sequence")
            self._advance()

    def _read_string(self) -> Token:
        """
        Read an interpreted string literal.

        Returns:
            A STRING token whose value is the quoted source text.
        """
        start_loc = self._location()
        start = self.pos
        self._advance()  # consume opening quote

        while True:
            if self._current_char is None or self._current_char == "\n":
                raise LexerError(
                    "string literal not terminated",
                    start_loc,
                    self._current_line_text(),
                )
            if self._current_char == '"':
                self._advance()
                break
            if self._current_char == "\\":
                self._advance()
                self._read_escape('"')
            else:
                self._advance()

        return Token(TokenType.STRING, self.source[start:self.pos], start_loc)

    def _read_raw_string(self) -> Token:
        """Read a backquoted raw string, which may span lines."""
        start_loc = self._location()
        start = self.pos
        self._advance()  # consume opening backquote

        while self._current_char != "`":
            if self._current_char is None:
                raise LexerError(
                    "raw string literal not terminated",
                    start_loc,
                    self._current_line_text(),
                )
            self._advance()
        self._advance()

        return Token(TokenType.STRING, self.source[start:self.pos], start_loc)

    def _read_rune(self) -> Token:
        """Read a rune literal such as 'a' or '\\n'."""
        start_loc = self._location()
        start = self.pos
        self._advance()  # consume opening quote

        count = 0
        while True:
            if self._current_char is None or self._current_char == "\n":
                raise LexerError(
                    "rune literal not terminated",
                    start_loc,
                    self._current_line_text(),
                )
            if self._current_char == "'":
                self._advance()
                break
            if self._current_char == "\\":
                self._advance()
                self._read_escape("'")
            else:
                self._advance()
            count += 1

        if count != 1:
            raise LexerError(
                "illegal rune literal",
                start_loc,
                self._current_line_text(),
            )

        return Token(TokenType.CHAR, self.source[start:self.pos], start_loc)

    def _read_digits(self, digits: str) -> int:
        """Consume characters from ``digits``; return how many were read."""
        count = 0
        while self._current_char is not None and self._current_char in digits:
            self._advance()
            count += 1
        return count

    def _read_number(self) -> Token:
        """
        Read a numeric literal.

        Supports:
        - Decimal integers: 123, 1_000_000
        - Hex, octal and binary: 0x1F, 0o17, 017, 0b1010
        - Floats: 1.5, .5, 1., 1e10, 0x1p-2
        - Imaginary literals: 2i, 1.5i

        Returns:
            An INT, FLOAT or IMAG token carrying the literal text.
        """
        start_loc = self._location()
        start = self.pos
        is_float = False
        exponent_chars = "eE"
        digits = _DECIMAL_DIGITS

        if self._current_char == "0" and self._peek_char is not None and self._peek_char in "xXbBoO":
            prefix = self._peek_char.lower()
            self._advance()
            self._advance()
            digits = {"x": _HEX_DIGITS, "b": "01_", "o": "01234567_"}[prefix]
            if prefix == "x":
                exponent_chars = "pP"
            if self._read_digits(digits) == 0 and not (
                prefix == "x" and self._current_char == "."
            ):
                raise self._error(f"invalid number: missing digits after 0{prefix}", start_loc)
            if prefix != "x":
                exponent_chars = ""
        else:
            self._read_digits(digits)

        if self._current_char == "." and digits in (_DECIMAL_DIGITS, _HEX_DIGITS):
            is_float = True
            self._advance()
            self._read_digits(digits)

        if exponent_chars and self._current_char is not None and self._current_char in exponent_chars:
            is_float = True
            self._advance()
            if self._current_char is not None and self._current_char in "+-":
                self._advance()
            if self._read_digits(_DECIMAL_DIGITS) == 0:
                raise LexerError(
                    "invalid number: exponent has no digits",
                    self._location(),
                    self._current_line_text(),
                )

        if self._current_char == "i":
            self._advance()
            return Token(TokenType.IMAG, self.source[start:self.pos], start_loc)

        token_type = TokenType.FLOAT if is_float else TokenType.INT
        return Token(token_type, self.source[start:self.pos], start_loc)

    def _read_identifier_or_keyword(self) -> Token:
        """
        Read an identifier or keyword.

        Returns:
            An IDENTIFIER token or the appropriate keyword token.
        """
        start_loc = self._location()
        start = self.pos

        while self._current_char is not None and (
            self._current_char.isalnum() or self._current_char == "_"
        ):
            self._advance()

        identifier = self.source[start:self.pos]
        return Token(KEYWORDS.get(identifier, TokenType.IDENTIFIER), identifier, start_loc)

    def _read_operator(self) -> Optional[Token]:
        """
        Read an operator or delimiter token (one to three characters).

        Returns:
            An operator token, or None if the current character is not an operator.
        """
        start_loc = self._location()

        for length, table in ((3, TRIPLE_CHAR_TOKENS), (2, DOUBLE_CHAR_TOKENS), (1, SINGLE_CHAR_TOKENS)):
            text = self.source[self.pos:self.pos + length]
            if len(text) == length and text in table:
                for _ in range(length):
                    self._advance()
                return Token(table[text], text, start_loc)

        return None

    def _next_token(self) -> Token:
        """
        Extract the next token from the source.

        Comments are collected into the pending list. A newline (or a
        general comment spanning lines) after a statement-ending token
        produces a SEMICOLON token with value ``"\\n"``.
        """
        while True:
            self._skip_whitespace()

            if self._current_char == "/" and self._peek_char == "/":
                self._pending_comments.append(self._read_line_comment())
                self._comment_end_line = self.line
                continue

            if self._current_char == "/" and self._peek_char == "*":
                loc = self._location()
                comment = self._read_general_comment()
                self._pending_comments.append(comment)
                self._comment_end_line = self.line
                if self._insert_semi and "\n" in comment:
                    self._insert_semi = False
                    return Token(TokenType.SEMICOLON, "\n", loc)
                continue

            break

        if self._current_char is None:
            if self._insert_semi:
                self._insert_semi = False
                return Token(TokenType.SEMICOLON, "\n", self._location())
            return Token(TokenType.EOF, None, self._location())

        # Only reachable with a semicolon due
        if self._current_char == "\n":
            loc = self._location()
            self._advance()
            self._insert_semi = False
            return Token(TokenType.SEMICOLON, "\n", loc)

        char = self._current_char
        if char == '"':
            token = self._read_string()
        elif char == "`":
            token = self._read_raw_string()
        elif char == "'":
            token = self._read_rune()
        elif char.isdigit() or (char == "." and self._peek_char is not None and self._peek_char.isdigit()):
            token = self._read_number()
        elif char.isalpha() or char == "_":
            token = self._read_identifier_or_keyword()
        else:
            op_token = self._read_operator()
            if op_token is None:
                raise self._error(f"Unexpected character: {char!r}")
            token = op_token

        self._insert_semi = token.type in SEMICOLON_TRIGGERS
        return token

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source code.

        Returns:
            A list of all tokens including the final EOF token.
        """
        self.tokens = []
        self.pos = 0
        self.line = 1
        self.column = 1
        self._line_start = 0
        self._insert_semi = False
        self._pending_comments = []
        self._comment_end_line = 0

        while True:
            token = self._next_token()
            if self._pending_comments and token.type != TokenType.SEMICOLON:
                token.comments = tuple(self._pending_comments)
                token.comments_detached = token.location.line > self._comment_end_line + 1
                self._pending_comments = []
            self.tokens.append(token)
            if token.type == TokenType.EOF:
                break

        return self.tokens

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens (re-tokenizes if necessary)."""
        if not self.tokens:
            self.tokenize()
        return iter(self.tokens)


def tokenize(source: str, filename: Optional[str] = None) -> list[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: Go source code
        filename: Optional filename for error reporting

    Returns:
        List of tokens
    """
    return Lexer(source, filename).tokenize()
