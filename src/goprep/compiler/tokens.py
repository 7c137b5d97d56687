"""
Token definitions for the Go lexer.

This module defines the token types of the Go language: keywords,
operators, delimiters and literals. Literal tokens keep their exact source
spelling so that the printer can reproduce them verbatim.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from goprep.utils.errors import SourceLocation


class TokenType(Enum):
    """Enumeration of all token types in Go."""

    # End of file
    EOF = auto()

    # Literals
    INT = auto()
    FLOAT = auto()
    IMAG = auto()
    CHAR = auto()  # rune literal
    STRING = auto()  # interpreted or raw

    # Identifiers
    IDENTIFIER = auto()

    # Keywords
    BREAK = auto()
    CASE = auto()
    CHAN = auto()
    CONST = auto()
    CONTINUE = auto()
    DEFAULT = auto()
    DEFER = auto()
    ELSE = auto()
    FALLTHROUGH = auto()
    FOR = auto()
    FUNC = auto()
    GO = auto()
    GOTO = auto()
    IF = auto()
    IMPORT = auto()
    INTERFACE = auto()
    MAP = auto()
    PACKAGE = auto()
    RANGE = auto()
    RETURN = auto()
    SELECT = auto()
    STRUCT = auto()
    SWITCH = auto()
    TYPE = auto()
    VAR = auto()

    # Arithmetic and bitwise operators
    PLUS = auto()  # +
    MINUS = auto()  # -
    STAR = auto()  # *
    SLASH = auto()  # /
    PERCENT = auto()  # %
    AMP = auto()  # &
    PIPE = auto()  # |
    CARET = auto()  # ^
    SHL = auto()  # <<
    SHR = auto()  # >>
    AND_NOT = auto()  # &^

    # Compound assignment
    ADD_ASSIGN = auto()  # +=
    SUB_ASSIGN = auto()  # -=
    MUL_ASSIGN = auto()  # *=
    QUO_ASSIGN = auto()  # /=
    REM_ASSIGN = auto()  # %=
    AND_ASSIGN = auto()  # &=
    OR_ASSIGN = auto()  # |=
    XOR_ASSIGN = auto()  # ^=
    SHL_ASSIGN = auto()  # <<=
    SHR_ASSIGN = auto()  # >>=
    AND_NOT_ASSIGN = auto()  # &^=

    # Logical and channel operators
    LAND = auto()  # &&
    LOR = auto()  # ||
    ARROW = auto()  # <-
    INC = auto()  # ++
    DEC = auto()  # --

    # Comparison operators
    EQ = auto()  # ==
    NE = auto()  # !=
    LT = auto()  # <
    GT = auto()  # >
    LE = auto()  # <=
    GE = auto()  # >=

    # Assignment
    ASSIGN = auto()  # =
    DEFINE = auto()  # :=

    # Unary-only operators
    NOT = auto()  # !
    TILDE = auto()  # ~

    # Delimiters
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    LBRACE = auto()  # {
    RBRACE = auto()  # }

    # Punctuation
    COMMA = auto()  # ,
    SEMICOLON = auto()  # ; (explicit, or inserted at a line end)
    DOT = auto()  # .
    COLON = auto()  # :
    ELLIPSIS = auto()  # ...


# Mapping of keywords to token types
KEYWORDS: dict[str, TokenType] = {
    "break": TokenType.BREAK,
    "case": TokenType.CASE,
    "chan": TokenType.CHAN,
    "const": TokenType.CONST,
    "continue": TokenType.CONTINUE,
    "default": TokenType.DEFAULT,
    "defer": TokenType.DEFER,
    "else": TokenType.ELSE,
    "fallthrough": TokenType.FALLTHROUGH,
    "for": TokenType.FOR,
    "func": TokenType.FUNC,
    "go": TokenType.GO,
    "goto": TokenType.GOTO,
    "if": TokenType.IF,
    "import": TokenType.IMPORT,
    "interface": TokenType.INTERFACE,
    "map": TokenType.MAP,
    "package": TokenType.PACKAGE,
    "range": TokenType.RANGE,
    "return": TokenType.RETURN,
    "select": TokenType.SELECT,
    "struct": TokenType.STRUCT,
    "switch": TokenType.SWITCH,
    "type": TokenType.TYPE,
    "var": TokenType.VAR,
}

# Single character operators
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "&": TokenType.AMP,
    "|": TokenType.PIPE,
    "^": TokenType.CARET,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "=": TokenType.ASSIGN,
    "!": TokenType.NOT,
    "~": TokenType.TILDE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    ".": TokenType.DOT,
    ":": TokenType.COLON,
}

# Two character operators (checked before single char)
DOUBLE_CHAR_TOKENS: dict[str, TokenType] = {
    "<<": TokenType.SHL,
    ">>": TokenType.SHR,
    "&^": TokenType.AND_NOT,
    "+=": TokenType.ADD_ASSIGN,
    "-=": TokenType.SUB_ASSIGN,
    "*=": TokenType.MUL_ASSIGN,
    "/=": TokenType.QUO_ASSIGN,
    "%=": TokenType.REM_ASSIGN,
    "&=": TokenType.AND_ASSIGN,
    "|=": TokenType.OR_ASSIGN,
    "^=": TokenType.XOR_ASSIGN,
    "&&": TokenType.LAND,
    "||": TokenType.LOR,
    "<-": TokenType.ARROW,
    "++": TokenType.INC,
    "--": TokenType.DEC,
    "==": TokenType.EQ,
    "!=": TokenType.NE,
    "<=": TokenType.LE,
    ">=": TokenType.GE,
    ":=": TokenType.DEFINE,
}

# Three character operators (checked first)
TRIPLE_CHAR_TOKENS: dict[str, TokenType] = {
    "<<=": TokenType.SHL_ASSIGN,
    ">>=": TokenType.SHR_ASSIGN,
    "&^=": TokenType.AND_NOT_ASSIGN,
    "...": TokenType.ELLIPSIS,
}

# A newline after one of these tokens terminates the statement
SEMICOLON_TRIGGERS: frozenset[TokenType] = frozenset(
    {
        TokenType.IDENTIFIER,
        TokenType.INT,
        TokenType.FLOAT,
        TokenType.IMAG,
        TokenType.CHAR,
        TokenType.STRING,
        TokenType.BREAK,
        TokenType.CONTINUE,
        TokenType.FALLTHROUGH,
        TokenType.RETURN,
        TokenType.INC,
        TokenType.DEC,
        TokenType.RPAREN,
        TokenType.RBRACKET,
        TokenType.RBRACE,
    }
)

ASSIGN_OPERATORS: frozenset[TokenType] = frozenset(
    {
        TokenType.ASSIGN,
        TokenType.DEFINE,
        TokenType.ADD_ASSIGN,
        TokenType.SUB_ASSIGN,
        TokenType.MUL_ASSIGN,
        TokenType.QUO_ASSIGN,
        TokenType.REM_ASSIGN,
        TokenType.AND_ASSIGN,
        TokenType.OR_ASSIGN,
        TokenType.XOR_ASSIGN,
        TokenType.SHL_ASSIGN,
        TokenType.SHR_ASSIGN,
        TokenType.AND_NOT_ASSIGN,
    }
)


@dataclass(slots=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The type of this token
        value: The exact lexeme text (``"\\n"`` for an inserted semicolon)
        location: Source location of this token
        comments: Comments that appeared between the previous significant
            token and this one, in source order
        comments_detached: Whether a blank line separates the last of those
            comments from this token
    """

    type: TokenType
    value: Optional[str]
    location: SourceLocation
    comments: tuple[str, ...] = ()
    comments_detached: bool = False

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.location})"
        return f"Token({self.type.name}, {self.location})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Token):
            return self.type == other.type and self.value == other.value
        if isinstance(other, TokenType):
            return self.type == other
        return NotImplemented

    @property
    def is_literal(self) -> bool:
        """Check if this token represents a literal value."""
        return self.type in {
            TokenType.INT,
            TokenType.FLOAT,
            TokenType.IMAG,
            TokenType.CHAR,
            TokenType.STRING,
        }

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a reserved word."""
        return self.value in KEYWORDS and self.type == KEYWORDS[self.value]

    @property
    def is_assign_op(self) -> bool:
        """Check if this token is an assignment operator (``=``, ``:=``, ``op=``)."""
        return self.type in ASSIGN_OPERATORS

    @property
    def is_inserted_semicolon(self) -> bool:
        """Check if this semicolon was inserted at a line end."""
        return self.type == TokenType.SEMICOLON and self.value == "\n"
