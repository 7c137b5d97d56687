"""
Unit tests for the Go Lexer.
"""

import pytest

from goprep.compiler.lexer import Lexer
from goprep.compiler.tokens import TokenType
from goprep.utils.errors import LexerError


def types(tokens):
    return [t.type for t in tokens]


class TestLexerBasics:
    """Basic lexer functionality tests."""

    def test_empty_source(self, tokenize):
        """Empty source should produce only EOF."""
        tokens = tokenize("")
        assert types(tokens) == [TokenType.EOF]

    def test_whitespace_only(self, tokenize):
        """Whitespace-only source should produce only EOF."""
        tokens = tokenize("   \t\n  \n")
        assert types(tokens) == [TokenType.EOF]

    def test_keywords(self, tokenize):
        """Reserved words should be recognized."""
        tokens = tokenize("for range func")
        assert types(tokens)[:3] == [TokenType.FOR, TokenType.RANGE, TokenType.FUNC]

    def test_identifier_with_underscore_and_digits(self, tokenize):
        """Identifiers may contain underscores and digits."""
        tokens = tokenize("_v0 camelCase x1")
        assert [t.value for t in tokens[:3]] == ["_v0", "camelCase", "x1"]
        assert all(t.type == TokenType.IDENTIFIER for t in tokens[:3])

    def test_locations_are_one_based(self, tokenize):
        """Token locations carry line, column and filename."""
        tokens = tokenize("package main\nfunc")
        func = tokens[3]
        assert func.type == TokenType.FUNC
        assert func.location.line == 2
        assert func.location.column == 1
        assert func.location.filename == "test.go"

    def test_iterating_lexer(self):
        """A Lexer can be iterated directly."""
        tokens = list(Lexer("x"))
        assert tokens[0].value == "x"
        assert tokens[-1].type == TokenType.EOF


class TestSemicolonInsertion:
    """Tests for automatic semicolon insertion at line ends."""

    def test_after_identifier(self, tokenize):
        """A newline after an identifier ends the statement."""
        tokens = tokenize("x\ny")
        assert types(tokens) == [
            TokenType.IDENTIFIER,
            TokenType.SEMICOLON,
            TokenType.IDENTIFIER,
            TokenType.SEMICOLON,
            TokenType.EOF,
        ]
        assert tokens[1].is_inserted_semicolon

    def test_not_after_operator(self, tokenize):
        """A newline after a binary operator continues the expression."""
        tokens = tokenize("a +\nb")
        assert types(tokens) == [
            TokenType.IDENTIFIER,
            TokenType.PLUS,
            TokenType.IDENTIFIER,
            TokenType.SEMICOLON,
            TokenType.EOF,
        ]

    def test_not_after_opening_brace(self, tokenize):
        """A newline after '{' inserts nothing."""
        tokens = tokenize("{\n}")
        assert types(tokens) == [TokenType.LBRACE, TokenType.RBRACE, TokenType.SEMICOLON, TokenType.EOF]

    @pytest.mark.parametrize("source", ["return", "break", "x++", "f()", "a[0]", "}", "1", '"s"'])
    def test_statement_enders(self, tokenize, source):
        """Statement-ending tokens trigger a semicolon at end of line."""
        tokens = tokenize(source + "\n")
        assert tokens[-2].is_inserted_semicolon

    def test_explicit_semicolon_is_not_inserted(self, tokenize):
        """An explicit ';' keeps its text."""
        tokens = tokenize("x; y")
        assert tokens[1].type == TokenType.SEMICOLON
        assert tokens[1].value == ";"
        assert not tokens[1].is_inserted_semicolon

    def test_multiline_general_comment_ends_statement(self, tokenize):
        """A /* */ comment spanning lines acts like a newline."""
        tokens = tokenize("x /* a\nb */ y")
        assert types(tokens)[:3] == [TokenType.IDENTIFIER, TokenType.SEMICOLON, TokenType.IDENTIFIER]


class TestLexerLiterals:
    """Tests for literal tokenization."""

    @pytest.mark.parametrize(
        "source,token_type",
        [
            ("42", TokenType.INT),
            ("1_000_000", TokenType.INT),
            ("0x1F", TokenType.INT),
            ("0o17", TokenType.INT),
            ("017", TokenType.INT),
            ("0b1010", TokenType.INT),
            ("1.5", TokenType.FLOAT),
            (".5", TokenType.FLOAT),
            ("1e10", TokenType.FLOAT),
            ("6.02e-23", TokenType.FLOAT),
            ("0x1p-2", TokenType.FLOAT),
            ("2i", TokenType.IMAG),
            ("1.5i", TokenType.IMAG),
        ],
    )
    def test_numbers(self, tokenize, source, token_type):
        """Numeric literals keep their exact spelling."""
        token = tokenize(source)[0]
        assert token.type == token_type
        assert token.value == source

    def test_interpreted_string(self, tokenize):
        """Interpreted strings keep quotes and escapes verbatim."""
        token = tokenize(r'"a\tb\"c\x41"')[0]
        assert token.type == TokenType.STRING
        assert token.value == r'"a\tb\"c\x41"'

    def test_raw_string_spans_lines(self, tokenize):
        """Raw strings may contain newlines."""
        token = tokenize("`line1\nline2`")[0]
        assert token.type == TokenType.STRING
        assert token.value == "`line1\nline2`"

    @pytest.mark.parametrize("source", ["'a'", r"'\n'", r"'\x41'", r"'\''", "'é'"])
    def test_runes(self, tokenize, source):
        """Rune literals hold exactly one character or escape."""
        token = tokenize(source)[0]
        assert token.type == TokenType.CHAR
        assert token.value == source


class TestLexerOperators:
    """Tests for operator tokenization."""

    @pytest.mark.parametrize(
        "source,token_type",
        [
            ("&^=", TokenType.AND_NOT_ASSIGN),
            ("<<=", TokenType.SHL_ASSIGN),
            ("...", TokenType.ELLIPSIS),
            ("&^", TokenType.AND_NOT),
            (":=", TokenType.DEFINE),
            ("<-", TokenType.ARROW),
            ("++", TokenType.INC),
            ("+=", TokenType.ADD_ASSIGN),
            ("<=", TokenType.LE),
            ("&&", TokenType.LAND),
            ("~", TokenType.TILDE),
        ],
    )
    def test_longest_match(self, tokenize, source, token_type):
        """Operators are matched longest first."""
        token = tokenize(source)[0]
        assert token.type == token_type
        assert token.value == source

    def test_decrement_then_greater(self, tokenize):
        """'-->' lexes as '--' followed by '>'."""
        tokens = tokenize("i-->0")
        assert types(tokens)[:4] == [TokenType.IDENTIFIER, TokenType.DEC, TokenType.GT, TokenType.INT]


class TestLexerComments:
    """Tests for comment collection."""

    def test_line_comment_attaches_to_next_token(self, tokenize):
        """Comments attach to the next significant token."""
        tokens = tokenize("// hello\nx")
        assert tokens[0].value == "x"
        assert tokens[0].comments == ("// hello",)

    def test_comment_skips_inserted_semicolon(self, tokenize):
        """A trailing comment is carried past the inserted semicolon."""
        tokens = tokenize("x // trailing\ny")
        assert tokens[1].is_inserted_semicolon
        assert tokens[1].comments == ()
        assert tokens[2].value == "y"
        assert tokens[2].comments == ("// trailing",)

    def test_general_comment_text(self, tokenize):
        """General comments keep their delimiters."""
        tokens = tokenize("/* block */ x")
        assert tokens[0].comments == ("/* block */",)

    def test_comment_before_eof(self, tokenize):
        """Comments at end of file attach to EOF."""
        tokens = tokenize("x\n// tail\n")
        assert tokens[-1].type == TokenType.EOF
        assert tokens[-1].comments == ("// tail",)

    def test_blank_line_detaches_comments(self, tokenize):
        tokens = tokenize("// a\n\nx")
        assert tokens[0].comments == ("// a",)
        assert tokens[0].comments_detached

    def test_adjacent_comment_is_attached(self, tokenize):
        tokens = tokenize("/* a\n b */\nx")
        assert tokens[0].comments == ("/* a\n b */",)
        assert not tokens[0].comments_detached


class TestLexerErrors:
    """Tests for lexer error reporting."""

    def test_unexpected_character(self, tokenize):
        """Unknown characters raise LexerError with location."""
        with pytest.raises(LexerError) as exc_info:
            tokenize("x := 1\ny := @")
        assert "Unexpected character" in exc_info.value.message
        assert exc_info.value.location.line == 2
        assert exc_info.value.location.column == 6
        assert exc_info.value.source_line == "y := @"

    def test_unterminated_string(self, tokenize):
        with pytest.raises(LexerError, match="string literal not terminated"):
            tokenize('"abc\n"')

    def test_unterminated_raw_string(self, tokenize):
        with pytest.raises(LexerError, match="raw string literal not terminated"):
            tokenize("`abc")

    def test_unterminated_comment(self, tokenize):
        with pytest.raises(LexerError, match="comment not terminated"):
            tokenize("/* never closed")

    def test_illegal_rune(self, tokenize):
        with pytest.raises(LexerError, match="illegal rune literal"):
            tokenize("'ab'")

    def test_unknown_escape(self, tokenize):
        with pytest.raises(LexerError, match="unknown escape sequence"):
            tokenize(r'"\q"')

    def test_missing_hex_digits(self, tokenize):
        with pytest.raises(LexerError, match="missing digits"):
            tokenize("0x")
