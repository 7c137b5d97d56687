"""
Pytest configuration and shared fixtures for goprep tests.
"""

import pytest

from goprep.compiler import preprocess
from goprep.compiler.ast_nodes import File
from goprep.compiler.lexer import Lexer
from goprep.compiler.parser import Parser
from goprep.compiler.tokens import Token
from goprep.printer import format_source


@pytest.fixture
def lexer_factory():
    """Factory fixture for creating lexers."""

    def _create_lexer(source: str, filename: str = "test.go") -> Lexer:
        return Lexer(source, filename)

    return _create_lexer


@pytest.fixture
def parser_factory(lexer_factory):
    """Factory fixture for creating parsers from source."""

    def _create_parser(source: str) -> Parser:
        lexer = lexer_factory(source)
        tokens = lexer.tokenize()
        return Parser(tokens, source, "test.go")

    return _create_parser


@pytest.fixture
def tokenize(lexer_factory):
    """Fixture to tokenize source code."""

    def _tokenize(source: str) -> list[Token]:
        lexer = lexer_factory(source)
        return lexer.tokenize()

    return _tokenize


@pytest.fixture
def parse(parser_factory):
    """Fixture to parse source code into AST."""

    def _parse(source: str) -> File:
        parser = parser_factory(source)
        return parser.parse()

    return _parse


@pytest.fixture
def print_source():
    """Fixture to parse and print source code without rewriting it."""

    def _print(source: str) -> str:
        return format_source(source, "test.go")

    return _print


@pytest.fixture
def run_preprocess():
    """Fixture to run the loop hoisting pass on source code."""

    def _run(source: str, **kwargs) -> str:
        return preprocess(source, "test.go", **kwargs)

    return _run


@pytest.fixture
def go_func():
    """Fixture to wrap statements (one per line) into a Go file with a main function."""

    def _wrap(*body_lines: str) -> str:
        body = "".join(f"\t{line}\n" for line in body_lines)
        return f"package main\n\nfunc main() {{\n{body}}}\n"

    return _wrap
