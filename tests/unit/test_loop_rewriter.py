"""
Unit tests for loop-bound hoisting of a single loop.
"""

import dataclasses

import pytest

from goprep.compiler.ast_nodes import (
    AssignmentStatement,
    AssignOperator,
    BasicLiteral,
    BinaryExpression,
    BlockStatement,
    ForStatement,
    Identifier,
)
from goprep.compiler.gensym import FreshNameGenerator
from goprep.compiler.loop_header import extract_loop_header
from goprep.compiler.loop_rewriter import hoist_bounds, rewrite_loop
from goprep.printer import Printer


@pytest.fixture
def parse_loop(parse, go_func):
    """Parse a loop (header plus body lines) into its ForStatement."""

    def _parse_loop(header: str, *body: str) -> ForStatement:
        tree = parse(go_func(header + " {", *(f"\t{line}" for line in body), "}"))
        return tree.declarations[-1].body.statements[0]

    return _parse_loop


def render(stmt):
    return Printer().print_statements((stmt,))


class TestRewriteLoop:
    """Tests for rewrite_loop."""

    def test_block_shape(self, parse_loop):
        loop = parse_loop("for i := 0; i < f(); i++", "g(i)")
        result = rewrite_loop(loop, FreshNameGenerator())

        assert isinstance(result, BlockStatement)
        bounds, new_loop = result.statements
        assert isinstance(bounds, AssignmentStatement)
        assert bounds.operator == AssignOperator.DEFINE
        assert [t.name for t in bounds.targets] == ["_v0", "_v1", "_v2"]
        assert bounds.values[0] is loop.init.values[0]
        assert bounds.values[1] is loop.condition.right
        assert bounds.values[2] == BasicLiteral(bounds.values[2].kind, "1", location=loop.location)

        assert isinstance(new_loop, ForStatement)
        assert new_loop.init.values == (Identifier("_v0", location=loop.location),)
        assert new_loop.init.operator == AssignOperator.DEFINE
        assert isinstance(new_loop.condition, BinaryExpression)
        assert new_loop.condition.right.name == "_v1"
        assert new_loop.post.operator == AssignOperator.ADD_ASSIGN
        assert new_loop.post.values[0].name == "_v2"
        assert new_loop.body is loop.body

    def test_printed_form(self, parse_loop):
        loop = parse_loop("for i := 0; i < f(); i++", "g(i)")
        result = rewrite_loop(loop, FreshNameGenerator())
        assert render(result) == (
            "{\n"
            "\t_v0, _v1, _v2 := 0, f(), 1\n"
            "\tfor i := _v0; i < _v1; i += _v2 {\n"
            "\t\tg(i)\n"
            "\t}\n"
            "}"
        )

    def test_decrement_uses_negative_step(self, parse_loop):
        loop = parse_loop("for i := len(s) - 1; i >= 0; i--")
        result = rewrite_loop(loop, FreshNameGenerator())
        assert render(result).splitlines()[1] == "\t_v0, _v1, _v2 := len(s) - 1, 0, -1"

    def test_keeps_comparison_and_assignment_operator(self, parse_loop):
        loop = parse_loop("for j = 10; j > lo; j--")
        result = rewrite_loop(loop, FreshNameGenerator())
        assert render(result).splitlines()[2] == "\tfor j = _v0; j > _v1; j += _v2 {"

    def test_names_drawn_in_order(self, parse_loop):
        """lo, hi and step take the next three fresh names."""
        gensym = FreshNameGenerator(taken={"_v1"})
        loop = parse_loop("for i := 0; i < n; i++")
        bounds = rewrite_loop(loop, gensym).statements[0]
        assert [t.name for t in bounds.targets] == ["_v0", "_v2", "_v3"]
        assert gensym() == "_v4"

    def test_non_counting_loop_is_returned_unchanged(self, parse_loop):
        """No names are drawn for a loop that is left alone."""
        gensym = FreshNameGenerator()
        loop = parse_loop("for i := 0; i < n; i += 2")
        assert rewrite_loop(loop, gensym) is loop
        assert gensym() == "_v0"

    def test_clauses_come_from_the_header(self, parse_loop):
        """hoist_bounds rebuilds the header from the matched clauses alone."""
        loop = parse_loop("for i := 0; i < n; i++", "g(i)")
        header = extract_loop_header(loop)
        bare = dataclasses.replace(loop, init=None, condition=None, post=None)
        result = hoist_bounds(bare, header, FreshNameGenerator())
        assert render(result).splitlines()[2] == "\tfor i := _v0; i < _v1; i += _v2 {"

    def test_fresh_names_avoid_source(self, parse_loop):
        loop = parse_loop("for _v0 := 0; _v0 < _v1; _v0++")
        gensym = FreshNameGenerator(taken={"_v0", "_v1"})
        bounds = rewrite_loop(loop, gensym).statements[0]
        assert [t.name for t in bounds.targets] == ["_v2", "_v3", "_v4"]
