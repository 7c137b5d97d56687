"""
Unit tests for counting-loop header recognition.
"""

import pytest

from goprep.compiler.ast_nodes import (
    AssignOperator,
    BinaryOperator,
    CallExpression,
    ForStatement,
    Identifier,
)
from goprep.compiler.loop_header import (
    StepDirection,
    extract_loop_header,
    match_condition,
    match_init,
    match_post,
)


@pytest.fixture
def parse_loop(parse, go_func):
    """Parse a loop header (with an empty body) into its ForStatement."""

    def _parse_loop(header: str) -> ForStatement:
        tree = parse(go_func(header + " {", "}"))
        loop = tree.declarations[-1].body.statements[0]
        assert isinstance(loop, ForStatement)
        return loop

    return _parse_loop


class TestExtractLoopHeader:
    """Tests for extract_loop_header."""

    def test_increment_loop(self, parse_loop):
        header = extract_loop_header(parse_loop("for i := 0; i < f(); i++"))
        assert header is not None
        assert header.variable.name == "i"
        assert header.init.value == "0"
        assert header.comparison == BinaryOperator.LT
        assert isinstance(header.bound, CallExpression)
        assert header.step == StepDirection.INCREMENT

    def test_decrement_loop(self, parse_loop):
        header = extract_loop_header(parse_loop("for i := n; i >= 0; i--"))
        assert header is not None
        assert header.init == Identifier("n", location=header.init.location)
        assert header.comparison == BinaryOperator.GE
        assert header.step == StepDirection.DECREMENT

    @pytest.mark.parametrize("op,expected", [
        ("<", BinaryOperator.LT),
        ("<=", BinaryOperator.LE),
        (">", BinaryOperator.GT),
        (">=", BinaryOperator.GE),
    ])
    def test_comparison_operators(self, parse_loop, op, expected):
        header = extract_loop_header(parse_loop(f"for i := 0; i {op} n; i++"))
        assert header is not None
        assert header.comparison == expected

    def test_header_keeps_matched_clauses(self, parse_loop):
        loop = parse_loop("for i := 0; i < n; i++")
        header = extract_loop_header(loop)
        assert header is not None
        assert header.init_clause is loop.init
        assert header.condition_clause is loop.condition
        assert header.post_clause is loop.post

    def test_plain_assignment_init(self, parse_loop):
        """An existing variable may be reused with '='."""
        header = extract_loop_header(parse_loop("for i = 0; i < n; i++"))
        assert header is not None

    @pytest.mark.parametrize("source", [
        "for i := 0; i < n; i += 2",       # non-unit post
        "for i := 0; i != n; i++",         # equality is not a counting bound
        "for i := 0; n > i; i++",          # variable on the right
        "for i := 0; i < n; j++",          # post names another variable
        "for i := 0; j < n; i++",          # condition names another variable
        "for i, j := 0, 0; i < n; i++",    # two variables
        "for i := 0; i < n;",              # no post
        "for ; i < n; i++",                # no init
        "for i := 0; ; i++",               # no condition
        "for i < n",                       # condition only
        "for",                             # infinite
        "for a[0] = 0; a[0] < n; a[0]++",  # not a plain name
    ])
    def test_rejected_headers(self, parse_loop, source):
        assert extract_loop_header(parse_loop(source)) is None


class TestClauseMatchers:
    """Tests for the individual clause recognizers."""

    def test_missing_clauses(self):
        assert match_init(None) is None
        assert match_condition(None) is None
        assert match_post(None) is None

    def test_init_returns_variable_and_value(self, parse_loop):
        loop = parse_loop("for k := lo + 1; k < hi; k++")
        variable, value = match_init(loop.init)
        assert variable.name == "k"
        assert value.operator == BinaryOperator.ADD
        assert loop.init.operator == AssignOperator.DEFINE

    def test_condition_returns_parts(self, parse_loop):
        loop = parse_loop("for k := 0; k <= len(xs); k++")
        variable, operator, bound = match_condition(loop.condition)
        assert variable.name == "k"
        assert operator == BinaryOperator.LE
        assert bound.function.name == "len"

    def test_post_direction(self, parse_loop):
        assert match_post(parse_loop("for i := 0; i < n; i++").post)[1] == StepDirection.INCREMENT
        assert match_post(parse_loop("for i := 0; i < n; i--").post)[1] == StepDirection.DECREMENT

    def test_post_rejects_compound_assignment(self, parse_loop):
        assert match_post(parse_loop("for i := 0; i < n; i -= 1").post) is None
