"""
Unit tests for the loop hoisting tree walker.
"""

from dataclasses import dataclass
from typing import Optional

import pytest

from goprep.compiler.ast_nodes import (
    BlockStatement,
    ForStatement,
    Statement,
)
from goprep.compiler.gensym import FreshNameGenerator
from goprep.compiler.walker import LoopHoister
from goprep.printer import print_file
from goprep.utils.errors import SourceLocation

COUNTING_LOOP = "for i := 0; i < n; i++ {"


@pytest.fixture
def hoister():
    return LoopHoister(FreshNameGenerator())


@pytest.fixture
def walk(parse, hoister):
    """Parse source, walk it, and return the printed result."""

    def _walk(source: str) -> str:
        return print_file(hoister.walk_file(parse(source)))

    return _walk


class TestWalkerReach:
    """Tests for which loops the walker reaches."""

    def test_top_level_loop(self, walk, hoister, go_func):
        result = walk(go_func(COUNTING_LOOP, "}"))
        assert "_v0, _v1, _v2 := 0, n, 1" in result
        assert [h.variable.name for h in hoister.rewritten] == ["i"]

    def test_loop_in_block(self, walk, go_func):
        result = walk(go_func("{", "\t" + COUNTING_LOOP, "\t}", "}"))
        assert "\t\t{\n\t\t\t_v0, _v1, _v2 := 0, n, 1\n" in result

    def test_loops_in_if_and_else(self, walk, go_func):
        result = walk(go_func(
            "if a {",
            "\t" + COUNTING_LOOP,
            "\t}",
            "} else if b {",
            "\t" + COUNTING_LOOP,
            "\t}",
            "} else {",
            "\t" + COUNTING_LOOP,
            "\t}",
            "}",
        ))
        assert "_v0, _v1, _v2 :=" in result
        assert "_v3, _v4, _v5 :=" in result
        assert "_v6, _v7, _v8 :=" in result

    def test_loops_in_switch_clauses(self, walk, go_func):
        result = walk(go_func(
            "switch x {",
            "case 1:",
            "\t" + COUNTING_LOOP,
            "\t}",
            "default:",
            "\t" + COUNTING_LOOP,
            "\t}",
            "}",
        ))
        assert "_v0, _v1, _v2 :=" in result
        assert "_v3, _v4, _v5 :=" in result

    def test_loop_in_type_switch_clause(self, walk, go_func):
        result = walk(go_func(
            "switch v := x.(type) {",
            "case int:",
            "\t" + COUNTING_LOOP,
            "\t}",
            "}",
        ))
        assert "_v0, _v1, _v2 :=" in result

    def test_loop_in_assigned_func_literal(self, walk, go_func):
        result = walk(go_func(
            "run := func() {",
            "\t" + COUNTING_LOOP,
            "\t}",
            "}",
        ))
        assert "\t\t{\n\t\t\t_v0, _v1, _v2 := 0, n, 1\n" in result

    def test_func_literal_nested_in_call(self, walk, go_func):
        """Function literals anywhere in an assignment's values are walked."""
        result = walk(go_func(
            "err := retry(3, func() error {",
            "\t" + COUNTING_LOOP,
            "\t}",
            "\treturn nil",
            "})",
        ))
        assert "_v0, _v1, _v2 := 0, n, 1" in result

    def test_methods_are_walked(self, walk):
        source = "package p\n\nfunc (t *T) m() {\n\t" + COUNTING_LOOP + "\n\t}\n}\n"
        assert "_v0, _v1, _v2 := 0, n, 1" in walk(source)


class TestWalkerLimits:
    """Tests for places the walker leaves alone."""

    def test_nested_loop_not_rewritten(self, walk, hoister, go_func):
        """Only the outer loop is rewritten; its body is not walked."""
        result = walk(go_func(COUNTING_LOOP, "\tfor j := 0; j < m; j++ {", "\t}", "}"))
        assert "for j := 0; j < m; j++ {" in result
        assert len(hoister.rewritten) == 1

    def test_loop_inside_non_counting_loop(self, walk, go_func):
        source = go_func("for {", "\t" + COUNTING_LOOP, "\t}", "}")
        assert walk(source) == source

    def test_loop_inside_range(self, walk, go_func):
        source = go_func("for range xs {", "\t" + COUNTING_LOOP, "\t}", "}")
        assert walk(source) == source

    @pytest.mark.parametrize("opener,closer", [
        ("go func() {", "}()"),
        ("defer func() {", "}()"),
        ("func() {", "}()"),
    ])
    def test_func_literal_outside_assignment(self, walk, go_func, opener, closer):
        source = go_func(opener, "\t" + COUNTING_LOOP, "\t}", closer)
        assert walk(source) == source

    def test_labeled_loop(self, walk):
        source = "package main\n\nfunc main() {\nouter:\n\t" + COUNTING_LOOP + "\n\t}\n}\n"
        assert walk(source) == source

    def test_select_clause(self, walk, go_func):
        source = go_func("select {", "case <-done:", "\t" + COUNTING_LOOP, "\t}", "}")
        assert walk(source) == source

    def test_package_level_func_literal(self, walk):
        source = (
            "package p\n\nvar f = func() {\n\t" + COUNTING_LOOP + "\n\t}\n}\n"
        )
        assert walk(source) == source


class TestWalkerSharing:
    """Tests for structural sharing of untouched subtrees."""

    def test_unchanged_file_is_same_object(self, parse, hoister, go_func):
        tree = parse(go_func("x := 1", "if x > 0 {", "\tx++", "}"))
        assert hoister.walk_file(tree) is tree

    def test_untouched_siblings_are_shared(self, parse, hoister, go_func):
        tree = parse(go_func("if a {", "}", COUNTING_LOOP, "}"))
        new_tree = hoister.walk_file(tree)
        old_stmts = tree.declarations[-1].body.statements
        new_stmts = new_tree.declarations[-1].body.statements
        assert new_stmts[0] is old_stmts[0]
        assert isinstance(new_stmts[1], BlockStatement)
        assert isinstance(new_stmts[1].statements[1], ForStatement)

    def test_unknown_statement_kind(self, hoister):

        @dataclass(frozen=True)
        class Mystery(Statement):
            location: Optional[SourceLocation] = None

        with pytest.raises(TypeError, match="Unknown statement kind: Mystery"):
            hoister.walk_statement(Mystery())
