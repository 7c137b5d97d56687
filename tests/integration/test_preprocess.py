"""
Integration tests for the complete preprocessing pipeline.

These tests run source text through lexing, parsing, loop hoisting and
printing, and compare the resulting Go source.
"""

import logging

import pytest

from goprep import preprocess_file
from goprep.compiler import PreprocessResult, preprocess_with_report
from goprep.printer import PrintConfig, format_source
from goprep.utils.errors import LexerError, ParserError


class TestHoisting:
    """End-to-end rewrites of counting loops."""

    def test_counting_loop(self, run_preprocess, go_func):
        source = go_func("for i := 0; i < f(); i++ {", "\tg(i)", "}")
        assert run_preprocess(source) == (
            "package main\n"
            "\n"
            "func main() {\n"
            "\t{\n"
            "\t\t_v0, _v1, _v2 := 0, f(), 1\n"
            "\t\tfor i := _v0; i < _v1; i += _v2 {\n"
            "\t\t\tg(i)\n"
            "\t\t}\n"
            "\t}\n"
            "}\n"
        )

    def test_decrementing_loop(self, run_preprocess, go_func):
        source = go_func("for i := n - 1; i >= 0; i-- {", "\tuse(xs[i])", "}")
        assert run_preprocess(source) == go_func(
            "{",
            "\t_v0, _v1, _v2 := n - 1, 0, -1",
            "\tfor i := _v0; i >= _v1; i += _v2 {",
            "\t\tuse(xs[i])",
            "\t}",
            "}",
        )

    def test_consecutive_loops_share_the_counter(self, run_preprocess, go_func):
        source = go_func(
            "for i := 0; i < a; i++ {",
            "}",
            "for j := 0; j < b; j++ {",
            "}",
        )
        result = run_preprocess(source)
        assert "_v0, _v1, _v2 := 0, a, 1" in result
        assert "_v3, _v4, _v5 := 0, b, 1" in result

    def test_loops_in_several_functions(self, run_preprocess):
        source = (
            "package p\n\n"
            "func a() {\n\tfor i := 0; i < 1; i++ {\n\t}\n}\n\n"
            "func b() {\n\tfor i := 0; i < 2; i++ {\n\t}\n}\n"
        )
        result = run_preprocess(source)
        assert "_v0, _v1, _v2 := 0, 1, 1" in result
        assert "_v3, _v4, _v5 := 0, 2, 1" in result

    def test_func_literal_argument(self, run_preprocess, go_func):
        """A literal passed to a call on an assignment's right side is rewritten."""
        source = go_func(
            "total := sum(func() int {",
            "\tfor i := 0; i < n; i++ {",
            "\t}",
            "\treturn 0",
            "})",
        )
        assert "_v0, _v1, _v2 := 0, n, 1" in run_preprocess(source)

    def test_generic_function(self, run_preprocess):
        source = (
            "package main\n\n"
            "func Sum[T int | float64](xs []T) T {\n"
            "\tvar total T\n"
            "\tfor i := 0; i < len(xs); i++ {\n"
            "\t\ttotal += xs[i]\n"
            "\t}\n"
            "\treturn total\n"
            "}\n"
        )
        assert run_preprocess(source) == (
            "package main\n\n"
            "func Sum[T int | float64](xs []T) T {\n"
            "\tvar total T\n"
            "\t{\n"
            "\t\t_v0, _v1, _v2 := 0, len(xs), 1\n"
            "\t\tfor i := _v0; i < _v1; i += _v2 {\n"
            "\t\t\ttotal += xs[i]\n"
            "\t\t}\n"
            "\t}\n"
            "\treturn total\n"
            "}\n"
        )

    def test_comments_survive(self, run_preprocess, go_func):
        source = go_func(
            "// count up",
            "for i := 0; i < n; i++ {",
            "\t// body",
            "\tg(i)",
            "}",
        )
        result = run_preprocess(source)
        assert "\t// count up\n\t{\n" in result
        assert "\t\t\t// body\n\t\t\tg(i)\n" in result


class TestLeftAlone:
    """Loops and places the pass does not rewrite."""

    @pytest.mark.parametrize("header", [
        "for i, j := 0, 10; i < j; i++ {",
        "for i := 0; i < n; i += 2 {",
        "for i := 0; i != n; i++ {",
        "for i := 0; i < n; j++ {",
        "for x < 10 {",
        "for {",
        "for _, x := range xs {",
    ])
    def test_ineligible_loops(self, run_preprocess, go_func, header):
        source = go_func(header, "\tbreak", "}")
        assert run_preprocess(source) == source

    def test_nested_loop_kept(self, run_preprocess, go_func):
        source = go_func(
            "for i := 0; i < n; i++ {",
            "\tfor j := 0; j < m; j++ {",
            "\t}",
            "}",
        )
        result = run_preprocess(source)
        assert "\t\t\tfor j := 0; j < m; j++ {\n" in result
        assert "_v3" not in result

    def test_goroutine_body_kept(self, run_preprocess, go_func):
        source = go_func("go func() {", "\tfor i := 0; i < n; i++ {", "\t}", "}()")
        assert run_preprocess(source) == source

    def test_expression_statement_literal_kept(self, run_preprocess, go_func):
        source = go_func("func() {", "\tfor i := 0; i < n; i++ {", "\t}", "}()")
        assert run_preprocess(source) == source


class TestPassProperties:
    """Whole-pass guarantees."""

    def test_idempotent(self, run_preprocess, go_func):
        """Running the pass on its own output changes nothing."""
        source = go_func(
            "for i := 0; i < len(xs); i++ {",
            "\tfor j := i; j < len(xs); j++ {",
            "\t}",
            "}",
            "run := func() {",
            "\tfor k := 9; k > 0; k-- {",
            "\t}",
            "}",
        )
        once = run_preprocess(source)
        assert run_preprocess(once) == once

    def test_fresh_names_avoid_existing_identifiers(self, run_preprocess, go_func):
        source = go_func("_v0 := 5", "for i := 0; i < _v0; i++ {", "}")
        result = run_preprocess(source)
        assert "_v1, _v2, _v3 := 0, _v0, 1" in result

    def test_fresh_names_avoid_comment_text(self, run_preprocess, go_func):
        source = go_func("// uses _v1", "for i := 0; i < n; i++ {", "}")
        assert "_v0, _v2, _v3 := 0, n, 1" in run_preprocess(source)

    def test_conservative_when_nothing_eligible(self, run_preprocess):
        """Without counting loops the output equals the printed input."""
        source = (
            "package main\n"
            "import \"fmt\"\n"
            "func main(){\n"
            "  for k, v := range m { fmt.Println(k, v) }\n"
            "  for i := 0; i < 3; i += 1 {}\n"
            "}\n"
        )
        assert run_preprocess(source) == format_source(source, "test.go")

    def test_build_constraint_stays_separated(self, run_preprocess):
        source = (
            "//go:build linux\n\npackage main\n\n"
            "func main() {\n\tfor i := 0; i < n; i++ {\n\t}\n}\n"
        )
        result = run_preprocess(source)
        assert result.startswith("//go:build linux\n\npackage main\n\nfunc main() {\n\t{\n")

    def test_labeled_empty_statement_kept(self, run_preprocess, go_func):
        source = go_func("for i := 0; i < n; i++ {", "}", "goto badloop")
        source = source.replace("\tgoto badloop\n", "badloop:\n\t;\n\tgoto badloop\n")
        assert "\nbadloop:\n\t;\n\tgoto badloop\n}\n" in run_preprocess(source)

    def test_custom_prefix(self, run_preprocess, go_func):
        source = go_func("for i := 0; i < n; i++ {", "}")
        assert "tmp0, tmp1, tmp2 := 0, n, 1" in run_preprocess(source, name_prefix="tmp")

    def test_invalid_prefix(self, run_preprocess, go_func):
        with pytest.raises(ValueError):
            run_preprocess(go_func(), name_prefix="9x")

    def test_print_config(self, run_preprocess, go_func):
        source = go_func("for i := 0; i < n; i++ {", "}")
        result = run_preprocess(source, config=PrintConfig(indent="  "))
        assert "\n    _v0, _v1, _v2 := 0, n, 1\n" in result


class TestErrors:
    """Malformed input is reported and produces no output."""

    def test_unclosed_brace(self, run_preprocess):
        with pytest.raises(ParserError) as exc_info:
            run_preprocess("package main\n\nfunc main() {\n\tx := 1\n")
        error = exc_info.value
        assert "Unclosed delimiter" in error.message
        assert error.location.filename == "test.go"

    def test_missing_package_clause(self, run_preprocess):
        with pytest.raises(ParserError, match="package"):
            run_preprocess("func main() {}\n")

    def test_lexer_error(self, run_preprocess, go_func):
        with pytest.raises(LexerError):
            run_preprocess(go_func("x := 1 @ 2"))


class TestReport:
    """Tests for preprocess_with_report and file helpers."""

    def test_report_lists_hoisted_loops(self, go_func):
        source = go_func("for i := 0; i < n; i++ {", "}", "for j := 5; j > 0; j-- {", "}")
        result = preprocess_with_report(source, "test.go")

        assert isinstance(result, PreprocessResult)
        assert [h.variable.name for h in result.hoisted] == ["i", "j"]
        assert result.tree is not None
        assert result.output.startswith("package main\n")
        assert "Loops Hoisted: 2" in str(result)
        assert "test.go:4:6" in str(result)

    def test_report_logs_at_debug(self, go_func, caplog):
        source = go_func("for i := 0; i < n; i++ {", "}")
        with caplog.at_level(logging.DEBUG, logger="goprep.compiler"):
            preprocess_with_report(source, "test.go")
        assert "1 loop(s) hoisted" in caplog.text

    def test_preprocess_file(self, tmp_path, go_func):
        path = tmp_path / "main.go"
        path.write_text(go_func("for i := 0; i < n; i++ {", "}"), encoding="utf-8")
        assert "_v0, _v1, _v2 := 0, n, 1" in preprocess_file(path)

    def test_preprocess_file_reports_path(self, tmp_path):
        path = tmp_path / "bad.go"
        path.write_text("package main\nfunc main() {\n", encoding="utf-8")
        with pytest.raises(ParserError) as exc_info:
            preprocess_file(path)
        assert exc_info.value.location.filename == str(path)
