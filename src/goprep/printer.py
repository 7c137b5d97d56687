"""
Go Source Printer.

Turns a parsed (and possibly rewritten) AST back into Go source text in a
gofmt-like layout: tab indentation, spaced binary operators, one statement
per line, and labels outdented by one level. Literal text and parentheses
come from the tree, so printing never changes the meaning of an
expression. Printing is a fixpoint: parsing printed output and printing it
again yields the same text.

Usage:
    goprep fmt main.go
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from pathlib import Path

from goprep.compiler.ast_nodes import (
    # File and declarations
    File,
    Declaration,
    GenDeclaration,
    FuncDeclaration,
    CommentGroup,
    ImportSpec,
    ValueSpec,
    TypeSpec,
    DeclKind,
    # Types
    Field,
    ArrayType,
    MapType,
    ChanType,
    ChanDirection,
    FuncType,
    StructType,
    InterfaceType,
    # Expressions
    Expression,
    Identifier,
    BasicLiteral,
    CompositeLiteral,
    KeyValueExpression,
    FuncLiteral,
    ParenExpression,
    SelectorExpression,
    IndexExpression,
    IndexListExpression,
    SliceExpression,
    TypeAssertExpression,
    CallExpression,
    StarExpression,
    UnaryExpression,
    BinaryExpression,
    EllipsisExpression,
    BinaryOperator,
    UnaryOperator,
    AssignOperator,
    IncDecOperator,
    # Statements
    Statement,
    BlockStatement,
    CommentStatement,
    EmptyStatement,
    ExpressionStatement,
    SendStatement,
    IncDecStatement,
    AssignmentStatement,
    GoStatement,
    DeferStatement,
    ReturnStatement,
    BranchStatement,
    LabeledStatement,
    IfStatement,
    CaseClause,
    SwitchStatement,
    TypeSwitchStatement,
    CommClause,
    SelectStatement,
    ForStatement,
    RangeStatement,
    DeclarationStatement,
)
from goprep.compiler.lexer import Lexer
from goprep.compiler.parser import Parser
from goprep.compiler.tokens import DOUBLE_CHAR_TOKENS
from goprep.utils.errors import PrintError

# =============================================================================
# Printer Configuration
# =============================================================================


@dataclass
class PrintConfig:
    """Configuration for the source printer."""

    indent: str = "\t"
    trailing_newline: bool = True
    blank_lines_between_declarations: int = 1


# =============================================================================
# Operator Mapping
# =============================================================================


BINARY_OP_SYMBOLS: dict[BinaryOperator, str] = {
    BinaryOperator.LOR: "||",
    BinaryOperator.LAND: "&&",
    BinaryOperator.EQ: "==",
    BinaryOperator.NE: "!=",
    BinaryOperator.LT: "<",
    BinaryOperator.LE: "<=",
    BinaryOperator.GT: ">",
    BinaryOperator.GE: ">=",
    BinaryOperator.ADD: "+",
    BinaryOperator.SUB: "-",
    BinaryOperator.OR: "|",
    BinaryOperator.XOR: "^",
    BinaryOperator.MUL: "*",
    BinaryOperator.DIV: "/",
    BinaryOperator.MOD: "%",
    BinaryOperator.SHL: "<<",
    BinaryOperator.SHR: ">>",
    BinaryOperator.AND: "&",
    BinaryOperator.AND_NOT: "&^",
}


UNARY_OP_SYMBOLS: dict[UnaryOperator, str] = {
    UnaryOperator.POS: "+",
    UnaryOperator.NEG: "-",
    UnaryOperator.NOT: "!",
    UnaryOperator.XOR: "^",
    UnaryOperator.ADDR: "&",
    UnaryOperator.RECV: "<-",
    UnaryOperator.TILDE: "~",
}


ASSIGN_OP_SYMBOLS: dict[AssignOperator, str] = {
    AssignOperator.ASSIGN: "=",
    AssignOperator.DEFINE: ":=",
    AssignOperator.ADD_ASSIGN: "+=",
    AssignOperator.SUB_ASSIGN: "-=",
    AssignOperator.MUL_ASSIGN: "*=",
    AssignOperator.QUO_ASSIGN: "/=",
    AssignOperator.REM_ASSIGN: "%=",
    AssignOperator.AND_ASSIGN: "&=",
    AssignOperator.OR_ASSIGN: "|=",
    AssignOperator.XOR_ASSIGN: "^=",
    AssignOperator.SHL_ASSIGN: "<<=",
    AssignOperator.SHR_ASSIGN: ">>=",
    AssignOperator.AND_NOT_ASSIGN: "&^=",
}


INC_DEC_SYMBOLS: dict[IncDecOperator, str] = {
    IncDecOperator.INC: "++",
    IncDecOperator.DEC: "--",
}


# =============================================================================
# Source Printer
# =============================================================================


class Printer:
    """
    AST-based source printer for Go.

    Traverses the AST and produces consistently laid out source code.
    """

    def __init__(self, config: PrintConfig | None = None, indent_level: int = 0) -> None:
        """Initialize the printer with optional configuration."""
        self.config = config or PrintConfig()
        self._indent_level = indent_level
        self._output_lines: list[str] = []

    def print_file(self, file: File) -> str:
        """Print a complete source file."""
        self._output_lines = []
        self._indent_level = 0

        for comment in file.doc:
            self._emit_line(comment)
        if file.doc_detached:
            self._emit_line()
        self._emit_line(f"package {file.package}")

        previous: Declaration | None = None
        for decl in file.declarations:
            if not isinstance(previous, CommentGroup) or previous.detached:
                self._emit_blank_lines(self.config.blank_lines_between_declarations)
            self._format_declaration(decl)
            previous = decl

        result = "\n".join(self._output_lines)
        if self.config.trailing_newline and result and not result.endswith("\n"):
            result += "\n"

        return result

    def print_statements(self, statements: tuple[Statement, ...] | list[Statement]) -> str:
        """Print a statement sequence at the printer's indent level (no trailing newline)."""
        self._output_lines = []
        self._format_statements(tuple(statements))
        return "\n".join(self._output_lines)

    def _emit_blank_lines(self, count: int) -> None:
        """Emit the specified number of blank lines."""
        for _ in range(count):
            self._output_lines.append("")

    def _indent(self, level: int | None = None) -> str:
        """Get the indentation string for a level (default: current)."""
        return self.config.indent * (self._indent_level if level is None else level)

    def _emit_line(self, line: str = "") -> None:
        """Emit a line of output."""
        if line:
            self._output_lines.append(self._indent() + line)
        else:
            self._output_lines.append("")

    # -------------------------------------------------------------------------
    # Declaration Formatting
    # -------------------------------------------------------------------------

    def _format_declaration(self, decl: Declaration) -> None:
        """Format a top-level declaration."""
        if isinstance(decl, FuncDeclaration):
            self._format_func_declaration(decl)
        elif isinstance(decl, GenDeclaration):
            self._format_gen_declaration(decl)
        elif isinstance(decl, CommentGroup):
            for comment in decl.comments:
                self._emit_line(comment)
        else:
            raise PrintError(f"Cannot print declaration {type(decl).__name__}", decl.location)

    def _format_func_declaration(self, decl: FuncDeclaration) -> None:
        line = "func "
        if decl.receiver:
            line += f"({self._format_fields(decl.receiver)}) "
        line += decl.name + self._format_signature(decl.type)

        if decl.body is None:
            self._emit_line(line)
            return
        self._emit_line(line + " {")
        self._format_block_contents(decl.body)
        self._emit_line("}")

    def _format_gen_declaration(self, decl: GenDeclaration) -> None:
        keyword = decl.kind.value
        if not decl.grouped:
            self._emit_line(f"{keyword} {self._format_spec(decl.specs[0])}")
            return

        self._emit_line(f"{keyword} (")
        self._indent_level += 1
        for spec in decl.specs:
            self._emit_line(self._format_spec(spec))
        self._indent_level -= 1
        self._emit_line(")")

    def _format_spec(self, spec: ImportSpec | ValueSpec | TypeSpec) -> str:
        if isinstance(spec, ImportSpec):
            if spec.name is not None:
                return f"{spec.name} {spec.path}"
            return spec.path
        if isinstance(spec, ValueSpec):
            text = ", ".join(spec.names)
            if spec.type is not None:
                text += " " + self._format_expression(spec.type)
            if spec.values:
                text += " = " + self._format_expression_list(spec.values)
            return text
        if isinstance(spec, TypeSpec):
            separator = " = " if spec.is_alias else " "
            name = spec.name + self._format_type_params(spec.type_params)
            return name + separator + self._format_expression(spec.type)
        raise PrintError(f"Cannot print spec {type(spec).__name__}")

    # -------------------------------------------------------------------------
    # Statement Formatting
    # -------------------------------------------------------------------------

    def _format_statements(self, statements: tuple[Statement, ...]) -> None:
        """Format a statement sequence that ends at a closing brace or clause."""
        last = max(
            (i for i, stmt in enumerate(statements) if not isinstance(stmt, CommentStatement)),
            default=-1,
        )
        for i, stmt in enumerate(statements):
            self._format_statement(stmt, at_end=i >= last)

    def _format_statement(self, stmt: Statement, at_end: bool = True) -> None:
        """
        Format a single statement.

        ``at_end`` tells whether only comments follow the statement before
        the closing brace; a label on an empty statement needs an explicit
        ``;`` otherwise.
        """
        if isinstance(stmt, CommentStatement):
            self._emit_line(stmt.text)
        elif isinstance(stmt, EmptyStatement):
            pass
        elif isinstance(stmt, BlockStatement):
            self._emit_line("{")
            self._format_block_contents(stmt)
            self._emit_line("}")
        elif isinstance(stmt, LabeledStatement):
            self._output_lines.append(self._indent(max(self._indent_level - 1, 0)) + f"{stmt.label}:")
            if not isinstance(stmt.statement, EmptyStatement):
                self._format_statement(stmt.statement, at_end)
            elif not at_end:
                self._emit_line(";")
        elif isinstance(stmt, IfStatement):
            self._format_if_statement(stmt, "")
        elif isinstance(stmt, SwitchStatement):
            header = self._format_header(stmt.init, self._format_optional(stmt.tag))
            self._format_clauses("switch" + header, stmt.clauses)
        elif isinstance(stmt, TypeSwitchStatement):
            header = self._format_header(stmt.init, self._format_simple_statement(stmt.guard))
            self._format_clauses("switch" + header, stmt.clauses)
        elif isinstance(stmt, SelectStatement):
            self._format_clauses("select", stmt.clauses)
        elif isinstance(stmt, ForStatement):
            self._format_for_statement(stmt)
        elif isinstance(stmt, RangeStatement):
            self._format_range_statement(stmt)
        elif isinstance(stmt, DeclarationStatement):
            self._format_gen_declaration(stmt.declaration)
        elif isinstance(stmt, ReturnStatement):
            if stmt.results:
                self._emit_line("return " + self._format_expression_list(stmt.results))
            else:
                self._emit_line("return")
        elif isinstance(stmt, GoStatement):
            self._emit_line("go " + self._format_expression(stmt.call))
        elif isinstance(stmt, DeferStatement):
            self._emit_line("defer " + self._format_expression(stmt.call))
        elif isinstance(stmt, BranchStatement):
            if stmt.label:
                self._emit_line(f"{stmt.kind.value} {stmt.label}")
            else:
                self._emit_line(stmt.kind.value)
        else:
            self._emit_line(self._format_simple_statement(stmt))

    def _format_simple_statement(self, stmt: Statement) -> str:
        """Format a statement that fits on one line (also used in headers)."""
        if isinstance(stmt, ExpressionStatement):
            return self._format_expression(stmt.expression)
        if isinstance(stmt, AssignmentStatement):
            targets = self._format_expression_list(stmt.targets)
            values = self._format_expression_list(stmt.values)
            return f"{targets} {ASSIGN_OP_SYMBOLS[stmt.operator]} {values}"
        if isinstance(stmt, IncDecStatement):
            return self._format_expression(stmt.target) + INC_DEC_SYMBOLS[stmt.operator]
        if isinstance(stmt, SendStatement):
            return f"{self._format_expression(stmt.channel)} <- {self._format_expression(stmt.value)}"
        raise PrintError(f"Cannot print statement {type(stmt).__name__}", stmt.location)

    def _format_header(self, init: Statement | None, rest: str) -> str:
        """Format ``[init; ]rest`` with a leading space, or nothing if both are empty."""
        if init is not None:
            return f" {self._format_simple_statement(init)}; {rest}".rstrip()
        if rest:
            return " " + rest
        return ""

    def _format_if_statement(self, stmt: IfStatement, prefix: str) -> None:
        """Format an if statement; ``prefix`` is ``} else `` for else-if chains."""
        header = self._format_header(stmt.init, self._format_expression(stmt.condition))
        self._emit_line(f"{prefix}if{header} {{")
        self._format_block_contents(stmt.body)

        if isinstance(stmt.else_branch, IfStatement):
            self._format_if_statement(stmt.else_branch, "} else ")
        elif isinstance(stmt.else_branch, BlockStatement):
            self._emit_line("} else {")
            self._format_block_contents(stmt.else_branch)
            self._emit_line("}")
        else:
            self._emit_line("}")

    def _format_clauses(self, header: str, clauses: tuple[CaseClause, ...] | tuple[CommClause, ...]) -> None:
        """Format a switch or select body; clauses sit at the statement's indent."""
        self._emit_line(header + " {")
        for clause in clauses:
            for comment in clause.comments:
                self._emit_line(comment)
            if isinstance(clause, CaseClause):
                if clause.is_default:
                    self._emit_line("default:")
                else:
                    self._emit_line(f"case {self._format_expression_list(clause.expressions)}:")
            elif clause.comm is None:
                self._emit_line("default:")
            else:
                self._emit_line(f"case {self._format_simple_statement(clause.comm)}:")
            self._indent_level += 1
            self._format_statements(clause.body)
            self._indent_level -= 1
        self._emit_line("}")

    def _format_for_statement(self, stmt: ForStatement) -> None:
        """Format a for loop in its three-clause, condition-only or infinite form."""
        if stmt.init is None and stmt.post is None:
            if stmt.condition is None:
                header = "for"
            else:
                header = "for " + self._format_expression(stmt.condition)
        else:
            init = self._format_simple_statement(stmt.init) if stmt.init is not None else ""
            cond = self._format_optional(stmt.condition)
            post = self._format_simple_statement(stmt.post) if stmt.post is not None else ""
            header = f"for {init}; {cond}; {post}".rstrip()

        self._emit_line(header + " {")
        self._format_block_contents(stmt.body)
        self._emit_line("}")

    def _format_range_statement(self, stmt: RangeStatement) -> None:
        iterable = self._format_expression(stmt.iterable)
        if stmt.key is None:
            header = f"for range {iterable}"
        else:
            variables = self._format_expression(stmt.key)
            if stmt.value is not None:
                variables += ", " + self._format_expression(stmt.value)
            operator = ASSIGN_OP_SYMBOLS[stmt.operator or AssignOperator.DEFINE]
            header = f"for {variables} {operator} range {iterable}"

        self._emit_line(header + " {")
        self._format_block_contents(stmt.body)
        self._emit_line("}")

    def _format_block_contents(self, block: BlockStatement) -> None:
        """Format the contents of a block."""
        self._indent_level += 1
        self._format_statements(block.statements)
        self._indent_level -= 1

    # -------------------------------------------------------------------------
    # Expression Formatting
    # -------------------------------------------------------------------------

    def _format_optional(self, expr: Expression | None) -> str:
        return self._format_expression(expr) if expr is not None else ""

    def _format_expression_list(self, exprs: tuple[Expression, ...]) -> str:
        return ", ".join(self._format_expression(e) for e in exprs)

    def _format_expression(self, expr: Expression) -> str:
        """Format an expression to a string (function literals span lines)."""
        if isinstance(expr, Identifier):
            return expr.name
        elif isinstance(expr, BasicLiteral):
            return expr.value
        elif isinstance(expr, BinaryExpression):
            left = self._format_expression(expr.left)
            right = self._format_expression(expr.right)
            return f"{left} {BINARY_OP_SYMBOLS[expr.operator]} {right}"
        elif isinstance(expr, UnaryExpression):
            return self._format_unary_expression(expr)
        elif isinstance(expr, StarExpression):
            return "*" + self._format_expression(expr.operand)
        elif isinstance(expr, ParenExpression):
            return f"({self._format_expression(expr.inner)})"
        elif isinstance(expr, SelectorExpression):
            return f"{self._format_expression(expr.operand)}.{expr.selector}"
        elif isinstance(expr, IndexExpression):
            return f"{self._format_expression(expr.operand)}[{self._format_expression(expr.index)}]"
        elif isinstance(expr, IndexListExpression):
            return f"{self._format_expression(expr.operand)}[{self._format_expression_list(expr.indices)}]"
        elif isinstance(expr, SliceExpression):
            parts = [self._format_optional(expr.low), self._format_optional(expr.high)]
            if expr.three_index:
                parts.append(self._format_optional(expr.max))
            return f"{self._format_expression(expr.operand)}[{':'.join(parts)}]"
        elif isinstance(expr, TypeAssertExpression):
            asserted = "type" if expr.type is None else self._format_expression(expr.type)
            return f"{self._format_expression(expr.operand)}.({asserted})"
        elif isinstance(expr, CallExpression):
            arguments = self._format_expression_list(expr.arguments)
            if expr.has_ellipsis:
                arguments += "..."
            return f"{self._format_expression(expr.function)}({arguments})"
        elif isinstance(expr, CompositeLiteral):
            elements = self._format_expression_list(expr.elements)
            return f"{self._format_optional(expr.type)}{{{elements}}}"
        elif isinstance(expr, KeyValueExpression):
            return f"{self._format_expression(expr.key)}: {self._format_expression(expr.value)}"
        elif isinstance(expr, FuncLiteral):
            return "func" + self._format_signature(expr.type) + " " + self._format_nested_block(expr.body)
        elif isinstance(expr, EllipsisExpression):
            return "..." + self._format_optional(expr.element)
        elif isinstance(expr, ArrayType):
            return f"[{self._format_optional(expr.length)}]{self._format_expression(expr.element)}"
        elif isinstance(expr, MapType):
            return f"map[{self._format_expression(expr.key)}]{self._format_expression(expr.value)}"
        elif isinstance(expr, ChanType):
            value = self._format_expression(expr.value)
            if expr.direction == ChanDirection.SEND:
                return f"chan<- {value}"
            if expr.direction == ChanDirection.RECV:
                return f"<-chan {value}"
            return f"chan {value}"
        elif isinstance(expr, FuncType):
            return "func" + self._format_signature(expr)
        elif isinstance(expr, StructType):
            return "struct" + self._format_field_block(expr.fields, self._format_struct_field)
        elif isinstance(expr, InterfaceType):
            return "interface" + self._format_field_block(expr.methods, self._format_method)
        raise PrintError(f"Cannot print expression {type(expr).__name__}", expr.location)

    def _format_unary_expression(self, expr: UnaryExpression) -> str:
        """Format a unary expression, keeping ``- -x`` and ``& ^x`` apart."""
        op = UNARY_OP_SYMBOLS[expr.operator]
        operand = self._format_expression(expr.operand)
        if operand and (op[-1] + operand[0]) in DOUBLE_CHAR_TOKENS:
            return f"{op} {operand}"
        return op + operand

    def _format_nested_block(self, block: BlockStatement) -> str:
        """Format a block inside an expression as ``{`` ... ``}`` over several lines."""
        nested = Printer(self.config, self._indent_level + 1)
        body = nested.print_statements(block.statements)
        if body:
            return "{\n" + body + "\n" + self._indent() + "}"
        return "{\n" + self._indent() + "}"

    def _format_field_block(self, fields: tuple[Field, ...], format_field) -> str:
        if not fields:
            return "{}"
        inner = self._indent(self._indent_level + 1)
        lines = [inner + format_field(f) for f in fields]
        return " {\n" + "\n".join(lines) + "\n" + self._indent() + "}"

    # -------------------------------------------------------------------------
    # Signatures and Fields
    # -------------------------------------------------------------------------

    def _format_signature(self, signature: FuncType) -> str:
        """Format ``[type params](params) results`` without the ``func`` keyword."""
        text = self._format_type_params(signature.type_params)
        text += f"({self._format_fields(signature.params)})"
        results = signature.results
        if len(results) == 1 and not results[0].names:
            text += " " + self._format_expression(results[0].type)
        elif results:
            text += f" ({self._format_fields(results)})"
        return text

    def _format_type_params(self, fields: tuple[Field, ...]) -> str:
        return f"[{self._format_fields(fields)}]" if fields else ""

    def _format_fields(self, fields: tuple[Field, ...]) -> str:
        return ", ".join(self._format_param(f) for f in fields)

    def _format_param(self, field: Field) -> str:
        type_text = self._format_expression(field.type)
        if field.names:
            return f"{', '.join(field.names)} {type_text}"
        return type_text

    def _format_struct_field(self, field: Field) -> str:
        self._indent_level += 1
        text = self._format_param(field)
        self._indent_level -= 1
        if field.tag is not None:
            text += " " + field.tag.value
        return text

    def _format_method(self, field: Field) -> str:
        self._indent_level += 1
        if field.names and isinstance(field.type, FuncType):
            text = field.names[0] + self._format_signature(field.type)
        else:
            text = self._format_expression(field.type)
        self._indent_level -= 1
        return text


# =============================================================================
# Convenience Functions
# =============================================================================


def print_file(file: File, config: PrintConfig | None = None) -> str:
    """
    Print a File AST node as Go source text.

    Args:
        file: The tree to print
        config: Optional printing configuration

    Returns:
        The printed source code
    """
    return Printer(config).print_file(file)


def format_source(
    source: str,
    filename: str = "<input>",
    config: PrintConfig | None = None,
) -> str:
    """
    Reformat Go source code without rewriting it.

    Args:
        source: The Go source code to format
        filename: Filename for error reporting
        config: Optional printing configuration

    Returns:
        The formatted source code

    Raises:
        LexerError: If the source cannot be tokenized
        ParserError: If the source cannot be parsed
    """
    tokens = Lexer(source, filename).tokenize()
    tree = Parser(tokens, source, filename).parse()
    return print_file(tree, config)


def format_file(filepath: str | Path, config: PrintConfig | None = None) -> str:
    """
    Format a Go file.

    Raises:
        FileNotFoundError: If the file does not exist
        GoPrepError: If the source cannot be parsed
    """
    path = Path(filepath)
    source = path.read_text(encoding="utf-8")
    return format_source(source, str(path), config)


def get_diff(before: str, after: str, filename: str = "<input>") -> str:
    """
    Get a unified diff between two versions of a file.

    Returns:
        A unified diff string, or empty string if the texts are equal
    """
    if before == after:
        return ""

    diff = difflib.unified_diff(
        before.splitlines(keepends=True),
        after.splitlines(keepends=True),
        fromfile=f"a/{filename}",
        tofile=f"b/{filename}",
    )
    return "".join(diff)
