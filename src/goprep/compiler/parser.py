"""
Go Parser.

A recursive descent parser that transforms a token stream into an Abstract
Syntax Tree (AST). Implements operator precedence parsing for expressions
and the statement, declaration and type grammar of Go, including type
parameters, instantiation and constraint unions.

Comments attached to the first token of a statement, declaration, case
clause, closing brace or end of file are kept in the tree; all other
comments are dropped.
"""

from dataclasses import dataclass
from typing import Optional, Union

from goprep.compiler.tokens import ASSIGN_OPERATORS, Token, TokenType
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
    Spec,
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
    LiteralKind,
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
    BranchKind,
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
from goprep.utils.errors import ParserError, SourceLocation
from goprep.utils.diagnostics import (
    DiagnosticEmitter,
    SourceSpan,
    Diagnostic,
    ErrorCode,
    create_unexpected_token_diagnostic,
    create_unclosed_delimiter_diagnostic,
)


# Operator precedence levels (higher = tighter binding)
class Precedence:
    """Operator precedence levels."""

    NONE = 0
    LOR = 1             # ||
    LAND = 2            # &&
    COMPARISON = 3      # == != < <= > >=
    ADDITIVE = 4        # + - | ^
    MULTIPLICATIVE = 5  # * / % << >> & &^


# Map token types to binary operators
BINARY_OP_MAP: dict[TokenType, BinaryOperator] = {
    TokenType.LOR: BinaryOperator.LOR,
    TokenType.LAND: BinaryOperator.LAND,
    # Comparison
    TokenType.EQ: BinaryOperator.EQ,
    TokenType.NE: BinaryOperator.NE,
    TokenType.LT: BinaryOperator.LT,
    TokenType.LE: BinaryOperator.LE,
    TokenType.GT: BinaryOperator.GT,
    TokenType.GE: BinaryOperator.GE,
    # Additive
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUB,
    TokenType.PIPE: BinaryOperator.OR,
    TokenType.CARET: BinaryOperator.XOR,
    # Multiplicative
    TokenType.STAR: BinaryOperator.MUL,
    TokenType.SLASH: BinaryOperator.DIV,
    TokenType.PERCENT: BinaryOperator.MOD,
    TokenType.SHL: BinaryOperator.SHL,
    TokenType.SHR: BinaryOperator.SHR,
    TokenType.AMP: BinaryOperator.AND,
    TokenType.AND_NOT: BinaryOperator.AND_NOT,
}

# Map token types to their precedence
PRECEDENCE_MAP: dict[TokenType, int] = {
    TokenType.LOR: Precedence.LOR,
    TokenType.LAND: Precedence.LAND,
    TokenType.EQ: Precedence.COMPARISON,
    TokenType.NE: Precedence.COMPARISON,
    TokenType.LT: Precedence.COMPARISON,
    TokenType.LE: Precedence.COMPARISON,
    TokenType.GT: Precedence.COMPARISON,
    TokenType.GE: Precedence.COMPARISON,
    TokenType.PLUS: Precedence.ADDITIVE,
    TokenType.MINUS: Precedence.ADDITIVE,
    TokenType.PIPE: Precedence.ADDITIVE,
    TokenType.CARET: Precedence.ADDITIVE,
    TokenType.STAR: Precedence.MULTIPLICATIVE,
    TokenType.SLASH: Precedence.MULTIPLICATIVE,
    TokenType.PERCENT: Precedence.MULTIPLICATIVE,
    TokenType.SHL: Precedence.MULTIPLICATIVE,
    TokenType.SHR: Precedence.MULTIPLICATIVE,
    TokenType.AMP: Precedence.MULTIPLICATIVE,
    TokenType.AND_NOT: Precedence.MULTIPLICATIVE,
}

UNARY_OP_MAP: dict[TokenType, UnaryOperator] = {
    TokenType.PLUS: UnaryOperator.POS,
    TokenType.MINUS: UnaryOperator.NEG,
    TokenType.NOT: UnaryOperator.NOT,
    TokenType.CARET: UnaryOperator.XOR,
    TokenType.AMP: UnaryOperator.ADDR,
    TokenType.TILDE: UnaryOperator.TILDE,
}

ASSIGN_OP_MAP: dict[TokenType, AssignOperator] = {
    TokenType.ASSIGN: AssignOperator.ASSIGN,
    TokenType.DEFINE: AssignOperator.DEFINE,
    TokenType.ADD_ASSIGN: AssignOperator.ADD_ASSIGN,
    TokenType.SUB_ASSIGN: AssignOperator.SUB_ASSIGN,
    TokenType.MUL_ASSIGN: AssignOperator.MUL_ASSIGN,
    TokenType.QUO_ASSIGN: AssignOperator.QUO_ASSIGN,
    TokenType.REM_ASSIGN: AssignOperator.REM_ASSIGN,
    TokenType.AND_ASSIGN: AssignOperator.AND_ASSIGN,
    TokenType.OR_ASSIGN: AssignOperator.OR_ASSIGN,
    TokenType.XOR_ASSIGN: AssignOperator.XOR_ASSIGN,
    TokenType.SHL_ASSIGN: AssignOperator.SHL_ASSIGN,
    TokenType.SHR_ASSIGN: AssignOperator.SHR_ASSIGN,
    TokenType.AND_NOT_ASSIGN: AssignOperator.AND_NOT_ASSIGN,
}

LITERAL_KIND_MAP: dict[TokenType, LiteralKind] = {
    TokenType.INT: LiteralKind.INT,
    TokenType.FLOAT: LiteralKind.FLOAT,
    TokenType.IMAG: LiteralKind.IMAG,
    TokenType.CHAR: LiteralKind.CHAR,
    TokenType.STRING: LiteralKind.STRING,
}

BRANCH_KIND_MAP: dict[TokenType, BranchKind] = {
    TokenType.BREAK: BranchKind.BREAK,
    TokenType.CONTINUE: BranchKind.CONTINUE,
    TokenType.GOTO: BranchKind.GOTO,
    TokenType.FALLTHROUGH: BranchKind.FALLTHROUGH,
}

DECL_KIND_MAP: dict[TokenType, DeclKind] = {
    TokenType.IMPORT: DeclKind.IMPORT,
    TokenType.CONST: DeclKind.CONST,
    TokenType.TYPE: DeclKind.TYPE,
    TokenType.VAR: DeclKind.VAR,
}

# Tokens that can start a type (used to detect unparenthesized results)
TYPE_START_TOKENS: frozenset[TokenType] = frozenset(
    {
        TokenType.IDENTIFIER,
        TokenType.LBRACKET,
        TokenType.STRUCT,
        TokenType.STAR,
        TokenType.FUNC,
        TokenType.INTERFACE,
        TokenType.MAP,
        TokenType.CHAN,
        TokenType.LPAREN,
        TokenType.ARROW,
    }
)


@dataclass(frozen=True, slots=True)
class _RangeClause:
    """The ``k, v := range x`` part of a for header, before the body is known."""

    key: Optional[Expression]
    value: Optional[Expression]
    operator: Optional[AssignOperator]
    iterable: Expression


# Simple statement parsing modes
_BASIC = 0
_LABEL_OK = 1
_RANGE_OK = 2


class Parser:
    """
    Recursive descent parser for Go.

    Parses a list of tokens into an Abstract Syntax Tree.

    Usage:
        parser = Parser(tokens)
        tree = parser.parse()
    """

    def __init__(self, tokens: list[Token], source: str = "",
                 filename: str = "<input>") -> None:
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer
            source: Optional source code for rich diagnostics
            filename: Optional filename for error reporting
        """
        self.tokens = tokens
        self.pos = 0
        self._source_lines: list[str] = source.splitlines() if source else []
        self._source = source
        self._filename = filename
        self._emitter: Optional[DiagnosticEmitter] = None
        self._delimiter_stack: list[tuple[str, SourceLocation]] = []  # Track open delimiters
        self.diagnostics: list[Diagnostic] = []

        # < 0 inside control clause headers, where `T{` starts the body
        self._expr_level = 0
        # Token positions whose comments already went into the tree
        self._taken_comments: set[int] = set()

        if source:
            self._emitter = DiagnosticEmitter(source, filename)

    @property
    def _current(self) -> Token:
        """Get the current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[self.pos]

    @property
    def _previous(self) -> Token:
        """Get the previous token."""
        return self.tokens[self.pos - 1] if self.pos > 0 else self.tokens[0]

    def _peek(self, offset: int = 1) -> Token:
        """Peek at a token ahead of the current position."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _is_at_end(self) -> bool:
        """Check if we've reached the end of tokens."""
        return self._current.type == TokenType.EOF

    def _check(self, *types: TokenType) -> bool:
        """Check if the current token is one of the given types."""
        return self._current.type in types

    def _advance(self) -> Token:
        """Consume and return the current token."""
        token = self._current
        if not self._is_at_end():
            self.pos += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        """Consume current token if it matches one of the given types."""
        if self._check(*types):
            self._advance()
            return True
        return False

    def _expect(self, token_type: TokenType, message: str, expected: Optional[str] = None) -> Token:
        """Consume current token if it matches, else raise error."""
        if self._check(token_type):
            return self._advance()
        raise self._error_with_context(message, expected=expected)

    def _expect_semicolon(self) -> None:
        """Consume a statement terminator; it may be omitted before ')' or '}'."""
        if self._check(TokenType.RPAREN, TokenType.RBRACE):
            return
        if self._match(TokenType.SEMICOLON):
            return
        raise self._error_with_context(
            f"Expected ';' or newline, found {self._describe(self._current)}",
            expected="';'",
        )

    @staticmethod
    def _describe(token: Token) -> str:
        """Human-readable name of a token for error messages."""
        if token.type == TokenType.EOF:
            return "end of file"
        if token.is_inserted_semicolon:
            return "newline"
        return repr(token.value)

    def _line_text(self, location: SourceLocation) -> Optional[str]:
        if 1 <= location.line <= len(self._source_lines):
            return self._source_lines[location.line - 1]
        return None

    def _error(self, message: str) -> ParserError:
        """Create a parser error with location info."""
        token = self._current
        return ParserError(message, token.location, self._line_text(token.location))

    def _error_with_context(self, message: str, expected: Optional[str] = None) -> ParserError:
        """Create a parser error with rich diagnostic context."""
        token = self._current
        diagnostic: Optional[Diagnostic] = None

        if self._emitter and self._source:
            span = SourceSpan.from_location(
                token.location.line,
                token.location.column,
                len(str(token.value)) if token.value and token.value != "\n" else 1,
                self._filename,
            )

            found = self._describe(token)
            if expected:
                diagnostic = create_unexpected_token_diagnostic(
                    self._emitter,
                    expected,
                    found,
                    span,
                )
            else:
                diagnostic = self._emitter.error(
                    ErrorCode.E0201,
                    message,
                    span,
                ).emit()

            self.diagnostics.append(diagnostic)

        error = ParserError(message, token.location, self._line_text(token.location))
        error.diagnostic = diagnostic
        return error

    def _error_unclosed_delimiter(self, delimiter: str, open_loc: SourceLocation) -> ParserError:
        """Create an error for an unclosed delimiter with helpful context."""
        token = self._current
        diagnostic: Optional[Diagnostic] = None

        if self._emitter and self._source:
            open_span = SourceSpan.from_location(
                open_loc.line,
                open_loc.column,
                1,
                self._filename,
            )
            error_span = SourceSpan.from_location(
                token.location.line,
                token.location.column,
                1,
                self._filename,
            )

            diagnostic = create_unclosed_delimiter_diagnostic(
                self._emitter,
                delimiter,
                open_span,
                error_span,
            )
            self.diagnostics.append(diagnostic)

        error = ParserError(
            f"Unclosed delimiter '{delimiter}' opened at {open_loc.line}:{open_loc.column}",
            token.location,
            self._line_text(token.location),
        )
        error.diagnostic = diagnostic
        return error

    def get_diagnostics(self) -> list[Diagnostic]:
        """Get all rich diagnostics emitted during parsing."""
        return self.diagnostics

    def render_diagnostics(self, use_color: bool = True) -> str:
        """Render all diagnostics as formatted strings."""
        if self._emitter:
            return self._emitter.render_all(use_color)
        return ""

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    def _take_comments(self) -> tuple[str, ...]:
        """Claim the comments attached to the current token (at most once)."""
        token = self._current
        if not token.comments or self.pos in self._taken_comments:
            return ()
        self._taken_comments.add(self.pos)
        return token.comments

    def _comment_statements(self) -> list[Statement]:
        loc = self._current.location
        return [CommentStatement(text, location=loc) for text in self._take_comments()]

    # -------------------------------------------------------------------------
    # File Parsing
    # -------------------------------------------------------------------------

    def parse(self) -> File:
        """
        Parse an entire source file.

        Returns:
            The root File AST node.
        """
        loc = self._current.location
        doc_detached = self._current.comments_detached
        doc = self._take_comments()

        self._expect(TokenType.PACKAGE, "Expected 'package' clause", expected="'package'")
        package = self._expect(TokenType.IDENTIFIER, "Expected package name").value
        self._expect_semicolon()

        declarations: list[Declaration] = []
        while True:
            detached = self._current.comments_detached
            comments = self._take_comments()
            if comments:
                declarations.append(
                    CommentGroup(comments, detached, location=self._current.location)
                )
            if self._is_at_end():
                break
            declarations.append(self._parse_declaration())

        return File(package, tuple(declarations), doc, doc_detached, location=loc)

    def _parse_declaration(self) -> Declaration:
        """Parse a top-level declaration followed by its terminator."""
        if self._check(TokenType.FUNC):
            decl: Declaration = self._parse_func_declaration()
        elif self._current.type in DECL_KIND_MAP:
            decl = self._parse_gen_declaration()
        else:
            raise self._error_with_context(
                f"Expected declaration, found {self._describe(self._current)}"
            )
        self._expect_semicolon()
        return decl

    def _parse_gen_declaration(self) -> GenDeclaration:
        """
        Parse an import, const, type or var declaration.

        Handles:
            var x int
            const (
                A = iota
                B
            )
        """
        loc = self._current.location
        kind = DECL_KIND_MAP[self._advance().type]
        parse_spec = {
            DeclKind.IMPORT: self._parse_import_spec,
            DeclKind.CONST: self._parse_value_spec,
            DeclKind.VAR: self._parse_value_spec,
            DeclKind.TYPE: self._parse_type_spec,
        }[kind]

        if self._check(TokenType.LPAREN):
            open_loc = self._advance().location
            specs: list[Spec] = []
            while not self._check(TokenType.RPAREN, TokenType.EOF):
                specs.append(parse_spec())
                self._expect_semicolon()
            if self._is_at_end():
                raise self._error_unclosed_delimiter("(", open_loc)
            self._advance()
            return GenDeclaration(kind, tuple(specs), grouped=True, location=loc)

        return GenDeclaration(kind, (parse_spec(),), location=loc)

    def _parse_import_spec(self) -> ImportSpec:
        loc = self._current.location
        name = None
        if self._check(TokenType.IDENTIFIER, TokenType.DOT):
            name = self._advance().value
        path = self._expect(TokenType.STRING, "Expected import path", expected="string literal")
        return ImportSpec(path.value, name, location=loc)

    def _parse_value_spec(self) -> ValueSpec:
        loc = self._current.location
        names = self._parse_identifier_list()
        type_expr = None
        if not self._check(TokenType.ASSIGN, TokenType.SEMICOLON, TokenType.RPAREN):
            type_expr = self._parse_type()
        values: list[Expression] = []
        if self._match(TokenType.ASSIGN):
            values = self._parse_expression_list()
        return ValueSpec(tuple(names), type_expr, tuple(values), location=loc)

    def _parse_type_spec(self) -> TypeSpec:
        loc = self._current.location
        name = self._expect(TokenType.IDENTIFIER, "Expected type name").value
        type_params: tuple[Field, ...] = ()
        if self._is_type_parameter_list():
            type_params = self._parse_type_params()
        is_alias = self._match(TokenType.ASSIGN)
        return TypeSpec(name, self._parse_type(), is_alias, type_params, location=loc)

    def _is_type_parameter_list(self) -> bool:
        """
        Decide whether ``[`` after a type name opens type parameters.

        ``type A [N]int`` declares an array while ``type S[T any] []T`` is
        generic. A comma inside the brackets, or a name followed by the start
        of a constraint, means type parameters.
        """
        if not self._check(TokenType.LBRACKET) or self._peek().type != TokenType.IDENTIFIER:
            return False
        _, has_comma = self._scan_brackets()
        if has_comma:
            return True
        after = self._peek(2)
        if after.type == TokenType.LBRACKET:
            return self._peek(3).type == TokenType.RBRACKET
        return after.type in (
            TokenType.IDENTIFIER,
            TokenType.TILDE,
            TokenType.INTERFACE,
            TokenType.FUNC,
            TokenType.MAP,
            TokenType.CHAN,
            TokenType.STRUCT,
        )

    def _scan_brackets(self, offset: int = 0) -> tuple[int, bool]:
        """
        Find the ``]`` matching the ``[`` at ``offset`` without consuming tokens.

        Returns:
            The offset of the closing bracket (or of EOF) and whether a comma
            appears directly inside the brackets.
        """
        depth = 0
        has_comma = False
        while True:
            token = self._peek(offset)
            if token.type == TokenType.EOF:
                return offset, has_comma
            if token.type in (TokenType.LBRACKET, TokenType.LPAREN, TokenType.LBRACE):
                depth += 1
            elif token.type in (TokenType.RBRACKET, TokenType.RPAREN, TokenType.RBRACE):
                depth -= 1
                if depth == 0:
                    return offset, has_comma
            elif token.type == TokenType.COMMA and depth == 1:
                has_comma = True
            offset += 1

    def _parse_type_params(self) -> tuple[Field, ...]:
        """
        Parse a type parameter list.

        Handles:
            [T any]
            [K comparable, V any]
            [S ~[]E, E cmp.Ordered]
        """
        open_loc = self._expect(TokenType.LBRACKET, "Expected '['", expected="'['").location
        fields: list[Field] = []
        while not self._check(TokenType.RBRACKET, TokenType.EOF):
            loc = self._current.location
            names = self._parse_identifier_list()
            fields.append(Field(tuple(names), self._parse_constraint(), location=loc))
            if not self._match(TokenType.COMMA):
                break
        if self._is_at_end():
            raise self._error_unclosed_delimiter("[", open_loc)
        self._expect(TokenType.RBRACKET, "Expected ']' after type parameters", expected="']'")
        if not fields:
            raise ParserError("Empty type parameter list", open_loc, self._line_text(open_loc))
        return tuple(fields)

    def _parse_constraint(self) -> Expression:
        """Parse a union of constraint terms: ``~int | ~string | fmt.Stringer``."""
        constraint = self._parse_constraint_term()
        while self._match(TokenType.PIPE):
            term = self._parse_constraint_term()
            constraint = BinaryExpression(
                constraint, BinaryOperator.OR, term, location=constraint.location
            )
        return constraint

    def _parse_constraint_term(self) -> Expression:
        if self._check(TokenType.TILDE):
            loc = self._advance().location
            return UnaryExpression(UnaryOperator.TILDE, self._parse_type(), location=loc)
        return self._parse_type()

    def _parse_func_declaration(self) -> FuncDeclaration:
        """
        Parse a function or method declaration.

        Handles:
            func name(params) results { body }
            func (r *T) name(params) results { body }
            func name[T any](params) results { body }
            func name(params) results          - no body
        """
        loc = self._current.location
        self._expect(TokenType.FUNC, "Expected 'func'")

        receiver: tuple[Field, ...] = ()
        if self._check(TokenType.LPAREN):
            receiver = self._parse_parameters()

        name = self._expect(TokenType.IDENTIFIER, "Expected function name").value
        type_params: tuple[Field, ...] = ()
        if self._check(TokenType.LBRACKET):
            type_params = self._parse_type_params()
        signature = self._parse_signature(loc, type_params)

        body = None
        if self._check(TokenType.LBRACE):
            body = self._parse_block()

        return FuncDeclaration(name, receiver, signature, body, location=loc)

    def _parse_identifier_list(self) -> list[str]:
        names = [self._expect(TokenType.IDENTIFIER, "Expected identifier").value]
        while self._match(TokenType.COMMA):
            names.append(self._expect(TokenType.IDENTIFIER, "Expected identifier").value)
        return names

    # -------------------------------------------------------------------------
    # Signatures and Types
    # -------------------------------------------------------------------------

    def _parse_signature(self, loc: SourceLocation,
                         type_params: tuple[Field, ...] = ()) -> FuncType:
        """Parse parameters and optional results."""
        params = self._parse_parameters()
        results: tuple[Field, ...] = ()
        if self._check(TokenType.LPAREN):
            results = self._parse_parameters()
        elif self._current.type in TYPE_START_TOKENS:
            result_type = self._parse_type()
            results = (Field((), result_type, location=result_type.location),)
        return FuncType(params, results, type_params, location=loc)

    def _parse_parameters(self) -> tuple[Field, ...]:
        """
        Parse a parenthesized parameter list.

        Go allows either all-named parameters, where consecutive names share
        the type that follows them (``a, b int, s string``), or all-anonymous
        parameters (``int, string``).
        """
        open_loc = self._expect(TokenType.LPAREN, "Expected '('", expected="'('").location
        self._delimiter_stack.append(("(", open_loc))

        entries: list[tuple[Optional[str], Optional[Expression], SourceLocation]] = []
        while not self._check(TokenType.RPAREN, TokenType.EOF):
            loc = self._current.location
            if (
                self._check(TokenType.IDENTIFIER)
                and self._peek().type != TokenType.DOT
                and not self._is_instantiated_type(TokenType.COMMA, TokenType.RPAREN)
            ):
                name = self._advance().value
                if self._check(TokenType.COMMA, TokenType.RPAREN):
                    entries.append((name, None, loc))
                else:
                    entries.append((name, self._parse_parameter_type(), loc))
            else:
                entries.append((None, self._parse_parameter_type(), loc))
            if not self._match(TokenType.COMMA):
                break

        if self._is_at_end():
            raise self._error_unclosed_delimiter("(", open_loc)
        self._expect(TokenType.RPAREN, "Expected ')' after parameters", expected="')'")
        self._delimiter_stack.pop()

        named = any(name is not None and type_expr is not None for name, type_expr, _ in entries)
        fields: list[Field] = []

        if not named:
            for name, type_expr, loc in entries:
                if type_expr is None:
                    type_expr = Identifier(name, location=loc)
                fields.append(Field((), type_expr, location=loc))
            return tuple(fields)

        pending: list[str] = []
        group_loc: Optional[SourceLocation] = None
        for name, type_expr, loc in entries:
            if name is None:
                raise ParserError("Mixed named and unnamed parameters", loc, self._line_text(loc))
            pending.append(name)
            group_loc = group_loc or loc
            if type_expr is not None:
                fields.append(Field(tuple(pending), type_expr, location=group_loc))
                pending = []
                group_loc = None
        if pending:
            raise ParserError("Missing parameter type", group_loc, self._line_text(group_loc))
        return tuple(fields)

    def _is_instantiated_type(self, *followers: TokenType) -> bool:
        """
        Check for a generic type name such as ``List[T]`` at the current token.

        ``xs []int`` and ``xs [3]int`` name a field or parameter, whereas
        ``List[T]`` is a type on its own and is followed by one of
        ``followers``.
        """
        if self._peek().type != TokenType.LBRACKET or self._peek(2).type == TokenType.RBRACKET:
            return False
        close, _ = self._scan_brackets(1)
        return self._peek(close + 1).type in followers

    def _parse_parameter_type(self) -> Expression:
        if self._check(TokenType.ELLIPSIS):
            loc = self._advance().location
            return EllipsisExpression(self._parse_type(), location=loc)
        return self._parse_type()

    def _parse_type(self) -> Expression:
        """
        Parse a type expression.

        Handles:
            T, pkg.T, *T, []T, [N]T, [...]T, map[K]V,
            chan T, chan<- T, <-chan T, func(...) ..., struct{...},
            interface{...}, (T)
        """
        loc = self._current.location
        token = self._current

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            name: Expression = Identifier(token.value, location=loc)
            if self._match(TokenType.DOT):
                selector = self._expect(TokenType.IDENTIFIER, "Expected type name after '.'").value
                name = SelectorExpression(name, selector, location=loc)
            if self._check(TokenType.LBRACKET):
                return self._parse_type_arguments(name)
            return name

        if token.type == TokenType.LBRACKET:
            self._advance()
            if self._match(TokenType.RBRACKET):
                return ArrayType(None, self._parse_type(), location=loc)
            self._expr_level += 1
            if self._check(TokenType.ELLIPSIS) and self._peek().type == TokenType.RBRACKET:
                length: Expression = EllipsisExpression(location=self._advance().location)
            else:
                length = self._parse_expression()
            self._expr_level -= 1
            self._expect(TokenType.RBRACKET, "Expected ']' after array length", expected="']'")
            return ArrayType(length, self._parse_type(), location=loc)

        if token.type == TokenType.STAR:
            self._advance()
            return StarExpression(self._parse_type(), location=loc)

        if token.type == TokenType.MAP:
            self._advance()
            self._expect(TokenType.LBRACKET, "Expected '[' after 'map'", expected="'['")
            key = self._parse_type()
            self._expect(TokenType.RBRACKET, "Expected ']' after map key type", expected="']'")
            return MapType(key, self._parse_type(), location=loc)

        if token.type == TokenType.CHAN:
            self._advance()
            direction = ChanDirection.SEND if self._match(TokenType.ARROW) else ChanDirection.BOTH
            return ChanType(direction, self._parse_type(), location=loc)

        if token.type == TokenType.ARROW:
            self._advance()
            self._expect(TokenType.CHAN, "Expected 'chan' after '<-'", expected="'chan'")
            return ChanType(ChanDirection.RECV, self._parse_type(), location=loc)

        if token.type == TokenType.FUNC:
            self._advance()
            return self._parse_signature(loc)

        if token.type == TokenType.STRUCT:
            return self._parse_struct_type()

        if token.type == TokenType.INTERFACE:
            return self._parse_interface_type()

        if token.type == TokenType.LPAREN:
            self._advance()
            inner = self._parse_type()
            self._expect(TokenType.RPAREN, "Expected ')' after type", expected="')'")
            return ParenExpression(inner, location=loc)

        raise self._error_with_context(f"Expected type, found {self._describe(token)}", expected="type")

    def _parse_type_arguments(self, generic: Expression) -> Expression:
        """Parse ``[T1, T2]`` instantiating a generic type name."""
        open_loc = self._advance().location
        self._expr_level += 1
        arguments: list[Expression] = []
        while not self._check(TokenType.RBRACKET, TokenType.EOF):
            arguments.append(self._parse_type())
            if not self._match(TokenType.COMMA):
                break
        self._expr_level -= 1
        if self._is_at_end():
            raise self._error_unclosed_delimiter("[", open_loc)
        self._expect(TokenType.RBRACKET, "Expected ']' after type arguments", expected="']'")
        return self._instantiate(generic, arguments, open_loc)

    def _instantiate(self, generic: Expression, arguments: list[Expression],
                     open_loc: SourceLocation) -> Expression:
        if not arguments:
            raise ParserError("Expected type argument", open_loc, self._line_text(open_loc))
        if len(arguments) == 1:
            return IndexExpression(generic, arguments[0], location=generic.location)
        return IndexListExpression(generic, tuple(arguments), location=generic.location)

    def _parse_struct_type(self) -> StructType:
        """
        Parse a struct type.

        Handles:
            struct {
                X, Y int
                Name string `json:"name"`
                io.Reader
                *Node
            }
        """
        loc = self._current.location
        self._expect(TokenType.STRUCT, "Expected 'struct'")
        open_loc = self._expect(TokenType.LBRACE, "Expected '{' after 'struct'", expected="'{'").location

        fields: list[Field] = []
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            field_loc = self._current.location
            field_end = (TokenType.SEMICOLON, TokenType.RBRACE, TokenType.STRING)
            embedded = self._check(TokenType.STAR) or (
                self._check(TokenType.IDENTIFIER)
                and (
                    self._peek().type in (TokenType.DOT, *field_end)
                    or self._is_instantiated_type(*field_end)
                )
            )
            if embedded:
                names: tuple[str, ...] = ()
                field_type = self._parse_type()
            else:
                names = tuple(self._parse_identifier_list())
                field_type = self._parse_type()

            tag = None
            if self._check(TokenType.STRING):
                tag_token = self._advance()
                tag = BasicLiteral(LiteralKind.STRING, tag_token.value, location=tag_token.location)

            fields.append(Field(names, field_type, tag, location=field_loc))
            self._expect_semicolon()

        if self._is_at_end():
            raise self._error_unclosed_delimiter("{", open_loc)
        self._advance()
        return StructType(tuple(fields), location=loc)

    def _parse_interface_type(self) -> InterfaceType:
        """
        Parse an interface type.

        Handles:
            interface {
                Len() int
                fmt.Stringer
                ~int | ~float64
            }
        """
        loc = self._current.location
        self._expect(TokenType.INTERFACE, "Expected 'interface'")
        open_loc = self._expect(TokenType.LBRACE, "Expected '{' after 'interface'", expected="'{'").location

        methods: list[Field] = []
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            method_loc = self._current.location
            if self._check(TokenType.IDENTIFIER) and self._peek().type == TokenType.LPAREN:
                name = self._advance().value
                signature = self._parse_signature(method_loc)
                methods.append(Field((name,), signature, location=method_loc))
            else:
                methods.append(Field((), self._parse_constraint(), location=method_loc))
            self._expect_semicolon()

        if self._is_at_end():
            raise self._error_unclosed_delimiter("{", open_loc)
        self._advance()
        return InterfaceType(tuple(methods), location=loc)

    # -------------------------------------------------------------------------
    # Statement Parsing
    # -------------------------------------------------------------------------

    def _parse_block(self) -> BlockStatement:
        """
        Parse a block of statements enclosed in braces.

        Handles:
            { stmt1; stmt2; ... }
        """
        loc = self._current.location
        open_loc = self._current.location

        if not self._check(TokenType.LBRACE):
            raise self._error_with_context("Expected '{' to start block", expected="'{'")
        self._advance()  # consume '{'

        # Track the opening brace for better error messages
        self._delimiter_stack.append(("{", open_loc))

        saved_level = self._expr_level
        self._expr_level = 0
        statements = self._parse_statement_list()
        self._expr_level = saved_level

        # Check for unclosed delimiter
        if self._check(TokenType.EOF):
            self._delimiter_stack.pop()
            raise self._error_unclosed_delimiter("{", open_loc)

        self._expect(TokenType.RBRACE, "Expected '}' to end block", expected="'}'")
        self._delimiter_stack.pop()

        return BlockStatement(tuple(statements), location=loc)

    def _parse_statement_list(self) -> list[Statement]:
        """
        Parse statements up to a closing brace or the next case clause.

        Comments before each statement, and before the closing brace, become
        CommentStatement entries.
        """
        statements: list[Statement] = []
        while True:
            if self._check(TokenType.CASE, TokenType.DEFAULT):
                break
            statements.extend(self._comment_statements())
            if self._check(TokenType.RBRACE, TokenType.EOF):
                break
            if self._match(TokenType.SEMICOLON):
                continue
            statements.append(self._parse_statement())
        return statements

    def _parse_statement(self) -> Statement:
        """Parse a single statement and its terminator."""
        token = self._current
        loc = token.location

        if token.type in (TokenType.CONST, TokenType.TYPE, TokenType.VAR):
            stmt: Statement = DeclarationStatement(self._parse_gen_declaration(), location=loc)
        elif token.type == TokenType.GO:
            self._advance()
            stmt = GoStatement(self._parse_call_operand("go"), location=loc)
        elif token.type == TokenType.DEFER:
            self._advance()
            stmt = DeferStatement(self._parse_call_operand("defer"), location=loc)
        elif token.type == TokenType.RETURN:
            stmt = self._parse_return()
        elif token.type in BRANCH_KIND_MAP:
            stmt = self._parse_branch()
        elif token.type == TokenType.LBRACE:
            stmt = self._parse_block()
        elif token.type == TokenType.IF:
            stmt = self._parse_if()
        elif token.type == TokenType.SWITCH:
            stmt = self._parse_switch()
        elif token.type == TokenType.SELECT:
            stmt = self._parse_select()
        elif token.type == TokenType.FOR:
            stmt = self._parse_for()
        elif token.type == TokenType.SEMICOLON:
            stmt = EmptyStatement(location=loc)
        else:
            simple = self._parse_simple_statement(_LABEL_OK)
            if isinstance(simple, LabeledStatement):
                # The labeled statement consumed its own terminator
                return simple
            stmt = simple

        self._expect_semicolon()
        return stmt

    def _parse_simple_statement(self, mode: int = _BASIC) -> Union[Statement, _RangeClause]:
        """
        Parse a simple statement.

        Handles:
            f(x)              - expression statement
            ch <- v           - send
            i++ / i--         - increment/decrement
            a, b = b, a       - assignment (any assignment operator)
            x := range xs     - range clause (only in for headers)
            label: stmt       - labeled statement (only at statement level)
        """
        loc = self._current.location
        lhs = self._parse_expression_list()
        token = self._current

        if token.type in ASSIGN_OPERATORS:
            self._advance()
            operator = ASSIGN_OP_MAP[token.type]
            if mode == _RANGE_OK and self._check(TokenType.RANGE) and operator in (
                AssignOperator.ASSIGN, AssignOperator.DEFINE
            ):
                self._advance()
                if len(lhs) > 2:
                    raise ParserError(
                        "Range clause permits at most two iteration variables",
                        loc,
                        self._line_text(loc),
                    )
                value = lhs[1] if len(lhs) > 1 else None
                return _RangeClause(lhs[0], value, operator, self._parse_expression())
            rhs = self._parse_expression_list()
            return AssignmentStatement(tuple(lhs), operator, tuple(rhs), location=loc)

        if len(lhs) > 1:
            raise self._error_with_context(
                f"Expected assignment operator, found {self._describe(token)}",
                expected="':=' or '='",
            )

        expr = lhs[0]

        if token.type == TokenType.COLON and mode == _LABEL_OK and isinstance(expr, Identifier):
            self._advance()
            if self._check(TokenType.RBRACE, TokenType.CASE, TokenType.DEFAULT):
                return LabeledStatement(expr.name, EmptyStatement(location=self._current.location), location=loc)
            return LabeledStatement(expr.name, self._parse_statement(), location=loc)

        if token.type == TokenType.ARROW:
            self._advance()
            return SendStatement(expr, self._parse_expression(), location=loc)

        if token.type in (TokenType.INC, TokenType.DEC):
            self._advance()
            operator = IncDecOperator.INC if token.type == TokenType.INC else IncDecOperator.DEC
            return IncDecStatement(expr, operator, location=loc)

        return ExpressionStatement(expr, location=loc)

    def _parse_basic_simple_statement(self) -> Statement:
        stmt = self._parse_simple_statement(_BASIC)
        assert isinstance(stmt, Statement)
        return stmt

    def _parse_call_operand(self, keyword: str) -> Expression:
        call = self._parse_expression()
        inner = call
        while isinstance(inner, ParenExpression):
            inner = inner.inner
        if not isinstance(inner, CallExpression):
            raise ParserError(
                f"Expression in {keyword} must be function call",
                call.location,
                self._line_text(call.location) if call.location else None,
            )
        return call

    def _parse_return(self) -> ReturnStatement:
        loc = self._advance().location
        results: list[Expression] = []
        if not self._check(TokenType.SEMICOLON, TokenType.RBRACE):
            results = self._parse_expression_list()
        return ReturnStatement(tuple(results), location=loc)

    def _parse_branch(self) -> BranchStatement:
        token = self._advance()
        kind = BRANCH_KIND_MAP[token.type]
        label = None
        if kind != BranchKind.FALLTHROUGH and self._check(TokenType.IDENTIFIER):
            label = self._advance().value
        return BranchStatement(kind, label, location=token.location)

    def _condition_of(self, stmt: Optional[Statement], construct: str) -> Expression:
        if stmt is None:
            raise self._error_with_context(f"Missing condition in {construct}")
        if not isinstance(stmt, ExpressionStatement):
            raise ParserError(
                f"Cannot use statement as value in {construct}",
                stmt.location,
                self._line_text(stmt.location) if stmt.location else None,
            )
        return stmt.expression

    def _parse_if(self) -> IfStatement:
        """
        Parse an if statement.

        Handles:
            if cond { ... }
            if init; cond { ... } else if cond { ... } else { ... }
        """
        loc = self._current.location
        self._expect(TokenType.IF, "Expected 'if'")

        if self._check(TokenType.LBRACE):
            raise self._error_with_context("Missing condition in if statement")

        saved_level = self._expr_level
        self._expr_level = -1

        init: Optional[Statement] = None
        stmt: Optional[Statement] = None
        if not self._check(TokenType.SEMICOLON):
            stmt = self._parse_basic_simple_statement()
        if self._check(TokenType.SEMICOLON) and not self._current.is_inserted_semicolon:
            self._advance()
            init = stmt
            stmt = None
            if not self._check(TokenType.LBRACE):
                stmt = self._parse_basic_simple_statement()
        condition = self._condition_of(stmt, "if statement")

        self._expr_level = saved_level

        body = self._parse_block()

        else_branch: Optional[Statement] = None
        if self._match(TokenType.ELSE):
            if self._check(TokenType.IF):
                else_branch = self._parse_if()
            elif self._check(TokenType.LBRACE):
                else_branch = self._parse_block()
            else:
                raise self._error_with_context(
                    "Expected 'if' or '{' after 'else'", expected="if statement or block"
                )

        return IfStatement(init, condition, body, else_branch, location=loc)

    def _parse_switch(self) -> Statement:
        """
        Parse an expression switch or a type switch.

        Handles:
            switch { case cond: ... }
            switch init; tag { case a, b: ... default: ... }
            switch v := x.(type) { case int: ... }
        """
        loc = self._current.location
        self._expect(TokenType.SWITCH, "Expected 'switch'")

        saved_level = self._expr_level
        self._expr_level = -1

        init: Optional[Statement] = None
        header: Optional[Statement] = None
        if not self._check(TokenType.LBRACE):
            if not self._check(TokenType.SEMICOLON):
                header = self._parse_basic_simple_statement()
            if self._check(TokenType.SEMICOLON) and not self._current.is_inserted_semicolon:
                self._advance()
                init = header
                header = None
                if not self._check(TokenType.LBRACE):
                    header = self._parse_basic_simple_statement()

        self._expr_level = saved_level

        is_type_switch = header is not None and self._is_type_switch_guard(header)
        open_loc = self._expect(TokenType.LBRACE, "Expected '{' after switch header", expected="'{'").location
        self._delimiter_stack.append(("{", open_loc))

        clauses: list[CaseClause] = []
        while self._check(TokenType.CASE, TokenType.DEFAULT):
            clauses.append(self._parse_case_clause())

        if self._is_at_end():
            raise self._error_unclosed_delimiter("{", open_loc)
        self._expect(TokenType.RBRACE, "Expected 'case', 'default' or '}' in switch", expected="'}'")
        self._delimiter_stack.pop()

        if is_type_switch:
            return TypeSwitchStatement(init, header, tuple(clauses), location=loc)

        tag = None
        if header is not None:
            tag = self._condition_of(header, "switch statement")
        return SwitchStatement(init, tag, tuple(clauses), location=loc)

    @staticmethod
    def _is_type_switch_guard(stmt: Statement) -> bool:
        """Check for ``x.(type)`` or ``v := x.(type)``."""
        if isinstance(stmt, ExpressionStatement):
            expr = stmt.expression
        elif (
            isinstance(stmt, AssignmentStatement)
            and stmt.operator == AssignOperator.DEFINE
            and len(stmt.targets) == 1
            and len(stmt.values) == 1
        ):
            expr = stmt.values[0]
        else:
            return False
        return isinstance(expr, TypeAssertExpression) and expr.type is None

    def _parse_case_clause(self) -> CaseClause:
        loc = self._current.location
        comments = self._take_comments()

        expressions: list[Expression] = []
        if self._match(TokenType.CASE):
            expressions = self._parse_expression_list()
        else:
            self._expect(TokenType.DEFAULT, "Expected 'case' or 'default'")

        self._expect(TokenType.COLON, "Expected ':' after case", expected="':'")
        body = self._parse_statement_list()
        return CaseClause(tuple(expressions), tuple(body), comments, location=loc)

    def _parse_select(self) -> SelectStatement:
        """
        Parse a select statement.

        Handles:
            select {
            case v := <-ch:
            case out <- v:
            default:
            }
        """
        loc = self._current.location
        self._expect(TokenType.SELECT, "Expected 'select'")
        open_loc = self._expect(TokenType.LBRACE, "Expected '{' after 'select'", expected="'{'").location
        self._delimiter_stack.append(("{", open_loc))

        clauses: list[CommClause] = []
        while self._check(TokenType.CASE, TokenType.DEFAULT):
            clause_loc = self._current.location
            comments = self._take_comments()
            comm: Optional[Statement] = None
            if self._match(TokenType.CASE):
                comm = self._parse_basic_simple_statement()
            else:
                self._advance()
            self._expect(TokenType.COLON, "Expected ':' after select case", expected="':'")
            body = self._parse_statement_list()
            clauses.append(CommClause(comm, tuple(body), comments, location=clause_loc))

        if self._is_at_end():
            raise self._error_unclosed_delimiter("{", open_loc)
        self._expect(TokenType.RBRACE, "Expected 'case', 'default' or '}' in select", expected="'}'")
        self._delimiter_stack.pop()

        return SelectStatement(tuple(clauses), location=loc)

    def _parse_for(self) -> Statement:
        """
        Parse a for loop.

        Handles:
            for { ... }
            for cond { ... }
            for init; cond; post { ... }
            for k, v := range x { ... }
            for range x { ... }
        """
        loc = self._current.location
        self._expect(TokenType.FOR, "Expected 'for'")

        init: Optional[Statement] = None
        condition: Optional[Expression] = None
        post: Optional[Statement] = None
        range_clause: Optional[_RangeClause] = None

        if not self._check(TokenType.LBRACE):
            saved_level = self._expr_level
            self._expr_level = -1

            header: Union[Statement, _RangeClause, None] = None
            if self._check(TokenType.RANGE):
                self._advance()
                range_clause = _RangeClause(None, None, None, self._parse_expression())
            elif not self._check(TokenType.SEMICOLON):
                header = self._parse_simple_statement(_RANGE_OK)
                if isinstance(header, _RangeClause):
                    range_clause = header
                    header = None

            if range_clause is None:
                if self._check(TokenType.SEMICOLON):
                    self._advance()
                    init = header
                    if not self._check(TokenType.SEMICOLON):
                        condition = self._condition_of(
                            self._parse_basic_simple_statement(), "for loop"
                        )
                    self._expect(TokenType.SEMICOLON, "Expected ';' after for loop condition", expected="';'")
                    if not self._check(TokenType.LBRACE):
                        post = self._parse_basic_simple_statement()
                else:
                    condition = self._condition_of(header, "for loop")

            self._expr_level = saved_level

        body = self._parse_block()

        if range_clause is not None:
            return RangeStatement(
                range_clause.key,
                range_clause.value,
                range_clause.operator,
                range_clause.iterable,
                body,
                location=loc,
            )
        return ForStatement(init, condition, post, body, location=loc)

    # -------------------------------------------------------------------------
    # Expression Parsing
    # -------------------------------------------------------------------------

    def _parse_expression_list(self) -> list[Expression]:
        expressions = [self._parse_expression()]
        while self._match(TokenType.COMMA):
            expressions.append(self._parse_expression())
        return expressions

    def _parse_expression(self, min_precedence: int = Precedence.NONE) -> Expression:
        """
        Parse an expression using precedence climbing.

        All Go binary operators are left associative.
        """
        left = self._parse_unary()

        while True:
            precedence = PRECEDENCE_MAP.get(self._current.type, Precedence.NONE)
            if precedence <= min_precedence:
                break

            operator = self._advance()
            right = self._parse_expression(precedence)
            left = BinaryExpression(
                left=left,
                operator=BINARY_OP_MAP[operator.type],
                right=right,
                location=left.location,
            )

        return left

    def _parse_unary(self) -> Expression:
        """Parse a unary expression (prefix operators, then a primary expression)."""
        loc = self._current.location
        token = self._current

        if token.type in UNARY_OP_MAP:
            self._advance()
            return UnaryExpression(UNARY_OP_MAP[token.type], self._parse_unary(), location=loc)

        if token.type == TokenType.ARROW:
            self._advance()
            if self._check(TokenType.CHAN):
                # <-chan T
                self._advance()
                chan_type = ChanType(ChanDirection.RECV, self._parse_type(), location=loc)
                return self._parse_postfix(chan_type)
            return UnaryExpression(UnaryOperator.RECV, self._parse_unary(), location=loc)

        if token.type == TokenType.STAR:
            self._advance()
            return StarExpression(self._parse_unary(), location=loc)

        return self._parse_postfix(self._parse_operand())

    def _parse_operand(self) -> Expression:
        """Parse an operand: name, literal, parenthesized expression, function or type."""
        loc = self._current.location
        token = self._current

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return Identifier(token.value, location=loc)

        if token.is_literal:
            self._advance()
            return BasicLiteral(LITERAL_KIND_MAP[token.type], token.value, location=loc)

        if token.type == TokenType.LPAREN:
            self._advance()
            self._delimiter_stack.append(("(", loc))
            self._expr_level += 1
            inner = self._parse_expression()
            self._expr_level -= 1
            if self._is_at_end():
                raise self._error_unclosed_delimiter("(", loc)
            self._expect(TokenType.RPAREN, "Expected ')' after expression", expected="')'")
            self._delimiter_stack.pop()
            return ParenExpression(inner, location=loc)

        if token.type == TokenType.FUNC:
            self._advance()
            signature = self._parse_signature(loc)
            if self._check(TokenType.LBRACE):
                self._expr_level += 1
                body = self._parse_block()
                self._expr_level -= 1
                return FuncLiteral(signature, body, location=loc)
            return signature

        if token.type in (
            TokenType.LBRACKET,
            TokenType.STRUCT,
            TokenType.MAP,
            TokenType.CHAN,
            TokenType.INTERFACE,
        ):
            return self._parse_type()

        raise self._error_with_context(
            f"Expected expression, found {self._describe(token)}", expected="expression"
        )

    def _parse_postfix(self, expr: Expression) -> Expression:
        """Parse selectors, type assertions, index/slice, calls and composite literals."""
        while True:
            if self._check(TokenType.DOT):
                self._advance()
                if self._check(TokenType.IDENTIFIER):
                    expr = SelectorExpression(expr, self._advance().value, location=expr.location)
                elif self._match(TokenType.LPAREN):
                    if self._match(TokenType.TYPE):
                        asserted = None
                    else:
                        asserted = self._parse_type()
                    self._expect(TokenType.RPAREN, "Expected ')' after type assertion", expected="')'")
                    expr = TypeAssertExpression(expr, asserted, location=expr.location)
                else:
                    raise self._error_with_context(
                        "Expected selector or type assertion", expected="name or '('"
                    )
            elif self._check(TokenType.LBRACKET):
                expr = self._parse_index_or_slice(expr)
            elif self._check(TokenType.LPAREN):
                expr = self._parse_call(expr)
            elif self._check(TokenType.LBRACE) and self._is_composite_literal_type(expr):
                expr = self._parse_literal_value(expr)
            else:
                break
        return expr

    def _is_composite_literal_type(self, expr: Expression) -> bool:
        """
        Decide whether ``{`` after ``expr`` opens a composite literal.

        A bare type name is only accepted outside control clause headers,
        where ``{`` would otherwise start the statement body.
        """
        while isinstance(expr, ParenExpression):
            expr = expr.inner
        if isinstance(expr, (IndexExpression, IndexListExpression)):
            # An instantiated generic type: Set[int]{}
            expr = expr.operand
            if not isinstance(expr, (Identifier, SelectorExpression)):
                return False
        if isinstance(expr, (Identifier, SelectorExpression)):
            return self._expr_level >= 0
        return isinstance(expr, (ArrayType, StructType, MapType))

    def _parse_index_or_slice(self, operand: Expression) -> Expression:
        """
        Parse an index or slice suffix.

        Handles:
            a[i], a[lo:hi], a[:], a[lo:hi:max]
            Map[K, V]         - instantiation with several type arguments
        """
        open_loc = self._advance().location
        self._expr_level += 1

        index: list[Optional[Expression]] = [None, None, None]
        colons = 0
        if not self._check(TokenType.COLON):
            first = self._parse_expression()
            index[0] = first
            if self._check(TokenType.COMMA):
                arguments = [first]
                while self._match(TokenType.COMMA) and not self._check(TokenType.RBRACKET):
                    arguments.append(self._parse_expression())
                self._expr_level -= 1
                if self._is_at_end():
                    raise self._error_unclosed_delimiter("[", open_loc)
                self._expect(TokenType.RBRACKET, "Expected ']' after type arguments", expected="']'")
                return self._instantiate(operand, arguments, open_loc)
        while colons < 2 and self._match(TokenType.COLON):
            colons += 1
            if not self._check(TokenType.COLON, TokenType.RBRACKET):
                index[colons] = self._parse_expression()

        self._expr_level -= 1
        if self._is_at_end():
            raise self._error_unclosed_delimiter("[", open_loc)
        self._expect(TokenType.RBRACKET, "Expected ']' after index", expected="']'")

        if colons == 0:
            if index[0] is None:
                raise ParserError("Expected operand in index expression", open_loc, self._line_text(open_loc))
            return IndexExpression(operand, index[0], location=operand.location)

        if colons == 2 and (index[1] is None or index[2] is None):
            raise ParserError(
                "Middle and final index required in 3-index slice",
                open_loc,
                self._line_text(open_loc),
            )
        return SliceExpression(
            operand,
            index[0],
            index[1],
            index[2],
            three_index=colons == 2,
            location=operand.location,
        )

    def _parse_call(self, function: Expression) -> CallExpression:
        """Parse call arguments, including a trailing ``...``."""
        open_loc = self._advance().location
        self._delimiter_stack.append(("(", open_loc))
        self._expr_level += 1

        arguments: list[Expression] = []
        has_ellipsis = False
        while not self._check(TokenType.RPAREN, TokenType.EOF):
            arguments.append(self._parse_expression())
            if self._match(TokenType.ELLIPSIS):
                has_ellipsis = True
            if not self._match(TokenType.COMMA):
                break

        self._expr_level -= 1
        if self._is_at_end():
            raise self._error_unclosed_delimiter("(", open_loc)
        self._expect(TokenType.RPAREN, "Expected ')' after arguments", expected="')'")
        self._delimiter_stack.pop()

        return CallExpression(function, tuple(arguments), has_ellipsis, location=function.location)

    def _parse_literal_value(self, type_expr: Optional[Expression]) -> CompositeLiteral:
        """
        Parse the braced element list of a composite literal.

        Handles:
            {1, 2, 3}
            {X: 1, Y: 2}
            {{1, 2}, {3, 4}}   - nested literals with elided type
        """
        open_loc = self._advance().location
        loc = type_expr.location if type_expr is not None else open_loc
        self._delimiter_stack.append(("{", open_loc))
        self._expr_level += 1

        elements: list[Expression] = []
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            elements.append(self._parse_element())
            if not self._match(TokenType.COMMA):
                break

        self._expr_level -= 1
        if self._is_at_end():
            raise self._error_unclosed_delimiter("{", open_loc)
        self._expect(
            TokenType.RBRACE, "Expected ',' or '}' in composite literal", expected="',' or '}'"
        )
        self._delimiter_stack.pop()

        return CompositeLiteral(type_expr, tuple(elements), location=loc)

    def _parse_element(self) -> Expression:
        key = self._parse_element_value()
        if self._match(TokenType.COLON):
            return KeyValueExpression(key, self._parse_element_value(), location=key.location)
        return key

    def _parse_element_value(self) -> Expression:
        if self._check(TokenType.LBRACE):
            return self._parse_literal_value(None)
        return self._parse_expression()


def parse(tokens: list[Token], source: str = "", filename: str = "<input>") -> File:
    """
    Convenience function to parse tokens into an AST.

    Args:
        tokens: List of tokens from the lexer
        source: Optional source code for rich diagnostics
        filename: Optional filename for error reporting

    Returns:
        The root File AST node
    """
    return Parser(tokens, source, filename).parse()
