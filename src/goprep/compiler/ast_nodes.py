"""
Abstract Syntax Tree (AST) node definitions for Go source files.

This module defines the node types produced by the parser. Each node is
immutable and carries source location information for error reporting.
Passes rewrite the tree by building replacement nodes and substituting them
into the parent's child tuple; no node is modified in place.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union

from goprep.utils.errors import SourceLocation


class ASTNode:
    """Base class for all AST nodes."""

    location: Optional[SourceLocation]


# -----------------------------------------------------------------------------
# Operators
# -----------------------------------------------------------------------------


class BinaryOperator(Enum):
    """Binary operator types."""

    # Logical
    LOR = auto()  # ||
    LAND = auto()  # &&

    # Comparison
    EQ = auto()
    NE = auto()
    LT = auto()
    LE = auto()
    GT = auto()
    GE = auto()

    # Additive
    ADD = auto()
    SUB = auto()
    OR = auto()  # |
    XOR = auto()  # ^

    # Multiplicative
    MUL = auto()
    DIV = auto()
    MOD = auto()
    SHL = auto()
    SHR = auto()
    AND = auto()  # &
    AND_NOT = auto()  # &^


class UnaryOperator(Enum):
    """Unary operator types."""

    POS = auto()  # +x
    NEG = auto()  # -x
    NOT = auto()  # !x
    XOR = auto()  # ^x (bitwise complement)
    ADDR = auto()  # &x
    RECV = auto()  # <-ch
    TILDE = auto()  # ~T (underlying-type constraint term)


class AssignOperator(Enum):
    """Assignment operator types, including short variable declaration."""

    ASSIGN = auto()  # =
    DEFINE = auto()  # :=
    ADD_ASSIGN = auto()
    SUB_ASSIGN = auto()
    MUL_ASSIGN = auto()
    QUO_ASSIGN = auto()
    REM_ASSIGN = auto()
    AND_ASSIGN = auto()
    OR_ASSIGN = auto()
    XOR_ASSIGN = auto()
    SHL_ASSIGN = auto()
    SHR_ASSIGN = auto()
    AND_NOT_ASSIGN = auto()


class IncDecOperator(Enum):
    """Postfix increment and decrement."""

    INC = auto()  # ++
    DEC = auto()  # --


class LiteralKind(Enum):
    """Kind of a basic literal."""

    INT = auto()
    FLOAT = auto()
    IMAG = auto()
    CHAR = auto()
    STRING = auto()


class ChanDirection(Enum):
    """Direction of a channel type."""

    BOTH = auto()  # chan T
    SEND = auto()  # chan<- T
    RECV = auto()  # <-chan T


class BranchKind(Enum):
    """Keyword of a branch statement."""

    BREAK = "break"
    CONTINUE = "continue"
    GOTO = "goto"
    FALLTHROUGH = "fallthrough"


class DeclKind(Enum):
    """Keyword of a general declaration."""

    IMPORT = "import"
    CONST = "const"
    TYPE = "type"
    VAR = "var"


# -----------------------------------------------------------------------------
# Expressions
# -----------------------------------------------------------------------------


class Expression(ASTNode):
    """Base class for all expressions, including type expressions."""

    pass


@dataclass(frozen=True, slots=True)
class Identifier(Expression):
    """
    A name reference.

    Examples:
        x, fmt, _
    """

    name: str
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class BasicLiteral(Expression):
    """
    An integer, float, imaginary, rune or string literal.

    The value is the literal's exact source text (``0x1F``, ``1_000``,
    `` `raw` ``), never a converted value.
    """

    kind: LiteralKind
    value: str
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class KeyValueExpression(Expression):
    """A ``key: value`` element inside a composite literal."""

    key: Expression
    value: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class CompositeLiteral(Expression):
    """
    A composite literal.

    Examples:
        []int{1, 2, 3}
        Point{X: 1, Y: 2}
        {1, 2}              - element type elided inside an outer literal
    """

    type: Optional[Expression]
    elements: tuple[Expression, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class FuncLiteral(Expression):
    """
    An anonymous function.

    Example:
        func(x int) int { return x * 2 }
    """

    type: "FuncType"
    body: "BlockStatement"
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ParenExpression(Expression):
    """A parenthesized expression, kept so the printer reproduces the parentheses."""

    inner: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class SelectorExpression(Expression):
    """
    Field, method or package member selection.

    Example:
        fmt.Println, p.X
    """

    operand: Expression
    selector: str
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class IndexExpression(Expression):
    """Index into an array, slice, string or map: ``a[i]``."""

    operand: Expression
    index: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class IndexListExpression(Expression):
    """Instantiation with several type arguments: ``Map[K, V]``."""

    operand: Expression
    indices: tuple[Expression, ...]
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class SliceExpression(Expression):
    """
    A slice expression.

    Examples:
        a[lo:hi], a[:], a[lo:hi:max]
    """

    operand: Expression
    low: Optional[Expression] = None
    high: Optional[Expression] = None
    max: Optional[Expression] = None
    three_index: bool = False
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class TypeAssertExpression(Expression):
    """
    A type assertion ``x.(T)``.

    ``type`` is None for the ``x.(type)`` form of a type switch guard.
    """

    operand: Expression
    type: Optional[Expression]
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class CallExpression(Expression):
    """
    A function call or conversion.

    Example:
        f(a, b), append(xs, ys...)
    """

    function: Expression
    arguments: tuple[Expression, ...] = ()
    has_ellipsis: bool = False
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class StarExpression(Expression):
    """Pointer indirection ``*p`` or pointer type ``*T``."""

    operand: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class UnaryExpression(Expression):
    """A unary operation such as ``-x``, ``!ok``, ``&v`` or ``<-ch``."""

    operator: UnaryOperator
    operand: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class BinaryExpression(Expression):
    """
    A binary operation.

    Example:
        i < len(xs)
    """

    left: Expression
    operator: BinaryOperator
    right: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class EllipsisExpression(Expression):
    """
    The ``...`` token in a type position.

    Used for variadic parameters (``...T``) and array lengths (``[...]T``);
    ``element`` is None in the latter.
    """

    element: Optional[Expression] = None
    location: Optional[SourceLocation] = None


# -----------------------------------------------------------------------------
# Type Expressions
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Field:
    """
    A parameter, result, struct field or interface method.

    Attributes:
        names: Declared names; empty for anonymous or embedded entries
        type: The field type (a FuncType for interface methods)
        tag: Optional struct tag literal
    """

    names: tuple[str, ...]
    type: Expression
    tag: Optional[BasicLiteral] = None
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ArrayType(Expression):
    """
    An array or slice type.

    Examples:
        []int        - length is None
        [4]byte
        [...]string  - length is an EllipsisExpression
    """

    length: Optional[Expression]
    element: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class MapType(Expression):
    """A map type ``map[K]V``."""

    key: Expression
    value: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ChanType(Expression):
    """A channel type: ``chan T``, ``chan<- T`` or ``<-chan T``."""

    direction: ChanDirection
    value: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class FuncType(Expression):
    """
    A function signature.

    Attributes:
        params: Parameter fields
        results: Result fields (unnamed single results print without parentheses)
        type_params: Type parameter fields of a generic function
    """

    params: tuple[Field, ...] = ()
    results: tuple[Field, ...] = ()
    type_params: tuple[Field, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class StructType(Expression):
    """A struct type with its field list."""

    fields: tuple[Field, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class InterfaceType(Expression):
    """An interface type with methods and embedded interfaces."""

    methods: tuple[Field, ...] = ()
    location: Optional[SourceLocation] = None


# -----------------------------------------------------------------------------
# Statements
# -----------------------------------------------------------------------------


class Statement(ASTNode):
    """Base class for all statements."""

    pass


@dataclass(frozen=True, slots=True)
class BlockStatement(Statement):
    """
    A braced sequence of statements.

    Example:
        {
            x := 1
            f(x)
        }
    """

    statements: tuple[Statement, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class CommentStatement(Statement):
    """A comment standing on its own line between statements."""

    text: str
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class EmptyStatement(Statement):
    """An empty statement, e.g. after a label that ends a block."""

    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ExpressionStatement(Statement):
    """An expression evaluated for its side effects (calls, receives)."""

    expression: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class SendStatement(Statement):
    """A channel send ``ch <- v``."""

    channel: Expression
    value: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class IncDecStatement(Statement):
    """
    A postfix increment or decrement.

    Example:
        i++, n--
    """

    target: Expression
    operator: IncDecOperator
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class AssignmentStatement(Statement):
    """
    An assignment or short variable declaration.

    Examples:
        x = 1
        a, b := f()
        total += v
    """

    targets: tuple[Expression, ...]
    operator: AssignOperator
    values: tuple[Expression, ...]
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class GoStatement(Statement):
    """A ``go`` statement."""

    call: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class DeferStatement(Statement):
    """A ``defer`` statement."""

    call: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ReturnStatement(Statement):
    """A ``return`` statement with zero or more results."""

    results: tuple[Expression, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class BranchStatement(Statement):
    """A ``break``, ``continue``, ``goto`` or ``fallthrough`` with optional label."""

    kind: BranchKind
    label: Optional[str] = None
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class LabeledStatement(Statement):
    """A statement preceded by ``label:``."""

    label: str
    statement: Statement
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class IfStatement(Statement):
    """
    An if statement.

    Example:
        if v, ok := m[k]; ok {
            use(v)
        } else if k == "" {
            skip()
        } else {
            fail()
        }

    ``else_branch`` is another IfStatement (else if) or a BlockStatement.
    """

    init: Optional[Statement]
    condition: Expression
    body: BlockStatement
    else_branch: Optional[Statement] = None
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class CaseClause(Statement):
    """
    A ``case`` or ``default`` clause of an expression or type switch.

    Attributes:
        expressions: Case values (types in a type switch); empty for default
        body: Statements of the clause
        comments: Comments standing before the clause keyword
    """

    expressions: tuple[Expression, ...]
    body: tuple[Statement, ...] = ()
    comments: tuple[str, ...] = ()
    location: Optional[SourceLocation] = None

    @property
    def is_default(self) -> bool:
        return not self.expressions


@dataclass(frozen=True, slots=True)
class SwitchStatement(Statement):
    """An expression switch with optional init statement and tag."""

    init: Optional[Statement]
    tag: Optional[Expression]
    clauses: tuple[CaseClause, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class TypeSwitchStatement(Statement):
    """
    A type switch.

    Example:
        switch v := x.(type) {
        case int:
            ...
        }

    ``guard`` is an ExpressionStatement or a ``:=`` AssignmentStatement
    whose value is a TypeAssertExpression with no type.
    """

    init: Optional[Statement]
    guard: Statement
    clauses: tuple[CaseClause, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class CommClause(Statement):
    """A ``case`` or ``default`` clause of a select; ``comm`` is None for default."""

    comm: Optional[Statement]
    body: tuple[Statement, ...] = ()
    comments: tuple[str, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class SelectStatement(Statement):
    """A ``select`` statement."""

    clauses: tuple[CommClause, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ForStatement(Statement):
    """
    A three-clause, condition-only or infinite for loop.

    Examples:
        for i := 0; i < n; i++ { ... }
        for x > 0 { ... }
        for { ... }

    Any of ``init``, ``condition`` and ``post`` may be absent.
    """

    init: Optional[Statement]
    condition: Optional[Expression]
    post: Optional[Statement]
    body: BlockStatement
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class RangeStatement(Statement):
    """
    A for loop with a range clause.

    Examples:
        for i, v := range xs { ... }
        for range ch { ... }

    ``operator`` is None when no iteration variables are given.
    """

    key: Optional[Expression]
    value: Optional[Expression]
    operator: Optional[AssignOperator]
    iterable: Expression
    body: BlockStatement
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class DeclarationStatement(Statement):
    """A ``var``, ``const`` or ``type`` declaration inside a function body."""

    declaration: "GenDeclaration"
    location: Optional[SourceLocation] = None


# -----------------------------------------------------------------------------
# Declarations
# -----------------------------------------------------------------------------


class Declaration(ASTNode):
    """Base class for top-level declarations."""

    pass


@dataclass(frozen=True, slots=True)
class ImportSpec:
    """One import: optional name (alias, ``.`` or ``_``) and the path literal."""

    path: str
    name: Optional[str] = None
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class ValueSpec:
    """One ``var`` or ``const`` spec: ``a, b int = 1, 2``."""

    names: tuple[str, ...]
    type: Optional[Expression] = None
    values: tuple[Expression, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class TypeSpec:
    """One ``type`` spec; ``is_alias`` for ``type A = B``, ``type_params`` for ``type S[T any] ...``."""

    name: str
    type: Expression
    is_alias: bool = False
    type_params: tuple[Field, ...] = ()
    location: Optional[SourceLocation] = None


Spec = Union[ImportSpec, ValueSpec, TypeSpec]


@dataclass(frozen=True, slots=True)
class GenDeclaration(Declaration):
    """
    An import, const, type or var declaration.

    Examples:
        import "fmt"
        var (
            a = 1
            b = 2
        )
    """

    kind: DeclKind
    specs: tuple[Spec, ...]
    grouped: bool = False
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class FuncDeclaration(Declaration):
    """
    A function or method declaration.

    Attributes:
        name: Function name
        receiver: Receiver fields for methods, empty for plain functions
        type: Signature
        body: Function body, None for external declarations
    """

    name: str
    receiver: tuple[Field, ...]
    type: FuncType
    body: Optional[BlockStatement] = None
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class CommentGroup(Declaration):
    """
    Comments standing between top-level declarations or at end of file.

    ``detached`` is set when a blank line separates the group from the
    declaration that follows it.
    """

    comments: tuple[str, ...]
    detached: bool = False
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, slots=True)
class File(ASTNode):
    """
    Root node of a parsed Go source file.

    Attributes:
        package: Package name
        declarations: Top-level declarations in source order
        doc: Comments before the package clause
        doc_detached: Whether a blank line separates ``doc`` from the clause
    """

    package: str
    declarations: tuple[Declaration, ...] = ()
    doc: tuple[str, ...] = ()
    doc_detached: bool = False
    location: Optional[SourceLocation] = None
