"""
Statement tree walker for loop-bound hoisting.

The walker visits the statements of every top-level function body,
descending through blocks, if/else bodies, switch and type-switch clauses,
and the bodies of function literals assigned to variables. Each counting
loop it meets is replaced by its hoisted form. The walk never enters a
loop body, so loops nested in other loops are left as written.

Nodes are immutable: every rewrite builds new parent nodes along the path
to the changed statement, and untouched subtrees are shared as-is.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any

from goprep.compiler.ast_nodes import (
    # File and declarations
    File,
    FuncDeclaration,
    # Expressions
    Expression,
    FuncLiteral,
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
from goprep.compiler.loop_header import LoopHeader, extract_loop_header
from goprep.compiler.loop_rewriter import hoist_bounds

# Statements whose interiors the walker never enters
OPAQUE_STATEMENTS: tuple[type[Statement], ...] = (
    CommentStatement,
    EmptyStatement,
    ExpressionStatement,
    SendStatement,
    IncDecStatement,
    GoStatement,
    DeferStatement,
    ReturnStatement,
    BranchStatement,
    LabeledStatement,
    CommClause,
    SelectStatement,
    RangeStatement,
    DeclarationStatement,
)


class LoopHoister:
    """
    Rewrites every reachable counting loop of a file.

    Attributes:
        gensym: Source of fresh identifiers, shared by all rewrites
        rewritten: Headers of the loops rewritten so far, in walk order
    """

    def __init__(self, gensym: Callable[[], str]) -> None:
        self.gensym = gensym
        self.rewritten: list[LoopHeader] = []

    def walk_file(self, file: File) -> File:
        """Walk the body of every top-level function declaration."""
        declarations = tuple(
            self._walk_function(decl) if isinstance(decl, FuncDeclaration) else decl
            for decl in file.declarations
        )
        if all(new is old for new, old in zip(declarations, file.declarations)):
            return file
        return File(
            package=file.package,
            declarations=declarations,
            doc=file.doc,
            doc_detached=file.doc_detached,
            location=file.location,
        )

    def _walk_function(self, decl: FuncDeclaration) -> FuncDeclaration:
        if decl.body is None:
            return decl
        body = self.walk_block(decl.body)
        if body is decl.body:
            return decl
        return FuncDeclaration(
            name=decl.name,
            receiver=decl.receiver,
            type=decl.type,
            body=body,
            location=decl.location,
        )

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def walk_statements(self, statements: tuple[Statement, ...]) -> tuple[Statement, ...]:
        """Walk a statement sequence; returns the same tuple if nothing changed."""
        new_statements = tuple(self.walk_statement(stmt) for stmt in statements)
        if all(new is old for new, old in zip(new_statements, statements)):
            return statements
        return new_statements

    def walk_block(self, block: BlockStatement) -> BlockStatement:
        statements = self.walk_statements(block.statements)
        if statements is block.statements:
            return block
        return BlockStatement(statements=statements, location=block.location)

    def walk_statement(self, stmt: Statement) -> Statement:
        """
        Walk a single statement.

        Raises:
            TypeError: If ``stmt`` is not a known statement kind
        """
        if isinstance(stmt, ForStatement):
            header = extract_loop_header(stmt)
            if header is None:
                return stmt
            self.rewritten.append(header)
            # The replacement block is not walked again
            return hoist_bounds(stmt, header, self.gensym)

        if isinstance(stmt, AssignmentStatement):
            values = tuple(self.walk_expression(value) for value in stmt.values)
            if all(new is old for new, old in zip(values, stmt.values)):
                return stmt
            return AssignmentStatement(
                targets=stmt.targets,
                operator=stmt.operator,
                values=values,
                location=stmt.location,
            )

        if isinstance(stmt, BlockStatement):
            return self.walk_block(stmt)

        if isinstance(stmt, IfStatement):
            body = self.walk_block(stmt.body)
            else_branch = stmt.else_branch
            if else_branch is not None:
                else_branch = self.walk_statement(else_branch)
            if body is stmt.body and else_branch is stmt.else_branch:
                return stmt
            return IfStatement(
                init=stmt.init,
                condition=stmt.condition,
                body=body,
                else_branch=else_branch,
                location=stmt.location,
            )

        if isinstance(stmt, SwitchStatement):
            clauses = self._walk_clauses(stmt.clauses)
            if clauses is stmt.clauses:
                return stmt
            return SwitchStatement(
                init=stmt.init,
                tag=stmt.tag,
                clauses=clauses,
                location=stmt.location,
            )

        if isinstance(stmt, TypeSwitchStatement):
            clauses = self._walk_clauses(stmt.clauses)
            if clauses is stmt.clauses:
                return stmt
            return TypeSwitchStatement(
                init=stmt.init,
                guard=stmt.guard,
                clauses=clauses,
                location=stmt.location,
            )

        if isinstance(stmt, CaseClause):
            body = self.walk_statements(stmt.body)
            if body is stmt.body:
                return stmt
            return CaseClause(
                expressions=stmt.expressions,
                body=body,
                comments=stmt.comments,
                location=stmt.location,
            )

        if isinstance(stmt, OPAQUE_STATEMENTS):
            return stmt

        raise TypeError(f"Unknown statement kind: {type(stmt).__name__}")

    def _walk_clauses(self, clauses: tuple[CaseClause, ...]) -> tuple[CaseClause, ...]:
        new_clauses = tuple(self.walk_statement(clause) for clause in clauses)
        if all(new is old for new, old in zip(new_clauses, clauses)):
            return clauses
        return new_clauses  # type: ignore[return-value]

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def walk_expression(self, expr: Expression) -> Expression:
        """
        Find function literals inside an expression and walk their bodies.

        Every other expression kind is only searched through; it is rebuilt
        when one of its children changed.
        """
        if isinstance(expr, FuncLiteral):
            body = self.walk_block(expr.body)
            if body is expr.body:
                return expr
            return FuncLiteral(type=expr.type, body=body, location=expr.location)

        changes: dict[str, Any] = {}
        for f in dataclasses.fields(expr):
            value = getattr(expr, f.name)
            new_value = self._walk_child(value)
            if new_value is not value:
                changes[f.name] = new_value

        if not changes:
            return expr
        return dataclasses.replace(expr, **changes)

    def _walk_child(self, value: Any) -> Any:
        if isinstance(value, Expression):
            return self.walk_expression(value)
        if isinstance(value, tuple):
            items = tuple(self._walk_child(item) for item in value)
            if all(new is old for new, old in zip(items, value)):
                return value
            return items
        return value
