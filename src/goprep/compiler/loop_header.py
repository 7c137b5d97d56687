"""
Counting-loop header recognition.

A three-clause ``for`` loop is a counting loop when its header has the shape

    for i := <init>; i <cmp> <bound>; i++ {      (or i--)

with one induction variable named in all three clauses and ``<cmp>`` one of
``<``, ``<=``, ``>`` or ``>=``. The recognizers below are total: each
returns None for anything it does not recognize, so only whitelisted
shapes are ever rewritten.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, cast

from goprep.compiler.ast_nodes import (
    AssignmentStatement,
    BinaryExpression,
    BinaryOperator,
    Expression,
    ForStatement,
    Identifier,
    IncDecOperator,
    IncDecStatement,
    Statement,
)

# Operators accepted in the loop condition
COMPARISON_OPERATORS: frozenset[BinaryOperator] = frozenset(
    {
        BinaryOperator.LT,
        BinaryOperator.LE,
        BinaryOperator.GT,
        BinaryOperator.GE,
    }
)


class StepDirection(Enum):
    """Direction of a unit step."""

    INCREMENT = 1
    DECREMENT = -1


@dataclass(frozen=True, slots=True)
class LoopHeader:
    """
    Canonical decomposition of a counting loop's header.

    Attributes:
        variable: The induction variable, as written in the init clause
        init: Initial value expression
        comparison: Comparison operator of the condition
        bound: Right operand of the condition
        step: Whether the post statement increments or decrements
        init_clause: The matched init statement
        condition_clause: The matched condition
        post_clause: The matched post statement
    """

    variable: Identifier
    init: Expression
    comparison: BinaryOperator
    bound: Expression
    step: StepDirection
    init_clause: AssignmentStatement
    condition_clause: BinaryExpression
    post_clause: IncDecStatement


def match_init(stmt: Optional[Statement]) -> Optional[tuple[Identifier, Expression]]:
    """Match ``i := e`` (or ``i = e``); returns the variable and ``e``."""
    if not isinstance(stmt, AssignmentStatement):
        return None
    if len(stmt.targets) != 1 or len(stmt.values) != 1:
        return None
    target = stmt.targets[0]
    if not isinstance(target, Identifier):
        return None
    return target, stmt.values[0]


def match_condition(
    expr: Optional[Expression],
) -> Optional[tuple[Identifier, BinaryOperator, Expression]]:
    """Match ``i <cmp> e``; returns the variable, operator and ``e``."""
    if not isinstance(expr, BinaryExpression):
        return None
    if expr.operator not in COMPARISON_OPERATORS:
        return None
    if not isinstance(expr.left, Identifier):
        return None
    return expr.left, expr.operator, expr.right


def match_post(stmt: Optional[Statement]) -> Optional[tuple[Identifier, StepDirection]]:
    """Match ``i++`` or ``i--``."""
    if not isinstance(stmt, IncDecStatement):
        return None
    if not isinstance(stmt.target, Identifier):
        return None
    if stmt.operator == IncDecOperator.INC:
        return stmt.target, StepDirection.INCREMENT
    return stmt.target, StepDirection.DECREMENT


def extract_loop_header(loop: ForStatement) -> Optional[LoopHeader]:
    """
    Decompose a for loop into a LoopHeader.

    Returns:
        The header, or None if any clause is missing, has an unrecognized
        shape, or names a different variable than the others.
    """
    init = match_init(loop.init)
    if init is None:
        return None
    condition = match_condition(loop.condition)
    if condition is None:
        return None
    post = match_post(loop.post)
    if post is None:
        return None

    variable, init_value = init
    cond_variable, comparison, bound = condition
    post_variable, step = post
    if not (variable.name == cond_variable.name == post_variable.name):
        return None

    # The matchers above only succeed on these node types
    return LoopHeader(
        variable,
        init_value,
        comparison,
        bound,
        step,
        init_clause=cast(AssignmentStatement, loop.init),
        condition_clause=cast(BinaryExpression, loop.condition),
        post_clause=cast(IncDecStatement, loop.post),
    )
