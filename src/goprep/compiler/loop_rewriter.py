"""
Loop-bound hoisting.

Rewrites a counting loop so that its initial value, bound and step are each
evaluated exactly once, before the first iteration:

    for i := 0; i < f(); i++ {          {
        ...                                 _v0, _v1, _v2 := 0, f(), 1
    }                               =>      for i := _v0; i < _v1; i += _v2 {
                                                ...
                                            }
                                        }

The enclosing block scopes the three fresh bindings to the loop.
"""

from __future__ import annotations

from collections.abc import Callable

from goprep.compiler.ast_nodes import (
    AssignmentStatement,
    AssignOperator,
    BasicLiteral,
    BinaryExpression,
    BlockStatement,
    ForStatement,
    Identifier,
    LiteralKind,
    Statement,
)
from goprep.compiler.loop_header import LoopHeader, StepDirection, extract_loop_header

# Literal spelling of each step binding
STEP_LITERALS: dict[StepDirection, str] = {
    StepDirection.INCREMENT: "1",
    StepDirection.DECREMENT: "-1",
}


def hoist_bounds(loop: ForStatement, header: LoopHeader, gensym: Callable[[], str]) -> BlockStatement:
    """
    Build the replacement block for a loop whose header is already known.

    Args:
        loop: The original loop, supplying the body and location
        header: Its decomposed header, supplying the three clauses
        gensym: Source of fresh names; exactly three are drawn

    Returns:
        A block holding the hoisted declaration followed by the rewritten loop
    """
    loc = loop.location
    lo = Identifier(gensym(), location=loc)
    hi = Identifier(gensym(), location=loc)
    step = Identifier(gensym(), location=loc)

    bounds = AssignmentStatement(
        targets=(lo, hi, step),
        operator=AssignOperator.DEFINE,
        values=(
            header.init,
            header.bound,
            BasicLiteral(LiteralKind.INT, STEP_LITERALS[header.step], location=loc),
        ),
        location=loc,
    )

    init = header.init_clause
    condition = header.condition_clause
    post = header.post_clause

    new_loop = ForStatement(
        init=AssignmentStatement(
            targets=init.targets,
            operator=init.operator,
            values=(lo,),
            location=init.location,
        ),
        condition=BinaryExpression(
            left=condition.left,
            operator=condition.operator,
            right=hi,
            location=condition.location,
        ),
        post=AssignmentStatement(
            targets=(Identifier(header.variable.name, location=post.location),),
            operator=AssignOperator.ADD_ASSIGN,
            values=(step,),
            location=post.location,
        ),
        body=loop.body,
        location=loc,
    )

    return BlockStatement(statements=(bounds, new_loop), location=loc)


def rewrite_loop(loop: ForStatement, gensym: Callable[[], str]) -> Statement:
    """
    Hoist the bounds of a counting loop.

    Returns:
        The replacement block, or ``loop`` itself (same object, no names
        drawn) when the header is not a recognized counting loop.
    """
    header = extract_loop_header(loop)
    if header is None:
        return loop
    return hoist_bounds(loop, header, gensym)
