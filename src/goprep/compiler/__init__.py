"""
goprep Compiler Package.

This package contains the preprocessing pipeline:
- Lexer: Tokenizes Go source code, inserting automatic semicolons
- Parser: Produces an Abstract Syntax Tree from tokens
- AST: Immutable node definitions for the syntax tree
- FreshNameGenerator: Collision-free identifiers for introduced bindings
- Loop header recognition and loop-bound hoisting
- LoopHoister: Applies the hoisting rewrite across a file
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from goprep.compiler.ast_nodes import File
from goprep.compiler.gensym import DEFAULT_NAME_PREFIX, FreshNameGenerator
from goprep.compiler.lexer import Lexer
from goprep.compiler.loop_header import LoopHeader, StepDirection, extract_loop_header
from goprep.compiler.loop_rewriter import hoist_bounds, rewrite_loop
from goprep.compiler.parser import Parser
from goprep.compiler.walker import LoopHoister
from goprep.printer import PrintConfig, print_file

logger = logging.getLogger(__name__)


# =============================================================================
# Preprocessing Result
# =============================================================================


@dataclass
class PreprocessResult:
    """
    Result of preprocessing one source file.

    Attributes:
        output: The rewritten Go source text
        hoisted: Headers of the loops that were rewritten, in source order
        tree: The rewritten AST
    """

    output: str
    hoisted: list[LoopHeader] = field(default_factory=list)
    tree: Optional[File] = None

    def __str__(self) -> str:
        lines = ["Preprocess Result:"]
        lines.append(f"  Loops Hoisted: {len(self.hoisted)}")
        for header in self.hoisted:
            loc = header.variable.location
            where = f" at {loc}" if loc else ""
            lines.append(f"    - {header.variable.name}{where}")
        lines.append(f"  Output: {len(self.output)} characters")
        return "\n".join(lines)


# =============================================================================
# Pass Driver
# =============================================================================


def preprocess_with_report(
    source: str,
    filename: str = "<input>",
    *,
    name_prefix: str = DEFAULT_NAME_PREFIX,
    config: PrintConfig | None = None,
) -> PreprocessResult:
    """
    Hoist the bounds of every counting loop in a Go source file.

    Args:
        source: Go source code
        filename: Name used in error messages only
        name_prefix: Prefix of the introduced identifiers
        config: Optional printing configuration

    Returns:
        PreprocessResult with the rewritten text and the hoisted loops

    Raises:
        LexerError: If the source cannot be tokenized
        ParserError: If the source cannot be parsed
    """
    gensym = FreshNameGenerator.from_source(source, name_prefix)

    tokens = Lexer(source, filename).tokenize()
    tree = Parser(tokens, source, filename).parse()

    hoister = LoopHoister(gensym)
    tree = hoister.walk_file(tree)

    for header in hoister.rewritten:
        logger.debug(
            "Hoisted bounds of loop over '%s' at %s",
            header.variable.name,
            header.variable.location,
        )
    logger.debug("%s: %d loop(s) hoisted", filename, len(hoister.rewritten))

    return PreprocessResult(
        output=print_file(tree, config),
        hoisted=list(hoister.rewritten),
        tree=tree,
    )


def preprocess(
    source: str,
    filename: str = "<input>",
    *,
    name_prefix: str = DEFAULT_NAME_PREFIX,
    config: PrintConfig | None = None,
) -> str:
    """
    Hoist the bounds of every counting loop in a Go source file.

    Each call uses its own fresh-name generator seeded from ``source``.
    Parse errors propagate unchanged and no output is produced.

    Returns:
        The rewritten Go source text
    """
    return preprocess_with_report(
        source, filename, name_prefix=name_prefix, config=config
    ).output


def preprocess_file(
    filepath: str | Path,
    *,
    name_prefix: str = DEFAULT_NAME_PREFIX,
    config: PrintConfig | None = None,
) -> str:
    """
    Preprocess a Go file.

    Raises:
        FileNotFoundError: If the file does not exist
        GoPrepError: If the source cannot be parsed
    """
    path = Path(filepath)
    source = path.read_text(encoding="utf-8")
    return preprocess(source, str(path), name_prefix=name_prefix, config=config)


# =============================================================================
# Exports
# =============================================================================


__all__ = [
    # Front end
    "Lexer",
    "Parser",
    "File",
    # Loop hoisting
    "FreshNameGenerator",
    "DEFAULT_NAME_PREFIX",
    "LoopHeader",
    "StepDirection",
    "extract_loop_header",
    "hoist_bounds",
    "rewrite_loop",
    "LoopHoister",
    # Driver
    "PreprocessResult",
    "preprocess",
    "preprocess_file",
    "preprocess_with_report",
]
