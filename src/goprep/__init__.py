"""
goprep - A loop-bound hoisting preprocessor for Go sources.

goprep rewrites counting ``for`` loops so that their initial value, bound
and step are computed once before the loop starts, making the loops safe to
partition across concurrent workers.
"""

from goprep.compiler import preprocess, preprocess_file
from goprep.compiler.lexer import Lexer
from goprep.compiler.parser import Parser
from goprep.printer import PrintConfig, format_source

__version__ = "0.1.0"
__all__ = [
    "preprocess",
    "preprocess_file",
    "Lexer",
    "Parser",
    "PrintConfig",
    "format_source",
]
