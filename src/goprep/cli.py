"""
goprep Command-Line Interface.

Provides commands to preprocess and inspect Go source files.

Usage:
    goprep preprocess main.go           # Print the rewritten source
    goprep preprocess pkg/ -w           # Rewrite every .go file in place
    goprep preprocess main.go -d        # Show what would change
    goprep fmt main.go                  # Print without rewriting loops
    goprep tokens main.go               # Dump the token stream
    goprep ast main.go                  # Dump the syntax tree
"""

import argparse
import dataclasses
import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from goprep import __version__
from goprep.compiler import preprocess
from goprep.compiler.gensym import DEFAULT_NAME_PREFIX
from goprep.compiler.lexer import Lexer
from goprep.compiler.parser import Parser
from goprep.printer import format_source, get_diff
from goprep.utils.diagnostics import diagnostic_from_error
from goprep.utils.errors import GoPrepError

logger = logging.getLogger(__name__)


# =============================================================================
# ANSI Color Codes for Terminal Output
# =============================================================================


class Colors:
    """ANSI escape codes for colored terminal output."""

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    GRAY = "\033[90m"

    BOLD = "\033[1m"

    RESET = "\033[0m"

    @classmethod
    def disable(cls) -> None:
        """Disable all colors (for non-TTY output)."""
        cls.RED = ""
        cls.GREEN = ""
        cls.YELLOW = ""
        cls.GRAY = ""
        cls.BOLD = ""
        cls.RESET = ""

    @classmethod
    def enabled(cls) -> bool:
        return bool(cls.RESET)


def _init_colors() -> None:
    """Initialize colors based on terminal capabilities."""
    # Disable colors if not a TTY or if NO_COLOR is set
    if not sys.stderr.isatty() or os.environ.get("NO_COLOR"):
        Colors.disable()


# Initialize on module load
_init_colors()


def _configure_logging(verbosity: int) -> None:
    """Map -v / -vv to INFO / DEBUG on stderr."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="goprep",
        description="goprep - Hoist the bounds of counting for loops in Go sources",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v for info, -vv for debug)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Preprocess command
    preprocess_parser = subparsers.add_parser(
        "preprocess",
        aliases=["pp"],
        help="Hoist loop bounds in Go files",
    )
    preprocess_parser.add_argument(
        "inputs",
        type=Path,
        nargs="+",
        help="Go files or directories (scanned for .go files)",
    )
    preprocess_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the result to this file (single input only)",
    )
    _add_output_mode_arguments(preprocess_parser)
    preprocess_parser.add_argument(
        "--prefix",
        default=DEFAULT_NAME_PREFIX,
        help=f"Prefix of introduced identifiers (default: {DEFAULT_NAME_PREFIX})",
    )

    # Format command
    fmt_parser = subparsers.add_parser(
        "fmt",
        aliases=["format"],
        help="Print Go files through the printer without rewriting",
    )
    fmt_parser.add_argument(
        "inputs",
        type=Path,
        nargs="+",
        help="Go files or directories (scanned for .go files)",
    )
    _add_output_mode_arguments(fmt_parser)

    # Debug commands
    tokens_parser = subparsers.add_parser(
        "tokens",
        help="Show lexer tokens (debug)",
    )
    tokens_parser.add_argument(
        "input",
        type=Path,
        help="Input Go file",
    )

    ast_parser = subparsers.add_parser(
        "ast",
        help="Show the syntax tree (debug)",
    )
    ast_parser.add_argument(
        "input",
        type=Path,
        help="Input Go file",
    )

    return parser


def _add_output_mode_arguments(parser: argparse.ArgumentParser) -> None:
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-w",
        "--write",
        action="store_true",
        help="Rewrite files in place",
    )
    mode.add_argument(
        "-d",
        "--diff",
        action="store_true",
        help="Print a unified diff instead of the result",
    )


# =============================================================================
# File Handling
# =============================================================================


def _collect_go_files(inputs: list[Path]) -> tuple[list[Path], bool]:
    """
    Expand input paths into Go files.

    Returns:
        The files found, and whether every input path existed
    """
    files: list[Path] = []
    ok = True
    for input_path in inputs:
        if input_path.is_file():
            files.append(input_path)
        elif input_path.is_dir():
            found = sorted(input_path.rglob("*.go"))
            if not found:
                logger.info("No .go files found in %s", input_path)
            files.extend(found)
        else:
            print(f"{Colors.RED}Error:{Colors.RESET} Path not found: {input_path}", file=sys.stderr)
            ok = False
    return files, ok


def _report_error(error: GoPrepError, source: str, filename: str) -> None:
    """Render a lexer or parser error with its source excerpt on stderr."""
    diagnostic = diagnostic_from_error(error, filename)
    print(diagnostic.render(source, use_color=Colors.enabled()), file=sys.stderr)


def _run_transform(
    args: argparse.Namespace,
    transform: Callable[[str, str], str],
    verb: str,
) -> int:
    """Apply ``transform`` to every input file and emit results per the output mode."""
    files, exit_ok = _collect_go_files(args.inputs)
    exit_code = 0 if exit_ok else 1

    output_path: Optional[Path] = getattr(args, "output", None)
    if output_path is not None and len(files) != 1:
        print(f"{Colors.RED}Error:{Colors.RESET} --output requires exactly one input file", file=sys.stderr)
        return 1

    for filepath in files:
        try:
            source = filepath.read_text(encoding="utf-8")
        except OSError as e:
            print(f"{Colors.RED}Error reading {filepath}:{Colors.RESET} {e}", file=sys.stderr)
            exit_code = 1
            continue

        try:
            result = transform(source, str(filepath))
        except GoPrepError as e:
            _report_error(e, source, str(filepath))
            exit_code = 1
            continue

        if args.diff:
            diff = get_diff(source, result, str(filepath))
            if diff:
                sys.stdout.write(diff)
        elif args.write:
            if source != result:
                filepath.write_text(result, encoding="utf-8")
                print(f"{Colors.GREEN}{verb}:{Colors.RESET} {filepath}", file=sys.stderr)
        elif output_path is not None:
            output_path.write_text(result, encoding="utf-8")
            logger.info("Wrote %s", output_path)
        else:
            sys.stdout.write(result)

    return exit_code


# =============================================================================
# Command Handlers
# =============================================================================


def cmd_preprocess(args: argparse.Namespace) -> int:
    """Handle the preprocess command."""

    def transform(source: str, filename: str) -> str:
        return preprocess(source, filename, name_prefix=args.prefix)

    return _run_transform(args, transform, "Rewrote")


def cmd_fmt(args: argparse.Namespace) -> int:
    """Handle the fmt command - print files without rewriting."""
    return _run_transform(args, format_source, "Formatted")


def cmd_tokens(args: argparse.Namespace) -> int:
    """Handle the tokens command (debug)."""
    input_path: Path = args.input

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    source = input_path.read_text(encoding="utf-8")
    try:
        lexer = Lexer(source, str(input_path))
        tokens = lexer.tokenize()

        for token in tokens:
            print(token)

        return 0

    except GoPrepError as e:
        _report_error(e, source, str(input_path))
        return 1


def cmd_ast(args: argparse.Namespace) -> int:
    """Handle the ast command (debug)."""
    input_path: Path = args.input

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    source = input_path.read_text(encoding="utf-8")
    try:
        lexer = Lexer(source, str(input_path))
        tokens = lexer.tokenize()

        parser = Parser(tokens, source, str(input_path))
        ast = parser.parse()

        # Pretty print the AST
        _print_ast(ast)

        return 0

    except GoPrepError as e:
        _report_error(e, source, str(input_path))
        return 1


def _is_node(value: object) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _print_ast(node, indent: int = 0) -> None:
    """Pretty print an AST node."""
    prefix = "  " * indent
    node_name = type(node).__name__

    # Get relevant attributes
    attrs = {
        f.name: getattr(node, f.name)
        for f in dataclasses.fields(node)
        if f.name != "location"
    }

    # Print node
    if attrs:
        print(f"{prefix}{node_name}:")
        for key, value in attrs.items():
            if _is_node(value):
                print(f"{prefix}  {key}:")
                _print_ast(value, indent + 2)
            elif isinstance(value, tuple) and value and _is_node(value[0]):
                print(f"{prefix}  {key}: [")
                for item in value:
                    _print_ast(item, indent + 2)
                print(f"{prefix}  ]")
            else:
                print(f"{prefix}  {key}: {value!r}")
    else:
        print(f"{prefix}{node_name}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    command_handlers = {
        "preprocess": cmd_preprocess,
        "pp": cmd_preprocess,
        "fmt": cmd_fmt,
        "format": cmd_fmt,
        "tokens": cmd_tokens,
        "ast": cmd_ast,
    }

    handler = command_handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
