"""
LIVEXPR CLI Entrypoint.

This module provides the command-line interface for the LIVEXPR lexer and parser.

Features:
    - Read an expression from the command line or from a file.
    - Lex and parse it, then print the tree, tokens, errors, JSON or a Mermaid diagram.
    - Query the ranges a pending insert or delete at a caret would affect.
    - Output to console or file.
    - Launch the interactive keystroke REPL.

Example usage:
    livexpr "3 + 4 * (2 - 1)"
    livexpr "3 4" --errors
    livexpr -f expr.txt --diagram -o expr.mmd
    livexpr "(2-1)" --affected insert --caret 1
    livexpr --repl

Functions:
    run_livexpr(source: str, is_file: bool = False, ...) -> str:
        Executes the LIVEXPR pipeline (lex → parse → query/render → output).

    main() -> None:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import json
import logging
import os
import sys

from livexpr.livexpr_ast import ASTNode, Leaf
from livexpr.livexpr_constants import (
    DEFAULT_LOG_LEVEL,
    EDIT_KINDS,
    LOG_FORMAT,
    LOG_LEVEL_ENV,
    LOG_LEVELS,
    EditKind,
)
from livexpr.livexpr_diagram import Diagrammer
from livexpr.livexpr_lexer import Token, tokenize
from livexpr.livexpr_parser import parse

LOG = logging.getLogger(__name__)


def format_tree(node: ASTNode, indent: str = "  ", level: int = 0) -> str:
    """Indented one-node-per-line rendering of a tree."""
    lines: list[str] = []
    stack: list[tuple[ASTNode, int]] = [(node, level)]
    while stack:
        current, depth = stack.pop()
        pad = indent * depth
        if isinstance(current, Leaf):
            lines.append(f"{pad}{current.kind} {current.text!r} {list(current.range)}\n")
            continue
        lines.append(f"{pad}{current.kind} {list(current.range)}\n")
        stack.extend((child, depth + 1) for child in reversed(current.children))
    return "".join(lines)


def format_tokens(tokens: list[Token]) -> str:
    return "\n".join(
        f"{tok.kind:<10} {tok.text!r:<8} {list(tok.range)}{' *' if tok.edited else ''}"
        for tok in tokens
    )


def format_errors(tree: ASTNode) -> str:
    errors = tree.collect_errors()
    if not errors:
        return "no errors"
    return "\n".join(f"{list(leaf.range)} {leaf.text!r}" for leaf in errors)


def run_livexpr(
    source: str,
    is_file: bool = False,
    show_tokens: bool = False,
    show_errors: bool = False,
    diagram: bool = False,
    as_json: bool = False,
    affected: EditKind | None = None,
    caret: int = 0,
    out: str | None = None,
) -> str:
    """
    Run the LIVEXPR toolchain: lex, parse, then render the requested view.

    Args:
        source (str): The expression text, or a path when `is_file` is True.
        is_file (bool): If True, reads the expression from the file at `source`.
        show_tokens (bool): Render the token list.
        show_errors (bool): Render the error leaves of the tree.
        diagram (bool): Render the tree as a Mermaid flowchart.
        as_json (bool): Render the tree as JSON.
        affected (EditKind | None): Render the ranges affected by this edit at `caret`.
        caret (int): Caret offset used with `affected`.
        out (str | None): Optional path to write the output to. If None, prints to stdout.

    Returns:
        str: The rendered output.

    Raises:
        OSError: If the input file cannot be read or the output file written.
    """
    # 1. Read source
    if is_file:
        with open(source, encoding="utf-8") as f:
            source = f.read().rstrip("\n")

    # 2. Lexing and parsing
    tokens = tokenize(source)
    tree = parse(tokens)
    LOG.info("parsed %d tokens, %d errors", len(tokens), len(tree.collect_errors()))

    # 3. Rendering
    if show_tokens:
        output = format_tokens(tokens)
    elif show_errors:
        output = format_errors(tree)
    elif diagram:
        output = Diagrammer("mermaid").render(tree).rstrip("\n")
    elif as_json:
        output = json.dumps(tree.to_dict(), indent=2)
    elif affected is not None:
        output = json.dumps([list(r) for r in tree.affected_ranges(affected, caret)])
    else:
        output = format_tree(tree).rstrip("\n")

    # 4. Output
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(output + "\n")
        LOG.info("wrote output to %s", out)
    else:
        print(output)
    return output


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the LIVEXPR CLI.

    Parses command-line arguments and dispatches to the appropriate mode:
    - Launches the REPL if no source is given or `--repl` is specified.
    - Otherwise, runs the pipeline on the expression and prints the requested view.

    Returns:
        int: The process exit status.
    """
    parser = argparse.ArgumentParser(prog="livexpr")
    parser.add_argument("source", nargs="?", help="Expression text (or file with -f)")
    parser.add_argument(
        "-f", "--file", action="store_true", help="Interpret source as a file path"
    )
    view = parser.add_mutually_exclusive_group()
    view.add_argument("--tokens", action="store_true", help="Print the tokens")
    view.add_argument("--errors", action="store_true", help="Print the error leaves")
    view.add_argument(
        "--diagram", action="store_true", help="Print a Mermaid flowchart of the tree"
    )
    view.add_argument("--json", action="store_true", help="Print the tree as JSON")
    view.add_argument(
        "--affected",
        choices=EDIT_KINDS,
        help="Print ranges a pending edit at --caret would affect",
    )
    parser.add_argument(
        "--caret", type=int, default=0, help="Caret offset for --affected (default: 0)"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--repl", action="store_true", help="Launch the interactive keystroke REPL"
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL),
        choices=LOG_LEVELS,
        type=str.upper,
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or {DEFAULT_LOG_LEVEL})",
    )

    args = parser.parse_args(argv)
    # argparse does not check a default taken from the environment against choices
    if args.log_level not in LOG_LEVELS:
        parser.error(
            f"invalid ${LOG_LEVEL_ENV} value: {args.log_level!r} "
            f"(choose from {', '.join(LOG_LEVELS)})"
        )
    configure_logging(args.log_level)

    if args.repl or args.source is None:
        from livexpr.livexpr_repl import start_repl

        start_repl(text=args.source)
        return 0

    try:
        run_livexpr(
            source=args.source,
            is_file=args.file,
            show_tokens=args.tokens,
            show_errors=args.errors,
            diagram=args.diagram,
            as_json=args.json,
            affected=args.affected,
            caret=args.caret,
            out=args.out,
        )
    except OSError as e:
        print(f"[error] >>> {e}", file=sys.stderr)
        return 1
    return 0


__all__ = [
    "format_errors",
    "format_tokens",
    "format_tree",
    "main",
    "run_livexpr",
]


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    sys.exit(main())
