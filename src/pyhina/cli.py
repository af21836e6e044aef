#!/usr/bin/env python3
"""
Hina Python CLI

A command-line interface for running and validating Hina program trees
(JSON ASTs produced by an upstream parser).

Usage:
    python -m pyhina <path> [options]
    pyhina <path> [options]

Examples:
    pyhina examples/fib.json
    pyhina examples/fib.json --validate
    pyhina examples/tuple.json --trace --max-depth 20000
    cat program.json | pyhina -
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pyhina.errors import HinaError
from pyhina.evaluator import EvalOptions, Evaluator
from pyhina.types import format_value
from pyhina.validator import validate_tree


#==============================================================================
# CLI Output Formatting
#==============================================================================

class Colors:
    """ANSI color codes for terminal output"""
    RESET = "\x1b[0m"
    BOLD = "\x1b[1m"
    DIM = "\x1b[2m"
    RED = "\x1b[31m"
    GREEN = "\x1b[32m"
    CYAN = "\x1b[36m"


def print_err(msg: str, color: str = Colors.RESET) -> None:
    """Print a message with optional color to stderr"""
    print(f"{color}{msg}{Colors.RESET}", file=sys.stderr)


#==============================================================================
# Program Loading
#==============================================================================

def load_program(path: str) -> dict[str, Any] | None:
    """
    Load a program tree from a JSON file, or from stdin when path is "-".

    Returns:
        The decoded tree, or None if it could not be read or decoded
    """
    try:
        if path == "-":
            return json.load(sys.stdin)
        with open(Path(path), "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError):
        return None


def configure_logging(trace: bool, verbose: bool) -> None:
    """Route evaluator logging to stderr"""
    level = logging.DEBUG if trace else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


#==============================================================================
# Main CLI
#==============================================================================

def run_program(
    path: str,
    options: EvalOptions,
    validate_only: bool = False,
    show_result: bool = False,
    verbose: bool = False,
) -> int:
    """
    Run a Hina program.

    Args:
        path: Path to the JSON tree ("-" for stdin)
        options: Evaluation options
        validate_only: Only validate, don't evaluate
        show_result: Print the final value after evaluation
        verbose: Show detailed output

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    tree = load_program(path)
    if tree is None:
        print_err(f"Error: Could not load program: {path}", Colors.RED)
        return 1

    if validate_only:
        result = validate_tree(tree)
        if not result.valid:
            print_err("Validation failed:", Colors.RED)
            for error in result.errors:
                print_err(f"  - {error.path}: [{error.code.value}] {error.message}", Colors.RED)
            return 1
        print_err("✓ Validation passed", Colors.GREEN)
        return 0

    try:
        value = Evaluator(options).evaluate_program(tree)
    except HinaError as e:
        print_err(f"Error [{e.code.value}]: {e}", Colors.RED)
        return 1

    if show_result:
        print(format_value(value))
    if verbose:
        print_err(f"✓ Finished {path}", Colors.DIM)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        prog="pyhina",
        description="Hina Python CLI - Run and validate Hina program trees",
    )

    parser.add_argument(
        "path",
        help="Path to the JSON program tree, or - for stdin",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed output",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Only validate, don't evaluate",
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log every evaluation step to stderr",
    )

    parser.add_argument(
        "--show-result",
        action="store_true",
        dest="show_result",
        help="Print the final value of the program",
    )

    parser.add_argument(
        "--max-depth",
        type=int,
        default=EvalOptions.max_depth,
        dest="max_depth",
        help="Maximum evaluation depth (default: %(default)s)",
    )

    parser.add_argument(
        "--max-steps",
        type=int,
        default=EvalOptions.max_steps,
        dest="max_steps",
        help="Maximum number of evaluation steps (default: unlimited)",
    )

    args = parser.parse_args(argv)
    configure_logging(args.trace, args.verbose)

    options = EvalOptions(
        max_depth=args.max_depth,
        max_steps=args.max_steps,
        trace=args.trace,
    )
    return run_program(
        args.path,
        options,
        validate_only=args.validate,
        show_result=args.show_result,
        verbose=args.verbose,
    )


if __name__ == "__main__":
    sys.exit(main())
