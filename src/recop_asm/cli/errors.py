"""
Unified CLI Error Handling
==========================

Provides consistent error rendering and exit codes across all CLI tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from recop_asm.errors import AssemblerError, RecopError


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Assembly, configuration or output error
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def format_assembler_error(error: AssemblerError) -> str:
    """
    Render an assembler error with a coloured prefix and a source gutter.

    Example output:
        error: opcode is not defined in the instruction table: 'foo'
          --> prog.asm:3:5
           3 │     foo r1 r2
             │     ^
        hint: did you mean 'for'?
    """
    parts = [
        click.style("error", fg="red", bold=True)
        + click.style(f": {error.message}", bold=True)
    ]

    location = error.location
    if location is not None:
        parts.append(click.style("  --> ", fg="blue", bold=True) + str(location))
        if error.source_line is not None:
            gutter = f"{location.line:>4}"
            bar = click.style(" │ ", fg="blue", bold=True)
            parts.append(click.style(gutter, fg="blue", bold=True) + bar + error.source_line)
            if location.column > 0:
                blank = " " * len(gutter)
                caret = " " * (location.column - 1) + click.style("^", fg="red", bold=True)
                parts.append(blank + bar + caret)

    if error.hint:
        parts.append(click.style("hint", fg="cyan", bold=True) + f": {error.hint}")

    return "\n".join(parts)


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Unified exception handler for all CLI tools.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Assembly")

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    if isinstance(error, AssemblerError):
        # Source-located errors get the gutter rendering
        click.echo(format_assembler_error(error), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, RecopError):
        # Configuration and output errors
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, FileNotFoundError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, PermissionError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        # Unexpected internal error
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
