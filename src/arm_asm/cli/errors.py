"""
armasm Exit Codes
=================

Maps the exceptions that can escape an armasm run onto process exit codes.

| Code | Meaning                                                   |
|------|-----------------------------------------------------------|
| 0    | Every line assembled and the object file was written      |
| 1    | Some lines reported errors, or the object file failed     |
| 2    | Bad option, bad ARMASM_* value, or unreadable source file |
| 3    | An unexpected exception inside the assembler              |
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Process exit codes returned by armasm."""
    SUCCESS = 0
    BUILD_ERROR = 1
    INVALID_ARGS = 2
    INTERNAL_ERROR = 3


def exit_code_for(error: Exception) -> ExitCode:
    """Classify an exception raised during an armasm run."""
    from arm_asm.errors import ArmAsmError

    if isinstance(error, ArmAsmError):
        return ExitCode.BUILD_ERROR
    if isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        return ExitCode.INVALID_ARGS
    return ExitCode.INTERNAL_ERROR


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception on stderr and exit with its code.

    Args:
        error: The exception that ended the run
        verbose: Print a traceback for internal errors
        error_type: Prefix for assembler errors (e.g. "Object file")
    """
    code = exit_code_for(error)

    if code is ExitCode.BUILD_ERROR:
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error.format_message()}", err=True)
    elif code is ExitCode.INVALID_ARGS:
        click.echo(f"Error: {error}", err=True)
    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()

    sys.exit(code)
