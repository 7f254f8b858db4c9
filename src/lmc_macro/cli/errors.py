"""
lmcpp Exit Codes and Error Reporting
====================================

Maps whatever stops a preprocessing run to a message on standard error
and a process exit code:

- problems in the macro assembly source (parse errors, macro errors,
  non-terminating expansion) exit with SOURCE_ERROR;
- unusable files and option values exit with INVALID_ARGS;
- anything else, including a macro item reaching the emitter, is a bug
  in lmcpp and exits with INTERNAL_ERROR.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Exit codes of the lmcpp command."""
    SUCCESS = 0
    SOURCE_ERROR = 1     # The source does not parse or its macros do not expand
    INVALID_ARGS = 2     # Missing or unreadable files, bad option values
    INTERNAL_ERROR = 3   # Defect in the preprocessor itself


# Errors caused by how lmcpp was invoked rather than by the source text
ARGUMENT_ERRORS = (click.BadParameter, FileNotFoundError, PermissionError)


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception that ended a preprocessing run and exit.

    Source errors are printed as-is, since they already carry their
    "file:line:col: error:" prefix, quoted line and hint. Internal errors
    get a traceback in verbose mode.

    Args:
        error: The exception that ended the run
        verbose: If True, print a traceback for internal errors
        error_type: Name of the failed step, printed as "<error_type> failed:"

    Raises:
        SystemExit: Always, with the matching ExitCode
    """
    from lmc_macro.errors import PreprocessorError

    if isinstance(error, PreprocessorError):
        prefix = f"{error_type} failed:\n" if error_type else ""
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.SOURCE_ERROR)

    if isinstance(error, ARGUMENT_ERRORS):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    # RenderError and unexpected exceptions
    click.echo(f"Internal error: {error}", err=True)
    if verbose:
        traceback.print_exc()
    sys.exit(ExitCode.INTERNAL_ERROR)
