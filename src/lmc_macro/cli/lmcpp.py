"""
lmcpp - LMC Macro Preprocessor Command-Line Interface
=====================================================

This module implements the command-line interface for the macro
preprocessor. It reads macro assembly, expands every macro call and
writes plain assembly.

Usage Examples
--------------
Preprocess to standard output:
    $ lmcpp program.lmc

With output file:
    $ lmcpp program.lmc -o program.asm

From standard input:
    $ cat program.lmc | lmcpp -

Fail on undeclared macros or wrong argument counts:
    $ lmcpp --strict program.lmc

Exit Codes
----------
0 - Success
1 - Parse or expansion error (or diagnostics in --strict mode)
2 - Invalid arguments or missing files
3 - Internal error
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from lmc_macro import __version__
from lmc_macro.cli.errors import ExitCode, handle_cli_exception
from lmc_macro.preprocessor import (
    DEFAULT_MAX_EXPANSIONS,
    DEFAULT_MAX_PASSES,
    SEPARATORS,
    Preprocessor,
)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    required=False,
    default="-",
    type=click.Path(exists=True, dir_okay=False, allow_dash=True, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: standard output)",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Treat calls to undeclared macros and argument count mismatches "
         "as errors instead of warnings.",
)
@click.option(
    "--max-passes",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_PASSES,
    show_default=True,
    help="Maximum macro expansion passes before reporting a non-terminating "
         "(recursive) expansion.",
)
@click.option(
    "--max-expansions",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_EXPANSIONS,
    show_default=True,
    help="Maximum macro calls expanded in one run before reporting a "
         "non-terminating (recursive) expansion.",
)
@click.option(
    "--separator",
    type=click.Choice(sorted(SEPARATORS), case_sensitive=False),
    default="space",
    show_default=True,
    help="Separator between label, opcode and operand.",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="lmcpp")
def main(
    input_file: Path,
    output: Optional[Path],
    strict: bool,
    max_passes: int,
    max_expansions: int,
    separator: str,
    verbose: bool,
) -> None:
    """
    Expand macros in Little Man Computer assembly.

    INPUT_FILE is the macro assembly source; omit it or pass '-' to read
    standard input.

    \b
    Macros are declared and called like this:
        IN_STO(location) = {
            IN
            STO location
        }
        IN_STO!(count)

    \b
    Examples:
        lmcpp prog.lmc               # Print expanded program
        lmcpp prog.lmc -o prog.asm   # Write expanded program
        lmcpp --strict prog.lmc      # Fail on bad macro calls
    """
    setup_logging(verbose)

    pp = Preprocessor(
        strict=strict,
        max_passes=max_passes,
        max_expansions=max_expansions,
        separator=separator.lower(),
    )

    try:
        if str(input_file) == "-":
            source = click.get_text_stream("stdin").read()
            text = pp.preprocess_string(source, "<stdin>")
        else:
            text = pp.preprocess_file(input_file)

        if pp.has_errors() or pp.has_warnings():
            click.echo(pp.get_error_report(), err=True)

        if pp.has_errors():
            sys.exit(ExitCode.SOURCE_ERROR)

        if output is not None:
            pp.write_output(output)
            if verbose:
                click.echo(f"Wrote {len(pp.get_program())} instructions to {output}", err=True)
        else:
            click.echo(text, nl=False)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Preprocessing")


if __name__ == "__main__":
    main()
