"""
LMC Macro Preprocessor - Main Interface
=======================================

This module provides the Preprocessor class, the primary interface for
translating macro assembly into plain assembly. It coordinates the parser,
the macro expander and the emitter.

Example Usage
-------------
>>> from lmc_macro.preprocessor import Preprocessor
>>> pp = Preprocessor()
>>> print(pp.preprocess_string('''
... IN_STO(location_a, location_b) = {
...     IN
...     STO location_a
...     STO location_b
... }
... IN_STO!(a, b)
... '''), end="")
IN
STO a
STO b

Command-Line Usage
------------------
    $ lmcpp program.lmc -o program.asm

Options:
    -o, --output FILE      Output file (default: standard output)
    --strict               Treat unresolved macros and arity mismatches as errors
    --max-passes N         Bound on expansion passes
    --max-expansions N     Bound on macro calls expanded
    --separator NAME       Field separator: space or tab
    -v, --verbose          Verbose output
"""

import logging
from pathlib import Path
from typing import Optional

from lmc_macro.errors import ErrorCollector, PreprocessorError
from lmc_macro.preprocessor.emitter import SEPARATORS, render
from lmc_macro.preprocessor.expander import (
    DEFAULT_MAX_EXPANSIONS,
    DEFAULT_MAX_PASSES,
    MacroExpander,
)
from lmc_macro.preprocessor.parser import parse
from lmc_macro.preprocessor.program import Item

logger = logging.getLogger(__name__)


class Preprocessor:
    """
    Main macro preprocessor class.

    The pipeline is:
    1. Parse source into items (lexer -> parser)
    2. Expand macro calls to a fixed point (expander)
    3. Render the macro-free program (emitter)

    Parse errors abort the run. Expansion diagnostics are collected and
    available through has_errors(), has_warnings() and get_error_report();
    the rendered output is produced either way.

    Attributes:
        strict: If True, unresolved calls and arity mismatches are errors
        max_passes: Maximum number of expansion passes
        max_expansions: Maximum number of macro calls expanded per run
        separator: Text placed between instruction fields
    """

    def __init__(
        self,
        strict: bool = False,
        max_passes: int = DEFAULT_MAX_PASSES,
        separator: str = " ",
        max_errors: int = 100,
        max_expansions: int = DEFAULT_MAX_EXPANSIONS,
    ):
        """
        Initialize the preprocessor.

        Args:
            strict: Report unresolved macros and arity mismatches as errors
                    rather than warnings
            max_passes: Maximum expansion passes before giving up with
                        NonTerminatingExpansionError
            separator: Field separator for rendered instructions; either
                       the text itself or a name from SEPARATORS
            max_errors: Maximum errors to collect before stopping
            max_expansions: Maximum macro calls expanded before giving up
                            with NonTerminatingExpansionError
        """
        self.strict = strict
        self.max_passes = max_passes
        self.max_expansions = max_expansions
        self.separator = SEPARATORS.get(separator, separator)
        self._collector = ErrorCollector(max_errors=max_errors)
        self._expander = MacroExpander(
            max_passes=max_passes,
            strict=strict,
            collector=self._collector,
            max_expansions=max_expansions,
        )

        self._program: list[Item] = []
        self._output: Optional[str] = None

    # =========================================================================
    # Preprocessing Methods
    # =========================================================================

    def preprocess_string(self, source: str, filename: str = "<input>") -> str:
        """
        Translate source text.

        Args:
            source: Macro assembly source code
            filename: Virtual filename for error messages

        Returns:
            Rendered macro-free assembly text

        Raises:
            ParseError: If the source does not parse
            NonTerminatingExpansionError: If expansion does not terminate
            TooManyErrors: If too many errors are collected in strict mode
        """
        self._collector.clear()
        self._program = []
        self._output = None

        program = parse(source, filename)
        logger.info(f"Parsed {len(program)} items from {filename}")

        self._program = self._expander.expand(program)
        logger.info(
            f"Expanded to {len(self._program)} instructions "
            f"in {self._expander.passes} pass(es)"
        )

        self._output = render(self._program, self.separator)
        return self._output

    def preprocess_file(self, filepath: str | Path) -> str:
        """
        Translate a source file.

        Args:
            filepath: Path to the source file (UTF-8)

        Returns:
            Rendered macro-free assembly text

        Raises:
            FileNotFoundError: If the source file does not exist
            ParseError, NonTerminatingExpansionError: As preprocess_string
        """
        filepath = Path(filepath)
        logger.info(f"Preprocessing {filepath}")

        source = filepath.read_text(encoding="utf-8")
        return self.preprocess_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_output(self) -> str:
        """Get the rendered text of the last successful run."""
        if self._output is None:
            raise RuntimeError("nothing has been preprocessed yet")
        return self._output

    def get_program(self) -> list[Item]:
        """Get the expanded program of the last run."""
        return list(self._program)

    def write_output(self, filepath: str | Path) -> None:
        """
        Write the rendered text of the last run to a file.

        Args:
            filepath: Output file path
        """
        Path(filepath).write_text(self.get_output(), encoding="utf-8")
        logger.info(f"Wrote {filepath}")

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def has_errors(self) -> bool:
        """Check if the last run collected errors."""
        return self._collector.has_errors()

    def has_warnings(self) -> bool:
        """Check if the last run collected warnings."""
        return self._collector.has_warnings()

    def get_errors(self) -> list[PreprocessorError]:
        """Get the errors collected by the last run."""
        return list(self._collector.errors)

    def get_warnings(self) -> list[PreprocessorError]:
        """Get the warnings collected by the last run."""
        return list(self._collector.warnings)

    def get_error_report(self) -> str:
        """Get a formatted report of all diagnostics from the last run."""
        return self._collector.report()


# =============================================================================
# Convenience Functions
# =============================================================================

def preprocess(source: str, filename: str = "<input>", **options) -> str:
    """
    Translate macro assembly source to plain assembly.

    This is the single entry point for embedding the preprocessor: raw
    source text in, rendered text out, or an LMCError raised.

    Args:
        source: Macro assembly source code
        filename: Virtual filename for error messages
        **options: Preprocessor constructor options

    Returns:
        Rendered macro-free assembly text

    Raises:
        LMCError: On a parse error, a non-terminating expansion, or (with
                  strict=True) the first collected macro error
    """
    pp = Preprocessor(**options)
    output = pp.preprocess_string(source, filename)
    if pp.has_errors():
        raise pp.get_errors()[0]
    return output


def preprocess_file(filepath: str | Path, **options) -> str:
    """
    Translate a source file to plain assembly.

    Behaves like preprocess(), including raising the first collected
    error in strict mode.
    """
    pp = Preprocessor(**options)
    output = pp.preprocess_file(filepath)
    if pp.has_errors():
        raise pp.get_errors()[0]
    return output
