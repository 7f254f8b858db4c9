"""
LMC Macro - Macro Preprocessor for Little Man Computer Assembly
===============================================================

This package adds a parameterized macro facility to the small
accumulator-machine assembly language (ADD, SUB, STO, LDA, BRZ, BRP, BR,
IN, OUT, HLT, DAT). Source with macros goes in; plain assembly that any
LMC assembler accepts comes out.

Main Components
---------------
- **preprocessor**: parser, macro expander and emitter (lmcpp)
- **errors**: exception hierarchy with source locations
- **cli**: command-line interface

Quick Start
-----------
    >>> from lmc_macro import preprocess
    >>> print(preprocess('''
    ... DOUBLE(x) = {
    ...     LDA x
    ...     ADD x
    ... }
    ... DOUBLE!(count)
    ... OUT
    ... '''), end="")
    LDA count
    ADD count
    OUT

Or from the command line:
    $ lmcpp program.lmc -o program.asm

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from lmc_macro.preprocessor import Preprocessor, preprocess, preprocess_file
from lmc_macro.errors import (
    LMCError,
    PreprocessorError,
    ParseError,
    MacroError,
    UnresolvedMacroError,
    ArityMismatchError,
    DuplicateMacroWarning,
    NonTerminatingExpansionError,
    TooManyErrors,
    RenderError,
    SourceLocation,
)

__all__ = [
    # Version info
    "__version__",
    # Preprocessor
    "Preprocessor",
    "preprocess",
    "preprocess_file",
    # Exception hierarchy
    "LMCError",
    "PreprocessorError",
    "ParseError",
    "MacroError",
    "UnresolvedMacroError",
    "ArityMismatchError",
    "DuplicateMacroWarning",
    "NonTerminatingExpansionError",
    "TooManyErrors",
    "RenderError",
    "SourceLocation",
]
