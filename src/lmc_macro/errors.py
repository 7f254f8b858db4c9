"""
LMC Macro Preprocessor Error Hierarchy
======================================

This module defines the exception hierarchy for the whole preprocessor.
All exceptions inherit from LMCError, allowing callers to catch every
preprocessor-related error with a single except clause if desired.

Exception Hierarchy
-------------------
LMCError (base)
├── PreprocessorError (source-related)
│   ├── ParseError - malformed or unterminated construct in source
│   ├── MacroError - error in macro resolution/expansion
│   │   ├── UnresolvedMacroError - call to an undeclared macro
│   │   ├── ArityMismatchError - argument count differs from parameters
│   │   ├── DuplicateMacroWarning - macro identifier declared twice
│   │   └── NonTerminatingExpansionError - no fixed point within bound
│   └── TooManyErrors - error collector limit reached
└── RenderError - macro item reached the emitter (internal defect)

Design Philosophy
-----------------
Each exception captures source location information (filename, line, column)
when applicable, so that messages point straight at the offending text.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Iterable, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class LMCError(Exception):
    """
    Base exception for all preprocessor errors.

        try:
            preprocess(source)
        except LMCError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Source Errors
# =============================================================================

class PreprocessorError(LMCError):
    """
    Base exception for errors tied to the translated source.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    severity = "error"

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def __str__(self) -> str:
        # Severity may be downgraded after construction (see MacroExpander)
        return self._format_message()

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.lmc:7:5: error: unknown opcode 'STA'
                loop STA count
                     ^
            hint: valid opcodes are ADD, SUB, STO, ...
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: {self.severity}: {self.message}")
        else:
            parts.append(f"{self.severity}: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class ParseError(PreprocessorError):
    """
    Syntax error in the source program.

    Raised by the lexer or parser for the first construct that does not
    match the grammar. There is no recovery: the whole translation fails.

    Examples:
        - Unexpected character ("STO a;")
        - Unterminated macro body (missing '}')
        - Malformed parameter or argument list
        - Word in opcode position that is not an opcode
        - Trailing input such as a stray '}'
    """
    pass


class MacroError(PreprocessorError):
    """
    Error in macro resolution or expansion.

    Most macro errors are collected as diagnostics rather than raised,
    so the expansion can still produce a best-effort program.
    """
    pass


class UnresolvedMacroError(MacroError):
    """
    Call to a macro identifier that was never declared.

    The call expands to nothing. Similar declared names, if any, are
    offered as a hint to help catch typos.
    """

    def __init__(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        known_macros: Optional[Iterable[str]] = None,
    ):
        self.name = name
        self.similar_macros = get_close_matches(name, list(known_macros or []), n=3)

        hint = None
        if self.similar_macros:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_macros)
            hint = f"did you mean {suggestions}?"

        super().__init__(f"call to undeclared macro '{name}'", location=location, hint=hint)


class ArityMismatchError(MacroError):
    """
    Macro called with a different number of arguments than it declares.

    The call expands to nothing.
    """

    def __init__(
        self,
        name: str,
        expected: int,
        given: int,
        location: Optional[SourceLocation] = None,
        declared_at: Optional[SourceLocation] = None,
    ):
        self.name = name
        self.expected = expected
        self.given = given

        hint = f"'{name}' is declared at {declared_at}" if declared_at else None
        plural = "argument" if expected == 1 else "arguments"
        super().__init__(
            f"macro '{name}' takes {expected} {plural} but {given} given",
            location=location,
            hint=hint,
        )


class DuplicateMacroWarning(MacroError):
    """
    Macro identifier declared more than once.

    The first declaration is used for every call; later ones are ignored.
    """

    severity = "warning"

    def __init__(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
    ):
        self.name = name
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{name}' was first declared at {original_location}"

        super().__init__(
            f"duplicate macro '{name}' is ignored",
            location=location,
            hint=hint,
        )


class NonTerminatingExpansionError(MacroError):
    """
    Expansion did not reach a macro-free program within the pass limit.

    This is what a self-recursive macro, or a cycle of macros calling each
    other, ends up as:

        LOOP() = {
            LOOP!()
        }
        LOOP!()

    Raised either when calls are still pending after the pass limit, or
    (with `expansions` set) when more calls than that were expanded.
    """

    def __init__(self, passes: int, pending: Iterable[str], expansions: Optional[int] = None):
        self.passes = passes
        self.pending = sorted(set(pending))
        self.expansions = expansions
        names = ", ".join(f"'{name}'" for name in self.pending)

        if expansions is None:
            message = f"macro expansion did not terminate after {passes} passes"
        else:
            message = (
                f"macro expansion did not terminate: more than {expansions} "
                f"calls expanded in {passes} passes"
            )
        super().__init__(message, hint=f"check for recursive calls among {names}")


class TooManyErrors(PreprocessorError):
    """
    Raised when too many errors have been collected.
    """

    def __init__(self, message: str = "Too many errors"):
        super().__init__(message)


# =============================================================================
# Internal Errors
# =============================================================================

class RenderError(LMCError):
    """
    A macro declaration or call reached the emitter.

    Expansion removes every macro item, so this always indicates a defect
    in the pipeline rather than a problem with the user's source.
    """
    pass


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects multiple diagnostics for batch reporting.

    The expander uses this to keep going after a bad macro call, so the
    user sees every unresolved call and arity mismatch in one run.

    Example:
        collector = ErrorCollector(max_errors=100)
        collector.add(UnresolvedMacroError("FOO", location))
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before raising TooManyErrors
        """
        self.errors: list[PreprocessorError] = []
        self.warnings: list[PreprocessorError] = []
        self.max_errors = max_errors

    def add(self, error: PreprocessorError) -> None:
        """
        Add an error to the collection.

        Raises:
            TooManyErrors: If max_errors has been reached
        """
        self.errors.append(error)
        if len(self.errors) >= self.max_errors:
            raise TooManyErrors(f"Too many errors ({self.max_errors}), stopping")

    def add_warning(self, warning: PreprocessorError) -> None:
        """Add a warning."""
        self.warnings.append(warning)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        """Return True if any warnings have been collected."""
        return len(self.warnings) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def warning_count(self) -> int:
        """Return the number of collected warnings."""
        return len(self.warnings)

    def report(self) -> str:
        """
        Format all errors and warnings for display.

        Returns:
            Formatted string with all errors and warnings
        """
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  {warning}")

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()
