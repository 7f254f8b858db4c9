"""
Macro Expansion Engine
======================

Rewrites a parsed program until no macro calls remain.

Expansion
---------
1. Every top-level macro declaration is collected by identifier. If an
   identifier is declared twice, the first declaration wins and the later
   one is reported as a warning.

2. One pass walks the program in order:
   - instructions are kept as they are;
   - comments and macro declarations are dropped;
   - a macro call is replaced by the body of its declaration, with each
     parameter bound positionally to the call's argument text. Operands
     and nested call arguments that equal a parameter name are replaced;
     everything else is copied unchanged.

3. Passes repeat against the same declarations until no macro calls
   are left. A body may call other macros (or pass its parameters on to
   them), and those calls are picked up by the next pass.

Calls that cannot be expanded (undeclared macro, wrong number of
arguments) expand to nothing. They are collected as diagnostics so that
every problem in the source is reported in one run. Every item remembers
the top-level call it was expanded from, and a diagnostic raised inside
a macro body names that call.

Termination
-----------
A recursive macro never reaches a fixed point. Two limits turn that into
NonTerminatingExpansionError:

- `max_passes`: passes that still leave macro calls behind;
- `max_expansions`: calls expanded over the whole run. A body that calls
  itself twice doubles the pending calls on every pass and hits this
  limit long before the pass limit.

Example
-------
>>> from lmc_macro.preprocessor.parser import parse
>>> from lmc_macro.preprocessor.expander import MacroExpander
>>> expander = MacroExpander()
>>> program = expander.expand(parse('''
... F(a, b) = {
...     STO a
...     STO b
... }
... F!(x, y)
... '''))
>>> [(i.opcode.value, i.operand) for i in program]
[('STO', 'x'), ('STO', 'y')]
"""

import logging
from typing import Optional

from lmc_macro.errors import (
    ArityMismatchError,
    DuplicateMacroWarning,
    ErrorCollector,
    MacroError,
    NonTerminatingExpansionError,
    SourceLocation,
    UnresolvedMacroError,
)
from lmc_macro.preprocessor.program import (
    Instruction,
    Item,
    MacroCall,
    MacroDeclaration,
    macro_calls,
)

logger = logging.getLogger(__name__)

# Upper bound on rewrite passes before expansion is declared non-terminating
DEFAULT_MAX_PASSES = 100

# Upper bound on macro calls expanded in one run
DEFAULT_MAX_EXPANSIONS = 100_000

# An item paired with the location of the top-level call it came from
# (None for items written at top level)
Traced = tuple[Item, Optional[SourceLocation]]


class MacroExpander:
    """
    Expands macro calls to a macro-free program.

    Usage:
        expander = MacroExpander(strict=True)
        program = expander.expand(parse(source))
        if expander.collector.has_errors():
            print(expander.collector.report())

    Attributes:
        max_passes: Maximum number of rewrite passes
        max_expansions: Maximum number of macro calls expanded per run
        strict: If True, unresolved calls and arity mismatches are errors;
                otherwise they are warnings
        collector: Accumulated diagnostics
        passes: Number of passes used by the last expansion
        expansions: Number of calls expanded by the last expansion
    """

    def __init__(
        self,
        max_passes: int = DEFAULT_MAX_PASSES,
        strict: bool = False,
        collector: Optional[ErrorCollector] = None,
        max_expansions: int = DEFAULT_MAX_EXPANSIONS,
    ):
        if max_passes < 1:
            raise ValueError(f"max_passes must be at least 1, got {max_passes}")
        if max_expansions < 1:
            raise ValueError(f"max_expansions must be at least 1, got {max_expansions}")

        self.max_passes = max_passes
        self.max_expansions = max_expansions
        self.strict = strict
        self.collector = collector if collector is not None else ErrorCollector()
        self.passes = 0
        self.expansions = 0

        self._macros: dict[str, MacroDeclaration] = {}
        # (kind, name, call site, top-level call) already reported, so a bad
        # call re-emitted by several passes is only reported once
        self._reported: set[tuple] = set()

    @property
    def macros(self) -> dict[str, MacroDeclaration]:
        """Declarations in effect for the last expansion."""
        return dict(self._macros)

    def expand(self, program: list[Item]) -> list[Item]:
        """
        Expand every macro call in a program.

        Args:
            program: Parsed program

        Returns:
            A new program containing only instructions

        Raises:
            NonTerminatingExpansionError: If calls remain after max_passes
                passes, or more than max_expansions calls are expanded
            TooManyErrors: If the collector limit is reached in strict mode
        """
        self._macros = self._collect_declarations(program)
        self._reported.clear()
        self.passes = 0
        self.expansions = 0

        traced: list[Traced] = [(item, None) for item in program]

        while True:
            self.passes += 1
            traced = self._expand_pass(traced)

            pending = macro_calls([item for item, _ in traced])
            if not pending:
                break
            if self.passes >= self.max_passes:
                raise NonTerminatingExpansionError(
                    self.passes, [call.identifier for call in pending]
                )

        # Bodies expanded in the last pass may still carry comments or
        # nested declarations
        result = [item for item, _ in traced if isinstance(item, Instruction)]

        logger.debug(
            f"Expansion finished after {self.passes} pass(es), "
            f"{self.expansions} call(s), {len(result)} instructions"
        )
        return result

    # =========================================================================
    # Declarations
    # =========================================================================

    def _collect_declarations(self, program: list[Item]) -> dict[str, MacroDeclaration]:
        macros: dict[str, MacroDeclaration] = {}
        for item in program:
            if not isinstance(item, MacroDeclaration):
                continue
            if item.identifier in macros:
                original = macros[item.identifier]
                self.collector.add_warning(
                    DuplicateMacroWarning(item.identifier, item.location, original.location)
                )
                continue
            macros[item.identifier] = item
        return macros

    # =========================================================================
    # Rewriting
    # =========================================================================

    def _expand_pass(self, program: list[Traced]) -> list[Traced]:
        """Run a single rewrite pass over the program."""
        output: list[Traced] = []
        for item, origin in program:
            if isinstance(item, Instruction):
                output.append((item, origin))
            elif isinstance(item, MacroCall):
                # Items expanded from a top-level call keep pointing at it
                site = origin if origin is not None else item.location
                output.extend((child, site) for child in self._expand_call(item, origin))
            # Comments and declarations are dropped
        return output

    def _expand_call(self, call: MacroCall, origin: Optional[SourceLocation]) -> list[Item]:
        macro = self._macros.get(call.identifier)

        if macro is None:
            self._report(UnresolvedMacroError(call.identifier, call.location, self._macros), origin)
            return []

        if len(call.arguments) != macro.arity:
            self._report(ArityMismatchError(
                call.identifier,
                expected=macro.arity,
                given=len(call.arguments),
                location=call.location,
                declared_at=macro.location,
            ), origin)
            return []

        self.expansions += 1
        if self.expansions > self.max_expansions:
            raise NonTerminatingExpansionError(
                self.passes, [call.identifier], expansions=self.max_expansions
            )

        bindings = build_bindings(macro, call)
        return [substitute_item(item, bindings) for item in macro.body]

    def _report(self, diagnostic: MacroError, origin: Optional[SourceLocation]) -> None:
        if diagnostic.location is not None:
            key = (type(diagnostic), diagnostic.name, diagnostic.location, origin)
            if key in self._reported:
                return
            self._reported.add(key)

        if origin is not None:
            note = f"in the expansion of the call at {origin}"
            diagnostic.hint = f"{diagnostic.hint}; {note}" if diagnostic.hint else note

        logger.debug(f"Dropping macro call: {diagnostic.message}")
        if self.strict:
            self.collector.add(diagnostic)
        else:
            diagnostic.severity = "warning"
            self.collector.add_warning(diagnostic)


# =============================================================================
# Substitution
# =============================================================================

def build_bindings(macro: MacroDeclaration, call: MacroCall) -> dict[str, str]:
    """
    Bind parameter names to call-site arguments by position.

    If a parameter name is repeated, its first position wins.
    """
    bindings: dict[str, str] = {}
    for parameter, argument in zip(macro.parameters, call.arguments):
        bindings.setdefault(parameter, argument)
    return bindings


def substitute_item(item: Item, bindings: dict[str, str]) -> Item:
    """
    Substitute bound arguments into one body item.

    - Instruction: operand replaced if it names a parameter
    - MacroCall: each argument naming a parameter is replaced
    - anything else: returned unchanged
    """
    if isinstance(item, Instruction):
        if item.operand is not None and item.operand in bindings:
            return item.with_operand(bindings[item.operand])
        return item

    if isinstance(item, MacroCall):
        return item.with_arguments(tuple(bindings.get(arg, arg) for arg in item.arguments))

    return item


def expand(
    program: list[Item],
    *,
    max_passes: int = DEFAULT_MAX_PASSES,
    max_expansions: int = DEFAULT_MAX_EXPANSIONS,
    strict: bool = False,
) -> list[Item]:
    """
    Expand a program to a macro-free program.

    Diagnostics are logged but not returned; use MacroExpander directly
    to inspect them.
    """
    expander = MacroExpander(max_passes=max_passes, strict=strict, max_expansions=max_expansions)
    result = expander.expand(program)
    for warning in expander.collector.warnings:
        logger.warning(str(warning))
    for error in expander.collector.errors:
        logger.error(str(error))
    return result
