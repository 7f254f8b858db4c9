"""
Program Model
=============

The parser, the macro expander and the emitter all share these item types.
A program is an ordered list of items:

1. **Instruction**: optional label, opcode, optional operand
   ```
   loop LDA count
        OUT
   ```

2. **MacroDeclaration**: named, parameterized template
   ```
   IN_STO(location) = {
       IN
       STO location
   }
   ```

3. **MacroCall**: invocation of a declaration with positional arguments
   ```
   IN_STO!(a)
   ```

4. **Comment**: text after a '#'

Items are immutable. Macro substitution never edits an item in place;
it builds a new one with `with_operand` / `with_arguments`.

Every item carries the SourceLocation it was parsed from. Locations are
excluded from equality so that expanded programs compare by content.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Union

from lmc_macro.errors import SourceLocation
from lmc_macro.preprocessor.opcodes import Opcode


@dataclass(frozen=True)
class Instruction:
    """
    Machine instruction.

    Attributes:
        opcode: The instruction mnemonic
        label: Label defined on this line, if any
        operand: Operand text (address name or literal), if any
    """
    opcode: Opcode
    label: Optional[str] = None
    operand: Optional[str] = None
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def with_operand(self, operand: str) -> "Instruction":
        """Return a copy of this instruction with a different operand."""
        return replace(self, operand=operand)


@dataclass(frozen=True)
class MacroCall:
    """
    Macro invocation.

    Attributes:
        identifier: Name of the macro being called
        arguments: Argument names, in call order
    """
    identifier: str
    arguments: tuple[str, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def with_arguments(self, arguments: tuple[str, ...]) -> "MacroCall":
        """Return a copy of this call with different arguments."""
        return replace(self, arguments=tuple(arguments))


@dataclass(frozen=True)
class Comment:
    """Comment text, without the leading '#'."""
    text: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class MacroDeclaration:
    """
    Macro definition.

    Attributes:
        identifier: Macro name
        parameters: Parameter names, bound positionally at the call site
        body: Items the macro expands to
    """
    identifier: str
    parameters: tuple[str, ...] = ()
    body: tuple["Item", ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    @property
    def arity(self) -> int:
        return len(self.parameters)


Item = Union[Instruction, MacroDeclaration, MacroCall, Comment]


def macro_calls(program: list[Item]) -> list[MacroCall]:
    """Return the top-level macro calls of a program, in order."""
    return [item for item in program if isinstance(item, MacroCall)]


def is_macro_free(program: list[Item]) -> bool:
    """Check if a program has no macro declarations or calls left."""
    return not any(isinstance(item, (MacroCall, MacroDeclaration)) for item in program)
