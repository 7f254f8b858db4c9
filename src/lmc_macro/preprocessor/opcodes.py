"""
LMC Opcode Vocabulary
=====================

The accumulator machine understands eleven mnemonics:

| Mnemonic | Meaning                          | Operand  |
|----------|----------------------------------|----------|
| ADD      | add memory to accumulator        | address  |
| SUB      | subtract memory from accumulator | address  |
| STO      | store accumulator                | address  |
| LDA      | load accumulator                 | address  |
| BRZ      | branch if zero                   | address  |
| BRP      | branch if positive or zero       | address  |
| BR       | branch always                    | address  |
| IN       | read input into accumulator      | (none)   |
| OUT      | write accumulator to output      | (none)   |
| HLT      | halt                             | (none)   |
| DAT      | reserve a data cell              | value    |

The preprocessor never executes these, so operands are not validated
against the table above; the "Operand" column is for reference only.

Mnemonics are matched case-insensitively against a whole word, trying the
vocabulary in declaration order.
"""

from enum import Enum
from typing import Optional


class Opcode(Enum):
    """Accumulator machine mnemonics, in lookup order."""
    ADD = "ADD"
    SUB = "SUB"
    STO = "STO"
    LDA = "LDA"
    BRZ = "BRZ"
    BRP = "BRP"
    BR = "BR"
    IN = "IN"
    OUT = "OUT"
    HLT = "HLT"
    DAT = "DAT"

    def __str__(self) -> str:
        return self.value


# All mnemonics in lookup order (for error hints)
MNEMONICS = tuple(op.value for op in Opcode)


def lookup_opcode(word: str) -> Optional[Opcode]:
    """
    Match a whole word against the opcode vocabulary.

    Args:
        word: Candidate mnemonic, any case

    Returns:
        The first matching Opcode, or None if the word is not a mnemonic
    """
    upper = word.upper()
    for opcode in Opcode:
        if opcode.value == upper:
            return opcode
    return None


def is_opcode(word: str) -> bool:
    """Check if a word is an opcode mnemonic."""
    return lookup_opcode(word) is not None
