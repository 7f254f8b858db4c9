"""
LMC Macro Preprocessor
======================

This package turns macro assembly for the Little Man Computer style
accumulator machine into plain assembly.

Main Components
---------------
- **Preprocessor**: Orchestrates the whole translation
- **Lexer**: Tokenizes source text
- **Parser**: Parses tokens into program items
- **MacroExpander**: Expands macro calls to a fixed point
- **render**: Renders a macro-free program as text

Translation Process
-------------------
1. **Parsing (Lexer + Parser)**: comments, macro declarations, macro calls
   and instructions, in source order. Declarations nest.

2. **Expansion (MacroExpander)**: calls are replaced by their declaration
   bodies with arguments bound by position, pass after pass, until none
   remain. Comments and declarations are dropped.

3. **Rendering (render)**: one `label OPCODE operand` line per instruction.

Macro Syntax
------------
```
IN_STO(location_a, location_b) = {
    IN
    STO location_a
    STO location_b
}
IN_STO!(a, b)
```
"""

from lmc_macro.preprocessor.preprocessor import Preprocessor, preprocess, preprocess_file
from lmc_macro.preprocessor.lexer import Lexer, Token, TokenType
from lmc_macro.preprocessor.parser import Parser, parse
from lmc_macro.preprocessor.program import (
    Comment,
    Instruction,
    Item,
    MacroCall,
    MacroDeclaration,
)
from lmc_macro.preprocessor.opcodes import Opcode, MNEMONICS
from lmc_macro.preprocessor.expander import (
    DEFAULT_MAX_EXPANSIONS,
    DEFAULT_MAX_PASSES,
    MacroExpander,
    expand,
)
from lmc_macro.preprocessor.emitter import SEPARATORS, render

__all__ = [
    # Main class and functions
    "Preprocessor",
    "preprocess",
    "preprocess_file",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    # Parser
    "Parser",
    "parse",
    # Program model
    "Comment",
    "Instruction",
    "Item",
    "MacroCall",
    "MacroDeclaration",
    # Opcodes
    "Opcode",
    "MNEMONICS",
    # Expansion
    "DEFAULT_MAX_EXPANSIONS",
    "DEFAULT_MAX_PASSES",
    "MacroExpander",
    "expand",
    # Rendering
    "SEPARATORS",
    "render",
]
