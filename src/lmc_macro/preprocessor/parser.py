"""
LMC Macro Assembly Parser
=========================

This module implements a recursive-descent parser that turns the token
stream from the lexer into a list of program items.

Grammar
-------
```
program      := (NEWLINE* item)*
item         := comment | macro_decl | macro_call | instruction
comment      := "#" <rest-of-line>
instruction  := [label] OPCODE [operand]          (one line)
macro_decl   := IDENT "(" [IDENT ("," IDENT)*] ")" "=" "{" program "}"
macro_call   := IDENT "!(" [IDENT ("," IDENT)*] ")"
```

Alternatives are tried in the order shown: a word followed by "(" starts
a declaration, a word followed by "!(" starts a call, any other word
starts an instruction. Inside an instruction, a leading word that is an
opcode is the opcode; otherwise it is a label and must be followed by an
opcode on the same line.

Newlines separate items. They are also allowed inside parameter and
argument lists and around the "=" and "{" of a declaration.

Errors
------
The first construct that does not match raises ParseError; nothing is
returned for a program that fails to parse.
"""

import logging
import re
from typing import Optional

from lmc_macro.errors import ParseError
from lmc_macro.preprocessor.lexer import Lexer, Token, TokenType, source_line
from lmc_macro.preprocessor.opcodes import MNEMONICS, lookup_opcode
from lmc_macro.preprocessor.program import (
    Comment,
    Instruction,
    Item,
    MacroCall,
    MacroDeclaration,
)

logger = logging.getLogger(__name__)

# Macro names, parameters and arguments: letters and underscores only
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_]+")

# Labels may also contain digits
LABEL_PATTERN = re.compile(r"[A-Za-z0-9_]+")

OPCODE_HINT = "valid opcodes are " + ", ".join(MNEMONICS)


def is_identifier(text: str) -> bool:
    """Check if text is a valid macro/parameter identifier."""
    return IDENTIFIER_PATTERN.fullmatch(text) is not None


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Parses macro assembly tokens into program items.

    Usage:
        lexer = Lexer(source, filename)
        parser = Parser(list(lexer.tokenize()), filename, source=source)
        program = parser.parse()
    """

    def __init__(
        self,
        tokens: list[Token],
        filename: str = "<input>",
        source: Optional[str] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer (ending with EOF)
            filename: Source filename for error reporting
            source: Original source text, used to quote lines in errors
        """
        self._tokens = tokens
        self._filename = filename
        self._source = source
        self._pos = 0

    def parse(self) -> list[Item]:
        """
        Parse all tokens into a program.

        Returns:
            List of items in source order

        Raises:
            ParseError: If any item fails to match
        """
        return self._parse_program(opening=None)

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        if self._pos >= len(self._tokens):
            last = self._tokens[-1] if self._tokens else None
            return Token(
                TokenType.EOF, None,
                last.line if last else 1,
                last.column if last else 1,
                self._filename,
            )
        return self._tokens[self._pos]

    def _peek(self, offset: int = 0) -> Token:
        pos = self._pos + offset
        if pos >= len(self._tokens):
            return self._current()
        return self._tokens[pos]

    def _advance(self) -> Token:
        token = self._current()
        self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, message: str, hint: Optional[str] = None) -> Token:
        if not self._check(token_type):
            raise self._error(f"{message}, found {describe(self._current())}",
                              self._current(), hint)
        return self._advance()

    def _skip_newlines(self) -> None:
        while self._match(TokenType.NEWLINE):
            pass

    def _error(self, message: str, token: Token, hint: Optional[str] = None) -> ParseError:
        line_text = source_line(self._source, token.line) if self._source is not None else None
        return ParseError(message, token.location, hint=hint, source_line=line_text)

    # =========================================================================
    # Program Parsing
    # =========================================================================

    def _parse_program(self, opening: Optional[Token]) -> list[Item]:
        """
        Parse items until end of input, or until the '}' closing a macro body.

        Args:
            opening: The '{' token of the enclosing macro body, or None at top level
        """
        items: list[Item] = []

        while True:
            self._skip_newlines()

            if self._check(TokenType.EOF):
                if opening is not None:
                    raise self._error(
                        "unterminated macro body, expected '}'",
                        self._current(),
                        hint=f"the body opened at {opening.location} is never closed",
                    )
                break

            if self._check(TokenType.RBRACE):
                if opening is None:
                    raise self._error("unexpected '}' outside of a macro body", self._current())
                break

            items.append(self._parse_item())

        return items

    def _parse_item(self) -> Item:
        token = self._current()

        if token.type == TokenType.COMMENT:
            self._advance()
            return Comment(token.value, location=token.location)

        if token.type == TokenType.WORD:
            following = self._peek(1).type
            if following == TokenType.LPAREN:
                return self._parse_macro_declaration()
            if following == TokenType.CALL_OPEN:
                return self._parse_macro_call()
            return self._parse_instruction()

        raise self._error(f"unexpected {describe(token)}", token)

    # =========================================================================
    # Instruction Parsing
    # =========================================================================

    def _parse_instruction(self) -> Instruction:
        """Parse '[label] OPCODE [operand]' on a single line."""
        first = self._advance()
        label = None
        opcode = lookup_opcode(first.value)

        if opcode is None:
            label = first.value
            if LABEL_PATTERN.fullmatch(label) is None:
                raise self._error(f"invalid label '{label}'", first,
                                  hint="labels use letters, digits and underscores")

            token = self._current()
            if token.type != TokenType.WORD:
                raise self._error(
                    f"expected opcode after label '{label}', found {describe(token)}",
                    token,
                    hint=OPCODE_HINT,
                )

            opcode = lookup_opcode(token.value)
            if opcode is None:
                raise self._error(
                    f"unknown opcode '{token.value}'",
                    token,
                    hint=f"'{label}' was read as a label; {OPCODE_HINT}",
                )
            self._advance()

        operand = None
        if self._check(TokenType.WORD):
            operand = self._advance().value

        return Instruction(opcode, label=label, operand=operand, location=first.location)

    # =========================================================================
    # Macro Parsing
    # =========================================================================

    def _parse_macro_declaration(self) -> MacroDeclaration:
        """Parse 'NAME(params) = { program }'."""
        name_token = self._advance()
        name = self._identifier(name_token, "macro name")
        self._advance()  # consume (

        parameters = self._parse_name_list("parameter")

        self._skip_newlines()
        self._expect(TokenType.EQUALS, f"expected '=' after parameters of macro '{name}'")
        self._skip_newlines()
        opening = self._expect(TokenType.LBRACE, f"expected '{{' to open body of macro '{name}'")

        body = self._parse_program(opening=opening)
        self._advance()  # consume }

        logger.debug(f"Parsed macro '{name}' ({len(parameters)} parameters, {len(body)} items)")
        return MacroDeclaration(
            name,
            parameters=tuple(parameters),
            body=tuple(body),
            location=name_token.location,
        )

    def _parse_macro_call(self) -> MacroCall:
        """Parse 'NAME!(args)'."""
        name_token = self._advance()
        name = self._identifier(name_token, "macro name")
        self._advance()  # consume !(

        arguments = self._parse_name_list("argument")
        return MacroCall(name, arguments=tuple(arguments), location=name_token.location)

    def _parse_name_list(self, kind: str) -> list[str]:
        """
        Parse comma-separated identifiers up to and including the closing ')'.

        The opening parenthesis must already be consumed.
        """
        names: list[str] = []

        self._skip_newlines()
        if self._match(TokenType.RPAREN):
            return names

        while True:
            self._skip_newlines()
            token = self._current()
            if token.type != TokenType.WORD:
                raise self._error(f"expected {kind} name, found {describe(token)}", token)
            names.append(self._identifier(token, f"{kind} name"))
            self._advance()

            self._skip_newlines()
            if self._match(TokenType.COMMA):
                continue
            if self._match(TokenType.RPAREN):
                return names
            raise self._error(
                f"expected ',' or ')' in {kind} list, found {describe(self._current())}",
                self._current(),
            )

    def _identifier(self, token: Token, what: str) -> str:
        if not is_identifier(token.value):
            raise self._error(
                f"invalid {what} '{token.value}'",
                token,
                hint="identifiers use only letters and underscores",
            )
        return token.value


def describe(token: Token) -> str:
    """Describe a token for error messages."""
    if token.type == TokenType.EOF:
        return "end of input"
    if token.type == TokenType.NEWLINE:
        return "end of line"
    if token.type == TokenType.COMMENT:
        return "comment"
    return f"'{token.value}'"


# =============================================================================
# Convenience Function
# =============================================================================

def parse(source: str, filename: str = "<input>") -> list[Item]:
    """
    Parse source text into a program.

    Args:
        source: Macro assembly source code
        filename: Filename for error messages

    Returns:
        List of items in source order

    Raises:
        ParseError: If the source does not match the grammar
    """
    tokens = list(Lexer(source, filename).tokenize())
    program = Parser(tokens, filename, source=source).parse()
    logger.debug(f"Parsed {len(program)} items from {filename}")
    return program
