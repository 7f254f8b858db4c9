"""
LMC Macro Assembly Lexer
========================

This module converts source text into a stream of tokens for the parser.

Token Types
-----------
- WORD: Labels, mnemonics, operands, macro names ("loop", "STO", "000", "$FF")
- COMMENT: "#" to end of line (value excludes the "#")
- Delimiters: ( ) , = { }
- CALL_OPEN: "!(" that opens a macro call argument list
- NEWLINE: End of line
- EOF: End of file

Whitespace
----------
Spaces, tabs and carriage returns separate tokens and are otherwise
ignored. Newlines are kept because an instruction may not span lines.

Example
-------
>>> from lmc_macro.preprocessor.lexer import Lexer
>>> for token in Lexer("IN_STO!(a, b)  # read", "example.lmc").tokenize():
...     print(token)
Token(WORD, 'IN_STO', 1:1)
Token(CALL_OPEN, '!(', 1:7)
Token(WORD, 'a', 1:9)
Token(COMMA, ',', 1:10)
Token(WORD, 'b', 1:12)
Token(RPAREN, ')', 1:13)
Token(COMMENT, ' read', 1:16)
Token(EOF, 1:22)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from lmc_macro.errors import ParseError, SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for the macro assembly language."""

    # Structural tokens
    NEWLINE = auto()    # End of line (instructions never span lines)
    EOF = auto()        # End of file

    # Values
    WORD = auto()       # Identifiers, mnemonics, literal operands
    COMMENT = auto()    # '#' comment text

    # Delimiters
    LPAREN = auto()     # (
    RPAREN = auto()     # )
    COMMA = auto()      # ,
    EQUALS = auto()     # =
    LBRACE = auto()     # {
    RBRACE = auto()     # }
    CALL_OPEN = auto()  # !(


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from the source code.

    Attributes:
        type: The TokenType classification
        value: The token text (None for NEWLINE and EOF)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: Optional[str]
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


def source_line(source: str, line: int) -> Optional[str]:
    """Return the text of a 1-indexed line, or None if out of range."""
    lines = source.splitlines()
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return None


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes macro assembly source code.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    # Characters that make up a word (identifiers and literal operands)
    WORD_CHARS = string.ascii_letters + string.digits + "_$"

    # Single-character delimiters
    SINGLE_CHAR_TOKENS = {
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        ",": TokenType.COMMA,
        "=": TokenType.EQUALS,
        "{": TokenType.LBRACE,
        "}": TokenType.RBRACE,
    }

    def __init__(self, source: str, filename: str = "<input>"):
        """
        Initialize the lexer with source code.

        Args:
            source: The source code to tokenize
            filename: Name of the source file (for error messages)
        """
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects representing each lexical element

        Raises:
            ParseError: If an unexpected character is encountered
        """
        while not self._at_end():
            if self._skip_whitespace():
                continue

            yield self._scan_token()

        yield self._make_token(TokenType.EOF, None)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Look at a character without advancing; '' past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: Optional[str],
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=start_line or self._line,
            column=start_column or self._column,
            filename=self.filename,
        )

    def _error(self, message: str, column: int) -> ParseError:
        """Create a parse error pointing at the given column of the current line."""
        location = SourceLocation(self.filename, self._line, column)

        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        line_text = self.source[self._line_start_pos:line_end]

        return ParseError(message, location, source_line=line_text)

    # =========================================================================
    # Scanning
    # =========================================================================

    def _skip_whitespace(self) -> bool:
        """Skip spaces, tabs and carriage returns (not newlines)."""
        skipped = False
        # '' in ' \t\r' is True, so check for end of input first
        while self._peek() and self._peek() in " \t\r":
            self._advance()
            skipped = True
        return skipped

    def _scan_token(self) -> Token:
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char == "\n":
            self._advance()
            return self._make_token(TokenType.NEWLINE, None, start_line, start_column)

        if char == "#":
            self._advance()
            chars = []
            while not self._at_end() and self._peek() != "\n":
                chars.append(self._advance())
            text = "".join(chars).rstrip("\r")
            return self._make_token(TokenType.COMMENT, text, start_line, start_column)

        if char in self.WORD_CHARS:
            chars = []
            while self._peek() and self._peek() in self.WORD_CHARS:
                chars.append(self._advance())
            return self._make_token(TokenType.WORD, "".join(chars), start_line, start_column)

        if char == "!":
            if self._peek(1) == "(":
                self._advance()
                self._advance()
                return self._make_token(TokenType.CALL_OPEN, "!(", start_line, start_column)
            raise self._error("unexpected character '!' (macro calls are written NAME!(...))",
                              start_column)

        if char in self.SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(self.SINGLE_CHAR_TOKENS[char], char, start_line, start_column)

        raise self._error(f"unexpected character {char!r}", start_column)
