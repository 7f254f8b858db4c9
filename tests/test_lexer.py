# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the macro assembly lexer/tokenizer.
#
# Test coverage includes:
#   - Words (identifiers, mnemonics, literal operands)
#   - Comments
#   - Macro delimiters, including the "!(" call opener
#   - Newline handling and position tracking
#   - Error conditions
# =============================================================================

import pytest
from lmc_macro.preprocessor.lexer import Lexer, TokenType, source_line
from lmc_macro.errors import ParseError, SourceLocation


# =============================================================================
# Helper Function
# =============================================================================

def tokenize(source: str) -> list:
    """Tokenize and drop the trailing EOF token."""
    tokens = list(Lexer(source, "<test>").tokenize())
    assert tokens[-1].type == TokenType.EOF
    return tokens[:-1]


def types(source: str) -> list:
    return [t.type for t in tokenize(source)]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_source(self):
        """Empty source produces only EOF."""
        assert tokenize("") == []

    def test_whitespace_only(self):
        """Spaces and tabs produce no tokens."""
        assert tokenize("   \t  ") == []

    def test_word(self):
        """A mnemonic is a single word."""
        tokens = tokenize("STO")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.WORD
        assert tokens[0].value == "STO"

    def test_word_with_underscore(self):
        """Words can contain underscores."""
        tokens = tokenize("location_a")
        assert tokens[0].value == "location_a"

    def test_numeric_and_dollar_words(self):
        """Literal operands are words too."""
        tokens = tokenize("DAT 000 $FF")
        assert [t.value for t in tokens] == ["DAT", "000", "$FF"]
        assert all(t.type == TokenType.WORD for t in tokens)

    def test_label_opcode_operand(self):
        """Tabs separate words like spaces do."""
        tokens = tokenize("start\tLDA\tcount")
        assert [t.value for t in tokens] == ["start", "LDA", "count"]


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """Test '#' comment recognition."""

    def test_full_line_comment(self):
        """The comment value excludes the '#'."""
        tokens = tokenize("# Code to compute a divided by b")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.COMMENT
        assert tokens[0].value == " Code to compute a divided by b"

    def test_trailing_comment(self):
        """A comment may follow an instruction on the same line."""
        assert types("STO a # store") == [TokenType.WORD, TokenType.WORD, TokenType.COMMENT]

    def test_comment_stops_at_newline(self):
        """The newline after a comment is still a token."""
        assert types("# one\nOUT") == [TokenType.COMMENT, TokenType.NEWLINE, TokenType.WORD]

    def test_comment_swallows_delimiters(self):
        """Delimiters inside a comment are not tokens."""
        tokens = tokenize("# F!(a) = { }")
        assert len(tokens) == 1
        assert tokens[0].value == " F!(a) = { }"

    def test_crlf_comment(self):
        """A carriage return is not part of the comment text."""
        tokens = tokenize("# dos\r\nIN")
        assert tokens[0].value == " dos"
        assert tokens[1].type == TokenType.NEWLINE


# =============================================================================
# Delimiter Tests
# =============================================================================

class TestDelimiters:
    """Test macro syntax delimiters."""

    def test_macro_call(self):
        """'!(' is a single token."""
        assert types("IN_STO!(a, b)") == [
            TokenType.WORD,
            TokenType.CALL_OPEN,
            TokenType.WORD,
            TokenType.COMMA,
            TokenType.WORD,
            TokenType.RPAREN,
        ]

    def test_macro_declaration(self):
        """Declaration header and braces."""
        assert types("F(x) = { }") == [
            TokenType.WORD,
            TokenType.LPAREN,
            TokenType.WORD,
            TokenType.RPAREN,
            TokenType.EQUALS,
            TokenType.LBRACE,
            TokenType.RBRACE,
        ]

    def test_call_open_value(self):
        tokens = tokenize("F!()")
        assert tokens[1].value == "!("


# =============================================================================
# Newline and Position Tests
# =============================================================================

class TestPositions:
    """Test newline tokens and line/column tracking."""

    def test_newlines_are_tokens(self):
        """Each newline produces a NEWLINE token."""
        assert types("IN\nOUT\n") == [
            TokenType.WORD, TokenType.NEWLINE, TokenType.WORD, TokenType.NEWLINE,
        ]

    def test_crlf_line_endings(self):
        """Carriage returns are skipped like spaces."""
        assert types("IN\r\nOUT") == [TokenType.WORD, TokenType.NEWLINE, TokenType.WORD]

    def test_columns(self):
        """Columns are 1-indexed."""
        tokens = tokenize("  STO a")
        assert (tokens[0].line, tokens[0].column) == (1, 3)
        assert (tokens[1].line, tokens[1].column) == (1, 7)

    def test_lines(self):
        """Line numbers advance after each newline."""
        tokens = tokenize("IN\n\n    HLT")
        hlt = tokens[-1]
        assert hlt.value == "HLT"
        assert (hlt.line, hlt.column) == (3, 5)

    def test_token_location(self):
        """Tokens expose a SourceLocation."""
        tokens = list(Lexer("OUT", "prog.lmc").tokenize())
        assert tokens[0].location == SourceLocation("prog.lmc", 1, 1)

    def test_source_line_helper(self):
        assert source_line("IN\nSTO a\n", 2) == "STO a"
        assert source_line("IN", 5) is None


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Test lexical error reporting."""

    def test_unexpected_character(self):
        """Characters outside the language are rejected."""
        with pytest.raises(ParseError) as exc_info:
            tokenize("STO a;")
        assert "unexpected character ';'" in exc_info.value.message
        assert exc_info.value.location.column == 6

    def test_lone_bang(self):
        """'!' is only valid as part of '!('."""
        with pytest.raises(ParseError) as exc_info:
            tokenize("F! (a)")
        assert "'!'" in exc_info.value.message

    def test_error_quotes_source_line(self):
        """The offending line is included in the error."""
        with pytest.raises(ParseError) as exc_info:
            tokenize("IN\nSTO @x\nOUT")
        error = exc_info.value
        assert error.location.line == 2
        assert error.source_line == "STO @x"
        assert "STO @x" in str(error)
