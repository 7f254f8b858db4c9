# =============================================================================
# test_preprocessor.py - End-to-End Preprocessor Tests
# =============================================================================
# Tests for the Preprocessor class and the preprocess() entry point:
# source text in, plain assembly text out.
# =============================================================================

import pytest
from lmc_macro import Preprocessor, preprocess, preprocess_file
from lmc_macro.errors import (
    ArityMismatchError,
    LMCError,
    NonTerminatingExpansionError,
    ParseError,
    UnresolvedMacroError,
)
from lmc_macro.preprocessor.opcodes import Opcode


IN_STO_PROGRAM = """IN_STO(location_a, location_b) = {
    IN
    STO location_a
    STO location_b
}
IN_STO!(a, b)
IN_STO!(c, d)
"""

DIVISION_PROGRAM = """# Code to compute a divided by b
    IN
    STO a
    IN
    STO b
start LDA count
    ADD one
    STO count
    LDA a
    SUB b
    STO a
    BRP start
done LDA count
    SUB one
    OUT
    HLT
a DAT 000
b DAT 000
count DAT 000
one DAT 001
"""

DIVISION_OUTPUT = """IN
STO a
IN
STO b
start LDA count
ADD one
STO count
LDA a
SUB b
STO a
BRP start
done LDA count
SUB one
OUT
HLT
a DAT 000
b DAT 000
count DAT 000
one DAT 001
"""


# =============================================================================
# End-to-End Tests
# =============================================================================

class TestPreprocess:
    """Test the preprocess() entry point."""

    def test_in_sto_example(self):
        assert preprocess(IN_STO_PROGRAM) == "IN\nSTO a\nSTO b\nIN\nSTO c\nSTO d\n"

    def test_macro_free_program(self):
        """A program without macros comes out in canonical layout."""
        assert preprocess(DIVISION_PROGRAM) == DIVISION_OUTPUT

    def test_canonical_layout(self):
        assert preprocess("  start\tlda\tcount   \n\n\tout") == "start LDA count\nOUT\n"

    def test_empty_source(self):
        assert preprocess("") == ""

    def test_only_macros(self):
        """Declarations without calls produce no output."""
        assert preprocess("F(a) = {\n    STO a\n}\n") == ""

    def test_tab_separator(self):
        output = preprocess(IN_STO_PROGRAM, separator="tab")
        assert output.splitlines()[1] == "STO\ta"

    def test_macro_wrapped_program(self):
        """Macros compose with ordinary code."""
        output = preprocess("""
        READ_BOTH(x, y) = {
            IN
            STO x
            IN
            STO y
        }
        READ_BOTH!(a, b)
        LDA a
        ADD b
        OUT
        HLT
        a DAT 000
        b DAT 000
        """)
        assert output == (
            "IN\nSTO a\nIN\nSTO b\nLDA a\nADD b\nOUT\nHLT\na DAT 000\nb DAT 000\n"
        )

    def test_unresolved_is_not_fatal(self):
        assert preprocess("MISSING!(a)\nOUT") == "OUT\n"

    def test_unresolved_strict_raises(self):
        with pytest.raises(UnresolvedMacroError):
            preprocess("MISSING!(a)\nOUT", strict=True)

    def test_arity_strict_raises(self):
        with pytest.raises(ArityMismatchError):
            preprocess(IN_STO_PROGRAM + "IN_STO!(x)\n", strict=True)

    def test_parse_error_raises(self):
        with pytest.raises(ParseError) as exc_info:
            preprocess("IN\nSTO a;\n", filename="prog.lmc")
        assert str(exc_info.value).startswith("prog.lmc:2:6: error:")

    def test_recursion_raises(self):
        with pytest.raises(NonTerminatingExpansionError):
            preprocess("R() = {\n    R!()\n}\nR!()", max_passes=3)

    def test_branching_recursion_raises(self):
        with pytest.raises(NonTerminatingExpansionError):
            preprocess("F() = {\n  F!()\n  F!()\n}\nF!()\n")

    def test_errors_share_base_class(self):
        with pytest.raises(LMCError):
            preprocess("}")


# =============================================================================
# Preprocessor Class Tests
# =============================================================================

class TestPreprocessor:
    """Test the Preprocessor class interface."""

    def test_diagnostics_as_warnings(self):
        pp = Preprocessor()
        output = pp.preprocess_string("MISSING!()\nIN_STO!()\nOUT")
        assert output == "OUT\n"
        assert not pp.has_errors()
        assert pp.has_warnings()
        assert len(pp.get_warnings()) == 2
        assert "0 errors, 2 warnings" in pp.get_error_report()

    def test_strict_diagnostics_as_errors(self):
        pp = Preprocessor(strict=True)
        output = pp.preprocess_string("MISSING!()\nOUT", "prog.lmc")
        assert output == "OUT\n"
        assert pp.has_errors()
        report = pp.get_error_report()
        assert "prog.lmc:1:1: error: call to undeclared macro 'MISSING'" in report

    def test_runs_are_independent(self):
        pp = Preprocessor()
        pp.preprocess_string("MISSING!()")
        assert pp.has_warnings()
        pp.preprocess_string("OUT")
        assert not pp.has_warnings()
        assert pp.get_output() == "OUT\n"

    def test_get_program(self):
        pp = Preprocessor()
        pp.preprocess_string(IN_STO_PROGRAM)
        program = pp.get_program()
        assert [i.opcode for i in program] == [
            Opcode.IN, Opcode.STO, Opcode.STO, Opcode.IN, Opcode.STO, Opcode.STO,
        ]

    def test_get_output_before_run(self):
        with pytest.raises(RuntimeError):
            Preprocessor().get_output()

    def test_literal_separator(self):
        pp = Preprocessor(separator="  ")
        assert pp.preprocess_string("x ADD y") == "x  ADD  y\n"

    def test_invalid_max_passes(self):
        with pytest.raises(ValueError):
            Preprocessor(max_passes=0)


# =============================================================================
# File Tests
# =============================================================================

class TestFiles:
    """Test reading sources and writing output."""

    def test_preprocess_file(self, tmp_path):
        source = tmp_path / "prog.lmc"
        source.write_text(IN_STO_PROGRAM, encoding="utf-8")
        assert preprocess_file(source) == "IN\nSTO a\nSTO b\nIN\nSTO c\nSTO d\n"

    def test_error_names_file(self, tmp_path):
        source = tmp_path / "bad.lmc"
        source.write_text("OUT\nloop STA x\n", encoding="utf-8")
        with pytest.raises(ParseError) as exc_info:
            Preprocessor().preprocess_file(source)
        assert exc_info.value.location.filename == str(source)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            preprocess_file(tmp_path / "missing.lmc")

    def test_write_output(self, tmp_path):
        source = tmp_path / "prog.lmc"
        source.write_text(IN_STO_PROGRAM, encoding="utf-8")
        target = tmp_path / "prog.asm"

        pp = Preprocessor()
        pp.preprocess_file(source)
        pp.write_output(target)
        assert target.read_text(encoding="utf-8") == pp.get_output()

    def test_preprocess_file_strict_raises(self, tmp_path):
        """preprocess_file() reports collected errors the same way as preprocess()."""
        source = tmp_path / "prog.lmc"
        source.write_text("NOPE!(a)\nHLT\n", encoding="utf-8")

        assert preprocess_file(source) == "HLT\n"
        with pytest.raises(UnresolvedMacroError) as exc_info:
            preprocess_file(source, strict=True)
        assert exc_info.value.location.filename == str(source)
