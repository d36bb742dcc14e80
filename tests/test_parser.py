# =============================================================================
# test_parser.py - Parser Unit Tests
# =============================================================================
# Tests for turning source lines into ParsedLine records.
#
# Test coverage includes:
#   - Label / mnemonic / operand splitting
#   - BR condition suffixes
#   - Directives and label-only lines
#   - Diagnostics with line and column
# =============================================================================

import pytest
from lc3_sdk.assembler.operands import Immediate, LabelRef, Register, StringLiteral
from lc3_sdk.assembler.parser import LineKind, Parser, parse_file, parse_source
from lc3_sdk.errors import InvalidRegisterError, MalformedLineError, UnknownMnemonicError
from lc3_sdk.isa import COND_ALL, COND_N, COND_P, COND_Z, DirectiveName, Mnemonic


def parse_one(line: str):
    """Parse a single line and return its ParsedLine."""
    lines = parse_source(line, "<test>")
    assert len(lines) == 1
    return lines[0]


# =============================================================================
# Line Structure Tests
# =============================================================================

class TestLineStructure:
    """Tests for label, mnemonic and operand splitting."""

    def test_label_and_instruction(self):
        line = parse_one("LOOP ADD R0, R0, #1")
        assert line.label == "LOOP"
        assert line.kind is LineKind.INSTRUCTION
        assert line.mnemonic is Mnemonic.ADD
        assert line.operands == [Register(0), Register(0), Immediate(1)]

    def test_instruction_without_label(self):
        line = parse_one("    AND R2, R2, R3")
        assert line.label is None
        assert line.is_instruction
        assert line.operands == [Register(2), Register(2), Register(3)]

    def test_label_only_line(self):
        line = parse_one("DONE   ; nothing else")
        assert line.label == "DONE"
        assert line.kind is None
        assert line.operands == []

    def test_directive(self):
        line = parse_one("MSG .STRINGZ \"Hi\"")
        assert line.label == "MSG"
        assert line.is_directive
        assert line.mnemonic is DirectiveName.STRINGZ
        assert line.operands == [StringLiteral("Hi")]

    def test_label_operand(self):
        line = parse_one("LD R1, VALUE")
        assert line.operands == [Register(1), LabelRef("VALUE")]

    def test_case_insensitive(self):
        line = parse_one("loop add r0, r0, #1")
        assert line.label == "LOOP"
        assert line.mnemonic is Mnemonic.ADD

    def test_text_keeps_case_without_comment(self):
        line = parse_one("loop add r0, r0, #1   ; bump")
        assert line.text == "loop add r0, r0, #1"

    def test_alias_mnemonic(self):
        line = parse_one("HALT")
        assert line.mnemonic is Mnemonic.HALT
        assert line.operands == []

    def test_blank_and_comment_lines_skipped(self):
        lines = parse_source("; header\n\n   \n  ADD R0, R0, #1\n", "<test>")
        assert len(lines) == 1
        assert lines[0].line_number == 4

    def test_operand_columns(self):
        line = parse_one("  ADD R0, R1, #1")
        assert line.operand_columns == [7, 11, 15]


# =============================================================================
# Branch Tests
# =============================================================================

class TestBranchConditions:
    """The condition codes are part of the BR mnemonic."""

    @pytest.mark.parametrize("mnemonic,bits", [
        ("BR", COND_ALL),
        ("BRnzp", COND_ALL),
        ("BRn", COND_N),
        ("BRz", COND_Z),
        ("BRp", COND_P),
        ("BRzp", COND_Z | COND_P),
        ("BRnp", COND_N | COND_P),
        ("brnz", COND_N | COND_Z),
    ])
    def test_condition_bits(self, mnemonic, bits):
        line = parse_one(f"{mnemonic} LOOP")
        assert line.mnemonic is Mnemonic.BR
        assert line.condition == bits

    @pytest.mark.parametrize("mnemonic", ["BRpn", "BRzn", "BRnn", "BRpzn"])
    def test_misordered_suffix(self, mnemonic):
        """Flags must be in n, z, p order, each at most once."""
        with pytest.raises(UnknownMnemonicError):
            parse_one(f"{mnemonic} LOOP")

    def test_branch_label_is_not_mnemonic(self):
        """A label that merely starts with BR is still a label."""
        line = parse_one("BREAK ADD R0, R0, #0")
        assert line.label == "BREAK"


# =============================================================================
# Error Tests
# =============================================================================

class TestParserErrors:
    """Tests for parser diagnostics."""

    def test_unknown_mnemonic_after_label(self):
        with pytest.raises(UnknownMnemonicError) as exc_info:
            parse_one("LOOP FOO R0")
        assert "FOO" in str(exc_info.value)

    def test_unknown_directive(self):
        with pytest.raises(UnknownMnemonicError) as exc_info:
            parse_one(".FOO x3000")
        assert ".FOO" in str(exc_info.value)

    @pytest.mark.parametrize("label", ["R1", "X3000", "#5", "1ABC"])
    def test_invalid_label(self, label):
        with pytest.raises(MalformedLineError) as exc_info:
            parse_one(f"{label} ADD R0, R0, #1")
        assert "not a valid label" in str(exc_info.value)

    @pytest.mark.parametrize("label,hint", [
        ("XFER", "X followed by a hex digit"),
        ("X1Y", "X followed by a hex digit"),
        ("R1", "R followed by a digit"),
        ("1ABC", "reads as a number"),
    ])
    def test_invalid_label_hint(self, label, hint):
        with pytest.raises(MalformedLineError) as exc_info:
            parse_one(f"{label} ADD R0, R0, #1")
        assert hint in exc_info.value.hint

    def test_x_label_without_hex_digit(self):
        assert parse_one("XOR_MASK .FILL 1").label == "XOR_MASK"

    def test_operand_error_has_column(self):
        with pytest.raises(InvalidRegisterError) as exc_info:
            Parser("\n  ADD R0, R9, #1", "prog.asm").parse()
        location = exc_info.value.location
        assert location.filename == "prog.asm"
        assert location.line == 2
        assert location.column == 11

    def test_error_shows_source_line(self):
        with pytest.raises(InvalidRegisterError) as exc_info:
            parse_one("ADD R0, R9, #1")
        message = str(exc_info.value)
        assert "    ADD R0, R9, #1" in message
        assert "hint: registers are R0 through R7" in message


class TestParseFile:
    """Tests for parse_file."""

    def test_parse_file(self, tmp_path):
        path = tmp_path / "prog.asm"
        path.write_text(".ORIG x3000\nHALT\n.END\n")
        lines = parse_file(path)
        assert [line.mnemonic for line in lines] == [
            DirectiveName.ORIG, Mnemonic.HALT, DirectiveName.END,
        ]
        assert lines[0].filename == str(path)
