# =============================================================================
# test_lc3tools.py - LC3Tools Object Format Tests
# =============================================================================
# Tests for the LC3Tools binary object format and the lc3conv tool.
#
# Test coverage includes:
#   - Header and record layout
#   - Debug map lines carried as record text
#   - Decoding errors (magic, version, truncation)
#   - Forward and reverse conversion on disk
# =============================================================================

import struct

import pytest
from click.testing import CliRunner

from lc3_sdk.cli.lc3conv import main
from lc3_sdk.errors import ObjectFormatError
from lc3_sdk.objfile import (
    MemLocation,
    ObjectModule,
    OrigBlock,
    decode_lc3tools,
    encode_lc3tools,
)
from lc3_sdk.objfile.lc3tools import LC3TOOLS_MAGIC, LC3TOOLS_VERSION, decode_locations


HEADER = LC3TOOLS_MAGIC + LC3TOOLS_VERSION


def sample_module() -> ObjectModule:
    return ObjectModule(
        blocks=[OrigBlock(0x3000, [0x1021, 0x0FFE])],
        debug_map={0x3000: "LOOP ADD R0, R0, #1", 0x3001: "BR LOOP"},
    )


# =============================================================================
# Encoding Tests
# =============================================================================

class TestEncoding:
    """Tests for encode_lc3tools."""

    def test_header(self):
        data = encode_lc3tools(ObjectModule())
        assert data == bytes([0x1C, 0x30, 0x15, 0xC0, 0x01, 0x01, 0x01])

    def test_orig_record(self):
        data = encode_lc3tools(ObjectModule(blocks=[OrigBlock(0x3000)]))
        assert data[len(HEADER):] == bytes([0x00, 0x30, 0x01, 0x00, 0x00, 0x00, 0x00])

    def test_word_record_with_line(self):
        module = ObjectModule(blocks=[OrigBlock(0x3000, [0xF025])], debug_map={0x3000: "HALT"})
        data = encode_lc3tools(module)
        record = data[len(HEADER) + 7:]
        assert record == struct.pack("<HBI", 0xF025, 0, 4) + b"HALT"

    def test_mem_location_text_form(self):
        assert str(MemLocation(0x3000, is_orig=True)) == "ORIG: x3000"
        assert str(MemLocation(0x1021)) == "x1021"


# =============================================================================
# Decoding Tests
# =============================================================================

class TestDecoding:
    """Tests for decode_lc3tools."""

    def test_round_trip(self):
        module = sample_module()
        decoded = decode_lc3tools(encode_lc3tools(module))
        assert decoded.blocks == module.blocks
        assert decoded.debug_map == module.debug_map

    def test_locations(self):
        locations = decode_locations(encode_lc3tools(sample_module()))
        assert locations[0] == MemLocation(0x3000, "", True)
        assert locations[1] == MemLocation(0x1021, "LOOP ADD R0, R0, #1", False)

    def test_too_short(self):
        with pytest.raises(ObjectFormatError) as exc_info:
            decode_lc3tools(b"\x1c\x30")
        assert "too short" in str(exc_info.value)

    def test_bad_magic(self):
        with pytest.raises(ObjectFormatError) as exc_info:
            decode_lc3tools(b"\x00" * 7)
        assert "not an LC3Tools" in str(exc_info.value)

    def test_bad_version(self):
        with pytest.raises(ObjectFormatError) as exc_info:
            decode_lc3tools(LC3TOOLS_MAGIC + b"\x02\x00")
        assert "version" in str(exc_info.value)

    def test_truncated_record(self):
        with pytest.raises(ObjectFormatError):
            decode_lc3tools(HEADER + b"\x00\x30")

    def test_truncated_line_text(self):
        with pytest.raises(ObjectFormatError):
            decode_lc3tools(HEADER + struct.pack("<HBI", 0x1021, 0, 10) + b"ADD")

    def test_word_before_orig(self):
        with pytest.raises(ObjectFormatError):
            decode_lc3tools(HEADER + struct.pack("<HBI", 0x1021, 0, 0))


# =============================================================================
# CLI Tests
# =============================================================================

class TestConverterCLI:
    """Tests for the lc3conv CLI tool."""

    def test_forward(self, tmp_path):
        (tmp_path / "prog.obj").write_text("ORIG: x3000\nx1021\nx0FFE\n")
        (tmp_path / "prog.dbgsym").write_text("x3000: LOOP ADD R0, R0, #1\nx3001: BR LOOP\n")

        runner = CliRunner()
        result = runner.invoke(main, [str(tmp_path / "prog.obj")])

        assert result.exit_code == 0
        data = (tmp_path / "prog.lc3tools.obj").read_bytes()
        assert data == encode_lc3tools(sample_module())

    def test_forward_without_debug_symbols(self, tmp_path):
        (tmp_path / "prog.obj").write_text("ORIG: x3000\nxF025\n")

        runner = CliRunner()
        result = runner.invoke(main, [str(tmp_path / "prog.obj")])

        assert result.exit_code == 0
        module = decode_lc3tools((tmp_path / "prog.lc3tools.obj").read_bytes())
        assert module.debug_map == {}

    def test_reverse(self, tmp_path):
        (tmp_path / "prog.lc3tools.obj").write_bytes(encode_lc3tools(sample_module()))

        runner = CliRunner()
        result = runner.invoke(main, ["-v", str(tmp_path / "prog.lc3tools.obj")])

        assert result.exit_code == 0
        assert (tmp_path / "prog.obj").read_text() == "ORIG: x3000\nx1021\nx0FFE\n"
        assert (tmp_path / "prog.dbgsym").read_text() == (
            "x3000: LOOP ADD R0, R0, #1\nx3001: BR LOOP\n"
        )

    def test_reverse_plain_obj_name(self, tmp_path):
        """A binary without the .lc3tools.obj suffix does not overwrite itself."""
        (tmp_path / "sim.obj").write_bytes(encode_lc3tools(sample_module()))

        runner = CliRunner()
        result = runner.invoke(main, ["--reverse", str(tmp_path / "sim.obj")])

        assert result.exit_code == 0
        assert (tmp_path / "sim.text.obj").read_text().startswith("ORIG: x3000")
        assert (tmp_path / "sim.obj").read_bytes().startswith(LC3TOOLS_MAGIC)

    def test_wrong_suffix(self, tmp_path):
        (tmp_path / "prog.bin").write_text("ORIG: x3000\n")

        runner = CliRunner()
        result = runner.invoke(main, [str(tmp_path / "prog.bin")])

        assert result.exit_code == 2

    def test_reverse_of_text_file(self, tmp_path):
        (tmp_path / "prog.lc3tools.obj").write_text("ORIG: x3000\n")

        runner = CliRunner()
        result = runner.invoke(main, ["-v", str(tmp_path / "prog.lc3tools.obj")])

        assert result.exit_code == 1
        assert "not an LC3Tools object file" in result.output
