# =============================================================================
# test_objfile.py - Object File Format Tests
# =============================================================================
# Tests for the text object, symbol and debug symbol formats: rendering,
# parsing, and loading a module back from disk.
# =============================================================================

import pytest
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.errors import ObjectFormatError
from lc3_sdk.objfile import (
    ObjectModule,
    OrigBlock,
    SymbolRow,
    format_debug_symbols,
    format_object,
    format_symbols,
    format_word,
    load_module,
    parse_debug_symbols,
    parse_object,
    parse_symbols,
    parse_word,
    write_bytes,
    write_text,
)


# =============================================================================
# Record Tests
# =============================================================================

class TestRecords:
    """Tests for OrigBlock and ObjectModule."""

    def test_block_items(self):
        block = OrigBlock(0x3000, [1, 2])
        assert list(block.items()) == [(0x3000, 1), (0x3001, 2)]
        assert block.end_address == 0x3002
        assert len(block) == 2

    def test_module_word_at(self):
        module = ObjectModule(blocks=[OrigBlock(0x3000, [1, 2]), OrigBlock(0x3001, [9])])
        assert module.word_at(0x3000) == 1
        assert module.word_at(0x3001) == 9
        assert module.word_at(0x4000) is None
        assert module.size == 3

    def test_symbol_row_ordering(self):
        rows = [
            SymbolRow(0x3001, "B"),
            SymbolRow(0x3000, "PTR", True, "MAIN"),
            SymbolRow(0x3000, "PTR"),
            SymbolRow(0x3000, "A"),
        ]
        assert sorted(rows, key=lambda r: r.sort_key) == [
            SymbolRow(0x3000, "A"),
            SymbolRow(0x3000, "PTR"),
            SymbolRow(0x3000, "PTR", True, "MAIN"),
            SymbolRow(0x3001, "B"),
        ]


# =============================================================================
# Writer Tests
# =============================================================================

class TestWriter:
    """Tests for the text renderers."""

    @pytest.mark.parametrize("value,text", [
        (0, "x0000"),
        (0x3000, "x3000"),
        (0xabcd, "xABCD"),
        (-1, "xFFFF"),
    ])
    def test_format_word(self, value, text):
        assert format_word(value) == text

    def test_format_object(self):
        blocks = [OrigBlock(0x3000, [0x1021, 0x0FFE]), OrigBlock(0x4000, [0x3000])]
        assert format_object(blocks) == (
            "ORIG: x3000\nx1021\nx0FFE\nORIG: x4000\nx3000\n"
        )

    def test_format_object_empty_block(self):
        assert format_object([OrigBlock(0x3000)]) == "ORIG: x3000\n"

    def test_format_symbols_columns(self):
        text = format_symbols([
            SymbolRow(0x4000, "PTR", True, "MAIN"),
            SymbolRow(0x4000, "PTR"),
        ])
        lines = text.splitlines()
        header = lines[0]
        assert header == "ADDRESS  LABEL                EXTERNAL  EXTLABEL"

        # Values line up under their headings
        assert lines[1].index("PTR") == header.index("LABEL")
        assert lines[1].rindex("0") == header.index("EXTERNAL")
        assert lines[2].index("1") == header.index("EXTERNAL")
        assert lines[2].index("MAIN") == header.index("EXTLABEL")

        # No trailing whitespace on definition rows
        assert lines[1] == lines[1].rstrip()

    def test_format_debug_symbols(self):
        text = format_debug_symbols([(0x3000, "ADD R0, R0, #1"), (0x3001, "HALT")])
        assert text == "x3000: ADD R0, R0, #1\nx3001: HALT\n"

    def test_write_text_creates_file(self, tmp_path):
        path = write_text(tmp_path / "out.obj", "ORIG: x3000\n")
        assert path.read_text() == "ORIG: x3000\n"

    def test_write_text_replaces_file(self, tmp_path):
        target = tmp_path / "out.obj"
        target.write_text("old")
        write_text(target, "new")
        assert target.read_text() == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["out.obj"]

    def test_write_text_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            write_text(tmp_path / "missing" / "out.obj", "x")

    def test_write_bytes(self, tmp_path):
        path = write_bytes(tmp_path / "out.bin", b"\x01\x02", atomic=False)
        assert path.read_bytes() == b"\x01\x02"


# =============================================================================
# Reader Tests
# =============================================================================

class TestReader:
    """Tests for the text parsers."""

    @pytest.mark.parametrize("token,value", [("x0", 0), ("x3000", 0x3000), ("Xabcd", 0xABCD)])
    def test_parse_word(self, token, value):
        assert parse_word(token) == value

    @pytest.mark.parametrize("token", ["3000", "x", "x12345", "xGG", "#5"])
    def test_parse_word_invalid(self, token):
        with pytest.raises(ObjectFormatError):
            parse_word(token)

    def test_parse_object(self):
        blocks = parse_object("ORIG: x3000\nx1021\n\nx0FFE\nORIG: x4000\nx3000\n")
        assert blocks == [OrigBlock(0x3000, [0x1021, 0x0FFE]), OrigBlock(0x4000, [0x3000])]

    def test_parse_object_word_before_orig(self):
        with pytest.raises(ObjectFormatError) as exc_info:
            parse_object("x1021\n", "prog.obj")
        assert "prog.obj:1" in str(exc_info.value)

    def test_parse_object_round_trip(self):
        blocks = [OrigBlock(0x3000, [0x1021, 0xFFFF])]
        assert parse_object(format_object(blocks)) == blocks

    def test_parse_symbols(self):
        text = (
            "ADDRESS  LABEL                EXTERNAL  EXTLABEL\n"
            "x4000    PTR                  0\n"
            "x4000    PTR                  1         MAIN\n"
        )
        assert parse_symbols(text) == [
            SymbolRow(0x4000, "PTR"),
            SymbolRow(0x4000, "PTR", True, "MAIN"),
        ]

    def test_parse_symbols_without_header(self):
        assert parse_symbols("x3000 loop 0\n") == [SymbolRow(0x3000, "LOOP")]

    @pytest.mark.parametrize("row", [
        "x3000 LOOP",
        "x3000 LOOP 1",
        "x3000 LOOP 0 EXTRA",
        "x3000 LOOP 2",
    ])
    def test_parse_symbols_malformed(self, row):
        with pytest.raises(ObjectFormatError):
            parse_symbols(row + "\n")

    def test_parse_debug_symbols(self):
        text = "x3000: LOOP ADD R0, R0, #1\nx3001: BR LOOP\n"
        assert parse_debug_symbols(text) == [
            (0x3000, "LOOP ADD R0, R0, #1"),
            (0x3001, "BR LOOP"),
        ]

    def test_parse_debug_symbols_keeps_colons_in_text(self):
        assert parse_debug_symbols("x3000: .STRINGZ \"a:b\"\n") == [(0x3000, '.STRINGZ "a:b"')]

    def test_parse_debug_symbols_malformed(self):
        with pytest.raises(ObjectFormatError):
            parse_debug_symbols("x3000 HALT\n")


# =============================================================================
# Module Loading Tests
# =============================================================================

class TestLoadModule:
    """Tests for load_module."""

    def write_module(self, directory, name="prog", with_debug=True):
        (directory / f"{name}.obj").write_text("ORIG: x3000\nx1021\n")
        (directory / f"{name}.sym").write_text(
            "ADDRESS  LABEL                EXTERNAL  EXTLABEL\nx3000    LOOP                 0\n"
        )
        if with_debug:
            (directory / f"{name}.dbgsym").write_text("x3000: LOOP ADD R0, R0, #1\n")
        return directory / name

    def test_load(self, tmp_path):
        module = load_module(self.write_module(tmp_path))
        assert module.name == "prog"
        assert module.blocks == [OrigBlock(0x3000, [0x1021])]
        assert module.symbols == [SymbolRow(0x3000, "LOOP")]
        assert module.debug_map == {0x3000: "LOOP ADD R0, R0, #1"}

    def test_load_with_obj_suffix(self, tmp_path):
        self.write_module(tmp_path)
        module = load_module(tmp_path / "prog.obj")
        assert module.name == "prog"

    def test_debug_symbols_optional(self, tmp_path):
        module = load_module(self.write_module(tmp_path, with_debug=False))
        assert module.debug_map == {}

    def test_missing_symbol_file(self, tmp_path):
        (tmp_path / "prog.obj").write_text("ORIG: x3000\n")
        with pytest.raises(FileNotFoundError):
            load_module(tmp_path / "prog")

    def test_custom_suffixes(self, tmp_path):
        (tmp_path / "prog.o").write_text("ORIG: x3000\nx0001\n")
        (tmp_path / "prog.s").write_text("")
        config = ToolchainConfig(object_suffix=".o", symbol_suffix=".s")
        module = load_module(tmp_path / "prog", config)
        assert module.size == 1
