# =============================================================================
# test_linker.py - Linker Tests
# =============================================================================
# Tests for merging modules and patching external fill sites.
#
# Test coverage includes:
#   - Scenario B: a pointer in one module to a label in another
#   - Module order independence
#   - Multiply defined and undefined symbols
#   - Merged symbol and debug output
#   - Linking from files on disk
# =============================================================================

import pytest
from lc3_sdk.assembler import Assembler, assemble
from lc3_sdk.errors import (
    AssemblerError,
    LinkerError,
    MultiplyDefinedSymbolError,
    UndefinedSymbolError,
)
from lc3_sdk.linker import Linker, link_files
from lc3_sdk.objfile import RelocationEntry, SymbolRow, load_module


POINTER_MODULE = """\
        .ORIG x4000
        .EXTERNAL MAIN
PTR     .FILL MAIN
        .END
"""

MAIN_MODULE = """\
        .ORIG x3000
MAIN    ADD R0, R0, #1
        HALT
        .END
"""


def link_sources(*sources):
    """Assemble each source and link the modules in order."""
    linker = Linker()
    for index, source in enumerate(sources):
        module = assemble(source, f"mod{index}.asm")
        module.name = f"mod{index}"
        linker.add_module(module)
    return linker.link()


# =============================================================================
# Linking Tests
# =============================================================================

class TestLinking:
    """Tests for resolving externals across modules."""

    def test_scenario_b(self):
        """The pointer word is patched with MAIN's address."""
        result = link_sources(POINTER_MODULE, MAIN_MODULE)
        assert result.module.word_at(0x4000) == 0x3000

    def test_module_order_does_not_matter(self):
        result = link_sources(MAIN_MODULE, POINTER_MODULE)
        assert result.module.word_at(0x4000) == 0x3000

    def test_other_words_unchanged(self):
        result = link_sources(POINTER_MODULE, MAIN_MODULE)
        assert result.module.word_at(0x3000) == 0x1021
        assert result.module.word_at(0x3001) == 0xF025

    def test_relocations(self):
        result = link_sources(POINTER_MODULE, MAIN_MODULE)
        assert result.relocations == [RelocationEntry(0x4000, 0x3000)]

    def test_blocks_in_module_order(self):
        result = link_sources(POINTER_MODULE, MAIN_MODULE)
        assert [b.base_address for b in result.module.blocks] == [0x4000, 0x3000]

    def test_unlabeled_fill_sites(self):
        caller = """\
        .ORIG x3000
        .EXTERNAL PRINT
        .FILL PRINT
        .FILL PRINT
        .END
"""
        library = ".ORIG x5000\nNOP_ ADD R0, R0, #0\nPRINT RET\n.END\n"
        result = link_sources(caller, library)
        assert result.module.blocks[0].words == [0x5001, 0x5001]

    def test_externals_in_both_directions(self):
        a = """\
        .ORIG x3000
        .EXTERNAL B_ENTRY
A_ENTRY HALT
PTR_B   .FILL B_ENTRY
        .END
"""
        b = """\
        .ORIG x4000
        .EXTERNAL A_ENTRY
B_ENTRY RET
PTR_A   .FILL A_ENTRY
        .END
"""
        result = link_sources(a, b)
        assert result.module.word_at(0x3001) == 0x4000
        assert result.module.word_at(0x4001) == 0x3000

    def test_single_module_without_externals(self):
        result = link_sources(MAIN_MODULE)
        assert result.module.blocks[0].words == [0x1021, 0xF025]
        assert result.relocations == []


# =============================================================================
# Error Tests
# =============================================================================

class TestLinkErrors:
    """Tests for link-time symbol errors."""

    def test_multiply_defined(self):
        other = ".ORIG x5000\nMAIN RET\n.END\n"
        with pytest.raises(MultiplyDefinedSymbolError) as exc_info:
            link_sources(MAIN_MODULE, other)
        assert exc_info.value.symbol == "MAIN"
        assert "module 'mod0'" in str(exc_info.value)

    def test_undefined(self):
        with pytest.raises(UndefinedSymbolError) as exc_info:
            link_sources(POINTER_MODULE)
        assert exc_info.value.symbol == "MAIN"
        assert "no module defines" in str(exc_info.value)

    def test_errors_are_linker_errors(self):
        """Symbol errors belong to both the assembler and linker families."""
        assert issubclass(UndefinedSymbolError, LinkerError)
        assert issubclass(UndefinedSymbolError, AssemblerError)
        assert issubclass(MultiplyDefinedSymbolError, LinkerError)

    def test_write_before_link(self, tmp_path):
        with pytest.raises(RuntimeError):
            Linker().write_outputs(tmp_path / "linked")


# =============================================================================
# Output Tests
# =============================================================================

class TestLinkOutputs:
    """Merged symbol and debug information."""

    def test_merged_symbols(self):
        result = link_sources(POINTER_MODULE, MAIN_MODULE)
        assert result.module.symbols == [
            SymbolRow(0x3000, "MAIN"),
            SymbolRow(0x4000, "PTR"),
            SymbolRow(0x4000, "PTR", True, "MAIN"),
        ]

    def test_debug_entries_concatenated(self):
        result = link_sources(POINTER_MODULE, MAIN_MODULE)
        assert result.debug_entries == [
            (0x3000, "MAIN    ADD R0, R0, #1"),
            (0x3001, "HALT"),
        ]

    def test_default_module_names(self):
        linker = Linker()
        linker.add_module(assemble(MAIN_MODULE))
        assert linker.modules[0].name == "module1"


# =============================================================================
# File Tests
# =============================================================================

class TestLinkFiles:
    """Linking modules written by the assembler."""

    def assemble_to(self, directory, name, source):
        asm = Assembler()
        asm.assemble(source, f"{name}.asm")
        asm.write_outputs(directory / name)
        return directory / name

    def test_link_files(self, tmp_path):
        bases = [
            self.assemble_to(tmp_path, "ptr", POINTER_MODULE),
            self.assemble_to(tmp_path, "main", MAIN_MODULE),
        ]
        result = link_files(bases)
        assert result.module.word_at(0x4000) == 0x3000

    def test_write_outputs(self, tmp_path):
        linker = Linker()
        linker.add_file(self.assemble_to(tmp_path, "ptr", POINTER_MODULE))
        linker.add_file(self.assemble_to(tmp_path, "main", MAIN_MODULE))
        linker.link()
        linker.write_outputs(tmp_path / "linked")

        assert (tmp_path / "linked.obj").read_text() == (
            "ORIG: x4000\nx3000\nORIG: x3000\nx1021\nxF025\n"
        )
        merged = load_module(tmp_path / "linked")
        assert merged.debug_map == {0x3000: "MAIN    ADD R0, R0, #1", 0x3001: "HALT"}
        assert SymbolRow(0x4000, "PTR", True, "MAIN") in merged.symbols

    def test_missing_module(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Linker().add_file(tmp_path / "nope")

    def test_module_name_from_file(self, tmp_path):
        linker = Linker()
        module = linker.add_file(self.assemble_to(tmp_path, "main", MAIN_MODULE))
        assert module.name == "main"
