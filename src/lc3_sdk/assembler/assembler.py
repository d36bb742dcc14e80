"""
LC-3 Assembler - Main Interface
===============================

This module provides the main Assembler class, the primary interface for
assembling LC-3 source code. It coordinates the parser and the code
generator and writes the three output files of an assembly run.

Example Usage
-------------
>>> from lc3_sdk.assembler import Assembler
>>>
>>> asm = Assembler()
>>> module = asm.assemble('''
...     .ORIG x3000
... LOOP ADD R0, R0, #1
...      BR LOOP
...     .END
... ''')
>>> [hex(word) for word in module.blocks[0].words]
['0x1021', '0xffe']
>>>
>>> asm.write_outputs("loop")      # loop.obj, loop.sym, loop.dbgsym

Command-Line Usage
------------------
    $ lc3asm loop.asm

Writes loop.obj, loop.sym, loop.dbgsym and the run log loop.debug.
"""

from pathlib import Path
import logging
from typing import Optional, Union

from lc3_sdk.assembler.codegen import AssemblyContext, CodeGenerator
from lc3_sdk.assembler.parser import ParsedLine, parse_source
from lc3_sdk.assembler.symbols import SymbolTable
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.objfile.records import ObjectModule
from lc3_sdk.objfile.writer import (
    format_debug_symbols,
    format_object,
    format_symbols,
    write_text,
)


logger = logging.getLogger(__name__)


class Assembler:
    """
    Main LC-3 assembler class.

    Each call to assemble() or assemble_file() is an independent run; the
    results of the latest run are available through get_module(),
    get_symbols() and the write_* methods.

    Attributes:
        config: File suffixes and output behaviour
    """

    def __init__(self, config: Optional[ToolchainConfig] = None):
        self.config = config or ToolchainConfig()
        self._module: Optional[ObjectModule] = None
        self._context: Optional[AssemblyContext] = None
        self._lines: list[ParsedLine] = []

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, source: str, filename: str = "<input>") -> ObjectModule:
        """
        Assemble source code from a string.

        The assembly pipeline is:
        1. Parse source into ParsedLine records (lexer -> operands -> parser)
        2. Pass 1, alias resolution and pass 2 over the same records

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            The assembled object module

        Raises:
            AssemblerError: If assembly fails
        """
        self._lines = parse_source(source, filename)
        logger.debug(f"parsed {len(self._lines)} line(s) from {filename}")

        codegen = CodeGenerator(filename)
        module = codegen.generate(self._lines)

        self._context = codegen.context
        self._module = module
        return module

    def assemble_file(self, filepath: Union[str, Path]) -> ObjectModule:
        """
        Assemble source code from a file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        logger.info(f"Assembling {filepath}")
        source = filepath.read_text(encoding="utf-8")
        module = self.assemble(source, str(filepath))
        module.name = filepath.stem
        return module

    # =========================================================================
    # Results
    # =========================================================================

    def get_module(self) -> ObjectModule:
        """The module produced by the latest run."""
        if self._module is None:
            raise RuntimeError("nothing has been assembled yet")
        return self._module

    def get_symbols(self) -> SymbolTable:
        """The symbol table of the latest run."""
        if self._context is None:
            raise RuntimeError("nothing has been assembled yet")
        return self._context.symbols

    def get_lines(self) -> list[ParsedLine]:
        """Parsed lines of the latest run, with pass 1 addresses."""
        return list(self._lines)

    # =========================================================================
    # Output Methods
    # =========================================================================

    def write_object(self, filepath: Union[str, Path]) -> Path:
        """Write the text object file."""
        return write_text(
            filepath, format_object(self.get_module().blocks), self.config.atomic_writes
        )

    def write_symbols(self, filepath: Union[str, Path]) -> Path:
        """Write the symbol file."""
        return write_text(
            filepath, format_symbols(self.get_module().symbols), self.config.atomic_writes
        )

    def write_debug_symbols(self, filepath: Union[str, Path]) -> Path:
        """Write the debug symbol file (address to source line)."""
        entries = sorted(self.get_module().debug_map.items())
        return write_text(filepath, format_debug_symbols(entries), self.config.atomic_writes)

    def write_outputs(self, base: Union[str, Path]) -> list[Path]:
        """
        Write <base>.obj, <base>.sym and <base>.dbgsym.

        All three are rendered from the finished module, so nothing is
        written for a run that failed.
        """
        base = Path(base)
        config = self.config
        paths = [
            self.write_object(base.with_name(base.name + config.object_suffix)),
            self.write_symbols(base.with_name(base.name + config.symbol_suffix)),
            self.write_debug_symbols(base.with_name(base.name + config.debug_symbol_suffix)),
        ]
        for path in paths:
            logger.info(f"Wrote {path}")
        return paths


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> ObjectModule:
    """
    Convenience function to assemble source code.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble(source, filename)


def assemble_file(filepath: Union[str, Path]) -> ObjectModule:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_file(filepath)
