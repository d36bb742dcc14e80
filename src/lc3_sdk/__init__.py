"""
LC-3 SDK - Assembler and Linker Toolchain for the LC-3
======================================================

This package provides a toolchain for the LC-3, the 16-bit educational
computer: a two-pass assembler, a linker for separately assembled modules,
a disassembler, and a converter for the LC3Tools simulator's object files.

The LC-3 has eight general purpose registers, a 16-bit word-addressed
memory of 65536 words, and fifteen instructions. Every instruction is one
word; operands that name memory are PC-relative offsets.

Main Components
---------------
- **assembler**: LC-3 assembler (lc3asm)
    Converts assembly source files (.asm) to text object files (.obj) with
    a symbol file (.sym) and a debug symbol file (.dbgsym)

- **linker**: Linker (lc3link)
    Resolves .EXTERNAL symbols across modules and patches their .FILL words

- **disassembler**: Disassembler (lc3disasm)
    Turns object words back into assembly source

- **objfile**: Object file formats
    Text object, symbol and debug symbol files, and LC3Tools binary objects
    (lc3conv)

Quick Start
-----------
Assemble a program:
    >>> from lc3_sdk.assembler import Assembler
    >>> asm = Assembler()
    >>> module = asm.assemble_file("prog.asm")
    >>> asm.write_outputs("prog")

Link two modules:
    >>> from lc3_sdk.linker import Linker
    >>> linker = Linker()
    >>> linker.add_file("main")
    >>> linker.add_file("lib")
    >>> result = linker.link()
    >>> linker.write_outputs("linked")

Or use the command-line tools:
    $ lc3asm main.asm
    $ lc3asm lib.asm
    $ lc3link main lib -o program
    $ lc3disasm program.obj

Version History
---------------
1.0.0 - Initial release with assembler, linker, disassembler and LC3Tools
        conversion
"""

__version__ = "1.0.0"
__author__ = "LC-3 SDK Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from lc3_sdk.assembler import Assembler
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.disassembler import LC3Disassembler
from lc3_sdk.errors import (
    Lc3Error,
    AssemblerError,
    LinkerError,
    SourceLocation,
    MalformedLineError,
    UnknownMnemonicError,
    InvalidRegisterError,
    ImmediateRangeError,
    OffsetRangeError,
    ExternalPcRelativeError,
    MissingEndDirective,
    CyclicAliasError,
    MultiplyDefinedSymbolError,
    UndefinedSymbolError,
    ObjectFormatError,
)
from lc3_sdk.linker import Linker
from lc3_sdk.objfile import ObjectModule, OrigBlock, SymbolRow

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Main classes
    "Assembler",
    "Linker",
    "LC3Disassembler",
    "ToolchainConfig",
    "ObjectModule",
    "OrigBlock",
    "SymbolRow",
    # Exceptions
    "Lc3Error",
    "AssemblerError",
    "LinkerError",
    "SourceLocation",
    "MalformedLineError",
    "UnknownMnemonicError",
    "InvalidRegisterError",
    "ImmediateRangeError",
    "OffsetRangeError",
    "ExternalPcRelativeError",
    "MissingEndDirective",
    "CyclicAliasError",
    "MultiplyDefinedSymbolError",
    "UndefinedSymbolError",
    "ObjectFormatError",
]
