"""
LC-3 SDK Object File Package
============================

Records and text formats shared by the assembler, linker, disassembler
and LC3Tools transcoder.

Usage:
    from lc3_sdk.objfile import load_module, format_object

    module = load_module("prog")
    print(format_object(module.blocks))
"""

from lc3_sdk.objfile.records import (
    ObjectModule,
    OrigBlock,
    RelocationEntry,
    SymbolRow,
)
from lc3_sdk.objfile.reader import (
    load_module,
    parse_debug_symbols,
    parse_object,
    parse_symbols,
    parse_word,
)
from lc3_sdk.objfile.lc3tools import (
    MemLocation,
    decode_lc3tools,
    encode_lc3tools,
)
from lc3_sdk.objfile.writer import (
    format_debug_symbols,
    format_object,
    format_symbols,
    format_word,
    write_bytes,
    write_text,
)

__all__ = [
    "ObjectModule",
    "OrigBlock",
    "RelocationEntry",
    "SymbolRow",
    "load_module",
    "parse_debug_symbols",
    "parse_object",
    "parse_symbols",
    "parse_word",
    "format_debug_symbols",
    "format_object",
    "format_symbols",
    "format_word",
    "write_bytes",
    "write_text",
    "MemLocation",
    "decode_lc3tools",
    "encode_lc3tools",
]
