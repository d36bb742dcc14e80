"""
LC-3 SDK Disassembler Module
============================

Turns object words back into assembly source, for inspecting assembled
or linked modules.

Usage:
    from lc3_sdk.disassembler import LC3Disassembler

    disasm = LC3Disassembler()
    print(disasm.disassemble_one(0x0FFE, address=0x3001).text)   # BRnzp #-2
"""

from .lc3 import DECODE_RULES, DisassembledInstruction, LC3Disassembler

__all__ = [
    "DECODE_RULES",
    "DisassembledInstruction",
    "LC3Disassembler",
]
