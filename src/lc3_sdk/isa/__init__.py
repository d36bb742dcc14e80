"""
LC-3 SDK ISA Package
====================

Instruction set definitions shared by the assembler (which encodes
instructions) and the disassembler (which decodes them), so both read
opcodes, field widths and trap vectors from the same table.

Usage:
    from lc3_sdk.isa import Mnemonic, INSTRUCTION_FORMATS
"""

from lc3_sdk.isa.lc3 import (
    # Core types
    Mnemonic,
    DirectiveName,
    FieldKind,
    OperandField,
    InstructionFormat,
    # Tables
    INSTRUCTION_FORMATS,
    TRAP_VECTORS,
    ALIASES,
    # Condition codes
    COND_N,
    COND_Z,
    COND_P,
    COND_ALL,
    condition_bits,
    condition_suffix,
    # Lookup functions
    expand_alias,
    operand_count,
    # Word helpers
    WORD_MASK,
    REGISTER_COUNT,
    fits_signed,
    fits_unsigned,
    sign_extend,
)

__all__ = [
    "Mnemonic",
    "DirectiveName",
    "FieldKind",
    "OperandField",
    "InstructionFormat",
    "INSTRUCTION_FORMATS",
    "TRAP_VECTORS",
    "ALIASES",
    "COND_N",
    "COND_Z",
    "COND_P",
    "COND_ALL",
    "condition_bits",
    "condition_suffix",
    "expand_alias",
    "operand_count",
    "WORD_MASK",
    "REGISTER_COUNT",
    "fits_signed",
    "fits_unsigned",
    "sign_extend",
]
