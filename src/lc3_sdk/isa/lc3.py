"""
LC-3 Instruction Set Definition
===============================

This module defines the LC-3 instruction set as a declarative table: every
mnemonic the assembler accepts maps to an InstructionFormat describing its
4-bit opcode, the constant bits it always sets, and the operand fields that
are packed into the remaining 12 bits.

The LC-3 is a 16-bit word-addressed machine with eight general purpose
registers (R0-R7). Every instruction is exactly one word:

    15  12 11                                  0
    +------+-----------------------------------+
    |opcode|        operand fields             |
    +------+-----------------------------------+

Operand Fields
--------------
- **REGISTER**: 3-bit register number at bit 9 (DR/SR), 6 (SR1/BaseR) or 0 (SR2)
- **REGISTER_OR_IMM5**: ADD/AND third operand; bit 5 selects imm5
- **OFFSET6**: signed base+offset displacement (LDR, STR)
- **PC_OFFSET9**: signed PC-relative displacement (LD, LDI, LEA, ST, STI, BR)
- **PC_OFFSET11**: signed PC-relative displacement (JSR)
- **TRAP_VECTOR**: unsigned 8-bit trap vector (TRAP)

PC-relative offsets are measured from the incremented PC, i.e. the address
of the instruction plus one.

Aliases
-------
RET, HALT, GETC, OUT, PUTS, IN and PUTSP are not separate instructions;
they are expanded to JMP R7 or TRAP xNN before encoding.

Reference
---------
- Patt & Patel, "Introduction to Computing Systems", Appendix A
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Word Helpers
# =============================================================================

WORD_MASK = 0xFFFF
REGISTER_COUNT = 8


def fits_signed(value: int, bits: int) -> bool:
    """Check whether value fits a two's-complement field of the given width."""
    return -(1 << (bits - 1)) <= value <= (1 << (bits - 1)) - 1


def fits_unsigned(value: int, bits: int) -> bool:
    """Check whether value fits an unsigned field of the given width."""
    return 0 <= value < (1 << bits)


def sign_extend(value: int, bits: int) -> int:
    """
    Interpret the low `bits` bits of value as a two's-complement number.

    Examples:
        sign_extend(0x1F, 5)  -> -1
        sign_extend(0x0F, 5)  -> 15
        sign_extend(0x1FE, 9) -> -2
    """
    value &= (1 << bits) - 1
    if value & (1 << (bits - 1)):
        value -= 1 << bits
    return value


# =============================================================================
# Mnemonics and Directives
# =============================================================================

class Mnemonic(Enum):
    """
    Closed set of instruction mnemonics understood by the assembler.

    BR covers every condition variant (BRn, BRzp, BRnzp, ...); the
    condition flags travel separately on the parsed line.
    """
    ADD = "ADD"
    AND = "AND"
    BR = "BR"
    JMP = "JMP"
    JSR = "JSR"
    JSRR = "JSRR"
    LD = "LD"
    LDI = "LDI"
    LDR = "LDR"
    LEA = "LEA"
    NOT = "NOT"
    RET = "RET"
    RTI = "RTI"
    ST = "ST"
    STI = "STI"
    STR = "STR"
    TRAP = "TRAP"
    # Trap and return aliases
    HALT = "HALT"
    GETC = "GETC"
    OUT = "OUT"
    PUTS = "PUTS"
    IN = "IN"
    PUTSP = "PUTSP"

    @classmethod
    def lookup(cls, token: str) -> Optional["Mnemonic"]:
        """Return the mnemonic named by token (case-insensitive), or None."""
        try:
            return cls(token.upper())
        except ValueError:
            return None


class DirectiveName(Enum):
    """Assembler directives (pseudo-ops)."""
    ORIG = ".ORIG"
    END = ".END"
    FILL = ".FILL"
    BLKW = ".BLKW"
    STRINGZ = ".STRINGZ"
    EXTERNAL = ".EXTERNAL"

    @classmethod
    def lookup(cls, token: str) -> Optional["DirectiveName"]:
        """Return the directive named by token (case-insensitive), or None."""
        try:
            return cls(token.upper())
        except ValueError:
            return None


# =============================================================================
# Condition Codes
# =============================================================================

COND_N = 0b100
COND_Z = 0b010
COND_P = 0b001
COND_ALL = COND_N | COND_Z | COND_P


def condition_bits(suffix: str) -> int:
    """
    Convert a BR suffix ("", "N", "ZP", "NZP", ...) into the nzp field.

    A bare BR branches unconditionally, the same as BRnzp.
    """
    bits = 0
    for flag, value in (("N", COND_N), ("Z", COND_Z), ("P", COND_P)):
        if flag in suffix.upper():
            bits |= value
    return bits or COND_ALL


def condition_suffix(bits: int) -> str:
    """Inverse of condition_bits: 0b101 -> "np"."""
    return "".join(
        flag for flag, value in (("n", COND_N), ("z", COND_Z), ("p", COND_P))
        if bits & value
    )


# =============================================================================
# Instruction Formats
# =============================================================================

class FieldKind(Enum):
    """Kinds of operand field packed into an instruction word."""
    REGISTER = auto()
    REGISTER_OR_IMM5 = auto()
    OFFSET6 = auto()
    PC_OFFSET9 = auto()
    PC_OFFSET11 = auto()
    TRAP_VECTOR = auto()

    def __str__(self) -> str:
        """Return human-readable name for error messages."""
        return {
            FieldKind.REGISTER: "register",
            FieldKind.REGISTER_OR_IMM5: "register or imm5",
            FieldKind.OFFSET6: "offset6",
            FieldKind.PC_OFFSET9: "PCoffset9",
            FieldKind.PC_OFFSET11: "PCoffset11",
            FieldKind.TRAP_VECTOR: "trapvect8",
        }[self]

    @property
    def width(self) -> int:
        """Width of the field in bits."""
        return {
            FieldKind.REGISTER: 3,
            FieldKind.REGISTER_OR_IMM5: 5,
            FieldKind.OFFSET6: 6,
            FieldKind.PC_OFFSET9: 9,
            FieldKind.PC_OFFSET11: 11,
            FieldKind.TRAP_VECTOR: 8,
        }[self]

    @property
    def is_pc_relative(self) -> bool:
        return self in (FieldKind.PC_OFFSET9, FieldKind.PC_OFFSET11)


@dataclass(frozen=True)
class OperandField:
    """
    One operand's position in the instruction word.

    Attributes:
        kind: What the operand is and how wide its field is
        shift: Bit position of the field's least significant bit
    """
    kind: FieldKind
    shift: int = 0


@dataclass(frozen=True)
class InstructionFormat:
    """
    Bit layout of one mnemonic.

    This dataclass is immutable (frozen) to prevent accidental modification
    of the format table at runtime.

    Attributes:
        opcode: 4-bit opcode placed in bits 15-12
        fields: Operand fields in source operand order
        fixed_bits: Constant bits OR'd into every encoding
    """
    opcode: int
    fields: tuple[OperandField, ...] = ()
    fixed_bits: int = 0

    @property
    def arity(self) -> int:
        """Number of source operands the mnemonic takes."""
        return len(self.fields)

    @property
    def base_word(self) -> int:
        """Opcode and constant bits with every operand field zero."""
        return ((self.opcode << 12) | self.fixed_bits) & WORD_MASK


# Field shorthands
_DR = OperandField(FieldKind.REGISTER, 9)
_SR1 = OperandField(FieldKind.REGISTER, 6)
_BASE = OperandField(FieldKind.REGISTER, 6)
_SR2_IMM5 = OperandField(FieldKind.REGISTER_OR_IMM5, 0)
_OFFSET6 = OperandField(FieldKind.OFFSET6, 0)
_PC9 = OperandField(FieldKind.PC_OFFSET9, 0)
_PC11 = OperandField(FieldKind.PC_OFFSET11, 0)
_TRAPVECT = OperandField(FieldKind.TRAP_VECTOR, 0)


# =============================================================================
# Opcode Table
# =============================================================================
# Key: mnemonic (aliases are expanded before lookup)
# Value: InstructionFormat(opcode, fields, fixed_bits)
#
# BR's nzp bits are not fixed; they come from the parsed condition suffix.
# =============================================================================

OP_BR = 0x0
OP_ADD = 0x1
OP_LD = 0x2
OP_ST = 0x3
OP_JSR = 0x4
OP_AND = 0x5
OP_LDR = 0x6
OP_STR = 0x7
OP_RTI = 0x8
OP_NOT = 0x9
OP_LDI = 0xA
OP_STI = 0xB
OP_JMP = 0xC
OP_RESERVED = 0xD
OP_LEA = 0xE
OP_TRAP = 0xF

INSTRUCTION_FORMATS: dict[Mnemonic, InstructionFormat] = {
    Mnemonic.ADD: InstructionFormat(OP_ADD, (_DR, _SR1, _SR2_IMM5)),
    Mnemonic.AND: InstructionFormat(OP_AND, (_DR, _SR1, _SR2_IMM5)),
    Mnemonic.BR: InstructionFormat(OP_BR, (_PC9,)),
    Mnemonic.JMP: InstructionFormat(OP_JMP, (_BASE,)),
    Mnemonic.JSR: InstructionFormat(OP_JSR, (_PC11,), fixed_bits=0x0800),
    Mnemonic.JSRR: InstructionFormat(OP_JSR, (_BASE,)),
    Mnemonic.LD: InstructionFormat(OP_LD, (_DR, _PC9)),
    Mnemonic.LDI: InstructionFormat(OP_LDI, (_DR, _PC9)),
    Mnemonic.LDR: InstructionFormat(OP_LDR, (_DR, _BASE, _OFFSET6)),
    Mnemonic.LEA: InstructionFormat(OP_LEA, (_DR, _PC9)),
    Mnemonic.NOT: InstructionFormat(OP_NOT, (_DR, _SR1), fixed_bits=0x003F),
    Mnemonic.RTI: InstructionFormat(OP_RTI),
    Mnemonic.ST: InstructionFormat(OP_ST, (_DR, _PC9)),
    Mnemonic.STI: InstructionFormat(OP_STI, (_DR, _PC9)),
    Mnemonic.STR: InstructionFormat(OP_STR, (_DR, _BASE, _OFFSET6)),
    Mnemonic.TRAP: InstructionFormat(OP_TRAP, (_TRAPVECT,)),
}


# =============================================================================
# Trap Vectors and Aliases
# =============================================================================

TRAP_GETC = 0x20
TRAP_OUT = 0x21
TRAP_PUTS = 0x22
TRAP_IN = 0x23
TRAP_PUTSP = 0x24
TRAP_HALT = 0x25

TRAP_VECTORS: dict[Mnemonic, int] = {
    Mnemonic.GETC: TRAP_GETC,
    Mnemonic.OUT: TRAP_OUT,
    Mnemonic.PUTS: TRAP_PUTS,
    Mnemonic.IN: TRAP_IN,
    Mnemonic.PUTSP: TRAP_PUTSP,
    Mnemonic.HALT: TRAP_HALT,
}

# Alias -> (real mnemonic, field values)
ALIASES: dict[Mnemonic, tuple[Mnemonic, tuple[int, ...]]] = {
    Mnemonic.RET: (Mnemonic.JMP, (7,)),
    **{alias: (Mnemonic.TRAP, (vector,)) for alias, vector in TRAP_VECTORS.items()},
}


def expand_alias(mnemonic: Mnemonic) -> Optional[tuple[Mnemonic, tuple[int, ...]]]:
    """Return the (mnemonic, field values) an alias stands for, or None."""
    return ALIASES.get(mnemonic)


def operand_count(mnemonic: Mnemonic) -> int:
    """Number of source operands a mnemonic takes (aliases take none)."""
    if mnemonic in ALIASES:
        return 0
    return INSTRUCTION_FORMATS[mnemonic].arity
