"""
LC-3 Disassembler
=================

Disassembles LC-3 object words back into assembly source that the
assembler accepts. This is the inverse of the instruction encoder.

Decoding is stateless and one word at a time: each word is tested against
an ordered list of decode rules and the first rule that accepts it
formats it. Words that no rule accepts (data, unused opcode 13, invalid
bit patterns) are written as .FILL.

Decode Rules
------------
Rules are tried in this order; the first match wins:

| Rule        | Accepts                                       |
|-------------|-----------------------------------------------|
| ADD / AND   | register form with bits 3-5 clear             |
| ADD / AND   | immediate form (bit 5 set)                    |
| BR          | any nonzero nzp (nzp = 000 is left as data)   |
| JMP         | bits 9-11 and 0-5 clear, base register != R7  |
| JSR         | bit 11 set                                    |
| JSRR        | bits 9-11 and 0-5 clear                       |
| LD ... STR  | by opcode                                     |
| NOT         | bits 0-5 all set                              |
| RET         | JMP R7                                        |
| RTI         | exactly x8000                                 |
| GETC ... HALT | exact TRAP words x20-x25                    |
| TRAP        | bits 8-11 clear                               |

PC-relative offsets are written as signed literals ("BRnzp #-2"), which
the assembler takes as the offset itself, so disassembled code
re-assembles to the same words at any address.

Usage:
    disasm = LC3Disassembler()
    instr = disasm.disassemble_one(0x1021, address=0x3000)
    print(instr.text)            # ADD R0, R0, #1

    listing = disasm.disassemble_module(module)
"""

from dataclasses import dataclass
from typing import Callable, Optional

from lc3_sdk.isa import TRAP_VECTORS, condition_suffix, sign_extend
from lc3_sdk.isa.lc3 import (
    OP_ADD,
    OP_AND,
    OP_BR,
    OP_JMP,
    OP_JSR,
    OP_LD,
    OP_LDI,
    OP_LDR,
    OP_LEA,
    OP_NOT,
    OP_ST,
    OP_STI,
    OP_STR,
    OP_TRAP,
)
from lc3_sdk.objfile.records import ObjectModule, OrigBlock


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    A single disassembled LC-3 word.

    Attributes:
        address: Memory address of the word
        word: The raw 16-bit word
        mnemonic: Instruction mnemonic, or ".FILL" for data
        operands: Formatted operands in source order
    """
    address: int
    word: int
    mnemonic: str
    operands: tuple[str, ...] = ()

    @property
    def text(self) -> str:
        """Assembly text: MNEMONIC OPERAND, OPERAND"""
        if self.operands:
            return f"{self.mnemonic} {', '.join(self.operands)}"
        return self.mnemonic

    @property
    def is_data(self) -> bool:
        return self.mnemonic == ".FILL"

    def __str__(self) -> str:
        """Format as listing line: ADDRESS: WORD  TEXT"""
        return f"x{self.address:04X}: x{self.word:04X}  {self.text}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"x{self.address:04X}",
            "address_int": self.address,
            "word": f"x{self.word:04X}",
            "mnemonic": self.mnemonic,
            "operands": list(self.operands),
            "text": self.text,
        }


# =============================================================================
# Field Extraction
# =============================================================================

def _opcode(w: int) -> int:
    return w >> 12 & 0xF


def _dr(w: int) -> str:
    return f"R{w >> 9 & 0x7}"


def _sr1(w: int) -> str:
    return f"R{w >> 6 & 0x7}"


def _sr2(w: int) -> str:
    return f"R{w & 0x7}"


def _imm(value: int) -> str:
    return f"#{value}"


def _imm5(w: int) -> str:
    return _imm(sign_extend(w, 5))


def _offset6(w: int) -> str:
    return _imm(sign_extend(w, 6))


def _pc9(w: int) -> str:
    return _imm(sign_extend(w, 9))


def _pc11(w: int) -> str:
    return _imm(sign_extend(w, 11))


# =============================================================================
# Decode Rules
# =============================================================================

@dataclass(frozen=True)
class _DecodeRule:
    """Accepts a word and formats it as (mnemonic, operands)."""
    accepts: Callable[[int], bool]
    mnemonic: Callable[[int], str]
    operands: Callable[[int], tuple[str, ...]] = lambda w: ()


def _const(name: str) -> Callable[[int], str]:
    return lambda w: name


_TRAP_NAMES = {vector: mnemonic.value for mnemonic, vector in TRAP_VECTORS.items()}


DECODE_RULES: tuple[_DecodeRule, ...] = (
    # ADD / AND, register then immediate form
    _DecodeRule(
        lambda w: _opcode(w) == OP_ADD and (w >> 3 & 0x7) == 0,
        _const("ADD"), lambda w: (_dr(w), _sr1(w), _sr2(w)),
    ),
    _DecodeRule(
        lambda w: _opcode(w) == OP_ADD and (w & 0x20) != 0,
        _const("ADD"), lambda w: (_dr(w), _sr1(w), _imm5(w)),
    ),
    _DecodeRule(
        lambda w: _opcode(w) == OP_AND and (w >> 3 & 0x7) == 0,
        _const("AND"), lambda w: (_dr(w), _sr1(w), _sr2(w)),
    ),
    _DecodeRule(
        lambda w: _opcode(w) == OP_AND and (w & 0x20) != 0,
        _const("AND"), lambda w: (_dr(w), _sr1(w), _imm5(w)),
    ),
    # Branches and jumps
    _DecodeRule(
        lambda w: _opcode(w) == OP_BR and (w >> 9 & 0x7) != 0,
        lambda w: "BR" + condition_suffix(w >> 9 & 0x7), lambda w: (_pc9(w),),
    ),
    _DecodeRule(
        lambda w: _opcode(w) == OP_JMP and (w >> 9 & 0x7) == 0
        and (w >> 6 & 0x7) != 7 and (w & 0x3F) == 0,
        _const("JMP"), lambda w: (_sr1(w),),
    ),
    _DecodeRule(
        lambda w: _opcode(w) == OP_JSR and (w & 0x0800) != 0,
        _const("JSR"), lambda w: (_pc11(w),),
    ),
    _DecodeRule(
        lambda w: _opcode(w) == OP_JSR and (w >> 9 & 0x7) == 0 and (w & 0x3F) == 0,
        _const("JSRR"), lambda w: (_sr1(w),),
    ),
    # Loads and stores
    _DecodeRule(lambda w: _opcode(w) == OP_LD, _const("LD"), lambda w: (_dr(w), _pc9(w))),
    _DecodeRule(lambda w: _opcode(w) == OP_LDI, _const("LDI"), lambda w: (_dr(w), _pc9(w))),
    _DecodeRule(
        lambda w: _opcode(w) == OP_LDR,
        _const("LDR"), lambda w: (_dr(w), _sr1(w), _offset6(w)),
    ),
    _DecodeRule(lambda w: _opcode(w) == OP_LEA, _const("LEA"), lambda w: (_dr(w), _pc9(w))),
    _DecodeRule(
        lambda w: _opcode(w) == OP_NOT and (w & 0x3F) == 0x3F,
        _const("NOT"), lambda w: (_dr(w), _sr1(w)),
    ),
    _DecodeRule(lambda w: w == 0xC1C0, _const("RET")),
    _DecodeRule(lambda w: w == 0x8000, _const("RTI")),
    _DecodeRule(lambda w: _opcode(w) == OP_ST, _const("ST"), lambda w: (_dr(w), _pc9(w))),
    _DecodeRule(lambda w: _opcode(w) == OP_STI, _const("STI"), lambda w: (_dr(w), _pc9(w))),
    _DecodeRule(
        lambda w: _opcode(w) == OP_STR,
        _const("STR"), lambda w: (_dr(w), _sr1(w), _offset6(w)),
    ),
    # Traps: named vectors before the generic form
    _DecodeRule(
        lambda w: _opcode(w) == OP_TRAP and (w >> 8 & 0xF) == 0 and (w & 0xFF) in _TRAP_NAMES,
        lambda w: _TRAP_NAMES[w & 0xFF],
    ),
    _DecodeRule(
        lambda w: _opcode(w) == OP_TRAP and (w >> 8 & 0xF) == 0,
        _const("TRAP"), lambda w: (f"x{w & 0xFF:02X}",),
    ),
)


# =============================================================================
# LC-3 Disassembler
# =============================================================================

class LC3Disassembler:
    """
    Disassembler for LC-3 object words.

    Attributes:
        hex_fills: Write undecodable words as '.FILL xNNNN' instead of a
            signed decimal '.FILL #n'
    """

    def __init__(self, hex_fills: bool = False):
        self.hex_fills = hex_fills

    def decode(self, word: int) -> Optional[tuple[str, tuple[str, ...]]]:
        """
        Decode one word as an instruction.

        Returns:
            (mnemonic, operands), or None when no rule accepts the word
        """
        word &= 0xFFFF
        for rule in DECODE_RULES:
            if rule.accepts(word):
                return rule.mnemonic(word), rule.operands(word)
        return None

    def disassemble_one(self, word: int, address: int = 0) -> DisassembledInstruction:
        """Disassemble one word, falling back to .FILL."""
        word &= 0xFFFF
        decoded = self.decode(word)
        if decoded is None:
            if self.hex_fills:
                operand = f"x{word:04X}"
            else:
                operand = f"#{sign_extend(word, 16)}"
            return DisassembledInstruction(address, word, ".FILL", (operand,))

        mnemonic, operands = decoded
        return DisassembledInstruction(address, word, mnemonic, operands)

    def disassemble_block(self, block: OrigBlock) -> list[DisassembledInstruction]:
        """Disassemble every word of an ORIG block."""
        return [self.disassemble_one(word, address) for address, word in block.items()]

    def disassemble_module(self, module: ObjectModule) -> str:
        """
        Render a whole module as assembly source.

        Each ORIG block becomes '.ORIG xNNNN' ... '.END', with a blank line
        between blocks and the address of every word as a comment.
        """
        sections = []
        for block in module.blocks:
            lines = [f".ORIG x{block.base_address:04X}"]
            for instr in self.disassemble_block(block):
                lines.append(f"    {instr.text:<24}; x{instr.address:04X}")
            lines.append(".END")
            sections.append("\n".join(lines) + "\n")
        return "\n".join(sections)
