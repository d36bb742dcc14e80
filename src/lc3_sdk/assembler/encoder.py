"""
LC-3 Instruction Encoder
========================

Packs one instruction into a 16-bit word using the format table in
lc3_sdk.isa. The encoder knows nothing about individual opcodes beyond
that table: each operand is checked and placed according to its
OperandField, and the opcode and constant bits come from the format.

Encoding Steps
--------------
1. Alias pre-expansion: RET becomes JMP R7, HALT/GETC/OUT/PUTS/IN/PUTSP
   become TRAP with their fixed vector
2. Operand count check against the format's arity
3. Per-field packing with range checks:

| Field             | Accepts             | Range          | Error               |
|-------------------|---------------------|----------------|---------------------|
| REGISTER          | Rn                  | 0..7           | InvalidRegisterError|
| REGISTER_OR_IMM5  | Rn or literal       | -16..15        | ImmediateRangeError |
| OFFSET6           | literal             | -32..31        | OffsetRangeError    |
| PC_OFFSET9        | label or literal    | -256..255      | OffsetRangeError    |
| PC_OFFSET11       | label or literal    | -1024..1023    | OffsetRangeError    |
| TRAP_VECTOR       | literal             | 0..255         | ImmediateRangeError |

A label operand in a PC-relative field becomes target - (address + 1).
A literal in a PC-relative field is used as the offset itself, so
"BR #-2" and "BR LOOP" (with LOOP two words back) encode the same.
"""

from typing import Optional, Sequence

from lc3_sdk.assembler.operands import Immediate, LabelRef, Operand, Register
from lc3_sdk.assembler.parser import ParsedLine
from lc3_sdk.assembler.symbols import SymbolTable
from lc3_sdk.errors import (
    AssemblerError,
    ExternalPcRelativeError,
    ImmediateRangeError,
    InvalidRegisterError,
    MalformedLineError,
    OffsetRangeError,
    UndefinedSymbolError,
    UnknownMnemonicError,
)
from lc3_sdk.isa import (
    COND_ALL,
    INSTRUCTION_FORMATS,
    REGISTER_COUNT,
    WORD_MASK,
    FieldKind,
    Mnemonic,
    OperandField,
    expand_alias,
    fits_signed,
    fits_unsigned,
)


IMM5_FLAG = 0x0020


class InstructionEncoder:
    """
    Encodes instructions against one module's symbol table.

    Usage:
        encoder = InstructionEncoder(symbols)
        word = encoder.encode_line(parsed_line)

    Attributes:
        symbols: Symbol table used to resolve PC-relative label operands
    """

    def __init__(self, symbols: Optional[SymbolTable] = None):
        self.symbols = symbols if symbols is not None else SymbolTable()

    def encode_line(self, line: ParsedLine) -> int:
        """
        Encode a parsed instruction line at its pass 1 address.

        Errors raised while encoding are given the line's location, and the
        operand's column when one operand is at fault.
        """
        try:
            return self._encode(
                line.mnemonic,
                line.operands,
                address=line.address or 0,
                condition=line.condition,
            )
        except _OperandError as e:
            raise e.error.with_context(line.location(e.index), line.source) from None
        except AssemblerError as e:
            raise e.with_context(line.location(), line.source) from None

    def encode(
        self,
        mnemonic: Mnemonic,
        operands: Sequence[Operand],
        address: int = 0,
        condition: int = COND_ALL,
    ) -> int:
        """
        Encode one instruction.

        Args:
            mnemonic: Instruction or alias mnemonic
            operands: Classified operands in source order
            address: Address of the instruction (for PC-relative fields)
            condition: nzp bits, used only by BR

        Returns:
            The instruction word, masked to 16 bits

        Raises:
            MalformedLineError: Wrong operand count or operand kind
            UnknownMnemonicError: Mnemonic without an encoding
            InvalidRegisterError, ImmediateRangeError, OffsetRangeError,
            ExternalPcRelativeError, UndefinedSymbolError: see module docs
        """
        try:
            return self._encode(mnemonic, operands, address, condition)
        except _OperandError as e:
            raise e.error from None

    def _encode(
        self,
        mnemonic: Mnemonic,
        operands: Sequence[Operand],
        address: int,
        condition: int,
    ) -> int:
        if not isinstance(mnemonic, Mnemonic):
            raise UnknownMnemonicError(str(mnemonic))

        alias = expand_alias(mnemonic)
        if alias is not None:
            if operands:
                raise MalformedLineError(f"{mnemonic.value} takes no operands")
            mnemonic, values = alias
            operands = self._alias_operands(mnemonic, values)

        fmt = INSTRUCTION_FORMATS.get(mnemonic)
        if fmt is None:
            raise UnknownMnemonicError(mnemonic.value)

        if len(operands) != fmt.arity:
            raise MalformedLineError(
                f"{mnemonic.value} expects {fmt.arity} operand(s), got {len(operands)}"
            )

        word = fmt.base_word
        if mnemonic is Mnemonic.BR:
            word |= (condition & COND_ALL) << 9

        for index, (operand_field, operand) in enumerate(zip(fmt.fields, operands)):
            try:
                value = self._pack(operand_field, operand, address)
            except AssemblerError as e:
                raise _OperandError(e, index) from None
            word |= value << operand_field.shift

        return word & WORD_MASK

    # =========================================================================
    # Field Packing
    # =========================================================================

    def _alias_operands(self, mnemonic: Mnemonic, values: tuple[int, ...]) -> list[Operand]:
        """Turn an alias's fixed field values into operands."""
        fmt = INSTRUCTION_FORMATS[mnemonic]
        operands: list[Operand] = []
        for operand_field, value in zip(fmt.fields, values):
            if operand_field.kind is FieldKind.REGISTER:
                operands.append(Register(value))
            else:
                operands.append(Immediate(value))
        return operands

    def _pack(self, operand_field: OperandField, operand: Operand, address: int) -> int:
        """Check one operand against its field and return the field bits."""
        kind = operand_field.kind

        if kind is FieldKind.REGISTER:
            return self._register(operand)

        if kind is FieldKind.REGISTER_OR_IMM5:
            if isinstance(operand, Register):
                return self._register(operand)
            value = self._literal(operand, kind)
            if not fits_signed(value, kind.width):
                raise ImmediateRangeError(
                    f"immediate {value} does not fit imm5",
                    hint="imm5 holds -16 to 15",
                )
            return IMM5_FLAG | (value & 0x1F)

        if kind is FieldKind.OFFSET6:
            value = self._literal(operand, kind)
            if not fits_signed(value, kind.width):
                raise OffsetRangeError(
                    f"offset {value} does not fit offset6", value, kind.width
                )
            return value & 0x3F

        if kind.is_pc_relative:
            offset = self._pc_offset(operand, address, kind)
            return offset & ((1 << kind.width) - 1)

        if kind is FieldKind.TRAP_VECTOR:
            value = self._literal(operand, kind)
            if not fits_unsigned(value, kind.width):
                raise ImmediateRangeError(
                    f"trap vector {value} does not fit trapvect8",
                    hint="trap vectors are x00 to xFF",
                )
            return value

        raise MalformedLineError(f"unsupported operand field {kind}")

    def _register(self, operand: Operand) -> int:
        if not isinstance(operand, Register):
            raise MalformedLineError(f"expected a register, got '{operand}'")
        if not 0 <= operand.number < REGISTER_COUNT:
            raise InvalidRegisterError(str(operand))
        return operand.number

    def _literal(self, operand: Operand, kind: FieldKind) -> int:
        if not isinstance(operand, Immediate):
            raise MalformedLineError(f"expected a numeric literal for {kind}, got '{operand}'")
        return operand.value

    def _pc_offset(self, operand: Operand, address: int, kind: FieldKind) -> int:
        """Compute and range check a PC-relative offset."""
        if isinstance(operand, Immediate):
            offset = operand.value
        elif isinstance(operand, LabelRef):
            symbol = self.symbols.get(operand.name)
            if symbol is None:
                raise UndefinedSymbolError(
                    operand.name,
                    similar_symbols=self.symbols.similar(operand.name),
                )
            if symbol.is_external:
                raise ExternalPcRelativeError(operand.name)
            offset = symbol.address - (address + 1)
        else:
            raise MalformedLineError(f"expected a label or offset for {kind}, got '{operand}'")

        if not fits_signed(offset, kind.width):
            raise OffsetRangeError(
                f"target is out of range for {kind}", offset, kind.width
            )
        return offset


class _OperandError(Exception):
    """Carries an operand error out of encode() together with its index."""

    def __init__(self, error: AssemblerError, index: int):
        super().__init__(str(error))
        self.error = error
        self.index = index
