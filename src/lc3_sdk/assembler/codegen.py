"""
LC-3 Code Generator
===================

This module generates an LC-3 object module from parsed source lines.
It implements a two-pass assembly process over one in-memory list of
ParsedLine records:

Pass 1 (Symbol Collection)
--------------------------
- Assign every line its address from the location counter
- Record labels, .EXTERNAL declarations and '.FILL label' alias edges
- Advance the location counter by each line's size
- Require an .END after the last .ORIG

Alias Resolution
----------------
- Settle '.FILL label' chains, propagating externality (see symbols.py)

Pass 2 (Code Generation)
------------------------
- Encode instructions and emit directive data into ORIG blocks
- Record each instruction's source text in the debug map
- Record external '.FILL' sites on the external symbol

Sizes
-----
| Line                   | Words        |
|------------------------|--------------|
| .ORIG, .END, .EXTERNAL | 0            |
| instruction, .FILL     | 1            |
| .BLKW n                | n            |
| .STRINGZ "text"        | len(text)+1  |
| label only             | 0            |

All mutable state of a run lives in an AssemblyContext created by
generate(), so one CodeGenerator can assemble any number of sources.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
import logging
from typing import Optional

from lc3_sdk.assembler.encoder import InstructionEncoder
from lc3_sdk.assembler.operands import Immediate, LabelRef, Operand, StringLiteral
from lc3_sdk.assembler.parser import ParsedLine
from lc3_sdk.assembler.symbols import SymbolTable
from lc3_sdk.errors import (
    AssemblerError,
    ImmediateRangeError,
    MalformedLineError,
    MissingEndDirective,
    UndefinedSymbolError,
)
from lc3_sdk.isa import DirectiveName, WORD_MASK
from lc3_sdk.objfile.records import ObjectModule, OrigBlock, SymbolRow


logger = logging.getLogger(__name__)

MEMORY_SIZE = 0x10000
FILL_MIN = -0x8000
FILL_MAX = 0xFFFF


# =============================================================================
# Assembly Context
# =============================================================================

class AssemblyState(Enum):
    """Progress of one assembly run."""
    PASS1 = auto()
    PASS2 = auto()
    DONE = auto()


@dataclass
class AssemblyContext:
    """
    Mutable state of one assembly run.

    Attributes:
        filename: Source file name (for diagnostics)
        symbols: The module's symbol table
        location_counter: Address of the next word
        saw_end: An .END has been seen since the last .ORIG
        seen_orig: At least one .ORIG has been seen
        state: Current pass
        blocks: ORIG blocks emitted so far (pass 2)
        debug_map: Address to instruction source text (pass 2)
    """
    filename: str = "<input>"
    symbols: SymbolTable = field(default_factory=SymbolTable)
    location_counter: int = 0
    saw_end: bool = False
    seen_orig: bool = False
    state: AssemblyState = AssemblyState.PASS1
    blocks: list[OrigBlock] = field(default_factory=list)
    debug_map: dict[int, str] = field(default_factory=dict)


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Two-pass LC-3 code generator.

    Usage:
        codegen = CodeGenerator("prog.asm")
        module = codegen.generate(parse_source(text, "prog.asm"))

    After generate() returns, `context` holds the finished run's state
    (symbol table included) for callers that need more than the module.
    """

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        self.context: Optional[AssemblyContext] = None

    def generate(self, lines: list[ParsedLine]) -> ObjectModule:
        """
        Assemble parsed lines into an object module.

        Raises:
            AssemblerError: Any assembly error; the first one aborts the run
        """
        ctx = AssemblyContext(filename=self.filename)
        self.context = ctx

        self._pass1(ctx, lines)
        logger.info(f"Pass 1 complete: {len(ctx.symbols)} symbol(s)")

        ctx.symbols.resolve_aliases()

        ctx.state = AssemblyState.PASS2
        self._pass2(ctx, lines)
        ctx.state = AssemblyState.DONE

        module = ObjectModule(
            blocks=ctx.blocks,
            symbols=build_symbol_rows(ctx.symbols),
            debug_map=ctx.debug_map,
        )
        logger.info(
            f"Pass 2 complete: {module.size} word(s) in {len(module.blocks)} block(s)"
        )
        return module

    # =========================================================================
    # Pass 1: Symbol Collection
    # =========================================================================

    def _pass1(self, ctx: AssemblyContext, lines: list[ParsedLine]) -> None:
        for line in lines:
            try:
                self._pass1_line(ctx, line)
            except AssemblerError as e:
                raise e.with_context(line.location(), line.source) from None

        if not ctx.saw_end:
            last_line = lines[-1].line_number if lines else 0
            raise MissingEndDirective(self.filename, last_line)

    def _pass1_line(self, ctx: AssemblyContext, line: ParsedLine) -> None:
        directive = line.mnemonic if line.is_directive else None

        if directive is DirectiveName.ORIG:
            ctx.location_counter = self._orig_address(line)
            ctx.saw_end = False
            ctx.seen_orig = True
        elif directive is DirectiveName.END:
            ctx.saw_end = True

        line.address = ctx.location_counter

        if line.label:
            ctx.symbols.define(line.label, ctx.location_counter, line.location(), line.source)

        if directive is DirectiveName.EXTERNAL:
            target = self._single_operand(line, LabelRef, "a label")
            ctx.symbols.declare_external(target.name, line.location(0), line.source)
        elif directive is DirectiveName.FILL:
            self._pass1_fill(ctx, line)

        size = self._line_size(line)
        if size and not ctx.seen_orig:
            raise MalformedLineError("code or data before the first .ORIG")

        ctx.location_counter += size
        if ctx.location_counter > MEMORY_SIZE:
            raise MalformedLineError("program extends past address xFFFF")

    def _pass1_fill(self, ctx: AssemblyContext, line: ParsedLine) -> None:
        """Validate a .FILL operand and record label references."""
        operand = self._single_operand(line, (Immediate, LabelRef), "a value or label")

        if isinstance(operand, Immediate):
            if not FILL_MIN <= operand.value <= FILL_MAX:
                raise ImmediateRangeError(
                    f".FILL value {operand.value} does not fit a word",
                    location=line.location(0),
                    hint="a word holds -32768 to 65535",
                    source_line=line.source,
                )
            return

        # Every label at this address owns the word, label-only lines included
        for label in ctx.symbols.labels_at(ctx.location_counter):
            ctx.symbols.add_alias(label, operand.name)

    def _line_size(self, line: ParsedLine) -> int:
        """Number of words a line occupies."""
        if line.is_instruction:
            return 1
        if not line.is_directive:
            return 0

        directive = line.mnemonic
        if directive is DirectiveName.FILL:
            return 1
        if directive is DirectiveName.BLKW:
            count = self._single_operand(line, Immediate, "a word count").value
            if count < 0:
                raise ImmediateRangeError(
                    f".BLKW count {count} is negative",
                    location=line.location(0),
                    source_line=line.source,
                )
            return count
        if directive is DirectiveName.STRINGZ:
            text = self._single_operand(line, StringLiteral, "a string literal").text
            return len(text) + 1
        if directive is DirectiveName.END and line.operands:
            raise MalformedLineError(".END takes no operands")
        return 0

    def _orig_address(self, line: ParsedLine) -> int:
        address = self._single_operand(line, Immediate, "an address").value
        if not 0 <= address <= FILL_MAX:
            raise ImmediateRangeError(
                f".ORIG address {address} is outside x0000-xFFFF",
                location=line.location(0),
                source_line=line.source,
            )
        return address

    def _single_operand(self, line: ParsedLine, kinds, description: str) -> Operand:
        """Return the line's only operand, checking its kind."""
        name = line.mnemonic.value
        if len(line.operands) != 1:
            raise MalformedLineError(
                f"{name} expects 1 operand, got {len(line.operands)}",
                location=line.location(),
                source_line=line.source,
            )
        operand = line.operands[0]
        if not isinstance(operand, kinds):
            raise MalformedLineError(
                f"{name} expects {description}, got '{operand}'",
                location=line.location(0),
                source_line=line.source,
            )
        return operand

    # =========================================================================
    # Pass 2: Code Generation
    # =========================================================================

    def _pass2(self, ctx: AssemblyContext, lines: list[ParsedLine]) -> None:
        encoder = InstructionEncoder(ctx.symbols)

        for line in lines:
            if line.is_instruction:
                word = encoder.encode_line(line)
                ctx.debug_map[line.address] = line.text
                self._emit_word(ctx, word)
            elif line.is_directive:
                try:
                    self._pass2_directive(ctx, line)
                except AssemblerError as e:
                    raise e.with_context(line.location(), line.source) from None

    def _pass2_directive(self, ctx: AssemblyContext, line: ParsedLine) -> None:
        directive = line.mnemonic

        if directive is DirectiveName.ORIG:
            address = line.operands[0].value
            ctx.blocks.append(OrigBlock(address))
            ctx.location_counter = address
            logger.debug(f"new block at x{address:04X}")

        elif directive is DirectiveName.FILL:
            self._emit_word(ctx, self._fill_value(ctx, line))

        elif directive is DirectiveName.BLKW:
            for _ in range(line.operands[0].value):
                self._emit_word(ctx, 0)

        elif directive is DirectiveName.STRINGZ:
            for char in line.operands[0].text:
                code = ord(char)
                if code > WORD_MASK:
                    raise MalformedLineError(
                        f"character {char!r} does not fit a 16-bit word",
                        location=line.location(0),
                        source_line=line.source,
                    )
                self._emit_word(ctx, code)
            self._emit_word(ctx, 0)

    def _fill_value(self, ctx: AssemblyContext, line: ParsedLine) -> int:
        """Value of a .FILL word; external labels get a zero placeholder."""
        operand = line.operands[0]
        if isinstance(operand, Immediate):
            return operand.value

        symbol = ctx.symbols.get(operand.name)
        if symbol is None:
            raise UndefinedSymbolError(
                operand.name,
                location=line.location(0),
                source_line=line.source,
                similar_symbols=ctx.symbols.similar(operand.name),
            )

        if symbol.is_external:
            ctx.symbols.add_fill_site(symbol.label, line.address)
            logger.debug(f"external fill site x{line.address:04X} -> {symbol.label}")
            return 0

        return symbol.address

    def _emit_word(self, ctx: AssemblyContext, word: int) -> None:
        """Append a word to the current ORIG block."""
        if not ctx.blocks:
            raise MalformedLineError("code or data before the first .ORIG")
        ctx.blocks[-1].words.append(word & WORD_MASK)
        ctx.location_counter += 1


# =============================================================================
# Symbol Rows
# =============================================================================

def build_symbol_rows(symbols: SymbolTable) -> list[SymbolRow]:
    """
    Build the symbol file rows of a module, sorted by address then label.

    Every local label gets a definition row. Every external fill site gets
    a row naming the label that owns the site (the alias whose externality
    was resolved to this external), or the external itself for an
    unlabeled '.FILL NAME'.
    """
    rows = [
        SymbolRow(symbol.address, symbol.label)
        for symbol in symbols
        if symbol.address is not None
    ]

    for external in symbols.externals():
        for site in external.fill_sites:
            owner = external.label
            for label in symbols.labels_at(site):
                if symbols.get(label).ext_label == external.label:
                    owner = label
                    break
            rows.append(SymbolRow(site, owner, True, external.label))

    return sorted(rows, key=lambda row: row.sort_key)
