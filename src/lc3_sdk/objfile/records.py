"""
LC-3 Object Module Records
==========================

In-memory form of the files exchanged between the assembler, linker,
disassembler and transcoder:

- **OrigBlock**: a run of consecutive words starting at one address
- **ObjectModule**: ordered ORIG blocks, symbol rows and a debug map
- **SymbolRow**: one row of a symbol file
- **RelocationEntry**: one link-time patch (produced only by the linker)

Blocks keep source order; they may overlap, leave gaps, or appear out of
address order, exactly as the .ORIG directives placed them.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional


@dataclass
class OrigBlock:
    """
    Words placed consecutively from a base address.

    Attributes:
        base_address: Address of the first word (the .ORIG operand)
        words: 16-bit words in address order
    """
    base_address: int
    words: list[int] = field(default_factory=list)

    @property
    def end_address(self) -> int:
        """Address one past the last word."""
        return self.base_address + len(self.words)

    def items(self) -> Iterator[tuple[int, int]]:
        """Yield (address, word) pairs."""
        for offset, word in enumerate(self.words):
            yield self.base_address + offset, word

    def __len__(self) -> int:
        return len(self.words)


@dataclass(frozen=True)
class SymbolRow:
    """
    One row of a symbol file.

    Local definitions have external=False and no ext_label. External fill
    rows have external=True, the address of the word to patch, the label
    owning that word (or the external name itself) and the external name
    in ext_label.
    """
    address: int
    label: str
    external: bool = False
    ext_label: Optional[str] = None

    @property
    def sort_key(self) -> tuple[int, str, bool, str]:
        return (self.address, self.label, self.external, self.ext_label or "")


@dataclass(frozen=True)
class RelocationEntry:
    """A word the linker overwrites with a resolved symbol value."""
    patch_address: int
    resolved_value: int


@dataclass
class ObjectModule:
    """
    An assembled (or linked) module.

    Attributes:
        blocks: ORIG blocks in emission order
        symbols: Symbol file rows
        debug_map: Address to source line text, instruction lines only
        name: Basename the module was read from or will be written to
    """
    blocks: list[OrigBlock] = field(default_factory=list)
    symbols: list[SymbolRow] = field(default_factory=list)
    debug_map: dict[int, str] = field(default_factory=dict)
    name: str = ""

    def items(self) -> Iterator[tuple[int, int]]:
        """Yield (address, word) for every word of every block."""
        for block in self.blocks:
            yield from block.items()

    def word_at(self, address: int) -> Optional[int]:
        """
        The word stored at an address, or None if no block covers it.

        When blocks overlap, the last block written wins, as it would when
        loading the blocks into memory in order.
        """
        found = None
        for block in self.blocks:
            if block.base_address <= address < block.end_address:
                found = block.words[address - block.base_address]
        return found

    @property
    def size(self) -> int:
        """Total number of words across all blocks."""
        return sum(len(block) for block in self.blocks)
