"""
LC-3 Linker
===========

Merges assembled modules into one image, patching every word that holds
the address of a symbol defined in another module.

Link Steps
----------
1. Merge symbol tables. The first definition of a label is authoritative;
   a second definition in another module is an error. External fill rows
   add their address to the label's fill sites, whichever order the
   modules come in.
2. Check that every referenced label was defined by some module.
3. Build the relocation map: one entry per fill site, holding the
   address of the label the site refers to.
4. Replay each module's ORIG blocks in order. A word whose address has a
   relocation entry is replaced by the resolved value; every other word
   is copied unchanged.
5. Concatenate the debug maps in module order.

Known Limitations
-----------------
The relocation map is keyed by absolute address and applied to every
module, so two modules whose blocks overlap an external fill site would
both be patched. Debug map entries are concatenated without checking for
address collisions.

Example
-------
    linker = Linker()
    linker.add_file("main")      # main.obj, main.sym, main.dbgsym
    linker.add_file("lib")
    result = linker.link()
    linker.write_outputs("linked")
"""

from dataclasses import dataclass, field
from pathlib import Path
import logging
from typing import Optional, Union

from lc3_sdk.assembler.symbols import Symbol
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.errors import MultiplyDefinedSymbolError, UndefinedSymbolError
from lc3_sdk.isa import WORD_MASK
from lc3_sdk.objfile.reader import load_module
from lc3_sdk.objfile.records import ObjectModule, OrigBlock, RelocationEntry, SymbolRow
from lc3_sdk.objfile.writer import (
    format_debug_symbols,
    format_object,
    format_symbols,
    write_text,
)


logger = logging.getLogger(__name__)


@dataclass
class LinkResult:
    """
    Output of one link.

    Attributes:
        module: The merged object module
        relocations: Patches applied, in address order
        debug_entries: Concatenated (address, source text) pairs
    """
    module: ObjectModule
    relocations: list[RelocationEntry] = field(default_factory=list)
    debug_entries: list[tuple[int, str]] = field(default_factory=list)


class Linker:
    """
    Links LC-3 object modules.

    A Linker collects modules with add_module()/add_file() and links them
    with link(). The merged symbol table and relocation map are rebuilt
    from scratch by every link() call.
    """

    def __init__(self, config: Optional[ToolchainConfig] = None):
        self.config = config or ToolchainConfig()
        self.modules: list[ObjectModule] = []
        self._result: Optional[LinkResult] = None

    # =========================================================================
    # Inputs
    # =========================================================================

    def add_module(self, module: ObjectModule) -> None:
        """Add an in-memory module."""
        if not module.name:
            module.name = f"module{len(self.modules) + 1}"
        self.modules.append(module)

    def add_file(self, base: Union[str, Path]) -> ObjectModule:
        """
        Read and add <base>.obj, <base>.sym and <base>.dbgsym.

        Raises:
            FileNotFoundError: Missing object or symbol file
            ObjectFormatError: Malformed input
        """
        module = load_module(base, self.config)
        self.add_module(module)
        return module

    # =========================================================================
    # Linking
    # =========================================================================

    def link(self) -> LinkResult:
        """
        Link all added modules.

        Raises:
            MultiplyDefinedSymbolError: A label is defined by two modules
            UndefinedSymbolError: An external is defined by no module
        """
        table = self._merge_symbols()
        self._check_defined(table)
        relocations = self._build_relocations(table)

        blocks = self._replay(relocations)

        debug_entries = []
        for module in self.modules:
            debug_entries.extend(module.debug_map.items())

        rows = sorted(
            {row for module in self.modules for row in module.symbols},
            key=lambda row: row.sort_key,
        )

        merged = ObjectModule(
            blocks=blocks,
            symbols=rows,
            debug_map=dict(debug_entries),
        )
        self._result = LinkResult(
            module=merged,
            relocations=sorted(relocations.values(), key=lambda r: r.patch_address),
            debug_entries=debug_entries,
        )

        logger.info(
            f"Linked {len(self.modules)} module(s): {merged.size} word(s), "
            f"{len(relocations)} relocation(s)"
        )
        return self._result

    def _merge_symbols(self) -> dict[str, Symbol]:
        """Merge every module's symbol rows into one table."""
        table: dict[str, Symbol] = {}
        defined_in: dict[str, str] = {}

        for module in self.modules:
            for row in module.symbols:
                if row.external:
                    self._add_fill_row(table, row)
                else:
                    self._add_definition(table, defined_in, row, module.name)

        return table

    def _add_fill_row(self, table: dict[str, Symbol], row: SymbolRow) -> None:
        symbol = table.get(row.ext_label)
        if symbol is None:
            symbol = Symbol(row.ext_label, is_external=True)
            table[row.ext_label] = symbol
        symbol.add_fill_site(row.address)

    def _add_definition(
        self,
        table: dict[str, Symbol],
        defined_in: dict[str, str],
        row: SymbolRow,
        module_name: str,
    ) -> None:
        symbol = table.get(row.label)
        if symbol is not None and symbol.address is not None:
            raise MultiplyDefinedSymbolError(
                row.label,
                first_definition=f"module '{defined_in[row.label]}'",
            )

        if symbol is None:
            table[row.label] = Symbol(row.label, address=row.address)
        else:
            symbol.address = row.address
            symbol.is_external = False
        defined_in[row.label] = module_name
        logger.debug(f"{module_name}: {row.label} = x{row.address:04X}")

    def _check_defined(self, table: dict[str, Symbol]) -> None:
        for symbol in table.values():
            if symbol.address is None:
                raise UndefinedSymbolError(
                    symbol.label,
                    hint=f"no module defines '{symbol.label}'",
                )

    def _build_relocations(self, table: dict[str, Symbol]) -> dict[int, RelocationEntry]:
        relocations: dict[int, RelocationEntry] = {}
        for symbol in table.values():
            for site in symbol.fill_sites:
                relocations[site] = RelocationEntry(site, symbol.address & WORD_MASK)
                logger.debug(f"patch x{site:04X} <- x{symbol.address:04X} ({symbol.label})")
        return relocations

    def _replay(self, relocations: dict[int, RelocationEntry]) -> list[OrigBlock]:
        """Copy every block, substituting resolved values at fill sites."""
        blocks = []
        for module in self.modules:
            for block in module.blocks:
                replayed = OrigBlock(block.base_address)
                location_counter = block.base_address
                for word in block.words:
                    entry = relocations.get(location_counter)
                    replayed.words.append(entry.resolved_value if entry else word)
                    location_counter += 1
                blocks.append(replayed)
        return blocks

    # =========================================================================
    # Outputs
    # =========================================================================

    def write_outputs(self, base: Union[str, Path]) -> list[Path]:
        """
        Write <base>.obj, <base>.sym and <base>.dbgsym for the last link.

        Raises:
            RuntimeError: link() has not been called
        """
        if self._result is None:
            raise RuntimeError("nothing has been linked yet")

        base = Path(base)
        config = self.config
        result = self._result
        atomic = config.atomic_writes

        return [
            write_text(
                base.with_name(base.name + config.object_suffix),
                format_object(result.module.blocks),
                atomic,
            ),
            write_text(
                base.with_name(base.name + config.symbol_suffix),
                format_symbols(result.module.symbols),
                atomic,
            ),
            write_text(
                base.with_name(base.name + config.debug_symbol_suffix),
                format_debug_symbols(result.debug_entries),
                atomic,
            ),
        ]


def link_files(
    bases: list[Union[str, Path]],
    config: Optional[ToolchainConfig] = None,
) -> LinkResult:
    """Convenience function: read and link modules by basename."""
    linker = Linker(config)
    for base in bases:
        linker.add_file(base)
    return linker.link()
