"""
LC-3 Symbol Table
=================

The symbol table records every label of one module: where it is defined,
whether it is external, which label it aliases through '.FILL label', and
which addresses must be patched with its final value at link time.

Symbol Kinds
------------
- **Local label**: defined on a source line, has an address
- **External**: declared with '.EXTERNAL NAME', no local address; the
  linker supplies the address from whichever module defines NAME
- **Alias**: a local label whose line is '.FILL OTHER'; the word it labels
  holds OTHER's address, and when OTHER is external the alias inherits
  that externality so the word is patched at link time

Alias Resolution
----------------
Alias edges may point forward, and chains may be several links long:

    PTR     .FILL PTR2      ; PTR -> PTR2
    PTR2    .FILL PRINT     ; PTR2 -> PRINT (external)
            .EXTERNAL PRINT

resolve_aliases() settles every edge whose target has no edge of its own,
and repeats until all edges are settled. A chain that loops back on itself
can never settle; it is reported as CyclicAliasError.
"""

from dataclasses import dataclass, field
import logging
from typing import Iterator, Optional

from lc3_sdk.errors import (
    CyclicAliasError,
    MultiplyDefinedSymbolError,
    SourceLocation,
    UndefinedSymbolError,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Symbol
# =============================================================================

@dataclass
class Symbol:
    """
    Symbol table entry.

    Attributes:
        label: Symbol name, uppercased
        address: Local address, or None for an external symbol
        is_external: True for .EXTERNAL declarations
        alias_of: Label referenced by this label's '.FILL label' line
        ext_label: External name an alias resolved to, if any
        fill_sites: Addresses to patch with this symbol's final value
        location: Where the symbol was defined or declared
    """
    label: str
    address: Optional[int] = None
    is_external: bool = False
    alias_of: Optional[str] = None
    ext_label: Optional[str] = None
    fill_sites: list[int] = field(default_factory=list)
    location: Optional[SourceLocation] = None

    @property
    def is_defined(self) -> bool:
        """True when the symbol has a local address."""
        return self.address is not None

    def add_fill_site(self, address: int) -> None:
        """Record a patch address; repeats are ignored, order is kept."""
        if address not in self.fill_sites:
            self.fill_sites.append(address)

    def __repr__(self) -> str:
        where = f"x{self.address:04X}" if self.address is not None else "external"
        return f"Symbol({self.label}, {where})"


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable:
    """
    Labels of one module, keyed by uppercased name.

    Usage:
        table = SymbolTable()
        table.define("LOOP", 0x3000)
        table.declare_external("PRINT")
        table.add_alias("PTR", "PRINT")
        table.resolve_aliases()
    """

    def __init__(self):
        self._symbols: dict[str, Symbol] = {}

    # =========================================================================
    # Container Protocol
    # =========================================================================

    def __contains__(self, label: str) -> bool:
        return label.upper() in self._symbols

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def __len__(self) -> int:
        return len(self._symbols)

    def get(self, label: str) -> Optional[Symbol]:
        """Look up a symbol by name, or None."""
        return self._symbols.get(label.upper())

    # =========================================================================
    # Definitions
    # =========================================================================

    def define(
        self,
        label: str,
        address: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> Symbol:
        """
        Define a local label at an address.

        Raises:
            MultiplyDefinedSymbolError: The label is already defined or
                declared external in this module
        """
        name = label.upper()
        existing = self._symbols.get(name)
        if existing is not None:
            raise MultiplyDefinedSymbolError(
                name,
                location=location,
                first_definition=str(existing.location) if existing.location else None,
                source_line=source_line,
            )

        symbol = Symbol(name, address=address, location=location)
        self._symbols[name] = symbol
        logger.debug(f"created symbol: {name} = x{address:04X}")
        return symbol

    def declare_external(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> Symbol:
        """
        Declare a label defined in another module.

        Declaring the same external twice is harmless.

        Raises:
            MultiplyDefinedSymbolError: The label is defined locally
        """
        name = label.upper()
        existing = self._symbols.get(name)
        if existing is not None:
            if existing.is_external:
                return existing
            raise MultiplyDefinedSymbolError(
                name,
                location=location,
                first_definition=str(existing.location) if existing.location else None,
                source_line=source_line,
            )

        symbol = Symbol(name, is_external=True, location=location)
        self._symbols[name] = symbol
        logger.debug(f"declared external: {name}")
        return symbol

    def add_alias(self, label: str, target: str) -> None:
        """Record that label's word is '.FILL target'."""
        symbol = self._symbols[label.upper()]
        symbol.alias_of = target.upper()

    def add_fill_site(self, label: str, address: int) -> None:
        """Record an address that must be patched with label's value."""
        self._symbols[label.upper()].add_fill_site(address)

    # =========================================================================
    # Alias Resolution
    # =========================================================================

    def resolve_aliases(self) -> None:
        """
        Settle every alias edge, propagating externality from the target.

        Raises:
            UndefinedSymbolError: An edge points at a label that is neither
                defined nor declared external
            CyclicAliasError: A chain of edges loops back on itself
        """
        pending = {
            symbol.label: symbol.alias_of
            for symbol in self._symbols.values()
            if symbol.alias_of is not None
        }

        rounds = 0
        while pending:
            rounds += 1
            settled = []

            for label, target in pending.items():
                if target in pending:
                    continue

                target_symbol = self._symbols.get(target)
                source = self._symbols[label]
                if target_symbol is None:
                    raise UndefinedSymbolError(
                        target,
                        location=source.location,
                        similar_symbols=self.similar(target),
                    )

                if target_symbol.is_external or target_symbol.ext_label:
                    source.ext_label = target_symbol.ext_label or target_symbol.label
                    logger.debug(f"alias {label} -> {target} (external {source.ext_label})")
                else:
                    logger.debug(f"alias {label} -> {target}")
                settled.append(label)

            if not settled:
                raise self._cycle_error(pending)

            for label in settled:
                del pending[label]

        logger.debug(f"alias resolution finished after {rounds} round(s)")

    def _cycle_error(self, pending: dict[str, str]) -> CyclicAliasError:
        """
        Walk the unsettled edges from the first one and report the loop.

        Every unsettled edge points at another unsettled label, so the walk
        always comes back to a label it has already visited.
        """
        label = next(iter(pending))
        visited: list[str] = []
        while label not in visited:
            visited.append(label)
            label = pending[label]

        chain = visited[visited.index(label):] + [label]
        first = self._symbols[chain[0]]
        return CyclicAliasError(chain, location=first.location)

    # =========================================================================
    # Queries
    # =========================================================================

    def labels_at(self, address: int) -> list[str]:
        """Sorted names of local labels defined at an address."""
        return sorted(
            symbol.label for symbol in self._symbols.values()
            if symbol.address == address
        )

    def externals(self) -> list[Symbol]:
        """External symbols in declaration order."""
        return [symbol for symbol in self._symbols.values() if symbol.is_external]

    def similar(self, name: str) -> list[str]:
        """
        Find labels with similar names for error hints.

        Uses simple edit distance heuristic.
        """
        name_lower = name.lower()
        similar = []

        for label in self._symbols:
            label_lower = label.lower()
            if abs(len(label) - len(name)) <= 1 and _edit_distance(name_lower, label_lower) <= 2:
                similar.append(label)

        return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        return _edit_distance(s2, s1)

    if not s2:
        return len(s1)

    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous[j + 1] + 1
            deletions = current[j] + 1
            substitutions = previous[j] + (c1 != c2)
            current.append(min(insertions, deletions, substitutions))
        previous = current

    return previous[-1]
