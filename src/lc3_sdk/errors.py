"""
LC-3 SDK Error Hierarchy
========================

This module defines the exception hierarchy for the entire LC-3 SDK.
All exceptions inherit from Lc3Error, allowing callers to catch all
SDK-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
Lc3Error (base)
├── AssemblerError (assembler-related, carries source location)
│   ├── MalformedLineError - unparseable line or operand list
│   ├── UnknownMnemonicError - opcode/directive not in the instruction set
│   ├── InvalidRegisterError - register outside R0-R7
│   ├── ImmediateRangeError - literal does not fit its field
│   ├── OffsetRangeError - PC-relative or base+offset out of range
│   ├── ExternalPcRelativeError - external label used as PC-relative target
│   ├── MissingEndDirective - source ends without .END
│   ├── CyclicAliasError - .FILL alias chain refers back to itself
│   ├── MultiplyDefinedSymbolError (also a LinkerError)
│   └── UndefinedSymbolError (also a LinkerError)
├── LinkerError (cross-module resolution)
└── ObjectFormatError - malformed object, symbol or debug file

Design Philosophy
-----------------
The toolchain is fail-fast: the first error aborts the whole invocation.
Every assembler error can capture the source location (filename, line,
column) and the offending line text so the diagnostic points at the
exact spot:

    prog.asm:3:13: error: register 'R9' is out of range
        ADD R0, R9, #1
                ^
    hint: registers are R0 through R7
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Lc3Error(Exception):
    """
    Base exception for all LC-3 SDK errors.

    Callers can catch every toolchain failure with a single clause:

        try:
            Assembler().assemble_file("prog.asm")
        except Lc3Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        if not self.line:
            return self.filename
        if self.column:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(Lc3Error):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.asm:4:9: error: undefined symbol 'LOPP'
                BR LOPP
                   ^
            hint: did you mean 'LOOP'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def with_context(
        self,
        location: SourceLocation,
        source_line: Optional[str] = None,
    ) -> "AssemblerError":
        """
        Attach a source location to an error raised without one.

        Low-level helpers (operand classification, field packing) do not
        know which line they are working on; the code generator catches
        their errors and re-raises them with the line attached. An error
        that already carries a location is returned unchanged.
        """
        if self.location is None:
            self.location = location
            self.source_line = source_line
            self.args = (self._format_message(),)
        return self


class MalformedLineError(AssemblerError):
    """
    A source line cannot be split into a mnemonic and operands.

    Examples:
        - Unterminated string literal
        - Wrong number of operands for an instruction
        - Register where a label is required (or vice versa)
        - Numeric literal with stray characters (#12AB)
    """
    pass


class UnknownMnemonicError(AssemblerError):
    """An opcode or directive that the LC-3 instruction set does not define."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        super().__init__(
            f"unknown mnemonic '{mnemonic}'",
            location=location,
            source_line=source_line,
        )


class InvalidRegisterError(AssemblerError):
    """Register operand outside R0-R7, or a malformed register token."""

    def __init__(
        self,
        register: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.register = register
        super().__init__(
            f"register '{register}' is out of range",
            location=location,
            hint="registers are R0 through R7",
            source_line=source_line,
        )


class ImmediateRangeError(AssemblerError):
    """
    Immediate value does not fit its field.

    Raised both for the syntactic digit-count bound applied while the
    literal is classified and for the two's-complement range check applied
    when it is packed into an instruction field.
    """
    pass


class OffsetRangeError(AssemblerError):
    """
    PC-relative or base+offset displacement out of range.

    The LC-3 offset fields are 6 bits (LDR/STR), 9 bits (LD, LDI, LEA,
    ST, STI, BR) or 11 bits (JSR) wide, all signed. Targets further away
    must be reached through a pointer (.FILL label, then LDI/LDR) or a
    register jump (JSRR/JMP).
    """

    def __init__(
        self,
        message: str,
        offset: int,
        bits: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.offset = offset
        self.bits = bits
        low = -(1 << (bits - 1))
        high = (1 << (bits - 1)) - 1
        super().__init__(
            message,
            location=location,
            hint=f"offset is {offset}, but a {bits}-bit field holds {low} to {high}",
            source_line=source_line,
        )


class ExternalPcRelativeError(AssemblerError):
    """
    External label used as the target of a PC-relative instruction.

    The final address of an external label is only known at link time and
    the relocation model patches whole words only, so a PC-relative field
    cannot be fixed up.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        super().__init__(
            f"external symbol '{symbol}' cannot be a PC-relative target",
            location=location,
            hint=f"load a pointer instead: PTR .FILL {symbol}, then LDI/LD+JSRR",
            source_line=source_line,
        )


class MissingEndDirective(AssemblerError):
    """Source ended (or a later .ORIG block ended) without an .END directive."""

    def __init__(self, filename: str = "<input>", line: int = 0):
        self.filename = filename
        super().__init__(
            "missing .END directive",
            location=SourceLocation(filename, line),
            hint="every .ORIG block must be closed by .END",
        )


class CyclicAliasError(AssemblerError):
    """
    A chain of '.FILL label' definitions refers back to itself.

    Example:
        A   .FILL B
        B   .FILL A
    """

    def __init__(self, chain: list[str], location: Optional[SourceLocation] = None):
        self.chain = list(chain)
        path = " -> ".join(self.chain)
        super().__init__(f"cyclic .FILL alias chain: {path}", location=location)


# =============================================================================
# Linker Exceptions
# =============================================================================

class LinkerError(Lc3Error):
    """Base exception for errors detected while merging modules."""
    pass


class MultiplyDefinedSymbolError(AssemblerError, LinkerError):
    """
    A label is defined more than once.

    Within one module this is a duplicate label; across modules it means
    two object files both define the same non-external label.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        first_definition: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.first_definition = first_definition

        hint = None
        if first_definition:
            hint = f"'{symbol}' was first defined at {first_definition}"

        super().__init__(
            f"symbol '{symbol}' is defined more than once",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UndefinedSymbolError(AssemblerError, LinkerError):
    """
    Reference to a symbol that nothing defines.

    In the assembler this is a label that is neither defined nor declared
    .EXTERNAL; in the linker it is an external that no module defines.
    The assembler suggests similarly named labels to catch typos.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
        hint: Optional[str] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# File Format Exceptions
# =============================================================================

class ObjectFormatError(Lc3Error):
    """
    Malformed object, symbol, debug symbol or LC3Tools file.

    Raised when reading:
    - a data word before the first ORIG header
    - a value that is not four hex digits
    - a symbol row with the wrong number of columns
    - a binary object with a bad magic number or truncated record
    """
    pass
