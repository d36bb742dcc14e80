"""
LC-3 Assembly Language Parser
=============================

This module turns LC-3 assembly source into a list of ParsedLine records.
The list is produced once and then walked by both passes of the code
generator, so pass 1 and pass 2 see exactly the same lines.

Line Structure
--------------
Every non-blank line has the shape:

    [LABEL] [MNEMONIC|DIRECTIVE [OPERAND {, OPERAND}]] [; comment]

There is no colon after a label. A first word that is not a mnemonic,
directive or BR variant is taken as a label:

    LOOP    ADD R1, R1, #-1     ; label + instruction
            BRp LOOP            ; instruction only
    DONE                        ; label on its own line
    MSG     .STRINGZ "Hi"       ; label + directive

Branch Mnemonics
----------------
The condition codes are part of the BR mnemonic. They must appear in
n, z, p order, each at most once:

| Mnemonic        | nzp |
|-----------------|-----|
| BR, BRnzp       | 111 |
| BRn             | 100 |
| BRzp            | 011 |
| BRnp            | 101 |
"""

from dataclasses import dataclass, field
from enum import Enum, auto
import re
from pathlib import Path
from typing import Optional, Union

from lc3_sdk.assembler.lexer import Lexer, Token, TokenType, strip_comment
from lc3_sdk.assembler.operands import (
    Operand,
    classify_operand,
    is_number_token,
    is_register_token,
    is_valid_label,
)
from lc3_sdk.errors import (
    AssemblerError,
    MalformedLineError,
    SourceLocation,
    UnknownMnemonicError,
)
from lc3_sdk.isa import DirectiveName, Mnemonic, condition_bits


_BRANCH_PATTERN = re.compile(r"^BR(N?Z?P?)$")
_BRANCH_LIKE = re.compile(r"^BR[NZP]+$")


def _label_hint(text: str) -> str:
    """Explain why a token cannot be a label."""
    if is_register_token(text):
        return f"'{text[:2]}' reads as a register; R followed by a digit cannot start a label"
    if text[:1] in ("X", "x") and is_number_token(text):
        return f"'{text[:2]}' reads as a hex literal; X followed by a hex digit cannot start a label"
    if is_number_token(text):
        return "a leading digit, '#' or '-' reads as a number"
    return "labels start with a letter or '_' and contain letters, digits and '_'"


# =============================================================================
# Parsed Line
# =============================================================================

class LineKind(Enum):
    """What a parsed line holds besides its optional label."""
    DIRECTIVE = auto()
    INSTRUCTION = auto()


@dataclass
class ParsedLine:
    """
    One source line after tokenizing and operand classification.

    Attributes:
        line_number: 1-indexed source line number
        text: Source text with the comment removed (case preserved)
        label: Label defined on this line, uppercased
        kind: DIRECTIVE, INSTRUCTION, or None for a label-only line
        mnemonic: Mnemonic or DirectiveName
        operands: Classified operands in source order
        operand_columns: Column of each operand (for diagnostics)
        condition: nzp bits for BR, 0 otherwise
        address: Location counter value, assigned by pass 1
        filename: Source file name (for diagnostics)
        source: Raw source line (for diagnostics)
    """
    line_number: int
    text: str
    label: Optional[str] = None
    kind: Optional[LineKind] = None
    mnemonic: Union[Mnemonic, DirectiveName, None] = None
    operands: list[Operand] = field(default_factory=list)
    operand_columns: list[int] = field(default_factory=list)
    condition: int = 0
    address: Optional[int] = None
    filename: str = "<input>"
    source: str = ""

    @property
    def is_instruction(self) -> bool:
        return self.kind is LineKind.INSTRUCTION

    @property
    def is_directive(self) -> bool:
        return self.kind is LineKind.DIRECTIVE

    def location(self, operand_index: Optional[int] = None) -> SourceLocation:
        """
        Source location of the line, or of one of its operands.

        Args:
            operand_index: Index into operands, or None for the line itself
        """
        column = 0
        if operand_index is not None and operand_index < len(self.operand_columns):
            column = self.operand_columns[operand_index]
        return SourceLocation(self.filename, self.line_number, column)


# =============================================================================
# Parser
# =============================================================================

class Parser:
    """
    Parses LC-3 assembly source into ParsedLine records.

    Usage:
        lines = Parser(source_text, "prog.asm").parse()

    Blank and comment-only lines produce no record.
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

    def parse(self) -> list[ParsedLine]:
        """
        Parse every line of the source.

        Raises:
            MalformedLineError: Bad label, operand or string literal
            UnknownMnemonicError: Opcode/directive not in the instruction set
            InvalidRegisterError: Register operand outside R0-R7
            ImmediateRangeError: Numeric literal too long for a word
        """
        lines = []
        for line_number, raw in enumerate(self.source.splitlines(), start=1):
            parsed = self.parse_line(raw, line_number)
            if parsed is not None:
                lines.append(parsed)
        return lines

    def parse_line(self, raw: str, line_number: int) -> Optional[ParsedLine]:
        """Parse a single source line; None for blank lines."""
        tokens = Lexer(raw, self.filename, line_number).tokenize()
        if not tokens:
            return None

        line = ParsedLine(
            line_number=line_number,
            text=strip_comment(raw),
            filename=self.filename,
            source=raw.rstrip("\r\n"),
        )

        if not self._is_operation(tokens[0]):
            line.label = self._parse_label(tokens[0], line)
            tokens = tokens[1:]
            if not tokens:
                return line

        self._parse_operation(tokens[0], line)
        self._parse_operands(tokens[1:], line)
        return line

    # =========================================================================
    # Line Parts
    # =========================================================================

    def _is_operation(self, token: Token) -> bool:
        """Is this token a mnemonic, directive or branch variant?"""
        if token.type is not TokenType.WORD:
            return False
        text = token.value
        return (
            DirectiveName.lookup(text) is not None
            or Mnemonic.lookup(text) is not None
            or _BRANCH_LIKE.match(text) is not None
        )

    def _parse_label(self, token: Token, line: ParsedLine) -> str:
        """Validate a label token."""
        text = token.value
        if token.type is TokenType.WORD and text.startswith("."):
            raise self._error(UnknownMnemonicError(text), line, token)

        if (
            token.type is not TokenType.WORD
            or not is_valid_label(text)
            or is_register_token(text)
            or is_number_token(text)
        ):
            raise self._error(
                MalformedLineError(f"'{text}' is not a valid label", hint=_label_hint(text)),
                line,
                token,
            )
        return text

    def _parse_operation(self, token: Token, line: ParsedLine) -> None:
        """Fill in kind, mnemonic and branch condition."""
        text = token.value if token.type is TokenType.WORD else ""

        if directive := DirectiveName.lookup(text):
            line.kind = LineKind.DIRECTIVE
            line.mnemonic = directive
            return

        if branch := _BRANCH_PATTERN.match(text):
            line.kind = LineKind.INSTRUCTION
            line.mnemonic = Mnemonic.BR
            line.condition = condition_bits(branch.group(1))
            return

        if mnemonic := Mnemonic.lookup(text):
            line.kind = LineKind.INSTRUCTION
            line.mnemonic = mnemonic
            return

        raise self._error(UnknownMnemonicError(token.value), line, token)

    def _parse_operands(self, tokens: list[Token], line: ParsedLine) -> None:
        """Classify operands, attaching the operand's location to any error."""
        for token in tokens:
            try:
                operand = classify_operand(token)
            except AssemblerError as e:
                raise self._error(e, line, token) from None
            line.operands.append(operand)
            line.operand_columns.append(token.column)

    def _error(self, error: AssemblerError, line: ParsedLine, token: Token) -> AssemblerError:
        location = SourceLocation(self.filename, line.line_number, token.column)
        return error.with_context(location, line.source)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> list[ParsedLine]:
    """Parse assembly source text into ParsedLine records."""
    return Parser(source, filename).parse()


def parse_file(path: Union[str, Path]) -> list[ParsedLine]:
    """Read and parse an assembly source file."""
    path = Path(path)
    return Parser(path.read_text(encoding="utf-8"), str(path)).parse()
