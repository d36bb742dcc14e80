"""
LC-3 Assembly Line Lexer
========================

This module splits one line of LC-3 assembly source into tokens. LC-3
assembly is strictly line oriented, so unlike a free-form tokenizer the
lexer works on a single line at a time and returns a short token list
for the parser to classify.

Token Types
-----------
- WORD: Labels, mnemonics, directives, registers and numeric literals,
  uppercased (LC-3 assembly is case-insensitive)
- STRING: The payload of a double-quoted string literal, kept verbatim
  with escape sequences decoded

Separators
----------
Words are separated by any run of spaces, tabs and commas, so
"ADD R0,R0,#1", "ADD R0, R0, #1" and "ADD R0 R0 #1" tokenize the same.

Comments
--------
A semicolon starts a comment that runs to the end of the line, unless
the semicolon is inside a string literal:

    MSG .STRINGZ "a;b"   ; only this part is a comment

String Literals
---------------
At most one string literal is allowed and it must be the last operand on
the line. Supported escapes:

| Escape | Character       |
|--------|-----------------|
| \\n     | newline         |
| \\r     | carriage return |
| \\t     | tab             |
| \\\\     | backslash       |
| \\"     | double quote    |
| \\0     | NUL             |

Example
-------
>>> from lc3_sdk.assembler.lexer import Lexer
>>> Lexer('loop add r0, r0, #1 ; bump').tokenize()
[Token(WORD, 'LOOP', 1), Token(WORD, 'ADD', 6), Token(WORD, 'R0', 10),
 Token(WORD, 'R0', 14), Token(WORD, '#1', 18)]
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from lc3_sdk.errors import MalformedLineError, SourceLocation


# =============================================================================
# Token Definitions
# =============================================================================

class TokenType(Enum):
    """Token types for one line of LC-3 assembly."""
    WORD = auto()    # Label, mnemonic, directive, register or number
    STRING = auto()  # Decoded payload of a "..." literal


@dataclass(frozen=True)
class Token:
    """
    A single token from a source line.

    Attributes:
        type: The TokenType classification
        value: Uppercased word, or the verbatim string payload
        column: Column of the token's first character (1-indexed)
    """
    type: TokenType
    value: str
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.column})"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes a single line of LC-3 assembly source.

    Usage:
        tokens = Lexer(line_text, "prog.asm", line_number=12).tokenize()

    Attributes:
        line: The raw source line (without trailing newline)
        filename: Name of the source file (for error reporting)
        line_number: 1-indexed line number (for error reporting)
    """

    SEPARATORS = " \t,"

    ESCAPE_SEQUENCES = {
        "n": "\n",
        "r": "\r",
        "t": "\t",
        "\\": "\\",
        '"': '"',
        "0": "\0",
    }

    def __init__(self, line: str, filename: str = "<input>", line_number: int = 1):
        self.line = line.rstrip("\r\n")
        self.filename = filename
        self.line_number = line_number
        self._pos = 0

    def tokenize(self) -> list[Token]:
        """
        Split the line into tokens.

        Returns:
            Tokens in source order; an empty list for blank or
            comment-only lines

        Raises:
            MalformedLineError: Unterminated string literal, or text
                after the closing quote
        """
        tokens: list[Token] = []

        while not self._at_end():
            char = self._peek()

            if char in self.SEPARATORS:
                self._pos += 1
            elif char == ";":
                break
            elif char == '"':
                tokens.append(self._scan_string())
                self._expect_line_end()
                break
            else:
                tokens.append(self._scan_word())

        return tokens

    # =========================================================================
    # Character Access
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.line)

    def _peek(self) -> str:
        if self._at_end():
            return ""
        return self.line[self._pos]

    def _advance(self) -> str:
        char = self._peek()
        self._pos += 1
        return char

    def _error(self, message: str, column: Optional[int] = None) -> MalformedLineError:
        """Create a MalformedLineError pointing at the current column."""
        location = SourceLocation(
            self.filename,
            self.line_number,
            column if column is not None else self._pos + 1,
        )
        return MalformedLineError(message, location, source_line=self.line)

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_word(self) -> Token:
        """Scan a run of non-separator characters and uppercase it."""
        start = self._pos
        while not self._at_end() and self._peek() not in self.SEPARATORS + ';"':
            self._pos += 1
        return Token(TokenType.WORD, self.line[start:self._pos].upper(), start + 1)

    def _scan_string(self) -> Token:
        """Scan a double-quoted string literal, decoding escapes."""
        start_column = self._pos + 1
        self._advance()  # opening "

        chars = []
        while not self._at_end():
            char = self._advance()
            if char == '"':
                return Token(TokenType.STRING, "".join(chars), start_column)
            if char == "\\":
                chars.append(self._scan_escape_sequence())
            else:
                chars.append(char)

        raise self._error("unterminated string literal", start_column)

    def _scan_escape_sequence(self) -> str:
        """Decode the character after a backslash."""
        if self._at_end():
            raise self._error("unexpected end of line in escape sequence")

        char = self._advance()
        if char in self.ESCAPE_SEQUENCES:
            return self.ESCAPE_SEQUENCES[char]

        raise self._error(f"unknown escape sequence '\\{char}'", self._pos - 1)

    def _expect_line_end(self) -> None:
        """Only whitespace or a comment may follow a string literal."""
        while not self._at_end():
            char = self._peek()
            if char == ";":
                return
            if char not in " \t":
                raise self._error("unexpected text after string literal")
            self._pos += 1


# =============================================================================
# Convenience Functions
# =============================================================================

def strip_comment(line: str) -> str:
    """
    Remove a trailing comment and surrounding whitespace, keeping case.

    Semicolons inside string literals are not comment starts. This is the
    form of the line recorded in the debug symbol file.
    """
    in_string = False
    escaped = False
    for index, char in enumerate(line):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == ";":
            return line[:index].strip()
    return line.strip()


def tokenize_line(line: str, filename: str = "<input>", line_number: int = 1) -> list[Token]:
    """Tokenize one line of source. See Lexer.tokenize."""
    return Lexer(line, filename, line_number).tokenize()
