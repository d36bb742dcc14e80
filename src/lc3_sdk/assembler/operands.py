"""
LC-3 Operand Classification
===========================

Decides what each operand token is by looking at its shape, never by
trying a parse and catching the failure:

| Shape                          | Operand      | Example            |
|--------------------------------|--------------|--------------------|
| R followed by a digit          | Register     | R0, R7             |
| X followed by a hex digit or - | Immediate    | x3000, x-1         |
| # or a digit or -              | Immediate    | #-16, 42, -3       |
| string literal token           | StringLiteral| "Hello"            |
| anything else                  | LabelRef     | LOOP, _data        |

Numeric literals are bounded by the width of a 16-bit word before they are
converted: at most 4 hex digits or 5 decimal digits. That syntactic bound
is separate from the per-field two's-complement range check the encoder
applies later (an imm5 of #100 passes here and fails there).

Labels must start with a letter or underscore and contain only letters,
digits and underscores.
"""

from dataclasses import dataclass
import re
import string
from typing import Union

from lc3_sdk.assembler.lexer import Token, TokenType
from lc3_sdk.errors import (
    ImmediateRangeError,
    InvalidRegisterError,
    MalformedLineError,
)
from lc3_sdk.isa import REGISTER_COUNT


# =============================================================================
# Operand Types
# =============================================================================

@dataclass(frozen=True)
class Register:
    """General purpose register R0-R7."""
    number: int

    def __str__(self) -> str:
        return f"R{self.number}"


@dataclass(frozen=True)
class Immediate:
    """Numeric literal, already converted to a Python int."""
    value: int

    def __str__(self) -> str:
        return f"#{self.value}"


@dataclass(frozen=True)
class LabelRef:
    """Reference to a label, resolved against the symbol table later."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class StringLiteral:
    """Decoded payload of a .STRINGZ string."""
    text: str

    def __str__(self) -> str:
        return f'"{self.text}"'


Operand = Union[Register, Immediate, LabelRef, StringLiteral]


# =============================================================================
# Numeric Literals
# =============================================================================

MAX_HEX_DIGITS = 4
MAX_DECIMAL_DIGITS = 5

_LABEL_PATTERN = re.compile(r"^[A-Z_][A-Z0-9_]*$", re.IGNORECASE)


def is_register_token(token: str) -> bool:
    """R followed by a digit."""
    return len(token) >= 2 and token[0] in "Rr" and token[1].isdigit()


def is_number_token(token: str) -> bool:
    """
    Check whether a token has the shape of a numeric literal.

    X only counts as a hex prefix when a hex digit or '-' follows, so
    labels such as XOR_MASK or X are not mistaken for numbers.
    """
    if not token:
        return False
    first = token[0]
    if first in "#-" or first.isdigit():
        return True
    if first in "Xx" and len(token) > 1:
        return token[1] in string.hexdigits or token[1] == "-"
    return False


def parse_number(token: str) -> int:
    """
    Convert a numeric literal token to an int.

    Accepted forms: X1F, x-1F, #31, #-31, 31, -31.

    Args:
        token: The literal as written

    Returns:
        The signed integer value

    Raises:
        ImmediateRangeError: More digits than a 16-bit word can hold
        MalformedLineError: Stray characters in the literal
    """
    text = token.upper()

    if text.startswith("X"):
        digits, radix, limit, allowed = text[1:], 16, MAX_HEX_DIGITS, string.hexdigits
    elif text.startswith("#"):
        digits, radix, limit, allowed = text[1:], 10, MAX_DECIMAL_DIGITS, string.digits
    else:
        digits, radix, limit, allowed = text, 10, MAX_DECIMAL_DIGITS, string.digits

    negative = digits.startswith("-")
    if negative:
        digits = digits[1:]

    if not digits or any(c not in allowed for c in digits):
        raise MalformedLineError(f"malformed numeric literal '{token}'")

    if len(digits) > limit:
        kind = "hex" if radix == 16 else "decimal"
        raise ImmediateRangeError(
            f"numeric literal '{token}' is too long",
            hint=f"a 16-bit word holds at most {limit} {kind} digits",
        )

    value = int(digits, radix)
    return -value if negative else value


# =============================================================================
# Classification
# =============================================================================

def parse_register(token: str) -> Register:
    """
    Convert an R<n> token to a Register.

    Raises:
        InvalidRegisterError: Non-digit characters after R, or n > 7
    """
    digits = token[1:]
    if not digits.isdigit() or int(digits) >= REGISTER_COUNT:
        raise InvalidRegisterError(token)
    return Register(int(digits))


def is_valid_label(name: str) -> bool:
    """Check the label naming rule: [A-Za-z_][A-Za-z0-9_]*."""
    return bool(_LABEL_PATTERN.match(name))


def classify_operand(token: Token) -> Operand:
    """
    Classify one operand token by its structure.

    Args:
        token: A token from the line lexer

    Returns:
        Register, Immediate, LabelRef or StringLiteral

    Raises:
        InvalidRegisterError: Register-shaped token out of range
        ImmediateRangeError: Numeric literal with too many digits
        MalformedLineError: Number-shaped token with stray characters,
            or a token that is not a valid label name
    """
    if token.type is TokenType.STRING:
        return StringLiteral(token.value)

    text = token.value
    if is_register_token(text):
        return parse_register(text)
    if is_number_token(text):
        return Immediate(parse_number(text))
    if is_valid_label(text):
        return LabelRef(text.upper())

    raise MalformedLineError(f"invalid operand '{text}'")
