"""
LC-3 Object File Reader
=======================

Parses the text files written by lc3_sdk.objfile.writer back into
records. The reader is lenient about layout (blank lines, hex case,
column spacing) and strict about content: anything that would make the
linker patch the wrong word is an ObjectFormatError.

Usage:
    module = load_module("prog")          # prog.obj, prog.sym, prog.dbgsym
    blocks = parse_object(Path("prog.obj").read_text())
"""

from pathlib import Path
import logging
import string
from typing import Optional, Union

from lc3_sdk.config import ToolchainConfig
from lc3_sdk.errors import ObjectFormatError
from lc3_sdk.objfile.records import ObjectModule, OrigBlock, SymbolRow


logger = logging.getLogger(__name__)

ORIG_PREFIX = "ORIG:"


def parse_word(token: str, filename: str = "<input>", line_number: int = 0) -> int:
    """
    Parse 'x' followed by one to four hex digits.

    Raises:
        ObjectFormatError: Anything else
    """
    digits = token[1:]
    if (
        token[:1] not in ("x", "X")
        or not 1 <= len(digits) <= 4
        or any(c not in string.hexdigits for c in digits)
    ):
        raise ObjectFormatError(f"{filename}:{line_number}: invalid word '{token}'")
    return int(digits, 16)


def parse_object(text: str, filename: str = "<input>") -> list[OrigBlock]:
    """
    Parse a text object file into ORIG blocks.

    Raises:
        ObjectFormatError: Data word before the first ORIG header, or a
            malformed word
    """
    blocks: list[OrigBlock] = []
    current: Optional[OrigBlock] = None

    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue

        if line.upper().startswith(ORIG_PREFIX):
            address = parse_word(line[len(ORIG_PREFIX):].strip(), filename, line_number)
            current = OrigBlock(address)
            blocks.append(current)
            continue

        if current is None:
            raise ObjectFormatError(
                f"{filename}:{line_number}: data word before first ORIG header"
            )
        current.words.append(parse_word(line, filename, line_number))

    return blocks


def parse_symbols(text: str, filename: str = "<input>") -> list[SymbolRow]:
    """
    Parse a symbol file.

    Rows are 'ADDRESS LABEL 0' for definitions and
    'ADDRESS LABEL 1 EXTLABEL' for external fill sites. The header line is
    optional.

    Raises:
        ObjectFormatError: Wrong column count or EXTERNAL flag
    """
    rows = []

    for line_number, raw in enumerate(text.splitlines(), start=1):
        fields = raw.split()
        if not fields or fields[0].upper() == "ADDRESS":
            continue

        address = parse_word(fields[0], filename, line_number)
        if len(fields) == 3 and fields[2] == "0":
            rows.append(SymbolRow(address, fields[1].upper()))
        elif len(fields) == 4 and fields[2] == "1":
            rows.append(SymbolRow(address, fields[1].upper(), True, fields[3].upper()))
        else:
            raise ObjectFormatError(
                f"{filename}:{line_number}: malformed symbol row '{raw.strip()}'"
            )

    return rows


def parse_debug_symbols(text: str, filename: str = "<input>") -> list[tuple[int, str]]:
    """
    Parse a debug symbol file into (address, source text) pairs.

    Raises:
        ObjectFormatError: Line without 'xADDR:' prefix
    """
    entries = []

    for line_number, raw in enumerate(text.splitlines(), start=1):
        if not raw.strip():
            continue
        head, sep, tail = raw.partition(":")
        if not sep:
            raise ObjectFormatError(
                f"{filename}:{line_number}: malformed debug symbol line '{raw.strip()}'"
            )
        entries.append((parse_word(head.strip(), filename, line_number), tail.strip()))

    return entries


def load_module(
    base: Union[str, Path],
    config: Optional[ToolchainConfig] = None,
) -> ObjectModule:
    """
    Read <base>.obj, <base>.sym and, if present, <base>.dbgsym.

    Args:
        base: Path without suffix (a trailing .obj is tolerated)
        config: Supplies the file suffixes

    Raises:
        FileNotFoundError: Missing object or symbol file
        ObjectFormatError: Malformed content
    """
    config = config or ToolchainConfig()
    base = Path(base)
    if base.suffix == config.object_suffix:
        base = base.with_suffix("")

    obj_path = base.with_name(base.name + config.object_suffix)
    sym_path = base.with_name(base.name + config.symbol_suffix)
    dbg_path = base.with_name(base.name + config.debug_symbol_suffix)

    module = ObjectModule(
        blocks=parse_object(obj_path.read_text(encoding="utf-8"), str(obj_path)),
        symbols=parse_symbols(sym_path.read_text(encoding="utf-8"), str(sym_path)),
        name=base.name,
    )

    if dbg_path.exists():
        for address, text in parse_debug_symbols(
            dbg_path.read_text(encoding="utf-8"), str(dbg_path)
        ):
            module.debug_map[address] = text
    else:
        logger.debug(f"no debug symbols for {base}")

    logger.debug(
        f"loaded {base}: {len(module.blocks)} block(s), {len(module.symbols)} symbol row(s)"
    )
    return module
