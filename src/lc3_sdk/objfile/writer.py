"""
LC-3 Object File Writer
=======================

Renders object modules to the text formats used by the toolchain:

Object file (.obj):
    ORIG: x3000
    x1021
    x0FFE

Symbol file (.sym):
    ADDRESS  LABEL                EXTERNAL  EXTLABEL
    x3000    LOOP                 0
    x3005    PTR                  1         PRINT

Debug symbol file (.dbgsym):
    x3000: LOOP ADD R0, R0, #1

Rendering is done in memory; write_text() then puts the whole file on
disk in one step, through a temporary file and a rename when atomic.
"""

from pathlib import Path
import logging
import os
import tempfile
from typing import Iterable, Union

from lc3_sdk.objfile.records import OrigBlock, SymbolRow


logger = logging.getLogger(__name__)

SYMBOL_HEADER = "ADDRESS  LABEL                EXTERNAL  EXTLABEL"


def format_word(value: int) -> str:
    """Render a word as x followed by four uppercase hex digits."""
    return f"x{value & 0xFFFF:04X}"


def format_object(blocks: Iterable[OrigBlock]) -> str:
    """Render ORIG blocks as a text object file."""
    lines = []
    for block in blocks:
        lines.append(f"ORIG: {format_word(block.base_address)}")
        lines.extend(format_word(word) for word in block.words)
    return "".join(f"{line}\n" for line in lines)


def format_symbols(rows: Iterable[SymbolRow]) -> str:
    """Render symbol rows sorted by address, then label."""
    lines = [SYMBOL_HEADER]
    for row in sorted(rows, key=lambda r: r.sort_key):
        flag = "1" if row.external else "0"
        line = f"{format_word(row.address):<8} {row.label:<20} {flag:<9} {row.ext_label or ''}"
        lines.append(line.rstrip())
    return "".join(f"{line}\n" for line in lines)


def format_debug_symbols(entries: Iterable[tuple[int, str]]) -> str:
    """Render (address, source text) pairs as a debug symbol file."""
    return "".join(f"{format_word(address)}: {text}\n" for address, text in entries)


def write_text(path: Union[str, Path], text: str, atomic: bool = True) -> Path:
    """
    Write a rendered file.

    With atomic=True the text goes to a temporary file in the destination
    directory, which then replaces the destination, so readers never see
    a partly written file.

    Returns:
        The destination path
    """
    path = Path(path)
    if not atomic:
        path.write_text(text, encoding="utf-8")
        return path

    directory = path.parent
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=directory,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as tmp:
        tmp.write(text)
        tmp_path = tmp.name

    try:
        os.replace(tmp_path, path)
    except OSError:
        os.unlink(tmp_path)
        raise

    logger.debug(f"wrote {path}")
    return path


def write_bytes(path: Union[str, Path], data: bytes, atomic: bool = True) -> Path:
    """Binary counterpart of write_text."""
    path = Path(path)
    if not atomic:
        path.write_bytes(data)
        return path

    directory = path.parent
    with tempfile.NamedTemporaryFile(
        mode="wb",
        dir=directory,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as tmp:
        tmp.write(data)
        tmp_path = tmp.name

    try:
        os.replace(tmp_path, path)
    except OSError:
        os.unlink(tmp_path)
        raise

    logger.debug(f"wrote {path}")
    return path
