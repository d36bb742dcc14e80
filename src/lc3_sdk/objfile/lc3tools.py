"""
LC3Tools Object File Format
===========================

Converts between the toolchain's text object modules and the binary
object files loaded by the LC3Tools simulator.

File Structure
--------------
```
Offset  Size  Description
------  ----  -----------
0       5     Magic: 1C 30 15 C0 01
5       2     Version: 01 01
7       n     Memory location records, one per .ORIG and per word
```

Memory Location Record
----------------------
```
Size  Description
----  -----------
2     Value (the word, or the start address for an .ORIG record)
1     is_orig flag (1 for .ORIG records, 0 for words)
4     Length N of the source line text
N     Source line text (not NUL terminated)
```

Multi-byte fields are little-endian. The source line of each word comes
from the debug symbol map; .ORIG records and words without a debug entry
carry an empty line.
"""

from dataclasses import dataclass
import logging
import struct

from lc3_sdk.errors import ObjectFormatError
from lc3_sdk.objfile.records import ObjectModule, OrigBlock


logger = logging.getLogger(__name__)

LC3TOOLS_MAGIC = bytes([0x1C, 0x30, 0x15, 0xC0, 0x01])
LC3TOOLS_VERSION = bytes([0x01, 0x01])

_RECORD_HEADER = struct.Struct("<HBI")
_TEXT_ENCODING = "latin-1"


@dataclass(frozen=True)
class MemLocation:
    """
    One LC3Tools memory location record.

    Attributes:
        value: Word value, or start address when is_orig is set
        line: Source line text for the word
        is_orig: True for a record that starts a new block
    """
    value: int
    line: str = ""
    is_orig: bool = False

    def to_bytes(self) -> bytes:
        text = self.line.encode(_TEXT_ENCODING, errors="replace")
        return _RECORD_HEADER.pack(self.value & 0xFFFF, int(self.is_orig), len(text)) + text

    def __str__(self) -> str:
        """Text object file form of the record."""
        prefix = "ORIG: " if self.is_orig else ""
        return f"{prefix}x{self.value:04X}"


# =============================================================================
# Conversion
# =============================================================================

def module_to_locations(module: ObjectModule) -> list[MemLocation]:
    """Flatten a module's blocks into LC3Tools memory locations."""
    locations = []
    for block in module.blocks:
        locations.append(MemLocation(block.base_address, is_orig=True))
        for address, word in block.items():
            locations.append(MemLocation(word, module.debug_map.get(address, "")))
    return locations


def encode_lc3tools(module: ObjectModule) -> bytes:
    """Render a module as an LC3Tools object file."""
    data = bytearray(LC3TOOLS_MAGIC + LC3TOOLS_VERSION)
    for location in module_to_locations(module):
        data.extend(location.to_bytes())
    return bytes(data)


def decode_locations(data: bytes, filename: str = "<input>") -> list[MemLocation]:
    """
    Parse an LC3Tools object file into memory location records.

    Raises:
        ObjectFormatError: Bad magic, unsupported version, or a truncated
            record
    """
    header_len = len(LC3TOOLS_MAGIC) + len(LC3TOOLS_VERSION)
    if len(data) < header_len:
        raise ObjectFormatError(f"{filename}: object file is too short")
    if data[:len(LC3TOOLS_MAGIC)] != LC3TOOLS_MAGIC:
        raise ObjectFormatError(f"{filename}: not an LC3Tools object file")
    if data[len(LC3TOOLS_MAGIC):header_len] != LC3TOOLS_VERSION:
        raise ObjectFormatError(f"{filename}: unsupported LC3Tools object file version")

    locations = []
    offset = header_len
    while offset < len(data):
        if offset + _RECORD_HEADER.size > len(data):
            raise ObjectFormatError(f"{filename}: truncated record at byte {offset}")
        value, is_orig, length = _RECORD_HEADER.unpack_from(data, offset)
        offset += _RECORD_HEADER.size

        if offset + length > len(data):
            raise ObjectFormatError(f"{filename}: truncated line text at byte {offset}")
        line = data[offset:offset + length].decode(_TEXT_ENCODING)
        offset += length

        locations.append(MemLocation(value, line, bool(is_orig)))

    return locations


def decode_lc3tools(data: bytes, filename: str = "<input>") -> ObjectModule:
    """
    Parse an LC3Tools object file into a module.

    Line texts become the module's debug map.

    Raises:
        ObjectFormatError: Malformed file, or a word before the first
            .ORIG record
    """
    module = ObjectModule()
    block = None
    address = 0

    for location in decode_locations(data, filename):
        if location.is_orig:
            block = OrigBlock(location.value)
            module.blocks.append(block)
            address = location.value
            continue

        if block is None:
            raise ObjectFormatError(f"{filename}: word before first .ORIG record")
        block.words.append(location.value)
        if location.line:
            module.debug_map[address] = location.line
        address += 1

    logger.debug(f"decoded {filename}: {len(module.blocks)} block(s), {module.size} word(s)")
    return module
