"""Byte dump of arbitrary files.

Each line shows the offset of its first byte as 7 lowercase hex digits,
followed by up to 8 entries of two spaces, the uppercase hex value, a space
and the character itself (``.`` when not printable ASCII)::

    0000000  50 P  35 5  0A .  23 #  20    47 G  65 e  6E n
    0000008  0A .
    0000009

The last line holds the total byte count.
"""

from __future__ import annotations

from typing import BinaryIO, TextIO

CHUNK_SIZE = 8
PRINTABLE_MIN = 32
PRINTABLE_MAX = 126


def format_chunk(offset: int, chunk: bytes) -> str:
    """Format one dump line (without newline)."""
    cells = []
    for byte in chunk:
        char = chr(byte) if PRINTABLE_MIN <= byte <= PRINTABLE_MAX else "."
        cells.append(f"  {byte:02X} {char}")
    return f"{offset:07x}" + "".join(cells)


def hexdump(stream: BinaryIO, out: TextIO) -> int:
    """Dump ``stream`` to ``out`` and return the number of bytes read."""
    offset = 0
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            break
        out.write(format_chunk(offset, chunk) + "\n")
        offset += len(chunk)
        if len(chunk) < CHUNK_SIZE:
            break
    out.write(f"{offset:07x}\n")
    return offset
