"""PGM codec -- parse and serialize P2 (textual) and P5 (binary) files.

File layout (bit-exact)::

    P2                       <- encoding tag
    # Generated by pnmdump   <- comment line, ignored on read
    3 2                      <- width height
    255                      <- max value
    0 128 255                <- payload: P2 rows of decimal integers,
    64 32 16                    P5 width*height raw bytes, no delimiters

Reading is strict: every header field must parse, the payload must hold at
least (P2) or exactly (P5) ``width * height`` samples and every sample must
lie in ``[0, max_value]``.  Violations raise :class:`CorruptedFileError`.

Writing pulls samples through a ``sample_at(row, col)`` callable so that
callers can stream transformed samples without building an output buffer.
"""

from __future__ import annotations

import logging
import re
from typing import BinaryIO, Callable, Optional

import numpy as np

from pnmdump.raster.errors import (
    CorruptedFileError,
    EncodingMismatchError,
    InputTooLargeError,
    UnsupportedMaxValueError,
)
from pnmdump.raster.image import Encoding, PgmHeader, RasterImage

logger = logging.getLogger(__name__)

DEFAULT_COMMENT = "# Generated by pnmdump"
MAX_INPUT_WIDTH = 512
MAX_INPUT_HEIGHT = 512
MAX_BINARY_VALUE = 255

SampleSource = Callable[[int, int], int]
"""Callable returning the output sample at ``(row, col)``."""

_DECIMAL = re.compile(rb"[+-]?\d+")


# ---------------------------------------------------------------------------
# Header parsing helpers
# ---------------------------------------------------------------------------


def _next_line(data: bytes, pos: int, what: str) -> tuple[bytes, int]:
    """Return the line starting at ``pos`` (without terminator) and the next offset."""
    end = data.find(b"\n", pos)
    if end < 0:
        raise CorruptedFileError(f"Corrupted input file: missing {what} line")
    return data[pos:end].rstrip(b"\r"), end + 1


def _parse_ints(line: bytes, count: int, what: str) -> list[int]:
    tokens = line.split()
    if len(tokens) != count or not all(_DECIMAL.fullmatch(t) for t in tokens):
        raise CorruptedFileError(
            f"Corrupted input file: bad {what} line {line!r}"
        )
    return [int(t) for t in tokens]


def _parse_header(
    data: bytes,
    expected: Optional[Encoding],
    max_width: int,
    max_height: int,
) -> tuple[PgmHeader, int]:
    """Parse the four header lines; return the header and the payload offset."""
    tag_line, pos = _next_line(data, 0, "encoding tag")
    _comment, pos = _next_line(data, pos, "comment")
    size_line, pos = _next_line(data, pos, "width/height")
    max_line, pos = _next_line(data, pos, "max value")

    tag = tag_line.strip().decode("ascii", errors="replace")
    width, height = _parse_ints(size_line, 2, "width/height")
    (max_value,) = _parse_ints(max_line, 1, "max value")

    encoding = Encoding.from_tag(tag)
    if expected is not None and encoding is not expected:
        raise EncodingMismatchError(expected.value, tag or "<empty>")
    if encoding is None:
        raise CorruptedFileError(f"Corrupted input file: unknown encoding tag {tag!r}")

    if width <= 0 or height <= 0:
        raise CorruptedFileError(
            f"Corrupted input file: dimensions must be positive, got {width}x{height}"
        )
    if max_value <= 0:
        raise CorruptedFileError(
            f"Corrupted input file: max value must be positive, got {max_value}"
        )
    if width > max_width or height > max_height:
        raise InputTooLargeError(
            f"Input too large: {width}x{height}, max {max_width}x{max_height}"
        )

    return PgmHeader(encoding, width, height, max_value), pos


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------


def _parse_textual(payload: bytes, header: PgmHeader) -> np.ndarray:
    needed = header.size
    tokens = payload.split()
    if len(tokens) < needed:
        raise CorruptedFileError(
            f"Corrupted input file: expected {needed} samples, found {len(tokens)}"
        )
    if len(tokens) > needed:
        logger.debug("Ignoring %d tokens after the last sample", len(tokens) - needed)

    values = []
    for index, token in enumerate(tokens[:needed]):
        if not _DECIMAL.fullmatch(token):
            raise CorruptedFileError(
                f"Corrupted input file: sample {index} is not an integer ({token!r})"
            )
        value = int(token)
        if value < 0 or value > header.max_value:
            raise CorruptedFileError(
                f"Corrupted input file: sample {index} = {value} outside "
                f"[0, {header.max_value}]"
            )
        values.append(value)

    return np.array(values, dtype=np.int32).reshape(header.height, header.width)


def _parse_binary(payload: bytes, header: PgmHeader) -> np.ndarray:
    needed = header.size
    if len(payload) < needed:
        raise CorruptedFileError(
            f"Corrupted input file: expected {needed} bytes, found {len(payload)}"
        )
    if len(payload) > needed:
        raise CorruptedFileError(
            f"Corrupted input file: {len(payload) - needed} trailing bytes after payload"
        )

    pixels = np.frombuffer(payload, dtype=np.uint8).astype(np.int32)
    over = np.flatnonzero(pixels > header.max_value)
    if over.size:
        index = int(over[0])
        raise CorruptedFileError(
            f"Corrupted input file: sample {index} = {int(pixels[index])} outside "
            f"[0, {header.max_value}]"
        )
    return pixels.reshape(header.height, header.width)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def read_pgm(
    stream: BinaryIO,
    expected: Optional[Encoding] = None,
    *,
    max_width: int = MAX_INPUT_WIDTH,
    max_height: int = MAX_INPUT_HEIGHT,
) -> RasterImage:
    """Read a complete PGM image from a binary stream.

    Parameters
    ----------
    stream : BinaryIO
        Stream opened for binary reading; consumed to EOF.
    expected : Encoding | None
        Encoding the file must carry.  ``None`` adopts the parsed tag.
    max_width, max_height : int
        Input dimension limits.

    Returns
    -------
    RasterImage
        Read-only image with an ``int32`` buffer.

    Raises
    ------
    CorruptedFileError
        Structural or range violation in header or payload.
    EncodingMismatchError
        Tag differs from ``expected``.
    InputTooLargeError
        Dimensions exceed the limits.
    """
    data = stream.read()
    header, offset = _parse_header(data, expected, max_width, max_height)
    logger.debug(
        "Parsed header: %s %dx%d max=%d",
        header.encoding.value, header.width, header.height, header.max_value,
    )

    payload = data[offset:]
    if header.encoding is Encoding.P2:
        pixels = _parse_textual(payload, header)
    else:
        pixels = _parse_binary(payload, header)

    return RasterImage(header, pixels)


def write_header(
    stream: BinaryIO,
    header: PgmHeader,
    comment: str = DEFAULT_COMMENT,
) -> None:
    """Write the four header lines."""
    text = (
        f"{header.encoding.value}\n"
        f"{comment}\n"
        f"{header.width} {header.height}\n"
        f"{header.max_value}\n"
    )
    stream.write(text.encode("ascii"))


def write_payload(
    stream: BinaryIO,
    header: PgmHeader,
    sample_at: SampleSource,
) -> None:
    """Write ``header.width * header.height`` samples in row-major order.

    P2 rows are single-space separated with a trailing newline.  P5 samples
    are raw bytes with no delimiters.
    """
    for row in range(header.height):
        values = [sample_at(row, col) for col in range(header.width)]
        if header.encoding is Encoding.P2:
            stream.write((" ".join(str(v) for v in values) + "\n").encode("ascii"))
        else:
            stream.write(bytes(values))


def write_pgm(
    stream: BinaryIO,
    header: PgmHeader,
    sample_at: SampleSource,
    *,
    comment: str = DEFAULT_COMMENT,
) -> None:
    """Write a complete PGM file.

    Raises
    ------
    UnsupportedMaxValueError
        P5 output with ``max_value`` above 255 (one byte per sample).
    """
    if header.encoding is Encoding.P5 and header.max_value > MAX_BINARY_VALUE:
        raise UnsupportedMaxValueError(
            f"P5 stores one byte per sample; max value {header.max_value} "
            f"exceeds {MAX_BINARY_VALUE}"
        )
    write_header(stream, header, comment)
    write_payload(stream, header, sample_at)
