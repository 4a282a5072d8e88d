"""Raster data model -- headers, in-memory images and conversion requests.

A :class:`RasterImage` is built once by the codec and is read-only from then
on: its numpy buffer has ``writeable`` cleared.  Output images are never
materialized; the converter derives a :class:`PgmHeader` for the output and
the sampler produces its samples one at a time.

Coordinates are 0-based ``(row, col)`` with row 0 at the top, matching the
row-major payload order of the file format.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Encoding(enum.Enum):
    """On-disk sample encoding.  The value is the tag on line 1 of the file."""

    P2 = "P2"  # whitespace-separated decimal integers
    P5 = "P5"  # one raw byte per sample

    @classmethod
    def from_tag(cls, tag: str) -> Optional["Encoding"]:
        """Return the encoding for ``tag`` or ``None`` when unrecognized."""
        try:
            return cls(tag)
        except ValueError:
            return None


class Transform(enum.Enum):
    """Transform applied while converting."""

    IDENTITY = "identity"
    REFLECT = "reflect"
    ROTATE90 = "rotate90"
    SCALE_NEAREST = "scale_nearest"
    SCALE_BILINEAR = "scale_bilinear"

    @property
    def swaps_axes(self) -> bool:
        return self in (Transform.REFLECT, Transform.ROTATE90)

    @property
    def is_scale(self) -> bool:
        return self in (Transform.SCALE_NEAREST, Transform.SCALE_BILINEAR)


# ---------------------------------------------------------------------------
# Header and image
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PgmHeader:
    """The four header fields of a PGM file (the comment is not kept)."""

    encoding: Encoding
    width: int
    height: int
    max_value: int

    @property
    def size(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class RasterImage:
    """Grayscale raster held entirely in memory.

    Parameters
    ----------
    header : PgmHeader
        Parsed header; ``width``/``height`` must match ``pixels.shape``.
    pixels : np.ndarray
        ``(height, width)`` integer buffer.  Made read-only on construction.
    """

    header: PgmHeader
    pixels: np.ndarray

    def __post_init__(self) -> None:
        expected = (self.header.height, self.header.width)
        if self.pixels.shape != expected:
            raise ValueError(
                f"pixel buffer shape {self.pixels.shape} does not match "
                f"header {expected[1]}x{expected[0]}"
            )
        self.pixels.flags.writeable = False

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Sequence[int]],
        max_value: int = 255,
        encoding: Encoding = Encoding.P2,
    ) -> "RasterImage":
        """Build an image from nested row lists (mainly for tests and tooling)."""
        pixels = np.array(rows, dtype=np.int32)
        if pixels.ndim != 2:
            raise ValueError("rows must form a rectangular 2D grid")
        height, width = pixels.shape
        return cls(PgmHeader(encoding, width, height, max_value), pixels)

    @property
    def width(self) -> int:
        return self.header.width

    @property
    def height(self) -> int:
        return self.header.height

    @property
    def max_value(self) -> int:
        return self.header.max_value

    @property
    def encoding(self) -> Encoding:
        return self.header.encoding

    def at(self, row: int, col: int) -> int:
        """Sample at ``(row, col)`` as a plain ``int``."""
        return int(self.pixels[row, col])

    def to_rows(self) -> list[list[int]]:
        return self.pixels.tolist()


# ---------------------------------------------------------------------------
# Conversion request
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ConversionSpec:
    """A fully resolved conversion request.

    Parameters
    ----------
    input_encoding : Encoding | None
        Encoding the input must carry.  ``None`` adopts whatever the file says.
    output_encoding : Encoding | None
        Encoding to write.  ``None`` inherits the input encoding.
    transform : Transform
        Transform applied while copying samples.
    scale : str | None
        Scale descriptor (e.g. ``"2"``, ``"1/2"``, ``"m3x2"``).  Required for
        the scale transforms and rejected for all others.
    """

    input_encoding: Optional[Encoding] = None
    output_encoding: Optional[Encoding] = None
    transform: Transform = Transform.IDENTITY
    scale: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.transform, Transform):
            raise ValueError(f"transform must be a Transform, got {self.transform!r}")
        if self.transform.is_scale and self.scale is None:
            raise ValueError(f"{self.transform.value} requires a scale descriptor")
        if not self.transform.is_scale and self.scale is not None:
            raise ValueError(
                f"scale descriptor given for non-scaling transform {self.transform.value}"
            )
