"""Conversion orchestrator -- read, derive output header, sample, write.

The sequence is strictly ordered and every step either succeeds or raises a
:class:`~pnmdump.raster.errors.PnmError` that aborts the rest:

    1. read the input with the expected encoding
    2. resolve the output encoding (explicit, or inherited from the input)
    3. derive output width/height (swapped for reflect/rotate90; for scale
       transforms parse the descriptor, multiply, truncate)
    4. check the output size limits
    5. copy max value; check it fits the output encoding
    6. write the header, then every sample in row-major order

Nothing is written to the output stream before step 5 has succeeded.  When
the caller opened the output file beforehand, a failed conversion leaves it
empty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

from pnmdump.raster import codec
from pnmdump.raster.errors import (
    EmptyOutputError,
    OutputTooLargeError,
    StreamError,
    UnsupportedMaxValueError,
)
from pnmdump.raster.image import ConversionSpec, Encoding, PgmHeader, RasterImage
from pnmdump.raster.sampler import SampleMode, SampleParams, sample, select_mode
from pnmdump.raster.scale import ScaleFactor, parse_scale
from pnmdump.utils import fs
from pnmdump.utils.validators import PnmdumpConfigV1

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Summary of a completed conversion."""

    input_header: PgmHeader
    output_header: PgmHeader
    mode: SampleMode
    scale: Optional[ScaleFactor] = None
    ratios: tuple[float, float] = (1.0, 1.0)


@dataclass(frozen=True, slots=True)
class _OutputPlan:
    header: PgmHeader
    mode: SampleMode
    params: SampleParams
    scale: Optional[ScaleFactor]
    ratios: tuple[float, float]


def _plan_output(
    image: RasterImage,
    spec: ConversionSpec,
    config: PnmdumpConfigV1,
) -> _OutputPlan:
    """Derive the output header and sampling parameters (steps 2-5)."""
    encoding = spec.output_encoding or image.encoding

    if spec.transform.swaps_axes:
        width, height = image.height, image.width
    else:
        width, height = image.width, image.height

    scale: Optional[ScaleFactor] = None
    ratios = (1.0, 1.0)
    if spec.transform.is_scale:
        scale = parse_scale(spec.scale)
        ratios = scale.ratios()
        width = int(width * ratios[0])
        height = int(height * ratios[1])

    limits = config.limits
    if width > limits.max_output_width or height > limits.max_output_height:
        raise OutputTooLargeError(
            f"Output too large: {width}x{height}, "
            f"max {limits.max_output_width}x{limits.max_output_height}"
        )
    if width <= 0 or height <= 0:
        raise EmptyOutputError(f"Output has no pixels: {width}x{height}")

    max_value = image.max_value
    if encoding is Encoding.P5 and max_value > codec.MAX_BINARY_VALUE:
        raise UnsupportedMaxValueError(
            f"P5 stores one byte per sample; max value {max_value} "
            f"exceeds {codec.MAX_BINARY_VALUE}"
        )

    mode = select_mode(spec.transform, ratios)
    if mode is SampleMode.BILINEAR_UP and max_value > 255:
        logger.warning(
            "Max value %d exceeds 255; extrapolated border samples are clamped to 255",
            max_value,
        )
    elif mode is SampleMode.BILINEAR_UP and max_value < 255:
        logger.warning(
            "Max value %d is below 255; interpolated samples are clamped to %d",
            max_value,
            max_value,
        )

    header = PgmHeader(encoding, width, height, max_value)
    params = SampleParams(width, height, w_scale=ratios[0], h_scale=ratios[1])
    return _OutputPlan(header, mode, params, scale, ratios)


def convert(
    input_stream: BinaryIO,
    output_stream: BinaryIO,
    spec: ConversionSpec,
    config: Optional[PnmdumpConfigV1] = None,
) -> ConversionResult:
    """Convert one PGM image from ``input_stream`` into ``output_stream``.

    Parameters
    ----------
    input_stream : BinaryIO
        Stream opened for binary reading.
    output_stream : BinaryIO
        Stream opened for binary writing.
    spec : ConversionSpec
        Encodings, transform and optional scale descriptor.
    config : PnmdumpConfigV1, optional
        Size limits and output comment; defaults when omitted.

    Returns
    -------
    ConversionResult

    Raises
    ------
    PnmError
        Any failure; no output is written unless header derivation succeeded.
    """
    config = config or PnmdumpConfigV1()
    limits = config.limits

    image = codec.read_pgm(
        input_stream,
        spec.input_encoding,
        max_width=limits.max_input_width,
        max_height=limits.max_input_height,
    )
    plan = _plan_output(image, spec, config)

    def sample_at(row: int, col: int) -> int:
        return sample(image, row, col, plan.mode, plan.params)

    codec.write_pgm(output_stream, plan.header, sample_at, comment=config.output.comment)

    logger.info(
        "Converted %s %dx%d -> %s %dx%d (%s)",
        image.encoding.value, image.width, image.height,
        plan.header.encoding.value, plan.header.width, plan.header.height,
        plan.mode.value,
    )
    return ConversionResult(image.header, plan.header, plan.mode, plan.scale, plan.ratios)


def convert_files(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    spec: ConversionSpec,
    config: Optional[PnmdumpConfigV1] = None,
) -> ConversionResult:
    """Open both files, run :func:`convert` and close them whatever happens.

    The input is opened for reading first, then the output is created or
    truncated.  Both are closed on every exit path.

    Raises
    ------
    StreamError
        Either file cannot be opened.
    PnmError
        Any conversion failure (the output file may be left empty).
    """
    try:
        src = fs.open_input(input_path)
    except OSError as e:
        raise StreamError(f'No such file: "{input_path}"') from e

    with src:
        try:
            dst = fs.open_output(output_path)
        except OSError as e:
            raise StreamError(f'Cannot write file: "{output_path}" ({e.strerror})') from e
        with dst:
            return convert(src, dst, spec, config)
