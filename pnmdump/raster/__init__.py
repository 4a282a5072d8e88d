"""
Raster conversion engine.

Submodules:
    image: Encodings, headers, in-memory rasters and conversion requests
    errors: Exception hierarchy
    codec: P2/P5 parsing and serialization
    scale: Scale descriptor parsing
    sampler: Per-pixel coordinate mapping and interpolation
    converter: Read -> derive -> sample -> write orchestration
"""

from pnmdump.raster.codec import read_pgm, write_pgm
from pnmdump.raster.converter import ConversionResult, convert, convert_files
from pnmdump.raster.errors import (
    CorruptedFileError,
    EmptyOutputError,
    EncodingMismatchError,
    InconsistentDirectionError,
    InputTooLargeError,
    NonPositiveScaleError,
    OutputTooLargeError,
    PnmError,
    ScaleParseError,
    ScaleSyntaxError,
    SizeError,
    StreamError,
    UnsupportedMaxValueError,
)
from pnmdump.raster.image import ConversionSpec, Encoding, PgmHeader, RasterImage, Transform
from pnmdump.raster.sampler import SampleMode, SampleParams, sample
from pnmdump.raster.scale import ScaleDirection, ScaleFactor, parse_scale

__all__ = [
    "ConversionResult",
    "ConversionSpec",
    "CorruptedFileError",
    "EmptyOutputError",
    "Encoding",
    "EncodingMismatchError",
    "InconsistentDirectionError",
    "InputTooLargeError",
    "NonPositiveScaleError",
    "OutputTooLargeError",
    "PgmHeader",
    "PnmError",
    "RasterImage",
    "SampleMode",
    "SampleParams",
    "ScaleDirection",
    "ScaleFactor",
    "ScaleParseError",
    "ScaleSyntaxError",
    "SizeError",
    "StreamError",
    "Transform",
    "UnsupportedMaxValueError",
    "convert",
    "convert_files",
    "parse_scale",
    "read_pgm",
    "sample",
    "write_pgm",
]
