"""Exception hierarchy for PGM conversion.

Every failure of a conversion is terminal: nothing is retried and no partial
output is repaired.  The CLI catches :class:`PnmError`, reports one
diagnostic and exits with status 1.

Hierarchy::

    PnmError
     +- CorruptedFileError
     |   +- EncodingMismatchError
     +- StreamError
     +- ScaleParseError
     |   +- ScaleSyntaxError
     |   +- InconsistentDirectionError
     |   +- NonPositiveScaleError
     +- SizeError
     |   +- InputTooLargeError
     |   +- OutputTooLargeError
     |   +- EmptyOutputError
     +- UnsupportedMaxValueError
"""

from __future__ import annotations


class PnmError(Exception):
    """Base class for all conversion failures."""

    pass


# ---------------------------------------------------------------------------
# Input file
# ---------------------------------------------------------------------------


class CorruptedFileError(PnmError):
    """Raised when a header or payload violates the PGM structure."""

    pass


class EncodingMismatchError(CorruptedFileError):
    """Raised when the input tag differs from the encoding the command expects."""

    def __init__(self, expected: str, found: str) -> None:
        super().__init__(f"Input is not in {expected} format (found {found})")
        self.expected = expected
        self.found = found


class StreamError(PnmError):
    """Raised when an input or output file cannot be opened."""

    pass


# ---------------------------------------------------------------------------
# Scale descriptors
# ---------------------------------------------------------------------------


class ScaleParseError(PnmError, ValueError):
    """Base class for malformed or invalid scale descriptors."""

    pass


class ScaleSyntaxError(ScaleParseError):
    """Descriptor matches none of the accepted grammars."""

    pass


class InconsistentDirectionError(ScaleParseError):
    """One axis is enlarged while the other is shrunk."""

    pass


class NonPositiveScaleError(ScaleParseError):
    """A scale factor is zero or negative."""

    pass


# ---------------------------------------------------------------------------
# Size limits
# ---------------------------------------------------------------------------


class SizeError(PnmError):
    """Base class for raster dimension limit violations."""

    pass


class InputTooLargeError(SizeError):
    pass


class OutputTooLargeError(SizeError):
    pass


class EmptyOutputError(SizeError):
    """Scaling truncated an output dimension to zero."""

    pass


class UnsupportedMaxValueError(PnmError):
    """The max value cannot be represented in the requested encoding."""

    pass
