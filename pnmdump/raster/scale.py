"""Scale descriptor parsing.

A descriptor gives the ratio of output to input size per axis.  Accepted
grammars, tried in order, each matching the whole string::

    D            width and height scaled by D            "2", "0.5"
    D/D          width and height scaled by D1/D2        "1/2"
    DxD          width by D1, height by D2               "2x3"
    D/DxD/D      width by D1/D2, height by D3/D4         "3/2x5/4"

``D`` is a decimal floating literal.  A leading ``m`` marks the descriptor
as a shrink request (``"m2"`` halves the image); it is not numeric itself.

Both factors must scale in the same direction and be positive.
"""

from __future__ import annotations

import enum
import logging
import math
import re
from dataclasses import dataclass

from pnmdump.raster.errors import (
    InconsistentDirectionError,
    NonPositiveScaleError,
    ScaleSyntaxError,
)

logger = logging.getLogger(__name__)

SHRINK_PREFIX = "m"

_NUM = r"([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
_UNIFORM = re.compile(_NUM)
_UNIFORM_FRACTION = re.compile(rf"{_NUM}/{_NUM}")
_PER_AXIS = re.compile(rf"{_NUM}x{_NUM}")
_PER_AXIS_FRACTION = re.compile(rf"{_NUM}/{_NUM}x{_NUM}/{_NUM}")


class ScaleDirection(enum.Enum):
    ENLARGE = "enlarge"
    SHRINK = "shrink"


@dataclass(frozen=True, slots=True)
class ScaleFactor:
    """Parsed scale descriptor.

    Parameters
    ----------
    w_scale, h_scale : float
        Factors as written in the descriptor.
    direction : ScaleDirection
        ``SHRINK`` when the descriptor carried the ``m`` prefix.
    """

    w_scale: float
    h_scale: float
    direction: ScaleDirection = ScaleDirection.ENLARGE

    def ratios(self) -> tuple[float, float]:
        """Effective ``(width, height)`` output/input ratios.

        A shrink request inverts factors above 1, so ``m2`` and ``1/2`` are
        equivalent.  Factors already at or below 1 are used as written.
        """
        if self.direction is ScaleDirection.SHRINK:
            return (_shrunk(self.w_scale), _shrunk(self.h_scale))
        return (self.w_scale, self.h_scale)


def _shrunk(factor: float) -> float:
    return 1.0 / factor if factor > 1 else factor


def _divide(numerator: str, denominator: str, descriptor: str) -> float:
    den = float(denominator)
    if den == 0:
        raise ScaleSyntaxError(f"Bad scale format {descriptor!r}: zero denominator")
    return float(numerator) / den


def _match_factors(body: str, descriptor: str) -> tuple[float, float]:
    m = _UNIFORM.fullmatch(body)
    if m:
        value = float(m.group(1))
        return value, value

    m = _UNIFORM_FRACTION.fullmatch(body)
    if m:
        value = _divide(m.group(1), m.group(2), descriptor)
        return value, value

    m = _PER_AXIS.fullmatch(body)
    if m:
        return float(m.group(1)), float(m.group(2))

    m = _PER_AXIS_FRACTION.fullmatch(body)
    if m:
        return (
            _divide(m.group(1), m.group(2), descriptor),
            _divide(m.group(3), m.group(4), descriptor),
        )

    raise ScaleSyntaxError(
        f"Bad scale format {descriptor!r}: expected D, D/D, DxD or D/DxD/D"
    )


def parse_scale(descriptor: str) -> ScaleFactor:
    """Parse a scale descriptor.

    Parameters
    ----------
    descriptor : str
        Descriptor such as ``"2"``, ``"1/2"``, ``"2x3"`` or ``"m3/2x3/2"``.

    Returns
    -------
    ScaleFactor

    Raises
    ------
    ScaleSyntaxError
        No grammar matches, or a denominator is zero.
    InconsistentDirectionError
        One factor is above 1 and the other below 1.
    NonPositiveScaleError
        A factor is zero or negative.
    """
    direction = ScaleDirection.ENLARGE
    body = descriptor
    if body.startswith(SHRINK_PREFIX):
        direction = ScaleDirection.SHRINK
        body = body[len(SHRINK_PREFIX):]

    w_scale, h_scale = _match_factors(body, descriptor)
    if not (math.isfinite(w_scale) and math.isfinite(h_scale)):
        raise ScaleSyntaxError(f"Bad scale format {descriptor!r}: factor out of range")

    if (w_scale < 1 and h_scale > 1) or (w_scale > 1 and h_scale < 1):
        raise InconsistentDirectionError(
            "Width and height must be scaled in the same way, "
            f"got {w_scale:g}x{h_scale:g}"
        )
    if w_scale <= 0 or h_scale <= 0:
        raise NonPositiveScaleError(
            f"Scale factors must be positive, got {w_scale:g}x{h_scale:g}"
        )

    factor = ScaleFactor(w_scale, h_scale, direction)
    logger.debug("Parsed scale %r -> %s", descriptor, factor)
    return factor
