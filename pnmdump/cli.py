"""Command line entry point: resolve flags into a conversion and run it.

CLI:
    pnmdump --version
    pnmdump --usage
    pnmdump --hexdump [FILE]
    pnmdump --P2toP5 INFILE OUTFILE
    pnmdump --P5toP2 INFILE OUTFILE
    pnmdump --rotate INFILE OUTFILE          (diagonal reflection; alias --reflect)
    pnmdump --rotate90 INFILE OUTFILE
    pnmdump --scaleNn SCALE INFILE OUTFILE   (nearest neighbour)
    pnmdump --scaleBl SCALE INFILE OUTFILE   (bilinear up / box down)

Global options:
    --config PATH      pnmdump.v1 YAML config (limits, comment, logging)
    --log-level LEVEL  overrides logging.level from the config

Exit status is 0 on success and 1 on any failure, including bad arguments.
Failures are reported as a single error-level log line on stderr.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import NamedTuple, Optional, Sequence

from pnmdump import __version__
from pnmdump.hexdump import hexdump
from pnmdump.raster.converter import convert_files
from pnmdump.raster.errors import PnmError
from pnmdump.raster.image import ConversionSpec, Encoding, Transform
from pnmdump.utils import validators
from pnmdump.utils.logging_config import configure_from, log_context, setup_logging

logger = logging.getLogger(__name__)

USAGE = """\
Usage:
pnmdump --version
pnmdump --usage
pnmdump --hexdump [FILE]
pnmdump --P2toP5 INFILE OUTFILE
pnmdump --P5toP2 INFILE OUTFILE
pnmdump --rotate INFILE OUTFILE
pnmdump --rotate90 INFILE OUTFILE
pnmdump --scaleNn SCALE INFILE OUTFILE
pnmdump --scaleBl SCALE INFILE OUTFILE
"""


class Command(NamedTuple):
    """A conversion command resolved from the command line."""

    name: str
    spec: ConversionSpec
    input_path: str
    output_path: str


# flag dest -> (input encoding, output encoding, transform)
_CONVERSIONS = {
    "P2toP5": (Encoding.P2, Encoding.P5, Transform.IDENTITY),
    "P5toP2": (Encoding.P5, Encoding.P2, Transform.IDENTITY),
    "reflect": (None, None, Transform.REFLECT),
    "rotate90": (None, None, Transform.ROTATE90),
    "scaleNn": (None, None, Transform.SCALE_NEAREST),
    "scaleBl": (None, None, Transform.SCALE_BILINEAR),
}


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on bad arguments."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: bad arguments: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="pnmdump",
        description="Convert and transform grayscale PGM (P2/P5) images",
    )
    commands = parser.add_mutually_exclusive_group(required=True)
    commands.add_argument(
        "--version",
        action="store_true",
        help="Print the version and exit",
    )
    commands.add_argument(
        "--usage",
        action="store_true",
        help="Print the command summary and exit",
    )
    commands.add_argument(
        "--hexdump",
        nargs="?",
        const="-",
        metavar="FILE",
        help="Dump FILE (or stdin) as hex and ASCII",
    )
    commands.add_argument(
        "--P2toP5",
        nargs=2,
        metavar=("INFILE", "OUTFILE"),
        help="Convert a textual P2 file to binary P5",
    )
    commands.add_argument(
        "--P5toP2",
        nargs=2,
        metavar=("INFILE", "OUTFILE"),
        help="Convert a binary P5 file to textual P2",
    )
    commands.add_argument(
        "--rotate",
        "--reflect",
        dest="reflect",
        nargs=2,
        metavar=("INFILE", "OUTFILE"),
        help="Reflect the image in its main diagonal",
    )
    commands.add_argument(
        "--rotate90",
        nargs=2,
        metavar=("INFILE", "OUTFILE"),
        help="Rotate the image 90 degrees clockwise",
    )
    commands.add_argument(
        "--scaleNn",
        nargs=3,
        metavar=("SCALE", "INFILE", "OUTFILE"),
        help="Scale with nearest-neighbour sampling (SCALE: D, D/D, DxD, D/DxD/D, m-prefix shrinks)",
    )
    commands.add_argument(
        "--scaleBl",
        nargs=3,
        metavar=("SCALE", "INFILE", "OUTFILE"),
        help="Scale bilinearly when enlarging, box filter when shrinking",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a pnmdump.v1 YAML config",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override the configured log level",
    )
    return parser


def resolve_command(args: argparse.Namespace) -> Optional[Command]:
    """Map parsed arguments onto a conversion command (None for non-conversions)."""
    for name, (input_encoding, output_encoding, transform) in _CONVERSIONS.items():
        values = getattr(args, name, None)
        if values is None:
            continue
        scale = None
        if transform.is_scale:
            scale, *values = values
        input_path, output_path = values
        spec = ConversionSpec(input_encoding, output_encoding, transform, scale)
        return Command(name, spec, input_path, output_path)
    return None


def _run_hexdump(target: str) -> int:
    if target == "-":
        hexdump(sys.stdin.buffer, sys.stdout)
        return 0
    try:
        with open(target, "rb") as stream:
            hexdump(stream, sys.stdout)
    except OSError:
        logger.error('No such file: "%s"', target)
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0
    if args.usage:
        sys.stdout.write(USAGE)
        return 0

    setup_logging(args.log_level or "WARNING")
    try:
        config = validators.load_tool_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return 1

    configure_from(config.logging, level=args.log_level)
    logger.debug("Config: %s", validators.config_summary(config))

    command = resolve_command(args)
    if command is None:
        with log_context(command="hexdump"):
            return _run_hexdump(args.hexdump)

    with log_context(command=command.name):
        try:
            result = convert_files(command.input_path, command.output_path, command.spec, config)
        except PnmError as e:
            logger.error("%s", e)
            return 1
        logger.info(
            "Wrote %s (%dx%d %s)",
            command.output_path,
            result.output_header.width,
            result.output_header.height,
            result.output_header.encoding.value,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
