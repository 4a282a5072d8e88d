"""Shared fixtures for the pnmdump test suite."""

from pathlib import Path

import pytest

from pnmdump.utils import logging_config


def make_pgm(tag: str, width: int, height: int, max_value: int, payload: bytes,
             comment: bytes = b"# test") -> bytes:
    """Assemble a PGM file from its parts."""
    header = f"{tag}\n".encode() + comment + f"\n{width} {height}\n{max_value}\n".encode()
    return header + payload


@pytest.fixture(autouse=True)
def _clean_logging():
    """Drop handlers and context left behind by setup_logging()."""
    yield
    logging_config.reset_logging()
    logging_config.clear_context()


@pytest.fixture(scope="session")
def project_root():
    """Project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def p2_3x2():
    """3x2 textual image [[0, 128, 255], [64, 32, 16]]."""
    return make_pgm("P2", 3, 2, 255, b"0 128 255\n64 32 16\n")


@pytest.fixture
def p5_3x2():
    """Binary counterpart of ``p2_3x2``."""
    return make_pgm("P5", 3, 2, 255, bytes([0, 128, 255, 64, 32, 16]))
