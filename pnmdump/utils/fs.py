"""Filesystem helpers: stream lifecycle and YAML loading.

Provides:
    - open_input / open_output: binary streams for conversion (read; create/truncate)
    - load_yaml: safe YAML loading for config files
    - ensure_dir: directory creation with exist_ok semantics

Stream contract:
    The converter opens the input first; if that fails nothing else happens.
    The output is opened before any conversion work, so a conversion that
    fails later leaves an empty output file behind.

Usage:
    from pnmdump.utils import fs
    with fs.open_input("in.pgm") as src:
        data = src.read()
    cfg = fs.load_yaml("configs/pnmdump_v1.yaml")
"""

from pathlib import Path
from typing import Any, BinaryIO, Dict, Union

import yaml


def ensure_dir(directory: Union[str, Path]) -> Path:
    """Create ``directory`` and its parents when missing; return it as a Path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def open_input(path: Union[str, Path]) -> BinaryIO:
    """Open a file for binary reading.

    Raises
    ------
    OSError
        If the file cannot be opened.
    """
    return open(Path(path), "rb")


def open_output(path: Union[str, Path]) -> BinaryIO:
    """Open a file for binary writing, creating or truncating it.

    Raises
    ------
    OSError
        If the file cannot be created.
    """
    return open(Path(path), "wb")


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """Parse a YAML mapping with ``yaml.safe_load``.

    Parameters
    ----------
    path : Union[str, Path]
        Config file

    Returns
    -------
    Dict[str, Any]
        Top-level mapping; an empty document yields ``{}``

    Raises
    ------
    FileNotFoundError
        Missing file
    yaml.YAMLError
        Malformed YAML, or a top-level value that is not a mapping
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with path.open("r", encoding="utf-8") as stream:
        try:
            document = yaml.safe_load(stream)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Cannot parse {path}: {e}") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise yaml.YAMLError(
            f"{path}: expected a mapping at top level, got {type(document).__name__}"
        )
    return document
