"""YAML schema validation and config loading.

Provides centralized validation for the tool configuration using pydantic:
    - Tool schema (pnmdump.v1): size limits, output comment, logging settings

Every entrypoint loads its config through these validators for fail-fast
error detection with actionable messages (offending keys, expected ranges).

Units:
    - Sizes: pixels

Usage:
    from pnmdump.utils import validators

    cfg = validators.load_tool_config("configs/pnmdump_v1.yaml")
    cfg = validators.load_tool_config()  # built-in defaults
"""

from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


# ============================================================================
# TOOL SCHEMA V1
# ============================================================================

class LimitsConfig(BaseModel):
    """Raster dimension limits (pixels)."""
    max_input_width: int = Field(512, ge=1, le=4096, description="Largest accepted input width")
    max_input_height: int = Field(512, ge=1, le=4096, description="Largest accepted input height")
    max_output_width: int = Field(1920, ge=1, le=16384, description="Largest output width")
    max_output_height: int = Field(1080, ge=1, le=16384, description="Largest output height")

    model_config = ConfigDict(extra='forbid')


class OutputConfig(BaseModel):
    """Output file options."""
    comment: str = Field("# Generated by pnmdump", description="Line 2 of every written file")

    model_config = ConfigDict(extra='forbid')

    @field_validator('comment')
    @classmethod
    def validate_comment(cls, v: str) -> str:
        if not v.startswith('#'):
            raise ValueError(f"Comment must start with '#', got: {v!r}")
        if '\n' in v or '\r' in v:
            raise ValueError("Comment must be a single line")
        if not v.isascii():
            raise ValueError("Comment must be ASCII")
        return v


class LoggingConfig(BaseModel):
    """Logging options passed to setup_logging()."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file: Optional[str] = Field(None, description="Log file path; None disables file logging")
    json_format: bool = Field(False, alias="json", description="JSON lines instead of human format")
    color: bool = True
    max_bytes: Optional[int] = Field(None, ge=1024, description="Rotate the log file at this size")
    backup_count: int = Field(3, ge=0, le=100, description="Rotated log files to keep")

    model_config = ConfigDict(populate_by_name=True, extra='forbid')

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class PnmdumpConfigV1(BaseModel):
    """Tool configuration (pnmdump.v1 schema)."""
    schema_version: str = Field("pnmdump.v1", alias="schema", description="Schema version")
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(populate_by_name=True, extra='forbid')

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "pnmdump.v1":
            raise ValueError(f"Expected schema 'pnmdump.v1', got '{v}'")
        return v


# ============================================================================
# PUBLIC API
# ============================================================================

def load_tool_config(path: Optional[Union[str, Path]] = None) -> PnmdumpConfigV1:
    """Load and validate the tool config from YAML.

    Parameters
    ----------
    path : Union[str, Path], optional
        Path to a pnmdump.v1 YAML file; None returns the built-in defaults

    Returns
    -------
    PnmdumpConfigV1
        Validated configuration

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If the file is not a YAML mapping or fails validation (message names
        the file and the offending keys)
    """
    from . import fs

    if path is None:
        return PnmdumpConfigV1()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Tool config not found: {path}")

    try:
        data = fs.load_yaml(path)
    except yaml.YAMLError as e:
        raise ValueError(f"Tool config is not valid YAML: {e}") from e

    try:
        return PnmdumpConfigV1(**data)
    except ValidationError as e:
        raise ValueError(f"Tool config validation failed at {path}: {e}") from e


def config_summary(cfg: PnmdumpConfigV1) -> Dict[str, Any]:
    """Flatten a config into dotted keys for debug logging.

    Parameters
    ----------
    cfg : PnmdumpConfigV1
        Validated configuration

    Returns
    -------
    Dict[str, Any]
        e.g. {"limits.max_input_width": 512, "output.comment": "# ..."}
    """
    flat: Dict[str, Any] = {}

    def _walk(prefix: str, obj: Dict[str, Any]) -> None:
        for key, value in obj.items():
            name = f"{prefix}.{key}" if prefix else key
            if isinstance(value, dict):
                _walk(name, value)
            else:
                flat[name] = value

    _walk("", cfg.model_dump())
    return flat
