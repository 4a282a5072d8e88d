"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Config validation (validators)
    - File streams & YAML loading (fs)
    - Logging setup and context fields (logging_config)

No module in utils/ may import from upper layers (raster, cli).

Convenience imports:
    from pnmdump.utils import fs, validators
    from pnmdump.utils.logging_config import configure_from, log_context
"""

from . import fs
from . import logging_config
from . import validators

from .logging_config import configure_from, get_logger, log_context, setup_logging

__all__ = [
    # Modules
    'fs',
    'logging_config',
    'validators',
    # Direct exports
    'configure_from',
    'get_logger',
    'log_context',
    'setup_logging',
]
