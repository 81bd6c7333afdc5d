"""Shared utilities for htmlpath.

Configuration objects, diagnostic/statistics types and the logging helpers
used by every layer.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    FetchConfig,
    GlobalConfig,
    ParserConfig,
    TokenizerConfig,
)
from .errors import HTMLPathError
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    BuildStatistics,
    DiagnosticEntry,
    DiagnosticSeverity,
)

__all__ = [
    "BuildStatistics",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "ConfigError",
    "HTMLPathError",
    "ConfigValidationError",
    "FetchConfig",
    "GlobalConfig",
    "ParserConfig",
    "TokenizerConfig",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
]
