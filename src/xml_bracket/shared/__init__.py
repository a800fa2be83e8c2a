"""Shared utilities for bracket notation conversion.

This module provides the configuration object, result types, exception
hierarchy and logging helpers used across all components.
"""

from .errors import (
    BracketError,
    ConfigError,
    ConfigValidationError,
    XMLParseError,
    XMLUnescapeError,
)
from .result import (
    ComparisonResult,
    ConversionResult,
    LineMismatch,
    PerformanceMetrics,
)
from .config import ConverterConfig
from .logging import (
    RunLogger,
    configure_logging,
    get_logger,
    new_run_id,
)

__all__ = [
    "BracketError",
    "ConfigError",
    "ConfigValidationError",
    "XMLParseError",
    "XMLUnescapeError",
    "ComparisonResult",
    "ConversionResult",
    "LineMismatch",
    "PerformanceMetrics",
    "ConverterConfig",
    "RunLogger",
    "configure_logging",
    "get_logger",
    "new_run_id",
]
