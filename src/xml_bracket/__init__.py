"""XML Bracket Notation converter.

Converts XML documents into bracket notation, a flattened one-record-per-line
serialization, in a single streaming pass, and compares output files line by
line.

Progressive API Disclosure:
- Level 1: Simple functions - convert_file(), convert_string(), compare_files()
- Level 2: Configured transducer - BracketTransducer with ConverterConfig
- Level 3: Event stream - XMLEventReader feeding BracketTransducer.run()
"""

__version__ = "0.1.0"
__author__ = "XML Bracket Notation Team"

from typing import Union

# Progressive API disclosure - Level 2 and 3: transducer and event stream
from .bracket import BracketTransducer, convert_file, escape, output_path_for
from .compare import compare_files, compare_lines
from .tokenization import EventType, XMLEvent, XMLEventReader

# Configuration, errors and result objects
from .shared.config import ConverterConfig
from .shared.errors import (
    BracketError,
    ConfigError,
    ConfigValidationError,
    XMLParseError,
    XMLUnescapeError,
)
from .shared.result import ComparisonResult, ConversionResult, LineMismatch


def convert_string(xml: Union[str, bytes]) -> str:
    """Convert an in-memory XML document and return its bracket notation."""
    return BracketTransducer(progress_callback=lambda records: None).convert_string(xml)


__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions (progressive disclosure entry point)
    "convert_file",
    "convert_string",
    "compare_files",
    "compare_lines",
    "escape",
    "output_path_for",

    # Level 2 and 3: Transducer and event stream
    "BracketTransducer",
    "EventType",
    "XMLEvent",
    "XMLEventReader",

    # Configuration and errors
    "ConverterConfig",
    "BracketError",
    "ConfigError",
    "ConfigValidationError",
    "XMLParseError",
    "XMLUnescapeError",

    # Result objects
    "ComparisonResult",
    "ConversionResult",
    "LineMismatch",
]
