"""Exception hierarchy for XML to bracket notation conversion.

Every failure in this package is fatal for the run: nothing here is retried or
recovered, the exception simply carries enough context to tell the user where
the input went wrong.
"""

from typing import List, Optional


class BracketError(Exception):
    """Base exception for all conversion and comparison failures."""


class ConfigError(BracketError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


class XMLParseError(BracketError):
    """The tokenizer rejected the input as malformed XML.

    Attributes:
        offset: Byte offset into the input where the tokenizer stopped
        line: 1-based line number of the failure
        column: 0-based column of the failure
        cause: Tokenizer message describing the failure
    """

    def __init__(self, cause: str, offset: int, line: int = 0, column: int = 0):
        super().__init__(f"Error at position {offset}: {cause}")
        self.cause = cause
        self.offset = offset
        self.line = line
        self.column = column


class XMLUnescapeError(XMLParseError):
    """Character data holds an entity reference that cannot be decoded."""
