"""Configuration for XML to bracket notation conversion.

This module provides an immutable configuration object shared by the
transducer, the comparator and the command-line interface, with validation,
JSON round-tripping and a couple of presets.
"""

import codecs
import difflib
import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import ConfigError, ConfigValidationError

DEFAULT_OUTPUT_EXTENSION = "bracket"
DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_BUFFER_SIZE = 64 * 1024
DEFAULT_PROGRESS_INTERVAL = 100_000

# Buffer size thresholds for the large document preset
LARGE_CHUNK_SIZE = 1024 * 1024
LARGE_BUFFER_SIZE = 1024 * 1024


@dataclass(frozen=True)
class ConverterConfig:
    """Configuration for conversion and comparison runs.

    Thread-safe due to frozen dataclass implementation; use ``override`` to
    derive a modified copy.

    Attributes:
        output_extension: Extension (without the dot) given to converted files
        chunk_size: Bytes read from the XML input per tokenizer feed
        buffer_size: Size of the buffered writer used for the output file
        progress_interval: Records between two progress notifications
        output_encoding: Encoding of the bracket notation output
        compare_encoding: Encoding used to decode files in compare mode
        trim_text: Strip surrounding whitespace from text and drop blank runs
    """

    output_extension: str = DEFAULT_OUTPUT_EXTENSION
    chunk_size: int = DEFAULT_CHUNK_SIZE
    buffer_size: int = DEFAULT_BUFFER_SIZE
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    output_encoding: str = "utf-8"
    compare_encoding: str = "utf-8"
    trim_text: bool = True

    # Metadata
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.output_extension:
            raise ConfigValidationError(
                "output_extension must not be empty", field_name="output_extension"
            )
        if self.output_extension.startswith(".") or any(
            sep in self.output_extension for sep in ("/", "\\")
        ):
            raise ConfigValidationError(
                "output_extension must be a bare extension such as 'bracket'",
                field_name="output_extension",
                suggestions=[self.output_extension.lstrip(".").replace("/", "")],
            )
        for field_name in ("chunk_size", "buffer_size", "progress_interval"):
            if getattr(self, field_name) <= 0:
                raise ConfigValidationError(
                    f"{field_name} must be > 0", field_name=field_name
                )
        for field_name in ("output_encoding", "compare_encoding"):
            try:
                codecs.lookup(getattr(self, field_name))
            except LookupError as e:
                raise ConfigValidationError(
                    f"{field_name} names an unknown encoding: {getattr(self, field_name)}",
                    field_name=field_name,
                    suggestions=["utf-8"],
                ) from e

    def override(self, **kwargs: Any) -> "ConverterConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = ConverterConfig()
            >>> config.override(progress_interval=10).progress_interval
            10
        """
        _check_field_names(kwargs)
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConverterConfig":
        """Create configuration from dictionary.

        Raises ConfigValidationError for keys that are not configuration fields.
        """
        _check_field_names(data)
        return cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> "ConverterConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Configuration JSON must be an object")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ConverterConfig":
        """Load configuration from a JSON file."""
        config_path = Path(config_path)
        try:
            text = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Could not read config file {config_path}: {e}") from e
        return cls.from_json(text)

    # Preset factory methods
    @classmethod
    def default(cls) -> "ConverterConfig":
        """Create the default configuration."""
        return cls(name="default")

    @classmethod
    def large_documents(cls) -> "ConverterConfig":
        """Create configuration preset for multi-gigabyte inputs."""
        return cls(
            chunk_size=LARGE_CHUNK_SIZE,
            buffer_size=LARGE_BUFFER_SIZE,
            name="large_documents",
            description="Larger read and write buffers for very large XML dumps",
        )


def _check_field_names(data: Dict[str, Any]) -> None:
    valid = [f.name for f in fields(ConverterConfig)]
    for key in data:
        if key not in valid:
            raise ConfigValidationError(
                f"Unknown configuration field: {key}",
                field_name=key,
                suggestions=difflib.get_close_matches(key, valid),
            )
