"""Result objects for conversion and comparison runs.

This module defines the values handed back to callers once a run completes,
along with the performance figures collected while it ran.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import psutil


def current_memory_bytes() -> int:
    """Resident set size of the current process."""
    return psutil.Process().memory_info().rss


@dataclass
class PerformanceMetrics:
    """Performance metrics for a single run."""

    processing_time_ms: float = 0.0
    bytes_read: int = 0
    bytes_written: int = 0
    peak_memory_bytes: int = 0

    @property
    def throughput_mb_per_s(self) -> float:
        """Input throughput in MB/s."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.bytes_read / (1024 * 1024)) / (self.processing_time_ms / 1000.0)

    def sample_memory(self) -> int:
        """Record the current resident memory and keep the peak."""
        rss = current_memory_bytes()
        if rss > self.peak_memory_bytes:
            self.peak_memory_bytes = rss
        return rss


@dataclass
class ConversionResult:
    """Outcome of converting one XML document to bracket notation.

    Attributes:
        input_path: XML file that was read, or None for in-memory input
        output_path: Bracket file that was written, or None for in-memory output
        records: Number of top-level records written (one per output line)
        events: Number of structural events consumed
        max_depth: Deepest nesting level reached, the root being depth 1
        performance: Timing and memory figures
    """

    input_path: Optional[Path] = None
    output_path: Optional[Path] = None
    records: int = 0
    events: int = 0
    max_depth: int = 0
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)


@dataclass(frozen=True)
class LineMismatch:
    """First pair of lines that differ between two files."""

    line_number: int
    left: str
    right: str


@dataclass
class ComparisonResult:
    """Outcome of comparing two files line by line.

    ``lines_compared`` counts the common prefix that was examined, including
    the mismatching line when there is one.
    """

    lines_compared: int = 0
    mismatch: Optional[LineMismatch] = None

    @property
    def identical(self) -> bool:
        """True when no mismatch was found within the common prefix."""
        return self.mismatch is None
