"""Tests for result objects and performance metrics."""

from unittest.mock import patch

from xml_bracket.shared.result import (
    ComparisonResult,
    ConversionResult,
    LineMismatch,
    PerformanceMetrics,
    current_memory_bytes,
)


class TestPerformanceMetrics:
    """Test performance metric calculations."""

    def test_throughput(self):
        """Test throughput in MB/s."""
        metrics = PerformanceMetrics(processing_time_ms=500.0, bytes_read=1024 * 1024)
        assert metrics.throughput_mb_per_s == 2.0

    def test_throughput_without_time(self):
        """Test that zero duration gives zero throughput."""
        assert PerformanceMetrics(bytes_read=100).throughput_mb_per_s == 0.0

    @patch("xml_bracket.shared.result.psutil")
    def test_sample_memory_keeps_peak(self, mock_psutil):
        """Test that sampling keeps the highest value seen."""
        memory_info = mock_psutil.Process.return_value.memory_info
        memory_info.return_value.rss = 2048
        metrics = PerformanceMetrics()

        assert metrics.sample_memory() == 2048
        memory_info.return_value.rss = 1024
        assert metrics.sample_memory() == 1024

        assert metrics.peak_memory_bytes == 2048

    def test_current_memory_is_positive(self):
        """Test reading the real process memory."""
        assert current_memory_bytes() > 0


class TestResults:
    """Test result containers."""

    def test_conversion_result_defaults(self):
        """Test default conversion result values."""
        result = ConversionResult()
        assert result.records == 0
        assert result.output_path is None
        assert isinstance(result.performance, PerformanceMetrics)

    def test_comparison_identical(self):
        """Test the identical flag."""
        assert ComparisonResult(lines_compared=3).identical
        assert not ComparisonResult(1, LineMismatch(1, "a", "b")).identical
