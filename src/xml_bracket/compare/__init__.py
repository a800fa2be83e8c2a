"""Comparison of bracket notation output files."""

from .comparator import compare_files, compare_lines, format_mismatch, iter_lines

__all__ = ["compare_files", "compare_lines", "format_mismatch", "iter_lines"]
