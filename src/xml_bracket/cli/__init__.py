"""Command-line interface module for the XML bracket notation converter.

This module provides the ``xml-bracket`` tool with its convert and compare
modes.
"""

from .main import main

__all__ = ["main"]
