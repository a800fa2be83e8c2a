"""XML to bracket notation conversion.

Key Components:
    BracketTransducer: Folds a structural event stream into bracket notation
    convert_file: Converts an XML file into a ``.bracket`` file
    escape: Reserved character escaping applied to every name, key, value and text
    ProgressReporter: Default progress notification sink
"""

from .escaping import ESCAPE_TABLE, escape, unescape
from .progress import ProgressCallback, ProgressReporter
from .transducer import (
    BracketTransducer,
    TransducerState,
    convert_file,
    output_path_for,
)

__all__ = [
    "ESCAPE_TABLE",
    "escape",
    "unescape",
    "ProgressCallback",
    "ProgressReporter",
    "BracketTransducer",
    "TransducerState",
    "convert_file",
    "output_path_for",
]
