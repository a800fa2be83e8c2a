"""Line-by-line comparison of two bracket notation files.

The comparison stops at the first differing line. Only the common prefix is
examined: if one file is longer, its extra lines are not looked at.
"""

from pathlib import Path
from typing import Iterable, Iterator, Optional, TextIO, Union

from xml_bracket.shared.config import ConverterConfig
from xml_bracket.shared.logging import get_logger, new_run_id
from xml_bracket.shared.result import ComparisonResult, LineMismatch

PathLike = Union[str, Path]


def compare_lines(left: Iterable[str], right: Iterable[str]) -> ComparisonResult:
    """Compare two line sequences in lock-step.

    Lines are pulled lazily and no line past the first mismatch is requested
    from either side.
    """
    result = ComparisonResult()
    for left_line, right_line in zip(left, right):
        result.lines_compared += 1
        if left_line != right_line:
            result.mismatch = LineMismatch(result.lines_compared, left_line, right_line)
            break
    return result


def iter_lines(stream: TextIO) -> Iterator[str]:
    """Yield lines without their ``\\n`` or ``\\r\\n`` terminator."""
    for line in stream:
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        yield line


def compare_files(
    path_a: PathLike,
    path_b: PathLike,
    config: Optional[ConverterConfig] = None,
    run_id: Optional[str] = None,
) -> ComparisonResult:
    """Compare two text files and report the first differing line.

    Raises:
        OSError: Either file cannot be opened or read
        UnicodeDecodeError: Either file is not valid in ``config.compare_encoding``
    """
    config = config or ConverterConfig()
    logger = get_logger(__name__, run_id or new_run_id(), "compare")

    # Lines end at "\n" only; a lone "\r" stays part of the line
    with open(path_a, encoding=config.compare_encoding, newline="\n") as file_a, \
            open(path_b, encoding=config.compare_encoding, newline="\n") as file_b:
        result = compare_lines(iter_lines(file_a), iter_lines(file_b))

    logger.info(
        "Comparison finished",
        extra={
            "left": str(path_a),
            "right": str(path_b),
            "lines_compared": result.lines_compared,
            "identical": result.identical,
        },
    )
    return result


def format_mismatch(mismatch: LineMismatch) -> str:
    """Human-readable report for a mismatch."""
    return f"{mismatch.left} != {mismatch.right} on line {mismatch.line_number}"
