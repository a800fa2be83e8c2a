"""Streaming XML to bracket notation transducer.

The transducer folds a structural event stream into bracket notation, one
output line per child element of the document root::

    <root><a x="1">t<b/></a></root>   ->   {a{x{1}}{t}{b}}

Nothing but a depth counter and the current element's attributes is held in
memory; every event is written to the sink as soon as it arrives.
"""

import io
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, TextIO, Tuple, Union

from xml_bracket.shared.config import DEFAULT_OUTPUT_EXTENSION, ConverterConfig
from xml_bracket.shared.errors import XMLParseError
from xml_bracket.shared.logging import get_logger, new_run_id
from xml_bracket.shared.result import ConversionResult, PerformanceMetrics
from xml_bracket.tokenization.events import EventType, XMLEvent, XMLEventReader

from .escaping import escape
from .progress import ProgressCallback, ProgressReporter

PathLike = Union[str, Path]


@dataclass
class TransducerState:
    """Mutable state of a single conversion run.

    Attributes:
        sink: Text stream receiving bracket notation
        depth: Current nesting level; 1 is inside the root element
        records: Completed top-level records
        events: Events consumed so far
        max_depth: Deepest nesting level seen
    """

    sink: TextIO
    depth: int = 0
    records: int = 0
    events: int = 0
    max_depth: int = 0


def _raw_key(attribute: Tuple[str, str]) -> bytes:
    return attribute[0].encode("utf-8")


class BracketTransducer:
    """Convert structural XML events into bracket notation.

    Example:
        ``<root><a>1</a><b>2</b></root>`` becomes the two lines ``{a{1}}`` and
        ``{b{2}}``.
    """

    def __init__(
        self,
        config: Optional[ConverterConfig] = None,
        progress_callback: Optional[ProgressCallback] = None,
        run_id: Optional[str] = None,
    ) -> None:
        """Initialize the transducer.

        Args:
            config: Conversion settings; defaults to ``ConverterConfig()``
            progress_callback: Called with the record count at every
                ``config.progress_interval`` records; defaults to a
                :class:`ProgressReporter` printing to stderr
            run_id: Identifier attached to log records
        """
        self.config = config or ConverterConfig()
        self.run_id = run_id or new_run_id()
        self.logger = get_logger(__name__, self.run_id, "transducer")
        if progress_callback is None:
            progress_callback = ProgressReporter(
                logger=get_logger(__name__, self.run_id, "progress")
            )
        self.progress_callback = progress_callback

    def run(self, events: Iterable[XMLEvent], sink: TextIO) -> ConversionResult:
        """Consume ``events`` and write bracket notation to ``sink``.

        The sink is flushed at end of stream but not closed; its owner closes
        it.

        Raises:
            XMLParseError: The event stream is not properly nested
        """
        state = TransducerState(sink=sink)

        for event in events:
            state.events += 1
            if event.type is EventType.START:
                self._on_start(state, event)
            elif event.type is EventType.TEXT:
                self._on_text(state, event)
            elif event.type is EventType.END:
                self._on_end(state, event)
            elif event.type is EventType.END_OF_STREAM:
                break

        if state.depth != 0:
            raise XMLParseError(
                f"{state.depth} element(s) still open at end of stream",
                offset=_offset(event) if state.events else 0,
            )
        sink.flush()

        self.logger.debug(
            "Event stream consumed",
            extra={"records": state.records, "events": state.events},
        )
        return ConversionResult(
            records=state.records,
            events=state.events,
            max_depth=state.max_depth,
        )

    def convert_string(self, xml: Union[str, bytes]) -> str:
        """Convert an in-memory document and return the bracket notation."""
        reader = XMLEventReader(self.config.chunk_size, self.config.trim_text)
        sink = io.StringIO()
        self.run(reader.iter_string(xml), sink)
        return sink.getvalue()

    def _on_start(self, state: TransducerState, event: XMLEvent) -> None:
        state.depth += 1
        if state.depth > state.max_depth:
            state.max_depth = state.depth
        if state.depth <= 1:
            return

        write = state.sink.write
        write("{" + escape(event.name))
        for key, value in sorted(event.attributes, key=_raw_key):
            write("{" + escape(key) + "{" + escape(value) + "}}")

    def _on_text(self, state: TransducerState, event: XMLEvent) -> None:
        if state.depth > 1:
            state.sink.write("{" + escape(event.text) + "}")

    def _on_end(self, state: TransducerState, event: XMLEvent) -> None:
        if state.depth <= 0:
            raise XMLParseError(
                f"end of element '{event.name}' without matching start",
                offset=_offset(event),
            )
        if state.depth > 1:
            state.sink.write("}")
        state.depth -= 1

        if state.depth == 1:
            state.sink.write("\n")
            state.records += 1
            if state.records % self.config.progress_interval == 0:
                self.progress_callback(state.records)


def _offset(event: XMLEvent) -> int:
    return event.position.offset if event.position else 0


def output_path_for(
    input_path: PathLike,
    extension: str = DEFAULT_OUTPUT_EXTENSION,
    output_dir: Optional[PathLike] = None,
) -> Path:
    """Name of the bracket file for ``input_path``.

    The input's base name gets its last extension replaced by ``extension``.
    The result is relative to the working directory unless ``output_dir`` is
    given.
    """
    name = Path(Path(input_path).name).with_suffix("." + extension)
    if output_dir is not None:
        return Path(output_dir) / name
    return name


def convert_file(
    input_path: PathLike,
    output_dir: Optional[PathLike] = None,
    config: Optional[ConverterConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
    run_id: Optional[str] = None,
) -> ConversionResult:
    """Convert the XML file at ``input_path`` to a bracket notation file.

    The output file is created (or truncated) in the working directory,
    see :func:`output_path_for`. On failure the output file may be left
    incomplete.

    Args:
        input_path: XML document to read
        output_dir: Directory for the output file; defaults to the working directory
        config: Conversion settings
        progress_callback: Receives the cumulative record count at milestones
        run_id: Identifier attached to log records

    Returns:
        ConversionResult with record counts and performance metrics

    Raises:
        XMLParseError: The input is not well-formed XML
        XMLUnescapeError: Text contains an entity that cannot be decoded
        OSError: A file could not be opened, read or written
    """
    config = config or ConverterConfig()
    run_id = run_id or new_run_id()
    logger = get_logger(__name__, run_id, "convert")

    input_path = Path(input_path)
    output_path = output_path_for(input_path, config.output_extension, output_dir)
    reader = XMLEventReader(config.chunk_size, config.trim_text)
    transducer = BracketTransducer(config, progress_callback, run_id)

    logger.info(
        "Converting XML to bracket notation",
        extra={"input": str(input_path), "output": str(output_path)},
    )
    metrics = PerformanceMetrics()
    metrics.sample_memory()
    start_time = time.time()

    with open(input_path, "rb") as source, open(
        output_path,
        "w",
        encoding=config.output_encoding,
        newline="\n",
        buffering=config.buffer_size,
    ) as sink:
        result = transducer.run(reader.iter_events(source), sink)

    metrics.processing_time_ms = (time.time() - start_time) * 1000
    metrics.bytes_read = reader.bytes_read
    metrics.bytes_written = output_path.stat().st_size
    metrics.sample_memory()

    result.input_path = input_path
    result.output_path = output_path
    result.performance = metrics

    logger.info(
        "Conversion finished",
        extra={
            "records": result.records,
            "processing_time_ms": round(metrics.processing_time_ms, 1),
            "peak_memory_bytes": metrics.peak_memory_bytes,
        },
    )
    return result
