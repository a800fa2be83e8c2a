"""Structural event stream over a strict XML tokenizer.

This module turns an XML byte stream into a flat, lazy sequence of
Start / Text / End / EndOfStream events. The input is read and tokenized in
fixed-size chunks, and the events produced by one chunk are handed out before
the next chunk is read, so memory use does not grow with document size.

Tokenization is delegated to the expat parser from the standard library with
namespace processing disabled: element and attribute names are reported
exactly as written, prefixes included. Text is entity-decoded; attribute
values are passed on as written in the input, references and line breaks
included. Any well-formedness violation is raised as :class:`XMLParseError`;
there is no recovery.
"""

import io
import logging
import re
from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import BinaryIO, Deque, Iterator, List, Optional, Tuple, Union
from xml.parsers import expat

from xml_bracket.shared.config import DEFAULT_CHUNK_SIZE
from xml_bracket.shared.errors import XMLParseError, XMLUnescapeError

# Whitespace as defined by the XML grammar (S production)
XML_WHITESPACE = " \t\r\n"

_UNDEFINED_ENTITY_CODE = expat.errors.codes[expat.errors.XML_ERROR_UNDEFINED_ENTITY]

logger = logging.getLogger(__name__)

Attribute = Tuple[str, str]

# Decoded character data and whether it came from a reference
TextPart = Tuple[str, bool]

# Start tags reach the handlers already checked for well-formedness
_RAW_START_TAG = re.compile(
    rb"<[^\s/>]+(?P<attributes>(?:\s+[^\s=]+\s*=\s*(?:\"[^\"]*\"|'[^']*'))*)\s*/?>"
)
_RAW_ATTRIBUTE = re.compile(rb"([^\s=]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")


class EventType(Enum):
    """Structural event types produced by the reader."""

    START = auto()          # Element opened (self-closing tags included)
    TEXT = auto()           # Decoded character data between two markup boundaries
    END = auto()            # Element closed
    END_OF_STREAM = auto()  # Input exhausted


@dataclass(frozen=True)
class EventPosition:
    """Position of an event in the input."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 0:
            raise ValueError("Column number must be >= 0")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")


@dataclass(frozen=True)
class XMLEvent:
    """Single structural event.

    ``name`` is set for START and END, ``attributes`` for START (in document
    order), ``text`` for TEXT.
    """

    type: EventType
    name: str = ""
    attributes: Tuple[Attribute, ...] = ()
    text: str = ""
    position: Optional[EventPosition] = None

    @classmethod
    def start(cls, name: str, attributes: Tuple[Attribute, ...] = (),
              position: Optional[EventPosition] = None) -> "XMLEvent":
        return cls(EventType.START, name=name, attributes=attributes, position=position)

    @classmethod
    def end(cls, name: str, position: Optional[EventPosition] = None) -> "XMLEvent":
        return cls(EventType.END, name=name, position=position)

    @classmethod
    def text_node(cls, text: str, position: Optional[EventPosition] = None) -> "XMLEvent":
        return cls(EventType.TEXT, text=text, position=position)

    @classmethod
    def end_of_stream(cls, position: Optional[EventPosition] = None) -> "XMLEvent":
        return cls(EventType.END_OF_STREAM, position=position)


class _EventCollector:
    """Expat callbacks for one run, buffering events until they are drained.

    The raw bytes of the two most recently fed chunks are kept so that start
    tags and text can be looked up in their undecoded form.
    """

    def __init__(self, parser: "expat.XMLParserType", trim_text: bool) -> None:
        self.parser = parser
        self.trim_text = trim_text
        self.pending: Deque[XMLEvent] = deque()
        self.text_parts: List[TextPart] = []
        self.text_position: Optional[EventPosition] = None
        self.in_cdata = False
        self.encoding = "utf-8"
        self.window = b""
        self.window_start = 0
        self.last_chunk = b""

    def install(self) -> None:
        parser = self.parser
        parser.ordered_attributes = True
        # Attribute defaults declared in a DTD are not part of the input
        parser.specified_attributes = True
        parser.XmlDeclHandler = self.on_xml_decl
        parser.StartElementHandler = self.on_start
        parser.EndElementHandler = self.on_end
        parser.CharacterDataHandler = self.on_text
        parser.SkippedEntityHandler = self.on_skipped_entity
        # Skipped constructs still separate text runs
        parser.CommentHandler = self.on_boundary
        parser.ProcessingInstructionHandler = self.on_boundary
        parser.StartCdataSectionHandler = self.on_cdata_start
        parser.EndCdataSectionHandler = self.on_cdata_end

    def add_chunk(self, chunk: bytes, chunk_start: int) -> None:
        """Record a chunk about to be fed; ``chunk_start`` is its stream offset."""
        self.window = self.last_chunk + chunk
        self.window_start = chunk_start - len(self.last_chunk)
        self.last_chunk = chunk

    def position(self) -> EventPosition:
        return EventPosition(
            line=self.parser.CurrentLineNumber,
            column=self.parser.CurrentColumnNumber,
            offset=max(self.parser.CurrentByteIndex, 0),
        )

    def raw_input(self) -> Tuple[bytes, int]:
        """Undecoded input at the current event, as a buffer and an index into it."""
        index = self.parser.CurrentByteIndex - self.window_start
        if 0 <= index < len(self.window):
            return self.window, index
        # Tokens longer than the window are still held whole by expat
        return self.parser.GetInputContext() or b"", 0

    def raw_attributes(self, decoded: Tuple[Attribute, ...]) -> Tuple[Attribute, ...]:
        """Attributes of the current start tag with their values as written."""
        data, index = self.raw_input()
        match = _RAW_START_TAG.match(data, index)
        if match is None:
            # Input in an encoding that is not ASCII compatible
            return decoded
        return tuple(
            (key.decode(self.encoding), (double or single).decode(self.encoding))
            for key, double, single in _RAW_ATTRIBUTE.findall(match.group("attributes"))
        )

    def flush_text(self) -> None:
        if not self.text_parts:
            return
        parts = self.text_parts
        position = self.text_position
        self.text_parts = []
        self.text_position = None
        if self.trim_text:
            text = _trim_literal_edges(parts)
        else:
            text = "".join(data for data, _ in parts)
        if text:
            self.pending.append(XMLEvent.text_node(text, position))

    def on_xml_decl(self, version: str, encoding: Optional[str], standalone: int) -> None:
        if encoding:
            self.encoding = encoding

    def on_start(self, name: str, attrs: List[str]) -> None:
        self.flush_text()
        pairs = tuple(zip(attrs[0::2], attrs[1::2]))
        if pairs:
            pairs = self.raw_attributes(pairs)
        self.pending.append(XMLEvent.start(name, pairs, self.position()))

    def on_end(self, name: str) -> None:
        self.flush_text()
        self.pending.append(XMLEvent.end(name, self.position()))

    def on_text(self, data: str) -> None:
        if self.in_cdata:
            return
        if not self.text_parts:
            self.text_position = self.position()
        raw, index = self.raw_input()
        self.text_parts.append((data, raw[index:index + 1] == b"&"))

    def on_skipped_entity(self, name: str, is_parameter_entity: int) -> None:
        if is_parameter_entity:
            return
        # Only reached when an external DTD might have declared the entity
        raise XMLUnescapeError(
            f"{expat.errors.XML_ERROR_UNDEFINED_ENTITY}: &{name};",
            max(self.parser.CurrentByteIndex, 0),
            self.parser.CurrentLineNumber,
            self.parser.CurrentColumnNumber,
        )

    def on_boundary(self, *_args: str) -> None:
        self.flush_text()

    def on_cdata_start(self) -> None:
        self.flush_text()
        self.in_cdata = True

    def on_cdata_end(self) -> None:
        self.in_cdata = False


def _trim_literal_edges(parts: List[TextPart]) -> str:
    """Join a text run, stripping XML whitespace written literally at its edges.

    Whitespace produced by a character or entity reference is content and
    stays, as does everything after the first non-blank piece.
    """
    texts = [data for data, _ in parts]
    for i, (_, from_reference) in enumerate(parts):
        if from_reference:
            break
        texts[i] = texts[i].lstrip(XML_WHITESPACE)
        if texts[i]:
            break
    for i in reversed(range(len(parts))):
        if parts[i][1]:
            break
        texts[i] = texts[i].rstrip(XML_WHITESPACE)
        if texts[i]:
            break
    return "".join(texts)


class XMLEventReader:
    """Lazy structural event reader.

    A reader instance runs one document at a time; ``bytes_read`` reflects the
    most recent (or current) run.

    Examples:
        >>> reader = XMLEventReader()
        >>> [e.type.name for e in reader.iter_string("<r><a/></r>")]
        ['START', 'START', 'END', 'END', 'END_OF_STREAM']
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, trim_text: bool = True) -> None:
        """Initialize the reader.

        Args:
            chunk_size: Bytes read from the source per tokenizer feed
            trim_text: Strip surrounding whitespace from text, dropping blank runs
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self.chunk_size = chunk_size
        self.trim_text = trim_text
        self.bytes_read = 0

    def iter_events(self, source: BinaryIO) -> Iterator[XMLEvent]:
        """Yield events from a binary stream, ending with END_OF_STREAM.

        Raises:
            XMLParseError: The input is not well-formed XML
            XMLUnescapeError: An entity reference cannot be decoded
        """
        parser = expat.ParserCreate()
        collector = _EventCollector(parser, self.trim_text)
        collector.install()
        self.bytes_read = 0

        while True:
            chunk = source.read(self.chunk_size)
            final = not chunk
            collector.add_chunk(chunk, self.bytes_read)
            self.bytes_read += len(chunk)
            self._feed(parser, chunk, final)
            while collector.pending:
                yield collector.pending.popleft()
            if final:
                break

        logger.debug("Tokenized %d bytes", self.bytes_read)
        yield XMLEvent.end_of_stream(
            EventPosition(
                line=max(parser.CurrentLineNumber, 1),
                column=max(parser.CurrentColumnNumber, 0),
                offset=self.bytes_read,
            )
        )

    def iter_file(self, path: Union[str, Path]) -> Iterator[XMLEvent]:
        """Yield events from the XML file at ``path``."""
        with open(path, "rb") as source:
            yield from self.iter_events(source)

    def iter_string(self, xml: Union[str, bytes]) -> Iterator[XMLEvent]:
        """Yield events from an in-memory document."""
        data = xml.encode("utf-8") if isinstance(xml, str) else xml
        yield from self.iter_events(io.BytesIO(data))

    def _feed(self, parser: "expat.XMLParserType", chunk: bytes, final: bool) -> None:
        try:
            parser.Parse(chunk, final)
        except expat.ExpatError as e:
            cause = expat.errors.messages.get(e.code, str(e))
            offset = max(parser.ErrorByteIndex, 0)
            error_cls = XMLUnescapeError if e.code == _UNDEFINED_ENTITY_CODE else XMLParseError
            raise error_cls(cause, offset, e.lineno, e.offset) from e
