"""Tests for the structural event reader."""

import io

import pytest

from xml_bracket.shared.errors import XMLParseError, XMLUnescapeError
from xml_bracket.tokenization import (
    EventPosition,
    EventType,
    XMLEvent,
    XMLEventReader,
)


def event_summary(events):
    """Reduce events to comparable (type, payload) tuples."""
    summary = []
    for event in events:
        if event.type is EventType.START:
            summary.append(("start", event.name, event.attributes))
        elif event.type is EventType.TEXT:
            summary.append(("text", event.text))
        elif event.type is EventType.END:
            summary.append(("end", event.name))
        else:
            summary.append(("eos",))
    return summary


def texts(xml, **kwargs):
    reader = XMLEventReader(**kwargs)
    return [e.text for e in reader.iter_string(xml) if e.type is EventType.TEXT]


class CountingStream:
    """Binary stream serving predefined pieces and counting reads."""

    def __init__(self, pieces):
        self.pieces = list(pieces)
        self.reads = 0

    def read(self, size=-1):
        self.reads += 1
        return self.pieces.pop(0) if self.pieces else b""


class TestEventPosition:
    """Tests for EventPosition."""

    def test_position_creation(self):
        """Test EventPosition creation with valid values."""
        pos = EventPosition(line=5, column=0, offset=50)
        assert pos.line == 5
        assert pos.column == 0
        assert pos.offset == 50

    def test_position_validation(self):
        """Test EventPosition validation for invalid values."""
        with pytest.raises(ValueError, match="Line number must be >= 1"):
            EventPosition(line=0, column=0, offset=0)
        with pytest.raises(ValueError, match="Column number must be >= 0"):
            EventPosition(line=1, column=-1, offset=0)
        with pytest.raises(ValueError, match="Offset must be >= 0"):
            EventPosition(line=1, column=0, offset=-1)


class TestXMLEvent:
    """Tests for the event factory methods."""

    def test_factories(self):
        """Test that factories set the right type and payload."""
        assert XMLEvent.start("a", (("k", "v"),)).attributes == (("k", "v"),)
        assert XMLEvent.end("a").type is EventType.END
        assert XMLEvent.text_node("t").text == "t"
        assert XMLEvent.end_of_stream().type is EventType.END_OF_STREAM


class TestXMLEventReader:
    """Tests for XMLEventReader."""

    def test_basic_event_sequence(self):
        """Test the events of a small document."""
        reader = XMLEventReader()
        events = list(reader.iter_string("<root><a>1</a></root>"))
        assert event_summary(events) == [
            ("start", "root", ()),
            ("start", "a", ()),
            ("text", "1"),
            ("end", "a"),
            ("end", "root"),
            ("eos",),
        ]

    def test_self_closing_element(self):
        """Test that a self-closing tag is a start immediately followed by an end."""
        reader = XMLEventReader()
        events = list(reader.iter_string("<root><a/></root>"))
        assert event_summary(events)[1:3] == [("start", "a", ()), ("end", "a")]

    def test_attributes_in_document_order(self):
        """Test that attributes keep their document order."""
        reader = XMLEventReader()
        start = next(e for e in reader.iter_string('<r b="2" a="1"/>'))
        assert start.attributes == (("b", "2"), ("a", "1"))

    def test_names_keep_prefixes(self):
        """Test that no namespace resolution happens."""
        reader = XMLEventReader()
        events = list(reader.iter_string('<ns:r xmlns:ns="urn:x"><ns:a ns:k="v"/></ns:r>'))
        assert events[0].name == "ns:r"
        assert events[0].attributes == (("xmlns:ns", "urn:x"),)
        assert events[1].name == "ns:a"
        assert events[1].attributes == (("ns:k", "v"),)

    def test_text_is_trimmed(self):
        """Test that text is trimmed and whitespace-only runs are dropped."""
        assert texts("<r>\n  <a>  x y  </a>\n  <b/>\n</r>") == ["x y"]

    def test_text_untrimmed(self):
        """Test that trimming can be disabled."""
        assert texts("<r><a> x </a></r>", trim_text=False) == [" x "]

    def test_entities_are_decoded(self):
        """Test that predefined and character references are decoded."""
        assert texts("<r><a>&lt;&amp;&gt;&quot;&apos;&#65;&#x42;</a></r>") == ["<&>\"'AB"]

    def test_attribute_values_are_raw(self):
        """Test that references in attribute values are passed on as written."""
        reader = XMLEventReader()
        start = next(e for e in reader.iter_string('<r k="a&amp;b" n=\'&#65;\'/>'))
        assert start.attributes == (("k", "a&amp;b"), ("n", "&#65;"))

    def test_attribute_line_breaks_kept(self):
        """Test that whitespace inside attribute values is not normalized."""
        reader = XMLEventReader()
        start = next(e for e in reader.iter_string('<r k="l1\nl2\tx" j = "" />'))
        assert start.attributes == (("k", "l1\nl2\tx"), ("j", ""))

    def test_raw_attributes_across_chunks(self):
        """Test that a start tag split over many reads keeps its raw values."""
        xml = '<root><item href="x?a=1&amp;b=2" title="&lt;T&gt;"/></root>'
        for chunk_size in (1, 4, 7):
            events = list(XMLEventReader(chunk_size=chunk_size).iter_string(xml))
            assert events[1].attributes == (
                ("href", "x?a=1&amp;b=2"),
                ("title", "&lt;T&gt;"),
            )

    def test_raw_attributes_in_declared_encoding(self):
        """Test that raw values are decoded with the document's encoding."""
        xml = '<?xml version="1.0" encoding="ISO-8859-1"?><r k="caf\xe9"/>'
        start = next(XMLEventReader().iter_string(xml.encode("latin-1")))
        assert start.attributes == (("k", "caf\xe9"),)

    def test_dtd_default_attributes_not_added(self):
        """Test that only attributes present in the input are reported."""
        xml = '<!DOCTYPE r [<!ATTLIST r d CDATA "dflt">]><r k="v"/>'
        start = next(XMLEventReader().iter_string(xml))
        assert start.attributes == (("k", "v"),)

    def test_reference_whitespace_survives_trimming(self):
        """Test that only literal whitespace is trimmed from text edges."""
        assert texts("<r><a>&#32;x</a></r>") == [" x"]
        assert texts("<r><a> x&#10;</a></r>") == ["x\n"]
        assert texts("<r><a>  &#32; </a></r>") == [" "]

    def test_comment_splits_text(self):
        """Test that comments are skipped but end a text run."""
        assert texts("<r><a>x<!-- note -->y</a></r>") == ["x", "y"]

    def test_cdata_is_skipped(self):
        """Test that CDATA content produces no text."""
        assert texts("<r><a>x<![CDATA[raw {data}]]>y</a></r>") == ["x", "y"]

    def test_processing_instruction_is_skipped(self):
        """Test that processing instructions produce no events."""
        reader = XMLEventReader()
        events = list(reader.iter_string('<?xml version="1.0"?><r><?pi data?><a/></r>'))
        assert [e.type for e in events] == [
            EventType.START, EventType.START, EventType.END, EventType.END,
            EventType.END_OF_STREAM,
        ]

    def test_text_coalesced_across_chunks(self):
        """Test that a text run split over many reads is one event."""
        xml = "<root><a>hello brave new world</a></root>"
        assert texts(xml, chunk_size=3) == ["hello brave new world"]

    def test_small_chunks_give_same_events(self):
        """Test that chunking does not change the event stream."""
        xml = '<root><a k="v">1<b>2</b>3</a><c/></root>'
        big = event_summary(XMLEventReader().iter_string(xml))
        small = event_summary(XMLEventReader(chunk_size=1).iter_string(xml))
        assert small == big

    def test_events_are_lazy(self):
        """Test that events of the first chunk arrive before the next read."""
        stream = CountingStream([b"<r><a>1</a>", b"<b>2</b></r>"])
        events = XMLEventReader().iter_events(stream)
        first = [next(events) for _ in range(2)]
        assert event_summary(first)[-1] == ("start", "a", ())
        assert stream.reads == 1

    def test_bytes_read(self):
        """Test that the reader counts input bytes."""
        data = "<root><a>ü</a></root>".encode("utf-8")
        reader = XMLEventReader()
        list(reader.iter_events(io.BytesIO(data)))
        assert reader.bytes_read == len(data)

    def test_end_of_stream_is_last(self):
        """Test that the stream always ends with END_OF_STREAM."""
        events = list(XMLEventReader().iter_string("<root/>"))
        assert events[-1].type is EventType.END_OF_STREAM
        assert events[-1].position.offset == len("<root/>")

    def test_event_positions(self):
        """Test that events carry line numbers."""
        events = list(XMLEventReader().iter_string("<root>\n<a/>\n</root>"))
        assert events[0].position.line == 1
        assert events[1].position.line == 2

    def test_iter_file(self, tmp_path):
        """Test reading events from a file."""
        path = tmp_path / "doc.xml"
        path.write_bytes(b"<root><a>1</a></root>")
        events = list(XMLEventReader().iter_file(path))
        assert len(events) == 6

    def test_invalid_chunk_size(self):
        """Test that a non-positive chunk size is rejected."""
        with pytest.raises(ValueError, match="chunk_size must be > 0"):
            XMLEventReader(chunk_size=0)


class TestXMLEventReaderErrors:
    """Tests for fatal tokenizer errors."""

    def test_mismatched_tag(self):
        """Test that a mismatched end tag is a parse error with an offset."""
        with pytest.raises(XMLParseError) as exc_info:
            list(XMLEventReader().iter_string("<r><a></r>"))
        assert exc_info.value.offset > 0
        assert exc_info.value.line == 1
        assert "mismatched tag" in exc_info.value.cause
        assert str(exc_info.value).startswith("Error at position")

    def test_empty_input(self):
        """Test that a document without elements is a parse error."""
        with pytest.raises(XMLParseError):
            list(XMLEventReader().iter_string(""))

    def test_unclosed_root(self):
        """Test that a truncated document is a parse error."""
        with pytest.raises(XMLParseError):
            list(XMLEventReader().iter_string("<root><a>1</a>"))

    def test_undefined_entity(self):
        """Test that an undefined entity is an unescape error."""
        with pytest.raises(XMLUnescapeError) as exc_info:
            list(XMLEventReader().iter_string("<r><a>&bogus;</a></r>"))
        assert isinstance(exc_info.value, XMLParseError)

    def test_invalid_utf8(self):
        """Test that undecodable bytes are a parse error."""
        with pytest.raises(XMLParseError):
            list(XMLEventReader().iter_string(b"<r><a>\xff</a></r>"))

    def test_undeclared_entity_with_external_dtd(self):
        """Test that an entity left undefined behind an external DTD is fatal."""
        xml = '<!DOCTYPE root SYSTEM "x.dtd"><root><a>pre &ent; post</a></root>'
        with pytest.raises(XMLUnescapeError) as exc_info:
            list(XMLEventReader().iter_string(xml))
        assert "&ent;" in exc_info.value.cause
        assert exc_info.value.offset > 0
