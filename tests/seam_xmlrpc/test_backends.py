"""
Tests for the XML parser and writer backends
"""
import pytest

from seam_xmlrpc.backends import (
    EOF,
    EndElement,
    StartElement,
    Text,
    TokenStream,
    ElementTreeStreamParser,
    ExpatStreamParser,
    SimpleXMLWriter,
    create_parser,
    create_writer,
)
from seam_xmlrpc.backends.writer import escape
from seam_xmlrpc.errors import EncodingError, ParseError, FAULT_NOT_WELL_FORMED, FAULT_UNSUPPORTED_ENCODING


class TestParsers:
    """Both parser backends produce the same token sequence"""

    @pytest.mark.parametrize("parser_cls", [ExpatStreamParser, ElementTreeStreamParser])
    def test_token_sequence(self, parser_cls):
        tokens = list(parser_cls().tokens(b"<a>x<b>y &amp; z</b>tail</a>"))
        assert tokens == [
            StartElement("a", {}),
            Text("x"),
            StartElement("b", {}),
            Text("y & z"),
            EndElement("b"),
            Text("tail"),
            EndElement("a"),
        ]

    @pytest.mark.parametrize("parser_cls", [ExpatStreamParser, ElementTreeStreamParser])
    def test_character_reference_cr(self, parser_cls):
        tokens = list(parser_cls().tokens("<a>1&#13;2</a>"))
        assert tokens[1] == Text("1\r2")

    @pytest.mark.parametrize("parser_cls", [ExpatStreamParser, ElementTreeStreamParser])
    def test_malformed(self, parser_cls):
        with pytest.raises(ParseError) as exc_info:
            list(parser_cls().tokens(b"<a><b></a>"))
        assert exc_info.value.code == FAULT_NOT_WELL_FORMED

    @pytest.mark.parametrize("parser_cls", [ExpatStreamParser, ElementTreeStreamParser])
    @pytest.mark.parametrize("doc", [
        b'<?xml version="1.0"?><!DOCTYPE a [<!ENTITY e "boom">]><a>&e;</a>',
        b"<!DOCTYPE a SYSTEM \"http://example.invalid/a.dtd\"><a/>",
        b"<!DOCTYPE a><a/>",
    ])
    def test_refuses_doctype(self, parser_cls, doc):
        with pytest.raises(ParseError, match="DOCTYPE") as exc_info:
            list(parser_cls().tokens(doc))
        assert exc_info.value.code == FAULT_NOT_WELL_FORMED

    def test_expat_unknown_encoding(self):
        with pytest.raises(ParseError) as exc_info:
            list(ExpatStreamParser().tokens(b'<?xml version="1.0" encoding="x-no-such-enc"?><a/>'))
        assert exc_info.value.code == FAULT_UNSUPPORTED_ENCODING

    def test_expat_declared_encoding(self):
        doc = '<?xml version="1.0" encoding="ISO-8859-1"?><a>caf\xe9</a>'.encode("latin-1")
        tokens = list(ExpatStreamParser().tokens(doc))
        assert tokens[1] == Text("caf\xe9")

    def test_create_parser(self):
        assert isinstance(create_parser(), ExpatStreamParser)
        assert isinstance(create_parser("ETREE"), ElementTreeStreamParser)
        instance = ExpatStreamParser()
        assert create_parser(instance) is instance
        with pytest.raises(ValueError):
            create_parser("libxml")


class TestTokenStream:

    def test_peek_and_next(self):
        stream = TokenStream(iter([StartElement("a"), EndElement("a")]))
        assert stream.peek() == StartElement("a")
        assert stream.peek() == StartElement("a")
        assert stream.next_token() == StartElement("a")
        assert stream.next_token() == EndElement("a")
        assert stream.next_token() is EOF
        assert stream.peek() is EOF


class TestWriter:

    def test_elements(self):
        writer = SimpleXMLWriter()
        writer.emit_start("a")
        writer.emit_element("b", "x<y")
        writer.emit_element("c", "")
        writer.emit_empty("d")
        writer.emit_end("a")
        assert writer.getvalue() == "<a><b>x&lt;y</b><c></c><d/></a>"

    def test_escape(self):
        assert escape("a&b<c>d\re\nf\tg") == "a&amp;b&lt;c&gt;d&#13;e\nf\tg"

    @pytest.mark.parametrize("text", ["\x00", "\x1f", "\ud800", "\uffff"])
    def test_escape_rejects_invalid_characters(self, text):
        with pytest.raises(EncodingError):
            escape("ok" + text)

    def test_create_writer(self):
        assert isinstance(create_writer(), SimpleXMLWriter)
        with pytest.raises(ValueError):
            create_writer("pretty")
