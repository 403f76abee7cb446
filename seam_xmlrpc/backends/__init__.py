"""
XML Backends Module

Closed set of parser and writer implementations selected at construction time:
- expat: xml.parsers.expat tokenizer (default)
- etree: xml.etree.ElementTree pull parser
- simple: in-memory markup writer
"""

from typing import Union

from .contract import (
    EOF,
    EndElement,
    StartElement,
    StreamParser,
    Text,
    TokenStream,
    XMLWriter,
)
from .expat_parser import ExpatStreamParser
from .etree_parser import ElementTreeStreamParser
from .writer import SimpleXMLWriter

PARSERS = {
    ExpatStreamParser.name: ExpatStreamParser,
    ElementTreeStreamParser.name: ElementTreeStreamParser,
}

WRITERS = {
    SimpleXMLWriter.name: SimpleXMLWriter,
}


def create_parser(parser: Union[str, StreamParser] = "expat") -> StreamParser:
    """Return a parser backend by name (instances are passed through)

    Raises:
        ValueError: Unknown backend name
    """
    if isinstance(parser, StreamParser):
        return parser
    try:
        return PARSERS[parser.lower()]()
    except KeyError:
        raise ValueError(f"Unknown XML parser backend: {parser}") from None


def writer_factory(writer: str = "simple"):
    """Return the writer class for a backend name

    Writers hold per-document state, so callers create one per document.

    Raises:
        ValueError: Unknown backend name
    """
    try:
        return WRITERS[writer.lower()]
    except KeyError:
        raise ValueError(f"Unknown XML writer backend: {writer}") from None


def create_writer(writer: str = "simple") -> XMLWriter:
    return writer_factory(writer)()


__all__ = [
    "EOF",
    "EndElement",
    "StartElement",
    "StreamParser",
    "Text",
    "TokenStream",
    "XMLWriter",
    "ExpatStreamParser",
    "ElementTreeStreamParser",
    "SimpleXMLWriter",
    "create_parser",
    "create_writer",
    "writer_factory",
]
