"""
ElementTree parser backend

Drives xml.etree.ElementTree.XMLParser with a token-collecting target instead
of building a tree. Like the expat backend it refuses document type
declarations, which also rules out entity definitions.
"""

import logging
from typing import Iterator, List, Union
from xml.etree import ElementTree

from seam_xmlrpc.backends.contract import StreamParser, StartElement, EndElement, Text, Token
from seam_xmlrpc.errors import ParseError, FAULT_NOT_WELL_FORMED, FAULT_UNSUPPORTED_ENCODING

logger = logging.getLogger(__name__)


class _TokenTarget:
    """XMLParser target recording start/end/text tokens in document order"""

    def __init__(self):
        self.tokens: List[Token] = []
        self._chunks: List[str] = []

    def _flush(self):
        if self._chunks:
            self.tokens.append(Text("".join(self._chunks)))
            self._chunks = []

    def start(self, tag, attrib):
        self._flush()
        self.tokens.append(StartElement(tag, dict(attrib)))

    def end(self, tag):
        self._flush()
        self.tokens.append(EndElement(tag))

    def data(self, text):
        self._chunks.append(text)

    def doctype(self, name, pubid, system):
        raise ParseError("DOCTYPE declarations are not allowed", FAULT_NOT_WELL_FORMED)

    def close(self):
        self._flush()
        return self.tokens


class ElementTreeStreamParser(StreamParser):
    """Tokenizer on top of xml.etree.ElementTree.XMLParser"""

    name = "etree"

    def tokens(self, data: Union[bytes, str]) -> Iterator[Token]:
        parser = ElementTree.XMLParser(target=_TokenTarget())
        try:
            parser.feed(data)
            tokens = parser.close()
        except ElementTree.ParseError as e:
            logger.debug(f"ElementTree rejected document: {e}")
            raise ParseError(f"Malformed XML: {e}", FAULT_NOT_WELL_FORMED) from e
        except (UnicodeError, LookupError) as e:
            raise ParseError(f"Undecodable document: {e}", FAULT_UNSUPPORTED_ENCODING) from e
        return iter(tokens)
