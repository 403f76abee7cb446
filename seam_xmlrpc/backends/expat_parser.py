"""
Expat parser backend

Default backend. Document type declarations are refused outright so that no
entity expansion can happen while reading untrusted requests.
"""

import logging
from typing import Iterator, List, Union
from xml.parsers import expat

from seam_xmlrpc.backends.contract import StreamParser, StartElement, EndElement, Text, Token
from seam_xmlrpc.errors import ParseError, FAULT_NOT_WELL_FORMED, FAULT_UNSUPPORTED_ENCODING

logger = logging.getLogger(__name__)


class ExpatStreamParser(StreamParser):
    """Tokenizer on top of xml.parsers.expat"""

    name = "expat"

    def tokens(self, data: Union[bytes, str]) -> Iterator[Token]:
        out: List[Token] = []
        chunks: List[str] = []

        def flush_text():
            if chunks:
                out.append(Text("".join(chunks)))
                del chunks[:]

        def start(name, attrs):
            flush_text()
            out.append(StartElement(name, attrs))

        def end(name):
            flush_text()
            out.append(EndElement(name))

        def refuse_doctype(*_args):
            raise ParseError("DOCTYPE declarations are not allowed", FAULT_NOT_WELL_FORMED)

        parser = expat.ParserCreate()
        parser.buffer_text = True
        parser.StartElementHandler = start
        parser.EndElementHandler = end
        parser.CharacterDataHandler = chunks.append
        parser.StartDoctypeDeclHandler = refuse_doctype
        parser.EntityDeclHandler = refuse_doctype

        try:
            parser.Parse(data, True)
        except expat.ExpatError as e:
            code = FAULT_NOT_WELL_FORMED
            if e.code == expat.errors.codes[expat.errors.XML_ERROR_UNKNOWN_ENCODING]:
                code = FAULT_UNSUPPORTED_ENCODING
            logger.debug(f"expat rejected document: {e}")
            raise ParseError(f"Malformed XML: {e}", code) from e
        except (UnicodeError, LookupError) as e:
            # an unknown codec name surfaces as LookupError from the encoding handler
            raise ParseError(f"Undecodable document: {e}", FAULT_UNSUPPORTED_ENCODING) from e

        flush_text()
        return iter(out)
