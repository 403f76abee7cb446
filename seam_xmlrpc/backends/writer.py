"""
Markup writer backend
"""

import re
from typing import List

from seam_xmlrpc.backends.contract import XMLWriter
from seam_xmlrpc.errors import EncodingError

# Characters outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    # a literal CR would be normalized away by the reading parser
    "\r": "&#13;",
})


def escape(text: str) -> str:
    """Escape character data for element content

    Raises:
        EncodingError: Text contains characters XML 1.0 cannot represent
    """
    bad = _INVALID_XML_CHARS.search(text)
    if bad:
        raise EncodingError(
            f"Character U+{ord(bad.group()):04X} cannot be represented in XML"
        )
    return text.translate(_ESCAPES)


class SimpleXMLWriter(XMLWriter):
    """Builds markup in memory, without whitespace between elements"""

    name = "simple"

    def __init__(self):
        self._parts: List[str] = []

    def emit_start(self, name: str) -> None:
        self._parts.append(f"<{name}>")

    def emit_text(self, text: str) -> None:
        self._parts.append(escape(text))

    def emit_end(self, name: str) -> None:
        self._parts.append(f"</{name}>")

    def emit_empty(self, name: str) -> None:
        self._parts.append(f"<{name}/>")

    def getvalue(self) -> str:
        return "".join(self._parts)
