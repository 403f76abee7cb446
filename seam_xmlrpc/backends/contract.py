"""
XML backend contract

Defines the streaming token interface the codec reads from and the writer
interface it emits into. Any backend satisfying these ABCs is interchangeable.
"""

import abc
from typing import Dict, Iterator, List, NamedTuple, Optional, Union


class StartElement(NamedTuple):
    name: str
    attrs: Dict[str, str] = {}


class EndElement(NamedTuple):
    name: str


class Text(NamedTuple):
    text: str


class _EOF:
    """End-of-document marker"""

    def __repr__(self):
        return "EOF"


EOF = _EOF()

Token = Union[StartElement, EndElement, Text, _EOF]


class StreamParser(abc.ABC):
    """Parser backend interface, turns a document into a token sequence"""

    name = "abstract"

    @abc.abstractmethod
    def tokens(self, data: Union[bytes, str]) -> Iterator[Token]:
        """Tokenize a complete document

        Args:
            data: Raw document bytes (or already decoded text)

        Returns:
            Iterator of StartElement, EndElement and Text tokens in document order.
            Adjacent character data is delivered as a single Text token.

        Raises:
            ParseError: The document is not well-formed XML
        """
        pass

    def stream(self, data: Union[bytes, str]) -> "TokenStream":
        return TokenStream(self.tokens(data))


class TokenStream:
    """Cursor over a token iterator with one token of lookahead"""

    def __init__(self, tokens: Iterator[Token]):
        self._tokens = iter(tokens)
        self._lookahead: List[Token] = []

    def next_token(self) -> Token:
        if self._lookahead:
            return self._lookahead.pop()
        return next(self._tokens, EOF)

    def peek(self) -> Token:
        if not self._lookahead:
            self._lookahead.append(next(self._tokens, EOF))
        return self._lookahead[-1]


class XMLWriter(abc.ABC):
    """Writer backend interface"""

    name = "abstract"

    @abc.abstractmethod
    def emit_start(self, name: str) -> None:
        pass

    @abc.abstractmethod
    def emit_text(self, text: str) -> None:
        """Emit character data, escaping XML-significant characters

        Raises:
            EncodingError: Text holds characters XML 1.0 cannot carry
        """
        pass

    @abc.abstractmethod
    def emit_end(self, name: str) -> None:
        pass

    def emit_empty(self, name: str) -> None:
        self.emit_start(name)
        self.emit_end(name)

    def emit_element(self, name: str, text: Optional[str]) -> None:
        """Emit <name>text</name>"""
        self.emit_start(name)
        if text:
            self.emit_text(text)
        self.emit_end(name)

    @abc.abstractmethod
    def getvalue(self) -> str:
        """Return the markup written so far"""
        pass
