"""
XML-RPC value codec

Converts native values to <value> markup through an XMLWriter, and reads them
back from a TokenStream. Both directions honor the CapabilityConfig: the nil
and i8 extensions are only legal when enabled, and nesting is bounded by
max_nesting_depth.
"""

import re
import math
import base64
import binascii
import datetime
import logging
from typing import Any, Dict, List, Optional, Union

from seam_xmlrpc.backends import (
    EOF,
    EndElement,
    StartElement,
    StreamParser,
    Text,
    TokenStream,
    XMLWriter,
    create_parser,
    create_writer,
)
from seam_xmlrpc.config import CapabilityConfig
from seam_xmlrpc.errors import EncodingError, ParseError
from seam_xmlrpc.value import INT32_MAX, INT32_MIN, DateTime, TypeTag, type_tag

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")
_DOUBLE_RE = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")
_WHITESPACE_RE = re.compile(r"\s+")


def describe(token) -> str:
    """Human readable token description for error messages"""
    if isinstance(token, StartElement):
        return f"<{token.name}>"
    if isinstance(token, EndElement):
        return f"</{token.name}>"
    if isinstance(token, Text):
        return f"text {token.text[:40]!r}"
    return "end of document"


class Marshaller:
    """Writes native values as XML-RPC <value> elements"""

    def __init__(self, config: Optional[CapabilityConfig] = None):
        self.config = config or CapabilityConfig.default()

    def write_value(self, writer: XMLWriter, value: Any, depth: int = 0) -> None:
        """Write one <value> element

        Raises:
            EncodingError: Value has no wire form, needs a disabled extension,
                or nests deeper than max_nesting_depth
        """
        tag = type_tag(value)
        if tag is None:
            raise EncodingError(f"Cannot encode value of type {type(value).__name__}")

        writer.emit_start("value")
        if tag is TypeTag.NIL:
            if not self.config.allow_nil:
                raise EncodingError("nil values are not enabled (allow_nil=False)")
            writer.emit_empty("nil")
        elif tag is TypeTag.BOOLEAN:
            writer.emit_element("boolean", "1" if value else "0")
        elif tag is TypeTag.INT32:
            writer.emit_element("i4", str(int(value)))
        elif tag is TypeTag.BIGINT:
            if not self.config.allow_bigint:
                raise EncodingError("Integer does not fit in 32 bits (allow_bigint=False)")
            writer.emit_element("i8", self._int_text(value))
        elif tag is TypeTag.DOUBLE:
            if not math.isfinite(value):
                raise EncodingError(f"Cannot encode non-finite double {value!r}")
            writer.emit_element("double", repr(float(value)))
        elif tag is TypeTag.STRING:
            writer.emit_element("string", value)
        elif tag is TypeTag.DATETIME:
            if isinstance(value, datetime.datetime):
                value = DateTime.from_datetime(value)
            writer.emit_element("dateTime.iso8601", value.iso8601())
        elif tag is TypeTag.BASE64:
            writer.emit_element("base64", base64.b64encode(bytes(value)).decode("ascii"))
        elif tag is TypeTag.STRUCT:
            self._write_struct(writer, value, self._descend(depth))
        else:
            self._write_array(writer, value, self._descend(depth))
        writer.emit_end("value")

    @staticmethod
    def _int_text(value: int) -> str:
        try:
            return str(int(value))
        except ValueError as e:
            # int-to-str digit limit (sys.set_int_max_str_digits)
            raise EncodingError(f"Integer is too long to encode: {e}") from e

    def _descend(self, depth: int) -> int:
        depth += 1
        if depth > self.config.max_nesting_depth:
            raise EncodingError(
                f"Value nests deeper than max_nesting_depth={self.config.max_nesting_depth}"
            )
        return depth

    def _write_struct(self, writer: XMLWriter, struct: Dict[str, Any], depth: int) -> None:
        writer.emit_start("struct")
        for key, member in struct.items():
            if not isinstance(key, str):
                raise EncodingError(f"Struct keys must be strings, got {type(key).__name__}")
            writer.emit_start("member")
            writer.emit_element("name", key)
            self.write_value(writer, member, depth)
            writer.emit_end("member")
        writer.emit_end("struct")

    def _write_array(self, writer: XMLWriter, items, depth: int) -> None:
        writer.emit_start("array")
        writer.emit_start("data")
        for item in items:
            self.write_value(writer, item, depth)
        writer.emit_end("data")
        writer.emit_end("array")


class Unmarshaller:
    """Reads XML-RPC <value> elements from a token stream"""

    def __init__(self, stream: TokenStream, config: Optional[CapabilityConfig] = None):
        self.stream = stream
        self.config = config or CapabilityConfig.default()

    # Token helpers

    def next_significant(self):
        """Next token, skipping whitespace-only text

        Raises:
            ParseError: Non-whitespace text where only elements are allowed
        """
        token = self.stream.next_token()
        while isinstance(token, Text):
            if token.text.strip():
                raise ParseError(f"Unexpected {describe(token)}")
            token = self.stream.next_token()
        return token

    def peek_significant(self):
        token = self.stream.peek()
        while isinstance(token, Text) and not token.text.strip():
            self.stream.next_token()
            token = self.stream.peek()
        return token

    def expect_start(self, name: str) -> StartElement:
        token = self.next_significant()
        if not isinstance(token, StartElement) or token.name != name:
            raise ParseError(f"Expected <{name}>, found {describe(token)}")
        return token

    def expect_end(self, name: str) -> None:
        token = self.next_significant()
        if not isinstance(token, EndElement) or token.name != name:
            raise ParseError(f"Expected </{name}>, found {describe(token)}")

    def read_text(self, name: str) -> str:
        """Collect character data up to </name>; child elements are an error"""
        parts: List[str] = []
        while True:
            token = self.stream.next_token()
            if isinstance(token, Text):
                parts.append(token.text)
            elif isinstance(token, EndElement) and token.name == name:
                return "".join(parts)
            else:
                raise ParseError(f"Unexpected {describe(token)} inside <{name}>")

    # Values

    def read_value(self, depth: int = 0) -> Any:
        """Read one complete <value> element"""
        self.expect_start("value")
        token = self.stream.next_token()
        text = ""
        if isinstance(token, Text):
            text = token.text
            token = self.stream.next_token()

        if isinstance(token, EndElement) and token.name == "value":
            # untyped value defaults to string
            return text
        if not isinstance(token, StartElement):
            raise ParseError(f"Unexpected {describe(token)} inside <value>")
        if text.strip():
            raise ParseError("Mixed text and elements inside <value>")

        result = self._read_typed(token.name, depth)
        self.expect_end("value")
        return result

    def _read_typed(self, name: str, depth: int) -> Any:
        if name in ("i4", "int"):
            value = self._parse_int(self.read_text(name), name)
            if not INT32_MIN <= value <= INT32_MAX:
                raise ParseError(f"<{name}> value {value} is outside the 32-bit range")
            return value
        if name == "i8":
            if not self.config.allow_bigint:
                raise ParseError("<i8> values are not enabled (allow_bigint=False)")
            return self._parse_int(self.read_text(name), name)
        if name == "boolean":
            text = self.read_text(name).strip()
            if text not in ("0", "1"):
                raise ParseError(f"Invalid <boolean> value {text!r}")
            return text == "1"
        if name == "double":
            text = self.read_text(name).strip()
            if not _DOUBLE_RE.fullmatch(text):
                raise ParseError(f"Invalid <double> value {text!r}")
            value = float(text)
            if not math.isfinite(value):
                raise ParseError(f"<double> value {text!r} is out of range")
            return value
        if name == "string":
            return self.read_text(name)
        if name == "dateTime.iso8601":
            text = self.read_text(name)
            try:
                return DateTime.parse(text)
            except ValueError as e:
                raise ParseError(str(e)) from e
        if name == "base64":
            text = _WHITESPACE_RE.sub("", self.read_text(name))
            try:
                return base64.b64decode(text, validate=True)
            except binascii.Error as e:
                raise ParseError(f"Invalid <base64> value: {e}") from e
        if name == "nil":
            if not self.config.allow_nil:
                raise ParseError("<nil> values are not enabled (allow_nil=False)")
            if self.read_text(name).strip():
                raise ParseError("<nil> must be empty")
            return None
        if name == "struct":
            return self._read_struct(self._descend(depth))
        if name == "array":
            return self._read_array(self._descend(depth))
        raise ParseError(f"Unknown value type <{name}>")

    def _descend(self, depth: int) -> int:
        depth += 1
        if depth > self.config.max_nesting_depth:
            raise ParseError(
                f"Value nests deeper than max_nesting_depth={self.config.max_nesting_depth}"
            )
        return depth

    @staticmethod
    def _parse_int(text: str, name: str) -> int:
        text = text.strip()
        if not _INT_RE.fullmatch(text):
            raise ParseError(f"Invalid <{name}> value {text!r}")
        try:
            return int(text)
        except ValueError as e:
            raise ParseError(f"<{name}> value has too many digits: {e}") from e

    def _read_struct(self, depth: int) -> Dict[str, Any]:
        struct: Dict[str, Any] = {}
        while True:
            token = self.next_significant()
            if isinstance(token, EndElement) and token.name == "struct":
                return struct
            if not isinstance(token, StartElement) or token.name != "member":
                raise ParseError(f"Expected <member> in <struct>, found {describe(token)}")
            token = self.next_significant()
            if not isinstance(token, StartElement) or token.name != "name":
                raise ParseError(f"Struct member without <name>, found {describe(token)}")
            key = self.read_text("name")
            if key in struct:
                raise ParseError(f"Duplicate struct member {key!r}")
            struct[key] = self.read_value(depth)
            self.expect_end("member")

    def _read_array(self, depth: int) -> List[Any]:
        items: List[Any] = []
        self.expect_start("data")
        while True:
            token = self.peek_significant()
            if isinstance(token, EndElement) and token.name == "data":
                self.stream.next_token()
                break
            items.append(self.read_value(depth))
        self.expect_end("array")
        return items


def encode(value: Any,
           config: Optional[CapabilityConfig] = None,
           writer: Union[str, XMLWriter] = "simple") -> str:
    """Encode a native value as a <value> fragment

    Raises:
        EncodingError: See Marshaller.write_value
    """
    if isinstance(writer, str):
        writer = create_writer(writer)
    Marshaller(config).write_value(writer, value)
    return writer.getvalue()


def decode(fragment: Union[bytes, str],
           config: Optional[CapabilityConfig] = None,
           parser: Union[str, StreamParser] = "expat") -> Any:
    """Decode a single <value> fragment

    Raises:
        ParseError: Fragment is malformed or violates the capability config
    """
    unmarshaller = Unmarshaller(create_parser(parser).stream(fragment), config)
    value = unmarshaller.read_value()
    trailing = unmarshaller.next_significant()
    if trailing is not EOF:
        raise ParseError(f"Unexpected {describe(trailing)} after </value>")
    return value


def check(value: Any, config: Optional[CapabilityConfig] = None) -> None:
    """Raise EncodingError if value could not be encoded under config"""
    encode(value, config)
