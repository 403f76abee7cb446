"""
XML-RPC protocol engine

Frames methodCall and methodResponse documents around codec-encoded values and
implements the system.multicall batching extension.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Union

from seam_xmlrpc.backends import EOF, EndElement, StartElement, StreamParser, create_parser, writer_factory
from seam_xmlrpc.codec import Marshaller, Unmarshaller, describe
from seam_xmlrpc.config import CapabilityConfig
from seam_xmlrpc.errors import (
    EncodingError,
    Fault,
    ParseError,
    FAULT_INTERNAL_ERROR,
    FAULT_INVALID_PARAMS,
    FAULT_SYSTEM_ERROR,
)
from seam_xmlrpc.value import INT32_MAX, INT32_MIN

logger = logging.getLogger(__name__)

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Reserved method names
MULTICALL = "system.multicall"
LIST_METHODS = "system.listMethods"
METHOD_SIGNATURE = "system.methodSignature"
METHOD_HELP = "system.methodHelp"
INTROSPECTION_METHODS = (LIST_METHODS, METHOD_SIGNATURE, METHOD_HELP)
RESERVED_METHODS = frozenset(INTROSPECTION_METHODS + (MULTICALL,))


@dataclass
class MethodCall:
    """A decoded methodCall document"""
    method_name: str
    params: List[Any] = field(default_factory=list)


@dataclass
class MethodResponse:
    """A decoded methodResponse: exactly one of value or fault"""
    value: Any = None
    fault: Optional[Fault] = None

    @classmethod
    def success(cls, value: Any) -> "MethodResponse":
        return cls(value=value)

    @classmethod
    def failure(cls, fault: Fault) -> "MethodResponse":
        return cls(fault=fault)

    def __post_init__(self):
        if self.fault is not None and self.value is not None:
            raise ValueError("A response cannot carry both a value and a fault")

    @property
    def ok(self) -> bool:
        return self.fault is None


@dataclass
class MulticallItem:
    """One entry of a system.multicall request"""
    method_name: str
    params: List[Any] = field(default_factory=list)

    @classmethod
    def from_value(cls, raw: Any) -> "MulticallItem":
        """Validate a decoded {methodName, params} struct

        Raises:
            Fault: The entry is malformed (reported in that entry's slot)
        """
        if not isinstance(raw, dict):
            raise Fault(FAULT_INVALID_PARAMS, "system.multicall entries must be structs")
        method_name = raw.get("methodName")
        if method_name is None:
            raise Fault(FAULT_INVALID_PARAMS, "system.multicall entry is missing 'methodName'")
        if not isinstance(method_name, str) or not method_name:
            raise Fault(FAULT_INVALID_PARAMS, "system.multicall 'methodName' must be a non-empty string")
        if "params" not in raw:
            raise Fault(FAULT_INVALID_PARAMS,
                        f"system.multicall entry for {method_name} is missing 'params'")
        params = raw["params"]
        if not isinstance(params, list):
            raise Fault(FAULT_INVALID_PARAMS,
                        f"system.multicall 'params' for {method_name} must be an array")
        return cls(method_name, params)

    def to_value(self):
        return {"methodName": self.method_name, "params": list(self.params)}


class ProtocolEngine:
    """Builds and parses XML-RPC documents

    Args:
        config: Capability configuration used for every value
        parser: Parser backend name or instance
        writer: Writer backend name
    """

    def __init__(self,
                 config: Optional[CapabilityConfig] = None,
                 parser: Union[str, StreamParser] = "expat",
                 writer: str = "simple"):
        self.config = config or CapabilityConfig.default()
        self.parser = create_parser(parser)
        self._writer_class = writer_factory(writer)
        self._marshaller = Marshaller(self.config)

    # Encoding

    def dump_call(self, method_name: str, params: Sequence[Any] = ()) -> bytes:
        """Encode a methodCall document

        Raises:
            EncodingError: Empty method name or an unencodable parameter
        """
        if not isinstance(method_name, str) or not method_name:
            raise EncodingError("Method name must be a non-empty string")
        writer = self._writer_class()
        writer.emit_start("methodCall")
        writer.emit_element("methodName", method_name)
        self._write_params(writer, params)
        writer.emit_end("methodCall")
        return self._document(writer)

    def dump_response(self, value: Any) -> bytes:
        writer = self._writer_class()
        writer.emit_start("methodResponse")
        self._write_params(writer, (value,))
        writer.emit_end("methodResponse")
        return self._document(writer)

    def dump_fault(self, fault: Fault) -> bytes:
        if isinstance(fault.code, bool) or not isinstance(fault.code, int) \
                or not INT32_MIN <= fault.code <= INT32_MAX:
            raise EncodingError(f"faultCode must be a 32-bit integer, got {fault.code!r}")
        if not isinstance(fault.message, str):
            raise EncodingError("faultString must be a string")
        writer = self._writer_class()
        writer.emit_start("methodResponse")
        writer.emit_start("fault")
        self._marshaller.write_value(writer, fault.to_struct())
        writer.emit_end("fault")
        writer.emit_end("methodResponse")
        return self._document(writer)

    def _write_params(self, writer, params: Sequence[Any]) -> None:
        writer.emit_start("params")
        for param in params:
            writer.emit_start("param")
            self._marshaller.write_value(writer, param)
            writer.emit_end("param")
        writer.emit_end("params")

    @staticmethod
    def _document(writer) -> bytes:
        return (XML_HEADER + writer.getvalue()).encode("utf-8")

    # Decoding

    def _unmarshaller(self, data: Union[bytes, str]) -> Unmarshaller:
        return Unmarshaller(self.parser.stream(data), self.config)

    @staticmethod
    def _read_params(reader: Unmarshaller) -> List[Any]:
        params = []
        while True:
            token = reader.next_significant()
            if isinstance(token, EndElement) and token.name == "params":
                return params
            if not isinstance(token, StartElement) or token.name != "param":
                raise ParseError(f"Expected <param>, found {describe(token)}")
            params.append(reader.read_value())
            reader.expect_end("param")

    @staticmethod
    def _expect_eof(reader: Unmarshaller) -> None:
        token = reader.next_significant()
        if token is not EOF:
            raise ParseError(f"Unexpected {describe(token)} after document element")

    def parse_call(self, data: Union[bytes, str]) -> MethodCall:
        """Decode a methodCall document

        Raises:
            ParseError: Malformed XML or a document outside the XML-RPC grammar
        """
        reader = self._unmarshaller(data)
        reader.expect_start("methodCall")
        reader.expect_start("methodName")
        method_name = reader.read_text("methodName").strip()
        if not method_name:
            raise ParseError("Empty <methodName>")

        params: List[Any] = []
        token = reader.next_significant()
        if isinstance(token, StartElement) and token.name == "params":
            params = self._read_params(reader)
            reader.expect_end("methodCall")
        elif not (isinstance(token, EndElement) and token.name == "methodCall"):
            raise ParseError(f"Unexpected {describe(token)} in <methodCall>")
        self._expect_eof(reader)
        return MethodCall(method_name, params)

    def parse_response(self, data: Union[bytes, str]) -> MethodResponse:
        """Decode a methodResponse document

        Raises:
            ParseError: Malformed XML, a malformed fault struct, or a response
                holding both a value and a fault
        """
        reader = self._unmarshaller(data)
        reader.expect_start("methodResponse")
        token = reader.next_significant()

        if isinstance(token, StartElement) and token.name == "params":
            params = self._read_params(reader)
            if len(params) != 1:
                raise ParseError(f"Response must hold exactly one param, found {len(params)}")
            response = MethodResponse.success(params[0])
        elif isinstance(token, StartElement) and token.name == "fault":
            struct = reader.read_value()
            reader.expect_end("fault")
            response = MethodResponse.failure(Fault.from_struct(struct))
        else:
            raise ParseError(f"Expected <params> or <fault>, found {describe(token)}")

        token = reader.next_significant()
        if isinstance(token, StartElement) and token.name in ("params", "fault"):
            raise ParseError("Response holds both a value and a fault")
        if not isinstance(token, EndElement) or token.name != "methodResponse":
            raise ParseError(f"Expected </methodResponse>, found {describe(token)}")
        self._expect_eof(reader)
        return response

    # Extensions

    def check_value(self, value: Any) -> None:
        """Raise EncodingError if value would not encode under this engine's config"""
        self._marshaller.write_value(self._writer_class(), value)

    def check_slot(self, value: Any) -> None:
        """Raise EncodingError if value would not encode as a multicall result slot

        Slots sit two arrays deep in the response (the result list, then the
        one-element slot), so nesting is checked from there.
        """
        self._marshaller.write_value(self._writer_class(), [value], depth=1)

    def run_multicall(self,
                      dispatch: Callable[[str, List[Any]], Any],
                      calls: Any,
                      check: Optional[Callable[[Any], None]] = None) -> List[Any]:
        """Execute a system.multicall batch sequentially and in order

        Args:
            dispatch: Callable resolving (method_name, params) to a value or raising Fault
            calls: Decoded array of {methodName, params} structs
            check: Slot result validator, defaults to check_slot

        Returns:
            List with one slot per call: [value] on success, a fault struct otherwise

        Raises:
            Fault: calls is not an array
        """
        if not isinstance(calls, list):
            raise Fault(FAULT_INVALID_PARAMS, "system.multicall expects an array of structs")
        check = check or self.check_slot

        results: List[Any] = []
        for index, raw in enumerate(calls):
            try:
                item = MulticallItem.from_value(raw)
                if item.method_name == MULTICALL:
                    raise Fault(FAULT_SYSTEM_ERROR, "Recursive system.multicall is forbidden")
                value = dispatch(item.method_name, item.params)
                try:
                    check(value)
                except EncodingError as e:
                    raise Fault(FAULT_INTERNAL_ERROR,
                                f"Failed to encode result of {item.method_name}: {e}") from e
                except Exception as e:
                    raise Fault(FAULT_INTERNAL_ERROR,
                                f"Internal error encoding result of {item.method_name}: "
                                f"{type(e).__name__}") from e
                results.append([value])
            except Fault as fault:
                logger.debug(f"system.multicall slot {index} failed: {fault}")
                results.append(fault.to_struct())
        return results
