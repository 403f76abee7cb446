"""
XML-RPC server session

Turns request bytes into response bytes. Whatever goes wrong while decoding,
dispatching or encoding, the caller always gets a well-formed methodResponse
back: XML-RPC has no transport-level error channel of its own.
"""

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional

from opentelemetry import trace

from seam_xmlrpc.config import ServerConfig
from seam_xmlrpc.dispatch import DispatchTable, HandlerEntry, SignatureSpec
from seam_xmlrpc.errors import EncodingError, Fault, ParseError, FAULT_INTERNAL_ERROR
from seam_xmlrpc.interface import Interface
from seam_xmlrpc.protocol import ProtocolEngine
from seam_xmlrpc.telemetry.metrics import increment_counter, timed
from seam_xmlrpc.telemetry.tracer import create_span

logger = logging.getLogger(__name__)


class Server:
    """Transport-independent XML-RPC server

    Host adapters (ZeroMQServer, WSGIApplication, StandaloneServer) feed raw
    request bodies into process() and send back what it returns.
    """

    def __init__(self, config: Optional[ServerConfig] = None, table: Optional[DispatchTable] = None):
        self.config = config or ServerConfig.default()
        self.engine = ProtocolEngine(self.config.capabilities, self.config.parser, self.config.writer)
        self.table = table or DispatchTable()
        if self.config.enable_introspection:
            self.add_introspection()
        if self.config.enable_multicall:
            self.add_multicall()

    # Registration, forwarded to the dispatch table

    def add_handler(self, name: str, func: Callable[..., Any],
                    signature: SignatureSpec = None, help: Optional[str] = None) -> HandlerEntry:
        return self.table.add_handler(name, func, signature, help)

    def add_object(self, prefix: str, obj: Any, methods: Iterable[str],
                   signatures: Optional[Mapping[str, SignatureSpec]] = None,
                   help: Optional[Mapping[str, str]] = None) -> List[HandlerEntry]:
        return self.table.add_object(prefix, obj, methods, signatures, help)

    def add_interface(self, iface: Interface, obj: Any) -> List[HandlerEntry]:
        return self.table.add_interface(iface, obj)

    def set_default_handler(self, func: Optional[Callable[..., Any]]) -> None:
        self.table.set_default_handler(func)

    def add_introspection(self) -> None:
        self.table.add_introspection()

    def add_multicall(self) -> None:
        self.table.add_multicall(self.engine)

    def method(self, name: str, signature: SignatureSpec = None, help: Optional[str] = None):
        """Decorator form of add_handler"""
        def decorator(func):
            self.add_handler(name, func, signature, help)
            return func
        return decorator

    # Processing

    def process(self, data: bytes) -> bytes:
        """Handle one request document and return the response document

        Never raises: every failure is answered with a fault document.
        """
        try:
            call = self.engine.parse_call(data)
        except ParseError as e:
            logger.warning(f"Rejected malformed request: {e}")
            increment_counter("xmlrpc.server.errors", 1, {"type": "parse_error"})
            return self._fault_response(Fault(e.code, str(e)))
        except Exception as e:
            logger.error(f"Internal error decoding request: {type(e).__name__}: {e}")
            increment_counter("xmlrpc.server.errors", 1, {"type": "internal_error"})
            return self._fault_response(
                Fault(FAULT_INTERNAL_ERROR, f"Internal error decoding request: {type(e).__name__}"))

        method_name = call.method_name
        increment_counter("xmlrpc.server.requests", 1, {"method": method_name})
        logger.debug(f"Dispatching {method_name} with {len(call.params)} params")

        with create_span(f"xmlrpc.server {method_name}",
                         {"rpc.system": "xmlrpc", "rpc.method": method_name},
                         kind=trace.SpanKind.SERVER,
                         tracer_name=self.config.service_name):
            with timed("xmlrpc.server.latency", {"method": method_name}):
                try:
                    result = self.table.dispatch(method_name, call.params)
                except Fault as fault:
                    increment_counter("xmlrpc.server.faults", 1,
                                      {"method": method_name, "code": str(fault.code)})
                    return self._fault_response(fault)
                except Exception as e:
                    logger.error(f"Internal error dispatching {method_name}: {e}")
                    increment_counter("xmlrpc.server.errors", 1, {"type": "internal_error"})
                    return self._fault_response(
                        Fault(FAULT_INTERNAL_ERROR, f"Internal error: {e}"))

                try:
                    return self.engine.dump_response(result)
                except EncodingError as e:
                    logger.error(f"Cannot encode result of {method_name}: {e}")
                    increment_counter("xmlrpc.server.errors", 1, {"type": "encoding_error"})
                    return self._fault_response(
                        Fault(FAULT_INTERNAL_ERROR, f"Failed to encode result of {method_name}: {e}"))
                except Exception as e:
                    logger.error(f"Internal error encoding result of {method_name}: {type(e).__name__}: {e}")
                    increment_counter("xmlrpc.server.errors", 1, {"type": "internal_error"})
                    return self._fault_response(
                        Fault(FAULT_INTERNAL_ERROR,
                              f"Internal error encoding result of {method_name}: {type(e).__name__}"))

    def _fault_response(self, fault: Fault) -> bytes:
        try:
            return self.engine.dump_fault(fault)
        except Exception as e:
            logger.error(f"Cannot encode fault {fault!r}: {e}")
            return self.engine.dump_fault(
                Fault(FAULT_INTERNAL_ERROR, "Handler raised an unencodable fault"))
