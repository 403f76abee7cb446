"""
Seam XML-RPC

XML-RPC client and server built from three layers:

1. Codec: native values <-> the XML-RPC value grammar, with the optional nil
   and i8 extensions enabled through CapabilityConfig
2. Protocol Engine: methodCall / methodResponse / fault documents plus the
   system.multicall extension
3. Dispatch Table: explicit handler registration, introspection
   (system.listMethods, system.methodSignature, system.methodHelp)

Client and Server sessions orchestrate these over pluggable transports
(loopback, ZeroMQ, HTTP). All sessions emit OpenTelemetry spans and metrics.
"""

__version__ = "0.1.0"

from seam_xmlrpc.config import CapabilityConfig, ClientConfig, ServerConfig
from seam_xmlrpc.errors import (
    EncodingError,
    Fault,
    ParseError,
    TransportError,
    XMLRPCError,
)
from seam_xmlrpc.value import DateTime, TypeTag
from seam_xmlrpc.codec import decode, encode
from seam_xmlrpc.protocol import MethodCall, MethodResponse, MulticallItem, ProtocolEngine
from seam_xmlrpc.interface import Interface, MethodSignature, interface, meth, public_methods
from seam_xmlrpc.dispatch import DispatchTable, HandlerEntry
from seam_xmlrpc.server import Server
from seam_xmlrpc.client import Client

__all__ = [
    "CapabilityConfig",
    "ClientConfig",
    "ServerConfig",
    "EncodingError",
    "Fault",
    "ParseError",
    "TransportError",
    "XMLRPCError",
    "DateTime",
    "TypeTag",
    "decode",
    "encode",
    "MethodCall",
    "MethodResponse",
    "MulticallItem",
    "ProtocolEngine",
    "Interface",
    "MethodSignature",
    "interface",
    "meth",
    "public_methods",
    "DispatchTable",
    "HandlerEntry",
    "Server",
    "Client",
]
