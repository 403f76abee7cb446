"""
Transport Adapters Module

Adapter implementations carrying XML-RPC documents between Client and Server sessions:
- loopback: in-process, no sockets
- zeromq: REQ/REP sockets
- http: requests client, WSGI application, standalone threaded server
"""

from .adapter_factory import AdapterFactory, AdapterType
from .adapter_interface import ClientTransportInterface, ServerAdapterInterface
from .loopback import LoopbackTransport

__all__ = [
    "AdapterFactory",
    "AdapterType",
    "ClientTransportInterface",
    "ServerAdapterInterface",
    "LoopbackTransport"
]
