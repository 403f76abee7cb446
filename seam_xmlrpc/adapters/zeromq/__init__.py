"""
ZeroMQ Adapter Package

ZeroMQ-based client transport and server adapter carrying XML-RPC documents
as single frames over REQ/REP sockets.
"""

from seam_xmlrpc.adapters.zeromq.client import ZeroMQTransport
from seam_xmlrpc.adapters.zeromq.server import ZeroMQServer

__all__ = ["ZeroMQTransport", "ZeroMQServer"]
