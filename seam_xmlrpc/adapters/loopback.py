"""
In-process loopback transport

Hands request bytes straight to a Server session in the same process. Useful
for tests and for embedding a service without any socket.
"""

import logging

from seam_xmlrpc.adapters.adapter_interface import ClientTransportInterface
from seam_xmlrpc.errors import TransportError

logger = logging.getLogger(__name__)


class LoopbackTransport(ClientTransportInterface):
    """Client transport calling Server.process directly"""

    def __init__(self, server):
        self.server = server
        self.closed = False

    def send(self, data: bytes) -> bytes:
        if self.closed:
            raise TransportError("Loopback transport is closed")
        logger.debug(f"Loopback request: {len(data)} bytes")
        return self.server.process(data)

    def close(self) -> None:
        self.closed = True
