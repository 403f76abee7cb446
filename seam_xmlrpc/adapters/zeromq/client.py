"""
ZeroMQ client transport

Carries XML-RPC documents over a ZeroMQ REQ socket, one request frame and one
response frame per call.
"""

import zmq
import time
import logging
import threading

from seam_xmlrpc.adapters.adapter_interface import ClientTransportInterface
from seam_xmlrpc.errors import TransportError
from seam_xmlrpc.telemetry.metrics import record_latency, increment_counter

logger = logging.getLogger(__name__)


class ZeroMQTransport(ClientTransportInterface):
    """
    ZeroMQ client transport
    A REQ socket allows one outstanding request, so sends are serialized by a lock.
    """

    def __init__(self,
                 server_address: str = "tcp://localhost:5555",
                 timeout_ms: int = 5000):
        """Initialize ZeroMQ transport

        Args:
            server_address: ZeroMQ server address
            timeout_ms: Request timeout (milliseconds)
        """
        self.server_address = server_address
        self.timeout_ms = timeout_ms
        self.context = zmq.Context()
        self.socket = None
        self._lock = threading.Lock()
        self._connect()
        logger.info(f"ZeroMQ transport connected to {server_address}")

    def _connect(self):
        self.socket = self.context.socket(zmq.REQ)
        self.socket.setsockopt(zmq.RCVTIMEO, self.timeout_ms)
        self.socket.setsockopt(zmq.SNDTIMEO, self.timeout_ms)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.connect(self.server_address)

    def _reset(self):
        # a REQ socket that missed its reply cannot send again
        self.socket.close()
        self._connect()

    def __del__(self):
        self.close()

    def close(self):
        """Close the socket and the context"""
        if getattr(self, "socket", None) is not None:
            self.socket.close()
            self.socket = None
        if getattr(self, "context", None) is not None:
            self.context.term()
            self.context = None

    def send(self, data: bytes) -> bytes:
        """Send one request document and wait for the response document

        Raises:
            TransportError: Timeout, closed transport, or socket failure
        """
        with self._lock:
            if self.socket is None:
                raise TransportError("ZeroMQ transport is closed")

            start_time = time.time()
            try:
                self.socket.send(data)
                increment_counter("xmlrpc.transport.zeromq.requests", 1)
                response = self.socket.recv()
            except zmq.error.Again:
                latency_ms = (time.time() - start_time) * 1000
                logger.error(f"Request timed out after {latency_ms:.2f}ms")
                increment_counter("xmlrpc.transport.zeromq.errors", 1, {"type": "timeout"})
                self._reset()
                raise TransportError(f"ZeroMQ request timed out ({self.timeout_ms}ms)")
            except zmq.error.ZMQError as e:
                logger.error(f"ZeroMQ error: {e}")
                increment_counter("xmlrpc.transport.zeromq.errors", 1, {"type": "zmq_error"})
                self._reset()
                raise TransportError(f"ZeroMQ connection error: {e}") from e

            latency_ms = (time.time() - start_time) * 1000
            record_latency("xmlrpc.transport.zeromq.latency", latency_ms)
            logger.debug(f"Received response, latency: {latency_ms:.2f}ms")
            return response
