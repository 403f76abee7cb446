"""
ZeroMQ server adapter

Hosts a Server session behind a ZeroMQ REP socket. Each request frame is one
methodCall document; each reply frame is the session's methodResponse.
"""

import zmq
import logging
import threading
import time

from seam_xmlrpc.adapters.adapter_interface import ServerAdapterInterface
from seam_xmlrpc.errors import Fault, FAULT_INTERNAL_ERROR
from seam_xmlrpc.telemetry.metrics import record_latency, increment_counter

logger = logging.getLogger(__name__)


class ZeroMQServer(ServerAdapterInterface):
    """
    ZeroMQ server adapter
    Requests are processed one at a time in arrival order.
    """

    def __init__(self,
                 server,
                 bind_address: str = "tcp://*:5555",
                 poll_interval_ms: int = 100):
        """Initialize ZeroMQ server

        Args:
            server: Server session answering the requests
            bind_address: Request socket bind address ("tcp://127.0.0.1:*" picks a free port)
            poll_interval_ms: How often the loop checks for stop()
        """
        self.server = server
        self.bind_address = bind_address
        self.poll_interval_ms = poll_interval_ms
        self.running = False
        self.server_thread = None
        self.context = zmq.Context()

        self.socket = self.context.socket(zmq.REP)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.bind(bind_address)
        self.endpoint = self.socket.getsockopt_string(zmq.LAST_ENDPOINT)

        logger.info(f"ZeroMQ server bound to {self.endpoint}")

    def __del__(self):
        self.close()

    def close(self):
        """Stop the loop and release the socket and context"""
        self.stop()
        if getattr(self, "socket", None) is not None:
            self.socket.close()
            self.socket = None
        if getattr(self, "context", None) is not None:
            self.context.term()
            self.context = None

    def start(self, threaded: bool = True):
        """Start the server

        Args:
            threaded: Whether to run in a background thread
        """
        self.running = True

        if threaded:
            self.server_thread = threading.Thread(target=self._run_server, name="xmlrpc-zeromq")
            self.server_thread.daemon = True
            self.server_thread.start()
            logger.info("ZeroMQ server started in background thread")
        else:
            logger.info("ZeroMQ server started in main thread")
            self._run_server()

    def stop(self):
        """Stop the server"""
        self.running = False
        if getattr(self, "server_thread", None) is not None:
            self.server_thread.join(timeout=1.0)
            self.server_thread = None
            logger.info("ZeroMQ server stopped")

    def _run_server(self):
        """Server main loop"""
        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)
        logger.info("ZeroMQ server accepting requests")

        while self.running:
            awaiting_reply = False
            try:
                if not dict(poller.poll(self.poll_interval_ms)).get(self.socket):
                    continue

                request_bytes = self.socket.recv()
                awaiting_reply = True
                start_time = time.time()
                increment_counter("xmlrpc.transport.zeromq.received", 1)

                # Server.process always yields a response document
                response_bytes = self.server.process(request_bytes)
                self.socket.send(response_bytes)
                awaiting_reply = False

                latency_ms = (time.time() - start_time) * 1000
                record_latency("xmlrpc.transport.zeromq.server_latency", latency_ms)
                logger.debug(f"Response sent, took {latency_ms:.2f}ms")

            except zmq.error.ZMQError as e:
                if not self.running:
                    break
                logger.error(f"Error in server loop: {e}")
                increment_counter("xmlrpc.transport.zeromq.errors", 1, {"type": "loop_error"})
                time.sleep(1.0)
            except Exception as e:
                logger.error(f"Unexpected error handling request: {type(e).__name__}: {e}")
                increment_counter("xmlrpc.transport.zeromq.errors", 1, {"type": "internal_error"})
                if awaiting_reply:
                    # REP socket must answer before it can receive again
                    try:
                        self.socket.send(self.server.engine.dump_fault(
                            Fault(FAULT_INTERNAL_ERROR, "Internal server error")))
                    except zmq.error.ZMQError as send_error:
                        logger.error(f"Failed to send fault reply: {send_error}")
