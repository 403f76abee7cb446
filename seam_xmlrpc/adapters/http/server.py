"""
Standalone HTTP server adapter

Runs WSGIApplication on a threaded wsgiref server, one thread per request.
"""

import logging
import threading
from socketserver import ThreadingMixIn
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from seam_xmlrpc.adapters.adapter_interface import ServerAdapterInterface
from seam_xmlrpc.adapters.http.wsgi import DEFAULT_MAX_CONTENT_LENGTH, WSGIApplication

logger = logging.getLogger(__name__)


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        logger.debug(f"{self.address_string()} - {format % args}")


class StandaloneServer(ServerAdapterInterface):
    """HTTP listener hosting a Server session

    Args:
        server: Server session
        host: Bind address
        port: Bind port (0 picks a free port, see .port)
        path: Unused by dispatch; kept for URL construction
    """

    def __init__(self, server, host: str = "127.0.0.1", port: int = 8080,
                 path: str = "/RPC2", max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH):
        self.server = server
        self.path = path
        self.app = WSGIApplication(server, max_content_length)
        self.httpd = make_server(host, port, self.app,
                                 server_class=_ThreadingWSGIServer,
                                 handler_class=_QuietHandler)
        self.host = host
        self.port = self.httpd.server_port
        self.server_thread = None
        self._serving = False
        logger.info(f"HTTP server bound to {host}:{self.port}")

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}{self.path}"

    def start(self, threaded: bool = True):
        """Start the server

        Args:
            threaded: Whether to run in a background thread
        """
        self._serving = True
        if threaded:
            self.server_thread = threading.Thread(target=self.httpd.serve_forever, name="xmlrpc-http")
            self.server_thread.daemon = True
            self.server_thread.start()
            logger.info("HTTP server started in background thread")
        else:
            logger.info("HTTP server started in main thread")
            self.httpd.serve_forever()

    def stop(self):
        """Stop the server and close the listening socket"""
        if self._serving:
            # shutdown() blocks unless serve_forever is running
            self.httpd.shutdown()
            self._serving = False
        self.httpd.server_close()
        if self.server_thread is not None:
            self.server_thread.join(timeout=1.0)
            self.server_thread = None
        logger.info("HTTP server stopped")
