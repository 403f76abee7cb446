#!/usr/bin/env python
"""
HTTP Server Example

Serves a few XML-RPC methods over HTTP with introspection and multicall enabled.
"""

import sys
import os
import signal
import logging

# Add project root directory to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from seam_xmlrpc import Fault, Server, ServerConfig, interface, meth
from seam_xmlrpc.adapters.http import StandaloneServer
from seam_xmlrpc.telemetry.tracer import setup_tracer
from seam_xmlrpc.telemetry.metrics import setup_metrics

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class Num:
    INTERFACE = interface(
        "num",
        meth("int add(int, int)", "Add two numbers"),
        meth("int div(int, int)", "Divide two numbers"),
    )

    def add(self, a, b):
        return a + b

    def div(self, a, b):
        if b == 0:
            raise Fault(1, "division by zero")
        return a // b


def sum_and_difference(a, b):
    return {"sum": a + b, "difference": a - b}


def main():
    if os.getenv("OTLP_ENDPOINT"):
        setup_tracer("seam_xmlrpc.example", os.environ["OTLP_ENDPOINT"])
        setup_metrics("seam_xmlrpc.example", os.environ["OTLP_ENDPOINT"])

    server = Server(ServerConfig(enable_introspection=True, enable_multicall=True))
    server.add_handler("sample.sumAndDifference", sum_and_difference,
                       "struct sumAndDifference(int, int)", "Return the sum and difference of two integers")
    server.add_interface(Num.INTERFACE, Num())
    server.set_default_handler(
        lambda name, *args: Fault(-99, f"Method {name} missing or wrong number of parameters!")
    )

    port = int(os.getenv("PORT", "8080"))
    http = StandaloneServer(server, host="127.0.0.1", port=port)

    def handle_signal(signum, frame):
        logger.info("Shutting down")
        http.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info(f"Serving XML-RPC at {http.url}")
    http.start(threaded=True)
    signal.pause()


if __name__ == "__main__":
    main()
