#!/usr/bin/env python
"""
Adapter Factory Example

Runs the same XML-RPC session over every adapter type the factory knows.
"""

import sys
import os
import time
import logging
from typing import Dict, Any

# Add project root directory to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from seam_xmlrpc import Client, Server
from seam_xmlrpc.adapters.adapter_factory import AdapterFactory, AdapterType


def setup_logging():
    """Setup logging configuration"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def run_echo_test(adapter_type: str, server_config: Dict[str, Any], client_config: Dict[str, Any]):
    """Run echo test using specified adapter"""
    print(f"\n=== Running test with {adapter_type} adapter ===")

    session = Server()
    session.add_handler("echo", lambda value: value)

    host = None
    if adapter_type != AdapterType.LOOPBACK:
        host = AdapterFactory.create_server(adapter_type, session, server_config)
        host.start(threaded=True)
    else:
        client_config = dict(client_config, server=session)

    try:
        with Client(AdapterFactory.create_transport(adapter_type, client_config)) as client:
            payload = {"message": "Hello, World!", "timestamp": time.time()}
            start_time = time.time()
            result = client.call("echo", payload)
            latency_ms = (time.time() - start_time) * 1000
            print(f"Echo result: {result} ({latency_ms:.2f}ms)")
    finally:
        if host is not None:
            host.stop()


def main():
    setup_logging()
    run_echo_test(AdapterType.LOOPBACK, {}, {})
    run_echo_test(AdapterType.ZEROMQ,
                  {"bind_address": "tcp://127.0.0.1:5555"},
                  {"server_address": "tcp://127.0.0.1:5555"})
    run_echo_test(AdapterType.HTTP,
                  {"host": "127.0.0.1", "port": 8080},
                  {"url": "http://127.0.0.1:8080/RPC2"})


if __name__ == "__main__":
    main()
