#!/usr/bin/env python
"""
HTTP Client Example

Calls the methods served by http_server_example.py using every client call style.
"""

import sys
import os
import logging

# Add project root directory to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from seam_xmlrpc import Client, Fault
from seam_xmlrpc.adapters.http import HTTPTransport

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def main():
    url = os.getenv("XMLRPC_URL", "http://127.0.0.1:8080/RPC2")

    with Client(HTTPTransport(url)) as client:
        result = client.call("sample.sumAndDifference", 5, 3)
        print(f"Sum: {result['sum']}, Difference: {result['difference']}")

        try:
            client.call("num.div", 1, 0)
        except Fault as e:
            print(f"Error: {e.faultCode} {e.faultString}")

        ok, result = client.call2("num.div", 10, 5)
        print(f"call2 -> ok={ok}, result={result}")

        num = client.proxy("num")
        print(f"proxy add -> {num.add(4, 5)}")

        print(f"methods: {client.call('system.listMethods')}")
        print(f"multicall: {client.multicall(('num.add', 1, 2), ('num.div', 1, 0))}")

        future = client.call_async("num.add", 20, 22)
        print(f"async -> {future.result(timeout=5)}")


if __name__ == "__main__":
    main()
