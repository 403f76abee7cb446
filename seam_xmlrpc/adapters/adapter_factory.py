"""
Adapter factory

Creates client transports and server adapters (loopback, ZeroMQ, HTTP) from a
type name and a plain configuration mapping.
"""

from typing import Dict, Any

from seam_xmlrpc.adapters.adapter_interface import ClientTransportInterface, ServerAdapterInterface
from seam_xmlrpc.adapters.loopback import LoopbackTransport
from seam_xmlrpc.adapters.zeromq.client import ZeroMQTransport
from seam_xmlrpc.adapters.zeromq.server import ZeroMQServer
from seam_xmlrpc.adapters.http.client import HTTPTransport
from seam_xmlrpc.adapters.http.server import StandaloneServer


class AdapterType:
    """Adapter type constants"""
    LOOPBACK = "loopback"
    ZEROMQ = "zeromq"
    HTTP = "http"


class AdapterFactory:
    """Adapter factory, used to create transport and server adapter instances"""

    @staticmethod
    def create_transport(adapter_type: str, config: Dict[str, Any] = None) -> ClientTransportInterface:
        """Create a client transport

        Args:
            adapter_type: Adapter type, "loopback", "zeromq" or "http"
            config: Adapter configuration parameters

        Returns:
            ClientTransportInterface: Transport instance

        Raises:
            ValueError: Invalid adapter type or missing required setting
        """
        if config is None:
            config = {}

        if adapter_type.lower() == AdapterType.LOOPBACK:
            if "server" not in config:
                raise ValueError("loopback transport requires a 'server' session")
            return LoopbackTransport(config["server"])
        elif adapter_type.lower() == AdapterType.ZEROMQ:
            return ZeroMQTransport(
                server_address=config.get("server_address", "tcp://localhost:5555"),
                timeout_ms=config.get("timeout_ms", 5000)
            )
        elif adapter_type.lower() == AdapterType.HTTP:
            return HTTPTransport(
                url=config.get("url", "http://localhost:8080/RPC2"),
                user=config.get("user"),
                password=config.get("password"),
                timeout=config.get("timeout", 30.0),
                verify=config.get("verify", True),
                proxies=config.get("proxies"),
                headers=config.get("headers")
            )
        else:
            raise ValueError(f"Invalid adapter type: {adapter_type}")

    @staticmethod
    def create_server(adapter_type: str, server, config: Dict[str, Any] = None) -> ServerAdapterInterface:
        """Create a server adapter hosting a Server session

        Args:
            adapter_type: Adapter type, "zeromq" or "http"
            server: Server session answering requests
            config: Adapter configuration parameters

        Returns:
            ServerAdapterInterface: Server adapter instance

        Raises:
            ValueError: Invalid adapter type
        """
        if config is None:
            config = {}

        if adapter_type.lower() == AdapterType.ZEROMQ:
            return ZeroMQServer(
                server,
                bind_address=config.get("bind_address", "tcp://*:5555"),
                poll_interval_ms=config.get("poll_interval_ms", 100)
            )
        elif adapter_type.lower() == AdapterType.HTTP:
            return StandaloneServer(
                server,
                host=config.get("host", "127.0.0.1"),
                port=config.get("port", 8080),
                path=config.get("path", "/RPC2")
            )
        else:
            raise ValueError(f"Invalid adapter type: {adapter_type}")
