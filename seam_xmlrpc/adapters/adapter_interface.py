"""
Transport adapter interfaces

The XML-RPC core only needs a client transport that moves request bytes to a
server and returns the response bytes, and host adapters that feed request
bodies into a Server session. Every adapter (loopback, ZeroMQ, HTTP) implements
these interfaces so sessions never depend on a concrete transport.
"""

import abc


class ClientTransportInterface(abc.ABC):
    """Client transport interface, defines methods all client transports must implement"""

    @abc.abstractmethod
    def send(self, data: bytes) -> bytes:
        """Deliver one request document and wait for the response document

        Args:
            data: Encoded methodCall document

        Returns:
            bytes: Encoded methodResponse document

        Raises:
            TransportError: Delivery failed, timed out, or the peer answered
                outside the XML-RPC contract
        """
        pass

    @abc.abstractmethod
    def close(self) -> None:
        """Close connections and release resources"""
        pass


class ServerAdapterInterface(abc.ABC):
    """Host adapter interface, defines methods all server adapters must implement"""

    @abc.abstractmethod
    def start(self, threaded: bool = True):
        """Start serving

        Args:
            threaded: Whether to run in a background thread
        """
        pass

    @abc.abstractmethod
    def stop(self):
        """Stop serving"""
        pass
