"""
XML-RPC client session

    client = Client(HTTPTransport("http://localhost:8080/RPC2"))
    result = client.call("sample.sumAndDifference", 5, 3)

    ok, result = client.call2("test.div", 1, 0)
    if not ok:
        print(result.faultCode, result.faultString)

call() raises Fault for remote faults; call2() returns them. Both raise
ParseError when the response cannot be decoded and TransportError when the
transport fails, so callers can tell a refusal from a broken wire.
"""

import time
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, List, Optional, Sequence, Tuple, Union

from opentelemetry import trace

from seam_xmlrpc.adapters.adapter_interface import ClientTransportInterface
from seam_xmlrpc.config import ClientConfig
from seam_xmlrpc.errors import Fault, ParseError, XMLRPCError
from seam_xmlrpc.protocol import MULTICALL, MulticallItem, ProtocolEngine
from seam_xmlrpc.telemetry.metrics import increment_counter, record_latency
from seam_xmlrpc.telemetry.tracer import create_span

logger = logging.getLogger(__name__)

CallSpec = Union[Sequence[Any], MulticallItem]


class Client:
    """XML-RPC client bound to one transport

    Args:
        transport: Object implementing ClientTransportInterface
        config: Client configuration (capabilities, backends, async pool size)
    """

    def __init__(self, transport: ClientTransportInterface, config: Optional[ClientConfig] = None):
        self.transport = transport
        self.config = config or ClientConfig.default()
        self.engine = ProtocolEngine(self.config.capabilities, self.config.parser, self.config.writer)
        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Shut down the async pool and the transport"""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self.transport.close()

    # Synchronous calls

    def call(self, method: str, *params: Any) -> Any:
        """Call a remote method

        Returns:
            The decoded result

        Raises:
            Fault: The server answered with a fault
            ParseError: The response could not be decoded
            EncodingError: A parameter cannot be encoded
            TransportError: The transport failed
        """
        ok, result = self.call2(method, *params)
        if not ok:
            raise result
        return result

    def call2(self, method: str, *params: Any) -> Tuple[bool, Any]:
        """Call a remote method without raising on faults

        Returns:
            (True, result) on success, (False, Fault) when the server faulted
        """
        request = self.engine.dump_call(method, params)
        start_time = time.time()

        with create_span(f"xmlrpc.client {method}",
                         {"rpc.system": "xmlrpc", "rpc.method": method},
                         kind=trace.SpanKind.CLIENT):
            increment_counter("xmlrpc.client.requests", 1, {"method": method})
            logger.debug(f"Sending {method} ({len(request)} bytes)")
            try:
                response_bytes = self.transport.send(request)
            except XMLRPCError:
                increment_counter("xmlrpc.client.errors", 1, {"type": "transport", "method": method})
                raise

            record_latency("xmlrpc.client.latency", (time.time() - start_time) * 1000, {"method": method})

            try:
                response = self.engine.parse_response(response_bytes)
            except ParseError as e:
                logger.error(f"Invalid response to {method}: {e}")
                increment_counter("xmlrpc.client.errors", 1, {"type": "invalid_response", "method": method})
                raise

        if response.ok:
            increment_counter("xmlrpc.client.success", 1, {"method": method})
            return True, response.value

        logger.debug(f"{method} returned fault {response.fault.code}: {response.fault.message}")
        increment_counter("xmlrpc.client.faults", 1, {"method": method, "code": str(response.fault.code)})
        return False, response.fault

    # Asynchronous calls

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.async_workers,
                thread_name_prefix="xmlrpc-client",
            )
        return self._executor

    def call_async(self, method: str, *params: Any) -> "Future[Any]":
        """Run call() on the client's thread pool

        Independent async calls complete in no particular order.
        """
        return self._pool().submit(self.call, method, *params)

    def call2_async(self, method: str, *params: Any) -> "Future[Tuple[bool, Any]]":
        return self._pool().submit(self.call2, method, *params)

    # system.multicall

    @staticmethod
    def _multicall_items(calls: Sequence[CallSpec]) -> List[Any]:
        items = []
        for spec in calls:
            if not isinstance(spec, MulticallItem):
                if not spec:
                    raise ValueError("Each multicall entry needs at least a method name")
                spec = MulticallItem(spec[0], list(spec[1:]))
            items.append(spec.to_value())
        return items

    def multicall2(self, *calls: CallSpec) -> Tuple[bool, Any]:
        """Batch calls in a single system.multicall request

        Args:
            calls: (method, *params) tuples or MulticallItem instances

        Returns:
            (True, results) where failed slots hold Fault instances, or
            (False, Fault) when the server rejected the whole batch
        """
        ok, result = self.call2(MULTICALL, self._multicall_items(calls))
        if not ok:
            return False, result
        if not isinstance(result, list) or len(result) != len(calls):
            raise ParseError(f"system.multicall returned {result!r} for {len(calls)} calls")

        results = []
        for slot in result:
            if isinstance(slot, list) and len(slot) == 1:
                results.append(slot[0])
            elif isinstance(slot, dict):
                results.append(Fault.from_struct(slot))
            else:
                raise ParseError(f"Invalid system.multicall result slot: {slot!r}")
        return True, results

    def multicall(self, *calls: CallSpec) -> List[Any]:
        """Like multicall2 but raises Fault when the whole batch fails"""
        ok, result = self.multicall2(*calls)
        if not ok:
            raise result
        return result

    def multicall_async(self, *calls: CallSpec) -> "Future[List[Any]]":
        return self._pool().submit(self.multicall, *calls)

    # Proxies

    def proxy(self, prefix: Optional[str] = None, *args: Any) -> "Proxy":
        """Attribute-style access: client.proxy("sample").sumAndDifference(5, 3)"""
        return Proxy(self, prefix, args, "call")

    def proxy2(self, prefix: Optional[str] = None, *args: Any) -> "Proxy":
        return Proxy(self, prefix, args, "call2")

    def proxy_async(self, prefix: Optional[str] = None, *args: Any) -> "Proxy":
        return Proxy(self, prefix, args, "call_async")

    def proxy2_async(self, prefix: Optional[str] = None, *args: Any) -> "Proxy":
        return Proxy(self, prefix, args, "call2_async")


class Proxy:
    """Maps attribute access to remote method names

    Arguments given at creation are prepended to every call.
    """

    def __init__(self, client: Client, prefix: Optional[str], args: Sequence[Any], mode: str):
        self._client = client
        self._prefix = prefix
        self._args = tuple(args)
        self._mode = mode

    def _name(self, method: str) -> str:
        return f"{self._prefix}.{method}" if self._prefix else method

    def __getattr__(self, method: str):
        if method.startswith("__") and method.endswith("__"):
            raise AttributeError(method)
        return _ProxyMethod(self, self._name(method))

    def __repr__(self):
        return f"<Proxy {self._prefix or ''} via {self._mode}>"


class _ProxyMethod:
    """Callable remote method; further attribute access extends the name"""

    def __init__(self, proxy: Proxy, name: str):
        self._proxy = proxy
        self._name = name

    def __getattr__(self, method: str):
        if method.startswith("__") and method.endswith("__"):
            raise AttributeError(method)
        return _ProxyMethod(self._proxy, f"{self._name}.{method}")

    def __call__(self, *params: Any):
        call = getattr(self._proxy._client, self._proxy._mode)
        return call(self._name, *(self._proxy._args + params))
