"""
Dispatch table

Maps qualified method names to handlers. Names are resolved by splitting on the
last "." into (prefix, leaf) and looking the leaf up in the prefix group. Groups
only ever contain callables captured at registration time; an object's other
attributes are never consulted while dispatching.
"""

import inspect
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from seam_xmlrpc.errors import (
    Fault,
    FAULT_APPLICATION_ERROR,
    FAULT_INVALID_PARAMS,
    FAULT_METHOD_NOT_FOUND,
    FAULT_SYSTEM_ERROR,
)
from seam_xmlrpc.interface import Interface, MethodSignature, bind_declared, declared_methods
from seam_xmlrpc.protocol import (
    LIST_METHODS,
    METHOD_HELP,
    METHOD_SIGNATURE,
    MULTICALL,
    RESERVED_METHODS,
    ProtocolEngine,
)

logger = logging.getLogger(__name__)

SignatureSpec = Union[None, str, MethodSignature, Sequence[Union[str, MethodSignature]]]

# Order in which enabled system methods follow user methods in system.listMethods
SYSTEM_METHOD_ORDER = (LIST_METHODS, METHOD_SIGNATURE, METHOD_HELP, MULTICALL)


def _signatures(spec: SignatureSpec) -> Tuple[MethodSignature, ...]:
    if spec is None:
        return ()
    if isinstance(spec, (str, MethodSignature)):
        spec = [spec]
    return tuple(MethodSignature.parse(s) if isinstance(s, str) else s for s in spec)


@dataclass(frozen=True)
class HandlerEntry:
    """A registered handler; immutable once created"""
    qualified_name: str
    invoke: Callable[..., Any]
    signatures: Tuple[MethodSignature, ...] = ()
    help: Optional[str] = None
    call_signature: Optional[inspect.Signature] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.call_signature is None:
            try:
                object.__setattr__(self, "call_signature", inspect.signature(self.invoke))
            except (TypeError, ValueError):
                # some builtins expose no signature; arity is then unchecked
                pass

    @property
    def signature(self) -> Optional[MethodSignature]:
        return self.signatures[0] if self.signatures else None

    def accepts(self, params: Sequence[Any]) -> bool:
        if self.call_signature is None:
            return True
        try:
            self.call_signature.bind(*params)
        except TypeError:
            return False
        return True


class DispatchTable:
    """Registry of XML-RPC handlers

    Registration is expected at startup; lookups during dispatch are safe from
    many threads. Registration itself is serialized by an internal lock.
    """

    def __init__(self):
        self._groups: Dict[str, Dict[str, HandlerEntry]] = {}
        self._order: List[str] = []
        self._system: List[str] = []
        self._default_handler: Optional[Callable[..., Any]] = None
        self._lock = threading.Lock()

    @staticmethod
    def split_name(name: str) -> Tuple[str, str]:
        prefix, _, leaf = name.rpartition(".")
        return prefix, leaf

    def _store(self, entry: HandlerEntry, system: bool = False) -> None:
        name = entry.qualified_name
        if not name:
            raise ValueError("Method name must be a non-empty string")
        if not system and name in RESERVED_METHODS:
            raise ValueError(f"{name} is reserved for the built-in system methods")

        prefix, leaf = self.split_name(name)
        with self._lock:
            group = self._groups.setdefault(prefix, {})
            if leaf in group:
                logger.warning(f"Replacing existing handler for {name}")
            elif system:
                self._system.append(name)
            else:
                self._order.append(name)
            group[leaf] = entry
        logger.debug(f"Registered XML-RPC method: {name}")

    # Registration

    def add_handler(self,
                    name: str,
                    func: Callable[..., Any],
                    signature: SignatureSpec = None,
                    help: Optional[str] = None) -> HandlerEntry:
        """Register one callable under a qualified name

        Registering an existing name replaces the previous handler.

        Raises:
            ValueError: Empty or reserved name
            TypeError: func is not callable
        """
        if not callable(func):
            raise TypeError(f"Handler for {name} is not callable")
        entry = HandlerEntry(name, func, _signatures(signature), help)
        self._store(entry)
        return entry

    def add_object(self,
                   prefix: str,
                   obj: Any,
                   methods: Iterable[str],
                   signatures: Optional[Mapping[str, SignatureSpec]] = None,
                   help: Optional[Mapping[str, str]] = None) -> List[HandlerEntry]:
        """Expose an explicit allow-list of obj's own methods under prefix

        Only public methods declared directly on type(obj) may be listed;
        inherited methods are refused.

        Raises:
            ValueError: A listed name is not such a method
        """
        signatures = signatures or {}
        help = help or {}
        declared = set(declared_methods(obj))
        entries = []
        for method in methods:
            self._check_declared(obj, method, declared)
            name = f"{prefix}.{method}" if prefix else method
            entry = HandlerEntry(name, bind_declared(obj, method),
                                 _signatures(signatures.get(method)), help.get(method))
            self._store(entry)
            entries.append(entry)
        return entries

    def add_interface(self, iface: Interface, obj: Any) -> List[HandlerEntry]:
        """Expose the methods an Interface declares, bound to obj

        Raises:
            ValueError: An interface method is not declared directly on type(obj)
        """
        declared = set(declared_methods(obj))
        entries = []
        for method in iface.methods:
            self._check_declared(obj, method.attribute, declared)
            entry = HandlerEntry(iface.qualified(method.exposed_name),
                                 bind_declared(obj, method.attribute),
                                 tuple(method.signatures), method.help)
            self._store(entry)
            entries.append(entry)
        return entries

    @staticmethod
    def _check_declared(obj: Any, method: str, declared) -> None:
        if method not in declared:
            raise ValueError(
                f"{type(obj).__name__}.{method} is not a public method declared on the class"
            )

    def set_default_handler(self, func: Optional[Callable[..., Any]]) -> None:
        """Handler called as func(name, *params) when no registered method fits"""
        self._default_handler = func

    def add_introspection(self) -> None:
        """Enable system.listMethods, system.methodSignature and system.methodHelp"""
        self._store(HandlerEntry(
            LIST_METHODS, self.list_methods,
            _signatures("array listMethods()"),
            "List the names of all methods this server provides",
        ), system=True)
        self._store(HandlerEntry(
            METHOD_SIGNATURE, self.method_signature,
            _signatures("array methodSignature(string)"),
            "Return the signatures recorded for a method",
        ), system=True)
        self._store(HandlerEntry(
            METHOD_HELP, self.method_help,
            _signatures("string methodHelp(string)"),
            "Return the help text recorded for a method",
        ), system=True)

    def add_multicall(self, engine: ProtocolEngine) -> None:
        """Enable system.multicall, executed through this table by engine"""
        def multicall(calls):
            return engine.run_multicall(self.dispatch, calls)

        self._store(HandlerEntry(
            MULTICALL, multicall,
            _signatures("array multicall(array)"),
            "Execute several calls in one request; returns one result or fault per call",
        ), system=True)

    # Lookup

    def get(self, name: str) -> Optional[HandlerEntry]:
        prefix, leaf = self.split_name(name)
        group = self._groups.get(prefix)
        if group is None:
            return None
        return group.get(leaf)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def list_methods(self) -> List[str]:
        system = [name for name in SYSTEM_METHOD_ORDER if name in self._system]
        return list(self._order) + system

    def method_signature(self, name: str) -> List[List[str]]:
        entry = self._introspected(name)
        if not entry.signatures:
            raise Fault(FAULT_SYSTEM_ERROR, f"No signature recorded for method {name}")
        return [s.to_value() for s in entry.signatures]

    def method_help(self, name: str) -> str:
        return self._introspected(name).help or ""

    def _introspected(self, name: Any) -> HandlerEntry:
        if not isinstance(name, str):
            raise Fault(FAULT_INVALID_PARAMS, "Method name must be a string")
        entry = self.get(name)
        if entry is None:
            raise Fault(FAULT_METHOD_NOT_FOUND, f"Method {name} not found")
        return entry

    # Dispatch

    def dispatch(self, name: str, params: Sequence[Any]) -> Any:
        """Invoke the handler for name

        Returns:
            The handler's result

        Raises:
            Fault: Raised or returned by the handler, or synthesized for
                not-found, arity mismatch and uncaught exceptions
        """
        entry = self.get(name)
        if entry is None:
            return self._fallback(name, params, FAULT_METHOD_NOT_FOUND,
                                  f"Method {name} not found")
        if not entry.accepts(params):
            return self._fallback(name, params, FAULT_INVALID_PARAMS,
                                  f"Wrong number of parameters for {name}: got {len(params)}")
        try:
            result = entry.invoke(*params)
        except Fault:
            raise
        except Exception as e:
            logger.error(f"Error executing method {name}: {e}")
            raise Fault(FAULT_APPLICATION_ERROR,
                        f"Uncaught exception in method {name}: {type(e).__name__}: {e}") from e
        if isinstance(result, Fault):
            raise result
        return result

    def _fallback(self, name: str, params: Sequence[Any], code: int, message: str) -> Any:
        if self._default_handler is None:
            logger.debug(f"Dispatch failed: {message}")
            raise Fault(code, message)
        try:
            result = self._default_handler(name, *params)
        except Fault:
            raise
        except Exception as e:
            logger.warning(f"Default handler failed for {name}: {e}")
            raise Fault(FAULT_METHOD_NOT_FOUND,
                        f"Method {name} missing or wrong number of parameters") from e
        if isinstance(result, Fault):
            raise result
        return result
