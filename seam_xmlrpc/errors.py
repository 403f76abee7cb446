"""
XML-RPC error taxonomy

Local failures (ParseError, EncodingError, TransportError) derive from XMLRPCError.
Fault is protocol data: it travels on the wire and is raised on the client side.
"""

from typing import Any, Dict

# Reserved fault codes (XML-RPC server error code convention)
FAULT_NOT_WELL_FORMED = -32700
FAULT_UNSUPPORTED_ENCODING = -32701
FAULT_INVALID_XMLRPC = -32600
FAULT_METHOD_NOT_FOUND = -32601
FAULT_INVALID_PARAMS = -32602
FAULT_INTERNAL_ERROR = -32603
FAULT_APPLICATION_ERROR = -32500
FAULT_SYSTEM_ERROR = -32400

RESERVED_FAULT_CODES = frozenset([
    FAULT_NOT_WELL_FORMED,
    FAULT_UNSUPPORTED_ENCODING,
    FAULT_INVALID_XMLRPC,
    FAULT_METHOD_NOT_FOUND,
    FAULT_INVALID_PARAMS,
    FAULT_INTERNAL_ERROR,
    FAULT_APPLICATION_ERROR,
    FAULT_SYSTEM_ERROR,
])


class XMLRPCError(Exception):
    """Base class for local XML-RPC failures."""


class ParseError(XMLRPCError):
    """Raised when a document or value does not follow the XML-RPC grammar.

    Args:
        message: Description of the problem
        code: Fault code a server answers with when it meets this error
    """

    def __init__(self, message: str, code: int = FAULT_INVALID_XMLRPC):
        super().__init__(message)
        self.code = code


class EncodingError(XMLRPCError):
    """Raised when a value cannot be encoded under the active capabilities."""


class TransportError(XMLRPCError):
    """Raised by transports when bytes could not be delivered or received."""


class Fault(Exception):
    """An XML-RPC fault, raised by handlers and by Client.call.

    Args:
        code: Integer fault code (must fit in 32 bits)
        message: Human readable fault string
    """

    def __init__(self, code: int, message: str):
        super().__init__(code, message)
        self.code = code
        self.message = message

    @property
    def faultCode(self) -> int:
        return self.code

    @property
    def faultString(self) -> str:
        return self.message

    def to_struct(self) -> Dict[str, Any]:
        return {"faultCode": self.code, "faultString": self.message}

    @classmethod
    def from_struct(cls, struct: Dict[str, Any]) -> "Fault":
        """Build a Fault from a decoded fault struct.

        Raises:
            ParseError: The struct is not exactly {faultCode: int, faultString: str}
        """
        if not isinstance(struct, dict) or set(struct) != {"faultCode", "faultString"}:
            raise ParseError(f"Invalid fault structure: {struct!r}")
        code = struct["faultCode"]
        message = struct["faultString"]
        if isinstance(code, bool) or not isinstance(code, int):
            raise ParseError(f"faultCode must be an int, got {type(code).__name__}")
        if not isinstance(message, str):
            raise ParseError(f"faultString must be a string, got {type(message).__name__}")
        return cls(code, message)

    def __eq__(self, other):
        if not isinstance(other, Fault):
            return NotImplemented
        return self.code == other.code and self.message == other.message

    def __hash__(self):
        return hash((self.code, self.message))

    def __str__(self):
        return f"<Fault {self.code}: {self.message}>"

    def __repr__(self):
        return f"Fault({self.code!r}, {self.message!r})"
