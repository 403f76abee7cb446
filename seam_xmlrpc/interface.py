"""
Handler interfaces

Explicit descriptions of what an object exposes over XML-RPC. An Interface is
an allow-list: only the methods it names are ever reachable remotely.

    NUM = interface("num",
                    meth("int add(int, int)", "Add two numbers"),
                    meth("int div(int, int)", "Divide two numbers"))
    table.add_interface(NUM, Num())
"""

import re
import inspect
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from seam_xmlrpc.value import TypeTag

_SIGNATURE_RE = re.compile(r"^\s*([\w.]+)\s+(\w+)\s*\(([^)]*)\)\s*$")


@dataclass(frozen=True)
class MethodSignature:
    """Descriptive signature answered by system.methodSignature"""
    return_type: TypeTag
    param_types: Tuple[TypeTag, ...] = ()
    name: str = ""

    @classmethod
    def parse(cls, text: str) -> "MethodSignature":
        """Parse a declaration such as ``"int add(int, int)"``

        Raises:
            ValueError: Malformed declaration or unknown type name
        """
        match = _SIGNATURE_RE.match(text)
        if not match:
            raise ValueError(f"Malformed method signature: {text!r}")
        return_name, name, params = match.groups()
        param_types = tuple(TypeTag.from_name(p) for p in params.split(",") if p.strip())
        return cls(TypeTag.from_name(return_name), param_types, name)

    def to_value(self) -> List[str]:
        """Introspection form: [return type, param types...]"""
        return [self.return_type.value] + [t.value for t in self.param_types]

    def __str__(self):
        params = ", ".join(t.value for t in self.param_types)
        return f"{self.return_type.value} {self.name}({params})"


@dataclass
class InterfaceMethod:
    """One exposed method of an Interface"""
    exposed_name: str
    attribute: str
    signatures: List[MethodSignature] = field(default_factory=list)
    help: Optional[str] = None


def meth(signature: str, help: Optional[str] = None, name: Optional[str] = None) -> InterfaceMethod:
    """Declare an interface method

    Args:
        signature: Declaration like "int add(int, int)"; its name is the exposed name
        help: Text returned by system.methodHelp
        name: Attribute on the handler object, defaults to the exposed name
    """
    parsed = MethodSignature.parse(signature)
    return InterfaceMethod(parsed.name, name or parsed.name, [parsed], help)


class Interface:
    """Named group of explicitly exposed methods"""

    def __init__(self, prefix: str):
        self.prefix = prefix
        self._methods: List[InterfaceMethod] = []

    def meth(self, signature: str, help: Optional[str] = None, name: Optional[str] = None) -> "Interface":
        """Add a method; repeating an exposed name adds another signature"""
        self.add_method(meth(signature, help, name))
        return self

    def add_method(self, method: InterfaceMethod) -> None:
        for existing in self._methods:
            if existing.exposed_name == method.exposed_name:
                if existing.attribute != method.attribute:
                    raise ValueError(
                        f"{method.exposed_name} is already bound to attribute {existing.attribute}"
                    )
                existing.signatures.extend(method.signatures)
                existing.help = method.help or existing.help
                return
        self._methods.append(method)

    @property
    def methods(self) -> List[InterfaceMethod]:
        return list(self._methods)

    def qualified(self, exposed_name: str) -> str:
        return f"{self.prefix}.{exposed_name}" if self.prefix else exposed_name

    def __repr__(self):
        return f"Interface({self.prefix!r}, {[m.exposed_name for m in self._methods]})"


def interface(prefix: str, *methods: InterfaceMethod) -> Interface:
    result = Interface(prefix)
    for method in methods:
        result.add_method(method)
    return result


def declared_methods(obj: Any) -> List[str]:
    """Public callables declared directly on type(obj), in declaration order

    Inherited members (including everything from object) are never included.
    """
    names = []
    for name, attr in vars(type(obj)).items():
        if name.startswith("_"):
            continue
        if inspect.isfunction(attr) or isinstance(attr, (staticmethod, classmethod)):
            names.append(name)
    return names


def bind_declared(obj: Any, name: str):
    """Bind the method declared on type(obj) as name to obj

    Looks the attribute up on the class and binds it through the descriptor
    protocol, so an instance attribute of the same name is never picked up.
    """
    cls = type(obj)
    return vars(cls)[name].__get__(obj, cls)


def public_methods(prefix: str, obj: Any) -> Interface:
    """Snapshot the public methods declared directly on obj's class"""
    result = Interface(prefix)
    for name in declared_methods(obj):
        result.add_method(InterfaceMethod(name, name))
    return result
