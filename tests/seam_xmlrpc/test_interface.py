"""
Tests for handler interfaces and signatures
"""
import pytest

from seam_xmlrpc.interface import (
    Interface,
    MethodSignature,
    bind_declared,
    declared_methods,
    interface,
    meth,
    public_methods,
)
from seam_xmlrpc.value import TypeTag


class Base:
    def inherited(self):
        return "base"


class Calculator(Base):
    def add(self, a, b):
        return a + b

    def sub(self, a, b):
        return a - b

    @staticmethod
    def version():
        return "1.0"

    def _secret(self):
        return "hidden"

    label = "not callable"


class TestMethodSignature:

    def test_parse(self):
        sig = MethodSignature.parse("int add(int, int)")
        assert sig.name == "add"
        assert sig.return_type is TypeTag.INT32
        assert sig.param_types == (TypeTag.INT32, TypeTag.INT32)
        assert sig.to_value() == ["int", "int", "int"]
        assert str(sig) == "int add(int, int)"

    def test_parse_no_params(self):
        sig = MethodSignature.parse("array listMethods()")
        assert sig.to_value() == ["array"]

    def test_parse_aliases(self):
        sig = MethodSignature.parse("struct at(dateTime.iso8601, i4)")
        assert sig.to_value() == ["struct", "dateTime.iso8601", "int"]

    @pytest.mark.parametrize("text", ["add(int)", "int add", "int add(float)", "quux add()"])
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError):
            MethodSignature.parse(text)


class TestInterface:

    def test_meth(self):
        method = meth("int add(int, int)", "Add two numbers", name="plus")
        assert method.exposed_name == "add"
        assert method.attribute == "plus"
        assert method.help == "Add two numbers"

    def test_interface_builder(self):
        iface = interface("num",
                          meth("int add(int, int)", "Add two numbers"),
                          meth("int sub(int, int)"))
        assert [m.exposed_name for m in iface.methods] == ["add", "sub"]
        assert iface.qualified("add") == "num.add"

    def test_repeated_name_adds_signature(self):
        iface = Interface("num").meth("int add(int, int)").meth("double add(double, double)", "Add")
        assert len(iface.methods) == 1
        assert [s.to_value() for s in iface.methods[0].signatures] == [
            ["int", "int", "int"],
            ["double", "double", "double"],
        ]
        assert iface.methods[0].help == "Add"

    def test_conflicting_attribute(self):
        iface = Interface("num").meth("int add(int, int)")
        with pytest.raises(ValueError):
            iface.meth("int add(int)", name="other")

    def test_empty_prefix(self):
        assert Interface("").qualified("ping") == "ping"


class TestDeclaredMethods:

    def test_only_own_public_methods(self):
        assert declared_methods(Calculator()) == ["add", "sub", "version"]

    def test_public_methods(self):
        iface = public_methods("calc", Calculator())
        assert [m.exposed_name for m in iface.methods] == ["add", "sub", "version"]
        assert all(m.signatures == [] for m in iface.methods)

    def test_bind_declared_ignores_instance_attributes(self):
        calc = Calculator()
        calc.add = lambda a, b: "shadow"
        assert bind_declared(calc, "add")(2, 3) == 5
        assert bind_declared(calc, "version")() == "1.0"

    def test_bind_declared_unknown_name(self):
        with pytest.raises(KeyError):
            bind_declared(Calculator(), "inherited")
