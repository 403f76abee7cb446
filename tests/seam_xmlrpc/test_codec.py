"""
Tests for the XML-RPC value codec
"""
import sys
import datetime
import pytest

from seam_xmlrpc.codec import decode, encode, check
from seam_xmlrpc.config import CapabilityConfig
from seam_xmlrpc.errors import EncodingError, ParseError, FAULT_NOT_WELL_FORMED
from seam_xmlrpc.value import DateTime

EXTENDED = CapabilityConfig(allow_nil=True, allow_bigint=True)


@pytest.fixture(params=["expat", "etree"])
def parser(request):
    """Every decoding test runs against both parser backends"""
    return request.param


class TestEncode:
    """Test markup produced for native values"""

    @pytest.mark.parametrize("value,markup", [
        (5, "<value><i4>5</i4></value>"),
        (-7, "<value><i4>-7</i4></value>"),
        (True, "<value><boolean>1</boolean></value>"),
        (False, "<value><boolean>0</boolean></value>"),
        (1.5, "<value><double>1.5</double></value>"),
        ("hi", "<value><string>hi</string></value>"),
        ("", "<value><string></string></value>"),
        (b"hello", "<value><base64>aGVsbG8=</base64></value>"),
        (datetime.datetime(2024, 1, 2, 3, 4, 5),
         "<value><dateTime.iso8601>20240102T03:04:05</dateTime.iso8601></value>"),
        ([1, "a"], "<value><array><data><value><i4>1</i4></value>"
                   "<value><string>a</string></value></data></array></value>"),
        ({"k": 1}, "<value><struct><member><name>k</name>"
                   "<value><i4>1</i4></value></member></struct></value>"),
    ])
    def test_markup(self, value, markup):
        assert encode(value) == markup

    def test_escaping(self):
        assert encode("a<b&c>d\re") == "<value><string>a&lt;b&amp;c&gt;d&#13;e</string></value>"

    def test_extensions_markup(self):
        assert encode(None, EXTENDED) == "<value><nil/></value>"
        assert encode(2 ** 31, EXTENDED) == "<value><i8>2147483648</i8></value>"

    def test_nil_disabled(self):
        with pytest.raises(EncodingError, match="nil"):
            encode(None)

    def test_bigint_disabled(self):
        with pytest.raises(EncodingError):
            encode(2 ** 31)
        with pytest.raises(EncodingError):
            encode(-(2 ** 31) - 1)

    @pytest.mark.parametrize("value", [object(), {1, 2}, float("nan"), float("inf"), "bad\x00char", "\ufffe"])
    def test_unencodable(self, value):
        with pytest.raises(EncodingError):
            encode(value, EXTENDED)

    def test_non_string_struct_key(self):
        with pytest.raises(EncodingError, match="keys"):
            encode({1: "x"})

    def test_depth_limit(self):
        config = CapabilityConfig(max_nesting_depth=2)
        assert encode([[1]], config)
        with pytest.raises(EncodingError, match="max_nesting_depth"):
            encode([[[1]]], config)

    @pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"),
                        reason="interpreter has no int-to-str digit limit")
    def test_bigint_over_digit_limit(self):
        with pytest.raises(EncodingError, match="too long"):
            encode(10 ** (sys.get_int_max_str_digits() + 1), EXTENDED)
        with pytest.raises(EncodingError, match="32 bits"):
            encode(10 ** (sys.get_int_max_str_digits() + 1))

    def test_self_referencing_value(self):
        value = []
        value.append(value)
        with pytest.raises(EncodingError):
            encode(value)

    def test_check(self):
        check({"a": [1, 2.0, "x"]})
        with pytest.raises(EncodingError):
            check(None)
        check(None, EXTENDED)


class TestRoundTrip:
    """Decoding encoded values yields equal values"""

    @pytest.mark.parametrize("value", [
        0,
        -2 ** 31,
        2 ** 31 - 1,
        True,
        False,
        -0.25,
        1e100,
        1e-07,
        "",
        " padded ",
        "<&>\r\n\t",
        "あいうえおかきくけこ",
        b"\x00\xffbinary",
        b"",
        {},
        [],
        {"a": 1, "b": [1, "x", {"c": False}]},
        [1, [2, [3, []]]],
        None,
        2 ** 40,
        -(2 ** 70),
    ])
    def test_round_trip(self, parser, value):
        decoded = decode(encode(value, EXTENDED), EXTENDED, parser)
        assert decoded == value
        assert type(decoded) is type(value)

    def test_bool_stays_bool(self, parser):
        assert decode(encode(True), parser=parser) is True
        assert decode(encode(1), parser=parser) is not True

    def test_datetime(self, parser):
        value = datetime.datetime(2024, 2, 29, 23, 59, 58)
        decoded = decode(encode(value), parser=parser)
        assert isinstance(decoded, DateTime)
        assert decoded == value

    def test_struct_member_order(self, parser):
        decoded = decode(encode({"z": 1, "a": 2, "m": 3}), parser=parser)
        assert list(decoded.keys()) == ["z", "a", "m"]

    def test_tuple_decodes_as_list(self, parser):
        assert decode(encode((1, 2)), parser=parser) == [1, 2]


class TestDecode:
    """Test reading markup, including malformed and disallowed input"""

    def test_untyped_value_is_string(self, parser):
        assert decode("<value>hello</value>", parser=parser) == "hello"
        assert decode("<value></value>", parser=parser) == ""
        assert decode("<value>  </value>", parser=parser) == "  "

    def test_whitespace_between_elements(self, parser):
        markup = ("<value>\n  <array>\n    <data>\n      <value><i4>1</i4></value>\n"
                  "      <value><int> 2 </int></value>\n    </data>\n  </array>\n</value>")
        assert decode(markup, parser=parser) == [1, 2]

    def test_mixed_content(self, parser):
        with pytest.raises(ParseError):
            decode("<value>x<i4>1</i4></value>", parser=parser)

    def test_bytes_input(self, parser):
        data = '<?xml version="1.0" encoding="UTF-8"?><value><string>été</string></value>'
        assert decode(data.encode("utf-8"), parser=parser) == "été"

    def test_nil_disabled(self, parser):
        with pytest.raises(ParseError, match="nil"):
            decode("<value><nil/></value>", parser=parser)

    def test_nil_must_be_empty(self, parser):
        with pytest.raises(ParseError):
            decode("<value><nil>x</nil></value>", EXTENDED, parser)

    def test_bigint_disabled(self, parser):
        with pytest.raises(ParseError):
            decode("<value><i8>5</i8></value>", parser=parser)
        assert decode("<value><i8>5</i8></value>", EXTENDED, parser) == 5

    @pytest.mark.parametrize("markup", [
        "<value><i4>2147483648</i4></value>",
        "<value><int>-2147483649</int></value>",
        "<value><i4>" + "9" * 5000 + "</i4></value>",
        "<value><i4>4.0</i4></value>",
        "<value><i4>abc</i4></value>",
        "<value><i4></i4></value>",
        "<value><boolean>true</boolean></value>",
        "<value><boolean>2</boolean></value>",
        "<value><double>nan</double></value>",
        "<value><double>inf</double></value>",
        "<value><double>0x10</double></value>",
        "<value><double>1.5.2</double></value>",
        "<value><double>1e999</double></value>",
        "<value><dateTime.iso8601>garbage</dateTime.iso8601></value>",
        "<value><dateTime.iso8601>20241302T00:00:00</dateTime.iso8601></value>",
        "<value><dateTime.iso8601>00010101T00:00:00+01:00</dateTime.iso8601></value>",
        "<value><dateTime.iso8601>99991231T23:59:59-00:30</dateTime.iso8601></value>",
        "<value><base64>!!!</base64></value>",
        "<value><float>1</float></value>",
        "<value><i4>1<b/></i4></value>",
        "<value><array><value><i4>1</i4></value></array></value>",
        "<value><struct><name>a</name></struct></value>",
        "<value><struct><member><value><i4>1</i4></value></member></struct></value>",
        "<value><i4>1</i4><i4>2</i4></value>",
        "<data/>",
    ])
    def test_invalid_values(self, parser, markup):
        with pytest.raises(ParseError):
            decode(markup, parser=parser)

    @pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"),
                        reason="interpreter has no int-to-str digit limit")
    def test_bigint_over_digit_limit(self, parser):
        digits = "7" * (sys.get_int_max_str_digits() + 1)
        with pytest.raises(ParseError, match="too many digits"):
            decode(f"<value><i8>{digits}</i8></value>", EXTENDED, parser)

    @pytest.mark.parametrize("text,expected", [
        ("1.5", 1.5),
        ("+.5", 0.5),
        ("-2.", -2.0),
        ("1e5", 100000.0),
        (" 3.25E-2 ", 0.0325),
    ])
    def test_double_forms(self, parser, text, expected):
        assert decode(f"<value><double>{text}</double></value>", parser=parser) == expected

    def test_base64_with_line_breaks(self, parser):
        assert decode("<value><base64>aGVs\nbG8=\n</base64></value>", parser=parser) == b"hello"

    def test_datetime_with_offset(self, parser):
        markup = "<value><dateTime.iso8601>2024-01-02T03:04:05+01:00</dateTime.iso8601></value>"
        assert decode(markup, parser=parser) == DateTime(2024, 1, 2, 2, 4, 5)

    def test_duplicate_struct_member(self, parser):
        markup = ("<value><struct>"
                  "<member><name>a</name><value><i4>1</i4></value></member>"
                  "<member><name>a</name><value><i4>2</i4></value></member>"
                  "</struct></value>")
        with pytest.raises(ParseError, match="Duplicate"):
            decode(markup, parser=parser)

    def test_depth_limit(self, parser):
        config = CapabilityConfig(max_nesting_depth=2)
        nested = "<value><array><data>%s</data></array></value>"
        two = nested % (nested % "<value><i4>1</i4></value>")
        assert decode(two, config, parser) == [[1]]
        with pytest.raises(ParseError, match="max_nesting_depth"):
            decode(nested % two, config, parser)

    def test_malformed_xml(self, parser):
        with pytest.raises(ParseError) as exc_info:
            decode("<value><i4>1</value>", parser=parser)
        assert exc_info.value.code == FAULT_NOT_WELL_FORMED


@pytest.mark.benchmark
def test_encode_decode_benchmark(benchmark):
    """Benchmark a mid-sized struct through the codec"""
    value = {f"key{i}": [i, str(i), float(i), {"flag": bool(i % 2)}] for i in range(100)}
    markup = encode(value)

    result = benchmark(lambda: decode(encode(value)))

    assert result == value
    assert len(markup) > 0
