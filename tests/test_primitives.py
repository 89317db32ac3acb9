import io
import ipaddress

import pytest
from hypothesis import given
from hypothesis import strategies as st

from borshpy.errors import BorshError, ErrorKind
from borshpy.primitives import (
    BOOL,
    F32,
    F64,
    I8,
    I128,
    IPV4_ADDR,
    IPV6_ADDR,
    SOCKET_ADDR,
    SOCKET_ADDR_V4,
    SOCKET_ADDR_V6,
    STRING,
    U8,
    U16,
    U32,
    U64,
    UNIT,
    Float,
    Integer,
    Reader,
    cautious,
)

UNEXPECTED = "Unexpected length of input"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "a",
        "hello world",
        "x" * 1024,
        "x" * 4096,
        "x" * 65535,
        "hello world!" * 1000,
        "\U0001f4a9",
    ],
)
def test_string_roundtrip(text):
    assert STRING.from_bytes(STRING.to_bytes(text)) == text


def test_string_layout():
    assert STRING.to_bytes("ab") == b"\x02\x00\x00\x00ab"


def test_missing_bytes():
    with pytest.raises(BorshError) as info:
        U64.from_bytes(bytes([1, 0]))
    assert str(info.value) == UNEXPECTED


def test_extra_bytes():
    with pytest.raises(BorshError) as info:
        STRING.from_bytes(bytes([1, 0, 0, 0, 32, 32]))
    assert str(info.value) == "Not all bytes read"
    assert info.value.kind is ErrorKind.INVALID_DATA


@pytest.mark.parametrize("byte", range(2, 256))
def test_invalid_bool(byte):
    with pytest.raises(BorshError) as info:
        BOOL.from_bytes(bytes([byte]))
    assert str(info.value) == f"Invalid bool representation: {byte}"


def test_bool_roundtrip():
    assert BOOL.to_bytes(True) == b"\x01"
    assert BOOL.from_bytes(b"\x00") is False


def test_invalid_length_string():
    with pytest.raises(BorshError) as info:
        STRING.from_bytes(bytes([255] * 4))
    assert str(info.value) == UNEXPECTED


def test_evil_bytes_string_extra():
    with pytest.raises(BorshError) as info:
        STRING.from_bytes(bytes([255, 255, 255, 255, 32, 32]))
    assert str(info.value) == UNEXPECTED


def test_non_utf_string():
    with pytest.raises(BorshError) as info:
        STRING.from_bytes(bytes([1, 0, 0, 0, 0xC0]))
    assert str(info.value) == "invalid utf-8 sequence of 1 bytes from index 0"


def test_incomplete_utf_string():
    with pytest.raises(BorshError) as info:
        STRING.from_bytes(bytes([3, 0, 0, 0, 0x61, 0xE2, 0x82]))
    assert str(info.value) == "incomplete utf-8 byte sequence from index 1"


def test_nan_float():
    with pytest.raises(BorshError) as info:
        F32.from_bytes(bytes([0, 0, 192, 127]))
    assert str(info.value) == "For portability reasons we do not allow to deserialize NaNs."


def test_nan_float_serialize():
    with pytest.raises(BorshError) as info:
        F64.to_bytes(float("nan"))
    assert str(info.value) == "For portability reasons we do not allow to serialize NaNs."


def test_float_roundtrip():
    assert F32.from_bytes(F32.to_bytes(1000000000.0)) == 1000000000.0
    assert F64.to_bytes(1.0) == bytes([0, 0, 0, 0, 0, 0, 0xF0, 0x3F])


def test_float_bad_size():
    with pytest.raises(ValueError):
        Float("f16", 2)


def test_integer_little_endian():
    assert U32.to_bytes(1) == b"\x01\x00\x00\x00"
    assert I8.to_bytes(-1) == b"\xff"
    assert U16.from_bytes(b"\x34\x12") == 0x1234


def test_integer_out_of_range():
    with pytest.raises(BorshError) as info:
        U8.to_bytes(256)
    assert info.value.kind is ErrorKind.INVALID_INPUT


def test_integer_rejects_bool():
    with pytest.raises(TypeError):
        U8.to_bytes(True)


def test_integer_limits():
    i16 = Integer("i16", 2, True)
    assert (i16.min_value, i16.max_value) == (-32768, 32767)
    assert U8.is_u8 and not I8.is_u8


@given(st.integers(min_value=0, max_value=2**64 - 1))
def test_u64_roundtrip(value):
    assert U64.from_bytes(U64.to_bytes(value)) == value


@given(st.integers(min_value=-(2**127), max_value=2**127 - 1))
def test_i128_roundtrip(value):
    encoded = I128.to_bytes(value)
    assert len(encoded) == 16
    assert I128.from_bytes(encoded) == value


@given(st.text())
def test_string_roundtrip_property(text):
    assert STRING.from_bytes(STRING.to_bytes(text)) == text


def test_unit():
    assert UNIT.to_bytes(None) == b""
    assert UNIT.from_bytes(b"") is None


def test_ip_addresses():
    v4 = ipaddress.IPv4Address("10.0.0.1")
    v6 = ipaddress.IPv6Address("::1")
    assert IPV4_ADDR.to_bytes(v4) == bytes([10, 0, 0, 1])
    assert IPV4_ADDR.from_bytes(bytes([10, 0, 0, 1])) == v4
    assert IPV6_ADDR.from_bytes(IPV6_ADDR.to_bytes(v6)) == v6


def test_short_ipv6():
    with pytest.raises(BorshError) as info:
        IPV6_ADDR.from_bytes(bytes(15))
    assert str(info.value) == UNEXPECTED


def test_socket_addresses():
    v4 = (ipaddress.IPv4Address("192.0.2.1"), 8080)
    v6 = (ipaddress.IPv6Address("2001:db8::1"), 443)
    assert SOCKET_ADDR_V4.to_bytes(v4) == bytes([192, 0, 2, 1, 0x90, 0x1F])
    assert SOCKET_ADDR_V6.from_bytes(SOCKET_ADDR_V6.to_bytes(v6)) == v6
    assert SOCKET_ADDR.to_bytes(v4)[0] == 0
    assert SOCKET_ADDR.to_bytes(v6)[0] == 1
    assert SOCKET_ADDR.from_bytes(SOCKET_ADDR.to_bytes(v6)) == v6


def test_invalid_socket_addr_variant():
    with pytest.raises(BorshError) as info:
        SOCKET_ADDR.from_bytes(bytes([2, 1, 2, 3, 4, 0, 0]))
    assert str(info.value) == "Invalid SocketAddr variant: 2"


def test_reader():
    reader = Reader(b"abc")
    assert reader.read_byte() == ord("a")
    assert reader.remaining() == 2
    assert reader.read(2) == b"bc"
    assert reader.remaining() == 0
    with pytest.raises(BorshError) as info:
        reader.read_byte()
    assert str(info.value) == UNEXPECTED


def test_serialize_to_stream():
    out = io.BytesIO()
    U8.serialize(7, out)
    STRING.serialize("x", out)
    assert out.getvalue() == b"\x07\x01\x00\x00\x00x"


def test_cautious_u8():
    assert cautious(10, 1) == 10


@pytest.mark.parametrize("hint,size", [(0, 1), (0, 8), (10**9, 1), (10**9, 16), (5, 4096)])
def test_cautious_bounds(hint, size):
    result = cautious(hint, size)
    assert 1 <= result <= max(1, 4096 // size)
    assert result <= max(hint, 1)