"""Borsh encoding of scalar values: integers, floats, booleans, strings and addresses."""

from __future__ import annotations

import abc
import io
import ipaddress
import math
import struct
from typing import Any, BinaryIO

from borshpy.errors import BorshError, ErrorKind

__all__ = [
    "ERROR_NOT_ALL_BYTES_READ",
    "ERROR_UNEXPECTED_LENGTH_OF_INPUT",
    "Reader",
    "BorshType",
    "Integer",
    "Float",
    "Bool",
    "String",
    "Unit",
    "Ipv4Addr",
    "Ipv6Addr",
    "SocketAddrV4",
    "SocketAddrV6",
    "SocketAddr",
    "cautious",
    "U8",
    "U16",
    "U32",
    "U64",
    "U128",
    "I8",
    "I16",
    "I32",
    "I64",
    "I128",
    "F32",
    "F64",
    "BOOL",
    "STRING",
    "UNIT",
    "IPV4_ADDR",
    "IPV6_ADDR",
    "SOCKET_ADDR_V4",
    "SOCKET_ADDR_V6",
    "SOCKET_ADDR",
]

ERROR_NOT_ALL_BYTES_READ = "Not all bytes read"
ERROR_UNEXPECTED_LENGTH_OF_INPUT = "Unexpected length of input"

_MAX_U32 = 0xFFFFFFFF


def cautious(hint: int, element_size: int) -> int:
    """Return a safe initial capacity for ``hint`` elements of ``element_size`` bytes."""
    return max(min(hint, 4096 // element_size), 1)


class Reader:
    """A cursor over a byte string that is consumed from the front."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        self._pos = 0

    def read(self, n: int) -> bytes:
        """Consume and return exactly ``n`` bytes."""
        if n < 0 or n > self.remaining():
            raise BorshError(ErrorKind.INVALID_INPUT, ERROR_UNEXPECTED_LENGTH_OF_INPUT)
        chunk = self._data[self._pos : self._pos + n]
        self._pos += n
        return chunk

    def read_byte(self) -> int:
        """Consume and return a single byte."""
        return self.read(1)[0]

    def remaining(self) -> int:
        """Return how many bytes are left unread."""
        return len(self._data) - self._pos


class BorshType(abc.ABC):
    """A description of how one kind of value is laid out in Borsh."""

    name: str = ""
    #: Width in bytes of every encoded value, or ``None`` if it varies.
    size: int | None = None
    is_u8: bool = False

    @abc.abstractmethod
    def serialize(self, value: Any, out: BinaryIO) -> None:
        """Write the encoding of ``value`` to the binary stream ``out``."""

    @abc.abstractmethod
    def deserialize(self, reader: Reader) -> Any:
        """Decode one value from ``reader``."""

    def to_bytes(self, value: Any) -> bytes:
        """Return the encoding of ``value``."""
        buf = io.BytesIO()
        self.serialize(value, buf)
        return buf.getvalue()

    def from_bytes(self, data: bytes | bytearray | memoryview) -> Any:
        """Decode a value that must take up all of ``data``."""
        reader = Reader(data)
        value = self.deserialize(reader)
        if reader.remaining():
            raise BorshError(ErrorKind.INVALID_DATA, ERROR_NOT_ALL_BYTES_READ)
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Integer(BorshType):
    """A fixed-width little-endian integer."""

    def __init__(self, name: str, size: int, signed: bool) -> None:
        if size <= 0:
            raise ValueError("integer size must be positive")
        self.name = name
        self.size = size
        self.signed = signed
        self.is_u8 = size == 1 and not signed
        bits = size * 8
        if signed:
            self.min_value = -(1 << (bits - 1))
            self.max_value = (1 << (bits - 1)) - 1
        else:
            self.min_value = 0
            self.max_value = (1 << bits) - 1

    def serialize(self, value: int, out: BinaryIO) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{self.name} expects an int, not {type(value).__name__}")
        if not self.min_value <= value <= self.max_value:
            raise BorshError(
                ErrorKind.INVALID_INPUT, f"{value} is out of range for {self.name}"
            )
        out.write(value.to_bytes(self.size, "little", signed=self.signed))

    def deserialize(self, reader: Reader) -> int:
        return int.from_bytes(reader.read(self.size), "little", signed=self.signed)


class Float(BorshType):
    """An IEEE 754 float; NaN is refused in both directions."""

    _FORMATS = {4: "<f", 8: "<d"}

    def __init__(self, name: str, size: int) -> None:
        try:
            self._format = self._FORMATS[size]
        except KeyError:
            raise ValueError("float size must be 4 or 8") from None
        self.name = name
        self.size = size

    def serialize(self, value: float, out: BinaryIO) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{self.name} expects a float, not {type(value).__name__}")
        value = float(value)
        if math.isnan(value):
            raise BorshError(
                ErrorKind.INVALID_INPUT,
                "For portability reasons we do not allow to serialize NaNs.",
            )
        try:
            out.write(struct.pack(self._format, value))
        except OverflowError:
            raise BorshError(
                ErrorKind.INVALID_INPUT, f"{value} is out of range for {self.name}"
            ) from None

    def deserialize(self, reader: Reader) -> float:
        (value,) = struct.unpack(self._format, reader.read(self.size))
        if math.isnan(value):
            raise BorshError(
                ErrorKind.INVALID_INPUT,
                "For portability reasons we do not allow to deserialize NaNs.",
            )
        return value


class Bool(BorshType):
    """A boolean stored as a single byte, 0 or 1."""

    name = "bool"
    size = 1

    def serialize(self, value: bool, out: BinaryIO) -> None:
        if not isinstance(value, bool):
            raise TypeError(f"bool expects a bool, not {type(value).__name__}")
        out.write(b"\x01" if value else b"\x00")

    def deserialize(self, reader: Reader) -> bool:
        byte = reader.read_byte()
        if byte == 0:
            return False
        if byte == 1:
            return True
        raise BorshError(ErrorKind.INVALID_INPUT, f"Invalid bool representation: {byte}")


def _write_length(length: int, out: BinaryIO) -> None:
    if length > _MAX_U32:
        raise BorshError(ErrorKind.INVALID_INPUT)
    out.write(length.to_bytes(4, "little"))


def _utf8_error_message(exc: UnicodeDecodeError) -> str:
    if exc.reason == "unexpected end of data":
        return f"incomplete utf-8 byte sequence from index {exc.start}"
    return f"invalid utf-8 sequence of {exc.end - exc.start} bytes from index {exc.start}"


class String(BorshType):
    """A UTF-8 string prefixed with its byte length as a u32."""

    name = "string"

    def serialize(self, value: str, out: BinaryIO) -> None:
        if not isinstance(value, str):
            raise TypeError(f"string expects a str, not {type(value).__name__}")
        data = value.encode("utf-8")
        _write_length(len(data), out)
        out.write(data)

    def deserialize(self, reader: Reader) -> str:
        length = int.from_bytes(reader.read(4), "little")
        data = reader.read(length)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BorshError(ErrorKind.INVALID_DATA, _utf8_error_message(exc)) from None


class Unit(BorshType):
    """The empty value, encoded as no bytes and represented by ``None``."""

    name = "nil"
    size = 0

    def serialize(self, value: None, out: BinaryIO) -> None:
        if value is not None:
            raise TypeError(f"nil expects None, not {type(value).__name__}")

    def deserialize(self, reader: Reader) -> None:
        return None


class Ipv4Addr(BorshType):
    """An IPv4 address stored as its four octets."""

    name = "Ipv4Addr"
    size = 4

    def serialize(self, value: Any, out: BinaryIO) -> None:
        try:
            address = ipaddress.IPv4Address(value)
        except ValueError as exc:
            raise BorshError(ErrorKind.INVALID_INPUT, str(exc)) from None
        out.write(address.packed)

    def deserialize(self, reader: Reader) -> ipaddress.IPv4Address:
        return ipaddress.IPv4Address(reader.read(4))


class Ipv6Addr(BorshType):
    """An IPv6 address stored as its sixteen octets."""

    name = "Ipv6Addr"
    size = 16

    def serialize(self, value: Any, out: BinaryIO) -> None:
        try:
            address = ipaddress.IPv6Address(value)
        except ValueError as exc:
            raise BorshError(ErrorKind.INVALID_INPUT, str(exc)) from None
        out.write(address.packed)

    def deserialize(self, reader: Reader) -> ipaddress.IPv6Address:
        return ipaddress.IPv6Address(reader.read(16))


_PORT = Integer("u16", 2, False)


class SocketAddrV4(BorshType):
    """An ``(IPv4 address, port)`` pair."""

    name = "SocketAddrV4"
    size = 6

    def serialize(self, value: Any, out: BinaryIO) -> None:
        ip, port = value
        IPV4_ADDR.serialize(ip, out)
        _PORT.serialize(port, out)

    def deserialize(self, reader: Reader) -> tuple[ipaddress.IPv4Address, int]:
        ip = IPV4_ADDR.deserialize(reader)
        return ip, _PORT.deserialize(reader)


class SocketAddrV6(BorshType):
    """An ``(IPv6 address, port)`` pair."""

    name = "SocketAddrV6"
    size = 18

    def serialize(self, value: Any, out: BinaryIO) -> None:
        ip, port = value
        IPV6_ADDR.serialize(ip, out)
        _PORT.serialize(port, out)

    def deserialize(self, reader: Reader) -> tuple[ipaddress.IPv6Address, int]:
        ip = IPV6_ADDR.deserialize(reader)
        return ip, _PORT.deserialize(reader)


class SocketAddr(BorshType):
    """A socket address of either family, tagged 0 for IPv4 and 1 for IPv6."""

    name = "SocketAddr"

    def serialize(self, value: Any, out: BinaryIO) -> None:
        ip, port = value
        try:
            address = ipaddress.ip_address(ip)
        except ValueError as exc:
            raise BorshError(ErrorKind.INVALID_INPUT, str(exc)) from None
        if address.version == 4:
            out.write(b"\x00")
            SOCKET_ADDR_V4.serialize((address, port), out)
        else:
            out.write(b"\x01")
            SOCKET_ADDR_V6.serialize((address, port), out)

    def deserialize(self, reader: Reader) -> tuple[Any, int]:
        kind = reader.read_byte()
        if kind == 0:
            return SOCKET_ADDR_V4.deserialize(reader)
        if kind == 1:
            return SOCKET_ADDR_V6.deserialize(reader)
        raise BorshError(ErrorKind.INVALID_INPUT, f"Invalid SocketAddr variant: {kind}")


U8 = Integer("u8", 1, False)
U16 = _PORT
U32 = Integer("u32", 4, False)
U64 = Integer("u64", 8, False)
U128 = Integer("u128", 16, False)
I8 = Integer("i8", 1, True)
I16 = Integer("i16", 2, True)
I32 = Integer("i32", 4, True)
I64 = Integer("i64", 8, True)
I128 = Integer("i128", 16, True)
F32 = Float("f32", 4)
F64 = Float("f64", 8)
BOOL = Bool()
STRING = String()
UNIT = Unit()
IPV4_ADDR = Ipv4Addr()
IPV6_ADDR = Ipv6Addr()
SOCKET_ADDR_V4 = SocketAddrV4()
SOCKET_ADDR_V6 = SocketAddrV6()
SOCKET_ADDR = SocketAddr()