"""Borsh encoding of compound values: sequences, options, results, maps, structs and enums."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from typing import Any, BinaryIO, Callable

from borshpy.errors import BorshError, ErrorKind
from borshpy.primitives import (
    ERROR_UNEXPECTED_LENGTH_OF_INPUT,
    U32,
    BorshType,
    Reader,
)

__all__ = [
    "Ok",
    "Err",
    "Vec",
    "Array",
    "Option",
    "Result",
    "Tuple",
    "HashMap",
    "BTreeMap",
    "HashSet",
    "BTreeSet",
    "Struct",
    "Enum",
    "EnumValue",
]

_MAX_U32 = 0xFFFFFFFF
_BYTES_LIKE = (bytes, bytearray, memoryview)


@dataclasses.dataclass(frozen=True)
class Ok:
    """The successful alternative of a :class:`Result` value."""

    value: Any


@dataclasses.dataclass(frozen=True)
class Err:
    """The failed alternative of a :class:`Result` value."""

    value: Any


@dataclasses.dataclass(frozen=True)
class EnumValue:
    """A decoded or to-be-encoded value of an :class:`Enum` type.

    ``value`` is the variant's payload: a mapping for named fields, a tuple
    for unnamed fields and ``()`` for a variant without fields, unless the
    variant was given its own factory.
    """

    variant: str
    value: Any = ()


def _write_length(length: int, out: BinaryIO) -> None:
    if length > _MAX_U32:
        raise BorshError(ErrorKind.INVALID_INPUT)
    out.write(length.to_bytes(4, "little"))


def _check_room(reader: Reader, count: int, element: BorshType) -> None:
    # Fail before decoding anything when the input cannot possibly hold the elements.
    if element.size and count * element.size > reader.remaining():
        raise BorshError(ErrorKind.INVALID_INPUT, ERROR_UNEXPECTED_LENGTH_OF_INPUT)


def _hashable(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_hashable(item) for item in value)
    return value


def _generic_name(base: str, params: Iterable[BorshType]) -> str:
    names = [param.name for param in params]
    if not names:
        return base
    return f"{base}<{', '.join(names)}>"


class Vec(BorshType):
    """A sequence prefixed with its element count as a u32.

    Sequences of ``u8`` decode to :class:`bytes`; all others decode to lists.
    """

    def __init__(self, element: BorshType) -> None:
        self.element = element
        self.name = f"Vec<{element.name}>"

    def serialize(self, value: Iterable[Any], out: BinaryIO) -> None:
        if self.element.is_u8 and isinstance(value, _BYTES_LIKE):
            data = bytes(value)
            _write_length(len(data), out)
            out.write(data)
            return
        items = list(value)
        _write_length(len(items), out)
        for item in items:
            self.element.serialize(item, out)

    def deserialize(self, reader: Reader) -> Any:
        length = U32.deserialize(reader)
        if self.element.is_u8:
            return reader.read(length)
        if length == 0:
            return []
        if self.element.size == 0:
            return [self.element.deserialize(reader)] * length
        _check_room(reader, length, self.element)
        return [self.element.deserialize(reader) for _ in range(length)]


class Array(BorshType):
    """A fixed number of elements with no length prefix."""

    def __init__(self, element: BorshType, length: int) -> None:
        if length < 0:
            raise ValueError("array length must not be negative")
        self.element = element
        self.length = length
        self.name = f"Array<{element.name}, {length}>"
        self.size = None if element.size is None else element.size * length

    def serialize(self, value: Iterable[Any], out: BinaryIO) -> None:
        if self.element.is_u8 and isinstance(value, _BYTES_LIKE):
            data = bytes(value)
            self._check_length(len(data))
            out.write(data)
            return
        items = list(value)
        self._check_length(len(items))
        for item in items:
            self.element.serialize(item, out)

    def _check_length(self, actual: int) -> None:
        if actual != self.length:
            raise BorshError(
                ErrorKind.INVALID_INPUT,
                f"{self.name} expects {self.length} elements, got {actual}",
            )

    def deserialize(self, reader: Reader) -> Any:
        if self.element.is_u8:
            return reader.read(self.length)
        _check_room(reader, self.length, self.element)
        return [self.element.deserialize(reader) for _ in range(self.length)]


class Option(BorshType):
    """An optional value: a 0 byte for ``None``, or a 1 byte followed by the value."""

    def __init__(self, inner: BorshType) -> None:
        self.inner = inner
        self.name = f"Option<{inner.name}>"

    def serialize(self, value: Any, out: BinaryIO) -> None:
        if value is None:
            out.write(b"\x00")
        else:
            out.write(b"\x01")
            self.inner.serialize(value, out)

    def deserialize(self, reader: Reader) -> Any:
        flag = reader.read_byte()
        if flag == 0:
            return None
        if flag == 1:
            return self.inner.deserialize(reader)
        raise BorshError(
            ErrorKind.INVALID_INPUT,
            f"Invalid Option representation: {flag}. The first byte must be 0 or 1",
        )


class Result(BorshType):
    """Either :class:`Ok` (tag 1) or :class:`Err` (tag 0)."""

    def __init__(self, ok: BorshType, err: BorshType) -> None:
        self.ok = ok
        self.err = err
        self.name = f"Result<{ok.name}, {err.name}>"

    def serialize(self, value: Ok | Err, out: BinaryIO) -> None:
        if isinstance(value, Err):
            out.write(b"\x00")
            self.err.serialize(value.value, out)
        elif isinstance(value, Ok):
            out.write(b"\x01")
            self.ok.serialize(value.value, out)
        else:
            raise TypeError(f"{self.name} expects Ok or Err, not {type(value).__name__}")

    def deserialize(self, reader: Reader) -> Ok | Err:
        flag = reader.read_byte()
        if flag == 0:
            return Err(self.err.deserialize(reader))
        if flag == 1:
            return Ok(self.ok.deserialize(reader))
        raise BorshError(
            ErrorKind.INVALID_INPUT,
            f"Invalid Result representation: {flag}. The first byte must be 0 or 1",
        )


class Tuple(BorshType):
    """A fixed sequence of values of possibly different types."""

    def __init__(self, *args: BorshType) -> None:
        if not args:
            raise ValueError("a tuple needs at least one element type")
        self.elements = tuple(args)
        self.name = f"Tuple<{', '.join(element.name for element in args)}>"
        sizes = [element.size for element in args]
        self.size = None if None in sizes else sum(sizes)

    def serialize(self, value: Iterable[Any], out: BinaryIO) -> None:
        items = tuple(value)
        if len(items) != len(self.elements):
            raise BorshError(
                ErrorKind.INVALID_INPUT,
                f"{self.name} expects {len(self.elements)} elements, got {len(items)}",
            )
        for element, item in zip(self.elements, items):
            element.serialize(item, out)

    def deserialize(self, reader: Reader) -> tuple[Any, ...]:
        return tuple(element.deserialize(reader) for element in self.elements)


class _MapType(BorshType):
    def _setup(self, base: str, key: BorshType, value: BorshType) -> None:
        self.key = key
        self.value = value
        self.name = f"{base}<{key.name}, {value.name}>"

    def serialize(self, value: Mapping[Any, Any], out: BinaryIO) -> None:
        entries = sorted(value.items(), key=lambda entry: entry[0])
        _write_length(len(entries), out)
        for key, item in entries:
            self.key.serialize(key, out)
            self.value.serialize(item, out)

    def _read_entries(self, reader: Reader) -> dict[Any, Any]:
        length = U32.deserialize(reader)
        result: dict[Any, Any] = {}
        for _ in range(length):
            key = _hashable(self.key.deserialize(reader))
            result[key] = self.value.deserialize(reader)
        return result


class HashMap(_MapType):
    """A map written as its count and then its entries in ascending key order."""

    def __init__(self, key: BorshType, value: BorshType) -> None:
        self._setup("HashMap", key, value)

    def deserialize(self, reader: Reader) -> dict[Any, Any]:
        return self._read_entries(reader)


class BTreeMap(_MapType):
    """An ordered map; decodes to a dict whose keys are in ascending order."""

    def __init__(self, key: BorshType, value: BorshType) -> None:
        self._setup("BTreeMap", key, value)

    def deserialize(self, reader: Reader) -> dict[Any, Any]:
        entries = self._read_entries(reader)
        return dict(sorted(entries.items(), key=lambda entry: entry[0]))


class _SetType(BorshType):
    def _setup(self, base: str, element: BorshType) -> None:
        self.element = element
        self.name = f"{base}<{element.name}>"

    def serialize(self, value: Iterable[Any], out: BinaryIO) -> None:
        items = sorted(value)
        _write_length(len(items), out)
        for item in items:
            self.element.serialize(item, out)

    def deserialize(self, reader: Reader) -> set[Any]:
        items = Vec(self.element).deserialize(reader)
        return {_hashable(item) for item in items}


class HashSet(_SetType):
    """A set written as its count and then its elements in ascending order."""

    def __init__(self, element: BorshType) -> None:
        self._setup("HashSet", element)


class BTreeSet(_SetType):
    """An ordered set, laid out like :class:`HashSet`."""

    def __init__(self, element: BorshType) -> None:
        self._setup("BTreeSet", element)


FieldsSpec = Mapping[str, BorshType] | Iterable[Any] | None


def _normalize_fields(
    fields: FieldsSpec,
) -> tuple[tuple[str, ...] | None, tuple[BorshType, ...]]:
    if fields is None:
        return None, ()
    items = list(fields.items()) if isinstance(fields, Mapping) else list(fields)
    if not items:
        return None, ()
    if all(isinstance(item, BorshType) for item in items):
        return None, tuple(items)
    names: list[str] = []
    types: list[BorshType] = []
    for item in items:
        try:
            field_name, field_type = item
        except (TypeError, ValueError):
            raise ValueError(f"invalid field specification: {item!r}") from None
        if not isinstance(field_name, str) or not isinstance(field_type, BorshType):
            raise ValueError(f"invalid field specification: {item!r}")
        names.append(field_name)
        types.append(field_type)
    if len(set(names)) != len(names):
        raise ValueError("field names must be unique")
    return tuple(names), tuple(types)


class Struct(BorshType):
    """A record whose fields are written one after another.

    ``fields`` is either a sequence of ``(name, type)`` pairs or a mapping
    (named fields), a sequence of types (unnamed fields), or empty.
    ``params`` are the generic parameters shown in the type's name.
    Without a ``factory``, named fields decode to a dict, unnamed fields to
    a tuple and an empty struct to ``()``; with one, the factory is called
    with the decoded fields as keyword or positional arguments.
    """

    def __init__(
        self,
        name: str,
        fields: FieldsSpec = None,
        params: Iterable[BorshType] = (),
        factory: Callable[..., Any] | None = None,
    ) -> None:
        self.base_name = name
        self.params = tuple(params)
        self.name = _generic_name(name, self.params)
        self.field_names, self.field_types = _normalize_fields(fields)
        self.factory = factory
        sizes = [field_type.size for field_type in self.field_types]
        self.size = None if None in sizes else sum(sizes)

    @property
    def named(self) -> bool:
        """Whether the struct has named fields."""
        return self.field_names is not None

    def _field(self, value: Any, field_name: str) -> Any:
        if isinstance(value, Mapping):
            try:
                return value[field_name]
            except KeyError:
                pass
        elif hasattr(value, field_name):
            return getattr(value, field_name)
        raise BorshError(
            ErrorKind.INVALID_INPUT, f"{self.name} value has no field {field_name!r}"
        )

    def _positional(self, value: Any) -> tuple[Any, ...]:
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return tuple(getattr(value, f.name) for f in dataclasses.fields(value))
        return tuple(value)

    def serialize(self, value: Any, out: BinaryIO) -> None:
        if self.field_names is not None:
            for field_name, field_type in zip(self.field_names, self.field_types):
                field_type.serialize(self._field(value, field_name), out)
            return
        if not self.field_types:
            return
        items = self._positional(value)
        if len(items) != len(self.field_types):
            raise BorshError(
                ErrorKind.INVALID_INPUT,
                f"{self.name} expects {len(self.field_types)} fields, got {len(items)}",
            )
        for field_type, item in zip(self.field_types, items):
            field_type.serialize(item, out)

    def deserialize(self, reader: Reader) -> Any:
        if self.field_names is not None:
            decoded = {
                field_name: field_type.deserialize(reader)
                for field_name, field_type in zip(self.field_names, self.field_types)
            }
            return self.factory(**decoded) if self.factory else decoded
        values = tuple(field_type.deserialize(reader) for field_type in self.field_types)
        return self.factory(*values) if self.factory else values


class Enum(BorshType):
    """A tagged union: a u8 variant index followed by the variant's fields.

    ``variants`` lists each variant as a bare name (no fields), a
    ``(name, fields)`` pair, or a mapping of names to fields; fields follow
    the same forms as for :class:`Struct`. Each variant is laid out as a
    struct named after the enum and the variant.
    """

    def __init__(
        self,
        name: str,
        variants: Mapping[str, FieldsSpec] | Iterable[Any],
        params: Iterable[BorshType] = (),
    ) -> None:
        self.base_name = name
        self.params = tuple(params)
        self.name = _generic_name(name, self.params)
        entries = list(variants.items()) if isinstance(variants, Mapping) else list(variants)
        built: list[tuple[str, Struct]] = []
        for entry in entries:
            if isinstance(entry, str):
                variant_name, fields = entry, None
            else:
                variant_name, fields = entry
            built.append((variant_name, Struct(f"{name}{variant_name}", fields, self.params)))
        if len(built) > 256:
            raise ValueError("an enum can have at most 256 variants")
        self.variants = tuple(built)
        self._index = {variant_name: i for i, (variant_name, _) in enumerate(built)}
        if len(self._index) != len(built):
            raise ValueError("variant names must be unique")

    def serialize(self, value: EnumValue, out: BinaryIO) -> None:
        if not isinstance(value, EnumValue):
            raise TypeError(f"{self.name} expects an EnumValue, not {type(value).__name__}")
        try:
            index = self._index[value.variant]
        except KeyError:
            raise BorshError(
                ErrorKind.INVALID_INPUT,
                f"Unknown variant {value.variant!r} for {self.name}",
            ) from None
        out.write(bytes([index]))
        self.variants[index][1].serialize(value.value, out)

    def deserialize(self, reader: Reader) -> EnumValue:
        index = reader.read_byte()
        if index >= len(self.variants):
            raise BorshError(ErrorKind.INVALID_INPUT, f"Unexpected variant index: {index}")
        variant_name, layout = self.variants[index]
        return EnumValue(variant_name, layout.deserialize(reader))