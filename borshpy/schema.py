"""Self-description of Borsh types.

Borsh data does not describe itself, so a type can instead be described
by a *declaration* (its name, such as ``Vec<u64>``) and a set of
*definitions* that explain how each named compound type is laid out.
Together they make a :class:`BorshSchemaContainer`, which can itself be
written in Borsh.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from typing import Any, BinaryIO, Union

from borshpy.containers import (
    Array,
    Enum,
    EnumValue,
    HashMap,
    Option,
    Result,
    Struct,
    Tuple,
    Vec,
)
from borshpy.primitives import (
    STRING,
    U32,
    UNIT,
    Bool,
    BorshType,
    Float,
    Integer,
    Reader,
    String,
    Unit,
)

__all__ = [
    "ArrayDef",
    "SequenceDef",
    "TupleDef",
    "EnumDef",
    "StructDef",
    "NamedFields",
    "UnnamedFields",
    "EmptyFields",
    "Definition",
    "Fields",
    "BorshSchemaContainer",
    "declaration",
    "add_definition",
    "add_definitions_recursively",
    "schema_container",
    "schema_container_type",
]


def _pairs(items: Iterable[Any]) -> tuple[tuple[str, str], ...]:
    return tuple((first, second) for first, second in items)


@dataclasses.dataclass(frozen=True)
class ArrayDef:
    """A fixed number of elements of one type."""

    length: int
    elements: str


@dataclasses.dataclass(frozen=True)
class SequenceDef:
    """A run-time sized sequence of elements of one type."""

    elements: str


@dataclasses.dataclass(frozen=True)
class TupleDef:
    """A fixed sequence of elements of possibly different types."""

    elements: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", tuple(self.elements))


@dataclasses.dataclass(frozen=True)
class EnumDef:
    """A tagged union given as ``(variant name, declaration)`` pairs."""

    variants: tuple[tuple[str, str], ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "variants", _pairs(self.variants))


@dataclasses.dataclass(frozen=True)
class NamedFields:
    """Struct fields given as ``(field name, declaration)`` pairs."""

    fields: tuple[tuple[str, str], ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _pairs(self.fields))


@dataclasses.dataclass(frozen=True)
class UnnamedFields:
    """Struct fields given by declaration only, like a tuple."""

    fields: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))


@dataclasses.dataclass(frozen=True)
class EmptyFields:
    """A struct without fields."""


Fields = Union[NamedFields, UnnamedFields, EmptyFields]


@dataclasses.dataclass(frozen=True)
class StructDef:
    """A record whose fields are written one after another."""

    fields: Fields


Definition = Union[ArrayDef, SequenceDef, TupleDef, EnumDef, StructDef]


@dataclasses.dataclass
class BorshSchemaContainer:
    """The declaration of a type and every definition needed to decode it."""

    declaration: str
    definitions: dict[str, Definition] = dataclasses.field(default_factory=dict)


class _DataclassEnum(Enum):
    """An enum whose variants are represented by dataclass instances."""

    def __init__(
        self, name: str, variants: Iterable[Any], classes: Iterable[type]
    ) -> None:
        super().__init__(name, variants)
        self._class_by_variant = dict(
            zip((variant_name for variant_name, _ in self.variants), classes)
        )
        self._variant_by_class = {
            cls: variant_name for variant_name, cls in self._class_by_variant.items()
        }

    def serialize(self, value: Any, out: BinaryIO) -> None:
        try:
            variant_name = self._variant_by_class[type(value)]
        except KeyError:
            raise TypeError(
                f"{self.name} cannot encode a {type(value).__name__}"
            ) from None
        super().serialize(EnumValue(variant_name, value), out)

    def deserialize(self, reader: Reader) -> Any:
        decoded = super().deserialize(reader)
        cls = self._class_by_variant[decoded.variant]
        if isinstance(decoded.value, dict):
            return cls(**decoded.value)
        return cls(*decoded.value)


_DECLARATIONS = Vec(STRING)
_NAMED_PAIRS = Vec(Tuple(STRING, STRING))

FIELDS_TYPE = _DataclassEnum(
    "Fields",
    [
        ("NamedFields", [_NAMED_PAIRS]),
        ("UnnamedFields", [_DECLARATIONS]),
        "Empty",
    ],
    [NamedFields, UnnamedFields, EmptyFields],
)

DEFINITION_TYPE = _DataclassEnum(
    "Definition",
    [
        ("Array", [("length", U32), ("elements", STRING)]),
        ("Sequence", [("elements", STRING)]),
        ("Tuple", [("elements", _DECLARATIONS)]),
        ("Enum", [("variants", _NAMED_PAIRS)]),
        ("Struct", [("fields", FIELDS_TYPE)]),
    ],
    [ArrayDef, SequenceDef, TupleDef, EnumDef, StructDef],
)

_CONTAINER_TYPE = Struct(
    "BorshSchemaContainer",
    [("declaration", STRING), ("definitions", HashMap(STRING, DEFINITION_TYPE))],
    factory=BorshSchemaContainer,
)

_PRIMITIVES = (Integer, Float, Bool, String, Unit)
_COMPOUNDS = (Array, Vec, Option, Result, HashMap, Tuple, Struct, Enum)


def declaration(ty: BorshType) -> str:
    """Return the name under which ``ty`` appears in a schema."""
    if isinstance(ty, _PRIMITIVES + _COMPOUNDS):
        return ty.name
    raise TypeError(f"{ty!r} has no schema")


def add_definition(
    declaration_name: str, definition: Definition, definitions: dict[str, Definition]
) -> None:
    """Record ``definition`` under ``declaration_name``, refusing a conflicting redefinition."""
    existing = definitions.get(declaration_name)
    if existing is None:
        definitions[declaration_name] = definition
    elif existing != definition:
        raise ValueError(
            "Redefining type schema for the same type name. "
            "Types with the same names are not supported."
        )


def _struct_fields(ty: Struct) -> Fields:
    if ty.field_names is not None:
        return NamedFields(
            tuple(
                (field_name, declaration(field_type))
                for field_name, field_type in zip(ty.field_names, ty.field_types)
            )
        )
    if ty.field_types:
        return UnnamedFields(tuple(declaration(t) for t in ty.field_types))
    return EmptyFields()


def _describe(ty: BorshType) -> tuple[Definition, list[BorshType]]:
    if isinstance(ty, Array):
        return ArrayDef(ty.length, declaration(ty.element)), [ty.element]
    if isinstance(ty, Vec):
        return SequenceDef(declaration(ty.element)), [ty.element]
    if isinstance(ty, Option):
        variants = (("None", declaration(UNIT)), ("Some", declaration(ty.inner)))
        return EnumDef(variants), [ty.inner]
    if isinstance(ty, Result):
        variants = (("Ok", declaration(ty.ok)), ("Err", declaration(ty.err)))
        # Only the success type is descended into.
        return EnumDef(variants), [ty.ok]
    if isinstance(ty, HashMap):
        entry = Tuple(ty.key, ty.value)
        return SequenceDef(declaration(entry)), [entry]
    if isinstance(ty, Tuple):
        return TupleDef(tuple(declaration(e) for e in ty.elements)), list(ty.elements)
    if isinstance(ty, Struct):
        return StructDef(_struct_fields(ty)), list(ty.field_types)
    if isinstance(ty, Enum):
        variants = tuple(
            (variant_name, declaration(layout)) for variant_name, layout in ty.variants
        )
        return EnumDef(variants), [layout for _, layout in ty.variants]
    raise TypeError(f"{ty!r} has no schema")


def add_definitions_recursively(
    ty: BorshType, definitions: dict[str, Definition]
) -> None:
    """Add the definitions of ``ty`` and of every type it is built from."""
    if isinstance(ty, _PRIMITIVES):
        return
    definition, children = _describe(ty)
    add_definition(declaration(ty), definition, definitions)
    for child in children:
        add_definitions_recursively(child, definitions)


def schema_container(ty: BorshType) -> BorshSchemaContainer:
    """Return the complete schema of ``ty``."""
    definitions: dict[str, Definition] = {}
    add_definitions_recursively(ty, definitions)
    return BorshSchemaContainer(declaration(ty), definitions)


def schema_container_type() -> Struct:
    """Return the Borsh type that encodes a :class:`BorshSchemaContainer`."""
    return _CONTAINER_TYPE