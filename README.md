# borshpy

Borsh binary serialization for Python. Borsh is a compact, deterministic
binary format: the same value always encodes to the same bytes. Because the
format does not describe itself, borshpy can also produce a schema for a type
and store it alongside the data.

The package has no dependencies beyond the standard library.

## Installing

```
pip install .
```

## Describing types

A type is described by an object from `borshpy.primitives` or
`borshpy.containers`. Ready-made instances of the scalar types are provided
(`U8` … `U128`, `I8` … `I128`, `F32`, `F64`, `BOOL`, `STRING`, `UNIT`,
`IPV4_ADDR`, `IPV6_ADDR`, `SOCKET_ADDR_V4`, `SOCKET_ADDR_V6`,
`SOCKET_ADDR`), and the classes can be instantiated directly, for example
`Integer("u64", 8, False)` or `Float("f32", 4)`.

```python
from borshpy.primitives import U64, STRING
from borshpy.containers import Vec, Option, Struct

user = Struct("User", [("id", U64), ("name", STRING), ("tags", Vec(STRING))])
data = user.to_bytes({"id": 7, "name": "alice", "tags": ["admin"]})
value = user.from_bytes(data)   # {'id': 7, 'name': 'alice', 'tags': ['admin']}
```

Every type offers:

- `to_bytes(value)` – the encoding of `value`;
- `from_bytes(data)` – decode a value that must use up all of `data`;
- `serialize(value, out)` – write to a binary stream;
- `deserialize(reader)` – read from a `Reader`, which consumes bytes from
  the front (`read(n)`, `read_byte()`, `remaining()`).

### Building blocks

| Type | Python value |
| --- | --- |
| `Integer`, `Float` | `int`, `float` (NaN is refused both ways) |
| `Bool`, `String`, `Unit` | `bool`, `str`, `None` |
| `Ipv4Addr`, `Ipv6Addr` | `ipaddress` addresses |
| `SocketAddrV4`, `SocketAddrV6`, `SocketAddr` | `(address, port)` tuples |
| `Vec(element)` | list; `bytes` when the element is `u8` |
| `Array(element, length)` | list of exactly `length` items; `bytes` for `u8` |
| `Option(inner)` | the value or `None` |
| `Result(ok, err)` | `Ok(value)` or `Err(value)` |
| `Tuple(*elements)` | tuple |
| `HashMap(key, value)`, `BTreeMap(key, value)` | dict |
| `HashSet(element)`, `BTreeSet(element)` | set |
| `Struct(name, fields, params, factory)` | dict, tuple, `()` or `factory(...)` |
| `Enum(name, variants, params)` | `EnumValue(variant, value)` |

Maps and sets are written in ascending key order, so their encoding is
deterministic; `BTreeMap` decodes to a dict whose keys are in ascending
order.

`Struct` fields are given as `(name, type)` pairs or a mapping (named
fields), a sequence of types (unnamed fields), or nothing. A `factory`, such
as a dataclass, is called with the decoded fields. `Enum` variants are given
as bare names, `(name, fields)` pairs, or a mapping; the variant index is a
single byte.

```python
from borshpy.containers import Enum, EnumValue
from borshpy.primitives import U64

shape = Enum("Shape", ["Empty", ("Square", [U64]), ("Rect", [("w", U64), ("h", U64)])])
shape.to_bytes(EnumValue("Square", (3,)))
shape.from_bytes(b"\x00")   # EnumValue(variant='Empty', value=())
```

`primitives.cautious(hint, element_size)` returns a bounded initial capacity
for `hint` elements of the given size.

## Errors

Malformed input and out-of-range values raise `borshpy.errors.BorshError`, a
`ValueError` subclass carrying an `ErrorKind` and a message such as
`Unexpected length of input`, `Not all bytes read`,
`Invalid bool representation: 2` or `Unexpected variant index: 123`. A value
of the wrong Python type raises `TypeError`.

## Schemas

`borshpy.schema` gives the declaration of a type and the definitions needed
to decode it:

```python
from borshpy.containers import Option
from borshpy.primitives import U64
from borshpy.schema import declaration, add_definitions_recursively, schema_container

declaration(Option(U64))          # "Option<u64>"
definitions = {}
add_definitions_recursively(Option(U64), definitions)
# {"Option<u64>": EnumDef(variants=(("None", "nil"), ("Some", "u64")))}
container = schema_container(user)
```

Definitions are `ArrayDef`, `SequenceDef`, `TupleDef`, `EnumDef` and
`StructDef`, the last holding `NamedFields`, `UnnamedFields` or
`EmptyFields`. `add_definition` raises `ValueError` when a name is defined
twice in different ways. Schemas cover integers, floats, `Bool`, `String`,
`Unit`, `Array`, `Vec`, `Option`, `Result`, `HashMap`, `Tuple`, `Struct` and
`Enum`; other types raise `TypeError`.

A `BorshSchemaContainer` is itself Borsh data; `schema_container_type()`
returns the type that encodes it.

`borshpy.schema_helpers.try_to_vec_with_schema(ty, value)` prefixes the
encoded value with the schema of `ty`, and
`try_from_slice_with_schema(ty, data)` decodes it, raising `BorshError`
(`Borsh schema does not match`) if the stored schema differs.

## Command

```
borshpy-schema-schema [OUTPUT]
```

prints the schema container that describes schema containers themselves and
writes its Borsh encoding to `OUTPUT` (default `schema_schema.dat` in the
current directory).

## What it does not do

Types are never inferred from Python classes: every layout is described
explicitly with the objects above.

## Tests

```
pip install .[test]
pytest
```