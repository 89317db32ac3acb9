"""Encoding values together with the schema of their type."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from borshpy.containers import Tuple
from borshpy.errors import BorshError, ErrorKind
from borshpy.primitives import BorshType
from borshpy.schema import schema_container, schema_container_type

__all__ = ["try_to_vec_with_schema", "try_from_slice_with_schema", "main"]


def try_to_vec_with_schema(ty: BorshType, value: Any) -> bytes:
    """Encode ``value`` prefixed with the encoded schema of ``ty``."""
    schema = schema_container_type().to_bytes(schema_container(ty))
    return schema + ty.to_bytes(value)


def try_from_slice_with_schema(ty: BorshType, data: bytes | bytearray | memoryview) -> Any:
    """Decode a value written by :func:`try_to_vec_with_schema`, checking its schema."""
    schema, value = Tuple(schema_container_type(), ty).from_bytes(data)
    if schema_container(ty) != schema:
        raise BorshError(ErrorKind.INVALID_DATA, "Borsh schema does not match")
    return value


def main(argv: list[str] | None = None) -> int:
    """Print the schema of the schema container type and write its encoding to a file."""
    parser = argparse.ArgumentParser(
        description="Write the Borsh schema that describes Borsh schemas."
    )
    parser.add_argument(
        "output",
        nargs="?",
        default="schema_schema.dat",
        help="file to write (default: schema_schema.dat)",
    )
    args = parser.parse_args(argv)
    container_type = schema_container_type()
    container = schema_container(container_type)
    print(repr(container))
    data = container_type.to_bytes(container)
    try:
        Path(args.output).write_bytes(data)
    except OSError as exc:
        print(f"Failed to write file: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())