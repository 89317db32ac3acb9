"""Borsh binary serialization with self-describing schemas."""

__version__ = "0.1.0"
__all__ = ["errors", "primitives", "containers", "schema", "schema_helpers"]