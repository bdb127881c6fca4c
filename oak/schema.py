"""
Schema node model for the OAK validator.

Protocol schema files are JSON documents written in a small subset of JSON
Schema. They are compiled once into a tree of typed nodes so that the engine
can dispatch on the node variant instead of probing dictionary keys:

- ``SchemaNode``: constraints on a single value (type, enum, pattern, bounds)
- ``ObjectNode``: adds ``required`` and ordered ``properties``
- ``ArrayNode``: adds ``minItems`` and the ``items`` element schema

Only the keywords listed in ``SUPPORTED_KEYWORDS`` are interpreted; everything
else in a schema file ($schema, title, description, format, ...) is ignored.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Pattern, Tuple

from oak.errors import OakError

JSON_TYPES = ("string", "number", "integer", "boolean", "object", "array", "null")

SUPPORTED_KEYWORDS = (
    "type",
    "required",
    "properties",
    "enum",
    "pattern",
    "minimum",
    "maximum",
    "maxLength",
    "minItems",
    "items",
)


class SchemaError(OakError, ValueError):
    """Raised when a schema document cannot be compiled into nodes."""


@dataclass(frozen=True)
class SchemaNode:
    """Constraints for one JSON value position."""

    types: Tuple[str, ...] = ()
    enum: Optional[Tuple[Any, ...]] = None
    pattern: Optional[Pattern[str]] = None
    pattern_source: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    max_length: Optional[int] = None


@dataclass(frozen=True)
class ObjectNode(SchemaNode):
    """Object constraints: required names and per-property schemas."""

    required: Tuple[str, ...] = ()
    properties: Mapping[str, SchemaNode] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class ArrayNode(SchemaNode):
    """Array constraints: minimum length and the element schema."""

    min_items: Optional[int] = None
    items: Optional[SchemaNode] = None


def compile_schema(raw: Any, root: bool = True, location: str = "#") -> SchemaNode:
    """
    Compile a parsed schema document into a typed node tree.

    The root node is always compiled as an ``ObjectNode`` because OAK
    documents are objects. Nested nodes become ``ObjectNode`` or ``ArrayNode``
    only when their ``type`` is exactly ``"object"`` or ``"array"``; a type
    list such as ``["object", "null"]`` is checked but never recursed into.

    Args:
        raw: Schema mapping as loaded from JSON
        root: Whether this is the document root
        location: JSON-pointer-like location used in error messages

    Returns:
        The compiled node

    Raises:
        SchemaError: If the node is malformed (bad type names, bad keyword
            values or a pattern that is not a valid regular expression)
    """
    if not isinstance(raw, Mapping):
        raise SchemaError(f"{location}: schema node must be an object, got {type(raw).__name__}")

    declared = raw.get("type")
    common = {
        "types": _compile_types(declared, location),
        "enum": _compile_enum(raw.get("enum"), location),
        "pattern": _compile_pattern(raw.get("pattern"), location),
        "pattern_source": raw.get("pattern"),
        "minimum": _compile_number(raw, "minimum", location),
        "maximum": _compile_number(raw, "maximum", location),
        "max_length": _compile_count(raw, "maxLength", location),
    }

    if root or declared == "object":
        properties = raw.get("properties")
        if properties is None:
            properties = {}
        elif not isinstance(properties, Mapping):
            raise SchemaError(f"{location}/properties: must be an object")
        compiled = {
            name: compile_schema(child, root=False, location=f"{location}/properties/{name}")
            for name, child in properties.items()
        }
        return ObjectNode(
            required=_compile_required(raw.get("required"), location),
            properties=MappingProxyType(compiled),
            **common,
        )

    if declared == "array":
        items = raw.get("items")
        return ArrayNode(
            min_items=_compile_count(raw, "minItems", location),
            items=None if items is None else compile_schema(items, root=False, location=f"{location}/items"),
            **common,
        )

    return SchemaNode(**common)


def _compile_types(declared: Any, location: str) -> Tuple[str, ...]:
    if declared is None:
        return ()
    names = [declared] if isinstance(declared, str) else declared
    if not isinstance(names, list) or not names:
        raise SchemaError(f"{location}/type: must be a type name or a non-empty list of type names")
    for name in names:
        if name not in JSON_TYPES:
            raise SchemaError(f"{location}/type: unknown type {name!r}")
    return tuple(names)


def _compile_required(required: Any, location: str) -> Tuple[str, ...]:
    if required is None:
        return ()
    if not isinstance(required, list) or not all(isinstance(name, str) for name in required):
        raise SchemaError(f"{location}/required: must be a list of property names")
    return tuple(required)


def _compile_enum(values: Any, location: str) -> Optional[Tuple[Any, ...]]:
    if values is None:
        return None
    if not isinstance(values, list):
        raise SchemaError(f"{location}/enum: must be a list")
    return tuple(values)


def _compile_pattern(pattern: Any, location: str) -> Optional[Pattern[str]]:
    if pattern is None:
        return None
    if not isinstance(pattern, str):
        raise SchemaError(f"{location}/pattern: must be a string")
    try:
        return re.compile(_anchor_end(pattern), re.ASCII)
    except re.error as e:
        raise SchemaError(f"{location}/pattern: invalid regular expression {pattern!r}: {e}") from e


def _anchor_end(pattern: str) -> str:
    """
    Rewrite ``$`` outside character classes to ``\\Z``.

    In Python ``$`` also matches just before a trailing newline; schema
    patterns expect it to match only at the very end of the string, as in
    JSON Schema's ECMA-262 regular expressions.
    """
    out = []
    in_class = False
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\":
            out.append(pattern[i : i + 2])
            i += 2
            continue
        if in_class:
            in_class = ch != "]"
        elif ch == "[":
            in_class = True
        elif ch == "$":
            ch = r"\Z"
        out.append(ch)
        i += 1
    return "".join(out)


def _compile_number(raw: Mapping[str, Any], keyword: str, location: str) -> Optional[float]:
    value = raw.get(keyword)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaError(f"{location}/{keyword}: must be a number")
    return value


def _compile_count(raw: Mapping[str, Any], keyword: str, location: str) -> Optional[int]:
    value = raw.get(keyword)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SchemaError(f"{location}/{keyword}: must be a non-negative integer")
    return value
