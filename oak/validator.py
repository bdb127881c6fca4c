"""
OAK Validator Engine.

Checks a JSON document against a compiled schema node and reports every
violation it finds. The engine is a pure function of its inputs: it performs
no I/O, keeps no state between calls and never raises for problems in the
document itself. Callers treat a non-empty result as a rejection.

Traversal is depth-first in schema declaration order. Within a single
property a type mismatch stops the remaining checks for that value; across
properties nothing short-circuits.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Union

from oak.schema import ArrayNode, ObjectNode, SchemaNode, compile_schema

_BASE_FIELDS = ("types", "enum", "pattern", "pattern_source", "minimum", "maximum", "max_length")


@dataclass(frozen=True)
class Violation:
    """One violated constraint at one location in a document."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "message": self.message}


def validate(schema: Union[SchemaNode, Mapping[str, Any]], data: Any, path: str = "") -> List[Violation]:
    """
    Validate a document against a schema.

    Args:
        schema: A compiled node, or a raw schema mapping which is compiled first
        data: The parsed JSON document
        path: Path prefix for reported locations, usually the document type
            name (``"card"``, ``"knowledge"``, ``"trust"``)

    Returns:
        Violations in discovery order; empty when the document conforms

    Raises:
        SchemaError: Only when ``schema`` is a raw mapping that fails to compile
    """
    node = schema if isinstance(schema, SchemaNode) else compile_schema(schema)
    if not isinstance(node, ObjectNode):
        node = ObjectNode(**{name: getattr(node, name) for name in _BASE_FIELDS})

    violations: List[Violation] = []
    _check_object(node, data, path, violations)
    return violations


def _check_object(node: ObjectNode, data: Any, path: str, out: List[Violation]) -> None:
    # A value without keys, e.g. a list or scalar, is missing every required name.
    for name in node.required:
        if not isinstance(data, dict) or data.get(name) is None:
            out.append(Violation(f"{path}.{name}", "required field missing"))

    if not isinstance(data, dict):
        return

    for name, child in node.properties.items():
        if name not in data:
            continue
        _check_value(child, data[name], f"{path}.{name}", out)


def _check_value(node: SchemaNode, value: Any, path: str, out: List[Violation]) -> None:
    actual = json_kind(value)

    if node.types and not any(_matches_type(declared, value, actual) for declared in node.types):
        out.append(Violation(path, f"expected {'|'.join(node.types)}, got {actual}"))
        return

    if node.enum is not None and not _is_member(value, node.enum):
        choices = ", ".join(format_value(choice) for choice in node.enum)
        out.append(Violation(path, f'must be one of [{choices}], got "{format_value(value)}"'))

    if node.pattern is not None and actual == "string" and not node.pattern.search(value):
        out.append(Violation(path, f"does not match pattern {node.pattern_source}"))

    if actual == "number":
        if node.minimum is not None and value < node.minimum:
            out.append(Violation(path, f"must be >= {format_value(node.minimum)}, got {format_value(value)}"))
        if node.maximum is not None and value > node.maximum:
            out.append(Violation(path, f"must be <= {format_value(node.maximum)}, got {format_value(value)}"))

    if node.max_length and actual == "string" and len(value) > node.max_length:
        out.append(Violation(path, f"exceeds max length {node.max_length}"))

    if isinstance(node, ObjectNode) and actual == "object":
        _check_object(node, value, path, out)
    elif isinstance(node, ArrayNode) and actual == "array":
        _check_array(node, value, path, out)


def _check_array(node: ArrayNode, value: Sequence[Any], path: str, out: List[Violation]) -> None:
    if node.min_items and len(value) < node.min_items:
        out.append(Violation(path, f"needs at least {node.min_items} items, got {len(value)}"))

    items = node.items
    if items is None:
        return

    if isinstance(items, ObjectNode):
        for i, element in enumerate(value):
            _check_object(items, element, f"{path}[{i}]", out)

    if items.pattern is not None:
        for i, element in enumerate(value):
            if isinstance(element, str) and not items.pattern.search(element):
                out.append(Violation(f"{path}[{i}]", f"does not match pattern {items.pattern_source}"))


def json_kind(value: Any) -> str:
    """
    Classify a Python value by its JSON kind.

    ``None`` is ``"null"`` and lists are ``"array"``; ``bool`` is checked
    before numbers because it subclasses ``int`` in Python.
    """
    if value is None:
        return "null"
    if isinstance(value, list):
        return "array"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _matches_type(declared: str, value: Any, actual: str) -> bool:
    if declared == "integer":
        return actual == "number" and (isinstance(value, int) or value.is_integer())
    return declared == actual


def _is_member(value: Any, choices: Sequence[Any]) -> bool:
    # Strict equality: True is not 1, but 1 is 1.0.
    kind = json_kind(value)
    return any(json_kind(choice) == kind and choice == value for choice in choices)


def format_value(value: Any) -> str:
    """Render a JSON value for a violation message."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)
