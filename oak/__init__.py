"""
OAK (Open Agent Knowledge) toolkit.

Validates agent cards, knowledge artifacts and trust assertions against the
protocol schemas, and assembles a static, servable snapshot of an agent's
OAK documents.
"""

from oak.schema import ArrayNode, ObjectNode, SchemaError, SchemaNode, compile_schema
from oak.validator import Violation, validate

__version__ = "0.2.0"

__all__ = [
    "ArrayNode",
    "ObjectNode",
    "SchemaError",
    "SchemaNode",
    "Violation",
    "compile_schema",
    "validate",
]
