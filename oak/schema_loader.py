"""
Schema loading for the OAK document types.

Each OAK document type has one schema file in the schema directory (see
``oak.config.get_schema_dir``). Schemas are parsed and compiled on first use
and cached by ``SchemaRegistry``, which is also the usual entry point for
validating a document by type name.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from oak import config
from oak.errors import SchemaNotFoundError, SchemaParseError, UnknownDocumentTypeError
from oak.schema import SchemaNode, compile_schema
from oak.validator import Violation, validate

logger = logging.getLogger(__name__)

SCHEMA_MAP = {
    "card": "agent-card.schema.json",
    "knowledge": "knowledge-artifact.schema.json",
    "trust": "trust-assertion.schema.json",
}

DOCUMENT_TYPES = tuple(SCHEMA_MAP)


def schema_path(doc_type: str, schema_dir: Optional[Union[str, Path]] = None) -> Path:
    """
    Resolve the schema file for a document type.

    Args:
        doc_type: One of ``DOCUMENT_TYPES``
        schema_dir: Directory to look in; defaults to the configured one

    Returns:
        Path of the schema file (which may not exist)

    Raises:
        UnknownDocumentTypeError: If ``doc_type`` is not a known type
    """
    if doc_type not in SCHEMA_MAP:
        raise UnknownDocumentTypeError(f"Unknown type: {doc_type}. Use: {', '.join(DOCUMENT_TYPES)}")
    base = Path(schema_dir) if schema_dir is not None else config.get_schema_dir()
    return base / SCHEMA_MAP[doc_type]


def read_schema(doc_type: str, schema_dir: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Read and parse the raw schema document for a type.

    Raises:
        UnknownDocumentTypeError: If ``doc_type`` is not a known type
        SchemaNotFoundError: If the schema file does not exist
        SchemaParseError: If the schema file is not valid JSON
    """
    path = schema_path(doc_type, schema_dir)
    if not path.is_file():
        raise SchemaNotFoundError(f"Schema not found: {path}")

    logger.debug(f"Loading {doc_type} schema from {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SchemaParseError(f"JSON parse error in {path}: {e}") from e


def load_schema(doc_type: str, schema_dir: Optional[Union[str, Path]] = None) -> SchemaNode:
    """
    Read and compile the schema for a document type.

    Raises:
        UnknownDocumentTypeError, SchemaNotFoundError, SchemaParseError: See ``read_schema``
        SchemaError: If the schema document is not a valid schema node tree
    """
    return compile_schema(read_schema(doc_type, schema_dir))


class SchemaRegistry:
    """Caches compiled schemas per (schema directory, document type)."""

    def __init__(self):
        self._cache: Dict[Tuple[Path, str], SchemaNode] = {}

    def get(self, doc_type: str, schema_dir: Optional[Union[str, Path]] = None) -> SchemaNode:
        path = schema_path(doc_type, schema_dir)
        key = (path.parent.resolve(), doc_type)
        if key not in self._cache:
            self._cache[key] = load_schema(doc_type, path.parent)
            logger.info(f"Loaded {doc_type} schema from {path}")
        return self._cache[key]

    def validate(self, doc_type: str, data: Any, schema_dir: Optional[Union[str, Path]] = None) -> List[Violation]:
        """
        Validate a document against the schema for its type.

        Violation paths are prefixed with the type name, e.g. ``card.name``.
        """
        return validate(self.get(doc_type, schema_dir), data, doc_type)

    def clear(self):
        self._cache.clear()


_default_registry: Optional[SchemaRegistry] = None


def get_registry() -> SchemaRegistry:
    """Get the process-wide registry instance."""
    global _default_registry
    if _default_registry is None:
        _default_registry = SchemaRegistry()
    return _default_registry


def validate_document(doc_type: str, data: Any, schema_dir: Optional[Union[str, Path]] = None) -> List[Violation]:
    """Module-level convenience wrapper around ``get_registry().validate``."""
    return get_registry().validate(doc_type, data, schema_dir)
