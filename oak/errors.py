"""
Exception hierarchy for the OAK toolkit.

The validator engine never raises for data-shape problems; these exceptions
cover the surrounding hard failures: unknown document types, missing files
and unparseable JSON.
"""


class OakError(Exception):
    """Base class for all toolkit failures."""


class UnknownDocumentTypeError(OakError, ValueError):
    """Raised when a document type is not one of the known OAK types."""


class DocumentNotFoundError(OakError):
    """Raised when a candidate document cannot be found or fetched."""


class DocumentParseError(OakError):
    """Raised when a candidate document is not valid JSON."""


class SchemaNotFoundError(OakError):
    """Raised when the schema file for a document type is missing."""


class SchemaParseError(OakError):
    """Raised when a schema file is not valid JSON."""
