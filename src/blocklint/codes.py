"""Issue code constants for blocklint results.

These constants prevent stringly-typed issue codes and let client code
filter results without matching on message text.
"""

from enum import Enum


class IssueCode(str, Enum):
    """Validation issue codes."""

    # Value vs. schema
    TYPE_MISMATCH = "TYPE_MISMATCH"
    MISSING_PROPERTY = "MISSING_PROPERTY"
    UNION_MISMATCH = "UNION_MISMATCH"
    SPECIAL_TYPE_MISMATCH = "SPECIAL_TYPE_MISMATCH"

    # Document references
    SECTION_NOT_FOUND = "SECTION_NOT_FOUND"
    SAVED_BLOCK_EXTRA_PROPERTIES = "SAVED_BLOCK_EXTRA_PROPERTIES"
    SAVED_BLOCK_NOT_FOUND = "SAVED_BLOCK_NOT_FOUND"
    CIRCULAR_REFERENCE = "CIRCULAR_REFERENCE"
    DOCUMENT_PARSE_ERROR = "DOCUMENT_PARSE_ERROR"

    # Warnings (non-blocking)
    UNKNOWN_PROPERTY = "UNKNOWN_PROPERTY"
    SCHEMA_NOT_FOUND = "SCHEMA_NOT_FOUND"
    UNUSED_COMPONENT = "UNUSED_COMPONENT"


class Severity(str, Enum):
    """Whether an issue fails a run."""

    ERROR = "error"
    WARNING = "warning"
