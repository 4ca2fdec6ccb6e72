"""Error code constants for rulegraph normalization, validation and diff.

These constants prevent stringly-typed error codes and ensure
client code matches on the correct error types.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Flat taxonomy of normalization and validation errors."""

    # Document level (terminating)
    INVALID_JSON = "INVALID_JSON"
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"
    UNKNOWN_FORMAT = "UNKNOWN_FORMAT"

    # Parameter registry
    MISSING_TYPE = "MISSING_TYPE"
    CONFLICTING_TYPE = "CONFLICTING_TYPE"
    EMPTY_PARAMETER_NAME = "EMPTY_PARAMETER_NAME"

    # Rule structure
    UNDECLARED_PARAMETER = "UNDECLARED_PARAMETER"
    RULE_NO_OUTPUTS = "RULE_NO_OUTPUTS"
    DUPLICATE_OUTPUT = "DUPLICATE_OUTPUT"

    # Graph level
    CYCLE_DETECTED = "CYCLE_DETECTED"
    BIPARTITE_VIOLATION = "BIPARTITE_VIOLATION"

    # Everything else (missing rule ids, diff usage errors, ...)
    VALIDATION_ERROR = "VALIDATION_ERROR"
