"""Factories for the structured errors emitted by the kernel."""

from typing import List, Optional

from rulegraph.codes import ErrorType
from rulegraph.contracts import ErrorLocation, FormatType, NormalizationError


def _location(
    format: Optional[FormatType] = None,
    rule_id: Optional[str] = None,
    parameter: Optional[str] = None,
    line: Optional[int] = None,
    column: Optional[int] = None,
) -> ErrorLocation:
    return ErrorLocation(format=format, rule_id=rule_id, parameter=parameter, line=line, column=column)


def invalid_json(message: str, format: Optional[FormatType] = None,
                 line: Optional[int] = None, column: Optional[int] = None) -> NormalizationError:
    return NormalizationError(
        error_type=ErrorType.INVALID_JSON,
        message=message,
        location=_location(format=format, line=line, column=column),
    )


def schema_mismatch(message: str, format: Optional[FormatType] = None,
                    rule_id: Optional[str] = None, parameter: Optional[str] = None) -> NormalizationError:
    return NormalizationError(
        error_type=ErrorType.SCHEMA_MISMATCH,
        message=message,
        location=_location(format=format, rule_id=rule_id, parameter=parameter),
    )


def unknown_format(message: str) -> NormalizationError:
    return NormalizationError(error_type=ErrorType.UNKNOWN_FORMAT, message=message)


def missing_type(parameter: str, format: Optional[FormatType] = None,
                 rule_id: Optional[str] = None) -> NormalizationError:
    return NormalizationError(
        error_type=ErrorType.MISSING_TYPE,
        message=f"Missing type declaration for parameter: {parameter}",
        location=_location(format=format, rule_id=rule_id, parameter=parameter),
    )


def conflicting_type(parameter: str, expected: str, actual: str,
                     format: Optional[FormatType] = None, rule_id: Optional[str] = None) -> NormalizationError:
    return NormalizationError(
        error_type=ErrorType.CONFLICTING_TYPE,
        message=f'Conflicting type for parameter "{parameter}": expected {expected}, got {actual}',
        location=_location(format=format, rule_id=rule_id, parameter=parameter),
    )


def empty_parameter_name(format: Optional[FormatType] = None, rule_id: Optional[str] = None,
                         parameter: Optional[str] = None) -> NormalizationError:
    return NormalizationError(
        error_type=ErrorType.EMPTY_PARAMETER_NAME,
        message="Parameter name cannot be empty",
        location=_location(format=format, rule_id=rule_id, parameter=parameter),
    )


def undeclared_parameter(parameter: str, rule_id: str,
                         format: Optional[FormatType] = None) -> NormalizationError:
    return NormalizationError(
        error_type=ErrorType.UNDECLARED_PARAMETER,
        message=f'Rule "{rule_id}" references undeclared parameter: {parameter}',
        location=_location(format=format, rule_id=rule_id, parameter=parameter),
    )


def rule_no_outputs(rule_id: str, format: Optional[FormatType] = None) -> NormalizationError:
    return NormalizationError(
        error_type=ErrorType.RULE_NO_OUTPUTS,
        message=f'Rule "{rule_id}" has no outputs',
        location=_location(format=format, rule_id=rule_id),
    )


def duplicate_output(parameter: str, rule_id: str, existing_rule_id: str,
                     format: Optional[FormatType] = None) -> NormalizationError:
    return NormalizationError(
        error_type=ErrorType.DUPLICATE_OUTPUT,
        message=(
            f'Parameter "{parameter}" is written by multiple rules: '
            f'"{existing_rule_id}" and "{rule_id}"'
        ),
        location=_location(format=format, rule_id=rule_id, parameter=parameter),
    )


def cycle_detected(cycle: List[str]) -> NormalizationError:
    return NormalizationError(
        error_type=ErrorType.CYCLE_DETECTED,
        message=f"Cycle detected in graph: {' -> '.join(cycle)}",
        cycle_path=list(cycle),
    )


def bipartite_violation(message: str, rule_id: Optional[str] = None,
                        parameter: Optional[str] = None) -> NormalizationError:
    return NormalizationError(
        error_type=ErrorType.BIPARTITE_VIOLATION,
        message=message,
        location=_location(rule_id=rule_id, parameter=parameter),
    )


def validation_error(message: str, format: Optional[FormatType] = None,
                     rule_id: Optional[str] = None, parameter: Optional[str] = None) -> NormalizationError:
    return NormalizationError(
        error_type=ErrorType.VALIDATION_ERROR,
        message=message,
        location=_location(format=format, rule_id=rule_id, parameter=parameter),
    )
