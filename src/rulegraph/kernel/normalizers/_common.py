"""Helpers shared by the format normalizers.

Normalizers build plain dicts while walking a document and freeze them into
a CanonicalGraph only at the end. Parameters are immutable models, so a
source flip replaces the entry with a copy instead of mutating it.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from loguru import logger

from rulegraph.contracts import FormatType, NormalizationError, Result, err, ok
from rulegraph.kernel import errors as E
from rulegraph.kernel.canonical import PARAMETER_TYPES, CanonicalGraph, Parameter, Rule
from rulegraph.kernel.ids import is_valid_id, normalize_id


def unique(items: Iterable[str]) -> Tuple[str, ...]:
    """De-duplicate keeping first occurrence."""
    return tuple(dict.fromkeys(items))


def has_valid_type(definition: Any) -> bool:
    return isinstance(definition, Mapping) and definition.get("type") in PARAMETER_TYPES


def string_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""


def collect_parameters(
    raw: Mapping[str, Any],
    fmt: FormatType,
    errors: List[NormalizationError],
) -> Dict[str, Parameter]:
    """Build the parameter registry of an explicit-registry format (A, B, D).

    Every parameter starts as ``input``; callers flip writers to ``derived``.
    When two raw names normalize to the same id the first one wins.
    """
    parameters: Dict[str, Parameter] = {}
    for raw_id, definition in raw.items():
        if not is_valid_id(raw_id):
            errors.append(E.empty_parameter_name(format=fmt, parameter=raw_id))
            continue
        pid = normalize_id(raw_id)
        if not has_valid_type(definition):
            errors.append(E.missing_type(pid, format=fmt))
            continue
        existing = parameters.get(pid)
        if existing is not None:
            if existing.type != definition["type"]:
                errors.append(E.conflicting_type(pid, existing.type, definition["type"], format=fmt))
            continue
        description = definition.get("description")
        parameters[pid] = Parameter(
            id=pid,
            type=definition["type"],
            description=description if isinstance(description, str) else None,
        )
    return parameters


def mark_derived(parameters: Dict[str, Parameter], pid: str) -> None:
    """Replace ``parameters[pid]`` with a derived copy."""
    current = parameters[pid]
    if current.source != "derived":
        parameters[pid] = current.model_copy(update={"source": "derived"})


def id_list(
    value: Any,
    field: str,
    fmt: FormatType,
    rule_id: str,
    errors: List[NormalizationError],
) -> List[str]:
    """Raw identifier list of a rule field; malformed values are reported and dropped."""
    if value is None:
        return []
    if not isinstance(value, list):
        errors.append(E.schema_mismatch(f'Rule "{rule_id}": "{field}" must be an array', format=fmt, rule_id=rule_id))
        return []
    names: List[str] = []
    for item in value:
        if isinstance(item, str):
            names.append(item)
        else:
            errors.append(E.schema_mismatch(
                f'Rule "{rule_id}": "{field}" entries must be strings, got {type(item).__name__}',
                format=fmt,
                rule_id=rule_id,
            ))
    return names


def logic_text(value: Any, fmt: FormatType, rule_id: str, errors: List[NormalizationError]) -> Optional[str]:
    """Rule logic as text; ``None`` (and a reported error) when it is not a string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    errors.append(E.schema_mismatch(f'Rule "{rule_id}": "logic" must be a string', format=fmt, rule_id=rule_id))
    return None


def entry_mapping(entry: Any, what: str, fmt: FormatType, errors: List[NormalizationError]) -> Optional[Mapping[str, Any]]:
    if isinstance(entry, Mapping):
        return entry
    errors.append(E.schema_mismatch(f"{what} must be an object, got {type(entry).__name__}", format=fmt))
    return None


def finish(
    parameters: Dict[str, Parameter],
    rules: Dict[str, Rule],
    errors: List[NormalizationError],
    fmt: FormatType,
) -> Result:
    """Freeze the drafts into a graph, or fail with everything collected."""
    if errors:
        logger.debug(f"Format {fmt} normalization failed with {len(errors)} error(s)")
        return err(errors)
    logger.debug(f"Format {fmt} normalized: {len(parameters)} parameters, {len(rules)} rules")
    return ok(CanonicalGraph(parameters=parameters, rules=rules))
