"""Format C normalizer: atomic rule blocks.

There is no parameter registry. Parameters are discovered from the typed
input/output declarations of each block; the first declaration fixes the
type and a parameter becomes derived as soon as any block outputs it.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from rulegraph.contracts import NormalizationError, Result, err
from rulegraph.kernel import errors as E
from rulegraph.kernel.canonical import Parameter, Rule
from rulegraph.kernel.formats import FormatCDocument
from rulegraph.kernel.ids import is_valid_id, normalize_id
from rulegraph.kernel.normalizers._common import (
    entry_mapping,
    finish,
    has_valid_type,
    logic_text,
    mark_derived,
    string_or_empty,
    unique,
)


def _declared_parameter(
    declaration: Any,
    field: str,
    rule_id: str,
    parameters: Dict[str, Parameter],
    errors: List[NormalizationError],
) -> Optional[str]:
    """Register one typed declaration; returns its id, or None when rejected."""
    if not isinstance(declaration, dict):
        errors.append(E.schema_mismatch(
            f'Rule "{rule_id}": "{field}" entries must be objects', format="C", rule_id=rule_id
        ))
        return None
    name = string_or_empty(declaration.get("name"))
    if not is_valid_id(name):
        errors.append(E.empty_parameter_name(format="C", rule_id=rule_id))
        return None
    pid = normalize_id(name)
    if not has_valid_type(declaration):
        errors.append(E.missing_type(pid, format="C", rule_id=rule_id))
        return None
    declared_type = declaration["type"]
    existing = parameters.get(pid)
    if existing is not None:
        if existing.type != declared_type:
            errors.append(E.conflicting_type(pid, existing.type, declared_type, format="C", rule_id=rule_id))
            return None
    else:
        parameters[pid] = Parameter(id=pid, type=declared_type)
    return pid


def _declarations(block: Dict[str, Any], field: str, rule_id: str, errors: List[NormalizationError]) -> List[Any]:
    value = block.get(field)
    if value is None:
        return []
    if not isinstance(value, list):
        errors.append(E.schema_mismatch(f'Rule "{rule_id}": "{field}" must be an array', format="C", rule_id=rule_id))
        return []
    return value


def normalize_format_c(document: Any) -> Result:
    """Normalize a parsed Format C document into a canonical graph."""
    try:
        doc = FormatCDocument.model_validate(document)
    except ValidationError:
        return err([E.schema_mismatch("Format C must be an array of rule blocks", format="C")])

    errors: List[NormalizationError] = []
    parameters: Dict[str, Parameter] = {}
    rules: Dict[str, Rule] = {}
    writers: Dict[str, str] = {}

    for entry in doc.root:
        block = entry_mapping(entry, "Rule block", "C", errors)
        if block is None:
            continue
        rule_id = normalize_id(string_or_empty(block.get("rule_id")))
        if not rule_id:
            errors.append(E.validation_error("Rule block must have a rule_id", format="C"))
            continue
        if rule_id in rules:
            errors.append(E.validation_error(f'Duplicate rule id "{rule_id}"', format="C", rule_id=rule_id))
            continue

        inputs: List[str] = []
        for declaration in _declarations(block, "input_parameters", rule_id, errors):
            pid = _declared_parameter(declaration, "input_parameters", rule_id, parameters, errors)
            if pid is not None:
                inputs.append(pid)

        outputs: List[str] = []
        for declaration in _declarations(block, "output_parameters", rule_id, errors):
            pid = _declared_parameter(declaration, "output_parameters", rule_id, parameters, errors)
            if pid is None:
                continue
            existing = writers.get(pid)
            if existing is not None:
                if existing != rule_id:
                    errors.append(E.duplicate_output(pid, rule_id, existing, format="C"))
                continue
            writers[pid] = rule_id
            mark_derived(parameters, pid)
            outputs.append(pid)

        logic = logic_text(block.get("logic"), "C", rule_id, errors)
        if not outputs:
            errors.append(E.rule_no_outputs(rule_id, format="C"))
            continue
        if logic is None:
            continue

        rules[rule_id] = Rule(id=rule_id, inputs=unique(inputs), outputs=unique(outputs), logic=logic)

    return finish(parameters, rules, errors, "C")
